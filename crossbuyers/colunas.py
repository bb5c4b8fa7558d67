"""
colunas.py - Mapeamento de cabecalhos de planilha para campos esperados.

Cada tipo de planilha (marca, revendedores ativos, Geral, ranking) e
descrito por um EsquemaColunas: campos, variantes aceitas e subconjunto
obrigatorio. O mesmo algoritmo resolve todos os esquemas.

Estrategia de match, por campo, na ordem declarada do esquema:
1. Match exato com uma variante
2. Cabecalho contem a variante (ou vice-versa)
3. Similaridade (Levenshtein) >= LIMIAR_SIMILARIDADE
Cabecalhos ja usados por um campo anterior nao sao reaproveitados.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import (
    COLUNAS_MARCA,
    COLUNAS_MARCA_OBRIGATORIAS,
    COLUNAS_FATURAMENTO,
    COLUNAS_ATIVOS,
    COLUNAS_ATIVOS_OBRIGATORIAS,
    COLUNAS_GERAL,
    COLUNAS_GERAL_OBRIGATORIAS,
    COLUNAS_RANKING,
    COLUNAS_RANKING_OBRIGATORIAS,
    COLUNAS_NOMES_EXIBICAO,
    LIMIAR_SIMILARIDADE,
)
from .normalizacao import normalizar_cabecalho, razao_similaridade


@dataclass(frozen=True)
class EsquemaColunas:
    """
    Configuracao de colunas esperadas para um tipo de planilha.

    Attributes:
        nome: Nome da planilha para mensagens (ex: "revendedores ativos")
        campos: Pares (campo, variantes normalizadas) na ordem de resolucao
        obrigatorios: Campos cuja ausencia invalida o arquivo
        silenciosos: Campos opcionais que nao geram aviso quando ausentes
    """

    nome: str
    campos: Tuple[Tuple[str, Tuple[str, ...]], ...]
    obrigatorios: Tuple[str, ...]
    silenciosos: Tuple[str, ...] = ()

    @classmethod
    def criar(
        cls,
        nome: str,
        campos: Dict[str, List[str]],
        obrigatorios: Sequence[str],
        silenciosos: Sequence[str] = (),
    ) -> "EsquemaColunas":
        return cls(
            nome=nome,
            campos=tuple((campo, tuple(variantes)) for campo, variantes in campos.items()),
            obrigatorios=tuple(obrigatorios),
            silenciosos=tuple(silenciosos),
        )

    @property
    def nomes_campos(self) -> List[str]:
        return [campo for campo, _ in self.campos]

    @property
    def opcionais(self) -> List[str]:
        return [c for c in self.nomes_campos if c not in self.obrigatorios]


@dataclass
class MapeamentoColunas:
    """Resultado do mapeamento de uma planilha."""

    colunas: Dict[str, Optional[str]]
    faltando_obrigatorias: List[str] = field(default_factory=list)
    faltando_opcionais: List[str] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)

    @property
    def valido(self) -> bool:
        return not self.faltando_obrigatorias

    def coluna(self, campo: str) -> Optional[str]:
        return self.colunas.get(campo)

    def detectados(self, campos: Sequence[str]) -> List[str]:
        """Campos da lista que foram encontrados, na ordem dada."""
        return [c for c in campos if self.colunas.get(c)]


ESQUEMA_MARCA = EsquemaColunas.criar(
    "planilha de marca", COLUNAS_MARCA, COLUNAS_MARCA_OBRIGATORIAS, COLUNAS_FATURAMENTO
)
ESQUEMA_ATIVOS = EsquemaColunas.criar(
    "revendedores ativos", COLUNAS_ATIVOS, COLUNAS_ATIVOS_OBRIGATORIAS
)
ESQUEMA_GERAL = EsquemaColunas.criar(
    "planilha Geral", COLUNAS_GERAL, COLUNAS_GERAL_OBRIGATORIAS
)
ESQUEMA_RANKING = EsquemaColunas.criar(
    "ranking", COLUNAS_RANKING, COLUNAS_RANKING_OBRIGATORIAS
)


def nome_exibicao(campo: str) -> str:
    """Nome amigavel de um campo para mensagens ao usuario."""
    return COLUNAS_NOMES_EXIBICAO.get(campo, campo)


def encontrar_melhor_coluna(
    cabecalhos: List[Tuple[str, str]],
    variantes: Sequence[str],
    usados: set,
    limiar: float = LIMIAR_SIMILARIDADE,
) -> Optional[str]:
    """
    Encontra o cabecalho que melhor corresponde a um campo.

    Args:
        cabecalhos: Pares (original, normalizado) na ordem da planilha
        variantes: Variantes aceitas para o campo, em ordem de prioridade
        usados: Cabecalhos originais ja atribuidos a outros campos
        limiar: Similaridade minima para o match aproximado

    Returns:
        Cabecalho original encontrado ou None
    """
    candidatos = [(o, n) for o, n in cabecalhos if o not in usados and n]

    # 1. Match exato
    for variante in variantes:
        for original, normalizado in candidatos:
            if normalizado == variante:
                return original

    # 2. Um contem o outro
    for variante in variantes:
        for original, normalizado in candidatos:
            if variante in normalizado or normalizado in variante:
                return original

    # 3. Similaridade
    for variante in variantes:
        for original, normalizado in candidatos:
            if razao_similaridade(normalizado, variante) >= limiar:
                return original

    return None


def mapear_colunas(cabecalhos: Sequence[str], esquema: EsquemaColunas) -> MapeamentoColunas:
    """
    Resolve cada campo do esquema para um cabecalho fisico da planilha.

    O resultado e deterministico: campos, variantes e cabecalhos sao
    percorridos sempre na ordem declarada.

    Args:
        cabecalhos: Cabecalhos brutos da primeira aba
        esquema: Configuracao do tipo de planilha

    Returns:
        MapeamentoColunas com colunas resolvidas e campos faltantes
    """
    pares = [(str(c), normalizar_cabecalho(c)) for c in cabecalhos]
    usados = set()
    colunas: Dict[str, Optional[str]] = {}

    for campo, variantes in esquema.campos:
        encontrado = encontrar_melhor_coluna(pares, variantes, usados)
        colunas[campo] = encontrado
        if encontrado is not None:
            usados.add(encontrado)

    resultado = MapeamentoColunas(colunas=colunas)
    resultado.faltando_obrigatorias = [c for c in esquema.obrigatorios if not colunas.get(c)]
    resultado.faltando_opcionais = [c for c in esquema.opcionais if not colunas.get(c)]

    avisar = [c for c in resultado.faltando_opcionais if c not in esquema.silenciosos]
    if avisar:
        resultado.avisos.append(
            "Colunas opcionais não encontradas: " + ", ".join(nome_exibicao(c) for c in avisar)
        )

    return resultado
