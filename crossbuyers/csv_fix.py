"""
csv_fix.py - Correcao de CSV quebrado.

Exportacoes de algumas plataformas quebram um registro em varias linhas
(a continuacao comeca com o separador) ou trazem o separador dentro de
nomes de produto/revendedora. Este modulo reconstroi os registros e ajusta
o numero de colunas ao cabecalho, sem descartar linhas.
"""

import csv
from io import StringIO
from typing import Any, Dict, List, Optional, Tuple

from .normalizacao import normalizar_cabecalho

ENCODINGS = ["utf-8-sig", "utf-8", "latin-1", "cp1252", "iso-8859-1", "windows-1252"]
SEPARADORES = ["|", ";", ",", "\t"]

# Colunas de texto livre que absorvem colunas excedentes, por prioridade
COLUNAS_TEXTO = [
    "nomeproduto",
    "nome produto",
    "nomerevendedora",
    "nome revendedora",
    "nome",
    "descricao",
]


def detectar_encoding(raw: bytes) -> str:
    """Primeiro encoding da lista que decodifica o conteudo sem erro."""
    for enc in ENCODINGS:
        try:
            raw.decode(enc)
            return enc
        except UnicodeDecodeError:
            continue
    return "utf-8"


def detectar_separador(primeira_linha: str) -> str:
    """Separador mais frequente no cabecalho (virgula se nenhum aparecer)."""
    contagem = {s: primeira_linha.count(s) for s in SEPARADORES}
    separador = max(contagem, key=contagem.get)
    return separador if contagem[separador] > 0 else ","


def _dividir(linha: str, separador: str) -> List[str]:
    # Divisao simples, sem respeitar aspas (o CSV ja esta quebrado)
    return linha.rstrip("\n").rstrip("\r").split(separador)


def encontrar_coluna_texto(cabecalho: List[str], coluna: Optional[str] = None) -> int:
    """
    Indice da coluna que absorve o excesso de colunas de uma linha.

    Args:
        cabecalho: Nomes das colunas
        coluna: Nome preferido (opcional)

    Returns:
        Indice encontrado ou 0 (primeira coluna)
    """
    normalizados = [normalizar_cabecalho(c) for c in cabecalho]
    candidatos = ([normalizar_cabecalho(coluna)] if coluna else []) + COLUNAS_TEXTO
    for candidato in candidatos:
        if candidato in normalizados:
            return normalizados.index(candidato)
    return 0


def ajustar_colunas(
    partes: List[str], esperadas: int, idx_texto: int, separador: str
) -> Tuple[List[str], Optional[str]]:
    """
    Ajusta as partes de um registro ao numero de colunas do cabecalho.

    O excesso e juntado (com o separador) na coluna de texto; a falta e
    completada com "".

    Returns:
        Tupla (partes ajustadas, acao aplicada ou None se nada mudou)
    """
    diferenca = len(partes) - esperadas
    if diferenca == 0:
        return partes, None
    if diferenca < 0:
        return partes + [""] * -diferenca, "colunas_faltantes_completadas"

    fim_texto = idx_texto + 1 + diferenca
    novas = partes[:idx_texto] + [separador.join(partes[idx_texto:fim_texto])] + partes[fim_texto:]
    return (novas + [""] * esperadas)[:esperadas], "colunas_excedentes"


def _unir_continuacoes(
    linhas: List[str], i: int, separador: str, esperadas: int
) -> Tuple[List[str], int]:
    # Continuacoes comecam com o separador e so entram enquanto faltar coluna
    buffer = linhas[i]
    fim = i
    partes = _dividir(buffer, separador)
    while len(partes) < esperadas and fim + 1 < len(linhas) and linhas[fim + 1].startswith(separador):
        fim += 1
        buffer += linhas[fim]
        partes = _dividir(buffer, separador)
    return partes, fim


def corrigir_csv_quebrado(
    raw: bytes,
    *,
    sep: Optional[str] = None,
    coluna_texto: Optional[str] = None,
) -> Tuple[bytes, Dict[str, Any]]:
    """
    Corrige CSV quebrado e devolve o conteudo em UTF-8 com um relatorio.

    1. Linhas seguintes que comecam com o separador sao unidas ao registro
       enquanto faltarem colunas
    2. Colunas a mais sao juntadas (com o separador) na coluna de texto
    3. Colunas a menos sao completadas com ""

    Args:
        raw: Bytes brutos do CSV
        sep: Separador forcado (None = detectar)
        coluna_texto: Coluna preferida para absorver excesso

    Returns:
        Tupla (bytes UTF-8 sem BOM, relatorio)

    Raises:
        ValueError: Se o arquivo ou o cabecalho estiverem vazios
    """
    encoding = detectar_encoding(raw)
    linhas = raw.decode(encoding, errors="replace").splitlines()
    if not linhas:
        raise ValueError("Arquivo CSV vazio.")

    separador = sep or detectar_separador(linhas[0])
    cabecalho = [c.strip() for c in _dividir(linhas[0], separador)]
    esperadas = len(cabecalho)
    if esperadas == 0 or not any(cabecalho):
        raise ValueError("Cabeçalho CSV vazio ou inválido.")

    idx_texto = encontrar_coluna_texto(cabecalho, coluna_texto)
    estatisticas = {
        "linhas_originais": len(linhas),
        "registros_emitidos": 0,
        "registros_unidos": 0,
        "colunas_a_mais_corrigidas": 0,
        "colunas_a_menos_corrigidas": 0,
        "inalterados": 0,
    }
    correcoes: List[Dict[str, Any]] = []
    contadores = {
        "colunas_excedentes": "colunas_a_mais_corrigidas",
        "colunas_faltantes_completadas": "colunas_a_menos_corrigidas",
    }

    saida = StringIO()
    writer = csv.writer(
        saida, delimiter=separador, quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\n"
    )
    writer.writerow(cabecalho)

    i = 1
    while i < len(linhas):
        partes, fim = _unir_continuacoes(linhas, i, separador, esperadas)
        if fim > i:
            estatisticas["registros_unidos"] += 1
            correcoes.append({
                "linha_inicio": i + 1,
                "linha_fim": fim + 1,
                "acao": "linhas_de_continuacao_unidas",
                "linhas_unidas": fim - i,
            })

        novas, acao = ajustar_colunas(partes, esperadas, idx_texto, separador)
        if acao is None:
            estatisticas["inalterados"] += 1
        else:
            estatisticas[contadores[acao]] += 1
            if acao == "colunas_excedentes":
                acao = f"colunas_excedentes_em_{cabecalho[idx_texto]}"
            correcoes.append({
                "linha_inicio": i + 1,
                "linha_fim": fim + 1,
                "acao": acao,
                "colunas_originais": len(partes),
                "colunas_finais": len(novas),
            })

        writer.writerow(novas)
        estatisticas["registros_emitidos"] += 1
        i = fim + 1

    relatorio: Dict[str, Any] = {
        "encoding": encoding,
        "separador": separador,
        "colunas_esperadas": esperadas,
        "cabecalho": cabecalho,
        "coluna_texto": cabecalho[idx_texto],
        "correcoes": correcoes,
        "estatisticas": estatisticas,
    }
    return saida.getvalue().encode("utf-8"), relatorio
