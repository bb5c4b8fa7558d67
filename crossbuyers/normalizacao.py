"""
normalizacao.py - Funcoes de normalizacao de textos, valores e quantidades.

Este modulo contem:
- Normalizacao de strings para comparacao e para exibicao
- Remocao de acentos (chave de identidade de revendedoras)
- Conversao de valores monetarios (pt-BR ou ponto decimal) para centavos
- Conversao de quantidades para inteiro
- Similaridade aproximada (Levenshtein) para casar cabecalhos

Nenhuma funcao deste modulo levanta excecao para dados sujos: planilhas
preenchidas manualmente sao esperadas, nao excepcionais.
"""

import math
import re
import unicodedata
from decimal import Decimal, ROUND_HALF_CEILING, InvalidOperation
from numbers import Number
from typing import Any

import pandas as pd
from rapidfuzz.distance import Levenshtein

from .constants import MARCA_ALIASES

_RE_ESPACOS = re.compile(r"\s+")
_RE_SIMBOLOS_MOEDA = re.compile(r"[R$\s]")
_RE_PREFIXO_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_RE_PREFIXO_INTEIRO = re.compile(r"^[+-]?\d+")


def _vazio(valor: Any) -> bool:
    if valor is None:
        return True
    if isinstance(valor, str):
        return valor == ""
    try:
        return bool(pd.isna(valor))
    except (TypeError, ValueError):
        return False


def valor_para_texto(valor: Any) -> str:
    """
    Converte o valor bruto de uma celula para string.

    NaN/None viram string vazia; floats inteiros (12345.0, comum quando o
    Excel le codigos como numero) perdem o ".0".
    """
    if _vazio(valor):
        return ""
    if isinstance(valor, float) and math.isfinite(valor) and valor == int(valor):
        return str(int(valor))
    return str(valor)


def normalizar_para_comparacao(texto: Any) -> str:
    """
    Normaliza uma string para comparacao: trim, colapsa espacos, minusculas.

    Args:
        texto: Valor a ser normalizado (str, numero, None)

    Returns:
        String normalizada ("" para valores vazios)

    Examples:
        >>> normalizar_para_comparacao("  Maria   SILVA ")
        'maria silva'
    """
    texto = valor_para_texto(texto)
    return _RE_ESPACOS.sub(" ", texto.strip()).lower()


def normalizar_para_exibicao(texto: Any) -> str:
    """
    Normaliza uma string para exibicao: trim e colapsa espacos, preservando caixa.
    """
    texto = valor_para_texto(texto)
    return _RE_ESPACOS.sub(" ", texto.strip())


def remover_acentos(texto: str) -> str:
    """
    Remove acentos via decomposicao Unicode (NFD) e descarte dos diacriticos.

    Examples:
        >>> remover_acentos("José")
        'Jose'
    """
    decomposto = unicodedata.normalize("NFD", texto)
    return "".join(c for c in decomposto if not unicodedata.combining(c))


def chave_identidade(nome: Any) -> str:
    """
    Chave de identidade de uma revendedora: nome normalizado sem acentos.

    Duas linhas representam a mesma revendedora se e somente se as chaves
    forem identicas. Nao ha match aproximado de nomes.
    """
    return remover_acentos(normalizar_para_comparacao(nome))


def normalizar_cabecalho(cabecalho: Any) -> str:
    """
    Normaliza um cabecalho de planilha para casamento de colunas.

    Remove acentos, aplica normalizar_para_comparacao e descarta tudo que
    nao for letra minuscula, digito ou espaco.
    """
    texto = remover_acentos(normalizar_para_comparacao(cabecalho))
    return re.sub(r"[^a-z0-9\s]", "", texto).strip()


def _arredondar(valor: float) -> int:
    # Meio para cima (2.5 -> 3, -2.5 -> -2), igual ao arredondamento de planilhas
    return int(math.floor(valor + 0.5))


def arredondar_meio_para_cima(numerador: int, denominador: int) -> int:
    """
    Divisao inteira arredondada meio-para-cima, sem erro de ponto flutuante.

    Usada no ticket medio por item (centavos / itens).
    """
    if denominador == 0:
        return 0
    quociente = Decimal(numerador) / Decimal(denominador)
    return int(quociente.quantize(Decimal("1"), rounding=ROUND_HALF_CEILING))


def converter_valor_para_centavos(valor: Any) -> int:
    """
    Converte um valor monetario para centavos (inteiro).

    Regras:
    1. Numero: assume unidade monetaria (reais), multiplica por 100 e arredonda
    2. Texto: remove "R", "$" e espacos
    3. Se houver "." e ",", o separador que aparece por ultimo e o decimal
    4. Se houver apenas ",", e o decimal
    5. Qualquer valor nao interpretavel vira 0 (nunca levanta excecao)

    Examples:
        >>> converter_valor_para_centavos("1.234,56")
        123456
        >>> converter_valor_para_centavos("1,234.56")
        123456
        >>> converter_valor_para_centavos("R$ 1.000,50")
        100050
        >>> converter_valor_para_centavos(1234.5)
        123450
    """
    if _vazio(valor) or isinstance(valor, bool):
        return 0

    if isinstance(valor, Number):
        try:
            numero = float(valor)
        except (TypeError, ValueError, OverflowError):
            return 0
        if not math.isfinite(numero):
            return 0
        return _arredondar(numero * 100)

    texto = _RE_SIMBOLOS_MOEDA.sub("", str(valor).strip())
    if not texto:
        return 0

    ultimo_ponto = texto.rfind(".")
    ultima_virgula = texto.rfind(",")

    if ultima_virgula > ultimo_ponto:
        # pt-BR: 1.234,56 (ou so virgula: 1234,56)
        texto = texto.replace(".", "").replace(",", ".", 1)
    elif ultimo_ponto > ultima_virgula:
        # Ponto decimal: 1,234.56
        texto = texto.replace(",", "")

    prefixo = _RE_PREFIXO_DECIMAL.match(texto)
    if not prefixo:
        return 0

    try:
        numero = float(prefixo.group(0))
    except (ValueError, OverflowError):
        return 0
    if not math.isfinite(numero):
        return 0
    return _arredondar(numero * 100)


def converter_quantidade(valor: Any) -> int:
    """
    Converte uma quantidade para inteiro.

    Numeros sao arredondados; textos usam o prefixo inteiro ("12 un" -> 12,
    "3.7" -> 3). Valores invalidos viram 0.
    """
    if _vazio(valor) or isinstance(valor, bool):
        return 0

    if isinstance(valor, Number):
        try:
            numero = float(valor)
        except (TypeError, ValueError, OverflowError):
            return 0
        if not math.isfinite(numero):
            return 0
        return _arredondar(numero)

    prefixo = _RE_PREFIXO_INTEIRO.match(str(valor).strip())
    if not prefixo:
        return 0
    return int(prefixo.group(0))


def razao_similaridade(a: str, b: str) -> float:
    """
    Similaridade entre 0 e 1: 1 - distancia de Levenshtein / max(len(a), len(b)).

    Retorna 1.0 para strings iguais (inclusive ambas vazias).
    """
    return Levenshtein.normalized_similarity(a, b)


def normalizar_codigo_revendedora(valor: Any) -> str:
    """
    Normaliza CodigoRevendedora: string, trim e sem sufixo ".0" do Excel.
    """
    texto = valor_para_texto(valor).strip()
    if texto.endswith(".0"):
        texto = texto[:-2]
    return texto


def normalizar_marca(marca: Any) -> str:
    """
    Converte um nome/alias de marca para o id interno.

    Args:
        marca: Nome da marca como digitado (ex: "QDB", "O Boticário", "eudora")

    Returns:
        Id da marca (ex: "qdb", "boticario") ou "" se nao reconhecida
    """
    texto = remover_acentos(normalizar_para_exibicao(marca)).upper()
    if not texto:
        return ""
    if texto in MARCA_ALIASES:
        return MARCA_ALIASES[texto]
    return MARCA_ALIASES.get(texto.replace(" ", ""), "")


def formatar_centavos(centavos: int) -> str:
    """
    Formata centavos como numero pt-BR sem simbolo (123456 -> "1.234,56").
    """
    try:
        reais = Decimal(int(centavos)) / Decimal(100)
    except (TypeError, ValueError, InvalidOperation):
        return "0,00"
    texto = f"{reais:,.2f}"
    return texto.replace(",", "X").replace(".", ",").replace("X", ".")


def formatar_moeda(centavos: int) -> str:
    """Formata centavos como moeda pt-BR ("R$ 1.234,56")."""
    return f"R$ {formatar_centavos(centavos)}"
