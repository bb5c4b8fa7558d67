"""
io.py - Leitura de arquivos Excel/CSV enviados.

Este modulo contem:
- Leitura da primeira aba de arquivos .xlsx/.xls e de arquivos .csv
  (deteccao de encoding e separador, correcao de CSV quebrado)
- Conversao do DataFrame lido para a lista de linhas (cabecalho -> valor)
  consumida pelos leitores de planilha
"""

import logging
from io import BytesIO
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from .csv_fix import corrigir_csv_quebrado, detectar_encoding, detectar_separador

logger = logging.getLogger(__name__)


class DataValidationError(Exception):
    """Excecao customizada para erros de validacao de dados."""
    pass


def _ler_csv(conteudo: bytes, separador: str, encoding: str) -> pd.DataFrame:
    return pd.read_csv(
        BytesIO(conteudo),
        sep=separador,
        encoding=encoding,
        dtype=str,
        engine="python",
        quotechar='"',
        keep_default_na=False,
        on_bad_lines="error",  # nenhuma linha e descartada em silencio
    )


def ler_csv(conteudo_bruto: bytes, nome_arquivo: str) -> pd.DataFrame:
    """
    Le um CSV detectando encoding e separador.

    Se a leitura estrita falhar, tenta corrigir o arquivo com
    corrigir_csv_quebrado e le novamente.

    Raises:
        DataValidationError: Se o arquivo estiver vazio ou nao puder ser lido
    """
    encoding = detectar_encoding(conteudo_bruto)
    texto = conteudo_bruto.decode(encoding, errors="replace")
    linhas = texto.splitlines()
    if not linhas:
        raise DataValidationError(f"Arquivo vazio: {nome_arquivo}")

    separador = detectar_separador(linhas[0])

    try:
        return _ler_csv(conteudo_bruto, separador, encoding)
    except Exception as e:
        logger.info("CSV %s com linhas inconsistentes (%s), tentando corrigir", nome_arquivo, e)

    try:
        corrigido, relatorio = corrigir_csv_quebrado(conteudo_bruto, sep=separador)
        df = _ler_csv(corrigido, relatorio["separador"], "utf-8")
    except Exception as e2:
        raise DataValidationError(
            "Erro ao importar CSV. "
            "O arquivo possui linhas inconsistentes (ex: separador dentro do texto, "
            "aspas quebradas ou colunas a mais).\n\n"
            "Corrija o CSV ou converta para Excel (.xlsx).\n\n"
            f"Detalhe técnico: {str(e2)[:300]}"
        )

    logger.info(
        "CSV %s corrigido: %d registros, %d correcoes",
        nome_arquivo,
        relatorio["estatisticas"]["registros_emitidos"],
        len(relatorio["correcoes"]),
    )
    return df


def ler_arquivo(arquivo: BytesIO, nome_arquivo: str) -> pd.DataFrame:
    """
    Le um arquivo Excel ou CSV e retorna um DataFrame da primeira aba.

    Args:
        arquivo: Buffer do arquivo carregado
        nome_arquivo: Nome do arquivo para detectar extensao

    Returns:
        DataFrame com os dados do arquivo

    Raises:
        DataValidationError: Se o formato nao for suportado ou a leitura falhar
    """
    nome_lower = nome_arquivo.lower()

    try:
        if nome_lower.endswith(".xlsx") or nome_lower.endswith(".xls"):
            engine = "openpyxl" if nome_lower.endswith(".xlsx") else None
            # Texto como na planilha: codigos com zero a esquerda nao viram numero
            df = pd.read_excel(
                arquivo,
                sheet_name=0,
                engine=engine,
                dtype=str,
                keep_default_na=False,
            )
        elif nome_lower.endswith(".csv"):
            arquivo.seek(0)
            df = ler_csv(arquivo.read(), nome_arquivo)
        else:
            raise DataValidationError(
                f"Formato de arquivo nao suportado: {nome_arquivo}. "
                "Use .xlsx, .xls ou .csv"
            )
    except DataValidationError:
        raise
    except Exception as e:
        raise DataValidationError(f"Erro ao ler arquivo {nome_arquivo}: {str(e)}")

    logger.debug("%s: %d linhas, colunas %s", nome_arquivo, len(df), list(df.columns))
    return df


def _valor_celula(valor: Any) -> Any:
    if valor is None:
        return ""
    if isinstance(valor, np.generic):
        valor = valor.item()
    if isinstance(valor, float) and np.isnan(valor):
        return ""
    if isinstance(valor, (str, int, float)):
        return valor
    if pd.isna(valor):
        return ""
    return str(valor)


def dataframe_para_linhas(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Converte um DataFrame em lista de linhas (cabecalho -> valor).

    Celulas vazias viram "", numeros continuam numeros e linhas totalmente
    vazias sao descartadas.
    """
    colunas = [str(c) for c in df.columns]
    linhas = []
    for valores in df.itertuples(index=False, name=None):
        linha = {c: _valor_celula(v) for c, v in zip(colunas, valores)}
        if any(v != "" for v in linha.values()):
            linhas.append(linha)
    return linhas


def ler_linhas(arquivo: BytesIO, nome_arquivo: str) -> List[Dict[str, Any]]:
    """Le o arquivo e devolve as linhas da primeira aba."""
    return dataframe_para_linhas(ler_arquivo(arquivo, nome_arquivo))
