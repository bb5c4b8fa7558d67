"""
export.py - Funcoes de exportacao de dados.

Este modulo contem funcoes para exportar DataFrames para CSV e Excel e
para montar os arquivos de download da analise de crossbuyers.
"""

import re
from datetime import datetime
from io import BytesIO
from typing import Dict, Iterable, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from .constants import MARCAS_NOMES_CURTOS
from .modelos import Cliente
from .reports import tabela_detalhada_crossbuyers, tabela_resumo_crossbuyers

LARGURA_MINIMA = 10
LARGURA_MAXIMA = 50
LIMITE_NOME_ABA = 31


def exportar_csv(df: pd.DataFrame) -> bytes:
    """
    Exporta um DataFrame para formato CSV (UTF-8 com BOM, abre no Excel).

    Args:
        df: DataFrame a ser exportado

    Returns:
        Bytes do arquivo CSV
    """
    return df.to_csv(index=False).encode("utf-8-sig")


def _ajustar_larguras(worksheet, df: pd.DataFrame) -> None:
    for idx, col in enumerate(df.columns):
        conteudo = df[col].astype(str).map(len).max() if len(df) > 0 else 0
        largura = max(conteudo, len(str(col))) + 2
        largura = max(min(largura, LARGURA_MAXIMA), LARGURA_MINIMA)
        worksheet.column_dimensions[get_column_letter(idx + 1)].width = largura


def exportar_excel(df: pd.DataFrame, nome_aba: str = "Dados") -> bytes:
    """
    Exporta um DataFrame para formato Excel (.xlsx).

    Args:
        df: DataFrame a ser exportado
        nome_aba: Nome da aba na planilha

    Returns:
        Bytes do arquivo Excel
    """
    return exportar_multiplas_abas({nome_aba: df})


def exportar_multiplas_abas(dataframes: Dict[str, pd.DataFrame]) -> bytes:
    """
    Exporta multiplos DataFrames para um arquivo Excel com multiplas abas.

    Nomes de aba sao cortados em 31 caracteres (limite do Excel).

    Args:
        dataframes: Dicionario {nome_aba: DataFrame}

    Returns:
        Bytes do arquivo Excel
    """
    output = BytesIO()

    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for nome_aba, df in dataframes.items():
            nome_aba_safe = nome_aba[:LIMITE_NOME_ABA]
            df.to_excel(writer, sheet_name=nome_aba_safe, index=False)
            _ajustar_larguras(writer.sheets[nome_aba_safe], df)

    return output.getvalue()


def exportar_relatorio_crossbuyers(clientes: Iterable[Cliente]) -> bytes:
    """Planilha com abas Resumo (um cliente por linha) e Detalhado (linhas de Venda)."""
    clientes = list(clientes)
    return exportar_multiplas_abas({
        "Resumo": tabela_resumo_crossbuyers(clientes),
        "Detalhado": tabela_detalhada_crossbuyers(clientes),
    })


def sanitizar_nome_arquivo(nome: str) -> str:
    """Troca tudo que nao for letra ASCII, digito, "_", "." ou "-" por "_"."""
    return re.sub(r"[^A-Za-z0-9_.-]", "_", nome)


def nome_arquivo_cliente(cliente: Cliente, marca: Optional[str] = None) -> str:
    """Nome do CSV de itens de um cliente (por marca ou consolidado)."""
    sufixo = MARCAS_NOMES_CURTOS[marca] if marca else "consolidado"
    return sanitizar_nome_arquivo(f"{cliente.nome}_{sufixo}.csv")


def gerar_nome_arquivo(prefixo: str, extensao: str) -> str:
    """
    Gera nome de arquivo com timestamp.

    Args:
        prefixo: Prefixo do nome do arquivo
        extensao: Extensao do arquivo (sem ponto)

    Returns:
        Nome do arquivo formatado
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefixo}_{timestamp}.{extensao}"
