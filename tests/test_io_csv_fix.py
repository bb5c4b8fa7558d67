import io

import pandas as pd
import pytest

from crossbuyers.csv_fix import (
    ajustar_colunas,
    corrigir_csv_quebrado,
    detectar_separador,
    encontrar_coluna_texto,
)
from crossbuyers.io import DataValidationError, dataframe_para_linhas, ler_arquivo, ler_linhas
from crossbuyers.normalizacao import converter_quantidade
from crossbuyers.parsing import ler_planilha_ativos


CSV_QUEBRADO = (
    "Setor|NomeRevendedora|CicloCaptacao|CodigoProduto|NomeProduto|Tipo|QuantidadeItens|ValorPraticado\n"
    "Norte|Joao Silva|202401|00123|Produto A|Venda|10|100,50\n"
    "Sul|Maria Santos|202401|00456|Produto B\n"
    "|Venda|5|50,25\n"
    "Leste|Ana|202401|00789|Kit | Presente|Venda|1|9,90\n"
    "Oeste|Julia|202401\n"
)


def test_corrigir_csv_quebrado():
    corrigido, relatorio = corrigir_csv_quebrado(CSV_QUEBRADO.encode("utf-8"))

    assert relatorio["separador"] == "|"
    assert relatorio["colunas_esperadas"] == 8
    assert relatorio["coluna_texto"] == "NomeProduto"
    estatisticas = relatorio["estatisticas"]
    assert estatisticas["registros_emitidos"] == 4
    assert estatisticas["registros_unidos"] == 1
    assert estatisticas["colunas_a_mais_corrigidas"] == 1
    assert estatisticas["colunas_a_menos_corrigidas"] == 1

    df = pd.read_csv(io.BytesIO(corrigido), sep="|", dtype=str, keep_default_na=False)
    assert len(df) == 4
    assert df.loc[1, "Tipo"] == "Venda"
    assert df.loc[1, "ValorPraticado"] == "50,25"
    assert df.loc[2, "NomeProduto"] == "Kit | Presente"
    assert df.loc[3, "Tipo"] == ""


def test_corrigir_csv_quebrado_vazio():
    with pytest.raises(ValueError):
        corrigir_csv_quebrado(b"")


@pytest.mark.parametrize(
    "partes, esperado, acao",
    [
        (["a", "b", "c"], ["a", "b", "c"], None),
        (["a", "b"], ["a", "b", ""], "colunas_faltantes_completadas"),
        (["a", "Kit ", " Presente", "c"], ["a", "Kit | Presente", "c"], "colunas_excedentes"),
    ],
)
def test_ajustar_colunas(partes, esperado, acao):
    assert ajustar_colunas(partes, 3, 1, "|") == (esperado, acao)


def test_corrigir_csv_nao_une_continuacao_quando_registro_esta_completo():
    conteudo = "A|B\n1|2\n|3\n"
    corrigido, relatorio = corrigir_csv_quebrado(conteudo.encode("utf-8"))

    assert relatorio["estatisticas"]["registros_unidos"] == 0
    assert relatorio["estatisticas"]["registros_emitidos"] == 2
    assert corrigido.decode("utf-8").splitlines() == ["A|B", "1|2", "|3"]


def test_detectar_separador_e_coluna_texto():
    assert detectar_separador("a;b;c") == ";"
    assert detectar_separador("abc") == ","
    assert encontrar_coluna_texto(["Setor", "Nome Produto", "Valor"]) == 1
    assert encontrar_coluna_texto(["Setor", "Valor"], coluna="Valor") == 1
    assert encontrar_coluna_texto(["Setor", "Valor"]) == 0


def test_ler_arquivo_csv_latin1_com_ponto_e_virgula():
    conteudo = "Setor;NomeRevendedora;Valor\nNorte;José;10,50\n".encode("latin-1")
    df = ler_arquivo(io.BytesIO(conteudo), "vendas.csv")

    assert list(df.columns) == ["Setor", "NomeRevendedora", "Valor"]
    assert df.loc[0, "NomeRevendedora"] == "José"
    assert df.loc[0, "Valor"] == "10,50"


def test_ler_arquivo_csv_quebrado_e_corrigido():
    df = ler_arquivo(io.BytesIO(CSV_QUEBRADO.encode("utf-8")), "vendas.csv")

    assert len(df) == 4
    assert df.loc[2, "NomeProduto"] == "Kit | Presente"


def test_ler_linhas_xlsx_descarta_linhas_vazias():
    buffer = io.BytesIO()
    df = pd.DataFrame({
        "NomeRevendedora": ["Maria", None, "Ana"],
        "QuantidadeItens": [2, None, 1.5],
        "CodigoProduto": ["00123", None, "00456"],
    })
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False)
    buffer.seek(0)

    linhas = ler_linhas(buffer, "vendas.xlsx")

    assert [l["NomeRevendedora"] for l in linhas] == ["Maria", "Ana"]
    assert converter_quantidade(linhas[0]["QuantidadeItens"]) == 2
    assert linhas[0]["CodigoProduto"] == "00123"


def test_planilha_de_ativos_xlsx_mantem_codigos_com_zero_a_esquerda():
    buffer = io.BytesIO()
    df = pd.DataFrame({
        "CodigoRevendedora": ["00123", "0123", "7"],
        "NomeRevendedora": ["Maria", "Ana", "Julia"],
        "Setor": ["Norte", "Norte", "Sul"],
    })
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False)
    buffer.seek(0)

    resultado = ler_planilha_ativos(ler_linhas(buffer, "ativos.xlsx"))

    assert [r.codigo_original for r in resultado.revendedores] == ["00123", "0123", "7"]
    assert resultado.diagnostico.excluidos_codigo_duplicado == 0
    assert resultado.diagnostico.registros_validos == 3


def test_dataframe_para_linhas_converte_nan_em_texto_vazio():
    df = pd.DataFrame({"a": [1, None], "b": ["x", "y"]})
    linhas = dataframe_para_linhas(df)

    assert linhas == [{"a": 1.0, "b": "x"}, {"a": "", "b": "y"}]


def test_ler_arquivo_formato_nao_suportado():
    with pytest.raises(DataValidationError, match="Formato de arquivo nao suportado"):
        ler_arquivo(io.BytesIO(b"abc"), "vendas.pdf")


def test_ler_arquivo_csv_vazio():
    with pytest.raises(DataValidationError):
        ler_arquivo(io.BytesIO(b""), "vendas.csv")
