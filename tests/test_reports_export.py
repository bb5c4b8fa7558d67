import re
from io import BytesIO

import pandas as pd
import pytest
from openpyxl import load_workbook

from crossbuyers.export import (
    exportar_csv,
    exportar_multiplas_abas,
    exportar_relatorio_crossbuyers,
    gerar_nome_arquivo,
    nome_arquivo_cliente,
    sanitizar_nome_arquivo,
)
from crossbuyers.modelos import DadosRevendedoresAtivos, EstatisticasSetor, ResultadoAtividadeSetor
from crossbuyers.parsing import ler_planilha_ativos
from crossbuyers.reports import (
    descricao_regra,
    formatar_valor,
    gerar_resumo_metricas,
    tabela_atividade_setor,
    tabela_detalhada_crossbuyers,
    tabela_estatisticas_setor,
    tabela_resumo_crossbuyers,
    tabela_revendedores_ativos,
    tabela_violacoes_ancora,
)
from crossbuyers.transform import processar_todas_marcas


@pytest.fixture
def linhas_por_marca(linha_marca, ler_marca):
    return {
        "boticario": ler_marca(
            [linha_marca("Maria", valor="10,00"), linha_marca("Ana", valor="5,00")],
            "boticario",
        ),
        "eudora": ler_marca(
            [linha_marca("Maria", valor="20,00", quantidade=2), linha_marca("Julia", setor="Sul")],
            "eudora",
        ),
        "oui": ler_marca([linha_marca("Julia", setor="Sul")], "oui"),
    }


@pytest.fixture
def resultado(linhas_por_marca):
    return processar_todas_marcas(linhas_por_marca)


def test_tabela_resumo_crossbuyers(resultado):
    df = tabela_resumo_crossbuyers(resultado.crossbuyers)

    assert list(df["NomeRevendedora"]) == ["Maria"]
    linha = df.iloc[0]
    assert linha["QtdMarcas"] == 2
    assert linha["Boticário (Valor)"] == 10.0
    assert linha["Eudora (Valor)"] == 20.0
    assert linha["Eudora (Itens)"] == 2
    assert linha["O.U.I (Valor)"] == ""
    assert linha["TotalValor"] == 30.0
    assert linha["TotalItens"] == 3


def test_tabela_resumo_crossbuyers_em_texto(resultado):
    df = tabela_resumo_crossbuyers(resultado.crossbuyers, em_texto=True)

    assert df.iloc[0]["TotalValor"] == "30,00"


def test_tabela_resumo_sem_clientes_mantem_colunas():
    df = tabela_resumo_crossbuyers([])

    assert df.empty
    assert "QDB? (Valor)" in df.columns


def test_tabela_detalhada_crossbuyers(resultado):
    df = tabela_detalhada_crossbuyers(resultado.crossbuyers)

    assert list(df["Marca"]) == ["O Boticário", "Eudora"]
    assert list(df["ValorPraticado"]) == [10.0, 20.0]


def test_tabela_violacoes_ancora(resultado):
    df = tabela_violacoes_ancora(resultado.diagnostico)

    assert list(df["NomeRevendedora"]) == ["Julia"]
    assert df.iloc[0]["Marcas"] == "Eudora, O.U.I"


def test_tabelas_de_ativos(linhas_por_marca, linha_ativo):
    revendedores = ler_planilha_ativos([
        linha_ativo("1", "Maria", "Norte"),
        linha_ativo("2", "Ana", "Norte"),
        linha_ativo("3", "Julia", "Sul"),
    ]).revendedores
    dados = processar_todas_marcas(linhas_por_marca, revendedores, "202401").dados_ativos

    setores = tabela_estatisticas_setor(dados)
    norte = setores[setores["Setor"] == "Norte"].iloc[0]
    assert norte["Ativos"] == 2
    assert norte["% Multimarcas"] == 50.0
    assert norte["% Crossbuyers (Base Âncora)"] == 50.0
    assert norte["Boticário (Valor)"] == 15.0

    revendedores_df = tabela_revendedores_ativos(dados)
    julia = revendedores_df[revendedores_df["NomeRevendedora"] == "Julia"].iloc[0]
    assert julia["Multimarcas"] == "Sim"
    assert julia["Crossbuyer"] == "Não"
    assert julia["Marcas"] == "Eudora, O.U.I"


def test_tabela_atividade_setor_vazia_sem_linha_total():
    df = tabela_atividade_setor(ResultadoAtividadeSetor())

    assert df.empty
    assert "Valor (%)" in df.columns


def test_gerar_resumo_metricas(resultado):
    cards = gerar_resumo_metricas(resultado)

    assert [c["label"] for c in cards] == [
        "Base Boticário", "Crossbuyers", "% Crossbuyers", "Maior Sobreposição",
    ]
    assert cards[0]["valor"] == 2
    assert cards[1]["valor"] == 1
    assert cards[2]["valor"] == 50.0
    assert cards[3]["valor"] == "Eudora"


@pytest.mark.parametrize(
    "valor, formato, esperado",
    [
        (1234, "numero", "1.234"),
        (12.5, "percentual", "12,5%"),
        (123456, "moeda", "R$ 1.234,56"),
        ("Eudora", "texto", "Eudora"),
        (None, "numero", "-"),
        (float("nan"), "moeda", "-"),
    ],
)
def test_formatar_valor(valor, formato, esperado):
    assert formatar_valor(valor, formato) == esperado


def test_descricao_regra_desconhecida():
    assert descricao_regra(None) == ""
    assert descricao_regra("REGRA_INEXISTENTE") == ""


def test_exportar_csv_com_bom():
    conteudo = exportar_csv(pd.DataFrame({"Nome": ["José"]}))

    assert conteudo.startswith(b"\xef\xbb\xbf")
    assert "José" in conteudo.decode("utf-8-sig")


def test_exportar_relatorio_crossbuyers(resultado):
    conteudo = exportar_relatorio_crossbuyers(resultado.crossbuyers)

    workbook = load_workbook(BytesIO(conteudo))
    assert workbook.sheetnames == ["Resumo", "Detalhado"]

    resumo = pd.read_excel(BytesIO(conteudo), sheet_name="Resumo")
    assert list(resumo["NomeRevendedora"]) == ["Maria"]
    detalhado = pd.read_excel(BytesIO(conteudo), sheet_name="Detalhado")
    assert len(detalhado) == 2


def test_exportar_multiplas_abas_corta_nome_da_aba():
    nome_longo = "Estatisticas por Setor do Ciclo Selecionado"
    conteudo = exportar_multiplas_abas({nome_longo: pd.DataFrame({"a": [1]})})

    assert load_workbook(BytesIO(conteudo)).sheetnames == [nome_longo[:31]]


def test_nomes_de_arquivo(resultado):
    maria = resultado.crossbuyers[0]

    assert sanitizar_nome_arquivo("José da Silva/01.csv") == "Jos__da_Silva_01.csv"
    assert nome_arquivo_cliente(maria, "eudora") == "Maria_Eudora.csv"
    assert nome_arquivo_cliente(maria) == "Maria_consolidado.csv"
    assert nome_arquivo_cliente(maria, "qdb") == "Maria_QDB_.csv"
    assert re.fullmatch(r"crossbuyers_\d{8}_\d{6}\.xlsx", gerar_nome_arquivo("crossbuyers", "xlsx"))


def test_tabela_estatisticas_setor_arredonda_meio_para_cima():
    dados = DadosRevendedoresAtivos(
        estatisticas_setor=[
            EstatisticasSetor(
                setor="Norte",
                percent_multimarcas=12.25,
                percent_multimarcas_base_ancora=100 / 3,
                percent_multimarcas_faturados=87.5,
            )
        ]
    )
    linha = tabela_estatisticas_setor(dados).iloc[0]

    assert linha["% Multimarcas"] == 12.3
    assert linha["% Crossbuyers (Base Âncora)"] == 33.3
    assert linha["% Multimarcas Faturados"] == 87.5
