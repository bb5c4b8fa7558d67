import math

import pytest

from crossbuyers.normalizacao import (
    arredondar_meio_para_cima,
    chave_identidade,
    converter_quantidade,
    converter_valor_para_centavos,
    formatar_moeda,
    normalizar_cabecalho,
    normalizar_codigo_revendedora,
    normalizar_marca,
    normalizar_para_comparacao,
    normalizar_para_exibicao,
    razao_similaridade,
    remover_acentos,
    valor_para_texto,
)


@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("1.234,56", 123456),
        ("1,234.56", 123456),
        ("", 0),
        (None, 0),
        (1234.5, 123450),
        ("R$ 1.000,50", 100050),
        ("89.90", 8990),
        ("89,9", 8990),
        ("12abc", 1200),
        ("abc", 0),
        (float("nan"), 0),
        (10, 1000),
        ("-5,25", -525),
    ],
)
def test_converter_valor_para_centavos(valor, esperado):
    assert converter_valor_para_centavos(valor) == esperado


def test_converter_valor_para_centavos_nunca_levanta_excecao():
    for valor in [object(), [], {}, "R$", "..,,", float("inf"), True]:
        assert converter_valor_para_centavos(valor) == 0


@pytest.mark.parametrize(
    "valor, esperado",
    [
        (3, 3),
        (2.5, 3),
        ("12 un", 12),
        ("3.7", 3),
        ("", 0),
        ("x", 0),
        (None, 0),
        (float("nan"), 0),
    ],
)
def test_converter_quantidade(valor, esperado):
    assert converter_quantidade(valor) == esperado


@pytest.mark.parametrize(
    "texto",
    ["  Maria   SILVA ", "JOSÉ\tda  Silva", "", "a", 12345.0, None, "  \n "],
)
def test_normalizar_para_comparacao_idempotente(texto):
    uma_vez = normalizar_para_comparacao(texto)
    assert normalizar_para_comparacao(uma_vez) == uma_vez


def test_normalizacoes_de_texto():
    assert normalizar_para_comparacao("  Maria   SILVA ") == "maria silva"
    assert normalizar_para_exibicao("  Maria   SILVA ") == "Maria SILVA"
    assert remover_acentos("José Conceição") == "Jose Conceicao"
    assert chave_identidade(" JOSÉ  da Silva") == "jose da silva"
    assert chave_identidade("Jose da Silva") == chave_identidade("JOSÉ DA SILVA")


def test_valor_para_texto_remove_ponto_zero_do_excel():
    assert valor_para_texto(12345.0) == "12345"
    assert valor_para_texto(12.5) == "12.5"
    assert valor_para_texto(None) == ""
    assert normalizar_codigo_revendedora(" 987.0 ") == "987"


def test_normalizar_cabecalho_remove_acentos_e_simbolos():
    assert normalizar_cabecalho("Código Produto") == "codigo produto"
    assert normalizar_cabecalho("  Qtd. Itens ") == "qtd itens"
    assert normalizar_cabecalho("$$$") == ""


def test_razao_similaridade():
    assert razao_similaridade("abc", "abc") == 1.0
    assert razao_similaridade("", "") == 1.0
    assert razao_similaridade("abc", "") == 0.0
    assert math.isclose(razao_similaridade("setor", "setr"), 0.8)
    # 3 edicoes em 15 caracteres
    assert math.isclose(razao_similaridade("nomerevendedora", "codrevendedora"), 0.8)


def test_arredondar_meio_para_cima():
    assert arredondar_meio_para_cima(5, 2) == 3
    assert arredondar_meio_para_cima(10, 4) == 3
    assert arredondar_meio_para_cima(10, 3) == 3
    assert arredondar_meio_para_cima(10, 0) == 0


def test_arredondar_meio_para_cima_negativo_vai_para_cima():
    assert arredondar_meio_para_cima(-5, 2) == -2
    assert arredondar_meio_para_cima(-7, 2) == -3
    assert arredondar_meio_para_cima(-10, 3) == -3


@pytest.mark.parametrize(
    "marca, esperado",
    [
        ("O Boticário", "boticario"),
        ("eudora", "eudora"),
        ("Au Amigos", "auamigos"),
        ("O.U.I", "oui"),
        ("QDB", "qdb"),
        ("Quem Disse, Berenice?", "qdb"),
        ("Natura", ""),
        ("", ""),
    ],
)
def test_normalizar_marca(marca, esperado):
    assert normalizar_marca(marca) == esperado


def test_formatar_moeda():
    assert formatar_moeda(123456) == "R$ 1.234,56"
    assert formatar_moeda(5) == "R$ 0,05"
