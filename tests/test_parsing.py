import pytest

from crossbuyers.constants import (
    ENTREGA_FRETE,
    ENTREGA_OUTRO,
    ENTREGA_RETIRADA,
    NAO_INFORMADO,
    PRODUTO_NAO_IDENTIFICADO,
    STATUS_CANCELADO,
    STATUS_DESCONHECIDO,
    STATUS_FATURADO,
    STATUS_PENDENTE,
    TIPO_BRINDE,
    TIPO_DOACAO,
    TIPO_OUTRO,
    TIPO_VENDA,
)
from crossbuyers.parsing import (
    ativos_geral_para_roster,
    derivar_ativos_geral,
    ler_planilha_ativos,
    ler_planilha_geral,
    ler_planilha_marca,
    ler_planilha_ranking,
    normalizar_status_faturamento,
    normalizar_tipo,
    normalizar_tipo_entrega,
    normalizar_tipo_geral,
)


@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("Venda", TIPO_VENDA),
        ("BRINDE", TIPO_BRINDE),
        ("Doação", TIPO_DOACAO),
        ("doacao", TIPO_DOACAO),
        ("Troca", TIPO_VENDA),
        ("", TIPO_VENDA),
        (None, TIPO_VENDA),
    ],
)
def test_normalizar_tipo(valor, esperado):
    assert normalizar_tipo(valor) == esperado


def test_normalizar_tipo_geral_desconhecido_vira_outro():
    assert normalizar_tipo_geral("Venda Direta") == TIPO_VENDA
    assert normalizar_tipo_geral("Troca") == TIPO_OUTRO
    assert normalizar_tipo_geral("") == TIPO_OUTRO


@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("Entrega no endereço", (ENTREGA_FRETE, "Entrega no endereço")),
        ("Retirar na Central", (ENTREGA_RETIRADA, "Retirar na Central")),
        ("Drone", (ENTREGA_OUTRO, "Drone")),
        ("", (ENTREGA_OUTRO, "")),
    ],
)
def test_normalizar_tipo_entrega(valor, esperado):
    assert normalizar_tipo_entrega(valor) == esperado


@pytest.mark.parametrize(
    "valor, status, faturado",
    [
        ("Faturado", STATUS_FATURADO, True),
        ("NF emitida", STATUS_FATURADO, True),
        ("S", STATUS_FATURADO, True),
        ("ok", STATUS_FATURADO, True),
        ("Fat.", STATUS_FATURADO, True),
        ("fat-ok", STATUS_FATURADO, True),
        ("Cancelado", STATUS_CANCELADO, False),
        ("N", STATUS_CANCELADO, False),
        ("Aguardando pagamento", STATUS_PENDENTE, False),
        ("Em análise", STATUS_PENDENTE, False),
        ("", STATUS_DESCONHECIDO, False),
        ("xyz", STATUS_DESCONHECIDO, False),
    ],
)
def test_normalizar_status_faturamento(valor, status, faturado):
    resultado = normalizar_status_faturamento(valor)
    assert resultado[0] == status
    assert resultado[2] is faturado


def test_status_com_token_curto_dentro_de_palavra_nao_e_faturado():
    # "s" e "n" so valem como valor inteiro da celula
    assert normalizar_status_faturamento("Sem status")[0] == STATUS_DESCONHECIDO
    assert normalizar_status_faturamento("Novo")[0] == STATUS_PENDENTE


def test_ler_planilha_marca_converte_linhas(linha_marca):
    linhas = [
        linha_marca("  Maria   Silva ", valor="R$ 1.000,50", quantidade="2"),
        linha_marca("Ana", tipo="Brinde", entrega="Entrega no endereço", ciclo="", setor=""),
    ]
    resultado = ler_planilha_marca(linhas, "boticario")

    assert resultado.sucesso
    assert resultado.total_linhas == 2
    maria, ana = resultado.linhas
    assert maria.nome_revendedora == "Maria Silva"
    assert maria.nome_revendedora_normalizado == "maria silva"
    assert maria.valor_centavos == 100050
    assert maria.quantidade_itens == 2
    assert maria.tipo == TIPO_VENDA
    assert maria.tipo_entrega == ENTREGA_RETIRADA
    assert maria.faturamento is None
    assert ana.tipo == TIPO_BRINDE
    assert ana.tipo_entrega == ENTREGA_FRETE
    assert ana.ciclo_captacao == NAO_INFORMADO
    assert ana.setor == NAO_INFORMADO


def test_ler_planilha_marca_ignora_linha_sem_nome(linha_marca):
    linhas = [linha_marca("Maria"), linha_marca("   "), linha_marca("Ana", produto="")]
    resultado = ler_planilha_marca(linhas, "eudora")

    assert resultado.sucesso
    assert [l.nome_revendedora for l in resultado.linhas] == ["Maria", "Ana"]
    assert resultado.avisos == ["Linha 3: Nome da revendedora vazio, linha ignorada"]
    assert resultado.linhas[1].nome_produto == PRODUTO_NAO_IDENTIFICADO


def test_ler_planilha_marca_valores_invalidos_viram_zero(linha_marca):
    resultado = ler_planilha_marca([linha_marca("Maria", valor="abc", quantidade="x")], "oui")

    assert resultado.sucesso
    assert resultado.linhas[0].valor_centavos == 0
    assert resultado.linhas[0].quantidade_itens == 0


def test_ler_planilha_marca_erros_de_arquivo(linha_marca):
    vazia = ler_planilha_marca([], "boticario")
    assert not vazia.sucesso
    assert vazia.erros == ["Planilha vazia: O Boticário"]

    sem_colunas = ler_planilha_marca([{"Setor": "Norte", "NomeRevendedora": "Maria"}], "eudora")
    assert not sem_colunas.sucesso
    assert sem_colunas.erros == [
        "Colunas obrigatórias faltando em Eudora: Tipo, QuantidadeItens, ValorPraticado"
    ]

    sem_linhas_validas = ler_planilha_marca([linha_marca("")], "qdb")
    assert not sem_linhas_validas.sucesso
    assert sem_linhas_validas.erros == ["Nenhum item válido encontrado em Quem Disse, Berenice?"]


def test_ler_planilha_marca_com_colunas_de_faturamento(linha_marca):
    linhas = [
        linha_marca("Maria", StatusFaturamento="Faturado", CicloFaturamento="202402"),
        linha_marca("Ana", StatusFaturamento="Pendente", CicloFaturamento=""),
    ]
    resultado = ler_planilha_marca(linhas, "boticario")

    assert resultado.possui_faturamento
    assert "status_faturamento" in resultado.colunas_faturamento
    maria, ana = resultado.linhas
    assert maria.is_faturado
    assert maria.faturamento.ciclo_faturamento == "202402"
    assert not ana.is_faturado
    assert ana.faturamento.status == STATUS_PENDENTE


def test_ler_planilha_ativos_codigo_duplicado(linha_ativo):
    linhas = [
        linha_ativo("100", "Maria", "Norte"),
        linha_ativo("200", "Ana", "Norte"),
        linha_ativo("300", "Julia", "Sul"),
        linha_ativo("100", "Maria Repetida", "Sul"),
        linha_ativo("400", "Carla", "Sul"),
    ]
    resultado = ler_planilha_ativos(linhas)

    assert resultado.sucesso
    diagnostico = resultado.diagnostico
    assert diagnostico.excluidos_codigo_duplicado == 1
    assert diagnostico.registros_validos == 4
    assert diagnostico.reconciliado
    assert [r.codigo for r in resultado.revendedores] == ["100", "200", "300", "400"]
    assert diagnostico.por_setor["Sul"].recebidos == 3
    assert diagnostico.por_setor["Sul"].excluidos == 1


def test_ler_planilha_ativos_diagnostico_reconcilia_todas_as_exclusoes(linha_ativo):
    linhas = [
        linha_ativo("100", "Maria"),
        linha_ativo("", "Sem Codigo"),
        linha_ativo("200", ""),
        linha_ativo(100.0, "Maria Outra"),
        linha_ativo("300", "maria"),
    ]
    resultado = ler_planilha_ativos(linhas)
    diagnostico = resultado.diagnostico

    assert diagnostico.total_linhas == 5
    assert diagnostico.excluidos_codigo_vazio == 1
    assert diagnostico.excluidos_nome_vazio == 1
    assert diagnostico.excluidos_codigo_duplicado == 1
    assert diagnostico.registros_validos == 2
    assert diagnostico.total_excluidos == 3
    assert diagnostico.reconciliado
    # nome repetido com outro codigo e so aviso
    assert diagnostico.nomes_com_codigos_diferentes == 1
    assert any("já existe com código diferente" in a for a in resultado.avisos)


def test_ler_planilha_ativos_com_ciclo(linha_ativo):
    resultado = ler_planilha_ativos([linha_ativo("1", "Maria", ciclo="202401")])

    assert resultado.possui_ciclo
    assert resultado.revendedores[0].ciclo_captacao == "202401"


def test_ler_planilha_ativos_sem_colunas_obrigatorias():
    resultado = ler_planilha_ativos([{"Nome": "Maria"}])

    assert not resultado.sucesso
    assert "CodigoRevendedora" in resultado.erros[0]
    assert "Setor" in resultado.erros[0]


def _linha_geral(codigo, nome, ciclo, tipo="Venda", setor="Norte", itens=1, valor="10,00"):
    return {
        "Gerencia": "G1",
        "Setor": setor,
        "CodigoRevendedora": codigo,
        "NomeRevendedora": nome,
        "CicloFaturamento": ciclo,
        "Tipo": tipo,
        "QuantidadeItens": itens,
        "ValorPraticado": valor,
    }


def test_ler_planilha_geral_e_derivar_ativos():
    linhas = [
        _linha_geral("1", "Maria", "202401", itens=2, valor="10,00"),
        _linha_geral("1", "Maria", "202401", itens=1, valor="5,50"),
        _linha_geral("2", "Ana", "202401", tipo="Brinde"),
        _linha_geral("3", "Julia", "202402"),
        _linha_geral("", "Sem Codigo", "202401"),
    ]
    leitura = ler_planilha_geral(linhas)

    assert leitura.sucesso
    assert leitura.ciclos_disponiveis == ["202401", "202402"]
    assert leitura.diagnostico.excluidos_codigo_vazio == 1
    assert leitura.diagnostico.reconciliado

    ativos, diagnostico = derivar_ativos_geral(leitura.transacoes, "202401")
    assert [a.codigo for a in ativos] == ["1"]
    assert ativos[0].total_itens == 3
    assert ativos[0].total_valor == 1550
    assert ativos[0].quantidade_transacoes == 2
    assert diagnostico.transacoes_no_ciclo == 3
    assert diagnostico.transacoes_venda_no_ciclo == 2
    assert diagnostico.revendedores_unicos == 1

    roster = ativos_geral_para_roster(ativos)
    assert roster[0].nome_normalizado == "maria"
    assert roster[0].ciclo_captacao == "202401"
    assert roster[0].gerencia == "G1"


def test_ler_planilha_ranking_soma_setores_repetidos():
    linhas = [
        {"Setor": "Norte", "QuantidadeItens": 10, "QuantidadeRevendedor": 3, "ValorPraticado": "100,00"},
        {"Setor": " NORTE ", "QuantidadeItens": 5, "QuantidadeRevendedor": 1, "ValorPraticado": 50},
        {"Setor": "Sul", "QuantidadeItens": 1, "QuantidadeRevendedor": 1, "ValorPraticado": "1,00"},
        {"Setor": "", "QuantidadeItens": 1, "QuantidadeRevendedor": 1, "ValorPraticado": "1,00"},
    ]
    resultado = ler_planilha_ranking(linhas)

    assert resultado.sucesso
    norte = resultado.dados.setores["norte"]
    assert norte.setor == "Norte"
    assert norte.quantidade_itens == 15
    assert norte.quantidade_revendedor == 4
    assert norte.valor_centavos == 15000
    assert resultado.dados.total_revendedores == 5
    assert resultado.avisos == ["Linha 5: Setor vazio, linha ignorada"]
