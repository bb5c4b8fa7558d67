from crossbuyers.colunas import (
    ESQUEMA_ATIVOS,
    ESQUEMA_MARCA,
    ESQUEMA_RANKING,
    EsquemaColunas,
    mapear_colunas,
)

CABECALHOS_MARCA = [
    "Setor",
    "NomeRevendedora",
    "CicloCaptacao",
    "CodigoProduto",
    "NomeProduto",
    "Tipo",
    "QuantidadeItens",
    "ValorPraticado",
    "MeioCaptacao",
    "TipoEntrega",
]


def test_mapear_colunas_match_exato_com_cabecalhos_padrao():
    mapeamento = mapear_colunas(CABECALHOS_MARCA, ESQUEMA_MARCA)

    assert mapeamento.valido
    assert mapeamento.coluna("nome_revendedora") == "NomeRevendedora"
    assert mapeamento.coluna("nome_produto") == "NomeProduto"
    assert mapeamento.coluna("valor_praticado") == "ValorPraticado"
    assert mapeamento.coluna("tipo_entrega") == "TipoEntrega"
    # colunas de faturamento ausentes nao geram aviso
    assert mapeamento.coluna("status_faturamento") is None
    assert mapeamento.avisos == []


def test_mapear_colunas_aceita_acentos_e_espacos():
    cabecalhos = ["Nome Revendedora", "Tipo", "Quantidade Itens", "Valor Praticado", "Código Produto"]
    mapeamento = mapear_colunas(cabecalhos, ESQUEMA_MARCA)

    assert mapeamento.valido
    assert mapeamento.coluna("codigo_produto") == "Código Produto"
    assert mapeamento.coluna("quantidade_itens") == "Quantidade Itens"


def test_mapear_colunas_match_por_conteudo():
    cabecalhos = ["Setor da Revendedora", "Codigo Revendedora", "Nome Revendedora"]
    mapeamento = mapear_colunas(cabecalhos, ESQUEMA_ATIVOS)

    assert mapeamento.valido
    assert mapeamento.coluna("setor") == "Setor da Revendedora"
    assert mapeamento.coluna("codigo_revendedora") == "Codigo Revendedora"


def test_mapear_colunas_match_aproximado():
    cabecalhos = ["Setr", "QuantidadeItens", "QuantidadeRevendedor", "ValorPraticado"]
    mapeamento = mapear_colunas(cabecalhos, ESQUEMA_RANKING)

    assert mapeamento.valido
    assert mapeamento.coluna("setor") == "Setr"


def test_mapear_colunas_nao_reaproveita_cabecalho_usado():
    esquema = EsquemaColunas.criar(
        "teste",
        {"primeiro": ["valor"], "segundo": ["valor"]},
        obrigatorios=["primeiro"],
    )
    mapeamento = mapear_colunas(["Valor"], esquema)

    assert mapeamento.coluna("primeiro") == "Valor"
    assert mapeamento.coluna("segundo") is None
    assert mapeamento.faltando_opcionais == ["segundo"]
    assert mapeamento.avisos == ["Colunas opcionais não encontradas: segundo"]


def test_mapear_colunas_reporta_obrigatorias_faltando():
    mapeamento = mapear_colunas(["Setor", "NomeRevendedora"], ESQUEMA_MARCA)

    assert not mapeamento.valido
    assert mapeamento.faltando_obrigatorias == ["tipo", "quantidade_itens", "valor_praticado"]


def test_mapear_colunas_ignora_cabecalho_vazio_apos_normalizacao():
    mapeamento = mapear_colunas(["???", "Setor", "CodigoRevendedora", "NomeRevendedora"], ESQUEMA_ATIVOS)

    assert mapeamento.valido
    assert "???" not in mapeamento.colunas.values()


def test_mapear_colunas_deterministico():
    cabecalhos = ["valor total", "Nome", "tipo transacao", "qtd", "Setor", "Ciclo"]
    primeiro = mapear_colunas(cabecalhos, ESQUEMA_MARCA)

    for _ in range(5):
        assert mapear_colunas(cabecalhos, ESQUEMA_MARCA).colunas == primeiro.colunas
