from crossbuyers.join import (
    construir_clientes,
    cruzar_revendedores_ativos,
    indexar_vendas_por_nome,
    nomes_base_ancora,
)
from crossbuyers.parsing import ler_planilha_ativos
from crossbuyers.transform import agregar_ativos_por_setor


def test_construir_clientes_une_marcas_pela_chave_sem_acentos(linha_marca, ler_marca):
    linhas_por_marca = {
        "eudora": ler_marca([linha_marca("JOSE da Silva", valor="5,00")], "eudora"),
        "boticario": ler_marca(
            [
                linha_marca("José da Silva", valor="10,00", quantidade=2),
                linha_marca("Ana", tipo="Brinde"),
            ],
            "boticario",
        ),
    }
    clientes, nomes_ancora = construir_clientes(linhas_por_marca)

    assert list(clientes) == ["jose da silva"]
    jose = clientes["jose da silva"]
    # marcas percorridas na ordem fixa: o nome exibido vem da marca ancora
    assert jose.nome == "José da Silva"
    assert list(jose.marcas) == ["boticario", "eudora"]
    assert jose.quantidade_marcas == 2
    assert jose.total_valor == 1500
    assert jose.total_itens == 3
    assert jose.marcas["boticario"].ticket_medio_por_item == 500
    assert nomes_ancora == {"jose da silva"}


def test_indexar_vendas_por_nome_filtra_ciclo_e_tipo(linha_marca, ler_marca):
    linhas = ler_marca(
        [
            linha_marca("Maria", ciclo="202401"),
            linha_marca("Maria", ciclo="202402"),
            linha_marca("Maria", ciclo="202401", tipo="Doação"),
        ],
        "boticario",
    )
    indice = indexar_vendas_por_nome({"boticario": linhas}, "202401")
    assert len(indice["maria"]["boticario"]) == 1

    todos = indexar_vendas_por_nome({"boticario": linhas})
    assert len(todos["maria"]["boticario"]) == 2


def test_cruzar_revendedores_ativos_mantem_todos_os_registros(linha_marca, linha_ativo, ler_marca):
    revendedores = ler_planilha_ativos([
        linha_ativo("1", "Maria", "Norte"),
        linha_ativo("2", "Ana", "Norte"),
        linha_ativo("3", "Julia", "Sul"),
    ]).revendedores
    linhas_por_marca = {
        "boticario": ler_marca(
            [
                linha_marca("Maria", setor="Outro Setor"),
                linha_marca("Julia", ciclo="202402"),
            ],
            "boticario",
        ),
        "eudora": ler_marca([linha_marca("maria"), linha_marca("Ana")], "eudora"),
    }

    cruzados, diagnostico, inconsistencias = cruzar_revendedores_ativos(
        revendedores, linhas_por_marca, "202401"
    )

    assert [c.nome for c in cruzados] == ["Maria", "Ana", "Julia"]
    maria, ana, julia = cruzados
    # setor sempre vem da planilha de ativos
    assert maria.setor == "Norte"
    assert maria.is_crossbuyer
    assert maria.is_multimarcas
    assert ana.tem_venda_registrada
    assert not ana.existe_na_ancora
    assert not ana.is_crossbuyer
    # compra de outro ciclo nao conta
    assert not julia.tem_venda_registrada
    assert julia.quantidade_marcas == 0

    assert diagnostico.total_recebidos == 3
    assert diagnostico.registros_processados == 3
    assert diagnostico.com_compra == 2
    assert diagnostico.sem_compra == 1
    assert diagnostico.por_setor["Sul"].com_compra == 0
    assert inconsistencias == []


def test_cruzar_revendedores_ativos_com_faturamento(linha_marca, linha_ativo, ler_marca):
    revendedores = ler_planilha_ativos([
        linha_ativo("1", "Maria"),
        linha_ativo("2", "Ana"),
    ]).revendedores
    linhas_por_marca = {
        "boticario": ler_marca(
            [
                linha_marca("Maria", StatusFaturamento="Faturado"),
                linha_marca("Ana", StatusFaturamento="Cancelado"),
            ],
            "boticario",
        ),
        "oui": ler_marca(
            [
                linha_marca("Maria", StatusFaturamento="Sim"),
                linha_marca("Ana", StatusFaturamento="Faturado"),
            ],
            "oui",
        ),
    }

    cruzados, _, _ = cruzar_revendedores_ativos(revendedores, linhas_por_marca)
    maria, ana = cruzados

    assert maria.is_multimarcas_faturado
    assert maria.tem_venda_faturada
    assert ana.is_multimarcas
    assert ana.tem_venda_faturada
    assert not ana.is_multimarcas_faturado


def test_cruzar_revendedores_ativos_nome_repetido_gera_inconsistencia(linha_marca, linha_ativo, ler_marca):
    revendedores = ler_planilha_ativos([
        linha_ativo("1", "Maria"),
        linha_ativo("2", "MARIA"),
    ]).revendedores
    linhas_por_marca = {"boticario": ler_marca([linha_marca("Maria")], "boticario")}

    cruzados, _, inconsistencias = cruzar_revendedores_ativos(revendedores, linhas_por_marca)

    assert all(c.tem_venda_registrada for c in cruzados)
    assert len(inconsistencias) == 2


def test_base_ancora_considera_todos_os_ciclos(linha_marca, linha_ativo, ler_marca):
    revendedores = ler_planilha_ativos([linha_ativo("1", "Maria")]).revendedores
    linhas_por_marca = {
        "boticario": ler_marca([linha_marca("Maria", ciclo="202401")], "boticario"),
        "eudora": ler_marca([linha_marca("Maria", ciclo="202402")], "eudora"),
    }

    cruzados, _, _ = cruzar_revendedores_ativos(revendedores, linhas_por_marca, "202402")
    maria = cruzados[0]

    assert maria.existe_na_ancora
    assert list(maria.marcas) == ["eudora"]
    assert not maria.is_crossbuyer

    stats = agregar_ativos_por_setor(cruzados)
    assert stats[0].registrados_base_ancora == 1
    assert stats[0].total_crossbuyers == 0


def test_nomes_base_ancora_ignora_brindes(linha_marca, ler_marca):
    linhas = ler_marca(
        [linha_marca("Maria"), linha_marca("Ana", tipo="Brinde"), linha_marca("JOSÉ", ciclo="202402")],
        "boticario",
    )

    assert nomes_base_ancora({"boticario": linhas}) == {"maria", "jose"}
