"""
join.py - Resolucao de identidade de revendedoras entre planilhas.

Dois modos de cruzamento:
- Uniao de marcas (sem planilha de ativos): cada linha de Venda de qualquer
  marca cria/atualiza um Cliente pela chave de identidade do nome.
- Planilha de ativos: cada registro da planilha e ativo por definicao; as
  planilhas de marca apenas enriquecem o registro com as vendas do ciclo.

A chave de identidade e sempre o nome normalizado sem acentos. As
planilhas de marca nao trazem codigo de revendedora confiavel, entao o
cruzamento com a planilha de ativos e feito pelo nome.
"""

import logging
from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .constants import MARCA_ANCORA, NAO_INFORMADO, ORDEM_MARCAS
from .modelos import (
    Cliente,
    ContagemJoinSetor,
    DiagnosticoJoin,
    LinhaVenda,
    MetricasMarca,
    RevendedorAtivo,
    RevendedorCruzado,
)

logger = logging.getLogger(__name__)

LinhasPorMarca = Mapping[str, Sequence[LinhaVenda]]


def _marcas_em_ordem(linhas_por_marca: LinhasPorMarca) -> List[str]:
    return [m for m in ORDEM_MARCAS if m in linhas_por_marca]


def construir_clientes(
    linhas_por_marca: LinhasPorMarca,
) -> Tuple[Dict[str, Cliente], Set[str]]:
    """
    Agrupa as linhas de Venda de todas as marcas por revendedora.

    As marcas sao percorridas na ordem fixa ORDEM_MARCAS. Brindes e doacoes
    nao criam clientes.

    Args:
        linhas_por_marca: Linhas lidas de cada planilha de marca

    Returns:
        Tupla (clientes por chave de identidade, chaves vistas na marca ancora)
    """
    clientes: Dict[str, Cliente] = {}
    nomes_ancora: Set[str] = set()

    for marca in _marcas_em_ordem(linhas_por_marca):
        for linha in linhas_por_marca[marca]:
            if not linha.is_venda:
                continue

            chave = linha.nome_revendedora_normalizado
            cliente = clientes.get(chave)
            if cliente is None:
                cliente = Cliente(nome=linha.nome_revendedora, nome_normalizado=chave)
                clientes[chave] = cliente
            cliente.adicionar(linha)

            if marca == MARCA_ANCORA:
                nomes_ancora.add(chave)

    for cliente in clientes.values():
        cliente.finalizar()

    logger.debug(
        "%d clientes unicos, %d na marca ancora", len(clientes), len(nomes_ancora)
    )
    return clientes, nomes_ancora


def nomes_base_ancora(linhas_por_marca: LinhasPorMarca) -> Set[str]:
    """Chaves das revendedoras com Venda na marca ancora, em qualquer ciclo."""
    return {
        linha.nome_revendedora_normalizado
        for linha in linhas_por_marca.get(MARCA_ANCORA, [])
        if linha.is_venda
    }


def indexar_vendas_por_nome(
    linhas_por_marca: LinhasPorMarca,
    ciclo: Optional[str] = None,
) -> Dict[str, Dict[str, List[LinhaVenda]]]:
    """
    Indice chave de identidade -> marca -> linhas de Venda do ciclo.

    Sem ciclo selecionado, todas as linhas de Venda sao consideradas.
    """
    indice: Dict[str, Dict[str, List[LinhaVenda]]] = {}
    for marca in _marcas_em_ordem(linhas_por_marca):
        for linha in linhas_por_marca[marca]:
            if not linha.is_venda:
                continue
            if ciclo and linha.ciclo_captacao != ciclo:
                continue
            por_marca = indice.setdefault(linha.nome_revendedora_normalizado, {})
            por_marca.setdefault(marca, []).append(linha)
    return indice


def _cruzar_registro(
    revendedor: RevendedorAtivo,
    compras: Mapping[str, List[LinhaVenda]],
    na_base_ancora: bool,
) -> RevendedorCruzado:
    marcas = {
        marca: MetricasMarca.de_linhas(marca, compras[marca])
        for marca in ORDEM_MARCAS
        if compras.get(marca)
    }

    cruzado = RevendedorCruzado(
        codigo=revendedor.codigo,
        codigo_original=revendedor.codigo_original,
        nome=revendedor.nome,
        nome_normalizado=revendedor.nome_normalizado,
        setor=revendedor.setor or NAO_INFORMADO,
        ciclo_captacao=revendedor.ciclo_captacao,
        marcas=marcas,
    )
    cruzado.total_valor = sum(m.total_valor for m in marcas.values())
    cruzado.total_itens = sum(m.total_itens for m in marcas.values())
    # Base ancora considera todos os ciclos; crossbuyer exige a ancora no ciclo
    cruzado.existe_na_ancora = na_base_ancora
    cruzado.tem_venda_registrada = bool(marcas)
    cruzado.is_multimarcas = len(marcas) >= 2
    cruzado.is_crossbuyer = cruzado.is_multimarcas and MARCA_ANCORA in marcas

    marcas_faturadas = [m for m in marcas.values() if m.possui_faturado]
    cruzado.tem_venda_faturada = bool(marcas_faturadas)
    cruzado.is_multimarcas_faturado = len(marcas_faturadas) >= 2
    return cruzado


def cruzar_revendedores_ativos(
    revendedores: Sequence[RevendedorAtivo],
    linhas_por_marca: LinhasPorMarca,
    ciclo: Optional[str] = None,
    nomes_base: Optional[Set[str]] = None,
) -> Tuple[List[RevendedorCruzado], DiagnosticoJoin, List[str]]:
    """
    Cruza a planilha de ativos com as vendas das planilhas de marca.

    Todo registro da planilha de ativos e mantido, com ou sem compras: a
    presenca na planilha define o revendedor ativo. O setor vem sempre da
    planilha de ativos. Uma linha de marca so enriquece o registro se o nome
    normalizado for igual, o ciclo for o selecionado e o tipo for Venda.
    A pertinencia a base da marca ancora independe do ciclo.

    Args:
        revendedores: Registros unicos da planilha de ativos
        linhas_por_marca: Linhas lidas de cada planilha de marca
        ciclo: Ciclo de captacao selecionado (None = todos)
        nomes_base: Chaves da base ancora (None = calcular das linhas)

    Returns:
        Tupla (registros cruzados, diagnostico, inconsistencias)
    """
    if nomes_base is None:
        nomes_base = nomes_base_ancora(linhas_por_marca)
    indice = indexar_vendas_por_nome(linhas_por_marca, ciclo)
    diagnostico = DiagnosticoJoin(total_recebidos=len(revendedores), ciclo_selecionado=ciclo)
    cruzados: List[RevendedorCruzado] = []

    for revendedor in revendedores:
        cruzado = _cruzar_registro(
            revendedor,
            indice.get(revendedor.nome_normalizado, {}),
            revendedor.nome_normalizado in nomes_base,
        )
        cruzados.append(cruzado)

        contagem = diagnostico.por_setor.setdefault(cruzado.setor, ContagemJoinSetor())
        contagem.total += 1
        if cruzado.tem_venda_registrada:
            contagem.com_compra += 1
            diagnostico.com_compra += 1
        else:
            diagnostico.sem_compra += 1

    diagnostico.registros_processados = len(cruzados)

    inconsistencias = []
    repetidos = Counter(r.nome_normalizado for r in revendedores)
    for cruzado in cruzados:
        vezes = repetidos.get(cruzado.nome_normalizado, 0)
        if vezes > 1 and cruzado.tem_venda_registrada:
            inconsistencias.append(
                f'Nome "{cruzado.nome}" (código {cruzado.codigo_original}) aparece em '
                f"{vezes} registros da planilha de ativos; as compras foram atribuídas a todos"
            )

    logger.info(
        "Cruzamento com planilha de ativos (ciclo %s): %d registros, %d com compra",
        ciclo or "todos", diagnostico.registros_processados, diagnostico.com_compra,
    )
    return cruzados, diagnostico, inconsistencias
