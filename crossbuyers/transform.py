"""
transform.py - Agregacao e calculo das metricas de crossbuyers.

Este modulo contem:
- Selecao da regra de analise conforme os arquivos enviados
- Processamento de todas as marcas (clientes, crossbuyers, estatisticas)
- Estatisticas por setor da planilha de revendedores ativos
- Comparacao da atividade por setor com o ranking oficial
- Filtros e ordenacao de clientes para a interface
- Orquestracao completa a partir das linhas lidas dos arquivos
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .constants import (
    MARCA_ANCORA,
    MARCAS_NOMES,
    NAO_INFORMADO,
    ORDEM_MARCAS,
    REGRA_GERAL_TRANSACIONAL,
    REGRA_ROSTER_ATIVOS,
    REGRA_ROSTER_FATURAMENTO,
    REGRA_UNIAO_MARCAS,
    TIPO_VENDA,
)
from .join import construir_clientes, cruzar_revendedores_ativos, nomes_base_ancora
from .modelos import (
    Analise,
    Cliente,
    DadosRanking,
    DadosRevendedoresAtivos,
    EstatisticasPainel,
    EstatisticasSetor,
    LinhaAtividadeSetor,
    LinhaVenda,
    ResultadoAtividadeSetor,
    ResultadoProcessamento,
    RevendedorAtividade,
    RevendedorAtivo,
    RevendedorCruzado,
    TotaisAtividadeSetor,
    ViolacaoAncora,
)
from .normalizacao import chave_identidade, normalizar_para_comparacao
from .parsing import (
    ativos_geral_para_roster,
    ciclos_roster,
    derivar_ativos_geral,
    ler_planilha_ativos,
    ler_planilha_geral,
    ler_planilha_marca,
)

logger = logging.getLogger(__name__)

LinhasPorMarca = Mapping[str, Sequence[LinhaVenda]]


# =============================================================================
# REGRAS DE ANALISE
# =============================================================================
def selecionar_regra(
    possui_roster: bool,
    origem_geral: bool = False,
    possui_faturamento: bool = False,
) -> str:
    """
    Escolhe a regra de "ativo" e "crossbuyer" conforme os arquivos enviados.

    Args:
        possui_roster: Ha planilha de ativos (ou ativos derivados da Geral)
        origem_geral: Os ativos vieram da planilha Geral
        possui_faturamento: Alguma planilha de marca trouxe colunas de faturamento

    Returns:
        Uma das constantes REGRA_*
    """
    if not possui_roster:
        return REGRA_UNIAO_MARCAS
    if origem_geral:
        return REGRA_GERAL_TRANSACIONAL
    if possui_faturamento:
        return REGRA_ROSTER_FATURAMENTO
    return REGRA_ROSTER_ATIVOS


# =============================================================================
# CROSSBUYERS E ESTATISTICAS DO PAINEL
# =============================================================================
def is_crossbuyer(cliente: Cliente) -> bool:
    """2+ marcas com Venda, incluindo obrigatoriamente a marca ancora."""
    return cliente.quantidade_marcas >= 2 and cliente.possui_marca(MARCA_ANCORA)


def filtrar_crossbuyers(clientes: Iterable[Cliente]) -> Tuple[List[Cliente], List[ViolacaoAncora]]:
    """
    Seleciona os crossbuyers aplicando a verificacao da marca ancora.

    Clientes com 2+ marcas sem a marca ancora sao excluidos e devolvidos
    como violacoes, alem de registrados no log.

    Returns:
        Tupla (crossbuyers, violacoes)
    """
    crossbuyers = []
    violacoes = []
    for cliente in clientes:
        if cliente.quantidade_marcas < 2:
            continue
        if not cliente.possui_marca(MARCA_ANCORA):
            marcas = list(cliente.marcas.keys())
            logger.warning(
                'Crossbuyer filtrado: "%s" tem %d marcas sem %s: %s',
                cliente.nome, cliente.quantidade_marcas,
                MARCAS_NOMES[MARCA_ANCORA], ", ".join(marcas),
            )
            violacoes.append(ViolacaoAncora(
                nome=cliente.nome, nome_normalizado=cliente.nome_normalizado, marcas=marcas
            ))
            continue
        crossbuyers.append(cliente)
    return crossbuyers, violacoes


def calcular_estatisticas_painel(
    crossbuyers: Sequence[Cliente],
    total_clientes_base: int,
) -> EstatisticasPainel:
    """
    Calcula as estatisticas dos cards e graficos do painel.

    - distribuicao_marcas: crossbuyers por quantidade de marcas (2..N)
    - sobreposicao_marcas: crossbuyers que compraram cada marca
    - marca_maior_sobreposicao: marca nao ancora com maior sobreposicao
      (empate: primeira na ordem fixa)
    - distribuicao_setores: crossbuyers por setor (cliente em varios
      setores conta em cada um)
    """
    stats = EstatisticasPainel(
        total_clientes_base=total_clientes_base,
        total_crossbuyers=len(crossbuyers),
        distribuicao_marcas={n: 0 for n in range(2, len(ORDEM_MARCAS) + 1)},
        sobreposicao_marcas={m: 0 for m in ORDEM_MARCAS},
    )

    setores: Dict[str, int] = {}
    for cliente in crossbuyers:
        stats.distribuicao_marcas[cliente.quantidade_marcas] = (
            stats.distribuicao_marcas.get(cliente.quantidade_marcas, 0) + 1
        )
        for marca in cliente.marcas:
            stats.sobreposicao_marcas[marca] += 1
        for setor in cliente.setores:
            if setor:
                setores[setor] = setores.get(setor, 0) + 1

    maior = 0
    for marca in ORDEM_MARCAS:
        if marca == MARCA_ANCORA:
            continue
        if stats.sobreposicao_marcas[marca] > maior:
            maior = stats.sobreposicao_marcas[marca]
            stats.marca_maior_sobreposicao = marca

    stats.distribuicao_setores = {s: setores[s] for s in sorted(setores)}
    return stats


# =============================================================================
# ESTATISTICAS POR SETOR (PLANILHA DE ATIVOS)
# =============================================================================
def _percentual(parte: int, total: int) -> float:
    return (parte / total) * 100 if total > 0 else 0.0


def agregar_ativos_por_setor(cruzados: Sequence[RevendedorCruzado]) -> List[EstatisticasSetor]:
    """
    Agrega os revendedores cruzados por setor.

    total_ativos conta todos os registros da planilha de ativos do setor,
    com ou sem compra. percent_multimarcas = multimarcas / total_ativos;
    percent_multimarcas_base_ancora = crossbuyers / registrados na ancora.
    Percentuais ficam sem arredondamento.

    Returns:
        Estatisticas ordenadas pelo nome do setor
    """
    por_setor: Dict[str, EstatisticasSetor] = {}

    for r in cruzados:
        setor = r.setor or NAO_INFORMADO
        stats = por_setor.get(setor)
        if stats is None:
            stats = EstatisticasSetor(setor=setor)
            por_setor[setor] = stats

        stats.total_ativos += 1
        stats.revendedores.append(r)

        if r.tem_venda_registrada:
            stats.total_registrados += 1
            if r.existe_na_ancora:
                stats.registrados_base_ancora += 1
        if r.is_multimarcas:
            stats.total_multimarcas += 1
        if r.is_crossbuyer:
            stats.total_crossbuyers += 1

        if r.tem_venda_faturada:
            stats.total_faturados += 1
            if r.existe_na_ancora:
                stats.faturados_base_ancora += 1
        if r.is_multimarcas_faturado:
            stats.multimarcas_faturados += 1

        for marca, metricas in r.marcas.items():
            stats.valor_por_marca[marca] += metricas.total_valor
            stats.itens_por_marca[marca] += metricas.total_itens

    for stats in por_setor.values():
        stats.percent_multimarcas = _percentual(stats.total_multimarcas, stats.total_ativos)
        stats.percent_multimarcas_base_ancora = _percentual(
            stats.total_crossbuyers, stats.registrados_base_ancora
        )
        stats.percent_multimarcas_faturados = _percentual(
            stats.multimarcas_faturados, stats.total_faturados
        )
        stats.gap_registrado_faturado = stats.total_registrados - stats.total_faturados

    return [por_setor[s] for s in sorted(por_setor)]


def montar_dados_ativos(
    revendedores: Sequence[RevendedorAtivo],
    linhas_por_marca: LinhasPorMarca,
    ciclo: Optional[str] = None,
) -> DadosRevendedoresAtivos:
    """Cruza a planilha de ativos com as marcas e agrega por setor."""
    cruzados, diagnostico, inconsistencias = cruzar_revendedores_ativos(
        revendedores, linhas_por_marca, ciclo
    )
    return DadosRevendedoresAtivos(
        revendedores=cruzados,
        estatisticas_setor=agregar_ativos_por_setor(cruzados),
        ciclo_selecionado=ciclo,
        ciclos_disponiveis=ciclos_roster(revendedores),
        total_ativos=len(cruzados),
        total_com_compra=sum(1 for r in cruzados if r.tem_venda_registrada),
        total_ativos_base_ancora=sum(1 for r in cruzados if r.existe_na_ancora),
        total_multimarcas=sum(1 for r in cruzados if r.is_multimarcas),
        total_crossbuyers=sum(1 for r in cruzados if r.is_crossbuyer),
        inconsistencias=inconsistencias,
        diagnostico_join=diagnostico,
    )


# =============================================================================
# PROCESSAMENTO PRINCIPAL
# =============================================================================
def processar_todas_marcas(
    linhas_por_marca: LinhasPorMarca,
    revendedores: Optional[Sequence[RevendedorAtivo]] = None,
    ciclo: Optional[str] = None,
    origem_geral: bool = False,
) -> ResultadoProcessamento:
    """
    Processa as linhas de todas as marcas e gera a analise de crossbuyers.

    Sem planilha de ativos, os clientes sao a uniao das vendas de todas as
    marcas. Com planilha de ativos, tambem monta as estatisticas por setor
    dos revendedores ativos para o ciclo selecionado.

    Args:
        linhas_por_marca: Linhas validas de cada planilha de marca
        revendedores: Registros da planilha de ativos (opcional)
        ciclo: Ciclo de captacao para o cruzamento com a planilha de ativos
        origem_geral: Os registros de ativos foram derivados da planilha Geral

    Returns:
        ResultadoProcessamento; sucesso=False se a marca ancora nao tiver dados
    """
    possui_roster = revendedores is not None
    possui_faturamento = any(
        linha.faturamento is not None
        for linhas in linhas_por_marca.values()
        for linha in linhas
    )
    resultado = ResultadoProcessamento(
        regra=selecionar_regra(possui_roster, origem_geral, possui_faturamento)
    )

    if not linhas_por_marca.get(MARCA_ANCORA):
        resultado.erros.append(
            f"Nenhum dado encontrado para {MARCAS_NOMES[MARCA_ANCORA]} (planilha obrigatória)"
        )
        return resultado

    for marca in ORDEM_MARCAS:
        if marca in linhas_por_marca:
            linhas = linhas_por_marca[marca]
            resultado.diagnostico.linhas_por_marca[marca] = len(linhas)
            resultado.diagnostico.linhas_venda_por_marca[marca] = sum(
                1 for linha in linhas if linha.tipo == TIPO_VENDA
            )

    clientes, nomes_ancora = construir_clientes(linhas_por_marca)
    resultado.clientes = list(clientes.values())
    resultado.diagnostico.clientes_sem_ancora = sum(
        1 for c in resultado.clientes if not c.possui_marca(MARCA_ANCORA)
    )

    crossbuyers, violacoes = filtrar_crossbuyers(resultado.clientes)
    resultado.crossbuyers = crossbuyers
    resultado.diagnostico.violacoes_ancora = violacoes
    if violacoes:
        resultado.avisos.append(
            f"{len(violacoes)} revendedora(s) com 2+ marcas sem "
            f"{MARCAS_NOMES[MARCA_ANCORA]} foram excluídas dos crossbuyers"
        )

    resultado.estatisticas = calcular_estatisticas_painel(crossbuyers, len(nomes_ancora))

    ciclos, setores, meios, entregas = set(), set(), set(), set()
    for cliente in resultado.clientes:
        ciclos.update(cliente.ciclos)
        setores.update(cliente.setores)
        meios.update(cliente.meios_captacao)
        entregas.update(cliente.tipos_entrega)
    resultado.ciclos_disponiveis = sorted(ciclos)
    resultado.setores_disponiveis = sorted(setores)
    resultado.meios_captacao_disponiveis = sorted(meios)
    resultado.tipos_entrega_disponiveis = sorted(entregas)

    if possui_roster:
        resultado.dados_ativos = montar_dados_ativos(revendedores, linhas_por_marca, ciclo)

    logger.info(
        "Regra %s: %d clientes, %d crossbuyers (base %s: %d)",
        resultado.regra, len(resultado.clientes), len(crossbuyers),
        MARCAS_NOMES[MARCA_ANCORA], len(nomes_ancora),
    )
    resultado.sucesso = True
    return resultado


# =============================================================================
# CICLOS
# =============================================================================
def ciclos_disponiveis(linhas_por_marca: LinhasPorMarca) -> List[str]:
    """Ciclos de captacao das planilhas de marca (sem "Não informado")."""
    ciclos = set()
    for linhas in linhas_por_marca.values():
        for linha in linhas:
            if linha.ciclo_captacao and linha.ciclo_captacao != NAO_INFORMADO:
                ciclos.add(linha.ciclo_captacao)
    return sorted(ciclos)


def ciclo_padrao(
    linhas_por_marca: LinhasPorMarca,
    revendedores: Optional[Sequence[RevendedorAtivo]] = None,
) -> Optional[str]:
    """
    Ciclo selecionado por padrao: o primeiro, em ordem, entre os ciclos da
    marca ancora e os da planilha de ativos.
    """
    ciclos = set(ciclos_disponiveis({MARCA_ANCORA: linhas_por_marca.get(MARCA_ANCORA, [])}))
    if revendedores:
        ciclos.update(ciclos_roster(revendedores))
    return min(ciclos) if ciclos else None


# =============================================================================
# ATIVIDADE POR SETOR x RANKING
# =============================================================================
def _cobertura(calculado: int, oficial: int) -> float:
    # Percentual com uma casa decimal; sem valor oficial, 100 se houver calculado
    if oficial > 0:
        return math.floor(calculado / oficial * 1000 + 0.5) / 10
    return 100.0 if calculado > 0 else 0.0


def construir_atividade_setor(
    linhas_por_marca: LinhasPorMarca,
    ranking: Optional[DadosRanking],
    ciclo: str,
    marcas_selecionadas: Optional[Iterable[str]] = None,
    nomes_base: Optional[Set[str]] = None,
) -> ResultadoAtividadeSetor:
    """
    Compara os revendedores ativos calculados por setor com o ranking oficial.

    Ativo = linha de Venda no ciclo selecionado, em uma das marcas
    selecionadas, de revendedora presente na base da marca ancora. Cada
    revendedora fica no setor em que apareceu primeiro.

    Args:
        linhas_por_marca: Linhas validas de cada planilha de marca
        ranking: Totais oficiais por setor (opcional)
        ciclo: Ciclo de captacao selecionado
        marcas_selecionadas: Marcas consideradas (padrao: todas enviadas)
        nomes_base: Base da marca ancora (padrao: calculada das linhas)

    Returns:
        ResultadoAtividadeSetor com linhas ordenadas por setor e totais
    """
    marcas = [m for m in ORDEM_MARCAS if m in linhas_por_marca]
    if marcas_selecionadas is not None:
        selecionadas = set(marcas_selecionadas)
        marcas = [m for m in marcas if m in selecionadas]

    resultado = ResultadoAtividadeSetor(ciclo_selecionado=ciclo or "", marcas_selecionadas=marcas)
    if not ciclo:
        resultado.erros.append("Selecione um ciclo para calcular a atividade")
        return resultado

    if nomes_base is None:
        nomes_base = nomes_base_ancora(linhas_por_marca)

    ativos: Dict[str, RevendedorAtividade] = {}
    for marca in marcas:
        for linha in linhas_por_marca[marca]:
            if linha.ciclo_captacao != ciclo or linha.tipo != TIPO_VENDA:
                continue
            chave = linha.nome_revendedora_normalizado
            if chave not in nomes_base:
                continue
            ativo = ativos.get(chave)
            if ativo is None:
                ativo = RevendedorAtividade(
                    nome=linha.nome_revendedora,
                    nome_normalizado=chave,
                    setor=linha.setor,
                    setor_normalizado=normalizar_para_comparacao(linha.setor),
                )
                ativos[chave] = ativo
            ativo.itens += linha.quantidade_itens
            ativo.valor += linha.valor_centavos
            ativo.marcas.add(marca)

    linhas: Dict[str, LinhaAtividadeSetor] = {}
    for ativo in ativos.values():
        linha = linhas.get(ativo.setor_normalizado)
        if linha is None:
            linha = LinhaAtividadeSetor(setor=ativo.setor, setor_normalizado=ativo.setor_normalizado)
            linha.possui_detalhe = True
            linhas[ativo.setor_normalizado] = linha
        linha.revendedores.append(ativo)
        linha.revendedores_calc += 1
        linha.itens_calc += ativo.itens
        linha.valor_calc += ativo.valor

    if ranking is not None:
        for chave, setor_ranking in ranking.setores.items():
            linha = linhas.get(chave)
            if linha is None:
                linha = LinhaAtividadeSetor(setor=setor_ranking.setor, setor_normalizado=chave)
                linhas[chave] = linha
            linha.possui_ranking = True
            linha.revendedores_ranking = setor_ranking.quantidade_revendedor
            linha.itens_ranking = setor_ranking.quantidade_itens
            linha.valor_ranking = setor_ranking.valor_centavos

    for linha in linhas.values():
        linha.revendedores_diff = linha.revendedores_calc - linha.revendedores_ranking
        linha.itens_diff = linha.itens_calc - linha.itens_ranking
        linha.valor_diff = linha.valor_calc - linha.valor_ranking
        linha.revendedores_cobertura = _cobertura(linha.revendedores_calc, linha.revendedores_ranking)
        linha.itens_cobertura = _cobertura(linha.itens_calc, linha.itens_ranking)
        linha.valor_cobertura = _cobertura(linha.valor_calc, linha.valor_ranking)

    resultado.linhas = sorted(linhas.values(), key=lambda l: (l.setor.lower(), l.setor))
    resultado.totais = _calcular_totais_atividade(resultado.linhas, ranking)
    resultado.sucesso = True
    return resultado


def _calcular_totais_atividade(
    linhas: Sequence[LinhaAtividadeSetor],
    ranking: Optional[DadosRanking],
) -> TotaisAtividadeSetor:
    unicos = set()
    totais = TotaisAtividadeSetor(quantidade_setores=len(linhas))
    for linha in linhas:
        unicos.update(r.nome_normalizado for r in linha.revendedores)
        totais.itens_calc += linha.itens_calc
        totais.valor_calc += linha.valor_calc
        if linha.revendedores_diff or linha.itens_diff or linha.valor_diff:
            totais.setores_com_diff += 1

    totais.revendedores_calc = len(unicos)
    if ranking is not None:
        totais.revendedores_ranking = ranking.total_revendedores
        totais.itens_ranking = ranking.total_itens
        totais.valor_ranking = ranking.total_valor

    totais.revendedores_diff = totais.revendedores_calc - totais.revendedores_ranking
    totais.itens_diff = totais.itens_calc - totais.itens_ranking
    totais.valor_diff = totais.valor_calc - totais.valor_ranking
    totais.revendedores_cobertura = _cobertura(totais.revendedores_calc, totais.revendedores_ranking)
    totais.itens_cobertura = _cobertura(totais.itens_calc, totais.itens_ranking)
    totais.valor_cobertura = _cobertura(totais.valor_calc, totais.valor_ranking)
    return totais


# =============================================================================
# FILTROS E ORDENACAO (INTERFACE)
# =============================================================================
@dataclass
class FiltrosClientes:
    busca_nome: str = ""
    marcas: Set[str] = field(default_factory=set)
    quantidade_minima_marcas: int = 0
    ciclos: Set[str] = field(default_factory=set)
    setores: Set[str] = field(default_factory=set)
    meios_captacao: Set[str] = field(default_factory=set)
    tipos_entrega: Set[str] = field(default_factory=set)


def aplicar_filtros_clientes(
    clientes: Iterable[Cliente],
    filtros: FiltrosClientes,
) -> List[Cliente]:
    """
    Filtra clientes para exibicao.

    Todas as marcas filtradas precisam estar presentes; para ciclos, setores,
    meios e entregas basta um valor em comum. Filtros vazios nao restringem.
    """
    busca = chave_identidade(filtros.busca_nome)
    filtrados = []
    for cliente in clientes:
        if busca and busca not in cliente.nome_normalizado:
            continue
        if filtros.marcas and not all(cliente.possui_marca(m) for m in filtros.marcas):
            continue
        if cliente.quantidade_marcas < filtros.quantidade_minima_marcas:
            continue
        if filtros.ciclos and not (filtros.ciclos & cliente.ciclos):
            continue
        if filtros.setores and not (filtros.setores & cliente.setores):
            continue
        if filtros.meios_captacao and not (filtros.meios_captacao & cliente.meios_captacao):
            continue
        if filtros.tipos_entrega and not (filtros.tipos_entrega & cliente.tipos_entrega):
            continue
        filtrados.append(cliente)
    return filtrados


_CHAVES_ORDENACAO = {
    "marcas": lambda c: c.quantidade_marcas,
    "valor": lambda c: c.total_valor,
    "itens": lambda c: c.total_itens,
    "nome": lambda c: c.nome_normalizado,
}


def ordenar_clientes(
    clientes: Iterable[Cliente],
    campo: str = "marcas",
    decrescente: bool = True,
) -> List[Cliente]:
    """Ordena clientes por marcas, valor, itens ou nome (desempate pelo nome)."""
    chave = _CHAVES_ORDENACAO[campo]
    ordenados = sorted(clientes, key=lambda c: c.nome_normalizado)
    return sorted(ordenados, key=chave, reverse=decrescente)


def resumo_marcas_cliente(cliente: Cliente) -> List[Dict[str, Any]]:
    """Valor (centavos) e itens por marca, na ordem fixa das marcas."""
    return [
        {
            "marca": marca,
            "valor": cliente.marcas[marca].total_valor,
            "itens": cliente.marcas[marca].total_itens,
        }
        for marca in ORDEM_MARCAS
        if marca in cliente.marcas
    ]


# =============================================================================
# ORQUESTRACAO
# =============================================================================
def analisar_arquivos(
    linhas_marcas: Mapping[str, Sequence[Dict[str, Any]]],
    linhas_ativos: Optional[Sequence[Dict[str, Any]]] = None,
    linhas_geral: Optional[Sequence[Dict[str, Any]]] = None,
    ciclo: Optional[str] = None,
) -> Analise:
    """
    Executa a analise completa a partir das linhas lidas de cada arquivo.

    Arquivos com erro de leitura ficam fora da agregacao (os erros sao
    registrados em diagnostico.erros_por_arquivo) e os demais seguem. Se a
    planilha de ativos e a Geral forem enviadas, a de ativos prevalece.

    Args:
        linhas_marcas: Linhas de cada planilha de marca, por id da marca
        linhas_ativos: Linhas da planilha de revendedores ativos (opcional)
        linhas_geral: Linhas da planilha Geral (opcional)
        ciclo: Ciclo selecionado (None = ciclo padrao)

    Returns:
        Analise com as leituras e o ResultadoProcessamento
    """
    leituras = {}
    for marca in ORDEM_MARCAS:
        if marca in linhas_marcas:
            leituras[marca] = ler_planilha_marca(linhas_marcas[marca], marca)

    erros_por_arquivo = {}
    avisos = []
    for marca, leitura in leituras.items():
        if not leitura.sucesso:
            erros_por_arquivo[MARCAS_NOMES[marca]] = list(leitura.erros)
            logger.warning("Planilha %s fora da agregacao: %s", marca, "; ".join(leitura.erros))

    linhas_por_marca = {m: l.linhas for m, l in leituras.items() if l.sucesso}

    revendedores = None
    origem_geral = False
    leitura_ativos = None
    leitura_geral = None
    derivacao = None

    if linhas_ativos is not None:
        leitura_ativos = ler_planilha_ativos(linhas_ativos)
        avisos.extend(leitura_ativos.avisos)
        if leitura_ativos.sucesso:
            revendedores = leitura_ativos.revendedores
        else:
            erros_por_arquivo["Revendedores ativos"] = list(leitura_ativos.erros)
            logger.warning("Planilha de ativos ignorada: %s", "; ".join(leitura_ativos.erros))

    if linhas_geral is not None:
        leitura_geral = ler_planilha_geral(linhas_geral)
        avisos.extend(leitura_geral.avisos)
        if not leitura_geral.sucesso:
            erros_por_arquivo["Geral"] = list(leitura_geral.erros)
            logger.warning("Planilha Geral ignorada: %s", "; ".join(leitura_geral.erros))
        elif revendedores is None:
            ciclo_geral = ciclo or (
                leitura_geral.ciclos_disponiveis[0] if leitura_geral.ciclos_disponiveis else ""
            )
            ativos, derivacao = derivar_ativos_geral(leitura_geral.transacoes, ciclo_geral)
            revendedores = ativos_geral_para_roster(ativos)
            origem_geral = True
            ciclo = ciclo_geral or None

    if revendedores is not None and ciclo is None:
        ciclo = ciclo_padrao(linhas_por_marca, revendedores)

    resultado = processar_todas_marcas(linhas_por_marca, revendedores, ciclo, origem_geral)
    resultado.avisos.extend(avisos)
    resultado.diagnostico.erros_por_arquivo = erros_por_arquivo
    if resultado.dados_ativos is not None and leitura_ativos is not None and not origem_geral:
        resultado.dados_ativos.diagnostico_leitura = leitura_ativos.diagnostico

    return Analise(
        resultado=resultado,
        leituras_marca=leituras,
        leitura_ativos=leitura_ativos,
        leitura_geral=leitura_geral,
        derivacao_geral=derivacao,
    )
