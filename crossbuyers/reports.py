"""
reports.py - Funcoes para geracao de tabelas e relatorios agregados.

Este modulo transforma o resultado do processamento em DataFrames
prontos para exibicao na interface e para exportacao. Valores monetarios
saem em reais (centavos / 100) ou, com em_texto=True, no formato pt-BR.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .constants import (
    FORMATO_NUMERO,
    FORMATO_PERCENTUAL,
    MARCA_ANCORA,
    MARCAS_NOMES,
    MARCAS_NOMES_CURTOS,
    ORDEM_MARCAS,
    REGRAS_DESCRICAO,
)
from .modelos import (
    Cliente,
    DadosRevendedoresAtivos,
    DiagnosticoProcessamento,
    LinhaVenda,
    ResultadoAtividadeSetor,
    ResultadoProcessamento,
)
from .normalizacao import formatar_centavos, formatar_moeda

COLUNAS_DETALHE = [
    "Marca",
    "NomeRevendedora",
    "Setor",
    "CicloCaptacao",
    "CodigoProduto",
    "NomeProduto",
    "QuantidadeItens",
    "ValorPraticado",
    "MeioCaptacao",
    "TipoEntrega",
]


def _valor(centavos: int, em_texto: bool) -> Any:
    return formatar_centavos(centavos) if em_texto else centavos / 100


def _uma_casa(percentual: float) -> float:
    # Meio para cima, como a cobertura da atividade por setor
    return math.floor(percentual * 10 + 0.5) / 10


def _juntar(valores: Iterable[str]) -> str:
    return "; ".join(sorted(v for v in valores if v))


def tabela_resumo_crossbuyers(clientes: Iterable[Cliente], em_texto: bool = False) -> pd.DataFrame:
    """
    Uma linha por cliente: setores, meios, quantidade de marcas, valor e
    itens por marca (na ordem fixa) e totais.
    """
    colunas = (
        ["NomeRevendedora", "Setor", "MeioCaptacao", "QtdMarcas"]
        + [f"{MARCAS_NOMES_CURTOS[m]} (Valor)" for m in ORDEM_MARCAS]
        + [f"{MARCAS_NOMES_CURTOS[m]} (Itens)" for m in ORDEM_MARCAS]
        + ["TotalValor", "TotalItens"]
    )

    linhas = []
    for cliente in clientes:
        valores = [
            _valor(cliente.marcas[m].total_valor, em_texto) if m in cliente.marcas else ""
            for m in ORDEM_MARCAS
        ]
        itens = [
            cliente.marcas[m].total_itens if m in cliente.marcas else ""
            for m in ORDEM_MARCAS
        ]
        linhas.append(
            [
                cliente.nome,
                _juntar(cliente.setores),
                _juntar(cliente.meios_captacao),
                cliente.quantidade_marcas,
            ]
            + valores
            + itens
            + [_valor(cliente.total_valor, em_texto), cliente.total_itens]
        )

    return pd.DataFrame(linhas, columns=colunas)


def _linha_detalhe(linha: LinhaVenda, nome_cliente: str, em_texto: bool) -> List[Any]:
    return [
        MARCAS_NOMES[linha.marca],
        nome_cliente,
        linha.setor,
        linha.ciclo_captacao,
        linha.codigo_produto,
        linha.nome_produto,
        linha.quantidade_itens,
        _valor(linha.valor_centavos, em_texto),
        linha.meio_captacao,
        linha.tipo_entrega,
    ]


def tabela_detalhada_crossbuyers(clientes: Iterable[Cliente], em_texto: bool = False) -> pd.DataFrame:
    """Todas as linhas de Venda de cada cliente, marca a marca."""
    linhas = []
    for cliente in clientes:
        for marca in ORDEM_MARCAS:
            metricas = cliente.marcas.get(marca)
            if metricas is None:
                continue
            for linha in metricas.linhas:
                if linha.is_venda:
                    linhas.append(_linha_detalhe(linha, cliente.nome, em_texto))
    return pd.DataFrame(linhas, columns=COLUNAS_DETALHE)


def tabela_itens_cliente(
    cliente: Cliente,
    marca: Optional[str] = None,
    em_texto: bool = False,
) -> pd.DataFrame:
    """
    Linhas de Venda de um cliente, de uma marca ou de todas.

    Args:
        cliente: Cliente selecionado
        marca: Id da marca (None = consolidado)
        em_texto: Valores no formato pt-BR em vez de numericos
    """
    marcas = [marca] if marca else ORDEM_MARCAS
    linhas = []
    for m in marcas:
        metricas = cliente.marcas.get(m)
        if metricas is None:
            continue
        for linha in metricas.linhas:
            if linha.is_venda:
                linhas.append(_linha_detalhe(linha, cliente.nome, em_texto))
    df = pd.DataFrame(linhas, columns=COLUNAS_DETALHE)
    return df.drop(columns=["NomeRevendedora"])


def tabela_estatisticas_setor(dados: DadosRevendedoresAtivos) -> pd.DataFrame:
    """
    Estatisticas por setor da planilha de ativos.

    Percentuais sao arredondados para uma casa apenas aqui, na apresentacao.
    """
    linhas = []
    for s in dados.estatisticas_setor:
        linha = {
            "Setor": s.setor,
            "Ativos": s.total_ativos,
            "Com Compra": s.total_registrados,
            "Base " + MARCAS_NOMES_CURTOS[MARCA_ANCORA]: s.registrados_base_ancora,
            "Multimarcas": s.total_multimarcas,
            "% Multimarcas": _uma_casa(s.percent_multimarcas),
            "Crossbuyers": s.total_crossbuyers,
            "% Crossbuyers (Base Âncora)": _uma_casa(s.percent_multimarcas_base_ancora),
            "Faturados": s.total_faturados,
            "Multimarcas Faturados": s.multimarcas_faturados,
            "% Multimarcas Faturados": _uma_casa(s.percent_multimarcas_faturados),
            "Gap Registrado x Faturado": s.gap_registrado_faturado,
        }
        for marca in ORDEM_MARCAS:
            linha[f"{MARCAS_NOMES_CURTOS[marca]} (Valor)"] = s.valor_por_marca[marca] / 100
        linhas.append(linha)
    return pd.DataFrame(linhas)


def tabela_revendedores_ativos(dados: DadosRevendedoresAtivos, em_texto: bool = False) -> pd.DataFrame:
    """Um registro da planilha de ativos por linha, com as marcas do ciclo."""
    linhas = []
    for r in dados.revendedores:
        linhas.append({
            "CodigoRevendedora": r.codigo_original,
            "NomeRevendedora": r.nome,
            "Setor": r.setor,
            "QtdMarcas": r.quantidade_marcas,
            "Marcas": ", ".join(MARCAS_NOMES_CURTOS[m] for m in r.marcas),
            "Comprou": "Sim" if r.tem_venda_registrada else "Não",
            "Multimarcas": "Sim" if r.is_multimarcas else "Não",
            "Crossbuyer": "Sim" if r.is_crossbuyer else "Não",
            "Faturado": "Sim" if r.tem_venda_faturada else "Não",
            "TotalValor": _valor(r.total_valor, em_texto),
            "TotalItens": r.total_itens,
        })
    return pd.DataFrame(linhas)


def tabela_diagnostico_ativos(dados: DadosRevendedoresAtivos) -> pd.DataFrame:
    """Trilha de auditoria da planilha de ativos e do cruzamento por setor."""
    leitura = dados.diagnostico_leitura
    join = dados.diagnostico_join
    setores = sorted(set(leitura.por_setor if leitura else {}) | set(join.por_setor if join else {}))

    linhas = []
    for setor in setores:
        contagem = leitura.por_setor.get(setor) if leitura else None
        cruzamento = join.por_setor.get(setor) if join else None
        linhas.append({
            "Setor": setor,
            "Recebidos": contagem.recebidos if contagem else (cruzamento.total if cruzamento else 0),
            "Excluidos": contagem.excluidos if contagem else 0,
            "Processados": cruzamento.total if cruzamento else 0,
            "Com Compra": cruzamento.com_compra if cruzamento else 0,
        })
    return pd.DataFrame(linhas, columns=["Setor", "Recebidos", "Excluidos", "Processados", "Com Compra"])


def resumo_diagnostico_leitura(dados: DadosRevendedoresAtivos) -> List[Dict[str, Any]]:
    """Contagens globais da leitura da planilha de ativos (label, valor)."""
    leitura = dados.diagnostico_leitura
    if leitura is None:
        return []
    return [
        {"label": "Linhas recebidas", "valor": leitura.total_linhas},
        {"label": "Código vazio", "valor": leitura.excluidos_codigo_vazio},
        {"label": "Nome vazio", "valor": leitura.excluidos_nome_vazio},
        {"label": "Código duplicado", "valor": leitura.excluidos_codigo_duplicado},
        {"label": "Erro de leitura", "valor": leitura.excluidos_erro},
        {"label": "Registros válidos", "valor": leitura.registros_validos},
    ]


def tabela_violacoes_ancora(diagnostico: DiagnosticoProcessamento) -> pd.DataFrame:
    """Clientes com 2+ marcas sem a marca ancora (excluidos dos crossbuyers)."""
    linhas = [
        {
            "NomeRevendedora": v.nome,
            "QtdMarcas": len(v.marcas),
            "Marcas": ", ".join(MARCAS_NOMES_CURTOS[m] for m in v.marcas),
        }
        for v in diagnostico.violacoes_ancora
    ]
    return pd.DataFrame(linhas, columns=["NomeRevendedora", "QtdMarcas", "Marcas"])


def tabela_atividade_setor(atividade: ResultadoAtividadeSetor) -> pd.DataFrame:
    """Atividade calculada x ranking oficial por setor, com linha de totais."""
    colunas = [
        "Setor",
        "Revendedores (Calc)", "Revendedores (Ranking)", "Revendedores (Dif)", "Revendedores (%)",
        "Itens (Calc)", "Itens (Ranking)", "Itens (Dif)", "Itens (%)",
        "Valor (Calc)", "Valor (Ranking)", "Valor (Dif)", "Valor (%)",
    ]

    def _linha(setor, l) -> List[Any]:
        return [
            setor,
            l.revendedores_calc, l.revendedores_ranking, l.revendedores_diff, l.revendedores_cobertura,
            l.itens_calc, l.itens_ranking, l.itens_diff, l.itens_cobertura,
            l.valor_calc / 100, l.valor_ranking / 100, l.valor_diff / 100, l.valor_cobertura,
        ]

    linhas = [_linha(l.setor, l) for l in atividade.linhas]
    if atividade.linhas:
        linhas.append(_linha("TOTAL", atividade.totais))
    return pd.DataFrame(linhas, columns=colunas)


def gerar_resumo_metricas(resultado: ResultadoProcessamento) -> List[Dict[str, Any]]:
    """
    Gera lista de metricas formatadas para exibicao em cards.

    Args:
        resultado: Resultado do processamento

    Returns:
        Lista de dicionarios com label, valor e formato
    """
    stats = resultado.estatisticas
    percentual = (
        stats.total_crossbuyers / stats.total_clientes_base * 100
        if stats.total_clientes_base > 0 else 0
    )
    marca_top = stats.marca_maior_sobreposicao
    cards = [
        {
            "label": f"Base {MARCAS_NOMES_CURTOS[MARCA_ANCORA]}",
            "valor": stats.total_clientes_base,
            "formato": "numero",
            "icone": ":busts_in_silhouette:",
        },
        {
            "label": "Crossbuyers",
            "valor": stats.total_crossbuyers,
            "formato": "numero",
            "icone": ":star:",
        },
        {
            "label": "% Crossbuyers",
            "valor": percentual,
            "formato": "percentual",
            "icone": ":chart_with_upwards_trend:",
        },
        {
            "label": "Maior Sobreposição",
            "valor": MARCAS_NOMES[marca_top] if marca_top else "-",
            "formato": "texto",
            "icone": ":link:",
        },
    ]

    dados = resultado.dados_ativos
    if dados is not None:
        cards.extend([
            {
                "label": "Revendedores Ativos",
                "valor": dados.total_ativos,
                "formato": "numero",
                "icone": ":clipboard:",
            },
            {
                "label": "Multimarcas (Ativos)",
                "valor": dados.total_multimarcas,
                "formato": "numero",
                "icone": ":package:",
            },
        ])
    return cards


def formatar_valor(valor: Any, formato: str) -> str:
    """
    Formata um valor de acordo com o tipo especificado.

    Args:
        valor: Valor a ser formatado (moeda em centavos)
        formato: Tipo de formato ('numero', 'moeda', 'percentual', 'texto')

    Returns:
        String formatada
    """
    if valor is None or (not isinstance(valor, str) and pd.isna(valor)):
        return "-"

    if formato == "moeda":
        return formatar_moeda(valor)
    elif formato == "percentual":
        return FORMATO_PERCENTUAL.format(valor).replace(".", ",")
    elif formato == "numero":
        return FORMATO_NUMERO.format(valor).replace(",", ".")
    else:
        return str(valor)


def descricao_regra(regra: Optional[str]) -> str:
    """Texto explicativo da regra de analise aplicada."""
    return REGRAS_DESCRICAO.get(regra or "", "")
