"""
app.py - Interface principal Streamlit para Multimarcas Crossbuyers.

Aplicacao para analise de revendedoras que compram em mais de uma marca,
cruzando as planilhas de vendas de cada marca com a base de O Boticario
e, opcionalmente, com a planilha de revendedores ativos (ou a Geral) e
com o ranking oficial por setor.

Autor: Multimarks Analytics
"""

import logging
from io import BytesIO

import pandas as pd
import streamlit as st

# Importar modulos do projeto
from crossbuyers.constants import (
    APP_SUBTITLE,
    APP_TITLE,
    LOG_LEVEL,
    MARCA_ANCORA,
    MARCAS_NOMES,
    MARCAS_NOMES_CURTOS,
    NAO_INFORMADO,
    ORDEM_MARCAS,
)
from crossbuyers.io import DataValidationError, ler_linhas
from crossbuyers.parsing import ler_planilha_ranking
from crossbuyers.transform import (
    FiltrosClientes,
    analisar_arquivos,
    aplicar_filtros_clientes,
    construir_atividade_setor,
    ordenar_clientes,
    resumo_marcas_cliente,
)
from crossbuyers.reports import (
    descricao_regra,
    formatar_valor,
    gerar_resumo_metricas,
    resumo_diagnostico_leitura,
    tabela_atividade_setor,
    tabela_diagnostico_ativos,
    tabela_estatisticas_setor,
    tabela_itens_cliente,
    tabela_resumo_crossbuyers,
    tabela_revendedores_ativos,
    tabela_violacoes_ancora,
)
from crossbuyers.export import (
    exportar_csv,
    exportar_excel,
    exportar_relatorio_crossbuyers,
    gerar_nome_arquivo,
    nome_arquivo_cliente,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

FONTE_NENHUMA = "Nenhuma"
FONTE_ATIVOS = "Planilha de revendedores ativos"
FONTE_GERAL = "Planilha Geral (transacional)"

ORDENACAO = {
    "Quantidade de marcas": "marcas",
    "Valor total": "valor",
    "Total de itens": "itens",
    "Nome": "nome",
}


# =============================================================================
# CONFIGURACAO DA PAGINA
# =============================================================================
st.set_page_config(
    page_title=APP_TITLE,
    page_icon=":chart_with_upwards_trend:",
    layout="wide",
    initial_sidebar_state="expanded"
)


# =============================================================================
# CSS CUSTOMIZADO
# =============================================================================
st.markdown("""
<style>
    /* Estilo para tabelas */
    .dataframe {
        font-size: 0.85em;
    }

    /* Botoes de download */
    .stDownloadButton > button {
        width: 100%;
    }

    /* Tabs */
    .stTabs [data-baseweb="tab-list"] {
        gap: 24px;
    }
    .stTabs [data-baseweb="tab"] {
        height: 50px;
        padding: 10px 20px;
    }
</style>
""", unsafe_allow_html=True)


# =============================================================================
# FUNCOES DE CACHE
# =============================================================================
@st.cache_data(show_spinner=False)
def ler_linhas_cached(conteudo: bytes, nome_arquivo: str):
    """
    Le as linhas da primeira aba de um arquivo com cache pelo conteudo.

    Args:
        conteudo: Bytes do arquivo enviado
        nome_arquivo: Nome do arquivo (define o formato)

    Returns:
        Lista de linhas (cabecalho -> valor)
    """
    return ler_linhas(BytesIO(conteudo), nome_arquivo)


def _ler_upload(arquivo, rotulo: str, erros: dict):
    # Erro de leitura fica registrado e o arquivo sai da analise
    if arquivo is None:
        return None
    try:
        return ler_linhas_cached(arquivo.getvalue(), arquivo.name)
    except DataValidationError as e:
        erros[rotulo] = [str(e)]
        logger.warning("Arquivo %s ignorado: %s", arquivo.name, e)
        return None


def _botoes_download(df: pd.DataFrame, prefixo: str, nome_aba: str, chave: str):
    col_dl1, col_dl2, _ = st.columns([1, 1, 2])
    with col_dl1:
        st.download_button(
            ":arrow_down: CSV",
            data=exportar_csv(df),
            file_name=gerar_nome_arquivo(prefixo, "csv"),
            mime="text/csv",
            key=f"dl_{chave}_csv"
        )
    with col_dl2:
        st.download_button(
            ":arrow_down: Excel",
            data=exportar_excel(df, nome_aba),
            file_name=gerar_nome_arquivo(prefixo, "xlsx"),
            mime=MIME_XLSX,
            key=f"dl_{chave}_xlsx"
        )


# =============================================================================
# ABAS
# =============================================================================
def aba_visao_geral(resultado):
    st.subheader("Metricas Gerais")
    st.caption(descricao_regra(resultado.regra))

    cards = gerar_resumo_metricas(resultado)
    colunas = st.columns(len(cards))
    for coluna, card in zip(colunas, cards):
        with coluna:
            st.metric(
                label=f"{card['icone']} {card['label']}",
                value=formatar_valor(card["valor"], card["formato"])
            )

    st.markdown("---")
    stats = resultado.estatisticas
    col_esq, col_dir = st.columns(2)

    with col_esq:
        st.subheader(":bar_chart: Crossbuyers por Quantidade de Marcas")
        df_dist = pd.DataFrame({
            "Marcas": [f"{k} marcas" for k in stats.distribuicao_marcas],
            "Crossbuyers": list(stats.distribuicao_marcas.values()),
        })
        st.bar_chart(df_dist, x="Marcas", y="Crossbuyers")

    with col_dir:
        st.subheader(":link: Sobreposicao com Cada Marca")
        df_sobre = pd.DataFrame([
            {"Marca": MARCAS_NOMES[m], "Crossbuyers": stats.sobreposicao_marcas.get(m, 0)}
            for m in ORDEM_MARCAS
            if m != MARCA_ANCORA
        ])
        st.dataframe(df_sobre, use_container_width=True, hide_index=True)


def aba_crossbuyers(resultado):
    st.subheader(":star: Crossbuyers")

    with st.expander(":mag: Filtros", expanded=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            busca = st.text_input("Buscar por nome")
            marcas = st.multiselect(
                "Marcas (todas obrigatorias)",
                options=ORDEM_MARCAS,
                format_func=lambda m: MARCAS_NOMES[m]
            )
        with col2:
            minimo = st.slider("Minimo de marcas", min_value=2, max_value=len(ORDEM_MARCAS), value=2)
            ciclos = st.multiselect("Ciclos", options=resultado.ciclos_disponiveis)
        with col3:
            setores = st.multiselect("Setores", options=resultado.setores_disponiveis)
            meios = st.multiselect("Meio de captacao", options=resultado.meios_captacao_disponiveis)
            entregas = st.multiselect("Tipo de entrega", options=resultado.tipos_entrega_disponiveis)

        col_ord1, col_ord2 = st.columns([2, 1])
        with col_ord1:
            ordenacao = st.selectbox("Ordenar por", options=list(ORDENACAO))
        with col_ord2:
            decrescente = st.checkbox("Decrescente", value=True)

    filtros = FiltrosClientes(
        busca_nome=busca,
        marcas=set(marcas),
        quantidade_minima_marcas=minimo,
        ciclos=set(ciclos),
        setores=set(setores),
        meios_captacao=set(meios),
        tipos_entrega=set(entregas),
    )
    clientes = ordenar_clientes(
        aplicar_filtros_clientes(resultado.crossbuyers, filtros),
        ORDENACAO[ordenacao],
        decrescente,
    )

    if not clientes:
        st.info("Nenhum crossbuyer encontrado para os filtros selecionados.")
        return

    st.info(f"Crossbuyers exibidos: **{len(clientes):,}** de {len(resultado.crossbuyers):,}")
    st.dataframe(tabela_resumo_crossbuyers(clientes, em_texto=True), use_container_width=True, hide_index=True)

    col_dl1, col_dl2, col_dl3 = st.columns([1, 1, 2])
    with col_dl1:
        st.download_button(
            ":arrow_down: CSV",
            data=exportar_csv(tabela_resumo_crossbuyers(clientes)),
            file_name=gerar_nome_arquivo("crossbuyers", "csv"),
            mime="text/csv",
            key="dl_cross_csv"
        )
    with col_dl2:
        st.download_button(
            ":arrow_down: Excel (Resumo + Detalhado)",
            data=exportar_relatorio_crossbuyers(clientes),
            file_name=gerar_nome_arquivo("crossbuyers", "xlsx"),
            mime=MIME_XLSX,
            key="dl_cross_xlsx"
        )

    # Detalhe do cliente
    st.markdown("---")
    st.subheader(":bust_in_silhouette: Detalhe do Cliente")
    opcoes = {f"{c.nome} ({c.quantidade_marcas} marcas)": c for c in clientes}
    rotulo = st.selectbox("Selecione um cliente", options=list(opcoes))
    if not rotulo:
        return
    cliente = opcoes[rotulo]

    resumo = resumo_marcas_cliente(cliente)
    colunas = st.columns(len(resumo) + 1)
    for coluna, item in zip(colunas, resumo):
        with coluna:
            st.metric(
                MARCAS_NOMES_CURTOS[item["marca"]],
                formatar_valor(item["valor"], "moeda"),
                f"{item['itens']} itens",
                delta_color="off"
            )
    with colunas[-1]:
        st.metric("Total", formatar_valor(cliente.total_valor, "moeda"), f"{cliente.total_itens} itens", delta_color="off")

    marca = st.selectbox(
        "Itens da marca",
        options=[None] + [item["marca"] for item in resumo],
        format_func=lambda m: "Consolidado" if m is None else MARCAS_NOMES[m]
    )
    df_itens = tabela_itens_cliente(cliente, marca)
    st.dataframe(tabela_itens_cliente(cliente, marca, em_texto=True), use_container_width=True, hide_index=True)
    st.download_button(
        ":arrow_down: CSV do cliente",
        data=exportar_csv(df_itens),
        file_name=nome_arquivo_cliente(cliente, marca),
        mime="text/csv",
        key="dl_cliente_csv"
    )


def aba_setores(resultado):
    st.subheader(":round_pushpin: Crossbuyers por Setor")
    distribuicao = resultado.estatisticas.distribuicao_setores
    if not distribuicao:
        st.info("Sem dados para exibir")
        return
    df = pd.DataFrame({"Setor": list(distribuicao), "Crossbuyers": list(distribuicao.values())})
    st.bar_chart(df, x="Setor", y="Crossbuyers")
    st.dataframe(df, use_container_width=True, hide_index=True)
    _botoes_download(df, "crossbuyers_setor", "Setores", "setores")


def aba_ativos(analise):
    dados = analise.resultado.dados_ativos
    st.subheader(":clipboard: Revendedores Ativos por Setor")
    st.caption(f"Ciclo selecionado: {dados.ciclo_selecionado or 'todos'}")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Ativos", formatar_valor(dados.total_ativos, "numero"))
    with col2:
        st.metric("Com compra", formatar_valor(dados.total_com_compra, "numero"))
    with col3:
        st.metric("Multimarcas", formatar_valor(dados.total_multimarcas, "numero"))
    with col4:
        st.metric("Crossbuyers", formatar_valor(dados.total_crossbuyers, "numero"))

    for inconsistencia in dados.inconsistencias:
        st.warning(inconsistencia)

    df_setor = tabela_estatisticas_setor(dados)
    st.dataframe(df_setor, use_container_width=True, hide_index=True)
    _botoes_download(df_setor, "ativos_setor", "Setores", "ativos_setor")

    st.markdown("---")
    st.subheader("Revendedores")
    df_rev = tabela_revendedores_ativos(dados)
    st.dataframe(tabela_revendedores_ativos(dados, em_texto=True), use_container_width=True, hide_index=True)
    _botoes_download(df_rev, "revendedores_ativos", "Revendedores", "ativos_rev")

    with st.expander(":mag: Diagnostico da planilha de ativos", expanded=False):
        resumo = resumo_diagnostico_leitura(dados)
        if resumo:
            colunas = st.columns(len(resumo))
            for coluna, item in zip(colunas, resumo):
                with coluna:
                    st.metric(item["label"], item["valor"])
        if analise.derivacao_geral is not None:
            d = analise.derivacao_geral
            st.info(
                f"Planilha Geral: {d.total_transacoes} transacoes, "
                f"{d.transacoes_no_ciclo} no ciclo, {d.transacoes_venda_no_ciclo} vendas no ciclo, "
                f"{d.revendedores_unicos} revendedores unicos"
            )
        st.dataframe(tabela_diagnostico_ativos(dados), use_container_width=True, hide_index=True)


def aba_atividade(analise, linhas_ranking, ciclo):
    st.subheader(":trophy: Atividade por Setor x Ranking")

    ranking = None
    if linhas_ranking is not None:
        leitura = ler_planilha_ranking(linhas_ranking)
        for aviso in leitura.avisos:
            st.info(aviso)
        if leitura.sucesso:
            ranking = leitura.dados
        else:
            for erro in leitura.erros:
                st.error(erro)
    else:
        st.info("Envie a planilha de ranking na barra lateral para comparar com os valores oficiais.")

    linhas_por_marca = analise.linhas_por_marca
    marcas = st.multiselect(
        "Marcas consideradas",
        options=[m for m in ORDEM_MARCAS if m in linhas_por_marca],
        default=[m for m in ORDEM_MARCAS if m in linhas_por_marca],
        format_func=lambda m: MARCAS_NOMES[m]
    )
    atividade = construir_atividade_setor(linhas_por_marca, ranking, ciclo, marcas)
    if not atividade.sucesso:
        for erro in atividade.erros:
            st.warning(erro)
        return

    totais = atividade.totais
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Revendedores", formatar_valor(totais.revendedores_calc, "numero"),
                  f"{formatar_valor(totais.revendedores_cobertura, 'percentual')} do ranking", delta_color="off")
    with col2:
        st.metric("Itens", formatar_valor(totais.itens_calc, "numero"),
                  f"{formatar_valor(totais.itens_cobertura, 'percentual')} do ranking", delta_color="off")
    with col3:
        st.metric("Setores com diferenca", f"{totais.setores_com_diff} de {totais.quantidade_setores}")

    df = tabela_atividade_setor(atividade)
    st.dataframe(df, use_container_width=True, hide_index=True)
    _botoes_download(df, "atividade_setor", "Atividade", "atividade")


def aba_diagnostico(analise):
    resultado = analise.resultado
    st.subheader(":mag: Diagnostico")

    df_linhas = pd.DataFrame([
        {
            "Marca": MARCAS_NOMES[m],
            "Linhas validas": resultado.diagnostico.linhas_por_marca.get(m, 0),
            "Linhas de Venda": resultado.diagnostico.linhas_venda_por_marca.get(m, 0),
        }
        for m in ORDEM_MARCAS
        if m in resultado.diagnostico.linhas_por_marca
    ])
    st.dataframe(df_linhas, use_container_width=True, hide_index=True)
    st.metric("Clientes sem a marca ancora", resultado.diagnostico.clientes_sem_ancora)

    df_violacoes = tabela_violacoes_ancora(resultado.diagnostico)
    if not df_violacoes.empty:
        st.warning(
            f"Revendedoras com 2+ marcas sem {MARCAS_NOMES[MARCA_ANCORA]} "
            "(fora dos crossbuyers):"
        )
        st.dataframe(df_violacoes, use_container_width=True, hide_index=True)

    for marca, leitura in analise.leituras_marca.items():
        if leitura.avisos:
            with st.expander(f"Avisos - {MARCAS_NOMES[marca]} ({len(leitura.avisos)})", expanded=False):
                for aviso in leitura.avisos:
                    st.text(aviso)


# =============================================================================
# INTERFACE PRINCIPAL
# =============================================================================
def main():
    # Header
    st.title(f":chart_with_upwards_trend: {APP_TITLE}")
    st.markdown(f"*{APP_SUBTITLE}*")
    st.markdown("---")

    # ==========================================================================
    # SIDEBAR - Uploads
    # ==========================================================================
    with st.sidebar:
        st.header(":file_folder: Planilhas das Marcas")
        arquivos_marcas = {}
        for marca in ORDEM_MARCAS:
            rotulo = MARCAS_NOMES[marca] + (" (obrigatoria)" if marca == MARCA_ANCORA else "")
            arquivos_marcas[marca] = st.file_uploader(
                rotulo,
                type=['xlsx', 'xls', 'csv'],
                key=f"marca_{marca}"
            )

        st.markdown("---")
        st.header(":clipboard: Revendedores Ativos")
        fonte = st.radio("Fonte", options=[FONTE_NENHUMA, FONTE_ATIVOS, FONTE_GERAL])
        arquivo_ativos = None
        if fonte != FONTE_NENHUMA:
            arquivo_ativos = st.file_uploader(
                fonte,
                type=['xlsx', 'xls', 'csv'],
                key="ativos",
                help="CodigoRevendedora, NomeRevendedora, Setor (e CicloCaptacao ou CicloFaturamento/Tipo na Geral)"
            )

        arquivo_ranking = st.file_uploader(
            "Ranking oficial por setor (opcional)",
            type=['xlsx', 'xls', 'csv'],
            key="ranking"
        )

        st.markdown("---")
        processar = st.button(
            ":gear: Processar Dados",
            type="primary",
            use_container_width=True,
            disabled=arquivos_marcas[MARCA_ANCORA] is None
        )

    # ==========================================================================
    # PROCESSAMENTO
    # ==========================================================================
    if arquivos_marcas[MARCA_ANCORA] is None and 'entrada' not in st.session_state:
        st.info(
            f":point_left: Faca upload da planilha de **{MARCAS_NOMES[MARCA_ANCORA]}** "
            "na barra lateral para comecar."
        )
        st.markdown("""
        ### Formato esperado das planilhas de marca:

        | Setor | NomeRevendedora | CicloCaptacao | CodigoProduto | NomeProduto | Tipo | QuantidadeItens | ValorPraticado | MeioCaptacao | TipoEntrega |
        |-------|-----------------|---------------|---------------|-------------|------|-----------------|----------------|--------------|-------------|
        | Norte | Maria Silva | 202401 | 01234 | Produto X | Venda | 2 | 89,90 | Digital | Retirada na central |
        """)
        return

    if processar:
        with st.spinner("Lendo arquivos..."):
            erros_leitura = {}
            linhas_marcas = {}
            for marca, arquivo in arquivos_marcas.items():
                linhas = _ler_upload(arquivo, MARCAS_NOMES[marca], erros_leitura)
                if linhas is not None:
                    linhas_marcas[marca] = linhas
            linhas_roster = _ler_upload(arquivo_ativos, fonte, erros_leitura)
            st.session_state['entrada'] = {
                'linhas_marcas': linhas_marcas,
                'linhas_ativos': linhas_roster if fonte == FONTE_ATIVOS else None,
                'linhas_geral': linhas_roster if fonte == FONTE_GERAL else None,
                'linhas_ranking': _ler_upload(arquivo_ranking, "Ranking", erros_leitura),
                'erros_leitura': erros_leitura,
            }
            st.session_state.pop('ciclo', None)

    if 'entrada' not in st.session_state:
        st.warning("Clique em 'Processar Dados' para iniciar a analise.")
        return

    entrada = st.session_state['entrada']
    with st.spinner("Processando dados..."):
        analise = analisar_arquivos(
            entrada['linhas_marcas'],
            linhas_ativos=entrada['linhas_ativos'],
            linhas_geral=entrada['linhas_geral'],
            ciclo=st.session_state.get('ciclo'),
        )
    resultado = analise.resultado

    erros = dict(entrada['erros_leitura'])
    erros.update(resultado.diagnostico.erros_por_arquivo)
    for arquivo, mensagens in erros.items():
        for mensagem in mensagens:
            st.error(f":x: {arquivo}: {mensagem}")

    if not resultado.sucesso:
        for erro in resultado.erros:
            st.error(f":x: {erro}")
        return

    if resultado.avisos:
        with st.expander(":information_source: Avisos do processamento", expanded=False):
            for aviso in resultado.avisos:
                st.warning(aviso)

    # ==========================================================================
    # CICLO NA SIDEBAR
    # ==========================================================================
    dados = resultado.dados_ativos
    opcoes_ciclo = [c for c in resultado.ciclos_disponiveis if c != NAO_INFORMADO]
    ciclo_atual = None
    if dados is not None:
        opcoes_ciclo = sorted(set(opcoes_ciclo) | set(dados.ciclos_disponiveis))
        ciclo_atual = dados.ciclo_selecionado
    if analise.leitura_geral is not None and analise.leitura_geral.sucesso:
        opcoes_ciclo = sorted(set(opcoes_ciclo) | set(analise.leitura_geral.ciclos_disponiveis))
    if ciclo_atual is None and opcoes_ciclo:
        escolhido = st.session_state.get('ciclo')
        ciclo_atual = escolhido if escolhido in opcoes_ciclo else opcoes_ciclo[0]

    with st.sidebar:
        st.markdown("---")
        st.header(":calendar: Ciclo")
        if opcoes_ciclo:
            st.selectbox(
                "Ciclo de captacao",
                options=opcoes_ciclo,
                index=opcoes_ciclo.index(ciclo_atual) if ciclo_atual in opcoes_ciclo else 0,
                key='ciclo',
                help="Usado no cruzamento com os ativos e na atividade por setor"
            )
        else:
            st.info("Nenhum ciclo informado nas planilhas.")

    # ==========================================================================
    # TABS PRINCIPAIS
    # ==========================================================================
    nomes_abas = [
        ":bar_chart: Visao Geral",
        ":star: Crossbuyers",
        ":round_pushpin: Setores",
    ]
    if dados is not None:
        nomes_abas.append(":clipboard: Revendedores Ativos")
    nomes_abas += [":trophy: Atividade x Ranking", ":mag: Diagnostico"]
    abas = dict(zip(nomes_abas, st.tabs(nomes_abas)))

    with abas[":bar_chart: Visao Geral"]:
        aba_visao_geral(resultado)
    with abas[":star: Crossbuyers"]:
        aba_crossbuyers(resultado)
    with abas[":round_pushpin: Setores"]:
        aba_setores(resultado)
    if dados is not None:
        with abas[":clipboard: Revendedores Ativos"]:
            aba_ativos(analise)
    with abas[":trophy: Atividade x Ranking"]:
        aba_atividade(analise, entrada['linhas_ranking'], ciclo_atual)
    with abas[":mag: Diagnostico"]:
        aba_diagnostico(analise)


# =============================================================================
# EXECUCAO
# =============================================================================
if __name__ == "__main__":
    main()
