"""
crossbuyers - Modulo principal da aplicacao Multimarcas Crossbuyers.

Este pacote contem os modulos de processamento de dados:
- constants: Constantes e configuracoes
- normalizacao: Normalizacao de nomes, valores e quantidades
- colunas: Mapeamento de cabecalhos para campos canonicos
- modelos: Estruturas de dados do processamento
- parsing: Leitura das planilhas de marca, ativos, Geral e ranking
- join: Cruzamento entre marcas e com a planilha de ativos
- transform: Regras, agregacao e metricas
- reports: Geracao de tabelas e relatorios
- export: Exportacao de dados
- io: Leitura de arquivos Excel/CSV
- csv_fix: Correcao de CSV quebrado
"""

from .constants import *
from .io import (
    DataValidationError,
    dataframe_para_linhas,
    ler_arquivo,
    ler_csv,
    ler_linhas,
)
from .csv_fix import corrigir_csv_quebrado
from .normalizacao import (
    chave_identidade,
    converter_quantidade,
    converter_valor_para_centavos,
    formatar_moeda,
    normalizar_marca,
    normalizar_para_comparacao,
    normalizar_para_exibicao,
    razao_similaridade,
    remover_acentos,
)
from .colunas import (
    ESQUEMA_ATIVOS,
    ESQUEMA_GERAL,
    ESQUEMA_MARCA,
    ESQUEMA_RANKING,
    EsquemaColunas,
    mapear_colunas,
)
from .parsing import (
    derivar_ativos_geral,
    ler_planilha_ativos,
    ler_planilha_geral,
    ler_planilha_marca,
    ler_planilha_ranking,
)
from .join import construir_clientes, cruzar_revendedores_ativos
from .transform import (
    FiltrosClientes,
    agregar_ativos_por_setor,
    analisar_arquivos,
    aplicar_filtros_clientes,
    calcular_estatisticas_painel,
    ciclo_padrao,
    construir_atividade_setor,
    filtrar_crossbuyers,
    is_crossbuyer,
    ordenar_clientes,
    processar_todas_marcas,
    selecionar_regra,
)
from .reports import (
    descricao_regra,
    formatar_valor,
    gerar_resumo_metricas,
    tabela_atividade_setor,
    tabela_detalhada_crossbuyers,
    tabela_estatisticas_setor,
    tabela_resumo_crossbuyers,
)
from .export import (
    exportar_csv,
    exportar_excel,
    exportar_multiplas_abas,
    exportar_relatorio_crossbuyers,
    gerar_nome_arquivo,
)
