"""
constants.py - Constantes e configuracoes do projeto Multimarcas Crossbuyers.

Define marcas do grupo, taxonomias de transacao/entrega/faturamento,
esquemas de colunas esperadas em cada tipo de planilha e configuracoes
gerais para garantir consistencia em todo o projeto.
"""

import os

# =============================================================================
# MARCAS DO GRUPO
# =============================================================================
MARCA_BOTICARIO = "boticario"
MARCA_EUDORA = "eudora"
MARCA_AUAMIGOS = "auamigos"
MARCA_OUI = "oui"
MARCA_QDB = "qdb"

# Ordem fixa de iteracao (usada para desempates e exportacao)
ORDEM_MARCAS = [MARCA_BOTICARIO, MARCA_EUDORA, MARCA_AUAMIGOS, MARCA_OUI, MARCA_QDB]

# Marca ancora: obrigatoria em toda analise e base de comparacao
MARCA_ANCORA = MARCA_BOTICARIO

MARCAS_NOMES = {
    MARCA_BOTICARIO: "O Boticário",
    MARCA_EUDORA: "Eudora",
    MARCA_AUAMIGOS: "Au Amigos",
    MARCA_OUI: "O.U.I",
    MARCA_QDB: "Quem Disse, Berenice?",
}

MARCAS_NOMES_CURTOS = {
    MARCA_BOTICARIO: "Boticário",
    MARCA_EUDORA: "Eudora",
    MARCA_AUAMIGOS: "Au Amigos",
    MARCA_OUI: "O.U.I",
    MARCA_QDB: "QDB?",
}

# Mapeamento de aliases (maiusculas, sem acento) para o id da marca
MARCA_ALIASES = {
    "BOTICARIO": MARCA_BOTICARIO,
    "OBOTICARIO": MARCA_BOTICARIO,
    "O BOTICARIO": MARCA_BOTICARIO,
    "BOT": MARCA_BOTICARIO,
    "EUDORA": MARCA_EUDORA,
    "EUD": MARCA_EUDORA,
    "AUAMIGOS": MARCA_AUAMIGOS,
    "AU AMIGOS": MARCA_AUAMIGOS,
    "AUMIGOS": MARCA_AUAMIGOS,
    "OUI": MARCA_OUI,
    "O.U.I": MARCA_OUI,
    "O.U.I.": MARCA_OUI,
    "QDB": MARCA_QDB,
    "QDB?": MARCA_QDB,
    "QUEM DISSE BERENICE": MARCA_QDB,
    "QUEM DISSE, BERENICE?": MARCA_QDB,
}

# =============================================================================
# TAXONOMIAS
# =============================================================================
TIPO_VENDA = "Venda"
TIPO_BRINDE = "Brinde"
TIPO_DOACAO = "Doação"
TIPO_OUTRO = "Outro"  # Apenas na planilha Geral

ENTREGA_FRETE = "Entrega/Frete"
ENTREGA_RETIRADA = "Retirada"
ENTREGA_OUTRO = "Outro"

ENTREGA_PALAVRAS_FRETE = ["endereço", "endereco", "entrega"]
ENTREGA_PALAVRAS_RETIRADA = ["retirar", "central", "retirada"]

STATUS_FATURADO = "Faturado"
STATUS_PENDENTE = "Pendente"
STATUS_CANCELADO = "Cancelado"
STATUS_DESCONHECIDO = "Desconhecido"

# Padroes de status de faturamento, verificados nesta ordem:
# faturado -> cancelado -> pendente. Palavras comparadas por "contem";
# tokens curtos (s, n, 1, ok...) apenas por igualdade com o valor inteiro.
FATURADO_PALAVRAS = [
    "faturado", "faturada", "fat",
    "aprovado", "aprovada",
    "concluido", "concluída", "concluida",
    "finalizado", "finalizada",
    "emitido", "emitida",
    "processado", "processada",
]
FATURADO_TOKENS = ["ok", "sim", "yes", "s", "y", "1", "true"]

CANCELADO_PALAVRAS = [
    "cancelado", "cancelada", "cancel",
    "estornado", "estornada", "estorno",
    "devolvido", "devolvida", "devolucao", "devolução",
    "rejeitado", "rejeitada",
]
CANCELADO_TOKENS = ["nao", "não", "no", "n", "0", "false"]

PENDENTE_PALAVRAS = [
    "pendente", "aguardando", "em processamento", "em processo",
    "aberto", "aberta", "novo", "nova",
    "analise", "análise", "em analise",
]

# =============================================================================
# VALORES PADRAO
# =============================================================================
NAO_INFORMADO = "Não informado"
PRODUTO_NAO_IDENTIFICADO = "Produto não identificado"

# =============================================================================
# ESQUEMAS DE COLUNAS
# =============================================================================
# Cada esquema: campo -> variantes aceitas (ja normalizadas), na ordem de
# prioridade. A ordem dos campos tambem e a ordem de resolucao.
COLUNAS_MARCA = {
    "setor": ["setor"],
    "nome_revendedora": ["nomerevendedora", "nome revendedora", "revendedora", "nome"],
    "ciclo_captacao": ["ciclocaptacao", "ciclo captacao", "ciclo", "ciclo_captacao"],
    "codigo_produto": ["codigoproduto", "codigo produto", "codigo", "sku", "codigo_produto", "cod produto"],
    "nome_produto": ["nomeproduto", "nome produto", "produto", "nome_produto", "descricao"],
    "tipo": ["tipo", "tipo transacao", "tipo_transacao", "tipotransacao"],
    "quantidade_itens": ["quantidadeitens", "quantidade itens", "quantidade", "qtd", "qtd itens", "quantidade_itens"],
    "valor_praticado": ["valorpraticado", "valor praticado", "valor", "preco", "valor_praticado", "valortotal", "valor total"],
    "meio_captacao": ["meiocaptacao", "meio captacao", "meio", "meio_captacao", "canal"],
    "tipo_entrega": ["tipoentrega", "tipo entrega", "entrega", "tipo_entrega", "modalidade entrega"],
    "status_faturamento": [
        "statusfaturamento", "status faturamento", "status_faturamento",
        "statuspedido", "status pedido", "status_pedido", "status",
        "situacao", "situacaopedido", "situacao pedido",
        "faturado", "faturamento",
    ],
    "ciclo_faturamento": [
        "ciclofaturamento", "ciclo faturamento", "ciclo_faturamento",
        "ciclofat", "ciclo fat", "ciclo_fat",
    ],
    "data_faturamento": [
        "datafaturamento", "data faturamento", "data_faturamento",
        "dtfaturamento", "dt faturamento", "dt_faturamento",
        "datanf", "data nf", "data_nf",
        "dataemissao", "data emissao", "data_emissao",
    ],
}
COLUNAS_MARCA_OBRIGATORIAS = ["nome_revendedora", "tipo", "quantidade_itens", "valor_praticado"]
# Colunas de faturamento sao opcionais e nao geram aviso quando ausentes
COLUNAS_FATURAMENTO = ["status_faturamento", "ciclo_faturamento", "data_faturamento"]

COLUNAS_ATIVOS = {
    "codigo_revendedora": [
        "codigorevendedora", "codigo revendedora", "codigo", "cod",
        "codigo_revendedora", "codrevendedora", "cod revendedora",
    ],
    "nome_revendedora": ["nomerevendedora", "nome revendedora", "revendedora", "nome", "nome_revendedora"],
    "setor": ["setor"],
    "ciclo_captacao": ["ciclocaptacao", "ciclo captacao", "ciclo", "ciclo_captacao", "ciclocapt"],
}
COLUNAS_ATIVOS_OBRIGATORIAS = ["codigo_revendedora", "nome_revendedora", "setor"]

COLUNAS_GERAL = {
    "gerencia": ["gerencia", "ger"],
    "setor": ["setor", "setor revendedora", "setorrevendedora"],
    "codigo_revendedora": [
        "codigorevendedora", "codigo revendedora", "codigo", "cod",
        "codigo_revendedora", "codrevendedora", "cod revendedora",
    ],
    "nome_revendedora": ["nomerevendedora", "nome revendedora", "revendedora", "nome", "nome_revendedora"],
    "ciclo_faturamento": ["ciclofaturamento", "ciclo faturamento", "ciclo_faturamento", "ciclofat", "ciclo"],
    "tipo": ["tipo", "tipovenda", "tipo venda", "tipo_venda"],
    "quantidade_itens": ["quantidadeitens", "quantidade itens", "quantidade", "qtd", "qtde", "itens", "quantidade_itens"],
    "valor_praticado": ["valorpraticado", "valor praticado", "valor", "vlr", "valor_praticado", "valortotal", "valor total"],
}
COLUNAS_GERAL_OBRIGATORIAS = ["codigo_revendedora", "nome_revendedora", "setor", "ciclo_faturamento", "tipo"]

COLUNAS_RANKING = {
    "setor": ["setor"],
    "quantidade_itens": ["quantidadeitens", "quantidade itens", "qtd itens", "itens", "quantidade_itens", "qtditens"],
    "quantidade_revendedor": [
        "quantidaderevendedor", "quantidade revendedor", "qtd revendedor", "revendedores",
        "qtd rev", "quantidade_revendedor", "qtdrevendedor", "qtd revendedores",
    ],
    "valor_praticado": ["valorpraticado", "valor praticado", "valor", "valor total", "valor_praticado", "valortotal", "faturamento"],
}
COLUNAS_RANKING_OBRIGATORIAS = ["setor", "quantidade_itens", "quantidade_revendedor", "valor_praticado"]

# Nomes amigaveis para mensagens de erro
COLUNAS_NOMES_EXIBICAO = {
    "setor": "Setor",
    "nome_revendedora": "NomeRevendedora",
    "codigo_revendedora": "CodigoRevendedora",
    "ciclo_captacao": "CicloCaptacao",
    "codigo_produto": "CodigoProduto",
    "nome_produto": "NomeProduto",
    "tipo": "Tipo",
    "quantidade_itens": "QuantidadeItens",
    "quantidade_revendedor": "QuantidadeRevendedor",
    "valor_praticado": "ValorPraticado",
    "meio_captacao": "Meio Captacao",
    "tipo_entrega": "Tipo Entrega",
    "status_faturamento": "Status Faturamento",
    "ciclo_faturamento": "CicloFaturamento",
    "data_faturamento": "Data Faturamento",
    "gerencia": "Gerência",
}

# =============================================================================
# CONFIGURACOES DE PROCESSAMENTO
# =============================================================================
# Similaridade minima (0-1) para match aproximado de cabecalhos
LIMIAR_SIMILARIDADE = 0.8

# Primeira linha de dados na planilha (linha 1 = cabecalho)
OFFSET_LINHA_PLANILHA = 2

LOG_LEVEL = os.getenv("CROSSBUYERS_LOG_LEVEL", "INFO")

# =============================================================================
# REGRAS DE ANALISE (variantes de "ativo" e "crossbuyer")
# =============================================================================
REGRA_UNIAO_MARCAS = "uniao_marcas"
REGRA_ROSTER_ATIVOS = "roster_ativos"
REGRA_ROSTER_FATURAMENTO = "roster_faturamento"
REGRA_GERAL_TRANSACIONAL = "geral_transacional"

REGRAS_DESCRICAO = {
    REGRA_UNIAO_MARCAS: (
        "Sem planilha de ativos: clientes = uniao das vendas de todas as marcas; "
        "crossbuyer = 2+ marcas incluindo a marca ancora."
    ),
    REGRA_ROSTER_ATIVOS: (
        "Planilha de ativos: todo revendedor da planilha e ativo; "
        "planilhas de marca apenas enriquecem com compras do ciclo."
    ),
    REGRA_ROSTER_FATURAMENTO: (
        "Planilha de ativos com colunas de faturamento nas marcas: "
        "alem das compras registradas, mede compras faturadas."
    ),
    REGRA_GERAL_TRANSACIONAL: (
        "Planilha Geral: ativo = Tipo Venda no ciclo de faturamento selecionado, "
        "deduplicado por codigo."
    ),
}

# =============================================================================
# TEXTOS DA INTERFACE
# =============================================================================
APP_TITLE = "Multimarcas Crossbuyers"
APP_SUBTITLE = "Analise de Revendedores que Compram em Mais de uma Marca"

# =============================================================================
# FORMATACAO
# =============================================================================
FORMATO_PERCENTUAL = "{:.1f}%"
FORMATO_NUMERO = "{:,.0f}"
