"""
parsing.py - Leitura das linhas de cada tipo de planilha.

Recebe as linhas ja tokenizadas (lista de dicts cabecalho -> valor, ver
io.ler_linhas) e devolve registros canonicos:
- Planilhas de marca -> LinhaVenda
- Planilha de revendedores ativos -> RevendedorAtivo (com diagnostico)
- Planilha Geral -> TransacaoGeral (e derivacao de ativos por ciclo)
- Planilha de ranking -> SetorRanking por setor

Nenhuma funcao levanta excecao para dados sujos: linhas invalidas sao
ignoradas com aviso e falhas do arquivo inteiro voltam em `erros`.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .colunas import (
    ESQUEMA_ATIVOS,
    ESQUEMA_GERAL,
    ESQUEMA_MARCA,
    ESQUEMA_RANKING,
    MapeamentoColunas,
    mapear_colunas,
    nome_exibicao,
)
from .constants import (
    CANCELADO_PALAVRAS,
    CANCELADO_TOKENS,
    COLUNAS_FATURAMENTO,
    ENTREGA_FRETE,
    ENTREGA_OUTRO,
    ENTREGA_PALAVRAS_FRETE,
    ENTREGA_PALAVRAS_RETIRADA,
    ENTREGA_RETIRADA,
    FATURADO_PALAVRAS,
    FATURADO_TOKENS,
    MARCAS_NOMES,
    NAO_INFORMADO,
    OFFSET_LINHA_PLANILHA,
    PENDENTE_PALAVRAS,
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
from .modelos import (
    AtivoGeral,
    DadosFaturamento,
    DadosRanking,
    DiagnosticoDerivacao,
    DiagnosticoGeral,
    DiagnosticoLeitura,
    LinhaVenda,
    ResultadoLeitura,
    ResultadoLeituraAtivos,
    ResultadoLeituraGeral,
    ResultadoLeituraRanking,
    RevendedorAtivo,
    SetorRanking,
    TransacaoGeral,
)
from .normalizacao import (
    chave_identidade,
    converter_quantidade,
    converter_valor_para_centavos,
    normalizar_codigo_revendedora,
    normalizar_para_comparacao,
    normalizar_para_exibicao,
    remover_acentos,
    valor_para_texto,
)

logger = logging.getLogger(__name__)

Linha = Dict[str, Any]


# =============================================================================
# TAXONOMIAS
# =============================================================================
def normalizar_tipo(valor: Any) -> str:
    """
    Normaliza o tipo de transacao de uma planilha de marca.

    Valores nao reconhecidos (inclusive vazio) sao tratados como Venda.
    """
    texto = remover_acentos(normalizar_para_comparacao(valor))
    if not texto:
        return TIPO_VENDA
    if "brinde" in texto:
        return TIPO_BRINDE
    if "doacao" in texto:
        return TIPO_DOACAO
    return TIPO_VENDA


def normalizar_tipo_geral(valor: Any) -> str:
    """Tipo de transacao da planilha Geral: nao reconhecido vira Outro."""
    texto = remover_acentos(normalizar_para_comparacao(valor))
    if not texto:
        return TIPO_OUTRO
    if "venda" in texto:
        return TIPO_VENDA
    if "brinde" in texto:
        return TIPO_BRINDE
    if "doacao" in texto:
        return TIPO_DOACAO
    return TIPO_OUTRO


def normalizar_tipo_entrega(valor: Any) -> Tuple[str, str]:
    """
    Classifica o tipo de entrega por palavras-chave.

    Returns:
        Tupla (tipo normalizado, texto original). Vazio -> (Outro, "").
    """
    original = valor_para_texto(valor).strip()
    if not original:
        return ENTREGA_OUTRO, ""

    texto = original.lower()
    if any(p in texto for p in ENTREGA_PALAVRAS_FRETE):
        return ENTREGA_FRETE, original
    if any(p in texto for p in ENTREGA_PALAVRAS_RETIRADA):
        return ENTREGA_RETIRADA, original
    return ENTREGA_OUTRO, original


def _casa_padrao(texto: str, palavras: Sequence[str], tokens: Sequence[str] = ()) -> bool:
    if texto in tokens:
        return True
    return any(p in texto for p in palavras)


def normalizar_status_faturamento(valor: Any) -> Tuple[str, str, bool]:
    """
    Classifica o status de faturamento de um pedido.

    Ordem de verificacao: faturado, cancelado, pendente. Palavras longas
    casam por "contem"; tokens curtos ("s", "n", "1", "ok"...) apenas
    quando sao o valor inteiro da celula.

    Returns:
        Tupla (status, texto original, is_faturado)
    """
    original = valor_para_texto(valor).strip()
    if not original:
        return STATUS_DESCONHECIDO, "", False

    texto = original.lower()
    if _casa_padrao(texto, FATURADO_PALAVRAS, FATURADO_TOKENS):
        return STATUS_FATURADO, original, True
    if _casa_padrao(texto, CANCELADO_PALAVRAS, CANCELADO_TOKENS):
        return STATUS_CANCELADO, original, False
    if _casa_padrao(texto, PENDENTE_PALAVRAS):
        return STATUS_PENDENTE, original, False
    return STATUS_DESCONHECIDO, original, False


# =============================================================================
# AUXILIARES
# =============================================================================
def _leitor_campos(linha: Linha, mapeamento: MapeamentoColunas) -> Callable[[str], Any]:
    """Retorna funcao campo -> valor bruto da celula ("" se coluna ausente)."""

    def obter(campo: str) -> Any:
        coluna = mapeamento.coluna(campo)
        if not coluna:
            return ""
        valor = linha.get(coluna, "")
        return "" if valor is None else valor

    return obter


def _texto(valor: Any) -> str:
    return valor_para_texto(valor).strip()


def _cabecalhos(linhas: Sequence[Linha]) -> List[str]:
    return [str(c) for c in linhas[0].keys()]


def _faltando(mapeamento: MapeamentoColunas) -> str:
    return ", ".join(nome_exibicao(c) for c in mapeamento.faltando_obrigatorias)


# =============================================================================
# PLANILHA DE MARCA
# =============================================================================
def _converter_linha_marca(
    obter: Callable[[str], Any],
    marca: str,
    possui_faturamento: bool,
) -> LinhaVenda:
    nome = normalizar_para_exibicao(obter("nome_revendedora"))
    tipo_original = _texto(obter("tipo"))
    tipo_entrega, tipo_entrega_original = normalizar_tipo_entrega(obter("tipo_entrega"))

    faturamento = None
    if possui_faturamento:
        status, status_original, is_faturado = normalizar_status_faturamento(
            obter("status_faturamento")
        )
        faturamento = DadosFaturamento(
            status=status,
            status_original=status_original,
            is_faturado=is_faturado,
            ciclo_faturamento=_texto(obter("ciclo_faturamento")),
            data_faturamento=_texto(obter("data_faturamento")),
        )

    return LinhaVenda(
        marca=marca,
        setor=_texto(obter("setor")) or NAO_INFORMADO,
        nome_revendedora=nome,
        nome_revendedora_normalizado=chave_identidade(nome),
        ciclo_captacao=_texto(obter("ciclo_captacao")) or NAO_INFORMADO,
        codigo_produto=_texto(obter("codigo_produto")),
        nome_produto=_texto(obter("nome_produto")) or PRODUTO_NAO_IDENTIFICADO,
        tipo=normalizar_tipo(tipo_original),
        tipo_original=tipo_original or TIPO_VENDA,
        quantidade_itens=converter_quantidade(obter("quantidade_itens")),
        valor_centavos=converter_valor_para_centavos(obter("valor_praticado")),
        meio_captacao=_texto(obter("meio_captacao")) or NAO_INFORMADO,
        tipo_entrega=tipo_entrega,
        tipo_entrega_original=tipo_entrega_original or NAO_INFORMADO,
        faturamento=faturamento,
    )


def ler_planilha_marca(linhas: Sequence[Linha], marca: str) -> ResultadoLeitura:
    """
    Converte as linhas de uma planilha de marca em LinhaVenda.

    Args:
        linhas: Linhas da primeira aba (cabecalho -> valor)
        marca: Id da marca (ex: "boticario")

    Returns:
        ResultadoLeitura; sucesso=False se a planilha estiver vazia, faltar
        coluna obrigatoria ou nenhuma linha for valida
    """
    resultado = ResultadoLeitura(marca=marca)
    nome_marca = MARCAS_NOMES.get(marca, marca)

    if not linhas:
        resultado.erros.append(f"Planilha vazia: {nome_marca}")
        return resultado

    resultado.total_linhas = len(linhas)
    mapeamento = mapear_colunas(_cabecalhos(linhas), ESQUEMA_MARCA)
    resultado.avisos.extend(mapeamento.avisos)
    resultado.colunas_faturamento = mapeamento.detectados(COLUNAS_FATURAMENTO)
    logger.debug("Mapeamento de colunas (%s): %s", marca, mapeamento.colunas)

    if resultado.possui_faturamento:
        logger.info(
            "%s: colunas de faturamento detectadas: %s",
            nome_marca, ", ".join(resultado.colunas_faturamento),
        )

    if not mapeamento.valido:
        resultado.erros.append(
            f"Colunas obrigatórias faltando em {nome_marca}: {_faltando(mapeamento)}"
        )
        return resultado

    for indice, linha in enumerate(linhas):
        numero_linha = indice + OFFSET_LINHA_PLANILHA
        try:
            item = _converter_linha_marca(
                _leitor_campos(linha, mapeamento), marca, resultado.possui_faturamento
            )
        except Exception as e:
            resultado.avisos.append(f"Linha {numero_linha}: Erro ao processar - {e}")
            continue

        if not item.nome_revendedora_normalizado:
            resultado.avisos.append(
                f"Linha {numero_linha}: Nome da revendedora vazio, linha ignorada"
            )
            continue

        resultado.linhas.append(item)

    if not resultado.linhas:
        resultado.erros.append(f"Nenhum item válido encontrado em {nome_marca}")
        return resultado

    logger.debug("%s: %d de %d linhas aceitas", marca, len(resultado.linhas), resultado.total_linhas)
    resultado.sucesso = True
    return resultado


# =============================================================================
# PLANILHA DE REVENDEDORES ATIVOS
# =============================================================================
def ler_planilha_ativos(linhas: Sequence[Linha]) -> ResultadoLeituraAtivos:
    """
    Converte a planilha de revendedores ativos em registros unicos.

    Deduplicacao por codigo (primeira ocorrencia vence). Nome repetido com
    codigo diferente gera apenas aviso. Toda linha recebida cai em exatamente
    um balde do diagnostico: valida, codigo vazio, nome vazio, codigo
    duplicado ou erro.

    Args:
        linhas: Linhas da primeira aba (cabecalho -> valor)

    Returns:
        ResultadoLeituraAtivos com diagnostico de exclusoes
    """
    resultado = ResultadoLeituraAtivos()

    if not linhas:
        resultado.erros.append("Planilha de revendedores ativos vazia")
        return resultado

    resultado.total_linhas = len(linhas)
    mapeamento = mapear_colunas(_cabecalhos(linhas), ESQUEMA_ATIVOS)
    resultado.avisos.extend(mapeamento.avisos)
    resultado.possui_ciclo = mapeamento.coluna("ciclo_captacao") is not None

    if not mapeamento.valido:
        resultado.erros.append(
            "Colunas obrigatórias faltando no arquivo de revendedores ativos: "
            f"{_faltando(mapeamento)}"
        )
        return resultado

    diagnostico = DiagnosticoLeitura(total_linhas=len(linhas))
    codigos_vistos = set()
    nomes_vistos: Dict[str, str] = {}

    for indice, linha in enumerate(linhas):
        numero_linha = indice + OFFSET_LINHA_PLANILHA
        obter = _leitor_campos(linha, mapeamento)
        setor = NAO_INFORMADO
        try:
            setor = _texto(obter("setor")) or NAO_INFORMADO
            codigo_original = normalizar_codigo_revendedora(obter("codigo_revendedora"))
            if not codigo_original:
                resultado.avisos.append(
                    f"Linha {numero_linha}: CodigoRevendedora vazio, linha ignorada"
                )
                diagnostico.excluidos_codigo_vazio += 1
                diagnostico.contar_setor(setor, excluido=True)
                continue

            nome = normalizar_para_exibicao(obter("nome_revendedora"))
            if not nome:
                resultado.avisos.append(
                    f"Linha {numero_linha}: NomeRevendedora vazio, linha ignorada"
                )
                diagnostico.excluidos_nome_vazio += 1
                diagnostico.contar_setor(setor, excluido=True)
                continue

            codigo = normalizar_para_comparacao(codigo_original)
            nome_normalizado = chave_identidade(nome)

            if codigo in codigos_vistos:
                resultado.avisos.append(
                    f'Linha {numero_linha}: CodigoRevendedora duplicado "{codigo_original}", '
                    "linha ignorada"
                )
                diagnostico.excluidos_codigo_duplicado += 1
                diagnostico.contar_setor(setor, excluido=True)
                continue

            codigo_existente = nomes_vistos.get(nome_normalizado)
            if codigo_existente is not None and codigo_existente != codigo:
                resultado.avisos.append(
                    f'Linha {numero_linha}: NomeRevendedora "{nome}" já existe com código '
                    f'diferente "{codigo_existente}" vs "{codigo_original}"'
                )
                diagnostico.nomes_com_codigos_diferentes += 1

            codigos_vistos.add(codigo)
            nomes_vistos.setdefault(nome_normalizado, codigo)

            ciclo = _texto(obter("ciclo_captacao")) or None
            resultado.revendedores.append(RevendedorAtivo(
                codigo=codigo,
                codigo_original=codigo_original,
                nome=nome,
                nome_normalizado=nome_normalizado,
                setor=setor,
                ciclo_captacao=ciclo,
            ))
            diagnostico.contar_setor(setor, excluido=False)
        except Exception as e:
            resultado.avisos.append(f"Linha {numero_linha}: Erro ao processar - {e}")
            diagnostico.excluidos_erro += 1
            diagnostico.contar_setor(setor, excluido=True)

    diagnostico.registros_validos = len(resultado.revendedores)
    resultado.diagnostico = diagnostico
    logger.info(
        "Revendedores ativos: %d linhas, %d validos, %d excluidos",
        diagnostico.total_linhas, diagnostico.registros_validos, diagnostico.total_excluidos,
    )

    if not resultado.revendedores:
        resultado.erros.append("Nenhum revendedor ativo válido encontrado no arquivo")
        return resultado

    resultado.sucesso = True
    return resultado


# =============================================================================
# PLANILHA GERAL
# =============================================================================
def ler_planilha_geral(linhas: Sequence[Linha]) -> ResultadoLeituraGeral:
    """
    Converte a planilha Geral (transacional, com CicloFaturamento) em transacoes.

    Linhas sem codigo ou sem nome sao excluidas e contadas no diagnostico.
    """
    resultado = ResultadoLeituraGeral()

    if not linhas:
        resultado.erros.append("Planilha Geral vazia")
        return resultado

    resultado.total_linhas = len(linhas)
    mapeamento = mapear_colunas(_cabecalhos(linhas), ESQUEMA_GERAL)
    resultado.avisos.extend(mapeamento.avisos)

    if not mapeamento.valido:
        resultado.erros.append(
            f"Colunas obrigatórias faltando na planilha Geral: {_faltando(mapeamento)}"
        )
        return resultado

    logger.debug("Mapeamento de colunas (Geral): %s", mapeamento.colunas)

    diagnostico = DiagnosticoGeral(total_linhas=len(linhas))
    ciclos = set()

    for indice, linha in enumerate(linhas):
        numero_linha = indice + OFFSET_LINHA_PLANILHA
        obter = _leitor_campos(linha, mapeamento)
        try:
            codigo_original = normalizar_codigo_revendedora(obter("codigo_revendedora"))
            if not codigo_original:
                diagnostico.excluidos_codigo_vazio += 1
                continue

            nome = normalizar_para_exibicao(obter("nome_revendedora"))
            if not nome:
                diagnostico.excluidos_nome_vazio += 1
                continue

            ciclo = _texto(obter("ciclo_faturamento"))
            if ciclo:
                ciclos.add(ciclo)

            resultado.transacoes.append(TransacaoGeral(
                gerencia=_texto(obter("gerencia")) or NAO_INFORMADO,
                setor=_texto(obter("setor")) or NAO_INFORMADO,
                codigo=normalizar_para_comparacao(codigo_original),
                codigo_original=codigo_original,
                nome=nome,
                nome_normalizado=chave_identidade(nome),
                ciclo_faturamento=ciclo,
                tipo=normalizar_tipo_geral(obter("tipo")),
                quantidade_itens=converter_quantidade(obter("quantidade_itens")),
                valor_centavos=converter_valor_para_centavos(obter("valor_praticado")),
            ))
        except Exception as e:
            resultado.avisos.append(f"Linha {numero_linha}: Erro ao processar - {e}")
            diagnostico.excluidos_erro += 1

    diagnostico.linhas_validas = len(resultado.transacoes)
    resultado.diagnostico = diagnostico
    resultado.ciclos_disponiveis = sorted(ciclos)
    logger.info(
        "Planilha Geral: %d transacoes, ciclos: %s",
        diagnostico.linhas_validas, ", ".join(resultado.ciclos_disponiveis),
    )

    if not resultado.transacoes:
        resultado.erros.append("Nenhuma transação válida encontrada na planilha Geral")
        return resultado

    resultado.sucesso = True
    return resultado


def derivar_ativos_geral(
    transacoes: Sequence[TransacaoGeral],
    ciclo: str,
) -> Tuple[List[AtivoGeral], DiagnosticoDerivacao]:
    """
    Deriva os revendedores ativos de um ciclo a partir da planilha Geral.

    Ativo = Tipo Venda com CicloFaturamento igual ao ciclo selecionado,
    deduplicado por codigo (itens, valor e transacoes sao somados).

    Args:
        transacoes: Transacoes lidas por ler_planilha_geral
        ciclo: Ciclo de faturamento selecionado

    Returns:
        Tupla (ativos na ordem da primeira ocorrencia, diagnostico)
    """
    no_ciclo = [t for t in transacoes if t.ciclo_faturamento == ciclo]
    vendas = [t for t in no_ciclo if t.tipo == TIPO_VENDA]

    por_codigo: Dict[str, AtivoGeral] = {}
    for t in vendas:
        ativo = por_codigo.get(t.codigo)
        if ativo is None:
            ativo = AtivoGeral(
                codigo=t.codigo,
                codigo_original=t.codigo_original,
                nome=t.nome,
                nome_normalizado=t.nome_normalizado,
                setor=t.setor,
                gerencia=t.gerencia,
                ciclo_faturamento=t.ciclo_faturamento,
            )
            por_codigo[t.codigo] = ativo
        ativo.total_itens += t.quantidade_itens
        ativo.total_valor += t.valor_centavos
        ativo.quantidade_transacoes += 1

    ativos = list(por_codigo.values())
    diagnostico = DiagnosticoDerivacao(
        total_transacoes=len(transacoes),
        transacoes_no_ciclo=len(no_ciclo),
        transacoes_venda_no_ciclo=len(vendas),
        revendedores_unicos=len(ativos),
    )
    logger.info("Ciclo %s: %d revendedores ativos na planilha Geral", ciclo, len(ativos))
    return ativos, diagnostico


def ativos_geral_para_roster(ativos: Sequence[AtivoGeral]) -> List[RevendedorAtivo]:
    """Converte ativos derivados da Geral em registros da planilha de ativos."""
    return [
        RevendedorAtivo(
            codigo=a.codigo,
            codigo_original=a.codigo_original,
            nome=a.nome,
            nome_normalizado=a.nome_normalizado,
            setor=a.setor,
            ciclo_captacao=a.ciclo_faturamento or None,
            gerencia=a.gerencia,
        )
        for a in ativos
    ]


# =============================================================================
# PLANILHA DE RANKING
# =============================================================================
def ler_planilha_ranking(linhas: Sequence[Linha]) -> ResultadoLeituraRanking:
    """
    Le os totais oficiais por setor (itens, revendedores, valor).

    Setores repetidos (mesmo nome normalizado) sao somados.
    """
    resultado = ResultadoLeituraRanking()

    if not linhas:
        resultado.erros.append("Planilha de ranking vazia")
        return resultado

    resultado.total_linhas = len(linhas)
    mapeamento = mapear_colunas(_cabecalhos(linhas), ESQUEMA_RANKING)
    resultado.avisos.extend(mapeamento.avisos)

    if not mapeamento.valido:
        resultado.erros.append(
            f"Colunas obrigatórias faltando no arquivo de ranking: {_faltando(mapeamento)}"
        )
        return resultado

    dados = DadosRanking()
    for indice, linha in enumerate(linhas):
        numero_linha = indice + OFFSET_LINHA_PLANILHA
        obter = _leitor_campos(linha, mapeamento)
        try:
            setor = _texto(obter("setor"))
            if not setor:
                resultado.avisos.append(f"Linha {numero_linha}: Setor vazio, linha ignorada")
                continue

            setor_normalizado = normalizar_para_comparacao(setor)
            itens = converter_quantidade(obter("quantidade_itens"))
            revendedores = converter_quantidade(obter("quantidade_revendedor"))
            valor = converter_valor_para_centavos(obter("valor_praticado"))

            registro = dados.setores.get(setor_normalizado)
            if registro is None:
                registro = SetorRanking(setor=setor, setor_normalizado=setor_normalizado)
                dados.setores[setor_normalizado] = registro
            registro.quantidade_itens += itens
            registro.quantidade_revendedor += revendedores
            registro.valor_centavos += valor

            dados.total_itens += itens
            dados.total_revendedores += revendedores
            dados.total_valor += valor
        except Exception as e:
            resultado.avisos.append(f"Linha {numero_linha}: Erro ao processar - {e}")

    if not dados.setores:
        resultado.erros.append("Nenhum setor válido encontrado no arquivo de ranking")
        return resultado

    resultado.dados = dados
    resultado.sucesso = True
    return resultado


def ciclos_roster(revendedores: Sequence[RevendedorAtivo]) -> List[str]:
    """Ciclos distintos presentes na planilha de ativos, ordenados."""
    return sorted({r.ciclo_captacao for r in revendedores if r.ciclo_captacao})


