"""
modelos.py - Estruturas de dados do processamento.

Linhas canonicas das planilhas, clientes agregados por marca, registros
da planilha de revendedores ativos, estatisticas e diagnosticos. Os
resultados sao entregues a interface e aos exportadores sem formatacao.

Valores monetarios sao sempre inteiros em centavos.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Optional, Set

from .constants import ORDEM_MARCAS, TIPO_VENDA
from .normalizacao import arredondar_meio_para_cima


# =============================================================================
# LINHAS CANONICAS
# =============================================================================
@dataclass(frozen=True)
class DadosFaturamento:
    """Campos de faturamento, presentes apenas quando a planilha os possui."""

    status: str
    status_original: str
    is_faturado: bool
    ciclo_faturamento: str = ""
    data_faturamento: str = ""


@dataclass(frozen=True)
class LinhaVenda:
    """Uma linha de transacao de uma planilha de marca, ja normalizada."""

    marca: str
    setor: str
    nome_revendedora: str
    nome_revendedora_normalizado: str
    ciclo_captacao: str
    codigo_produto: str
    nome_produto: str
    tipo: str
    tipo_original: str
    quantidade_itens: int
    valor_centavos: int
    meio_captacao: str
    tipo_entrega: str
    tipo_entrega_original: str
    faturamento: Optional[DadosFaturamento] = None

    @property
    def is_venda(self) -> bool:
        return self.tipo == TIPO_VENDA

    @property
    def is_faturado(self) -> bool:
        return self.faturamento is not None and self.faturamento.is_faturado


@dataclass
class ResultadoLeitura:
    """Resultado da leitura de uma planilha de marca."""

    marca: str
    sucesso: bool = False
    linhas: List[LinhaVenda] = field(default_factory=list)
    erros: List[str] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)
    total_linhas: int = 0
    colunas_faturamento: List[str] = field(default_factory=list)

    @property
    def possui_faturamento(self) -> bool:
        return bool(self.colunas_faturamento)


# =============================================================================
# PLANILHA DE REVENDEDORES ATIVOS (ROSTER)
# =============================================================================
@dataclass(frozen=True)
class RevendedorAtivo:
    """Registro unico da planilha de revendedores ativos."""

    codigo: str
    codigo_original: str
    nome: str
    nome_normalizado: str
    setor: str
    ciclo_captacao: Optional[str] = None
    gerencia: Optional[str] = None


@dataclass
class ContagemSetor:
    recebidos: int = 0
    excluidos: int = 0


@dataclass
class DiagnosticoLeitura:
    """
    Trilha de auditoria das linhas recebidas na planilha de ativos.

    total_linhas = registros_validos + soma das exclusoes.
    """

    total_linhas: int = 0
    excluidos_codigo_vazio: int = 0
    excluidos_nome_vazio: int = 0
    excluidos_codigo_duplicado: int = 0
    excluidos_erro: int = 0
    registros_validos: int = 0
    nomes_com_codigos_diferentes: int = 0
    por_setor: Dict[str, ContagemSetor] = field(default_factory=dict)

    @property
    def total_excluidos(self) -> int:
        return (
            self.excluidos_codigo_vazio
            + self.excluidos_nome_vazio
            + self.excluidos_codigo_duplicado
            + self.excluidos_erro
        )

    @property
    def reconciliado(self) -> bool:
        return self.total_linhas == self.registros_validos + self.total_excluidos

    def contar_setor(self, setor: str, excluido: bool) -> None:
        contagem = self.por_setor.setdefault(setor, ContagemSetor())
        contagem.recebidos += 1
        if excluido:
            contagem.excluidos += 1


@dataclass
class ResultadoLeituraAtivos:
    sucesso: bool = False
    revendedores: List[RevendedorAtivo] = field(default_factory=list)
    erros: List[str] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)
    total_linhas: int = 0
    possui_ciclo: bool = False
    diagnostico: Optional[DiagnosticoLeitura] = None


# =============================================================================
# PLANILHA GERAL (TRANSACIONAL)
# =============================================================================
@dataclass(frozen=True)
class TransacaoGeral:
    gerencia: str
    setor: str
    codigo: str
    codigo_original: str
    nome: str
    nome_normalizado: str
    ciclo_faturamento: str
    tipo: str
    quantidade_itens: int
    valor_centavos: int


@dataclass
class DiagnosticoGeral:
    total_linhas: int = 0
    linhas_validas: int = 0
    excluidos_codigo_vazio: int = 0
    excluidos_nome_vazio: int = 0
    excluidos_erro: int = 0

    @property
    def reconciliado(self) -> bool:
        return self.total_linhas == (
            self.linhas_validas
            + self.excluidos_codigo_vazio
            + self.excluidos_nome_vazio
            + self.excluidos_erro
        )


@dataclass
class ResultadoLeituraGeral:
    sucesso: bool = False
    transacoes: List[TransacaoGeral] = field(default_factory=list)
    erros: List[str] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)
    total_linhas: int = 0
    ciclos_disponiveis: List[str] = field(default_factory=list)
    diagnostico: Optional[DiagnosticoGeral] = None


@dataclass
class AtivoGeral:
    """Revendedor ativo derivado das transacoes da planilha Geral."""

    codigo: str
    codigo_original: str
    nome: str
    nome_normalizado: str
    setor: str
    gerencia: str
    ciclo_faturamento: str
    total_itens: int = 0
    total_valor: int = 0
    quantidade_transacoes: int = 0


@dataclass
class DiagnosticoDerivacao:
    total_transacoes: int = 0
    transacoes_no_ciclo: int = 0
    transacoes_venda_no_ciclo: int = 0
    revendedores_unicos: int = 0


# =============================================================================
# PLANILHA DE RANKING
# =============================================================================
@dataclass
class SetorRanking:
    setor: str
    setor_normalizado: str
    quantidade_itens: int = 0
    quantidade_revendedor: int = 0
    valor_centavos: int = 0


@dataclass
class DadosRanking:
    setores: Dict[str, SetorRanking] = field(default_factory=dict)
    total_revendedores: int = 0
    total_itens: int = 0
    total_valor: int = 0


@dataclass
class ResultadoLeituraRanking:
    sucesso: bool = False
    dados: Optional[DadosRanking] = None
    erros: List[str] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)
    total_linhas: int = 0


# =============================================================================
# AGREGADOS POR CLIENTE
# =============================================================================
@dataclass
class MetricasMarca:
    """Compras (apenas Tipo=Venda) de um cliente em uma marca."""

    marca: str
    linhas: List[LinhaVenda] = field(default_factory=list)
    total_itens: int = 0
    total_valor: int = 0
    ticket_medio_por_item: int = 0
    ciclos: Set[str] = field(default_factory=set)
    setores: Set[str] = field(default_factory=set)
    meios_captacao: Set[str] = field(default_factory=set)
    tipos_entrega: Set[str] = field(default_factory=set)

    def adicionar(self, linha: LinhaVenda) -> None:
        self.linhas.append(linha)
        self.total_itens += linha.quantidade_itens
        self.total_valor += linha.valor_centavos
        self.ciclos.add(linha.ciclo_captacao)
        self.setores.add(linha.setor)
        self.meios_captacao.add(linha.meio_captacao)
        self.tipos_entrega.add(linha.tipo_entrega)

    def finalizar(self) -> None:
        self.ticket_medio_por_item = arredondar_meio_para_cima(self.total_valor, self.total_itens)

    @property
    def possui_faturado(self) -> bool:
        return any(linha.is_faturado for linha in self.linhas)

    @classmethod
    def de_linhas(cls, marca: str, linhas: List[LinhaVenda]) -> "MetricasMarca":
        metricas = cls(marca=marca)
        for linha in linhas:
            metricas.adicionar(linha)
        metricas.finalizar()
        return metricas


@dataclass
class Cliente:
    """Revendedora unica nas planilhas de marca, com metricas por marca."""

    nome: str
    nome_normalizado: str
    marcas: Dict[str, MetricasMarca] = field(default_factory=dict)
    total_valor: int = 0
    total_itens: int = 0
    ciclos: Set[str] = field(default_factory=set)
    setores: Set[str] = field(default_factory=set)
    meios_captacao: Set[str] = field(default_factory=set)
    tipos_entrega: Set[str] = field(default_factory=set)

    @property
    def quantidade_marcas(self) -> int:
        return len(self.marcas)

    def possui_marca(self, marca: str) -> bool:
        return marca in self.marcas

    def adicionar(self, linha: LinhaVenda) -> None:
        metricas = self.marcas.get(linha.marca)
        if metricas is None:
            metricas = MetricasMarca(marca=linha.marca)
            self.marcas[linha.marca] = metricas
        metricas.adicionar(linha)
        self.ciclos.add(linha.ciclo_captacao)
        self.setores.add(linha.setor)
        self.meios_captacao.add(linha.meio_captacao)
        self.tipos_entrega.add(linha.tipo_entrega)

    def finalizar(self) -> None:
        # Reordena as marcas na ordem fixa para exportacao deterministica
        self.marcas = {m: self.marcas[m] for m in ORDEM_MARCAS if m in self.marcas}
        self.total_valor = 0
        self.total_itens = 0
        for metricas in self.marcas.values():
            metricas.finalizar()
            self.total_valor += metricas.total_valor
            self.total_itens += metricas.total_itens


@dataclass
class EstatisticasPainel:
    total_clientes_base: int = 0
    total_crossbuyers: int = 0
    distribuicao_marcas: Dict[int, int] = field(default_factory=dict)
    sobreposicao_marcas: Dict[str, int] = field(default_factory=dict)
    marca_maior_sobreposicao: Optional[str] = None
    distribuicao_setores: Dict[str, int] = field(default_factory=dict)


# =============================================================================
# CRUZAMENTO COM A PLANILHA DE ATIVOS
# =============================================================================
@dataclass
class RevendedorCruzado:
    """Revendedor da planilha de ativos enriquecido com compras do ciclo."""

    codigo: str
    codigo_original: str
    nome: str
    nome_normalizado: str
    setor: str
    ciclo_captacao: Optional[str] = None
    marcas: Dict[str, MetricasMarca] = field(default_factory=dict)
    total_valor: int = 0
    total_itens: int = 0
    existe_na_ancora: bool = False
    tem_venda_registrada: bool = False
    is_multimarcas: bool = False
    is_crossbuyer: bool = False
    tem_venda_faturada: bool = False
    is_multimarcas_faturado: bool = False

    @property
    def quantidade_marcas(self) -> int:
        return len(self.marcas)


@dataclass
class EstatisticasSetor:
    setor: str
    total_ativos: int = 0
    total_registrados: int = 0
    registrados_base_ancora: int = 0
    total_multimarcas: int = 0
    total_crossbuyers: int = 0
    percent_multimarcas: float = 0.0
    percent_multimarcas_base_ancora: float = 0.0
    total_faturados: int = 0
    faturados_base_ancora: int = 0
    multimarcas_faturados: int = 0
    percent_multimarcas_faturados: float = 0.0
    gap_registrado_faturado: int = 0
    valor_por_marca: Dict[str, int] = field(default_factory=lambda: {m: 0 for m in ORDEM_MARCAS})
    itens_por_marca: Dict[str, int] = field(default_factory=lambda: {m: 0 for m in ORDEM_MARCAS})
    revendedores: List[RevendedorCruzado] = field(default_factory=list)


@dataclass
class ContagemJoinSetor:
    total: int = 0
    com_compra: int = 0


@dataclass
class DiagnosticoJoin:
    total_recebidos: int = 0
    registros_processados: int = 0
    com_compra: int = 0
    sem_compra: int = 0
    ciclo_selecionado: Optional[str] = None
    por_setor: Dict[str, ContagemJoinSetor] = field(default_factory=dict)


@dataclass
class DadosRevendedoresAtivos:
    revendedores: List[RevendedorCruzado] = field(default_factory=list)
    estatisticas_setor: List[EstatisticasSetor] = field(default_factory=list)
    ciclo_selecionado: Optional[str] = None
    ciclos_disponiveis: List[str] = field(default_factory=list)
    total_ativos: int = 0
    total_com_compra: int = 0
    total_ativos_base_ancora: int = 0
    total_multimarcas: int = 0
    total_crossbuyers: int = 0
    inconsistencias: List[str] = field(default_factory=list)
    diagnostico_join: Optional[DiagnosticoJoin] = None
    diagnostico_leitura: Optional[DiagnosticoLeitura] = None


# =============================================================================
# RESULTADO FINAL
# =============================================================================
@dataclass
class ViolacaoAncora:
    """Cliente com 2+ marcas mas sem a marca ancora (excluido dos crossbuyers)."""

    nome: str
    nome_normalizado: str
    marcas: List[str]


@dataclass
class DiagnosticoProcessamento:
    linhas_por_marca: Dict[str, int] = field(default_factory=dict)
    linhas_venda_por_marca: Dict[str, int] = field(default_factory=dict)
    clientes_sem_ancora: int = 0
    violacoes_ancora: List[ViolacaoAncora] = field(default_factory=list)
    # Arquivos retirados da agregacao, com os erros de leitura
    erros_por_arquivo: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class ResultadoProcessamento:
    sucesso: bool = False
    regra: Optional[str] = None
    clientes: List[Cliente] = field(default_factory=list)
    crossbuyers: List[Cliente] = field(default_factory=list)
    estatisticas: EstatisticasPainel = field(default_factory=EstatisticasPainel)
    erros: List[str] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)
    ciclos_disponiveis: List[str] = field(default_factory=list)
    setores_disponiveis: List[str] = field(default_factory=list)
    meios_captacao_disponiveis: List[str] = field(default_factory=list)
    tipos_entrega_disponiveis: List[str] = field(default_factory=list)
    dados_ativos: Optional[DadosRevendedoresAtivos] = None
    diagnostico: DiagnosticoProcessamento = field(default_factory=DiagnosticoProcessamento)

    def para_dict(self) -> Dict[str, Any]:
        """Representacao deterministica (sets ordenados), pronta para JSON."""
        return serializar(self)


# =============================================================================
# ATIVIDADE POR SETOR (CALCULADO x RANKING)
# =============================================================================
@dataclass
class RevendedorAtividade:
    nome: str
    nome_normalizado: str
    setor: str
    setor_normalizado: str
    itens: int = 0
    valor: int = 0
    marcas: Set[str] = field(default_factory=set)


@dataclass
class LinhaAtividadeSetor:
    setor: str
    setor_normalizado: str
    revendedores_calc: int = 0
    itens_calc: int = 0
    valor_calc: int = 0
    revendedores_ranking: int = 0
    itens_ranking: int = 0
    valor_ranking: int = 0
    revendedores_diff: int = 0
    itens_diff: int = 0
    valor_diff: int = 0
    revendedores_cobertura: float = 0.0
    itens_cobertura: float = 0.0
    valor_cobertura: float = 0.0
    possui_ranking: bool = False
    possui_detalhe: bool = False
    revendedores: List[RevendedorAtividade] = field(default_factory=list)


@dataclass
class TotaisAtividadeSetor:
    revendedores_calc: int = 0
    itens_calc: int = 0
    valor_calc: int = 0
    revendedores_ranking: int = 0
    itens_ranking: int = 0
    valor_ranking: int = 0
    revendedores_diff: int = 0
    itens_diff: int = 0
    valor_diff: int = 0
    revendedores_cobertura: float = 0.0
    itens_cobertura: float = 0.0
    valor_cobertura: float = 0.0
    quantidade_setores: int = 0
    setores_com_diff: int = 0


@dataclass
class ResultadoAtividadeSetor:
    sucesso: bool = False
    linhas: List[LinhaAtividadeSetor] = field(default_factory=list)
    totais: TotaisAtividadeSetor = field(default_factory=TotaisAtividadeSetor)
    erros: List[str] = field(default_factory=list)
    ciclo_selecionado: str = ""
    marcas_selecionadas: List[str] = field(default_factory=list)


@dataclass
class Analise:
    """Leituras de todos os arquivos de uma sessao e o resultado processado."""

    resultado: ResultadoProcessamento
    leituras_marca: Dict[str, ResultadoLeitura] = field(default_factory=dict)
    leitura_ativos: Optional[ResultadoLeituraAtivos] = None
    leitura_geral: Optional[ResultadoLeituraGeral] = None
    derivacao_geral: Optional[DiagnosticoDerivacao] = None

    @property
    def linhas_por_marca(self) -> Dict[str, List[LinhaVenda]]:
        return {
            marca: leitura.linhas
            for marca, leitura in self.leituras_marca.items()
            if leitura.sucesso
        }


def serializar(obj: Any) -> Any:
    """
    Converte dataclasses, sets e dicts em estruturas JSON deterministicas.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: serializar(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return sorted(serializar(v) for v in obj)
    if isinstance(obj, dict):
        return {str(k): serializar(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [serializar(v) for v in obj]
    return obj
