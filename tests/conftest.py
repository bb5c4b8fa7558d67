import pytest

from crossbuyers.parsing import ler_planilha_marca


def _linha_marca(
    nome,
    tipo="Venda",
    ciclo="202401",
    setor="Norte",
    valor="10,00",
    quantidade=1,
    produto="Produto X",
    meio="Digital",
    entrega="Retirada na central",
    **extras,
):
    linha = {
        "Setor": setor,
        "NomeRevendedora": nome,
        "CicloCaptacao": ciclo,
        "CodigoProduto": "00123",
        "NomeProduto": produto,
        "Tipo": tipo,
        "QuantidadeItens": quantidade,
        "ValorPraticado": valor,
        "MeioCaptacao": meio,
        "TipoEntrega": entrega,
    }
    linha.update(extras)
    return linha


@pytest.fixture
def linha_marca():
    """Fabrica de linhas de planilha de marca com cabecalhos padrao."""
    return _linha_marca


@pytest.fixture
def ler_marca():
    """Le linhas de uma marca e devolve as LinhaVenda (leitura deve ter sucesso)."""

    def _ler(linhas, marca):
        resultado = ler_planilha_marca(linhas, marca)
        assert resultado.sucesso, resultado.erros
        return resultado.linhas

    return _ler


@pytest.fixture
def linha_ativo():
    def _linha(codigo, nome, setor="Norte", ciclo=None):
        linha = {"CodigoRevendedora": codigo, "NomeRevendedora": nome, "Setor": setor}
        if ciclo is not None:
            linha["CicloCaptacao"] = ciclo
        return linha

    return _linha
