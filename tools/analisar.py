#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Executa a analise de crossbuyers pela linha de comando e grava a planilha
com as abas Resumo e Detalhado.

USO:
    python tools/analisar.py --marca boticario=boti.xlsx --marca eudora=eudora.csv \
        [--ativos ativos.xlsx | --geral geral.xlsx] [--ciclo 202401] [--saida crossbuyers.xlsx]
"""

import argparse
import logging
import sys
from io import BytesIO
from pathlib import Path

from crossbuyers.constants import LOG_LEVEL, MARCA_ANCORA, MARCAS_NOMES
from crossbuyers.export import exportar_relatorio_crossbuyers, gerar_nome_arquivo
from crossbuyers.io import DataValidationError, ler_linhas
from crossbuyers.normalizacao import normalizar_marca
from crossbuyers.reports import descricao_regra
from crossbuyers.transform import analisar_arquivos

logger = logging.getLogger("crossbuyers.cli")


def _ler(caminho: str):
    path = Path(caminho)
    return ler_linhas(BytesIO(path.read_bytes()), path.name)


def _marca_arquivo(valor: str):
    marca, sep, arquivo = valor.partition("=")
    marca_id = normalizar_marca(marca)
    if not sep or not arquivo or not marca_id:
        raise argparse.ArgumentTypeError(f"Use MARCA=ARQUIVO com uma marca conhecida: {valor!r}")
    return marca_id, arquivo


def main(argv=None):
    ap = argparse.ArgumentParser(description="Analise de crossbuyers entre marcas")
    ap.add_argument("--marca", action="append", type=_marca_arquivo, required=True,
                    metavar="MARCA=ARQUIVO", help="Planilha de uma marca (repetir por marca)")
    grupo = ap.add_mutually_exclusive_group()
    grupo.add_argument("--ativos", help="Planilha de revendedores ativos")
    grupo.add_argument("--geral", help="Planilha Geral (transacional)")
    ap.add_argument("--ciclo", default=None)
    ap.add_argument("--saida", default=None)
    args = ap.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    try:
        linhas_marcas = {marca: _ler(arquivo) for marca, arquivo in args.marca}
        linhas_ativos = _ler(args.ativos) if args.ativos else None
        linhas_geral = _ler(args.geral) if args.geral else None
    except (DataValidationError, OSError) as e:
        logger.error("%s", e)
        return 1

    analise = analisar_arquivos(linhas_marcas, linhas_ativos, linhas_geral, args.ciclo)
    resultado = analise.resultado

    for arquivo, erros in resultado.diagnostico.erros_por_arquivo.items():
        for erro in erros:
            logger.error("%s: %s", arquivo, erro)
    for aviso in resultado.avisos:
        logger.warning("%s", aviso)
    if not resultado.sucesso:
        for erro in resultado.erros:
            logger.error("%s", erro)
        return 1

    saida = args.saida or gerar_nome_arquivo("crossbuyers", "xlsx")
    Path(saida).write_bytes(exportar_relatorio_crossbuyers(resultado.crossbuyers))

    stats = resultado.estatisticas
    print(descricao_regra(resultado.regra))
    print(f"Base {MARCAS_NOMES[MARCA_ANCORA]}: {stats.total_clientes_base}")
    print(f"Crossbuyers: {stats.total_crossbuyers}")
    for qtd, total in stats.distribuicao_marcas.items():
        print(f"  {qtd} marcas: {total}")
    if resultado.dados_ativos is not None:
        dados = resultado.dados_ativos
        print(f"Ciclo: {dados.ciclo_selecionado or 'todos'}")
        print(f"Ativos: {dados.total_ativos} (com compra: {dados.total_com_compra})")
        print(f"Multimarcas (ativos): {dados.total_multimarcas}")
    print(f"Planilha: {saida}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
