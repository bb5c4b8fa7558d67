#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Corrige um CSV quebrado (registros em varias linhas, colunas a mais ou a
menos) e grava o CSV corrigido em UTF-8 com um relatorio JSON.

USO:
    python tools/fix_csv.py --input vendas.csv [--output saida.csv] [--report rel.json]
"""

import argparse
import json
from pathlib import Path

from crossbuyers.csv_fix import corrigir_csv_quebrado


def main():
    ap = argparse.ArgumentParser(description="Corrige CSV quebrado de planilhas de marca")
    ap.add_argument("--input", required=True)
    ap.add_argument("--output", required=False)
    ap.add_argument("--report", required=False)
    ap.add_argument("--sep", required=False, help="Separador (padrao: detectar pelo cabecalho)")
    ap.add_argument(
        "--target-col",
        default=None,
        help="Coluna que absorve excesso quando houver colunas a mais (padrao: NomeProduto)"
    )
    args = ap.parse_args()

    in_path = Path(args.input)
    raw = in_path.read_bytes()

    csv_corrigido, report = corrigir_csv_quebrado(raw, sep=args.sep, coluna_texto=args.target_col)
    report["entrada"] = str(in_path)

    out_csv = args.output or str(in_path.with_name(in_path.stem + "_corrigido.csv"))
    out_report = args.report or str(in_path.with_name(in_path.stem + "_relatorio_fix.json"))

    Path(out_csv).write_bytes(csv_corrigido)
    Path(out_report).write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")

    stats = report["estatisticas"]
    print("OK")
    print(f"Encoding: {report['encoding']}")
    print(f"Separador: {report['separador']!r}")
    print(f"Colunas esperadas: {report['colunas_esperadas']}")
    print(f"Registros emitidos: {stats['registros_emitidos']}")
    print(f"Registros juntados (quebra de linha): {stats['registros_unidos']}")
    print(f"Corrigidos (colunas a mais): {stats['colunas_a_mais_corrigidas']}")
    print(f"Corrigidos (colunas a menos): {stats['colunas_a_menos_corrigidas']}")
    print(f"CSV corrigido: {out_csv}")
    print(f"Relatório: {out_report}")


if __name__ == "__main__":
    main()
