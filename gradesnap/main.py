"""Punto de entrada de la línea de comandos.

Uso:
  gradesnap read hoja1.jpg hoja2.jpg -q 50 --name --json resultados.json
  gradesnap preview hoja1.jpg rectificada.jpg
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Sequence

from gradesnap.batch import read_images
from gradesnap.exporter import export_to_csv, export_to_json
from gradesnap.logging_config import setup_logging
from gradesnap.models import SheetResult
from gradesnap.omr_system import OMRReader, build_sheet_result


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gradesnap", description="Lector de hojas OMR")
    parser.add_argument("-v", "--verbose", action="store_true", help="logging de depuración")
    parser.add_argument("--log-file", default=None, help="fichero de log rotativo")
    sub = parser.add_subparsers(dest="command", required=True)

    read = sub.add_parser("read", help="lee una o varias hojas")
    read.add_argument("paths", nargs="+")
    read.add_argument("-q", "--questions", type=int, required=True)
    read.add_argument("--name", action="store_true", help="lee también el nombre")
    read.add_argument("--workers", type=int, default=None)
    read.add_argument("--json", dest="json_out", default=None)
    read.add_argument("--csv", dest="csv_out", default=None)

    preview = sub.add_parser("preview", help="guarda la hoja rectificada")
    preview.add_argument("path")
    preview.add_argument("out")
    return parser


def _print_sheet(sheet: SheetResult) -> None:
    if sheet.failure is not None:
        print(f"{sheet.source}: ERROR {sheet.failure.name} ({int(sheet.failure)})")
        return
    print(f"{sheet.source}: {sheet.name or '-'}")
    for ans in sheet.answers:
        print(f"  {ans.question:3d} {ans.selected or '-'} {ans.status}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    if args.command == "preview":
        OMRReader().prep_show_image(args.path, args.out)
        return 0

    if args.questions < 1:
        print("--questions debe ser positivo", file=sys.stderr)
        return 2

    matrices = read_images(args.paths, args.questions, args.name, max_workers=args.workers)
    sheets: List[SheetResult] = [
        build_sheet_result(path, matrix, args.name)
        for path, matrix in zip(args.paths, matrices)
    ]

    if args.json_out:
        export_to_json(args.json_out, sheets)
    if args.csv_out:
        export_to_csv(args.csv_out, sheets)
    if not args.json_out and not args.csv_out:
        for sheet in sheets:
            _print_sheet(sheet)

    return 0 if all(sheet.ok for sheet in sheets) else 1


if __name__ == "__main__":  # pragma: no cover - punto de entrada
    sys.exit(main())
