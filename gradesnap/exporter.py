"""Exportadores simples a JSON y CSV."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Sequence

from gradesnap.answers_reader import STATUS_BLANK, STATUS_MULTIPLE
from gradesnap.models import SheetResult

CSV_FIELDS = [
    "archivo",
    "nombre",
    "pregunta",
    "respuesta",
    "estado",
    "intensidad",
    "codigo_error",
]


def _sheet_to_dict(sheet: SheetResult) -> dict:
    return {
        "archivo": str(sheet.source),
        "nombre": sheet.name,
        "error": sheet.failure.name if sheet.failure is not None else None,
        "codigo_error": int(sheet.failure) if sheet.failure is not None else None,
        "respuestas": [
            {
                "pregunta": ans.question,
                "respuesta": ans.selected,
                "estado": ans.status,
                "intensidad": ans.intensity,
            }
            for ans in sheet.answers
        ],
        "preguntas_en_blanco": sum(1 for a in sheet.answers if a.status == STATUS_BLANK),
        "preguntas_conflictivas": sum(1 for a in sheet.answers if a.status == STATUS_MULTIPLE),
        "matriz": sheet.matrix,
    }


def export_to_json(path: str | Path, sheets: Sequence[SheetResult]) -> None:
    data = [_sheet_to_dict(sheet) for sheet in sheets]
    Path(path).write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def export_to_csv(path: str | Path, sheets: Sequence[SheetResult]) -> None:
    """Una fila por pregunta; las hojas fallidas aparecen con su código."""

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for sheet in sheets:
            if sheet.failure is not None:
                writer.writerow(
                    {
                        "archivo": str(sheet.source),
                        "nombre": "",
                        "pregunta": "",
                        "respuesta": "-",
                        "estado": sheet.failure.name,
                        "intensidad": "",
                        "codigo_error": int(sheet.failure),
                    }
                )
                continue
            writer.writerows(sheet.to_records())


__all__ = ["export_to_json", "export_to_csv"]
