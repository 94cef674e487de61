from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Tuple

import cv2
import numpy as np
import pytest

from gradesnap.template import DEFAULT_TEMPLATE

# Hoja sintética a escala 0.5 de la plantilla de referencia
SCALE = 0.5
FRAME_ORIGIN = (100, 120)
CANVAS = (1400, 1800)  # ancho, alto
FRAME_THICKNESS = 12
MARKER = ((40, 50), 40)  # esquina, lado


def _to_sheet(x: float, y: float) -> Tuple[int, int]:
    return (
        int(round(FRAME_ORIGIN[0] + x * SCALE)),
        int(round(FRAME_ORIGIN[1] + y * SCALE)),
    )


def _fill(img: np.ndarray, x0: float, y0: float, x1: float, y1: float, inset: float) -> None:
    p0 = _to_sheet(x0 + inset, y0 + inset)
    p1 = _to_sheet(x1 - inset, y1 - inset)
    cv2.rectangle(img, p0, p1, 0, -1)


def answer_box_origin(question: int) -> Tuple[float, float]:
    """Origen de la caja de una pregunta en coordenadas de plantilla."""

    t = DEFAULT_TEMPLATE
    x, y = t.answer_origin
    for q in range(question):
        if q in t.column_breaks:
            x += t.answer_dx
            y = t.answer_origin[1]
        else:
            y += t.answer_dy
    return x, y


def name_cell_origin(cell: int) -> Tuple[float, float]:
    t = DEFAULT_TEMPLATE
    x, y = t.name_origin
    for i in range(cell):
        if i == t.name_mi_index - 1:
            x += t.name_first_to_mi_dx
        elif i == t.name_mi_index:
            x += t.name_mi_to_last_dx
        else:
            x += t.name_dx
    return x, y


def draw_sheet(
    marks: Dict[int, int] | None = None,
    letters: Dict[int, int] | None = None,
    with_frame: bool = True,
    with_marker: bool = True,
) -> np.ndarray:
    """Dibuja una hoja con marco, marca de orientación y respuestas rellenas.

    ``marks`` asocia pregunta (desde 0) con alternativa (desde 0) y
    ``letters`` celda del nombre con índice de letra.
    """

    t = DEFAULT_TEMPLATE
    width, height = CANVAS
    img = np.full((height, width), 255, dtype=np.uint8)

    if with_frame:
        x0, y0 = FRAME_ORIGIN
        x1, y1 = _to_sheet(t.frame_width, t.frame_height)
        cv2.rectangle(img, (x0, y0), (x1, y1), 0, -1)
        cv2.rectangle(
            img,
            (x0 + FRAME_THICKNESS, y0 + FRAME_THICKNESS),
            (x1 - FRAME_THICKNESS, y1 - FRAME_THICKNESS),
            255,
            -1,
        )

    if with_marker:
        (mx, my), side = MARKER
        cv2.rectangle(img, (mx, my), (mx + side - 1, my + side - 1), 0, -1)

    box_w, box_h = t.answer_box_size
    strip_w = box_w / t.options_per_question
    for question, choice in (marks or {}).items():
        bx, by = answer_box_origin(question)
        sx = bx + choice * strip_w
        _fill(img, sx, by, sx + strip_w, by + box_h, inset=10)

    cell_w, cell_h = t.name_cell_size
    strip_h = cell_h / t.letters_per_cell
    for cell, letter in (letters or {}).items():
        cx, cy = name_cell_origin(cell)
        sy = cy + letter * strip_h
        _fill(img, cx, sy, cx + cell_w, sy + strip_h, inset=10)

    return img


def write_image(path: Path, img: np.ndarray) -> Path:
    assert cv2.imwrite(str(path), img)
    return path


@pytest.fixture
def sheet_path(tmp_path: Path) -> Path:
    img = draw_sheet(marks={0: 1, 1: 3, 4: 0, 9: 4})
    return write_image(tmp_path / "hoja.png", img)


@pytest.fixture
def named_sheet_path(tmp_path: Path) -> Path:
    img = draw_sheet(marks={0: 2}, letters={0: 2, 1: 0, 8: 10})
    return write_image(tmp_path / "hoja_nombre.png", img)


@pytest.fixture
def blank_path(tmp_path: Path) -> Path:
    img = np.full((600, 400), 255, dtype=np.uint8)
    return write_image(tmp_path / "blanca.png", img)


def frame_corners_expected() -> Iterable[Tuple[float, float]]:
    t = DEFAULT_TEMPLATE
    x0, y0 = FRAME_ORIGIN
    x1, y1 = _to_sheet(t.frame_width, t.frame_height)
    return [(x0, y0), (x1, y0), (x0, y1), (x1, y1)]
