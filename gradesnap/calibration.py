"""Detección del marco de calibración y de la marca de orientación.

La hoja lleva impreso un rectángulo grande de proporción conocida y una
pequeña marca cuadrada junto a su esquina superior izquierda física. El
marco fija la geometría; la marca resuelve cuál de sus cuatro esquinas es la
superior izquierda aunque la foto esté girada.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

import cv2  # type: ignore
import numpy as np

from gradesnap.models import CornerSet
from gradesnap.template import DEFAULT_TEMPLATE, Point, TemplateGeometry

logger = logging.getLogger(__name__)


class RectMode(Enum):
    CALIBRATION_FRAME = "calibration_frame"
    ORIENTATION_BOX = "orientation_box"


@dataclass
class CalibrationSettings:
    """Parámetros de la secuencia de reducción de ruido previa a contornos."""

    dilate_iterations: int = 2
    blur_kernel: int = 3
    threshold_block_size: int = 5
    threshold_c: float = 10.0
    erode_iterations: int = 1
    canny_low: float = 150.0
    canny_high: float = 250.0


@dataclass(frozen=True)
class CalibrationMarks:
    """Rectángulos elegidos en la imagen: marco (4 puntos) y marca."""

    frame_points: Tuple[Point, Point, Point, Point]
    frame_area: float
    marker_ul: Point
    marker_area: float


def preprocess_for_contours(gray: np.ndarray, settings: CalibrationSettings) -> np.ndarray:
    """Devuelve un mapa de bordes apto para ``findContours``.

    Trabaja sobre una copia: la imagen original se sigue usando para la
    rectificación.
    """

    work = cv2.dilate(gray, None, iterations=settings.dilate_iterations)
    k = settings.blur_kernel | 1
    work = cv2.GaussianBlur(work, (k, k), 0)
    work = cv2.adaptiveThreshold(
        work,
        255,
        cv2.ADAPTIVE_THRESH_MEAN_C,
        cv2.THRESH_BINARY,
        settings.threshold_block_size,
        settings.threshold_c,
    )
    work = cv2.erode(work, None, iterations=settings.erode_iterations)
    return cv2.Canny(work, settings.canny_low, settings.canny_high)


def is_rect_accurate(
    size: Tuple[float, float],
    mode: RectMode,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
) -> bool:
    """Comprueba si la proporción alto/ancho de un rectángulo encaja con su rol.

    El marco se acepta en cualquiera de las dos orientaciones (proporción o
    su inversa); la marca de orientación debe ser prácticamente cuadrada.
    Los límites de las bandas son exclusivos.
    """

    width, height = size
    if width <= 0 or height <= 0:
        return False
    ratio = height / width

    if mode is RectMode.CALIBRATION_FRAME:
        low, high = template.calib_band
        inv_low, inv_high = template.calib_inv_band
        return low < ratio < high or inv_low < ratio < inv_high

    low, high = template.box_band
    return low < ratio < high


def find_calibration_marks(
    edges: np.ndarray,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
) -> CalibrationMarks | None:
    """Elige el mayor marco y la mayor marca válidos entre los contornos."""

    contours, _ = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

    frame_rect = None
    frame_area = 0.0
    box_rect = None
    box_area = 0.0

    for cnt in contours:
        rect = cv2.minAreaRect(cnt)
        w, h = rect[1]
        area = float(w * h)
        if (
            area > template.frame_min_area
            and area > frame_area
            and is_rect_accurate((w, h), RectMode.CALIBRATION_FRAME, template)
        ):
            frame_rect, frame_area = rect, area
        elif (
            template.box_min_area < area < template.frame_min_area
            and area > box_area
            and is_rect_accurate((w, h), RectMode.ORIENTATION_BOX, template)
        ):
            box_rect, box_area = rect, area

    logger.debug(
        "Contornos=%d marco=%.0f marca=%.0f", len(contours), frame_area, box_area
    )
    if frame_rect is None or box_rect is None:
        return None

    # Esquina superior izquierda del rectángulo entero que envuelve la marca
    box_pts = cv2.boxPoints(box_rect)
    marker_ul = (
        float(np.floor(box_pts[:, 0].min())),
        float(np.floor(box_pts[:, 1].min())),
    )
    frame_pts = [(float(x), float(y)) for x, y in cv2.boxPoints(frame_rect)]

    return CalibrationMarks(
        frame_points=tuple(frame_pts),  # type: ignore[arg-type]
        frame_area=frame_area,
        marker_ul=marker_ul,
        marker_area=box_area,
    )


def anchor_index(points: Sequence[Point], marker_ul: Point) -> int:
    """Índice del punto más cercano (Manhattan) a la marca de orientación."""

    mx, my = marker_ul
    distances = [abs(x - mx) + abs(y - my) for x, y in points]
    # argmin devuelve el primero en caso de empate
    return int(np.argmin(distances))


def resolve_rotation(points: Sequence[Point], marker_ul: Point) -> CornerSet:
    """Reetiqueta los puntos del marco a partir de la esquina junto a la marca.

    ``points`` viene en sentido horario desde un punto arbitrario, así que
    basta con rotar el ciclo hasta la esquina ancla: UL, UR, LR y LL son los
    cuatro puntos siguientes en ese orden.
    """

    if len(points) != 4:
        raise ValueError(f"Se esperaban 4 esquinas, hay {len(points)}")

    k = anchor_index(points, marker_ul)
    cycle: List[Point] = [tuple(points[(k + i) % 4]) for i in range(4)]  # type: ignore[misc]
    ul, ur, lr, ll = cycle
    return CornerSet(ul=ul, ur=ur, ll=ll, lr=lr)


def find_calib_corners(
    gray: np.ndarray,
    settings: CalibrationSettings | None = None,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
) -> CornerSet | None:
    """Localiza el marco de calibración y devuelve sus esquinas ordenadas.

    Devuelve ``None`` si falta el marco o la marca de orientación.
    """

    settings = settings or CalibrationSettings()
    edges = preprocess_for_contours(gray, settings)
    marks = find_calibration_marks(edges, template)
    if marks is None:
        return None
    return resolve_rotation(marks.frame_points, marks.marker_ul)


__all__ = [
    "CalibrationMarks",
    "CalibrationSettings",
    "RectMode",
    "anchor_index",
    "find_calib_corners",
    "find_calibration_marks",
    "is_rect_accurate",
    "preprocess_for_contours",
    "resolve_rotation",
]
