"""Rectificación de la hoja a partir de las esquinas del marco."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import cv2  # type: ignore
import numpy as np

from gradesnap.models import CornerSet, ScaleRatios
from gradesnap.template import DEFAULT_TEMPLATE, Point, TemplateGeometry

logger = logging.getLogger(__name__)


@dataclass
class AlignmentSettings:
    # Aumento del lienzo al deformar, para que la hoja no quede recortada
    canvas_scale: float = 1.5


@dataclass
class AlignmentResult:
    """Imagen rectificada y marco canónico sobre el que se calculan regiones."""

    image: np.ndarray
    matrix: np.ndarray
    corners: CornerSet
    ratios: ScaleRatios
    # Esquina del recorte dentro del lienzo deformado
    origin: Point = (0.0, 0.0)

    def transform_point(self, point: Point) -> Point:
        """Lleva un punto de la imagen rectificada a la foto original."""

        x, y = point
        x += self.origin[0]
        y += self.origin[1]
        m = self.matrix
        w = m[2, 0] * x + m[2, 1] * y + m[2, 2]
        px = (m[0, 0] * x + m[0, 1] * y + m[0, 2]) / w
        py = (m[1, 0] * x + m[1, 1] * y + m[1, 2]) / w
        return float(px), float(py)


def _distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def side_lengths(corners: CornerSet) -> tuple[float, float]:
    """Devuelve ``(ancho, alto)`` del marco; si la hoja está de lado los intercambia."""

    v_length = _distance(corners.ul, corners.ll)
    h_length = _distance(corners.ul, corners.ur)
    if v_length < h_length:
        v_length, h_length = h_length, v_length
    return h_length, v_length


def orient_image(
    gray: np.ndarray,
    corners: CornerSet,
    settings: AlignmentSettings | None = None,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
) -> AlignmentResult | None:
    """Endereza la hoja y la recorta exactamente al marco de calibración.

    Devuelve ``None`` si la geometría es degenerada o el marco queda fuera de
    la imagen.
    """

    settings = settings or AlignmentSettings()
    rows, cols = gray.shape[:2]
    h_length, v_length = side_lengths(corners)
    if h_length < 1 or v_length < 1:
        return None

    quad = np.array(corners.as_quad(), dtype=np.float32)
    ox, oy, bw, bh = cv2.boundingRect(quad)
    if ox < 0 or oy < 0 or ox + bw > cols or oy + bh > rows:
        logger.debug("Marco fuera de la imagen: %s", (ox, oy, bw, bh))
        return None

    # Hoja enderezada anclada en la esquina del rectángulo envolvente
    x0, y0 = float(ox), float(oy)
    src = np.array(
        [
            (x0, y0),
            (x0 + h_length, y0),
            (x0, y0 + v_length),
            (x0 + h_length, y0 + v_length),
        ],
        dtype=np.float32,
    )

    matrix = cv2.getPerspectiveTransform(src, quad)
    canvas = (int(cols * settings.canvas_scale), int(rows * settings.canvas_scale))
    warped = cv2.warpPerspective(
        gray, matrix, canvas, flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP
    )

    left, top = int(round(x0)), int(round(y0))
    right = int(round(x0 + h_length))
    bottom = int(round(y0 + v_length))
    if right > warped.shape[1] or bottom > warped.shape[0] or right <= left or bottom <= top:
        logger.debug("Recorte fuera del lienzo: %s", (left, top, right, bottom))
        return None

    fitted = warped[top:bottom, left:right].copy()
    ratios = ScaleRatios(
        width_ratio=fitted.shape[1] / template.frame_width,
        height_ratio=fitted.shape[0] / template.frame_height,
    )
    return AlignmentResult(
        image=fitted,
        matrix=matrix,
        corners=CornerSet.canonical(h_length, v_length),
        ratios=ratios,
        origin=(float(left), float(top)),
    )


__all__ = ["AlignmentResult", "AlignmentSettings", "orient_image", "side_lengths"]
