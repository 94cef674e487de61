"""Configuración de plantilla para la hoja GradeSnap.

La plantilla modela la hoja de referencia de GradeSnap. Todas las
posiciones se expresan respecto a la esquina superior izquierda del marco de
calibración y se escalan en tiempo de lectura con ``ScaleRatios``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


Point = Tuple[float, float]
Band = Tuple[float, float]


@dataclass(frozen=True)
class TemplateGeometry:
    """Parámetros geométricos de la hoja OMR.

    Los valores se midieron sobre la hoja de referencia; las bandas de
    tolerancia se ajustaron empíricamente y se conservan tal cual.
    """

    # Esquinas del marco de calibración en la hoja de referencia
    frame_ul: Point = (88.0, 214.0)
    frame_ur: Point = (2436.0, 214.0)
    frame_ll: Point = (88.0, 3214.0)
    frame_lr: Point = (2436.0, 3214.0)

    # Cajas de respuesta (una por pregunta, cinco alternativas en horizontal)
    answer_box_size: Point = (225.0, 68.0)
    answer_origin: Point = (154.0, 445.0)
    answer_dx: float = 304.0
    answer_dy: float = 86.5
    column_breaks: Tuple[int, ...] = (24, 49, 74)
    options_per_question: int = 5

    # Celdas del nombre (17 columnas, 26 letras en vertical)
    name_cells: int = 17
    name_cell_size: Point = (40.0, 2262.0)
    name_origin: Point = (1404.0, 433.0)
    name_dx: float = 45.3
    name_dy: float = 47.0
    # Hueco entre el nombre y la inicial, y entre la inicial y el apellido
    name_first_to_mi_dx: float = 80.0
    name_mi_to_last_dx: float = 84.0
    name_mi_index: int = 8
    letters_per_cell: int = 26

    # Clasificación de rectángulos
    frame_min_area: float = 100000.0
    box_min_area: float = 200.0
    accuracy_modifier: float = 1.05
    calib_ratio: float = 0.782594
    calib_band: Band = (0.745327619, 0.8217237)
    calib_ratio_inv: float = 1.2778
    calib_inv_band: Band = (1.21695238, 1.34169)
    box_ratio: float = 1.0
    box_band: Band = (0.95, 1.05)

    @property
    def frame_width(self) -> float:
        return self.frame_ur[0] - self.frame_ul[0]

    @property
    def frame_height(self) -> float:
        return self.frame_ll[1] - self.frame_ul[1]


DEFAULT_TEMPLATE = TemplateGeometry()


__all__ = ["TemplateGeometry", "DEFAULT_TEMPLATE", "Point", "Band"]
