"""Posición de cajas de respuesta y celdas del nombre en la hoja rectificada.

Las coordenadas de la plantilla se escalan con ``ScaleRatios`` y se acumulan
desde la esquina superior izquierda canónica, igual que se recorre la hoja:
las preguntas de arriba a abajo por columnas y las celdas del nombre de
izquierda a derecha.
"""

from __future__ import annotations

from typing import List

from gradesnap.models import Region, ScaleRatios
from gradesnap.template import DEFAULT_TEMPLATE, Point, TemplateGeometry


def find_answer_regions(
    ul: Point,
    ratios: ScaleRatios,
    num_questions: int,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
) -> List[Region]:
    """Devuelve una región por pregunta, en orden de lectura."""

    wr, hr = ratios.width_ratio, ratios.height_ratio
    first_x = ul[0] + template.answer_origin[0] * wr
    first_y = ul[1] + template.answer_origin[1] * hr
    dx = template.answer_dx * wr
    dy = template.answer_dy * hr
    width = int(template.answer_box_size[0] * wr)
    height = int(template.answer_box_size[1] * hr)
    breaks = set(template.column_breaks)

    regions: List[Region] = []
    x, y = first_x, first_y
    for q in range(num_questions):
        regions.append(Region(int(x), int(y), width, height))
        # Al final de una columna se salta a la primera fila de la siguiente
        if q in breaks:
            x += dx
            y = first_y
        else:
            y += dy
    return regions


def find_name_regions(
    ul: Point,
    ratios: ScaleRatios,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
) -> List[Region]:
    """Devuelve las celdas del nombre, con el hueco reservado a la inicial."""

    wr, hr = ratios.width_ratio, ratios.height_ratio
    x = ul[0] + template.name_origin[0] * wr
    y = ul[1] + template.name_origin[1] * hr
    width = int(template.name_cell_size[0] * wr)
    height = int(template.name_cell_size[1] * hr)

    regions: List[Region] = []
    for i in range(template.name_cells):
        regions.append(Region(int(x), int(y), width, height))
        if i == template.name_mi_index - 1:
            x += template.name_first_to_mi_dx * wr
        elif i == template.name_mi_index:
            x += template.name_mi_to_last_dx * wr
        else:
            x += template.name_dx * wr
    return regions


__all__ = ["find_answer_regions", "find_name_regions"]
