"""Lectura del nivel de tinta de cajas de respuesta y celdas de letras."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import cv2  # type: ignore
import numpy as np

from gradesnap.models import LetterScore, Region


@dataclass
class ExtractionSettings:
    """Umbral adaptativo que deja a 255 sólo lo marcado con lápiz."""

    threshold_block_size: int = 51
    threshold_c: float = 7.0


def threshold_marks(gray: np.ndarray, settings: ExtractionSettings | None = None) -> np.ndarray:
    settings = settings or ExtractionSettings()
    return cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_MEAN_C,
        cv2.THRESH_BINARY_INV,
        settings.threshold_block_size,
        settings.threshold_c,
    )


def strip_boundaries(length: int, parts: int) -> List[int]:
    """Límites de ``parts`` franjas de igual tamaño sobre ``length`` píxeles.

    La franja ``a`` ocupa ``[b[a], b[a + 1])``; el último límite es siempre
    ``length``.
    """

    if parts <= 0:
        raise ValueError("parts debe ser positivo")
    step = length / parts
    bounds = [int(step * a) for a in range(parts)]
    bounds.append(length)
    return bounds


def _crop_region(binary: np.ndarray, region: Region) -> np.ndarray:
    if not region.fits(binary.shape):
        raise ValueError(f"Región fuera de la imagen: {region}")
    return binary[region.y : region.y1, region.x : region.x1]


def darkness_ratio(strip: np.ndarray) -> float:
    """Fracción de la franja marcada (píxeles a 255 sobre el total)."""

    if strip.size == 0:
        return 0.0
    return float(strip.sum(dtype=np.float64) / 255.0 / strip.size)


def read_answer(binary: np.ndarray, region: Region, options: int = 5) -> List[float]:
    """Divide la caja en franjas verticales (A–E) y mide cada una."""

    roi = _crop_region(binary, region)
    bounds = strip_boundaries(roi.shape[1], options)
    return [darkness_ratio(roi[:, bounds[a] : bounds[a + 1]]) for a in range(options)]


def read_name_letter(binary: np.ndarray, region: Region, letters: int = 26) -> LetterScore:
    """Devuelve la franja horizontal (letra) con más tinta y su proporción."""

    roi = _crop_region(binary, region)
    bounds = strip_boundaries(roi.shape[0], letters)

    highest_count = 0.0
    highest_index = 0
    highest_ratio = 0.0
    for a in range(letters):
        strip = roi[bounds[a] : bounds[a + 1], :]
        count = float(strip.sum(dtype=np.float64))
        # Se compara la tinta bruta; en empate gana la primera letra
        if count > highest_count:
            highest_count = count
            highest_index = a
            highest_ratio = darkness_ratio(strip)
    return LetterScore(index=highest_index, confidence=highest_ratio)


__all__ = [
    "ExtractionSettings",
    "darkness_ratio",
    "read_answer",
    "read_name_letter",
    "strip_boundaries",
    "threshold_marks",
]
