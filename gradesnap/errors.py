"""Fallos de las etapas del lector y sus códigos centinela."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, TypeVar, Union

import cv2  # type: ignore


class FailureKind(IntEnum):
    """Tipo de fallo. El valor es el código que recibe el llamador."""

    IMAGE_UNREADABLE = -1
    CALIBRATION_NOT_FOUND = -2
    ORIENTATION_FAILED = -3
    EXTRACTION_FAILED = -4

    @property
    def sentinel(self) -> float:
        return float(self.value)


@dataclass(frozen=True)
class StageFailure:
    """Resultado de una etapa que no pudo completarse."""

    kind: FailureKind
    message: str = ""

    def as_vector(self) -> list[float]:
        return [self.kind.sentinel]


T = TypeVar("T")
StageResult = Union[T, StageFailure]

# Errores que una etapa convierte en su propio StageFailure. Cualquier otra
# excepción es un error de programación y se propaga.
STAGE_ERRORS = (cv2.error, OSError, ValueError, IndexError, ZeroDivisionError)


def decode_failure(matrix: Sequence[Sequence[float]]) -> FailureKind | None:
    """Devuelve el fallo codificado al final de la matriz, si lo hay."""

    if not matrix:
        return None
    last = matrix[-1]
    if len(last) != 1:
        return None
    try:
        return FailureKind(int(last[0]))
    except ValueError:
        return None


__all__ = [
    "FailureKind",
    "STAGE_ERRORS",
    "StageFailure",
    "StageResult",
    "decode_failure",
]
