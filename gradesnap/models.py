"""Modelos de datos utilizados por el lector OMR.

Se utilizan dataclasses para mantener el código simple y facilitar su
conversión a estructuras tabulares cuando se exportan los resultados.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

from gradesnap.errors import FailureKind
from gradesnap.template import Point


AnswerMatrix = List[List[float]]

# Confianza máxima: la parte entera del valor empaquetado debe seguir siendo
# el índice de la letra.
MAX_LETTER_CONFIDENCE = 0.999999


@dataclass(frozen=True)
class CornerSet:
    """Esquinas del marco de calibración, siempre en orden UL/UR/LL/LR."""

    ul: Point
    ur: Point
    ll: Point
    lr: Point

    def as_quad(self) -> List[Point]:
        return [self.ul, self.ur, self.ll, self.lr]

    @classmethod
    def canonical(cls, width: float, height: float) -> "CornerSet":
        """Rectángulo con origen en (0, 0) usado tras la rectificación."""

        return cls(
            ul=(0.0, 0.0),
            ur=(float(width), 0.0),
            ll=(0.0, float(height)),
            lr=(float(width), float(height)),
        )


@dataclass(frozen=True)
class ScaleRatios:
    """Factores plantilla → píxeles de la imagen rectificada."""

    width_ratio: float
    height_ratio: float

    def scale(self, point: Point) -> Point:
        x, y = point
        return x * self.width_ratio, y * self.height_ratio


@dataclass(frozen=True)
class Region:
    """Rectángulo alineado a los ejes (caja de respuesta o celda de letra)."""

    x: int
    y: int
    width: int
    height: int

    @property
    def x1(self) -> int:
        return self.x + self.width

    @property
    def y1(self) -> int:
        return self.y + self.height

    def fits(self, shape: Tuple[int, ...]) -> bool:
        """Indica si la región cae completa dentro de una imagen ``shape``."""

        rows, cols = shape[:2]
        return (
            self.width > 0
            and self.height > 0
            and self.x >= 0
            and self.y >= 0
            and self.x1 <= cols
            and self.y1 <= rows
        )

    def overlaps(self, other: "Region") -> bool:
        return not (
            self.x1 <= other.x
            or other.x1 <= self.x
            or self.y1 <= other.y
            or other.y1 <= self.y
        )


@dataclass(frozen=True)
class LetterScore:
    """Letra más marcada de una celda del nombre y su nivel de tinta.

    Los consumidores externos reciben ambos valores empaquetados en un único
    float: la parte entera es el índice (0 = A) y la parte decimal la
    confianza.
    """

    index: int
    confidence: float

    def packed(self) -> float:
        return float(self.index) + min(self.confidence, MAX_LETTER_CONFIDENCE)

    @classmethod
    def unpack(cls, value: float) -> "LetterScore":
        index = int(math.floor(value))
        return cls(index=index, confidence=float(value) - index)


@dataclass
class AnswerResult:
    """Interpretación de una pregunta individual.

    Attributes
    ----------
    question:
        Número de pregunta (comienza en 1).
    selected:
        Letra marcada (A-E) o ``None`` si no hay una respuesta válida.
    status:
        ``OK``, ``SIN RESPUESTA`` o ``RESPUESTA MULTIPLE``.
    intensity:
        Nivel de tinta de la alternativa más marcada, útil para auditoría.
    """

    question: int
    selected: str | None
    status: str = "OK"
    intensity: float | None = None

    def to_dict(self, source: str, name: str) -> dict:
        """Devuelve la respuesta en formato listo para exportar."""

        return {
            "archivo": source,
            "nombre": name,
            "pregunta": self.question,
            "respuesta": self.selected or "-",
            "estado": self.status,
            "intensidad": self.intensity,
        }


@dataclass
class SheetResult:
    """Información procesada de una sola hoja de respuestas."""

    source: Path
    matrix: AnswerMatrix
    name: str = ""
    answers: List[AnswerResult] = field(default_factory=list)
    failure: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_records(self) -> List[dict]:
        """Expande todas las respuestas en una lista de diccionarios."""

        return [ans.to_dict(str(self.source), self.name) for ans in self.answers]


def score_vectors(matrix: AnswerMatrix) -> Sequence[List[float]]:
    """Vectores de pregunta de una matriz válida (sin el vector final)."""

    return matrix[:-1]


__all__ = [
    "AnswerMatrix",
    "AnswerResult",
    "CornerSet",
    "LetterScore",
    "MAX_LETTER_CONFIDENCE",
    "Region",
    "ScaleRatios",
    "SheetResult",
    "score_vectors",
]
