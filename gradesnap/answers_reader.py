"""Interpretación de los niveles de tinta A–E de cada pregunta."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from gradesnap.models import AnswerResult

STATUS_OK = "OK"
STATUS_BLANK = "SIN RESPUESTA"
STATUS_MULTIPLE = "RESPUESTA MULTIPLE"


@dataclass
class AnswersSummary:
    answers: List[AnswerResult]
    blanks: int
    conflicts: int


def interpret_answers(
    scores: Sequence[Sequence[float]],
    labels: Sequence[str] = ("A", "B", "C", "D", "E"),
    threshold: float = 0.25,
    conflict_ratio: float = 0.80,
) -> AnswersSummary:
    """Elige la alternativa marcada de cada pregunta.

    Una pregunta queda en blanco si ninguna alternativa supera ``threshold``
    y se marca como múltiple si la segunda alternativa alcanza
    ``conflict_ratio`` veces la tinta de la primera.
    """

    final: List[AnswerResult] = []
    blanks = 0
    conflicts = 0

    for q, options in enumerate(scores, start=1):
        values = list(options)
        best_idx = int(np.argmax(values)) if values else 0
        best = values[best_idx] if values else 0.0
        second = sorted(values, reverse=True)[1] if len(values) > 1 else 0.0

        if best < threshold:
            blanks += 1
            final.append(AnswerResult(question=q, selected=None, status=STATUS_BLANK, intensity=best))
            continue

        if second >= conflict_ratio * best:
            conflicts += 1
            final.append(
                AnswerResult(question=q, selected=None, status=STATUS_MULTIPLE, intensity=best)
            )
            continue

        final.append(
            AnswerResult(question=q, selected=labels[best_idx], status=STATUS_OK, intensity=best)
        )

    return AnswersSummary(answers=final, blanks=blanks, conflicts=conflicts)


__all__ = [
    "AnswersSummary",
    "STATUS_BLANK",
    "STATUS_MULTIPLE",
    "STATUS_OK",
    "interpret_answers",
]
