"""Decodificación del nombre a partir del vector de celdas empaquetadas."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import List, Sequence

from gradesnap.models import LetterScore
from gradesnap.template import DEFAULT_TEMPLATE, TemplateGeometry


@dataclass
class NameResult:
    first: str
    middle_initial: str
    last: str
    blanks: List[int]
    letters: List[LetterScore]

    @property
    def full(self) -> str:
        parts = [self.first, self.middle_initial, self.last]
        return " ".join(p for p in parts if p)


def decode_name(
    name_vector: Sequence[float],
    min_confidence: float = 0.15,
    template: TemplateGeometry = DEFAULT_TEMPLATE,
    alphabet: str = string.ascii_uppercase,
) -> NameResult:
    """Convierte cada valor empaquetado en letra.

    La parte entera es el índice de la letra y la decimal su confianza; las
    celdas por debajo de ``min_confidence`` se consideran vacías.
    """

    chars: List[str] = []
    blanks: List[int] = []
    letters: List[LetterScore] = []
    for i, value in enumerate(name_vector):
        letter = LetterScore.unpack(value)
        letters.append(letter)
        if letter.confidence < min_confidence or not 0 <= letter.index < len(alphabet):
            chars.append(" ")
            blanks.append(i)
            continue
        chars.append(alphabet[letter.index])

    mi = template.name_mi_index
    return NameResult(
        first="".join(chars[:mi]).strip(),
        middle_initial="".join(chars[mi : mi + 1]).strip(),
        last="".join(chars[mi + 1 :]).strip(),
        blanks=blanks,
        letters=letters,
    )


__all__ = ["NameResult", "decode_name"]
