"""Lector OMR de hojas GradeSnap."""

from gradesnap.batch import read_images
from gradesnap.errors import FailureKind, StageFailure, decode_failure
from gradesnap.models import AnswerMatrix, CornerSet, LetterScore, Region, ScaleRatios
from gradesnap.omr_system import OMRReader
from gradesnap.template import DEFAULT_TEMPLATE, TemplateGeometry

__all__ = [
    "AnswerMatrix",
    "CornerSet",
    "DEFAULT_TEMPLATE",
    "FailureKind",
    "LetterScore",
    "OMRReader",
    "Region",
    "ScaleRatios",
    "StageFailure",
    "TemplateGeometry",
    "decode_failure",
    "read_images",
]
