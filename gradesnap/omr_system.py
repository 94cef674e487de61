"""Lector OMR completo basado en el marco de calibración de la hoja.

Encadena las etapas: carga de imagen, detección del marco y la marca de
orientación, rectificación, umbralizado y lectura de respuestas y nombre.
Cada etapa devuelve su resultado o un ``StageFailure``; el primer fallo corta
la lectura y se entrega al llamador como código centinela.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List

import numpy as np

from gradesnap.alignment import AlignmentResult, AlignmentSettings, orient_image
from gradesnap.answers_reader import interpret_answers
from gradesnap.bubble_reader import (
    ExtractionSettings,
    read_answer,
    read_name_letter,
    threshold_marks,
)
from gradesnap.calibration import CalibrationSettings, find_calib_corners
from gradesnap.errors import (
    STAGE_ERRORS,
    FailureKind,
    StageFailure,
    StageResult,
    decode_failure,
)
from gradesnap.models import AnswerMatrix, CornerSet, SheetResult, score_vectors
from gradesnap.name_reader import decode_name
from gradesnap.regions import find_answer_regions, find_name_regions
from gradesnap.scanner_input import InputSettings, load_image, save_preview
from gradesnap.template import DEFAULT_TEMPLATE, TemplateGeometry

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    LOADING = "loading"
    CALIBRATING = "calibrating"
    ORIENTING = "orienting"
    EXTRACTING = "extracting"
    DONE = "done"


def _run_stage(kind: FailureKind, message: str, func: Callable, *args) -> StageResult:
    """Ejecuta una etapa y traduce ``None`` o un error de OpenCV a su fallo."""

    try:
        result = func(*args)
    except STAGE_ERRORS as exc:
        return StageFailure(kind, f"{message}: {exc}")
    if result is None:
        return StageFailure(kind, message)
    return result


class OMRReader:
    def __init__(
        self,
        template: TemplateGeometry | None = None,
        input_settings: InputSettings | None = None,
        calibration_settings: CalibrationSettings | None = None,
        alignment_settings: AlignmentSettings | None = None,
        extraction_settings: ExtractionSettings | None = None,
    ) -> None:
        self.template = template or DEFAULT_TEMPLATE
        self.input_settings = input_settings or InputSettings()
        self.calibration_settings = calibration_settings or CalibrationSettings()
        self.alignment_settings = alignment_settings or AlignmentSettings()
        self.extraction_settings = extraction_settings or ExtractionSettings()

    # ------------------------------------------------------------------
    # Puntos de entrada
    # ------------------------------------------------------------------

    def read_image(self, path: str | Path, num_questions: int, read_name: bool) -> AnswerMatrix:
        """Lee una hoja y devuelve la matriz de respuestas.

        Devuelve un vector de 5 valores por pregunta seguido del vector del
        nombre (17 valores; ceros si ``read_name`` es falso). Si alguna etapa
        falla, la matriz es sólo ``[[código]]`` con el código negativo de la
        etapa. Nunca lanza por fallos de la hoja.
        """

        if num_questions < 1:
            raise ValueError(f"num_questions debe ser positivo: {num_questions}")

        state = PipelineState.LOADING
        gray = _run_stage(
            FailureKind.IMAGE_UNREADABLE,
            "No se pudo cargar la imagen",
            load_image,
            path,
            self.input_settings,
        )
        if isinstance(gray, StageFailure):
            return self._fail(path, state, gray)

        state = PipelineState.CALIBRATING
        corners = self._calibrate(gray)
        if isinstance(corners, StageFailure):
            return self._fail(path, state, corners)

        state = PipelineState.ORIENTING
        alignment = self._orient(gray, corners)
        if isinstance(alignment, StageFailure):
            return self._fail(path, state, alignment)

        state = PipelineState.EXTRACTING
        answers = _run_stage(
            FailureKind.EXTRACTION_FAILED,
            "No se pudieron leer las marcas",
            self._extract,
            alignment,
            num_questions,
            read_name,
        )
        if isinstance(answers, StageFailure):
            return self._fail(path, state, answers)

        logger.info("%s: %d preguntas leídas", path, num_questions)
        logger.debug("%s: estado %s", path, PipelineState.DONE.value)
        return answers

    def prep_show_image(self, path: str | Path, out_path: str | Path) -> None:
        """Guarda la hoja rectificada para revisarla visualmente.

        No puntúa marcas. Ante cualquier fallo no escribe nada.
        """

        gray = _run_stage(
            FailureKind.IMAGE_UNREADABLE,
            "No se pudo cargar la imagen",
            load_image,
            path,
            self.input_settings,
        )
        if isinstance(gray, StageFailure):
            logger.info("Vista previa omitida para %s: %s", path, gray.message)
            return
        corners = self._calibrate(gray)
        if isinstance(corners, StageFailure):
            logger.info("Vista previa omitida para %s: %s", path, corners.message)
            return
        alignment = self._orient(gray, corners)
        if isinstance(alignment, StageFailure):
            logger.info("Vista previa omitida para %s: %s", path, alignment.message)
            return

        try:
            written = save_preview(out_path, alignment.image, self.input_settings)
        except STAGE_ERRORS as exc:
            logger.info("Vista previa omitida para %s: %s", path, exc)
            return
        if written:
            logger.info("Vista previa guardada en %s", out_path)

    def read_sheet(
        self,
        path: str | Path,
        num_questions: int,
        read_name: bool,
        labels: tuple[str, ...] = ("A", "B", "C", "D", "E"),
    ) -> SheetResult:
        """Igual que ``read_image`` pero con las respuestas ya interpretadas."""

        matrix = self.read_image(path, num_questions, read_name)
        return build_sheet_result(path, matrix, read_name, labels)

    # ------------------------------------------------------------------
    # Etapas
    # ------------------------------------------------------------------

    def _calibrate(self, gray: np.ndarray) -> StageResult[CornerSet]:
        return _run_stage(
            FailureKind.CALIBRATION_NOT_FOUND,
            "No se encontró el marco de calibración o la marca de orientación",
            find_calib_corners,
            gray,
            self.calibration_settings,
            self.template,
        )

    def _orient(self, gray: np.ndarray, corners: CornerSet) -> StageResult[AlignmentResult]:
        return _run_stage(
            FailureKind.ORIENTATION_FAILED,
            "No se pudo rectificar la hoja",
            orient_image,
            gray,
            corners,
            self.alignment_settings,
            self.template,
        )

    def _extract(self, alignment: AlignmentResult, num_questions: int, read_name: bool) -> AnswerMatrix:
        binary = threshold_marks(alignment.image, self.extraction_settings)
        ul = alignment.corners.ul

        answers: AnswerMatrix = []
        regions = find_answer_regions(ul, alignment.ratios, num_questions, self.template)
        for region in regions:
            answers.append(read_answer(binary, region, self.template.options_per_question))

        name: List[float] = [0.0] * self.template.name_cells
        if read_name:
            cells = find_name_regions(ul, alignment.ratios, self.template)
            name = [
                read_name_letter(binary, cell, self.template.letters_per_cell).packed()
                for cell in cells
            ]
        answers.append(name)
        return answers

    @staticmethod
    def _fail(path: str | Path, state: PipelineState, failure: StageFailure) -> AnswerMatrix:
        logger.warning(
            "%s: fallo en etapa %s (%d): %s",
            path,
            state.value,
            failure.kind.value,
            failure.message,
        )
        return [failure.as_vector()]


def build_sheet_result(
    path: str | Path,
    matrix: AnswerMatrix,
    read_name: bool,
    labels: tuple[str, ...] = ("A", "B", "C", "D", "E"),
) -> SheetResult:
    """Interpreta una matriz ya leída (respuestas elegidas y nombre)."""

    failure = decode_failure(matrix)
    if failure is not None:
        return SheetResult(source=Path(path), matrix=matrix, failure=failure)

    summary = interpret_answers(score_vectors(matrix), labels)
    name = decode_name(matrix[-1]).full if read_name else ""
    return SheetResult(
        source=Path(path),
        matrix=matrix,
        name=name,
        answers=summary.answers,
    )


__all__ = ["OMRReader", "PipelineState", "build_sheet_result"]
