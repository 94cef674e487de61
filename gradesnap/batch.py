"""Lectura de varias hojas en paralelo."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gradesnap.models import AnswerMatrix
from gradesnap.omr_system import OMRReader

logger = logging.getLogger(__name__)


def read_images(
    paths: Sequence[str | Path],
    num_questions: int,
    read_name: bool,
    max_workers: int | None = None,
    reader_factory: Callable[[], OMRReader] = OMRReader,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> List[AnswerMatrix]:
    """Devuelve una matriz por ruta, en el mismo orden que ``paths``.

    Cada hoja se procesa con su propio ``OMRReader``; no hay estado
    compartido entre hilos. No hay cancelación ni tiempo límite: la llamada
    vuelve cuando todas las hojas han terminado.
    """

    if num_questions < 1:
        raise ValueError(f"num_questions debe ser positivo: {num_questions}")

    total = len(paths)
    if total == 0:
        return []

    done = 0

    def _read(path: str | Path) -> AnswerMatrix:
        return reader_factory().read_image(path, num_questions, read_name)

    results: List[AnswerMatrix] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map entrega los resultados en orden de envío, no de finalización
        for matrix in executor.map(_read, paths):
            results.append(matrix)
            done += 1
            if progress_callback is not None:
                progress_callback(done, total)

    logger.info("Lote terminado: %d hojas", total)
    return results


__all__ = ["read_images"]
