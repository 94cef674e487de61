"""Carga de hojas escaneadas y escritura de vistas previas."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import cv2  # type: ignore
import fitz  # PyMuPDF
import numpy as np


@dataclass
class InputSettings:
    # Resolución de renderizado cuando la hoja llega como PDF
    dpi: int = 300
    # Página del PDF que contiene la hoja (comienza en 1)
    page: int = 1
    jpeg_quality: int = 95


def load_image(path: str | Path, settings: InputSettings | None = None) -> np.ndarray | None:
    """Carga la hoja en escala de grises; devuelve ``None`` si no se puede leer."""

    settings = settings or InputSettings()
    path = Path(path)
    if not path.is_file():
        return None
    if path.suffix.lower() == ".pdf":
        return _render_pdf_page(path, settings)

    # imdecode tolera rutas con caracteres no ASCII
    data = np.fromfile(str(path), dtype=np.uint8)
    if data.size == 0:
        return None
    return cv2.imdecode(data, cv2.IMREAD_GRAYSCALE)


def _render_pdf_page(path: Path, settings: InputSettings) -> np.ndarray | None:
    try:
        doc = fitz.open(path)
    except (fitz.FileDataError, RuntimeError):
        return None
    with doc:
        if settings.page < 1 or settings.page > doc.page_count:
            return None
        page = doc[settings.page - 1]
        zoom = settings.dpi / 72
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), colorspace=fitz.csGRAY)
        except RuntimeError:
            # Página dañada: mupdf falla al rasterizar aunque el documento abra
            return None
        arr = np.frombuffer(pix.samples, dtype=np.uint8)
        return arr.reshape(pix.h, pix.w, pix.n)[:, :, 0].copy()


def save_preview(path: str | Path, image: np.ndarray, settings: InputSettings | None = None) -> bool:
    """Guarda la imagen rectificada con el formato que indica la extensión.

    Sin extensión, o con una que OpenCV no sabe escribir, se usa JPEG de alta
    calidad.
    """

    settings = settings or InputSettings()
    ext = Path(path).suffix.lower()
    if not ext or not cv2.haveImageWriter(f"preview{ext}"):
        ext = ".jpg"
    params = []
    if ext in (".jpg", ".jpeg", ".jpe"):
        params = [int(cv2.IMWRITE_JPEG_QUALITY), settings.jpeg_quality]
    ok, buffer = cv2.imencode(ext, image, params)
    if not ok:
        return False
    buffer.tofile(str(path))
    return True


__all__ = ["InputSettings", "load_image", "save_preview"]
