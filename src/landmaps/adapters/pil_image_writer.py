# src/landmaps/adapters/pil_image_writer.py
from __future__ import annotations

import logging
import os

from PIL import Image

from ..contracts.core import OutputWriteError
from ..contracts.grid import OutputGrid
from ..ports.image_write import ImageWriterPort

logger = logging.getLogger(__name__)


class PilImageWriter(ImageWriterPort):
    """Escribe OutputGrid como PNG RGB 8-bit. No crea carpetas implícitamente."""

    def write(self, uri: str, grid: OutputGrid) -> str:
        uri = str(uri)
        d = os.path.dirname(uri)
        if d and not os.path.isdir(d):
            raise OutputWriteError("no existe la carpeta de salida", path=uri)
        try:
            Image.fromarray(grid.data).save(uri, format="PNG")
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"no se pudo escribir la imagen: {e}", path=uri) from e
        logger.info("Escrito %s (%dx%d)", uri, grid.width, grid.height)
        return uri

    def mkdirs(self, uri: str) -> None:
        try:
            os.makedirs(uri, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(f"no se pudo crear la carpeta de salida: {e}", path=uri) from e
