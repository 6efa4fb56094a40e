# src/landmaps/ports/image_write.py
from __future__ import annotations

from typing import Protocol, runtime_checkable
from ..contracts.grid import OutputGrid

URI = str

@runtime_checkable
class ImageWriterPort(Protocol):
    """
    Escritor de imágenes RGB 8-bit (PNG).
    """
    def write(self, uri: URI, grid: OutputGrid) -> URI: ...
    def mkdirs(self, uri: URI) -> None: ...

__all__ = ["ImageWriterPort", "URI"]
