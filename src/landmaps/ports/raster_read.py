# src/landmaps/ports/raster_read.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Tuple
from ..contracts.grid import SourceGrid

URI = str

@runtime_checkable
class RasterReaderPort(Protocol):
    """
    Decodificador de raster de códigos (GeoTIFF/TIFF multipágina, etc.).
    Reglas: devuelve SIEMPRE SourceGrid uint16 de una banda; sin límite de tamaño.
    """
    def read(self, uri: URI) -> SourceGrid: ...
    def size(self, uri: URI) -> Tuple[int, int]: ...  # (width, height)
    def exists(self, uri: URI) -> bool: ...

__all__ = ["RasterReaderPort", "URI"]
