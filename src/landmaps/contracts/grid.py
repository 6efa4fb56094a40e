# src/landmaps/contracts/grid.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .core import EdgePolicy, UnsupportedFormatError

# ---------- Grilla fuente (puro dominio, sin I/O) ----------
@dataclass(frozen=True)
class SourceGrid:
    """Códigos uint16, (height, width), row-major. Solo lectura."""
    data: "npt.NDArray[np.uint16]"  # type: ignore[valid-type]

    def __post_init__(self):
        arr = self.data
        if not isinstance(arr, np.ndarray) or arr.dtype != np.uint16:
            dt = getattr(arr, "dtype", type(arr).__name__)
            raise UnsupportedFormatError(f"se esperaban muestras uint16, llegó {dt}")
        if arr.ndim != 2:
            raise UnsupportedFormatError(f"se esperaba raster 2D (una banda), llegó ndim={arr.ndim}")
        if arr.size == 0:
            raise UnsupportedFormatError("raster vacío")
        # vista propia de solo lectura: el buffer del llamador sigue escribible
        view = arr.view()
        view.setflags(write=False)
        object.__setattr__(self, "data", view)

    @classmethod
    def from_flat(cls, values: Sequence[int] | "npt.NDArray[Any]", width: int, height: int) -> "SourceGrid":
        arr = np.asarray(values)
        if arr.dtype != np.uint16:
            if arr.dtype.kind not in "ui" or (arr.size and (arr.min() < 0 or arr.max() > 65535)):
                raise UnsupportedFormatError(f"muestras fuera de rango uint16 (dtype={arr.dtype})")
            arr = arr.astype(np.uint16)
        if arr.size != width * height:
            raise ValueError(f"{arr.size} muestras no calzan con {width}x{height}")
        return cls(arr.reshape(height, width))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def max_code(self) -> int:
        return int(self.data.max())

    def window(self, x: int, y: int, scale: int) -> "npt.NDArray[np.uint16]":
        """Códigos de la ventana de la celda de salida (x, y), recortada al borde, en orden raster."""
        x0, y0 = x * scale, y * scale
        if x0 >= self.width or y0 >= self.height or x < 0 or y < 0:
            raise IndexError(f"celda de salida ({x}, {y}) fuera de la grilla fuente")
        x1, y1 = min(x0 + scale, self.width), min(y0 + scale, self.height)
        return self.data[y0:y1, x0:x1].ravel()


def output_shape(width: int, height: int, scale: int, edge: EdgePolicy) -> Tuple[int, int]:
    """(out_width, out_height) según la política de borde."""
    if scale < 1:
        raise ValueError(f"scale debe ser >= 1 (llegó {scale})")
    if edge == EdgePolicy.PARTIAL:
        return -(-width // scale), -(-height // scale)
    return width // scale, height // scale

# ---------- Grilla de salida ----------
@dataclass(frozen=True)
class OutputGrid:
    """Píxeles RGB uint8, (height, width, 3)."""
    data: "npt.NDArray[np.uint8]"  # type: ignore[valid-type]

    def __post_init__(self):
        if self.data.ndim != 3 or self.data.shape[2] != 3 or self.data.dtype != np.uint8:
            raise ValueError(f"OutputGrid requiere (h, w, 3) uint8, llegó {self.data.shape} {self.data.dtype}")
        self.data.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b = self.data[y, x]
        return int(r), int(g), int(b)


__all__ = ["SourceGrid", "OutputGrid", "output_shape"]
