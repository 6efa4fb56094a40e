# src/landmaps/services/palette.py
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

import numpy as np

from ..contracts.core import AXES, RGB8, Axis
from .attribute_table import LUT_SIZE

# Agua / "no es tierra": color por defecto de los 4 ejes
DEFAULT_COLOR = RGB8(r=35, g=137, b=218)
DEFAULT_NAME = "Not land"


def _c(r: int, g: int, b: int) -> RGB8:
    return RGB8(r=r, g=g, b=b)

# valor de eje -> (nombre, color)
_TABLES: Mapping[Axis, Mapping[int, Tuple[str, RGB8]]] = MappingProxyType({
    Axis.TERRAIN: MappingProxyType({
        1: ("Mountains", _c(128, 128, 128)),
        2: ("Hills", _c(139, 69, 19)),
        3: ("Tablelands", _c(232, 193, 148)),
        4: ("Plains", _c(98, 188, 47)),
    }),
    Axis.VEGETATION: MappingProxyType({
        1: ("Cropland", _c(0, 128, 0)),
        2: ("Shrubland", _c(139, 69, 19)),
        3: ("Forest", _c(0, 128, 0)),
        4: ("Grassland", _c(0, 255, 0)),
        5: ("Settlement", _c(255, 0, 0)),
        6: ("Sparsely or non-vegetated", _c(128, 128, 128)),
        8: ("Snow and ice", _c(255, 255, 255)),
    }),
    Axis.TEMPERATURE: MappingProxyType({
        1: ("Boreal", _c(0, 0, 255)),
        2: ("Cool temperate", _c(0, 128, 255)),
        3: ("Warm temperate", _c(0, 255, 255)),
        4: ("Sub tropical", _c(255, 255, 0)),
        5: ("Tropical", _c(255, 0, 0)),
        6: ("Polar", _c(255, 255, 255)),
    }),
    Axis.MOISTURE: MappingProxyType({
        1: ("Desert", _c(255, 255, 0)),
        2: ("Dry", _c(255, 128, 0)),
        3: ("Moist", _c(0, 255, 0)),
    }),
})


def color_for(axis: Axis, value: int) -> RGB8:
    """Total: cualquier valor sin entrada cae en DEFAULT_COLOR."""
    entry = _TABLES[Axis(axis)].get(int(value))
    return entry[1] if entry else DEFAULT_COLOR


def class_name(axis: Axis, value: int) -> str:
    entry = _TABLES[Axis(axis)].get(int(value))
    return entry[0] if entry else DEFAULT_NAME


def legend(axis: Axis) -> Dict[int, Tuple[str, RGB8]]:
    return dict(_TABLES[Axis(axis)])


def _build_lut(axis: Axis) -> np.ndarray:
    lut = np.empty((LUT_SIZE, 3), dtype=np.uint8)
    lut[:] = DEFAULT_COLOR.as_tuple()
    for v, (_, col) in _TABLES[axis].items():
        lut[v] = col.as_tuple()
    lut.setflags(write=False)
    return lut

_LUTS: Mapping[Axis, np.ndarray] = MappingProxyType({a: _build_lut(a) for a in AXES})


def color_lut(axis: Axis) -> np.ndarray:
    """(65536, 3) uint8, solo lectura."""
    return _LUTS[Axis(axis)]


def colorize(axis: Axis, votes: np.ndarray) -> np.ndarray:
    """votos (...,) → RGB (..., 3) uint8."""
    return color_lut(axis)[votes]


__all__ = [
    "DEFAULT_COLOR", "DEFAULT_NAME", "color_for", "class_name",
    "legend", "color_lut", "colorize",
]
