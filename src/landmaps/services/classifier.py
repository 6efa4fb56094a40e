# src/landmaps/services/classifier.py
from __future__ import annotations

"""
Clasificación código → (terrain, vegetation, temperature, moisture).

Reglas:
  - code >= threshold (máximo observado en la grilla fuente) → no clasificado
    en los 4 ejes, sin consultar la tabla.
  - código sin fila → no clasificado (modo por defecto) o MissingMappingError
    (modo estricto).
  - un campo de atributo en 0 sigue siendo 0 (no clasificado en ese eje).
"""

import numpy as np

from ..contracts.core import UNCLASSIFIED_VALUES, AxisValues, MissingMappingError
from .attribute_table import AttributeTable


def classify(code: int, table: AttributeTable, threshold: int, *, strict: bool = False) -> AxisValues:
    if code >= threshold:
        return UNCLASSIFIED_VALUES
    row = table.lookup(code)
    if row is None:
        if strict:
            raise MissingMappingError(code)
        return UNCLASSIFIED_VALUES
    return row.axis_values()


def classify_codes(
    codes: np.ndarray,
    lut_column: np.ndarray,
    known: np.ndarray,
    threshold: int,
    *,
    strict: bool = False,
) -> np.ndarray:
    """Versión vectorizada para un eje: mismo shape que `codes`, uint16."""
    out = lut_column[codes]
    nodata = codes >= threshold
    if strict:
        missing = ~known[codes] & ~nodata
        if missing.any():
            raise MissingMappingError(int(codes[missing].flat[0]))
    out[nodata] = 0
    return out


__all__ = ["classify", "classify_codes"]
