# src/landmaps/services/attribute_table.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

import numpy as np

from ..contracts.core import AttributeRow, U16_MAX

LUT_SIZE = U16_MAX + 1


class AttributeTable:
    """
    Tabla código → fila de atributos, construida una vez y nunca mutada.

    Códigos duplicados: gana la PRIMERA fila encontrada (las siguientes se ignoran).
    """

    def __init__(self, rows: Tuple[AttributeRow, ...], index: Dict[int, AttributeRow], duplicates: int = 0):
        self._rows = rows
        self._index = index
        self.duplicates = duplicates
        self._lut: Optional[Tuple[np.ndarray, np.ndarray]] = None

    @classmethod
    def build(cls, rows: Iterable[AttributeRow]) -> "AttributeTable":
        rows_t = tuple(rows)
        index: Dict[int, AttributeRow] = {}
        dup = 0
        for r in rows_t:
            if r.code in index:
                dup += 1
                continue
            index[r.code] = r
        return cls(rows_t, index, dup)

    # --------- consulta ---------
    def lookup(self, code: int) -> Optional[AttributeRow]:
        return self._index.get(int(code))

    def __contains__(self, code: object) -> bool:
        return isinstance(code, (int, np.integer)) and int(code) in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[AttributeRow]:
        return iter(self._rows)

    def codes(self) -> Tuple[int, ...]:
        return tuple(sorted(self._index))

    def lookup_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        LUT densa para el motor vectorizado:
          - lut:   (65536, 4) uint16, columnas en orden AXES; 0 si no hay fila.
          - known: (65536,) bool, True si el código tiene fila.
        Se calcula una vez y se cachea (solo lectura).
        """
        if self._lut is None:
            lut = np.zeros((LUT_SIZE, 4), dtype=np.uint16)
            known = np.zeros(LUT_SIZE, dtype=bool)
            if self._index:
                codes = np.fromiter(self._index.keys(), dtype=np.int64, count=len(self._index))
                vals = np.array([r.axis_values() for r in self._index.values()], dtype=np.uint16)
                lut[codes] = vals
                known[codes] = True
            lut.setflags(write=False)
            known.setflags(write=False)
            self._lut = (lut, known)
        return self._lut


__all__ = ["AttributeTable", "LUT_SIZE"]
