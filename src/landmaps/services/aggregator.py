# src/landmaps/services/aggregator.py
from __future__ import annotations

"""
Voto de mayoría por ventana.

Desempate determinista: gana el PRIMER valor que alcanza la frecuencia máxima
recorriendo la ventana en orden raster (fila por fila, izquierda → derecha).
Con pluralidad estricta el resultado no depende del orden de recorrido.
"""

from typing import Dict, Iterable, Optional

import numpy as np

from ..contracts.core import AxisValues
from .attribute_table import AttributeTable
from .classifier import classify


def majority_vote(values: Iterable[int]) -> int:
    counts: Dict[int, int] = {}
    best, best_count = None, 0
    for v in values:
        c = counts.get(v, 0) + 1
        counts[v] = c
        # estrictamente mayor: un empate posterior no desplaza al primero
        if c > best_count:
            best, best_count = v, c
    if best is None:
        raise ValueError("ventana vacía")
    return int(best)


def aggregate(window: Iterable[int], table: AttributeTable, threshold: int, *, strict: bool = False) -> AxisValues:
    """Clasifica cada código de la ventana y vota por eje."""
    classified = [classify(int(c), table, threshold, strict=strict) for c in window]
    if not classified:
        raise ValueError("ventana vacía")
    return AxisValues(*(majority_vote(col) for col in zip(*classified)))


def majority_vote_rows(windows: np.ndarray, ignore: Optional[int] = None) -> np.ndarray:
    """
    Voto por fila de un bloque (n_ventanas, k), mismo desempate que `majority_vote`.
    `ignore`: valor de relleno que no vota (ventanas parciales en el borde).
    Cada fila debe tener al menos un valor distinto de `ignore`.
    """
    if windows.ndim != 2:
        raise ValueError("windows debe ser 2D (n_ventanas, k)")
    n, k = windows.shape
    if k == 0:
        raise ValueError("ventana vacía")
    pos = np.arange(k)
    # orden estable: dentro de cada corrida las posiciones originales quedan ascendentes
    order = np.argsort(windows, axis=1, kind="stable")
    s = np.take_along_axis(windows, order, axis=1)

    start = np.ones((n, k), dtype=bool)
    start[:, 1:] = s[:, 1:] != s[:, :-1]
    end = np.ones((n, k), dtype=bool)
    end[:, :-1] = start[:, 1:]

    run_start = np.maximum.accumulate(np.where(start, pos, 0), axis=1)
    run_end = np.minimum.accumulate(np.where(end, pos, k - 1)[:, ::-1], axis=1)[:, ::-1]
    counts = run_end - run_start + 1
    if ignore is not None:
        counts[s == ignore] = 0

    best = counts.max(axis=1, keepdims=True)
    # al final de cada corrida, order[] es la posición de la ocurrencia que alcanza el conteo
    candidates = end & (counts == best) & (counts > 0)
    reach = np.where(candidates, order, k)
    winner = np.argmin(reach, axis=1)
    return s[np.arange(n), winner]


__all__ = ["majority_vote", "aggregate", "majority_vote_rows"]
