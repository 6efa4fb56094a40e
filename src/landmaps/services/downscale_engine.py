# src/landmaps/services/downscale_engine.py
from __future__ import annotations

"""
Motor de reducción + clasificación.

Para cada celda de salida (x, y):
  ventana scale×scale en (x·scale, y·scale) → clasificar → voto por eje →
  paleta → escribir RGB en las 4 grillas de salida.

Paralelismo: las filas de salida se parten en bandas disjuntas; cada banda es
una tarea del pool y escribe SOLO su rebanada de filas en los buffers
preasignados. Sin locks: ninguna celda es escrita por dos tareas.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

import numpy as np
from tqdm import tqdm

from ..contracts.core import AXES, Axis, EdgePolicy, GridShapeError, MissingCodePolicy
from ..contracts.grid import OutputGrid, SourceGrid, output_shape
from .aggregator import aggregate, majority_vote_rows
from .attribute_table import LUT_SIZE, AttributeTable
from .classifier import classify_codes
from .palette import color_for, colorize

logger = logging.getLogger(__name__)

# Relleno de ventanas parciales: fuera del rango uint16, nunca vota
_PAD = LUT_SIZE


@dataclass(frozen=True)
class DownscaleResult:
    grids: Mapping[Axis, OutputGrid]
    counts: Mapping[Axis, Mapping[int, int]]  # valor de eje -> nº de píxeles de salida
    threshold: int
    scale: int
    source_size: Tuple[int, int]  # (width, height)

    @property
    def size(self) -> Tuple[int, int]:
        g = self.grids[Axis.TERRAIN]
        return g.width, g.height


@dataclass
class DownscaleEngine:
    workers: Optional[int] = None
    rows_per_task: int = 16
    missing_policy: MissingCodePolicy = MissingCodePolicy.UNCLASSIFIED
    edge_policy: EdgePolicy = EdgePolicy.DROP
    progress: bool = False

    def __post_init__(self):
        if self.rows_per_task < 1:
            raise ValueError("rows_per_task debe ser >= 1")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers debe ser >= 1")
        self.missing_policy = MissingCodePolicy(self.missing_policy)
        self.edge_policy = EdgePolicy(self.edge_policy)

    # --------- API principal ---------
    def run(self, source: SourceGrid, table: AttributeTable, scale: int) -> DownscaleResult:
        scale = int(scale)
        out_w, out_h = output_shape(source.width, source.height, scale, self.edge_policy)
        if out_w == 0 or out_h == 0:
            raise GridShapeError(
                f"scale={scale} no cabe en el raster {source.width}x{source.height} con edge_policy={self.edge_policy.value}"
            )

        threshold = source.max_code()
        lut, known = table.lookup_arrays()
        buffers = {a: np.empty((out_h, out_w, 3), dtype=np.uint8) for a in AXES}

        bands = [(y0, min(y0 + self.rows_per_task, out_h)) for y0 in range(0, out_h, self.rows_per_task)]
        workers = self.workers or os.cpu_count() or 1
        logger.info(
            "Reduciendo %dx%d → %dx%d (scale=%d, umbral=%d, %d bandas, %d workers)",
            source.width, source.height, out_w, out_h, scale, threshold, len(bands), workers,
        )

        totals: Dict[Axis, np.ndarray] = {a: np.zeros(LUT_SIZE, dtype=np.int64) for a in AXES}
        abort = threading.Event()
        with ThreadPoolExecutor(max_workers=workers) as pool, \
                tqdm(total=len(bands), disable=not self.progress, desc="Reduciendo", unit="banda") as bar:
            futures = [
                pool.submit(self._run_band, abort, source, lut, known, threshold, scale, y0, y1, out_w, buffers)
                for y0, y1 in bands
            ]
            try:
                for fut in as_completed(futures):
                    band_counts = fut.result()
                    bar.update(1)
                    if band_counts is None:
                        continue
                    for axis, bc in band_counts.items():
                        totals[axis][: bc.size] += bc
            except BaseException:
                # las bandas en cola no arrancan; solo terminan las que ya corren
                abort.set()
                for f in futures:
                    f.cancel()
                raise

        grids = {a: OutputGrid(buffers[a]) for a in AXES}
        counts = {a: {int(v): int(totals[a][v]) for v in np.flatnonzero(totals[a])} for a in AXES}
        return DownscaleResult(
            grids=grids,
            counts=counts,
            threshold=threshold,
            scale=scale,
            source_size=(source.width, source.height),
        )

    # --------- tarea por banda ---------
    def _run_band(self, abort: threading.Event, *args) -> Optional[Dict[Axis, np.ndarray]]:
        """Envuelve la banda: tras el primer error fatal las siguientes no se procesan."""
        if abort.is_set():
            return None
        try:
            return self._process_band(*args)
        except BaseException:
            abort.set()
            raise

    def _process_band(
        self,
        source: SourceGrid,
        lut: np.ndarray,
        known: np.ndarray,
        threshold: int,
        scale: int,
        y0: int,
        y1: int,
        out_w: int,
        buffers: Mapping[Axis, np.ndarray],
    ) -> Dict[Axis, np.ndarray]:
        bh = y1 - y0
        sy0 = y0 * scale
        sy1 = min(y1 * scale, source.height)
        sx1 = min(out_w * scale, source.width)
        codes = source.data[sy0:sy1, :sx1]
        padded = codes.shape != (bh * scale, out_w * scale)
        strict = self.missing_policy == MissingCodePolicy.STRICT

        counts: Dict[Axis, np.ndarray] = {}
        for i, axis in enumerate(AXES):
            # el chequeo estricto no depende del eje: basta con el primero
            vals = classify_codes(codes, lut[:, i], known, threshold, strict=strict and i == 0)
            if padded:
                full = np.full((bh * scale, out_w * scale), _PAD, dtype=np.uint32)
                full[: vals.shape[0], : vals.shape[1]] = vals
                vals = full
            windows = (
                vals.reshape(bh, scale, out_w, scale)
                .transpose(0, 2, 1, 3)
                .reshape(bh * out_w, scale * scale)
            )
            votes = majority_vote_rows(windows, ignore=_PAD if padded else None).astype(np.uint16)
            buffers[axis][y0:y1] = colorize(axis, votes).reshape(bh, out_w, 3)
            counts[axis] = np.bincount(votes)
        return counts

    def run_reference(self, source: SourceGrid, table: AttributeTable, scale: int) -> DownscaleResult:
        """Versión escalar celda a celda (sin vectorizar ni pool). Útil para validar."""
        out_w, out_h = output_shape(source.width, source.height, scale, self.edge_policy)
        if out_w == 0 or out_h == 0:
            raise GridShapeError(f"scale={scale} no cabe en el raster {source.width}x{source.height}")
        threshold = source.max_code()
        strict = self.missing_policy == MissingCodePolicy.STRICT
        buffers = {a: np.empty((out_h, out_w, 3), dtype=np.uint8) for a in AXES}
        counts: Dict[Axis, Dict[int, int]] = {a: {} for a in AXES}
        for y in range(out_h):
            for x in range(out_w):
                votes = aggregate(source.window(x, y, scale), table, threshold, strict=strict)
                for axis in AXES:
                    v = votes.get(axis)
                    buffers[axis][y, x] = color_for(axis, v).as_tuple()
                    counts[axis][v] = counts[axis].get(v, 0) + 1
        return DownscaleResult(
            grids={a: OutputGrid(buffers[a]) for a in AXES},
            counts=counts,
            threshold=threshold,
            scale=scale,
            source_size=(source.width, source.height),
        )


__all__ = ["DownscaleEngine", "DownscaleResult"]
