# src/landmaps/services/conversion_service.py
from __future__ import annotations

"""
Servicio de conversión raster de códigos → 4 mapas de clasificación, contracts-first.
Pipeline determinista:
  LOAD (tabla) → DECODE (raster) → CLASSIFY (reducción + voto) → WRITE (PNG + reporte opcional)

No asume backends concretos: todo va vía *ports*. No usa Settings; recibe la spec ya resuelta.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from ..contracts.core import AXES, Axis, OutputWriteError
from ..ports.attribute_table import AttributeReaderPort
from ..ports.exporters import ReportExporterPort
from ..ports.image_write import ImageWriterPort
from ..ports.raster_read import RasterReaderPort
from .attribute_table import AttributeTable
from .downscale_engine import DownscaleEngine, DownscaleResult
from .palette import class_name, color_for

logger = logging.getLogger(__name__)

# ----------------------
# Especificaciones / DTOs
# ----------------------

@dataclass(frozen=True)
class ConversionInputs:
    raster_uri: str
    table_uri: str

@dataclass(frozen=True)
class ConversionSpec:
    output_dir: Path
    scale: int = 4
    output_names: Mapping[str, str] = field(default_factory=lambda: {a.value: f"{a.value}.png" for a in AXES})
    create_output_dir: bool = False
    summary_csv: Optional[str] = None    # si None -> no escribe reporte
    report_template: str = "axis_summary"

@dataclass(frozen=True)
class ConversionResult:
    outputs: Mapping[Axis, Path]
    summary_csv: Optional[Path]
    counts: Mapping[Axis, Mapping[int, int]]
    percents: Mapping[Axis, Mapping[int, float]]
    threshold: int
    source_size: Tuple[int, int]
    output_size: Tuple[int, int]
    elapsed_s: float

# ----------------------
# Servicio
# ----------------------

@dataclass
class ConversionService:
    reader: RasterReaderPort
    table_reader: AttributeReaderPort
    writer: ImageWriterPort
    engine: DownscaleEngine = field(default_factory=DownscaleEngine)
    reporter: Optional[ReportExporterPort] = None

    # --------- API principal ---------
    def run(self, inputs: ConversionInputs, spec: ConversionSpec) -> ConversionResult:
        t0 = time.perf_counter()
        out_dir = Path(spec.output_dir)
        # la carpeta se valida antes del trabajo pesado
        self._check_output_dir(out_dir, spec.create_output_dir)

        # 1) LOAD tabla de atributos
        logger.info("Cargando tabla de atributos %s", inputs.table_uri)
        table = AttributeTable.build(self.table_reader.read(inputs.table_uri))
        if table.duplicates:
            logger.warning("%d códigos duplicados en la tabla: se conserva la primera fila", table.duplicates)
        logger.info("Tabla con %d códigos", len(table))

        # 2) DECODE raster
        logger.info("Cargando raster %s", inputs.raster_uri)
        source = self.reader.read(inputs.raster_uri)
        logger.info("Raster %dx%d", source.width, source.height)

        # 3) CLASSIFY
        res = self.engine.run(source, table, spec.scale)

        # 4) WRITE
        outputs: Dict[Axis, Path] = {}
        for axis in AXES:
            path = out_dir / spec.output_names[axis.value]
            self.writer.write(str(path), res.grids[axis])
            outputs[axis] = path

        percents = {a: self._to_percents(res.counts[a]) for a in AXES}
        summary = self._export_summary(res, percents, out_dir, spec)

        elapsed = time.perf_counter() - t0
        logger.info("Conversión terminada en %.1f s", elapsed)
        return ConversionResult(
            outputs=outputs,
            summary_csv=summary,
            counts=res.counts,
            percents=percents,
            threshold=res.threshold,
            source_size=res.source_size,
            output_size=res.size,
            elapsed_s=elapsed,
        )

    # --------- Fases internas ---------
    def _check_output_dir(self, out_dir: Path, create: bool) -> None:
        if out_dir.is_dir():
            return
        if create:
            self.writer.mkdirs(str(out_dir))
            return
        raise OutputWriteError("no existe la carpeta de salida", path=str(out_dir))

    @staticmethod
    def _to_percents(counts: Mapping[int, int]) -> Mapping[int, float]:
        total = sum(counts.values())
        if total <= 0:
            return {int(k): 0.0 for k in counts}
        return {int(k): (v / float(total)) * 100.0 for k, v in counts.items()}

    # --------- Reporte (opcional y sin rutas implícitas) ---------
    def _export_summary(
        self,
        res: DownscaleResult,
        percents: Mapping[Axis, Mapping[int, float]],
        out_dir: Path,
        spec: ConversionSpec,
    ) -> Optional[Path]:
        if spec.summary_csv is None or self.reporter is None:
            return None
        rows = []
        for axis in AXES:
            for value in sorted(res.counts[axis]):
                rows.append({
                    "axis": axis.value,
                    "value": value,
                    "class": class_name(axis, value),
                    "color": color_for(axis, value).to_hex(),
                    "pixels": res.counts[axis][value],
                    "percent": round(percents[axis][value], 4),
                })
        ctx = {
            "headers": ["axis", "value", "class", "color", "pixels", "percent"],
            "rows": rows,
        }
        path = out_dir / spec.summary_csv
        self.reporter.render(spec.report_template, ctx, str(path))
        logger.info("Reporte %s", path)
        return path


__all__ = [
    "ConversionInputs",
    "ConversionSpec",
    "ConversionResult",
    "ConversionService",
]
