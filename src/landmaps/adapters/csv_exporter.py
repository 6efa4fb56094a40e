# src/landmaps/adapters/csv_exporter.py

from __future__ import annotations

import csv
import logging
from typing import Any, List, Mapping, Sequence

from ..contracts.core import OutputWriteError
from ..ports.exporters import ReportExporterPort

logger = logging.getLogger(__name__)


class CSVExporter(ReportExporterPort):
    """Reporte tabular en CSV a partir de `context`.

    Convención:
      - `context["headers"]` -> columnas (si falta, las claves de la primera fila)
      - `context["rows"]`    -> secuencia de dicts; claves ausentes quedan vacías
    El `template_id` solo se usa en mensajes: el CSV no tiene plantillas.
    """
    def render(self, template_id: str, context: Mapping[str, Any], out_uri: str) -> str:
        rows: Sequence[Mapping[str, Any]] = list(context.get("rows", []))
        headers: List[str] = list(context.get("headers") or (rows[0].keys() if rows else []))
        try:
            with open(out_uri, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=headers, restval="", extrasaction="ignore")
                if headers:
                    writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            raise OutputWriteError(f"no se pudo escribir el reporte '{template_id}': {e}", path=out_uri) from e
        logger.debug("Reporte %s: %d filas", template_id, len(rows))
        return out_uri
