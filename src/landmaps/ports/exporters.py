# src/landmaps/ports/exporters.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Mapping, Any

URI = str

@runtime_checkable
class ReportExporterPort(Protocol):
    """
    Reporte tabular de una conversión (conteos y porcentajes por eje).
    `context` trae "headers" y "rows"; devuelve la ruta escrita.
    """
    def render(self, template_id: str, context: Mapping[str, Any], out_uri: URI) -> URI: ...

__all__ = ["ReportExporterPort", "URI"]
