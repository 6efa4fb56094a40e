# src/landmaps/adapters/dbf_attribute_reader.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Sequence

import logging
import math
import os

# Try fiona first; fallback to GDAL/OGR
try:  # fiona path
    import fiona  # type: ignore
    from fiona.errors import FionaError  # type: ignore
    _HAS_FIONA = True
except ImportError:  # pragma: no cover
    _HAS_FIONA = False

try:  # OGR path
    from osgeo import ogr  # type: ignore
    ogr.UseExceptions()
    _HAS_OGR = True
except ImportError:  # pragma: no cover
    _HAS_OGR = False

from ..contracts.core import (
    U16_MAX, AttributeRow, BackendUnavailableError, InputNotFoundError, InputUnreadableError, Stage,
)
from ..ports.attribute_table import AttributeReaderPort

logger = logging.getLogger(__name__)

# columna DBF -> campo de AttributeRow
DEFAULT_FIELD_MAP: Mapping[str, str] = MappingProxyType({
    "Value": "code",
    "World_Lan1": "terrain",
    "World_Lan2": "vegetation",
    "World_Temp": "temperature",
    "World_Mois": "moisture",
})


def _to_u16(v: Any) -> int | None:
    """Numérico → int saturado a [0, 65535]; no numérico → None."""
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    if isinstance(v, float):
        if math.isnan(v):
            return None
        if math.isinf(v):
            return U16_MAX if v > 0 else 0
    return min(max(int(v), 0), U16_MAX)


def row_from_record(props: Mapping[str, Any], field_map: Mapping[str, str] = DEFAULT_FIELD_MAP) -> AttributeRow:
    """Campos ausentes o no numéricos quedan en 0 (no es error)."""
    vals = {name: 0 for name in field_map.values()}
    for col, name in field_map.items():
        n = _to_u16(props.get(col))
        if n is not None:
            vals[name] = n
    return AttributeRow(**vals)


@dataclass(frozen=True)
class DbfAttributeReader(AttributeReaderPort):
    """Lee la tabla de atributos (.dbf suelto o capa vectorial). Prefiere fiona; si no, OGR."""

    field_map: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_FIELD_MAP))

    # --------------- fiona ---------------
    def _records_with_fiona(self, uri: str) -> List[Mapping[str, Any]]:
        assert _HAS_FIONA
        out: List[Mapping[str, Any]] = []
        try:
            with fiona.open(uri) as src:
                for feat in src:
                    props = getattr(feat, "properties", None)
                    if props is None:
                        props = feat["properties"]
                    out.append(dict(props))
        except (FionaError, OSError) as e:
            raise InputUnreadableError(f"no se pudo leer la tabla de atributos: {e}", path=uri) from e
        return out

    # --------------- OGR ---------------
    def _records_with_ogr(self, uri: str) -> List[Mapping[str, Any]]:
        assert _HAS_OGR
        try:
            ds = ogr.Open(uri)
        except RuntimeError as e:
            raise InputUnreadableError(f"no se pudo leer la tabla de atributos: {e}", path=uri) from e
        if ds is None:
            raise InputUnreadableError("no se pudo leer la tabla de atributos", path=uri)
        try:
            layer = ds.GetLayer(0)
            return [feat.items() for feat in layer]
        finally:
            ds = None

    # --------------- AttributeReaderPort ---------------
    def read(self, uri: str) -> Sequence[AttributeRow]:
        uri = str(uri)
        if not os.path.isfile(uri):
            raise InputNotFoundError("no existe la tabla de atributos", path=uri)
        if _HAS_FIONA:
            records: Iterable[Mapping[str, Any]] = self._records_with_fiona(uri)
        elif _HAS_OGR:
            records = self._records_with_ogr(uri)
        else:
            raise BackendUnavailableError("no hay backend para leer DBF (instala fiona o GDAL)", path=uri, stage=Stage.LOAD)
        rows = [row_from_record(r, self.field_map) for r in records]
        logger.debug("Tabla %s: %d filas", uri, len(rows))
        return rows
