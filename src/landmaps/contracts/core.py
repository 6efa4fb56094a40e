# src/landmaps/contracts/core.py
from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

U16_MAX = 65535

# -------------------------
# Ejes de clasificación
# -------------------------
class Axis(str, Enum):
    TERRAIN = "terrain"
    VEGETATION = "vegetation"
    TEMPERATURE = "temperature"
    MOISTURE = "moisture"

# Orden canónico (coincide con las columnas de la tabla de atributos)
AXES: tuple[Axis, ...] = (Axis.TERRAIN, Axis.VEGETATION, Axis.TEMPERATURE, Axis.MOISTURE)

UNCLASSIFIED = 0


class AxisValues(NamedTuple):
    terrain: int
    vegetation: int
    temperature: int
    moisture: int

    def get(self, axis: Axis) -> int:
        return self[AXES.index(axis)]


UNCLASSIFIED_VALUES = AxisValues(UNCLASSIFIED, UNCLASSIFIED, UNCLASSIFIED, UNCLASSIFIED)

# -------------------------
# Colores tipados
# -------------------------
class RGB8(BaseModel):
    model_config = ConfigDict(frozen=True)
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)
    def as_tuple(self) -> tuple[int, int, int]: return (self.r, self.g, self.b)
    def to_hex(self) -> str: return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

# -------------------------
# Tabla de atributos
# -------------------------
class AttributeRow(BaseModel):
    """Fila de la tabla de atributos: código fuente → 4 ejes."""
    model_config = ConfigDict(frozen=True)
    code: int = Field(ge=0, le=U16_MAX)
    terrain: int = Field(0, ge=0, le=U16_MAX)
    vegetation: int = Field(0, ge=0, le=U16_MAX)
    temperature: int = Field(0, ge=0, le=U16_MAX)
    moisture: int = Field(0, ge=0, le=U16_MAX)

    def axis_values(self) -> AxisValues:
        return AxisValues(self.terrain, self.vegetation, self.temperature, self.moisture)

# -------------------------
# Políticas
# -------------------------
class MissingCodePolicy(str, Enum):
    UNCLASSIFIED = "unclassified"  # código sin fila → 0 en los 4 ejes
    STRICT = "strict"              # código sin fila → MissingMappingError

class EdgePolicy(str, Enum):
    DROP = "drop"        # floor(W/scale): descarta ventanas parciales
    PARTIAL = "partial"  # ceil(W/scale): agrega sobre la extensión real

# -------------------------
# Ejecuciones / errores
# -------------------------
class Stage(str, Enum):
    LOAD = "load"
    DECODE = "decode"
    CLASSIFY = "classify"
    WRITE = "write"

class RunError(BaseModel):
    model_config = ConfigDict(frozen=True)
    stage: Stage
    message: str
    detail: str | None = None

    def render(self) -> str:
        s = f"{self.stage.value}: {self.message}"
        return f"{s} ({self.detail})" if self.detail else s


class LandmapsError(Exception):
    """Error fatal de una conversión. Siempre identifica la etapa."""
    stage: Stage = Stage.LOAD

    def __init__(self, message: str, *, path: Optional[str] = None, stage: Optional[Stage] = None):
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None
        if stage is not None:
            self.stage = stage

    def to_run_error(self) -> RunError:
        return RunError(stage=self.stage, message=self.message, detail=self.path)


class InputNotFoundError(LandmapsError):
    stage = Stage.LOAD

class InputUnreadableError(LandmapsError):
    stage = Stage.LOAD

class UnsupportedFormatError(LandmapsError):
    stage = Stage.DECODE

class MissingMappingError(LandmapsError):
    stage = Stage.CLASSIFY

    def __init__(self, code: int, *, path: Optional[str] = None):
        super().__init__(f"no hay fila en la tabla de atributos para el código {int(code)}", path=path)
        self.code = int(code)

class OutputWriteError(LandmapsError):
    stage = Stage.WRITE

class BackendUnavailableError(LandmapsError):
    """No hay librería instalada para leer el formato; la etapa la fija quien lo lanza."""
    stage = Stage.LOAD

class GridShapeError(LandmapsError, ValueError):
    """La escala no cabe en el raster (salida vacía)."""
    stage = Stage.CLASSIFY

class ConfigurationError(LandmapsError, ValueError):
    stage = Stage.LOAD


__all__ = [
    "U16_MAX", "Axis", "AXES", "UNCLASSIFIED", "AxisValues", "UNCLASSIFIED_VALUES",
    "RGB8", "AttributeRow", "MissingCodePolicy", "EdgePolicy", "Stage", "RunError",
    "LandmapsError", "InputNotFoundError", "InputUnreadableError",
    "UnsupportedFormatError", "MissingMappingError", "OutputWriteError",
    "BackendUnavailableError", "GridShapeError", "ConfigurationError",
]
