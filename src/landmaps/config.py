# src/landmaps/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.core import AXES, Axis, EdgePolicy, MissingCodePolicy

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Config unificada del proyecto. No toca disco.
    Debe ser construida y provista por composition/di.py (CLI).
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LANDMAPS_",
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
        validate_default=True,
    )

    # --- básicos ---
    project_root: Path = Path(".")
    attribute_table: Path = Path("world.dbf")  # relativa a project_root

    # --- motor ---
    scale: PositiveInt = 4
    workers: Optional[PositiveInt] = None  # si None, os.cpu_count()
    rows_per_task: PositiveInt = 16
    missing_code_policy: MissingCodePolicy = MissingCodePolicy.UNCLASSIFIED
    edge_policy: EdgePolicy = EdgePolicy.DROP
    progress: bool = True

    # --- salidas ---
    create_output_dir: bool = False
    summary_csv: Optional[str] = None  # p.ej. "summary.csv" dentro de la carpeta de salida
    output_names: Dict[str, str] = Field(default_factory=lambda: {a.value: f"{a.value}.png" for a in AXES})

    # --- logging ---
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("project_root", mode="before")
    @classmethod
    def _abs_root(cls, v: Path | str) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("attribute_table", mode="after")
    @classmethod
    def _rel_to_root(cls, p: Path, info) -> Path:
        root: Path = info.data.get("project_root") or Path(".").resolve()
        return p if p.is_absolute() else (root / p)

    @field_validator("log_level", mode="before")
    @classmethod
    def _level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if v2 not in _LOG_LEVELS:
            raise ValueError(f"log_level inválido: {v}")
        return v2

    @field_validator("output_names")
    @classmethod
    def _check_names(cls, d: Dict[str, str]) -> Dict[str, str]:
        allowed = {a.value for a in AXES}
        unknown = set(d) - allowed
        if unknown:
            raise ValueError(f"output_names usa ejes desconocidos: {sorted(unknown)}")
        missing = allowed - set(d)
        if missing:
            raise ValueError(f"output_names no define: {sorted(missing)}")
        for k, name in d.items():
            if not name.strip() or Path(name).name != name:
                raise ValueError(f"output_names[{k}] debe ser un nombre de archivo simple: {name!r}")
        return d

    # ----------------------------
    # Helpers puros (sin side-effects)
    # ----------------------------
    def out_path(self, output_dir: Path | str, axis: Axis) -> Path:
        """Ruta del PNG de un eje (no crea carpetas)."""
        return Path(output_dir) / self.output_names[Axis(axis).value]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala SOLO desde composition/di.py o CLI.
    Prohibido usarla en services/ (dominio). Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
