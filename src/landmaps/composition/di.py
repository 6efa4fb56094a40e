# src/landmaps/composition/di.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict

import yaml

from ..config import Settings, get_settings
from ..contracts.core import ConfigurationError
from ..adapters.gdal_raster_reader import GdalRasterReader
from ..adapters.dbf_attribute_reader import DbfAttributeReader
from ..adapters.pil_image_writer import PilImageWriter
from ..adapters.csv_exporter import CSVExporter
from ..services.downscale_engine import DownscaleEngine
from ..services.conversion_service import ConversionService, ConversionSpec

CONFIG_NAME = "landmaps.yaml"

def load_settings_from_yaml(path: Path, **defaults: Any) -> Settings:
    data: Dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: se esperaba un mapeo YAML")
    for k, v in defaults.items():
        data.setdefault(k, v)
    return Settings(**data)

def build_settings(project_root: Path) -> Settings:
    """Settings desde `<root>/landmaps.yaml` si existe; si no, env/.env + defaults."""
    cfg = (project_root / CONFIG_NAME).resolve()
    try:
        if cfg.is_file():
            return load_settings_from_yaml(cfg, project_root=str(project_root))
        if project_root.resolve() == Path.cwd().resolve():
            return get_settings()
        return Settings(project_root=project_root)
    except (yaml.YAMLError, ValueError) as e:  # pydantic.ValidationError hereda de ValueError
        where = cfg if cfg.is_file() else project_root
        raise ConfigurationError(f"configuración inválida: {e}", path=str(where)) from e

def build_engine(s: Settings) -> DownscaleEngine:
    return DownscaleEngine(
        workers=s.workers,
        rows_per_task=s.rows_per_task,
        missing_policy=s.missing_code_policy,
        edge_policy=s.edge_policy,
        progress=s.progress,
    )

def build_service(s: Settings) -> ConversionService:
    return ConversionService(
        reader=GdalRasterReader(),
        table_reader=DbfAttributeReader(),
        writer=PilImageWriter(),
        engine=build_engine(s),
        reporter=CSVExporter() if s.summary_csv else None,
    )

def build_spec(s: Settings, output_dir: Path) -> ConversionSpec:
    return ConversionSpec(
        output_dir=Path(output_dir),
        scale=s.scale,
        output_names=dict(s.output_names),
        create_output_dir=s.create_output_dir,
        summary_csv=s.summary_csv,
    )
