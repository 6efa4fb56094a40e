# tests/unit/test_config.py
import pytest
import yaml
from pathlib import Path
from landmaps.config import Settings, get_settings
from landmaps.contracts.core import Axis, EdgePolicy, MissingCodePolicy
from landmaps.composition.di import build_engine, build_settings, build_spec

def test_settings_defaults(tmp_path: Path):
    s = Settings(project_root=tmp_path)
    assert s.scale == 4
    assert s.attribute_table == tmp_path.resolve() / "world.dbf"
    assert s.edge_policy == EdgePolicy.DROP
    assert s.missing_code_policy == MissingCodePolicy.UNCLASSIFIED
    assert s.out_path(tmp_path, Axis.TEMPERATURE) == tmp_path / "temperature.png"

def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("LANDMAPS_SCALE", "8")
    monkeypatch.setenv("LANDMAPS_EDGE_POLICY", "partial")
    s = get_settings()
    assert s.scale == 8
    assert s.edge_policy == EdgePolicy.PARTIAL
    assert get_settings() is s

def test_settings_guards():
    with pytest.raises(ValueError):
        Settings(output_names={"terrain": "t.png"})
    with pytest.raises(ValueError):
        Settings(output_names={"terrain": "a/t.png", "vegetation": "v.png",
                               "temperature": "te.png", "moisture": "m.png"})
    with pytest.raises(ValueError):
        Settings(scale=0)
    with pytest.raises(ValueError):
        Settings(log_level="verbose")
    assert Settings(log_level="debug").log_level == "DEBUG"

def test_build_settings_from_yaml(tmp_path: Path):
    (tmp_path / "landmaps.yaml").write_text(yaml.safe_dump({
        "scale": 2,
        "attribute_table": "tables/world.dbf",
        "missing_code_policy": "strict",
        "summary_csv": "summary.csv",
        "rows_per_task": 4,
    }), encoding="utf-8")
    s = build_settings(tmp_path)
    assert s.project_root == tmp_path.resolve()
    assert s.scale == 2
    assert s.attribute_table == tmp_path.resolve() / "tables" / "world.dbf"

    eng = build_engine(s)
    assert eng.missing_policy == MissingCodePolicy.STRICT
    assert eng.rows_per_task == 4
    spec = build_spec(s, tmp_path / "out")
    assert spec.scale == 2 and spec.summary_csv == "summary.csv"

def test_build_settings_without_yaml(tmp_path: Path):
    s = build_settings(tmp_path)
    assert s.project_root == tmp_path.resolve()
    assert s.scale == 4
