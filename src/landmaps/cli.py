# src/landmaps/cli.py
from __future__ import annotations

"""
CLI: raster de códigos uint16 → terrain/vegetation/temperature/moisture PNG.

Uso:
  landmaps <input_raster_path> <output_folder>

La tabla de atributos (`world.dbf`) se busca en el directorio de trabajo y el
factor de reducción es 4; ambos se pueden cambiar vía `landmaps.yaml` o
variables de entorno LANDMAPS_* (ver config.Settings).
"""

import argparse
import logging
import sys
from pathlib import Path

from .composition.di import build_service, build_settings, build_spec
from .contracts.core import LandmapsError
from .log import log_dict, setup_logger
from .services.conversion_service import ConversionInputs

logger = logging.getLogger("landmaps.cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="landmaps",
        description="Convierte un raster de códigos en 4 mapas de clasificación (PNG)",
    )
    p.add_argument("input_raster", help="raster uint16 de códigos (TIFF/GeoTIFF)")
    p.add_argument("output_folder", help="carpeta donde se escriben los PNG")
    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    if len(argv) != 2 and not any(a in ("-h", "--help") for a in argv):
        parser.print_usage(sys.stderr)
        return 1
    args = parser.parse_args(argv)

    try:
        s = build_settings(Path.cwd())
        setup_logger("landmaps", level=s.log_level, log_file=s.log_file)
        log_dict(logger, s.model_dump(mode="json"), title="Settings")

        service = build_service(s)
        spec = build_spec(s, Path(args.output_folder))
        inputs = ConversionInputs(raster_uri=args.input_raster, table_uri=str(s.attribute_table))
        result = service.run(inputs, spec)
    except KeyboardInterrupt:
        return 130
    except LandmapsError as ex:
        print(f"[ERROR] {ex.to_run_error().render()}", file=sys.stderr)
        return 1
    except Exception as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1

    for path in result.outputs.values():
        print(str(path))
    if result.summary_csv is not None:
        print(str(result.summary_csv))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
