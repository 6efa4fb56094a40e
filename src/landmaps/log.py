# src/landmaps/log.py
"""
Utilidades de logging (consola con color + archivo opcional).
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

_FMT = "[%(asctime)s] %(levelname)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter con color por nivel"""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        # copia: no contamina el registro que ven otros handlers
        rec = logging.makeLogRecord(record.__dict__)
        rec.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(rec)


def setup_logger(
    name: str = "landmaps",
    level: str = "INFO",
    log_file: Optional[Path | str] = None,
    use_color: bool = True,
) -> logging.Logger:
    """
    Configura el logger raíz del paquete (consola a stderr + archivo opcional).
    Reemplaza handlers previos: llamar de nuevo no duplica salidas.
    """
    lvl = getattr(logging, level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(lvl)
    logger.handlers = []
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(lvl)
    if use_color and sys.stderr.isatty():
        console.setFormatter(ColoredFormatter(_FMT, datefmt=_DATEFMT))
    else:
        console.setFormatter(logging.Formatter(_FMT, datefmt=_DATEFMT))
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(logging.Formatter(_FMT, datefmt=_DATEFMT))
        logger.addHandler(fh)

    return logger


def log_dict(logger: logging.Logger, data: Mapping[str, Any], title: Optional[str] = None) -> None:
    """Loguea un dict alineado por clave (nivel DEBUG)."""
    if title:
        logger.debug("%s:", title)
    if not data:
        return
    width = max(len(str(k)) for k in data)
    for k, v in data.items():
        logger.debug("  %s: %s", str(k).ljust(width), v)


__all__ = ["ColoredFormatter", "setup_logger", "log_dict"]
