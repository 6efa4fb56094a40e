# src/landmaps/adapters/gdal_raster_reader.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import logging
import os
import numpy as np

# Try rasterio first; fallback to GDAL; last resort tifffile
try:  # rasterio path
    import rasterio
    from rasterio.errors import RasterioIOError
    _HAS_RASTERIO = True
except ImportError:  # pragma: no cover
    _HAS_RASTERIO = False

try:  # GDAL path
    from osgeo import gdal  # type: ignore
    gdal.UseExceptions()
    _HAS_GDAL = True
except ImportError:  # pragma: no cover
    _HAS_GDAL = False

try:  # tifffile minimal path (no georeferencing)
    import tifffile as tiff  # type: ignore
    _HAS_TIFFILE = True
except ImportError:  # pragma: no cover
    _HAS_TIFFILE = False

from ..contracts.core import (
    BackendUnavailableError, InputNotFoundError, InputUnreadableError, Stage, UnsupportedFormatError,
)
from ..contracts.grid import SourceGrid
from ..ports.raster_read import RasterReaderPort

logger = logging.getLogger(__name__)


def _as_source(arr: np.ndarray, uri: str) -> SourceGrid:
    if arr.dtype != np.uint16:
        raise UnsupportedFormatError(f"muestras {arr.dtype}, se requiere uint16", path=uri)
    if arr.ndim != 2:
        raise UnsupportedFormatError(f"se esperaba una banda 2D, llegó shape={arr.shape}", path=uri)
    return SourceGrid(arr)


@dataclass(frozen=True)
class GdalRasterReader(RasterReaderPort):
    """Lector de raster de códigos. Prefiere rasterio; si no, GDAL; último recurso, tifffile.

    Regla: `read()` devuelve **SourceGrid uint16 de una banda**. Datasets
    multibanda o de otro dtype → UnsupportedFormatError. TIFF multipágina: primera página.
    """

    # --------------- rasterio ---------------
    def _read_with_rasterio(self, uri: str) -> np.ndarray:
        assert _HAS_RASTERIO
        try:
            with rasterio.open(uri) as ds:
                if ds.count != 1:
                    raise UnsupportedFormatError(f"raster con {ds.count} bandas, se requiere 1", path=uri)
                return ds.read(1)
        except RasterioIOError as e:
            raise InputUnreadableError(f"no se pudo abrir el raster: {e}", path=uri) from e

    def _size_with_rasterio(self, uri: str) -> Tuple[int, int]:
        assert _HAS_RASTERIO
        try:
            with rasterio.open(uri) as ds:
                return ds.width, ds.height
        except RasterioIOError as e:
            raise InputUnreadableError(f"no se pudo abrir el raster: {e}", path=uri) from e

    # --------------- GDAL ---------------
    def _read_with_gdal(self, uri: str) -> np.ndarray:
        assert _HAS_GDAL
        try:
            ds = gdal.Open(uri, gdal.GA_ReadOnly)
        except RuntimeError as e:
            raise InputUnreadableError(f"no se pudo abrir el raster: {e}", path=uri) from e
        if ds is None:
            raise InputUnreadableError("no se pudo abrir el raster", path=uri)
        try:
            if ds.RasterCount != 1:
                raise UnsupportedFormatError(f"raster con {ds.RasterCount} bandas, se requiere 1", path=uri)
            return ds.GetRasterBand(1).ReadAsArray()
        finally:
            ds = None  # cierre explícito

    def _size_with_gdal(self, uri: str) -> Tuple[int, int]:
        assert _HAS_GDAL
        try:
            ds = gdal.Open(uri, gdal.GA_ReadOnly)
        except RuntimeError as e:
            raise InputUnreadableError(f"no se pudo abrir el raster: {e}", path=uri) from e
        try:
            return ds.RasterXSize, ds.RasterYSize
        finally:
            ds = None

    # --------------- tifffile ---------------
    def _read_with_tifffile(self, uri: str) -> np.ndarray:
        assert _HAS_TIFFILE
        try:
            arr = tiff.imread(uri, key=0)
        except (OSError, ValueError, tiff.TiffFileError) as e:
            raise InputUnreadableError(f"no se pudo decodificar el TIFF: {e}", path=uri) from e
        if arr.ndim == 3:
            if arr.shape[0] == 1:
                arr = arr[0]
            elif arr.shape[-1] == 1:
                arr = arr[..., 0]
            else:
                raise UnsupportedFormatError(f"TIFF multibanda no soportado (shape={arr.shape})", path=uri)
        return arr

    def _size_with_tifffile(self, uri: str) -> Tuple[int, int]:
        assert _HAS_TIFFILE
        try:
            with tiff.TiffFile(uri) as tf:
                shape = tf.pages[0].shape
        except (OSError, ValueError, tiff.TiffFileError) as e:
            raise InputUnreadableError(f"no se pudo decodificar el TIFF: {e}", path=uri) from e
        return int(shape[1]), int(shape[0])

    # --------------- RasterReaderPort ---------------
    def read(self, uri: str) -> SourceGrid:
        uri = str(uri)
        if not self.exists(uri):
            raise InputNotFoundError("no existe el raster de entrada", path=uri)
        if _HAS_RASTERIO:
            arr = self._read_with_rasterio(uri)
        elif _HAS_GDAL:
            arr = self._read_with_gdal(uri)
        elif _HAS_TIFFILE:
            arr = self._read_with_tifffile(uri)
        else:
            raise BackendUnavailableError(
                "no hay backend para leer rasters (instala rasterio, GDAL o tifffile)", path=uri, stage=Stage.DECODE
            )
        logger.debug("Raster %s: shape=%s dtype=%s", uri, arr.shape, arr.dtype)
        return _as_source(arr, uri)

    def size(self, uri: str) -> Tuple[int, int]:
        uri = str(uri)
        if not self.exists(uri):
            raise InputNotFoundError("no existe el raster de entrada", path=uri)
        if _HAS_RASTERIO:
            return self._size_with_rasterio(uri)
        if _HAS_GDAL:
            return self._size_with_gdal(uri)
        if _HAS_TIFFILE:
            return self._size_with_tifffile(uri)
        raise BackendUnavailableError("no hay backend para leer rasters", path=uri, stage=Stage.DECODE)

    def exists(self, uri: str) -> bool:
        return os.path.isfile(uri)
