import numpy as np
import pytest
from pathlib import Path
from PIL import Image

from landmaps.adapters.pil_image_writer import PilImageWriter
from landmaps.contracts.core import OutputWriteError
from landmaps.contracts.grid import OutputGrid

pytestmark = pytest.mark.integration


def _grid():
    data = np.zeros((2, 3, 3), dtype=np.uint8)
    data[0, 0] = (98, 188, 47)
    data[1, 2] = (35, 137, 218)
    return OutputGrid(data)


def test_write_png_roundtrip(tmp_path: Path):
    out = tmp_path / "terrain.png"
    PilImageWriter().write(str(out), _grid())
    with Image.open(out) as im:
        assert im.mode == "RGB"
        assert im.size == (3, 2)
        back = np.asarray(im)
    np.testing.assert_array_equal(back, _grid().data)


def test_missing_folder_is_fatal(tmp_path: Path):
    with pytest.raises(OutputWriteError) as ei:
        PilImageWriter().write(str(tmp_path / "nope" / "terrain.png"), _grid())
    assert ei.value.path.endswith("terrain.png")


def test_same_input_same_bytes(tmp_path: Path):
    a, b = tmp_path / "a.png", tmp_path / "b.png"
    PilImageWriter().write(str(a), _grid())
    PilImageWriter().write(str(b), _grid())
    assert a.read_bytes() == b.read_bytes()
