import os
import numpy as np
from landmaps.contracts.core import AttributeRow
from landmaps.contracts.grid import OutputGrid, SourceGrid
from landmaps.services.attribute_table import AttributeTable

def make_grid(rows):
    """Lista de filas → SourceGrid uint16."""
    return SourceGrid(np.array(rows, dtype=np.uint16))

def make_row(code, terrain=0, vegetation=0, temperature=0, moisture=0):
    return AttributeRow(code=code, terrain=terrain, vegetation=vegetation,
                        temperature=temperature, moisture=moisture)

def make_table(mapping):
    """{code: (terrain, vegetation, temperature, moisture)} → AttributeTable."""
    return AttributeTable.build(make_row(c, *v) for c, v in mapping.items())

def random_case(w=23, h=17, n_codes=12, seed=0):
    rng = np.random.default_rng(seed)
    grid = SourceGrid(rng.integers(0, n_codes, size=(h, w), dtype=np.uint16))
    attrs = rng.integers(0, 9, size=(n_codes, 4))
    table = make_table({c: tuple(int(a) for a in attrs[c]) for c in range(n_codes)})
    return grid, table


class FakeRasterReader:
    def __init__(self, grids):
        self._map = dict(grids)
        self.calls = []

    def read(self, uri):
        self.calls.append(uri)
        return self._map[uri]

    def size(self, uri):
        g = self._map[uri]
        return g.width, g.height

    def exists(self, uri):
        return uri in self._map


class FakeTableReader:
    def __init__(self, rows):
        self._rows = list(rows)

    def read(self, uri):
        return list(self._rows)


class MemoryImageWriter:
    """Guarda las grillas en memoria; mkdirs sí crea la carpeta."""
    def __init__(self):
        self.written = {}

    def write(self, uri, grid: OutputGrid):
        self.written[uri] = grid
        return uri

    def mkdirs(self, uri):
        os.makedirs(uri, exist_ok=True)
