import numpy as np
import pytest
from landmaps.contracts.core import AXES, Axis, EdgePolicy, GridShapeError, MissingCodePolicy, MissingMappingError
from landmaps.services.attribute_table import AttributeTable
from landmaps.services.classifier import classify
from landmaps.services.downscale_engine import DownscaleEngine
from landmaps.services.palette import color_for
from tests.factories import make_grid, make_table, random_case

BLUE = (35, 137, 218)
GREEN = (98, 188, 47)
GRAY = (128, 128, 128)


def _assert_same(a, b):
    for axis in AXES:
        np.testing.assert_array_equal(a.grids[axis].data, b.grids[axis].data)
    assert {k: dict(v) for k, v in a.counts.items()} == {k: dict(v) for k, v in b.counts.items()}


def test_quadrant_scenario():
    grid = make_grid([
        [1, 1, 1, 1],
        [2, 2, 2, 2],
        [1, 1, 1, 1],
        [2, 2, 2, 2],
    ])
    table = make_table({1: (4, 0, 0, 0), 2: (1, 0, 0, 0)})
    res = DownscaleEngine(workers=2, rows_per_task=1).run(grid, table, scale=2)
    terrain = res.grids[Axis.TERRAIN]
    assert (terrain.width, terrain.height) == (2, 2)
    # 2 es el máximo del raster → no-data; empate 4 vs 0 lo gana 4 (fila superior)
    assert res.threshold == 2
    for y in range(2):
        for x in range(2):
            assert terrain.pixel(x, y) == GREEN
    assert res.counts[Axis.TERRAIN] == {4: 4}


def test_quadrants_reflect_their_own_majority():
    grid = make_grid([
        [1, 1, 3, 3],
        [1, 2, 3, 1],
        [2, 2, 9, 9],
        [2, 1, 9, 1],
    ])
    table = make_table({1: (4, 1, 1, 1), 2: (1, 5, 5, 2), 3: (2, 8, 6, 3)})
    res = DownscaleEngine().run(grid, table, scale=2)
    t = res.grids[Axis.TERRAIN]
    assert t.pixel(0, 0) == GREEN          # 1 gana 3-1
    assert t.pixel(1, 0) == (139, 69, 19)  # 3 gana 3-1
    assert t.pixel(0, 1) == GRAY           # 2 gana 3-1
    assert t.pixel(1, 1) == BLUE           # 9 = máximo → no-data
    assert res.grids[Axis.VEGETATION].pixel(1, 0) == (255, 255, 255)


def test_scale_one_is_plain_classification():
    grid, table = random_case(w=11, h=7, seed=3)
    res = DownscaleEngine(workers=3, rows_per_task=2).run(grid, table, scale=1)
    thr = grid.max_code()
    for axis_i, axis in enumerate(AXES):
        g = res.grids[axis]
        assert (g.width, g.height) == (grid.width, grid.height)
        for y in range(grid.height):
            for x in range(grid.width):
                v = classify(int(grid.data[y, x]), table, thr)[axis_i]
                assert g.pixel(x, y) == color_for(axis, v).as_tuple()


def test_codes_at_max_are_blue_on_every_axis():
    grid = make_grid([[5, 7], [7, 7]])
    table = make_table({5: (1, 1, 1, 1), 7: (2, 2, 2, 2)})
    res = DownscaleEngine().run(grid, table, scale=1)
    for axis in AXES:
        assert res.grids[axis].pixel(1, 0) == BLUE
        assert res.grids[axis].pixel(1, 1) == BLUE
    assert res.grids[Axis.TERRAIN].pixel(0, 0) == GRAY


def test_divisible_dimensions_cover_exactly():
    grid, table = random_case(w=12, h=8, seed=1)
    res = DownscaleEngine(edge_policy=EdgePolicy.PARTIAL).run(grid, table, scale=4)
    assert res.size == (3, 2)
    assert sum(res.counts[Axis.TERRAIN].values()) == 6
    _assert_same(res, DownscaleEngine(edge_policy=EdgePolicy.DROP).run(grid, table, scale=4))


@pytest.mark.parametrize("edge", [EdgePolicy.DROP, EdgePolicy.PARTIAL])
@pytest.mark.parametrize("scale", [1, 2, 3, 4])
def test_vectorized_matches_reference(edge, scale):
    grid, table = random_case(w=23, h=17, n_codes=6, seed=scale)
    eng = DownscaleEngine(workers=4, rows_per_task=2, edge_policy=edge)
    _assert_same(eng.run(grid, table, scale), eng.run_reference(grid, table, scale))


def test_partial_edge_sizes_and_values():
    grid = make_grid([
        [1, 1, 2, 2, 3],
        [1, 1, 2, 2, 3],
        [2, 3, 3, 3, 9],
    ])
    table = make_table({1: (4, 0, 0, 0), 2: (1, 0, 0, 0), 3: (2, 0, 0, 0)})
    drop = DownscaleEngine(edge_policy=EdgePolicy.DROP).run(grid, table, scale=2)
    part = DownscaleEngine(edge_policy=EdgePolicy.PARTIAL).run(grid, table, scale=2)
    assert drop.size == (2, 1)
    assert part.size == (3, 2)
    t = part.grids[Axis.TERRAIN]
    assert t.pixel(2, 0) == (139, 69, 19)  # columna recortada [3, 3]
    assert t.pixel(0, 1) == GRAY            # fila recortada [2, 3]: empate, 2 primero
    assert t.pixel(2, 1) == BLUE            # esquina [9] = no-data


@pytest.mark.parametrize("workers, rows", [(1, 1), (2, 3), (8, 100)])
def test_results_do_not_depend_on_partitioning(workers, rows):
    grid, table = random_case(w=37, h=29, seed=7)
    base = DownscaleEngine(workers=1, rows_per_task=64, edge_policy=EdgePolicy.PARTIAL).run(grid, table, 3)
    other = DownscaleEngine(workers=workers, rows_per_task=rows, edge_policy=EdgePolicy.PARTIAL).run(grid, table, 3)
    _assert_same(base, other)


def test_idempotent_runs():
    grid, table = random_case(seed=11)
    eng = DownscaleEngine(workers=3, rows_per_task=1)
    _assert_same(eng.run(grid, table, 2), eng.run(grid, table, 2))


def test_empty_table_hardened_is_blue():
    grid = make_grid([[1, 2], [3, 4]])
    res = DownscaleEngine().run(grid, AttributeTable.build([]), scale=1)
    for axis in AXES:
        assert np.all(res.grids[axis].data == np.array(BLUE, dtype=np.uint8))


def test_empty_table_strict_raises():
    grid = make_grid([[1, 2], [3, 4]])
    eng = DownscaleEngine(missing_policy=MissingCodePolicy.STRICT)
    with pytest.raises(MissingMappingError) as ei:
        eng.run(grid, AttributeTable.build([]), scale=1)
    assert ei.value.code in (1, 2, 3)


def test_strict_ignores_codes_at_threshold():
    grid = make_grid([[1, 9], [9, 9]])
    eng = DownscaleEngine(missing_policy="strict")
    res = eng.run(grid, make_table({1: (4, 0, 0, 0)}), scale=1)
    assert res.grids[Axis.TERRAIN].pixel(0, 0) == GREEN


def test_output_grids_are_read_only():
    grid, table = random_case(seed=2)
    res = DownscaleEngine().run(grid, table, 2)
    with pytest.raises(ValueError):
        res.grids[Axis.MOISTURE].data[0, 0] = 0


def test_scale_larger_than_raster_with_drop():
    grid = make_grid([[1, 2, 3]])
    with pytest.raises(ValueError):
        DownscaleEngine().run(grid, make_table({}), scale=4)
    res = DownscaleEngine(edge_policy="partial").run(grid, make_table({}), scale=4)
    assert res.size == (1, 1)


def test_invalid_engine_parameters():
    with pytest.raises(ValueError):
        DownscaleEngine(rows_per_task=0)
    with pytest.raises(ValueError):
        DownscaleEngine(workers=0)


def test_scale_error_names_classify_stage():
    with pytest.raises(GridShapeError) as ei:
        DownscaleEngine().run(make_grid([[1, 2, 3]]), make_table({}), scale=4)
    assert ei.value.to_run_error().render().startswith("classify: scale=4")


def test_fatal_band_error_stops_remaining_bands(monkeypatch):
    rows = [[1, 2]] * 200
    rows[0] = [7, 2]  # 7 no tiene fila y queda bajo el umbral (9)
    rows[-1] = [9, 2]
    grid = make_grid(rows)
    calls = []
    original = DownscaleEngine._process_band

    def spy(self, *args):
        calls.append(args[5])  # y0
        return original(self, *args)

    monkeypatch.setattr(DownscaleEngine, "_process_band", spy)
    eng = DownscaleEngine(workers=1, rows_per_task=1, missing_policy="strict")
    with pytest.raises(MissingMappingError):
        eng.run(grid, make_table({1: (4, 0, 0, 0), 2: (1, 0, 0, 0)}), scale=1)
    assert calls == [0]
