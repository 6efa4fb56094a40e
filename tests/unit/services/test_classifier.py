import numpy as np
import pytest
from landmaps.contracts.core import UNCLASSIFIED_VALUES, AxisValues, MissingMappingError
from landmaps.services.classifier import classify, classify_codes
from tests.factories import make_table

TABLE = make_table({1: (4, 3, 2, 1), 2: (0, 5, 0, 3)})

def test_classify_known_code():
    assert classify(1, TABLE, threshold=10) == AxisValues(4, 3, 2, 1)

def test_zero_attribute_stays_unclassified_on_that_axis():
    assert classify(2, TABLE, threshold=10) == AxisValues(0, 5, 0, 3)

@pytest.mark.parametrize("code", [10, 11, 65535])
def test_at_or_above_threshold_is_unclassified_without_lookup(code):
    t = make_table({c: (1, 1, 1, 1) for c in (10, 11, 65535)})
    assert classify(code, t, threshold=10) == UNCLASSIFIED_VALUES

def test_missing_code_hardened_vs_strict():
    assert classify(7, TABLE, threshold=10) == UNCLASSIFIED_VALUES
    with pytest.raises(MissingMappingError) as ei:
        classify(7, TABLE, threshold=10, strict=True)
    assert ei.value.code == 7

def test_missing_code_above_threshold_is_not_an_error_in_strict_mode():
    assert classify(12, TABLE, threshold=10, strict=True) == UNCLASSIFIED_VALUES

def test_classify_codes_matches_scalar():
    codes = np.array([[0, 1, 2], [7, 10, 1]], dtype=np.uint16)
    lut, known = TABLE.lookup_arrays()
    for i in range(4):
        out = classify_codes(codes, lut[:, i], known, threshold=10)
        expected = [[classify(int(c), TABLE, 10)[i] for c in row] for row in codes]
        assert out.tolist() == expected
        assert out.dtype == np.uint16

def test_classify_codes_strict_reports_first_missing():
    codes = np.array([[1, 7], [8, 10]], dtype=np.uint16)
    lut, known = TABLE.lookup_arrays()
    with pytest.raises(MissingMappingError) as ei:
        classify_codes(codes, lut[:, 0], known, threshold=10, strict=True)
    assert ei.value.code == 7
