import os
import pytest
from landmaps.config import get_settings

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # evita fuga de estado entre tests
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

def pytest_collection_modifyitems(items):
    run_gdal = os.environ.get("RUN_GDAL_TESTS") == "1"
    for item in items:
        if "gdal" in item.keywords and not run_gdal:
            item.add_marker(pytest.mark.skip(reason="requiere RUN_GDAL_TESTS=1"))
