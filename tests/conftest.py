import pytest

from packplan.models.container import Container
from packplan.models.item import Item


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def export_carton():
    """600 x 400 x 200 carton, the reference container for grid layouts."""
    return Container(id=4, width=600, depth=400, height=200, name="Export carton")


@pytest.fixture
def brick():
    """Free-rotating 60 x 40 x 20 unit that tiles the export carton exactly."""
    return Item(width=60, depth=40, height=20, name="Brick")


@pytest.fixture
def cube():
    return Item(width=100, depth=100, height=100, name="Cube")


@pytest.fixture
def small_catalog():
    """Catalogue where every inner dimension is below 700 mm."""
    return [
        Container(id=1, width=280, depth=200, height=150, name="60 size"),
        Container(id=2, width=600, depth=400, height=200, name="Export carton"),
    ]
