import pytest

from packplan.core.solver_layer_pattern import (
    allocate_quantity_extended,
    build_extended_plan,
    plan_single_item_extended,
)
from packplan.core.solver_single_item import plan_single_item
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import LAYER_MIXED, LAYER_UNIFORM


@pytest.fixture
def tile():
    return Item(width=30, depth=20, height=10, keep_upright=True, name="Tile")


@pytest.fixture
def tray():
    """80 x 50 x 10: a 2 x 2 grid of tiles leaves a 20 mm strip on the right."""
    return Container(id=1, width=80, depth=50, height=10, name="Tray")


# ---------------------------------------------------------------------------
# Mixed-orientation layers
# ---------------------------------------------------------------------------

def test_strip_column_beats_uniform_grid(tile, tray):
    assert plan_single_item(tile, [tray]).capacity == 4

    plan = plan_single_item_extended(tile, [tray])
    assert plan.total_capacity == 5
    assert len(plan.layers) == 1

    layer = plan.layers[0]
    assert layer.kind == LAYER_MIXED
    assert [column.orientation for column in layer.columns] == [(30.0, 20.0, 10.0), (20.0, 30.0, 10.0)]
    assert [(column.count, column.rows) for column in layer.columns] == [(2, 2), (1, 1)]
    assert layer.used_width == pytest.approx(80.0)
    assert layer.used_depth == pytest.approx(40.0)


def test_uniform_layers_stack_up_to_the_layer_limit():
    item = Item(width=10, depth=10, height=10, max_stack_layers=3)
    container = Container(id=1, width=100, depth=100, height=100)
    plan = build_extended_plan(item, container)
    assert len(plan.layers) == 3
    assert all(layer.kind == LAYER_UNIFORM for layer in plan.layers)
    assert plan.total_capacity == 300
    assert plan.used_height == pytest.approx(30.0)


def test_layering_stops_once_quantity_is_covered():
    item = Item(width=10, depth=10, height=10)
    container = Container(id=1, width=100, depth=100, height=100)
    plan = build_extended_plan(item, container, quantity=150)
    assert len(plan.layers) == 2
    assert plan.total_capacity == 200


def test_vertical_gap_is_kept_between_layers():
    item = Item(width=10, depth=10, height=10, gap_z=5)
    container = Container(id=1, width=10, depth=10, height=40)
    plan = build_extended_plan(item, container)
    assert len(plan.layers) == 3
    assert plan.used_height == pytest.approx(40.0)


def test_item_larger_than_container_has_no_extended_plan(tray):
    item = Item(width=90, depth=60, height=20, keep_upright=True)
    assert build_extended_plan(item, tray) is None
    assert plan_single_item_extended(item, [tray]) is None


def test_layer_signature_identifies_the_arrangement(tile, tray):
    first = build_extended_plan(tile, tray)
    second = build_extended_plan(tile, tray)
    assert first.signature() == second.signature()
    assert first.signature().startswith("container-1-1-")


# ---------------------------------------------------------------------------
# Extended allocation
# ---------------------------------------------------------------------------

def test_extended_allocation_replans_each_remainder(tile, tray):
    result = allocate_quantity_extended(tile, 12, [tray])
    assert [shipment.quantity for shipment in result.shipments] == [5, 5, 2]
    assert result.leftover == 0


def test_small_remainder_goes_to_smaller_container():
    item = Item(width=10, depth=10, height=10)
    small = Container(id=2, width=10, depth=10, height=10)
    large = Container(id=1, width=100, depth=100, height=10)
    result = allocate_quantity_extended(item, 101, [large, small])
    assert [(shipment.container_id, shipment.quantity) for shipment in result.shipments] == [(1, 100), (2, 1)]


@pytest.mark.parametrize("quantity", [0, 3, 17])
def test_extended_allocation_conserves_quantity(tile, tray, quantity):
    result = allocate_quantity_extended(tile, quantity, [tray])
    assert result.allocated + result.leftover == quantity
    for shipment in result.shipments:
        assert shipment.quantities_by_item == (shipment.quantity,)


# ---------------------------------------------------------------------------
# Weight limits
# ---------------------------------------------------------------------------

@pytest.fixture
def heavy_cube():
    return Item(width=10, depth=10, height=10, unit_weight=0.1, name="Weight")


def test_weight_limit_counts_only_shipped_units(heavy_cube):
    # Two layers of 100 are built for 150 units; 150 x 0.1 kg is exactly the limit.
    container = Container(id=1, width=100, depth=100, height=20, max_weight=15)
    plan = plan_single_item_extended(heavy_cube, [container], 150)
    assert plan.total_capacity == 200
    assert plan.fits

    result = allocate_quantity_extended(heavy_cube, 150, [container])
    assert [shipment.quantity for shipment in result.shipments] == [150]
    assert result.leftover == 0


def test_overweight_container_is_skipped_for_a_lighter_one(heavy_cube):
    strict = Container(id=1, width=100, depth=100, height=20, max_weight=5)
    plain = Container(id=2, width=50, depth=50, height=10)
    assert build_extended_plan(heavy_cube, strict).fits is False

    plan = plan_single_item_extended(heavy_cube, [strict, plain])
    assert plan.container_id == 2
    assert plan.total_capacity == 25
