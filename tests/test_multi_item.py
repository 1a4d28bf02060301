import itertools

import pytest

from packplan.core.geometry_projection import project_geometry
from packplan.core.solver_multi_item import (
    allocate_multi_item_extended,
    build_multi_item_plan,
    choose_single_container_multi,
    pack_layer,
    plan_multi_item,
)
from packplan.core.utils_geometry import boxes_overlap
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import LAYER_PLACED


@pytest.fixture
def pair():
    return [
        Item(width=40, depth=30, height=20, keep_upright=True, name="Large"),
        Item(width=20, depth=20, height=20, keep_upright=True, name="Small"),
    ]


@pytest.fixture
def crate():
    return Container(id=1, width=100, depth=60, height=40, name="Crate")


# ---------------------------------------------------------------------------
# Shelf packing inside one layer
# ---------------------------------------------------------------------------

def test_pack_layer_places_types_round_robin(pair):
    orientations = {0: (40.0, 30.0, 20.0), 1: (20.0, 20.0, 20.0)}
    placed = pack_layer(orientations, [3, 4], 100, 60, 0)
    assert [(rect.x, rect.y, rect.item_index) for rect in placed] == [
        (0, 0, 0),
        (40, 0, 1),
        (60, 0, 0),
        (0, 30, 1),
        (20, 30, 0),
        (60, 30, 1),
        (80, 30, 1),
    ]


def test_pack_layer_stops_when_footprint_is_full():
    placed = pack_layer({0: (50.0, 50.0, 10.0)}, [10], 100, 100, 0)
    assert len(placed) == 4


# ---------------------------------------------------------------------------
# Multi-item plans
# ---------------------------------------------------------------------------

def test_both_types_share_a_layer(pair, crate):
    plan = build_multi_item_plan(pair, [3, 4], crate)
    assert len(plan.layers) == 1
    layer = plan.layers[0]
    assert layer.kind == LAYER_PLACED
    assert {rect.item_index for rect in layer.placed_items} == {0, 1}
    assert plan.capacity_by_item == (3, 4)
    assert plan.total_capacity == 7


def test_multi_item_allocation_matches_placed_counts(pair, crate):
    result = allocate_multi_item_extended(pair, [3, 4], [crate])
    assert len(result.shipments) == 1
    shipment = result.shipments[0]
    assert shipment.quantities_by_item == (3, 4)
    for index, wanted in enumerate(shipment.quantities_by_item):
        assert sum(layer.count_for_item(index) for layer in shipment.plan.layers) == wanted
    assert result.leftover == (0, 0)


@pytest.mark.parametrize("quantities", [[6, 10], [0, 9], [25, 3]])
def test_multi_item_allocation_conserves_and_does_not_overlap(pair, crate, quantities):
    result = allocate_multi_item_extended(pair, quantities, [crate])
    for index, wanted in enumerate(quantities):
        placed = sum(shipment.quantities_by_item[index] for shipment in result.shipments)
        assert placed + result.leftover[index] == wanted

    for shipment in result.shipments:
        positions = project_geometry(shipment, crate, pair)
        assert len(positions) == shipment.quantity
        for first, second in itertools.combinations(positions, 2):
            assert not boxes_overlap(
                (first.x0, first.y0, first.z0), first.dims, (second.x0, second.y0, second.z0), second.dims
            )


def test_stack_limit_excludes_item_from_upper_layers():
    item = Item(width=50, depth=50, height=10, keep_upright=True, max_stack_layers=1)
    container = Container(id=1, width=50, depth=50, height=30)
    plan = build_multi_item_plan([item], [3], container)
    assert plan.capacity_by_item == (1,)
    assert len(plan.layers) == 1


def test_mismatched_lengths_are_rejected(pair, crate):
    with pytest.raises(ValueError):
        build_multi_item_plan(pair, [1], crate)
    with pytest.raises(ValueError):
        allocate_multi_item_extended([], [], [crate])


def test_nothing_fits_leaves_everything_over(crate):
    item = Item(width=200, depth=200, height=200)
    result = allocate_multi_item_extended([item], [4], [crate])
    assert result.shipments == ()
    assert result.leftover == (4,)
    assert result.total_leftover == 4


def test_single_container_choice_prefers_smallest(pair, crate):
    big = Container(id=0, width=400, depth=400, height=400)
    shipment = choose_single_container_multi(pair, [3, 4], [big, crate])
    assert shipment.container_id == crate.id
    assert shipment.quantities_by_item == (3, 4)
    assert choose_single_container_multi(pair, [300, 4], [crate]) is None


# ---------------------------------------------------------------------------
# Weight limits
# ---------------------------------------------------------------------------

@pytest.fixture
def weighted_pair():
    return [
        Item(width=10, depth=10, height=10, unit_weight=0.1, name="Bolt"),
        Item(width=10, depth=10, height=10, unit_weight=0.1, name="Nut"),
    ]


def test_plan_multi_item_skips_overweight_container(weighted_pair):
    strict = Container(id=1, width=100, depth=100, height=20, max_weight=5)
    plain = Container(id=2, width=50, depth=50, height=10)
    assert build_multi_item_plan(weighted_pair, [100, 100], strict).fits is False

    plan = plan_multi_item(weighted_pair, [100, 100], [strict, plain])
    assert plan.container_id == 2
    assert plan.total_capacity == 25


def test_weight_limit_counts_placed_units(weighted_pair):
    container = Container(id=1, width=100, depth=100, height=20, max_weight=15)
    result = allocate_multi_item_extended(weighted_pair, [5, 5], [container])
    assert result.leftover == (0, 0)


def test_single_container_choice_skips_overweight_container(weighted_pair):
    strict = Container(id=1, width=100, depth=100, height=20, max_weight=0.5)
    roomy = Container(id=2, width=200, depth=200, height=200)
    shipment = choose_single_container_multi(weighted_pair, [3, 4], [strict, roomy])
    assert shipment.container_id == 2
    assert shipment.quantities_by_item == (3, 4)
