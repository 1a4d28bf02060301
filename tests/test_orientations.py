import pytest

from packplan.core.utils_geometry import (
    Spacing,
    boxes_overlap,
    footprint_coverage,
    generate_orientations,
    grid_count,
    item_orientations,
    span,
    void_ratio,
    volume_utilization,
)
from packplan.models.container import Container
from packplan.models.item import Item


# ---------------------------------------------------------------------------
# Orientation enumeration
# ---------------------------------------------------------------------------

def test_free_item_has_six_orientations_identity_first():
    orientations = generate_orientations((60, 40, 20))
    assert len(orientations) == 6
    assert orientations[0] == (60.0, 40.0, 20.0)
    assert len(set(orientations)) == 6


def test_repeated_dimensions_are_deduplicated():
    assert generate_orientations((10, 10, 10)) == [(10.0, 10.0, 10.0)]
    assert len(generate_orientations((10, 10, 20))) == 3


def test_upright_item_keeps_height():
    item = Item(width=30, depth=20, height=10, keep_upright=True)
    assert item_orientations(item) == [(30.0, 20.0, 10.0), (20.0, 30.0, 10.0)]


def test_upright_square_footprint_has_single_orientation():
    assert generate_orientations((25, 25, 80), keep_upright=True) == [(25.0, 25.0, 80.0)]


def test_orientation_order_is_stable():
    assert generate_orientations((3, 2, 1)) == generate_orientations((3, 2, 1))


# ---------------------------------------------------------------------------
# Grid arithmetic
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "usable, size, gap, expected",
    [
        (100, 10, 0, 10),
        (100, 10, 5, 7),
        (99.9999999999, 10, 0, 10),
        (9, 10, 0, 0),
        (-5, 10, 0, 0),
    ],
)
def test_grid_count(usable, size, gap, expected):
    assert grid_count(usable, size, gap) == expected


def test_span_includes_gaps_between_units_only():
    assert span(3, 10, 2) == 34
    assert span(0, 10, 2) == 0.0


def test_void_ratio_bounds():
    assert void_ratio(0, 1000) == 1.0
    assert void_ratio(1000, 1000) == 0.0
    assert void_ratio(250, 1000) == pytest.approx(0.75)
    assert volume_utilization(250, 1000) == pytest.approx(25.0)


def test_combined_spacing_takes_largest_clearance_per_axis():
    a = Item(width=10, depth=10, height=10, side_margin=5, gap_xy=1)
    b = Item(width=10, depth=10, height=10, front_margin=3, gap_xy=2, gap_z=4)
    spacing = Spacing.combined([a, b])
    assert (spacing.side_margin, spacing.front_margin, spacing.gap_xy, spacing.gap_z) == (5, 3, 2, 4)

    container = Container(id=1, width=100, depth=100, height=100)
    assert spacing.usable_extents(container, 1) == (88, 92, 98)


def test_boxes_overlap_ignores_touching_faces():
    assert not boxes_overlap((0, 0, 0), (10, 10, 10), (10, 0, 0), (10, 10, 10))
    assert boxes_overlap((0, 0, 0), (10, 10, 10), (5, 5, 5), (10, 10, 10))


def test_footprint_coverage_merges_overlapping_rects():
    rects = [(0, 0, 50, 100), (25, 0, 50, 100)]
    assert footprint_coverage(rects, 100, 100) == pytest.approx(75.0)
    assert footprint_coverage([], 100, 100) == 0.0
