"""
Geometry helper utilities shared across planner modules.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import permutations
from typing import Iterable, List, Sequence, Tuple

from packplan.models.container import Container
from packplan.models.item import Item

Orientation = Tuple[float, float, float]

EPSILON = 1e-9


def generate_orientations(dimensions: Sequence[float], keep_upright: bool = False) -> List[Orientation]:
    """
    Return the distinct axis-aligned orientations of a rectangular item.

    The identity orientation always comes first and the order is stable, so
    downstream tie-breaks that fall back to enumeration order are deterministic.
    """
    if keep_upright:
        return unique_horizontal_orientations(dimensions)
    return generate_axis_orientations(dimensions)


def generate_axis_orientations(dimensions: Sequence[float]) -> List[Orientation]:
    """
    Return the (up to) six axis permutations for a free-rotating item.
    """
    dims = tuple(float(value) for value in dimensions)
    unique: List[Orientation] = []
    for orientation in permutations(dims):
        if orientation not in unique:
            unique.append(orientation)
    return unique


def unique_horizontal_orientations(dimensions: Sequence[float]) -> List[Orientation]:
    """
    Return the orientations that preserve height (no sideways flipping).

    This is used for items flagged "keep upright" where tipping is not allowed.
    """
    w, d, h = (float(value) for value in dimensions)
    return [(w, d, h), (d, w, h)] if w != d else [(w, d, h)]


def item_orientations(item: Item) -> List[Orientation]:
    return generate_orientations(item.dimensions, item.keep_upright)


def grid_count(usable: float, size: float, gap: float) -> int:
    """
    Number of units of ``size`` fitting in ``usable`` with ``gap`` between neighbours.
    """
    if usable < 0 or size <= 0:
        return 0
    return max(0, int(math.floor((usable + gap) / (size + gap) + EPSILON)))


def span(count: int, size: float, gap: float) -> float:
    """Length occupied by ``count`` units of ``size`` separated by ``gap``."""
    if count <= 0:
        return 0.0
    return count * size + (count - 1) * gap


@dataclass(frozen=True)
class Spacing:
    """Clearances applied between the packed block, the walls and neighbouring units."""

    side_margin: float = 0.0
    front_margin: float = 0.0
    top_margin: float = 0.0
    gap_xy: float = 0.0
    gap_z: float = 0.0

    @classmethod
    def for_item(cls, item: Item) -> "Spacing":
        return cls(
            side_margin=item.side_margin,
            front_margin=item.front_margin,
            top_margin=item.top_margin,
            gap_xy=item.gap_xy,
            gap_z=item.gap_z,
        )

    @classmethod
    def combined(cls, items: Iterable[Item]) -> "Spacing":
        """Largest clearance per axis across several item types."""
        items = list(items)
        if not items:
            raise ValueError("at least one item is required")
        return cls(
            side_margin=max(item.side_margin for item in items),
            front_margin=max(item.front_margin for item in items),
            top_margin=max(item.top_margin for item in items),
            gap_xy=max(item.gap_xy for item in items),
            gap_z=max(item.gap_z for item in items),
        )

    def padding(self, container_padding: float) -> Tuple[float, float, float]:
        return (
            self.side_margin + container_padding,
            self.front_margin + container_padding,
            self.top_margin + container_padding,
        )

    def usable_extents(self, container: Container, container_padding: float = 0.0) -> Tuple[float, float, float]:
        """Usable (width, depth, height); components may be negative when margins exceed the container."""
        pad_x, pad_y, pad_z = self.padding(container_padding)
        return (
            container.width - 2 * pad_x,
            container.depth - 2 * pad_y,
            container.height - 2 * pad_z,
        )


def require_padding(container_padding: float) -> float:
    if container_padding < 0:
        raise ValueError(f"container_padding cannot be negative, got {container_padding!r}")
    return float(container_padding)


def rects_overlap_1d(a_start: float, a_len: float, b_start: float, b_len: float) -> bool:
    """
    Determine if two line segments on the same axis overlap (touching is not overlap).
    """
    return not (a_start + a_len <= b_start + EPSILON or b_start + b_len <= a_start + EPSILON)


def boxes_overlap(
    a_origin: Tuple[float, float, float],
    a_dims: Orientation,
    b_origin: Tuple[float, float, float],
    b_dims: Orientation,
) -> bool:
    """
    Check whether two axis-aligned cuboids intersect.
    """
    return (
        rects_overlap_1d(a_origin[0], a_dims[0], b_origin[0], b_dims[0])
        and rects_overlap_1d(a_origin[1], a_dims[1], b_origin[1], b_dims[1])
        and rects_overlap_1d(a_origin[2], a_dims[2], b_origin[2], b_dims[2])
    )


def void_ratio(used_volume: float, container_volume: float) -> float:
    """Fraction of the container volume left empty, clamped to [0, 1]."""
    if container_volume <= 0 or used_volume <= 0:
        return 1.0
    return min(1.0, max(0.0, 1.0 - used_volume / container_volume))


def volume_utilization(used_volume: float, container_volume: float) -> float:
    """
    Simple volume utilisation metric expressed as a percentage (0.0 - 100.0).
    """
    if container_volume <= 0:
        return 0.0
    return float(used_volume) / float(container_volume) * 100.0


def footprint_coverage(
    rects: Sequence[Tuple[float, float, float, float]],
    container_width: float,
    container_depth: float,
) -> float:
    """
    Compute the percentage of footprint covered by ``(x, y, width, depth)`` rectangles
    using a plane sweep.
    """
    if not rects:
        return 0.0

    container_area = float(container_width * container_depth)
    if container_area <= 0:
        return 0.0

    # Axis-aligned rectangle union via plane sweep.
    x_edges: List[float] = []
    spans: List[Tuple[float, float, float, float]] = []
    for x0, y0, dx, dy in rects:
        if dx <= 0 or dy <= 0:
            continue
        x1, y1 = x0 + dx, y0 + dy
        x_edges.extend([x0, x1])
        spans.append((x0, x1, y0, y1))

    if not spans:
        return 0.0

    x_edges = sorted(set(x_edges))
    area = 0.0
    for i in range(len(x_edges) - 1):
        x_start, x_end = x_edges[i], x_edges[i + 1]
        if x_end <= x_start:
            continue
        # Collect y-intervals for rectangles spanning this x-slice.
        intervals = [(y0, y1) for x0, x1, y0, y1 in spans if x0 <= x_start and x1 >= x_end]
        if not intervals:
            continue

        # Merge Y-intervals.
        intervals.sort()
        merged: List[Tuple[float, float]] = []
        cur_start, cur_end = intervals[0]
        for start, end in intervals[1:]:
            if start <= cur_end:
                cur_end = max(cur_end, end)
            else:
                merged.append((cur_start, cur_end))
                cur_start, cur_end = start, end
        merged.append((cur_start, cur_end))

        slice_width = x_end - x_start
        area += sum(slice_width * (y_end - y_start) for y_start, y_end in merged)

    # Clip to container area.
    area = min(area, container_area)
    return area / container_area * 100.0
