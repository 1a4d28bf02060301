"""
Layer packing for several item types sharing one container.

Each layer is filled with a shelf heuristic: item types are ordered by
decreasing footprint and placed round-robin, one unit at a time, left to
right along shelves. A new shelf opens below the current one when a unit no
longer fits the remaining shelf width. Layers are stacked until every
quantity is placed, the height runs out, or a fresh layer places nothing.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from packplan.core.solver_single_item import require_quantity, select_containers
from packplan.core.utils_geometry import (
    EPSILON,
    Orientation,
    Spacing,
    grid_count,
    item_orientations,
    require_padding,
    void_ratio,
)
from packplan.core.weights import weight_fits
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import (
    LAYER_PLACED,
    ExtendedPlan,
    ExtendedShipment,
    LayerPattern,
    MultiAllocationResult,
    PlacedItem,
)

logger = logging.getLogger(__name__)


def _validate_request(items: Sequence[Item], quantities: Sequence[int]) -> List[int]:
    if not items:
        raise ValueError("at least one item is required")
    if len(items) != len(quantities):
        raise ValueError(
            f"items and quantities must have the same length, got {len(items)} and {len(quantities)}"
        )
    return [require_quantity(quantity, f"quantities[{index}]") for index, quantity in enumerate(quantities)]


def _layer_orientation(
    item: Item,
    usable_w: float,
    usable_d: float,
    height_budget: float,
    gap: float,
) -> Optional[Orientation]:
    """Orientation seating the most units per millimetre of layer height."""
    best: Optional[Tuple[Tuple[float, float, int], Orientation]] = None
    for index, orientation in enumerate(item_orientations(item)):
        a, b, c = orientation
        if a > usable_w + EPSILON or b > usable_d + EPSILON or c > height_budget + EPSILON:
            continue
        per_layer = grid_count(usable_w, a, gap) * grid_count(usable_d, b, gap)
        key = (-(per_layer / c), c, index)
        if best is None or key < best[0]:
            best = (key, orientation)
    return best[1] if best else None


class _ShelfCursor:
    """Tracks the open shelf while a layer footprint is being filled."""

    def __init__(self, usable_w: float, usable_d: float, gap: float) -> None:
        self.usable_w = usable_w
        self.usable_d = usable_d
        self.gap = gap
        self.x = 0.0
        self.shelf_y = 0.0
        self.shelf_depth = 0.0

    def place(self, width: float, depth: float) -> Optional[Tuple[float, float]]:
        if not (self.x + width <= self.usable_w + EPSILON and self.shelf_y + depth <= self.usable_d + EPSILON):
            next_y = self.shelf_y + self.shelf_depth + self.gap if self.shelf_depth > 0 else self.shelf_y
            if width > self.usable_w + EPSILON or next_y + depth > self.usable_d + EPSILON:
                return None
            self.x, self.shelf_y, self.shelf_depth = 0.0, next_y, 0.0
        position = (self.x, self.shelf_y)
        self.x += width + self.gap
        self.shelf_depth = max(self.shelf_depth, depth)
        return position


def pack_layer(
    orientations: Dict[int, Orientation],
    remaining: Sequence[int],
    usable_w: float,
    usable_d: float,
    gap: float,
) -> List[PlacedItem]:
    """
    Fill one layer footprint with the item types in ``orientations`` (index -> orientation).
    """
    order = sorted(orientations, key=lambda index: (-(orientations[index][0] * orientations[index][1]), index))
    left = {index: remaining[index] for index in order}
    cursor = _ShelfCursor(usable_w, usable_d, gap)
    placed: List[PlacedItem] = []
    active = [index for index in order if left[index] > 0]
    while active:
        still_active = []
        for index in active:
            a, b, c = orientations[index]
            position = cursor.place(a, b)
            if position is None:
                continue
            placed.append(PlacedItem(position[0], position[1], a, b, c, index))
            left[index] -= 1
            if left[index] > 0:
                still_active.append(index)
        active = still_active
    return placed


def build_multi_item_plan(
    items: Sequence[Item],
    quantities: Sequence[int],
    container: Container,
    container_padding: float = 0.0,
) -> Optional[ExtendedPlan]:
    """
    Stack shelf-packed layers of several item types into ``container``.

    Returns ``None`` when no unit of any type can be placed.
    """
    remaining = _validate_request(items, quantities)
    spacing = Spacing.combined(items)
    usable_w, usable_d, usable_h = spacing.usable_extents(container, require_padding(container_padding))
    if usable_w <= 0 or usable_d <= 0 or usable_h <= 0:
        return None

    layers: List[LayerPattern] = []
    height_left = usable_h
    while any(remaining):
        budget = height_left - (spacing.gap_z if layers else 0.0)
        orientations: Dict[int, Orientation] = {}
        for index, item in enumerate(items):
            if remaining[index] <= 0:
                continue
            if item.max_stack_layers is not None and len(layers) >= item.max_stack_layers:
                continue
            orientation = _layer_orientation(item, usable_w, usable_d, budget, spacing.gap_xy)
            if orientation is not None:
                orientations[index] = orientation
        if not orientations:
            break

        placed = pack_layer(orientations, remaining, usable_w, usable_d, spacing.gap_xy)
        if not placed:
            break
        for rect in placed:
            remaining[rect.item_index] -= 1
        layer = LayerPattern(
            kind=LAYER_PLACED,
            height=max(rect.height for rect in placed),
            per_layer_capacity=len(placed),
            used_width=max(rect.x + rect.width for rect in placed),
            used_depth=max(rect.y + rect.depth for rect in placed),
            placed_items=tuple(placed),
        )
        layers.append(layer)
        height_left = budget - layer.height

    if not layers:
        return None

    capacity_by_item = tuple(
        sum(layer.count_for_item(index) for layer in layers) for index in range(len(items))
    )
    used_volume = sum(rect.width * rect.depth * rect.height for layer in layers for rect in layer.placed_items)
    weights = [item.unit_weight for item in items]
    load = None
    if any(weight is not None for weight in weights):
        load = sum((weight or 0.0) * count for weight, count in zip(weights, capacity_by_item))

    return ExtendedPlan(
        container_id=container.id,
        layers=tuple(layers),
        total_capacity=sum(capacity_by_item),
        used_width=max(layer.used_width for layer in layers),
        used_depth=max(layer.used_depth for layer in layers),
        used_height=sum(layer.height for layer in layers) + spacing.gap_z * (len(layers) - 1),
        void_ratio=void_ratio(used_volume, container.inner_volume),
        capacity_by_item=capacity_by_item,
        fits=weight_fits(load, container),
    )


def plan_multi_item(
    items: Sequence[Item],
    quantities: Sequence[int],
    containers: Sequence[Container],
    container_padding: float = 0.0,
    container_id: Optional[int] = None,
) -> Optional[ExtendedPlan]:
    """
    Choose the container placing the most units across all item types.

    Ties go to the lower void ratio, then to the smaller container id.
    """
    best: Optional[Tuple[Tuple[int, float, int], ExtendedPlan]] = None
    for container in select_containers(containers, container_id):
        plan = build_multi_item_plan(items, quantities, container, container_padding)
        if plan is None or not plan.fits or plan.total_capacity <= 0:
            continue
        key = (-plan.total_capacity, round(plan.void_ratio, 9), container.id)
        if best is None or key < best[0]:
            best = (key, plan)
    return best[1] if best else None


def allocate_multi_item_extended(
    items: Sequence[Item],
    quantities: Sequence[int],
    containers: Sequence[Container],
    container_padding: float = 0.0,
    container_id: Optional[int] = None,
) -> MultiAllocationResult:
    """
    Pack several item types together, opening containers until every quantity is
    placed or nothing more fits. The leftover is reported per item type.
    """
    remaining = _validate_request(items, quantities)
    shipments: List[ExtendedShipment] = []
    while any(remaining):
        plan = plan_multi_item(items, remaining, containers, container_padding, container_id)
        if plan is None:
            break
        shipments.append(
            ExtendedShipment(
                container_id=plan.container_id,
                plan=plan,
                quantity=plan.total_capacity,
                quantities_by_item=plan.capacity_by_item,
            )
        )
        remaining = [left - placed for left, placed in zip(remaining, plan.capacity_by_item)]
        logger.debug(
            "Assigned %s to container %s, remaining %s",
            plan.capacity_by_item,
            plan.container_id,
            remaining,
        )

    logger.info(
        "Packed %d item type(s) into %d shipment(s), leftover %s",
        len(items),
        len(shipments),
        remaining,
    )
    return MultiAllocationResult(shipments=tuple(shipments), leftover=tuple(remaining))


def choose_single_container_multi(
    items: Sequence[Item],
    quantities: Sequence[int],
    containers: Sequence[Container],
    container_padding: float = 0.0,
) -> Optional[ExtendedShipment]:
    """
    Smallest container holding every requested unit of every item type at once.
    """
    wanted = tuple(_validate_request(items, quantities))
    if not any(wanted):
        return None
    for container in sorted(containers, key=lambda candidate: (candidate.inner_volume, candidate.id)):
        plan = build_multi_item_plan(items, wanted, container, container_padding)
        if plan is not None and plan.fits and plan.capacity_by_item == wanted:
            return ExtendedShipment(container.id, plan, plan.total_capacity, plan.capacity_by_item)
    return None
