"""
Per-layer planning for a single item type ("extended" plans).

Each layer starts from the best uniform grid for the height still available
and then fills the strip left over on the right-hand side with columns of
other orientations. Layers are stacked until the quantity, the usable height
or the stacking limit runs out. This is a first-fit strip heuristic, bounded
by orientations x layers, not an exhaustive rectangle search.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from packplan.core.solver_single_item import require_quantity, select_containers
from packplan.core.utils_geometry import (
    EPSILON,
    Orientation,
    Spacing,
    grid_count,
    item_orientations,
    require_padding,
    span,
    void_ratio,
)
from packplan.core.weights import load_weight, weight_fits
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import (
    LAYER_MIXED,
    LAYER_UNIFORM,
    AllocationResult,
    Column,
    ExtendedPlan,
    ExtendedShipment,
    LayerPattern,
)

logger = logging.getLogger(__name__)


def _primary_orientation(
    orientations: Sequence[Orientation],
    usable_w: float,
    usable_d: float,
    height_budget: float,
    layers_allowed: Optional[int],
    item: Item,
) -> Optional[Orientation]:
    """
    Orientation whose uniform grid holds the most units in the remaining box.

    Every unit has the same volume, so equal capacity means equal void ratio and
    the orientation enumerated first is kept.
    """
    best: Optional[Orientation] = None
    best_capacity = 0
    for orientation in orientations:
        a, b, c = orientation
        if c > height_budget + EPSILON:
            continue
        layers = grid_count(height_budget, c, item.gap_z)
        if layers_allowed is not None:
            layers = min(layers, layers_allowed)
        capacity = grid_count(usable_w, a, item.gap_xy) * grid_count(usable_d, b, item.gap_xy) * layers
        if capacity > best_capacity:
            best, best_capacity = orientation, capacity
    return best


def _strip_column(
    orientations: Sequence[Orientation],
    used: Sequence[Orientation],
    strip_width: float,
    usable_d: float,
    layer_height: float,
    gap: float,
) -> Optional[Column]:
    """
    Column filling the right-hand strip with an orientation not used in the layer yet.

    Ranking: most units, then lower stack height, then enumeration order. A column
    never raises the layer height.
    """
    best: Optional[Tuple[Tuple[int, float, int], Column]] = None
    for index, orientation in enumerate(orientations):
        if orientation in used:
            continue
        a, b, c = orientation
        if c > layer_height + EPSILON:
            continue
        count = grid_count(strip_width, a, gap)
        rows = grid_count(usable_d, b, gap)
        if count * rows <= 0:
            continue
        key = (-(count * rows), c, index)
        if best is None or key < best[0]:
            best = (key, Column(orientation, count, rows, span(count, a, gap), span(rows, b, gap)))
    return best[1] if best else None


def build_layer(
    orientations: Sequence[Orientation],
    usable_w: float,
    usable_d: float,
    height_budget: float,
    layers_allowed: Optional[int],
    item: Item,
) -> Optional[LayerPattern]:
    """Build one layer within ``height_budget``; ``None`` when nothing fits."""
    primary = _primary_orientation(orientations, usable_w, usable_d, height_budget, layers_allowed, item)
    if primary is None:
        return None

    gap = item.gap_xy
    a, b, c = primary
    nx = grid_count(usable_w, a, gap)
    ny = grid_count(usable_d, b, gap)
    columns: List[Column] = [Column(primary, nx, ny, span(nx, a, gap), span(ny, b, gap))]
    cursor = columns[0].used_width
    while True:
        column = _strip_column(
            orientations,
            [col.orientation for col in columns],
            usable_w - cursor - gap,
            usable_d,
            c,
            gap,
        )
        if column is None:
            break
        columns.append(column)
        cursor += gap + column.used_width

    return LayerPattern(
        kind=LAYER_UNIFORM if len(columns) == 1 else LAYER_MIXED,
        height=max(col.orientation[2] for col in columns),
        per_layer_capacity=sum(col.capacity for col in columns),
        used_width=cursor,
        used_depth=max(col.used_depth for col in columns),
        columns=tuple(columns),
    )


def build_extended_plan(
    item: Item,
    container: Container,
    quantity: Optional[int] = None,
    container_padding: float = 0.0,
) -> Optional[ExtendedPlan]:
    """
    Stack independently built layers of ``item`` into ``container``.

    When ``quantity`` is given, layering stops as soon as it is covered.
    Returns ``None`` when not even one layer fits.
    """
    if quantity is not None:
        quantity = require_quantity(quantity)
    spacing = Spacing.for_item(item)
    usable_w, usable_d, usable_h = spacing.usable_extents(container, require_padding(container_padding))
    if usable_w <= 0 or usable_d <= 0 or usable_h <= 0:
        return None

    orientations = item_orientations(item)
    layers: List[LayerPattern] = []
    height_left = usable_h
    placed = 0
    while quantity is None or placed < quantity:
        layers_allowed = None
        if item.max_stack_layers is not None:
            layers_allowed = item.max_stack_layers - len(layers)
            if layers_allowed <= 0:
                break
        budget = height_left - (item.gap_z if layers else 0.0)
        layer = build_layer(orientations, usable_w, usable_d, budget, layers_allowed, item)
        if layer is None:
            break
        layers.append(layer)
        placed += layer.per_layer_capacity
        height_left = budget - layer.height

    if not layers:
        return None

    total = sum(layer.per_layer_capacity for layer in layers)
    # Only the units that will ship count towards the weight limit.
    loaded = total if quantity is None else min(total, quantity)
    return ExtendedPlan(
        container_id=container.id,
        layers=tuple(layers),
        total_capacity=total,
        used_width=max(layer.used_width for layer in layers),
        used_depth=max(layer.used_depth for layer in layers),
        used_height=sum(layer.height for layer in layers) + item.gap_z * (len(layers) - 1),
        void_ratio=void_ratio(total * item.volume, container.inner_volume),
        capacity_by_item=(total,),
        fits=weight_fits(load_weight(item, loaded), container),
    )


def plan_single_item_extended(
    item: Item,
    containers: Sequence[Container],
    quantity: Optional[int] = None,
    container_padding: float = 0.0,
    container_id: Optional[int] = None,
) -> Optional[ExtendedPlan]:
    """
    Choose the container whose extended plan places the most units of ``quantity``.

    Ties go to the lower void ratio of the units actually placed, then to the
    smaller container id. Overweight plans are skipped.
    """
    best: Optional[Tuple[Tuple[int, float, int], ExtendedPlan]] = None
    for container in select_containers(containers, container_id):
        plan = build_extended_plan(item, container, quantity, container_padding)
        if plan is None or not plan.fits:
            continue
        units = plan.total_capacity if quantity is None else min(plan.total_capacity, quantity)
        ratio = round(void_ratio(units * item.volume, container.inner_volume), 9)
        key = (-units, ratio, container.id)
        if best is None or key < best[0]:
            best = (key, plan)

    if best is None:
        return None
    logger.debug(
        "Best extended plan for %s: container %s, %d layer(s), capacity %d",
        item.name,
        best[1].container_id,
        len(best[1].layers),
        best[1].total_capacity,
    )
    return best[1]


def allocate_quantity_extended(
    item: Item,
    quantity: int,
    containers: Sequence[Container],
    container_padding: float = 0.0,
    container_id: Optional[int] = None,
) -> AllocationResult:
    """
    Split ``quantity`` across containers using extended plans, re-planning for
    every remaining quantity.
    """
    remaining = require_quantity(quantity)
    shipments: List[ExtendedShipment] = []
    while remaining > 0:
        plan = plan_single_item_extended(item, containers, remaining, container_padding, container_id)
        if plan is None:
            break
        assigned = min(plan.total_capacity, remaining)
        shipments.append(ExtendedShipment(plan.container_id, plan, assigned, (assigned,)))
        remaining -= assigned

    logger.info(
        "Allocated %d of %d units of %s (extended) in %d shipment(s), leftover %d",
        quantity - remaining,
        quantity,
        item.name,
        len(shipments),
        remaining,
    )
    return AllocationResult(shipments=tuple(shipments), leftover=remaining)
