"""
Planning logic for packing one item type into a catalogue of containers.

Every orientation of the item is laid out as a uniform grid in every candidate
container; the best grid wins and is reused as many times as the requested
quantity needs.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from packplan.core.utils_geometry import (
    EPSILON,
    Orientation,
    Spacing,
    grid_count,
    item_orientations,
    require_padding,
    void_ratio,
)
from packplan.core.weights import load_weight, weight_fits
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import AllocationResult, Plan, Shipment

logger = logging.getLogger(__name__)


def require_quantity(quantity: int, name: str = "quantity") -> int:
    if isinstance(quantity, bool) or int(quantity) != quantity:
        raise ValueError(f"{name} must be an integer, got {quantity!r}")
    if quantity < 0:
        raise ValueError(f"{name} cannot be negative, got {quantity!r}")
    return int(quantity)


def select_containers(
    containers: Sequence[Container],
    container_id: Optional[int] = None,
) -> List[Container]:
    """Restrict the catalogue to ``container_id`` when one is requested."""
    if container_id is None:
        return list(containers)
    selected = [container for container in containers if container.id == container_id]
    if not selected:
        raise ValueError(f"unknown container id {container_id!r}")
    return selected


def calculate_layout(
    container: Container,
    orientation: Orientation,
    item: Item,
    container_padding: float = 0.0,
) -> Plan:
    """
    Lay ``item`` out as a uniform grid in ``orientation`` and report the resulting capacity.

    A capacity of 0 means the orientation does not fit; it is not an error.
    """
    usable_w, usable_d, usable_h = Spacing.for_item(item).usable_extents(
        container, require_padding(container_padding)
    )
    a, b, c = orientation
    nx = grid_count(usable_w, a, item.gap_xy)
    ny = grid_count(usable_d, b, item.gap_xy)
    layers = grid_count(usable_h, c, item.gap_z)
    if item.max_stack_layers is not None:
        layers = min(layers, item.max_stack_layers)

    capacity = nx * ny * layers
    return Plan(
        container_id=container.id,
        orientation=(a, b, c),
        nx=nx,
        ny=ny,
        layers=layers,
        capacity=capacity,
        void_ratio=void_ratio(a * b * c * capacity, container.inner_volume),
        last_layer_count=nx * ny if capacity > 0 else 0,
        fits=weight_fits(load_weight(item, capacity), container),
    )


def _is_better_plan(candidate: Plan, best: Optional[Plan]) -> bool:
    if best is None:
        return True
    if candidate.capacity != best.capacity:
        return candidate.capacity > best.capacity
    if abs(candidate.void_ratio - best.void_ratio) > EPSILON:
        return candidate.void_ratio < best.void_ratio
    # Same container and equal score: the earlier orientation is kept.
    return candidate.container_id < best.container_id


def plan_single_item(
    item: Item,
    containers: Sequence[Container],
    container_padding: float = 0.0,
    container_id: Optional[int] = None,
) -> Optional[Plan]:
    """
    Choose the container and orientation holding the most units of ``item``.

    Ties go to the lower void ratio, then the smaller container id, then the
    orientation enumerated first. Plans that exceed a container's weight limit
    are skipped. Returns ``None`` when no container seats a single unit.
    """
    orientations = item_orientations(item)
    best: Optional[Plan] = None
    for container in select_containers(containers, container_id):
        for orientation in orientations:
            plan = calculate_layout(container, orientation, item, container_padding)
            if plan.capacity <= 0 or not plan.fits:
                continue
            if _is_better_plan(plan, best):
                best = plan
    if best is not None:
        logger.debug(
            "Best plan for %s: container %s, orientation %s, %dx%dx%d=%d",
            item.name,
            best.container_id,
            best.orientation,
            best.nx,
            best.ny,
            best.layers,
            best.capacity,
        )
    return best


def shipment_for_quantity(plan: Plan, quantity: int) -> Shipment:
    """Load ``quantity`` units (at most the plan capacity) and record the partial top layer."""
    quantity = min(quantity, plan.capacity)
    per_layer = plan.per_layer
    layers_used = -(-quantity // per_layer) if per_layer else 0
    last_layer_count = quantity - (layers_used - 1) * per_layer if layers_used else 0
    return Shipment(
        container_id=plan.container_id,
        plan=replace(plan, last_layer_count=last_layer_count),
        quantity=quantity,
    )


def allocate_quantity(
    item: Item,
    quantity: int,
    containers: Sequence[Container],
    container_padding: float = 0.0,
    container_id: Optional[int] = None,
) -> AllocationResult:
    """
    Split ``quantity`` units of ``item`` across as many containers as needed.

    The same container type may be used repeatedly. Whatever no container can
    take is reported as ``leftover``; the quantities always add back up to
    ``quantity``.
    """
    remaining = require_quantity(quantity)
    shipments: List[Shipment] = []
    # The best plan does not depend on the remaining quantity.
    plan = plan_single_item(item, containers, container_padding, container_id) if remaining else None
    while remaining > 0 and plan is not None:
        shipment = shipment_for_quantity(plan, remaining)
        shipments.append(shipment)
        remaining -= shipment.quantity
        logger.debug("Assigned %d units to container %s", shipment.quantity, shipment.container_id)

    logger.info(
        "Allocated %d of %d units of %s in %d shipment(s), leftover %d",
        quantity - remaining,
        quantity,
        item.name,
        len(shipments),
        remaining,
    )
    return AllocationResult(shipments=tuple(shipments), leftover=remaining)
