"""
Single-container recommendations across a range of order quantities.
"""

from __future__ import annotations

from typing import Hashable, List, Optional, Sequence, Tuple

from packplan.core.solver_layer_pattern import build_extended_plan
from packplan.core.solver_single_item import (
    plan_single_item,
    require_quantity,
    shipment_for_quantity,
)
from packplan.core.utils_geometry import void_ratio
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import AnyShipment, ExtendedShipment, QuantityRange, Shipment

MAX_TABLE_QUANTITY = 500


def choose_single_container(
    item: Item,
    quantity: int,
    containers: Sequence[Container],
    container_padding: float = 0.0,
    extended: bool = False,
) -> Optional[AnyShipment]:
    """
    Smallest container that takes the whole ``quantity`` in one shipment.

    Ties on inner volume go to the lower void ratio of the loaded units, then to
    the smaller container id. Returns ``None`` when no container is big enough.
    """
    quantity = require_quantity(quantity)
    if quantity == 0:
        return None

    best: Optional[Tuple[Tuple[float, float, int], AnyShipment]] = None
    for container in containers:
        shipment: Optional[AnyShipment] = None
        if extended:
            plan = build_extended_plan(item, container, quantity, container_padding)
            if plan is not None and plan.fits and plan.total_capacity >= quantity:
                shipment = ExtendedShipment(container.id, plan, quantity, (quantity,))
        else:
            plan = plan_single_item(item, [container], container_padding)
            if plan is not None and plan.capacity >= quantity:
                shipment = shipment_for_quantity(plan, quantity)
        if shipment is None:
            continue
        ratio = round(void_ratio(quantity * item.volume, container.inner_volume), 9)
        key = (container.inner_volume, ratio, container.id)
        if best is None or key < best[0]:
            best = (key, shipment)
    return best[1] if best else None


def _recommendation_key(shipment: Optional[AnyShipment]) -> Hashable:
    if shipment is None:
        return None
    if isinstance(shipment, Shipment):
        plan = shipment.plan
        return ("standard", plan.container_id, plan.orientation, plan.nx, plan.ny, plan.layers)
    return ("extended", shipment.plan.signature())


def build_quantity_table(
    item: Item,
    containers: Sequence[Container],
    max_quantity: int,
    container_padding: float = 0.0,
    extended: bool = False,
) -> Tuple[QuantityRange, ...]:
    """
    Recommend one container for every quantity from 1 to ``max_quantity`` and
    merge neighbouring quantities that share the same recommendation.

    Each range keeps the shipment computed for its last quantity.
    """
    max_quantity = require_quantity(max_quantity, "max_quantity")
    if not 1 <= max_quantity <= MAX_TABLE_QUANTITY:
        raise ValueError(f"max_quantity must be between 1 and {MAX_TABLE_QUANTITY}, got {max_quantity}")

    ranges: List[QuantityRange] = []
    start = 1
    current = choose_single_container(item, 1, containers, container_padding, extended)
    for quantity in range(2, max_quantity + 1):
        shipment = choose_single_container(item, quantity, containers, container_padding, extended)
        if _recommendation_key(shipment) == _recommendation_key(current):
            current = shipment
            continue
        ranges.append(QuantityRange(start, quantity - 1, current))
        start, current = quantity, shipment
    ranges.append(QuantityRange(start, max_quantity, current))
    return tuple(ranges)
