"""
Weight bookkeeping for loaded containers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from packplan.models.container import Container
from packplan.models.item import Item

MM3_PER_M3 = 1_000_000_000


@dataclass(frozen=True)
class WeightBreakdown:
    product_weight: float
    container_weight: float
    packaging_weight: float

    @property
    def total_weight(self) -> float:
        return self.product_weight + self.container_weight + self.packaging_weight

    def to_dict(self) -> Dict[str, float]:
        return {
            "product_weight": self.product_weight,
            "container_weight": self.container_weight,
            "packaging_weight": self.packaging_weight,
            "total_weight": self.total_weight,
        }


def weight_fits(item_weight: Optional[float], container: Container) -> bool:
    """
    Whether ``item_weight`` kg of product plus the container's own weight stays within
    its limit. Unknown product weight or an unlimited container always fits.
    """
    if item_weight is None or container.max_weight is None:
        return True
    return item_weight + (container.own_weight or 0.0) <= container.max_weight + 1e-9


def load_weight(item: Item, quantity: int) -> Optional[float]:
    if item.unit_weight is None:
        return None
    return item.unit_weight * quantity


def calculate_weights(
    item: Item,
    quantity: int,
    container: Optional[Container] = None,
    packaging_weight_per_m3: float = 0.0,
) -> WeightBreakdown:
    """
    Split the gross weight of a shipment into product, container and packaging material.

    Packaging material is estimated from the container's inner volume (m^3) times
    ``packaging_weight_per_m3``.
    """
    if quantity < 0:
        raise ValueError(f"quantity cannot be negative, got {quantity!r}")
    if packaging_weight_per_m3 < 0:
        raise ValueError("packaging_weight_per_m3 cannot be negative")

    product_weight = (item.unit_weight or 0.0) * quantity
    container_weight = 0.0
    packaging_weight = 0.0
    if container is not None:
        container_weight = container.own_weight or 0.0
        packaging_weight = container.inner_volume / MM3_PER_M3 * packaging_weight_per_m3
    return WeightBreakdown(
        product_weight=product_weight,
        container_weight=container_weight,
        packaging_weight=packaging_weight,
    )
