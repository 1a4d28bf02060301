"""
Result value objects produced by the planners.

A standard :class:`Plan` describes a single-orientation grid inside one
container. An :class:`ExtendedPlan` describes a stack of independently built
layers, which may mix column orientations (single item) or carry free
rectangles of several item types (multi item). The two are distinct classes;
callers dispatch on the concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

Orientation = Tuple[float, float, float]

LAYER_UNIFORM = "uniform"
LAYER_MIXED = "mixed"
LAYER_PLACED = "placed"


@dataclass(frozen=True)
class Plan:
    """Single orientation grid for one container."""

    container_id: int
    orientation: Orientation
    nx: int
    ny: int
    layers: int
    capacity: int
    void_ratio: float
    last_layer_count: int
    fits: bool = True

    @property
    def per_layer(self) -> int:
        return self.nx * self.ny

    def to_dict(self) -> Dict[str, Any]:
        return {
            "container_id": self.container_id,
            "orientation": self.orientation,
            "nx": self.nx,
            "ny": self.ny,
            "layers": self.layers,
            "capacity": self.capacity,
            "void_ratio": self.void_ratio,
            "last_layer_count": self.last_layer_count,
            "fits": self.fits,
        }


@dataclass(frozen=True)
class Column:
    """A block of identically oriented units: ``count`` columns by ``rows`` rows."""

    orientation: Orientation
    count: int
    rows: int
    used_width: float
    used_depth: float

    @property
    def capacity(self) -> int:
        return self.count * self.rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orientation": self.orientation,
            "count": self.count,
            "rows": self.rows,
            "used_width": self.used_width,
            "used_depth": self.used_depth,
        }


@dataclass(frozen=True)
class PlacedItem:
    """Rectangle of one unit inside a layer footprint, relative to the usable origin."""

    x: float
    y: float
    width: float
    depth: float
    height: float
    item_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "depth": self.depth,
            "height": self.height,
            "item_index": self.item_index,
        }


@dataclass(frozen=True)
class LayerPattern:
    kind: str
    height: float
    per_layer_capacity: int
    used_width: float
    used_depth: float
    columns: Tuple[Column, ...] = field(default=())
    placed_items: Tuple[PlacedItem, ...] = field(default=())

    def count_for_item(self, item_index: int) -> int:
        if self.kind == LAYER_PLACED:
            return sum(1 for rect in self.placed_items if rect.item_index == item_index)
        return self.per_layer_capacity if item_index == 0 else 0

    def signature(self) -> str:
        """Stable text key describing the arrangement of this layer."""
        if self.kind == LAYER_PLACED:
            parts = sorted(
                f"{rect.item_index}@{rect.width:g}x{rect.depth:g}x{rect.height:g}"
                for rect in self.placed_items
            )
        else:
            parts = sorted(
                f"{'x'.join(f'{d:g}' for d in col.orientation)}:{col.count}:{col.rows}"
                for col in self.columns
            )
        return "+".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "height": self.height,
            "per_layer_capacity": self.per_layer_capacity,
            "used_width": self.used_width,
            "used_depth": self.used_depth,
            "columns": [column.to_dict() for column in self.columns],
            "placed_items": [rect.to_dict() for rect in self.placed_items],
        }


@dataclass(frozen=True)
class ExtendedPlan:
    """Stack of independently built layers inside one container."""

    container_id: int
    layers: Tuple[LayerPattern, ...]
    total_capacity: int
    used_width: float
    used_depth: float
    used_height: float
    void_ratio: float
    capacity_by_item: Tuple[int, ...]
    fits: bool = True

    def signature(self) -> str:
        layers = "__".join(layer.signature() for layer in self.layers)
        return f"container-{self.container_id}-{len(self.layers)}-{layers}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "container_id": self.container_id,
            "layers": [layer.to_dict() for layer in self.layers],
            "total_capacity": self.total_capacity,
            "used_width": self.used_width,
            "used_depth": self.used_depth,
            "used_height": self.used_height,
            "void_ratio": self.void_ratio,
            "capacity_by_item": list(self.capacity_by_item),
            "fits": self.fits,
        }


AnyPlan = Union[Plan, ExtendedPlan]


@dataclass(frozen=True)
class Shipment:
    """One container loaded with ``quantity`` units according to a standard plan."""

    container_id: int
    plan: Plan
    quantity: int

    @property
    def quantities_by_item(self) -> Tuple[int, ...]:
        return (self.quantity,)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "container_id": self.container_id,
            "quantity": self.quantity,
            "plan": self.plan.to_dict(),
        }


@dataclass(frozen=True)
class ExtendedShipment:
    """One container loaded according to an extended plan."""

    container_id: int
    plan: ExtendedPlan
    quantity: int
    quantities_by_item: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "container_id": self.container_id,
            "quantity": self.quantity,
            "quantities_by_item": list(self.quantities_by_item),
            "plan": self.plan.to_dict(),
        }


AnyShipment = Union[Shipment, ExtendedShipment]


@dataclass(frozen=True)
class AllocationResult:
    shipments: Tuple[AnyShipment, ...]
    leftover: int

    @property
    def allocated(self) -> int:
        return sum(shipment.quantity for shipment in self.shipments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shipments": [shipment.to_dict() for shipment in self.shipments],
            "leftover": self.leftover,
        }


@dataclass(frozen=True)
class MultiAllocationResult:
    shipments: Tuple[ExtendedShipment, ...]
    leftover: Tuple[int, ...]

    @property
    def total_leftover(self) -> int:
        return sum(self.leftover)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shipments": [shipment.to_dict() for shipment in self.shipments],
            "leftover": list(self.leftover),
        }


@dataclass(frozen=True)
class ItemPosition:
    """Absolute placement of one unit inside its container."""

    index: int
    x0: float
    y0: float
    z0: float
    dims: Orientation
    item_index: int = 0


@dataclass(frozen=True)
class TabGroup:
    """Run of consecutive shipments that share a container id."""

    container_id: int
    start_index: int
    end_index: int
    shipments: Tuple[AnyShipment, ...]

    @property
    def count(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass(frozen=True)
class QuantityRange:
    """Consecutive quantities sharing the same single-container recommendation."""

    start: int
    end: int
    shipment: Optional[AnyShipment]

    @property
    def label(self) -> str:
        return str(self.start) if self.start == self.end else f"{self.start}-{self.end}"
