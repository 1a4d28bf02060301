"""
Data model representing a product type to be packed.

All lengths are expressed in millimetres (mm) and weights in kilograms (kg).
Validation is intentionally strict to prevent invalid planning inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _require_positive(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return value


def _require_non_negative(name: str, value: float) -> float:
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value!r}")
    return value


@dataclass(frozen=True)
class Item:
    """Immutable representation of one product type."""

    width: float
    depth: float
    height: float
    keep_upright: bool = field(default=False)
    side_margin: float = field(default=0)
    front_margin: float = field(default=0)
    top_margin: float = field(default=0)
    gap_xy: float = field(default=0)
    gap_z: float = field(default=0)
    max_stack_layers: Optional[int] = field(default=None)
    unit_weight: Optional[float] = field(default=None)  # kg
    name: str = field(default="Item")

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", float(_require_positive("width", self.width)))
        object.__setattr__(self, "depth", float(_require_positive("depth", self.depth)))
        object.__setattr__(self, "height", float(_require_positive("height", self.height)))
        for name in ("side_margin", "front_margin", "top_margin", "gap_xy", "gap_z"):
            object.__setattr__(self, name, float(_require_non_negative(name, getattr(self, name))))
        object.__setattr__(self, "keep_upright", bool(self.keep_upright))
        if self.max_stack_layers is not None:
            if int(self.max_stack_layers) != self.max_stack_layers or self.max_stack_layers < 1:
                raise ValueError(
                    f"max_stack_layers must be a positive integer, got {self.max_stack_layers!r}"
                )
            object.__setattr__(self, "max_stack_layers", int(self.max_stack_layers))
        if self.unit_weight is not None:
            object.__setattr__(
                self, "unit_weight", float(_require_non_negative("unit_weight", self.unit_weight))
            )

    @property
    def volume(self) -> float:
        """Return the cubic volume of a single unit in mm^3."""
        return self.width * self.depth * self.height

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        """Expose dimensions as a (W, D, H) tuple."""
        return self.width, self.depth, self.height

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the item for reporting."""
        return {
            "name": self.name,
            "width": self.width,
            "depth": self.depth,
            "height": self.height,
            "keep_upright": self.keep_upright,
            "side_margin": self.side_margin,
            "front_margin": self.front_margin,
            "top_margin": self.top_margin,
            "gap_xy": self.gap_xy,
            "gap_z": self.gap_z,
            "max_stack_layers": self.max_stack_layers,
            "unit_weight": self.unit_weight,
            "volume": self.volume,
        }
