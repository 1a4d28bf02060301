"""
Data model representing a shipping container (carton, crate or box).

Dimensions are internal dimensions in millimetres (mm) and weights are in
kilograms (kg). All checks are performed eagerly to surface invalid
configurations before invoking the planners.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _require_positive(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return value


@dataclass(frozen=True)
class Container:
    """Immutable shipping container used as the bin for items."""

    id: int
    width: float
    depth: float
    height: float
    max_weight: Optional[float] = field(default=None)
    own_weight: Optional[float] = field(default=None)
    name: str = field(default="Container")

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", int(self.id))
        object.__setattr__(self, "width", float(_require_positive("width", self.width)))
        object.__setattr__(self, "depth", float(_require_positive("depth", self.depth)))
        object.__setattr__(self, "height", float(_require_positive("height", self.height)))
        if self.max_weight is not None:
            object.__setattr__(self, "max_weight", float(_require_positive("max_weight", self.max_weight)))
        if self.own_weight is not None:
            if self.own_weight < 0:
                raise ValueError("own_weight cannot be negative")
            object.__setattr__(self, "own_weight", float(self.own_weight))

    @property
    def inner_volume(self) -> float:
        """Return usable internal volume in mm^3."""
        return self.width * self.depth * self.height

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        """Return inner dimensions (width, depth, height)."""
        return self.width, self.depth, self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "depth": self.depth,
            "height": self.height,
            "max_weight": self.max_weight,
            "own_weight": self.own_weight,
            "inner_volume": self.inner_volume,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Container":
        """
        Instantiate from a raw catalogue record.

        Accepts both a flat ``{"W": .., "D": .., "H": ..}`` record and a nested
        ``{"inner": {"W": .., "D": .., "H": ..}}`` record.
        """
        inner = payload.get("inner", payload)
        max_weight = payload.get("max_weight")
        own_weight = payload.get("own_weight")
        return cls(
            id=int(payload["id"]),
            name=str(payload.get("name", f"Container {payload['id']}")),
            width=float(inner["W"]),
            depth=float(inner["D"]),
            height=float(inner["H"]),
            max_weight=float(max_weight) if max_weight is not None else None,
            own_weight=float(own_weight) if own_weight is not None else None,
        )
