"""
General planning defaults and per-item setting resolution.

Values for an item are resolved in a fixed order: the value given directly
on the entry, then the per-SKU override, then the general default, then a
hard fallback.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from packplan.models.container import Container
from packplan.models.item import Item


def to_finite_number(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def resolve_optional_setting(direct: Any, override: Any, default: Any) -> Optional[float]:
    for candidate in (direct, override, default):
        number = to_finite_number(candidate)
        if number is not None:
            return number
    return None


def resolve_setting(direct: Any, override: Any, default: Any, fallback: float) -> float:
    resolved = resolve_optional_setting(direct, override, default)
    return fallback if resolved is None else resolved


def resolve_boolean(value: Any, fallback: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    return fallback


@dataclass(frozen=True)
class GeneralSettings:
    """Organisation-wide defaults applied when an item does not specify a value."""

    default_side_margin: float = field(default=0)
    default_front_margin: float = field(default=0)
    default_top_margin: float = field(default=0)
    default_gap_xy: float = field(default=0)
    default_gap_z: float = field(default=0)
    default_max_stack_layers: Optional[int] = field(default=None)
    default_container_padding: float = field(default=0)
    packaging_weight_per_m3: float = field(default=0)  # kg of filler per m^3 of inner volume

    def __post_init__(self) -> None:
        for name in (
            "default_side_margin",
            "default_front_margin",
            "default_top_margin",
            "default_gap_xy",
            "default_gap_z",
            "default_container_padding",
            "packaging_weight_per_m3",
        ):
            value = float(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} cannot be negative, got {value!r}")
            object.__setattr__(self, name, value)
        if self.default_max_stack_layers is not None and self.default_max_stack_layers < 1:
            raise ValueError("default_max_stack_layers must be a positive integer")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GeneralSettings":
        max_layers = to_finite_number(payload.get("default_max_stack_layers"))
        return cls(
            default_side_margin=resolve_setting(payload.get("default_side_margin"), None, None, 0),
            default_front_margin=resolve_setting(payload.get("default_front_margin"), None, None, 0),
            default_top_margin=resolve_setting(payload.get("default_top_margin"), None, None, 0),
            default_gap_xy=resolve_setting(payload.get("default_gap_xy"), None, None, 0),
            default_gap_z=resolve_setting(payload.get("default_gap_z"), None, None, 0),
            default_max_stack_layers=int(max_layers) if max_layers and max_layers > 0 else None,
            default_container_padding=resolve_setting(
                payload.get("default_container_padding"), None, None, 0
            ),
            packaging_weight_per_m3=resolve_setting(
                payload.get("packaging_weight_per_m3"), None, None, 0
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_side_margin": self.default_side_margin,
            "default_front_margin": self.default_front_margin,
            "default_top_margin": self.default_top_margin,
            "default_gap_xy": self.default_gap_xy,
            "default_gap_z": self.default_gap_z,
            "default_max_stack_layers": self.default_max_stack_layers,
            "default_container_padding": self.default_container_padding,
            "packaging_weight_per_m3": self.packaging_weight_per_m3,
        }


def build_item(
    entry: Mapping[str, Any],
    settings: GeneralSettings,
    override: Optional[Mapping[str, Any]] = None,
) -> Item:
    """
    Build an :class:`Item` from a raw entry, filling gaps from the override and defaults.

    Dimensions may be given flat (``width``/``depth``/``height``) or nested under
    ``dims`` as ``{"w", "d", "h"}``.
    """
    override = override or {}
    dims = entry.get("dims")
    if isinstance(dims, Mapping):
        width, depth, height = dims.get("w"), dims.get("d"), dims.get("h")
    else:
        width, depth, height = entry.get("width"), entry.get("depth"), entry.get("height")
    resolved_dims = [to_finite_number(value) for value in (width, depth, height)]
    if any(value is None for value in resolved_dims):
        raise ValueError(f"entry is missing finite dimensions: {dict(entry)!r}")

    max_layers = resolve_optional_setting(
        entry.get("max_stack_layers"),
        override.get("max_stack_layers"),
        settings.default_max_stack_layers,
    )
    return Item(
        name=str(entry.get("name", "Item")),
        width=resolved_dims[0],
        depth=resolved_dims[1],
        height=resolved_dims[2],
        keep_upright=resolve_boolean(entry.get("keep_upright")),
        side_margin=resolve_setting(
            entry.get("side_margin"), override.get("side_margin"), settings.default_side_margin, 0
        ),
        front_margin=resolve_setting(
            entry.get("front_margin"), override.get("front_margin"), settings.default_front_margin, 0
        ),
        top_margin=resolve_setting(
            entry.get("top_margin"), override.get("top_margin"), settings.default_top_margin, 0
        ),
        gap_xy=resolve_setting(entry.get("gap_xy"), override.get("gap_xy"), settings.default_gap_xy, 0),
        gap_z=resolve_setting(entry.get("gap_z"), override.get("gap_z"), settings.default_gap_z, 0),
        max_stack_layers=int(max_layers) if max_layers is not None and max_layers > 0 else None,
        unit_weight=to_finite_number(entry.get("unit_weight")),
    )


def load_config(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as file:
        return json.load(file)


def load_catalog(path: str | Path) -> Tuple[Container, ...]:
    """Load the container catalogue (``{"containers": [...]}``) from JSON."""
    payload = load_config(path)
    return tuple(Container.from_dict(record) for record in payload["containers"])


def load_settings(path: str | Path) -> GeneralSettings:
    return GeneralSettings.from_dict(load_config(path))
