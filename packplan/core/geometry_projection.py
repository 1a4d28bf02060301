"""
Turn a resolved shipment into absolute unit coordinates inside its container.

The packed block is centred in the interior left after margins and padding.
Units are walked in the same order the planners fill them: layer by layer
from the bottom, then row by row (standard grids) or column block by column
block (extended layers).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union

from packplan.core.utils_geometry import Spacing, require_padding, span
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import (
    LAYER_PLACED,
    AnyShipment,
    ExtendedPlan,
    ItemPosition,
    LayerPattern,
    Plan,
    TabGroup,
)

ItemsArg = Union[Item, Sequence[Item]]


@dataclass(frozen=True)
class ArrangementOffsets:
    offset_x: float
    offset_y: float
    offset_z: float
    used_width: float
    used_depth: float
    used_height: float


def _as_items(items: ItemsArg) -> List[Item]:
    return [items] if isinstance(items, Item) else list(items)


def used_extents(plan: Union[Plan, ExtendedPlan], spacing: Spacing) -> Tuple[float, float, float]:
    if isinstance(plan, ExtendedPlan):
        return plan.used_width, plan.used_depth, plan.used_height
    a, b, c = plan.orientation
    return (
        span(plan.nx, a, spacing.gap_xy),
        span(plan.ny, b, spacing.gap_xy),
        span(plan.layers, c, spacing.gap_z),
    )


def compute_offsets(
    plan: Union[Plan, ExtendedPlan],
    container: Container,
    spacing: Spacing,
    container_padding: float = 0.0,
) -> ArrangementOffsets:
    """Offsets that centre the packed block inside the usable interior."""
    pad_x, pad_y, pad_z = spacing.padding(require_padding(container_padding))
    used_w, used_d, used_h = used_extents(plan, spacing)
    leftover_w = max(0.0, container.width - 2 * pad_x - used_w)
    leftover_d = max(0.0, container.depth - 2 * pad_y - used_d)
    leftover_h = max(0.0, container.height - 2 * pad_z - used_h)
    return ArrangementOffsets(
        offset_x=pad_x + leftover_w / 2,
        offset_y=pad_y + leftover_d / 2,
        offset_z=pad_z + leftover_h / 2,
        used_width=used_w,
        used_depth=used_d,
        used_height=used_h,
    )


def _standard_layers(
    plan: Plan,
    quantity: int,
    offsets: ArrangementOffsets,
    spacing: Spacing,
) -> Iterator[Tuple[int, List[ItemPosition]]]:
    a, b, c = plan.orientation
    per_layer = plan.nx * plan.ny
    if per_layer <= 0 or plan.layers <= 0 or quantity <= 0:
        return
    stride_x = a + spacing.gap_xy
    stride_y = b + spacing.gap_xy
    stride_z = c + spacing.gap_z
    full_layers, remainder = divmod(quantity, per_layer)
    index = 0
    for layer in range(plan.layers):
        in_layer = per_layer if layer < full_layers else remainder if layer == full_layers else 0
        if in_layer == 0:
            break
        # A partial layer is centred both in rows and in the columns of each row.
        rows_needed = -(-in_layer // plan.nx)
        row_start = (plan.ny - rows_needed) // 2
        positions: List[ItemPosition] = []
        for row in range(row_start, row_start + rows_needed):
            columns = min(plan.nx, in_layer - len(positions))
            column_start = (plan.nx - columns) // 2
            for column in range(column_start, column_start + columns):
                positions.append(
                    ItemPosition(
                        index=index,
                        x0=offsets.offset_x + column * stride_x,
                        y0=offsets.offset_y + row * stride_y,
                        z0=offsets.offset_z + layer * stride_z,
                        dims=(a, b, c),
                    )
                )
                index += 1
        yield layer, positions


def _extended_layer_positions(
    layer: LayerPattern,
    limit: int,
    base_z: float,
    offsets: ArrangementOffsets,
    spacing: Spacing,
    first_index: int,
) -> List[ItemPosition]:
    positions: List[ItemPosition] = []
    if layer.kind == LAYER_PLACED:
        for rect in layer.placed_items[:limit]:
            positions.append(
                ItemPosition(
                    index=first_index + len(positions),
                    x0=offsets.offset_x + rect.x,
                    y0=offsets.offset_y + rect.y,
                    z0=base_z,
                    dims=(rect.width, rect.depth, rect.height),
                    item_index=rect.item_index,
                )
            )
        return positions

    column_x = offsets.offset_x
    for block in layer.columns:
        a, b, c = block.orientation
        for column in range(block.count):
            for row in range(block.rows):
                if len(positions) >= limit:
                    return positions
                positions.append(
                    ItemPosition(
                        index=first_index + len(positions),
                        x0=column_x + column * (a + spacing.gap_xy),
                        y0=offsets.offset_y + row * (b + spacing.gap_xy),
                        z0=base_z,
                        dims=(a, b, c),
                    )
                )
        column_x += block.used_width + spacing.gap_xy
    return positions


def _extended_layers(
    plan: ExtendedPlan,
    quantity: int,
    offsets: ArrangementOffsets,
    spacing: Spacing,
) -> Iterator[Tuple[int, List[ItemPosition]]]:
    remaining = quantity
    base_z = offsets.offset_z
    index = 0
    for layer_index, layer in enumerate(plan.layers):
        if remaining <= 0:
            break
        positions = _extended_layer_positions(
            layer, min(layer.per_layer_capacity, remaining), base_z, offsets, spacing, index
        )
        index += len(positions)
        remaining -= len(positions)
        base_z += layer.height + spacing.gap_z
        yield layer_index, positions


def _iter_layers(
    shipment: AnyShipment,
    container: Container,
    items: ItemsArg,
    container_padding: float,
) -> Iterator[Tuple[int, List[ItemPosition]]]:
    if container.id != shipment.container_id:
        raise ValueError(
            f"shipment uses container {shipment.container_id}, got container {container.id}"
        )
    spacing = Spacing.combined(_as_items(items))
    offsets = compute_offsets(shipment.plan, container, spacing, container_padding)
    if isinstance(shipment.plan, ExtendedPlan):
        return _extended_layers(shipment.plan, shipment.quantity, offsets, spacing)
    return _standard_layers(shipment.plan, shipment.quantity, offsets, spacing)


def project_geometry(
    shipment: AnyShipment,
    container: Container,
    items: ItemsArg,
    container_padding: float = 0.0,
) -> Tuple[ItemPosition, ...]:
    """
    Absolute ``(x0, y0, z0, dims)`` of every unit loaded in ``shipment``.

    ``items`` is the single item of a single-item shipment or the full item list
    of a multi-item shipment; the margins and gaps are taken from it.
    """
    return tuple(
        position
        for _, positions in _iter_layers(shipment, container, items, container_padding)
        for position in positions
    )


def project_layer_footprint(
    shipment: AnyShipment,
    layer_index: int,
    container: Container,
    items: ItemsArg,
    container_padding: float = 0.0,
) -> Tuple[ItemPosition, ...]:
    """Units of one layer, for plan (top-down) views."""
    plan = shipment.plan
    layer_count = len(plan.layers) if isinstance(plan, ExtendedPlan) else plan.layers
    if not 0 <= layer_index < layer_count:
        raise ValueError(f"layer_index must be in [0, {layer_count}), got {layer_index!r}")
    for index, positions in _iter_layers(shipment, container, items, container_padding):
        if index == layer_index:
            return tuple(positions)
    return ()


def group_shipments_by_container(shipments: Sequence[AnyShipment]) -> Tuple[TabGroup, ...]:
    """
    Merge consecutive shipments that use the same container id into display groups.
    """
    groups: List[TabGroup] = []
    start = 0
    for index in range(1, len(shipments) + 1):
        if index < len(shipments) and shipments[index].container_id == shipments[start].container_id:
            continue
        groups.append(
            TabGroup(
                container_id=shipments[start].container_id,
                start_index=start,
                end_index=index - 1,
                shipments=tuple(shipments[start:index]),
            )
        )
        start = index
    return tuple(groups)
