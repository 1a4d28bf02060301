"""
CSV export of the quantity plan table.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from packplan.models.container import Container
from packplan.models.plan import ExtendedShipment, QuantityRange

TABLE_COLUMNS = [
    "quantity",
    "container_id",
    "container_name",
    "layout",
    "capacity",
    "void_ratio",
]


def quantity_table_rows(
    ranges: Sequence[QuantityRange],
    containers: Sequence[Container],
) -> List[Dict[str, object]]:
    """Flatten quantity ranges into CSV-ready rows; unplaceable ranges keep empty cells."""
    by_id: Mapping[int, Container] = {container.id: container for container in containers}
    rows: List[Dict[str, object]] = []
    for entry in ranges:
        row: Dict[str, object] = {column: "" for column in TABLE_COLUMNS}
        row["quantity"] = entry.label
        shipment = entry.shipment
        if shipment is not None:
            container = by_id.get(shipment.container_id)
            row["container_id"] = shipment.container_id
            row["container_name"] = container.name if container else ""
            if isinstance(shipment, ExtendedShipment):
                row["layout"] = f"{len(shipment.plan.layers)} layers"
                row["capacity"] = shipment.plan.total_capacity
            else:
                plan = shipment.plan
                row["layout"] = "x".join(f"{d:g}" for d in plan.orientation) + f" @ {plan.nx}x{plan.ny}x{plan.layers}"
                row["capacity"] = plan.capacity
            row["void_ratio"] = f"{shipment.plan.void_ratio:.4f}"
        rows.append(row)
    return rows


def write_quantity_table(
    output_path: str | Path,
    ranges: Sequence[QuantityRange],
    containers: Sequence[Container],
) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="") as file:
        writer = csv.DictWriter(file, fieldnames=TABLE_COLUMNS)
        writer.writeheader()
        writer.writerows(quantity_table_rows(ranges, containers))
    return output_path
