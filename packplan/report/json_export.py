"""
JSON summary of a planning run, built from the models' ``to_dict`` records.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from packplan.core.weights import calculate_weights
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import AllocationResult, MultiAllocationResult
from packplan.models.settings import GeneralSettings


def allocation_summary(
    item: Item,
    quantity: int,
    result: AllocationResult,
    containers: Sequence[Container],
    packaging_weight_per_m3: float = 0.0,
) -> Dict[str, Any]:
    """Allocation of one item, each shipment annotated with its weight breakdown."""
    by_id = {container.id: container for container in containers}
    summary = result.to_dict()
    for entry, shipment in zip(summary["shipments"], result.shipments):
        entry["weights"] = calculate_weights(
            item, shipment.quantity, by_id[shipment.container_id], packaging_weight_per_m3
        ).to_dict()
    summary.update(item=item.to_dict(), quantity=quantity, allocated=result.allocated)
    return summary


def run_summary(
    settings: GeneralSettings,
    containers: Sequence[Container],
    allocations: Sequence[Dict[str, Any]],
    mixed: Optional[MultiAllocationResult] = None,
) -> Dict[str, Any]:
    return {
        "settings": settings.to_dict(),
        "containers": [container.to_dict() for container in containers],
        "allocations": list(allocations),
        "mixed": mixed.to_dict() if mixed is not None else None,
    }


def write_json_summary(output_path: str | Path, summary: Dict[str, Any]) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as file:
        json.dump(summary, file, indent=2)
    return output_path
