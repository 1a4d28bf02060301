"""
Simple CLI script to execute the packing plan pipeline end-to-end.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from packplan.core.geometry_projection import (
    group_shipments_by_container,
    project_geometry,
    project_layer_footprint,
)
from packplan.core.quantity_table import build_quantity_table
from packplan.core.solver_layer_pattern import allocate_quantity_extended
from packplan.core.solver_multi_item import allocate_multi_item_extended
from packplan.core.solver_single_item import allocate_quantity
from packplan.core.utils_geometry import footprint_coverage
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import AnyShipment
from packplan.models.settings import build_item, load_catalog, load_config, load_settings
from packplan.report.csv_export import write_quantity_table
from packplan.report.json_export import allocation_summary, run_summary, write_json_summary
from packplan.report.pdf_generator import generate_pdf_report
from packplan.visualization import layout_plot

logger = logging.getLogger("packplan")


def _render_first_shipment(
    shipments: Sequence[AnyShipment],
    containers: Sequence[Container],
    items: Sequence[Item],
    padding: float,
    output_dir: Path,
    prefix: str,
) -> List[Path]:
    if not shipments:
        return []
    shipment = shipments[0]
    container = next(c for c in containers if c.id == shipment.container_id)
    names = [item.name for item in items]
    positions = project_geometry(shipment, container, items, padding)
    bottom = project_layer_footprint(shipment, 0, container, items, padding)
    coverage = footprint_coverage(
        [(p.x0, p.y0, p.dims[0], p.dims[1]) for p in bottom], container.width, container.depth
    )
    logger.info("%s: first layer covers %.1f%% of the container floor", prefix, coverage)

    images = [
        layout_plot.save_figure_image(
            layout_plot.shipment_figure(positions, container, f"{container.name} load", names),
            output_dir / f"{prefix}_load.png",
        ),
        layout_plot.save_figure_image(
            layout_plot.layer_figure(bottom, container, f"{container.name} bottom layer", names),
            output_dir / f"{prefix}_bottom_layer.png",
        ),
    ]
    return images


def main(argv: Optional[Sequence[str]] = None) -> None:
    base_dir = Path(__file__).resolve().parent
    parser = argparse.ArgumentParser(description="Plan how products are packed into containers.")
    parser.add_argument("--config-dir", type=Path, default=base_dir / "config")
    parser.add_argument("--output-dir", type=Path, default=base_dir / "artifacts")
    parser.add_argument("--extended", action="store_true", help="use mixed-orientation layer plans")
    parser.add_argument("--table-max", type=int, default=100, help="largest quantity in the quantity table")
    parser.add_argument("--no-images", action="store_true", help="skip rendering layout images")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    containers = load_catalog(args.config_dir / "containers.json")
    settings = load_settings(args.config_dir / "settings.json")
    entries = load_config(args.config_dir / "items.json")["items"]
    if not entries:
        parser.error("items.json lists no items")
    items = [build_item(entry, settings) for entry in entries]
    quantities = [int(entry.get("quantity", 0)) for entry in entries]
    padding = settings.default_container_padding

    print("=== Packing Plan Summary ===")
    images: List[Path] = []
    allocations: List[Dict[str, Any]] = []
    multi = None
    for item, quantity in zip(items, quantities):
        allocate = allocate_quantity_extended if args.extended else allocate_quantity
        result = allocate(item, quantity, containers, padding)
        groups = group_shipments_by_container(result.shipments)
        allocations.append(
            allocation_summary(item, quantity, result, containers, settings.packaging_weight_per_m3)
        )
        prefix = item.name.lower().replace(" ", "_")
        if not args.no_images:
            images.extend(_render_first_shipment(result.shipments, containers, [item], padding, output_dir, prefix))

        table = build_quantity_table(item, containers, args.table_max, padding, extended=args.extended)
        write_quantity_table(output_dir / f"{prefix}_quantity_table.csv", table, containers)

        print(f"{item.name}: {quantity} requested, {result.allocated} packed, {result.leftover} left over")
        for group in groups:
            print(f"  container {group.container_id}: {group.count} shipment(s)")

    if len(items) > 1:
        multi = allocate_multi_item_extended(items, quantities, containers, padding)
        groups = group_shipments_by_container(multi.shipments)
        if not args.no_images:
            images.extend(_render_first_shipment(multi.shipments, containers, items, padding, output_dir, "mixed"))
        pdf_path = generate_pdf_report(
            output_dir / "packing_plan.pdf",
            items=items,
            quantities=quantities,
            containers=containers,
            shipments=multi.shipments,
            groups=groups,
            leftover=multi.leftover,
            layout_images=images,
            packaging_weight_per_m3=settings.packaging_weight_per_m3,
        )
        print(f"Mixed load: {len(multi.shipments)} shipment(s), leftover {list(multi.leftover)}")
    else:
        pdf_path = generate_pdf_report(
            output_dir / "packing_plan.pdf",
            items=items,
            quantities=quantities,
            containers=containers,
            shipments=result.shipments,
            groups=groups,
            leftover=[result.leftover],
            layout_images=images,
            packaging_weight_per_m3=settings.packaging_weight_per_m3,
        )

    json_path = write_json_summary(
        output_dir / "packing_plan.json", run_summary(settings, containers, allocations, multi)
    )
    print(f"Report written to: {pdf_path}")
    print(f"Summary written to: {json_path}")
    print(f"Artifacts saved to: {output_dir}")


if __name__ == "__main__":
    main()
