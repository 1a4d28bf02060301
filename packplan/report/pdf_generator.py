"""
PDF report generator using ReportLab.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from packplan.core.utils_geometry import volume_utilization
from packplan.core.weights import calculate_weights
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.models.plan import AnyShipment, ExtendedShipment, TabGroup


def _build_table(data: Sequence[Sequence[str]], column_widths: Sequence[float]) -> Table:
    table = Table(data, colWidths=column_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F1F1F1")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#333333")),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#DDDDDD")),
            ]
        )
    )
    return table


def _dims(width: float, depth: float, height: float) -> str:
    return f"{width:g} x {depth:g} x {height:g}"


def _input_table(items: Sequence[Item], quantities: Sequence[int]) -> Table:
    headers = ["Item", "Dimensions (mm)", "Upright", "Gap XY / Z", "Unit Weight (kg)", "Quantity"]
    data = [headers]
    for item, quantity in zip(items, quantities):
        data.append(
            [
                item.name,
                _dims(*item.dimensions),
                "Yes" if item.keep_upright else "No",
                f"{item.gap_xy:g} / {item.gap_z:g}",
                "-" if item.unit_weight is None else f"{item.unit_weight:g}",
                str(quantity),
            ]
        )
    return _build_table(data, column_widths=[50 * mm, 45 * mm, 20 * mm, 30 * mm, 35 * mm, 25 * mm])


def _layout_text(shipment: AnyShipment) -> str:
    if isinstance(shipment, ExtendedShipment):
        kinds = sorted({layer.kind for layer in shipment.plan.layers})
        return f"{len(shipment.plan.layers)} layer(s), {'/'.join(kinds)}"
    plan = shipment.plan
    return f"{_dims(*plan.orientation)} @ {plan.nx}x{plan.ny}x{plan.layers}"


def _shipment_table(
    shipments: Sequence[AnyShipment],
    containers: Mapping[int, Container],
    item: Optional[Item],
    packaging_weight_per_m3: float,
) -> Table:
    headers = ["#", "Container", "Layout", "Quantity", "Volume Util. (%)", "Gross Weight (kg)"]
    data = [headers]
    for index, shipment in enumerate(shipments, start=1):
        container = containers[shipment.container_id]
        if isinstance(shipment, ExtendedShipment) and shipment.plan.layers[0].placed_items:
            used = sum(
                rect.width * rect.depth * rect.height
                for layer in shipment.plan.layers
                for rect in layer.placed_items
            )
        else:
            used = shipment.quantity * (item.volume if item is not None else 0.0)
        weight = "-"
        if item is not None:
            breakdown = calculate_weights(item, shipment.quantity, container, packaging_weight_per_m3)
            weight = f"{breakdown.total_weight:.2f}"
        data.append(
            [
                str(index),
                f"{container.name} ({_dims(*container.dimensions)})",
                _layout_text(shipment),
                ", ".join(str(count) for count in shipment.quantities_by_item),
                f"{volume_utilization(used, container.inner_volume):.1f}",
                weight,
            ]
        )
    return _build_table(data, column_widths=[10 * mm, 70 * mm, 65 * mm, 30 * mm, 30 * mm, 30 * mm])


def _group_table(groups: Sequence[TabGroup], containers: Mapping[int, Container]) -> Table:
    headers = ["Container", "Shipments", "Count"]
    data = [headers]
    for group in groups:
        span_label = (
            str(group.start_index + 1)
            if group.count == 1
            else f"{group.start_index + 1}-{group.end_index + 1}"
        )
        data.append([containers[group.container_id].name, span_label, str(group.count)])
    return _build_table(data, column_widths=[80 * mm, 50 * mm, 30 * mm])


def generate_pdf_report(
    output_path: str | Path,
    items: Sequence[Item],
    quantities: Sequence[int],
    containers: Sequence[Container],
    shipments: Sequence[AnyShipment],
    groups: Sequence[TabGroup],
    leftover: Sequence[int],
    layout_images: Iterable[str | Path] = (),
    packaging_weight_per_m3: float = 0.0,
    title: str = "Packing Plan Report",
) -> Path:
    """
    Generate a packing plan PDF report and return the output path.

    Gross weights are only listed for single-item plans.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    by_id = {container.id: container for container in containers}
    single_item = items[0] if len(items) == 1 else None

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=landscape(A4),
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )

    styles = getSampleStyleSheet()
    subtitle_style = ParagraphStyle(
        "Subtitle",
        parent=styles["Heading2"],
        textColor=colors.HexColor("#2D5B88"),
    )

    story: list = [
        Paragraph(title, styles["Title"]),
        Spacer(1, 8 * mm),
        Paragraph("Input Summary", subtitle_style),
        Spacer(1, 4 * mm),
        _input_table(items, quantities),
        Spacer(1, 6 * mm),
        Paragraph("Shipments", subtitle_style),
        Spacer(1, 4 * mm),
    ]
    if shipments:
        story.append(_shipment_table(shipments, by_id, single_item, packaging_weight_per_m3))
        story.extend(
            [
                Spacer(1, 6 * mm),
                Paragraph("Containers Used", subtitle_style),
                Spacer(1, 4 * mm),
                _group_table(groups, by_id),
            ]
        )
    else:
        story.append(Paragraph("No container can hold a single unit.", styles["Normal"]))

    if any(leftover):
        names = ", ".join(f"{item.name}: {count}" for item, count in zip(items, leftover) if count)
        story.extend([Spacer(1, 6 * mm), Paragraph(f"Not packed: {names}", styles["Normal"])])

    for image_path in layout_images:
        image_path = Path(image_path)
        if image_path.exists():
            story.extend(
                [
                    Spacer(1, 6 * mm),
                    Paragraph(image_path.stem.replace("_", " ").title(), subtitle_style),
                    Spacer(1, 4 * mm),
                    Image(str(image_path), width=180 * mm, height=110 * mm),
                ]
            )

    doc.build(story)
    return output_path
