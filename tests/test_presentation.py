import pytest

from packplan.core.geometry_projection import (
    group_shipments_by_container,
    project_geometry,
    project_layer_footprint,
)
from packplan.core.solver_multi_item import allocate_multi_item_extended
from packplan.core.solver_single_item import allocate_quantity
from packplan.models.container import Container
from packplan.models.item import Item
from packplan.report.pdf_generator import generate_pdf_report
from packplan.visualization.layout_plot import layer_figure, shipment_figure


@pytest.fixture
def loaded(cube):
    container = Container(id=5, width=300, depth=300, height=200, name="Cube box")
    result = allocate_quantity(cube, 11, [container])
    return container, result


def test_shipment_figure_draws_mesh_and_edges_per_unit(cube, loaded):
    container, result = loaded
    positions = project_geometry(result.shipments[0], container, cube)
    fig = shipment_figure(positions, container, item_names=[cube.name])
    # Container wireframe, then one mesh and one edge trace per unit.
    assert len(fig.data) == 1 + 2 * len(positions)
    assert fig.data[1].type == "mesh3d"
    assert fig.layout.scene.aspectmode == "data"


def test_layer_figure_draws_one_rect_per_unit(cube, loaded):
    container, result = loaded
    positions = project_layer_footprint(result.shipments[0], 1, container, cube)
    fig = layer_figure(positions, container)
    assert len(fig.layout.shapes) == 1 + len(positions)
    assert sum(1 for trace in fig.data if trace.showlegend) == 1


def test_units_are_coloured_by_item_type():
    items = [
        Item(width=40, depth=30, height=20, keep_upright=True, name="Large"),
        Item(width=20, depth=20, height=20, keep_upright=True, name="Small"),
    ]
    container = Container(id=1, width=100, depth=60, height=40)
    shipment = allocate_multi_item_extended(items, [3, 4], [container]).shipments[0]
    positions = project_geometry(shipment, container, items)
    fig = shipment_figure(positions, container, item_names=[item.name for item in items])
    colors = {trace.name.split(" #")[0]: trace.color for trace in fig.data if trace.type == "mesh3d"}
    assert set(colors) == {"Large", "Small"}
    assert colors["Large"] != colors["Small"]


def test_pdf_report_is_written(cube, loaded, tmp_path):
    container, result = loaded
    path = generate_pdf_report(
        tmp_path / "report" / "plan.pdf",
        items=[cube],
        quantities=[11],
        containers=[container],
        shipments=result.shipments,
        groups=group_shipments_by_container(result.shipments),
        leftover=[result.leftover],
    )
    assert path.exists()
    assert path.read_bytes().startswith(b"%PDF")


def test_pdf_report_handles_no_shipments(tmp_path):
    item = Item(width=900, depth=900, height=900, name="Crate")
    container = Container(id=1, width=100, depth=100, height=100)
    result = allocate_quantity(item, 2, [container])
    path = generate_pdf_report(
        tmp_path / "empty.pdf",
        items=[item],
        quantities=[2],
        containers=[container],
        shipments=result.shipments,
        groups=(),
        leftover=[result.leftover],
    )
    assert path.read_bytes().startswith(b"%PDF")
