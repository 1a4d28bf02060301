"""
Plotly figures for projected shipments: a 3D view of the whole load and a
top-down view of a single layer.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import plotly.graph_objects as go
import plotly.io as pio
from plotly.colors import qualitative

from packplan.models.container import Container
from packplan.models.plan import ItemPosition

DEFAULT_COLOR_SEQUENCE = qualitative.Light24

_BOX_EDGES = [
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 0),
    (4, 5),
    (5, 6),
    (6, 7),
    (7, 4),
    (0, 4),
    (1, 5),
    (2, 6),
    (3, 7),
]

# Two triangles per face over the eight prism vertices.
_BOX_TRIANGLES = (
    [0, 0, 4, 4, 0, 0, 1, 1, 2, 2, 3, 3],
    [1, 2, 5, 6, 1, 5, 2, 6, 3, 7, 0, 4],
    [2, 3, 6, 7, 5, 4, 6, 5, 7, 6, 4, 7],
)


def _prism_vertices(
    x: float, y: float, z: float, dx: float, dy: float, dz: float
) -> Tuple[List[float], List[float], List[float]]:
    xs = [x, x + dx, x + dx, x, x, x + dx, x + dx, x]
    ys = [y, y, y + dy, y + dy, y, y, y + dy, y + dy]
    zs = [z, z, z, z, z + dz, z + dz, z + dz, z + dz]
    return xs, ys, zs


def _color_for_index(index: int) -> str:
    return DEFAULT_COLOR_SEQUENCE[index % len(DEFAULT_COLOR_SEQUENCE)]


def _box_mesh(position: ItemPosition, color: str, name: str) -> go.Mesh3d:
    xs, ys, zs = _prism_vertices(position.x0, position.y0, position.z0, *position.dims)
    i, j, k = _BOX_TRIANGLES
    return go.Mesh3d(
        x=xs,
        y=ys,
        z=zs,
        i=i,
        j=j,
        k=k,
        color=color,
        opacity=1.0,
        name=name,
        flatshading=True,
        lighting=dict(ambient=0.6, diffuse=0.9, specular=0.1),
        hovertext=f"{name} ({' x '.join(f'{d:g}' for d in position.dims)} mm)",
        hoverinfo="text",
        showscale=False,
    )


def _edges(
    xs: Sequence[float],
    ys: Sequence[float],
    zs: Sequence[float],
    color: str,
    width: float,
    name: str,
    showlegend: bool = False,
) -> go.Scatter3d:
    x_coords: List[Optional[float]] = []
    y_coords: List[Optional[float]] = []
    z_coords: List[Optional[float]] = []
    for start, end in _BOX_EDGES:
        x_coords.extend([xs[start], xs[end], None])
        y_coords.extend([ys[start], ys[end], None])
        z_coords.extend([zs[start], zs[end], None])

    return go.Scatter3d(
        x=x_coords,
        y=y_coords,
        z=z_coords,
        mode="lines",
        line=dict(color=color, width=width),
        name=name,
        showlegend=showlegend,
        hoverinfo="skip",
    )


def _container_wireframe(container: Container, color: str = "#2d3748") -> go.Scatter3d:
    xs, ys, zs = _prism_vertices(0, 0, 0, container.width, container.depth, container.height)
    return _edges(xs, ys, zs, color=color, width=4, name=container.name, showlegend=True)


def _item_label(item_names: Optional[Sequence[str]], item_index: int) -> str:
    if item_names and 0 <= item_index < len(item_names):
        return item_names[item_index]
    return f"Item {item_index + 1}"


def _apply_scene_layout(fig: go.Figure, title: str) -> None:
    axis_style = dict(backgroundcolor="#f2f5fb", gridcolor="#cbd5e0", zerolinecolor="#a0aec0")
    fig.update_layout(
        title=title,
        scene=dict(
            xaxis_title="Width (mm)",
            yaxis_title="Depth (mm)",
            zaxis_title="Height (mm)",
            aspectmode="data",
            xaxis=axis_style,
            yaxis=axis_style,
            zaxis=axis_style,
        ),
        paper_bgcolor="#f7f9fc",
        plot_bgcolor="#f7f9fc",
        legend=dict(
            bgcolor="rgba(255,255,255,0.8)",
            bordercolor="#cbd5e0",
            borderwidth=1,
        ),
        margin=dict(l=0, r=0, t=40, b=0),
    )


def shipment_figure(
    positions: Sequence[ItemPosition],
    container: Container,
    title: str = "Container load",
    item_names: Optional[Sequence[str]] = None,
) -> go.Figure:
    """
    3D view of a loaded container. Units are coloured by item type.
    """
    fig = go.Figure()
    fig.add_trace(_container_wireframe(container))
    for position in positions:
        name = f"{_item_label(item_names, position.item_index)} #{position.index + 1}"
        fig.add_trace(_box_mesh(position, _color_for_index(position.item_index), name))
        xs, ys, zs = _prism_vertices(position.x0, position.y0, position.z0, *position.dims)
        fig.add_trace(_edges(xs, ys, zs, color="#000000", width=2.5, name=name))
    _apply_scene_layout(fig, title)
    return fig


def layer_figure(
    positions: Sequence[ItemPosition],
    container: Container,
    title: str = "Layer plan",
    item_names: Optional[Sequence[str]] = None,
) -> go.Figure:
    """
    Top-down view of one layer: the container footprint and one rectangle per unit.
    """
    fig = go.Figure()
    fig.add_shape(
        type="rect",
        x0=0,
        y0=0,
        x1=container.width,
        y1=container.depth,
        line=dict(color="#2d3748", width=3),
    )
    seen = set()
    for position in positions:
        dx, dy, _ = position.dims
        color = _color_for_index(position.item_index)
        fig.add_shape(
            type="rect",
            x0=position.x0,
            y0=position.y0,
            x1=position.x0 + dx,
            y1=position.y0 + dy,
            line=dict(color="#000000", width=1),
            fillcolor=color,
        )
        label = _item_label(item_names, position.item_index)
        # Invisible centre marker carries the hover text and the legend entry.
        fig.add_trace(
            go.Scatter(
                x=[position.x0 + dx / 2],
                y=[position.y0 + dy / 2],
                mode="markers",
                marker=dict(color=color, size=6),
                name=label,
                legendgroup=label,
                showlegend=label not in seen,
                hovertext=f"{label} #{position.index + 1}",
                hoverinfo="text",
            )
        )
        seen.add(label)

    fig.update_xaxes(title="Width (mm)", range=[0, container.width], constrain="domain")
    fig.update_yaxes(title="Depth (mm)", range=[0, container.depth], scaleanchor="x", scaleratio=1)
    fig.update_layout(
        title=title,
        paper_bgcolor="#f7f9fc",
        plot_bgcolor="#ffffff",
        margin=dict(l=40, r=20, t=40, b=40),
    )
    return fig


def save_figure_image(fig: go.Figure, output_path: str | Path, width: int = 900, height: int = 650) -> Path:
    """
    Persist a figure to disk as a static PNG using Kaleido.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pio.write_image(fig, str(output_path), format="png", width=width, height=height, scale=2)
    return output_path
