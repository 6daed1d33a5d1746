"""SVG rendering using drawsvg.

Two consumers share the drawing helpers below: ``CanvasRenderer`` builds the
interactive canvas (one addressable group per node and edge), and
``serialize_svg`` builds the self-contained export document. Neither computes
geometry of its own; every coordinate comes from ``geometry``/``routing``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import drawsvg as draw

from .geometry import diagram_bounds, get_node_dimensions
from .models import NodeShape
from .routing import (
    build_edge_graph,
    compute_edge_geometry,
    compute_entry_geometry,
    compute_exit_geometry,
    format_number,
)
from .styles import get_edge_color, get_edge_label, resolve_node_style, shows_arrowhead
from .text import label_lines, line_offsets

if TYPE_CHECKING:
    from collections.abc import Collection

    from .geometry import ShapeDescriptor
    from .models import Diagram, Edge, EntryPoint, ExitPoint, Node
    from .routing import EdgeGeometry
    from .styles import ResolvedNodeStyle


class Theme:
    """Colours and fonts that are not tied to a node or relation type."""

    def __init__(
        self,
        background: str = "#ffffff",
        marker_color: str = "#666666",
        font_family: str = "Arial, sans-serif",
        edge_font_size: float = 12,
        edge_width: float = 2,
        label_halo: str = "#ffffff",
        selection_color: str = "#3b82f6",
        entry_fill: str = "#4CAF50",
        entry_stroke: str = "#2E7D32",
        exit_fill: str = "#F44336",
        exit_stroke: str = "#C62828",
    ):
        self.background = background
        self.marker_color = marker_color
        self.font_family = font_family
        self.edge_font_size = edge_font_size
        self.edge_width = edge_width
        self.label_halo = label_halo
        self.selection_color = selection_color
        self.entry_fill = entry_fill
        self.entry_stroke = entry_stroke
        self.exit_fill = exit_fill
        self.exit_stroke = exit_stroke


DEFAULT_THEME = Theme()

RESULTANT_DASH = "8,4"
NODE_CORNER_RADIUS = 10
# Fraction of the node width available to its label
LABEL_WIDTH_FACTOR = 0.8
MARKER_SIZE = 8


def make_arrowhead(theme: Theme) -> draw.Marker:
    """Arrowhead marker; the tip sits exactly on the path end."""
    arrow = draw.Marker(0, 0, 10, 7, orient="auto", id="arrowhead", refX=9, refY=3.5)
    arrow.append(draw.Lines(0, 0, 10, 3.5, 0, 7, close=True, fill=theme.marker_color))
    return arrow


def _polygon_points(cx: float, cy: float, radius: float, sides: int, inner: float | None = None) -> list[float]:
    """Flat coordinate list of a regular polygon (or star) pointing up."""
    points: list[float] = []
    count = sides * 2 if inner is not None else sides
    for i in range(count):
        r = inner if inner is not None and i % 2 else radius
        angle = -math.pi / 2 + 2 * math.pi * i / count
        points.extend((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return points


def node_shape(node: Node, style: ResolvedNodeStyle, dims: ShapeDescriptor, **kwargs) -> draw.DrawingElement:
    """The outline primitive for a node, sized by ``get_node_dimensions``."""
    cx, cy = node.position.x, node.position.y
    paint = {
        "fill": style.fill,
        "stroke": style.stroke,
        "stroke_width": style.stroke_width,
        **kwargs,
    }

    if style.shape is NodeShape.RECTANGLE:
        return draw.Rectangle(
            cx - dims.width / 2, cy - dims.height / 2, dims.width, dims.height,
            rx=NODE_CORNER_RADIUS, **paint,
        )
    if style.shape is NodeShape.DIAMOND:
        half_w = dims.width / 2
        half_h = dims.height / 2
        outline = (
            f"M {format_number(cx)},{format_number(cy - half_h)} "
            f"L {format_number(cx + half_w)},{format_number(cy)} "
            f"L {format_number(cx)},{format_number(cy + half_h)} "
            f"L {format_number(cx - half_w)},{format_number(cy)} Z"
        )
        return draw.Path(d=outline, **paint)
    if style.shape is NodeShape.CIRCLE:
        return draw.Circle(cx, cy, dims.radius, **paint)
    if style.shape is NodeShape.TRIANGLE:
        return draw.Lines(*_polygon_points(cx, cy, dims.radius, 3), close=True, **paint)
    if style.shape is NodeShape.HEXAGON:
        return draw.Lines(*_polygon_points(cx, cy, dims.radius, 6), close=True, **paint)
    if style.shape is NodeShape.STAR:
        return draw.Lines(
            *_polygon_points(cx, cy, dims.radius, 5, inner=dims.radius / 2), close=True, **paint
        )
    return draw.Ellipse(cx, cy, dims.width / 2, dims.height / 2, **paint)


def node_label(node: Node, style: ResolvedNodeStyle, dims: ShapeDescriptor, theme: Theme) -> list[draw.Text]:
    """Label lines centred on the node, wrapped to the node width."""
    lines = label_lines(node.label, dims.width * LABEL_WIDTH_FACTOR, style.font_size)
    offsets = line_offsets(len(lines), style.font_size)
    return [
        draw.Text(
            line,
            style.font_size,
            node.position.x,
            node.position.y + offset,
            class_="node-text",
            fill=style.text_color,
            font_family=style.font_family or theme.font_family,
            text_anchor="middle",
            dominant_baseline="central",
        )
        for line, offset in zip(lines, offsets)
    ]


def edge_path(
    geometry: EdgeGeometry,
    color: str,
    theme: Theme,
    arrow: draw.Marker | None,
    dashed: bool = False,
    **kwargs,
) -> draw.Path:
    args = {
        "stroke": color,
        "stroke_width": theme.edge_width,
        "fill": "none",
        "stroke_linecap": "round",
        **kwargs,
    }
    if dashed:
        args["stroke_dasharray"] = RESULTANT_DASH
    if arrow is not None:
        args["marker_end"] = arrow
    return draw.Path(d=geometry.path, **args)


def edge_label(geometry: EdgeGeometry, text: str, color: str, theme: Theme) -> draw.Text:
    """Label with a white halo, rotated unless the geometry says not to."""
    x, y = geometry.label_position.x, geometry.label_position.y
    args = {}
    if geometry.label_angle is not None:
        args["transform"] = (
            f"rotate({format_number(geometry.label_angle)}, {format_number(x)}, {format_number(y)})"
        )
    return draw.Text(
        text,
        theme.edge_font_size,
        x,
        y,
        class_="edge-text",
        fill=color,
        font_family=theme.font_family,
        text_anchor="middle",
        paint_order="stroke fill",
        stroke=theme.label_halo,
        stroke_width=3,
        **args,
    )


def entry_marker(entry: EntryPoint, theme: Theme) -> list[draw.DrawingElement]:
    """Green circle with a play triangle."""
    x, y = entry.position.x, entry.position.y
    return [
        draw.Circle(x, y, MARKER_SIZE, fill=theme.entry_fill, stroke=theme.entry_stroke, stroke_width=2),
        draw.Lines(x - 3, y - 3, x + 3, y, x - 3, y + 3, close=True, fill="white"),
    ]


def exit_marker(exit_point: ExitPoint, theme: Theme) -> list[draw.DrawingElement]:
    """Red square with a cross."""
    x, y = exit_point.position.x, exit_point.position.y
    return [
        draw.Rectangle(
            x - MARKER_SIZE, y - MARKER_SIZE, MARKER_SIZE * 2, MARKER_SIZE * 2,
            fill=theme.exit_fill, stroke=theme.exit_stroke, stroke_width=2,
        ),
        draw.Path(
            d=f"M {x - 3},{y - 3} L {x + 3},{y + 3} M {x + 3},{y - 3} L {x - 3},{y + 3}",
            stroke="white", stroke_width=2, stroke_linecap="round",
        ),
    ]


def _edge_elements(
    edge: Edge,
    geometry: EdgeGeometry,
    theme: Theme,
    arrow: draw.Marker,
) -> list[draw.DrawingElement]:
    color = get_edge_color(edge.type, edge.is_resultant)
    elements: list[draw.DrawingElement] = [
        edge_path(
            geometry, color, theme,
            arrow if shows_arrowhead(edge.type) else None,
            dashed=edge.is_resultant,
        )
    ]
    text = get_edge_label(edge)
    if text:
        elements.append(edge_label(geometry, text, color, theme))
    return elements


def _node_elements(node: Node, theme: Theme, **shape_kwargs) -> list[draw.DrawingElement]:
    style = resolve_node_style(node)
    dims = get_node_dimensions(node)
    return [node_shape(node, style, dims, **shape_kwargs), *node_label(node, style, dims, theme)]


class CanvasRenderer:
    """Renders the live editing canvas.

    Every node, edge and entry/exit point is wrapped in a group carrying its
    id so the editing layer can hit-test and restyle it.
    """

    def __init__(
        self,
        theme: Theme | None = None,
        width: float = 1200,
        height: float = 800,
    ):
        self.theme = theme or DEFAULT_THEME
        self.width = width
        self.height = height

    def render(
        self,
        diagram: Diagram,
        selected: Collection[str] = (),
        zoom: float = 1.0,
        pan: tuple[float, float] = (0, 0),
    ) -> draw.Drawing:
        """Render a diagram snapshot. ``selected`` holds node or edge ids."""
        d = draw.Drawing(self.width, self.height)
        d.append(draw.Rectangle(0, 0, self.width, self.height, fill=self.theme.background))

        arrow = make_arrowhead(self.theme)
        scene = draw.Group(
            id="scene",
            transform=f"translate({format_number(pan[0])}, {format_number(pan[1])}) scale({zoom})",
        )

        index = diagram.node_index()
        graph = build_edge_graph(diagram.edges)

        edges_layer = draw.Group(class_="edges")
        for edge in diagram.edges:
            geometry = compute_edge_geometry(edge, index, diagram.edges, graph)
            if geometry is None:
                continue
            group = draw.Group(
                id=f"edge-{edge.id}",
                class_="edge selected" if edge.id in selected else "edge",
                data_edge_id=edge.id,
            )
            # Wide transparent stroke so thin edges are easy to click
            group.append(draw.Path(d=geometry.path, stroke="transparent", stroke_width=12, fill="none"))
            for element in _edge_elements(edge, geometry, self.theme, arrow):
                group.append(element)
            edges_layer.append(group)
        scene.append(edges_layer)

        nodes_layer = draw.Group(class_="nodes")
        for node in diagram.nodes:
            is_selected = node.id in selected
            group = draw.Group(
                id=f"node-{node.id}",
                class_="node selected" if is_selected else "node",
                data_node_id=node.id,
                data_node_type=node.type.value,
            )
            highlight = {"stroke": self.theme.selection_color, "stroke_width": 3} if is_selected else {}
            for element in _node_elements(node, self.theme, **highlight):
                group.append(element)
            nodes_layer.append(group)
        scene.append(nodes_layer)

        scene.append(self._render_boundary_points(diagram, index, arrow))
        d.append(scene)
        return d

    def _render_boundary_points(self, diagram: Diagram, index: dict[str, Node], arrow: draw.Marker) -> draw.Group:
        layer = draw.Group(class_="boundary-points")

        for entry in diagram.entry_points:
            group = draw.Group(id=f"entry-{entry.id}", class_="entry-point", data_entry_id=entry.id)
            geometry = compute_entry_geometry(entry, index)
            if geometry is not None:
                group.append(edge_path(geometry, self.theme.entry_fill, self.theme, arrow))
            for element in entry_marker(entry, self.theme):
                group.append(element)
            layer.append(group)

        for exit_point in diagram.exit_points:
            group = draw.Group(id=f"exit-{exit_point.id}", class_="exit-point", data_exit_id=exit_point.id)
            geometry = compute_exit_geometry(exit_point, index)
            if geometry is not None:
                group.append(edge_path(geometry, self.theme.exit_fill, self.theme, arrow))
            for element in exit_marker(exit_point, self.theme):
                group.append(element)
            layer.append(group)

        return layer


def render_document(diagram: Diagram, theme: Theme | None = None) -> draw.Drawing:
    """Build the export drawing: viewBox fitted to the padded diagram bounds."""
    theme = theme or DEFAULT_THEME
    bounds = diagram_bounds(diagram.nodes)

    d = draw.Drawing(bounds.width, bounds.height, origin=(bounds.min_x, bounds.min_y))
    d.append(draw.Rectangle(bounds.min_x, bounds.min_y, bounds.width, bounds.height, fill=theme.background))

    arrow = make_arrowhead(theme)
    index = diagram.node_index()
    graph = build_edge_graph(diagram.edges)

    # Edges first so node shapes cover the line ends
    for edge in diagram.edges:
        geometry = compute_edge_geometry(edge, index, diagram.edges, graph)
        if geometry is None:
            continue
        for element in _edge_elements(edge, geometry, theme, arrow):
            d.append(element)

    for entry in diagram.entry_points:
        geometry = compute_entry_geometry(entry, index)
        if geometry is not None:
            d.append(edge_path(geometry, theme.entry_fill, theme, arrow))
        for element in entry_marker(entry, theme):
            d.append(element)

    for exit_point in diagram.exit_points:
        geometry = compute_exit_geometry(exit_point, index)
        if geometry is not None:
            d.append(edge_path(geometry, theme.exit_fill, theme, arrow))
        for element in exit_marker(exit_point, theme):
            d.append(element)

    for node in diagram.nodes:
        for element in _node_elements(node, theme):
            d.append(element)

    return d


def serialize_svg(diagram: Diagram, theme: Theme | None = None) -> str:
    """Render a diagram to a self-contained SVG document string."""
    return render_document(diagram, theme).as_svg()


def save_svg(diagram: Diagram, filename: str, theme: Theme | None = None) -> str:
    """Render and write an SVG document. Returns the SVG content."""
    drawing = render_document(diagram, theme)
    drawing.save_svg(filename)
    return drawing.as_svg()
