"""Edge routing: straight, curved and self-loop geometry.

Multiple edges joining the same unordered node pair are fanned out as
quadratic curves whose control points are displaced perpendicular to the
line between the node centres. The index of parallel edges is a NetworkX
``MultiGraph`` keyed by edge id.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import networkx as nx

from .geometry import get_node_connection_point, get_node_dimensions
from .labels import place_curve_label, place_loop_label, place_straight_label
from .models import BOUNDARY_EDGE_TYPES, EdgeType, NodeShape, Point
from .styles import get_node_shape

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .models import Diagram, Edge, EntryPoint, ExitPoint, Node

logger = logging.getLogger(__name__)

EDGE_OFFSET_RANGE = 60
LOOP_SIZE_FACTOR = 0.8
# Loop anchors on non-rectangular shapes are aimed this far either side of
# the upper-right direction
LOOP_ANCHOR_DIRECTION = -math.pi / 4
LOOP_ANCHOR_SPREAD = math.pi / 6
# Radius of the entry/exit marker drawn around a boundary anchor
BOUNDARY_MARKER_RADIUS = 8


class GeometryKind(Enum):
    """Geometry class of a routed edge."""

    STRAIGHT = "straight"
    CURVE = "curve"
    LOOP = "loop"


@dataclass(frozen=True)
class EdgeGeometry:
    """Derived, ready-to-draw geometry of one edge.

    ``control`` is set for curves and loops, ``control2`` for loops only.
    ``label_angle`` is None for loops: callers must not rotate those labels.
    """

    kind: GeometryKind
    start: Point
    end: Point
    path: str
    label_position: Point
    label_angle: float | None
    control: Point | None = None
    control2: Point | None = None
    offset: float = 0.0


def format_number(value: float) -> str:
    """Two-decimal formatting shared by every serialized coordinate."""
    if not math.isfinite(value):
        return "0"
    text = f"{value:.2f}"
    return "0.00" if text == "-0.00" else text


def _fmt_point(point: Point) -> str:
    return f"{format_number(point.x)} {format_number(point.y)}"


def line_path(start: Point, end: Point) -> str:
    return f"M {_fmt_point(start)} L {_fmt_point(end)}"


def quadratic_path(start: Point, control: Point, end: Point) -> str:
    return f"M {_fmt_point(start)} Q {_fmt_point(control)} {_fmt_point(end)}"


def cubic_path(start: Point, c1: Point, c2: Point, end: Point) -> str:
    return f"M {_fmt_point(start)} C {_fmt_point(c1)} {_fmt_point(c2)} {_fmt_point(end)}"


def build_edge_graph(edges: Iterable[Edge]) -> nx.MultiGraph:
    """Undirected multigraph of all fully connected edges, keyed by edge id."""
    graph = nx.MultiGraph()
    for edge in edges:
        if edge.source is None or edge.target is None:
            continue
        graph.add_edge(edge.source, edge.target, key=edge.id, edge=edge)
    return graph


def parallel_edges(
    edge: Edge,
    all_edges: Iterable[Edge],
    graph: nx.MultiGraph | None = None,
) -> list[Edge]:
    """Edges joining the same unordered node pair as ``edge``, sorted by id."""
    if edge.source is None or edge.target is None:
        return [edge]
    if graph is None:
        graph = build_edge_graph(all_edges)
    if not graph.has_edge(edge.source, edge.target):
        return [edge]

    related = [data["edge"] for data in graph[edge.source][edge.target].values()]
    if all(e.id != edge.id for e in related):
        related.append(edge)
    return sorted(related, key=lambda e: e.id)


def get_edge_offset(
    edge: Edge,
    all_edges: Iterable[Edge],
    graph: nx.MultiGraph | None = None,
) -> float:
    """Perpendicular bend for ``edge`` among the edges sharing its node pair.

    A lone edge gets 0 (straight). Two edges get -range/2 and +range/2;
    more are spread evenly across the range, centred on zero. The sign is
    flipped for edges running from the lexicographically larger node id so
    that A->B and B->A bend to opposite sides.
    """
    related = parallel_edges(edge, all_edges, graph)
    total = len(related)
    if total <= 1:
        return 0.0

    index = next(i for i, e in enumerate(related) if e.id == edge.id)
    orientation = 1 if edge.source < edge.target else -1

    if total == 2:
        base_offset = -EDGE_OFFSET_RANGE / 2 if index == 0 else EDGE_OFFSET_RANGE / 2
        return base_offset * orientation

    step = EDGE_OFFSET_RANGE / (total - 1)
    base_offset = (index - (total - 1) / 2) * step
    return base_offset * orientation


def compute_straight_geometry(source: Node, target: Node) -> EdgeGeometry:
    start = get_node_connection_point(source, target.position)
    end = get_node_connection_point(target, source.position)
    label_position, label_angle = place_straight_label(start, end)

    return EdgeGeometry(
        kind=GeometryKind.STRAIGHT,
        start=start,
        end=end,
        path=line_path(start, end),
        label_position=label_position,
        label_angle=label_angle,
    )


def compute_curved_geometry(source: Node, target: Node, offset: float) -> EdgeGeometry:
    """Quadratic curve bent by ``offset`` off the centre line.

    Endpoints are aimed at the control point, not at the opposite node.
    """
    sx, sy = source.position.x, source.position.y
    tx, ty = target.position.x, target.position.y
    dx = tx - sx
    dy = ty - sy
    length = math.hypot(dx, dy)

    if length == 0:
        logger.debug("Nodes %s and %s share a centre; drawing a straight edge", source.id, target.id)
        start, end = source.position, target.position
        return EdgeGeometry(
            kind=GeometryKind.STRAIGHT,
            start=start,
            end=end,
            path=line_path(start, end),
            label_position=Point((start.x + end.x) / 2, (start.y + end.y) / 2),
            label_angle=0.0,
        )

    perp_x = -dy / length
    perp_y = dx / length
    control = Point((sx + tx) / 2 + perp_x * offset, (sy + ty) / 2 + perp_y * offset)

    start = get_node_connection_point(source, control)
    end = get_node_connection_point(target, control)
    label_position, label_angle = place_curve_label(start, control, end, offset)

    return EdgeGeometry(
        kind=GeometryKind.CURVE,
        start=start,
        end=end,
        control=control,
        path=quadratic_path(start, control, end),
        label_position=label_position,
        label_angle=label_angle,
        offset=offset,
    )


def _outline_point(node: Node, angle: float) -> Point:
    aim = Point(node.position.x + math.cos(angle), node.position.y + math.sin(angle))
    return get_node_connection_point(node, aim)


def compute_loop_geometry(node: Node) -> EdgeGeometry:
    """Cubic self-loop leaving and re-entering the right-hand side of a node."""
    dims = get_node_dimensions(node)
    cx, cy = node.position.x, node.position.y

    if get_node_shape(node) is NodeShape.RECTANGLE:
        start = Point(cx + dims.width / 2, cy - dims.height / 4)
        end = Point(cx + dims.width / 2, cy + dims.height / 4)
    else:
        start = _outline_point(node, LOOP_ANCHOR_DIRECTION - LOOP_ANCHOR_SPREAD)
        end = _outline_point(node, LOOP_ANCHOR_DIRECTION + LOOP_ANCHOR_SPREAD)

    loop_size = max(dims.width, dims.height) * LOOP_SIZE_FACTOR
    control = Point(start.x + loop_size, start.y)
    control2 = Point(end.x + loop_size, end.y)
    label_position, label_angle = place_loop_label(node, dims)

    return EdgeGeometry(
        kind=GeometryKind.LOOP,
        start=start,
        end=end,
        control=control,
        control2=control2,
        path=cubic_path(start, control, control2, end),
        label_position=label_position,
        label_angle=label_angle,
    )


def compute_boundary_geometry(anchor: Point, node: Node, kind: EdgeType) -> EdgeGeometry:
    """Straight segment between an entry/exit marker and a node's outline.

    Entries run from the marker into the node; exits from the node out to
    the marker. The marker end stops at the marker's rim.
    """
    boundary = get_node_connection_point(node, anchor)
    dx = boundary.x - anchor.x
    dy = boundary.y - anchor.y
    distance = math.hypot(dx, dy)
    if distance == 0:
        rim = anchor
    else:
        reach = min(BOUNDARY_MARKER_RADIUS, distance)
        rim = Point(anchor.x + dx / distance * reach, anchor.y + dy / distance * reach)

    if kind is EdgeType.EXIT:
        start, end = boundary, rim
    else:
        start, end = rim, boundary
    label_position, label_angle = place_straight_label(start, end)

    return EdgeGeometry(
        kind=GeometryKind.STRAIGHT,
        start=start,
        end=end,
        path=line_path(start, end),
        label_position=label_position,
        label_angle=label_angle,
    )


def _index_nodes(nodes: Sequence[Node] | Mapping[str, Node]) -> Mapping[str, Node]:
    if isinstance(nodes, Mapping):
        return nodes
    return {node.id: node for node in nodes}


def compute_edge_geometry(
    edge: Edge,
    nodes: Sequence[Node] | Mapping[str, Node],
    all_edges: Sequence[Edge],
    graph: nx.MultiGraph | None = None,
) -> EdgeGeometry | None:
    """Geometry for one edge, or None when an endpoint node is missing.

    Pure: the same snapshot always yields the same result, which is what
    keeps the canvas and the exports in agreement.
    """
    index = _index_nodes(nodes)

    if edge.type in BOUNDARY_EDGE_TYPES and edge.anchor is not None:
        if edge.source is None and edge.target is not None:
            node = index.get(edge.target)
            return compute_boundary_geometry(edge.anchor, node, EdgeType.ENTRY) if node else None
        if edge.target is None and edge.source is not None:
            node = index.get(edge.source)
            return compute_boundary_geometry(edge.anchor, node, EdgeType.EXIT) if node else None

    source = index.get(edge.source) if edge.source is not None else None
    target = index.get(edge.target) if edge.target is not None else None
    if source is None or target is None:
        logger.debug("Skipping edge %s: endpoint %s -> %s not found", edge.id, edge.source, edge.target)
        return None

    if edge.source == edge.target:
        return compute_loop_geometry(source)

    offset = get_edge_offset(edge, all_edges, graph)
    if offset == 0:
        return compute_straight_geometry(source, target)
    return compute_curved_geometry(source, target, offset)


def compute_entry_geometry(entry: EntryPoint, nodes: Sequence[Node] | Mapping[str, Node]) -> EdgeGeometry | None:
    node = _index_nodes(nodes).get(entry.target_node_id)
    if node is None:
        logger.debug("Entry point %s is not connected to a node", entry.id)
        return None
    return compute_boundary_geometry(entry.position, node, EdgeType.ENTRY)


def compute_exit_geometry(exit_point: ExitPoint, nodes: Sequence[Node] | Mapping[str, Node]) -> EdgeGeometry | None:
    node = _index_nodes(nodes).get(exit_point.source_node_id)
    if node is None:
        logger.debug("Exit point %s is not connected to a node", exit_point.id)
        return None
    return compute_boundary_geometry(exit_point.position, node, EdgeType.EXIT)


def compute_all_geometries(diagram: Diagram) -> dict[str, EdgeGeometry]:
    """Geometry for every routable edge, keyed by edge id, in diagram order."""
    index = diagram.node_index()
    graph = build_edge_graph(diagram.edges)
    result: dict[str, EdgeGeometry] = {}
    for edge in diagram.edges:
        geometry = compute_edge_geometry(edge, index, diagram.edges, graph)
        if geometry is not None:
            result[edge.id] = geometry
    return result
