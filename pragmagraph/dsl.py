"""Python DSL for building diagrams."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .models import (
    Diagram,
    DiagramMetadata,
    DiagramMode,
    Edge,
    EdgeType,
    EntryPoint,
    ExitPoint,
    Node,
    NodeShape,
    NodeSize,
    NodeStyle,
    NodeType,
    Point,
)
from .serialization import EXPORT_EXTENSIONS, timestamp, write_export

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable

logger = logging.getLogger(__name__)

# Automatic placement grid for nodes created without a position
GRID_COLUMNS = 5
GRID_SPACING_X = 200
GRID_SPACING_Y = 150
GRID_ORIGIN = (100, 100)


@dataclass
class _Builder:
    diagram: Diagram
    counters: dict[str, int] = field(default_factory=dict)

    def next_id(self, prefix: str) -> str:
        self.counters[prefix] = self.counters.get(prefix, 0) + 1
        return f"{prefix}{self.counters[prefix]}"


# Context stack for nested diagram creation
_builder_stack: list[_Builder] = []


def _current_builder() -> _Builder | None:
    return _builder_stack[-1] if _builder_stack else None


def _parse_mode(value: str | DiagramMode) -> DiagramMode:
    if isinstance(value, DiagramMode):
        return value
    return DiagramMode(value.upper())


def _parse_edge_type(value: str | EdgeType) -> EdgeType:
    if isinstance(value, EdgeType):
        return value
    return EdgeType(value)


@contextmanager
def diagram(
        name: str = "Untitled Diagram",
        mode: str | DiagramMode = DiagramMode.HYBRID,
        output: str | Path | None = None,
        formats: Iterable[str] = ("svg",),
        author: str | None = None,
        description: str | None = None,
) -> Generator[Diagram]:
    """Create a diagram context.

    Usage:
        with diagram(name="Inference", mode="MUD", output="inference"):
            lang = vocabulary("Language", at=(100, 100))
            talk = practice("Talking", at=(300, 100))
            (talk >> lang) | "PV"

        # Several export formats on exit
        with diagram(name="TOTE", mode="TOTE", output="tote", formats=("svg", "tex", "json")):
            ...

    Args:
        name: Diagram name, used for titles and export file names
        mode: MUD, TOTE, HYBRID or GENERIC
        output: Path stem; when set, the diagram is exported on exit
        formats: Export formats written on exit (json, svg, tex)
        author: Optional author metadata
        description: Optional description metadata

    Yields:
        The Diagram object
    """
    now = timestamp()
    d = Diagram(
        name=name,
        type=_parse_mode(mode),
        metadata=DiagramMetadata(created=now, modified=now, author=author, description=description),
    )
    _builder_stack.append(_Builder(d))

    try:
        yield d
    finally:
        _builder_stack.pop()

    # Export on exit
    if output is not None:
        for fmt in formats:
            path = Path(output).with_suffix(f".{EXPORT_EXTENSIONS[fmt]}")
            write_export(d, path, fmt)
            logger.debug("Exported %r to %s", d.name, path)


class EdgeContext:
    """An edge under construction.

    Usage:
        (a >> b) | "PV"          # set the relation type
        (a >> b) | "uses"        # anything else becomes the label
        a >> b >> c              # chain
    """

    def __init__(self, edge: Edge):
        self._edge = edge

    @property
    def edge(self) -> Edge:
        return self._edge

    def __or__(self, value: str | EdgeType) -> EdgeContext:
        try:
            self._edge.type = _parse_edge_type(value)
        except ValueError:
            self._edge.label = value
        return self

    def __rshift__(self, other: NodeContext) -> EdgeContext:
        return _connect(self._edge.target, other.node.id)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._edge, name)

    def __repr__(self) -> str:
        return repr(self._edge)


class NodeContext:
    """A node in the current diagram, supporting ``>>`` and ``<<``."""

    def __init__(self, node: Node):
        self._node = node

    @property
    def node(self) -> Node:
        return self._node

    def __rshift__(self, other: NodeContext) -> EdgeContext:
        """Create an unmarked relation from this node to another."""
        return _connect(self._node.id, other.node.id)

    def __lshift__(self, other: NodeContext) -> EdgeContext:
        """Create an unmarked relation from another node to this one."""
        return _connect(other.node.id, self._node.id)

    # Delegate attribute access to the underlying node
    def __getattr__(self, name: str) -> Any:
        return getattr(self._node, name)

    def __repr__(self) -> str:
        return repr(self._node)


def _require_builder() -> _Builder:
    builder = _current_builder()
    if builder is None:
        raise RuntimeError("Nodes and relations must be created inside a diagram() context")
    return builder


def _connect(source: str | None, target: str | None, edge_type: EdgeType = EdgeType.UNMARKED) -> EdgeContext:
    builder = _require_builder()
    e = Edge(id=builder.next_id("e"), source=source, target=target, type=edge_type)
    builder.diagram.edges.append(e)
    return EdgeContext(e)


def _unwrap(item: NodeContext | Node | str) -> str:
    if isinstance(item, NodeContext):
        return item.node.id
    if isinstance(item, Node):
        return item.id
    return item


def _auto_position(builder: _Builder) -> Point:
    count = len(builder.diagram.nodes)
    return Point(
        GRID_ORIGIN[0] + GRID_SPACING_X * (count % GRID_COLUMNS),
        GRID_ORIGIN[1] + GRID_SPACING_Y * (count // GRID_COLUMNS),
    )


def node(
        node_type: NodeType | str,
        label: str = "",
        at: tuple[float, float] | None = None,
        size: NodeSize | str | None = None,
        shape: NodeShape | str | None = None,
        **kwargs: Any,
) -> NodeContext:
    """Create a node of any type in the current diagram.

    Args:
        node_type: Node kind
        label: Node label text
        at: Position; nodes without one are placed on a grid
        size: Optional size class override
        shape: Optional shape override
        **kwargs: Type-specific fields (subtype, condition, operations, ...)

    Returns:
        NodeContext wrapping the new node
    """
    builder = _require_builder()
    style = None
    if size is not None or shape is not None:
        style = NodeStyle(
            size=NodeSize(size) if size is not None else None,
            shape=NodeShape(shape) if shape is not None else None,
        )

    n = Node(
        id=builder.next_id("n"),
        type=NodeType(node_type),
        position=Point(*at) if at is not None else _auto_position(builder),
        label=label,
        style=style,
        **kwargs,
    )
    builder.diagram.nodes.append(n)
    return NodeContext(n)


def vocabulary(label: str, at: tuple[float, float] | None = None, subtype: str | None = None, **kwargs: Any) -> NodeContext:
    return node(NodeType.VOCABULARY, label, at, subtype=subtype, **kwargs)


def practice(label: str, at: tuple[float, float] | None = None, subtype: str | None = None, **kwargs: Any) -> NodeContext:
    return node(NodeType.PRACTICE, label, at, subtype=subtype, **kwargs)


def test(label: str, at: tuple[float, float] | None = None, condition: str | None = None, **kwargs: Any) -> NodeContext:
    """A TOTE test (decision) node."""
    return node(NodeType.TEST, label, at, condition=condition, **kwargs)


def operate(
        label: str,
        at: tuple[float, float] | None = None,
        operations: list[str] | None = None,
        **kwargs: Any,
) -> NodeContext:
    return node(NodeType.OPERATE, label, at, operations=operations, **kwargs)


def exit_node(label: str = "Exit", at: tuple[float, float] | None = None, **kwargs: Any) -> NodeContext:
    return node(NodeType.EXIT, label, at, **kwargs)


def custom(label: str, at: tuple[float, float] | None = None, custom_label: str | None = None, **kwargs: Any) -> NodeContext:
    return node(NodeType.CUSTOM, label, at, custom_label=custom_label, **kwargs)


def relation(
        source: NodeContext | Node | str,
        target: NodeContext | Node | str,
        edge_type: EdgeType | str = EdgeType.UNMARKED,
        label: str | None = None,
        resultant: bool = False,
        resultant_from: list[str] | None = None,
) -> Edge:
    """Create a typed relation between two nodes.

    Usage:
        relation(talk, lang, "PV-suff")
        relation(a, c, "VV", resultant=True, resultant_from=["e1", "e2"])
    """
    ctx = _connect(_unwrap(source), _unwrap(target), _parse_edge_type(edge_type))
    ctx.edge.label = label
    ctx.edge.is_resultant = resultant
    ctx.edge.resultant_from = resultant_from
    return ctx.edge


def entry(target: NodeContext | Node | str, at: tuple[float, float], label: str | None = None) -> EntryPoint:
    """Mark where a TOTE cycle is entered."""
    builder = _require_builder()
    point = EntryPoint(id=builder.next_id("entry"), position=Point(*at), target_node_id=_unwrap(target), label=label)
    builder.diagram.entry_points.append(point)
    return point


def exit_point(source: NodeContext | Node | str, at: tuple[float, float], label: str | None = None) -> ExitPoint:
    """Mark where a TOTE cycle is left."""
    builder = _require_builder()
    point = ExitPoint(id=builder.next_id("exit"), position=Point(*at), source_node_id=_unwrap(source), label=label)
    builder.diagram.exit_points.append(point)
    return point
