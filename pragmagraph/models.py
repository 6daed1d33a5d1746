"""Data models for pragmagraph diagrams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DiagramMode(Enum):
    """Notation a diagram is drawn in."""

    MUD = "MUD"
    TOTE = "TOTE"
    HYBRID = "HYBRID"
    GENERIC = "GENERIC"


class NodeType(Enum):
    """Semantic node kinds."""

    VOCABULARY = "vocabulary"
    PRACTICE = "practice"
    TEST = "test"
    OPERATE = "operate"
    EXIT = "exit"
    CUSTOM = "custom"


class NodeShape(Enum):
    """Visual node outlines."""

    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"
    TRIANGLE = "triangle"
    STAR = "star"


class NodeSize(Enum):
    """Size classes for nodes."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class EdgeType(Enum):
    """Relation kinds."""

    # Basic MUD relations
    PV = "PV"
    VP = "VP"
    PP = "PP"
    VV = "VV"
    # Qualified MUD relations
    PV_SUFF = "PV-suff"
    PV_NEC = "PV-nec"
    VP_SUFF = "VP-suff"
    VP_NEC = "VP-nec"
    PP_SUFF = "PP-suff"
    PP_NEC = "PP-nec"
    VV_SUFF = "VV-suff"
    VV_NEC = "VV-nec"
    # TOTE relations
    SEQUENCE = "sequence"
    FEEDBACK = "feedback"
    LOOP = "loop"
    EXIT = "exit"
    ENTRY = "entry"
    # Other
    RESULTANT = "resultant"
    UNMARKED = "unmarked"
    CUSTOM = "custom"


BOUNDARY_EDGE_TYPES = frozenset({EdgeType.ENTRY, EdgeType.EXIT})


@dataclass(frozen=True)
class Point:
    """A 2D point in layout units (screen convention, y grows downward)."""

    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> Point:
        return cls(x=data["x"], y=data["y"])


@dataclass
class NodeStyle:
    """Optional per-node overrides. Unset fields fall back to type defaults."""

    size: NodeSize | None = None
    shape: NodeShape | None = None
    background_color: str | None = None
    border_color: str | None = None
    text_color: str | None = None
    font_size: float | None = None
    stroke_width: float | None = None
    font_family: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {}
        if self.size is not None:
            result["size"] = self.size.value
        if self.shape is not None:
            result["shape"] = self.shape.value
        if self.background_color is not None:
            result["backgroundColor"] = self.background_color
        if self.border_color is not None:
            result["borderColor"] = self.border_color
        if self.text_color is not None:
            result["textColor"] = self.text_color
        if self.font_size is not None:
            result["fontSize"] = self.font_size
        if self.stroke_width is not None:
            result["strokeWidth"] = self.stroke_width
        if self.font_family is not None:
            result["fontFamily"] = self.font_family
        return result

    @classmethod
    def from_dict(cls, data: dict) -> NodeStyle:
        size = data.get("size")
        shape = data.get("shape")
        return cls(
            size=NodeSize(size) if size else None,
            shape=NodeShape(shape) if shape else None,
            background_color=data.get("backgroundColor"),
            border_color=data.get("borderColor"),
            text_color=data.get("textColor"),
            font_size=data.get("fontSize"),
            stroke_width=data.get("strokeWidth"),
            font_family=data.get("fontFamily"),
        )


@dataclass
class Node:
    """A node in the diagram.

    The type tag is the discriminator; the optional fields below it only
    carry meaning for the node kinds named in their comments.
    """

    id: str
    type: NodeType
    position: Point
    label: str = ""
    style: NodeStyle | None = None

    # vocabulary: base/meta/modal/normative, practice: autonomous/dependent/algorithmic
    subtype: str | None = None
    # test
    condition: str | None = None
    evaluation_function: str | None = None
    # operate
    operations: list[str] | None = None
    sub_totes: list[str] | None = None
    # custom
    custom_label: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "position": self.position.to_dict(),
            "label": self.label,
        }
        if self.style is not None:
            result["style"] = self.style.to_dict()
        if self.subtype is not None:
            result["subtype"] = self.subtype
        if self.condition is not None:
            result["condition"] = self.condition
        if self.evaluation_function is not None:
            result["evaluationFunction"] = self.evaluation_function
        if self.operations is not None:
            result["operations"] = list(self.operations)
        if self.sub_totes is not None:
            result["subTOTEs"] = list(self.sub_totes)
        if self.custom_label is not None:
            result["customLabel"] = self.custom_label
        return result

    @classmethod
    def from_dict(cls, data: dict) -> Node:
        style = data.get("style")
        operations = data.get("operations")
        sub_totes = data.get("subTOTEs")
        return cls(
            id=data["id"],
            type=NodeType(data["type"]),
            position=Point.from_dict(data["position"]),
            label=data.get("label", ""),
            style=NodeStyle.from_dict(style) if style is not None else None,
            subtype=data.get("subtype"),
            condition=data.get("condition"),
            evaluation_function=data.get("evaluationFunction"),
            operations=list(operations) if operations is not None else None,
            sub_totes=list(sub_totes) if sub_totes is not None else None,
            custom_label=data.get("customLabel"),
        )


@dataclass
class Edge:
    """A typed relation between two nodes.

    Entry/exit edges may leave one endpoint as None and carry the literal
    boundary point in ``anchor`` instead.
    """

    id: str
    source: str | None
    target: str | None
    type: EdgeType = EdgeType.UNMARKED
    label: str | None = None
    is_resultant: bool = False
    resultant_from: list[str] | None = None
    anchor: Point | None = None

    @property
    def is_self_loop(self) -> bool:
        return self.source is not None and self.source == self.target

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type.value,
        }
        if self.label is not None:
            result["label"] = self.label
        result["isResultant"] = self.is_resultant
        if self.resultant_from is not None:
            result["resultantFrom"] = list(self.resultant_from)
        if self.anchor is not None:
            result["anchor"] = self.anchor.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict) -> Edge:
        anchor = data.get("anchor")
        resultant_from = data.get("resultantFrom")
        return cls(
            id=data["id"],
            source=data.get("source") or None,
            target=data.get("target") or None,
            type=EdgeType(data.get("type", EdgeType.UNMARKED.value)),
            label=data.get("label"),
            is_resultant=bool(data.get("isResultant", False)),
            resultant_from=list(resultant_from) if resultant_from is not None else None,
            anchor=Point.from_dict(anchor) if anchor is not None else None,
        )


@dataclass
class EntryPoint:
    """Where a TOTE cycle is entered."""

    id: str
    position: Point
    target_node_id: str
    label: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "id": self.id,
            "position": self.position.to_dict(),
            "targetNodeId": self.target_node_id,
        }
        if self.label is not None:
            result["label"] = self.label
        return result

    @classmethod
    def from_dict(cls, data: dict) -> EntryPoint:
        return cls(
            id=data["id"],
            position=Point.from_dict(data["position"]),
            target_node_id=data.get("targetNodeId", ""),
            label=data.get("label"),
        )


@dataclass
class ExitPoint:
    """Where a TOTE cycle is left."""

    id: str
    position: Point
    source_node_id: str
    label: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "id": self.id,
            "position": self.position.to_dict(),
            "sourceNodeId": self.source_node_id,
        }
        if self.label is not None:
            result["label"] = self.label
        return result

    @classmethod
    def from_dict(cls, data: dict) -> ExitPoint:
        return cls(
            id=data["id"],
            position=Point.from_dict(data["position"]),
            source_node_id=data.get("sourceNodeId", ""),
            label=data.get("label"),
        )


@dataclass
class DiagramMetadata:
    """Timestamps and authorship. Timestamps are ISO-8601 strings."""

    created: str = ""
    modified: str = ""
    author: str | None = None
    description: str | None = None
    # Stamped by the JSON exporter
    exported: str | None = None
    version: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"created": self.created, "modified": self.modified}
        for key in ("author", "description", "exported", "version"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: dict) -> DiagramMetadata:
        return cls(
            created=data.get("created", ""),
            modified=data.get("modified", ""),
            author=data.get("author"),
            description=data.get("description"),
            exported=data.get("exported"),
            version=data.get("version"),
        )


@dataclass
class Diagram:
    """The root diagram container. This is what gets saved to/loaded from JSON."""

    id: str = "diagram"
    name: str = "Untitled Diagram"
    type: DiagramMode = DiagramMode.HYBRID
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    entry_points: list[EntryPoint] = field(default_factory=list)
    exit_points: list[ExitPoint] = field(default_factory=list)
    metadata: DiagramMetadata = field(default_factory=DiagramMetadata)

    def get_node(self, node_id: str | None) -> Node | None:
        """Get a node by ID (O(n))."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        """Get an edge by ID (O(n))."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def node_index(self) -> dict[str, Node]:
        return {node.id: node for node in self.nodes}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "entryPoints": [p.to_dict() for p in self.entry_points],
            "exitPoints": [p.to_dict() for p in self.exit_points],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Diagram:
        return cls(
            id=data.get("id", "diagram"),
            name=data.get("name", "Untitled Diagram"),
            type=DiagramMode(data.get("type", DiagramMode.HYBRID.value)),
            nodes=[Node.from_dict(n) for n in data.get("nodes", [])],
            edges=[Edge.from_dict(e) for e in data.get("edges", [])],
            entry_points=[EntryPoint.from_dict(p) for p in data.get("entryPoints") or []],
            exit_points=[ExitPoint.from_dict(p) for p in data.get("exitPoints") or []],
            metadata=DiagramMetadata.from_dict(data.get("metadata") or {}),
        )
