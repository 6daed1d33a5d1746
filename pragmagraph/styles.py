"""Style resolution: per-type defaults merged with per-node overrides.

Both renderers read colours, shapes and font sizes exclusively through this
module so that the canvas and every export agree.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import DiagramMode, Edge, EdgeType, Node, NodeShape, NodeSize, NodeType

DEFAULT_SHAPES: dict[NodeType, NodeShape] = {
    NodeType.VOCABULARY: NodeShape.ELLIPSE,
    NodeType.PRACTICE: NodeShape.RECTANGLE,
    NodeType.TEST: NodeShape.DIAMOND,
    NodeType.OPERATE: NodeShape.RECTANGLE,
    NodeType.EXIT: NodeShape.RECTANGLE,
    NodeType.CUSTOM: NodeShape.CIRCLE,
}

# (background, border)
DEFAULT_COLORS: dict[NodeType, tuple[str, str]] = {
    NodeType.VOCABULARY: ("#E3F2FD", "#1976D2"),
    NodeType.PRACTICE: ("#FFF3E0", "#F57C00"),
    NodeType.TEST: ("#E8F5E8", "#4CAF50"),
    NodeType.OPERATE: ("#FFF8E1", "#FFC107"),
    NodeType.EXIT: ("#FFEBEE", "#F44336"),
    NodeType.CUSTOM: ("#F5F5F5", "#757575"),
}

DEFAULT_TEXT_COLOR = "#333333"
DEFAULT_STROKE_WIDTH = 2.0

SIZE_MULTIPLIERS: dict[NodeSize, float] = {
    NodeSize.SMALL: 0.8,
    NodeSize.MEDIUM: 1.0,
    NodeSize.LARGE: 1.3,
}

DEFAULT_FONT_SIZES: dict[NodeSize, float] = {
    NodeSize.SMALL: 12,
    NodeSize.MEDIUM: 14,
    NodeSize.LARGE: 16,
}


@dataclass(frozen=True)
class ResolvedNodeStyle:
    """Fully populated node style."""

    shape: NodeShape
    size: NodeSize
    fill: str
    stroke: str
    text_color: str
    font_size: float
    stroke_width: float
    font_family: str | None = None


def get_node_shape(node: Node) -> NodeShape:
    """Explicit shape override, else the type default."""
    if node.style is not None and node.style.shape is not None:
        return node.style.shape
    return DEFAULT_SHAPES[node.type]


def get_node_size(node: Node) -> NodeSize:
    if node.style is not None and node.style.size is not None:
        return node.style.size
    return NodeSize.MEDIUM


def resolve_node_style(node: Node) -> ResolvedNodeStyle:
    """Merge a node's partial style with the defaults for its type."""
    style = node.style
    background, border = DEFAULT_COLORS[node.type]
    size = get_node_size(node)

    if style is None:
        return ResolvedNodeStyle(
            shape=get_node_shape(node),
            size=size,
            fill=background,
            stroke=border,
            text_color=DEFAULT_TEXT_COLOR,
            font_size=DEFAULT_FONT_SIZES[size],
            stroke_width=DEFAULT_STROKE_WIDTH,
        )

    return ResolvedNodeStyle(
        shape=get_node_shape(node),
        size=size,
        fill=style.background_color or background,
        stroke=style.border_color or border,
        text_color=style.text_color or DEFAULT_TEXT_COLOR,
        font_size=style.font_size or DEFAULT_FONT_SIZES[size],
        stroke_width=style.stroke_width or DEFAULT_STROKE_WIDTH,
        font_family=style.font_family,
    )


# --- Edges ---

EDGE_BASE_COLORS: dict[str, str] = {
    "PV": "#4CAF50",
    "VP": "#FF9800",
    "PP": "#9C27B0",
    "VV": "#F44336",
    "sequence": "#2196F3",
    "feedback": "#FF5722",
    "loop": "#607D8B",
    "exit": "#8BC34A",
    "entry": "#4CAF50",
    "unmarked": "#666666",
    "custom": "#333333",
}
FALLBACK_EDGE_COLOR = "#666666"

NECESSARY_COLORS = {
    "#4CAF50": "#2E7D32",
    "#FF9800": "#E65100",
    "#9C27B0": "#6A1B9A",
    "#F44336": "#C62828",
}

RESULTANT_COLORS = {
    "#4CAF50": "#81C784",
    "#FF9800": "#FFB74D",
    "#9C27B0": "#BA68C8",
    "#F44336": "#E57373",
    "#2196F3": "#64B5F6",
    "#FF5722": "#FF8A65",
    "#607D8B": "#90A4AE",
    "#8BC34A": "#AED581",
    "#666666": "#999999",
}

EDGE_DESCRIPTIONS: dict[EdgeType, str] = {
    EdgeType.PV: "Practice → Vocabulary",
    EdgeType.VP: "Vocabulary → Practice",
    EdgeType.PP: "Practice → Practice",
    EdgeType.VV: "Vocabulary → Vocabulary",
    EdgeType.PV_SUFF: "Practice → Vocabulary (Sufficient)",
    EdgeType.PV_NEC: "Practice → Vocabulary (Necessary)",
    EdgeType.VP_SUFF: "Vocabulary → Practice (Sufficient)",
    EdgeType.VP_NEC: "Vocabulary → Practice (Necessary)",
    EdgeType.PP_SUFF: "Practice → Practice (Sufficient)",
    EdgeType.PP_NEC: "Practice → Practice (Necessary)",
    EdgeType.VV_SUFF: "Vocabulary → Vocabulary (Sufficient)",
    EdgeType.VV_NEC: "Vocabulary → Vocabulary (Necessary)",
    EdgeType.SEQUENCE: "Sequential action",
    EdgeType.FEEDBACK: "Feedback loop",
    EdgeType.LOOP: "Iterative loop",
    EdgeType.EXIT: "Exit condition",
    EdgeType.ENTRY: "Entry point",
    EdgeType.UNMARKED: "Simple line (no label)",
    EdgeType.CUSTOM: "Custom edge (use label for description)",
}

MUD_BASIC = [EdgeType.PV, EdgeType.VP, EdgeType.PP, EdgeType.VV]
MUD_QUALIFIED = [
    EdgeType.PV_SUFF, EdgeType.PV_NEC,
    EdgeType.VP_SUFF, EdgeType.VP_NEC,
    EdgeType.PP_SUFF, EdgeType.PP_NEC,
    EdgeType.VV_SUFF, EdgeType.VV_NEC,
]
TOTE_RELATIONS = [
    EdgeType.SEQUENCE, EdgeType.FEEDBACK, EdgeType.LOOP, EdgeType.EXIT, EdgeType.ENTRY,
]


def _type_value(edge_type: EdgeType | str) -> str:
    return edge_type.value if isinstance(edge_type, EdgeType) else edge_type


def get_base_edge_type(edge_type: EdgeType | str) -> str:
    """Strip the sufficient/necessary qualifier: ``PV-nec`` -> ``PV``."""
    return _type_value(edge_type).replace("-suff", "").replace("-nec", "")


def get_edge_qualifier(edge_type: EdgeType | str) -> str | None:
    value = _type_value(edge_type)
    if "-suff" in value:
        return "suff"
    if "-nec" in value:
        return "nec"
    return None


def get_edge_color(edge_type: EdgeType | str, is_resultant: bool = False) -> str:
    """Stroke colour for a relation.

    Necessary relations are drawn darker; resultant relations lighter.
    """
    base_color = EDGE_BASE_COLORS.get(get_base_edge_type(edge_type), FALLBACK_EDGE_COLOR)
    qualifier = get_edge_qualifier(edge_type)

    if qualifier == "suff":
        return base_color
    if qualifier == "nec":
        return NECESSARY_COLORS.get(base_color, base_color)
    if is_resultant:
        return RESULTANT_COLORS.get(base_color, base_color)
    return base_color


def get_edge_label(edge: Edge) -> str:
    """Explicit label, else the type tag. Unmarked and custom edges have none."""
    if edge.label:
        return edge.label
    if edge.type in (EdgeType.UNMARKED, EdgeType.CUSTOM):
        return ""
    return edge.type.value


def shows_arrowhead(edge_type: EdgeType) -> bool:
    """Every relation except entry arrows carries an arrowhead."""
    return edge_type is not EdgeType.ENTRY


def describe_edge_type(edge_type: EdgeType) -> str:
    return EDGE_DESCRIPTIONS.get(edge_type, edge_type.value)


def available_edge_types(mode: DiagramMode, auto_detect: bool = True) -> list[EdgeType]:
    """Relation kinds offered for a diagram mode.

    With auto-detection on, MUD relations are offered unqualified; the
    qualified sufficient/necessary variants are offered otherwise.
    """
    mud = list(MUD_BASIC if auto_detect else MUD_QUALIFIED)

    if mode is DiagramMode.GENERIC:
        return [EdgeType.CUSTOM, EdgeType.UNMARKED]
    if mode is DiagramMode.MUD:
        types = mud
    elif mode is DiagramMode.TOTE:
        types = list(TOTE_RELATIONS)
    else:
        types = mud + TOTE_RELATIONS
    return types + [EdgeType.UNMARKED]
