"""pragmagraph - Geometry and export core for MUD/TOTE diagrams.

Example usage:
    from pragmagraph import diagram, vocabulary, practice, relation

    with diagram(name="Inference", mode="MUD", output="inference", formats=("svg", "tex")):
        lang = vocabulary("Inferential vocabulary", at=(100, 100))
        talk = practice("Giving reasons", at=(350, 100))

        talk >> lang | "PV-suff"
        relation(lang, talk, "VP")
"""

__version__ = "0.1.0"

from .analysis import (
    DiagramSummary,
    IssueSeverity,
    ValidationIssue,
    build_diagram_graph,
    summarize_diagram,
    validate_diagram,
)
from .commands import (
    CommandTable,
    UnknownCommandError,
    export_commands,
)
from .dsl import (
    EdgeContext,
    NodeContext,
    custom,
    diagram,
    entry,
    exit_node,
    exit_point,
    operate,
    practice,
    relation,
    vocabulary,
)
from .geometry import (
    Bounds,
    ShapeDescriptor,
    diagram_bounds,
    get_node_connection_point,
    get_node_dimensions,
)
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
from .renderer import (
    DEFAULT_THEME,
    CanvasRenderer,
    Theme,
    serialize_svg,
)
from .routing import (
    EdgeGeometry,
    GeometryKind,
    compute_all_geometries,
    compute_edge_geometry,
    get_edge_offset,
)
from .serialization import (
    DiagramImportError,
    diagram_from_json,
    diagram_to_json,
    export_json,
    load_diagram,
    read_diagram,
)
from .styles import (
    get_edge_color,
    resolve_node_style,
)
from .tikz import (
    TikzConfig,
    serialize_tikz,
)

__all__ = [
    # DSL functions
    "diagram",
    "vocabulary",
    "practice",
    "operate",
    "exit_node",
    "custom",
    "relation",
    "entry",
    "exit_point",
    "NodeContext",
    "EdgeContext",
    # Models
    "Diagram",
    "DiagramMetadata",
    "DiagramMode",
    "Node",
    "NodeType",
    "NodeShape",
    "NodeSize",
    "NodeStyle",
    "Edge",
    "EdgeType",
    "EntryPoint",
    "ExitPoint",
    "Point",
    # Geometry
    "ShapeDescriptor",
    "Bounds",
    "get_node_dimensions",
    "get_node_connection_point",
    "diagram_bounds",
    "EdgeGeometry",
    "GeometryKind",
    "get_edge_offset",
    "compute_edge_geometry",
    "compute_all_geometries",
    # Styles
    "resolve_node_style",
    "get_edge_color",
    # Rendering
    "serialize_svg",
    "CanvasRenderer",
    "Theme",
    "DEFAULT_THEME",
    "serialize_tikz",
    "TikzConfig",
    # JSON
    "diagram_to_json",
    "diagram_from_json",
    "export_json",
    "load_diagram",
    "read_diagram",
    "DiagramImportError",
    # Analysis
    "build_diagram_graph",
    "summarize_diagram",
    "validate_diagram",
    "DiagramSummary",
    "ValidationIssue",
    "IssueSeverity",
    # Host commands
    "CommandTable",
    "UnknownCommandError",
    "export_commands",
    # Version
    "__version__",
]
