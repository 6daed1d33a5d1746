"""LaTeX/TikZ export.

The picture is built from the same ``EdgeGeometry`` values the SVG renderers
draw, passed through a ``CoordinateTransform`` (uniform scale about the
diagram centre plus a vertical flip, since TikZ's y axis points up).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .geometry import diagram_bounds, get_node_dimensions
from .models import EdgeType, NodeShape, NodeType, Point
from .routing import (
    BOUNDARY_MARKER_RADIUS,
    GeometryKind,
    build_edge_graph,
    compute_edge_geometry,
    compute_entry_geometry,
    compute_exit_geometry,
    format_number,
)
from .styles import get_base_edge_type, get_edge_label, resolve_node_style, shows_arrowhead
from .text import escape_latex

if TYPE_CHECKING:
    from .geometry import Bounds
    from .models import Diagram, Node
    from .routing import EdgeGeometry

logger = logging.getLogger(__name__)

TIKZ_LIBRARIES = "positioning,shapes.geometric,arrows.meta"

EDGE_COLORS: dict[str, str] = {
    "PV": "green!70!black",
    "VP": "orange!80!black",
    "PP": "purple!70!black",
    "VV": "red!70!black",
    "sequence": "blue!70!black",
    "feedback": "red!70!black",
    "loop": "gray!70!black",
    "entry": "green!60!black",
    "exit": "lime!60!black",
    "unmarked": "gray!50",
}
DEFAULT_EDGE_COLOR = "black"

ENTRY_MARKER_STYLE = "fill=green!60, draw=green!40!black"
EXIT_MARKER_STYLE = "fill=red!70, draw=red!50!black"

SHAPE_STYLES: dict[NodeShape, str] = {
    NodeShape.ELLIPSE: "ellipse",
    NodeShape.RECTANGLE: "rectangle, rounded corners=3pt",
    NodeShape.DIAMOND: "diamond",
    NodeShape.CIRCLE: "circle",
    NodeShape.HEXAGON: "regular polygon, regular polygon sides=6",
    NodeShape.TRIANGLE: "regular polygon, regular polygon sides=3",
    NodeShape.STAR: "star, star points=5",
}

LEGEND_ENTRIES: dict[NodeType, str] = {
    NodeType.VOCABULARY: (
        r"\textcolor{vocabcolor}{\textbf{Vocabulary nodes}} (ellipses): "
        "Represent linguistic or conceptual vocabularies"
    ),
    NodeType.PRACTICE: (
        r"\textcolor{practicecolor}{\textbf{Practice nodes}} (rounded rectangles): "
        "Represent abilities, skills, or behavioral patterns"
    ),
    NodeType.TEST: (
        r"\textcolor{testcolor}{\textbf{Test nodes}} (diamonds): "
        "Represent condition checking or decision points in TOTE cycles"
    ),
    NodeType.OPERATE: (
        r"\textcolor{operatecolor}{\textbf{Operate nodes}} (rectangles): "
        "Represent actions or operations in TOTE cycles"
    ),
}

HEX_COLOR = re.compile(r"#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})")
RGB_COLOR = re.compile(r"rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+\s*)?\)")

CSS_COLOR_NAMES: dict[str, str] = {
    "black": "000000",
    "silver": "C0C0C0",
    "gray": "808080",
    "grey": "808080",
    "white": "FFFFFF",
    "maroon": "800000",
    "red": "FF0000",
    "purple": "800080",
    "fuchsia": "FF00FF",
    "magenta": "FF00FF",
    "green": "008000",
    "lime": "00FF00",
    "olive": "808000",
    "yellow": "FFFF00",
    "navy": "000080",
    "blue": "0000FF",
    "teal": "008080",
    "aqua": "00FFFF",
    "cyan": "00FFFF",
    "orange": "FFA500",
}


@dataclass
class TikzConfig:
    """Options for the TikZ export.

    ``target_extent`` is the size, in TikZ units, of the larger diagram
    dimension after scaling. Node sizes are converted to centimetres at
    ``units_per_cm`` layout units each.
    """

    target_extent: float = 15
    units_per_cm: float = 40
    label_font: str = r"\scriptsize"
    document_class: str = "article"
    author: str = "Generated by Pragma Graph Tool"


@dataclass(frozen=True)
class CoordinateTransform:
    """Maps layout coordinates (y down) to TikZ coordinates (y up)."""

    center: Point
    scale: float

    @classmethod
    def fit(cls, bounds: Bounds, target_extent: float = 15) -> CoordinateTransform:
        largest = max(bounds.width, bounds.height)
        scale = target_extent / largest if largest > 0 else 1
        return cls(center=bounds.center, scale=scale)

    def apply(self, point: Point) -> Point:
        return Point(
            (point.x - self.center.x) * self.scale,
            -(point.y - self.center.y) * self.scale,
        )

    def coordinate(self, point: Point) -> str:
        """TikZ coordinate literal ``(x, y)`` for a layout point."""
        mapped = self.apply(point)
        return f"({format_number(mapped.x)}, {format_number(mapped.y)})"


class ColorRegistry:
    """Registers each distinct colour once under a generated name.

    Accepts ``#rgb``, ``#rgba``, ``#rrggbb`` and ``#rrggbbaa`` hex (alpha is
    dropped), ``rgb()``/``rgba()`` notation and the basic CSS colour names.
    """

    def __init__(self, prefix: str = "customcolor"):
        self.prefix = prefix
        self._names: dict[str, str] = {}

    @staticmethod
    def normalize(color: str | None) -> str:
        """Six-digit uppercase hex for a colour, ``000000`` for ``None``."""
        if color is None:
            return "000000"
        value = color.strip().lower()

        match = HEX_COLOR.fullmatch(value)
        if match:
            digits = match.group(1)
            if len(digits) in (3, 4):
                digits = "".join(c * 2 for c in digits[:3])
            return digits[:6].upper()

        match = RGB_COLOR.fullmatch(value)
        if match:
            return "".join(f"{min(int(channel), 255):02X}" for channel in match.groups())

        if value in CSS_COLOR_NAMES:
            return CSS_COLOR_NAMES[value]

        raise ValueError(f"Unsupported colour for TikZ export: {color!r}")

    def register(self, color: str | None) -> str:
        hex_value = self.normalize(color)
        if hex_value not in self._names:
            self._names[hex_value] = f"{self.prefix}{len(self._names) + 1}"
        return self._names[hex_value]

    def definitions(self) -> list[str]:
        return [rf"\definecolor{{{name}}}{{HTML}}{{{hex_value}}}" for hex_value, name in self._names.items()]

    def __len__(self) -> int:
        return len(self._names)


def edge_color(edge_type: EdgeType) -> str:
    return EDGE_COLORS.get(get_base_edge_type(edge_type), DEFAULT_EDGE_COLOR)


def node_style(node: Node, colors: ColorRegistry, config: TikzConfig) -> str:
    """Option list for a node: shape keys, registered colours and minimum size."""
    style = resolve_node_style(node)
    dims = get_node_dimensions(node)
    width_cm = format_number(dims.width / config.units_per_cm)
    height_cm = format_number(dims.height / config.units_per_cm)

    parts = [
        SHAPE_STYLES[style.shape],
        f"fill={colors.register(style.fill)}",
        f"draw={colors.register(style.stroke)}",
        f"text={colors.register(style.text_color)}",
    ]
    if style.shape in (NodeShape.ELLIPSE, NodeShape.RECTANGLE, NodeShape.DIAMOND):
        parts.append(f"minimum width={width_cm}cm")
        parts.append(f"minimum height={height_cm}cm")
    else:
        parts.append(f"minimum size={width_cm}cm")
    return ", ".join(parts)


def draw_command(geometry: EdgeGeometry, style: str, transform: CoordinateTransform) -> str:
    start = transform.coordinate(geometry.start)
    end = transform.coordinate(geometry.end)

    if geometry.kind is GeometryKind.CURVE and geometry.control is not None:
        control = transform.coordinate(geometry.control)
        return rf"\draw[{style}] {start} .. controls {control} .. {end};"
    if geometry.kind is GeometryKind.LOOP and geometry.control is not None and geometry.control2 is not None:
        c1 = transform.coordinate(geometry.control)
        c2 = transform.coordinate(geometry.control2)
        return rf"\draw[{style}] {start} .. controls {c1} and {c2} .. {end};"
    return rf"\draw[{style}] {start} -- {end};"


def label_command(geometry: EdgeGeometry, text: str, transform: CoordinateTransform, config: TikzConfig) -> str:
    rotate = ""
    if geometry.label_angle is not None:
        # Screen angles turn clockwise; the y flip makes TikZ angles turn the other way
        rotate = f", rotate={format_number(-geometry.label_angle)}"
    position = transform.coordinate(geometry.label_position)
    return rf"  \node[font={config.label_font}, fill=white, inner sep=1pt{rotate}] at {position} {{{escape_latex(text)}}};"


def generate_tikz_picture(diagram: Diagram, config: TikzConfig | None = None) -> str:
    """The ``tikzpicture`` environment for a diagram."""
    config = config or TikzConfig()
    if not diagram.nodes:
        return "\\begin{tikzpicture}\n\\end{tikzpicture}"

    bounds = diagram_bounds(diagram.nodes)
    transform = CoordinateTransform.fit(bounds, config.target_extent)
    index = diagram.node_index()

    colors = ColorRegistry()
    node_lines = []
    for number, node in enumerate(diagram.nodes, start=1):
        options = node_style(node, colors, config)
        node_lines.append(
            rf"\node[{options}] (node{number}) at {transform.coordinate(node.position)} {{{escape_latex(node.label)}}};"
        )

    edge_lines = []
    graph = build_edge_graph(diagram.edges)
    for edge in diagram.edges:
        geometry = compute_edge_geometry(edge, index, diagram.edges, graph)
        if geometry is None:
            continue

        parts = ["->", "thick"] if shows_arrowhead(edge.type) else ["thick"]
        if edge.is_resultant:
            parts.append("dashed")
        parts.append(edge_color(edge.type))
        edge_lines.append(draw_command(geometry, ", ".join(parts), transform))

        text = get_edge_label(edge)
        if text:
            edge_lines.append(label_command(geometry, text, transform, config))

    boundary_lines = _boundary_lines(diagram, index, transform)

    lines = ["\\begin{tikzpicture}", ""]
    if len(colors):
        lines.extend(colors.definitions())
        lines.append("")
    lines.append("% Nodes")
    lines.extend(node_lines)
    lines.append("")
    lines.append("% Edges")
    lines.extend(edge_lines)
    if boundary_lines:
        lines.append("")
        lines.append("% Entry and exit points")
        lines.extend(boundary_lines)
    lines.append("")
    lines.append("\\end{tikzpicture}")
    return "\n".join(lines)


def _boundary_lines(diagram: Diagram, index: dict[str, Node], transform: CoordinateTransform) -> list[str]:
    radius = format_number(BOUNDARY_MARKER_RADIUS * transform.scale)
    lines = []

    for entry in diagram.entry_points:
        geometry = compute_entry_geometry(entry, index)
        if geometry is not None:
            lines.append(draw_command(geometry, f"->, thick, {EDGE_COLORS['entry']}", transform))
        lines.append(rf"\filldraw[{ENTRY_MARKER_STYLE}] {transform.coordinate(entry.position)} circle ({radius});")

    for exit_point in diagram.exit_points:
        geometry = compute_exit_geometry(exit_point, index)
        if geometry is not None:
            lines.append(draw_command(geometry, f"->, thick, {EDGE_COLORS['exit']}", transform))
        center = transform.apply(exit_point.position)
        half = BOUNDARY_MARKER_RADIUS * transform.scale
        lines.append(
            rf"\filldraw[{EXIT_MARKER_STYLE}] "
            f"({format_number(center.x - half)}, {format_number(center.y - half)}) rectangle "
            f"({format_number(center.x + half)}, {format_number(center.y + half)});"
        )

    return lines


def _legend(diagram: Diagram) -> list[str]:
    present = {node.type for node in diagram.nodes}
    lines = [
        "% Uncomment the following section to include a legend",
        r"% \section*{Legend}",
        r"% \begin{itemize}",
    ]
    for node_type, text in LEGEND_ENTRIES.items():
        if node_type in present:
            lines.append(rf"% \item {text}")
    if any(edge.is_resultant for edge in diagram.edges):
        lines.append(r"% \item \textbf{Dashed edges}: Resultant relationships (derived or indirect)")
    lines.append(r"% \item \textbf{Solid edges}: Direct relationships between nodes")
    lines.append(r"% \end{itemize}")
    return lines


def _article_document(diagram: Diagram, picture: str, config: TikzConfig) -> str:
    title = escape_latex(diagram.name or "Pragma Graph Diagram")
    caption = (
        f"{title} - {diagram.type.value} diagram showing "
        f"{len(diagram.nodes)} nodes and {len(diagram.edges)} edges."
    )
    lines = [
        r"\documentclass[11pt]{article}",
        r"\usepackage[margin=1in]{geometry}",
        r"\usepackage{tikz}",
        r"\usepackage{caption}",
        rf"\usetikzlibrary{{{TIKZ_LIBRARIES}}}",
        "",
        "% Define academic-friendly colors",
        r"\definecolor{vocabcolor}{RGB}{25,118,210}",
        r"\definecolor{practicecolor}{RGB}{245,124,0}",
        r"\definecolor{testcolor}{RGB}{76,175,80}",
        r"\definecolor{operatecolor}{RGB}{255,193,7}",
        "",
        r"\begin{document}",
        "",
        rf"\title{{{title}}}",
        rf"\author{{{escape_latex(config.author)}}}",
        r"\date{\today}",
        r"\maketitle",
        "",
        r"\begin{figure}[h]",
        r"\centering",
        picture,
        rf"\caption{{{caption}}}",
        r"\end{figure}",
        "",
        *_legend(diagram),
        "",
        r"\end{document}",
    ]
    return "\n".join(lines)


def _standalone_document(picture: str) -> str:
    lines = [
        r"\documentclass[tikz,border=10pt]{standalone}",
        r"\usepackage{tikz}",
        rf"\usetikzlibrary{{{TIKZ_LIBRARIES}}}",
        "",
        r"\begin{document}",
        picture,
        r"\end{document}",
    ]
    return "\n".join(lines)


def serialize_tikz(diagram: Diagram, config: TikzConfig | None = None, standalone: bool = False) -> str:
    """Render a diagram to a complete LaTeX document.

    Uses the ``article`` wrapper with title, figure and caption, unless
    ``standalone`` is set or the config asks for the ``standalone`` class.
    """
    config = config or TikzConfig()
    picture = generate_tikz_picture(diagram, config)
    logger.debug("Generated TikZ picture for %r (%d nodes)", diagram.name, len(diagram.nodes))

    if standalone or config.document_class == "standalone":
        return _standalone_document(picture)
    return _article_document(diagram, picture, config)
