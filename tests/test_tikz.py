"""Tests for the LaTeX/TikZ export."""

import math
import re

import pytest

from conftest import make_edge, make_node
from pragmagraph.geometry import diagram_bounds
from pragmagraph.models import Diagram, DiagramMode, EdgeType, Node, NodeShape, NodeStyle, NodeType, Point
from pragmagraph.routing import compute_all_geometries
from pragmagraph.tikz import (
    ColorRegistry,
    CoordinateTransform,
    TikzConfig,
    generate_tikz_picture,
    serialize_tikz,
)


def _transform(diagram):
    return CoordinateTransform.fit(diagram_bounds(diagram.nodes))


class TestCoordinateTransform:
    """Test the layout-to-TikZ mapping."""

    def test_scale_fits_target_extent(self, pair_diagram):
        """The larger dimension maps onto 15 units."""
        transform = _transform(pair_diagram)
        assert transform.scale == pytest.approx(15 / 400)
        assert transform.center == Point(100, 0)

    def test_y_axis_is_flipped(self):
        transform = CoordinateTransform(center=Point(0, 0), scale=1)
        assert transform.apply(Point(10, 20)) == Point(10, -20)

    def test_coordinate_literal(self, pair_diagram):
        transform = _transform(pair_diagram)
        assert transform.coordinate(Point(0, 0)) == "(-3.75, 0.00)"
        assert transform.coordinate(Point(100, 40)) == "(0.00, -1.50)"


class TestColorRegistry:
    """Test named colour registration."""

    def test_register_once(self):
        colors = ColorRegistry()
        assert colors.register("#ff0000") == "customcolor1"
        assert colors.register("#FF0000") == "customcolor1"
        assert colors.register("#00ff00") == "customcolor2"
        assert len(colors) == 2

    def test_normalize(self):
        assert ColorRegistry.normalize(None) == "000000"
        assert ColorRegistry.normalize("#1976d2ff") == "1976D2"

    @pytest.mark.parametrize("color,expected", [
        ("#abc", "AABBCC"),
        ("#fff", "FFFFFF"),
        ("#fff8", "FFFFFF"),
        ("red", "FF0000"),
        (" Navy ", "000080"),
        ("rgb(25, 118, 210)", "1976D2"),
        ("rgba(255,0,0,0.5)", "FF0000"),
    ])
    def test_normalize_css_forms(self, color, expected):
        assert ColorRegistry.normalize(color) == expected

    @pytest.mark.parametrize("color", ["rebeccapurple", "#12345", "blue!50", ""])
    def test_unsupported_colors_rejected(self, color):
        with pytest.raises(ValueError, match="Unsupported colour"):
            ColorRegistry.normalize(color)

    def test_short_and_named_overrides_in_picture(self):
        node = Node(
            id="a",
            type=NodeType.PRACTICE,
            position=Point(0, 0),
            label="A",
            style=NodeStyle(background_color="#fff", border_color="red"),
        )
        tikz = generate_tikz_picture(Diagram(nodes=[node]))
        assert r"\definecolor{customcolor1}{HTML}{FFFFFF}" in tikz
        assert r"\definecolor{customcolor2}{HTML}{FF0000}" in tikz

    def test_definitions(self):
        colors = ColorRegistry()
        colors.register("#1976D2")
        assert colors.definitions() == [r"\definecolor{customcolor1}{HTML}{1976D2}"]


class TestTikzPicture:
    """Test the tikzpicture body."""

    def test_empty_diagram(self):
        assert generate_tikz_picture(Diagram()) == "\\begin{tikzpicture}\n\\end{tikzpicture}"

    def test_nodes(self, pair_diagram):
        tikz = generate_tikz_picture(pair_diagram)
        assert (
            r"\node[rectangle, rounded corners=3pt, fill=customcolor1, draw=customcolor2, "
            r"text=customcolor3, minimum width=2.50cm, minimum height=1.25cm] (node1) at (-3.75, 0.00) {A};"
        ) in tikz
        assert r"\node[ellipse, fill=customcolor4, draw=customcolor5, text=customcolor3" in tikz
        assert "(node2) at (3.75, 0.00) {B};" in tikz

    def test_colors_defined_once(self, pair_diagram):
        tikz = generate_tikz_picture(pair_diagram)
        assert tikz.count(r"\definecolor{customcolor") == 5
        assert r"\definecolor{customcolor1}{HTML}{FFF3E0}" in tikz
        assert r"\definecolor{customcolor3}{HTML}{333333}" in tikz

    def test_shape_styles(self):
        diagram = Diagram(nodes=[
            make_node("t", NodeType.TEST, 0, 0),
            make_node("c", NodeType.CUSTOM, 100, 0),
            make_node("h", NodeType.CUSTOM, 200, 0, shape=NodeShape.HEXAGON),
        ])
        tikz = generate_tikz_picture(diagram)
        assert r"\node[diamond, " in tikz
        assert r"\node[circle, " in tikz
        assert "minimum size=2.00cm" in tikz
        assert "regular polygon sides=6" in tikz

    def test_straight_edge_matches_geometry(self, pair_diagram):
        """Edge endpoints are the router's endpoints under the transform."""
        tikz = generate_tikz_picture(pair_diagram)
        transform = _transform(pair_diagram)
        geometry = compute_all_geometries(pair_diagram)["e1"]

        expected = (
            rf"\draw[->, thick, green!70!black] {transform.coordinate(geometry.start)} -- "
            rf"{transform.coordinate(geometry.end)};"
        )
        assert expected in tikz

    def test_curves_and_loops_match_geometry(self, busy_diagram):
        tikz = generate_tikz_picture(busy_diagram)
        transform = _transform(busy_diagram)
        geometries = compute_all_geometries(busy_diagram)

        curve = geometries["e1"]
        assert (
            f"{transform.coordinate(curve.start)} .. controls {transform.coordinate(curve.control)} .. "
            f"{transform.coordinate(curve.end)};"
        ) in tikz

        loop = geometries["e3"]
        assert (
            f"{transform.coordinate(loop.start)} .. controls {transform.coordinate(loop.control)} and "
            f"{transform.coordinate(loop.control2)} .. {transform.coordinate(loop.end)};"
        ) in tikz

    def test_edge_styles(self, busy_diagram):
        tikz = generate_tikz_picture(busy_diagram)
        assert r"\draw[->, thick, orange!80!black]" in tikz
        assert r"\draw[->, thick, dashed, blue!70!black]" in tikz
        assert r"\draw[->, thick, gray!70!black]" in tikz
        assert r"\draw[->, thick, black]" in tikz

    def test_qualified_relations_use_base_color(self):
        diagram = Diagram(
            nodes=[make_node("a", NodeType.PRACTICE, 0, 0), make_node("b", NodeType.VOCABULARY, 200, 0)],
            edges=[make_edge("e1", "a", "b", EdgeType.PV_NEC)],
        )
        assert r"\draw[->, thick, green!70!black]" in generate_tikz_picture(diagram)

    def test_edge_labels(self, busy_diagram):
        tikz = generate_tikz_picture(busy_diagram)
        transform = _transform(busy_diagram)
        geometries = compute_all_geometries(busy_diagram)

        straight = geometries["e4"]
        assert (
            rf"  \node[font=\scriptsize, fill=white, inner sep=1pt, rotate=" in tikz
        )
        assert f"at {transform.coordinate(straight.label_position)} {{sequence}};" in tikz
        # Loop labels are not rotated
        loop = geometries["e3"]
        assert (
            rf"\node[font=\scriptsize, fill=white, inner sep=1pt] at {transform.coordinate(loop.label_position)} {{loop}};"
        ) in tikz
        # Escaped custom label
        assert r"{x \& y};" in tikz

    def test_label_rotation_follows_flipped_edge(self):
        """A label turns with its edge after the y axis is flipped."""
        diagram = Diagram(
            nodes=[make_node("a", NodeType.PRACTICE, 0, 0), make_node("b", NodeType.VOCABULARY, 200, 200)],
            edges=[make_edge("e1", "a", "b", EdgeType.PV)],
        )
        tikz = generate_tikz_picture(diagram)

        segment = re.search(r"\\draw\[[^\]]*\] \((\S+), (\S+)\) -- \((\S+), (\S+)\);", tikz)
        x1, y1, x2, y2 = map(float, segment.groups())
        slope = math.degrees(math.atan2(y2 - y1, x2 - x1))
        rotate = float(re.search(r"rotate=(\S+)\]", tikz).group(1))

        assert slope == pytest.approx(-45, abs=0.5)
        assert rotate == pytest.approx(slope, abs=0.5)

    def test_dangling_edges_skipped(self, busy_diagram):
        tikz = generate_tikz_picture(busy_diagram)
        assert tikz.count(r"\draw[") == 5 + 2

    def test_entry_and_exit_points(self, busy_diagram):
        tikz = generate_tikz_picture(busy_diagram)
        assert "% Entry and exit points" in tikz
        assert r"\filldraw[fill=green!60, draw=green!40!black]" in tikz
        assert r"\filldraw[fill=red!70, draw=red!50!black]" in tikz
        assert " circle (" in tikz
        assert ") rectangle (" in tikz

    def test_node_label_escaped(self):
        diagram = Diagram(nodes=[make_node("a", NodeType.PRACTICE, label="50% off")])
        assert r"{50\% off};" in generate_tikz_picture(diagram)


class TestTikzDocument:
    """Test the LaTeX document wrappers."""

    def test_article(self, pair_diagram):
        tex = serialize_tikz(pair_diagram)
        assert tex.startswith(r"\documentclass[11pt]{article}")
        assert r"\usetikzlibrary{positioning,shapes.geometric,arrows.meta}" in tex
        assert r"\title{Pair}" in tex
        assert r"\author{Generated by Pragma Graph Tool}" in tex
        assert r"\caption{Pair - MUD diagram showing 2 nodes and 1 edges.}" in tex
        assert r"\begin{tikzpicture}" in tex
        assert tex.rstrip().endswith(r"\end{document}")

    def test_legend_lists_present_kinds(self, pair_diagram):
        tex = serialize_tikz(pair_diagram)
        assert "Vocabulary nodes" in tex
        assert "Practice nodes" in tex
        assert "Test nodes" not in tex
        assert "Dashed edges" not in tex

    def test_legend_mentions_resultant_edges(self, busy_diagram):
        assert "Dashed edges" in serialize_tikz(busy_diagram)

    def test_standalone(self, pair_diagram):
        tex = serialize_tikz(pair_diagram, standalone=True)
        assert tex.startswith(r"\documentclass[tikz,border=10pt]{standalone}")
        assert r"\maketitle" not in tex

    def test_standalone_from_config(self, pair_diagram):
        tex = serialize_tikz(pair_diagram, TikzConfig(document_class="standalone"))
        assert tex.startswith(r"\documentclass[tikz,border=10pt]{standalone}")

    def test_custom_config(self, pair_diagram):
        tex = serialize_tikz(pair_diagram, TikzConfig(target_extent=30, label_font=r"\tiny"))
        assert "(node1) at (-7.50, 0.00)" in tex
        assert r"\node[font=\tiny" in tex

    def test_title_escaped(self):
        diagram = Diagram(name="R&D", type=DiagramMode.GENERIC, nodes=[make_node("a")])
        assert r"\title{R\&D}" in serialize_tikz(diagram)
