"""Tests for the SVG canvas renderer and export document."""

import re

import drawsvg as draw

from conftest import make_edge, make_node
from pragmagraph.models import Diagram, EdgeType, NodeShape, NodeType
from pragmagraph.renderer import CanvasRenderer, Theme, save_svg, serialize_svg
from pragmagraph.routing import compute_all_geometries


class TestSerializeSvg:
    """Test the self-contained SVG export."""

    def test_document_basics(self, pair_diagram):
        svg = serialize_svg(pair_diagram)
        assert svg.startswith("<?xml") or svg.startswith("<svg")
        assert 'viewBox="-100 -100 400 200"' in svg
        assert 'id="arrowhead"' in svg

    def test_edge_path_matches_geometry(self, busy_diagram):
        """Every routed edge is drawn with exactly the computed path."""
        svg = serialize_svg(busy_diagram)
        for geometry in compute_all_geometries(busy_diagram).values():
            assert f'd="{geometry.path}"' in svg

    def test_arrowhead_reference(self, pair_diagram):
        svg = serialize_svg(pair_diagram)
        assert 'marker-end="url(#arrowhead)"' in svg

    def test_entry_edges_have_no_arrowhead(self):
        from pragmagraph.models import Edge, Point

        diagram = Diagram(
            nodes=[make_node("a", NodeType.PRACTICE, 100, 0)],
            edges=[Edge(id="e1", source=None, target="a", type=EdgeType.ENTRY, anchor=Point(0, 0))],
        )
        svg = serialize_svg(diagram)
        assert 'd="M 8.00 0.00 L 50.00 0.00"' in svg
        assert "marker-end" not in svg

    def test_resultant_edges_are_dashed(self, busy_diagram):
        svg = serialize_svg(busy_diagram)
        assert svg.count('stroke-dasharray="8,4"') == 1

    def test_edges_drawn_before_nodes(self, pair_diagram):
        svg = serialize_svg(pair_diagram)
        assert svg.index('d="M 50.00 0.00 L 150.00 0.00"') < svg.index("<ellipse")

    def test_edge_label_rotation(self, busy_diagram):
        """Straight and curved labels are rotated; loop labels are not."""
        svg = serialize_svg(busy_diagram)
        geometries = compute_all_geometries(busy_diagram)
        rotations = re.findall(r'transform="rotate\(', svg)
        rotated = [g for g in geometries.values() if g.label_angle is not None]
        # e5 is a custom edge with a label; every routed edge here has a label
        assert len(rotations) == len(rotated)
        assert ">loop</text>" in svg

    def test_label_text_is_escaped(self, busy_diagram):
        svg = serialize_svg(busy_diagram)
        assert "x &amp; y" in svg

    def test_unmarked_edges_have_no_label(self):
        diagram = Diagram(
            nodes=[make_node("a", NodeType.PRACTICE, 0, 0), make_node("b", NodeType.PRACTICE, 200, 0)],
            edges=[make_edge("e1", "a", "b", EdgeType.UNMARKED)],
        )
        assert 'class="edge-text"' not in serialize_svg(diagram)

    def test_node_shapes(self, busy_diagram):
        svg = serialize_svg(busy_diagram)
        assert "<rect" in svg
        assert "<ellipse" in svg
        # Diamond outline of the test node at (150, 250)
        assert 'd="M 150.00,215.00 L 185.00,250.00 L 150.00,285.00 L 115.00,250.00 Z"' in svg

    def test_polygon_shapes(self):
        for shape in (NodeShape.TRIANGLE, NodeShape.HEXAGON, NodeShape.STAR):
            diagram = Diagram(nodes=[make_node("c", NodeType.CUSTOM, 0, 0, shape=shape)])
            svg = serialize_svg(diagram)
            assert "<path" in svg

    def test_default_colors(self, pair_diagram):
        svg = serialize_svg(pair_diagram)
        assert 'fill="#FFF3E0"' in svg
        assert 'stroke="#F57C00"' in svg
        assert 'fill="#E3F2FD"' in svg
        assert 'stroke="#4CAF50"' in svg

    def test_long_label_wraps(self):
        diagram = Diagram(nodes=[make_node("a", NodeType.PRACTICE, 0, 0, label="Giving and asking for reasons")])
        svg = serialize_svg(diagram)
        assert svg.count('class="node-text"') == 5

    def test_entry_and_exit_markers(self, busy_diagram):
        svg = serialize_svg(busy_diagram)
        assert 'fill="#4CAF50"' in svg
        assert 'fill="#F44336"' in svg

    def test_empty_diagram(self):
        svg = serialize_svg(Diagram())
        assert 'viewBox="0 0 400 300"' in svg

    def test_theme_background(self, pair_diagram):
        svg = serialize_svg(pair_diagram, Theme(background="#123456"))
        assert 'fill="#123456"' in svg

    def test_save_svg(self, pair_diagram, tmp_path):
        path = tmp_path / "pair.svg"
        content = save_svg(pair_diagram, str(path))
        assert path.read_text() == content


class TestCanvasRenderer:
    """Test the interactive canvas drawing."""

    def test_returns_drawing(self, busy_diagram):
        drawing = CanvasRenderer().render(busy_diagram)
        assert isinstance(drawing, draw.Drawing)

    def test_groups_are_addressable(self, busy_diagram):
        svg = CanvasRenderer().render(busy_diagram).as_svg()
        for node in busy_diagram.nodes:
            assert f'data-node-id="{node.id}"' in svg
        assert 'data-edge-id="e1"' in svg
        assert 'id="entry-in"' in svg
        assert 'id="exit-out"' in svg
        # Dangling edges are skipped, not drawn
        assert 'data-edge-id="e6"' not in svg

    def test_selection_highlight(self, pair_diagram):
        svg = CanvasRenderer().render(pair_diagram, selected={"a", "e1"}).as_svg()
        assert 'class="node selected"' in svg
        assert 'class="edge selected"' in svg
        assert 'stroke="#3b82f6"' in svg

    def test_canvas_and_export_share_geometry(self, busy_diagram):
        canvas = CanvasRenderer().render(busy_diagram).as_svg()
        export = serialize_svg(busy_diagram)
        for geometry in compute_all_geometries(busy_diagram).values():
            assert f'd="{geometry.path}"' in canvas
            assert f'd="{geometry.path}"' in export

    def test_zoom_and_pan(self, pair_diagram):
        svg = CanvasRenderer(width=800, height=600).render(pair_diagram, zoom=2, pan=(10, 20)).as_svg()
        assert 'transform="translate(10.00, 20.00) scale(2)"' in svg
