"""Tests for diagram analysis and validation."""

from conftest import make_edge, make_node
from pragmagraph.analysis import (
    IssueSeverity,
    ValidationIssue,
    build_diagram_graph,
    summarize_diagram,
    validate_diagram,
)
from pragmagraph.models import Diagram, DiagramMode, EdgeType, EntryPoint, ExitPoint, NodeType, Point


def _issues(diagram, severity):
    return [i for i in validate_diagram(diagram) if i.severity is severity]


class TestDiagramGraph:
    """Test the networkx view of a diagram."""

    def test_nodes_and_edges(self, busy_diagram):
        graph = build_diagram_graph(busy_diagram)
        assert set(graph.nodes) == {"a", "b", "c", "d"}
        # e6 points at a missing node
        assert graph.number_of_edges() == 5
        assert graph.has_edge("a", "b", key="e1")
        assert graph.nodes["c"]["type"] is NodeType.TEST

    def test_parallel_edges_kept(self):
        diagram = Diagram(
            nodes=[make_node("a"), make_node("b", x=100)],
            edges=[make_edge("e1", "a", "b"), make_edge("e2", "a", "b")],
        )
        assert build_diagram_graph(diagram).number_of_edges("a", "b") == 2


class TestSummary:
    """Test structural summaries."""

    def test_counts(self, busy_diagram):
        summary = summarize_diagram(busy_diagram)
        assert summary.name == "Busy"
        assert summary.mode == "HYBRID"
        assert summary.total_nodes == 4
        assert summary.total_edges == 6
        assert summary.nodes_by_type == {"practice": 1, "vocabulary": 1, "test": 1, "custom": 1}
        assert summary.edges_by_type["PV"] == 1
        assert summary.resultant_edges == 1
        assert summary.entry_points == 1
        assert summary.exit_points == 1

    def test_structure(self, busy_diagram):
        summary = summarize_diagram(busy_diagram)
        assert summary.connected_components == 1
        assert summary.orphan_nodes == []
        assert summary.self_loops == ["e3"]
        assert summary.parallel_pairs == [("a", "b")]

    def test_orphans_and_components(self):
        diagram = Diagram(
            nodes=[make_node("a"), make_node("b"), make_node("c")],
            edges=[make_edge("e1", "a", "b")],
        )
        summary = summarize_diagram(diagram)
        assert summary.connected_components == 2
        assert summary.orphan_nodes == ["c"]

    def test_entry_point_attaches_node(self):
        diagram = Diagram(
            nodes=[make_node("a")],
            entry_points=[EntryPoint(id="in", position=Point(0, 0), target_node_id="a")],
        )
        assert summarize_diagram(diagram).orphan_nodes == []

    def test_empty(self):
        summary = summarize_diagram(Diagram())
        assert summary.connected_components == 0
        assert summary.to_dict()["total_nodes"] == 0


class TestValidation:
    """Test validation issues."""

    def test_empty_diagram(self):
        issues = validate_diagram(Diagram())
        assert len(issues) == 1
        assert issues[0].severity is IssueSeverity.INFO

    def test_dangling_references(self, busy_diagram):
        errors = _issues(busy_diagram, IssueSeverity.ERROR)
        assert len(errors) == 1
        assert errors[0].edge_id == "e6"
        assert "ghost" in errors[0].message

    def test_dangling_boundary_points(self):
        diagram = Diagram(
            nodes=[make_node("a")],
            edges=[make_edge("e1", "a", "a", EdgeType.LOOP)],
            entry_points=[EntryPoint(id="in", position=Point(0, 0), target_node_id="x")],
            exit_points=[ExitPoint(id="out", position=Point(0, 0), source_node_id="y")],
        )
        errors = _issues(diagram, IssueSeverity.ERROR)
        assert len(errors) == 2

    def test_orphans(self):
        diagram = Diagram(nodes=[make_node("a", label="Lonely")])
        warnings = _issues(diagram, IssueSeverity.WARNING)
        assert len(warnings) == 1
        assert "Lonely (a)" in warnings[0].message

    def test_mud_direction(self):
        """PV must run from a practice to a vocabulary."""
        diagram = Diagram(
            type=DiagramMode.MUD,
            nodes=[make_node("p", NodeType.PRACTICE), make_node("v", NodeType.VOCABULARY, x=200)],
            edges=[
                make_edge("e1", "p", "v", EdgeType.PV),
                make_edge("e2", "p", "v", EdgeType.VP_NEC),
            ],
        )
        warnings = _issues(diagram, IssueSeverity.WARNING)
        assert [w.edge_id for w in warnings] == ["e2"]
        assert "expects vocabulary -> practice" in warnings[0].message

    def test_self_loops_are_info(self, busy_diagram):
        infos = _issues(busy_diagram, IssueSeverity.INFO)
        assert [i.edge_id for i in infos] == ["e3"]

    def test_boundary_edges_not_flagged(self):
        from pragmagraph.models import Edge

        diagram = Diagram(
            nodes=[make_node("a")],
            edges=[Edge(id="e1", source=None, target="a", type=EdgeType.ENTRY, anchor=Point(0, 0))],
        )
        assert validate_diagram(diagram) == []

    def test_issue_to_dict(self):
        issue = ValidationIssue(severity=IssueSeverity.ERROR, message="bad", edge_id="e1")
        assert issue.to_dict() == {"type": "error", "message": "bad", "edge_id": "e1"}
