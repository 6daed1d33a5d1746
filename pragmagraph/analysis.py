"""Diagram analysis: graph view, structural summary and validation.

Unlike the geometry core these checks report problems instead of quietly
skipping them, so a diagram can be reviewed before it is exported.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import networkx as nx

from .models import NodeType
from .styles import get_base_edge_type

if TYPE_CHECKING:
    from .models import Diagram


# Endpoint node types each basic MUD relation expects: (source, target)
MUD_DIRECTIONS: dict[str, tuple[NodeType, NodeType]] = {
    "PV": (NodeType.PRACTICE, NodeType.VOCABULARY),
    "VP": (NodeType.VOCABULARY, NodeType.PRACTICE),
    "PP": (NodeType.PRACTICE, NodeType.PRACTICE),
    "VV": (NodeType.VOCABULARY, NodeType.VOCABULARY),
}


def build_diagram_graph(diagram: Diagram) -> nx.MultiDiGraph:
    """Directed multigraph of the diagram.

    Every node is present; edges with a missing endpoint are left out.
    Edge keys are edge ids.
    """
    graph = nx.MultiDiGraph(name=diagram.name)
    for node in diagram.nodes:
        graph.add_node(node.id, type=node.type, label=node.label)

    for edge in diagram.edges:
        if edge.source in graph and edge.target in graph:
            graph.add_edge(edge.source, edge.target, key=edge.id, type=edge.type, resultant=edge.is_resultant)
    return graph


def _attached_node_ids(diagram: Diagram) -> set[str]:
    attached = {e.source for e in diagram.edges} | {e.target for e in diagram.edges}
    attached |= {p.target_node_id for p in diagram.entry_points}
    attached |= {p.source_node_id for p in diagram.exit_points}
    attached.discard(None)
    return attached


@dataclass
class DiagramSummary:
    """Structural summary of a diagram."""

    name: str
    mode: str
    total_nodes: int
    total_edges: int
    nodes_by_type: dict[str, int]
    edges_by_type: dict[str, int]
    connected_components: int
    orphan_nodes: list[str] = field(default_factory=list)
    self_loops: list[str] = field(default_factory=list)
    # Unordered node pairs joined by more than one edge
    parallel_pairs: list[tuple[str, str]] = field(default_factory=list)
    resultant_edges: int = 0
    entry_points: int = 0
    exit_points: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mode": self.mode,
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "nodes_by_type": self.nodes_by_type,
            "edges_by_type": self.edges_by_type,
            "connected_components": self.connected_components,
            "orphan_nodes": self.orphan_nodes,
            "self_loops": self.self_loops,
            "parallel_pairs": [list(pair) for pair in self.parallel_pairs],
            "resultant_edges": self.resultant_edges,
            "entry_points": self.entry_points,
            "exit_points": self.exit_points,
        }


def summarize_diagram(diagram: Diagram) -> DiagramSummary:
    graph = build_diagram_graph(diagram)
    attached = _attached_node_ids(diagram)

    pair_counts = Counter(
        tuple(sorted((e.source, e.target)))
        for e in diagram.edges
        if e.source is not None and e.target is not None and e.source != e.target
    )

    return DiagramSummary(
        name=diagram.name,
        mode=diagram.type.value,
        total_nodes=len(diagram.nodes),
        total_edges=len(diagram.edges),
        nodes_by_type=dict(Counter(n.type.value for n in diagram.nodes)),
        edges_by_type=dict(Counter(e.type.value for e in diagram.edges)),
        connected_components=nx.number_weakly_connected_components(graph) if len(graph) else 0,
        orphan_nodes=[n.id for n in diagram.nodes if n.id not in attached],
        self_loops=[e.id for e in diagram.edges if e.is_self_loop],
        parallel_pairs=sorted(pair for pair, count in pair_counts.items() if count > 1),
        resultant_edges=sum(1 for e in diagram.edges if e.is_resultant),
        entry_points=len(diagram.entry_points),
        exit_points=len(diagram.exit_points),
    )


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""

    ERROR = "error"  # Cannot be rendered as drawn
    WARNING = "warning"  # Probably a mistake
    INFO = "info"  # May be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a diagram."""

    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict:
        result = {"type": self.severity.value, "message": self.message}
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_id:
            result["edge_id"] = self.edge_id
        return result


def validate_diagram(diagram: Diagram) -> list[ValidationIssue]:
    """
    Validate a diagram and return a list of issues.

    Checks for:
    - Edges, entry points or exit points referencing missing nodes - ERROR
    - Orphan nodes (no connections) - WARNING
    - MUD relations whose endpoint types do not match the relation - WARNING
    - Self-referencing edges - INFO
    - Empty diagram - INFO
    """
    issues: list[ValidationIssue] = []

    if not diagram.nodes:
        issues.append(ValidationIssue(severity=IssueSeverity.INFO, message="Diagram has no nodes"))
        return issues

    index = diagram.node_index()

    for edge in diagram.edges:
        for role, node_id in (("source", edge.source), ("target", edge.target)):
            if node_id is not None and node_id not in index:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Edge references non-existent {role} node: {node_id}",
                    edge_id=edge.id,
                ))

    for entry in diagram.entry_points:
        if entry.target_node_id not in index:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Entry point {entry.id} references non-existent node: {entry.target_node_id}",
            ))
    for exit_point in diagram.exit_points:
        if exit_point.source_node_id not in index:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Exit point {exit_point.id} references non-existent node: {exit_point.source_node_id}",
            ))

    attached = _attached_node_ids(diagram)
    orphans = [f"{n.label} ({n.id})" for n in diagram.nodes if n.id not in attached]
    if orphans:
        issues.append(ValidationIssue(
            severity=IssueSeverity.WARNING,
            message=f"Orphan nodes (no connections): {', '.join(orphans)}",
        ))

    for edge in diagram.edges:
        expected = MUD_DIRECTIONS.get(get_base_edge_type(edge.type))
        source = index.get(edge.source) if edge.source is not None else None
        target = index.get(edge.target) if edge.target is not None else None
        if expected is None or source is None or target is None:
            continue
        if (source.type, target.type) != expected:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=(
                    f"{edge.type.value} relation expects {expected[0].value} -> {expected[1].value}, "
                    f"got {source.type.value} -> {target.type.value}"
                ),
                edge_id=edge.id,
            ))

    for edge in diagram.edges:
        if edge.is_self_loop:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message=f"Edge {edge.id} is a self-loop",
                edge_id=edge.id,
                node_id=edge.source,
            ))

    return issues
