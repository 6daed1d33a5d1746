"""Shared builders for diagram tests."""

import pytest

from pragmagraph.models import (
    Diagram,
    DiagramMode,
    Edge,
    EdgeType,
    Node,
    NodeShape,
    NodeSize,
    NodeStyle,
    NodeType,
    Point,
)


def make_node(node_id, node_type=NodeType.PRACTICE, x=0, y=0, label=None, shape=None, size=None):
    style = None
    if shape is not None or size is not None:
        style = NodeStyle(shape=shape, size=size)
    return Node(
        id=node_id,
        type=node_type,
        position=Point(x, y),
        label=label if label is not None else node_id.upper(),
        style=style,
    )


def make_edge(edge_id, source, target, edge_type=EdgeType.PV, **kwargs):
    return Edge(id=edge_id, source=source, target=target, type=edge_type, **kwargs)


@pytest.fixture
def pair_diagram():
    """Rectangle A at the origin, ellipse B 200 units to the right, one PV edge."""
    return Diagram(
        name="Pair",
        type=DiagramMode.MUD,
        nodes=[
            make_node("a", NodeType.PRACTICE, 0, 0),
            make_node("b", NodeType.VOCABULARY, 200, 0),
        ],
        edges=[make_edge("e1", "a", "b", EdgeType.PV)],
    )


@pytest.fixture
def busy_diagram():
    """Straight, curved, looped, resultant and boundary edges together."""
    from pragmagraph.models import EntryPoint, ExitPoint

    return Diagram(
        name="Busy",
        type=DiagramMode.HYBRID,
        nodes=[
            make_node("a", NodeType.PRACTICE, 0, 0),
            make_node("b", NodeType.VOCABULARY, 300, 0),
            make_node("c", NodeType.TEST, 150, 250),
            make_node("d", NodeType.CUSTOM, 450, 250, shape=NodeShape.STAR, size=NodeSize.LARGE),
        ],
        edges=[
            make_edge("e1", "a", "b", EdgeType.PV),
            make_edge("e2", "b", "a", EdgeType.VP),
            make_edge("e3", "c", "c", EdgeType.LOOP),
            make_edge("e4", "a", "c", EdgeType.SEQUENCE, is_resultant=True),
            make_edge("e5", "b", "d", EdgeType.CUSTOM, label="x & y"),
            make_edge("e6", "a", "ghost", EdgeType.PP),
        ],
        entry_points=[EntryPoint(id="in", position=Point(-150, 0), target_node_id="a")],
        exit_points=[ExitPoint(id="out", position=Point(150, 400), source_node_id="c")],
    )
