"""Shape geometry: node sizes and boundary intersections."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .models import NodeShape, NodeType, Point
from .styles import SIZE_MULTIPLIERS, get_node_shape, get_node_size

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Node

DIAMOND_BASE_SIZE = 70
CIRCLE_BASE_RADIUS = 40
BOX_BASE_WIDTH = 100
BOX_BASE_HEIGHT = 50
# Diamonds are intersected as a circle of this fraction of the node radius
DIAMOND_RADIUS_FACTOR = 0.8

BOUNDS_PADDING = 100


@dataclass(frozen=True)
class ShapeDescriptor:
    """Derived node size. ``radius`` is populated for every shape."""

    width: float
    height: float
    radius: float


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


def _round(value: float) -> int:
    """Round half up, matching what the canvas does with pixel sizes."""
    return math.floor(value + 0.5)


def get_node_dimensions(node: Node) -> ShapeDescriptor:
    """Calculate width, height and radius for a node's effective shape and size."""
    multiplier = SIZE_MULTIPLIERS[get_node_size(node)]
    shape = get_node_shape(node)

    if shape is NodeShape.DIAMOND or node.type is NodeType.TEST:
        side = _round(DIAMOND_BASE_SIZE * multiplier)
        return ShapeDescriptor(width=side, height=side, radius=side / 2)

    if shape is NodeShape.CIRCLE:
        radius = _round(CIRCLE_BASE_RADIUS * multiplier)
        return ShapeDescriptor(width=radius * 2, height=radius * 2, radius=radius)

    # Rectangle, ellipse and the polygonal shapes share the box size
    return ShapeDescriptor(
        width=_round(BOX_BASE_WIDTH * multiplier),
        height=_round(BOX_BASE_HEIGHT * multiplier),
        radius=_round(BOX_BASE_WIDTH / 2 * multiplier),
    )


def get_node_connection_point(node: Node, target: Point) -> Point:
    """Where the ray from the node centre toward ``target`` crosses the outline.

    Returns the centre itself when ``target`` coincides with it.
    """
    cx, cy = node.position.x, node.position.y
    dx = target.x - cx
    dy = target.y - cy
    distance = math.hypot(dx, dy)

    if distance == 0:
        return Point(cx, cy)

    ndx = dx / distance
    ndy = dy / distance

    dims = get_node_dimensions(node)
    shape = get_node_shape(node)

    if shape is NodeShape.ELLIPSE:
        rx = dims.width / 2
        ry = dims.height / 2
        t = math.atan2(ndy * rx, ndx * ry)
        offset_x = rx * math.cos(t)
        offset_y = ry * math.sin(t)

    elif shape is NodeShape.RECTANGLE:
        half_w = dims.width / 2
        half_h = dims.height / 2
        if abs(ndx) * half_h > abs(ndy) * half_w:
            # Exits through the left or right side
            offset_x = half_w if ndx > 0 else -half_w
            offset_y = ndy * half_w / abs(ndx)
        else:
            offset_x = ndx * half_h / abs(ndy)
            offset_y = half_h if ndy > 0 else -half_h

    elif shape is NodeShape.DIAMOND:
        diamond_radius = dims.radius * DIAMOND_RADIUS_FACTOR
        offset_x = ndx * diamond_radius
        offset_y = ndy * diamond_radius

    else:
        # Circle, triangle, hexagon, star
        offset_x = ndx * dims.radius
        offset_y = ndy * dims.radius

    return Point(cx + offset_x, cy + offset_y)


def diagram_bounds(nodes: Iterable[Node], padding: float = BOUNDS_PADDING) -> Bounds:
    """Bounding box of node centres, grown by ``padding`` on every side."""
    nodes = list(nodes)
    if not nodes:
        return Bounds(0, 0, 400, 300)

    return Bounds(
        min_x=min(n.position.x for n in nodes) - padding,
        min_y=min(n.position.y for n in nodes) - padding,
        max_x=max(n.position.x for n in nodes) + padding,
        max_y=max(n.position.y for n in nodes) + padding,
    )
