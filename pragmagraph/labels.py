"""Edge label placement along computed edge paths."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .models import Point

if TYPE_CHECKING:
    from .geometry import ShapeDescriptor
    from .models import Node

EDGE_LABEL_OFFSET = 14
# Straight labels sit slightly closer to the stroke than curved ones
STRAIGHT_LABEL_OFFSET = EDGE_LABEL_OFFSET - 2

LabelAnchor = tuple[Point, float | None]


def normalize_angle(angle_deg: float) -> float:
    """Fold an angle into (-90, 90] so rotated text never reads upside down."""
    angle = angle_deg
    if angle > 180:
        angle -= 360
    if angle <= -180:
        angle += 360
    if angle > 90:
        angle -= 180
    if angle <= -90:
        angle += 180
    return angle


def quadratic_point(start: Point, control: Point, end: Point, t: float) -> Point:
    """Evaluate a quadratic Bezier at ``t``."""
    mt = 1 - t
    return Point(
        mt * mt * start.x + 2 * mt * t * control.x + t * t * end.x,
        mt * mt * start.y + 2 * mt * t * control.y + t * t * end.y,
    )


def quadratic_tangent(start: Point, control: Point, end: Point, t: float) -> tuple[float, float]:
    """Derivative of a quadratic Bezier at ``t``."""
    mt = 1 - t
    return (
        2 * mt * (control.x - start.x) + 2 * t * (end.x - control.x),
        2 * mt * (control.y - start.y) + 2 * t * (end.y - control.y),
    )


def cubic_point(start: Point, c1: Point, c2: Point, end: Point, t: float) -> Point:
    """Evaluate a cubic Bezier at ``t``."""
    mt = 1 - t
    return Point(
        mt**3 * start.x + 3 * mt**2 * t * c1.x + 3 * mt * t**2 * c2.x + t**3 * end.x,
        mt**3 * start.y + 3 * mt**2 * t * c1.y + 3 * mt * t**2 * c2.y + t**3 * end.y,
    )


def place_straight_label(start: Point, end: Point) -> LabelAnchor:
    """Midpoint pushed along the segment normal, rotated with the segment."""
    mid_x = (start.x + end.x) / 2
    mid_y = (start.y + end.y) / 2
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy) or 1
    normal_x = -dy / length
    normal_y = dx / length

    position = Point(
        mid_x + normal_x * STRAIGHT_LABEL_OFFSET,
        mid_y + normal_y * STRAIGHT_LABEL_OFFSET,
    )
    angle = normalize_angle(math.degrees(math.atan2(dy, dx)))
    return position, angle


def place_curve_label(start: Point, control: Point, end: Point, offset: float) -> LabelAnchor:
    """Label at the curve's t=0.5 point, on the convex side of the bend.

    The normal follows the sign of the routing ``offset``.
    """
    t = 0.5
    mid = quadratic_point(start, control, end, t)
    dxdt, dydt = quadratic_tangent(start, control, end, t)
    tangent_length = math.hypot(dxdt, dydt) or 1
    side = math.copysign(1, offset) if offset else 1
    normal_x = (-dydt / tangent_length) * side
    normal_y = (dxdt / tangent_length) * side

    position = Point(
        mid.x + normal_x * EDGE_LABEL_OFFSET,
        mid.y + normal_y * EDGE_LABEL_OFFSET,
    )
    angle = normalize_angle(math.degrees(math.atan2(dydt, dxdt)))
    return position, angle


def place_loop_label(node: Node, dims: ShapeDescriptor) -> LabelAnchor:
    """Fixed anchor above-right of the node. Loop labels are never rotated."""
    extent = max(dims.width, dims.height)
    position = Point(
        node.position.x + extent * 0.8,
        node.position.y - max(dims.height, 40) * 0.6,
    )
    return position, None
