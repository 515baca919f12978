"""
Connector geometry between rendered nodes.

Computes where a straight connector between two node centers meets each
node's outline (circle for people, square for items), where directional
labels sit along a connector, and the parallel connector pair used for
dual-directed relationships.
"""

from __future__ import annotations

import math
from typing import Optional

from relgraph.models import (
    ITEM_SIZE,
    PERSON_IMAGE_RADIUS,
    PERSON_IMAGE_SIZE,
    NodeDescriptor,
    Point,
    Segment,
    ShapeKind,
)

# Gap between the two parallel lines of a dual-directed connector (px).
DUAL_CONNECTOR_OFFSET = 8

# Labels of a dual-directed connector sit this far along their own line.
DUAL_LABEL_RATIO = 0.3

# Pointer-to-node snapping distance when dragging a new connector (px).
CONNECTION_RADIUS = 60


# ---------------------------------------------------------------------------
# Shape intersections
# ---------------------------------------------------------------------------

def get_circle_intersection(
    center: Point,
    radius: float,
    target_x: float,
    target_y: float,
) -> Point:
    """Point on a circle's outline along the ray toward (target_x, target_y).

    The ray is undefined when the target coincides with the center; callers
    never ask for that since no node connects to itself.
    """
    angle = math.atan2(target_y - center.y, target_x - center.x)
    return Point(
        center.x + radius * math.cos(angle),
        center.y + radius * math.sin(angle),
    )


def get_rect_intersection(
    center: Point,
    width: float,
    height: float,
    target_x: float,
    target_y: float,
) -> Point:
    """Point where the ray from *center* toward the target leaves the rectangle.

    Tests the vertical side the ray heads for (by sign of dx) and the
    horizontal side (by sign of dy), keeps the candidates whose other
    coordinate stays within the box, and returns the one nearest the
    center. A diagonal ray hits both sides at once and yields the corner.
    A target on the center yields the right-edge midpoint.
    """
    dx = target_x - center.x
    dy = target_y - center.y
    half_w = width / 2
    half_h = height / 2

    if dx == 0 and dy == 0:
        return Point(center.x + half_w, center.y)

    # (ray parameter, offset_x, offset_y)
    candidates: list[tuple[float, float, float]] = []

    if dx != 0:
        side_x = half_w if dx > 0 else -half_w
        t = side_x / dx
        offset_y = side_x * dy / dx
        if abs(offset_y) <= half_h + 1e-9:
            candidates.append((t, side_x, max(-half_h, min(half_h, offset_y))))

    if dy != 0:
        side_y = half_h if dy > 0 else -half_h
        t = side_y / dy
        offset_x = side_y * dx / dy
        if abs(offset_x) <= half_w + 1e-9:
            candidates.append((t, max(-half_w, min(half_w, offset_x)), side_y))

    _, offset_x, offset_y = min(candidates, key=lambda c: c[0])
    return Point(center.x + offset_x, center.y + offset_y)


# ---------------------------------------------------------------------------
# Node anchoring
# ---------------------------------------------------------------------------

def get_node_center(node: NodeDescriptor) -> Point:
    """Connector anchor of a node.

    Horizontally centered on the measured width (avatar width while
    unmeasured). Vertically fixed at the avatar's center, so label text
    wrapping below the avatar never moves the anchor.
    """
    width = node.size.width if node.size is not None and node.size.width else PERSON_IMAGE_SIZE
    return Point(node.position.x + width / 2, node.position.y + PERSON_IMAGE_RADIUS)


def _boundary_point(node: NodeDescriptor, center: Point, toward: Point) -> Point:
    if node.shape is ShapeKind.RECTANGLE:
        return get_rect_intersection(center, ITEM_SIZE, ITEM_SIZE, toward.x, toward.y)
    return get_circle_intersection(center, PERSON_IMAGE_RADIUS, toward.x, toward.y)


def get_edge_intersection_points(
    source: NodeDescriptor,
    target: NodeDescriptor,
) -> tuple[Point, Point]:
    """Connector endpoints on the outlines of *source* and *target*.

    Each endpoint is computed from the straight line between both centers.

    Returns:
        (source_point, target_point)
    """
    source_center = get_node_center(source)
    target_center = get_node_center(target)
    return (
        _boundary_point(source, source_center, target_center),
        _boundary_point(target, target_center, source_center),
    )


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

def calculate_label_position_on_edge(
    source_x: float,
    source_y: float,
    target_x: float,
    target_y: float,
    ratio: float,
) -> Point:
    """Point at *ratio* along the segment (0 = source, 1 = target)."""
    return Point(
        source_x * (1 - ratio) + target_x * ratio,
        source_y * (1 - ratio) + target_y * ratio,
    )


def get_dual_directed_connectors(
    source_point: Point,
    target_point: Point,
    offset: float = DUAL_CONNECTOR_OFFSET,
    label_ratio: float = DUAL_LABEL_RATIO,
) -> tuple[Segment, Segment, Point, Point]:
    """Two parallel connectors for a relationship with two distinct labels.

    The forward line runs source -> target, shifted by the clockwise
    perpendicular; the backward line runs target -> source, shifted the
    other way. Each label sits at *label_ratio* from its own line's start,
    so the two labels end up near opposite nodes.

    Returns:
        (forward, backward, forward_label, backward_label)
    """
    dx = target_point.x - source_point.x
    dy = target_point.y - source_point.y
    length = math.hypot(dx, dy)
    if length == 0:
        perp_x = perp_y = 0.0
    else:
        perp_x = -dy / length * offset
        perp_y = dx / length * offset

    forward = Segment(
        Point(source_point.x + perp_x, source_point.y + perp_y),
        Point(target_point.x + perp_x, target_point.y + perp_y),
    )
    backward = Segment(
        Point(target_point.x - perp_x, target_point.y - perp_y),
        Point(source_point.x - perp_x, source_point.y - perp_y),
    )
    forward_label = calculate_label_position_on_edge(
        forward.source.x, forward.source.y, forward.target.x, forward.target.y, label_ratio,
    )
    backward_label = calculate_label_position_on_edge(
        backward.source.x, backward.source.y, backward.target.x, backward.target.y, label_ratio,
    )
    return forward, backward, forward_label, backward_label


# ---------------------------------------------------------------------------
# Connection targeting
# ---------------------------------------------------------------------------

def find_closest_target_node(
    x: float,
    y: float,
    nodes: list[NodeDescriptor],
    from_node_id: str,
    connection_radius: float = CONNECTION_RADIUS,
) -> Optional[NodeDescriptor]:
    """Node nearest the pointer while a new connector is being dragged.

    Only nodes whose box, grown by *connection_radius* on every side,
    contains the pointer are candidates; the source node never is.
    """
    best: Optional[NodeDescriptor] = None
    best_distance = math.inf
    for node in nodes:
        if node.id == from_node_id:
            continue
        if node.size is not None:
            width, height = node.size.width, node.size.height
        else:
            width = height = PERSON_IMAGE_SIZE
        left = node.position.x - connection_radius
        right = node.position.x + width + connection_radius
        top = node.position.y - connection_radius
        bottom = node.position.y + height + connection_radius
        if not (left <= x <= right and top <= y <= bottom):
            continue
        distance = math.hypot(
            x - (node.position.x + width / 2),
            y - (node.position.y + height / 2),
        )
        if distance < best_distance:
            best, best_distance = node, distance
    return best
