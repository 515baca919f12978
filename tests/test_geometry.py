"""Tests for connector geometry."""

import math

import pytest

from relgraph.geometry import (
    calculate_label_position_on_edge,
    find_closest_target_node,
    get_circle_intersection,
    get_dual_directed_connectors,
    get_edge_intersection_points,
    get_node_center,
    get_rect_intersection,
)
from relgraph.models import NodeDescriptor, Point, ShapeKind, Size


def _person(nid: str, x: float, y: float, width: float | None = None, height: float = 100) -> NodeDescriptor:
    size = Size(width, height) if width is not None else None
    return NodeDescriptor(id=nid, position=Point(x, y), size=size)


def _item(nid: str, x: float, y: float, width: float = 80) -> NodeDescriptor:
    return NodeDescriptor(id=nid, position=Point(x, y), size=Size(width, 80), shape=ShapeKind.RECTANGLE)


def _approx(point: Point, x: float, y: float) -> None:
    assert point.x == pytest.approx(x, abs=1e-9)
    assert point.y == pytest.approx(y, abs=1e-9)


# ===================================================================
# Circle
# ===================================================================

class TestCircleIntersection:
    def test_right(self) -> None:
        _approx(get_circle_intersection(Point(100, 100), 50, 200, 100), 150, 100)

    def test_left(self) -> None:
        _approx(get_circle_intersection(Point(100, 100), 50, 0, 100), 50, 100)

    def test_down(self) -> None:
        _approx(get_circle_intersection(Point(100, 100), 50, 100, 200), 100, 150)

    def test_up(self) -> None:
        _approx(get_circle_intersection(Point(100, 100), 50, 100, 0), 100, 50)

    def test_diagonal(self) -> None:
        offset = 50 / math.sqrt(2)
        _approx(get_circle_intersection(Point(100, 100), 50, 200, 200), 100 + offset, 100 + offset)

    def test_always_on_outline(self) -> None:
        center = Point(-30, 12)
        for deg in range(0, 360, 15):
            rad = math.radians(deg)
            target_x = center.x + 500 * math.cos(rad)
            target_y = center.y + 500 * math.sin(rad)
            point = get_circle_intersection(center, 40, target_x, target_y)
            assert math.hypot(point.x - center.x, point.y - center.y) == pytest.approx(40)

    def test_zero_radius_collapses_to_center(self) -> None:
        _approx(get_circle_intersection(Point(7, 9), 0, 100, 100), 7, 9)


# ===================================================================
# Rectangle
# ===================================================================

class TestRectIntersection:
    def test_axis_directions(self) -> None:
        center = Point(0, 0)
        _approx(get_rect_intersection(center, 80, 80, 100, 0), 40, 0)
        _approx(get_rect_intersection(center, 80, 80, -100, 0), -40, 0)
        _approx(get_rect_intersection(center, 80, 80, 0, 100), 0, 40)
        _approx(get_rect_intersection(center, 80, 80, 0, -100), 0, -40)

    def test_diagonal_hits_corner(self) -> None:
        center = Point(10, 20)
        _approx(get_rect_intersection(center, 80, 80, 110, 120), 50, 60)
        _approx(get_rect_intersection(center, 80, 80, -90, -80), -30, -20)
        _approx(get_rect_intersection(center, 80, 80, 110, -80), 50, -20)

    def test_shallow_ray_hits_side(self) -> None:
        _approx(get_rect_intersection(Point(0, 0), 80, 80, 100, 50), 40, 20)

    def test_steep_ray_hits_bottom(self) -> None:
        _approx(get_rect_intersection(Point(0, 0), 80, 80, 10, 100), 4, 40)

    def test_wide_rectangle(self) -> None:
        _approx(get_rect_intersection(Point(0, 0), 100, 40, 100, 100), 20, 20)

    def test_target_on_center(self) -> None:
        _approx(get_rect_intersection(Point(5, 5), 80, 60, 5, 5), 45, 5)


# ===================================================================
# Node anchoring
# ===================================================================

class TestNodeCenter:
    def test_measured_width(self) -> None:
        _approx(get_node_center(_person("a", 0, 0, width=100)), 50, 40)

    def test_unmeasured_width(self) -> None:
        _approx(get_node_center(_person("a", 10, 20)), 50, 60)

    def test_height_is_ignored(self) -> None:
        short = get_node_center(_person("a", 0, 0, width=100, height=90))
        tall = get_node_center(_person("a", 0, 0, width=100, height=160))
        assert short == tall


class TestEdgeIntersectionPoints:
    def test_two_people(self) -> None:
        source_point, target_point = get_edge_intersection_points(
            _person("a", 0, 0, width=100), _person("b", 200, 0, width=100),
        )
        _approx(source_point, 90, 40)
        _approx(target_point, 210, 40)

    def test_unmeasured_people(self) -> None:
        source_point, target_point = get_edge_intersection_points(
            _person("a", 0, 0), _person("b", 200, 0),
        )
        _approx(source_point, 80, 40)
        _approx(target_point, 200, 40)

    def test_vertical_anchor_independent_of_height(self) -> None:
        target = _person("b", 200, 0, width=100)
        measured, _ = get_edge_intersection_points(_person("a", 0, 0, width=100, height=120), target)
        unmeasured, _ = get_edge_intersection_points(_person("a", 0, 0), target)
        assert measured.y == pytest.approx(40)
        assert unmeasured.y == pytest.approx(40)

    def test_item_uses_square_outline(self) -> None:
        source_point, target_point = get_edge_intersection_points(
            _item("i", 0, 0), _person("p", 200, 0, width=80),
        )
        _approx(source_point, 80, 40)
        _approx(target_point, 200, 40)

    def test_item_diagonal_corner(self) -> None:
        source_point, target_point = get_edge_intersection_points(
            _item("i", 0, 0), _person("p", 200, 200, width=80),
        )
        _approx(source_point, 80, 80)
        offset = 40 / math.sqrt(2)
        _approx(target_point, 240 - offset, 240 - offset)

    def test_endpoints_on_center_line(self) -> None:
        source = _person("a", 0, 0, width=100)
        target = _person("b", 300, 170, width=100)
        source_point, target_point = get_edge_intersection_points(source, target)
        sc, tc = get_node_center(source), get_node_center(target)
        cross_s = (tc.x - sc.x) * (source_point.y - sc.y) - (tc.y - sc.y) * (source_point.x - sc.x)
        cross_t = (tc.x - sc.x) * (target_point.y - sc.y) - (tc.y - sc.y) * (target_point.x - sc.x)
        assert cross_s == pytest.approx(0, abs=1e-6)
        assert cross_t == pytest.approx(0, abs=1e-6)


# ===================================================================
# Labels
# ===================================================================

class TestLabelPosition:
    def test_ratio(self) -> None:
        _approx(calculate_label_position_on_edge(0, 0, 100, 100, 0.3), 30, 30)

    def test_negative_coordinates(self) -> None:
        _approx(calculate_label_position_on_edge(-100, -100, 0, 0, 0.3), -70, -70)

    def test_ratio_zero_is_source(self) -> None:
        assert calculate_label_position_on_edge(10.1, 20.7, 100.3, 100.9, 0) == Point(10.1, 20.7)

    def test_ratio_one_is_target(self) -> None:
        assert calculate_label_position_on_edge(0.1, 0.2, 0.3, 0.7, 1) == Point(0.3, 0.7)

    def test_midpoint(self) -> None:
        assert calculate_label_position_on_edge(0, 10, 100, 50, 0.5) == Point(50, 30)


class TestDualDirectedConnectors:
    def test_horizontal(self) -> None:
        forward, backward, forward_label, backward_label = get_dual_directed_connectors(
            Point(0, 0), Point(100, 0),
        )
        _approx(forward.source, 0, 8)
        _approx(forward.target, 100, 8)
        _approx(backward.source, 100, -8)
        _approx(backward.target, 0, -8)
        _approx(forward_label, 30, 8)
        _approx(backward_label, 70, -8)

    def test_custom_offset(self) -> None:
        forward, backward, _, _ = get_dual_directed_connectors(
            Point(0, 0), Point(0, 100), offset=4, label_ratio=0.5,
        )
        _approx(forward.source, -4, 0)
        _approx(backward.source, 4, 100)

    def test_zero_length(self) -> None:
        forward, backward, forward_label, _ = get_dual_directed_connectors(Point(5, 5), Point(5, 5))
        _approx(forward.source, 5, 5)
        _approx(backward.target, 5, 5)
        _approx(forward_label, 5, 5)


# ===================================================================
# Connection targeting
# ===================================================================

class TestClosestTargetNode:
    def _nodes(self) -> list[NodeDescriptor]:
        return [
            _person("a", 0, 0, width=80, height=80),
            _person("b", 300, 0, width=80, height=80),
            _person("c", 100, 0, width=80, height=80),
        ]

    def test_nearest_candidate(self) -> None:
        found = find_closest_target_node(130, 40, self._nodes(), "a")
        assert found is not None
        assert found.id == "c"

    def test_source_is_excluded(self) -> None:
        found = find_closest_target_node(40, 40, self._nodes(), "a")
        assert found is not None
        assert found.id == "c"

    def test_nothing_in_range(self) -> None:
        assert find_closest_target_node(1000, 1000, self._nodes(), "a") is None

    def test_radius_expands_hit_area(self) -> None:
        nodes = [_person("b", 300, 0, width=80, height=80)]
        assert find_closest_target_node(250, 40, nodes, "a", connection_radius=60).id == "b"
        assert find_closest_target_node(250, 40, nodes, "a", connection_radius=10) is None

    def test_unmeasured_fallback(self) -> None:
        nodes = [_person("b", 0, 0)]
        assert find_closest_target_node(139, 40, nodes, "a", connection_radius=60).id == "b"
        assert find_closest_target_node(141, 40, nodes, "a", connection_radius=60) is None
