"""
Ego-centric radial layout for relationship graphs.

Places a chosen center node at a fixed coordinate and arranges every other
node on concentric rings according to its hop distance from the center:

- Graph distances via breadth-first search over an undirected view
- Equal angular spacing per ring, rotated 30 degrees per ring
- A synthetic outer ring for nodes the center cannot reach
- Ease-out interpolation for animating a transition into the layout
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict, deque
from typing import Iterable, Optional

from relgraph.models import (
    DistanceMap,
    EgoLayoutParams,
    Point,
    PositionMap,
    Relationship,
)

logger = logging.getLogger("relgraph-mcp.layout")

# Per-ring angular offset, multiplied by the ring index.
RING_ANGLE_OFFSET = math.pi / 6


# ---------------------------------------------------------------------------
# Graph distances
# ---------------------------------------------------------------------------

def _build_adjacency(edges: Iterable[Relationship]) -> dict[str, list[str]]:
    """Undirected adjacency lists, neighbors kept in edge insertion order."""
    adj: dict[str, list[str]] = defaultdict(list)
    for edge in edges:
        src, tgt = edge.source_id, edge.target_id
        if tgt not in adj[src]:
            adj[src].append(tgt)
        if src not in adj[tgt]:
            adj[tgt].append(src)
    return adj


def compute_graph_distances(
    center_id: str,
    node_ids: Iterable[str],
    edges: Iterable[Relationship],
) -> DistanceMap:
    """Hop distance from *center_id* to every reachable node.

    Edge direction is ignored. Nodes that cannot be reached are absent
    from the result, so a missing key means "unreachable", never zero.

    Args:
        center_id: The ego node; always present with distance 0.
        node_ids: All node ids of the graph. Reachability is derived from
            *edges* alone, so ids listed here but not connected are simply
            left out of the result.
        edges: Relationships; every edge links both ways.

    Returns:
        Mapping of node id to hop count.
    """
    adj = _build_adjacency(edges)

    distances: DistanceMap = {center_id: 0}
    queue: deque[str] = deque([center_id])
    while queue:
        current = queue.popleft()
        for neighbor in adj.get(current, []):
            if neighbor in distances:
                continue
            distances[neighbor] = distances[current] + 1
            queue.append(neighbor)

    logger.debug(
        "BFS from %s reached %d of %d nodes",
        center_id, len(distances), len(set(node_ids)),
    )
    return distances


# ---------------------------------------------------------------------------
# Radial placement
# ---------------------------------------------------------------------------

def compute_radial_positions(
    center_id: str,
    distances: DistanceMap,
    all_node_ids: Iterable[str],
    params: EgoLayoutParams,
    center: Point,
) -> PositionMap:
    """Place nodes on concentric rings around *center*.

    Ring ``k`` has radius ``first_ring_radius + (k - 1) * ring_spacing``
    and starts at angle ``k * pi / 6``. Nodes without a distance share one
    extra ring just outside the farthest reachable ring.
    """
    positions: PositionMap = {center_id: Point(center.x, center.y)}

    rings: dict[int, list[str]] = {}
    unreachable: list[str] = []
    for node_id in all_node_ids:
        if node_id == center_id:
            continue
        distance = distances.get(node_id)
        if distance is None:
            unreachable.append(node_id)
        else:
            rings.setdefault(distance, []).append(node_id)

    max_distance = max(rings) if rings else 0
    if unreachable:
        rings[max_distance + 1] = unreachable
        logger.debug("%d unreachable nodes placed on ring %d", len(unreachable), max_distance + 1)

    for ring, ring_nodes in rings.items():
        radius = params.first_ring_radius + (ring - 1) * params.ring_spacing
        start_angle = ring * RING_ANGLE_OFFSET
        step = 2 * math.pi / len(ring_nodes)
        for i, node_id in enumerate(ring_nodes):
            angle = start_angle + i * step
            positions[node_id] = Point(
                center.x + radius * math.cos(angle),
                center.y + radius * math.sin(angle),
            )

    return positions


def compute_ego_layout(
    center_id: str,
    node_ids: list[str],
    edges: list[Relationship],
    params: Optional[EgoLayoutParams] = None,
    center: Optional[Point] = None,
) -> PositionMap:
    """Distances and ring placement in one call."""
    params = params or EgoLayoutParams()
    center = center or Point(0, 0)
    distances = compute_graph_distances(center_id, node_ids, edges)
    return compute_radial_positions(center_id, distances, node_ids, params, center)


# ---------------------------------------------------------------------------
# Transition animation
# ---------------------------------------------------------------------------

def ease_out_cubic(t: float) -> float:
    """Ease-out cubic: fast start, gentle landing. Maps [0, 1] onto [0, 1]."""
    return 1 - (1 - t) ** 3


def interpolate_positions(
    start: PositionMap,
    target: PositionMap,
    progress: float,
) -> PositionMap:
    """One animation frame between *start* and *target*.

    *progress* is the linear time fraction (clamped to [0, 1]); easing is
    applied here. Nodes with no target keep their start position; nodes
    with no start position are left out.
    """
    eased = ease_out_cubic(min(max(progress, 0.0), 1.0))
    frame: PositionMap = {}
    for node_id, begin in start.items():
        end = target.get(node_id)
        if end is None:
            frame[node_id] = Point(begin.x, begin.y)
            continue
        frame[node_id] = Point(
            begin.x * (1 - eased) + end.x * eased,
            begin.y * (1 - eased) + end.y * eased,
        )
    return frame
