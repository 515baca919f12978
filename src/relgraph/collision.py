"""
Overlap removal for placed nodes.

Axis-aligned bounding box (AABB) collision detection with an iterative
push-apart along the axis of least overlap. This is a bounded heuristic:
dense configurations may still overlap when the iteration budget runs out.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from relgraph.models import BoundingBox, CollisionOptions, NodeDescriptor, Point

logger = logging.getLogger("relgraph-mcp.collision")

# Movements smaller than this (px, per axis) count as "not moved".
POSITION_EPSILON = 0.01


def _compute_overlap(a: BoundingBox, b: BoundingBox, margin: float) -> tuple[float, float]:
    """Margin-inflated overlap between two boxes. Returns (overlap_x, overlap_y).
    Both values are clamped at zero."""
    overlap_x = max(0.0, min(a.right + margin, b.right + margin) - max(a.x, b.x))
    overlap_y = max(0.0, min(a.bottom + margin, b.bottom + margin) - max(a.y, b.y))
    return overlap_x, overlap_y


def _collides(overlap_x: float, overlap_y: float, threshold: float) -> bool:
    return overlap_x > threshold and overlap_y > threshold


def _push_apart(a: BoundingBox, b: BoundingBox, overlap_x: float, overlap_y: float) -> None:
    """Split the smaller overlap evenly between *a* and *b*."""
    if overlap_x < overlap_y:
        push = overlap_x / 2
        if a.x < b.x:
            a.x -= push
            b.x += push
        else:
            a.x += push
            b.x -= push
    else:
        push = overlap_y / 2
        if a.y < b.y:
            a.y -= push
            b.y += push
        else:
            a.y += push
            b.y -= push


def resolve_collisions(
    nodes: list[NodeDescriptor],
    options: Optional[CollisionOptions] = None,
) -> list[NodeDescriptor]:
    """Push apart overlapping nodes.

    Runs full O(n^2) passes over all pairs until a pass finds no collision
    or ``max_iterations`` passes have run. Inputs are never mutated.

    Args:
        nodes: Nodes to separate. Unmeasured nodes use the default size.
        options: Iteration budget, overlap threshold and margin.

    Returns:
        A list in input order. Nodes that did not move are the very same
        objects that were passed in; moved nodes are copies with only the
        position replaced.
    """
    opts = options or CollisionOptions()

    if len(nodes) <= 1:
        return nodes

    boxes = [BoundingBox.from_node(node) for node in nodes]

    iterations = 0
    has_collisions = True
    while has_collisions and iterations < opts.max_iterations:
        has_collisions = False
        for i in range(len(boxes)):
            for j in range(i + 1, len(boxes)):
                a, b = boxes[i], boxes[j]
                overlap_x, overlap_y = _compute_overlap(a, b, opts.margin)
                if not _collides(overlap_x, overlap_y, opts.overlap_threshold):
                    continue
                has_collisions = True
                _push_apart(a, b, overlap_x, overlap_y)
        iterations += 1

    logger.debug(
        "Collision pass finished after %d iteration(s), converged=%s",
        iterations, not has_collisions,
    )

    result: list[NodeDescriptor] = []
    for node, box in zip(nodes, boxes):
        if (abs(box.x - node.position.x) < POSITION_EPSILON
                and abs(box.y - node.position.y) < POSITION_EPSILON):
            result.append(node)
        else:
            result.append(dataclasses.replace(node, position=Point(box.x, box.y)))
    return result


def find_colliding_pairs(
    nodes: list[NodeDescriptor],
    options: Optional[CollisionOptions] = None,
) -> list[tuple[str, str]]:
    """All node id pairs that the resolver would currently push apart."""
    opts = options or CollisionOptions()
    boxes = [BoundingBox.from_node(node) for node in nodes]
    pairs: list[tuple[str, str]] = []
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            overlap_x, overlap_y = _compute_overlap(boxes[i], boxes[j], opts.margin)
            if _collides(overlap_x, overlap_y, opts.overlap_threshold):
                pairs.append((boxes[i].id, boxes[j].id))
    return pairs
