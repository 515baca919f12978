"""
Relgraph MCP Server — relationship graph layout and connector geometry via
Model Context Protocol.

Exposes 3 stateless tools over stdio. Every call receives the current graph
snapshot as plain JSON and returns plain JSON; nothing is kept between calls.

Tools:
  1. layout    — positioning: ego radial layout, collision resolution,
                 animated transition frames
  2. geometry  — connectors: boundary endpoints, label positions,
                 dual-directed connector pairs, drag target detection
  3. inspect   — read-only: graph distances, colliding pairs,
                 relationship classification, per-node perspective
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from relgraph.collision import find_colliding_pairs, resolve_collisions
from relgraph.geometry import (
    CONNECTION_RADIUS,
    DUAL_CONNECTOR_OFFSET,
    DUAL_LABEL_RATIO,
    calculate_label_position_on_edge,
    find_closest_target_node,
    get_dual_directed_connectors,
    get_edge_intersection_points,
)
from relgraph.layout import (
    compute_graph_distances,
    compute_radial_positions,
    interpolate_positions,
)
from relgraph.models import (
    CollisionOptions,
    EgoLayoutParams,
    NodeDescriptor,
    Point,
    PositionMap,
    Relationship,
    positions_to_dict,
)
from relgraph.relationships import (
    get_relationship_from_perspective,
    relationships_to_edges,
)
from relgraph.validation import (
    ValidationError,
    validate_action,
    validate_int,
    validate_node_dict,
    validate_non_empty_string,
    validate_non_negative_number,
    validate_nodes,
    validate_number,
    validate_point_dict,
    validate_positive_number,
    validate_ratio,
    validate_relationships,
    _GEOMETRY_ACTIONS,
    _INSPECT_ACTIONS,
    _LAYOUT_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging — keep routine FastMCP INFO chatter off stderr.
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("relgraph-mcp")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "relgraph-mcp",
    instructions=(
        "MCP server for laying out relationship graphs (people and items\n"
        "connected by labeled relationships) and computing connector geometry.\n\n"
        "=== 3 TOOLS — use the 'action' parameter to pick the operation ===\n\n"
        "1. layout(action, ...) — ego, resolve_collisions, transition.\n"
        "2. geometry(action, ...) — edge_points, label_position,\n"
        "   dual_connectors, closest_target.\n"
        "3. inspect(action, ...) — distances, collisions, classify, perspective.\n\n"
        "=== CONVENTIONS ===\n"
        "- Nodes: {id, position: {x, y}, size?: {width, height},\n"
        "  shape?: circle|rectangle, kind?: person|item}. position is the\n"
        "  top-left corner; omit size when the node has not been measured.\n"
        "- Relationships: {id?, source_id, target_id, directed?,\n"
        "  source_to_target_label?, target_to_source_label?}.\n"
        "- Typical pipeline: layout(ego) -> layout(resolve_collisions) ->\n"
        "  geometry(edge_points) -> geometry(label_position).\n"
    ),
)


# ===================================================================
# Helpers
# ===================================================================

def _parse_nodes(nodes: Any, *, min_length: int = 0) -> list[NodeDescriptor]:
    raw = validate_nodes(nodes, min_length=min_length)
    return [NodeDescriptor.from_dict(n) for n in raw]


def _parse_relationships(relationships: Any, known_ids: set[str]) -> list[Relationship]:
    raw = validate_relationships(relationships or [], known_ids)
    return [Relationship.from_dict(r, i) for i, r in enumerate(raw)]


def _parse_position_map(value: Any, field_name: str) -> PositionMap:
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict mapping node ids to {{x, y}}, "
            f"got {type(value).__name__}."
        )
    positions: PositionMap = {}
    for node_id, pt in value.items():
        validate_point_dict(pt, f"{field_name}[{node_id}]")
        positions[str(node_id)] = Point.from_dict(pt)
    return positions


def _parse_single_node(value: Any, field_name: str) -> NodeDescriptor:
    if not isinstance(value, dict):
        raise ValidationError(f"'{field_name}' must be a node dict/object.")
    try:
        validate_node_dict(value, 0)
    except ValidationError as exc:
        raise ValidationError(exc.message.replace("Node at index 0", f"'{field_name}'")) from exc
    return NodeDescriptor.from_dict(value)


def _collision_options(max_iterations: Any, overlap_threshold: Any, margin: Any) -> CollisionOptions:
    return CollisionOptions(
        max_iterations=validate_int(max_iterations, "max_iterations", min_val=1),
        overlap_threshold=validate_non_negative_number(overlap_threshold, "overlap_threshold"),
        margin=validate_non_negative_number(margin, "margin"),
    )


# ===================================================================
# TOOLS
# ===================================================================

@mcp.tool()
def layout(
    action: str,
    nodes: list[dict[str, Any]] | None = None,
    relationships: list[dict[str, Any]] | None = None,
    # -- ego --
    center_id: str = "",
    center_x: float = 0,
    center_y: float = 0,
    ring_spacing: float = 200,
    first_ring_radius: float = 200,
    # -- resolve_collisions --
    max_iterations: int = 50,
    overlap_threshold: float = 0.5,
    margin: float = 15,
    # -- transition --
    start_positions: dict[str, dict[str, float]] | None = None,
    target_positions: dict[str, dict[str, float]] | None = None,
    progress: float = 1.0,
) -> str:
    """Layout and positioning operations.

    Actions:
      ego                — Radial layout around center_id. Params: nodes,
                           relationships, center_id, center_x, center_y,
                           ring_spacing, first_ring_radius. Nodes the center
                           cannot reach go on an extra outer ring.
      resolve_collisions — Push apart overlapping nodes. Params: nodes,
                           max_iterations, overlap_threshold, margin.
      transition         — One ease-out frame between two position maps.
                           Params: start_positions, target_positions,
                           progress (0..1).

    Returns:
        JSON results or an error message.
    """
    try:
        action = validate_action(action, "layout", _LAYOUT_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    # ----- ego -----
    if action == "ego":
        try:
            node_list = _parse_nodes(nodes, min_length=1)
            ids = [n.id for n in node_list]
            rels = _parse_relationships(relationships, set(ids))
            validate_non_empty_string(center_id, "center_id")
            if center_id not in ids:
                raise ValidationError(f"'center_id' '{center_id}' is not one of the nodes.")
            params = EgoLayoutParams(
                ring_spacing=validate_positive_number(ring_spacing, "ring_spacing"),
                first_ring_radius=validate_positive_number(first_ring_radius, "first_ring_radius"),
            )
            center = Point(
                validate_number(center_x, "center_x"),
                validate_number(center_y, "center_y"),
            )
        except ValidationError as exc:
            return f"Error: {exc.message}"
        distances = compute_graph_distances(center_id, ids, rels)
        positions = compute_radial_positions(center_id, distances, ids, params, center)
        logger.info("Ego layout around '%s': %d nodes, %d reachable", center_id, len(ids), len(distances))
        return json.dumps({
            "positions": positions_to_dict(positions),
            "distances": distances,
        })

    # ----- resolve_collisions -----
    if action == "resolve_collisions":
        try:
            node_list = _parse_nodes(nodes)
            opts = _collision_options(max_iterations, overlap_threshold, margin)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        resolved = resolve_collisions(node_list, opts)
        moved = [new.id for old, new in zip(node_list, resolved) if new is not old]
        return json.dumps({
            "nodes": [n.to_dict() for n in resolved],
            "moved": moved,
        })

    # ----- transition -----
    try:
        start = _parse_position_map(start_positions or {}, "start_positions")
        target = _parse_position_map(target_positions or {}, "target_positions")
        frac = validate_ratio(progress, "progress")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    return json.dumps({"positions": positions_to_dict(interpolate_positions(start, target, frac))})


@mcp.tool()
def geometry(
    action: str,
    # -- edge_points / dual_connectors --
    source: dict[str, Any] | None = None,
    target: dict[str, Any] | None = None,
    offset: float = DUAL_CONNECTOR_OFFSET,
    label_ratio: float = DUAL_LABEL_RATIO,
    # -- label_position --
    source_x: float = 0,
    source_y: float = 0,
    target_x: float = 0,
    target_y: float = 0,
    ratio: float = 0.5,
    # -- closest_target --
    x: float = 0,
    y: float = 0,
    nodes: list[dict[str, Any]] | None = None,
    from_node_id: str = "",
    connection_radius: float = CONNECTION_RADIUS,
) -> str:
    """Connector geometry between nodes.

    Actions:
      edge_points     — Endpoints of a straight connector on both node
                        outlines. Params: source, target (node dicts).
      label_position  — Point at ratio along a segment. Params: source_x,
                        source_y, target_x, target_y, ratio (0..1).
      dual_connectors — Two parallel connectors with one label anchor each,
                        for dual-directed relationships. Params: source,
                        target, offset, label_ratio.
      closest_target  — Node nearest a pointer while dragging a new
                        connector. Params: x, y, nodes, from_node_id,
                        connection_radius.

    Returns:
        JSON results or an error message.
    """
    try:
        action = validate_action(action, "geometry", _GEOMETRY_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    # ----- edge_points / dual_connectors -----
    if action in ("edge_points", "dual_connectors"):
        try:
            src = _parse_single_node(source, "source")
            tgt = _parse_single_node(target, "target")
            if src.id == tgt.id:
                raise ValidationError("'source' and 'target' must be different nodes.")
            if action == "dual_connectors":
                offset = validate_non_negative_number(offset, "offset")
                label_ratio = validate_ratio(label_ratio, "label_ratio")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        source_point, target_point = get_edge_intersection_points(src, tgt)
        if action == "edge_points":
            return json.dumps({
                "source_point": source_point.to_dict(),
                "target_point": target_point.to_dict(),
            })
        forward, backward, forward_label, backward_label = get_dual_directed_connectors(
            source_point, target_point, offset, label_ratio,
        )
        return json.dumps({
            "forward": forward.to_dict(),
            "backward": backward.to_dict(),
            "forward_label": forward_label.to_dict(),
            "backward_label": backward_label.to_dict(),
        })

    # ----- label_position -----
    if action == "label_position":
        try:
            coords = [
                validate_number(v, name) for v, name in (
                    (source_x, "source_x"), (source_y, "source_y"),
                    (target_x, "target_x"), (target_y, "target_y"),
                )
            ]
            ratio = validate_ratio(ratio)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps(calculate_label_position_on_edge(*coords, ratio).to_dict())

    # ----- closest_target -----
    try:
        node_list = _parse_nodes(nodes)
        px = validate_number(x, "x")
        py = validate_number(y, "y")
        radius = validate_non_negative_number(connection_radius, "connection_radius")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    found = find_closest_target_node(px, py, node_list, from_node_id, radius)
    return json.dumps({"node_id": found.id if found else None})


@mcp.tool()
def inspect(
    action: str,
    nodes: list[dict[str, Any]] | None = None,
    relationships: list[dict[str, Any]] | None = None,
    center_id: str = "",
    viewer_id: str = "",
    max_iterations: int = 50,
    overlap_threshold: float = 0.5,
    margin: float = 15,
) -> str:
    """Read-only inspection of a graph snapshot.

    Actions:
      distances   — Hop distance of every node from center_id; lists
                    unreachable nodes separately. Params: nodes,
                    relationships, center_id.
      collisions  — Pairs of nodes that currently overlap. Params: nodes,
                    overlap_threshold, margin.
      classify    — Relationships with their derived display type.
                    Params: nodes, relationships.
      perspective — Relationships of viewer_id as that node sees them.
                    Params: nodes, relationships, viewer_id.

    Returns:
        JSON results or an error message.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    # ----- collisions -----
    if action == "collisions":
        try:
            node_list = _parse_nodes(nodes)
            opts = _collision_options(max_iterations, overlap_threshold, margin)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps([list(pair) for pair in find_colliding_pairs(node_list, opts)])

    try:
        node_list = _parse_nodes(nodes)
        ids = [n.id for n in node_list]
        rels = _parse_relationships(relationships, set(ids))
    except ValidationError as exc:
        return f"Error: {exc.message}"

    # ----- distances -----
    if action == "distances":
        try:
            validate_non_empty_string(center_id, "center_id")
            if center_id not in ids:
                raise ValidationError(f"'center_id' '{center_id}' is not one of the nodes.")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        distances = compute_graph_distances(center_id, ids, rels)
        return json.dumps({
            "distances": distances,
            "unreachable": [i for i in ids if i not in distances],
        })

    # ----- classify -----
    if action == "classify":
        return json.dumps(relationships_to_edges(rels), ensure_ascii=False)

    # ----- perspective -----
    try:
        validate_non_empty_string(viewer_id, "viewer_id")
        if viewer_id not in ids:
            raise ValidationError(f"'viewer_id' '{viewer_id}' is not one of the nodes.")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    entries = [
        entry.to_dict()
        for rel in rels
        for entry in get_relationship_from_perspective(rel, viewer_id)
    ]
    return json.dumps(entries, ensure_ascii=False)


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
