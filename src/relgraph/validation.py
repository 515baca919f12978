"""
Input validation for relgraph MCP tool parameters.

The layout engine itself accepts any numeric input; everything arriving
from tool callers is checked here first so that callers get a clear error
message instead of a silently odd layout.
"""

from __future__ import annotations

from typing import Any


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_int(
    value: Any,
    field_name: str,
    *,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    """Validate an integer value and optional range."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be an integer, got {type(value).__name__}."
        )
    if min_val is not None and value < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {value}."
        )
    if max_val is not None and value > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {value}."
        )
    return value


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


def validate_positive_number(value: Any, field_name: str) -> float:
    """Validate that a number is positive (> 0)."""
    val = validate_number(value, field_name)
    if val <= 0:
        raise ValidationError(f"'{field_name}' must be > 0, got {val}.")
    return val


def validate_non_negative_number(value: Any, field_name: str) -> float:
    """Validate that a number is >= 0."""
    return validate_number(value, field_name, min_val=0)


def validate_ratio(value: Any, field_name: str = "ratio") -> float:
    """Validate a position ratio along a segment (0..1)."""
    return validate_number(value, field_name, min_val=0, max_val=1)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

_LAYOUT_ACTIONS = {"EGO", "RESOLVE_COLLISIONS", "TRANSITION"}
_GEOMETRY_ACTIONS = {"EDGE_POINTS", "LABEL_POSITION", "DUAL_CONNECTORS", "CLOSEST_TARGET"}
_INSPECT_ACTIONS = {"DISTANCES", "COLLISIONS", "CLASSIFY", "PERSPECTIVE"}

_SHAPES = {"circle", "rectangle"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


# ---------------------------------------------------------------------------
# Point / node / relationship dict validators
# ---------------------------------------------------------------------------

def validate_point_dict(p: Any, field_name: str) -> None:
    """Validate an {x, y} dict."""
    if not isinstance(p, dict):
        raise ValidationError(f"'{field_name}' must be a dict/object with 'x' and 'y'.")
    for key in ("x", "y"):
        if key not in p:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
        if not isinstance(p[key], (int, float)) or isinstance(p[key], bool):
            raise ValidationError(f"'{field_name}.{key}' must be a number.")


def validate_node_dict(n: Any, index: int) -> None:
    """Validate a single node dict from the nodes list."""
    if not isinstance(n, dict):
        raise ValidationError(f"Node at index {index} must be a dict/object.")
    if "id" not in n:
        raise ValidationError(f"Node at index {index} missing required key 'id'.")
    if not isinstance(n["id"], str) or not n["id"].strip():
        raise ValidationError(f"Node at index {index}: 'id' must be a non-empty string.")
    if "position" in n:
        validate_point_dict(n["position"], f"nodes[{index}].position")
    for key in ("x", "y"):
        if key in n and (not isinstance(n[key], (int, float)) or isinstance(n[key], bool)):
            raise ValidationError(f"Node at index {index}: '{key}' must be a number.")
    for key in ("width", "height"):
        if key not in n:
            continue
        if not isinstance(n[key], (int, float)) or isinstance(n[key], bool):
            raise ValidationError(f"Node at index {index}: '{key}' must be a number.")
        if n[key] < 0:
            raise ValidationError(f"Node at index {index}: '{key}' must be >= 0.")
    size = n.get("size")
    if size is not None:
        if not isinstance(size, dict):
            raise ValidationError(f"Node at index {index}: 'size' must be a dict/object.")
        for key in ("width", "height"):
            if key not in size:
                raise ValidationError(f"Node at index {index}: 'size' missing required key '{key}'.")
            if not isinstance(size[key], (int, float)) or isinstance(size[key], bool):
                raise ValidationError(f"Node at index {index}: 'size.{key}' must be a number.")
            if size[key] < 0:
                raise ValidationError(f"Node at index {index}: 'size.{key}' must be >= 0.")
    if "shape" in n and n["shape"] not in _SHAPES:
        choices = ", ".join(sorted(_SHAPES))
        raise ValidationError(
            f"Node at index {index}: 'shape' must be one of [{choices}], got '{n['shape']}'."
        )
    if "kind" in n and not isinstance(n["kind"], str):
        raise ValidationError(f"Node at index {index}: 'kind' must be a string.")


def validate_relationship_dict(r: Any, index: int) -> None:
    """Validate a single relationship dict from the relationships list."""
    if not isinstance(r, dict):
        raise ValidationError(f"Relationship at index {index} must be a dict/object.")
    for key in ("source_id", "target_id"):
        if key not in r:
            raise ValidationError(f"Relationship at index {index} missing required key '{key}'.")
        if not isinstance(r[key], str) or not r[key].strip():
            raise ValidationError(
                f"Relationship at index {index}: '{key}' must be a non-empty string."
            )
    if r["source_id"] == r["target_id"]:
        raise ValidationError(
            f"Relationship at index {index}: 'source_id' and 'target_id' must be different "
            f"(self-loops not supported)."
        )
    if "id" in r and not isinstance(r["id"], str):
        raise ValidationError(f"Relationship at index {index}: 'id' must be a string.")
    if "directed" in r and not isinstance(r["directed"], bool):
        raise ValidationError(f"Relationship at index {index}: 'directed' must be a boolean.")
    for key in ("source_to_target_label", "target_to_source_label"):
        if r.get(key) is not None and not isinstance(r[key], str):
            raise ValidationError(
                f"Relationship at index {index}: '{key}' must be a string or null."
            )


def validate_nodes(value: Any, *, min_length: int = 0) -> list[dict]:
    """Validate a list of node dicts with unique ids."""
    nodes = validate_list(value, "nodes", min_length=min_length)
    seen: set[str] = set()
    for i, n in enumerate(nodes):
        validate_node_dict(n, i)
        if n["id"] in seen:
            raise ValidationError(f"Node at index {i}: duplicate id '{n['id']}'.")
        seen.add(n["id"])
    return nodes


def validate_relationships(value: Any, known_ids: set[str]) -> list[dict]:
    """Validate relationship dicts and that they only reference *known_ids*."""
    rels = validate_list(value, "relationships")
    for i, r in enumerate(rels):
        validate_relationship_dict(r, i)
        for key in ("source_id", "target_id"):
            if r[key] not in known_ids:
                raise ValidationError(
                    f"Relationship at index {i}: '{key}' references unknown node '{r[key]}'."
                )
    return rels
