"""
Core data model for relationship graph geometry.

Plain, transient dataclasses describing nodes, relationships and the
parameter sets consumed by the layout engine. Nothing here is persisted;
instances are built from the current graph snapshot on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Visual constants (px)
# ---------------------------------------------------------------------------

# Avatar image size of a person node; the circle outline has half this radius.
PERSON_IMAGE_SIZE = 80
PERSON_IMAGE_RADIUS = PERSON_IMAGE_SIZE / 2

# Item nodes render as squares of this side length.
ITEM_SIZE = 80

# Fallback size used by the collision resolver for unmeasured nodes.
DEFAULT_NODE_WIDTH = 100
DEFAULT_NODE_HEIGHT = 110


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ShapeKind(Enum):
    """Outline used when anchoring connectors to a node."""
    CIRCLE = "circle"
    RECTANGLE = "rectangle"

    @classmethod
    def for_kind(cls, kind: Optional[str]) -> 'ShapeKind':
        """Map an entity kind ('person', 'item', ...) to its outline."""
        if kind == "item":
            return cls.RECTANGLE
        return cls.CIRCLE


class RelationshipType(Enum):
    """Derived display classification of a relationship."""
    BIDIRECTIONAL = "bidirectional"
    DUAL_DIRECTED = "dual-directed"
    ONE_WAY = "one-way"
    UNDIRECTED = "undirected"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class Point:
    """A 2-D coordinate."""
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Point':
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class Size:
    """Measured rendered size of a node."""
    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height}


@dataclass
class NodeDescriptor:
    """A node as seen by the geometry engine.

    ``position`` is the top-left corner of the node's bounding box.
    ``size`` is ``None`` until the renderer has measured the node.
    """
    id: str
    position: Point
    size: Optional[Size] = None
    shape: ShapeKind = ShapeKind.CIRCLE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "position": self.position.to_dict(),
            "shape": self.shape.value,
        }
        if self.size is not None:
            data["size"] = self.size.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'NodeDescriptor':
        """Build a descriptor from a plain dict.

        Accepts either ``position`` ({x, y}) or flat ``x``/``y`` keys, an
        optional ``size`` ({width, height}) or flat ``width``/``height``,
        and either ``shape`` or an entity ``kind``.
        """
        if "position" in data:
            position = Point.from_dict(data["position"])
        else:
            position = Point(float(data.get("x", 0)), float(data.get("y", 0)))

        size: Optional[Size] = None
        raw_size = data.get("size")
        if raw_size:
            size = Size(float(raw_size["width"]), float(raw_size["height"]))
        elif "width" in data and "height" in data:
            size = Size(float(data["width"]), float(data["height"]))

        if "shape" in data:
            shape = ShapeKind(data["shape"])
        else:
            shape = ShapeKind.for_kind(data.get("kind"))

        return cls(id=str(data["id"]), position=position, size=size, shape=shape)


@dataclass
class Relationship:
    """An edge between two nodes, carrying up to two directional labels.

    When ``directed`` is false both labels are expected to be equal; this is
    a convention kept by callers, not enforced here.
    """
    id: str
    source_id: str
    target_id: str
    directed: bool = True
    source_to_target_label: Optional[str] = None
    target_to_source_label: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "directed": self.directed,
            "source_to_target_label": self.source_to_target_label,
            "target_to_source_label": self.target_to_source_label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int = 0) -> 'Relationship':
        return cls(
            id=str(data.get("id") or f"e{index}"),
            source_id=str(data["source_id"]),
            target_id=str(data["target_id"]),
            directed=bool(data.get("directed", True)),
            source_to_target_label=data.get("source_to_target_label"),
            target_to_source_label=data.get("target_to_source_label"),
        )


@dataclass
class Segment:
    """A straight connector between two points."""
    source: Point
    target: Point

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {"source": self.source.to_dict(), "target": self.target.to_dict()}


@dataclass
class BoundingBox:
    """Axis-aligned bounding box of a node, used during collision resolution."""
    id: str
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def from_node(cls, node: NodeDescriptor) -> 'BoundingBox':
        if node.size is not None:
            width, height = node.size.width, node.size.height
        else:
            width, height = DEFAULT_NODE_WIDTH, DEFAULT_NODE_HEIGHT
        return cls(node.id, node.position.x, node.position.y, width, height)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class EgoLayoutParams:
    """Ring geometry for the ego radial layout."""
    ring_spacing: float = 200        # Distance between consecutive rings
    first_ring_radius: float = 200   # Radius of the distance-1 ring


@dataclass
class CollisionOptions:
    """Tuning for the collision resolver."""
    max_iterations: int = 50         # Upper bound on full pair passes
    overlap_threshold: float = 0.5   # Overlaps at or below this are ignored
    margin: float = 15               # Extra gap kept between nodes


# Type aliases for the engine's map outputs.
DistanceMap = dict[str, int]
PositionMap = dict[str, Point]


def positions_to_dict(positions: PositionMap) -> dict[str, dict[str, float]]:
    """Flatten a position map into plain JSON-ready dicts."""
    return {node_id: pt.to_dict() for node_id, pt in positions.items()}
