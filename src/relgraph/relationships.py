"""
Relationship display helpers.

The display type of a relationship is always derived from its labels and
direction flag; it is never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from relgraph.models import Relationship, RelationshipType

ARROW_BOTH = "↔"
ARROW_OUT = "→"
ARROW_IN = "←"


@dataclass
class PerspectiveEntry:
    """One line of a relationship as described from a viewer's side."""
    label: str
    direction: str
    other_id: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "direction": self.direction, "other_id": self.other_id}


def get_display_type(relationship: Relationship) -> RelationshipType:
    """Classify a relationship for rendering.

    undirected when not directed; bidirectional when both labels are set
    and equal; dual-directed when both are set and differ; one-way otherwise.
    """
    if not relationship.directed:
        return RelationshipType.UNDIRECTED

    forward = relationship.source_to_target_label
    backward = relationship.target_to_source_label
    if forward is not None and backward is not None:
        if forward == backward:
            return RelationshipType.BIDIRECTIONAL
        return RelationshipType.DUAL_DIRECTED
    return RelationshipType.ONE_WAY


def get_relationship_from_perspective(
    relationship: Relationship,
    viewer_id: str,
) -> list[PerspectiveEntry]:
    """Describe *relationship* as seen by the node *viewer_id*.

    The viewer's own outgoing label comes with ``→`` (``↔`` when the
    relationship is bidirectional); the incoming label of a dual-directed
    pair comes with ``←``. Outgoing entries are listed first for the
    source, incoming first for the target.
    """
    is_source = relationship.source_id == viewer_id
    is_target = relationship.target_id == viewer_id
    if not is_source and not is_target:
        return []

    other_id = relationship.target_id if is_source else relationship.source_id
    forward = relationship.source_to_target_label
    backward = relationship.target_to_source_label

    if not relationship.directed:
        return [PerspectiveEntry(forward or backward or "", "", other_id)]

    outgoing_arrow = (
        ARROW_BOTH if get_display_type(relationship) is RelationshipType.BIDIRECTIONAL
        else ARROW_OUT
    )
    entries: list[PerspectiveEntry] = []
    if is_source:
        if forward is not None:
            entries.append(PerspectiveEntry(forward, outgoing_arrow, other_id))
        if backward is not None and backward != forward:
            entries.append(PerspectiveEntry(backward, ARROW_IN, other_id))
    else:
        if forward is not None and forward != backward:
            entries.append(PerspectiveEntry(forward, ARROW_IN, other_id))
        if backward is not None:
            entries.append(PerspectiveEntry(backward, outgoing_arrow, other_id))
    return entries


def relationships_to_edges(relationships: list[Relationship]) -> list[dict[str, Any]]:
    """Renderable edge records with the derived display type attached."""
    return [
        {
            "id": rel.id,
            "source": rel.source_id,
            "target": rel.target_id,
            "display_type": get_display_type(rel).value,
            "source_to_target_label": rel.source_to_target_label,
            "target_to_source_label": rel.target_to_source_label,
        }
        for rel in relationships
    ]
