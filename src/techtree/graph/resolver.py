"""Relationship inference for nodes about to be added to the tree.

A node of the same type as the selected node is an alternative to it
(sibling); a node of a different type is a consequence of it (child).
Variants always start a new tree.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ..errors import SelectedNodeMissingError
from .models import ROOT_TYPE, NodeType, TechniqueGraph

logger = logging.getLogger(__name__)


class Relation(str, Enum):
    """How a new node relates to the selected node."""
    ROOT = "root"
    SIBLING = "sibling"
    CHILD = "child"


@dataclass(frozen=True)
class Placement:
    """Where a new node goes in the tree."""
    parent_id: str | None
    depth: int
    relation: Relation


def resolve_placement(
    graph: TechniqueGraph,
    declared_type: NodeType,
    selected_node_id: str | None,
) -> Placement:
    """Compute parent and depth for a node of ``declared_type``.

    Pure function of the graph snapshot, the declared type and the selection.

    Raises:
        SelectedNodeMissingError: If a selection is set but no longer resolves,
            or a sibling placement would hang off a parent that is gone
    """
    declared_type = NodeType(declared_type)

    if selected_node_id is None or declared_type == ROOT_TYPE:
        return Placement(parent_id=None, depth=0, relation=Relation.ROOT)

    selected = graph.get_node(selected_node_id)
    if selected is None:
        raise SelectedNodeMissingError(f"Selected node {selected_node_id} does not exist")

    if selected.node_type == declared_type:
        # Orphans kept from a snapshot have no parent to share
        if selected.parent_id is not None and not graph.has_node(selected.parent_id):
            raise SelectedNodeMissingError(
                f"Parent {selected.parent_id} of selected node {selected.id} does not exist"
            )
        placement = Placement(
            parent_id=selected.parent_id,
            depth=selected.depth,
            relation=Relation.SIBLING,
        )
    else:
        placement = Placement(
            parent_id=selected.id,
            depth=selected.depth + 1,
            relation=Relation.CHILD,
        )

    logger.debug(
        f"Resolved {declared_type.value} relative to {selected.id}: "
        f"{placement.relation.value} (parent={placement.parent_id}, depth={placement.depth})"
    )
    return placement
