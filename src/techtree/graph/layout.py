"""Level-by-level tree layout for the technique graph.

Roots are spread along a top row. Every other node is placed in a sibling
group centered under its parent, one vertical unit below the level above.
Levels are processed in depth order because a group can only be centered
once its parent has a position.
"""

import logging
from collections import defaultdict
from typing import AbstractSet, Dict, Iterable, List

from ..config import LayoutConfig
from .models import Position, TreeNode

logger = logging.getLogger(__name__)


class TreeLayoutEngine:
    """Computes deterministic positions for a set of tree nodes."""

    def __init__(self, settings: LayoutConfig | None = None):
        self.settings = settings or LayoutConfig()

    def row_y(self, depth: int) -> float:
        """Fixed y coordinate of a tree level."""
        return self.settings.origin_y + depth * self.settings.vertical_unit

    def root_x(self, index: int) -> float:
        """x coordinate of the index-th root in first-seen order."""
        s = self.settings
        return s.origin_x + index * s.horizontal_unit * s.root_spread

    def layout(
        self,
        nodes: Iterable[TreeNode],
        pinned: AbstractSet[str] = frozenset(),
    ) -> Dict[str, Position]:
        """Compute a position for every node.

        Args:
            nodes: Nodes with authoritative parent_id and depth, in insertion order
            pinned: Node ids whose current position must be kept

        Returns:
            Mapping of node id to position. Orphans keep their previous
            position; orphans without one are left out.
        """
        levels: Dict[int, List[TreeNode]] = defaultdict(list)
        for node in nodes:
            levels[node.depth].append(node)

        positions: Dict[str, Position] = {}
        if not levels:
            return positions

        for depth in range(0, max(levels) + 1):
            level = levels.get(depth, [])
            if depth == 0:
                self._place_roots(level, pinned, positions)
            else:
                self._place_level(depth, level, pinned, positions)

        return positions

    def _place_roots(
        self,
        roots: List[TreeNode],
        pinned: AbstractSet[str],
        positions: Dict[str, Position],
    ) -> None:
        y = self.row_y(0)
        for index, node in enumerate(roots):
            if node.id in pinned and node.position is not None:
                positions[node.id] = node.position
            else:
                positions[node.id] = Position(self.root_x(index), y)

    def _place_level(
        self,
        depth: int,
        level: List[TreeNode],
        pinned: AbstractSet[str],
        positions: Dict[str, Position],
    ) -> None:
        # dict keeps first-seen order of parents
        groups: Dict[str | None, List[TreeNode]] = {}
        for node in level:
            groups.setdefault(node.parent_id, []).append(node)

        unit = self.settings.horizontal_unit
        y = self.row_y(depth)

        for parent_id, children in groups.items():
            parent_position = positions.get(parent_id) if parent_id is not None else None
            if parent_position is None:
                self._keep_orphans(children, positions)
                continue

            span = (len(children) - 1) * unit
            start_x = parent_position.x - span / 2
            for index, child in enumerate(children):
                if child.id in pinned and child.position is not None:
                    positions[child.id] = child.position
                else:
                    positions[child.id] = Position(start_x + index * unit, y)

    def _keep_orphans(self, orphans: List[TreeNode], positions: Dict[str, Position]) -> None:
        for orphan in orphans:
            logger.debug(f"Node {orphan.id} has no placed parent {orphan.parent_id}; keeping its position")
            if orphan.position is not None:
                positions[orphan.id] = orphan.position


def compute_layout(
    nodes: Iterable[TreeNode],
    settings: LayoutConfig | None = None,
    pinned: AbstractSet[str] = frozenset(),
) -> Dict[str, Position]:
    """Convenience wrapper around TreeLayoutEngine.layout."""
    return TreeLayoutEngine(settings).layout(nodes, pinned)
