"""Shared fixtures for techtree tests."""

import itertools

import pytest

from techtree.config import LayoutConfig
from techtree.graph import GraphController, NodeType, TechniqueGraph, TreeEdge, TreeNode


@pytest.fixture
def sequential_ids():
    """Deterministic id factory: n1, n2, ..."""
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"


@pytest.fixture
def layout_settings():
    """Default layout constants (H=150, V=100, roots 600 apart)."""
    return LayoutConfig()


@pytest.fixture
def controller(layout_settings, sequential_ids):
    """Controller without a store."""
    return GraphController(layout_settings, id_factory=sequential_ids)


@pytest.fixture
def guard_tree():
    """Closed Guard -> Hip Bump (myMove) -> Mount (outcome)."""
    graph = TechniqueGraph()
    graph.add_node(TreeNode(id="root", label="Closed Guard", node_type=NodeType.VARIANT))
    graph.add_node(TreeNode(id="hip", label="Hip Bump", node_type=NodeType.MY_MOVE, parent_id="root", depth=1))
    graph.add_node(TreeNode(id="mount", label="Mount", node_type=NodeType.OUTCOME, parent_id="hip", depth=2))
    graph.add_edge(TreeEdge(id="e1", source="root", target="hip"))
    graph.add_edge(TreeEdge(id="e2", source="hip", target="mount"))
    return graph
