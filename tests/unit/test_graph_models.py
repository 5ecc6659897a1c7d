"""Unit tests for the technique graph model."""

import pytest

from techtree.errors import DanglingEndpointError, InvalidParentError
from techtree.graph.models import NodeType, Position, TechniqueGraph, TreeEdge, TreeNode
from techtree.models.records import MediaClip, PositionRecord


class TestAddNode:
    """Test node insertion invariants."""

    def test_add_root(self):
        """Test adding a root node."""
        graph = TechniqueGraph()
        graph.add_node(TreeNode(id="a", label="Closed Guard", node_type=NodeType.VARIANT))

        assert graph.has_node("a")
        assert graph.get_node("a").depth == 0
        assert [n.id for n in graph.roots()] == ["a"]

    def test_missing_parent_rejected(self):
        """Test a missing parent raises InvalidParentError."""
        graph = TechniqueGraph()
        with pytest.raises(InvalidParentError, match="does not exist"):
            graph.add_node(TreeNode(id="b", label="Sweep", node_type=NodeType.MY_MOVE, parent_id="ghost", depth=1))
        assert not graph.has_node("b")

    def test_depth_must_follow_parent(self, guard_tree):
        """Test child depth must be parent depth plus one."""
        with pytest.raises(InvalidParentError, match="expected 2"):
            guard_tree.add_node(TreeNode(id="x", label="Bad", node_type=NodeType.OUTCOME, parent_id="hip", depth=5))

    def test_root_depth_must_be_zero(self):
        """Test roots must have depth zero."""
        graph = TechniqueGraph()
        with pytest.raises(InvalidParentError):
            graph.add_node(TreeNode(id="a", label="Floating", node_type=NodeType.MY_MOVE, depth=2))

    def test_duplicate_id_rejected(self, guard_tree):
        """Test duplicate node ids are rejected."""
        with pytest.raises(ValueError, match="Duplicate node id"):
            guard_tree.add_node(TreeNode(id="root", label="Again", node_type=NodeType.VARIANT))

    def test_insertion_order_preserved(self, guard_tree):
        """Test nodes keep insertion order."""
        assert [n.id for n in guard_tree.nodes] == ["root", "hip", "mount"]


class TestAddEdge:
    """Test edge insertion invariants."""

    def test_dangling_source(self, guard_tree):
        """Test a missing source raises DanglingEndpointError."""
        with pytest.raises(DanglingEndpointError):
            guard_tree.add_edge(TreeEdge(id="e9", source="ghost", target="mount"))

    def test_dangling_target(self, guard_tree):
        """Test a missing target raises DanglingEndpointError."""
        with pytest.raises(DanglingEndpointError):
            guard_tree.add_edge(TreeEdge(id="e9", source="root", target="ghost"))

    def test_edges_from(self, guard_tree):
        """Test outgoing edge lookup."""
        assert [e.target for e in guard_tree.edges_from("root")] == ["hip"]
        assert guard_tree.edges_from("mount") == []


class TestReplaceAll:
    """Test wholesale snapshot replacement."""

    def test_drops_dangling_edges_keeps_orphans(self):
        """Test snapshots drop dangling edges but keep orphans."""
        graph = TechniqueGraph()
        nodes = [
            TreeNode(id="a", label="Mount", node_type=NodeType.VARIANT),
            TreeNode(id="c", label="Armbar", node_type=NodeType.OUTCOME, parent_id="deleted", depth=1),
        ]
        edges = [
            TreeEdge(id="e1", source="deleted", target="c"),
            TreeEdge(id="e2", source="a", target="c"),
        ]

        graph.replace_all(nodes, edges)

        assert [n.id for n in graph.nodes] == ["a", "c"]
        assert [e.id for e in graph.edges] == ["e2"]

    def test_replaces_previous_content(self, guard_tree):
        """Test a snapshot replaces earlier content."""
        guard_tree.replace_all([TreeNode(id="z", label="Turtle", node_type=NodeType.VARIANT)], [])
        assert [n.id for n in guard_tree.nodes] == ["z"]
        assert guard_tree.edges == []


class TestHelpers:
    """Test read helpers."""

    def test_children_and_depth(self, guard_tree):
        """Test child lookup and maximum depth."""
        assert [n.id for n in guard_tree.children_of("root")] == ["hip"]
        assert guard_tree.max_depth() == 2
        assert TechniqueGraph().max_depth() == 0

    def test_apply_positions_ignores_unknown(self, guard_tree):
        """Test positions for unknown ids are ignored."""
        guard_tree.apply_positions({"root": Position(1, 2), "ghost": Position(3, 4)})
        assert guard_tree.get_node("root").position == Position(1, 2)

    def test_copy_nodes_detached(self, guard_tree):
        """Test copied nodes do not alias graph nodes."""
        copies = guard_tree.copy_nodes()
        copies[0].label = "Changed"
        assert guard_tree.get_node("root").label == "Closed Guard"

    def test_statistics(self, guard_tree):
        """Test per-type counts."""
        stats = guard_tree.statistics()
        assert stats["variant"] == 1
        assert stats["outcome"] == 1
        assert "opponentMove" not in stats
        assert stats["nodes"] == 3
        assert stats["edges"] == 2
        assert stats["max_depth"] == 2


class TestRecords:
    """Test conversion to and from persisted records."""

    def test_node_record_uses_store_field_names(self):
        """Test node records serialize with store field names."""
        node = TreeNode(
            id="k",
            label="Kimura",
            node_type=NodeType.OUTCOME,
            parent_id="p",
            depth=3,
            media=MediaClip(source_id="dQw4w9WgXcQ", start_offset=1.5, end_offset=4.0),
            position=Position(10, 20),
        )

        fields = node.to_record().model_dump(by_alias=True, mode="json")

        assert fields["name"] == "Kimura"
        assert fields["nodeType"] == "outcome"
        assert fields["parentId"] == "p"
        assert fields["position"] == {"x": 10.0, "y": 20.0}
        assert fields["media"]["sourceId"] == "dQw4w9WgXcQ"
        assert isinstance(fields["createdAt"], str)

        restored = TreeNode.from_record("k", PositionRecord.model_validate(fields))
        assert restored == node

    def test_unknown_node_type_rejected(self):
        """Test records with unknown types are rejected."""
        record = PositionRecord(name="Odd", node_type="teleport")
        with pytest.raises(ValueError):
            TreeNode.from_record("x", record)
