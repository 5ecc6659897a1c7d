"""Unit tests for the techtree CLI."""

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from techtree import __version__
from techtree.cli import app

runner = CliRunner()


class TestCLI:
    """Exercise commands against a temporary store."""

    @pytest.fixture
    def workspace(self, tmp_path):
        store = tmp_path / "store"
        config = tmp_path / "missing-config.json"
        return ["--store", str(store), "--config", str(config)], store

    def invoke(self, args, workspace):
        options, _ = workspace
        return runner.invoke(app, args + options)

    def selected(self, store: Path) -> str:
        session = json.loads((store / "session.json").read_text(encoding="utf-8"))
        return session["selectedNodeId"]

    def nodes(self, workspace):
        result = self.invoke(["show", "--format", "json"], workspace)
        assert result.exit_code == 0
        return json.loads(result.stdout)["nodes"]

    def test_version(self):
        """Test --version prints the package version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_verbose_flag_reaches_commands(self, workspace):
        """Test --verbose on the app switches a command's logging to debug."""
        options, _ = workspace
        result = runner.invoke(app, ["--verbose", "show"] + options)
        assert result.exit_code == 0
        assert logging.getLogger().level == logging.DEBUG

        self.invoke(["show"], workspace)
        assert logging.getLogger().level == logging.WARNING

    def test_init_creates_store(self, workspace):
        """Test init creates the store directory with a session file."""
        _, store = workspace
        result = self.invoke(["init"], workspace)
        assert result.exit_code == 0
        assert (store / "session.json").exists()

    def test_add_builds_tree(self, workspace):
        """Test successive adds place roots, siblings and children."""
        _, store = workspace
        assert self.invoke(["add", "variant", "Closed Guard"], workspace).exit_code == 0
        root = self.selected(store)
        assert self.invoke(["add", "myMove", "Hip Bump"], workspace).exit_code == 0
        hip = self.selected(store)
        assert self.invoke(["add", "myMove", "Scissor Sweep"], workspace).exit_code == 0
        result = self.invoke(["add", "outcome", "Mount", "--clip", "https://youtu.be/dQw4w9WgXcQ",
                              "--start", "3", "--end", "8"], workspace)
        assert result.exit_code == 0

        nodes = {n["label"]: n for n in self.nodes(workspace)}
        assert nodes["Closed Guard"]["id"] == root
        assert nodes["Closed Guard"]["position"] == {"x": 200.0, "y": 80.0}
        assert nodes["Hip Bump"]["parentId"] == root
        assert nodes["Scissor Sweep"]["parentId"] == root
        assert nodes["Scissor Sweep"]["depth"] == 1
        assert nodes["Mount"]["parentId"] == nodes["Scissor Sweep"]["id"]
        assert nodes["Mount"]["media"]["sourceId"] == "dQw4w9WgXcQ"
        assert hip != nodes["Scissor Sweep"]["id"]

    def test_select_changes_anchor(self, workspace):
        """Test select moves the anchor for the next add."""
        _, store = workspace
        self.invoke(["add", "variant", "Closed Guard"], workspace)
        root = self.selected(store)
        self.invoke(["add", "myMove", "Hip Bump"], workspace)

        result = self.invoke(["select", root], workspace)
        assert result.exit_code == 0
        self.invoke(["add", "opponentMove", "Posture Up"], workspace)

        nodes = {n["label"]: n for n in self.nodes(workspace)}
        assert nodes["Posture Up"]["parentId"] == root

    def test_select_unknown_keeps_selection(self, workspace):
        """Test selecting an unknown id leaves the saved selection alone."""
        _, store = workspace
        self.invoke(["add", "variant", "Closed Guard"], workspace)
        root = self.selected(store)

        result = self.invoke(["select", "ghost"], workspace)
        assert result.exit_code == 0
        assert "selection unchanged" in result.stdout
        assert self.selected(store) == root

    def test_connect_and_export(self, workspace, tmp_path):
        """Test manual edges show up in Mermaid and JSON exports."""
        _, store = workspace
        self.invoke(["add", "variant", "Closed Guard"], workspace)
        first = self.selected(store)
        self.invoke(["add", "variant", "Mount"], workspace)
        second = self.selected(store)

        assert self.invoke(["connect", second, first], workspace).exit_code == 0

        result = self.invoke(["export", "--format", "mermaid"], workspace)
        assert result.exit_code == 0
        assert result.stdout.startswith("flowchart TD")
        assert f"n_{second} -.-> n_{first}" in result.stdout

        output = tmp_path / "out" / "tree.json"
        result = self.invoke(["export", "--format", "json", "--output", str(output)], workspace)
        assert result.exit_code == 0
        assert len(json.loads(output.read_text(encoding="utf-8"))["edges"]) == 1

    def test_connect_dangling(self, workspace):
        """Test connecting unknown nodes exits with an error."""
        self.invoke(["add", "variant", "Closed Guard"], workspace)
        result = self.invoke(["connect", "ghost", "other"], workspace)
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_corrupt_collection_file_reported(self, workspace):
        """Test a malformed collection file is reported instead of crashing."""
        _, store = workspace
        store.mkdir(parents=True)
        (store / "notes.json").write_text("[1, 2]", encoding="utf-8")

        result = self.invoke(["show"], workspace)
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_move_then_add_resets_position(self, workspace):
        """Test a manual move is overwritten by the next layout pass by default."""
        _, store = workspace
        self.invoke(["add", "variant", "Closed Guard"], workspace)
        root = self.selected(store)

        assert self.invoke(["move", root, "500", "450"], workspace).exit_code == 0
        # Loading the store is a layout pass in automatic mode
        self.invoke(["add", "variant", "Mount"], workspace)

        nodes = {n["label"]: n for n in self.nodes(workspace)}
        assert nodes["Closed Guard"]["position"] == {"x": 200.0, "y": 80.0}

    def test_pinned_move_with_config(self, tmp_path):
        """Test preserveManualPositions keeps moves until reorganize."""
        store = tmp_path / "store"
        config = tmp_path / ".techtree.json"
        config.write_text(json.dumps({"layout": {"preserveManualPositions": True}}), encoding="utf-8")
        options = ["--store", str(store), "--config", str(config)]

        runner.invoke(app, ["add", "variant", "Closed Guard"] + options)
        root = json.loads((store / "session.json").read_text(encoding="utf-8"))["selectedNodeId"]
        result = runner.invoke(app, ["move", root, "500", "450"] + options)
        assert result.exit_code == 0
        assert "Pinned" in result.stdout

        nodes = json.loads(runner.invoke(app, ["show", "--format", "json"] + options).stdout)["nodes"]
        assert nodes[0]["position"] == {"x": 500.0, "y": 450.0}

        assert runner.invoke(app, ["reorganize"] + options).exit_code == 0
        nodes = json.loads(runner.invoke(app, ["show", "--format", "json"] + options).stdout)["nodes"]
        assert nodes[0]["position"] == {"x": 200.0, "y": 80.0}
        assert nodes[0]["pinned"] is False

    def test_annotate_flag_cleared_by_add(self, workspace):
        """Test annotation mode persists between commands until the next add."""
        _, store = workspace
        assert self.invoke(["annotate"], workspace).exit_code == 0
        session = json.loads((store / "session.json").read_text(encoding="utf-8"))
        assert session["annotationMode"] is True

        self.invoke(["add", "variant", "Closed Guard"], workspace)
        session = json.loads((store / "session.json").read_text(encoding="utf-8"))
        assert session["annotationMode"] is False

    def test_invalid_type(self, workspace):
        """Test an unknown node type is rejected."""
        result = self.invoke(["add", "guillotine", "Guillotine"], workspace)
        assert result.exit_code != 0

    def test_clip_requires_offsets(self, workspace):
        """Test --clip without offsets is rejected."""
        result = self.invoke(["add", "variant", "Closed Guard", "--clip", "dQw4w9WgXcQ"], workspace)
        assert result.exit_code == 1
        assert "--start and --end" in result.stdout

    def test_show_table_and_empty(self, workspace):
        """Test table output for empty and populated stores."""
        result = self.invoke(["show"], workspace)
        assert result.exit_code == 0
        assert "No nodes yet" in result.stdout

        self.invoke(["add", "variant", "Closed Guard"], workspace)
        result = self.invoke(["show"], workspace)
        assert result.exit_code == 0
        assert "Closed Guard" in result.stdout

    def test_show_invalid_format(self, workspace):
        """Test show rejects unknown formats."""
        result = self.invoke(["show", "--format", "xml"], workspace)
        assert result.exit_code == 1
        assert "Invalid format" in result.stdout

    def test_video_id(self):
        """Test video-id prints the extracted id."""
        result = runner.invoke(app, ["video-id", "https://www.youtube.com/watch?v=dQw4w9WgXcQ"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "dQw4w9WgXcQ"
