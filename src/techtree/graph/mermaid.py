"""Mermaid flowchart renderer for technique trees."""

import logging
import re

from .controller import GraphView
from .framework import GraphRenderer
from .models import NodeType, TreeEdge, TreeNode

logger = logging.getLogger(__name__)

NODE_STYLES = {
    NodeType.VARIANT: "fill:#e1f5fe,stroke:#01579b,stroke-width:2px",
    NodeType.MY_MOVE: "fill:#e8f5e9,stroke:#2e7d32",
    NodeType.OPPONENT_MOVE: "fill:#fff3e0,stroke:#e65100",
    NodeType.OUTCOME: "fill:#fce4ec,stroke:#ad1457",
}


class MermaidRenderer(GraphRenderer):
    """Mermaid diagram renderer for technique trees."""

    @property
    def format_name(self) -> str:
        return "mermaid"

    def get_file_extension(self) -> str:
        return ".mmd"

    def render(self, view: GraphView) -> str:
        """Render a graph view as a Mermaid flowchart."""
        lines = ["flowchart TD", ""]

        if view.nodes:
            lines.append("    %% Nodes")
            for node in view.nodes:
                lines.append(f"    {self._render_node(node)}")
            lines.append("")

        node_ids = {node.id for node in view.nodes}
        tree_edges = {(node.parent_id, node.id) for node in view.nodes if node.parent_id}
        if view.edges:
            lines.append("    %% Edges")
            for edge in view.edges:
                if edge.source in node_ids and edge.target in node_ids:
                    lines.append(f"    {self._render_edge(edge, (edge.source, edge.target) in tree_edges)}")
            lines.append("")

        lines.extend(self._render_styling(view))
        return "\n".join(lines)

    def _render_node(self, node: TreeNode) -> str:
        safe_id = self._get_safe_id(node.id)
        label = self._escape_label(node.label)
        if node.media:
            label += f" #91;{self._escape_label(node.media.source_id)}#93;"

        # Shape per type
        if node.node_type == NodeType.VARIANT:
            return f"{safe_id}{{{{{label}}}}}"
        elif node.node_type == NodeType.OUTCOME:
            return f"{safe_id}([{label}])"
        else:
            return f"{safe_id}({label})"

    def _render_edge(self, edge: TreeEdge, is_tree_edge: bool) -> str:
        arrow = "-->" if is_tree_edge else "-.->"
        return f"{self._get_safe_id(edge.source)} {arrow} {self._get_safe_id(edge.target)}"

    def _render_styling(self, view: GraphView) -> list:
        lines = []
        present = {node.node_type for node in view.nodes}
        if not present:
            return lines

        lines.append("    %% Styling")
        for node_type in NodeType:
            if node_type not in present:
                continue
            lines.append(f"    classDef {node_type.value} {NODE_STYLES[node_type]}")
            members = ",".join(
                self._get_safe_id(n.id) for n in view.nodes if n.node_type == node_type
            )
            lines.append(f"    class {members} {node_type.value}")

        if view.selected_node_id and any(n.id == view.selected_node_id for n in view.nodes):
            lines.append("    classDef selected stroke:#f9a825,stroke-width:4px")
            lines.append(f"    class {self._get_safe_id(view.selected_node_id)} selected")

        return lines

    def _get_safe_id(self, node_id: str) -> str:
        """Get ID safe for diagram rendering (alphanumeric + underscore)."""
        return "n_" + re.sub(r"[^a-zA-Z0-9_]", "_", node_id)

    def _escape_label(self, label: str) -> str:
        """Escape characters Mermaid treats as syntax."""
        return (
            label.replace('"', "#quot;")
            .replace("(", "#40;")
            .replace(")", "#41;")
            .replace("[", "#91;")
            .replace("]", "#93;")
            .replace("{", "#123;")
            .replace("}", "#125;")
        )
