"""Renderer framework for technique graph views."""

import json
import logging
from abc import ABC, abstractmethod

from .controller import GraphView

logger = logging.getLogger(__name__)


class GraphRenderer(ABC):
    """Abstract base class for graph renderers."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the output format."""
        pass

    @abstractmethod
    def render(self, view: GraphView) -> str:
        """Render a graph view to string format."""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format."""
        pass


class JsonRenderer(GraphRenderer):
    """Dump nodes, edges and positions as JSON."""

    @property
    def format_name(self) -> str:
        return "json"

    def get_file_extension(self) -> str:
        return ".json"

    def render(self, view: GraphView) -> str:
        nodes = []
        for node in view.nodes:
            nodes.append({
                "id": node.id,
                "label": node.label,
                "nodeType": node.node_type.value,
                "parentId": node.parent_id,
                "depth": node.depth,
                "position": {"x": node.position.x, "y": node.position.y} if node.position else None,
                "media": node.media.model_dump(by_alias=True) if node.media else None,
                "pinned": node.pinned,
            })

        data = {
            "selectedNodeId": view.selected_node_id,
            "nodes": nodes,
            "edges": [
                {"id": edge.id, "source": edge.source, "target": edge.target}
                for edge in view.edges
            ],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)


def get_renderer(format_name: str) -> GraphRenderer:
    """Look up a renderer by format name.

    Raises:
        ValueError: If the format is unknown
    """
    from .mermaid import MermaidRenderer

    renderers = {r.format_name: r for r in (MermaidRenderer(), JsonRenderer())}
    if format_name not in renderers:
        raise ValueError(
            f"Unknown format: '{format_name}'. Supported: {', '.join(sorted(renderers))}"
        )
    return renderers[format_name]
