"""Technique graph core: model, relationship resolver, layout and controller."""

from .controller import GraphController, GraphView
from .framework import GraphRenderer, JsonRenderer, get_renderer
from .layout import TreeLayoutEngine, compute_layout
from .mermaid import MermaidRenderer
from .models import ROOT_TYPE, NodeType, Position, TechniqueGraph, TreeEdge, TreeNode
from .resolver import Placement, Relation, resolve_placement

__all__ = [
    "GraphController",
    "GraphView",
    "GraphRenderer",
    "JsonRenderer",
    "MermaidRenderer",
    "get_renderer",
    "TreeLayoutEngine",
    "compute_layout",
    "ROOT_TYPE",
    "NodeType",
    "Position",
    "TechniqueGraph",
    "TreeEdge",
    "TreeNode",
    "Placement",
    "Relation",
    "resolve_placement",
]
