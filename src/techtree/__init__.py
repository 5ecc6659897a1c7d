"""techtree - Build annotated grappling technique trees.

techtree infers parent, child and sibling relationships for new positions,
moves and outcomes, lays the resulting tree out on a canvas, and mirrors it to
a document store.
"""

__version__ = "0.1.0"
__description__ = "Annotated technique trees with relationship inference and tree layout"

from techtree.config import TechtreeConfig
from techtree.graph import GraphController, NodeType

__all__ = [
    "__version__",
    "__description__",
    "TechtreeConfig",
    "GraphController",
    "NodeType",
]
