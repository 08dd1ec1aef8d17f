"""
gptree: typed expression trees for genetic programming.

Provides the node model a GP engine evolves:
- Strongly-typed nodes (Boolean / Numeric) with checked parent/child links
- Deep replication of subtrees into independent trees
- Evaluation, time-series preprocessing and a stable textual dump
"""

__version__ = "0.1.0"

from gptree.config import ExpressionConfig
from gptree.expression.arena import NodeArena
from gptree.expression.factory import NodeFactory
from gptree.expression.nodes import ExpressionNode
from gptree.expression.types import NodeType, ParentLink

__all__ = [
    "__version__",
    "ExpressionConfig",
    "NodeArena",
    "NodeFactory",
    "ExpressionNode",
    "NodeType",
    "ParentLink",
]
