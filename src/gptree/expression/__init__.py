"""Typed expression nodes for genetic programming."""

from gptree.expression.types import (
    CHILD_LINKS,
    FactoryType,
    NodeType,
    ParentLink,
    allowed_links,
)
from gptree.expression.errors import (
    EvaluatorNotImplemented,
    ExpressionError,
    KindRegistrationError,
    PreconditionViolation,
    UnknownKindError,
)
from gptree.expression.kinds import (
    KindRegistry,
    NodeKind,
    boolean_kind,
    numeric_kind,
)
from gptree.expression.nodes import (
    ExpressionNode,
    collect_nodes,
    collect_nodes_by_type,
    count_nodes,
    get_depth,
    pre_process_tree,
    tree_hash,
)
from gptree.expression.arena import ArenaStats, NodeArena
from gptree.expression.library import default_registry
from gptree.expression.timeseries import (
    SeriesPayload,
    SeriesSource,
    register_series_kinds,
    series_kinds,
)
from gptree.expression.factory import NodeFactory

__all__ = [
    "CHILD_LINKS",
    "FactoryType",
    "NodeType",
    "ParentLink",
    "allowed_links",
    "EvaluatorNotImplemented",
    "ExpressionError",
    "KindRegistrationError",
    "PreconditionViolation",
    "UnknownKindError",
    "KindRegistry",
    "NodeKind",
    "boolean_kind",
    "numeric_kind",
    "ExpressionNode",
    "collect_nodes",
    "collect_nodes_by_type",
    "count_nodes",
    "get_depth",
    "pre_process_tree",
    "tree_hash",
    "ArenaStats",
    "NodeArena",
    "default_registry",
    "SeriesPayload",
    "SeriesSource",
    "register_series_kinds",
    "series_kinds",
    "NodeFactory",
]
