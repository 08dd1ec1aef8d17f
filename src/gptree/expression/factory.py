"""Factory for standalone expression nodes.

The factory only builds single nodes; growing trees out of them is up to
the genetic-programming engine using it.
"""

from __future__ import annotations

from typing import Any
import logging
import random

from gptree.expression.arena import NodeArena
from gptree.expression.errors import UnknownKindError
from gptree.expression.kinds import KindRegistry, NodeKind
from gptree.expression.library import default_registry
from gptree.expression.nodes import ExpressionNode
from gptree.expression.types import FactoryType, NodeType

logger = logging.getLogger(__name__)


class NodeFactory:
    """Creates nodes of registered kinds in an arena."""

    def __init__(
        self,
        arena: NodeArena | None = None,
        registry: KindRegistry | None = None,
        seed: int | None = None,
    ):
        self.arena = arena if arena is not None else NodeArena()
        self.registry = registry if registry is not None else default_registry()
        self.rng = random.Random(seed)

    def create(self, kind_name: str, **payload_kwargs: Any) -> ExpressionNode:
        """Create a standalone node of the named kind.

        Args:
            kind_name: Registered kind name
            **payload_kwargs: Forwarded to the kind's make_payload
                (e.g. value=3.0 for "const")

        Returns:
            New node with no parent and no children
        """
        return self.build(self.registry.get(kind_name), **payload_kwargs)

    def build(self, kind: NodeKind, **payload_kwargs: Any) -> ExpressionNode:
        """Create a standalone node of the given kind."""
        payload = kind.make_payload(rng=self.rng, **payload_kwargs)
        return self.arena.allocate(kind, payload)

    def choose(
        self,
        node_type: NodeType,
        factory_type: FactoryType = FactoryType.ALL,
    ) -> ExpressionNode:
        """Create a node of a random kind returning node_type.

        Args:
            node_type: Required return type
            factory_type: Restrict to terminals, operators, or any kind

        Returns:
            New standalone node
        """
        candidates = self.registry.kinds_for(node_type, factory_type)
        if not candidates:
            raise UnknownKindError(
                f"No {factory_type.name.lower()} kinds return {node_type.name}"
            )
        kind = self.rng.choice(candidates)
        logger.debug(f"Chose kind '{kind.name}' for {node_type.name}/{factory_type.name}")
        return self.build(kind)
