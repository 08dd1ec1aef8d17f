"""Arena storage for expression nodes.

Nodes are records in a flat list addressed by index. Parent and child links
are indices too, so a parent reference never owns anything. Handles carry
the slot's generation, which is bumped whenever the slot is released, so a
handle to a destroyed node is always detected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator
import logging

from gptree.config import ExpressionConfig
from gptree.expression.errors import PreconditionViolation
from gptree.expression.kinds import NodeKind
from gptree.expression.nodes import ExpressionNode
from gptree.expression.types import ParentLink

logger = logging.getLogger(__name__)


@dataclass
class NodeRecord:
    """Storage for a single node.

    Attributes:
        kind: Node kind (types, arity, hooks)
        payload: Per-node state owned by the kind's hooks
        parent: Index of the owning node, None for a root
        parent_link: Slot this node occupies in its parent
        children: Child indices for the LEFT, CENTER and RIGHT slots
    """

    kind: NodeKind
    payload: Any = None
    parent: int | None = None
    parent_link: ParentLink = ParentLink.NONE
    children: list[int | None] = field(default_factory=lambda: [None, None, None])


@dataclass
class ArenaStats:
    """Allocation counters for an arena."""

    allocated: int = 0
    released: int = 0

    @property
    def live(self) -> int:
        return self.allocated - self.released


class NodeArena:
    """Owns every node record of one or more trees.

    An arena is not thread-safe. Trees that are used from different threads
    should live in different arenas (see ExpressionNode.replicate).
    """

    def __init__(self, config: ExpressionConfig | None = None) -> None:
        self.config = config or ExpressionConfig()
        self.stats = ArenaStats()
        self._records: list[NodeRecord | None] = []
        self._generations: list[int] = []
        self._free: list[int] = []

    def allocate(self, kind: NodeKind, payload: Any = None) -> ExpressionNode:
        """Create a standalone node (no parent, no children)."""
        record = NodeRecord(kind=kind, payload=payload)
        if self.config.reuse_slots and self._free:
            index = self._free.pop()
            self._records[index] = record
        else:
            index = len(self._records)
            self._records.append(record)
            self._generations.append(0)
        self.stats.allocated += 1
        return ExpressionNode(self, index, self._generations[index])

    def record(self, index: int, generation: int) -> NodeRecord:
        """Get the record behind a handle, rejecting stale handles."""
        if 0 <= index < len(self._records):
            record = self._records[index]
            if record is not None and self._generations[index] == generation:
                return record
        raise PreconditionViolation(f"Node handle {index}@{generation} is no longer alive")

    def handle(self, index: int) -> ExpressionNode:
        """Get a handle for a live slot."""
        if self._records[index] is None:
            raise PreconditionViolation(f"Arena slot {index} is empty")
        return ExpressionNode(self, index, self._generations[index])

    def destroy(self, node: ExpressionNode) -> int:
        """Destroy a root node together with every node it owns.

        Returns:
            Number of nodes released
        """
        if node.arena is not self:
            raise PreconditionViolation("Node belongs to a different arena")
        record = node._record()
        if record.parent is not None:
            raise PreconditionViolation(
                f"Only a root can be destroyed; detach '{record.kind.name}' from its parent first"
            )
        released = self._release_subtree(node.index)
        logger.debug(f"Destroyed tree rooted at {node.index}: {released} nodes released")
        return released

    def _release_subtree(self, index: int) -> int:
        record = self._records[index]
        released = 0
        for child in record.children:
            if child is not None:
                released += self._release_subtree(child)
        self._records[index] = None
        self._generations[index] += 1
        if self.config.reuse_slots:
            self._free.append(index)
        self.stats.released += 1
        return released + 1

    def roots(self) -> list[ExpressionNode]:
        """Get handles for every live node without a parent."""
        return [
            ExpressionNode(self, index, self._generations[index])
            for index, record in enumerate(self._records)
            if record is not None and record.parent is None
        ]

    def __iter__(self) -> Iterator[ExpressionNode]:
        for index, record in enumerate(self._records):
            if record is not None:
                yield ExpressionNode(self, index, self._generations[index])

    def __contains__(self, node: object) -> bool:
        return isinstance(node, ExpressionNode) and node.arena is self and node.is_alive()

    def __len__(self) -> int:
        return self.stats.live

    def __repr__(self) -> str:
        return f"NodeArena(live={self.stats.live}, capacity={len(self._records)})"
