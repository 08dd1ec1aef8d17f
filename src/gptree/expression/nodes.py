"""Expression nodes for genetic programming.

An ExpressionNode is a handle onto a record in a NodeArena. All tree
structure (parent back-references, the three child slots) lives in the
arena; the handle adds the typed operations on top:
- Attachment with type and slot checks (add_left, add_center, add_right)
- Evaluation (evaluate_boolean, evaluate_numeric, pre_process)
- Replication (deep copy of a subtree)
- Textual dump (tree_to_string)
"""

from __future__ import annotations

from typing import Any, Iterator, TYPE_CHECKING
import hashlib
import logging

from gptree.expression.errors import EvaluatorNotImplemented, PreconditionViolation
from gptree.expression.types import CHILD_LINKS, NodeType, ParentLink, allowed_links

if TYPE_CHECKING:
    from gptree.expression.arena import NodeArena, NodeRecord
    from gptree.expression.kinds import NodeKind

logger = logging.getLogger(__name__)


class ExpressionNode:
    """Typed node of an expression tree.

    Handles are cheap and compare equal when they refer to the same live
    node. A handle whose node was destroyed raises PreconditionViolation on
    every access.
    """

    __slots__ = ("_arena", "_index", "_generation")

    def __init__(self, arena: "NodeArena", index: int, generation: int) -> None:
        self._arena = arena
        self._index = index
        self._generation = generation

    def _record(self) -> "NodeRecord":
        return self._arena.record(self._index, self._generation)

    # ------------------------------------------------------------------
    # Identity and typing
    # ------------------------------------------------------------------

    @property
    def arena(self) -> "NodeArena":
        return self._arena

    @property
    def index(self) -> int:
        return self._index

    @property
    def kind(self) -> "NodeKind":
        return self._record().kind

    @property
    def name(self) -> str:
        return self.kind.name

    @property
    def payload(self) -> Any:
        """Per-node state (constant value, data window, ...)."""
        return self._record().payload

    @property
    def return_type(self) -> NodeType:
        return self.kind.return_type

    @property
    def child_type(self) -> NodeType:
        return self.kind.child_type

    @property
    def arity(self) -> int:
        return self.kind.arity

    def is_alive(self) -> bool:
        try:
            self._record()
        except PreconditionViolation:
            return False
        return True

    def is_terminal(self) -> bool:
        return self.arity == 0

    def node_count(self) -> int:
        """Get the declared number of child slots.

        This is the capacity of the node, not the number of children
        currently attached; see attached_count().
        """
        return self.arity

    def declared_arity(self) -> int:
        return self.arity

    def attached_count(self) -> int:
        """Get the number of child slots currently filled."""
        return sum(1 for child in self._record().children if child is not None)

    def is_complete(self) -> bool:
        """Check if every declared slot holds a child."""
        return self.attached_count() == self.arity

    def is_time_series(self) -> bool:
        return self.kind.is_time_series

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def parent_link(self) -> ParentLink:
        """Slot this node occupies in its parent (NONE for a root)."""
        return self._record().parent_link

    def has_parent(self) -> bool:
        return self._record().parent is not None

    def is_root(self) -> bool:
        return not self.has_parent()

    @property
    def parent(self) -> "ExpressionNode":
        parent = self._record().parent
        if parent is None:
            raise PreconditionViolation(f"Node '{self.name}' has no parent")
        return self._arena.handle(parent)

    def root(self) -> "ExpressionNode":
        """Get the root of the tree containing this node."""
        node = self
        while node.has_parent():
            node = node.parent
        return node

    def get_child(self, link: ParentLink) -> "ExpressionNode | None":
        """Get the child in the given slot, or None if the slot is empty."""
        index = self._record().children[link.slot_index]
        if index is None:
            return None
        return self._arena.handle(index)

    def _require_child(self, link: ParentLink) -> "ExpressionNode":
        child = self.get_child(link)
        if child is None:
            raise PreconditionViolation(f"Node '{self.name}' has no {link.name.lower()} child")
        return child

    @property
    def child_left(self) -> "ExpressionNode":
        return self._require_child(ParentLink.LEFT)

    @property
    def child_center(self) -> "ExpressionNode":
        return self._require_child(ParentLink.CENTER)

    @property
    def child_right(self) -> "ExpressionNode":
        return self._require_child(ParentLink.RIGHT)

    def children(self) -> list["ExpressionNode"]:
        """Get attached children in LEFT, CENTER, RIGHT order."""
        return [
            self._arena.handle(index)
            for index in self._record().children
            if index is not None
        ]

    # ------------------------------------------------------------------
    # Attachment and surgery
    # ------------------------------------------------------------------

    def add_left(self, node: "ExpressionNode") -> "ExpressionNode":
        """Attach a standalone node as left operand (binary kinds)."""
        return self._attach(ParentLink.LEFT, node)

    def add_center(self, node: "ExpressionNode") -> "ExpressionNode":
        """Attach a standalone node as the single operand (unary kinds)."""
        return self._attach(ParentLink.CENTER, node)

    def add_right(self, node: "ExpressionNode") -> "ExpressionNode":
        """Attach a standalone node as right operand (binary kinds)."""
        return self._attach(ParentLink.RIGHT, node)

    def _check_attachable(self, link: ParentLink, node: "ExpressionNode") -> None:
        """Validate an attach of node into link; mutates nothing."""
        record = self._record()
        child_record = node._record()
        kind = record.kind

        if node._arena is not self._arena:
            raise PreconditionViolation("Cannot attach a node from a different arena")
        if link not in allowed_links(kind.arity):
            raise PreconditionViolation(
                f"Slot {link.name} is not valid for '{kind.name}' (arity {kind.arity})"
            )
        if record.children[link.slot_index] is not None:
            raise PreconditionViolation(f"Slot {link.name} of '{kind.name}' is already occupied")
        if child_record.parent is not None:
            raise PreconditionViolation(
                f"Node '{child_record.kind.name}' already has a parent; detach it first"
            )
        if node == self or node == self.root():
            raise PreconditionViolation(
                f"Attaching '{child_record.kind.name}' to '{kind.name}' would create a cycle"
            )
        if child_record.kind.return_type != kind.child_type:
            raise PreconditionViolation(
                f"'{kind.name}' takes {kind.child_type.name} children, "
                f"'{child_record.kind.name}' returns {child_record.kind.return_type.name}"
            )

    def _attach(self, link: ParentLink, node: "ExpressionNode") -> "ExpressionNode":
        self._check_attachable(link, node)
        child_record = node._record()
        self._record().children[link.slot_index] = node._index
        child_record.parent = self._index
        child_record.parent_link = link
        return node

    def detach(self) -> "ExpressionNode":
        """Remove this node from its parent; it becomes a standalone root.

        Returns:
            This node
        """
        record = self._record()
        if record.parent is None:
            raise PreconditionViolation(f"Node '{record.kind.name}' is not attached")
        parent_record = self.parent._record()
        parent_record.children[record.parent_link.slot_index] = None
        record.parent = None
        record.parent_link = ParentLink.NONE
        return self

    def replace_with(self, node: "ExpressionNode") -> "ExpressionNode":
        """Put a standalone node into this node's slot.

        Returns:
            This node, now detached and standalone
        """
        record = self._record()
        if record.parent is None:
            raise PreconditionViolation(f"Node '{record.kind.name}' is a root and has no slot")
        parent = self.parent
        link = record.parent_link
        node_record = node._record()
        if node._arena is not self._arena:
            raise PreconditionViolation("Cannot attach a node from a different arena")
        if node == self or node == self.root():
            raise PreconditionViolation(
                f"Replacing '{record.kind.name}' with '{node_record.kind.name}' would create a cycle"
            )
        if node_record.parent is not None:
            raise PreconditionViolation(
                f"Node '{node_record.kind.name}' already has a parent; detach it first"
            )
        if node_record.kind.return_type != parent.child_type:
            raise PreconditionViolation(
                f"'{parent.name}' takes {parent.child_type.name} children, "
                f"'{node_record.kind.name}' returns {node_record.kind.return_type.name}"
            )
        self.detach()
        parent._attach(link, node)
        return self

    def destroy(self) -> int:
        """Destroy this root and every node it owns.

        Returns:
            Number of nodes released
        """
        return self._arena.destroy(self)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_boolean(self) -> bool:
        """Evaluate the subtree rooted here as a Boolean."""
        kind = self.kind
        if kind.return_type is not NodeType.BOOLEAN:
            raise EvaluatorNotImplemented(
                f"Kind '{kind.name}' returns {kind.return_type.name}; no Boolean evaluator"
            )
        return bool(kind.evaluate(self))

    def evaluate_numeric(self) -> float:
        """Evaluate the subtree rooted here as a Numeric."""
        kind = self.kind
        if kind.return_type is not NodeType.NUMERIC:
            raise EvaluatorNotImplemented(
                f"Kind '{kind.name}' returns {kind.return_type.name}; no Numeric evaluator"
            )
        return float(kind.evaluate(self))

    def evaluate(self) -> bool | float:
        """Evaluate with the accessor matching this node's return type."""
        if self.return_type is NodeType.BOOLEAN:
            return self.evaluate_boolean()
        return self.evaluate_numeric()

    def pre_process(self) -> None:
        """Refresh the external data window of a time-series node.

        No-op for every other node.
        """
        record = self._record()
        if record.kind.pre_process is not None:
            record.kind.pre_process(record.payload)

    # ------------------------------------------------------------------
    # Replication and serialization
    # ------------------------------------------------------------------

    def replicate(self, into: "NodeArena | None" = None) -> "ExpressionNode":
        """Deep copy the subtree rooted at this node.

        Args:
            into: Arena receiving the copy (defaults to this node's arena)

        Returns:
            Root of the copy, with no parent
        """
        arena = into if into is not None else self._arena
        record = self._record()
        replica = arena.allocate(record.kind, record.kind.clone_basics(record.payload))
        try:
            for link in CHILD_LINKS:
                child = self.get_child(link)
                if child is not None:
                    replica._attach(link, child.replicate(arena))
        except Exception:
            # Partial copies are released so the arena never holds orphans
            arena.destroy(replica)
            raise
        return replica

    def to_string(self) -> str:
        """Get this node's own text."""
        record = self._record()
        return record.kind.to_string(record.payload)

    def tree_to_string(self) -> str:
        """Dump the subtree in pre-order.

        Terminals emit their own text. Other nodes emit
        "(" + own text and child dumps (LEFT, CENTER, RIGHT) joined by a
        space + ")". Tokens come from the arena's ExpressionConfig.
        """
        config = self._arena.config
        parts = [self.to_string()]
        parts.extend(child.tree_to_string() for child in self.children())
        body = config.separator.join(part for part in parts if part)
        if self.is_terminal():
            return body
        return f"{config.open_token}{body}{config.close_token}"

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExpressionNode):
            return NotImplemented
        return (
            self._arena is other._arena
            and self._index == other._index
            and self._generation == other._generation
        )

    def __hash__(self) -> int:
        return hash((id(self._arena), self._index, self._generation))

    def __str__(self) -> str:
        return self.tree_to_string()

    def __repr__(self) -> str:
        if not self.is_alive():
            return f"ExpressionNode(<destroyed {self._index}@{self._generation}>)"
        return (
            f"ExpressionNode({self.name}, return_type={self.return_type.name}, "
            f"arity={self.arity}, link={self.parent_link.name})"
        )


def count_nodes(node: ExpressionNode) -> int:
    """Count total nodes in a subtree."""
    return 1 + sum(count_nodes(c) for c in node.children())


def get_depth(node: ExpressionNode) -> int:
    """Get the depth of a subtree."""
    children = node.children()
    if children:
        return 1 + max(get_depth(c) for c in children)
    return 1


def collect_nodes(node: ExpressionNode) -> list[ExpressionNode]:
    """Collect all nodes in a subtree (pre-order traversal)."""
    result = [node]
    for child in node.children():
        result.extend(collect_nodes(child))
    return result


def collect_nodes_by_type(node: ExpressionNode, target_type: NodeType) -> list[ExpressionNode]:
    """Collect all nodes returning the specified type."""
    return [n for n in collect_nodes(node) if n.return_type == target_type]


def iter_time_series(node: ExpressionNode) -> Iterator[ExpressionNode]:
    """Yield the time-series nodes of a subtree in pre-order."""
    for n in collect_nodes(node):
        if n.is_time_series():
            yield n


def pre_process_tree(root: ExpressionNode) -> int:
    """Preprocess every time-series node of a tree once.

    Call once per evaluation epoch, before evaluating the tree.

    Returns:
        Number of nodes preprocessed
    """
    count = 0
    for node in iter_time_series(root):
        node.pre_process()
        count += 1
    if count:
        logger.debug(f"Preprocessed {count} time-series nodes under '{root.name}'")
    return count


def tree_hash(root: ExpressionNode) -> str:
    """Get a short fingerprint of the tree dump for logs and diagnostics.

    Constants are printed with limited precision, so distinct trees can
    share a fingerprint; it is not an identity key.
    """
    return hashlib.md5(root.tree_to_string().encode()).hexdigest()[:12]
