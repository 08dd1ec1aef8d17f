"""Node kinds and the registry that dispatches on them.

A NodeKind is the complete description of one concrete node variant: its
types, its arity and the hooks that evaluate, print and copy its per-node
state. Nodes never subclass anything; they carry a kind and a payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, TYPE_CHECKING
import copy
import logging

from gptree.expression.errors import (
    KindRegistrationError,
    PreconditionViolation,
    UnknownKindError,
)
from gptree.expression.types import FactoryType, MAX_ARITY, NodeType

if TYPE_CHECKING:
    from gptree.expression.nodes import ExpressionNode

logger = logging.getLogger(__name__)


def _empty_text(payload: Any) -> str:
    return ""


def _no_payload(rng: Any = None, **kwargs: Any) -> None:
    if kwargs:
        raise PreconditionViolation(
            f"Kind takes no payload arguments, got: {sorted(kwargs)}"
        )
    return None


@dataclass(frozen=True)
class NodeKind:
    """Description of a concrete node variant.

    Attributes:
        name: Unique tag of the kind (e.g. "add", "const")
        return_type: Type the node yields when evaluated
        child_type: Type every attached child must return
        arity: Number of child slots (0 for terminals, up to 3)
        evaluate: Computes the node's value from the node handle
        to_string: Node's own text from its payload
        clone_basics: Copies the per-node payload for replication
        pre_process: Refreshes external data held in the payload, only set
            for time-series kinds
        make_payload: Builds fresh payload for a new node
    """

    name: str
    return_type: NodeType
    child_type: NodeType
    arity: int
    evaluate: Callable[["ExpressionNode"], Any] | None = None
    to_string: Callable[[Any], str] = _empty_text
    clone_basics: Callable[[Any], Any] = copy.copy
    pre_process: Callable[[Any], None] | None = None
    make_payload: Callable[..., Any] = field(default=_no_payload, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise KindRegistrationError("Node kind needs a non-empty name")
        if not isinstance(self.return_type, NodeType) or not isinstance(self.child_type, NodeType):
            raise KindRegistrationError(f"Kind '{self.name}' has invalid node types")
        if not 0 <= self.arity <= MAX_ARITY:
            raise KindRegistrationError(
                f"Kind '{self.name}' has arity {self.arity}, must be 0..{MAX_ARITY}"
            )
        if self.evaluate is None or not callable(self.evaluate):
            raise KindRegistrationError(
                f"Kind '{self.name}' must supply a {self.return_type.name} evaluator"
            )
        for hook in ("to_string", "clone_basics", "make_payload"):
            if not callable(getattr(self, hook)):
                raise KindRegistrationError(f"Kind '{self.name}' hook {hook} is not callable")
        if self.pre_process is not None and not callable(self.pre_process):
            raise KindRegistrationError(f"Kind '{self.name}' hook pre_process is not callable")

    @property
    def is_terminal(self) -> bool:
        return self.arity == 0

    @property
    def is_time_series(self) -> bool:
        """Check if nodes of this kind read an external data window."""
        return self.pre_process is not None


def boolean_kind(name: str, arity: int, evaluate: Callable[["ExpressionNode"], Any], **hooks: Any) -> NodeKind:
    """Create a kind returning Boolean over Boolean children."""
    return NodeKind(
        name=name,
        return_type=NodeType.BOOLEAN,
        child_type=NodeType.BOOLEAN,
        arity=arity,
        evaluate=evaluate,
        **hooks,
    )


def numeric_kind(name: str, arity: int, evaluate: Callable[["ExpressionNode"], Any], **hooks: Any) -> NodeKind:
    """Create a kind returning Numeric over Numeric children."""
    return NodeKind(
        name=name,
        return_type=NodeType.NUMERIC,
        child_type=NodeType.NUMERIC,
        arity=arity,
        evaluate=evaluate,
        **hooks,
    )


class KindRegistry:
    """Dispatch table mapping kind names to NodeKind descriptions."""

    def __init__(self, kinds: list[NodeKind] | None = None) -> None:
        self._kinds: dict[str, NodeKind] = {}
        for kind in kinds or []:
            self.register(kind)

    def register(self, kind: NodeKind, replace: bool = False) -> NodeKind:
        """Register a kind under its name.

        Args:
            kind: Kind to register
            replace: Allow overwriting a kind with the same name

        Returns:
            The registered kind
        """
        if not isinstance(kind, NodeKind):
            raise KindRegistrationError(f"Expected NodeKind, got {type(kind).__name__}")
        if kind.name in self._kinds:
            if not replace:
                raise KindRegistrationError(f"Kind '{kind.name}' is already registered")
            logger.warning(f"Overwriting existing node kind: {kind.name}")
        self._kinds[kind.name] = kind
        return kind

    def get(self, name: str) -> NodeKind:
        try:
            return self._kinds[name]
        except KeyError:
            raise UnknownKindError(f"Unknown node kind: {name}") from None

    def names(self) -> list[str]:
        return list(self._kinds)

    def kinds_for(
        self,
        node_type: NodeType,
        factory_type: FactoryType = FactoryType.ALL,
    ) -> list[NodeKind]:
        """Get registered kinds returning node_type, filtered by factory_type."""
        return [
            kind for kind in self._kinds.values()
            if kind.return_type == node_type and factory_type.admits(kind.arity)
        ]

    def copy(self) -> "KindRegistry":
        """Create an independent registry with the same kinds."""
        return KindRegistry(list(self._kinds.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __iter__(self) -> Iterator[NodeKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)
