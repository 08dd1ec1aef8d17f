"""Type system for strongly-typed expression nodes.

Node kinds declare the type they return and the type every child must
return; attachment is checked against these at tree-building time.
"""

from enum import Enum, auto


class NodeType(Enum):
    """Value types a node can yield."""

    BOOLEAN = auto()
    NUMERIC = auto()


class ParentLink(Enum):
    """Slot a node occupies in its parent."""

    NONE = 0
    LEFT = 1
    CENTER = 2
    RIGHT = 3

    @property
    def slot_index(self) -> int:
        """Index into a record's child slots (LEFT=0, CENTER=1, RIGHT=2)."""
        if self is ParentLink.NONE:
            raise ValueError("ParentLink.NONE does not name a child slot")
        return self.value - 1


class FactoryType(Enum):
    """Which kinds a factory may pick from."""

    ALL = auto()
    TERMINALS = auto()
    NODES = auto()

    def admits(self, arity: int) -> bool:
        """Check if a kind of the given arity belongs to this selection."""
        if self is FactoryType.TERMINALS:
            return arity == 0
        if self is FactoryType.NODES:
            return arity > 0
        return True


# Canonical child order for traversal and serialization
CHILD_LINKS: tuple[ParentLink, ...] = (
    ParentLink.LEFT,
    ParentLink.CENTER,
    ParentLink.RIGHT,
)

MAX_ARITY = 3

# Single-operand kinds use the center slot, binary kinds use left/right
_ALLOWED_LINKS: dict[int, frozenset[ParentLink]] = {
    0: frozenset(),
    1: frozenset({ParentLink.CENTER}),
    2: frozenset({ParentLink.LEFT, ParentLink.RIGHT}),
    3: frozenset(CHILD_LINKS),
}


def allowed_links(arity: int) -> frozenset[ParentLink]:
    """Get the child slots a node of the given arity may fill."""
    try:
        return _ALLOWED_LINKS[arity]
    except KeyError:
        raise ValueError(f"Arity must be between 0 and {MAX_ARITY}, got {arity}") from None
