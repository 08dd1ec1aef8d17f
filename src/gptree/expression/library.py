"""Built-in node kinds.

Provides the standard terminal and operator kinds:
- Numeric: const, neg, abs, add, sub, mul, div, min, max, clamp
- Boolean: true, false, not, and, or, xor, majority
- Comparison (Boolean over Numeric): gt, ge, lt, le
"""

from __future__ import annotations

from typing import Any, Callable
import operator
import random

import numpy as np

from gptree.expression.kinds import (
    KindRegistry,
    NodeKind,
    boolean_kind,
    numeric_kind,
)
from gptree.expression.nodes import ExpressionNode
from gptree.expression.types import NodeType


# Range for randomly drawn constants
CONSTANT_RANGE: tuple[float, float] = (-10.0, 10.0)


def _named(name: str) -> Callable[[Any], str]:
    return lambda payload: name


def _constant_text(value: float) -> str:
    return f"{value:g}"


def _constant_payload(rng: Any = None, value: float | None = None) -> float:
    if value is None:
        r = rng if rng else random
        value = r.uniform(CONSTANT_RANGE[0], CONSTANT_RANGE[1])
    return float(value)


def _numeric_binary(name: str, fn: Callable[[float, float], float]) -> NodeKind:
    return numeric_kind(
        name,
        2,
        lambda n: fn(n.child_left.evaluate_numeric(), n.child_right.evaluate_numeric()),
        to_string=_named(name),
    )


def _numeric_unary(name: str, fn: Callable[[float], float]) -> NodeKind:
    return numeric_kind(
        name,
        1,
        lambda n: fn(n.child_center.evaluate_numeric()),
        to_string=_named(name),
    )


def _compare(name: str, fn: Callable[[float, float], bool]) -> NodeKind:
    return NodeKind(
        name=name,
        return_type=NodeType.BOOLEAN,
        child_type=NodeType.NUMERIC,
        arity=2,
        evaluate=lambda n: fn(n.child_left.evaluate_numeric(), n.child_right.evaluate_numeric()),
        to_string=_named(name),
    )


def _protected_div(node: ExpressionNode) -> float:
    """Divide left by right, yielding 1.0 for a zero divisor or non-finite result."""
    numerator = node.child_left.evaluate_numeric()
    divisor = node.child_right.evaluate_numeric()
    if divisor == 0.0:
        return 1.0
    result = numerator / divisor
    return result if np.isfinite(result) else 1.0


def _clamp(node: ExpressionNode) -> float:
    """Clamp center into the range spanned by left and right."""
    bound_a = node.child_left.evaluate_numeric()
    value = node.child_center.evaluate_numeric()
    bound_b = node.child_right.evaluate_numeric()
    return float(np.clip(value, min(bound_a, bound_b), max(bound_a, bound_b)))


def _majority(node: ExpressionNode) -> bool:
    votes = (
        node.child_left.evaluate_boolean(),
        node.child_center.evaluate_boolean(),
        node.child_right.evaluate_boolean(),
    )
    return sum(votes) >= 2


CONST = numeric_kind(
    "const",
    0,
    lambda n: n.payload,
    to_string=_constant_text,
    make_payload=_constant_payload,
)

NUMERIC_KINDS: list[NodeKind] = [
    CONST,
    _numeric_unary("neg", operator.neg),
    _numeric_unary("abs", abs),
    _numeric_binary("add", operator.add),
    _numeric_binary("sub", operator.sub),
    _numeric_binary("mul", operator.mul),
    numeric_kind("div", 2, _protected_div, to_string=_named("div")),
    _numeric_binary("min", min),
    _numeric_binary("max", max),
    numeric_kind("clamp", 3, _clamp, to_string=_named("clamp")),
]

BOOLEAN_KINDS: list[NodeKind] = [
    boolean_kind("true", 0, lambda n: True, to_string=_named("true")),
    boolean_kind("false", 0, lambda n: False, to_string=_named("false")),
    boolean_kind(
        "not", 1, lambda n: not n.child_center.evaluate_boolean(), to_string=_named("not")
    ),
    boolean_kind(
        "and",
        2,
        lambda n: n.child_left.evaluate_boolean() and n.child_right.evaluate_boolean(),
        to_string=_named("and"),
    ),
    boolean_kind(
        "or",
        2,
        lambda n: n.child_left.evaluate_boolean() or n.child_right.evaluate_boolean(),
        to_string=_named("or"),
    ),
    boolean_kind(
        "xor",
        2,
        lambda n: n.child_left.evaluate_boolean() != n.child_right.evaluate_boolean(),
        to_string=_named("xor"),
    ),
    boolean_kind("majority", 3, _majority, to_string=_named("majority")),
]

COMPARISON_KINDS: list[NodeKind] = [
    _compare("gt", operator.gt),
    _compare("ge", operator.ge),
    _compare("lt", operator.lt),
    _compare("le", operator.le),
]


def default_registry() -> KindRegistry:
    """Create a registry holding every built-in kind."""
    return KindRegistry(NUMERIC_KINDS + BOOLEAN_KINDS + COMPARISON_KINDS)
