"""Errors raised by the expression node core.

None of these are recoverable conditions: they mean the code building or
evaluating a tree is wrong, so they always propagate to the caller.
"""


class ExpressionError(Exception):
    """Base class for expression node errors."""


class PreconditionViolation(ExpressionError, AssertionError):
    """A tree operation was called in a state its contract forbids.

    Raised for attaching into an occupied, invalid or type-mismatched slot,
    reading an absent parent or child, using a destroyed node handle, and
    evaluating a time-series node that was not preprocessed.
    """


class EvaluatorNotImplemented(ExpressionError, NotImplementedError):
    """An evaluator was requested that the node's kind does not supply."""


class KindRegistrationError(ExpressionError, ValueError):
    """A node kind is malformed or clashes with a registered one."""


class UnknownKindError(ExpressionError, KeyError):
    """No node kind is registered under the requested name."""
