"""Time-series terminals backed by pandas.

A SeriesSource holds named numeric columns and a cursor marking "now".
Time-series nodes read a trailing window ending at the cursor; the window
is reduced to a single value by pre_process() and cached in the node's
payload until the source moves to a new epoch.

Usage:
    source = SeriesSource(prices_df)
    registry = default_registry()
    register_series_kinds(registry, source)
    ...
    source.advance()
    pre_process_tree(root)
    value = root.evaluate_numeric()
"""

from __future__ import annotations

from dataclasses import dataclass
import dataclasses
from typing import Any, Callable, Mapping
import logging
import random

import pandas as pd

from gptree.expression.errors import PreconditionViolation
from gptree.expression.kinds import KindRegistry, NodeKind, numeric_kind
from gptree.expression.nodes import ExpressionNode

logger = logging.getLogger(__name__)


# Windows drawn when a payload is created without an explicit window
COMMON_WINDOWS: tuple[int, ...] = (5, 10, 20, 50)


class SeriesSource:
    """Named float series sharing one index, read up to a cursor.

    Every cursor move starts a new epoch; time-series nodes must be
    preprocessed again before they can be evaluated in it.
    """

    def __init__(
        self,
        data: pd.DataFrame | Mapping[str, Any],
        position: int | None = None,
    ) -> None:
        frame = data.copy() if isinstance(data, pd.DataFrame) else pd.DataFrame(dict(data))
        if frame.empty:
            raise ValueError("SeriesSource needs at least one row and one column")
        # Columns are addressed by their string labels
        frame.columns = frame.columns.astype(str)
        self._frame = frame.astype(float)
        self.epoch = 0
        self._position = len(self._frame) - 1
        if position is not None:
            self.seek(position)

    @property
    def columns(self) -> list[str]:
        return list(self._frame.columns)

    @property
    def position(self) -> int:
        return self._position

    def seek(self, position: int) -> None:
        """Move the cursor and start a new epoch."""
        if not 0 <= position < len(self._frame):
            raise PreconditionViolation(
                f"Position {position} outside series of length {len(self._frame)}"
            )
        self._position = position
        self.epoch += 1

    def advance(self, steps: int = 1) -> bool:
        """Move the cursor forward.

        Returns:
            False (cursor unchanged) if the move would pass the last row
        """
        target = self._position + steps
        if target >= len(self._frame):
            return False
        self.seek(target)
        return True

    def window(self, column: str, length: int) -> pd.Series:
        """Get the trailing window of a column ending at the cursor."""
        if column not in self._frame.columns:
            raise PreconditionViolation(f"Unknown series column: {column}")
        if length < 1:
            raise PreconditionViolation(f"Window length must be positive, got {length}")
        start = max(0, self._position - length + 1)
        return self._frame[column].iloc[start:self._position + 1]

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return (
            f"SeriesSource(columns={self.columns}, position={self._position}, "
            f"epoch={self.epoch})"
        )


@dataclass
class SeriesPayload:
    """Per-node state of a time-series terminal.

    Attributes:
        source: Shared data source (never copied on replication)
        column: Column to read
        window: Trailing window length
        value: Reduced window value for the last preprocessed epoch
        epoch: Source epoch the value belongs to
    """

    source: SeriesSource
    column: str
    window: int = 1
    value: float | None = None
    epoch: int | None = None


REDUCERS: dict[str, Callable[[pd.Series], float]] = {
    "ts_last": lambda w: w.iloc[-1],
    "ts_mean": lambda w: w.mean(),
    "ts_min": lambda w: w.min(),
    "ts_max": lambda w: w.max(),
    "ts_delta": lambda w: w.iloc[-1] - w.iloc[0],
}


def _series_kind(name: str, source: SeriesSource) -> NodeKind:
    reducer = REDUCERS[name]
    min_window = 2 if name == "ts_delta" else 1

    def make_payload(rng: Any = None, column: str | None = None, window: int | None = None) -> SeriesPayload:
        r = rng if rng else random
        if column is None:
            column = r.choice(source.columns)
        elif str(column) not in source.columns:
            raise PreconditionViolation(f"Unknown series column: {column}")
        if window is None:
            window = 1 if name == "ts_last" else r.choice(COMMON_WINDOWS)
        if window < min_window:
            raise PreconditionViolation(f"'{name}' needs a window of at least {min_window}")
        return SeriesPayload(source=source, column=str(column), window=int(window))

    def pre_process(payload: SeriesPayload) -> None:
        window = payload.source.window(payload.column, payload.window)
        payload.value = float(reducer(window))
        payload.epoch = payload.source.epoch
        logger.debug(
            f"{name}[{payload.column},{payload.window}] = {payload.value} "
            f"(epoch {payload.epoch})"
        )

    def evaluate(node: ExpressionNode) -> float:
        payload = node.payload
        if payload.value is None or payload.epoch != payload.source.epoch:
            raise PreconditionViolation(
                f"Time-series node '{name}' was not preprocessed for epoch {payload.source.epoch}"
            )
        return payload.value

    return numeric_kind(
        name,
        0,
        evaluate,
        to_string=lambda p: f"{name}[{p.column},{p.window}]",
        clone_basics=dataclasses.replace,
        pre_process=pre_process,
        make_payload=make_payload,
    )


def series_kinds(source: SeriesSource) -> list[NodeKind]:
    """Create the time-series terminal kinds reading from source."""
    return [_series_kind(name, source) for name in REDUCERS]


def register_series_kinds(
    registry: KindRegistry,
    source: SeriesSource,
    replace: bool = False,
) -> list[NodeKind]:
    """Register time-series kinds for source in registry."""
    return [registry.register(kind, replace=replace) for kind in series_kinds(source)]
