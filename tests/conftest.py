"""
Pytest fixtures for gptree tests.
"""

import pytest

import numpy as np
import pandas as pd

from gptree.expression.arena import NodeArena
from gptree.expression.factory import NodeFactory
from gptree.expression.library import default_registry
from gptree.expression.timeseries import SeriesSource, register_series_kinds


@pytest.fixture
def arena() -> NodeArena:
    """Get an empty arena with default settings."""
    return NodeArena()


@pytest.fixture
def factory(arena) -> NodeFactory:
    """Get a seeded factory over the built-in kinds."""
    return NodeFactory(arena=arena, seed=42)


@pytest.fixture
def add_tree(factory):
    """Build add(3, 4)."""
    root = factory.create("add")
    root.add_left(factory.create("const", value=3))
    root.add_right(factory.create("const", value=4))
    return root


@pytest.fixture
def mixed_tree(factory):
    """Build and(gt(neg(2), -5), not(false)).

    Covers unary, binary, heterogeneous and Boolean kinds.
    """
    root = factory.create("and")

    compare = factory.create("gt")
    neg = factory.create("neg")
    neg.add_center(factory.create("const", value=2))
    compare.add_left(neg)
    compare.add_right(factory.create("const", value=-5))
    root.add_left(compare)

    negation = factory.create("not")
    negation.add_center(factory.create("false"))
    root.add_right(negation)
    return root


@pytest.fixture
def price_frame() -> pd.DataFrame:
    """Get a small deterministic price/volume frame."""
    return pd.DataFrame(
        {
            "close": np.array([10.0, 11.0, 12.0, 11.5, 13.0, 14.0]),
            "volume": np.array([100.0, 120.0, 90.0, 150.0, 130.0, 110.0]),
        },
        index=pd.date_range("2024-01-01", periods=6, freq="D"),
    )


@pytest.fixture
def series_source(price_frame) -> SeriesSource:
    """Get a source positioned at the third row."""
    return SeriesSource(price_frame, position=2)


@pytest.fixture
def ts_factory(arena, series_source) -> NodeFactory:
    """Get a factory whose registry includes time-series kinds."""
    registry = default_registry()
    register_series_kinds(registry, series_source)
    return NodeFactory(arena=arena, registry=registry, seed=7)
