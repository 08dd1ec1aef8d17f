"""Tests for node kinds, the kind registry and the node factory."""

import random

import pytest

from gptree.expression.errors import (
    KindRegistrationError,
    PreconditionViolation,
    UnknownKindError,
)
from gptree.expression.factory import NodeFactory
from gptree.expression.kinds import KindRegistry, NodeKind, boolean_kind, numeric_kind
from gptree.expression.library import CONSTANT_RANGE, default_registry
from gptree.expression.types import FactoryType, NodeType


class TestNodeKind:
    """Test kind validation at construction time."""

    def test_evaluator_required(self):
        """Test a kind without an evaluator cannot exist."""
        with pytest.raises(KindRegistrationError):
            NodeKind(
                name="broken",
                return_type=NodeType.NUMERIC,
                child_type=NodeType.NUMERIC,
                arity=0,
            )

    def test_arity_bounds(self):
        """Test arity must be 0..3."""
        with pytest.raises(KindRegistrationError):
            numeric_kind("wide", 4, lambda n: 0.0)
        with pytest.raises(KindRegistrationError):
            numeric_kind("negative", -1, lambda n: 0.0)

    def test_name_required(self):
        """Test the tag cannot be empty."""
        with pytest.raises(KindRegistrationError):
            boolean_kind("", 0, lambda n: True)

    def test_typed_specializations(self):
        """Test boolean_kind / numeric_kind are homogeneous."""
        b = boolean_kind("flag", 0, lambda n: True)
        x = numeric_kind("zero", 0, lambda n: 0.0)
        assert b.return_type == b.child_type == NodeType.BOOLEAN
        assert x.return_type == x.child_type == NodeType.NUMERIC

    def test_default_text_is_empty(self, arena):
        """Test kinds without to_string contribute nothing to the dump."""
        silent = numeric_kind("silent", 1, lambda n: n.child_center.evaluate_numeric())
        root = arena.allocate(silent)
        root.add_center(arena.allocate(default_registry().get("const"), 5.0))

        assert root.to_string() == ""
        assert root.tree_to_string() == "(5)"
        assert root.evaluate_numeric() == 5.0

    def test_payload_kwargs_rejected_without_payload(self, factory):
        """Test kinds with no payload refuse payload arguments."""
        with pytest.raises(PreconditionViolation):
            factory.create("add", value=1)


class TestKindRegistry:
    """Test KindRegistry."""

    def test_default_registry_contents(self):
        """Test the built-in kinds are all registered."""
        registry = default_registry()
        for name in ("const", "add", "div", "clamp", "true", "and", "majority", "gt"):
            assert name in registry
        assert len(registry) == len(registry.names())

    def test_duplicate_rejected(self):
        """Test re-registering a name needs replace=True."""
        registry = default_registry()
        kind = numeric_kind("add", 2, lambda n: 0.0)
        with pytest.raises(KindRegistrationError):
            registry.register(kind)
        assert registry.register(kind, replace=True) is registry.get("add")

    def test_replace_logs_warning(self, caplog):
        """Test replacing a kind is logged."""
        registry = default_registry()
        with caplog.at_level("WARNING"):
            registry.register(numeric_kind("add", 2, lambda n: 0.0), replace=True)
        assert "Overwriting existing node kind: add" in caplog.text

    def test_non_kind_rejected(self):
        """Test only NodeKind instances register."""
        with pytest.raises(KindRegistrationError):
            KindRegistry().register("add")

    def test_unknown_kind(self):
        """Test lookups of unknown names."""
        with pytest.raises(UnknownKindError):
            default_registry().get("nope")
        with pytest.raises(KeyError):
            default_registry().get("nope")

    def test_kinds_for(self):
        """Test filtering by return type and factory type."""
        registry = default_registry()

        terminals = registry.kinds_for(NodeType.NUMERIC, FactoryType.TERMINALS)
        assert [k.name for k in terminals] == ["const"]

        boolean_ops = registry.kinds_for(NodeType.BOOLEAN, FactoryType.NODES)
        names = {k.name for k in boolean_ops}
        assert {"not", "and", "or", "xor", "majority", "gt", "le"} <= names
        assert "true" not in names

        everything = registry.kinds_for(NodeType.BOOLEAN)
        assert len(everything) == len(boolean_ops) + 2

    def test_copy_is_independent(self):
        """Test copy() does not share registrations."""
        registry = default_registry()
        clone = registry.copy()
        clone.register(numeric_kind("extra", 0, lambda n: 1.0))
        assert "extra" in clone
        assert "extra" not in registry


class TestNodeFactory:
    """Test NodeFactory."""

    def test_create_constant(self, factory):
        """Test creating a constant with an explicit value."""
        node = factory.create("const", value=2.5)
        assert node.payload == 2.5
        assert node.evaluate_numeric() == 2.5

    def test_random_constant_in_range(self, factory):
        """Test constants drawn without a value stay in range."""
        for _ in range(20):
            value = factory.create("const").payload
            assert CONSTANT_RANGE[0] <= value <= CONSTANT_RANGE[1]

    def test_choose_respects_types(self, factory):
        """Test choose() honours return and factory type."""
        for _ in range(30):
            terminal = factory.choose(NodeType.BOOLEAN, FactoryType.TERMINALS)
            assert terminal.is_terminal()
            assert terminal.return_type == NodeType.BOOLEAN

            operator = factory.choose(NodeType.NUMERIC, FactoryType.NODES)
            assert not operator.is_terminal()
            assert operator.return_type == NodeType.NUMERIC

    def test_choose_is_seeded(self):
        """Test the same seed gives the same choices."""
        first = NodeFactory(seed=3)
        second = NodeFactory(seed=3)
        names_a = [first.choose(NodeType.NUMERIC).name for _ in range(10)]
        names_b = [second.choose(NodeType.NUMERIC).name for _ in range(10)]
        assert names_a == names_b

    def test_choose_without_candidates(self):
        """Test choose() fails when nothing matches."""
        factory = NodeFactory(registry=KindRegistry([numeric_kind("one", 0, lambda n: 1.0)]))
        with pytest.raises(UnknownKindError):
            factory.choose(NodeType.BOOLEAN)

    def test_created_nodes_are_standalone(self, factory):
        """Test factory output has no links."""
        node = factory.choose(NodeType.NUMERIC, FactoryType.NODES)
        assert node.is_root()
        assert node.attached_count() == 0

    def test_make_payload_uses_rng(self):
        """Test make_payload draws from the provided generator."""
        kind = default_registry().get("const")
        assert kind.make_payload(rng=random.Random(5)) == kind.make_payload(rng=random.Random(5))
