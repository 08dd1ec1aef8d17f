"""Tests for node evaluation."""

import pytest

from gptree.expression.errors import EvaluatorNotImplemented, PreconditionViolation


class TestEvaluation:
    """Test evaluate_boolean / evaluate_numeric."""

    def test_add_example(self, add_tree):
        """Test add(3, 4) evaluates to 7.0."""
        assert add_tree.evaluate_numeric() == 7.0

    def test_mixed_tree(self, mixed_tree):
        """Test a Boolean tree over comparisons."""
        assert mixed_tree.evaluate_boolean() is True
        assert mixed_tree.evaluate() is True

    def test_wrong_accessor_numeric_node(self, add_tree):
        """Test the Boolean accessor on a Numeric node fails."""
        with pytest.raises(EvaluatorNotImplemented):
            add_tree.evaluate_boolean()

    def test_wrong_accessor_boolean_node(self, mixed_tree):
        """Test the Numeric accessor on a Boolean node fails."""
        with pytest.raises(EvaluatorNotImplemented):
            mixed_tree.evaluate_numeric()

    def test_wrong_accessor_is_not_implemented_error(self, factory):
        """Test the error is a NotImplementedError."""
        with pytest.raises(NotImplementedError):
            factory.create("true").evaluate_numeric()

    def test_incomplete_tree_raises(self, factory):
        """Test evaluating a node with an empty slot fails."""
        root = factory.create("add")
        root.add_left(factory.create("const", value=1))
        with pytest.raises(PreconditionViolation):
            root.evaluate_numeric()

    @pytest.mark.parametrize(
        "name,left,right,expected",
        [
            ("sub", 3, 4, -1.0),
            ("mul", 3, 4, 12.0),
            ("div", 3, 4, 0.75),
            ("div", 3, 0, 1.0),
            ("min", 3, 4, 3.0),
            ("max", 3, 4, 4.0),
        ],
    )
    def test_numeric_binary(self, factory, name, left, right, expected):
        """Test binary numeric kinds."""
        root = factory.create(name)
        root.add_left(factory.create("const", value=left))
        root.add_right(factory.create("const", value=right))
        assert root.evaluate_numeric() == pytest.approx(expected)

    def test_abs_and_neg(self, factory):
        """Test unary numeric kinds."""
        outer = factory.create("abs")
        inner = outer.add_center(factory.create("neg"))
        inner.add_center(factory.create("const", value=2.5))
        assert inner.evaluate_numeric() == -2.5
        assert outer.evaluate_numeric() == 2.5

    @pytest.mark.parametrize(
        "low,value,high,expected",
        [(0, 5, 10, 5.0), (0, -3, 10, 0.0), (10, 15, 0, 10.0)],
    )
    def test_clamp(self, factory, low, value, high, expected):
        """Test clamp with bounds in either order."""
        root = factory.create("clamp")
        root.add_left(factory.create("const", value=low))
        root.add_center(factory.create("const", value=value))
        root.add_right(factory.create("const", value=high))
        assert root.evaluate_numeric() == expected

    @pytest.mark.parametrize(
        "name,left,right,expected",
        [
            ("and", "true", "false", False),
            ("or", "true", "false", True),
            ("xor", "true", "true", False),
            ("xor", "false", "true", True),
        ],
    )
    def test_boolean_binary(self, factory, name, left, right, expected):
        """Test binary Boolean kinds."""
        root = factory.create(name)
        root.add_left(factory.create(left))
        root.add_right(factory.create(right))
        assert root.evaluate_boolean() is expected

    def test_majority(self, factory):
        """Test the three-operand majority vote."""
        root = factory.create("majority")
        root.add_left(factory.create("true"))
        root.add_center(factory.create("false"))
        root.add_right(factory.create("true"))
        assert root.evaluate_boolean() is True

    @pytest.mark.parametrize(
        "name,expected",
        [("gt", False), ("ge", True), ("lt", False), ("le", True)],
    )
    def test_comparisons_on_equal_values(self, factory, name, expected):
        """Test comparison kinds with equal operands."""
        root = factory.create(name)
        root.add_left(factory.create("const", value=2))
        root.add_right(factory.create("const", value=2))
        assert root.evaluate_boolean() is expected

    def test_pre_process_noop_for_plain_nodes(self, add_tree):
        """Test pre_process does nothing on nodes without a data window."""
        assert not add_tree.is_time_series()
        add_tree.pre_process()
        assert add_tree.evaluate_numeric() == 7.0
