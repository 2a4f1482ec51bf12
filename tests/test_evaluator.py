"""
Tests for the requirement evaluator.

These tests verify:
    - Leaf truthiness through the resolver
    - NOT / AND / OR semantics
    - Short-circuit: later operands are never resolved
"""

import pytest
from preamble.context import ResolutionContext
from preamble.evaluator import satisfies
from preamble.expressions import Requirement
from preamble.model import Registry
from preamble.requirements_parser import parse_requirement
from preamble.snippets import defsnippet


def make_context(**values):
    """Context whose providers return the given values and log their calls."""
    calls = []
    registry = Registry()
    for name, value in values.items():
        def body(meta, ctx, name=name, value=value):
            calls.append(name)
            return value
        registry.register(defsnippet(name, body))
    return ResolutionContext(registry), calls


class TestLeaves:

    def test_truthy_provider(self):
        ctx, _ = make_context(a="A")
        assert satisfies(parse_requirement("a"), ctx)

    def test_falsy_provider(self):
        ctx, _ = make_context(a=None)
        assert not satisfies(parse_requirement("a"), ctx)

    def test_unregistered_identifier_is_truthy_literal(self):
        ctx, _ = make_context()
        assert satisfies(parse_requirement("flagX"), ctx)

    def test_not_of_literal_is_false(self):
        """NOT(flagX) with flagX unregistered evaluates to false."""
        ctx, _ = make_context()
        assert not satisfies(parse_requirement(["not", "flagX"]), ctx)

    def test_false_sentinel(self):
        ctx, _ = make_context()
        assert not satisfies(parse_requirement([False]), ctx)

    def test_no_requirement_is_satisfied(self):
        ctx, _ = make_context()
        assert satisfies(None, ctx)

    def test_leaf_populates_cache(self):
        ctx, _ = make_context(a=True)
        satisfies(parse_requirement("a"), ctx)
        assert "a" in ctx.cache


class TestOperators:

    @pytest.mark.parametrize("a, b, expected", [
        (True, True, True),
        (True, False, False),
        (False, True, False),
        (False, False, False),
    ])
    def test_and(self, a, b, expected):
        ctx, _ = make_context(a=a, b=b)
        assert satisfies(parse_requirement(["and", "a", "b"]), ctx) is expected

    @pytest.mark.parametrize("a, b, expected", [
        (True, True, True),
        (True, False, True),
        (False, True, True),
        (False, False, False),
    ])
    def test_or(self, a, b, expected):
        ctx, _ = make_context(a=a, b=b)
        assert satisfies(parse_requirement(["or", "a", "b"]), ctx) is expected

    def test_nested(self):
        ctx, _ = make_context(a=True, b=False, c=False)
        assert satisfies(parse_requirement("a & (b | !c)"), ctx)

    def test_context_method_delegates(self):
        ctx, _ = make_context(a=0)
        assert ctx.satisfies(parse_requirement("!a"))


class TestShortCircuit:

    def test_and_stops_at_first_falsy(self):
        ctx, calls = make_context(a=False, b=True)
        satisfies(parse_requirement(["and", "a", "b"]), ctx)
        assert calls == ["a"]
        assert "b" not in ctx.cache

    def test_or_stops_at_first_truthy(self):
        ctx, calls = make_context(a=True, b=True)
        satisfies(parse_requirement(["or", "a", "b"]), ctx)
        assert calls == ["a"]
        assert "b" not in ctx.cache

    def test_operands_evaluated_left_to_right(self):
        ctx, calls = make_context(a=True, b=True, c=True)
        satisfies(parse_requirement(["a", "b", "c"]), ctx)
        assert calls == ["a", "b", "c"]


def test_unsupported_node():
    class Weird(Requirement):
        pass

    ctx, _ = make_context()
    with pytest.raises(TypeError):
        satisfies(Weird(), ctx)
