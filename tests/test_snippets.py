"""
Tests for snippet definitions (defsnippet / ProviderRegistration).

These tests verify:
    - Definition-time validation
    - Invocation order: prevents, then requires, then body
    - Constant bodies
"""

import pytest
from preamble.context import ResolutionContext
from preamble.expressions import IdentifierReference
from preamble.model import Registry, Snippet
from preamble.requirements_parser import RequirementError
from preamble.snippets import ConstantBody, ProviderRegistration, defsnippet


class TestDefinition:

    def test_fields(self):
        provider = defsnippet("p", "A", requires="q", prevents="r", description="demo")
        assert isinstance(provider, ProviderRegistration)
        assert provider.name == "p"
        assert provider.requires == IdentifierReference("q")
        assert provider.prevents == ("r",)
        assert provider.description == "demo"

    def test_constant_body(self):
        provider = defsnippet("p", Snippet("A", 1))
        assert isinstance(provider.body, ConstantBody)
        assert provider.body(None, None) == Snippet("A", 1)

    def test_callable_body_kept(self):
        def body(meta, ctx):
            return "A"
        assert defsnippet("p", body).body is body

    def test_malformed_requirement_fails_at_definition(self):
        with pytest.raises(RequirementError):
            defsnippet("p", "A", requires=["not", "a", "b"])

    def test_malformed_prevents_fails_at_definition(self):
        with pytest.raises(RequirementError):
            defsnippet("p", "A", prevents=[42])

    @pytest.mark.parametrize("name", ["", None, 3])
    def test_invalid_name(self, name):
        with pytest.raises(RequirementError):
            defsnippet(name, "A")

    @pytest.mark.parametrize("name", ["a b", "x|y", "!flag", "(p)", "not"])
    def test_name_a_requirement_could_not_reference(self, name):
        with pytest.raises(RequirementError):
            defsnippet(name, "A")

    def test_unusual_name_usable_in_requirements(self):
        registry = Registry()
        registry.register(defsnippet("use-minted?", True))
        registry.register(defsnippet("pdf/a", "X", prevents=["use-minted?"]))
        registry.register(defsnippet("p", "P", requires=["not", "use-minted?"]))
        ctx = ResolutionContext(registry)
        assert ctx.resolve("pdf/a") == "X"
        assert ctx.resolve("p") == "P"

    def test_registration_immutable(self):
        provider = defsnippet("p", "A")
        with pytest.raises(AttributeError):
            provider.name = "q"


class TestInvocation:

    def _context(self, *providers, metadata=None):
        registry = Registry()
        for provider in providers:
            registry.register(provider)
        return ResolutionContext(registry, metadata)

    def test_requirement_met_runs_body(self):
        ctx = self._context(defsnippet("p", "A", requires="q"), defsnippet("q", True))
        assert ctx.resolve("p") == "A"

    def test_requirement_failed_skips_body(self):
        calls = []
        ctx = self._context(
            defsnippet("p", lambda meta, c: calls.append("p") or "A", requires="q"),
            defsnippet("q", False),
        )
        assert ctx.resolve("p") is None
        assert calls == []

    def test_prevents_runs_even_when_requirement_fails(self):
        """Vetoes are side effects of running the provider, not of succeeding."""
        ctx = self._context(
            defsnippet("p", "A", requires="q", prevents=["r"]),
            defsnippet("q", False),
            defsnippet("r", "R"),
        )
        ctx.resolve("p")
        assert ctx.resolve("r") is None

    def test_prevents_runs_before_requirement(self):
        """A provider can veto an identifier its own requirement then reads."""
        ctx = self._context(
            defsnippet("p", "A", requires="r", prevents=["r"]),
            defsnippet("r", "R"),
        )
        assert ctx.resolve("p") is None

    def test_body_receives_metadata_and_context(self):
        seen = {}

        def body(meta, ctx):
            seen["meta"] = meta
            seen["ctx"] = ctx
            return "A"

        ctx = self._context(defsnippet("p", body), metadata={"backend": "latex"})
        ctx.resolve("p")
        assert seen["meta"] == {"backend": "latex"}
        assert seen["ctx"] is ctx

    def test_self_prevention_keeps_body_result(self):
        ctx = self._context(defsnippet("p", "A", prevents=["p"]))
        assert ctx.resolve("p") == "A"
        assert ctx.entries() == [("p", "A")]
