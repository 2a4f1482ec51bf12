"""
Tests for the Registry Analyzer.

Tests verify that the analyzer correctly:
    - Inventories providers and literal references
    - Finds orphan providers and unknown backend entries
    - Detects requirement cycles
    - Flags vetoes that backend ordering makes ineffective
    - Measures requirement complexity
"""

from preamble.analyzer import analyze_registry
from preamble.assembler import assemble
from preamble.examples import build_example_registry
from preamble.model import Registry
from preamble.snippets import defsnippet


def make_registry(backends, *providers):
    registry = Registry()
    for provider in providers:
        registry.register(provider)
    for name, ids in backends.items():
        registry.add_backend(name, ids)
    return registry


def test_clean_registry():
    registry = make_registry(
        {"X": ["p1", "p2"]},
        defsnippet("p1", "A"),
        defsnippet("p2", "B", requires="p1"),
    )
    report = analyze_registry(registry)

    assert report.total_providers == 2
    assert report.total_backends == 1
    assert report.requirement_usage == {"p1": 1}
    assert not report.literal_references
    assert not report.orphan_providers
    assert not report.has_cycles
    assert report.warnings == []


def test_literal_references():
    registry = make_registry(
        {"X": ["p"]},
        defsnippet("p", "A", requires=["or", "flagX", True]),
    )
    report = analyze_registry(registry)
    assert report.literal_references == {"flagX"}
    assert any("flagX" in w for w in report.warnings)


def test_orphan_provider():
    registry = make_registry(
        {"X": ["p"]},
        defsnippet("p", "A"),
        defsnippet("forgotten", "F"),
    )
    report = analyze_registry(registry)
    assert report.orphan_providers == {"forgotten"}


def test_referenced_provider_is_not_orphan():
    registry = make_registry(
        {"X": ["p"]},
        defsnippet("p", "A", requires="helper"),
        defsnippet("helper", True),
    )
    assert analyze_registry(registry).orphan_providers == set()


def test_backend_literals():
    registry = make_registry({"X": ["p", "typo"]}, defsnippet("p", "A"))
    report = analyze_registry(registry)
    assert report.backend_literals == {"X": ["typo"]}


def test_cycle_detection():
    registry = make_registry(
        {"X": ["a"]},
        defsnippet("a", "A", requires="b"),
        defsnippet("b", "B", requires="c"),
        defsnippet("c", "C", requires="a"),
    )
    report = analyze_registry(registry)
    assert report.has_cycles
    assert report.cycle_example[0] == report.cycle_example[-1]
    assert set(report.cycle_example) == {"a", "b", "c"}


def test_ineffective_veto():
    registry = make_registry(
        {"good": ["veto", "victim"], "bad": ["victim", "veto"]},
        defsnippet("veto", None, prevents=["victim"]),
        defsnippet("victim", "V"),
    )
    report = analyze_registry(registry)
    assert report.ineffective_vetoes == [("bad", "veto", "victim")]
    assert any("resolved first" in w for w in report.warnings)


def test_ineffective_veto_matches_assembled_preamble():
    """A veto the analyzer calls ineffective leaves the victim in the output."""
    registry = make_registry(
        {"good": ["veto", "victim"], "bad": ["victim", "veto"]},
        defsnippet("veto", None, prevents=["victim"]),
        defsnippet("victim", "V"),
    )
    report = analyze_registry(registry)
    flagged = {backend for backend, _, _ in report.ineffective_vetoes}

    for backend in registry.backends:
        kept = "V" in assemble(registry, backend)
        assert kept == (backend in flagged)


def test_requirement_depth():
    registry = make_registry(
        {"X": ["p"]},
        defsnippet("p", "A", requires=["and", "a", ["or", "b", ["not", "c"]]]),
    )
    report = analyze_registry(registry)
    assert report.max_requirement_depth == 3
    assert report.total_requirement_nodes == 6


def test_warnings_deduplicated():
    registry = make_registry({"X": []})
    report = analyze_registry(registry)
    report.add_warning("same")
    report.add_warning("same")
    assert report.warnings == ["same"]


def test_example_registry_is_clean():
    report = analyze_registry(build_example_registry())
    assert report.warnings == []
