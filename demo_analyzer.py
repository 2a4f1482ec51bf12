"""
Demo: Run analyzer on the example registry and output the report.
"""

from preamble.examples import build_example_registry
from preamble.analyzer import analyze_registry
from preamble.serialization import registry_to_yaml


def print_report(report):
    """Pretty-print a RegistryReport."""
    print()
    print("=" * 70)
    print("REGISTRY ANALYSIS REPORT")
    print("=" * 70)
    print()

    print("📊 BASIC METRICS")
    print(f"  Total Providers:       {report.total_providers}")
    print(f"  Total Backends:        {report.total_backends}")
    print()

    print("📈 IDENTIFIER USAGE")
    print(f"  Literal References:    {sorted(report.literal_references) or 'None'}")
    print(f"  Orphan Providers:      {sorted(report.orphan_providers) or 'None'}")
    if report.requirement_usage:
        print("  Requirement Usage:")
        for name, count in sorted(report.requirement_usage.items()):
            print(f"    {name}: {count} reference(s)")
    print()

    print("🔗 DEPENDENCIES")
    print(f"  Has Cycles:            {'YES' if report.has_cycles else 'NO'}")
    if report.has_cycles and report.cycle_example:
        print(f"    Example: {' -> '.join(report.cycle_example)}")
    print(f"  Ineffective Vetoes:    {len(report.ineffective_vetoes)}")
    print()

    print("📐 REQUIREMENT COMPLEXITY")
    print(f"  Max Requirement Depth: {report.max_requirement_depth}")
    print(f"  Total Requirement Nodes:{report.total_requirement_nodes}")
    print()

    if report.warnings:
        print("⚠️  WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("✨ NO WARNINGS - Registry looks clean!")
    print()


if __name__ == "__main__":
    registry = build_example_registry()

    report = analyze_registry(registry)
    print_report(report)

    # Declarative parts of the registry, for inspection
    yaml_str = registry_to_yaml(registry)
    with open("example_registry_output.yaml", "w") as f:
        f.write(yaml_str)
    print("✅ Registry exported to example_registry_output.yaml")
