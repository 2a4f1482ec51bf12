"""
Graphviz DOT diagram generator for snippet registries.

Converts a Registry into Graphviz DOT format showing how providers
depend on and veto each other:
    - solid edge A -> B: A's requirement mentions B
    - dashed red edge A -> B: A prevents B

Supports multiple modes:
    - SIMPLE: Providers and edges only
    - DETAILED: Requirement text and descriptions in node labels
    - BACKEND: Providers grouped into one cluster per backend
"""

from enum import Enum
from typing import List, Optional, Set

from preamble.expressions import (
    IdentifierReference,
    LogicalExpression,
    Requirement,
    UnaryExpression,
)
from preamble.model import Registry
from preamble.requirements_parser import requirement_identifiers


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"      # Just dependencies
    DETAILED = "detailed"  # Include requirements and descriptions
    BACKEND = "backend"    # Clusters per backend


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    # Escape backslashes first
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _escape_dot_id(identifier) -> str:
    """Escape/quote an identifier for DOT."""
    identifier = str(identifier)
    if not identifier or identifier[0].isdigit() or not identifier.replace('_', '').isalnum():
        return _escape_dot_string(identifier)
    return identifier


def _requirement_to_dot_label(req: Optional[Requirement]) -> str:
    """Convert a requirement to a readable label."""
    if req is None:
        return ""

    if isinstance(req, LogicalExpression):
        joiner = f" {req.operator.value} "
        return "(" + joiner.join(_requirement_to_dot_label(o) for o in req.operands) + ")"

    if isinstance(req, UnaryExpression):
        return f"{req.operator.value} {_requirement_to_dot_label(req.operand)}"

    if isinstance(req, IdentifierReference):
        return str(req.name)

    return "?"


def generate_dot(registry: Registry, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a registry.

    Args:
        registry: Registry to visualize
        mode: Visualization mode (SIMPLE, DETAILED, BACKEND)

    Returns:
        String containing DOT graph definition
    """
    lines = []

    lines.append("digraph preamble {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # =========================================================================
    # NODES
    # =========================================================================

    literals: Set[str] = set()

    for provider in registry.providers.values():
        node_id = _escape_dot_id(provider.name)
        label = provider.name

        if mode == DotMode.DETAILED:
            info = []
            if provider.requires is not None:
                info.append(f"Requires: {_requirement_to_dot_label(provider.requires)}")
            if provider.description:
                info.append(provider.description)
            if info:
                label = label + "\n" + "\n".join(info)

        lines.append(f"  {node_id} [label={_escape_dot_string(label)}];")

        for name in requirement_identifiers(provider.requires):
            if isinstance(name, str) and name not in registry.providers:
                literals.add(name)

    for name in sorted(literals):
        lines.append(f"  {_escape_dot_id(name)} [shape=ellipse, fillcolor=lightgrey];")

    # =========================================================================
    # EDGES
    # =========================================================================

    for provider in registry.providers.values():
        from_id = _escape_dot_id(provider.name)

        seen: List[str] = []
        for name in requirement_identifiers(provider.requires):
            if isinstance(name, str) and name not in seen:
                seen.append(name)
                lines.append(f"  {from_id} -> {_escape_dot_id(name)};")

        for victim in provider.prevents:
            lines.append(
                f"  {from_id} -> {_escape_dot_id(victim)} "
                f"[style=dashed, color=red, arrowhead=tee];"
            )

    # =========================================================================
    # BACKENDS
    # =========================================================================

    if mode == DotMode.BACKEND:
        for backend, identifiers in registry.backends.items():
            lines.append(f'  subgraph "cluster_{backend}" {{')
            lines.append(f"    label={_escape_dot_string(backend)};")
            lines.append("    style=filled;")
            lines.append("    color=lightgrey;")
            for identifier in identifiers:
                lines.append(f"    {_escape_dot_id(identifier)};")
            lines.append("  }")

    lines.append("}")

    return "\n".join(lines)


def save_dot_file(registry: Registry, filename: str, mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        registry: Registry to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(registry, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
