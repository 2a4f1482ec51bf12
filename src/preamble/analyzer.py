"""
Registry Analyzer: static diagnostics for snippet configurations.

This module provides lightweight analysis of Registry objects:
    - Identifier usage inventory (providers vs. literals)
    - Requirement dependency cycles
    - Vetoes that can never take effect because of backend ordering
    - Requirement complexity metrics

IMPORTANT: Analysis never runs a provider and never modifies the registry.
It only produces read-only reports.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from preamble.expressions import (
    IdentifierReference,
    LogicalExpression,
    Requirement,
    UnaryExpression,
)
from preamble.model import Registry


@dataclass
class RequirementMetrics:
    """Metrics about a single requirement tree."""
    depth: int = 0
    node_count: int = 0
    identifier_references: Set[str] = field(default_factory=set)


def _analyze_requirement(req: Requirement | None) -> RequirementMetrics:
    """Recursively analyze a requirement tree."""
    if req is None:
        return RequirementMetrics(depth=0, node_count=0)

    metrics = RequirementMetrics(node_count=1)

    if isinstance(req, LogicalExpression):
        children = [_analyze_requirement(o) for o in req.operands]
        metrics.depth = 1 + max(c.depth for c in children)
        for child in children:
            metrics.node_count += child.node_count
            metrics.identifier_references.update(child.identifier_references)

    elif isinstance(req, UnaryExpression):
        operand = _analyze_requirement(req.operand)
        metrics.depth = 1 + operand.depth
        metrics.node_count += operand.node_count
        metrics.identifier_references.update(operand.identifier_references)

    elif isinstance(req, IdentifierReference):
        # bool sentinels are deliberate literals, not references
        if isinstance(req.name, str):
            metrics.identifier_references.add(req.name)

    return metrics


def _find_cycles_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                     rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycles_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class RegistryReport:
    """Analysis report for a registry."""

    total_providers: int = 0
    total_backends: int = 0

    # Identifier usage
    requirement_usage: Dict[str, int] = field(default_factory=dict)
    literal_references: Set[str] = field(default_factory=set)
    orphan_providers: Set[str] = field(default_factory=set)
    backend_literals: Dict[str, List[str]] = field(default_factory=dict)

    # Dependencies
    has_cycles: bool = False
    cycle_example: Optional[List[str]] = None
    ineffective_vetoes: List[Tuple[str, str, str]] = field(default_factory=list)

    # Complexity
    max_requirement_depth: int = 0
    total_requirement_nodes: int = 0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_registry(registry: Registry) -> RegistryReport:
    """
    Perform static analysis of a Registry.

    Checks for:
    - Requirement leaves that name no provider (they resolve as literals)
    - Providers that no backend lists and no requirement references
    - Backend entries that name no provider
    - Cycles through requirements (these fail at resolution time)
    - prevents clauses whose victim is resolved before the preventer

    Returns a RegistryReport with metrics and warnings.
    """
    report = RegistryReport()
    report.total_providers = len(registry.providers)
    report.total_backends = len(registry.backends)

    # =========================================================================
    # 1. IDENTIFIER USAGE
    # =========================================================================

    depends_on: Dict[str, List[str]] = defaultdict(list)
    usage: Dict[str, int] = defaultdict(int)
    referenced: Set[str] = set()

    for provider in registry.providers.values():
        metrics = _analyze_requirement(provider.requires)
        report.max_requirement_depth = max(report.max_requirement_depth, metrics.depth)
        report.total_requirement_nodes += metrics.node_count

        for name in sorted(metrics.identifier_references):
            usage[name] += 1
            referenced.add(name)
            if name in registry.providers:
                depends_on[provider.name].append(name)
            else:
                report.literal_references.add(name)

        for victim in provider.prevents:
            if isinstance(victim, str):
                referenced.add(victim)

    report.requirement_usage = dict(usage)

    listed: Set[str] = set()
    for backend, identifiers in registry.backends.items():
        literals = []
        for identifier in identifiers:
            if isinstance(identifier, str) and identifier in registry.providers:
                listed.add(identifier)
            else:
                literals.append(str(identifier))
        if literals:
            report.backend_literals[backend] = literals

    report.orphan_providers = set(registry.providers) - listed - referenced

    # =========================================================================
    # 2. DEPENDENCY CYCLES
    # =========================================================================

    visited: Set[str] = set()
    for name in list(depends_on.keys()):
        if name not in visited:
            cycle = _find_cycles_dfs(depends_on, name, visited, set(), [])
            if cycle:
                report.has_cycles = True
                report.cycle_example = cycle
                break

    # =========================================================================
    # 3. VETO ORDERING
    # =========================================================================

    for backend, identifiers in registry.backends.items():
        position = {ident: i for i, ident in reversed(list(enumerate(identifiers)))}
        for preventer in identifiers:
            provider = registry.get_provider(preventer)
            if provider is None:
                continue
            for victim in provider.prevents:
                if victim in position and position[victim] < position[preventer]:
                    report.ineffective_vetoes.append((backend, preventer, victim))

    # =========================================================================
    # 4. WARNING FLAGS
    # =========================================================================

    if report.literal_references:
        report.add_warning(
            f"Requirement identifiers with no provider (resolve as literals): "
            f"{', '.join(sorted(report.literal_references))}"
        )

    if report.orphan_providers:
        report.add_warning(
            f"Providers never listed or referenced: {', '.join(sorted(report.orphan_providers))}"
        )

    for backend, literals in sorted(report.backend_literals.items()):
        report.add_warning(f"Backend {backend} lists identifiers with no provider: {', '.join(literals)}")

    if report.has_cycles:
        report.add_warning(f"Requirement cycle detected: {' -> '.join(report.cycle_example)}")

    for backend, preventer, victim in report.ineffective_vetoes:
        report.add_warning(
            f"Backend {backend}: {preventer} prevents {victim}, but {victim} is resolved first "
            f"and stays in the preamble"
        )

    if report.max_requirement_depth > 5:
        report.add_warning(f"High requirement complexity: max depth {report.max_requirement_depth}")

    return report
