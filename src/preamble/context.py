"""
Per-pass resolution context.

A ResolutionContext is created for exactly one export pass. It owns the
ContextCache and is the only way to read or write it:

    resolve(id)      compute an identifier at most once per pass
    invalidate(id)   make later lookups of an identifier return None (a veto)

Cache entries are ordered by completion. A provider that resolves other
identifiers while it runs is recorded after them, because it finishes
after them.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from preamble.evaluator import satisfies
from preamble.expressions import Identifier, Requirement
from preamble.model import BindingKind, Registry

logger = logging.getLogger(__name__)


class ResolutionCycleError(RuntimeError):
    """Raised when an identifier is resolved again while it is still being computed."""

    def __init__(self, chain: List[Identifier]):
        self.chain = chain
        super().__init__("Resolution cycle: " + " -> ".join(str(i) for i in chain))


class ContextCache:
    """
    Ordered identifier → value store for one pass.

    Internally entries are kept oldest-completed first; `entries()`
    returns them most-recently-completed first.

    A value overwritten after its identifier completed is kept apart:
    later lookups see the new value, `entries()` keeps the completed one.
    """

    def __init__(self):
        self._entries: "OrderedDict[Identifier, Any]" = OrderedDict()
        self._overrides: Dict[Identifier, Any] = {}

    def __contains__(self, identifier: Identifier) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, identifier: Identifier, default: Any = None) -> Any:
        if identifier in self._overrides:
            return self._overrides[identifier]
        return self._entries.get(identifier, default)

    def record(self, identifier: Identifier, value: Any) -> None:
        """Store a completed resolution as the most recent entry."""
        self._entries.pop(identifier, None)
        self._overrides.pop(identifier, None)
        self._entries[identifier] = value

    def seed(self, identifier: Identifier, value: Any) -> None:
        """
        Set the value later lookups see.

        An absent identifier gets a new entry. One that already has an
        entry keeps it, so `entries()` is unchanged.
        """
        if identifier in self._entries:
            self._overrides[identifier] = value
        else:
            self._entries[identifier] = value

    def overridden(self) -> List[Identifier]:
        """Identifiers whose lookups no longer match their entry."""
        return list(self._overrides)

    def entries(self) -> List[Tuple[Identifier, Any]]:
        """(identifier, value) pairs, most-recently-completed first."""
        return list(reversed(self._entries.items()))


class ResolutionContext:
    """
    Resolver for a single pass.

    Properties:
        registry: Provider configuration (read only)
        metadata: Host-supplied pass metadata, handed to every provider untouched
        cache: The pass's ContextCache

    IMPORTANT:
        Never share a context between passes. Build a fresh one per pass.
        Exceptions raised by provider bodies propagate unchanged.
    """

    def __init__(self, registry: Registry, metadata: Any = None,
                 cache: Optional[ContextCache] = None):
        self.registry = registry
        self.metadata = metadata
        self.cache = cache if cache is not None else ContextCache()
        self._in_progress: List[Identifier] = []

    def resolve(self, identifier: Identifier) -> Any:
        """
        Return the identifier's value, computing it on first use.

        - Cached: returned unchanged, nothing runs
        - Provider: invoked with this context, result recorded
        - Anything else: a literal, recorded as its own value

        Raises:
            ResolutionCycleError: If the identifier is already being computed
        """
        if identifier in self.cache:
            return self.cache.get(identifier)

        binding = self.registry.binding(identifier)

        if binding.kind == BindingKind.LITERAL:
            self.cache.record(identifier, identifier)
            return identifier

        if identifier in self._in_progress:
            start = self._in_progress.index(identifier)
            raise ResolutionCycleError(self._in_progress[start:] + [identifier])

        self._in_progress.append(identifier)
        try:
            logger.debug("resolving provider %r", identifier)
            value = binding.provider.invoke(self)
        finally:
            self._in_progress.pop()

        self.cache.record(identifier, value)
        return value

    def invalidate(self, identifier: Identifier) -> None:
        """
        Veto an identifier for the rest of the pass.

        Before it resolves, its entry is pre-seeded with None and its provider
        never runs. After it resolved, later lookups return None but the
        value already read into the preamble stands.
        """
        self.cache.seed(identifier, None)

    def satisfies(self, requirement: Optional[Requirement]) -> bool:
        """Evaluate a requirement against this context."""
        return satisfies(requirement, self)

    def entries(self) -> List[Tuple[Identifier, Any]]:
        """Raw resolved cache, most-recently-completed first."""
        return self.cache.entries()
