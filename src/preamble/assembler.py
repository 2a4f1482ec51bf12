"""
Preamble assembler.

Runs one pass for a backend:
    1. fresh ResolutionContext (empty cache)
    2. resolve every identifier registered for the backend, in order
    3. read the cache back, most-recently-completed first
    4. keep provider entries whose value carries a text fragment
    5. return the fragments (property data dropped)

There is no deduplication and no sorting beyond completion order.
Provider exceptions abort the pass and reach the caller unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from preamble.context import ResolutionContext
from preamble.expressions import Identifier
from preamble.model import BindingKind, Registry, Snippet

logger = logging.getLogger(__name__)


class FragmentOrder(Enum):
    """Order in which fragments are emitted."""
    LATEST_FIRST = "latest_first"      # most recently completed first (default)
    EARLIEST_FIRST = "earliest_first"  # plain completion order


@dataclass
class PassResult:
    """
    Everything a pass produced, for hosts and for debug inspection.

    Properties:
        backend: Backend the pass ran for
        fragments: Emitted fragment strings, in output order
        entries: Raw cache contents, most-recently-completed first
    """

    backend: str
    fragments: List[str] = field(default_factory=list)
    entries: List[Tuple[Identifier, Any]] = field(default_factory=list)

    def value_of(self, identifier: Identifier, default: Any = None) -> Any:
        """Resolved value of an identifier in this pass."""
        for key, value in self.entries:
            if key == identifier:
                return value
        return default


def fragment_of(value: Any) -> Optional[str]:
    """
    Extract the text fragment from a snippet value.

    Returns:
        The fragment for a non-empty str, a Snippet, or a (str, data) pair;
        None for booleans, numbers, None and anything else
    """
    if isinstance(value, Snippet):
        fragment = value.fragment
    elif isinstance(value, str):
        fragment = value
    elif isinstance(value, (tuple, list)) and value and isinstance(value[0], str):
        fragment = value[0]
    else:
        return None
    return fragment or None


def assemble_pass(registry: Registry, backend: str, metadata: Any = None,
                  order: FragmentOrder = FragmentOrder.LATEST_FIRST) -> PassResult:
    """
    Run a full pass and keep the raw cache alongside the fragments.

    Raises:
        UnknownBackendError: If the backend has no registered provider list
    """
    identifiers = registry.providers_for(backend)
    context = ResolutionContext(registry, metadata)

    logger.debug("assembling %s preamble from %d identifiers", backend, len(identifiers))
    for identifier in identifiers:
        context.resolve(identifier)

    entries = context.entries()
    fragments = []
    for identifier, value in entries:
        # literals are their own name, never text
        if registry.binding(identifier).kind != BindingKind.PROVIDER:
            continue
        fragment = fragment_of(value)
        if fragment is not None:
            fragments.append(fragment)
    if order == FragmentOrder.EARLIEST_FIRST:
        fragments.reverse()

    logger.debug("%s preamble: %d fragments from %d cache entries",
                 backend, len(fragments), len(entries))
    return PassResult(backend=backend, fragments=fragments, entries=entries)


def assemble(registry: Registry, backend: str, metadata: Any = None,
             order: FragmentOrder = FragmentOrder.LATEST_FIRST) -> List[str]:
    """
    Compose the preamble fragments for a backend.

    Args:
        registry: Provider configuration
        backend: Backend name (e.g. "latex")
        metadata: Host pass metadata, passed untouched to every provider
        order: Fragment ordering (defaults to most-recently-completed first)

    Returns:
        Ordered list of fragment strings
    """
    return assemble_pass(registry, backend, metadata, order=order).fragments


def assemble_text(registry: Registry, backend: str, metadata: Any = None,
                  separator: str = "\n",
                  order: FragmentOrder = FragmentOrder.LATEST_FIRST) -> str:
    """Compose the preamble and join the fragments into one string."""
    return separator.join(assemble(registry, backend, metadata, order=order))
