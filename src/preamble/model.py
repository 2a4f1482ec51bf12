"""
Core Model Objects

Defines the data structures shared by every layer:
    - Snippet (a fragment with attached property data)
    - Binding (what an identifier means inside a pass)
    - Registry (providers plus backend → ordered provider list)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about any particular export format
        - Are configured once, then only read during a pass
        - Hold no per-pass state (that lives in `preamble.context`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

from preamble.expressions import Identifier

if TYPE_CHECKING:
    from preamble.snippets import ProviderRegistration


class UnknownBackendError(KeyError):
    """Raised when a pass is requested for a backend with no provider list."""
    pass


@dataclass(frozen=True)
class Snippet:
    """
    A preamble fragment together with arbitrary property data.

    Providers may return a plain string, a Snippet, or a
    (fragment, properties) pair. Only the fragment reaches the preamble;
    properties exist for other providers and for debug inspection.

    Properties:
        fragment: The text emitted into the preamble
        properties: Anything the provider wants to attach (optional)
    """

    fragment: str
    properties: Any = None


class BindingKind(Enum):
    """How an identifier is resolved."""
    PROVIDER = "provider"  # invoke the registered provider
    LITERAL = "literal"    # the identifier is its own value


@dataclass(frozen=True)
class Binding:
    """
    Tagged result of looking an identifier up in a registry.

    The resolver dispatches on `kind`, never on whether something
    happens to be callable.
    """

    identifier: Identifier
    kind: BindingKind
    provider: Optional["ProviderRegistration"] = None


@dataclass
class Registry:
    """
    Process-wide snippet configuration.

    Properties:
        providers:
            Provider registrations keyed by name

        backends:
            Backend name → ordered list of identifiers resolved for that backend.
            Identifiers listed here usually name providers, but a literal is
            allowed; it resolves to itself and never contributes a fragment.

    INVARIANTS:
        - Registrations are created at configuration time
        - Nothing in a pass mutates the registry
    """

    providers: Dict[str, "ProviderRegistration"] = field(default_factory=dict)
    backends: Dict[str, List[Identifier]] = field(default_factory=dict)

    def register(self, provider: "ProviderRegistration") -> "ProviderRegistration":
        """Add (or replace) a provider registration and return it."""
        self.providers[provider.name] = provider
        return provider

    def snippet(self, name: str, requires: Any = None, prevents: Any = None,
                description: Optional[str] = None) -> Callable:
        """
        Decorator form of `defsnippet` that also registers the provider.

        Example:
            @registry.snippet("hyperref", requires=["not", "nolinks"])
            def hyperref(meta, ctx):
                return "\\\\usepackage{hyperref}"
        """
        from preamble.snippets import defsnippet

        def decorator(body: Callable) -> Callable:
            self.register(defsnippet(name, body, requires=requires,
                                     prevents=prevents, description=description))
            return body

        return decorator

    def add_backend(self, backend: str, identifiers: Iterable[Identifier]) -> None:
        """Set the ordered identifier list for a backend."""
        self.backends[backend] = list(identifiers)

    def get_provider(self, name: Identifier) -> Optional["ProviderRegistration"]:
        """
        Retrieve a provider by name.

        Returns:
            ProviderRegistration or None if the name is not registered
        """
        if not isinstance(name, str):
            return None
        return self.providers.get(name)

    def binding(self, identifier: Identifier) -> Binding:
        """Classify an identifier as a provider or a literal."""
        provider = self.get_provider(identifier)
        if provider is None:
            return Binding(identifier=identifier, kind=BindingKind.LITERAL)
        return Binding(identifier=identifier, kind=BindingKind.PROVIDER, provider=provider)

    def providers_for(self, backend: str) -> List[Identifier]:
        """
        Ordered identifiers registered for a backend.

        Raises:
            UnknownBackendError: If the backend has no registered list
        """
        try:
            return list(self.backends[backend])
        except KeyError:
            raise UnknownBackendError(backend) from None
