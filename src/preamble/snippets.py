"""
Snippet definitions.

`defsnippet` turns the four fields a snippet author writes

    name       identifier the provider is registered under
    requires   optional requirement expression (list or infix form)
    prevents   optional identifiers to invalidate
    body       callable(metadata, context) or a constant snippet value

into a ProviderRegistration. Requirements and prevents lists are
validated here, at definition time, so configuration mistakes surface
before any document is exported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from preamble.evaluator import satisfies
from preamble.expressions import Identifier, Requirement, is_identifier
from preamble.requirements_parser import (
    RequirementError,
    is_referenceable_name,
    parse_prevents,
    parse_requirement,
)

if TYPE_CHECKING:
    from preamble.context import ResolutionContext

logger = logging.getLogger(__name__)

Body = Callable[[Any, "ResolutionContext"], Any]


@dataclass(frozen=True)
class ProviderRegistration:
    """
    A named provider, ready to be resolved inside a pass.

    Properties:
        name: Identifier the provider is registered under
        body: Computation producing the snippet value (or something falsy)
        requires: Requirement gating the body (None means unconditional)
        prevents: Identifiers invalidated every time the provider runs
        description: Human-readable note (optional, for diagrams and reports)

    IMPORTANT:
        Invocation order is fixed: prevents first, then requires, then body.
        The prevents list runs even when the requirement fails.
    """

    name: str
    body: Body
    requires: Optional[Requirement] = None
    prevents: Tuple[Identifier, ...] = ()
    description: Optional[str] = None

    def invoke(self, context: "ResolutionContext") -> Any:
        """Run the provider against a pass context and return its value."""
        for identifier in self.prevents:
            logger.debug("%s invalidates %r", self.name, identifier)
            context.invalidate(identifier)

        if self.requires is not None and not satisfies(self.requires, context):
            logger.debug("%s skipped: requirement not satisfied", self.name)
            return None

        return self.body(context.metadata, context)


class ConstantBody:
    """Body that ignores its inputs and returns a fixed snippet value."""

    def __init__(self, value: Any):
        self.value = value

    def __call__(self, metadata, context):
        return self.value

    def __repr__(self):
        return f"ConstantBody({self.value!r})"


def defsnippet(name: str, body: Any, requires: Any = None, prevents: Any = None,
               description: Optional[str] = None) -> ProviderRegistration:
    """
    Build a provider registration.

    Args:
        name: Provider name
        body: callable(metadata, context), or a constant snippet value
        requires: Requirement in list or infix form (optional)
        prevents: Identifier or list of identifiers to invalidate (optional)
        description: Free-text description (optional)

    Returns:
        ProviderRegistration

    Raises:
        RequirementError: If the name, requirement or prevents list is malformed
    """
    if not (isinstance(name, str) and is_identifier(name)):
        raise RequirementError(f"Snippet name must be a non-empty string, got {name!r}")
    if not is_referenceable_name(name):
        raise RequirementError(f"Snippet name cannot be used in a requirement: {name!r}")

    if not callable(body):
        body = ConstantBody(body)

    return ProviderRegistration(
        name=name.strip(),
        body=body,
        requires=parse_requirement(requires),
        prevents=parse_prevents(prevents),
        description=description,
    )
