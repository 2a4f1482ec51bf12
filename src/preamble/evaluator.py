"""
Requirement evaluator.

Interprets a Requirement AST against a resolution context with
short-circuit semantics. Evaluating a leaf is a real `resolve` call:
it may run a provider and it populates the pass cache, which is why
operand order and short-circuiting are observable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from preamble.expressions import (
    IdentifierReference,
    LogicalExpression,
    LogicalOperator,
    Requirement,
    UnaryExpression,
    UnaryOperator,
)

if TYPE_CHECKING:
    from preamble.context import ResolutionContext


def satisfies(requirement: Optional[Requirement], context: "ResolutionContext") -> bool:
    """
    Evaluate a requirement.

    Rules:
        - leaf: truthiness of context.resolve(name)
        - NOT: negation of its operand
        - AND: left to right, stops at the first falsy operand
        - OR: left to right, stops at the first truthy operand
        - None (no requirement): always satisfied

    Operands after the deciding one are never resolved.
    """
    if requirement is None:
        return True

    if isinstance(requirement, IdentifierReference):
        return bool(context.resolve(requirement.name))

    if isinstance(requirement, UnaryExpression):
        if requirement.operator == UnaryOperator.NOT:
            return not satisfies(requirement.operand, context)
        raise TypeError(f"Unsupported unary operator: {requirement.operator}")

    if isinstance(requirement, LogicalExpression):
        if requirement.operator == LogicalOperator.AND:
            return all(satisfies(operand, context) for operand in requirement.operands)
        if requirement.operator == LogicalOperator.OR:
            return any(satisfies(operand, context) for operand in requirement.operands)
        raise TypeError(f"Unsupported logical operator: {requirement.operator}")

    raise TypeError(f"Unsupported Requirement type: {type(requirement)}")
