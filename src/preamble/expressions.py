"""
Requirement Expressions

Requirements gate whether a snippet provider contributes a fragment.
They are represented as Abstract Syntax Trees (ASTs), built once when a
provider is registered, never interpreted from raw lists at call time.

A requirement is a boolean tree:
    - leaves are identifiers (provider names or literal sentinels)
    - internal nodes are AND / OR (n-ary) or NOT (unary)

ARCHITECTURAL RULE:
    These classes are structure only.
    Evaluation lives in `preamble.evaluator`.
    Parsing lives in `preamble.requirements_parser`.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Tuple, Union


# A cache key: a provider name, or a literal sentinel such as True/False.
Identifier = Union[str, bool]


class Requirement(ABC):
    """
    Base class for all requirement AST nodes.

    This is intentionally minimal.
    It exists to provide type-safety for the requirement hierarchy.

    DO NOT:
        - Add evaluation logic here (belongs in the evaluator)
        - Add string representations (belongs in backends)

    This class is structure only.
    """
    pass


class LogicalOperator(Enum):
    """
    N-ary logical operators.

    Operands are evaluated left to right with short-circuit semantics,
    so the order of operands is significant.
    """

    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class LogicalExpression(Requirement):
    """
    Conjunction or disjunction over an ordered tuple of operands.

    Example:
        (and hyperref (or color xcolor))

    Becomes:
        LogicalExpression(
            operator=LogicalOperator.AND,
            operands=(
                IdentifierReference("hyperref"),
                LogicalExpression(
                    operator=LogicalOperator.OR,
                    operands=(
                        IdentifierReference("color"),
                        IdentifierReference("xcolor"),
                    ),
                ),
            ),
        )

    Properties:
        operator: LogicalOperator enum
        operands: Tuple of Requirement nodes (at least one)
    """

    operator: LogicalOperator
    operands: Tuple[Requirement, ...]


@dataclass(frozen=True)
class IdentifierReference(Requirement):
    """
    References an identifier in the resolution context.

    The identifier may name a registered provider, in which case
    evaluating this leaf resolves (and memoizes) that provider.
    Otherwise the identifier is a literal and resolves to itself.

    IMPORTANT:
        This object does NOT check that a provider exists.
        Unknown names are literals, not errors.
    """

    name: Identifier


class UnaryOperator(Enum):
    """Unary operators. NOT is the only one."""
    NOT = "NOT"


@dataclass(frozen=True)
class UnaryExpression(Requirement):
    """
    Represents a unary operation.

    Example:
        (not minted)

    Becomes:
        UnaryExpression(
            operator=UnaryOperator.NOT,
            operand=IdentifierReference("minted"),
        )
    """

    operator: UnaryOperator
    operand: Requirement


def is_identifier(value: Hashable) -> bool:
    """True if value can be used as an identifier (non-empty str or bool)."""
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip() != ""
