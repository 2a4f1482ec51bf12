"""
Requirement parser (raw configuration → Requirement AST).

Requirements are written by snippet authors in one of two shapes:

List form (nested lists / tuples):
    "hyperref"                         single identifier
    ["hyperref", "color"]              implicit AND
    ["or", "minted", "listings"]       explicit operator
    ["not", "beamer"]                  NOT takes exactly one operand
    ["and", "a", ["or", "b", ["not", "c"]]]

Infix form (a single string):
    "hyperref & (minted | !listings)"
    "hyperref and (minted or not listings)"

Precedence in infix form: NOT binds tightest, then AND, then OR.

A string with no whitespace, parentheses, `&`, `|` or `!` is a bare name and
is taken verbatim, so names like `use-minted?` or `pdf/a` stay referenceable.

Parsing happens once, when a provider is registered. Anything malformed
raises RequirementError immediately rather than surfacing mid-pass.
"""

import re
from typing import Any, List, Optional, Tuple

from preamble.expressions import (
    Identifier,
    IdentifierReference,
    LogicalExpression,
    LogicalOperator,
    Requirement,
    UnaryExpression,
    UnaryOperator,
    is_identifier,
)


class RequirementError(ValueError):
    """Raised when a requirement expression is malformed."""
    pass


_OPERATOR_NAMES = {
    "and": LogicalOperator.AND,
    "or": LogicalOperator.OR,
}

_TOKEN_RE = re.compile(r"\s*(?:(?P<paren>[()])|(?P<op>&&|\|\||[&|!])|(?P<ident>[^\s()&|!]+))")

# Characters that make a string an infix expression rather than a bare name
_INFIX_SYNTAX_RE = re.compile(r"[\s()&|!]")


def parse_requirement(raw: Any) -> Optional[Requirement]:
    """
    Build a Requirement AST from its raw configuration form.

    Args:
        raw: None, an identifier, an infix string, a (nested) list or tuple,
             or an already-built Requirement

    Returns:
        Requirement AST, or None when there is no requirement

    Raises:
        RequirementError: If the expression is malformed
    """
    if raw is None:
        return None
    if isinstance(raw, Requirement):
        return raw
    if isinstance(raw, (list, tuple)) and len(raw) == 0:
        return None
    return _parse_node(raw)


def _parse_node(raw: Any) -> Requirement:
    if isinstance(raw, Requirement):
        return raw
    if isinstance(raw, bool):
        return IdentifierReference(raw)
    if isinstance(raw, str):
        return _parse_string(raw)
    if isinstance(raw, (list, tuple)):
        return _parse_list(list(raw))
    raise RequirementError(f"Not an identifier or expression: {raw!r}")


def _parse_string(raw: str) -> Requirement:
    """A bare name is taken verbatim; anything with operators goes to parse_infix."""
    text = raw.strip()
    if not text:
        raise RequirementError("Empty identifier in requirement")
    if _INFIX_SYNTAX_RE.search(text):
        return parse_infix(text)
    if not is_referenceable_name(text):
        raise RequirementError(f"Operator keyword used as an identifier: {text!r}")
    return IdentifierReference(text)


def is_referenceable_name(name: str) -> bool:
    """
    True if a requirement can name this identifier.

    Any non-empty string works except operator keywords and strings
    holding whitespace, parentheses, `&`, `|` or `!`.
    """
    text = name.strip()
    return bool(text) and text.lower() not in ("and", "or", "not") and not _INFIX_SYNTAX_RE.search(text)


def _parse_list(items: List[Any]) -> Requirement:
    if not items:
        raise RequirementError("Empty sub-expression")

    head = items[0]
    keyword = head.lower() if isinstance(head, str) else None

    if keyword == "not":
        if len(items) != 2:
            raise RequirementError(f"'not' takes exactly one operand, got {len(items) - 1}")
        return UnaryExpression(UnaryOperator.NOT, _parse_node(items[1]))

    if keyword in _OPERATOR_NAMES:
        operands = items[1:]
        if not operands:
            raise RequirementError(f"'{head}' needs at least one operand")
        return LogicalExpression(
            _OPERATOR_NAMES[keyword],
            tuple(_parse_node(item) for item in operands),
        )

    # No leading operator: implicit AND
    return LogicalExpression(
        LogicalOperator.AND,
        tuple(_parse_node(item) for item in items),
    )


def tokenize(expr_str: str) -> List[str]:
    """Tokenize an infix requirement string."""
    tokens = []
    pos = 0
    expr_str = expr_str.rstrip()
    while pos < len(expr_str):
        m = _TOKEN_RE.match(expr_str, pos)
        if m is None:
            break
        tokens.append(m.group(m.lastgroup))
        pos = m.end()
    if not tokens:
        raise RequirementError(f"No valid tokens in requirement: {expr_str!r}")
    return tokens


def parse_infix(expr_str: str) -> Requirement:
    """
    Parse an infix requirement string into an AST.

    Raises:
        RequirementError: If syntax is invalid
    """
    tokens = tokenize(expr_str)
    ast, pos = _parse_or(tokens, 0)
    if pos < len(tokens):
        raise RequirementError(f"Unexpected tokens after parsing: {tokens[pos:]}")
    return ast


def _is_keyword(token: str, *names: str) -> bool:
    return token.lower() in names


def _parse_or(tokens: List[str], pos: int) -> Tuple[Requirement, int]:
    """Parse OR chain (lowest precedence)."""
    operand, pos = _parse_and(tokens, pos)
    operands = [operand]

    while pos < len(tokens) and (tokens[pos] in ("|", "||") or _is_keyword(tokens[pos], "or")):
        operand, pos = _parse_and(tokens, pos + 1)
        operands.append(operand)

    if len(operands) == 1:
        return operands[0], pos
    return LogicalExpression(LogicalOperator.OR, tuple(operands)), pos


def _parse_and(tokens: List[str], pos: int) -> Tuple[Requirement, int]:
    """Parse AND chain."""
    operand, pos = _parse_unary(tokens, pos)
    operands = [operand]

    while pos < len(tokens) and (tokens[pos] in ("&", "&&") or _is_keyword(tokens[pos], "and")):
        operand, pos = _parse_unary(tokens, pos + 1)
        operands.append(operand)

    if len(operands) == 1:
        return operands[0], pos
    return LogicalExpression(LogicalOperator.AND, tuple(operands)), pos


def _parse_unary(tokens: List[str], pos: int) -> Tuple[Requirement, int]:
    """Parse NOT."""
    if pos < len(tokens) and (tokens[pos] == "!" or _is_keyword(tokens[pos], "not")):
        operand, pos = _parse_unary(tokens, pos + 1)
        return UnaryExpression(UnaryOperator.NOT, operand), pos

    return _parse_primary(tokens, pos)


def _parse_primary(tokens: List[str], pos: int) -> Tuple[Requirement, int]:
    """Parse identifier or parenthesized expression."""
    if pos >= len(tokens):
        raise RequirementError("Unexpected end of requirement")

    token = tokens[pos]

    if token == "(":
        expr, pos = _parse_or(tokens, pos + 1)
        if pos >= len(tokens) or tokens[pos] != ")":
            raise RequirementError("Missing closing parenthesis")
        return expr, pos + 1

    if token in (")", "&", "&&", "|", "||", "!") or _is_keyword(token, "and", "or", "not"):
        raise RequirementError(f"Unexpected token: {token}")

    return IdentifierReference(token), pos + 1


def parse_prevents(raw: Any) -> Tuple[Identifier, ...]:
    """
    Normalize a prevents clause to a tuple of identifiers.

    A single identifier is accepted as a one-element list.

    Raises:
        RequirementError: If any entry is not an identifier
    """
    if raw is None:
        return ()
    if isinstance(raw, (str, bool)):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        raise RequirementError(f"prevents must be a list of identifiers, got {raw!r}")

    identifiers = []
    for item in raw:
        if not is_identifier(item):
            raise RequirementError(f"Not an identifier in prevents: {item!r}")
        identifiers.append(item.strip() if isinstance(item, str) else item)
    return tuple(identifiers)


def requirement_identifiers(requirement: Optional[Requirement]) -> List[Identifier]:
    """Return the leaf identifiers of a requirement, left to right."""
    if requirement is None:
        return []
    if isinstance(requirement, IdentifierReference):
        return [requirement.name]
    if isinstance(requirement, UnaryExpression):
        return requirement_identifiers(requirement.operand)
    if isinstance(requirement, LogicalExpression):
        names: List[Identifier] = []
        for operand in requirement.operands:
            names.extend(requirement_identifiers(operand))
        return names
    raise TypeError(f"Unsupported Requirement type: {type(requirement)}")
