"""
Serialization helpers for requirements, registry configuration and pass results.

Registry configuration (YAML shown, JSON has the same shape):

    snippets:
      - name: hyperref
        requires: "!nolinks"
        prevents: [url]
        text: "\\\\usepackage{hyperref}"
    backends:
      latex: [hyperref, url]

Declarative snippets become constant-body providers. Providers written in
Python can be registered first and the YAML merged on top with `base=`.

Dumping is one-way for Python bodies: such entries carry `python_body: true`
instead of `text`, and loading one back warns and yields a provider whose
body returns None.

The dict structure is explicit and stable, as is the requirement dict form.
"""
from __future__ import annotations

import json
import warnings
from typing import Any, Dict, List, Optional

import yaml

from preamble.assembler import PassResult
from preamble.expressions import (
    IdentifierReference,
    LogicalExpression,
    LogicalOperator,
    Requirement,
    UnaryExpression,
    UnaryOperator,
    is_identifier,
)
from preamble.model import Registry, Snippet
from preamble.requirements_parser import RequirementError
from preamble.snippets import ConstantBody, ProviderRegistration, defsnippet


class RegistryConfigError(ValueError):
    """Raised when a registry configuration document is invalid."""
    pass


_SNIPPET_KEYS = {"name", "requires", "prevents", "text", "properties", "description", "python_body"}


def requirement_to_dict(req: Requirement | None) -> Any:
    if req is None:
        return None
    if isinstance(req, LogicalExpression):
        return {
            "type": "logical",
            "operator": req.operator.value,
            "operands": [requirement_to_dict(o) for o in req.operands],
        }
    if isinstance(req, IdentifierReference):
        return {"type": "ref", "name": req.name}
    if isinstance(req, UnaryExpression):
        return {
            "type": "unary",
            "operator": req.operator.value,
            "operand": requirement_to_dict(req.operand),
        }
    raise TypeError(f"Unsupported Requirement type: {type(req)}")


def requirement_from_dict(d: Any) -> Requirement | None:
    if d is None:
        return None
    t = d.get("type")
    if t == "logical":
        op = LogicalOperator(d["operator"])
        operands = tuple(requirement_from_dict(o) for o in d["operands"])
        return LogicalExpression(operator=op, operands=operands)
    if t == "ref":
        return IdentifierReference(d["name"])
    if t == "unary":
        op = UnaryOperator(d["operator"])
        return UnaryExpression(operator=op, operand=requirement_from_dict(d["operand"]))
    raise TypeError(f"Unsupported requirement dict type: {t}")


def _snippet_value_to_data(value: Any) -> Any:
    if isinstance(value, Snippet):
        return {"fragment": value.fragment, "properties": _snippet_value_to_data(value.properties)}
    if isinstance(value, (tuple, list)):
        return [_snippet_value_to_data(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _snippet_value_to_data(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return repr(value)


def provider_to_dict(p: ProviderRegistration) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "name": p.name,
        "requires": requirement_to_dict(p.requires),
        "prevents": list(p.prevents),
        "description": p.description,
    }
    if isinstance(p.body, ConstantBody):
        value = p.body.value
        if isinstance(value, Snippet):
            d["text"] = value.fragment
            d["properties"] = _snippet_value_to_data(value.properties)
        else:
            d["text"] = _snippet_value_to_data(value)
    else:
        d["python_body"] = True
    return d


def provider_from_dict(d: Dict[str, Any]) -> ProviderRegistration:
    if not isinstance(d, dict):
        raise RegistryConfigError(f"Snippet entry must be a mapping, got {d!r}")
    name = d.get("name")
    if not name:
        raise RegistryConfigError(f"Snippet entry without a name: {d!r}")

    unknown = set(d) - _SNIPPET_KEYS
    if unknown:
        warnings.warn(f"Ignoring unknown keys for snippet {name}: {sorted(unknown)}", UserWarning)

    if d.get("python_body"):
        warnings.warn(f"Snippet {name} was dumped from a Python body and loads without one", UserWarning)

    requires = d.get("requires")
    if isinstance(requires, dict):
        try:
            requires = requirement_from_dict(requires)
        except (TypeError, KeyError, ValueError, AttributeError) as e:
            raise RegistryConfigError(f"Invalid requires for {name}: {e}") from e

    text = d.get("text")
    if d.get("properties") is not None:
        if not isinstance(text, str):
            raise RegistryConfigError(f"Snippet {name} has properties but no text")
        text = Snippet(fragment=text, properties=d["properties"])

    try:
        return defsnippet(name, text, requires=requires, prevents=d.get("prevents"),
                          description=d.get("description"))
    except RequirementError as e:
        raise RegistryConfigError(f"Invalid snippet {name}: {e}") from e


def registry_to_dict(r: Registry) -> Dict[str, Any]:
    return {
        "snippets": [provider_to_dict(p) for p in r.providers.values()],
        "backends": {name: list(ids) for name, ids in r.backends.items()},
    }


def registry_from_dict(d: Dict[str, Any] | None, base: Optional[Registry] = None) -> Registry:
    """
    Build (or extend) a Registry from its dict form.

    Args:
        d: Configuration mapping with optional `snippets` and `backends` keys
        base: Existing registry to merge into (modified in place)

    Raises:
        RegistryConfigError: If the configuration is invalid
    """
    registry = base if base is not None else Registry()
    if d is None:
        return registry
    if not isinstance(d, dict):
        raise RegistryConfigError(f"Registry configuration must be a mapping, got {type(d).__name__}")

    unknown = set(d) - {"snippets", "backends"}
    if unknown:
        warnings.warn(f"Ignoring unknown registry keys: {sorted(unknown)}", UserWarning)

    for entry in d.get("snippets") or []:
        registry.register(provider_from_dict(entry))

    backends = d.get("backends") or {}
    if not isinstance(backends, dict):
        raise RegistryConfigError("backends must map backend names to identifier lists")
    for name, ids in backends.items():
        if not isinstance(ids, list):
            raise RegistryConfigError(f"Backend {name} must list identifiers, got {ids!r}")
        for identifier in ids:
            if not is_identifier(identifier):
                raise RegistryConfigError(f"Backend {name} lists a non-identifier: {identifier!r}")
        registry.add_backend(name, [i.strip() if isinstance(i, str) else i for i in ids])

    return registry


def registry_to_json(r: Registry) -> str:
    return json.dumps(registry_to_dict(r), sort_keys=True)


def registry_from_json(s: str, base: Optional[Registry] = None) -> Registry:
    d = json.loads(s)
    return registry_from_dict(d, base=base)


def registry_to_yaml(r: Registry) -> str:
    return yaml.safe_dump(registry_to_dict(r), sort_keys=False)


def registry_from_yaml(s: str, base: Optional[Registry] = None) -> Registry:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise RegistryConfigError(f"Invalid YAML registry: {e}") from e
    return registry_from_dict(d, base=base)


def load_registry(path: str, base: Optional[Registry] = None) -> Registry:
    """Load a registry from a .yaml/.yml or .json file."""
    with open(path) as f:
        content = f.read()
    if path.endswith(".json"):
        return registry_from_json(content, base=base)
    return registry_from_yaml(content, base=base)


def pass_result_to_dict(result: PassResult) -> Dict[str, Any]:
    entries: List[Dict[str, Any]] = [
        {"identifier": key, "value": _snippet_value_to_data(value)}
        for key, value in result.entries
    ]
    return {
        "backend": result.backend,
        "fragments": list(result.fragments),
        "entries": entries,
    }


def pass_result_to_yaml(result: PassResult) -> str:
    return yaml.safe_dump(pass_result_to_dict(result), sort_keys=False)
