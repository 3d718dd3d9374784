"""Argument validation against a tool's restricted JSON schema.

The schema dialect is deliberately small::

    {"type": "object",
     "properties": {"path": {"type": "string", "description": "...", "default": "."}},
     "required": ["path"]}

``validate`` checks, in order: object shape, defaults, required fields,
unknown fields (closed schema), declared types, enums. It reports only the
first violation it meets.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import JsonDict

ROOT_FIELD = "$"


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    """First violation found while validating an argument object."""
    field: str
    message: str


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: object) -> bool:
    return (isinstance(value, int) and not isinstance(value, bool)) or (isinstance(value, float) and value.is_integer())


_TYPE_CHECKS: dict[str, Callable[[object], bool]] = {
    "string": lambda v: isinstance(v, str),
    "number": _is_number,
    "integer": _is_integer,
    "boolean": lambda v: isinstance(v, bool),
    "object": lambda v: isinstance(v, dict),
    "array": lambda v: isinstance(v, list),
    "null": lambda v: v is None,
}


def check_type(value: object, type_name: object) -> bool:
    """Whether ``value`` satisfies the schema type. Unrecognized types never match."""
    check = _TYPE_CHECKS.get(type_name) if isinstance(type_name, str) else None
    return check is not None and check(value)


def _in_enum(value: object, options: object) -> bool:
    # bool/number are distinct in JSON; Python's True == 1 must not satisfy [1]
    if not isinstance(options, list):
        return False
    return any(type(value) is type(opt) or (_is_number(value) and _is_number(opt)) for opt in options if opt == value)


def validate(args: object, schema: object) -> ValidationIssue | None:
    """Validate and normalize ``args`` in place against ``schema``.

    Defaults for absent properties are inserted into ``args`` before any check
    runs, so downstream code sees the normalized object. Running ``validate``
    again on the result is a no-op with the same verdict.

    Returns:
        None when valid, else the first ValidationIssue
    """
    if not isinstance(schema, dict) or not isinstance(props := schema.get("properties"), dict):
        return None

    if not isinstance(args, dict):
        return ValidationIssue(ROOT_FIELD, "arguments must be an object")

    for key, prop in props.items():
        if key not in args and isinstance(prop, dict) and "default" in prop:
            args[key] = copy.deepcopy(prop["default"])

    for req in schema.get("required") or ():
        if req not in args:
            return ValidationIssue(str(req), "missing required field")

    for key, value in args.items():
        if key not in props:
            return ValidationIssue(key, "unknown field")

        prop = props[key]
        if not isinstance(prop, dict):
            continue

        if "type" in prop and not check_type(value, prop["type"]):
            return ValidationIssue(key, f"type mismatch, expected {prop['type']}")

        if "enum" in prop and not _in_enum(value, prop["enum"]):
            return ValidationIssue(key, "value not in enum")

    return None


def minimal_arguments(schema: JsonDict) -> JsonDict:
    """Smallest argument object satisfying ``schema``.

    Fills each required field without a default with its first enum option or
    a zero value of its declared type. Useful for probing tools.
    """
    props = schema.get("properties") if isinstance(schema, dict) else None
    if not isinstance(props, dict):
        return {}
    zero: dict[str, object] = {"string": "", "number": 0, "integer": 0, "boolean": False, "object": {}, "array": [], "null": None}
    args: JsonDict = {}
    for req in schema.get("required") or ():
        prop = props.get(req)
        if not isinstance(prop, dict) or "default" in prop:
            continue
        if isinstance(prop.get("enum"), list) and prop["enum"]:
            args[req] = copy.deepcopy(prop["enum"][0])
        elif isinstance(type_name := prop.get("type"), str):
            args[req] = copy.deepcopy(zero.get(type_name, ""))
        else:
            args[req] = ""
    return args
