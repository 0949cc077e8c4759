"""Input parsing utilities.

This module translates CLI arguments into core model objects: `--where`
predicates into `SearchCmd` instances, `--field` specs into `Field`
definitions and `--data` JSON into record dicts. Validation errors are
raised as ValueError so commands can turn them into usage errors.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable

from bitabledb.core.models import Field, FieldType, SearchCmd

_OPERATORS = (">=", "<=", "!=", "=", ">", "<")
_INT_RE = re.compile(r"^-?\d+$")


def _coerce(raw: str) -> str | int:
    """Integers become int; quoted or other text stays a string."""
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        return raw[1:-1]
    if _INT_RE.match(raw):
        return int(raw)
    return raw


def parse_predicate(expr: str) -> SearchCmd:
    """
    Parse one predicate such as `age>10` or `name="zhang san"`.

    The first operator found from the left splits key and value; two-character
    operators win over their one-character prefixes.

    Raises:
        ValueError: If no operator is present or the key is empty.
    """
    for i in range(len(expr)):
        for op in _OPERATORS:
            if expr.startswith(op, i):
                key = expr[:i].strip()
                if not key:
                    raise ValueError(f"Invalid predicate: '{expr}' (missing key)")
                return SearchCmd(key=key, operator=op, value=_coerce(expr[i + len(op):]))
    raise ValueError(f"Invalid predicate: '{expr}' (expected key<op>value)")


def parse_predicates(exprs: Iterable[str]) -> list[SearchCmd]:
    """Parse every `--where` expression, keeping their order."""
    return [parse_predicate(e) for e in exprs]


def parse_field(spec: str) -> Field:
    """
    Parse a field spec `name:type`; a bare `name` means a string field.

    Raises:
        ValueError: On an empty name or unknown type.
    """
    name, _, type_name = spec.partition(":")
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid field: '{spec}' (expected name:type)")
    return Field(name=name, type=FieldType.parse(type_name) if type_name else FieldType.STRING)


def parse_fields(specs: Iterable[str]) -> tuple[Field, ...]:
    """Parse every `--field` spec, keeping their order."""
    return tuple(parse_field(s) for s in specs)


def parse_record(data: str) -> dict[str, Any]:
    """
    Parse a JSON object into a record dict.

    Raises:
        ValueError: If the text is not valid JSON or not an object.
    """
    try:
        value = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ValueError("Record must be a JSON object.")
    return value
