"""Search predicate translation.

Bitable record listing accepts a formula-style filter such as
`AND(CurrentValue.[age]>10,CurrentValue.[name]="a")`. This module turns
an ordered list of `SearchCmd` predicates into that syntax. Predicates
are always AND-combined; there is no OR, NOT or nesting, so callers that
need a disjunction issue several reads and merge the results.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable

from bitabledb.core.models import Scalar, SearchCmd


def render_value(value: Scalar) -> str:
    """
    Render a predicate value as a filter literal.

    Strings are double-quoted with embedded backslashes and quotes escaped.
    Floats are written in plain decimal notation, never in exponent form.
    Integers and any other value use their default string form.
    """
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Cannot filter on non-finite number: {value!r}")
        return format(Decimal(repr(value)), "f")
    return str(value)


def render_predicate(cmd: SearchCmd) -> str:
    """Render one predicate as `CurrentValue.[key]<op><value>`."""
    return f"CurrentValue.[{cmd.key}]{cmd.operator}{render_value(cmd.value)}"


def translate(predicates: Iterable[SearchCmd]) -> str:
    """
    Translate predicates into a filter expression.

    No predicates yield an empty string (no filtering). A single predicate
    is still wrapped in `AND(...)`, matching the form the service is known
    to accept.
    """
    clauses = [render_predicate(p) for p in predicates]
    if not clauses:
        return ""
    return "AND(" + ",".join(clauses) + ")"
