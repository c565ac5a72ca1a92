"""CQL filter construction with escaped literals.

Every value that reaches a filter string goes through literal(), so user
text can never close a quote and append its own predicate.
"""

from __future__ import annotations

import re

_ATTRIBUTE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_OPERATORS = {"=", "<>", "<", "<=", ">", ">="}


def attribute(name: str) -> str:
    """Validate an attribute name.

    Raises:
        ValueError: If *name* is not a plain identifier.
    """
    if not _ATTRIBUTE_RE.match(name):
        raise ValueError(f"Invalid CQL attribute name: {name!r}")
    return name


def literal(value) -> str:
    """Render a Python value as a CQL literal.

    Strings are single-quoted with embedded quotes doubled; ints and
    floats are emitted bare.

    Raises:
        TypeError: For values that have no CQL literal form.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    raise TypeError(f"Unsupported CQL literal type: {type(value).__name__}")


def compare(name: str, op: str, value) -> str:
    """``name <op> literal`` e.g. ``ward_no = 3``."""
    if op not in _OPERATORS:
        raise ValueError(f"Unsupported CQL operator: {op}")
    return f"{attribute(name)} {op} {literal(value)}"


def ilike_contains(name: str, text: str) -> str:
    """Case-insensitive substring match: ``name ILIKE '%text%'``."""
    return f"{attribute(name)} ILIKE {literal('%' + text + '%')}"


def and_(*clauses: str) -> str:
    return " AND ".join(c for c in clauses if c)


def or_(*clauses: str) -> str:
    return " OR ".join(c for c in clauses if c)
