from __future__ import annotations

import re

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Validate that an identifier (table/column name) is safe for SQL interpolation.

    MySQL identifiers can contain letters, digits, underscores, and dollar signs,
    but we restrict to alphanumeric + underscore for security and simplicity.

    ⚠️ SECURITY CONTRACT ⚠️
    This function validates identifier format but does NOT make inlined
    *values* safe. Identifiers come from table mappings, which MUST be trusted
    (hardcoded, registered by the application, or read from ORM models).

    Args:
        name: The identifier to validate
        identifier_type: Description of the identifier (for error messages)

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        TypeError: If identifier is not a string
        ValueError: If identifier contains unsafe characters or is invalid

    Example:
        >>> _validate_identifier("orders", "table")
        'orders'
        >>> _validate_identifier("'; DROP TABLE--", "table")
        ValueError: Invalid table '; DROP TABLE--': ...
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")

    if not _IDENTIFIER_RE.match(name):
        raise ValueError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    if len(name) > 64:
        raise ValueError(f"{identifier_type} {name!r} exceeds MySQL's 64-character limit")

    return name


def _validate_table_name(name: str) -> str:
    """Validate a table name, allowing one ``schema.table`` qualifier."""
    if not isinstance(name, str):
        raise TypeError(f"table must be a string, got {type(name).__name__}")

    parts = name.split(".")
    if len(parts) > 2:
        raise ValueError(f"Invalid table {name!r}: at most one schema qualifier is allowed")
    for part in parts:
        _validate_identifier(part, "table")
    return name
