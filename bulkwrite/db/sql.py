"""
SQL text synthesis for multi-row INSERT, UPDATE and DELETE.

Two families of builders share the same statement shapes:

- ``build_*`` inline values as SQL literals and return plain text.
- ``compile_*`` emit ``:name`` placeholders and return a BoundStatement.

⚠️ SECURITY CONTRACT ⚠️
``format_literal`` does NOT escape embedded quotes. Inlined text is only safe
for trusted values; anything user-controlled MUST go through the ``compile_*``
builders, which bind values through the driver.

All builders emit rows and statements in the iteration order of ``records``
and return an empty result for an empty collection.
"""
from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any, Iterable, Optional

from .extract import ValueExtractor
from .models import BoundStatement, ColumnMapping, TableMapping

_QUOTED_TYPES = (str, datetime, date, time)

_default_extractor = ValueExtractor()


def format_literal(value: Any) -> str:
    """
    Render ``value`` as an inline SQL literal.

    None -> NULL; str and date/time values -> single-quoted text (unescaped);
    bool -> TRUE/FALSE; anything else -> its unquoted ``str()``.

    Raises:
        ValueError: For NaN or infinite floats, which have no SQL literal
    """
    if value is None:
        return "NULL"
    if isinstance(value, _QUOTED_TYPES):
        return f"'{value}'"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot render non-finite float {value!r} as a SQL literal")
    return str(value)


def insert_columns(mapping: TableMapping, include_id_column: bool = False) -> tuple[ColumnMapping, ...]:
    if include_id_column:
        return mapping.columns
    return mapping.non_key_columns


def _rows(
    mapping: TableMapping,
    records: list,
    columns: tuple[ColumnMapping, ...],
    extractor: ValueExtractor,
) -> list[list[Any]]:
    # Extract everything up front so a missing field aborts before any text exists.
    return [extractor.row(record, mapping, columns) for record in records]


def build_insert(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    include_id_column: bool = False,
    extractor: Optional[ValueExtractor] = None,
) -> str:
    """
    Build one multi-row INSERT.

    Example:
        INSERT INTO t (name) VALUES ('A'),('B'),('C');
    """
    records = list(records or ())
    if not records:
        return ""

    columns = insert_columns(mapping, include_id_column)
    rows = _rows(mapping, records, columns, extractor or _default_extractor)

    col_names = ",".join(c.column_name for c in columns)
    values = ",".join(
        "(" + ",".join(format_literal(v) for v in row) + ")" for row in rows
    )
    return f"INSERT INTO {mapping.table_name} ({col_names}) VALUES {values};"


def build_delete(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    extractor: Optional[ValueExtractor] = None,
) -> str:
    """
    Build one DELETE keyed on the primary key.

    Example:
        DELETE FROM t WHERE id IN ( 1,2,3 );

    Raises:
        SchemaConstraintError: If the mapping has no single primary key column
    """
    records = list(records or ())
    if not records:
        return ""

    pk = mapping.primary_key
    ids = _rows(mapping, records, (pk,), extractor or _default_extractor)
    id_list = ",".join(format_literal(row[0]) for row in ids)
    return f"DELETE FROM {mapping.table_name} WHERE {pk.column_name} IN ( {id_list} );"


def _set_clause(columns: tuple[ColumnMapping, ...], rendered: list[str]) -> str:
    return ",".join(f"`{c.column_name}` = {r}" for c, r in zip(columns, rendered))


def update_statements(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    extractor: Optional[ValueExtractor] = None,
) -> list[str]:
    """
    Build one UPDATE per record, keyed on the primary key.

    Returns an empty list when the mapping has nothing but the key to set.

    Raises:
        SchemaConstraintError: If the mapping has no single primary key column
    """
    records = list(records or ())
    if not records:
        return []

    pk = mapping.primary_key
    columns = mapping.non_key_columns
    if not columns:
        return []  # nothing to update

    rows = _rows(mapping, records, columns + (pk,), extractor or _default_extractor)
    statements = []
    for row in rows:
        *values, id_value = row
        set_sql = _set_clause(columns, [format_literal(v) for v in values])
        statements.append(
            f"UPDATE {mapping.table_name} SET {set_sql} "
            f"WHERE {pk.column_name} = {format_literal(id_value)};"
        )
    return statements


def build_update(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    extractor: Optional[ValueExtractor] = None,
) -> str:
    """
    Build a multi-statement UPDATE batch, each statement followed by one space.

    Example:
        UPDATE t SET `name` = 'A2' WHERE id = 1; UPDATE t SET `name` = 'B2' WHERE id = 2;
    """
    return "".join(f"{stmt} " for stmt in update_statements(mapping, records, extractor))


def compile_insert(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    include_id_column: bool = False,
    extractor: Optional[ValueExtractor] = None,
) -> Optional[BoundStatement]:
    """Parameterized form of build_insert; None for an empty collection."""
    records = list(records or ())
    if not records:
        return None

    columns = insert_columns(mapping, include_id_column)
    rows = _rows(mapping, records, columns, extractor or _default_extractor)

    params: dict[str, Any] = {}
    tuples = []
    for i, row in enumerate(rows):
        names = []
        for j, value in enumerate(row):
            name = f"r{i}_{j}"
            params[name] = value
            names.append(f":{name}")
        tuples.append("(" + ",".join(names) + ")")

    col_names = ",".join(c.column_name for c in columns)
    sql = f"INSERT INTO {mapping.table_name} ({col_names}) VALUES {','.join(tuples)};"
    return BoundStatement(sql, params)


def compile_delete(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    extractor: Optional[ValueExtractor] = None,
) -> Optional[BoundStatement]:
    """Parameterized form of build_delete; None for an empty collection."""
    records = list(records or ())
    if not records:
        return None

    pk = mapping.primary_key
    ids = _rows(mapping, records, (pk,), extractor or _default_extractor)
    params = {f"k{i}": row[0] for i, row in enumerate(ids)}
    placeholders = ",".join(f":{name}" for name in params)
    sql = f"DELETE FROM {mapping.table_name} WHERE {pk.column_name} IN ( {placeholders} );"
    return BoundStatement(sql, params)


def compile_update(
    mapping: TableMapping,
    records: Optional[Iterable[Any]],
    extractor: Optional[ValueExtractor] = None,
) -> Optional[BoundStatement]:
    """
    Parameterized form of update_statements.

    Every record shares one statement shape, so the result carries one
    parameter dict per record and runs as an executemany.
    """
    records = list(records or ())
    if not records:
        return None

    pk = mapping.primary_key
    columns = mapping.non_key_columns
    if not columns:
        return None  # nothing to update

    rows = _rows(mapping, records, columns + (pk,), extractor or _default_extractor)
    set_sql = _set_clause(columns, [f":c{j}" for j in range(len(columns))])
    sql = f"UPDATE {mapping.table_name} SET {set_sql} WHERE {pk.column_name} = :pk;"

    params = []
    for row in rows:
        *values, id_value = row
        bound = {f"c{j}": v for j, v in enumerate(values)}
        bound["pk"] = id_value
        params.append(bound)
    return BoundStatement(sql, params)
