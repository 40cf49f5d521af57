from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .helpers import _validate_identifier, _validate_table_name
from ..errors import SchemaConstraintError


class StatementKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ColumnMapping:
    """
    One mapped column.

    ``attribute`` is the record field holding the value when it differs from
    the column name; None means the field is named like the column.
    """
    column_name: str
    is_primary_key: bool = False
    attribute: Optional[str] = None

    def __post_init__(self) -> None:
        _validate_identifier(self.column_name, "column")

    @property
    def field_name(self) -> str:
        return self.attribute if self.attribute is not None else self.column_name


@dataclass(frozen=True)
class TableMapping:
    """
    A table name plus its ordered columns.

    Column order drives the column clause and every VALUES tuple.
    """
    table_name: str
    columns: tuple[ColumnMapping, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        _validate_table_name(self.table_name)
        # Accept any sequence but store an immutable tuple.
        object.__setattr__(self, "columns", tuple(self.columns))
        names = [c.column_name for c in self.columns]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate column names in mapping for {self.table_name!r}")

    @property
    def primary_key(self) -> ColumnMapping:
        """
        The single column flagged as primary key.

        Raises:
            SchemaConstraintError: If no column, or more than one, is flagged
        """
        keys = [c for c in self.columns if c.is_primary_key]
        if not keys:
            raise SchemaConstraintError(
                f"Table {self.table_name!r} has no primary key column; "
                "bulk update and delete require one"
            )
        if len(keys) > 1:
            raise SchemaConstraintError(
                f"Table {self.table_name!r} has a composite primary key "
                f"({', '.join(c.column_name for c in keys)}); "
                "bulk update and delete require a single key column"
            )
        return keys[0]

    @property
    def non_key_columns(self) -> tuple[ColumnMapping, ...]:
        return tuple(c for c in self.columns if not c.is_primary_key)


Params = Union[Mapping[str, Any], list]


@dataclass(frozen=True)
class BoundStatement:
    """
    SQL with ``:name`` placeholders plus its bind values.

    A list of parameter dicts runs the same statement once per dict.
    """
    sql: str
    params: Params = field(default_factory=dict)
