from __future__ import annotations

import threading
from collections.abc import Mapping
from operator import attrgetter, itemgetter
from typing import Any, Callable

from .models import ColumnMapping, TableMapping
from ..errors import FieldNotFoundError

Getter = Callable[[Any], Any]


def _lookup_folded(names: Any, wanted: str) -> str | None:
    folded = wanted.casefold()
    for name in names:
        if isinstance(name, str) and name.casefold() == folded:
            return name
    return None


def _attribute_getter(field_name: str, case_insensitive: bool) -> Getter:
    if not case_insensitive:
        return attrgetter(field_name)

    resolved: list[str] = []

    def getter(record: Any) -> Any:
        # Resolve the real spelling on first use; the type is fixed per table.
        # An exact match wins over a case-folded one, as for mapping records.
        if not resolved:
            if hasattr(record, field_name):
                name = field_name
            else:
                name = _lookup_folded(dir(record), field_name)
            if name is None:
                raise AttributeError(field_name)
            resolved.append(name)
        return getattr(record, resolved[0])

    return getter


def _item_getter(field_name: str, case_insensitive: bool) -> Getter:
    if not case_insensitive:
        return itemgetter(field_name)

    def getter(record: Mapping) -> Any:
        if field_name in record:
            return record[field_name]
        name = _lookup_folded(record.keys(), field_name)
        if name is None:
            raise KeyError(field_name)
        return record[name]

    return getter


class ValueExtractor:
    """
    Reads column values from records through per-type accessor tables.

    Field names match exactly by default. With ``case_insensitive=True``
    every lookup (insert, update and delete alike) ignores case.
    Mapping records are read by key, everything else by attribute.
    """

    def __init__(self, case_insensitive: bool = False) -> None:
        self.case_insensitive = case_insensitive
        self._accessors: dict[tuple[type, TableMapping], dict[str, Getter]] = {}
        self._lock = threading.Lock()

    def accessors_for(self, record_type: type, mapping: TableMapping) -> dict[str, Getter]:
        """Return column name -> getter for ``record_type``, built once per type and mapping."""
        key = (record_type, mapping)
        with self._lock:
            table = self._accessors.get(key)
            if table is None:
                table = {
                    column.column_name: self._make_getter(record_type, column.field_name)
                    for column in mapping.columns
                }
                self._accessors[key] = table
        return table

    def _make_getter(self, record_type: type, field_name: str) -> Getter:
        if issubclass(record_type, Mapping):
            return _item_getter(field_name, self.case_insensitive)
        return _attribute_getter(field_name, self.case_insensitive)

    def extract(self, record: Any, column: str | ColumnMapping) -> Any:
        """
        Return the value of ``column`` on ``record`` (None for SQL NULL).

        Raises:
            FieldNotFoundError: If the record has no matching field
        """
        field_name = column.field_name if isinstance(column, ColumnMapping) else column
        column_name = column.column_name if isinstance(column, ColumnMapping) else column
        getter = self._make_getter(type(record), field_name)
        return self._call(getter, record, column_name)

    def row(self, record: Any, mapping: TableMapping, columns: tuple[ColumnMapping, ...]) -> list[Any]:
        """Values of ``columns`` on ``record``, in column order."""
        table = self.accessors_for(type(record), mapping)
        return [self._call(table[c.column_name], record, c.column_name) for c in columns]

    @staticmethod
    def _call(getter: Getter, record: Any, column_name: str) -> Any:
        try:
            return getter(record)
        except (AttributeError, KeyError) as exc:
            raise FieldNotFoundError(
                f"{type(record).__name__} has no field for column {column_name!r}"
            ) from exc
