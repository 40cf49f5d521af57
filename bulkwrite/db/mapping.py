from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Iterable, Protocol

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from .models import ColumnMapping, TableMapping
from ..errors import MappingNotFoundError

logger = logging.getLogger(__name__)


class MappingProvider(Protocol):
    """
    Resolves record types to table mappings.

    Implementations must be deterministic per type and raise
    MappingNotFoundError for unknown types.
    """

    def resolve(self, record_type: type) -> TableMapping:
        ...


class MappingRegistry:
    """
    Explicit, statically registered table mappings.

    Usage:
        registry = MappingRegistry()
        registry.register(
            Order,
            TableMapping("orders", (ColumnMapping("id", True), ColumnMapping("amount"))),
        )
        registry.register_dataclass(Customer, "customers")
    """

    def __init__(self) -> None:
        self._mappings: dict[type, TableMapping] = {}
        self._lock = threading.Lock()

    def register(self, record_type: type, mapping: TableMapping) -> TableMapping:
        with self._lock:
            self._mappings[record_type] = mapping
        logger.debug("Registered mapping %s -> %s", record_type.__name__, mapping.table_name)
        return mapping

    def register_dataclass(
        self,
        record_type: type,
        table_name: str,
        primary_key: str | Iterable[str] | None = "id",
    ) -> TableMapping:
        """
        Register a dataclass; its fields become columns in declaration order.

        Args:
            record_type: A dataclass type
            table_name: Backing table
            primary_key: Field name(s) flagged as primary key, or None

        Raises:
            TypeError: If record_type is not a dataclass
            ValueError: If a primary key name is not a field
        """
        if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
            raise TypeError(f"{record_type!r} is not a dataclass type")

        if primary_key is None:
            keys: set[str] = set()
        elif isinstance(primary_key, str):
            keys = {primary_key}
        else:
            keys = set(primary_key)

        names = [f.name for f in dataclasses.fields(record_type)]
        unknown = keys.difference(names)
        if unknown:
            raise ValueError(
                f"Primary key field(s) {sorted(unknown)} not found on {record_type.__name__}"
            )

        mapping = TableMapping(
            table_name,
            tuple(ColumnMapping(name, name in keys) for name in names),
        )
        return self.register(record_type, mapping)

    def resolve(self, record_type: type) -> TableMapping:
        with self._lock:
            mapping = self._mappings.get(record_type)
        if mapping is None:
            raise MappingNotFoundError(f"No table mapping registered for {record_type!r}")
        return mapping

    def __contains__(self, record_type: object) -> bool:
        with self._lock:
            return record_type in self._mappings


class SqlAlchemyMappingProvider:
    """
    Reads table mappings from SQLAlchemy declarative (ORM-mapped) classes.

    Columns come from the mapped table in table order; attribute keys that
    differ from column names are carried on ColumnMapping.attribute.
    Resolved mappings are cached for the provider's lifetime.
    """

    def __init__(self) -> None:
        self._cache: dict[type, TableMapping] = {}
        self._lock = threading.Lock()

    def resolve(self, record_type: type) -> TableMapping:
        with self._lock:
            cached = self._cache.get(record_type)
        if cached is not None:
            return cached

        mapping = self._reflect(record_type)

        with self._lock:
            # Another thread may have won the race; keep the first result.
            return self._cache.setdefault(record_type, mapping)

    def _reflect(self, record_type: type) -> TableMapping:
        try:
            mapper = inspect(record_type)
        except NoInspectionAvailable as exc:
            raise MappingNotFoundError(f"{record_type!r} is not an ORM-mapped class") from exc

        if not isinstance(mapper, Mapper):
            raise MappingNotFoundError(f"{record_type!r} is not an ORM-mapped class")

        table = mapper.local_table
        name = table.name if table.schema is None else f"{table.schema}.{table.name}"

        columns = []
        for column in table.columns:
            prop = mapper.get_property_by_column(column)
            attribute = prop.key if prop.key != column.name else None
            columns.append(ColumnMapping(column.name, bool(column.primary_key), attribute))

        logger.debug("Resolved ORM mapping %s -> %s", record_type.__name__, name)
        return TableMapping(name, tuple(columns))
