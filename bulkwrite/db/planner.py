from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from . import sql
from .executor import Statement
from .extract import ValueExtractor
from .mapping import MappingProvider
from .models import StatementKind, TableMapping
from ..config import BulkConfig


@dataclass
class WritePlan:
    """Statements generated for one bulk call, ready for the executor."""
    kind: StatementKind
    table: str
    rows: int
    statements: list[Statement] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.statements


class StatementPlanner:
    """
    Turns record collections into WritePlans.

    Resolves the mapping once per call from the first record's type and
    generates literal or parameterized statements according to BulkConfig.
    All mapping, field and key errors surface here, before execution.
    """

    def __init__(self, provider: MappingProvider, config: Optional[BulkConfig] = None) -> None:
        self.provider = provider
        self.config = config or BulkConfig()
        self.extractor = ValueExtractor(case_insensitive=self.config.case_insensitive_fields)

    def _prepare(self, records: Optional[Iterable[Any]]) -> tuple[Optional[TableMapping], list]:
        items = list(records or ())
        if not items:
            return None, items

        record_type = type(items[0])
        for item in items:
            if type(item) is not record_type:
                raise TypeError(
                    f"Bulk operations need records of one type; got {record_type.__name__} "
                    f"and {type(item).__name__}"
                )
        return self.provider.resolve(record_type), items

    def insert(self, records: Optional[Iterable[Any]], include_id_column: Optional[bool] = None) -> WritePlan:
        if include_id_column is None:
            include_id_column = self.config.include_id_column

        mapping, items = self._prepare(records)
        if mapping is None:
            return WritePlan(StatementKind.INSERT, "", 0)

        if self.config.parameterized:
            stmt = sql.compile_insert(mapping, items, include_id_column, self.extractor)
            statements: list[Statement] = [stmt] if stmt is not None else []
        else:
            statements = [sql.build_insert(mapping, items, include_id_column, self.extractor)]
        return WritePlan(StatementKind.INSERT, mapping.table_name, len(items), statements)

    def update(self, records: Optional[Iterable[Any]]) -> WritePlan:
        mapping, items = self._prepare(records)
        if mapping is None:
            return WritePlan(StatementKind.UPDATE, "", 0)

        if self.config.parameterized:
            stmt = sql.compile_update(mapping, items, self.extractor)
            statements: list[Statement] = [stmt] if stmt is not None else []
        else:
            statements = list(sql.update_statements(mapping, items, self.extractor))
        return WritePlan(StatementKind.UPDATE, mapping.table_name, len(items), statements)

    def delete(self, records: Optional[Iterable[Any]]) -> WritePlan:
        mapping, items = self._prepare(records)
        if mapping is None:
            return WritePlan(StatementKind.DELETE, "", 0)

        if self.config.parameterized:
            stmt = sql.compile_delete(mapping, items, self.extractor)
            statements: list[Statement] = [stmt] if stmt is not None else []
        else:
            statements = [sql.build_delete(mapping, items, self.extractor)]
        return WritePlan(StatementKind.DELETE, mapping.table_name, len(items), statements)
