from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from bulkwrite.db.mapping import MappingRegistry
from bulkwrite.db.models import ColumnMapping, TableMapping
from tests._records import Item, Tag


ITEMS_DDL = "id INTEGER PRIMARY KEY, name VARCHAR(255) NULL, qty INTEGER NULL"
TAGS_DDL = "id INTEGER PRIMARY KEY, label VARCHAR(255) NOT NULL UNIQUE"


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    """
    File-backed SQLite engine, one database per test.

    A file (not :memory:) so every pooled connection sees the same data.
    """
    eng = create_engine(f"sqlite:///{tmp_path / 'bulkwrite.db'}")
    yield eng
    eng.dispose()


@pytest.fixture
def table_factory(engine: Engine) -> Callable[[str, str], str]:
    """
    Create a table on the test engine.

    Usage:
        table = table_factory("items", "id INTEGER PRIMARY KEY, name TEXT")
    """

    def _create(name: str, schema_sql: str) -> str:
        with engine.begin() as conn:
            conn.exec_driver_sql(f"DROP TABLE IF EXISTS {name}")
            conn.exec_driver_sql(f"CREATE TABLE {name} ({schema_sql})")
        return name

    return _create


@pytest.fixture
def items_table(table_factory) -> str:
    return table_factory("items", ITEMS_DDL)


@pytest.fixture
def tags_table(table_factory) -> str:
    return table_factory("tags", TAGS_DDL)


@pytest.fixture
def registry() -> MappingRegistry:
    reg = MappingRegistry()
    reg.register_dataclass(Item, "items")
    reg.register_dataclass(Tag, "tags")
    return reg


@pytest.fixture
def t_mapping() -> TableMapping:
    """The two-column mapping ``t (id pk, name)``."""
    return TableMapping("t", (ColumnMapping("id", True), ColumnMapping("name")))


@pytest.fixture
def fetch_all(engine: Engine) -> Callable[[str], list[tuple[Any, ...]]]:
    def _fetch(sql: str) -> list[tuple[Any, ...]]:
        with engine.connect() as conn:
            return [tuple(row) for row in conn.exec_driver_sql(sql)]

    return _fetch
