from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pytest

from bulkwrite.config import BulkConfig
from bulkwrite.db.mapping import MappingRegistry, SqlAlchemyMappingProvider
from bulkwrite.db.models import ColumnMapping, TableMapping
from bulkwrite.db.writer import BulkWriter, bulk_delete, bulk_insert, bulk_update
from bulkwrite.errors import (
    ExecutionError,
    FieldNotFoundError,
    MappingNotFoundError,
    SchemaConstraintError,
)
from tests._records import Base, Customer, Item, Tag

LITERAL = BulkConfig(parameterized=False)


@dataclass
class Event:
    id: int
    at: datetime


@dataclass
class LoudItem:
    ID: int
    NAME: str
    QTY: int


class RecordingExecutor:
    """Stands in for StatementExecutor and records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def execute(self, statements):
        self.calls.append(("execute", statements))
        return len(statements)

    def execute_in_transaction(self, statements):
        self.calls.append(("execute_in_transaction", statements))
        return len(statements)


@pytest.fixture(params=[True, False], ids=["parameterized", "literal"])
def writer(request, engine, registry: MappingRegistry, items_table: str) -> BulkWriter:
    return BulkWriter(engine, registry, BulkConfig(parameterized=request.param))


def test_insert_update_delete_round_trip(writer: BulkWriter, fetch_all) -> None:
    assert writer.insert([Item(None, "A"), Item(None, "B", 2), Item(None, "C", 3)]) == 3
    assert fetch_all("SELECT id, name, qty FROM items ORDER BY id") == [
        (1, "A", None),
        (2, "B", 2),
        (3, "C", 3),
    ]

    assert writer.update([Item(1, "A2", 10), Item(3, None, 30)]) == 2
    assert fetch_all("SELECT id, name, qty FROM items ORDER BY id") == [
        (1, "A2", 10),
        (2, "B", 2),
        (3, None, 30),
    ]

    assert writer.delete([Item(1, "ignored"), Item(2, "ignored")]) == 2
    assert fetch_all("SELECT id, name, qty FROM items") == [(3, None, 30)]


def test_insert_with_id_column(writer: BulkWriter, fetch_all) -> None:
    writer.insert([Item(10, "x"), Item(20, "y")], include_id_column=True)

    assert fetch_all("SELECT id, name FROM items ORDER BY id") == [(10, "x"), (20, "y")]


def test_parameterized_insert_handles_quotes(engine, registry, items_table: str, fetch_all) -> None:
    BulkWriter(engine, registry).insert([Item(None, "O'Brien"), Item(None, "x'); DROP TABLE items; --")])

    assert fetch_all("SELECT name FROM items ORDER BY id") == [
        ("O'Brien",),
        ("x'); DROP TABLE items; --",),
    ]


def test_literal_insert_does_not_escape_quotes(engine, registry, items_table: str, fetch_all) -> None:
    with pytest.raises(ExecutionError):
        BulkWriter(engine, registry, LITERAL).insert([Item(None, "O'Brien")])

    assert fetch_all("SELECT COUNT(*) FROM items") == [(0,)]


def test_literal_datetime_values(engine, registry, table_factory, fetch_all) -> None:
    table_factory("events", "id INTEGER PRIMARY KEY, at VARCHAR(32)")
    registry.register_dataclass(Event, "events")

    BulkWriter(engine, registry, LITERAL).insert([Event(1, datetime(2024, 5, 6, 7, 8, 9))])

    assert fetch_all("SELECT at FROM events") == [("2024-05-06 07:08:09",)]


@pytest.mark.parametrize("parameterized", [True, False], ids=["parameterized", "literal"])
def test_case_insensitive_fields_round_trip(engine, items_table: str, fetch_all, parameterized: bool) -> None:
    registry = MappingRegistry()
    registry.register(
        LoudItem,
        TableMapping("items", (ColumnMapping("id", True), ColumnMapping("name"), ColumnMapping("qty"))),
    )
    writer = BulkWriter(engine, registry, BulkConfig(parameterized=parameterized, case_insensitive_fields=True))

    writer.insert([LoudItem(1, "A", 1), LoudItem(2, "B", 2)], include_id_column=True)
    writer.update([LoudItem(1, "A2", 10)])
    writer.delete([LoudItem(2, "ignored", 0)])

    assert fetch_all("SELECT id, name, qty FROM items") == [(1, "A2", 10)]


def test_case_sensitive_by_default_rejects_differently_cased_fields(engine, items_table: str) -> None:
    registry = MappingRegistry()
    registry.register(
        LoudItem,
        TableMapping("items", (ColumnMapping("id", True), ColumnMapping("name"), ColumnMapping("qty"))),
    )

    with pytest.raises(FieldNotFoundError):
        BulkWriter(engine, registry).insert([LoudItem(1, "A", 1)])


def test_update_is_transactional(engine, registry, tags_table: str, fetch_all) -> None:
    writer = BulkWriter(engine, registry, LITERAL)
    writer.insert([Tag(1, "a"), Tag(2, "b")], include_id_column=True)

    # Second statement violates UNIQUE(label); the first must be rolled back.
    with pytest.raises(ExecutionError):
        writer.update([Tag(1, "z"), Tag(2, "z")])

    assert fetch_all("SELECT id, label FROM tags ORDER BY id") == [(1, "a"), (2, "b")]


@pytest.mark.parametrize("records", [None, [], ()])
def test_empty_input_makes_no_execution_call(engine, registry, records) -> None:
    writer = BulkWriter(engine, registry)
    writer.executor = RecordingExecutor()

    assert writer.insert(records) == 0
    assert writer.update(records) == 0
    assert writer.delete(records) == 0
    assert writer.executor.calls == []


def test_schema_constraint_fails_before_execution(engine) -> None:
    registry = MappingRegistry()
    registry.register(Item, TableMapping("items", (ColumnMapping("id"), ColumnMapping("name"))))
    writer = BulkWriter(engine, registry)
    writer.executor = RecordingExecutor()

    with pytest.raises(SchemaConstraintError):
        writer.delete([Item(1, "a")])
    with pytest.raises(SchemaConstraintError):
        writer.update([Item(1, "a")])

    assert writer.executor.calls == []


def test_missing_field_fails_before_execution(engine) -> None:
    registry = MappingRegistry()
    registry.register(Item, TableMapping("items", (ColumnMapping("id", True), ColumnMapping("color"))))
    writer = BulkWriter(engine, registry)
    writer.executor = RecordingExecutor()

    with pytest.raises(FieldNotFoundError):
        writer.insert([Item(1, "a")])
    assert writer.executor.calls == []


def test_unmapped_type_raises(engine, registry) -> None:
    with pytest.raises(MappingNotFoundError):
        BulkWriter(engine, registry).insert([object()])


def test_mixed_record_types_rejected(engine, registry) -> None:
    with pytest.raises(TypeError, match="one type"):
        BulkWriter(engine, registry).insert([Item(None, "a"), Tag(1, "b")])


def test_insert_and_delete_do_not_open_transactions(engine, registry) -> None:
    writer = BulkWriter(engine, registry)
    writer.executor = RecordingExecutor()

    writer.insert([Item(None, "a")])
    writer.delete([Item(1, "a")])
    writer.update([Item(1, "b")])

    assert [name for name, _ in writer.executor.calls] == [
        "execute",
        "execute",
        "execute_in_transaction",
    ]


def test_orm_models(engine, fetch_all) -> None:
    Base.metadata.create_all(engine)
    writer = BulkWriter(engine, SqlAlchemyMappingProvider())

    writer.insert([Customer(full_name="Ada", city="London"), Customer(full_name="Grace")])
    writer.update([Customer(id=2, full_name="Grace H.", city="Arlington")])

    assert fetch_all("SELECT id, name, city FROM customers ORDER BY id") == [
        (1, "Ada", "London"),
        (2, "Grace H.", "Arlington"),
    ]


def test_module_level_helpers(engine, registry, items_table: str, fetch_all) -> None:
    assert bulk_insert(engine, registry, [Item(None, "a"), Item(None, "b")]) == 2
    assert bulk_update(engine, registry, [Item(1, "a2")]) == 1
    assert bulk_delete(engine, registry, [Item(2, "b")]) == 1

    assert fetch_all("SELECT id, name FROM items") == [(1, "a2")]
