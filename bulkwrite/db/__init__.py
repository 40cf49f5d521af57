from .executor import StatementExecutor
from .extract import ValueExtractor
from .mapping import MappingProvider, MappingRegistry, SqlAlchemyMappingProvider
from .models import BoundStatement, ColumnMapping, StatementKind, TableMapping
from .session import BulkSession
from .sql import (
    build_delete,
    build_insert,
    build_update,
    compile_delete,
    compile_insert,
    compile_update,
    format_literal,
)
from .writer import BulkWriter, bulk_delete, bulk_insert, bulk_update

__all__ = [
    "BulkWriter",
    "BulkSession",
    "StatementExecutor",
    "ValueExtractor",
    "MappingProvider",
    "MappingRegistry",
    "SqlAlchemyMappingProvider",
    "TableMapping",
    "ColumnMapping",
    "BoundStatement",
    "StatementKind",
    "build_insert",
    "build_update",
    "build_delete",
    "compile_insert",
    "compile_update",
    "compile_delete",
    "format_literal",
    "bulk_insert",
    "bulk_update",
    "bulk_delete",
]
