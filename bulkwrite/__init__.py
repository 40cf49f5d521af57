from .config import BulkConfig
from .db.mapping import MappingRegistry, SqlAlchemyMappingProvider
from .db.models import ColumnMapping, TableMapping
from .db.session import BulkSession
from .db.writer import BulkWriter

__all__ = [
    "BulkConfig",
    "BulkWriter",
    "BulkSession",
    "MappingRegistry",
    "SqlAlchemyMappingProvider",
    "TableMapping",
    "ColumnMapping",
]
