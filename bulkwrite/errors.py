class BulkWriteError(Exception):
    """Base exception for bulkwrite errors."""


class MappingNotFoundError(BulkWriteError):
    """No table mapping is known for a record type."""


class FieldNotFoundError(BulkWriteError):
    """A record has no field for a mapped column."""


class SchemaConstraintError(BulkWriteError):
    """The table mapping cannot support the requested operation."""


class ExecutionError(BulkWriteError):
    """Any failure while executing generated SQL."""
