import logging
import time
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.engine import Engine

from .executor import StatementExecutor
from .mapping import MappingProvider
from .metrics import observe_db_write
from .models import StatementKind
from .planner import StatementPlanner, WritePlan
from ..config import BulkConfig

logger = logging.getLogger(__name__)

UNKNOWN_TABLE = "unknown"


class BulkWriter:
    """
    One-call bulk INSERT, UPDATE and DELETE for homogeneous record collections.

    - insert: a single multi-row INSERT, no explicit transaction
    - delete: a single DELETE ... IN (...), no explicit transaction
    - update: one UPDATE per record, all in one transaction

    Empty or None collections are a no-op. Mapping, field and primary key
    errors are raised before anything is sent to the database; execution
    failures surface as ExecutionError.

    Usage:
        writer = BulkWriter(engine, registry)
        writer.insert(orders)
        writer.update(changed_orders)
        writer.delete(cancelled_orders)
    """

    def __init__(
        self,
        engine: Engine,
        provider: MappingProvider,
        config: Optional[BulkConfig] = None,
    ) -> None:
        self.engine = engine
        self.config = config or BulkConfig()
        self.planner = StatementPlanner(provider, self.config)
        self.executor = StatementExecutor(engine)

    def insert(self, records: Optional[Iterable[Any]], include_id_column: Optional[bool] = None) -> int:
        """
        Insert all records with one statement.

        Returns:
            Number of records submitted (0 for an empty collection)
        """
        return self._write(
            StatementKind.INSERT,
            lambda: self.planner.insert(records, include_id_column),
            transactional=False,
        )

    def delete(self, records: Optional[Iterable[Any]]) -> int:
        """Delete all records by primary key with one statement."""
        return self._write(StatementKind.DELETE, lambda: self.planner.delete(records), transactional=False)

    def update(self, records: Optional[Iterable[Any]]) -> int:
        """Update every non-key column of each record, transactionally."""
        return self._write(StatementKind.UPDATE, lambda: self.planner.update(records), transactional=True)

    def _write(self, kind: StatementKind, build: Callable[[], WritePlan], transactional: bool) -> int:
        start_time = time.monotonic()
        status = "success"
        plan: Optional[WritePlan] = None
        try:
            plan = build()
            if plan.empty:
                logger.debug("Skipping bulk %s: nothing to write", kind.value)
                return plan.rows
            if transactional:
                self.executor.execute_in_transaction(plan.statements)
            else:
                self.executor.execute(plan.statements)
        except Exception:
            status = "error"
            raise
        finally:
            latency = time.monotonic() - start_time
            # Planning failures have no resolved table to label.
            if plan is None:
                observe_db_write(UNKNOWN_TABLE, kind.value, status, latency)
            elif not plan.empty:
                observe_db_write(plan.table, kind.value, status, latency, rows=plan.rows)

        logger.info(
            "Bulk %s of %d record(s) into %s took %.3fs",
            kind.value,
            plan.rows,
            plan.table,
            latency,
        )
        return plan.rows


def bulk_insert(engine: Engine, provider: MappingProvider, records: Optional[Iterable[Any]], **kwargs: Any) -> int:
    return BulkWriter(engine, provider).insert(records, **kwargs)


def bulk_update(engine: Engine, provider: MappingProvider, records: Optional[Iterable[Any]]) -> int:
    return BulkWriter(engine, provider).update(records)


def bulk_delete(engine: Engine, provider: MappingProvider, records: Optional[Iterable[Any]]) -> int:
    return BulkWriter(engine, provider).delete(records)


