from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from sqlalchemy.engine import Engine

from .executor import Statement, StatementExecutor
from .mapping import MappingProvider
from .planner import StatementPlanner, WritePlan
from ..config import BulkConfig

logger = logging.getLogger(__name__)


class StatementBuffer:
    """Ordered statements owned by one BulkSession."""

    def __init__(self) -> None:
        self._statements: list[Statement] = []

    def extend(self, plan: WritePlan) -> None:
        self._statements.extend(plan.statements)

    def drain(self) -> list[Statement]:
        statements, self._statements = self._statements, []
        return statements

    def __len__(self) -> int:
        return len(self._statements)


class BulkSession:
    """
    Accumulates bulk statements across calls and record types, then commits
    them as one transaction.

    Statements are generated eagerly: mapping, field and key errors raise from
    insert/update/delete and nothing from that call is buffered. Leaving the
    context without commit() discards whatever is pending.

    Use as:
        with BulkSession(engine, registry) as session:
            session.insert(customers)
            session.update(orders)
            session.delete(stale_rows)
            session.commit()
    """

    def __init__(
        self,
        engine: Engine,
        provider: MappingProvider,
        config: Optional[BulkConfig] = None,
    ) -> None:
        self.engine = engine
        self.config = config or BulkConfig()
        self._planner = StatementPlanner(provider, self.config)
        self._executor = StatementExecutor(engine)
        self._buffer: StatementBuffer | None = StatementBuffer()

    def __enter__(self) -> "BulkSession":
        self._active_buffer()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
        # propagate exceptions (if any)
        return False

    def _active_buffer(self) -> StatementBuffer:
        if self._buffer is None:
            raise RuntimeError("BulkSession is closed")
        return self._buffer

    @property
    def closed(self) -> bool:
        return self._buffer is None

    @property
    def pending(self) -> int:
        """Number of buffered statements."""
        return len(self._active_buffer())

    def insert(self, records: Optional[Iterable[Any]], include_id_column: Optional[bool] = None) -> None:
        buffer = self._active_buffer()
        buffer.extend(self._planner.insert(records, include_id_column))

    def update(self, records: Optional[Iterable[Any]]) -> None:
        buffer = self._active_buffer()
        buffer.extend(self._planner.update(records))

    def delete(self, records: Optional[Iterable[Any]]) -> None:
        buffer = self._active_buffer()
        buffer.extend(self._planner.delete(records))

    def commit(self) -> int:
        """
        Execute every buffered statement in one transaction and clear the buffer.

        The buffer is cleared whether or not execution succeeds.

        Returns:
            Number of statements executed (0 if nothing was pending)

        Raises:
            ExecutionError: If execution fails; the transaction is rolled back
            RuntimeError: If the session is closed
        """
        statements = self._active_buffer().drain()
        if not statements:
            return 0
        return self._executor.execute_in_transaction(statements)

    def close(self) -> None:
        """Release the buffer. Further use raises RuntimeError."""
        if self._buffer is None:
            return
        if len(self._buffer):
            logger.warning(
                "Closing BulkSession with %d uncommitted statement(s); discarding",
                len(self._buffer),
            )
        self._buffer = None
