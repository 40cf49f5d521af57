from __future__ import annotations

import logging
from typing import Sequence, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from .models import BoundStatement
from ..errors import ExecutionError

logger = logging.getLogger(__name__)

Statement = Union[str, BoundStatement]
Statements = Union[Statement, Sequence[Statement]]


def _as_list(statements: Statements | None) -> list[Statement]:
    if statements is None:
        return []
    if isinstance(statements, (str, BoundStatement)):
        statements = [statements]
    return [s for s in statements if not (isinstance(s, str) and not s.strip())]


def _run(conn: Connection, stmt: Statement) -> None:
    if isinstance(stmt, BoundStatement):
        conn.execute(text(stmt.sql), stmt.params)
    else:
        # Literal SQL goes straight to the driver: ":" is not a bind marker and
        # "%" is not run through the driver's paramstyle formatting.
        conn.exec_driver_sql(stmt, execution_options={"no_parameters": True})


class StatementExecutor:
    """
    Runs generated statements against a SQLAlchemy Engine.

    Each call checks a connection out of the engine and returns it before
    the call ends, including on error. A call takes a single statement or a
    sequence, executed in order on one connection.

    Usage:
        executor = StatementExecutor(engine)
        executor.execute("INSERT INTO t (name) VALUES ('A'),('B');")
        executor.execute_in_transaction([stmt1, stmt2])
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def execute(self, statements: Statements | None) -> int:
        """
        Execute without an explicit transaction (autocommit per statement).

        Returns:
            Number of statements executed

        Raises:
            ExecutionError: If any statement fails; earlier statements stay applied
        """
        batch = _as_list(statements)
        if not batch:
            return 0

        try:
            with self.engine.connect() as conn:
                conn = conn.execution_options(isolation_level="AUTOCOMMIT")
                for stmt in batch:
                    _run(conn, stmt)
        except Exception as exc:
            logger.debug("Statement execution failed: %s", exc)
            raise ExecutionError(str(exc)) from exc

        logger.debug("Executed %d statement(s) without transaction", len(batch))
        return len(batch)

    def execute_in_transaction(self, statements: Statements | None) -> int:
        """
        Execute all statements in one transaction.

        Commits on success. On any failure the transaction is rolled back and
        the failure is raised; nothing from the batch is left applied.

        Returns:
            Number of statements executed

        Raises:
            ExecutionError: If any statement or the commit fails
        """
        batch = _as_list(statements)
        if not batch:
            return 0

        conn = None
        tx = None
        try:
            conn = self.engine.connect()
            tx = conn.begin()
            for stmt in batch:
                _run(conn, stmt)
            tx.commit()
        except Exception as exc:
            if tx is not None and tx.is_active:
                logger.warning(
                    "Rolling back transaction of %d statement(s): %s", len(batch), exc
                )
                # Best-effort rollback; the caller sees the statement failure, not this one.
                try:
                    tx.rollback()
                except Exception:
                    logger.exception("Rollback failed")
            raise ExecutionError(str(exc)) from exc
        finally:
            if conn is not None:
                conn.close()

        logger.debug("Committed %d statement(s)", len(batch))
        return len(batch)
