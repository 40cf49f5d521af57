from __future__ import annotations

from ..metrics.registry import (
    DB_WRITE_LATENCY_SECONDS,
    DB_WRITE_ROWS_TOTAL,
    DB_WRITE_TOTAL,
)


def observe_db_write(
    table: str,
    op_type: str,
    status: str,
    latency_s: float,
    rows: int = 0,
) -> None:
    """Record one bulk write: outcome counter, latency, and row count on success."""
    DB_WRITE_TOTAL.labels(table=table, op_type=op_type, status=status).inc()
    DB_WRITE_LATENCY_SECONDS.labels(table=table, op_type=op_type).observe(latency_s)
    if status == "success" and rows:
        DB_WRITE_ROWS_TOTAL.labels(table=table, op_type=op_type).inc(rows)
