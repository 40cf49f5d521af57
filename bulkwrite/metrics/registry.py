from prometheus_client import Counter, Histogram

DB_WRITE_TOTAL = Counter(
    "bulkwrite_db_write_total",
    "Bulk write operations executed, by outcome",
    ["table", "op_type", "status"],
)

DB_WRITE_LATENCY_SECONDS = Histogram(
    "bulkwrite_db_write_latency_seconds",
    "Latency of bulk write operations including execution round trip",
    ["table", "op_type"],
)

DB_WRITE_ROWS_TOTAL = Counter(
    "bulkwrite_db_write_rows_total",
    "Records submitted to successful bulk write operations",
    ["table", "op_type"],
)
