# src/libs/fx-deals-common/fx_deals_common/monitoring.py
from prometheus_client import Counter, Histogram

# --------------------------------------------------------------------------------------
# DB metrics (used by fx_deals_common.utils.async_timed)
# --------------------------------------------------------------------------------------
DB_OPERATION_LATENCY_SECONDS = Histogram(
    "db_operation_latency_seconds",
    "Latency of database operations in seconds",
    labelnames=("repository", "method"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)

# --------------------------------------------------------------------------------------
# HTTP metrics
# --------------------------------------------------------------------------------------
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "HTTP requests total",
    labelnames=("service", "method", "path", "status"),
)

HTTP_REQUEST_LATENCY_SECONDS = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=("service", "method", "path"),
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)

# --------------------------------------------------------------------------------------
# Deal import metrics
# --------------------------------------------------------------------------------------
FX_DEALS_IMPORTED_TOTAL = Counter(
    "fx_deals_imported_total",
    "Number of FX deal import attempts by outcome",
    labelnames=("outcome",),
)

FX_DEAL_BATCH_SIZE = Histogram(
    "fx_deal_batch_size",
    "Number of deals submitted per batch import",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000),
)

def observe_deal_import(outcome: str) -> None:
    FX_DEALS_IMPORTED_TOTAL.labels(outcome).inc()

def observe_batch_size(size: int) -> None:
    FX_DEAL_BATCH_SIZE.observe(size)
