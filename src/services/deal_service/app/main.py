# src/services/deal_service/app/main.py
import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from tenacity import before_log, retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from fx_deals_common.config import DB_STARTUP_CHECK_ATTEMPTS, DB_STARTUP_CHECK_WAIT_SECONDS
from fx_deals_common.db import async_engine
from fx_deals_common.health import create_health_router
from fx_deals_common.logging_utils import (
    correlation_id_var,
    generate_correlation_id,
    request_id_var,
    setup_logging,
    trace_id_var,
)
from fx_deals_common.monitoring import HTTP_REQUEST_LATENCY_SECONDS, HTTP_REQUESTS_TOTAL

from .error_envelope import error_response, validation_error_response
from .routers import deals
from .status_policy import INTERNAL_ERROR_MESSAGE, INTERNAL_ERROR_TITLE

SERVICE_PREFIX = "FXD"
SERVICE_NAME = "deal_service"
setup_logging()
logger = logging.getLogger(__name__)


@retry(
    wait=wait_fixed(DB_STARTUP_CHECK_WAIT_SECONDS),
    stop=stop_after_attempt(DB_STARTUP_CHECK_ATTEMPTS),
    before=before_log(logger, logging.INFO),
    retry=retry_if_exception_type((OperationalError, DBAPIError, OSError)),
    reraise=True,
)
async def verify_database_connection() -> None:
    async with async_engine.connect() as connection:
        await connection.execute(text("SELECT 1"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events for graceful operation.
    """
    logger.info("FX Deal Service starting up...")
    try:
        await verify_database_connection()
        logger.info("Database connection verified.")
    except Exception:
        # Readiness reports the database as unavailable until it comes back.
        logger.critical("Could not reach the database on startup.", exc_info=True)

    yield

    logger.info("FX Deal Service shutting down...")
    await async_engine.dispose()
    logger.info("FX Deal Service has shut down gracefully.")


app = FastAPI(
    title="FX Deals Warehouse API",
    description=(
        "Imports FX deals into the deal warehouse. Single and batch imports validate "
        "currency codes and reject duplicate deal ids; batch imports report a per-deal outcome."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# --- Prometheus Metrics ---
Instrumentator().instrument(app).expose(app)
logger.info("Prometheus metrics exposed at /metrics")


# Correlation ID Middleware
@app.middleware("http")
async def add_correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-Id") or request.headers.get(
        "X-Correlation-ID"
    )
    if not correlation_id:
        correlation_id = generate_correlation_id(SERVICE_PREFIX)
    request_id = request.headers.get("X-Request-Id") or generate_correlation_id("REQ")
    trace_id = request.headers.get("X-Trace-Id") or uuid4().hex

    correlation_token = correlation_id_var.set(correlation_id)
    request_token = request_id_var.set(request_id)
    trace_token = trace_id_var.set(trace_id)

    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(correlation_token)
        request_id_var.reset(request_token)
        trace_id_var.reset(trace_token)

    response.headers["X-Correlation-Id"] = correlation_id
    response.headers["X-Request-Id"] = request_id
    response.headers["X-Trace-Id"] = trace_id
    return response


@app.middleware("http")
async def emit_http_observability(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    labels = {
        "service": SERVICE_NAME,
        "method": request.method,
        "path": request.url.path,
    }
    HTTP_REQUEST_LATENCY_SECONDS.labels(**labels).observe(elapsed)
    HTTP_REQUESTS_TOTAL.labels(status=str(response.status_code), **labels).inc()

    if not request.url.path.startswith("/health"):
        logger.info(
            "http_request_completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Reports structural request problems as 400 with one message per field.
    """
    field_errors: dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        field_errors.setdefault(field, error.get("msg", "invalid value"))
    logger.error("Validation failed", extra={"errors": field_errors})
    return validation_error_response(field_errors)


# Global Exception Handler
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catches any unhandled exceptions and returns a standardized 500 error response.
    """
    correlation_id = correlation_id_var.get()
    if correlation_id == "<not-set>":
        correlation_id = generate_correlation_id(SERVICE_PREFIX)
    logger.critical(
        f"Unhandled exception for request {request.method} {request.url}",
        exc_info=exc,
        extra={"correlation_id": correlation_id},
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_TITLE, INTERNAL_ERROR_MESSAGE
    )


# This service depends on the database only.
health_router = create_health_router("db")
app.include_router(health_router)

app.include_router(deals.router)
