# src/libs/fx-deals-common/fx_deals_common/utils.py
import time
import functools
from typing import Callable, Any

from .monitoring import DB_OPERATION_LATENCY_SECONDS

def async_timed(repository: str, method: str) -> Callable:
    """
    A decorator that times an async function and records the latency
    in the DB_OPERATION_LATENCY_SECONDS Prometheus histogram.

    Args:
        repository: The name of the repository class (e.g., 'FxDealRepository').
        method: The name of the method being timed (e.g., 'persist').
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            start_time = time.monotonic()
            try:
                return await func(*args, **kwargs)
            finally:
                end_time = time.monotonic()
                duration = end_time - start_time
                DB_OPERATION_LATENCY_SECONDS.labels(
                    repository=repository,
                    method=method
                ).observe(duration)
        return wrapper
    return decorator
