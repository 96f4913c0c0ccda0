# src/services/deal_service/app/status_policy.py
from fastapi import status

from .core.errors import (
    DuplicateDealError,
    InvalidCurrencyError,
    MalformedDealError,
    SameCurrencyError,
)
from .DTOs.deal_dto import FxDealBatchResponse

# (status code, error title) per classified failure, checked in order
_ERROR_STATUS = (
    (DuplicateDealError, status.HTTP_409_CONFLICT, "Duplicate Deal"),
    (InvalidCurrencyError, status.HTTP_400_BAD_REQUEST, "Invalid Deal"),
    (SameCurrencyError, status.HTTP_400_BAD_REQUEST, "Invalid Deal"),
    (MalformedDealError, status.HTTP_400_BAD_REQUEST, "Invalid Deal"),
)

INTERNAL_ERROR_TITLE = "Internal Server Error"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def status_for_error(error: Exception) -> tuple[int, str]:
    """
    Maps a single-deal import failure to its HTTP status code and error title.
    Anything that is not a classified import failure is an internal error.
    """
    for error_type, status_code, title in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code, title
    return status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_TITLE


def status_for_batch(result: FxDealBatchResponse) -> int:
    """
    201 when every deal was accepted, 207 when some were, 400 when none were.
    """
    if result.failure_count > 0 and result.success_count > 0:
        return status.HTTP_207_MULTI_STATUS
    if result.failure_count == 0:
        return status.HTTP_201_CREATED
    return status.HTTP_400_BAD_REQUEST
