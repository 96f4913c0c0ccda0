# src/services/deal_service/app/error_envelope.py
from datetime import UTC, datetime
from typing import Any, Dict

from fastapi.responses import JSONResponse


def build_error_body(status_code: int, error: str, message: str) -> Dict[str, Any]:
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "status": status_code,
        "error": error,
        "message": message,
    }


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=build_error_body(status_code, error, message),
    )


def validation_error_response(field_errors: Dict[str, str]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "timestamp": datetime.now(UTC).isoformat(),
            "status": 400,
            "error": "Validation failed",
            "errors": field_errors,
        },
    )
