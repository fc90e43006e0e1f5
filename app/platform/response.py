from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.platform.result import Err, ErrorKind

# Not-found and expired share one status so callers cannot tell them apart
ERROR_STATUS = {
    ErrorKind.INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND_OR_EXPIRED: status.HTTP_410_GONE,
    ErrorKind.ALREADY_ENABLED: status.HTTP_409_CONFLICT,
    ErrorKind.GENERATION_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.DELIVERY_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.STORAGE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Single source of truth for ALL API responses.
    Automatically sets status = "success" if < 400 else "error"
    """
    status_str = "success" if status_code < 400 else "error"
    data = jsonable_encoder(data) if data is not None else {}

    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "status": status_str,
            "message": message,
            "data": data,
        },
    )


def error_response(error: Err, message: Optional[str] = None) -> JSONResponse:
    """Render an ``Err`` result with the envelope above, tagging the reason."""
    return api_response(
        data={"reason": error.kind.value, "retryable": error.kind.retryable},
        message=message or error.message or "Request failed",
        status_code=ERROR_STATUS[error.kind],
    )
