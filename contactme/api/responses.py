"""Response envelopes for API endpoints.

Every endpoint answers with the same JSON shape::

    {"status": "success" | "error", "message": ..., "timestamp": ...,
     "data": ..., "meta": ..., "errors": [...]}

Keys without a value are left out.
"""

from typing import Any

from fastapi import status as http_status
from fastapi.responses import JSONResponse

from contactme.api.models import ApiResponse, Pagination


def _render(envelope: ApiResponse, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", exclude_none=True),
    )


def success(
    data: Any = None,
    message: str = "Operation completed successfully",
    meta: dict[str, Any] | None = None,
    status_code: int = http_status.HTTP_200_OK,
) -> JSONResponse:
    return _render(ApiResponse(status="success", message=message, data=data, meta=meta), status_code)


def created(data: Any = None, message: str = "Resource created successfully") -> JSONResponse:
    return success(data, message, status_code=http_status.HTTP_201_CREATED)


def paginated(
    items: list[Any], pagination: Pagination, message: str = "Data retrieved successfully"
) -> JSONResponse:
    return success(
        items,
        message,
        meta={"pagination": pagination.model_dump(by_alias=True)},
    )


def error(
    message: str = "An error occurred",
    errors: list[str] | None = None,
    status_code: int = http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    data: Any = None,
) -> JSONResponse:
    return _render(
        ApiResponse(status="error", message=message, errors=errors, data=data), status_code
    )


def validation_error(
    errors: list[str], message: str = "Validation failed", data: Any = None
) -> JSONResponse:
    """422 response carrying every validation message at once."""
    return error(message, errors, http_status.HTTP_422_UNPROCESSABLE_ENTITY, data)


def not_found(message: str = "Resource not found") -> JSONResponse:
    return error(message, status_code=http_status.HTTP_404_NOT_FOUND)
