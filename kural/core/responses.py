"""Standardized API response utilities."""

import json
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from bson import ObjectId
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

if TYPE_CHECKING:
    from kural.services.gender import GenderSummary
    from kural.services.pagination import PageResult


class CustomJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles ObjectId, datetime, and other types."""

    def default(self, obj):
        if isinstance(obj, ObjectId):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, bytes):
            return obj.decode("utf-8")
        return super().default(obj)


class PaginationInfo(BaseModel):
    """Pagination block of the listing envelope."""

    currentPage: int
    totalPages: int
    totalCount: int
    limit: int
    hasNext: bool
    hasPrev: bool


class GenderSummaryInfo(BaseModel):
    """Three-bucket gender summary of a filtered set."""

    male: int
    female: int
    other: int
    total: int


class ListingResponse(BaseModel):
    """Uniform envelope returned by every listing endpoint."""

    success: bool = True
    data: list[dict[str, Any]]
    pagination: PaginationInfo
    genderSummary: GenderSummaryInfo | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    success: bool = False
    message: str
    error: str
    data: Any | None = None
    errors: dict[str, Any] | None = None


def success_response(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Create a successful API response."""
    return {"success": True, "data": data, "message": message}


def error_body(
    message: str,
    error: str,
    data: Any = None,
    errors: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the failure envelope."""
    return {
        "success": False,
        "message": message,
        "error": error,
        "data": data,
        "errors": errors,
    }


def error_response(
    message: str,
    error: str = "http_error",
    data: Any = None,
    errors: dict[str, Any] | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    """Create an error response that raises an HTTPException."""
    raise HTTPException(
        status_code=status_code,
        detail=error_body(message, error, data=data, errors=errors),
    )


def error_response_dict(
    error_dict: dict[str, Any],
    status_code: int = status.HTTP_400_BAD_REQUEST,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create an error response as a JSONResponse (for exception handlers)."""
    # Serialize with custom encoder to handle ObjectId, datetime, etc.
    content = json.loads(json.dumps(error_dict, cls=CustomJSONEncoder))
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def paginated_response(
    items: list[dict[str, Any]],
    page: "PageResult",
    gender_summary: "GenderSummary | None" = None,
    message: str | None = None,
) -> dict[str, Any]:
    """Create the listing envelope from a page and an optional summary."""
    body: dict[str, Any] = {
        "success": True,
        "data": items,
        "pagination": page.to_dict(),
    }
    if gender_summary is not None:
        body["genderSummary"] = gender_summary.to_dict()
    if message:
        body["message"] = message
    return body


def unauthorized_response(message: str = "Authentication required") -> HTTPException:
    """Create an unauthorized error response."""
    return error_response(
        message=message, error="unauthorized", status_code=status.HTTP_401_UNAUTHORIZED
    )
