"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Error format of the global exception handler.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class Pagination(BaseModel):
    """Pagination block of list responses."""

    limit: int
    offset: int
    total: int


def success(data: Any, **extra: Any) -> dict[str, Any]:
    """Storefront success envelope: {"success": true, "data": ...}."""
    return {"success": True, "data": data, **extra}


def failure(error: str, **extra: Any) -> dict[str, Any]:
    """Storefront failure envelope: {"success": false, "error": "..."}."""
    return {"success": False, "error": error, **extra}
