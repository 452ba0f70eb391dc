"""
api/errors.py — The response envelope and helpers that build it.

Every response body has the shape
  {"statusCode": int, "success": bool, "message": str, "data" | "error": ...}
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(
    message: str,
    data: Any = None,
    http_status: int = 200,
) -> JSONResponse:
    body: dict[str, Any] = {
        "statusCode": http_status,
        "success": True,
        "message": message,
        "data": jsonable_encoder(data, by_alias=True),
    }
    return JSONResponse(status_code=http_status, content=body)


def error_response(
    message: str,
    http_status: int = 400,
    error: Optional[Any] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "statusCode": http_status,
        "success": False,
        "message": message,
        "error": jsonable_encoder(error),
    }
    return JSONResponse(status_code=http_status, content=body)


def paged(items: list, pagination: Any, key: str = "items") -> dict[str, Any]:
    return {key: items, "pagination": pagination}


def internal_error() -> JSONResponse:
    return error_response("An unexpected error occurred.", 500)
