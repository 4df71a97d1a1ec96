"""Structured HTTP errors: {"error": {"code", "message", "detail"}}."""

from typing import Any

from fastapi import HTTPException

from medwear.schemas import ErrorDetail, ErrorResponse


def api_error(status_code: int, code: str, message: str, detail: dict[str, Any] | None = None) -> HTTPException:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return HTTPException(status_code=status_code, detail=body.model_dump())
