"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class Pagination(BaseModel):
    """Page metadata for list endpoints."""

    page: int
    limit: int
    total: int
    pages: int


class ShippingSettings(BaseModel):
    """Storefront shipping configuration."""

    free_shipping_minimum: float = Field(alias="freeShippingMinimum")
    shipping_fee: float = Field(alias="shippingFee")

    model_config = {"populate_by_name": True}
