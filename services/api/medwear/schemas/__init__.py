"""Pydantic schemas for API request/response validation."""

from medwear.schemas.common import ErrorDetail, ErrorResponse, Pagination, ShippingSettings
from medwear.schemas.deal import DealCreate, DealItemIn, DealItemOut, DealOut, DealProduct
from medwear.schemas.order import OrderCreate, OrderCreateResponse, OrderItemIn, OrderItemOut, OrderOut
from medwear.schemas.product import (
    BarcodeGenerationResponse,
    GeneratedBarcode,
    ProductOut,
    ProductUpdate,
)
from medwear.schemas.sale import SaleCreate, SaleItemIn, SaleItemOut, SaleListResponse, SaleOut, SaleReturnRequest

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "Pagination",
    "ShippingSettings",
    "DealCreate",
    "DealItemIn",
    "DealItemOut",
    "DealOut",
    "DealProduct",
    "OrderCreate",
    "OrderCreateResponse",
    "OrderItemIn",
    "OrderItemOut",
    "OrderOut",
    "BarcodeGenerationResponse",
    "GeneratedBarcode",
    "ProductOut",
    "ProductUpdate",
    "SaleCreate",
    "SaleItemIn",
    "SaleItemOut",
    "SaleListResponse",
    "SaleOut",
    "SaleReturnRequest",
]
