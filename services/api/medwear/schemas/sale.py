"""Schemas for POS sale endpoints (/v1/pos/sales)."""

from datetime import datetime

from pydantic import BaseModel, Field

from medwear.schemas.common import Pagination


class SaleItemIn(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int
    size: str | None = None
    color: str | None = None
    deal_id: str | None = Field(alias="dealId", default=None)

    model_config = {"populate_by_name": True}


class SaleCreate(BaseModel):
    """Body of POST /v1/pos/sales. Prices are resolved server-side."""

    items: list[SaleItemIn] = Field(default_factory=list)
    customer_name: str | None = Field(alias="customerName", default=None)
    customer_phone: str | None = Field(alias="customerPhone", default=None)
    salesman_name: str | None = Field(alias="salesmanName", default=None)
    discount: float = 0
    discount_type: str | None = Field(alias="discountType", default=None)
    payment_method: str = Field(alias="paymentMethod", default="CASH")
    amount_received: float | None = Field(alias="amountReceived", default=None)
    notes: str | None = None

    model_config = {"populate_by_name": True}


class SaleItemOut(BaseModel):
    id: int
    product_id: str = Field(alias="productId")
    product_name: str = Field(alias="productName")
    quantity: int
    price: float
    size: str | None = None
    color: str | None = None

    model_config = {"populate_by_name": True, "from_attributes": True}


class SaleOut(BaseModel):
    """A completed sale, as rendered on the receipt."""

    id: str
    receipt_number: str = Field(alias="receiptNumber")
    salesman_name: str | None = Field(alias="salesmanName", default=None)
    subtotal: float
    discount: float
    discount_type: str | None = Field(alias="discountType", default=None)
    total: float
    payment_method: str = Field(alias="paymentMethod")
    amount_received: float | None = Field(alias="amountReceived", default=None)
    change_given: float | None = Field(alias="changeGiven", default=None)
    customer_name: str | None = Field(alias="customerName", default=None)
    customer_phone: str | None = Field(alias="customerPhone", default=None)
    notes: str | None = None
    created_at: datetime | None = Field(alias="createdAt", default=None)
    is_returned: bool = Field(alias="isReturned", default=False)
    returned_at: datetime | None = Field(alias="returnedAt", default=None)
    returned_by: str | None = Field(alias="returnedBy", default=None)
    return_reason: str | None = Field(alias="returnReason", default=None)
    items: list[SaleItemOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "from_attributes": True}


class SaleReturnRequest(BaseModel):
    """Body of POST /v1/pos/sales/{id}/return."""

    reason: str = ""
    returned_by: str | None = Field(alias="returnedBy", default=None)

    model_config = {"populate_by_name": True}


class SaleListResponse(BaseModel):
    sales: list[SaleOut]
    pagination: Pagination
