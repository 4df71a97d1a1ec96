"""Schemas for storefront orders (/v1/orders)."""

from datetime import datetime

from pydantic import BaseModel, Field


class OrderItemIn(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int
    price: float | None = None  # client's unit price; re-resolved server-side
    size: str | None = None
    color: str | None = None
    customization: dict[str, dict[str, str]] | None = None
    customization_price: float | None = Field(alias="customizationPrice", default=None)
    deal_id: str | None = Field(alias="dealId", default=None)

    model_config = {"populate_by_name": True}


class OrderCreate(BaseModel):
    """Body of POST /v1/orders."""

    items: list[OrderItemIn] = Field(default_factory=list)
    subtotal: float | None = None
    shipping_fee: float | None = Field(alias="shippingFee", default=None)
    total: float | None = None
    shipping_address: str = Field(alias="shippingAddress")  # JSON string
    payment_method: str = Field(alias="paymentMethod", default="COD")
    notes: str | None = None

    model_config = {"populate_by_name": True}


class OrderItemOut(BaseModel):
    id: int
    product_id: str = Field(alias="productId")
    quantity: int
    price: float
    size: str | None = None
    color: str | None = None
    customization_json: str | None = Field(alias="customization", default=None)
    customization_price: float | None = Field(alias="customizationPrice", default=None)

    model_config = {"populate_by_name": True, "from_attributes": True}


class OrderOut(BaseModel):
    id: str
    order_number: str = Field(alias="orderNumber")
    subtotal: float
    shipping_fee: float = Field(alias="shippingFee")
    total: float
    shipping_address: str = Field(alias="shippingAddress")
    payment_method: str = Field(alias="paymentMethod")
    payment_status: str = Field(alias="paymentStatus")
    status: str
    notes: str | None = None
    created_at: datetime | None = Field(alias="createdAt", default=None)
    items: list[OrderItemOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "from_attributes": True}


class OrderCreateResponse(BaseModel):
    message: str
    order: OrderOut
