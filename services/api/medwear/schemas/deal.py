"""Schemas for deal (bundle) endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class DealItemIn(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int = 1

    model_config = {"populate_by_name": True}


class DealCreate(BaseModel):
    """Body of POST /v1/admin/deals. originalPrice is derived server-side."""

    name: str
    description: str | None = None
    image: str | None = None
    deal_price: float | None = Field(alias="dealPrice", default=None)
    is_active: bool = Field(alias="isActive", default=True)
    start_date: datetime | None = Field(alias="startDate", default=None)
    end_date: datetime | None = Field(alias="endDate", default=None)
    items: list[DealItemIn] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class DealProduct(BaseModel):
    """Product summary inside a deal (enough to pick a variant)."""

    id: str
    name: str
    slug: str
    price: float
    sale_price: float | None = Field(alias="salePrice", default=None)
    images: str = "[]"
    sizes: str | None = None
    colors: str | None = None
    color_size_stock: str | None = Field(alias="colorSizeStock", default=None)
    stock: int = 0

    model_config = {"populate_by_name": True, "from_attributes": True}


class DealItemOut(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int
    product: DealProduct

    model_config = {"populate_by_name": True, "from_attributes": True}


class DealOut(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    image: str | None = None
    deal_price: float = Field(alias="dealPrice")
    original_price: float = Field(alias="originalPrice")
    is_active: bool = Field(alias="isActive")
    start_date: datetime | None = Field(alias="startDate", default=None)
    end_date: datetime | None = Field(alias="endDate", default=None)
    items: list[DealItemOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "from_attributes": True}
