"""Schemas for product endpoints.

Variant fields travel as JSON-encoded strings, exactly as stored:
images, sizes, colors, colorImages, colorSizeStock.
"""

from typing import Any

from pydantic import BaseModel, Field


class ProductOut(BaseModel):
    """Product as returned to the POS terminal, storefront and admin."""

    id: str
    name: str
    slug: str
    description: str | None = None
    category_name: str | None = Field(alias="categoryName", default=None)
    price: float
    sale_price: float | None = Field(alias="salePrice", default=None)
    cost_price: float = Field(alias="costPrice", default=0)
    customization_price: float | None = Field(alias="customizationPrice", default=None)
    barcode: str | None = None
    sku: str | None = None
    company: str | None = None
    stock: int = 0
    images: str = "[]"
    sizes: str | None = None
    colors: str | None = None
    color_images: str | None = Field(alias="colorImages", default=None)
    color_size_stock: str | None = Field(alias="colorSizeStock", default=None)
    is_active: bool = Field(alias="isActive", default=True)

    model_config = {"populate_by_name": True}


class ProductUpdate(BaseModel):
    """Body of PUT /v1/admin/products/{id}.

    Variant fields are accepted as JSON strings or already-structured values
    and are decoded defensively.
    """

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    category_name: str | None = Field(alias="categoryName", default=None)
    price: float | None = None
    sale_price: float | None = Field(alias="salePrice", default=None)
    cost_price: float | None = Field(alias="costPrice", default=None)
    customization_price: float | None = Field(alias="customizationPrice", default=None)
    barcode: str | None = None
    sku: str | None = None
    company: str | None = None
    stock: int | None = Field(default=None, ge=0)
    images: Any = None
    sizes: Any = None
    colors: Any = None
    color_images: Any = Field(alias="colorImages", default=None)
    color_size_stock: Any = Field(alias="colorSizeStock", default=None)
    is_active: bool | None = Field(alias="isActive", default=None)

    model_config = {"populate_by_name": True}


class GeneratedBarcode(BaseModel):
    id: str
    barcode: str


class BarcodeGenerationResponse(BaseModel):
    """Response of POST /v1/admin/products/generate-barcodes."""

    message: str
    updated: int
    products: list[GeneratedBarcode] = Field(default_factory=list)
