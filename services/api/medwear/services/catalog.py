"""In-memory catalog product.

`CatalogProduct` is what the POS terminal, the storefront cart and the
admin editor work with: variant fields are structured (`VariantInventory`)
and JSON strings only exist at `from_payload()` / `to_payload()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from medwear.services.inventory import VariantInventory, stock_status
from medwear.services.variant_codec import decode_string_list, encode_images
from medwear.settings import get_settings


class ProductValidationError(ValueError):
    """Product cannot be saved as entered."""


def _as_float(value: Any, default: float | None = 0.0) -> float | None:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass
class CatalogProduct:
    """A product as seen by clients."""

    id: str
    name: str
    slug: str = ""
    price: float = 0.0
    sale_price: float | None = None
    cost_price: float = 0.0
    customization_price: float | None = None
    images: list[str] = field(default_factory=list)
    barcode: str | None = None
    sku: str | None = None
    company: str | None = None
    category_name: str | None = None
    description: str | None = None
    is_active: bool = True
    inventory: VariantInventory = field(default_factory=VariantInventory)

    @property
    def unit_price(self) -> float:
        """Selling price: sale price when set, else list price."""
        return self.sale_price if self.sale_price else self.price

    @property
    def stock(self) -> int:
        return self.inventory.total_stock()

    def stock_label(self, color: str | None = None, size: str | None = None) -> str:
        """Label for the selected variant: Out of Stock, Low: n, or n in stock."""
        return stock_status(self.inventory.available(color, size), get_settings().low_stock_threshold)

    def validate_for_save(self) -> None:
        """Check the fields the admin form requires.

        Raises:
            ProductValidationError: On the first failing field.
        """
        if not self.name.strip():
            raise ProductValidationError("Product name is required")
        if self.price <= 0:
            raise ProductValidationError("Price must be greater than 0")
        if self.sale_price is not None and self.sale_price < 0:
            raise ProductValidationError("Sale price cannot be negative")
        if self.cost_price < 0:
            raise ProductValidationError("Cost price cannot be negative")
        if not self.images:
            raise ProductValidationError("Please upload at least one product image")

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "CatalogProduct":
        """Build from the wire shape (camelCase, JSON-string variant fields)."""
        category = data.get("category")
        category_name = data.get("categoryName")
        if category_name is None and isinstance(category, dict):
            category_name = category.get("name")

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            slug=str(data.get("slug") or ""),
            price=_as_float(data.get("price")) or 0.0,
            sale_price=_as_float(data.get("salePrice"), None),
            cost_price=_as_float(data.get("costPrice")) or 0.0,
            customization_price=_as_float(data.get("customizationPrice"), None),
            images=decode_string_list(data.get("images"), "images"),
            barcode=data.get("barcode") or None,
            sku=data.get("sku") or None,
            company=data.get("company") or None,
            category_name=category_name,
            description=data.get("description"),
            is_active=bool(data.get("isActive", True)),
            inventory=VariantInventory.decode(
                sizes=data.get("sizes"),
                colors=data.get("colors"),
                color_images=data.get("colorImages"),
                color_size_stock=data.get("colorSizeStock"),
                stock=data.get("stock", 0),
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        """Encode to the wire shape used by `PUT /v1/admin/products/{id}`."""
        encoded = self.inventory.encode()
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "categoryName": self.category_name,
            "price": self.price,
            "salePrice": self.sale_price,
            "costPrice": self.cost_price,
            "customizationPrice": self.customization_price,
            "barcode": self.barcode,
            "sku": self.sku,
            "company": self.company,
            "isActive": self.is_active,
            "stock": encoded["stock"],
            "images": encode_images(self.images),
            "sizes": encoded["sizes"],
            "colors": encoded["colors"],
            "colorImages": encoded["color_images"],
            "colorSizeStock": encoded["color_size_stock"],
        }
