"""Product model.

A product is one catalog entry (e.g. "Classic V-Neck Scrub Top").
Variant dimensions are stored as JSON text columns:
- images: ["https://.../front.jpg", ...]
- sizes: ["S", "M", "L"]
- colors: ["Navy", "Wine"]
- color_images: {"Navy": ["https://.../navy.jpg"]}
- color_size_stock: {"Navy": {"S": 4, "M": 0}}

When color_size_stock is present the scalar stock column is derived from it
and rewritten on every save.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from medwear.stores.postgres import Base


def generate_product_id() -> str:
    """Generate unique product ID."""
    return uuid4().hex


class Product(Base):
    """Catalog product with optional color x size variant stock."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(40), primary_key=True, default=generate_product_id)

    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(220), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    category_name: Mapped[str | None] = mapped_column(String(100))

    # Pricing
    cost_price: Mapped[float] = mapped_column(default=0)
    price: Mapped[float] = mapped_column()
    sale_price: Mapped[float | None] = mapped_column()
    customization_price: Mapped[float | None] = mapped_column()

    # Identifiers
    barcode: Mapped[str | None] = mapped_column(String(64), index=True)
    sku: Mapped[str | None] = mapped_column(String(64), index=True)
    company: Mapped[str | None] = mapped_column(String(100))

    # Inventory
    stock: Mapped[int] = mapped_column(Integer, default=0)

    # JSON-encoded variant fields
    images: Mapped[str] = mapped_column(Text, default="[]")
    sizes: Mapped[str | None] = mapped_column(Text)
    colors: Mapped[str | None] = mapped_column(Text)
    color_images: Mapped[str | None] = mapped_column(Text)
    color_size_stock: Mapped[str | None] = mapped_column(Text)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product {self.slug} stock={self.stock}>"
