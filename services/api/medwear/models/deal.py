"""Deal (bundle) models.

A deal groups at least two distinct products at a bundle price.
original_price is derived from product prices at creation time.
"""

from datetime import datetime
from uuid import uuid4
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medwear.stores.postgres import Base

if TYPE_CHECKING:
    from medwear.models.product import Product


def generate_deal_id() -> str:
    """Generate unique deal ID."""
    return uuid4().hex


class Deal(Base):
    """Product bundle sold at a fixed price."""

    __tablename__ = "deals"

    id: Mapped[str] = mapped_column(String(40), primary_key=True, default=generate_deal_id)
    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(240), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    image: Mapped[str | None] = mapped_column(Text)

    deal_price: Mapped[float] = mapped_column()
    original_price: Mapped[float] = mapped_column()

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    items: Mapped[list["DealItem"]] = relationship(
        back_populates="deal",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="DealItem.position",
    )

    def __repr__(self) -> str:
        return f"<Deal {self.slug} {self.deal_price:.2f}>"


class DealItem(Base):
    """Product + quantity inside a deal, kept in insertion order."""

    __tablename__ = "deal_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    deal_id: Mapped[str] = mapped_column(ForeignKey("deals.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)
    quantity: Mapped[int] = mapped_column(default=1)
    position: Mapped[int] = mapped_column(default=0)

    deal: Mapped[Deal] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship(lazy="selectin")
