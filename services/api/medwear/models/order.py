"""Storefront order models (cash on delivery)."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medwear.stores.postgres import Base


def generate_order_id() -> str:
    """Generate unique order ID."""
    return uuid4().hex


class Order(Base):
    """Order placed through the storefront checkout."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(40), primary_key=True, default=generate_order_id)
    order_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)

    subtotal: Mapped[float] = mapped_column()
    shipping_fee: Mapped[float] = mapped_column(default=0)
    total: Mapped[float] = mapped_column()

    shipping_address: Mapped[str] = mapped_column(Text)  # JSON string, as submitted
    payment_method: Mapped[str] = mapped_column(String(20), default="COD")
    payment_status: Mapped[str] = mapped_column(String(20), default="PENDING")
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Order {self.order_number} total={self.total:.2f}>"


class OrderItem(Base):
    """Line item of a storefront order."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)

    quantity: Mapped[int] = mapped_column()
    price: Mapped[float] = mapped_column()  # unit price incl. customization surcharge
    size: Mapped[str | None] = mapped_column(String(40))
    color: Mapped[str | None] = mapped_column(String(60))
    customization_json: Mapped[str | None] = mapped_column(Text)
    customization_price: Mapped[float | None] = mapped_column()

    order: Mapped[Order] = relationship(back_populates="items")
