"""POS sale models.

A sale is an immutable snapshot of an in-store transaction:
line items with resolved prices, discount, totals and payment details.
Only its return status changes afterwards.
Receipt numbers look like "POS-20261018-0007".
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medwear.stores.postgres import Base


def generate_sale_id() -> str:
    """Generate unique sale ID."""
    return uuid4().hex


class PosSale(Base):
    """Completed point-of-sale transaction."""

    __tablename__ = "pos_sales"

    id: Mapped[str] = mapped_column(String(40), primary_key=True, default=generate_sale_id)
    receipt_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    salesman_name: Mapped[str | None] = mapped_column(String(100))

    subtotal: Mapped[float] = mapped_column()
    discount: Mapped[float] = mapped_column(default=0)  # resolved amount, not the raw input
    discount_type: Mapped[str | None] = mapped_column(String(20))  # PERCENTAGE / FIXED
    total: Mapped[float] = mapped_column()

    payment_method: Mapped[str] = mapped_column(String(20), default="CASH")
    amount_received: Mapped[float | None] = mapped_column()
    change_given: Mapped[float | None] = mapped_column()

    customer_name: Mapped[str | None] = mapped_column(String(100))
    customer_phone: Mapped[str | None] = mapped_column(String(40))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    # Returns keep the sale row; stock is restored and the sale is flagged.
    is_returned: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    returned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    returned_by: Mapped[str | None] = mapped_column(String(100))
    return_reason: Mapped[str | None] = mapped_column(Text)

    items: Mapped[list["PosSaleItem"]] = relationship(
        back_populates="sale",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<PosSale {self.receipt_number} total={self.total:.2f}>"


class PosSaleItem(Base):
    """Line item of a POS sale."""

    __tablename__ = "pos_sale_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    sale_id: Mapped[str] = mapped_column(ForeignKey("pos_sales.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)

    product_name: Mapped[str] = mapped_column(String(200))
    quantity: Mapped[int] = mapped_column()
    price: Mapped[float] = mapped_column()  # resolved unit price at sale time
    size: Mapped[str | None] = mapped_column(String(40))
    color: Mapped[str | None] = mapped_column(String(60))

    sale: Mapped[PosSale] = relationship(back_populates="items")
