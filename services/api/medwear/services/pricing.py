"""Price and totals computation.

All totals are recomputed from line items on every call; nothing here keeps
running sums.

Storefront:
    shipping = 0 if subtotal >= free_shipping_minimum else shipping_fee
    total = subtotal + shipping

POS:
    discount_amount = subtotal * discount / 100   (PERCENTAGE)
                    = discount                    (FIXED)
    total = max(0, subtotal - discount_amount)
    change = amount_received - total              (cash only)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiscountType(str, Enum):
    """How a POS discount value is interpreted."""

    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class PaymentMethod(str, Enum):
    """Accepted payment methods (entered manually, no gateway)."""

    CASH = "CASH"
    CARD = "CARD"
    COD = "COD"


class DiscountError(ValueError):
    """Discount input rejected."""


def round_money(amount: float) -> float:
    """Round to 2 decimals for display/persistence."""
    return round(float(amount), 2)


def resolve_unit_price(
    price: float,
    sale_price: float | None = None,
    customization_price: float | None = None,
    *,
    customized: bool = False,
) -> float:
    """Unit price at add-time: sale price when set, else price, plus surcharge."""
    base = sale_price if sale_price else price
    surcharge = (customization_price or 0.0) if customized else 0.0
    return float(base) + float(surcharge)


# ============================================================
# Storefront
# ============================================================


@dataclass(frozen=True)
class StorefrontTotals:
    subtotal: float
    shipping: float
    total: float

    @property
    def free_shipping(self) -> bool:
        return self.shipping == 0


def compute_shipping(subtotal: float, free_shipping_minimum: float, shipping_fee: float) -> float:
    """Flat fee below the free-shipping threshold, free at or above it."""
    return 0.0 if subtotal >= free_shipping_minimum else float(shipping_fee)


def compute_storefront_totals(
    subtotal: float,
    *,
    free_shipping_minimum: float,
    shipping_fee: float,
) -> StorefrontTotals:
    shipping = compute_shipping(subtotal, free_shipping_minimum, shipping_fee)
    return StorefrontTotals(
        subtotal=round_money(subtotal),
        shipping=round_money(shipping),
        total=round_money(subtotal + shipping),
    )


# ============================================================
# POS
# ============================================================


@dataclass(frozen=True)
class PosTotals:
    """Derived POS figures.

    `change` is the raw difference and may be negative; `change_due` is only
    set when it is a valid amount to hand back.
    """

    subtotal: float
    discount_amount: float
    total: float
    amount_received: float | None
    change: float | None

    @property
    def change_due(self) -> float | None:
        if self.change is None or self.change < 0:
            return None
        return self.change

    @property
    def amount_short(self) -> float:
        if self.change is None or self.change >= 0:
            return 0.0
        return round_money(-self.change)


def validate_discount(discount: float, discount_type: DiscountType | str | None) -> None:
    """Reject negative discounts and percentages above 100.

    Raises:
        DiscountError: With a user-facing message.
    """
    if discount is None:
        return
    try:
        value = float(discount)
    except (TypeError, ValueError):
        raise DiscountError("Discount must be a number") from None
    if value != value:
        raise DiscountError("Discount must be a number")
    if value < 0:
        raise DiscountError("Discount cannot be negative")
    if discount_type is not None and DiscountType(discount_type) is DiscountType.PERCENTAGE and value > 100:
        raise DiscountError("Percentage discount cannot exceed 100%")


def compute_discount_amount(
    subtotal: float,
    discount: float,
    discount_type: DiscountType | str | None,
) -> float:
    """Discount in currency units (not clamped; see compute_pos_totals)."""
    validate_discount(discount, discount_type)
    if not discount:
        return 0.0
    if discount_type is not None and DiscountType(discount_type) is DiscountType.PERCENTAGE:
        return round_money(subtotal * float(discount) / 100)
    return round_money(float(discount))


def compute_change(
    total: float,
    amount_received: float | None,
    payment_method: PaymentMethod | str,
) -> float | None:
    """Raw change; None unless paying cash with an amount entered."""
    if amount_received is None or PaymentMethod(payment_method) is not PaymentMethod.CASH:
        return None
    return round_money(float(amount_received) - total)


def compute_pos_totals(
    subtotal: float,
    *,
    discount: float = 0.0,
    discount_type: DiscountType | str | None = DiscountType.FIXED,
    payment_method: PaymentMethod | str = PaymentMethod.CASH,
    amount_received: float | None = None,
) -> PosTotals:
    """Derive discount, total and change from a subtotal.

    Raises:
        DiscountError: For an invalid discount.
    """
    discount_amount = compute_discount_amount(subtotal, discount, discount_type)
    total = round_money(max(0.0, subtotal - discount_amount))
    return PosTotals(
        subtotal=round_money(subtotal),
        discount_amount=discount_amount,
        total=total,
        amount_received=amount_received,
        change=compute_change(total, amount_received, payment_method),
    )


# ============================================================
# Margin (display only)
# ============================================================


def unit_profit(unit_price: float, cost_price: float) -> float:
    return round_money(unit_price - (cost_price or 0.0))


def margin_percent(unit_price: float, cost_price: float) -> float | None:
    """Profit as a percentage of cost; None when cost is unknown (0)."""
    if not cost_price:
        return None
    return round((unit_price - cost_price) / cost_price * 100, 1)


# ============================================================
# Deals
# ============================================================


def deal_line_price(product_price: float, quantity: int, deal_price: float, original_price: float) -> float:
    """Share of a deal price attributed to one product line.

    The deal's discount ratio (deal_price / original_price) is applied to the
    product's list price x quantity, rounded to a whole currency unit.
    """
    if original_price <= 0:
        return float(round(product_price * quantity))
    ratio = deal_price / original_price
    return float(round(product_price * quantity * ratio))


def split_deal_price(deal_price: float, original_price: float, lines: list[tuple[float, int]]) -> list[float]:
    """Price of each product line in one bundle.

    Every line gets its proportional share except the last, which takes the
    remainder so the shares always add up to `deal_price`.
    """
    shares = [deal_line_price(price, quantity, deal_price, original_price) for price, quantity in lines]
    if shares:
        shares[-1] = round_money(deal_price - sum(shares[:-1]))
    return shares


def savings_percent(original_price: float, deal_price: float) -> int:
    if original_price <= 0:
        return 0
    return round((original_price - deal_price) / original_price * 100)
