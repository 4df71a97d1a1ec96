"""Cart state with stock gating.

Line item lifecycle: absent -> present(qty=1) -> present(qty=n) -> absent.

Every add and quantity change is re-validated against the product's
`VariantInventory`: the quantity held across all lines for one
(product, color, size) never exceeds the stock of that variant. Rejected
mutations raise a `CartError` subclass and leave the cart unchanged.

`Cart` is the storefront cart (customization surcharges, deal bundles).
`PosCart` adds cost prices, estimated profit and a confirmation-gated clear.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from uuid import uuid4

from medwear.services.catalog import CatalogProduct
from medwear.services.deals import DealBundle
from medwear.services.pricing import (
    DiscountType,
    PaymentMethod,
    PosTotals,
    StorefrontTotals,
    compute_pos_totals,
    compute_storefront_totals,
    resolve_unit_price,
    round_money,
)

Customization = dict[str, dict[str, str]]


class CartError(ValueError):
    """Cart mutation rejected; the message is shown to the user."""


class OutOfStockError(CartError):
    pass


class StockLimitError(CartError):
    def __init__(self, available: int):
        super().__init__(f"Only {available} in stock")
        self.available = available


class VariantSelectionRequired(CartError):
    """Product has sizes/colors and the selection is incomplete."""

    def __init__(self, product: CatalogProduct):
        super().__init__(f"Select size/color for {product.name}")
        self.product = product


def _new_line_id() -> str:
    return uuid4().hex


@dataclass
class LineItem:
    """One product variant at one quantity."""

    line_id: str
    product: CatalogProduct
    quantity: int
    unit_price: float  # includes customization surcharge / deal ratio
    size: str | None = None
    color: str | None = None
    cost_price: float = 0.0
    customization: Customization | None = None
    customization_price: float | None = None
    deal_id: str | None = None  # groups the lines of one added bundle
    deal_name: str | None = None
    bundle_units: int = 1  # units of this product per deal bundle
    deal_ref: str | None = None  # id of the deal row, sent with sale/order lines
    bundle_price: float | None = None  # share of the deal price per bundle

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def name(self) -> str:
        if self.deal_name:
            return f"{self.product.name} ({self.deal_name})"
        return self.product.name

    @property
    def line_total(self) -> float:
        if self.bundle_price is not None:
            return round_money(self.bundle_price * (self.quantity // self.bundle_units))
        return round_money(self.unit_price * self.quantity)

    def same_variant(self, product_id: str, size: str | None, color: str | None) -> bool:
        return self.product.id == product_id and self.size == size and self.color == color


class Cart:
    """Storefront cart."""

    def __init__(self, items: Iterable[LineItem] | None = None):
        self._items: list[LineItem] = list(items or [])

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, line_id: str) -> LineItem | None:
        return next((i for i in self._items if i.line_id == line_id), None)

    def item_count(self) -> int:
        return sum(i.quantity for i in self._items)

    def subtotal(self) -> float:
        return round_money(sum(i.line_total for i in self._items))

    def reserved(
        self,
        product_id: str,
        size: str | None,
        color: str | None,
        *,
        exclude: Iterable[str] = (),
    ) -> int:
        """Units of a variant already held by lines (optionally excluding some)."""
        skip = set(exclude)
        return sum(
            i.quantity
            for i in self._items
            if i.line_id not in skip and i.same_variant(product_id, size, color)
        )

    def storefront_totals(self, *, free_shipping_minimum: float, shipping_fee: float) -> StorefrontTotals:
        return compute_storefront_totals(
            self.subtotal(),
            free_shipping_minimum=free_shipping_minimum,
            shipping_fee=shipping_fee,
        )

    # ------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------

    @staticmethod
    def check_selection(product: CatalogProduct, size: str | None, color: str | None) -> None:
        """Require a size/color for every dimension the product has."""
        inv = product.inventory
        if (inv.sizes and not size) or (inv.colors and not color):
            raise VariantSelectionRequired(product)
        if size and inv.sizes and size not in inv.sizes:
            raise CartError(f"Unknown size: {size}")
        if color and inv.colors and color not in inv.colors:
            raise CartError(f"Unknown color: {color}")

    def check_stock(
        self,
        product: CatalogProduct,
        size: str | None,
        color: str | None,
        wanted: int,
        *,
        exclude: Iterable[str] = (),
    ) -> int:
        """Raise unless `wanted` more units of the variant fit in stock.

        Returns:
            The available stock for the variant.
        """
        available = product.inventory.available(color, size)
        if available <= 0:
            if product.inventory.has_variants:
                raise OutOfStockError("This variant is out of stock")
            raise OutOfStockError("Product is out of stock")
        held = self.reserved(product.id, size, color, exclude=exclude)
        if held + wanted > available:
            raise StockLimitError(available)
        return available

    @staticmethod
    def _positive(quantity: int) -> int:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise CartError("Quantity must be a positive whole number")
        return quantity

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def _make_line(
        self,
        product: CatalogProduct,
        quantity: int,
        size: str | None,
        color: str | None,
        customization: Customization | None,
    ) -> LineItem:
        return LineItem(
            line_id=_new_line_id(),
            product=product,
            quantity=quantity,
            unit_price=resolve_unit_price(
                product.price,
                product.sale_price,
                product.customization_price,
                customized=bool(customization),
            ),
            size=size,
            color=color,
            cost_price=product.cost_price,
            customization=customization or None,
            customization_price=product.customization_price if customization else None,
        )

    def _find_mergeable(self, product_id: str, size: str | None, color: str | None) -> LineItem | None:
        return next(
            (
                i
                for i in self._items
                if i.same_variant(product_id, size, color) and not i.deal_id and not i.customization
            ),
            None,
        )

    def add(
        self,
        product: CatalogProduct,
        *,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
        customization: Customization | None = None,
    ) -> LineItem:
        """Add units of a variant, merging with an existing plain line.

        Customized lines are never merged.

        Raises:
            VariantSelectionRequired: If size/color must be chosen first.
            OutOfStockError: If the variant has no stock.
            StockLimitError: If the total held would exceed stock.
        """
        quantity = self._positive(quantity)
        self.check_selection(product, size, color)
        self.check_stock(product, size, color, quantity)

        existing = None if customization else self._find_mergeable(product.id, size, color)
        if existing is not None:
            existing.quantity += quantity
            existing.product = product
            return existing

        line = self._make_line(product, quantity, size, color, customization)
        self._items.append(line)
        return line

    def add_deal(
        self,
        deal: DealBundle,
        selections: dict[str, tuple[str | None, str | None]] | None = None,
    ) -> list[LineItem]:
        """Add one bundle of a deal; all lines are added or none.

        Args:
            deal: The deal with its products.
            selections: product_id -> (size, color) for products with variants.
        """
        selections = selections or {}
        deal_key = f"{deal.id}:{_new_line_id()[:8]}"
        lines: list[LineItem] = []
        pending: dict[tuple[str, str | None, str | None], int] = {}

        for item, share in zip(deal.items, deal.bundle_prices()):
            product = item.product
            size, color = selections.get(product.id, (None, None))
            self.check_selection(product, size, color)
            key = (product.id, size, color)
            pending[key] = pending.get(key, 0) + item.quantity
            self.check_stock(product, size, color, pending[key])
            lines.append(
                LineItem(
                    line_id=_new_line_id(),
                    product=product,
                    quantity=item.quantity,
                    unit_price=round_money(share / item.quantity),
                    size=size,
                    color=color,
                    cost_price=product.cost_price,
                    deal_id=deal_key,
                    deal_name=deal.name,
                    bundle_units=item.quantity,
                    deal_ref=deal.id,
                    bundle_price=share,
                )
            )

        self._items.extend(lines)
        return lines

    def update_quantity(self, line_id: str, quantity: int) -> LineItem | None:
        """Set a line's quantity; <= 0 removes it.

        For deal lines the quantity is the number of bundles and applies to
        every line of the deal.

        Returns:
            The updated line, or None if it was removed / absent.
        """
        line = self.get(line_id)
        if line is None:
            return None
        if quantity <= 0:
            self.remove(line_id)
            return None
        quantity = self._positive(quantity)

        if line.deal_id:
            group = [i for i in self._items if i.deal_id == line.deal_id]
            group_ids = [i.line_id for i in group]
            pending: dict[tuple[str, str | None, str | None], int] = {}
            for member in group:
                key = (member.product_id, member.size, member.color)
                pending[key] = pending.get(key, 0) + quantity * member.bundle_units
                self.check_stock(member.product, member.size, member.color, pending[key], exclude=group_ids)
            for member in group:
                member.quantity = quantity * member.bundle_units
            return line

        self.check_stock(line.product, line.size, line.color, quantity, exclude=[line.line_id])
        line.quantity = quantity
        return line

    def increment(self, line_id: str) -> LineItem | None:
        line = self.get(line_id)
        if line is None:
            return None
        step = line.quantity // line.bundle_units + 1 if line.deal_id else line.quantity + 1
        return self.update_quantity(line_id, step)

    def decrement(self, line_id: str) -> LineItem | None:
        line = self.get(line_id)
        if line is None:
            return None
        step = line.quantity // line.bundle_units - 1 if line.deal_id else line.quantity - 1
        return self.update_quantity(line_id, step)

    def remove(self, line_id: str) -> bool:
        """Remove a line (its whole deal for deal lines). Absent lines are a no-op."""
        line = self.get(line_id)
        if line is None:
            return False
        if line.deal_id:
            self._items = [i for i in self._items if i.deal_id != line.deal_id]
        else:
            self._items = [i for i in self._items if i.line_id != line_id]
        return True

    def remove_deal(self, deal_id: str) -> int:
        before = len(self._items)
        self._items = [i for i in self._items if i.deal_id != deal_id]
        return before - len(self._items)

    def clear(self) -> None:
        self._items = []

    def refresh_products(self, products: dict[str, CatalogProduct]) -> None:
        """Rebind lines to fresh product snapshots (e.g. after a catalog reload)."""
        for line in self._items:
            fresh = products.get(line.product_id)
            if fresh is not None:
                line.product = fresh


class PosCart(Cart):
    """Point-of-sale cart."""

    def estimated_profit(self) -> float:
        return round_money(sum(i.line_total - i.cost_price * i.quantity for i in self._items))

    def pos_totals(
        self,
        *,
        discount: float = 0.0,
        discount_type: DiscountType | str | None = DiscountType.FIXED,
        payment_method: PaymentMethod | str = PaymentMethod.CASH,
        amount_received: float | None = None,
    ) -> PosTotals:
        return compute_pos_totals(
            self.subtotal(),
            discount=discount,
            discount_type=discount_type,
            payment_method=payment_method,
            amount_received=amount_received,
        )

    def clear(self, confirm: Callable[[], bool] | None = None) -> bool:
        """Clear all lines once the user confirms. There is no undo.

        Returns:
            True if the cart was cleared.
        """
        if not self._items:
            return False
        if confirm is None or not confirm():
            return False
        self._items = []
        return True

    def reset(self) -> None:
        """Empty the cart after a completed sale (no confirmation)."""
        self._items = []
