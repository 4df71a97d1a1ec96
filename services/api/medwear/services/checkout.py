"""POS terminal and storefront checkout flows.

Submission is the only network step. On failure the server message is
raised as `ApiError` and the cart is left exactly as it was; the cart is
emptied only after the server confirms the sale/order.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any

from medwear.services.api_client import StoreApiClient
from medwear.services.cart import Cart, PosCart
from medwear.services.catalog import CatalogProduct
from medwear.services.pricing import (
    DiscountType,
    PaymentMethod,
    PosTotals,
    StorefrontTotals,
)
from medwear.services.scanner import ScanResult, resolve_enter
from medwear.settings import get_settings

logger = logging.getLogger("uvicorn.error")


class CheckoutError(ValueError):
    """Checkout blocked before submission."""


class CheckoutInProgress(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Please wait, the previous request is still processing")


class PosCheckout:
    """State of one POS terminal screen."""

    def __init__(
        self,
        client: StoreApiClient,
        cart: PosCart | None = None,
        products: list[CatalogProduct] | None = None,
    ):
        self.client = client
        self.cart = cart if cart is not None else PosCart()
        self.products: list[CatalogProduct] = list(products or [])
        self.discount: float = 0.0
        self.discount_type: DiscountType = DiscountType.FIXED
        self.payment_method: PaymentMethod = PaymentMethod.CASH
        self.amount_received: float | None = None
        self.customer_name: str = ""
        self.customer_phone: str = ""
        self.notes: str = ""
        self.processing = False
        self.closed = False
        self.last_sale: dict[str, Any] | None = None

    async def load_products(self) -> list[CatalogProduct]:
        products = await self.client.list_products()
        if not self.closed:
            self.products = products
            self.cart.refresh_products({p.id: p for p in products})
        return products

    async def scan(self, text: str, selected_index: int | None = None) -> ScanResult:
        """Resolve the search box on Enter (suggestion, barcode or single match)."""
        return await resolve_enter(
            text,
            self.products,
            self.client.get_product_by_barcode,
            selected_index=selected_index,
            barcode_prefix=get_settings().barcode_prefix,
        )

    def totals(self) -> PosTotals:
        return self.cart.pos_totals(
            discount=self.discount,
            discount_type=self.discount_type,
            payment_method=self.payment_method,
            amount_received=self.amount_received,
        )

    def build_sale_payload(self) -> dict[str, Any]:
        """Validate the terminal state and build the sale body.

        Raises:
            CheckoutError: Empty cart or cash short of the total.
            DiscountError: Invalid discount.
        """
        if not self.cart.items:
            raise CheckoutError("Cart is empty")

        totals = self.totals()
        if self.payment_method is PaymentMethod.CASH and self.amount_received is not None:
            if totals.change_due is None:
                raise CheckoutError("Amount received is less than total")

        return {
            "items": [
                {
                    "productId": line.product_id,
                    "quantity": line.quantity,
                    "size": line.size,
                    "color": line.color,
                    "dealId": line.deal_ref,
                }
                for line in self.cart.items
            ],
            "customerName": self.customer_name.strip() or None,
            "customerPhone": self.customer_phone.strip() or None,
            "discount": self.discount,
            "discountType": self.discount_type.value if self.discount else None,
            "paymentMethod": self.payment_method.value,
            "amountReceived": self.amount_received,
            "notes": self.notes.strip() or None,
        }

    async def complete_sale(self) -> dict[str, Any] | None:
        """Submit the sale.

        Returns:
            The created sale (with `receiptNumber`), or None if the screen was
            closed while the request was in flight.

        Raises:
            CheckoutInProgress: If a submission is already running.
            ApiError: The server rejected the sale; nothing was changed.
        """
        if self.processing:
            raise CheckoutInProgress()

        payload = self.build_sale_payload()
        self.processing = True
        try:
            sale = await self.client.create_sale(payload)
        finally:
            self.processing = False

        if self.closed:
            logger.info("POS screen closed before sale response; discarding")
            return None

        self.last_sale = sale
        self._reset_after_sale()
        return sale

    def _reset_after_sale(self) -> None:
        self.cart.reset()
        self.discount = 0.0
        self.discount_type = DiscountType.FIXED
        self.amount_received = None
        self.customer_name = ""
        self.customer_phone = ""
        self.notes = ""

    def close(self) -> None:
        """Stop applying responses to this screen."""
        self.closed = True


@dataclass
class ShippingAddress:
    name: str
    phone: str
    address: str
    city: str
    state: str = ""
    postal_code: str = ""
    country: str = "Pakistan"

    def validate(self) -> None:
        for field_name in ("name", "phone", "address", "city"):
            if not getattr(self, field_name).strip():
                raise CheckoutError("Please complete your profile before placing an order")

    def to_json(self) -> str:
        data = asdict(self)
        data["postalCode"] = data.pop("postal_code")
        return json.dumps(data)


class StorefrontCheckout:
    """Cash-on-delivery checkout of the storefront cart."""

    def __init__(self, client: StoreApiClient, cart: Cart):
        settings = get_settings()
        self.client = client
        self.cart = cart
        self.free_shipping_minimum = settings.free_shipping_minimum
        self.shipping_fee = settings.shipping_fee
        self.processing = False

    async def load_shipping_settings(self) -> None:
        self.free_shipping_minimum, self.shipping_fee = await self.client.get_shipping_settings()

    def totals(self) -> StorefrontTotals:
        return self.cart.storefront_totals(
            free_shipping_minimum=self.free_shipping_minimum,
            shipping_fee=self.shipping_fee,
        )

    def build_order_payload(self, address: ShippingAddress, notes: str | None = None) -> dict[str, Any]:
        if not self.cart.items:
            raise CheckoutError("Your cart is empty")
        address.validate()

        totals = self.totals()
        items = []
        for line in self.cart.items:
            item: dict[str, Any] = {
                "productId": line.product_id,
                "quantity": line.quantity,
                "price": line.unit_price,
                "size": line.size,
                "color": line.color,
            }
            if line.deal_ref:
                item["dealId"] = line.deal_ref
            if line.customization:
                item["customization"] = line.customization
                item["customizationPrice"] = line.customization_price
            items.append(item)

        return {
            "items": items,
            "subtotal": totals.subtotal,
            "shippingFee": totals.shipping,
            "total": totals.total,
            "shippingAddress": address.to_json(),
            "paymentMethod": PaymentMethod.COD.value,
            "notes": notes,
        }

    async def place_order(self, address: ShippingAddress, notes: str | None = None) -> dict[str, Any]:
        """Submit the order; the cart is cleared only when the server accepts it."""
        if self.processing:
            raise CheckoutInProgress()

        payload = self.build_order_payload(address, notes)
        self.processing = True
        try:
            order = await self.client.create_order(payload)
        finally:
            self.processing = False

        self.cart.clear()
        logger.info(f"Order placed: {order.get('orderNumber') or order.get('id')}")
        return order
