"""Storefront order service (cash on delivery).

Line prices, subtotal, shipping and total are recomputed from the locked
product rows (deal lines from their deal); an order whose client total
disagrees is rejected.
"""

import json
import logging
import random
import string
import time
from datetime import datetime, timezone

from medwear.models import Order, OrderItem
from medwear.schemas import OrderCreate, OrderOut
from medwear.services.deals import PricedItem, load_deals, price_items
from medwear.services.pricing import compute_storefront_totals, round_money
from medwear.services.products import StockLine, lock_products, take_stock, to_base36
from medwear.settings import get_settings
from medwear.stores.postgres import get_session
from medwear.stores.redis import invalidate_catalog_cache

logger = logging.getLogger("uvicorn.error")


class OrderValidationError(ValueError):
    """Order rejected before touching stock."""


def generate_order_number(prefix: str | None = None) -> str:
    """DP-<base36 millis>-<4 random>, e.g. DP-LZ3K9Q2A-7F4X."""
    prefix = prefix or get_settings().order_prefix
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"{prefix}-{to_base36(int(time.time() * 1000))}-{suffix}"


def _parse_shipping_address(raw: str) -> dict:
    try:
        address = json.loads(raw)
    except (TypeError, ValueError):
        raise OrderValidationError("Invalid shipping address") from None
    if not isinstance(address, dict):
        raise OrderValidationError("Invalid shipping address")
    return address


async def create_order(data: OrderCreate) -> OrderOut:
    """Persist a COD order and decrement stock.

    Raises:
        OrderValidationError: Empty cart, bad address or payment method,
            or a client total that does not match.
        DealValidationError: Deal lines that are unknown, expired or partial.
        ProductNotFoundError: Unknown product id.
        StockLineError: Missing size/color for a variant product.
        InsufficientStockError: A variant does not have enough stock.
    """
    if not data.items:
        raise OrderValidationError("Your cart is empty")
    if data.payment_method.upper() != "COD":
        raise OrderValidationError("Only cash on delivery is supported")

    address = _parse_shipping_address(data.shipping_address)
    for key in ("name", "phone", "address", "city"):
        if not str(address.get(key) or "").strip():
            raise OrderValidationError("Please complete your profile before placing an order")

    settings = get_settings()
    lines = [
        StockLine(product_id=i.product_id, quantity=i.quantity, size=i.size or None, color=i.color or None)
        for i in data.items
    ]

    async with get_session() as session:
        products = await lock_products(session, [line.product_id for line in lines])

        deals = await load_deals(session, [i.deal_id for i in data.items])
        line_totals = price_items(
            products,
            deals,
            [PricedItem(i.product_id, i.quantity, i.deal_id, customized=bool(i.customization)) for i in data.items],
            datetime.now(timezone.utc),
        )
        subtotal = round_money(sum(line_totals))
        totals = compute_storefront_totals(
            subtotal,
            free_shipping_minimum=settings.free_shipping_minimum,
            shipping_fee=settings.shipping_fee,
        )
        if data.total is not None and abs(data.total - totals.total) > 0.01:
            logger.warning(f"Order total mismatch: client={data.total} server={totals.total}")
            raise OrderValidationError("Prices have changed, please review your cart")

        take_stock(products, lines)

        order = Order(
            order_number=generate_order_number(),
            subtotal=totals.subtotal,
            shipping_fee=totals.shipping,
            total=totals.total,
            shipping_address=data.shipping_address,
            payment_method="COD",
            payment_status="PENDING",
            status="PENDING",
            notes=data.notes or None,
            created_at=datetime.now(timezone.utc),
            items=[
                OrderItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=round_money(line_total / item.quantity),
                    size=item.size or None,
                    color=item.color or None,
                    customization_json=json.dumps(item.customization) if item.customization else None,
                    customization_price=products[item.product_id].customization_price if item.customization else None,
                )
                for item, line_total in zip(data.items, line_totals)
            ],
        )
        session.add(order)
        await session.flush()
        created = OrderOut.model_validate(order)

    await invalidate_catalog_cache()
    logger.info(f"Order {created.order_number} placed: total={created.total:.2f}")
    return created
