"""POS sale service.

A sale is created in one transaction:
1. lock the product rows of every line
2. resolve line prices (sale price when set, else price; deal lines get
   their share of the deal price)
3. compute subtotal, discount, total and change
4. re-check and decrement stock per variant
5. assign the receipt number and insert the sale

Any failure rolls the whole transaction back, so stock and sales never
disagree. A return restores the stock but keeps the sale, flagged as returned.
"""

import logging
import math
import re
from datetime import datetime, timezone

from sqlalchemy import func, select

from medwear.models import PosSale, PosSaleItem, Product
from medwear.schemas import Pagination, SaleCreate, SaleListResponse, SaleOut
from medwear.services.deals import PricedItem, load_deals, price_items
from medwear.services.pricing import PaymentMethod, compute_pos_totals, round_money
from medwear.services.products import StockLine, lock_products, return_stock, take_stock
from medwear.settings import get_settings
from medwear.stores.postgres import get_session
from medwear.stores.redis import invalidate_catalog_cache, next_receipt_sequence

logger = logging.getLogger("uvicorn.error")

POS_PAYMENT_METHODS = (PaymentMethod.CASH, PaymentMethod.CARD)


class SaleValidationError(ValueError):
    """Sale rejected before touching stock."""


def format_receipt_number(day: str, sequence: int, prefix: str | None = None) -> str:
    """POS-20261018-0007."""
    prefix = prefix or get_settings().receipt_prefix
    return f"{prefix}-{day}-{sequence:04d}"


def parse_receipt_sequence(receipt_number: str | None) -> int:
    """Trailing sequence of a receipt number; 0 if it has none."""
    if not receipt_number:
        return 0
    match = re.search(r"-(\d+)$", receipt_number)
    return int(match.group(1)) if match else 0


async def allocate_receipt_number(session, now: datetime) -> str:
    """Next receipt number for the day.

    Redis INCR gives a race-free sequence; the highest number already stored
    for the day is used as a floor (and as the only source without Redis).
    """
    day = now.strftime("%Y%m%d")
    day_prefix = format_receipt_number(day, 0)[:-4]

    result = await session.execute(
        select(func.max(PosSale.receipt_number)).where(PosSale.receipt_number.like(f"{day_prefix}%"))
    )
    floor = parse_receipt_sequence(result.scalar_one_or_none()) + 1

    try:
        sequence = max(await next_receipt_sequence(day), floor)
    except RuntimeError:
        sequence = floor
    return format_receipt_number(day, sequence)


def _payment_method(value: str) -> PaymentMethod:
    try:
        method = PaymentMethod(value.upper())
    except ValueError:
        raise SaleValidationError(f"Invalid payment method: {value}") from None
    if method not in POS_PAYMENT_METHODS:
        raise SaleValidationError(f"Invalid payment method: {value}")
    return method


async def create_sale(data: SaleCreate) -> SaleOut:
    """Record a POS sale and decrement stock.

    Raises:
        SaleValidationError: Empty sale, bad payment method, cash short.
        DiscountError: Negative discount or percentage above 100.
        DealValidationError: Deal lines that are unknown, expired or partial.
        ProductNotFoundError: Unknown product id.
        StockLineError: Missing size/color for a variant product.
        InsufficientStockError: A variant does not have enough stock.
    """
    if not data.items:
        raise SaleValidationError("No items in sale")

    method = _payment_method(data.payment_method)
    discount_type = (data.discount_type or "FIXED").upper() if data.discount else None
    lines = [
        StockLine(product_id=i.product_id, quantity=i.quantity, size=i.size or None, color=i.color or None)
        for i in data.items
    ]

    now = datetime.now(timezone.utc)
    async with get_session() as session:
        products = await lock_products(session, [line.product_id for line in lines])

        deals = await load_deals(session, [i.deal_id for i in data.items])
        line_totals = price_items(
            products,
            deals,
            [PricedItem(i.product_id, i.quantity, i.deal_id) for i in data.items],
            now,
        )
        subtotal = round_money(sum(line_totals))
        totals = compute_pos_totals(
            subtotal,
            discount=data.discount,
            discount_type=discount_type,
            payment_method=method,
            amount_received=data.amount_received,
        )
        if method is PaymentMethod.CASH and data.amount_received is not None and totals.change_due is None:
            raise SaleValidationError("Amount received is less than total")

        take_stock(products, lines)

        sale = PosSale(
            receipt_number=await allocate_receipt_number(session, now),
            salesman_name=data.salesman_name,
            subtotal=totals.subtotal,
            discount=totals.discount_amount,
            discount_type=discount_type,
            total=totals.total,
            payment_method=method.value,
            amount_received=data.amount_received,
            change_given=totals.change_due,
            customer_name=data.customer_name or None,
            customer_phone=data.customer_phone or None,
            notes=data.notes or None,
            created_at=now,
            is_returned=False,
            items=[
                PosSaleItem(
                    product_id=line.product_id,
                    product_name=products[line.product_id].name,
                    quantity=line.quantity,
                    price=round_money(line_total / line.quantity),
                    size=line.size,
                    color=line.color,
                )
                for line, line_total in zip(lines, line_totals)
            ],
        )
        session.add(sale)
        await session.flush()
        created = SaleOut.model_validate(sale)

    await invalidate_catalog_cache()
    logger.info(f"POS sale {created.receipt_number}: {len(lines)} lines, total={created.total:.2f}")
    return created


async def list_sales(page: int = 1, limit: int = 20) -> SaleListResponse:
    """Newest first, paginated."""
    async with get_session() as session:
        total = (await session.execute(select(func.count(PosSale.id)))).scalar_one()
        result = await session.execute(
            select(PosSale).order_by(PosSale.created_at.desc()).offset((page - 1) * limit).limit(limit)
        )
        sales = [SaleOut.model_validate(s) for s in result.scalars().all()]

    return SaleListResponse(
        sales=sales,
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


async def get_sale(sale_id: str) -> SaleOut | None:
    async with get_session() as session:
        sale = await session.get(PosSale, sale_id)
        return SaleOut.model_validate(sale) if sale else None


async def delete_sale(sale_id: str) -> bool:
    """Delete a sale and put its units back into stock (unless already returned).

    Returns:
        False if the sale does not exist.
    """
    async with get_session() as session:
        result = await session.execute(select(PosSale).where(PosSale.id == sale_id).with_for_update())
        sale = result.scalar_one_or_none()
        if sale is None:
            return False

        lines = [
            StockLine(product_id=i.product_id, quantity=i.quantity, size=i.size, color=i.color)
            for i in sale.items
        ]
        if not sale.is_returned:
            products = await lock_products(session, [line.product_id for line in lines])
            return_stock(products, lines)
        receipt_number = sale.receipt_number
        await session.delete(sale)

    await invalidate_catalog_cache()
    logger.info(f"POS sale {receipt_number} deleted, stock restored")
    return True


def mark_returned(
    sale: PosSale,
    products: dict[str, Product],
    reason: str,
    returned_by: str | None,
    now: datetime,
) -> None:
    """Restore the sale's units and flag it as returned.

    Raises:
        SaleValidationError: Sale already returned or no reason given.
    """
    reason = (reason or "").strip()
    if not reason:
        raise SaleValidationError("Return reason is required")
    if sale.is_returned:
        raise SaleValidationError("Sale already returned")

    return_stock(
        products,
        [StockLine(product_id=i.product_id, quantity=i.quantity, size=i.size, color=i.color) for i in sale.items],
    )
    sale.is_returned = True
    sale.returned_at = now
    sale.returned_by = (returned_by or "").strip() or "Unknown"
    sale.return_reason = reason


async def return_sale(sale_id: str, reason: str, returned_by: str | None = None) -> SaleOut | None:
    """Process a customer return for a POS sale.

    Returns:
        The updated sale, or None if it does not exist.

    Raises:
        SaleValidationError: Sale already returned or no reason given.
    """
    async with get_session() as session:
        result = await session.execute(select(PosSale).where(PosSale.id == sale_id).with_for_update())
        sale = result.scalar_one_or_none()
        if sale is None:
            return None

        products = await lock_products(session, [i.product_id for i in sale.items])
        mark_returned(sale, products, reason, returned_by, datetime.now(timezone.utc))
        await session.flush()
        returned = SaleOut.model_validate(sale)

    await invalidate_catalog_cache()
    logger.info(f"POS sale {returned.receipt_number} returned by {returned.returned_by}: {returned.return_reason}")
    return returned
