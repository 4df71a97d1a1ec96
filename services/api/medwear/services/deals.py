"""Deal (bundle) drafting, display helpers and persistence.

A deal needs at least 2 distinct products and a positive deal price.
`DealDraft` enforces that before anything is sent to the server, and the
server re-checks it in `create_deal`.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select

from medwear.models import Deal, DealItem, Product
from medwear.schemas import DealCreate, DealOut
from medwear.services.catalog import CatalogProduct
from medwear.services.pricing import resolve_unit_price, round_money, savings_percent, split_deal_price
from medwear.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

MIN_DEAL_PRODUCTS = 2


class DealValidationError(ValueError):
    """Deal form rejected."""


def slugify(name: str) -> str:
    """Lowercase, non-alphanumerics collapsed to single hyphens."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def validate_deal(name: str, deal_price: Any, items: list[tuple[str, int]]) -> float:
    """Check name, price and product count.

    Returns:
        The deal price as float.

    Raises:
        DealValidationError: With a user-facing message.
    """
    if not name or not name.strip():
        raise DealValidationError("Deal name is required")

    product_ids = [product_id for product_id, _ in items]
    if len(set(product_ids)) != len(product_ids):
        raise DealValidationError("Product already added")
    if len(product_ids) < MIN_DEAL_PRODUCTS:
        raise DealValidationError("Please select at least 2 products for a deal")
    if any(quantity < 1 for _, quantity in items):
        raise DealValidationError("Quantity must be at least 1")

    try:
        price = float(deal_price)
    except (TypeError, ValueError):
        raise DealValidationError("Please enter a valid deal price") from None
    if not price > 0:
        raise DealValidationError("Please enter a valid deal price")
    return price


def compute_original_price(items: list[tuple[CatalogProduct, int]]) -> float:
    """Sum of current unit price x quantity."""
    return round_money(sum(product.unit_price * quantity for product, quantity in items))


@dataclass
class DealDraft:
    """Admin deal form state."""

    name: str = ""
    deal_price: float | str | None = None
    description: str | None = None
    image: str | None = None
    is_active: bool = True
    items: list[tuple[CatalogProduct, int]] = field(default_factory=list)

    def add_product(self, product: CatalogProduct, quantity: int = 1) -> None:
        if any(p.id == product.id for p, _ in self.items):
            raise DealValidationError("Product already added")
        self.items.append((product, quantity))

    def remove_product(self, product_id: str) -> None:
        self.items = [(p, q) for p, q in self.items if p.id != product_id]

    def set_quantity(self, product_id: str, quantity: int) -> None:
        self.items = [(p, max(1, quantity) if p.id == product_id else q) for p, q in self.items]

    @property
    def original_price(self) -> float:
        return compute_original_price(self.items)

    @property
    def can_submit(self) -> bool:
        return len(self.items) >= MIN_DEAL_PRODUCTS

    @property
    def missing_products(self) -> int:
        return max(0, MIN_DEAL_PRODUCTS - len(self.items))

    def to_payload(self) -> dict[str, Any]:
        """Validate and build the POST body.

        Raises:
            DealValidationError: Before any network call.
        """
        price = validate_deal(self.name, self.deal_price, [(p.id, q) for p, q in self.items])
        return {
            "name": self.name.strip(),
            "description": self.description,
            "image": self.image,
            "dealPrice": price,
            "isActive": self.is_active,
            "items": [{"productId": p.id, "quantity": q} for p, q in self.items],
        }


@dataclass
class DealBundleItem:
    product: CatalogProduct
    quantity: int = 1


@dataclass
class DealBundle:
    """A published deal as offered to shoppers."""

    id: str
    name: str
    slug: str
    deal_price: float
    original_price: float
    items: list[DealBundleItem] = field(default_factory=list)

    @property
    def savings(self) -> float:
        return round_money(self.original_price - self.deal_price)

    @property
    def savings_percent(self) -> int:
        return savings_percent(self.original_price, self.deal_price)

    def bundle_prices(self) -> list[float]:
        """Share of the deal price per item (all units of it), summing to deal_price."""
        return split_deal_price(
            self.deal_price,
            self.original_price,
            [(item.product.unit_price, item.quantity) for item in self.items],
        )

    def unit_price_for(self, item: DealBundleItem) -> float:
        """Per-unit display price of one bundle item; line totals use `bundle_prices`."""
        share = self.bundle_prices()[self.items.index(item)]
        return round_money(share / item.quantity)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "DealBundle":
        items = [
            DealBundleItem(
                product=CatalogProduct.from_payload(raw.get("product") or {"id": raw.get("productId")}),
                quantity=int(raw.get("quantity") or 1),
            )
            for raw in data.get("items") or []
        ]
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            slug=str(data.get("slug", "")),
            deal_price=float(data.get("dealPrice") or 0),
            original_price=float(data.get("originalPrice") or 0),
            items=items,
        )


# ============================================================
# Persistence
# ============================================================


class DealNotFoundError(LookupError):
    pass


def _is_running(deal: Deal, now: datetime) -> bool:
    if deal.start_date and deal.start_date > now:
        return False
    if deal.end_date and deal.end_date < now:
        return False
    return True


@dataclass
class PricedItem:
    """A submitted sale/order line to be priced from locked rows."""

    product_id: str
    quantity: int
    deal_id: str | None = None
    customized: bool = False


async def load_deals(session, deal_ids: list[str | None]) -> dict[str, Deal]:
    """Deals referenced by submitted lines.

    Raises:
        DealValidationError: If a deal does not exist or is inactive.
    """
    ids = sorted({deal_id for deal_id in deal_ids if deal_id})
    if not ids:
        return {}
    result = await session.execute(select(Deal).where(Deal.id.in_(ids)))
    deals = {d.id: d for d in result.scalars().all()}
    for deal_id in ids:
        deal = deals.get(deal_id)
        if deal is None or not deal.is_active:
            raise DealValidationError("Deal is no longer available")
    return deals


def deal_line_totals(deal: Deal, lines: list[tuple[str, int]], now: datetime) -> list[float]:
    """Totals of the lines bought under one deal, in the order given.

    Lines may cover several bundles (and the same product more than once when
    bundles use different variants), but every product of the deal must be
    present for the same number of bundles.

    Raises:
        DealValidationError: Deal not running, or the lines do not form whole bundles.
    """
    if not _is_running(deal, now):
        raise DealValidationError(f"Deal is no longer available: {deal.name}")

    items = list(deal.items)
    shares = split_deal_price(
        deal.deal_price,
        deal.original_price,
        [(resolve_unit_price(i.product.price, i.product.sale_price), i.quantity) for i in items],
    )
    by_product = {item.product_id: (item.quantity, share) for item, share in zip(items, shares)}

    bundles: dict[str, int] = {}
    for product_id, quantity in lines:
        entry = by_product.get(product_id)
        if entry is None or quantity % entry[0]:
            raise DealValidationError(f"Invalid quantities for deal: {deal.name}")
        bundles[product_id] = bundles.get(product_id, 0) + quantity // entry[0]
    if set(bundles) != set(by_product) or len(set(bundles.values())) != 1:
        raise DealValidationError(f"Incomplete bundle for deal: {deal.name}")

    return [round_money(by_product[pid][1] * (quantity // by_product[pid][0])) for pid, quantity in lines]


def price_items(
    products: dict[str, Product],
    deals: dict[str, Deal],
    items: list[PricedItem],
    now: datetime,
) -> list[float]:
    """Line totals for submitted items; deal lines get their share of the deal price."""
    totals: list[float] = [0.0] * len(items)
    grouped: dict[str, list[int]] = {}
    for index, item in enumerate(items):
        if item.deal_id:
            grouped.setdefault(item.deal_id, []).append(index)
            continue
        product = products[item.product_id]
        unit = resolve_unit_price(
            product.price,
            product.sale_price,
            product.customization_price,
            customized=item.customized,
        )
        totals[index] = round_money(unit * item.quantity)

    for deal_id, indexes in grouped.items():
        lines = [(items[i].product_id, items[i].quantity) for i in indexes]
        for index, total in zip(indexes, deal_line_totals(deals[deal_id], lines, now)):
            totals[index] = total
    return totals


async def create_deal(data: DealCreate) -> DealOut:
    """Validate and persist a deal; originalPrice comes from current prices.

    Raises:
        DealValidationError: Fewer than 2 products, duplicate product,
            bad price, or unknown product.
    """
    items = [(i.product_id, i.quantity) for i in data.items]
    price = validate_deal(data.name, data.deal_price, items)

    async with get_session() as session:
        result = await session.execute(select(Product).where(Product.id.in_([pid for pid, _ in items])))
        products = {p.id: p for p in result.scalars().all()}
        missing = [pid for pid, _ in items if pid not in products]
        if missing:
            raise DealValidationError(f"Product not found: {missing[0]}")

        original_price = round_money(
            sum((products[pid].sale_price or products[pid].price) * qty for pid, qty in items)
        )

        slug = slugify(data.name) or "deal"
        taken = await session.execute(select(Deal.id).where(Deal.slug == slug))
        if taken.scalar_one_or_none() is not None:
            slug = f"{slug}-{int(time.time() * 1000)}"

        deal = Deal(
            name=data.name.strip(),
            slug=slug,
            description=data.description,
            image=data.image,
            deal_price=price,
            original_price=original_price,
            is_active=data.is_active,
            start_date=data.start_date,
            end_date=data.end_date,
            items=[
                DealItem(product_id=pid, quantity=qty, position=pos, product=products[pid])
                for pos, (pid, qty) in enumerate(items)
            ],
        )
        session.add(deal)
        await session.flush()
        created = DealOut.model_validate(deal)

    logger.info(f"Deal created: {created.slug} {price:.2f} (was {original_price:.2f})")
    return created


async def list_active_deals() -> list[DealOut]:
    """Active deals whose date window includes now."""
    now = datetime.now(timezone.utc)
    async with get_session() as session:
        result = await session.execute(
            select(Deal).where(Deal.is_active.is_(True)).order_by(Deal.created_at.desc())
        )
        return [DealOut.model_validate(d) for d in result.scalars().all() if _is_running(d, now)]


async def get_deal_by_slug(slug: str) -> DealOut:
    """Raises DealNotFoundError with a user-facing reason."""
    now = datetime.now(timezone.utc)
    async with get_session() as session:
        result = await session.execute(select(Deal).where(Deal.slug == slug, Deal.is_active.is_(True)))
        deal = result.scalar_one_or_none()
        if deal is None:
            raise DealNotFoundError("Deal not found")
        if deal.start_date and deal.start_date > now:
            raise DealNotFoundError("Deal has not started yet")
        if deal.end_date and deal.end_date < now:
            raise DealNotFoundError("Deal has ended")
        return DealOut.model_validate(deal)


async def delete_deal(deal_id: str) -> bool:
    async with get_session() as session:
        deal = await session.get(Deal, deal_id)
        if deal is None:
            return False
        await session.delete(deal)
    logger.info(f"Deal deleted: {deal_id}")
    return True
