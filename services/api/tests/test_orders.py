"""Tests for order and sale pricing against stored deals (database patched out)."""

import json
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest

from medwear.models import Deal, DealItem, PosSale, PosSaleItem, Product
from medwear.schemas import OrderCreate
from medwear.services import orders
from medwear.services.deals import DealValidationError, PricedItem, deal_line_totals, price_items
from medwear.services.orders import OrderValidationError, create_order
from medwear.services.sales import SaleValidationError, mark_returned
from medwear.settings import get_settings

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _products() -> dict[str, Product]:
    return {
        "p-coat": Product(id="p-coat", name="Lab Coat", slug="lab-coat", price=4500, sale_price=4000, stock=5),
        "p-cap": Product(id="p-cap", name="Scrub Cap", slug="scrub-cap", price=1000, stock=10),
    }


def _deal(products: dict[str, Product], **overrides) -> Deal:
    """Coat + 2 caps: original 6000, deal 4000."""
    fields = {
        "id": "d1",
        "name": "Clinic Starter",
        "slug": "clinic-starter",
        "deal_price": 4000,
        "original_price": 6000,
        "is_active": True,
        "items": [
            DealItem(product_id="p-coat", quantity=1, position=0, product=products["p-coat"]),
            DealItem(product_id="p-cap", quantity=2, position=1, product=products["p-cap"]),
        ],
    }
    fields.update(overrides)
    return Deal(**fields)


def test_deal_lines_priced_from_deal_row() -> None:
    products = _products()
    deal = _deal(products)
    assert deal_line_totals(deal, [("p-coat", 1), ("p-cap", 2)], NOW) == [2667, 1333]

    # two bundles, same product split over two variants
    assert deal_line_totals(deal, [("p-coat", 2), ("p-cap", 2), ("p-cap", 2)], NOW) == [5334, 1333, 1333]


def test_price_items_mixes_deal_and_plain_lines() -> None:
    products = _products()
    totals = price_items(
        products,
        {"d1": _deal(products)},
        [
            PricedItem("p-cap", 2, deal_id="d1"),
            PricedItem("p-cap", 3),
            PricedItem("p-coat", 1, deal_id="d1"),
        ],
        NOW,
    )
    assert totals == [1333, 3000, 2667]
    assert sum(totals) - 3000 == 4000


@pytest.mark.parametrize(
    "lines,message",
    [
        ([("p-coat", 1)], "Incomplete bundle"),
        ([("p-coat", 1), ("p-cap", 3)], "Invalid quantities"),
        ([("p-coat", 2), ("p-cap", 2)], "Incomplete bundle"),
        ([("p-coat", 1), ("p-cap", 2), ("p-scrubs", 1)], "Invalid quantities"),
    ],
)
def test_partial_bundles_rejected(lines, message) -> None:
    with pytest.raises(DealValidationError, match=message):
        deal_line_totals(_deal(_products()), lines, NOW)


def test_expired_deal_rejected() -> None:
    deal = _deal(_products(), end_date=NOW - timedelta(days=1))
    with pytest.raises(DealValidationError, match="no longer available"):
        deal_line_totals(deal, [("p-coat", 1), ("p-cap", 2)], NOW)


class _FakeSession:
    def __init__(self):
        self.added = []

    def add(self, obj) -> None:
        self.added.append(obj)

    async def flush(self) -> None:
        for obj in self.added:
            obj.id = "o1"
            for index, item in enumerate(obj.items, start=1):
                item.id = index


@pytest.fixture
def order_db(monkeypatch: pytest.MonkeyPatch):
    session = _FakeSession()
    products = _products()

    @asynccontextmanager
    async def fake_get_session():
        yield session

    async def fake_lock_products(_session, product_ids):
        return {pid: products[pid] for pid in product_ids}

    async def fake_load_deals(_session, deal_ids):
        return {"d1": _deal(products)} if any(deal_ids) else {}

    async def noop() -> None:
        return None

    monkeypatch.setattr(orders, "get_session", fake_get_session)
    monkeypatch.setattr(orders, "lock_products", fake_lock_products)
    monkeypatch.setattr(orders, "load_deals", fake_load_deals)
    monkeypatch.setattr(orders, "invalidate_catalog_cache", noop)
    return session, products


def _deal_order(total: float) -> OrderCreate:
    return OrderCreate.model_validate(
        {
            "items": [
                {"productId": "p-coat", "quantity": 1, "price": 2667, "dealId": "d1"},
                {"productId": "p-cap", "quantity": 2, "price": 666.5, "dealId": "d1"},
            ],
            "total": total,
            "shippingAddress": '{"name": "Dr. Sara", "phone": "0300", "address": "1 Clinic Rd", "city": "Lahore"}',
        }
    )


@pytest.mark.asyncio
async def test_order_with_deal_charges_deal_price(order_db) -> None:
    session, products = order_db
    settings = get_settings()
    shipping = 0 if 4000 >= settings.free_shipping_minimum else settings.shipping_fee

    order = await create_order(_deal_order(4000 + shipping))

    assert order.subtotal == 4000
    assert order.total == 4000 + shipping
    assert [item.price for item in order.items] == [2667, 666.5]
    assert products["p-coat"].stock == 4
    assert products["p-cap"].stock == 8


@pytest.mark.asyncio
async def test_order_total_mismatch_rejected(order_db) -> None:
    session, products = order_db
    settings = get_settings()
    list_total = 6000 + (0 if 6000 >= settings.free_shipping_minimum else settings.shipping_fee)

    with pytest.raises(OrderValidationError, match="Prices have changed"):
        await create_order(_deal_order(list_total))
    assert session.added == []
    assert products["p-cap"].stock == 10


def _sold() -> tuple[PosSale, dict[str, Product]]:
    top = Product(
        id="p-top",
        name="V-Neck Top",
        slug="v-neck-top",
        price=2800,
        stock=4,
        sizes='["S", "M"]',
        colors='["White"]',
        color_size_stock='{"White": {"S": 1, "M": 3}}',
    )
    sale = PosSale(
        id="s1",
        receipt_number="POS-20261018-0001",
        subtotal=5600,
        discount=0,
        total=5600,
        payment_method="CASH",
        is_returned=False,
        items=[PosSaleItem(product_id="p-top", product_name="V-Neck Top", quantity=2, price=2800, size="M", color="White")],
    )
    return sale, {"p-top": top}


def test_return_restores_stock_and_flags_sale() -> None:
    sale, products = _sold()
    mark_returned(sale, products, "  Wrong size ", "Ali", NOW)

    assert sale.is_returned is True
    assert sale.returned_at == NOW
    assert sale.returned_by == "Ali"
    assert sale.return_reason == "Wrong size"
    assert json.loads(products["p-top"].color_size_stock) == {"White": {"S": 1, "M": 5}}
    assert products["p-top"].stock == 6

    with pytest.raises(SaleValidationError, match="Sale already returned"):
        mark_returned(sale, products, "Again", "Ali", NOW)
    assert products["p-top"].stock == 6


def test_return_requires_reason() -> None:
    sale, products = _sold()
    with pytest.raises(SaleValidationError, match="Return reason is required"):
        mark_returned(sale, products, "   ", None, NOW)
    assert sale.is_returned is False
    assert products["p-top"].stock == 4
