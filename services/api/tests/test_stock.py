"""Tests for server-side stock bookkeeping and number formats."""

import json
import re
from datetime import datetime, timezone

import pytest

from medwear.models import Product
from medwear.services import sales
from medwear.services.orders import generate_order_number
from medwear.services.products import (
    InsufficientStockError,
    StockLine,
    StockLineError,
    generate_barcode,
    return_stock,
    take_stock,
    to_base36,
)
from medwear.services.scanner import looks_like_barcode


def _top() -> Product:
    return Product(
        id="p-top",
        name="V-Neck Top",
        slug="v-neck-top",
        price=2800,
        sale_price=2450,
        stock=6,
        sizes='["S", "M"]',
        colors='["White"]',
        color_size_stock='{"White": {"S": 1, "M": 5}}',
    )


def _reel() -> Product:
    return Product(id="p-reel", name="Badge Reel", slug="badge-reel", price=450, stock=3)


def test_take_stock_decrements_cell_and_rederives_scalar() -> None:
    products = {"p-top": _top(), "p-reel": _reel()}
    take_stock(
        products,
        [StockLine("p-top", 2, size="M", color="White"), StockLine("p-reel", 3)],
    )
    assert json.loads(products["p-top"].color_size_stock) == {"White": {"S": 1, "M": 3}}
    assert products["p-top"].stock == 4
    assert products["p-reel"].stock == 0


def test_take_stock_is_all_or_nothing() -> None:
    products = {"p-top": _top(), "p-reel": _reel()}
    with pytest.raises(InsufficientStockError) as exc_info:
        take_stock(
            products,
            [StockLine("p-reel", 1), StockLine("p-top", 2, size="S", color="White")],
        )
    assert exc_info.value.available == 1
    assert exc_info.value.size == "S"
    assert products["p-reel"].stock == 3
    assert json.loads(products["p-top"].color_size_stock)["White"]["S"] == 1


def test_take_stock_requires_variant_for_matrix_products() -> None:
    with pytest.raises(StockLineError, match="Select size/color for V-Neck Top"):
        take_stock({"p-top": _top()}, [StockLine("p-top", 1, size="M")])
    with pytest.raises(StockLineError):
        take_stock({"p-reel": _reel()}, [StockLine("p-reel", 0)])


def test_return_stock_restores_cell() -> None:
    products = {"p-top": _top()}
    return_stock(products, [StockLine("p-top", 2, size="S", color="White")])
    assert json.loads(products["p-top"].color_size_stock)["White"]["S"] == 3
    assert products["p-top"].stock == 8


def test_receipt_number_format() -> None:
    assert sales.format_receipt_number("20261018", 7, prefix="POS") == "POS-20261018-0007"
    assert sales.parse_receipt_sequence("POS-20261018-0042") == 42
    assert sales.parse_receipt_sequence(None) == 0


class _FakeResult:
    def __init__(self, value):
        self.value = value

    def scalar_one_or_none(self):
        return self.value


class _FakeSession:
    def __init__(self, latest: str | None):
        self.latest = latest

    async def execute(self, statement):
        return _FakeResult(self.latest)


@pytest.mark.asyncio
async def test_receipt_sequence_floored_by_stored_receipts(monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    async def counter_reset(day: str) -> int:
        return 1

    monkeypatch.setattr(sales, "next_receipt_sequence", counter_reset)
    number = await sales.allocate_receipt_number(_FakeSession("POS-20261018-0012"), now)
    assert number.endswith("-20261018-0013")


@pytest.mark.asyncio
async def test_receipt_sequence_without_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    async def redis_down(day: str) -> int:
        raise RuntimeError("Redis not initialized")

    monkeypatch.setattr(sales, "next_receipt_sequence", redis_down)
    assert (await sales.allocate_receipt_number(_FakeSession(None), now)).endswith("-20261018-0001")


def test_generated_codes() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"

    barcode = generate_barcode("dp")
    assert barcode.startswith("DP")
    assert looks_like_barcode(barcode)

    assert re.fullmatch(r"DP-[0-9A-Z]+-[0-9A-Z]{4}", generate_order_number("DP"))
