"""Tests for POS, order, deal and admin endpoints (service layer patched out)."""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from medwear.main import app
from medwear.schemas import DealOut, OrderOut, SaleListResponse, SaleOut
from medwear.schemas.common import Pagination
from medwear.services.catalog import ProductValidationError
from medwear.services.deals import DealNotFoundError, DealValidationError
from medwear.services.pricing import DiscountError
from medwear.services.products import InsufficientStockError, ProductNotFoundError
from medwear.services.sales import SaleValidationError


@pytest.fixture
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def _sale() -> SaleOut:
    return SaleOut(
        id="s1",
        receipt_number="POS-20261018-0001",
        subtotal=900,
        discount=10,
        discount_type="PERCENTAGE",
        total=810,
        payment_method="CASH",
        amount_received=1000,
        change_given=190,
        created_at=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc),
        items=[],
    )


SALE_BODY = {
    "items": [{"productId": "p-reel", "quantity": 2}],
    "discount": 10,
    "discountType": "PERCENTAGE",
    "paymentMethod": "CASH",
    "amountReceived": 1000,
}


@pytest.mark.asyncio
async def test_post_sale(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import sales as sale_routes

    received = {}

    async def fake_create_sale(body):
        received["body"] = body
        return _sale()

    monkeypatch.setattr(sale_routes, "create_sale", fake_create_sale)

    response = await client.post("/v1/pos/sales", json=SALE_BODY)
    assert response.status_code == 200
    data = response.json()
    assert data["receiptNumber"] == "POS-20261018-0001"
    assert data["changeGiven"] == 190
    assert received["body"].items[0].product_id == "p-reel"


@pytest.mark.asyncio
async def test_post_sale_insufficient_stock(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import sales as sale_routes

    async def fake_create_sale(body):
        raise InsufficientStockError("V-Neck Top", 1, size="M", color="White")

    monkeypatch.setattr(sale_routes, "create_sale", fake_create_sale)

    response = await client.post("/v1/pos/sales", json=SALE_BODY)
    assert response.status_code == 409
    error = response.json()["detail"]["error"]
    assert error["code"] == "INSUFFICIENT_STOCK"
    assert error["detail"] == {"productName": "V-Neck Top", "available": 1, "size": "M", "color": "White"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc,code",
    [
        (ProductNotFoundError("gone"), "PRODUCT_NOT_FOUND"),
        (DiscountError("Percentage discount must be between 0 and 100"), "INVALID_DISCOUNT"),
    ],
)
async def test_post_sale_rejections(client: AsyncClient, monkeypatch: pytest.MonkeyPatch, exc, code):
    from medwear.routes import sales as sale_routes

    async def fake_create_sale(body):
        raise exc

    monkeypatch.setattr(sale_routes, "create_sale", fake_create_sale)

    response = await client.post("/v1/pos/sales", json=SALE_BODY)
    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == code


@pytest.mark.asyncio
async def test_sale_history_and_void(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import sales as sale_routes

    async def fake_list_sales(page: int = 1, limit: int = 20) -> SaleListResponse:
        return SaleListResponse(sales=[_sale()], pagination=Pagination(page=page, limit=limit, total=1, pages=1))

    async def fake_delete_sale(sale_id: str) -> bool:
        return sale_id == "s1"

    monkeypatch.setattr(sale_routes, "list_sales", fake_list_sales)
    monkeypatch.setattr(sale_routes, "delete_sale", fake_delete_sale)

    history = await client.get("/v1/pos/sales", params={"page": 2, "limit": 5})
    assert history.status_code == 200
    assert history.json()["pagination"] == {"page": 2, "limit": 5, "total": 1, "pages": 1}

    assert (await client.get("/v1/pos/sales", params={"limit": 500})).status_code == 422

    assert (await client.delete("/v1/pos/sales/s1")).json() == {"ok": True}
    missing = await client.delete("/v1/pos/sales/nope")
    assert missing.status_code == 404
    assert missing.json()["detail"]["error"]["code"] == "SALE_NOT_FOUND"


@pytest.mark.asyncio
async def test_post_order(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import orders as order_routes

    async def fake_create_order(body) -> OrderOut:
        return OrderOut(
            id="o1",
            order_number="DP-LZ3K9Q2A-7F4X",
            subtotal=900,
            shipping_fee=250,
            total=1150,
            shipping_address=body.shipping_address,
            payment_method="COD",
            payment_status="PENDING",
            status="PENDING",
        )

    monkeypatch.setattr(order_routes, "create_order", fake_create_order)

    response = await client.post(
        "/v1/orders",
        json={
            "items": [{"productId": "p-reel", "quantity": 2, "price": 450}],
            "shippingAddress": '{"name": "Dr. Sara", "city": "Lahore"}',
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Order placed successfully"
    assert data["order"]["orderNumber"] == "DP-LZ3K9Q2A-7F4X"


@pytest.mark.asyncio
async def test_deal_by_slug(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import deals as deal_routes

    async def fake_get_deal_by_slug(slug: str) -> DealOut:
        if slug == "future-bundle":
            raise DealNotFoundError("Deal has not started yet")
        return DealOut(id="d1", name="Starter", slug=slug, deal_price=4900, original_price=5800, is_active=True)

    monkeypatch.setattr(deal_routes, "get_deal_by_slug", fake_get_deal_by_slug)

    found = await client.get("/v1/deals", params={"slug": "starter"})
    assert found.status_code == 200
    assert found.json()["dealPrice"] == 4900

    pending = await client.get("/v1/deals", params={"slug": "future-bundle"})
    assert pending.status_code == 404
    assert pending.json()["detail"]["error"]["message"] == "Deal has not started yet"


@pytest.mark.asyncio
async def test_admin_create_deal_validation(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import admin as admin_routes

    async def fake_create_deal(body) -> DealOut:
        raise DealValidationError("A deal needs at least 2 products")

    monkeypatch.setattr(admin_routes, "create_deal", fake_create_deal)

    response = await client.post(
        "/v1/admin/deals",
        json={"name": "Solo", "dealPrice": 100, "items": [{"productId": "a", "quantity": 1}]},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_admin_generate_barcodes(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import admin as admin_routes

    results = [[("p1", "DPLZ3K9Q2A7F4")], []]

    async def fake_generate_missing_barcodes():
        return results.pop(0)

    monkeypatch.setattr(admin_routes, "generate_missing_barcodes", fake_generate_missing_barcodes)

    first = await client.post("/v1/admin/products/generate-barcodes")
    assert first.json() == {
        "message": "Generated barcodes for 1 products",
        "updated": 1,
        "products": [{"id": "p1", "barcode": "DPLZ3K9Q2A7F4"}],
    }

    second = await client.post("/v1/admin/products/generate-barcodes")
    assert second.json()["updated"] == 0


@pytest.mark.asyncio
async def test_sale_return(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import sales as sale_routes

    returned: set[str] = set()

    async def fake_return_sale(sale_id: str, reason: str, returned_by: str | None = None) -> SaleOut | None:
        if sale_id != "s1":
            return None
        if not reason.strip():
            raise SaleValidationError("Return reason is required")
        if sale_id in returned:
            raise SaleValidationError("Sale already returned")
        returned.add(sale_id)
        sale = _sale()
        sale.is_returned = True
        sale.returned_at = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        sale.returned_by = returned_by
        sale.return_reason = reason
        return sale

    monkeypatch.setattr(sale_routes, "return_sale", fake_return_sale)

    no_reason = await client.post("/v1/pos/sales/s1/return", json={"reason": "  "})
    assert no_reason.status_code == 400
    assert no_reason.json()["detail"]["error"]["message"] == "Return reason is required"

    ok = await client.post("/v1/pos/sales/s1/return", json={"reason": "Wrong size", "returnedBy": "Ali"})
    assert ok.status_code == 200
    data = ok.json()
    assert data["isReturned"] is True
    assert data["returnReason"] == "Wrong size"
    assert data["returnedBy"] == "Ali"

    again = await client.post("/v1/pos/sales/s1/return", json={"reason": "Wrong size"})
    assert again.status_code == 400
    assert again.json()["detail"]["error"]["message"] == "Sale already returned"

    missing = await client.post("/v1/pos/sales/nope/return", json={"reason": "Wrong size"})
    assert missing.status_code == 404
    assert missing.json()["detail"]["error"]["code"] == "SALE_NOT_FOUND"


@pytest.mark.asyncio
async def test_post_order_with_stale_deal(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import orders as order_routes

    received = {}

    async def fake_create_order(body):
        received["body"] = body
        raise DealValidationError("Deal is no longer available")

    monkeypatch.setattr(order_routes, "create_order", fake_create_order)

    response = await client.post(
        "/v1/orders",
        json={
            "items": [{"productId": "p-top", "quantity": 1, "price": 2400, "dealId": "d1"}],
            "shippingAddress": '{"name": "Dr. Sara", "city": "Lahore"}',
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "VALIDATION_ERROR"
    assert received["body"].items[0].deal_id == "d1"


def _product_row(**overrides) -> dict:
    row = {
        "id": "p-top",
        "name": "V-Neck Top",
        "slug": "v-neck-top",
        "price": 2800,
        "costPrice": 1400,
        "stock": 6,
        "images": '["top.jpg"]',
        "colors": '["White"]',
        "sizes": '["S", "M"]',
        "colorSizeStock": '{"White": {"S": 1, "M": 5}}',
        "isActive": True,
    }
    row.update(overrides)
    return row


@pytest.mark.asyncio
async def test_admin_update_product(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import admin as admin_routes

    received = {}

    async def fake_update_product(product_id: str, body) -> dict:
        if product_id == "missing":
            raise ProductNotFoundError(product_id)
        if body.price is not None and body.price <= 0:
            raise ProductValidationError("Price must be greater than 0")
        received["body"] = body
        return _product_row(salePrice=body.sale_price)

    monkeypatch.setattr(admin_routes, "update_product", fake_update_product)

    ok = await client.put("/v1/admin/products/p-top", json={"salePrice": 2450, "colorSizeStock": {"White": {"S": 1}}})
    assert ok.status_code == 200
    assert ok.json()["salePrice"] == 2450
    assert ok.json()["colorSizeStock"] == '{"White": {"S": 1, "M": 5}}'
    assert received["body"].model_dump(by_alias=True, exclude_unset=True) == {
        "salePrice": 2450,
        "colorSizeStock": {"White": {"S": 1}},
    }

    missing = await client.put("/v1/admin/products/missing", json={"name": "X"})
    assert missing.status_code == 404
    assert missing.json()["detail"]["error"]["code"] == "PRODUCT_NOT_FOUND"

    invalid = await client.put("/v1/admin/products/p-top", json={"price": 0})
    assert invalid.status_code == 400
    assert invalid.json()["detail"]["error"]["message"] == "Price must be greater than 0"


@pytest.mark.asyncio
async def test_admin_update_product_rejects_negative_stock(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from medwear.routes import admin as admin_routes

    async def fake_update_product(product_id: str, body) -> dict:
        raise AssertionError("negative stock must not reach the service")

    monkeypatch.setattr(admin_routes, "update_product", fake_update_product)

    response = await client.put("/v1/admin/products/p-top", json={"stock": -5})
    assert response.status_code == 422
