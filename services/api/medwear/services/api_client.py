"""HTTP client for the store API.

Used by the POS terminal and storefront checkout. Non-2xx responses are
raised as `ApiError` carrying the server's message when it sent one.
"""

import logging
from typing import Any

import httpx

from medwear.services.catalog import CatalogProduct
from medwear.services.deals import DealBundle
from medwear.settings import get_settings

logger = logging.getLogger("uvicorn.error")

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class ApiError(RuntimeError):
    """Request failed; `str(err)` is safe to show to the user."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort server message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE

    if isinstance(data, dict):
        detail = data.get("detail")
        # FastAPI HTTPException: {"detail": {"error": {"message": ...}}}
        if isinstance(detail, dict):
            error = detail.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if isinstance(detail, str) and detail:
            return detail
    return GENERIC_ERROR_MESSAGE


class StoreApiClient:
    """Async client for the medwear store API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.store_api_url
        self.timeout = timeout if timeout is not None else settings.store_api_timeout
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "StoreApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Store API {method} {path} failed: {e}")
            raise ApiError(GENERIC_ERROR_MESSAGE) from e

        if response.is_error:
            message = extract_error_message(response)
            logger.info(f"Store API {method} {path} -> {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------
    # Products
    # ------------------------------------------------------------

    async def list_products(self) -> list[CatalogProduct]:
        data = await self._request("GET", "/v1/products")
        return [CatalogProduct.from_payload(p) for p in data or []]

    async def get_product(self, product_id: str) -> CatalogProduct:
        data = await self._request("GET", f"/v1/products/{product_id}")
        return CatalogProduct.from_payload(data)

    async def get_product_by_barcode(self, code: str) -> CatalogProduct | None:
        """Exact barcode/sku lookup; None when the server has no match."""
        try:
            data = await self._request("GET", f"/v1/products/barcode/{code.strip()}")
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        return CatalogProduct.from_payload(data)

    async def update_product(self, product: CatalogProduct) -> CatalogProduct:
        """Validate locally, then persist the full product."""
        product.validate_for_save()
        data = await self._request("PUT", f"/v1/admin/products/{product.id}", json=product.to_payload())
        return CatalogProduct.from_payload(data)

    # ------------------------------------------------------------
    # Sales / orders
    # ------------------------------------------------------------

    async def create_sale(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/pos/sales", json=payload)

    async def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "/v1/orders", json=payload)
        return data.get("order", data)

    # ------------------------------------------------------------
    # Deals / settings
    # ------------------------------------------------------------

    async def list_deals(self) -> list[DealBundle]:
        data = await self._request("GET", "/v1/deals")
        return [DealBundle.from_payload(d) for d in data or []]

    async def create_deal(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/v1/admin/deals", json=payload)

    async def get_shipping_settings(self) -> tuple[float, float]:
        """(free_shipping_minimum, shipping_fee), falling back to local settings."""
        settings = get_settings()
        try:
            data = await self._request("GET", "/v1/settings/shipping")
        except ApiError as e:
            logger.warning(f"Shipping settings unavailable, using defaults: {e}")
            return settings.free_shipping_minimum, settings.shipping_fee
        return (
            float(data.get("freeShippingMinimum", settings.free_shipping_minimum)),
            float(data.get("shippingFee", settings.shipping_fee)),
        )
