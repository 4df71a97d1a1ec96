"""Catalog endpoints used by the POS terminal and the storefront.

GET /v1/products                 - Active products
GET /v1/products/barcode/{code}  - Exact barcode/sku lookup (scanner)
GET /v1/products/{productId}     - Single product
"""

from fastapi import APIRouter, Path

from medwear.routes.errors import api_error
from medwear.schemas import ProductOut
from medwear.services.products import get_product, get_product_by_code, list_active_products

router = APIRouter()


@router.get("", response_model=list[ProductOut])
async def list_products() -> list[dict]:
    return await list_active_products()


@router.get("/barcode/{code}", response_model=ProductOut)
async def get_by_barcode(
    code: str = Path(min_length=1, max_length=64, description="Barcode or SKU"),
) -> dict:
    """Resolve a scanned code to a product."""
    product = await get_product_by_code(code)
    if product is None:
        raise api_error(404, "PRODUCT_NOT_FOUND", "Product not found for this barcode", {"code": code})
    return product


@router.get("/{product_id}", response_model=ProductOut)
async def get_one(product_id: str) -> dict:
    product = await get_product(product_id)
    if product is None:
        raise api_error(404, "PRODUCT_NOT_FOUND", "Product not found", {"productId": product_id})
    return product
