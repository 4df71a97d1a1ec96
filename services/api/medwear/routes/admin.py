"""Admin endpoints for catalog and deal management.

PUT    /v1/admin/products/{id}                - Save a product (variant matrix included)
POST   /v1/admin/products/generate-barcodes  - Assign barcodes to products without one
POST   /v1/admin/deals                       - Create a deal
DELETE /v1/admin/deals/{id}                  - Delete a deal

In production, put these behind authentication (admin token or session).
"""

from fastapi import APIRouter

from medwear.routes.errors import api_error
from medwear.schemas import (
    BarcodeGenerationResponse,
    DealCreate,
    DealOut,
    GeneratedBarcode,
    ProductOut,
    ProductUpdate,
)
from medwear.services.catalog import ProductValidationError
from medwear.services.deals import DealValidationError, create_deal, delete_deal
from medwear.services.products import ProductNotFoundError, generate_missing_barcodes, update_product

router = APIRouter()


@router.put("/products/{product_id}", response_model=ProductOut)
async def put_product(product_id: str, body: ProductUpdate) -> dict:
    try:
        return await update_product(product_id, body)
    except ProductNotFoundError as e:
        raise api_error(404, "PRODUCT_NOT_FOUND", str(e), {"productId": product_id})
    except ProductValidationError as e:
        raise api_error(400, "VALIDATION_ERROR", str(e))


@router.post("/products/generate-barcodes", response_model=BarcodeGenerationResponse)
async def post_generate_barcodes() -> BarcodeGenerationResponse:
    assigned = await generate_missing_barcodes()
    if not assigned:
        return BarcodeGenerationResponse(message="All products already have barcodes", updated=0)
    return BarcodeGenerationResponse(
        message=f"Generated barcodes for {len(assigned)} products",
        updated=len(assigned),
        products=[GeneratedBarcode(id=pid, barcode=code) for pid, code in assigned],
    )


@router.post("/deals", response_model=DealOut, status_code=201)
async def post_deal(body: DealCreate) -> DealOut:
    try:
        return await create_deal(body)
    except DealValidationError as e:
        raise api_error(400, "VALIDATION_ERROR", str(e))


@router.delete("/deals/{deal_id}")
async def remove_deal(deal_id: str) -> dict[str, bool]:
    if not await delete_deal(deal_id):
        raise api_error(404, "DEAL_NOT_FOUND", "Deal not found", {"dealId": deal_id})
    return {"ok": True}
