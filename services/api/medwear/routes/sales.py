"""POS sale endpoints.

POST   /v1/pos/sales       - Complete a sale (atomic: stock + receipt)
GET    /v1/pos/sales       - Paginated history, newest first
GET    /v1/pos/sales/{id}  - Receipt reprint
DELETE /v1/pos/sales/{id}  - Void a sale and restore stock
POST   /v1/pos/sales/{id}/return - Customer return: restore stock, flag the sale

Routers are thin: domain errors are mapped to structured HTTP errors.
"""

from fastapi import APIRouter, Query

from medwear.routes.errors import api_error
from medwear.schemas import SaleCreate, SaleListResponse, SaleOut, SaleReturnRequest
from medwear.services.deals import DealValidationError
from medwear.services.pricing import DiscountError
from medwear.services.products import InsufficientStockError, ProductNotFoundError, StockLineError
from medwear.services.sales import (
    SaleValidationError,
    create_sale,
    delete_sale,
    get_sale,
    list_sales,
    return_sale,
)

router = APIRouter()


@router.post("", response_model=SaleOut)
async def post_sale(body: SaleCreate) -> SaleOut:
    try:
        return await create_sale(body)
    except InsufficientStockError as e:
        raise api_error(
            409,
            "INSUFFICIENT_STOCK",
            str(e),
            {"productName": e.product_name, "available": e.available, "size": e.size, "color": e.color},
        )
    except ProductNotFoundError as e:
        raise api_error(400, "PRODUCT_NOT_FOUND", str(e), {"productId": e.product_id})
    except DiscountError as e:
        raise api_error(400, "INVALID_DISCOUNT", str(e))
    except (SaleValidationError, StockLineError, DealValidationError) as e:
        raise api_error(400, "VALIDATION_ERROR", str(e))


@router.get("", response_model=SaleListResponse)
async def get_sales(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> SaleListResponse:
    return await list_sales(page=page, limit=limit)


@router.get("/{sale_id}", response_model=SaleOut)
async def get_one(sale_id: str) -> SaleOut:
    sale = await get_sale(sale_id)
    if sale is None:
        raise api_error(404, "SALE_NOT_FOUND", "Sale not found", {"saleId": sale_id})
    return sale


@router.delete("/{sale_id}")
async def void_sale(sale_id: str) -> dict[str, bool]:
    if not await delete_sale(sale_id):
        raise api_error(404, "SALE_NOT_FOUND", "Sale not found", {"saleId": sale_id})
    return {"ok": True}


@router.post("/{sale_id}/return", response_model=SaleOut)
async def post_return(sale_id: str, body: SaleReturnRequest) -> SaleOut:
    try:
        sale = await return_sale(sale_id, body.reason, body.returned_by)
    except SaleValidationError as e:
        raise api_error(400, "VALIDATION_ERROR", str(e))
    if sale is None:
        raise api_error(404, "SALE_NOT_FOUND", "Sale not found", {"saleId": sale_id})
    return sale
