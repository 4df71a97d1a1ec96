"""Storefront checkout endpoint.

POST /v1/orders - Place a cash-on-delivery order
"""

from fastapi import APIRouter

from medwear.routes.errors import api_error
from medwear.schemas import OrderCreate, OrderCreateResponse
from medwear.services.deals import DealValidationError
from medwear.services.orders import OrderValidationError, create_order
from medwear.services.products import InsufficientStockError, ProductNotFoundError, StockLineError

router = APIRouter()


@router.post("", response_model=OrderCreateResponse)
async def post_order(body: OrderCreate) -> OrderCreateResponse:
    try:
        order = await create_order(body)
    except InsufficientStockError as e:
        raise api_error(409, "INSUFFICIENT_STOCK", str(e), {"productName": e.product_name, "available": e.available})
    except ProductNotFoundError as e:
        raise api_error(400, "PRODUCT_NOT_FOUND", str(e), {"productId": e.product_id})
    except (OrderValidationError, StockLineError, DealValidationError) as e:
        raise api_error(400, "VALIDATION_ERROR", str(e))
    return OrderCreateResponse(message="Order placed successfully", order=order)
