"""API routes."""

from fastapi import APIRouter

from medwear.routes import admin, deals, orders, products, sales, shipping

api_router = APIRouter()

# Catalog (POS terminal, storefront)
api_router.include_router(products.router, prefix="/v1/products", tags=["products"])

# Point of sale
api_router.include_router(sales.router, prefix="/v1/pos/sales", tags=["pos"])

# Storefront checkout
api_router.include_router(orders.router, prefix="/v1/orders", tags=["orders"])
api_router.include_router(deals.router, prefix="/v1/deals", tags=["deals"])
api_router.include_router(shipping.router, prefix="/v1/settings", tags=["settings"])

# Admin endpoints (catalog, deals)
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
