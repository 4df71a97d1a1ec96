"""Storefront settings endpoint.

GET /v1/settings/shipping - Free-shipping threshold and flat fee
"""

from fastapi import APIRouter

from medwear.schemas import ShippingSettings
from medwear.settings import get_settings

router = APIRouter()


@router.get("/shipping", response_model=ShippingSettings)
async def get_shipping_settings() -> ShippingSettings:
    settings = get_settings()
    return ShippingSettings(
        free_shipping_minimum=settings.free_shipping_minimum,
        shipping_fee=settings.shipping_fee,
    )
