"""Public deal endpoints.

GET /v1/deals              - Active deals with their products
GET /v1/deals?slug={slug}  - One active deal
"""

from fastapi import APIRouter, Query

from medwear.routes.errors import api_error
from medwear.schemas import DealOut
from medwear.services.deals import DealNotFoundError, get_deal_by_slug, list_active_deals

router = APIRouter()


@router.get("", response_model=list[DealOut] | DealOut)
async def get_deals(slug: str | None = Query(default=None, max_length=240)) -> list[DealOut] | DealOut:
    if slug is None:
        return await list_active_deals()
    try:
        return await get_deal_by_slug(slug)
    except DealNotFoundError as e:
        raise api_error(404, "DEAL_NOT_FOUND", str(e), {"slug": slug})
