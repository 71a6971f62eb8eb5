"""Promo code validation"""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cart.pricing import compute_discount
from app.database import get_db
from app.models.restaurant import Restaurant
from app.promotions.rules import PromotionRejected, resolve_promotion
from app.schemas.promotion import PromoValidateRequest, PromoValidateResponse

logger = structlog.get_logger()

router = APIRouter()


@router.post("/validate", response_model=PromoValidateResponse)
async def validate_promo(
    request: PromoValidateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Check a promo code against a cart and describe its discount"""
    result = await db.execute(
        select(Restaurant).where(Restaurant.slug == request.restaurant_slug, Restaurant.is_active == True)
    )
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    try:
        promotion = await resolve_promotion(
            db, restaurant.id, request.code, request.subtotal_cents, request.order_type
        )
    except PromotionRejected as e:
        logger.info("Promo rejected", restaurant_id=str(restaurant.id), code=request.code, reason=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    discount = compute_discount(
        request.subtotal_cents,
        promotion.discount_type,
        promotion.discount_value,
        request.delivery_fee_cents,
        request.order_type,
    )

    return PromoValidateResponse(
        promo_id=promotion.id,
        code=promotion.code,
        discount_type=promotion.discount_type,
        value=promotion.discount_value,
        description=promotion.description,
        discount_cents=discount,
    )
