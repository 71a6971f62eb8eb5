"""Promo code lookup and eligibility"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cart.pricing import OrderType
from app.models.promotion import Promotion


class PromotionRejected(Exception):
    """Promo code exists but cannot be applied to this order"""


def normalize_code(code: str) -> str:
    return code.strip().upper()


async def find_promotion(db: AsyncSession, restaurant_id: UUID, code: str) -> Optional[Promotion]:
    result = await db.execute(
        select(Promotion).where(
            Promotion.restaurant_id == restaurant_id,
            Promotion.code == normalize_code(code),
        )
    )
    return result.scalar_one_or_none()


def check_eligibility(
    promotion: Promotion,
    subtotal_cents: int,
    order_type: OrderType,
    now: Optional[datetime] = None,
) -> None:
    """Raise PromotionRejected when the promo cannot apply"""
    if not promotion.is_live(now or datetime.utcnow()):
        raise PromotionRejected("Promo code is not active")

    if promotion.delivery_only and order_type != OrderType.DELIVERY:
        raise PromotionRejected("Promo code is only valid for delivery orders")

    minimum = promotion.min_order_cents or 0
    if subtotal_cents < minimum:
        raise PromotionRejected(f"Minimum order of {minimum} cents required for this promo")


async def resolve_promotion(
    db: AsyncSession,
    restaurant_id: UUID,
    code: str,
    subtotal_cents: int,
    order_type: OrderType,
) -> Promotion:
    """Find a promo by code and check it applies to the order"""
    promotion = await find_promotion(db, restaurant_id, code)
    if promotion is None:
        raise PromotionRejected("Invalid promo code")
    check_eligibility(promotion, subtotal_cents, order_type)
    return promotion
