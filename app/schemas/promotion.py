"""Promotion schemas"""

from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.cart.pricing import DiscountType, OrderType


class PromoValidateRequest(BaseModel):
    code: str
    restaurant_slug: str
    subtotal_cents: int = Field(..., ge=0)
    order_type: OrderType = OrderType.DELIVERY
    delivery_fee_cents: int = Field(0, ge=0)


class PromoValidateResponse(BaseModel):
    """Valid promo, shaped so the cart can apply it directly"""
    promo_id: UUID
    code: str
    discount_type: DiscountType
    value: int
    description: Optional[str]
    discount_cents: int
