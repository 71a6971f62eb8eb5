"""Cart schemas"""

from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID
from pydantic import BaseModel, Field

from app.cart.pricing import DiscountType, OrderType


class CartModifier(BaseModel):
    """Selected modifier on a cart line"""
    id: UUID
    name: str
    price_cents: int = 0
    quantity: Optional[int] = None
    paid_quantity: Optional[int] = None  # set when part of the quantity is free (combo promos)
    placement: Optional[str] = None  # whole, left, right
    source: Optional[Literal["simple", "combo"]] = None


class CartItemCreate(BaseModel):
    """Add-to-cart request"""
    dish_id: UUID
    dish_name: str
    dish_image: Optional[str] = None
    size: str
    size_price_cents: int = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    modifiers: List[CartModifier] = []
    special_instructions: Optional[str] = None


class CartItem(CartItemCreate):
    """Cart line with its dedup key and derived subtotal"""
    key: str
    subtotal_cents: int


class ServiceTime(BaseModel):
    """When the order should be fulfilled"""
    type: Literal["asap", "scheduled"] = "asap"
    scheduled_time: Optional[datetime] = None


class AppliedPromo(BaseModel):
    """The single promo applied to a cart"""
    code: str
    discount_type: DiscountType
    value: int  # percent for percentage promos, cents otherwise
    description: Optional[str] = None
    promo_id: Optional[UUID] = None


class CartState(BaseModel):
    """Serializable cart state"""
    restaurant_id: Optional[UUID] = None
    restaurant_name: Optional[str] = None
    restaurant_slug: Optional[str] = None
    delivery_fee_cents: int = 0
    min_order_cents: int = 0
    order_type: OrderType = OrderType.DELIVERY
    service_time: ServiceTime = Field(default_factory=ServiceTime)
    items: List[CartItem] = []
    applied_promo: Optional[AppliedPromo] = None


class CartTotals(BaseModel):
    """Display totals computed from a cart"""
    item_count: int
    subtotal_cents: int
    discount_cents: int
    delivery_fee_cents: int
    tax_cents: int
    total_cents: int
    meets_minimum_order: bool


class CartResponse(BaseModel):
    """Cart state plus its totals"""
    cart_id: str
    state: CartState
    totals: CartTotals


class QuantityUpdate(BaseModel):
    quantity: int


class OrderTypeUpdate(BaseModel):
    order_type: OrderType


class RestaurantSelect(BaseModel):
    """Switch the restaurant a cart is ordering from"""
    restaurant_id: UUID
    restaurant_name: str
    restaurant_slug: str
    delivery_fee_cents: int = 0
    min_order_cents: int = 0
    confirm_clear: bool = False
