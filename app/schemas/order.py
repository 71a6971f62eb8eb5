"""Checkout and order schemas"""

from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID
from pydantic import BaseModel, EmailStr

from app.cart.pricing import OrderType
from app.schemas.cart import ServiceTime

CASH_PAYMENT_TYPES = ("cash", "interac", "credit_at_door", "debit_at_door", "credit_debit_at_door")


class CheckoutModifier(BaseModel):
    """Modifier as submitted by the client; its price is only a claim"""
    id: UUID
    name: Optional[str] = None
    price_cents: int = 0
    quantity: Optional[int] = None
    paid_quantity: Optional[int] = None
    placement: Optional[str] = None
    source: Optional[Literal["simple", "combo"]] = None


class CheckoutItem(BaseModel):
    """Cart line as submitted by the client"""
    dish_id: UUID
    size: str
    quantity: int  # checked by the validator so a bad value is a 400
    modifiers: List[CheckoutModifier] = []
    special_instructions: Optional[str] = None


class DeliveryAddress(BaseModel):
    street_address: Optional[str] = None
    unit: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = "ON"
    postal_code: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    delivery_instructions: Optional[str] = None


class CheckoutRequest(BaseModel):
    """Fields shared by card and pay-at-door checkout"""
    cart_items: List[CheckoutItem] = []
    delivery_address: Optional[DeliveryAddress] = None
    order_type: OrderType = OrderType.DELIVERY
    service_time: Optional[ServiceTime] = None
    guest_email: Optional[EmailStr] = None
    guest_name: Optional[str] = None
    promo_code: Optional[str] = None
    special_instructions: Optional[str] = None


class CardCheckoutRequest(CheckoutRequest):
    """Checkout backed by a completed Stripe payment intent"""
    payment_intent_id: Optional[str] = None
    restaurant_slug: Optional[str] = None  # used when the intent metadata has none


class CashCheckoutRequest(CheckoutRequest):
    """Checkout paid at the door"""
    payment_type: str
    restaurant_slug: Optional[str] = None


class OrderItemResponse(BaseModel):
    """Order line in response"""
    dish_id: Optional[UUID]
    dish_name: str
    size_variant: Optional[str]
    quantity: int
    unit_price_cents: int
    modifiers: List[dict] = []
    special_instructions: Optional[str]
    subtotal_cents: int

    class Config:
        from_attributes = True


class OrderStatusEventResponse(BaseModel):
    status: str
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class OrderRestaurant(BaseModel):
    id: UUID
    name: str
    slug: str
    phone: Optional[str]
    logo_url: Optional[str]

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    restaurant_id: UUID
    user_id: Optional[UUID]
    guest_email: Optional[str]
    guest_name: Optional[str]
    order_type: str
    items: List[OrderItemResponse] = []
    subtotal_cents: int
    discount_cents: int
    delivery_fee_cents: int
    tax_cents: int
    total_cents: int
    promo_code: Optional[str]
    delivery_address: Optional[dict]
    delivery_instructions: Optional[str]
    special_instructions: Optional[str]
    scheduled_time: Optional[datetime]
    payment_method: Optional[str]
    payment_status: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderDetailResponse(OrderResponse):
    """Order with its restaurant and status timeline"""
    restaurant: Optional[OrderRestaurant] = None
    status_history: List[OrderStatusEventResponse] = []


class OrderListResponse(BaseModel):
    """Paginated order list"""
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


class OrderStatusUpdate(BaseModel):
    """Append a status to an order's timeline"""
    status: Literal[
        "pending", "confirmed", "preparing", "ready", "out_for_delivery", "completed", "cancelled"
    ]
    notes: Optional[str] = None
