"""Payment schemas"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from app.schemas.order import DeliveryAddress


class PaymentIntentCreate(BaseModel):
    """Create a payment intent for the amount shown at checkout"""
    amount_cents: int = Field(..., gt=0)
    restaurant_slug: str
    guest_email: Optional[EmailStr] = None
    guest_name: Optional[str] = None
    delivery_address: Optional[DeliveryAddress] = None


class PaymentIntentResponse(BaseModel):
    payment_intent_id: str
    client_secret: str
