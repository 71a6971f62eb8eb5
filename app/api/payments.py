"""Payment intent creation"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import get_optional_user
from app.database import get_db
from app.models.restaurant import Restaurant
from app.models.user import User
from app.payments.gateway import PaymentGateway, get_payment_gateway
from app.schemas.order import DeliveryAddress
from app.schemas.payment import PaymentIntentCreate, PaymentIntentResponse

logger = structlog.get_logger()

router = APIRouter()


def stripe_shipping(address: Optional[DeliveryAddress], name: Optional[str]) -> Optional[dict]:
    if address is None:
        return None
    fields = {
        "line1": address.street_address,
        "line2": address.unit,
        "city": address.city,
        "state": address.province or "ON",
        "postal_code": address.postal_code,
        "country": "CA",
    }
    return {
        "name": name or "Customer",
        "address": {k: v for k, v in fields.items() if v is not None},
    }


@router.post("/intents", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    """Create a Stripe payment intent tagged with the payer's identity.

    The metadata written here is what checkout later checks the caller
    against.
    """
    if current_user is None and not request.guest_email:
        raise HTTPException(status_code=400, detail="Email required for guest checkout")

    result = await db.execute(
        select(Restaurant).where(Restaurant.slug == request.restaurant_slug, Restaurant.is_active == True)
    )
    if not result.scalar_one_or_none():
        raise HTTPException(status_code=404, detail="Restaurant not found")

    if current_user:
        customer_id = current_user.stripe_customer_id
        if not customer_id:
            customer_id = await gateway.create_customer(
                current_user.email,
                current_user.full_name or None,
                {"user_id": str(current_user.id)},
            )
            current_user.stripe_customer_id = customer_id
            await db.commit()
        metadata = {"user_id": str(current_user.id)}
        name = current_user.full_name
    else:
        customer_id = await gateway.create_customer(
            request.guest_email, request.guest_name, {"guest_checkout": "true"}
        )
        metadata = {"user_id": "guest", "guest_email": request.guest_email}
        name = request.guest_name or request.guest_email

    metadata["restaurant_slug"] = request.restaurant_slug
    metadata["country"] = "CA"

    intent = await gateway.create_intent(
        request.amount_cents,
        metadata,
        customer_id=customer_id,
        shipping=stripe_shipping(request.delivery_address, name),
    )

    logger.info(
        "Payment intent created",
        payment_intent_id=intent.id[:20],
        restaurant_slug=request.restaurant_slug,
        amount_cents=request.amount_cents,
    )
    return PaymentIntentResponse(payment_intent_id=intent.id, client_secret=intent.client_secret)
