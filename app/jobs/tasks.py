"""Background job tasks"""

from typing import Optional
from uuid import UUID
import asyncio

import structlog

from app.jobs.celery_app import celery_app

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


def _format_address(address: Optional[dict]) -> Optional[str]:
    if not address:
        return None
    parts = [
        address.get("street_address"),
        address.get("unit"),
        address.get("city"),
        address.get("province"),
        address.get("postal_code"),
    ]
    return ", ".join(p for p in parts if p) or None


@celery_app.task(name="send_order_confirmation")
def send_order_confirmation(order_id: str, customer_email: str):
    """Email the order confirmation to the customer"""
    logger.info("Sending order confirmation", order_id=order_id)

    async def _send():
        from app.database import SessionLocal
        from app.models.order import Order
        from app.notifications.email import (
            ConfirmationLine,
            OrderConfirmation,
            send_order_confirmation_email,
        )
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        async with SessionLocal() as db:
            result = await db.execute(
                select(Order)
                .where(Order.id == UUID(order_id))
                .options(selectinload(Order.items), selectinload(Order.restaurant))
            )
            order = result.scalar_one_or_none()

            if not order:
                logger.warning("Order not found for confirmation", order_id=order_id)
                return None

            confirmation = OrderConfirmation(
                order_id=str(order.id),
                customer_email=customer_email,
                restaurant_name=order.restaurant.name,
                restaurant_logo_url=order.restaurant.logo_url,
                order_type=order.order_type,
                lines=[
                    ConfirmationLine(
                        name=item.dish_name,
                        size=item.size_variant,
                        quantity=item.quantity,
                        subtotal_cents=item.subtotal_cents,
                    )
                    for item in order.items
                ],
                subtotal_cents=order.subtotal_cents,
                discount_cents=order.discount_cents,
                delivery_fee_cents=order.delivery_fee_cents,
                tax_cents=order.tax_cents,
                total_cents=order.total_cents,
                payment_method=order.payment_method or "card",
                delivery_address=_format_address(order.delivery_address),
            )

        return await send_order_confirmation_email(confirmation)

    return run_async(_send())


def enqueue_order_confirmation(order_id: UUID, customer_email: Optional[str]) -> bool:
    """Queue the confirmation email; failures are logged and never raised"""
    if not customer_email:
        logger.warning("No customer email, skipping confirmation", order_id=str(order_id))
        return False
    try:
        send_order_confirmation.delay(str(order_id), customer_email)
    except Exception as e:
        logger.error(
            "Failed to queue order confirmation",
            order_id=str(order_id),
            error=str(e),
        )
        return False
    return True
