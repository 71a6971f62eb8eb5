"""Stripe webhook handlers"""

from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.order import Order
from app.models.payment import PaymentTransaction, StripeWebhookEvent
from app.payments.gateway import PaymentGateway, WebhookSignatureError, get_payment_gateway

router = APIRouter()
logger = structlog.get_logger()


async def handle_payment_succeeded(db: AsyncSession, intent: dict) -> None:
    now = datetime.utcnow()
    await db.execute(
        update(PaymentTransaction)
        .where(PaymentTransaction.stripe_payment_intent_id == intent["id"])
        .values(status="succeeded", updated_at=now)
    )
    await db.execute(
        update(Order)
        .where(Order.payment_reference == intent["id"])
        .values(payment_status="paid", updated_at=now)
    )


async def handle_payment_failed(db: AsyncSession, intent: dict) -> None:
    error = intent.get("last_payment_error") or {}
    await db.execute(
        update(PaymentTransaction)
        .where(PaymentTransaction.stripe_payment_intent_id == intent["id"])
        .values(
            status="failed",
            failure_reason=error.get("message") or "Payment failed",
            updated_at=datetime.utcnow(),
        )
    )


async def handle_charge_refunded(db: AsyncSession, charge: dict) -> None:
    now = datetime.utcnow()
    await db.execute(
        update(PaymentTransaction)
        .where(PaymentTransaction.stripe_charge_id == charge["id"])
        .values(
            status="refunded",
            refund_amount_cents=charge.get("amount_refunded", 0),
            refunded_at=now,
            updated_at=now,
        )
    )
    if charge.get("payment_intent"):
        await db.execute(
            update(Order)
            .where(Order.payment_reference == charge["payment_intent"])
            .values(payment_status="refunded", updated_at=now)
        )


HANDLERS = {
    "payment_intent.succeeded": handle_payment_succeeded,
    "payment_intent.payment_failed": handle_payment_failed,
    "charge.refunded": handle_charge_refunded,
}


@router.post("")
async def handle_stripe_webhook(
    request: Request,
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    """
    Handle a Stripe event.
    Each event id is applied once. An event whose handler failed is applied again
    when Stripe redelivers it; unknown event types are logged and acknowledged.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(status_code=400, detail="No signature")

    try:
        event = gateway.parse_webhook(payload, signature)
    except WebhookSignatureError as e:
        logger.warning("Webhook signature verification failed", error=str(e))
        raise HTTPException(status_code=400, detail="Invalid signature")

    event_id = event.get("id")
    event_type = event.get("type", "")
    if not event_id:
        raise HTTPException(status_code=400, detail="Invalid event")

    result = await db.execute(
        select(StripeWebhookEvent).where(StripeWebhookEvent.stripe_event_id == event_id)
    )
    record = result.scalar_one_or_none()
    if record is not None and record.processed:
        return {"received": True, "status": "already_processed"}

    if record is None:
        record = StripeWebhookEvent(
            stripe_event_id=event_id,
            event_type=event_type,
            payload=event,
            processed=False,
        )
        db.add(record)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return {"received": True, "status": "already_processed"}
        logger.info("Stripe event received", event_id=event_id, event_type=event_type)
    else:
        logger.info(
            "Retrying unprocessed Stripe event",
            event_id=event_id,
            event_type=event_type,
            previous_error=record.error_message,
        )

    handler = HANDLERS.get(event_type)
    try:
        if handler:
            await handler(db, event.get("data", {}).get("object", {}))
        record.processed = True
        record.error_message = None
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error("Webhook processing failed", event_id=event_id, error=str(e))
        await db.execute(
            update(StripeWebhookEvent)
            .where(StripeWebhookEvent.stripe_event_id == event_id)
            .values(error_message=str(e))
        )
        await db.commit()
        raise HTTPException(status_code=500, detail="Webhook processing failed")

    return {"received": True, "status": "processed"}
