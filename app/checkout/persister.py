"""Order persistence; the unique payment reference arbitrates concurrent submissions"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.checkout.errors import DuplicateOrder
from app.checkout.validator import ValidatedOrder
from app.models.order import Order, OrderItem, OrderStatusEvent
from app.models.payment import PaymentTransaction

logger = structlog.get_logger()


async def find_order_by_reference(db: AsyncSession, reference: str) -> Optional[Order]:
    result = await db.execute(select(Order).where(Order.payment_reference == reference))
    return result.scalar_one_or_none()


def build_order(validated: ValidatedOrder) -> Order:
    """Order row with its items and initial status event"""
    pricing = validated.pricing
    paid = validated.payment_status == "paid"

    order = Order(
        id=uuid.uuid4(),
        restaurant_id=validated.restaurant.id,
        user_id=validated.user_id,
        guest_email=validated.guest_email,
        guest_name=validated.guest_name,
        order_type=validated.order_type.value,
        items_json=[line.to_json() for line in validated.lines],
        subtotal_cents=pricing.subtotal_cents,
        discount_cents=pricing.discount_cents,
        delivery_fee_cents=pricing.delivery_fee_cents,
        tax_cents=pricing.tax_cents,
        total_cents=pricing.total_cents,
        promo_code=validated.promo_code,
        delivery_address=validated.delivery_address,
        delivery_instructions=validated.delivery_instructions,
        special_instructions=validated.special_instructions,
        scheduled_time=validated.scheduled_time,
        payment_reference=validated.payment_reference,
        payment_method=validated.payment_method,
        payment_status=validated.payment_status,
        status="pending",
    )
    order.items = [
        OrderItem(
            dish_id=line.dish_id,
            dish_name=line.dish_name,
            size_variant=line.size,
            quantity=line.quantity,
            unit_price_cents=line.unit_price_cents,
            modifiers=[m.to_json() for m in line.modifiers],
            special_instructions=line.special_instructions,
            subtotal_cents=line.subtotal_cents,
        )
        for line in validated.lines
    ]
    order.status_history = [
        OrderStatusEvent(
            status="pending",
            notes="Order placed and payment confirmed" if paid else f"Order placed, {validated.payment_method} payment due",
        )
    ]
    return order


def build_transaction(order: Order, validated: ValidatedOrder) -> Optional[PaymentTransaction]:
    """Captured payment record; pay-at-door orders have none"""
    intent = validated.intent
    if intent is None:
        return None
    return PaymentTransaction(
        order_id=order.id,
        user_id=validated.user_id,
        restaurant_id=validated.restaurant.id,
        stripe_payment_intent_id=intent.id,
        stripe_charge_id=intent.latest_charge,
        amount_cents=intent.amount_cents,
        currency=intent.currency.upper(),
        status="succeeded",
        payment_method=validated.payment_method,
    )


async def persist_order(db: AsyncSession, validated: ValidatedOrder) -> Order:
    """Write the order, its items, first status event and payment record in one commit.

    A concurrent insert of the same payment reference loses on the unique
    constraint and is reported as a duplicate of the winning order.
    """
    order = build_order(validated)
    db.add(order)

    try:
        await db.flush()
        transaction = build_transaction(order, validated)
        if transaction is not None:
            db.add(transaction)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await find_order_by_reference(db, validated.payment_reference)
        if existing is None:
            raise
        logger.warning(
            "Concurrent duplicate order rejected",
            reference=validated.payment_reference[:20],
            order_id=str(existing.id),
        )
        raise DuplicateOrder(
            "This payment has already been processed (concurrent request detected)",
            order_id=existing.id,
        )

    logger.info(
        "Order created",
        order_id=str(order.id),
        restaurant_id=str(order.restaurant_id),
        total_cents=order.total_cents,
        payment_method=order.payment_method,
    )
    return order
