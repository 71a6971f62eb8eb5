"""Customer checkout and order read-back endpoints"""

from typing import List, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.auth import get_current_active_user, get_optional_user
from app.checkout.persister import persist_order
from app.checkout.validator import OrderValidator
from app.database import get_db
from app.jobs.tasks import enqueue_order_confirmation
from app.models.order import Order
from app.models.user import User
from app.payments.gateway import PaymentGateway, get_payment_gateway
from app.schemas.order import (
    CardCheckoutRequest,
    CashCheckoutRequest,
    OrderDetailResponse,
    OrderResponse,
)

logger = structlog.get_logger()

router = APIRouter()


async def _load_order(db: AsyncSession, order_id: UUID) -> Optional[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.items),
            selectinload(Order.restaurant),
            selectinload(Order.status_history),
        )
    )
    return result.scalar_one_or_none()


@router.post("", response_model=OrderResponse)
async def create_card_order(
    request: CardCheckoutRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    """Create an order backed by a completed card payment"""
    logger.info(
        "Card checkout",
        payment_intent_id=(request.payment_intent_id or "")[:20],
        has_user=current_user is not None,
        items_count=len(request.cart_items),
    )

    validator = OrderValidator(db, gateway)
    validated = await validator.validate_card(request, current_user)
    order = await persist_order(db, validated)

    enqueue_order_confirmation(order.id, current_user.email if current_user else request.guest_email)
    return order


@router.post("/cash", response_model=OrderResponse)
async def create_cash_order(
    request: CashCheckoutRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an order paid at the door"""
    logger.info(
        "Cash checkout",
        payment_type=request.payment_type,
        restaurant_slug=request.restaurant_slug,
        has_user=current_user is not None,
        items_count=len(request.cart_items),
    )

    validator = OrderValidator(db)
    validated = await validator.validate_cash(request, current_user)
    order = await persist_order(db, validated)

    enqueue_order_confirmation(order.id, current_user.email if current_user else request.guest_email)
    return order


@router.get("", response_model=List[OrderResponse])
async def list_my_orders(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Orders placed by the signed-in customer, newest first"""
    result = await db.execute(
        select(Order)
        .where(Order.user_id == current_user.id)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
    )
    return result.scalars().all()


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Order confirmation details; the order id acts as the access secret"""
    order = await _load_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    response = OrderDetailResponse.model_validate(order)
    if order.user_id:
        response.guest_email = None
    return response
