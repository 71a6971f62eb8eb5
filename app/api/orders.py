"""Restaurant order management API endpoints"""

from typing import Optional
from uuid import UUID
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.models.order import Order, OrderStatusEvent
from app.models.user import User, UserRole
from app.schemas.order import OrderDetailResponse, OrderListResponse, OrderStatusUpdate
from app.api.auth import require_role, verify_restaurant_access

logger = structlog.get_logger()

router = APIRouter()


@router.get("", response_model=OrderListResponse)
async def list_orders(
    restaurant_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    current_user: User = Depends(require_role(UserRole.RESTAURANT_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List orders for a restaurant with pagination"""
    await verify_restaurant_access(restaurant_id, current_user)

    query = select(Order).where(Order.restaurant_id == restaurant_id)
    count_query = select(func.count(Order.id)).where(Order.restaurant_id == restaurant_id)

    if status:
        query = query.where(Order.status == status)
        count_query = count_query.where(Order.status == status)

    if from_date:
        query = query.where(Order.created_at >= from_date)
        count_query = count_query.where(Order.created_at >= from_date)

    if to_date:
        query = query.where(Order.created_at <= to_date)
        count_query = count_query.where(Order.created_at <= to_date)

    # Get total
    total_result = await db.execute(count_query)
    total = total_result.scalar()

    # Get paginated results
    offset = (page - 1) * page_size
    query = (
        query.options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )

    result = await db.execute(query)
    orders = result.scalars().all()

    return OrderListResponse(
        items=orders,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/{order_id}/status", response_model=OrderDetailResponse)
async def update_order_status(
    restaurant_id: UUID,
    order_id: UUID,
    update: OrderStatusUpdate,
    current_user: User = Depends(require_role(UserRole.RESTAURANT_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Append a status event and make it the order's current status"""
    await verify_restaurant_access(restaurant_id, current_user)

    result = await db.execute(
        select(Order).where(Order.id == order_id, Order.restaurant_id == restaurant_id)
    )
    order = result.scalar_one_or_none()

    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    db.add(OrderStatusEvent(order_id=order.id, status=update.status, notes=update.notes))
    order.status = update.status
    await db.commit()

    logger.info(
        "Order status updated",
        order_id=str(order_id),
        status=update.status,
        user_id=str(current_user.id),
    )

    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.items),
            selectinload(Order.restaurant),
            selectinload(Order.status_history),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()
