"""Delivery zone lookup"""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.delivery.zones import find_matching_zone
from app.models.restaurant import DeliveryArea
from app.schemas.delivery import DeliveryValidationResponse, DeliveryZoneResponse

logger = structlog.get_logger()

router = APIRouter()


@router.get("/validate", response_model=DeliveryValidationResponse)
async def validate_delivery(
    restaurant_id: UUID,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db: AsyncSession = Depends(get_db),
):
    """Check whether a point falls inside one of the restaurant's active zones"""
    result = await db.execute(
        select(DeliveryArea)
        .where(DeliveryArea.restaurant_id == restaurant_id, DeliveryArea.is_active == True)
        .order_by(DeliveryArea.area_number)
    )
    zones = list(result.scalars().all())

    matched = None
    if lat is not None and lng is not None:
        matched = find_matching_zone((lng, lat), zones)

    logger.info(
        "Delivery validated",
        restaurant_id=str(restaurant_id),
        zones=len(zones),
        matched=matched is not None,
    )

    return DeliveryValidationResponse(
        zones=[DeliveryZoneResponse.model_validate(z) for z in zones],
        matched_zone=DeliveryZoneResponse.model_validate(matched) if matched else None,
        is_within_delivery_area=matched is not None,
        has_delivery_zones=len(zones) > 0,
    )
