"""Delivery zone schemas"""

from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel


class DeliveryZoneResponse(BaseModel):
    id: UUID
    name: Optional[str]
    delivery_fee_cents: int
    min_order_cents: Optional[int]
    geometry: Optional[dict]
    is_active: bool

    class Config:
        from_attributes = True


class DeliveryValidationResponse(BaseModel):
    """Active zones of a restaurant and which one contains a point"""
    zones: List[DeliveryZoneResponse] = []
    matched_zone: Optional[DeliveryZoneResponse] = None
    is_within_delivery_area: bool = False
    has_delivery_zones: bool = False
