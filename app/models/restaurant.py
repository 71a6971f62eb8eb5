"""Restaurant-related models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Restaurant(Base):
    """Restaurant taking online orders"""
    __tablename__ = "restaurants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    timezone = Column(String(50), default="America/Toronto")
    is_active = Column(Boolean, default=True)

    # Contact / location
    phone = Column(String(20))
    address = Column(Text)
    city = Column(String(100))
    province = Column(String(50), default="ON")
    postal_code = Column(String(20))
    logo_url = Column(String(500))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    delivery_areas = relationship("DeliveryArea", back_populates="restaurant")
    dishes = relationship("Dish", back_populates="restaurant")
    promotions = relationship("Promotion", back_populates="restaurant")
    orders = relationship("Order", back_populates="restaurant")
    users = relationship("User", back_populates="restaurant")


class DeliveryArea(Base):
    """Delivery zone configured by a restaurant"""
    __tablename__ = "restaurant_delivery_areas"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255))
    area_number = Column(Integer)
    delivery_fee_cents = Column(Integer, nullable=False, default=0)
    min_order_cents = Column(Integer)
    # GeoJSON Polygon or MultiPolygon, [lng, lat] coordinates
    geometry = Column(JSON)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="delivery_areas")
