"""Promotion model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Enum, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.cart.pricing import DiscountType
from app.database import Base


class Promotion(Base):
    """Promo codes redeemable at checkout"""
    __tablename__ = "promotions"
    __table_args__ = (UniqueConstraint("restaurant_id", "code", name="uq_promotions_restaurant_code"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    code = Column(String(50), nullable=False)  # stored upper-case
    description = Column(String(255))
    discount_type = Column(Enum(DiscountType), nullable=False)
    # Percent for PERCENTAGE, cents for everything else
    discount_value = Column(Integer, nullable=False, default=0)
    min_order_cents = Column(Integer, default=0)
    delivery_only = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    starts_at = Column(DateTime)
    ends_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="promotions")

    def is_live(self, now: datetime) -> bool:
        """Check the active flag and the optional date window"""
        if not self.is_active:
            return False
        if self.starts_at and now < self.starts_at:
            return False
        if self.ends_at and now > self.ends_at:
            return False
        return True
