"""Order models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Text, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Order(Base):
    """Delivery and pickup orders"""
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))  # NULL for guest orders

    # Guest contact
    guest_email = Column(String(255))
    guest_name = Column(String(255))

    order_type = Column(String(20), nullable=False, default="delivery")  # delivery, pickup

    # Validated item snapshot
    # [{"dish_id": "...", "dish_name": "...", "size_variant": "Large", "quantity": 1, "unit_price_cents": 1899, "modifiers": [...], "subtotal_cents": 2149}, ...]
    items_json = Column(JSON, nullable=False)

    # Pricing
    subtotal_cents = Column(Integer, nullable=False, default=0)
    discount_cents = Column(Integer, nullable=False, default=0)
    delivery_fee_cents = Column(Integer, nullable=False, default=0)
    tax_cents = Column(Integer, nullable=False, default=0)
    total_cents = Column(Integer, nullable=False, default=0)
    promo_code = Column(String(50))

    # Fulfillment
    delivery_address = Column(JSON)
    delivery_instructions = Column(Text)
    special_instructions = Column(Text)
    scheduled_time = Column(DateTime)

    # Payment; the reference is a Stripe PaymentIntent id or a generated CASH-... id
    payment_reference = Column(String(255), unique=True, nullable=False)
    payment_method = Column(String(50), default="card")
    payment_status = Column(String(50), default="pending")  # pending, paid, failed, refunded

    # Current status; full timeline lives in order_status_history
    status = Column(String(50), default="pending")  # pending, confirmed, preparing, ready, out_for_delivery, completed, cancelled

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="orders")
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    status_history = relationship(
        "OrderStatusEvent",
        back_populates="order",
        order_by="OrderStatusEvent.created_at",
    )


class OrderItem(Base):
    """Denormalized order line"""
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False)
    dish_id = Column(UUID(as_uuid=True), ForeignKey("dishes.id"))
    dish_name = Column(String(255), nullable=False)
    size_variant = Column(String(100))
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    modifiers = Column(JSON, default=list)
    special_instructions = Column(Text)
    subtotal_cents = Column(Integer, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")


class OrderStatusEvent(Base):
    """Append-only order timeline entry"""
    __tablename__ = "order_status_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False)
    status = Column(String(50), nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="status_history")
