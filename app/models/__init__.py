"""Database models"""

from app.models.restaurant import Restaurant, DeliveryArea
from app.models.menu import (
    Dish,
    DishPrice,
    ModifierGroup,
    DishModifier,
    ComboGroup,
    DishComboGroup,
    ComboGroupSection,
    ComboModifierGroup,
    ComboModifier,
    ComboModifierPrice,
)
from app.models.promotion import Promotion, DiscountType
from app.models.order import Order, OrderItem, OrderStatusEvent
from app.models.payment import PaymentTransaction, StripeWebhookEvent
from app.models.user import User, UserRole

__all__ = [
    "Restaurant",
    "DeliveryArea",
    "Dish",
    "DishPrice",
    "ModifierGroup",
    "DishModifier",
    "ComboGroup",
    "DishComboGroup",
    "ComboGroupSection",
    "ComboModifierGroup",
    "ComboModifier",
    "ComboModifierPrice",
    "Promotion",
    "DiscountType",
    "Order",
    "OrderItem",
    "OrderStatusEvent",
    "PaymentTransaction",
    "StripeWebhookEvent",
    "User",
    "UserRole",
]
