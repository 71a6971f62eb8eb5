"""Cart aggregation: pricing rules, state transitions and persistence"""

from app.cart.pricing import DiscountType, OrderType, PriceBreakdown, price_order

__all__ = ["DiscountType", "OrderType", "PriceBreakdown", "price_order"]
