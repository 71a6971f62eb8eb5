"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    LoginRequest,
    RefreshRequest,
    SignupRequest,
    UserResponse,
)
from app.schemas.cart import (
    CartModifier,
    CartItemCreate,
    CartItem,
    CartState,
    CartTotals,
    CartResponse,
)
from app.schemas.menu import (
    RestaurantResponse,
    MenuResponse,
    DishModifiersResponse,
    CustomizationRequest,
    CustomizationResult,
)
from app.schemas.order import (
    CardCheckoutRequest,
    CashCheckoutRequest,
    OrderResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderStatusUpdate,
)
from app.schemas.promotion import PromoValidateRequest, PromoValidateResponse
from app.schemas.payment import PaymentIntentCreate, PaymentIntentResponse

__all__ = [
    "Token",
    "LoginRequest",
    "RefreshRequest",
    "SignupRequest",
    "UserResponse",
    "CartModifier",
    "CartItemCreate",
    "CartItem",
    "CartState",
    "CartTotals",
    "CartResponse",
    "RestaurantResponse",
    "MenuResponse",
    "DishModifiersResponse",
    "CustomizationRequest",
    "CustomizationResult",
    "CardCheckoutRequest",
    "CashCheckoutRequest",
    "OrderResponse",
    "OrderDetailResponse",
    "OrderListResponse",
    "OrderStatusUpdate",
    "PromoValidateRequest",
    "PromoValidateResponse",
    "PaymentIntentCreate",
    "PaymentIntentResponse",
]
