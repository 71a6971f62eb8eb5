"""
Server-side checkout validation.

The submitted cart is only a claim. Every dish and modifier price is re-read
from the catalog, the delivery fee comes from the restaurant's delivery areas,
tax and totals are recomputed with the cart's pricing rules, and for card
payments the result must match what Stripe actually captured. Any failure
aborts before anything is written.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.cart.pricing import OrderType, PriceBreakdown, line_subtotal, modifier_units, price_order
from app.checkout.errors import CatalogNotFound, DuplicateOrder, InvalidCheckout, PaymentMismatch
from app.config import settings
from app.delivery.zones import find_matching_zone, first_active
from app.models.menu import (
    ComboGroup,
    ComboGroupSection,
    ComboModifier,
    ComboModifierGroup,
    Dish,
    DishComboGroup,
    DishModifier,
    DishPrice,
    ModifierGroup,
)
from app.models.order import Order
from app.models.promotion import Promotion
from app.models.restaurant import DeliveryArea, Restaurant
from app.models.user import User
from app.payments.gateway import PaymentGateway, PaymentIntentInfo
from app.promotions.rules import PromotionRejected, resolve_promotion
from app.schemas.order import (
    CASH_PAYMENT_TYPES,
    CardCheckoutRequest,
    CashCheckoutRequest,
    CheckoutItem,
    CheckoutRequest,
    DeliveryAddress,
)

logger = structlog.get_logger()


@dataclass
class PricedModifier:
    """Modifier with its catalog price and charged units"""
    id: UUID
    name: str
    price_cents: int
    quantity: int
    charged_units: int
    placement: Optional[str] = None
    source: str = "simple"  # simple, combo, declared

    def to_json(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "price_cents": self.price_cents,
            "quantity": self.quantity,
            "paid_quantity": self.charged_units,
            "placement": self.placement,
            "source": self.source,
        }


@dataclass
class PricedLine:
    """Cart line re-priced from the catalog"""
    dish_id: UUID
    dish_name: str
    size: str
    quantity: int
    unit_price_cents: int
    modifiers: List[PricedModifier] = field(default_factory=list)
    special_instructions: Optional[str] = None
    subtotal_cents: int = 0

    def to_json(self) -> dict:
        return {
            "dish_id": str(self.dish_id),
            "dish_name": self.dish_name,
            "size_variant": self.size,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "modifiers": [m.to_json() for m in self.modifiers],
            "special_instructions": self.special_instructions,
            "subtotal_cents": self.subtotal_cents,
        }


@dataclass
class ValidatedOrder:
    """Everything needed to persist an order, all amounts server-computed"""
    restaurant: Restaurant
    lines: List[PricedLine]
    pricing: PriceBreakdown
    order_type: OrderType
    payment_reference: str
    payment_method: str
    payment_status: str
    user_id: Optional[UUID] = None
    guest_email: Optional[str] = None
    guest_name: Optional[str] = None
    promo_code: Optional[str] = None
    delivery_address: Optional[dict] = None
    delivery_instructions: Optional[str] = None
    special_instructions: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    intent: Optional[PaymentIntentInfo] = None


def generate_cash_reference() -> str:
    """Internal payment reference for orders paid at the door"""
    return f"CASH-{secrets.token_hex(8).upper()}"


def restaurant_id_from_slug(identifier: str) -> Optional[UUID]:
    """Trailing restaurant id of a slug such as ``pizza-palace-<uuid>``"""
    try:
        return UUID(identifier[-36:])
    except ValueError:
        return None


def verify_provenance(
    intent: PaymentIntentInfo,
    user: Optional[User],
    guest_email: Optional[str],
    currency: str = settings.stripe_currency,
) -> None:
    """Check the payment intent was created for this caller, in our currency, and has succeeded"""
    expected_user = str(user.id) if user else "guest"
    if intent.metadata.get("user_id") != expected_user:
        raise PaymentMismatch("Payment mismatch")

    if user is None:
        recorded = (intent.metadata.get("guest_email") or "").lower()
        if not guest_email or recorded != guest_email.lower():
            raise PaymentMismatch("Email mismatch")

    if intent.currency.lower() != currency.lower():
        raise PaymentMismatch("Payment currency mismatch", currency=intent.currency)

    if intent.status != "succeeded":
        raise PaymentMismatch("Payment not completed")


def combo_modifier_price(modifier: ComboModifier, size: str) -> Optional[int]:
    """Size-specific price first, then the modifier's base price"""
    for price in modifier.prices:
        if price.size_variant == size:
            return price.price_cents
    return modifier.price_cents


class OrderValidator:
    """Re-prices a submitted cart against the catalog"""

    def __init__(
        self,
        db: AsyncSession,
        gateway: Optional[PaymentGateway] = None,
        tax_rate_percent: int = settings.tax_rate_percent,
        tolerance_cents: int = settings.amount_tolerance_cents,
        allow_free_fallback: bool = settings.allow_free_modifier_fallback,
    ):
        self.db = db
        self.gateway = gateway
        self.tax_rate_percent = tax_rate_percent
        self.tolerance_cents = tolerance_cents
        self.allow_free_fallback = allow_free_fallback

    # Card and pay-at-door entry points

    async def validate_card(self, request: CardCheckoutRequest, user: Optional[User]) -> ValidatedOrder:
        if not request.payment_intent_id:
            raise InvalidCheckout("Payment intent ID required")
        self._check_request(request, user)

        await self.ensure_unused_reference(request.payment_intent_id)

        if self.gateway is None:
            raise RuntimeError("Card checkout needs a payment gateway")
        intent = await self.gateway.retrieve_intent(request.payment_intent_id)
        verify_provenance(intent, user, request.guest_email)

        identifier = intent.metadata.get("restaurant_slug") or request.restaurant_slug
        if not identifier:
            raise InvalidCheckout("Invalid payment intent metadata")
        restaurant = await self.find_restaurant(identifier)

        validated = await self._price_request(
            restaurant,
            request,
            user,
            payment_reference=request.payment_intent_id,
            payment_method=intent.payment_method_types[0] if intent.payment_method_types else "card",
            payment_status="paid",
        )
        validated.intent = intent

        self.reconcile(validated.pricing.total_cents, intent.amount_cents)
        return validated

    async def validate_cash(self, request: CashCheckoutRequest, user: Optional[User]) -> ValidatedOrder:
        if request.payment_type not in CASH_PAYMENT_TYPES:
            raise InvalidCheckout("Invalid payment type for cash order")
        self._check_request(request, user)
        if not request.restaurant_slug:
            raise InvalidCheckout("Restaurant slug required")

        reference = generate_cash_reference()
        await self.ensure_unused_reference(reference)

        restaurant = await self.find_restaurant(request.restaurant_slug)
        return await self._price_request(
            restaurant,
            request,
            user,
            payment_reference=reference,
            payment_method=request.payment_type,
            payment_status="pending",
        )

    # Individual steps

    async def ensure_unused_reference(self, reference: str) -> None:
        """Fail if an order already consumed this payment reference"""
        result = await self.db.execute(
            select(Order.id).where(Order.payment_reference == reference)
        )
        existing_id = result.scalar_one_or_none()
        if existing_id is not None:
            logger.warning(
                "Payment reference already used",
                reference=reference[:20],
                order_id=str(existing_id),
            )
            raise DuplicateOrder("This payment has already been processed", order_id=existing_id)

    async def find_restaurant(self, identifier: str) -> Restaurant:
        """Look a restaurant up by slug, falling back to a trailing id"""
        result = await self.db.execute(
            select(Restaurant).where(Restaurant.slug == identifier, Restaurant.is_active == True)
        )
        restaurant = result.scalar_one_or_none()

        if restaurant is None:
            restaurant_id = restaurant_id_from_slug(identifier)
            if restaurant_id is not None:
                result = await self.db.execute(
                    select(Restaurant).where(Restaurant.id == restaurant_id, Restaurant.is_active == True)
                )
                restaurant = result.scalar_one_or_none()

        if restaurant is None:
            raise CatalogNotFound("Restaurant not found")
        return restaurant

    async def price_items(self, restaurant: Restaurant, items: List[CheckoutItem]) -> List[PricedLine]:
        return [await self.price_item(restaurant, item) for item in items]

    async def price_item(self, restaurant: Restaurant, item: CheckoutItem) -> PricedLine:
        if item.quantity <= 0:
            raise InvalidCheckout("Invalid quantity - must be a positive integer")

        dish_result = await self.db.execute(
            select(Dish).where(
                Dish.id == item.dish_id,
                Dish.restaurant_id == restaurant.id,
                Dish.is_active == True,
            )
        )
        dish = dish_result.scalar_one_or_none()
        if dish is None:
            raise CatalogNotFound(f"Dish {item.dish_id} does not belong to this restaurant")

        price_result = await self.db.execute(
            select(DishPrice).where(
                DishPrice.dish_id == dish.id,
                DishPrice.size_variant == item.size,
                DishPrice.is_active == True,
            )
        )
        dish_price = price_result.scalars().first()
        if dish_price is None:
            raise InvalidCheckout(f"Invalid price for dish {item.dish_id} size {item.size}")

        modifiers = await self.price_modifiers(dish.id, item)
        subtotal = line_subtotal(
            dish_price.price_cents,
            ((m.price_cents, m.charged_units) for m in modifiers),
            item.quantity,
        )

        return PricedLine(
            dish_id=dish.id,
            dish_name=dish.name,
            size=item.size,
            quantity=item.quantity,
            unit_price_cents=dish_price.price_cents,
            modifiers=modifiers,
            special_instructions=item.special_instructions,
            subtotal_cents=subtotal,
        )

    async def price_modifiers(self, dish_id: UUID, item: CheckoutItem) -> List[PricedModifier]:
        """Resolve each submitted modifier from the simple catalog, then the combo catalog"""
        if not item.modifiers:
            return []

        ids = list({m.id for m in item.modifiers})
        simple = await self._simple_modifiers(dish_id, ids)
        combo = await self._combo_modifiers(dish_id, [i for i in ids if i not in simple])
        catalogued = await self._catalogued_modifier_ids(
            [i for i in ids if i not in simple and i not in combo]
        )

        # Free allowance left per combo section, consumed in submission order
        free_left: Dict[UUID, int] = {}
        priced: List[PricedModifier] = []

        for submitted in item.modifiers:
            units = modifier_units(submitted.quantity)

            if submitted.id in simple:
                modifier = simple[submitted.id]
                priced.append(PricedModifier(
                    id=modifier.id,
                    name=modifier.name,
                    price_cents=modifier.price_cents or 0,
                    quantity=units,
                    charged_units=units,
                    placement=submitted.placement,
                    source="simple",
                ))
                continue

            if submitted.id in combo:
                modifier, section = combo[submitted.id]
                price = combo_modifier_price(modifier, item.size)
                if price is not None:
                    remaining = free_left.setdefault(section.id, section.free_items or 0)
                    free_units = min(remaining, units)
                    free_left[section.id] = remaining - free_units
                    priced.append(PricedModifier(
                        id=modifier.id,
                        name=modifier.name,
                        price_cents=price,
                        quantity=units,
                        charged_units=units - free_units,
                        placement=submitted.placement,
                        source="combo",
                    ))
                    continue

            # Known to the catalog but inactive or owned by another dish
            if submitted.id in catalogued:
                raise InvalidCheckout(
                    f"Invalid modifier {submitted.id} for dish {dish_id}",
                    modifier_id=submitted.id,
                )

            if self.allow_free_fallback and submitted.price_cents == 0:
                logger.warning(
                    "Accepting declared free modifier without catalog price",
                    dish_id=str(dish_id),
                    modifier_id=str(submitted.id),
                )
                priced.append(PricedModifier(
                    id=submitted.id,
                    name=submitted.name or "",
                    price_cents=0,
                    quantity=units,
                    charged_units=units,
                    placement=submitted.placement,
                    source="declared",
                ))
                continue

            raise InvalidCheckout(f"Invalid modifier {submitted.id} for dish {dish_id}")

        return priced

    async def delivery_terms(
        self,
        restaurant: Restaurant,
        order_type: OrderType,
        address: Optional[DeliveryAddress],
    ) -> Tuple[int, int]:
        """Base delivery fee and minimum order for an order, both 0 on pickup"""
        if order_type != OrderType.DELIVERY:
            return 0, 0

        result = await self.db.execute(
            select(DeliveryArea)
            .where(DeliveryArea.restaurant_id == restaurant.id, DeliveryArea.is_active == True)
            .order_by(DeliveryArea.area_number)
        )
        areas = list(result.scalars().all())
        if not areas:
            return 0, 0

        has_point = address is not None and address.lat is not None and address.lng is not None
        if has_point and any(a.geometry for a in areas):
            area = find_matching_zone((address.lng, address.lat), areas)
            if area is None:
                raise InvalidCheckout("Delivery address is outside the delivery area")
        else:
            area = first_active(areas)

        return area.delivery_fee_cents or 0, area.min_order_cents or 0

    async def find_promotion(
        self,
        restaurant: Restaurant,
        code: Optional[str],
        subtotal_cents: int,
        order_type: OrderType,
    ) -> Optional[Promotion]:
        if not code:
            return None
        try:
            return await resolve_promotion(self.db, restaurant.id, code, subtotal_cents, order_type)
        except PromotionRejected as e:
            raise InvalidCheckout(str(e), promo_code=code)

    def reconcile(self, server_total_cents: int, captured_cents: int) -> None:
        """The captured amount must match the recomputed total within tolerance"""
        if abs(server_total_cents - captured_cents) > self.tolerance_cents:
            logger.error(
                "Total mismatch",
                expected_cents=server_total_cents,
                received_cents=captured_cents,
            )
            raise InvalidCheckout(
                "Payment amount does not match order total",
                expected_cents=server_total_cents,
                received_cents=captured_cents,
            )

    # Helpers

    def _check_request(self, request: CheckoutRequest, user: Optional[User]) -> None:
        if not request.cart_items:
            raise InvalidCheckout("Cart items required")
        if user is None and not request.guest_email:
            raise InvalidCheckout("Email required for guest checkout")
        if request.order_type == OrderType.DELIVERY and request.delivery_address is None:
            raise InvalidCheckout("Delivery address required")
        if request.service_time and request.service_time.type == "scheduled" and not request.service_time.scheduled_time:
            raise InvalidCheckout("Scheduled orders need a time")

    async def _price_request(
        self,
        restaurant: Restaurant,
        request: CheckoutRequest,
        user: Optional[User],
        payment_reference: str,
        payment_method: str,
        payment_status: str,
    ) -> ValidatedOrder:
        lines = await self.price_items(restaurant, request.cart_items)
        subtotal = sum(line.subtotal_cents for line in lines)

        base_fee, min_order = await self.delivery_terms(restaurant, request.order_type, request.delivery_address)
        if min_order and subtotal < min_order:
            raise InvalidCheckout(
                f"Minimum order for delivery is {min_order} cents",
                min_order_cents=min_order,
            )

        promotion = await self.find_promotion(restaurant, request.promo_code, subtotal, request.order_type)
        pricing = price_order(
            subtotal,
            base_fee,
            request.order_type,
            discount_type=promotion.discount_type if promotion else None,
            discount_value=promotion.discount_value if promotion else 0,
            tax_rate_percent=self.tax_rate_percent,
        )

        address = request.delivery_address
        scheduled_time = None
        if request.service_time and request.service_time.type == "scheduled":
            scheduled_time = request.service_time.scheduled_time

        logger.info(
            "Checkout priced",
            restaurant_id=str(restaurant.id),
            reference=payment_reference[:20],
            items_count=len(lines),
            total_cents=pricing.total_cents,
        )

        return ValidatedOrder(
            restaurant=restaurant,
            lines=lines,
            pricing=pricing,
            order_type=request.order_type,
            payment_reference=payment_reference,
            payment_method=payment_method,
            payment_status=payment_status,
            user_id=user.id if user else None,
            guest_email=None if user else request.guest_email,
            guest_name=request.guest_name,
            promo_code=promotion.code if promotion else None,
            delivery_address=address.model_dump(exclude_none=True) if address else None,
            delivery_instructions=address.delivery_instructions if address else None,
            special_instructions=request.special_instructions,
            scheduled_time=scheduled_time,
        )

    async def _simple_modifiers(self, dish_id: UUID, ids: List[UUID]) -> Dict[UUID, DishModifier]:
        if not ids:
            return {}
        result = await self.db.execute(
            select(DishModifier)
            .join(ModifierGroup, DishModifier.modifier_group_id == ModifierGroup.id)
            .where(
                DishModifier.id.in_(ids),
                ModifierGroup.dish_id == dish_id,
                DishModifier.is_active == True,
            )
        )
        return {m.id: m for m in result.scalars().all()}

    async def _catalogued_modifier_ids(self, ids: List[UUID]) -> Set[UUID]:
        """Ids present in either modifier table, whatever their dish or state"""
        if not ids:
            return set()
        simple = await self.db.execute(select(DishModifier.id).where(DishModifier.id.in_(ids)))
        combo = await self.db.execute(select(ComboModifier.id).where(ComboModifier.id.in_(ids)))
        return set(simple.scalars().all()) | set(combo.scalars().all())

    async def _combo_modifiers(
        self, dish_id: UUID, ids: List[UUID]
    ) -> Dict[UUID, Tuple[ComboModifier, ComboGroupSection]]:
        """Combo modifiers reachable from an active combo group linked to the dish"""
        if not ids:
            return {}
        result = await self.db.execute(
            select(ComboModifier, ComboGroupSection)
            .join(ComboModifierGroup, ComboModifier.combo_modifier_group_id == ComboModifierGroup.id)
            .join(ComboGroupSection, ComboModifierGroup.combo_group_section_id == ComboGroupSection.id)
            .join(ComboGroup, ComboGroupSection.combo_group_id == ComboGroup.id)
            .join(DishComboGroup, DishComboGroup.combo_group_id == ComboGroup.id)
            .where(
                ComboModifier.id.in_(ids),
                DishComboGroup.dish_id == dish_id,
                DishComboGroup.is_active == True,
                ComboGroup.deleted_at.is_(None),
                ComboGroupSection.is_active == True,
            )
            .options(selectinload(ComboModifier.prices))
        )
        found: Dict[UUID, Tuple[ComboModifier, ComboGroupSection]] = {}
        for modifier, section in result.all():
            found.setdefault(modifier.id, (modifier, section))
        return found
