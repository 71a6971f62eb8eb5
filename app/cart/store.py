"""
Shopping cart state and its transitions.

Transitions are pure functions returning a new ``CartState``; ``CartStore``
owns one state instance, applies transitions to it and exposes the derived
totals. Persistence is handled separately by ``app.cart.storage``.
"""

from typing import Callable, List, Optional, Tuple
from uuid import UUID

import structlog

from app.cart.pricing import (
    DEFAULT_TAX_RATE_PERCENT,
    OrderType,
    PriceBreakdown,
    line_subtotal,
    modifier_units,
    price_order,
)
from app.schemas.cart import (
    AppliedPromo,
    CartItem,
    CartItemCreate,
    CartModifier,
    CartState,
    CartTotals,
    ServiceTime,
)

logger = structlog.get_logger()

# Called with (current restaurant name, new restaurant name); True clears the cart
ConfirmSwitch = Callable[[Optional[str], str], bool]


def _modifier_signature(modifier: CartModifier) -> str:
    signature = str(modifier.id)
    if modifier.placement:
        signature += f":{modifier.placement}"
    if modifier.quantity not in (None, 1):
        signature += f"x{modifier.quantity}"
    return signature


def make_item_key(
    dish_id: UUID,
    size: str,
    modifiers: List[CartModifier],
    special_instructions: Optional[str] = None,
) -> str:
    """Dedup key for a cart line"""
    modifier_part = "-".join(sorted(_modifier_signature(m) for m in modifiers))
    instructions = (special_instructions or "").strip()
    return f"{dish_id}-{size}-{modifier_part}-{instructions}".lower()


def item_subtotal(size_price_cents: int, modifiers: List[CartModifier], quantity: int) -> int:
    return line_subtotal(
        size_price_cents,
        ((m.price_cents, modifier_units(m.quantity, m.paid_quantity)) for m in modifiers),
        quantity,
    )


# Transitions

def add_item(state: CartState, item: CartItemCreate) -> CartState:
    key = make_item_key(item.dish_id, item.size, item.modifiers, item.special_instructions)
    items = list(state.items)

    for index, existing in enumerate(items):
        if existing.key == key:
            quantity = existing.quantity + item.quantity
            items[index] = existing.model_copy(update={
                "quantity": quantity,
                "subtotal_cents": item_subtotal(existing.size_price_cents, existing.modifiers, quantity),
            })
            return state.model_copy(update={"items": items})

    new_item = CartItem(
        **item.model_dump(),
        key=key,
        subtotal_cents=item_subtotal(item.size_price_cents, item.modifiers, item.quantity),
    )
    return state.model_copy(update={"items": items + [new_item]})


def remove_item(state: CartState, key: str) -> CartState:
    return state.model_copy(update={"items": [i for i in state.items if i.key != key]})


def update_quantity(state: CartState, key: str, quantity: int) -> CartState:
    if quantity <= 0:
        return remove_item(state, key)

    items = [
        item.model_copy(update={
            "quantity": quantity,
            "subtotal_cents": item_subtotal(item.size_price_cents, item.modifiers, quantity),
        })
        if item.key == key else item
        for item in state.items
    ]
    return state.model_copy(update={"items": items})


def clear(state: CartState) -> CartState:
    return CartState(order_type=state.order_type)


def set_order_type(state: CartState, order_type: OrderType) -> CartState:
    # A scheduled time picked for one fulfillment mode is not carried to the other
    return state.model_copy(update={"order_type": order_type, "service_time": ServiceTime()})


def set_service_time(state: CartState, service_time: ServiceTime) -> CartState:
    return state.model_copy(update={"service_time": service_time})


def apply_promo(state: CartState, promo: AppliedPromo) -> CartState:
    return state.model_copy(update={"applied_promo": promo})


def clear_promo(state: CartState) -> CartState:
    return state.model_copy(update={"applied_promo": None})


def set_restaurant(
    state: CartState,
    restaurant_id: UUID,
    name: str,
    slug: str,
    delivery_fee_cents: int,
    min_order_cents: int,
    confirm: Optional[ConfirmSwitch] = None,
) -> Tuple[CartState, bool]:
    """Point the cart at a restaurant.

    Switching away from a restaurant that still has items requires ``confirm``
    to approve clearing the cart. Without a callback the switch is refused.
    Returns the new state and whether the switch happened.
    """
    restaurant_info = {
        "restaurant_id": restaurant_id,
        "restaurant_name": name,
        "restaurant_slug": slug,
        "delivery_fee_cents": delivery_fee_cents,
        "min_order_cents": min_order_cents,
    }

    switching = (
        state.restaurant_id is not None
        and state.restaurant_id != restaurant_id
        and len(state.items) > 0
    )
    if not switching:
        return state.model_copy(update=restaurant_info), True

    if confirm is None or not confirm(state.restaurant_name, name):
        return state, False

    return state.model_copy(update={**restaurant_info, "items": [], "applied_promo": None}), True


class CartStore:
    """Owns a single cart state and computes its totals"""

    def __init__(
        self,
        state: Optional[CartState] = None,
        tax_rate_percent: int = DEFAULT_TAX_RATE_PERCENT,
    ):
        self.state = state or CartState()
        self.tax_rate_percent = tax_rate_percent

    def add_item(self, item: CartItemCreate) -> None:
        self.state = add_item(self.state, item)

    def remove_item(self, key: str) -> None:
        self.state = remove_item(self.state, key)

    def update_quantity(self, key: str, quantity: int) -> None:
        self.state = update_quantity(self.state, key, quantity)

    def clear(self) -> None:
        self.state = clear(self.state)

    def set_order_type(self, order_type: OrderType) -> None:
        self.state = set_order_type(self.state, order_type)

    def set_service_time(self, service_time: ServiceTime) -> None:
        self.state = set_service_time(self.state, service_time)

    def apply_promo(self, promo: AppliedPromo) -> None:
        self.state = apply_promo(self.state, promo)

    def clear_promo(self) -> None:
        self.state = clear_promo(self.state)

    def set_restaurant(
        self,
        restaurant_id: UUID,
        name: str,
        slug: str,
        delivery_fee_cents: int = 0,
        min_order_cents: int = 0,
        confirm: Optional[ConfirmSwitch] = None,
    ) -> bool:
        self.state, switched = set_restaurant(
            self.state, restaurant_id, name, slug, delivery_fee_cents, min_order_cents, confirm
        )
        if not switched:
            logger.info(
                "Restaurant switch refused",
                current_restaurant=self.state.restaurant_slug,
                requested_restaurant=slug,
            )
        return switched

    # Getters

    def _breakdown(self) -> PriceBreakdown:
        promo = self.state.applied_promo
        return price_order(
            subtotal_cents=self.get_subtotal(),
            base_fee_cents=self.state.delivery_fee_cents,
            order_type=self.state.order_type,
            discount_type=promo.discount_type if promo else None,
            discount_value=promo.value if promo else 0,
            tax_rate_percent=self.tax_rate_percent,
        )

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self.state.items)

    def get_subtotal(self) -> int:
        return sum(item.subtotal_cents for item in self.state.items)

    def get_discount(self) -> int:
        return self._breakdown().discount_cents

    def get_effective_delivery_fee(self) -> int:
        return self._breakdown().delivery_fee_cents

    def get_tax(self) -> int:
        return self._breakdown().tax_cents

    def get_total(self) -> int:
        return self._breakdown().total_cents

    def totals(self) -> CartTotals:
        breakdown = self._breakdown()
        meets_minimum = (
            self.state.order_type != OrderType.DELIVERY
            or breakdown.subtotal_cents >= self.state.min_order_cents
        )
        return CartTotals(
            item_count=self.get_item_count(),
            subtotal_cents=breakdown.subtotal_cents,
            discount_cents=breakdown.discount_cents,
            delivery_fee_cents=breakdown.delivery_fee_cents,
            tax_cents=breakdown.tax_cents,
            total_cents=breakdown.total_cents,
            meets_minimum_order=meets_minimum,
        )
