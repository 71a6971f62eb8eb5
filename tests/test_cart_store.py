"""Tests for cart state transitions and totals"""

import asyncio
from datetime import datetime
from uuid import uuid4

import pytest

from app.cart.pricing import DiscountType, OrderType
from app.cart.storage import InMemoryCartStorage
from app.cart.store import CartStore, add_item, make_item_key
from app.schemas.cart import AppliedPromo, CartItemCreate, CartModifier, CartState, ServiceTime

DISH_ID = uuid4()
CHEESE_ID = uuid4()


def pizza(quantity=1, modifiers=None, size="Large", instructions=None):
    return CartItemCreate(
        dish_id=DISH_ID,
        dish_name="Pepperoni Pizza",
        size=size,
        size_price_cents=1899,
        quantity=quantity,
        modifiers=modifiers if modifiers is not None else [
            CartModifier(id=CHEESE_ID, name="Extra Cheese", price_cents=300)
        ],
        special_instructions=instructions,
    )


def delivery_store():
    store = CartStore()
    store.set_restaurant(uuid4(), "Test Pizzeria", "test-pizzeria", delivery_fee_cents=499, min_order_cents=1000)
    return store


def test_identical_items_are_merged():
    store = delivery_store()
    store.add_item(pizza())
    store.add_item(pizza())

    assert len(store.state.items) == 1
    assert store.state.items[0].quantity == 2
    assert store.get_item_count() == 2
    assert store.get_subtotal() == 4398


def test_different_instructions_make_separate_lines():
    store = delivery_store()
    store.add_item(pizza())
    store.add_item(pizza(instructions="well done"))

    assert len(store.state.items) == 2


def test_key_ignores_modifier_order():
    first = CartModifier(id=uuid4(), name="A", price_cents=0)
    second = CartModifier(id=uuid4(), name="B", price_cents=0, placement="left")

    assert make_item_key(DISH_ID, "Large", [first, second]) == make_item_key(DISH_ID, "Large", [second, first])
    assert make_item_key(DISH_ID, "Large", [first]) != make_item_key(DISH_ID, "Small", [first])


def test_totals_match_worked_example():
    store = delivery_store()
    store.add_item(pizza(quantity=2))

    totals = store.totals()
    assert totals.subtotal_cents == 4398
    assert totals.delivery_fee_cents == 499
    assert totals.tax_cents == 636
    assert totals.total_cents == 5533
    assert totals.meets_minimum_order


def test_promo_is_reflected_in_totals():
    store = delivery_store()
    store.add_item(pizza(quantity=2))
    store.apply_promo(AppliedPromo(code="WELCOME10", discount_type=DiscountType.PERCENTAGE, value=10))

    assert store.get_discount() == 440
    assert store.get_tax() == 579
    assert store.get_total() == 5036

    store.clear_promo()
    assert store.get_total() == 5533


def test_paid_quantity_limits_charged_modifier_units():
    store = delivery_store()
    toppings = CartModifier(id=uuid4(), name="Mushrooms", price_cents=200, quantity=3, paid_quantity=1)
    store.add_item(pizza(modifiers=[toppings]))

    assert store.get_subtotal() == 1899 + 200


def test_update_quantity_and_remove():
    store = delivery_store()
    store.add_item(pizza())
    key = store.state.items[0].key

    store.update_quantity(key, 3)
    assert store.state.items[0].quantity == 3
    assert store.state.items[0].subtotal_cents == 3 * 2199

    store.update_quantity(key, 0)
    assert store.state.items == []


def test_clear_keeps_order_type():
    store = delivery_store()
    store.set_order_type(OrderType.PICKUP)
    store.add_item(pizza())
    store.apply_promo(AppliedPromo(code="X", discount_type=DiscountType.FIXED_AMOUNT, value=100))

    store.clear()

    assert store.state.items == []
    assert store.state.applied_promo is None
    assert store.state.order_type == OrderType.PICKUP


def test_pickup_drops_fee_and_minimum():
    store = delivery_store()
    store.add_item(pizza(modifiers=[], size="Small"))
    store.state = store.state.model_copy(update={"min_order_cents": 5000})
    assert not store.totals().meets_minimum_order

    store.set_order_type(OrderType.PICKUP)
    totals = store.totals()
    assert totals.delivery_fee_cents == 0
    assert totals.meets_minimum_order


def test_order_type_change_resets_service_time():
    store = delivery_store()
    store.set_service_time(ServiceTime(type="scheduled", scheduled_time=datetime(2030, 1, 1, 18, 0)))

    store.set_order_type(OrderType.PICKUP)

    assert store.state.service_time.type == "asap"
    assert store.state.service_time.scheduled_time is None


def test_switching_restaurant_needs_confirmation():
    store = delivery_store()
    store.add_item(pizza())
    original = store.state.restaurant_id

    assert store.set_restaurant(uuid4(), "Other", "other") is False
    assert store.state.restaurant_id == original
    assert len(store.state.items) == 1

    assert store.set_restaurant(uuid4(), "Other", "other", confirm=lambda current, new: False) is False
    assert len(store.state.items) == 1

    other_id = uuid4()
    asked = []
    assert store.set_restaurant(
        other_id, "Other", "other", confirm=lambda current, new: asked.append((current, new)) or True
    ) is True
    assert asked == [("Test Pizzeria", "Other")]
    assert store.state.restaurant_id == other_id
    assert store.state.items == []


def test_switching_empty_cart_needs_no_confirmation():
    store = delivery_store()
    other_id = uuid4()

    assert store.set_restaurant(other_id, "Other", "other", delivery_fee_cents=199) is True
    assert store.state.restaurant_id == other_id
    assert store.state.delivery_fee_cents == 199


@pytest.mark.asyncio
async def test_storage_round_trip_and_unreadable_cart():
    storage = InMemoryCartStorage("test-cart")
    store = delivery_store()
    store.add_item(pizza())

    await storage.save("abc", store.state)
    loaded = await storage.load("abc")
    assert loaded == store.state

    await storage._write(storage.key_for("broken"), "{not json")
    assert await storage.load("broken") == CartState()

    await storage.delete("abc")
    assert await storage.load("abc") == CartState()


class SlowStorage(InMemoryCartStorage):
    """Yields to the event loop on every read, like a network round trip"""

    async def _read(self, key):
        await asyncio.sleep(0)
        return await super()._read(key)


@pytest.mark.asyncio
async def test_concurrent_updates_keep_both_items():
    storage = SlowStorage("test-cart")

    await asyncio.gather(
        storage.update("shared", lambda state: add_item(state, pizza(size="Large"))),
        storage.update("shared", lambda state: add_item(state, pizza(size="Small"))),
    )

    state = await storage.load("shared")
    assert sorted(item.size for item in state.items) == ["Large", "Small"]


@pytest.mark.asyncio
async def test_failed_update_writes_nothing():
    storage = InMemoryCartStorage("test-cart")
    await storage.update("abc", lambda state: add_item(state, pizza()))

    def refuse(state):
        raise ValueError("refused")

    with pytest.raises(ValueError):
        await storage.update("abc", refuse)

    state = await storage.load("abc")
    assert len(state.items) == 1
