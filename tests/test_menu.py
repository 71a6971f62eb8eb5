"""Tests for restaurant, menu and modifier endpoints"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.menu.modifiers import validate_modifier_selections
from app.schemas.menu import FlatModifierGroup, SelectedModifier


@pytest.mark.asyncio
async def test_get_restaurant(client: AsyncClient, test_restaurant):
    response = await client.get("/restaurants/test-pizzeria")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Test Pizzeria"
    assert data["delivery_fee_cents"] == 499
    assert data["min_order_cents"] == 1000

    response = await client.get("/restaurants/unknown")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_menu_groups_dishes_by_category(client: AsyncClient, test_menu):
    response = await client.get("/restaurants/test-pizzeria/menu")

    assert response.status_code == 200
    categories = response.json()["categories"]
    assert set(categories) == {"Pizza", "Salads"}
    pizza = categories["Pizza"][0]
    assert [p["size_variant"] for p in pizza["prices"]] == ["Small", "Large"]


@pytest.mark.asyncio
async def test_dish_modifiers_include_simple_and_combo_groups(client: AsyncClient, test_menu):
    response = await client.get(f"/restaurants/test-pizzeria/dishes/{test_menu.pizza.id}/modifiers")

    assert response.status_code == 200
    data = response.json()
    kinds = [group["kind"] for group in data["groups"]]
    assert kinds == ["simple", "combo"]

    simple = data["groups"][0]
    # Inactive modifiers are hidden
    assert [m["name"] for m in simple["modifiers"]] == ["Extra Cheese"]

    combo = data["groups"][1]
    assert combo["sections"][0]["free_items"] == 2
    topping = combo["sections"][0]["groups"][0]["modifiers"][0]
    assert topping["prices"] == [{"size_variant": "Large", "price_cents": 200}]

    flat = data["flat"]
    assert [(g["source"], g["name"]) for g in flat] == [("simple", "Extras"), ("combo", "Toppings")]
    assert flat[1]["header"] == "Toppings"
    assert flat[1]["free_items"] == 2


@pytest.mark.asyncio
async def test_dish_of_unknown_restaurant_is_not_found(client: AsyncClient, test_menu):
    response = await client.get(f"/restaurants/test-pizzeria/dishes/{uuid4()}/modifiers")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_validate_customization_enforces_max(client: AsyncClient, test_menu):
    group_id = str(test_menu.extras.id)
    selection = [
        {"group_id": group_id, "modifier_id": str(uuid4()), "price_cents": 300}
        for _ in range(3)
    ]

    response = await client.post(
        f"/restaurants/test-pizzeria/dishes/{test_menu.pizza.id}/validate-customization",
        json={"size": "Large", "modifiers": selection},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert data["errors"][0]["type"] == "max_selections"
    assert data["total_modifier_price_cents"] == 900


def test_required_group_needs_a_selection():
    group_id = uuid4()
    groups = [FlatModifierGroup(source="simple", group_id=group_id, name="Crust", is_required=True, min_selections=1)]

    result = validate_modifier_selections(groups, [])

    assert not result.is_valid
    assert [e.type for e in result.errors] == ["required", "min_selections"]
    assert result.errors[0].message == "Please select a crust"

    result = validate_modifier_selections(
        groups, [SelectedModifier(group_id=group_id, modifier_id=uuid4(), price_cents=0)]
    )
    assert result.is_valid
