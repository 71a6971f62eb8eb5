"""Tests for restaurant order management"""

from uuid import uuid4

import pytest
from httpx import AsyncClient


async def place_cash_order(client: AsyncClient, menu):
    response = await client.post(
        "/orders/cash",
        json={
            "payment_type": "cash",
            "restaurant_slug": "test-pizzeria",
            "order_type": "pickup",
            "guest_email": "guest@example.com",
            "cart_items": [{"dish_id": str(menu.salad.id), "size": "Regular", "quantity": 1}],
        },
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_list_orders(admin_client: AsyncClient, test_restaurant, test_menu):
    await place_cash_order(admin_client, test_menu)
    await place_cash_order(admin_client, test_menu)

    response = await admin_client.get(
        f"/restaurants/{test_restaurant.id}/orders", params={"page_size": 1}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert len(data["items"]) == 1

    response = await admin_client.get(
        f"/restaurants/{test_restaurant.id}/orders", params={"status": "completed"}
    )
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_status_update_appends_history(admin_client: AsyncClient, test_restaurant, test_menu):
    order = await place_cash_order(admin_client, test_menu)

    response = await admin_client.post(
        f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status",
        json={"status": "confirmed", "notes": "Ready in 20 minutes"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "confirmed"
    assert [e["status"] for e in data["status_history"]] == ["pending", "confirmed"]
    assert data["status_history"][1]["notes"] == "Ready in 20 minutes"


@pytest.mark.asyncio
async def test_unknown_status_is_rejected(admin_client: AsyncClient, test_restaurant, test_menu):
    order = await place_cash_order(admin_client, test_menu)

    response = await admin_client.post(
        f"/restaurants/{test_restaurant.id}/orders/{order['id']}/status",
        json={"status": "lost"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_other_restaurant_is_forbidden(admin_client: AsyncClient, test_restaurant):
    response = await admin_client.get(f"/restaurants/{uuid4()}/orders")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_customer_cannot_manage_orders(authenticated_client: AsyncClient, test_restaurant):
    response = await authenticated_client.get(f"/restaurants/{test_restaurant.id}/orders")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_order(admin_client: AsyncClient, test_restaurant):
    response = await admin_client.post(
        f"/restaurants/{test_restaurant.id}/orders/{uuid4()}/status",
        json={"status": "confirmed"},
    )

    assert response.status_code == 404
