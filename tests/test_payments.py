"""Tests for payment intent creation and the Stripe gateway"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.user import User
from app.payments.gateway import StripeGateway, WebhookSignatureError


@pytest.mark.asyncio
async def test_customer_intent_carries_user_id(
    authenticated_client: AsyncClient, test_db, test_user, test_restaurant, fake_gateway
):
    response = await authenticated_client.post(
        "/payments/intents",
        json={"amount_cents": 5533, "restaurant_slug": "test-pizzeria"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["client_secret"].startswith(data["payment_intent_id"])

    created = fake_gateway.created[0]
    assert created["metadata"] == {
        "user_id": str(test_user.id),
        "restaurant_slug": "test-pizzeria",
        "country": "CA",
    }
    assert created["customer_id"] == "cus_1"

    result = await test_db.execute(select(User).where(User.id == test_user.id))
    assert result.scalar_one().stripe_customer_id == "cus_1"

    # The stored customer is reused
    await authenticated_client.post(
        "/payments/intents",
        json={"amount_cents": 1000, "restaurant_slug": "test-pizzeria"},
    )
    assert len(fake_gateway.customers) == 1


@pytest.mark.asyncio
async def test_guest_intent_carries_email_and_shipping(client: AsyncClient, test_restaurant, fake_gateway):
    response = await client.post(
        "/payments/intents",
        json={
            "amount_cents": 2500,
            "restaurant_slug": "test-pizzeria",
            "guest_email": "guest@example.com",
            "guest_name": "Guest",
            "delivery_address": {"street_address": "100 Bank St", "city": "Ottawa"},
        },
    )

    assert response.status_code == 200
    created = fake_gateway.created[0]
    assert created["metadata"]["user_id"] == "guest"
    assert created["metadata"]["guest_email"] == "guest@example.com"
    assert created["shipping"] == {
        "name": "Guest",
        "address": {"line1": "100 Bank St", "city": "Ottawa", "state": "ON", "country": "CA"},
    }


@pytest.mark.asyncio
async def test_guest_intent_requires_email(client: AsyncClient, test_restaurant):
    response = await client.post(
        "/payments/intents",
        json={"amount_cents": 2500, "restaurant_slug": "test-pizzeria"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_intent_for_unknown_restaurant(client: AsyncClient, test_restaurant):
    response = await client.post(
        "/payments/intents",
        json={"amount_cents": 2500, "restaurant_slug": "nowhere", "guest_email": "guest@example.com"},
    )

    assert response.status_code == 404


def test_webhook_without_secret_is_decoded():
    gateway = StripeGateway(api_key="sk_test", webhook_secret="")
    event = gateway.parse_webhook(json.dumps({"id": "evt_1", "type": "charge.refunded"}).encode(), "sig")

    assert event["id"] == "evt_1"


def test_webhook_with_bad_signature_is_rejected():
    gateway = StripeGateway(api_key="sk_test", webhook_secret="whsec_test")

    with pytest.raises(WebhookSignatureError):
        gateway.parse_webhook(b'{"id": "evt_1"}', "t=1,v1=deadbeef")
