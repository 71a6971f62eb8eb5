"""Tests for customer signup and authentication"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_signup_and_login(client: AsyncClient):
    response = await client.post(
        "/auth/signup",
        json={
            "email": "New.Customer@example.com",
            "password": "longenough",
            "first_name": "New",
            "last_name": "Customer",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new.customer@example.com"
    assert data["role"] == "customer"

    response = await client.post(
        "/auth/login",
        data={"username": "NEW.customer@example.com", "password": "longenough"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["first_name"] == "New"


@pytest.mark.asyncio
async def test_duplicate_signup(client: AsyncClient, test_user):
    response = await client.post(
        "/auth/signup",
        json={"email": "customer@example.com", "password": "longenough"},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_short_password_is_rejected(client: AsyncClient):
    response = await client.post(
        "/auth/signup",
        json={"email": "short@example.com", "password": "short"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_wrong_password(client: AsyncClient, test_user):
    response = await client.post(
        "/auth/login",
        data={"username": "customer@example.com", "password": "wrong"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token_is_rejected_at_checkout(client: AsyncClient):
    response = await client.post(
        "/orders/cash",
        json={"payment_type": "cash", "cart_items": []},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, test_user):
    response = await client.post(
        "/auth/login",
        data={"username": "customer@example.com", "password": "testpass123"},
    )
    refresh = response.json()["refresh_token"]

    response = await client.post("/auth/refresh", json={"refresh_token": refresh})
    assert response.status_code == 200
    assert response.json()["access_token"]

    response = await client.post("/auth/refresh", json={"refresh_token": "garbage"})
    assert response.status_code == 401
