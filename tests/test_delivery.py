"""Tests for delivery zone geometry and lookup"""

from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from app.delivery.zones import (
    find_matching_zone,
    first_active,
    point_in_geometry,
    point_in_polygon,
    point_in_ring,
)

SQUARE = [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]
HOLE = [[4, 4], [6, 4], [6, 6], [4, 6], [4, 4]]


def test_point_in_ring():
    assert point_in_ring((5, 5), SQUARE)
    assert not point_in_ring((15, 5), SQUARE)
    assert not point_in_ring((5, 5), [[0, 0], [1, 1]])


def test_hole_is_outside():
    assert point_in_polygon((2, 2), [SQUARE, HOLE])
    assert not point_in_polygon((5, 5), [SQUARE, HOLE])


def test_multipolygon():
    far_square = [[20, 20], [30, 20], [30, 30], [20, 30], [20, 20]]
    geometry = {"type": "MultiPolygon", "coordinates": [[SQUARE], [far_square]]}

    assert point_in_geometry((25, 25), geometry)
    assert not point_in_geometry((15, 15), geometry)


def test_unsupported_or_empty_geometry():
    assert not point_in_geometry((5, 5), None)
    assert not point_in_geometry((5, 5), {"type": "Polygon", "coordinates": []})
    assert not point_in_geometry((5, 5), {"type": "Point", "coordinates": [5, 5]})


def test_first_matching_zone_wins():
    inner = SimpleNamespace(name="inner", geometry={"type": "Polygon", "coordinates": [SQUARE]})
    outer = SimpleNamespace(
        name="outer",
        geometry={"type": "Polygon", "coordinates": [[[-10, -10], [20, -10], [20, 20], [-10, 20], [-10, -10]]]},
    )
    no_geometry = SimpleNamespace(name="none", geometry=None)

    assert find_matching_zone((5, 5), [no_geometry, inner, outer]).name == "inner"
    assert find_matching_zone((15, 15), [inner, outer]).name == "outer"
    assert find_matching_zone((50, 50), [inner, outer]) is None


def test_first_active():
    zones = [SimpleNamespace(name="a", is_active=False), SimpleNamespace(name="b", is_active=True)]

    assert first_active(zones).name == "b"
    assert first_active([]) is None


@pytest.mark.asyncio
async def test_validate_delivery_endpoint(client: AsyncClient, test_restaurant):
    response = await client.get(
        "/delivery/validate",
        params={"restaurant_id": str(test_restaurant.id), "lat": 45.42, "lng": -75.69},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["has_delivery_zones"] is True
    assert data["is_within_delivery_area"] is True
    assert data["matched_zone"]["delivery_fee_cents"] == 499

    response = await client.get(
        "/delivery/validate",
        params={"restaurant_id": str(test_restaurant.id), "lat": 43.65, "lng": -79.38},
    )
    data = response.json()
    assert data["is_within_delivery_area"] is False
    assert data["matched_zone"] is None


@pytest.mark.asyncio
async def test_validate_delivery_bad_coordinates(client: AsyncClient, test_restaurant):
    response = await client.get(
        "/delivery/validate",
        params={"restaurant_id": str(test_restaurant.id), "lat": 123, "lng": -75.69},
    )

    assert response.status_code == 422
