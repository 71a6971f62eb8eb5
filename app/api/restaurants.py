"""Public restaurant, menu and modifier endpoints"""

from collections import defaultdict
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.delivery.zones import first_active
from app.menu.modifiers import flatten_groups, load_dish_modifier_groups, validate_modifier_selections
from app.models.menu import Dish
from app.models.restaurant import Restaurant
from app.schemas.menu import (
    CustomizationRequest,
    CustomizationResult,
    DishModifiersResponse,
    DishPriceResponse,
    DishResponse,
    MenuResponse,
    RestaurantResponse,
)

router = APIRouter()


async def get_restaurant_by_slug(db: AsyncSession, slug: str) -> Restaurant:
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.slug == slug, Restaurant.is_active == True)
        .options(selectinload(Restaurant.delivery_areas))
    )
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


async def get_restaurant_dish(db: AsyncSession, restaurant: Restaurant, dish_id: UUID) -> Dish:
    result = await db.execute(
        select(Dish).where(
            Dish.id == dish_id,
            Dish.restaurant_id == restaurant.id,
            Dish.is_active == True,
        )
    )
    dish = result.scalar_one_or_none()
    if not dish:
        raise HTTPException(status_code=404, detail="Dish not found")
    return dish


def restaurant_response(restaurant: Restaurant) -> RestaurantResponse:
    area = first_active(restaurant.delivery_areas)
    response = RestaurantResponse.model_validate(restaurant)
    if area:
        response.delivery_fee_cents = area.delivery_fee_cents or 0
        response.min_order_cents = area.min_order_cents or 0
    return response


@router.get("/{slug}", response_model=RestaurantResponse)
async def get_restaurant(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    """Restaurant details with its default delivery terms"""
    restaurant = await get_restaurant_by_slug(db, slug)
    return restaurant_response(restaurant)


@router.get("/{slug}/menu", response_model=MenuResponse)
async def get_menu(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    """Active dishes grouped by category"""
    restaurant = await get_restaurant_by_slug(db, slug)

    result = await db.execute(
        select(Dish)
        .where(Dish.restaurant_id == restaurant.id, Dish.is_active == True)
        .options(selectinload(Dish.prices))
        .order_by(Dish.category, Dish.display_order, Dish.name)
    )

    categories = defaultdict(list)
    for dish in result.scalars().all():
        prices = sorted((p for p in dish.prices if p.is_active), key=lambda p: p.display_order or 0)
        categories[dish.category or "Other"].append(DishResponse(
            id=dish.id,
            name=dish.name,
            description=dish.description,
            category=dish.category,
            image_url=dish.image_url,
            prices=[DishPriceResponse.model_validate(p) for p in prices],
        ))

    return MenuResponse(restaurant=restaurant_response(restaurant), categories=dict(categories))


@router.get("/{slug}/dishes/{dish_id}/modifiers", response_model=DishModifiersResponse)
async def get_dish_modifiers(
    slug: str,
    dish_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Simple and combo modifier groups of a dish"""
    restaurant = await get_restaurant_by_slug(db, slug)
    dish = await get_restaurant_dish(db, restaurant, dish_id)

    groups = await load_dish_modifier_groups(db, dish.id)
    return DishModifiersResponse(dish_id=dish.id, groups=groups, flat=flatten_groups(groups))


@router.post("/{slug}/dishes/{dish_id}/validate-customization", response_model=CustomizationResult)
async def validate_customization(
    slug: str,
    dish_id: UUID,
    request: CustomizationRequest,
    db: AsyncSession = Depends(get_db),
):
    """Check a modifier selection against the dish's group rules"""
    restaurant = await get_restaurant_by_slug(db, slug)
    dish = await get_restaurant_dish(db, restaurant, dish_id)

    groups = await load_dish_modifier_groups(db, dish.id)
    return validate_modifier_selections(flatten_groups(groups), request.modifiers)
