#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with a priced menu
"""

import asyncio
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SIZES = [("Small", 0), ("Medium", 300), ("Large", 600)]


async def seed_demo_data():
    """Seed demo data for development"""
    from app.database import SessionLocal, engine, Base
    from app.cart.pricing import DiscountType
    from app.models.restaurant import Restaurant, DeliveryArea
    from app.models.menu import (
        Dish,
        DishPrice,
        ModifierGroup,
        DishModifier,
        ComboGroup,
        DishComboGroup,
        ComboGroupSection,
        ComboModifierGroup,
        ComboModifier,
        ComboModifierPrice,
    )
    from app.models.promotion import Promotion
    from app.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        from sqlalchemy import select
        result = await db.execute(
            select(Restaurant).where(Restaurant.slug == "marios-kitchen")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            id=uuid.uuid4(),
            name="Mario's Kitchen",
            slug="marios-kitchen",
            timezone="America/Toronto",
            phone="+16135551234",
            address="123 Bank Street",
            city="Ottawa",
            province="ON",
            postal_code="K1P 5N2",
        )
        db.add(restaurant)
        await db.flush()

        print(f"Created restaurant: {restaurant.name} (ID: {restaurant.id})")

        # Downtown zone, then a wider zone with a higher fee
        db.add(DeliveryArea(
            restaurant_id=restaurant.id,
            name="Downtown",
            area_number=1,
            delivery_fee_cents=299,
            min_order_cents=1500,
            geometry={
                "type": "Polygon",
                "coordinates": [[
                    [-75.72, 45.40], [-75.66, 45.40], [-75.66, 45.44],
                    [-75.72, 45.44], [-75.72, 45.40],
                ]],
            },
        ))
        db.add(DeliveryArea(
            restaurant_id=restaurant.id,
            name="Greater Ottawa",
            area_number=2,
            delivery_fee_cents=599,
            min_order_cents=2500,
            geometry={
                "type": "Polygon",
                "coordinates": [[
                    [-75.85, 45.30], [-75.55, 45.30], [-75.55, 45.50],
                    [-75.85, 45.50], [-75.85, 45.30],
                ]],
            },
        ))

        # Super admin and restaurant admin users
        db.add(User(
            id=uuid.uuid4(),
            email="admin@menu.ca",
            hashed_password=pwd_context.hash("admin123"),
            first_name="System",
            last_name="Admin",
            role=UserRole.SUPER_ADMIN,
            is_active=True,
            is_verified=True,
        ))
        db.add(User(
            id=uuid.uuid4(),
            restaurant_id=restaurant.id,
            email="mario@marios-kitchen.ca",
            hashed_password=pwd_context.hash("mario123"),
            first_name="Mario",
            last_name="Rossi",
            role=UserRole.RESTAURANT_ADMIN,
            is_active=True,
            is_verified=True,
        ))

        print("Creating menu...")

        dishes = [
            {"name": "Margherita Pizza", "description": "Fresh mozzarella, tomato sauce, and basil", "base_cents": 1299, "category": "Pizza", "toppings": True},
            {"name": "Pepperoni Pizza", "description": "Classic pepperoni with mozzarella cheese", "base_cents": 1499, "category": "Pizza", "toppings": True},
            {"name": "Vegetable Pizza", "description": "Peppers, onions, mushrooms and olives", "base_cents": 1499, "category": "Pizza", "toppings": True},
            {"name": "Caesar Salad", "description": "Romaine, parmesan, croutons, caesar dressing", "base_cents": 1099, "category": "Salads"},
            {"name": "Garlic Bread", "description": "Toasted bread with garlic butter and herbs", "base_cents": 599, "category": "Sides"},
            {"name": "Tiramisu", "description": "Classic Italian coffee-flavored dessert", "base_cents": 899, "category": "Desserts"},
        ]

        pizzas = []
        for position, dish_data in enumerate(dishes):
            dish = Dish(
                restaurant_id=restaurant.id,
                name=dish_data["name"],
                description=dish_data["description"],
                category=dish_data["category"],
                display_order=position,
            )
            db.add(dish)
            await db.flush()

            if dish_data.get("toppings"):
                pizzas.append(dish)
                for order, (size, extra) in enumerate(SIZES):
                    db.add(DishPrice(
                        dish_id=dish.id,
                        size_variant=size,
                        price_cents=dish_data["base_cents"] + extra,
                        display_order=order,
                    ))

                group = ModifierGroup(dish_id=dish.id, name="Extras", max_selections=3)
                db.add(group)
                await db.flush()
                db.add(DishModifier(
                    modifier_group_id=group.id,
                    name="Extra Cheese",
                    price_cents=300,
                    placements=["whole", "left", "right"],
                ))
                db.add(DishModifier(
                    modifier_group_id=group.id,
                    name="Well Done",
                    price_cents=0,
                    display_order=1,
                ))
            else:
                db.add(DishPrice(
                    dish_id=dish.id,
                    size_variant="Regular",
                    price_cents=dish_data["base_cents"],
                ))

        # Pizza combo: 3 free toppings, size-priced afterwards
        combo = ComboGroup(
            restaurant_id=restaurant.id,
            name="Build your pizza",
            number_of_items=1,
            display_header="Choose your toppings",
        )
        db.add(combo)
        await db.flush()

        section = ComboGroupSection(
            combo_group_id=combo.id,
            section_type="custom_ingredients",
            use_header="Toppings",
            free_items=3,
            max_selection=8,
        )
        db.add(section)
        await db.flush()

        toppings = ComboModifierGroup(combo_group_section_id=section.id, name="Toppings", type_code="ci")
        db.add(toppings)
        await db.flush()

        for order, name in enumerate(["Mushrooms", "Green Peppers", "Onions", "Olives", "Bacon", "Sausage"]):
            topping = ComboModifier(
                combo_modifier_group_id=toppings.id,
                name=name,
                price_cents=150,
                placements=["whole", "left", "right"],
                display_order=order,
            )
            db.add(topping)
            await db.flush()
            for size, cents in (("Small", 125), ("Medium", 150), ("Large", 200)):
                db.add(ComboModifierPrice(combo_modifier_id=topping.id, size_variant=size, price_cents=cents))

        for pizza in pizzas:
            db.add(DishComboGroup(dish_id=pizza.id, combo_group_id=combo.id))

        db.add(Promotion(
            restaurant_id=restaurant.id,
            code="WELCOME10",
            description="10% off your first order",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=10,
            min_order_cents=2000,
        ))
        db.add(Promotion(
            restaurant_id=restaurant.id,
            code="FREEDELIVERY",
            description="Free delivery on any order",
            discount_type=DiscountType.FREE_DELIVERY,
            discount_value=0,
            delivery_only=True,
        ))

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: Mario's Kitchen
  ID: {restaurant.id}
  Slug: marios-kitchen

Users:
  Super Admin:
    Email: admin@menu.ca
    Password: admin123

  Restaurant Admin:
    Email: mario@marios-kitchen.ca
    Password: mario123

Menu: {len(dishes)} dishes created
Promo codes: WELCOME10, FREEDELIVERY
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
