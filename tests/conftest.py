"""Test configuration and fixtures"""

import json
from types import SimpleNamespace
from typing import Dict, List, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.cart.pricing import DiscountType
from app.cart.storage import InMemoryCartStorage, get_cart_storage
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
from app.api.auth import get_password_hash
from app.payments.gateway import (
    CreatedIntent,
    PaymentGateway,
    PaymentIntentInfo,
    WebhookSignatureError,
    get_payment_gateway,
)


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Downtown square around (-75.69, 45.42)
DOWNTOWN = {
    "type": "Polygon",
    "coordinates": [[
        [-75.72, 45.40], [-75.66, 45.40], [-75.66, 45.44], [-75.72, 45.44], [-75.72, 45.40],
    ]],
}


class FakeGateway(PaymentGateway):
    """In-memory payment provider"""

    def __init__(self):
        self.intents: Dict[str, PaymentIntentInfo] = {}
        self.customers: List[dict] = []
        self.created: List[dict] = []

    def add_intent(
        self,
        amount_cents: int,
        metadata: Dict[str, str],
        status: str = "succeeded",
        intent_id: Optional[str] = None,
        currency: str = "cad",
    ) -> PaymentIntentInfo:
        intent = PaymentIntentInfo(
            id=intent_id or f"pi_{uuid4().hex[:24]}",
            status=status,
            amount_cents=amount_cents,
            currency=currency,
            metadata=metadata,
            latest_charge=f"ch_{uuid4().hex[:24]}",
            payment_method_types=["card"],
        )
        self.intents[intent.id] = intent
        return intent

    async def retrieve_intent(self, intent_id: str) -> PaymentIntentInfo:
        return self.intents[intent_id]

    async def create_customer(self, email, name, metadata) -> str:
        self.customers.append({"email": email, "name": name, "metadata": metadata})
        return f"cus_{len(self.customers)}"

    async def create_intent(self, amount_cents, metadata, customer_id=None, shipping=None) -> CreatedIntent:
        self.created.append({
            "amount_cents": amount_cents,
            "metadata": metadata,
            "customer_id": customer_id,
            "shipping": shipping,
        })
        intent = self.add_intent(amount_cents, metadata, status="requires_payment_method")
        return CreatedIntent(id=intent.id, client_secret=f"{intent.id}_secret")

    def parse_webhook(self, payload: bytes, signature: str) -> dict:
        if signature == "bad":
            raise WebhookSignatureError("signature mismatch")
        return json.loads(payload)


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_restaurant(test_db):
    """Create a test restaurant with one delivery zone"""
    restaurant = Restaurant(
        id=uuid4(),
        name="Test Pizzeria",
        slug="test-pizzeria",
        phone="+16135550000",
        city="Ottawa",
    )
    test_db.add(restaurant)
    await test_db.flush()

    test_db.add(DeliveryArea(
        restaurant_id=restaurant.id,
        name="Downtown",
        area_number=1,
        delivery_fee_cents=499,
        min_order_cents=1000,
        geometry=DOWNTOWN,
    ))
    await test_db.commit()

    return restaurant


@pytest.fixture
async def test_menu(test_db, test_restaurant):
    """Pizza with sizes, a simple extras group and a combo toppings section"""
    pizza = Dish(
        id=uuid4(),
        restaurant_id=test_restaurant.id,
        name="Pepperoni Pizza",
        category="Pizza",
    )
    salad = Dish(
        id=uuid4(),
        restaurant_id=test_restaurant.id,
        name="Caesar Salad",
        category="Salads",
    )
    test_db.add_all([pizza, salad])
    await test_db.flush()

    test_db.add_all([
        DishPrice(dish_id=pizza.id, size_variant="Small", price_cents=1299, display_order=0),
        DishPrice(dish_id=pizza.id, size_variant="Large", price_cents=1899, display_order=1),
        DishPrice(dish_id=salad.id, size_variant="Regular", price_cents=1099),
    ])

    extras = ModifierGroup(id=uuid4(), dish_id=pizza.id, name="Extras", max_selections=2)
    test_db.add(extras)
    await test_db.flush()

    cheese = DishModifier(id=uuid4(), modifier_group_id=extras.id, name="Extra Cheese", price_cents=300)
    retired = DishModifier(
        id=uuid4(), modifier_group_id=extras.id, name="Anchovies", price_cents=250, is_active=False
    )
    test_db.add_all([cheese, retired])

    combo = ComboGroup(id=uuid4(), restaurant_id=test_restaurant.id, name="Build your pizza")
    test_db.add(combo)
    await test_db.flush()
    test_db.add(DishComboGroup(dish_id=pizza.id, combo_group_id=combo.id))

    section = ComboGroupSection(
        id=uuid4(),
        combo_group_id=combo.id,
        section_type="custom_ingredients",
        use_header="Toppings",
        free_items=2,
        max_selection=5,
    )
    test_db.add(section)
    await test_db.flush()

    toppings = ComboModifierGroup(id=uuid4(), combo_group_section_id=section.id, name="Toppings")
    test_db.add(toppings)
    await test_db.flush()

    mushrooms = ComboModifier(id=uuid4(), combo_modifier_group_id=toppings.id, name="Mushrooms", price_cents=150)
    olives = ComboModifier(id=uuid4(), combo_modifier_group_id=toppings.id, name="Olives", price_cents=150)
    onions = ComboModifier(id=uuid4(), combo_modifier_group_id=toppings.id, name="Onions", price_cents=150)
    test_db.add_all([mushrooms, olives, onions])
    await test_db.flush()

    for topping in (mushrooms, olives, onions):
        test_db.add(ComboModifierPrice(combo_modifier_id=topping.id, size_variant="Large", price_cents=200))

    await test_db.commit()

    return SimpleNamespace(
        pizza=pizza,
        salad=salad,
        extras=extras,
        cheese=cheese,
        retired=retired,
        combo=combo,
        section=section,
        toppings=toppings,
        mushrooms=mushrooms,
        olives=olives,
        onions=onions,
    )


@pytest.fixture
async def test_promo(test_db, test_restaurant):
    """10% off, no minimum"""
    promo = Promotion(
        id=uuid4(),
        restaurant_id=test_restaurant.id,
        code="WELCOME10",
        description="10% off",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=10,
    )
    test_db.add(promo)
    await test_db.commit()
    return promo


@pytest.fixture
async def test_user(test_db):
    """Create a customer"""
    user = User(
        id=uuid4(),
        email="customer@example.com",
        hashed_password=get_password_hash("testpass123"),
        first_name="Test",
        last_name="Customer",
        role=UserRole.CUSTOMER,
        is_active=True,
        is_verified=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db, test_restaurant):
    """Create a restaurant admin for the test restaurant"""
    user = User(
        id=uuid4(),
        restaurant_id=test_restaurant.id,
        email="owner@example.com",
        hashed_password=get_password_hash("ownerpass123"),
        first_name="Owner",
        role=UserRole.RESTAURANT_ADMIN,
        is_active=True,
        is_verified=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def cart_storage():
    return InMemoryCartStorage("test-cart")


@pytest.fixture
def queued_emails(monkeypatch):
    """Capture confirmation emails instead of reaching the broker"""
    queued = []

    def fake_enqueue(order_id, email):
        queued.append((str(order_id), email))
        return True

    monkeypatch.setattr("app.api.checkout.enqueue_order_confirmation", fake_enqueue)
    return queued


@pytest.fixture
async def client(test_db, fake_gateway, cart_storage, queued_emails):
    """Create test client with overridden database, gateway and cart storage"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_cart_storage] = lambda: cart_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create customer authenticated test client"""
    from app.api.auth import create_access_token

    token = create_access_token(test_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create restaurant admin authenticated test client"""
    from app.api.auth import create_access_token

    token = create_access_token(test_admin_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client
