"""Shopping cart API endpoints

Totals returned here are for display only; checkout re-prices everything.
"""

from typing import Callable

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.cart.storage import CartStorage, get_cart_storage
from app.cart.store import CartStore
from app.config import settings
from app.schemas.cart import (
    AppliedPromo,
    CartItemCreate,
    CartResponse,
    CartState,
    OrderTypeUpdate,
    QuantityUpdate,
    RestaurantSelect,
    ServiceTime,
)

logger = structlog.get_logger()

router = APIRouter()


def _response(cart_id: str, state: CartState) -> CartResponse:
    store = CartStore(state, tax_rate_percent=settings.tax_rate_percent)
    return CartResponse(cart_id=cart_id, state=store.state, totals=store.totals())


async def _update(cart_id: str, storage: CartStorage, change: Callable[[CartStore], None]) -> CartResponse:
    """Apply ``change`` to the stored cart atomically and return the result"""
    def apply(state: CartState) -> CartState:
        store = CartStore(state, tax_rate_percent=settings.tax_rate_percent)
        change(store)
        return store.state

    return _response(cart_id, await storage.update(cart_id, apply))


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(
    cart_id: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Get a cart with its totals"""
    return _response(cart_id, await storage.load(cart_id))


@router.delete("/{cart_id}", response_model=CartResponse)
async def clear_cart(
    cart_id: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Remove all items and the promo, keeping the order type"""
    return await _update(cart_id, storage, lambda store: store.clear())


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_item(
    cart_id: str,
    item: CartItemCreate,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Add an item; an identical line has its quantity increased"""
    response = await _update(cart_id, storage, lambda store: store.add_item(item))
    logger.info("Cart item added", cart_id=cart_id, dish_id=str(item.dish_id), quantity=item.quantity)
    return response


@router.patch("/{cart_id}/items/{key}", response_model=CartResponse)
async def update_item_quantity(
    cart_id: str,
    key: str,
    update: QuantityUpdate,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Change a line's quantity; zero or less removes it"""
    def change(store: CartStore) -> None:
        if not any(item.key == key for item in store.state.items):
            raise HTTPException(status_code=404, detail="Cart item not found")
        store.update_quantity(key, update.quantity)

    return await _update(cart_id, storage, change)


@router.delete("/{cart_id}/items/{key}", response_model=CartResponse)
async def remove_item(
    cart_id: str,
    key: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    return await _update(cart_id, storage, lambda store: store.remove_item(key))


@router.put("/{cart_id}/order_type", response_model=CartResponse)
async def set_order_type(
    cart_id: str,
    update: OrderTypeUpdate,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Switch between delivery and pickup; resets the service time to ASAP"""
    return await _update(cart_id, storage, lambda store: store.set_order_type(update.order_type))


@router.put("/{cart_id}/service_time", response_model=CartResponse)
async def set_service_time(
    cart_id: str,
    service_time: ServiceTime,
    storage: CartStorage = Depends(get_cart_storage),
):
    if service_time.type == "scheduled" and service_time.scheduled_time is None:
        raise HTTPException(status_code=400, detail="Scheduled service needs a time")
    return await _update(cart_id, storage, lambda store: store.set_service_time(service_time))


@router.put("/{cart_id}/restaurant", response_model=CartResponse)
async def set_restaurant(
    cart_id: str,
    selection: RestaurantSelect,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Point the cart at a restaurant.

    If the cart holds items from another restaurant the switch clears them,
    which the client must approve with ``confirm_clear``.
    """
    def change(store: CartStore) -> None:
        switched = store.set_restaurant(
            selection.restaurant_id,
            selection.restaurant_name,
            selection.restaurant_slug,
            selection.delivery_fee_cents,
            selection.min_order_cents,
            confirm=lambda current, new: selection.confirm_clear,
        )
        if not switched:
            raise HTTPException(
                status_code=409,
                detail=f"Cart has items from {store.state.restaurant_name}; confirm to clear it",
            )

    return await _update(cart_id, storage, change)


@router.put("/{cart_id}/promo", response_model=CartResponse)
async def apply_promo(
    cart_id: str,
    promo: AppliedPromo,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Apply a promo, replacing any promo already applied"""
    return await _update(cart_id, storage, lambda store: store.apply_promo(promo))


@router.delete("/{cart_id}/promo", response_model=CartResponse)
async def clear_promo(
    cart_id: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    return await _update(cart_id, storage, lambda store: store.clear_promo())
