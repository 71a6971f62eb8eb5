"""Cart persistence backends, keyed by a stable store name"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

import structlog
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import WatchError

from app.config import settings
from app.schemas.cart import CartState

logger = structlog.get_logger()


class CartStorage(ABC):
    """Abstract base class for cart storage"""

    def __init__(self, name: str = settings.cart_store_name):
        self.name = name
        self._locks: Dict[str, asyncio.Lock] = {}

    def key_for(self, cart_id: str) -> str:
        return f"{self.name}:{cart_id}"

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def _write(self, key: str, payload: str) -> None:
        pass

    @abstractmethod
    async def _remove(self, key: str) -> None:
        pass

    def parse(self, cart_id: str, payload: Optional[str]) -> CartState:
        """Unknown or unreadable carts start empty"""
        if not payload:
            return CartState()
        try:
            return CartState.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Discarding unreadable cart", cart_id=cart_id, error=str(e))
            return CartState()

    async def load(self, cart_id: str) -> CartState:
        return self.parse(cart_id, await self._read(self.key_for(cart_id)))

    async def save(self, cart_id: str, state: CartState) -> None:
        await self._write(self.key_for(cart_id), state.model_dump_json())

    async def delete(self, cart_id: str) -> None:
        await self._remove(self.key_for(cart_id))

    async def update(self, cart_id: str, change: Callable[[CartState], CartState]) -> CartState:
        """Load, change and save a cart with no other update of it in between.

        Updates of one cart are serialised within this process. ``change`` may raise
        to abort, in which case nothing is written.
        """
        lock = self._locks.setdefault(cart_id, asyncio.Lock())
        async with lock:
            state = change(await self.load(cart_id))
            await self.save(cart_id, state)
            return state


class InMemoryCartStorage(CartStorage):
    """Process-local storage, used in tests and single-process development"""

    def __init__(self, name: str = settings.cart_store_name):
        super().__init__(name)
        self._data: Dict[str, str] = {}

    async def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def _write(self, key: str, payload: str) -> None:
        self._data[key] = payload

    async def _remove(self, key: str) -> None:
        self._data.pop(key, None)


class RedisCartStorage(CartStorage):
    """Redis-backed storage with a sliding expiry"""

    def __init__(
        self,
        client: Redis,
        name: str = settings.cart_store_name,
        ttl_seconds: int = settings.cart_ttl_seconds,
    ):
        super().__init__(name)
        self.client = client
        self.ttl_seconds = ttl_seconds

    async def _read(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def _write(self, key: str, payload: str) -> None:
        await self.client.set(key, payload, ex=self.ttl_seconds)

    async def _remove(self, key: str) -> None:
        await self.client.delete(key)

    async def update(self, cart_id: str, change: Callable[[CartState], CartState]) -> CartState:
        """Optimistic update: the write is retried if another writer touched the cart"""
        key = self.key_for(cart_id)
        async with self.client.pipeline(transaction=True) as pipe:
            while True:
                try:
                    await pipe.watch(key)
                    state = change(self.parse(cart_id, await pipe.get(key)))
                    pipe.multi()
                    pipe.set(key, state.model_dump_json(), ex=self.ttl_seconds)
                    await pipe.execute()
                    return state
                except WatchError:
                    logger.info("Cart changed during update, retrying", cart_id=cart_id)


_storage: Optional[CartStorage] = None


def get_cart_storage() -> CartStorage:
    """FastAPI dependency returning the shared cart storage"""
    global _storage
    if _storage is None:
        client = Redis.from_url(settings.redis_url, decode_responses=True)
        _storage = RedisCartStorage(client)
    return _storage
