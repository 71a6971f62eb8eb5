"""Checkout failures, each mapped to an HTTP status"""

from typing import Any, Dict, Optional
from uuid import UUID


class CheckoutError(Exception):
    """Base class for checkout failures"""
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message}
        body.update({k: str(v) if isinstance(v, UUID) else v for k, v in self.extra.items()})
        return body


class InvalidCheckout(CheckoutError):
    """Malformed request, bad quantity, unknown size or modifier, total mismatch"""
    status_code = 400


class PaymentMismatch(CheckoutError):
    """Payment does not belong to the caller"""
    status_code = 401


class CatalogNotFound(CheckoutError):
    """Unknown restaurant or dish"""
    status_code = 404


class DuplicateOrder(CheckoutError):
    """Transaction reference already consumed by an order"""
    status_code = 409

    def __init__(self, message: str, order_id: Optional[UUID] = None):
        super().__init__(message, order_id=order_id)
        self.order_id = order_id


class PaymentProviderError(CheckoutError):
    """Payment provider unreachable or returned an error"""
    status_code = 502
