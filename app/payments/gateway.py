"""Payment provider access (Stripe)"""

import json
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import stripe
import structlog
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from app.checkout.errors import PaymentProviderError
from app.config import settings

logger = structlog.get_logger()


class PaymentIntentInfo(BaseModel):
    """The parts of a payment intent checkout relies on"""
    id: str
    status: str
    amount_cents: int
    currency: str
    metadata: Dict[str, str] = {}
    latest_charge: Optional[str] = None
    payment_method_types: List[str] = []


class CreatedIntent(BaseModel):
    id: str
    client_secret: str


class WebhookSignatureError(Exception):
    """Webhook payload could not be verified"""


class PaymentGateway(ABC):
    """Abstract payment provider"""

    @abstractmethod
    async def retrieve_intent(self, intent_id: str) -> PaymentIntentInfo:
        pass

    @abstractmethod
    async def create_customer(self, email: Optional[str], name: Optional[str], metadata: Dict[str, str]) -> str:
        pass

    @abstractmethod
    async def create_intent(
        self,
        amount_cents: int,
        metadata: Dict[str, str],
        customer_id: Optional[str] = None,
        shipping: Optional[dict] = None,
    ) -> CreatedIntent:
        pass

    @abstractmethod
    def parse_webhook(self, payload: bytes, signature: str) -> dict:
        pass


def _plain_metadata(metadata) -> Dict[str, str]:
    if not metadata:
        return {}
    return {key: str(metadata[key]) for key in metadata.keys()}


class StripeGateway(PaymentGateway):
    """Stripe implementation; SDK calls are blocking and run in the threadpool"""

    def __init__(
        self,
        api_key: str = settings.stripe_secret_key,
        webhook_secret: str = settings.stripe_webhook_secret,
        currency: str = settings.stripe_currency,
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    async def retrieve_intent(self, intent_id: str) -> PaymentIntentInfo:
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.retrieve, intent_id, api_key=self.api_key
            )
        except stripe.StripeError as e:
            logger.error("Stripe intent lookup failed", intent_id=intent_id[:20], error=str(e))
            raise PaymentProviderError("Could not verify payment with the payment provider")

        return PaymentIntentInfo(
            id=intent.id,
            status=intent.status,
            amount_cents=intent.amount,
            currency=intent.currency,
            metadata=_plain_metadata(intent.metadata),
            latest_charge=intent.latest_charge if isinstance(intent.latest_charge, str) else None,
            payment_method_types=list(intent.payment_method_types or []),
        )

    async def create_customer(self, email: Optional[str], name: Optional[str], metadata: Dict[str, str]) -> str:
        try:
            customer = await run_in_threadpool(
                stripe.Customer.create,
                email=email,
                name=name,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error("Stripe customer creation failed", error=str(e))
            raise PaymentProviderError("Could not create payment customer")
        return customer.id

    async def create_intent(
        self,
        amount_cents: int,
        metadata: Dict[str, str],
        customer_id: Optional[str] = None,
        shipping: Optional[dict] = None,
    ) -> CreatedIntent:
        params = {
            "amount": amount_cents,
            "currency": self.currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
            "api_key": self.api_key,
        }
        if customer_id:
            params["customer"] = customer_id
        if shipping:
            params["shipping"] = shipping

        try:
            intent = await run_in_threadpool(stripe.PaymentIntent.create, **params)
        except stripe.StripeError as e:
            logger.error("Stripe intent creation failed", error=str(e))
            raise PaymentProviderError("Could not create payment")

        return CreatedIntent(id=intent.id, client_secret=intent.client_secret)

    def parse_webhook(self, payload: bytes, signature: str) -> dict:
        """Verify the signature when a secret is configured and decode the event"""
        if self.webhook_secret:
            try:
                stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
            except (ValueError, stripe.SignatureVerificationError) as e:
                raise WebhookSignatureError(str(e))
        try:
            return json.loads(payload)
        except ValueError as e:
            raise WebhookSignatureError(str(e))


_gateway: Optional[PaymentGateway] = None


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency returning the configured gateway"""
    global _gateway
    if _gateway is None:
        _gateway = StripeGateway()
    return _gateway
