"""Transactional email through the Resend HTTP API"""

from html import escape
from typing import List, Optional

import httpx
import structlog
from pydantic import BaseModel

from app.config import settings

logger = structlog.get_logger()


class ConfirmationLine(BaseModel):
    name: str
    size: Optional[str] = None
    quantity: int
    subtotal_cents: int


class OrderConfirmation(BaseModel):
    """Everything shown in an order confirmation email"""
    order_id: str
    customer_email: str
    restaurant_name: str
    restaurant_logo_url: Optional[str] = None
    order_type: str
    lines: List[ConfirmationLine]
    subtotal_cents: int
    discount_cents: int = 0
    delivery_fee_cents: int = 0
    tax_cents: int
    total_cents: int
    payment_method: str
    delivery_address: Optional[str] = None


def format_cents(cents: int) -> str:
    return f"${cents // 100}.{cents % 100:02d}"


def render_order_confirmation(confirmation: OrderConfirmation) -> str:
    rows = "".join(
        f"<tr><td>{line.quantity} x {escape(line.name)}"
        f"{' (' + escape(line.size) + ')' if line.size else ''}</td>"
        f"<td align=\"right\">{format_cents(line.subtotal_cents)}</td></tr>"
        for line in confirmation.lines
    )

    totals = [("Subtotal", confirmation.subtotal_cents)]
    if confirmation.discount_cents:
        totals.append(("Discount", -confirmation.discount_cents))
    if confirmation.order_type == "delivery":
        totals.append(("Delivery", confirmation.delivery_fee_cents))
    totals.append(("Tax (HST)", confirmation.tax_cents))
    totals.append(("Total", confirmation.total_cents))

    total_rows = "".join(
        f"<tr><td>{label}</td><td align=\"right\">"
        f"{'-' if cents < 0 else ''}{format_cents(abs(cents))}</td></tr>"
        for label, cents in totals
    )

    address = ""
    if confirmation.delivery_address:
        address = f"<p>Delivering to: {escape(confirmation.delivery_address)}</p>"

    return (
        f"<h1>Thanks for your order from {escape(confirmation.restaurant_name)}</h1>"
        f"<p>Order #{escape(confirmation.order_id)}</p>"
        f"<table width=\"100%\">{rows}{total_rows}</table>"
        f"{address}"
        f"<p>Payment: {escape(confirmation.payment_method)}</p>"
    )


async def send_order_confirmation_email(confirmation: OrderConfirmation) -> Optional[str]:
    """Send the confirmation; returns the provider message id, None when email is disabled"""
    if not settings.resend_api_key:
        logger.info("Email disabled, skipping confirmation", order_id=confirmation.order_id)
        return None

    payload = {
        "from": settings.resend_from_email,
        "to": [confirmation.customer_email],
        "subject": f"Order confirmed - {confirmation.restaurant_name}",
        "html": render_order_confirmation(confirmation),
    }

    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.post(
            settings.resend_api_url,
            json=payload,
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
        )
        response.raise_for_status()
        data = response.json()

    logger.info("Confirmation email sent", order_id=confirmation.order_id, message_id=data.get("id"))
    return data.get("id")
