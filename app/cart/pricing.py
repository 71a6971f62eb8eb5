"""
Order pricing rules shared by the cart and the checkout validator.

All amounts are integer cents. Percentages are rounded half-up to the cent,
tax is truncated to the cent.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

DEFAULT_TAX_RATE_PERCENT = 13  # Ontario HST


class DiscountType(str, enum.Enum):
    """Kinds of discount a promo code can grant"""
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_DELIVERY = "free_delivery"
    FREE_ITEM = "free_item"


class OrderType(str, enum.Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


@dataclass(frozen=True)
class PriceBreakdown:
    """Totals for one cart or order"""
    subtotal_cents: int
    discount_cents: int
    delivery_fee_cents: int  # effective fee actually charged
    tax_cents: int
    total_cents: int


def percent_of(amount_cents: int, percent) -> int:
    """Percentage of an amount, rounded half-up to the cent"""
    value = Decimal(amount_cents) * Decimal(str(percent)) / Decimal(100)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def modifier_units(quantity: Optional[int] = None, paid_quantity: Optional[int] = None) -> int:
    """Number of modifier units that are charged for"""
    if paid_quantity is not None:
        return max(paid_quantity, 0)
    if quantity is not None:
        return max(quantity, 0)
    return 1


def line_subtotal(size_price_cents: int, modifiers: Iterable[Tuple[int, int]], quantity: int) -> int:
    """(size price + sum of modifier price x charged units) x quantity

    ``modifiers`` yields ``(price_cents, charged_units)`` pairs.
    """
    modifier_total = sum(price * units for price, units in modifiers)
    return (size_price_cents + modifier_total) * quantity


def effective_delivery_fee(
    base_fee_cents: int,
    order_type: OrderType,
    discount_type: Optional[DiscountType] = None,
) -> int:
    """Delivery fee actually charged: nothing on pickup or with free delivery"""
    if order_type != OrderType.DELIVERY:
        return 0
    if discount_type == DiscountType.FREE_DELIVERY:
        return 0
    return base_fee_cents


def compute_discount(
    subtotal_cents: int,
    discount_type: Optional[DiscountType],
    discount_value: int,
    base_fee_cents: int,
    order_type: OrderType,
) -> int:
    """Discount granted by a single promo"""
    if discount_type is None:
        return 0

    if discount_type == DiscountType.PERCENTAGE:
        return min(percent_of(subtotal_cents, discount_value), subtotal_cents)

    if discount_type == DiscountType.FIXED_AMOUNT:
        return min(discount_value, subtotal_cents)

    if discount_type == DiscountType.FREE_DELIVERY:
        return base_fee_cents if order_type == OrderType.DELIVERY else 0

    if discount_type == DiscountType.FREE_ITEM:
        return discount_value

    return 0


def compute_tax(taxable_cents: int, tax_rate_percent: int = DEFAULT_TAX_RATE_PERCENT) -> int:
    """Tax on a taxable amount, truncated to the cent"""
    if taxable_cents <= 0:
        return 0
    return taxable_cents * tax_rate_percent // 100


def price_order(
    subtotal_cents: int,
    base_fee_cents: int,
    order_type: OrderType,
    discount_type: Optional[DiscountType] = None,
    discount_value: int = 0,
    tax_rate_percent: int = DEFAULT_TAX_RATE_PERCENT,
) -> PriceBreakdown:
    """Compute discount, fee, tax and total for a subtotal.

    A free-delivery discount is carried by the zero effective fee, so it is
    excluded from the taxable and total discount terms.
    """
    discount = compute_discount(subtotal_cents, discount_type, discount_value, base_fee_cents, order_type)
    fee = effective_delivery_fee(base_fee_cents, order_type, discount_type)

    non_delivery_discount = 0 if discount_type == DiscountType.FREE_DELIVERY else discount

    tax = compute_tax(subtotal_cents - non_delivery_discount + fee, tax_rate_percent)
    total = max(subtotal_cents + fee - non_delivery_discount + tax, 0)

    return PriceBreakdown(
        subtotal_cents=subtotal_cents,
        discount_cents=discount,
        delivery_fee_cents=fee,
        tax_cents=tax,
        total_cents=total,
    )
