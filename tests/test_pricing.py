"""Tests for order pricing rules"""

from app.cart.pricing import (
    DiscountType,
    OrderType,
    compute_discount,
    compute_tax,
    effective_delivery_fee,
    line_subtotal,
    modifier_units,
    percent_of,
    price_order,
)


def test_line_subtotal_includes_modifiers_per_unit():
    # (1899 + 300) x 2
    assert line_subtotal(1899, [(300, 1)], 2) == 4398


def test_line_subtotal_charges_only_paid_modifier_units():
    assert line_subtotal(1000, [(200, 3), (150, 0)], 1) == 1600


def test_modifier_units_prefers_paid_quantity():
    assert modifier_units() == 1
    assert modifier_units(quantity=3) == 3
    assert modifier_units(quantity=3, paid_quantity=1) == 1
    assert modifier_units(quantity=3, paid_quantity=0) == 0


def test_percent_rounds_half_up():
    assert percent_of(4398, 10) == 440
    assert percent_of(25, 10) == 3
    assert percent_of(24, 10) == 2


def test_tax_is_truncated():
    assert compute_tax(4897) == 636
    assert compute_tax(99) == 12
    assert compute_tax(0) == 0
    assert compute_tax(-50) == 0


def test_price_delivery_order_without_promo():
    breakdown = price_order(4398, 499, OrderType.DELIVERY)

    assert breakdown.subtotal_cents == 4398
    assert breakdown.discount_cents == 0
    assert breakdown.delivery_fee_cents == 499
    assert breakdown.tax_cents == 636
    assert breakdown.total_cents == 5533


def test_price_with_percentage_promo():
    breakdown = price_order(4398, 499, OrderType.DELIVERY, DiscountType.PERCENTAGE, 10)

    assert breakdown.discount_cents == 440
    assert breakdown.tax_cents == 579
    assert breakdown.total_cents == 5036


def test_pickup_has_no_delivery_fee():
    breakdown = price_order(2000, 499, OrderType.PICKUP)

    assert breakdown.delivery_fee_cents == 0
    assert breakdown.tax_cents == 260
    assert breakdown.total_cents == 2260


def test_free_delivery_zeroes_fee_but_not_taxable_subtotal():
    breakdown = price_order(2000, 499, OrderType.DELIVERY, DiscountType.FREE_DELIVERY, 0)

    assert breakdown.discount_cents == 499
    assert breakdown.delivery_fee_cents == 0
    assert breakdown.tax_cents == 260
    assert breakdown.total_cents == 2260


def test_free_delivery_on_pickup_grants_nothing():
    assert compute_discount(2000, DiscountType.FREE_DELIVERY, 0, 499, OrderType.PICKUP) == 0


def test_fixed_discount_is_capped_at_subtotal():
    assert compute_discount(500, DiscountType.FIXED_AMOUNT, 800, 0, OrderType.PICKUP) == 500

    breakdown = price_order(500, 0, OrderType.PICKUP, DiscountType.FIXED_AMOUNT, 800)
    assert breakdown.tax_cents == 0
    assert breakdown.total_cents == 0


def test_free_item_discount_uses_value():
    assert compute_discount(3000, DiscountType.FREE_ITEM, 899, 0, OrderType.DELIVERY) == 899


def test_percentage_never_exceeds_subtotal():
    assert compute_discount(1000, DiscountType.PERCENTAGE, 150, 0, OrderType.PICKUP) == 1000


def test_effective_fee():
    assert effective_delivery_fee(499, OrderType.DELIVERY) == 499
    assert effective_delivery_fee(499, OrderType.PICKUP) == 0
    assert effective_delivery_fee(499, OrderType.DELIVERY, DiscountType.FREE_DELIVERY) == 0


def test_custom_tax_rate():
    breakdown = price_order(1000, 0, OrderType.PICKUP, tax_rate_percent=5)
    assert breakdown.tax_cents == 50
    assert breakdown.total_cents == 1050
