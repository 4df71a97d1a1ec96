import pytest

from medwear.services.pricing import (
    DiscountError,
    DiscountType,
    PaymentMethod,
    compute_pos_totals,
    compute_storefront_totals,
    deal_line_price,
    margin_percent,
    resolve_unit_price,
    savings_percent,
    unit_profit,
)


def test_percentage_discount_and_change() -> None:
    totals = compute_pos_totals(
        1000,
        discount=10,
        discount_type=DiscountType.PERCENTAGE,
        payment_method=PaymentMethod.CASH,
        amount_received=1000,
    )
    assert totals.discount_amount == 100
    assert totals.total == 900
    assert totals.change == 100
    assert totals.change_due == 100


def test_short_cash_is_not_valid_change() -> None:
    totals = compute_pos_totals(
        1000,
        discount=10,
        discount_type="PERCENTAGE",
        amount_received=800,
    )
    assert totals.change == -100
    assert totals.change_due is None
    assert totals.amount_short == 100


def test_change_only_for_cash() -> None:
    totals = compute_pos_totals(500, payment_method=PaymentMethod.CARD, amount_received=1000)
    assert totals.change is None
    assert totals.change_due is None


@pytest.mark.parametrize(
    "discount,discount_type",
    [
        (0, DiscountType.FIXED),
        (250, DiscountType.FIXED),
        (5000, DiscountType.FIXED),
        (100, DiscountType.PERCENTAGE),
        (33.3, DiscountType.PERCENTAGE),
    ],
)
def test_total_never_negative(discount, discount_type) -> None:
    totals = compute_pos_totals(1200, discount=discount, discount_type=discount_type)
    assert totals.total >= 0
    assert totals.total == max(0, round(1200 - totals.discount_amount, 2))


def test_invalid_discounts_are_rejected() -> None:
    with pytest.raises(DiscountError):
        compute_pos_totals(1000, discount=-5, discount_type=DiscountType.FIXED)
    with pytest.raises(DiscountError):
        compute_pos_totals(1000, discount=150, discount_type=DiscountType.PERCENTAGE)
    with pytest.raises(DiscountError):
        compute_pos_totals(1000, discount="ten", discount_type=DiscountType.FIXED)


def test_unit_price_resolution() -> None:
    assert resolve_unit_price(2800, 2450) == 2450
    assert resolve_unit_price(2800, None) == 2800
    assert resolve_unit_price(2800, 0) == 2800
    assert resolve_unit_price(2800, 2450, 350, customized=True) == 2800
    assert resolve_unit_price(2800, None, 350, customized=False) == 2800


def test_storefront_shipping_threshold() -> None:
    below = compute_storefront_totals(4999, free_shipping_minimum=5000, shipping_fee=500)
    assert below.shipping == 500
    assert below.total == 5499
    assert not below.free_shipping

    at = compute_storefront_totals(5000, free_shipping_minimum=5000, shipping_fee=500)
    assert at.shipping == 0
    assert at.total == 5000
    assert at.free_shipping


def test_margin_is_undefined_without_cost() -> None:
    assert unit_profit(2450, 1400) == 1050
    assert margin_percent(2450, 1400) == 75.0
    assert margin_percent(2450, 0) is None


def test_deal_line_price_is_proportional() -> None:
    # 2800 + 3000 = 5800 bundled at 4900
    assert deal_line_price(2800, 1, 4900, 5800) == round(2800 * 4900 / 5800)
    assert deal_line_price(3000, 2, 4900, 5800) == round(6000 * 4900 / 5800)
    assert savings_percent(5800, 4900) == 16
    assert savings_percent(0, 100) == 0
