# tests/test_calculations.py
from __future__ import annotations

import pytest

from spareparts_pos.database.repositories.errors import (
    InsufficientPaymentError,
    InvalidDiscountError,
    InvalidQuantityOrPriceError,
    OverpaymentError,
)
from spareparts_pos.modules.payments.payment_utilities.calculations import (
    apply_payment,
    compute_totals,
    derive_payment_status,
    discount_amount,
    resolve_purchase_payment,
    resolve_sale_payment,
)


@pytest.mark.parametrize("paid", range(0, 101, 10))
def test_status_and_balance_across_paid_range(paid):
    status = derive_payment_status(100.0, float(paid))
    if paid == 0:
        assert status == "pending"
    elif paid < 100:
        assert status == "partial"
    else:
        assert status == "paid"

    r = resolve_purchase_payment(100.0, "cash", float(paid))
    assert r.status == status
    assert r.paid_amount == pytest.approx(paid)
    assert r.balance == pytest.approx(100 - paid)


def test_status_ignores_sub_cent_remainder():
    assert derive_payment_status(100.0, 99.999) == "paid"
    assert derive_payment_status(100.0, 99.99) == "partial"
    assert derive_payment_status(0.0, 0.0) == "paid"


def test_totals_flat_discount_and_tax():
    t = compute_totals([(2, 100.0), (1, 50.0)], discount=20.0, tax_rate=0.15)
    assert (t.subtotal, t.discount, t.tax, t.total) == (250.0, 20.0, 34.5, 264.5)


def test_totals_percent_discount_and_rounding():
    t = compute_totals([(3, 3.33)], discount=10, discount_type="percent", tax_rate=0.075)
    assert t.subtotal == 9.99
    assert t.discount == 1.0
    assert t.tax == 0.67
    assert t.total == 9.66


def test_totals_without_lines_is_zero():
    t = compute_totals([])
    assert (t.subtotal, t.discount, t.tax, t.total) == (0.0, 0.0, 0.0, 0.0)


def test_flat_discount_capped_at_subtotal():
    assert discount_amount(40.0, 55.0) == 40.0
    assert discount_amount(40.0, 100, "percent") == 40.0


@pytest.mark.parametrize("discount,kind", [(-0.01, "amount"), (100.5, "percent"), (1, "coupon")])
def test_bad_discount(discount, kind):
    with pytest.raises(InvalidDiscountError):
        discount_amount(100.0, discount, kind)


def test_negative_tax_rate_rejected():
    with pytest.raises(InvalidQuantityOrPriceError):
        compute_totals([(1, 10.0)], tax_rate=-0.1)


def test_sale_tender_equal_to_total():
    r = resolve_sale_payment(264.5, "cash", 264.5)
    assert r.status == "paid"
    assert r.paid_amount == 264.5
    assert r.balance == 0.0
    assert r.change_due == 0.0


def test_sale_tender_above_total_gives_change():
    r = resolve_sale_payment(264.5, "card", 300.0)
    assert r.paid_amount == 264.5
    assert r.change_due == 35.5


def test_sale_tender_one_cent_short():
    with pytest.raises(InsufficientPaymentError) as exc:
        resolve_sale_payment(264.5, "cash", 264.49)
    assert exc.value.tendered == 264.49
    assert exc.value.total == 264.5


def test_credit_sale_ignores_tender():
    r = resolve_sale_payment(80.0, "credit", 500.0)
    assert (r.paid_amount, r.balance, r.status, r.change_due) == (0.0, 80.0, "pending", 0.0)


def test_purchase_overpay_rejected():
    with pytest.raises(OverpaymentError) as exc:
        resolve_purchase_payment(100.0, "cash", 100.01)
    assert exc.value.amount == 100.01


def test_purchase_negative_paid_rejected():
    with pytest.raises(InvalidQuantityOrPriceError):
        resolve_purchase_payment(100.0, "cash", -1.0)


def test_payment_equal_to_balance_settles_order():
    r = apply_payment(100.0, 40.0, 60.0)
    assert r.status == "paid"
    assert r.balance == 0.0
    assert r.paid_amount == 100.0


def test_partial_payment_projection():
    r = apply_payment(100.0, 0.0, 25.0)
    assert (r.paid_amount, r.balance, r.status) == (25.0, 75.0, "partial")


def test_payment_above_balance_rejected():
    with pytest.raises(OverpaymentError) as exc:
        apply_payment(100.0, 40.0, 60.01)
    assert exc.value.balance == 60.0


@pytest.mark.parametrize("amount", [0, -1, 0.004])
def test_non_positive_payment_rejected(amount):
    with pytest.raises(InvalidQuantityOrPriceError):
        apply_payment(100.0, 0.0, amount)
