"""
payment_utilities/calculations.py

Pure order/payment arithmetic shared by the order engine and the UI previews
(cart totals, change due, projected balance after a payment).

Do not import repos or open DB connections here.
Only compute numbers; formatting belongs in the UI.

Every money value is rounded to 2 decimals right after the step that
produces it, so the preview a cashier sees is exactly what gets stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from ....database.repositories.errors import (
    InsufficientPaymentError,
    InvalidDiscountError,
    InvalidQuantityOrPriceError,
    OverpaymentError,
)
from ....utils.helpers import round_money

__all__ = [
    "Totals",
    "PaymentResolution",
    "line_total",
    "discount_amount",
    "compute_totals",
    "derive_payment_status",
    "resolve_sale_payment",
    "resolve_purchase_payment",
    "apply_payment",
]


@dataclass(frozen=True)
class Totals:
    subtotal: float
    discount: float
    tax: float
    total: float


@dataclass(frozen=True)
class PaymentResolution:
    paid_amount: float
    balance: float
    status: str
    change_due: float = 0.0


# -----------------------------
# Core utilities
# -----------------------------

def line_total(quantity: int, unit_price: float) -> float:
    return round_money(quantity * unit_price)


def discount_amount(subtotal: float, discount: float, discount_type: str = "amount") -> float:
    """
    Applied discount for a subtotal.

    - 'amount':  min(discount, subtotal)
    - 'percent': subtotal * discount / 100, discount within 0..100
    """
    discount = float(discount or 0.0)
    if discount < 0:
        raise InvalidDiscountError("Discount cannot be negative.")
    kind = (discount_type or "amount").strip().lower()
    if kind == "percent":
        if discount > 100:
            raise InvalidDiscountError("Percentage discount must be between 0 and 100.")
        return round_money(subtotal * discount / 100.0)
    if kind != "amount":
        raise InvalidDiscountError(f"Unknown discount type: {discount_type!r}")
    return round_money(min(discount, subtotal))


def compute_totals(
    lines: Iterable[Tuple[int, float]],
    discount: float = 0.0,
    discount_type: str = "amount",
    tax_rate: float = 0.0,
) -> Totals:
    """
    lines: (quantity, unit_price) pairs.

        subtotal = sum(quantity * unit_price)
        tax      = (subtotal - discount) * tax_rate
        total    = subtotal - discount + tax
    """
    if tax_rate is None or tax_rate < 0:
        raise InvalidQuantityOrPriceError("Tax rate cannot be negative.")
    subtotal = round_money(sum(line_total(q, p) for q, p in lines))
    disc = discount_amount(subtotal, discount, discount_type)
    tax = round_money((subtotal - disc) * tax_rate)
    total = round_money(subtotal - disc + tax)
    return Totals(subtotal=subtotal, discount=disc, tax=tax, total=total)


# -----------------------------
# Status
# -----------------------------

def derive_payment_status(total: float, paid: float) -> str:
    """
      - 'paid'    if balance (total - paid) <= 0
      - 'partial' if paid > 0
      - 'pending' otherwise
    """
    if round_money(total - paid) <= 0:
        return "paid"
    if paid > 0:
        return "partial"
    return "pending"


# -----------------------------
# Payment resolution at creation time
# -----------------------------

def _resolved(total: float, paid: float, change_due: float = 0.0) -> PaymentResolution:
    paid = round_money(paid)
    return PaymentResolution(
        paid_amount=paid,
        balance=round_money(total - paid),
        status=derive_payment_status(total, paid),
        change_due=round_money(change_due),
    )


def resolve_sale_payment(total: float, method: str, tendered: float) -> PaymentResolution:
    """
    Credit sales carry the whole total as balance. Cash/card sales must be
    settled in full: tendered below total raises InsufficientPaymentError,
    otherwise the sale is paid and the excess is returned as change.
    """
    if (method or "").lower() == "credit":
        return _resolved(total, 0.0)
    tendered = float(tendered or 0.0)
    if tendered < 0:
        raise InvalidQuantityOrPriceError("Amount tendered cannot be negative.")
    if round_money(tendered) < total:
        raise InsufficientPaymentError(round_money(tendered), total)
    return _resolved(total, total, tendered - total)


def resolve_purchase_payment(total: float, method: str, paid: float) -> PaymentResolution:
    """Purchases may be part-paid; paying more than the total is rejected."""
    if (method or "").lower() == "credit":
        return _resolved(total, 0.0)
    paid = float(paid or 0.0)
    if paid < 0:
        raise InvalidQuantityOrPriceError("Paid amount cannot be negative.")
    if round_money(paid) > total:
        raise OverpaymentError(round_money(paid), total)
    return _resolved(total, paid)


# -----------------------------
# Later payments
# -----------------------------

def apply_payment(total: float, paid_amount: float, amount: float) -> PaymentResolution:
    """
    Projected header after appending a payment of `amount`.
    Raises if amount <= 0 or amount exceeds the outstanding balance.
    """
    amount = round_money(amount)
    if amount <= 0:
        raise InvalidQuantityOrPriceError("Payment amount must be greater than zero.")
    balance = round_money(total - paid_amount)
    if amount > balance:
        raise OverpaymentError(amount, balance)
    return _resolved(total, paid_amount + amount)
