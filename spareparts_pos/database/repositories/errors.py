# database/repositories/errors.py
"""
Domain errors raised by the repositories.

Controllers catch `DomainError` and show `str(err)` to the user; anything
else is a programming error and is logged with a traceback.
"""
from __future__ import annotations


class DomainError(Exception):
    """Domain-level error the controller can surface directly (message box)."""


class NotFoundError(DomainError):
    """Editing, paying or deleting a record that does not exist."""


class EmptyOrderError(DomainError):
    """An order was submitted without line items."""


class InvalidQuantityOrPriceError(DomainError):
    """A quantity, price or payment amount is outside its allowed range."""


class InvalidDiscountError(DomainError):
    """Negative discount, or a percentage outside 0..100."""


class InsufficientPaymentError(DomainError):
    """Cash/card sale where the amount tendered is below the order total."""

    def __init__(self, tendered: float, total: float):
        super().__init__(f"Amount tendered ({tendered:,.2f}) is less than total ({total:,.2f}).")
        self.tendered = tendered
        self.total = total


class OverpaymentError(DomainError):
    """A payment larger than the outstanding balance."""

    def __init__(self, amount: float, balance: float, message: str | None = None):
        super().__init__(
            message or f"Payment of {amount:,.2f} exceeds the outstanding balance of {balance:,.2f}."
        )
        self.amount = amount
        self.balance = balance


class InsufficientStockError(DomainError):
    """An order would take an item's on-hand quantity below zero."""

    def __init__(self, part_code: str, available: int, requested: int):
        super().__init__(
            f"Not enough stock for {part_code}: {available} on hand, {requested} requested."
        )
        self.part_code = part_code
        self.available = available
        self.requested = requested


class DuplicateInvoiceNumberError(DomainError):
    """The generated invoice/PO number is already taken."""

    def __init__(self, number: str):
        super().__init__(f"Invoice number {number} is already in use.")
        self.number = number


class LedgerMismatchError(DomainError):
    """Sum of recorded payments disagrees with the order's paid amount."""


class StoreUnavailableError(DomainError):
    """The database failed underneath an operation (locked, corrupt, I/O)."""
