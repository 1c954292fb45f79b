from __future__ import annotations

import sqlite3

from ...modules.payments.payment_utilities.calculations import PaymentResolution, resolve_purchase_payment
from .numbering import Clock, system_clock
from .orders_repo import OrderFilters, OrderLine, OrderReceipt, OrderRequest, OrdersRepo

PurchaseLine = OrderLine
PurchaseRequest = OrderRequest
PurchaseReceipt = OrderReceipt
PurchaseFilters = OrderFilters


class PurchasesRepo(OrdersRepo):
    """
    Purchases: numbers PO-YYYYMMDD-NNNN, supplier required, stock comes in.

    A purchase may be paid partly on receipt; `amount_paid` above the total
    is rejected with OverpaymentError. The rest is settled with
    `record_payment`.
    """

    KIND = "purchase"
    TABLE = "purchases"
    ITEMS_TABLE = "purchase_items"
    ORDER_FK = "purchase_id"
    PARTY_COLUMN = "supplier_id"
    PARTY_TABLE = "suppliers"
    PARTY_LABEL = "supplier"
    PARTY_REQUIRED = True
    DATE_COLUMN = "purchase_date"
    STOCK_SIGN = 1

    def __init__(self, conn: sqlite3.Connection, *, clock: Clock = system_clock):
        super().__init__(conn, clock=clock)

    def _resolve_payment(self, total: float, method: str, amount_paid: float) -> PaymentResolution:
        return resolve_purchase_payment(total, method, amount_paid)

    def create_purchase(self, req: PurchaseRequest) -> PurchaseReceipt:
        return self.create_order(req)

    def update_purchase(self, purchase_id: int, req: PurchaseRequest) -> int:
        return self.update_order(purchase_id, req)

    def delete_purchase(self, purchase_id: int) -> None:
        self.delete_order(purchase_id)

    def list_purchases(self, filters: PurchaseFilters | None = None, page: int = 1, limit: int = 20):
        return self.list_orders(filters, page, limit)

    def supplier_outstanding(self, supplier_id: int) -> float:
        """What we still owe a supplier across all purchases."""
        row = self.conn.execute(
            """
            SELECT COALESCE(SUM(CAST(balance AS REAL)), 0.0) AS due
              FROM purchases
             WHERE supplier_id = ? AND CAST(balance AS REAL) > 0
            """,
            (supplier_id,),
        ).fetchone()
        return float(row["due"])
