from __future__ import annotations

import sqlite3

from ...modules.payments.payment_utilities.calculations import PaymentResolution, resolve_sale_payment
from .numbering import Clock, system_clock
from .orders_repo import OrderFilters, OrderLine, OrderReceipt, OrderRequest, OrdersRepo

# Sales-flavoured names for the shared engine types
SaleLine = OrderLine
SaleRequest = OrderRequest
SaleReceipt = OrderReceipt
SaleFilters = OrderFilters


class SalesRepo(OrdersRepo):
    """
    Sales: invoice numbers YYYYMMDD-NNNN, customer optional (walk-in),
    stock leaves inventory.

    Cash/card sales are settled at the till: the amount tendered must cover
    the total, paid_amount is set to the total and the difference comes back
    as `change_due` on the receipt. Credit sales start 'pending' with the
    whole total as balance; later receipts go through `record_payment`.
    """

    KIND = "sale"
    TABLE = "sales"
    ITEMS_TABLE = "sale_items"
    ORDER_FK = "sale_id"
    PARTY_COLUMN = "customer_id"
    PARTY_TABLE = "customers"
    PARTY_LABEL = "customer"
    PARTY_REQUIRED = False
    DATE_COLUMN = "sale_date"
    STOCK_SIGN = -1

    def __init__(self, conn: sqlite3.Connection, *, clock: Clock = system_clock):
        super().__init__(conn, clock=clock)

    def _resolve_payment(self, total: float, method: str, amount_paid: float) -> PaymentResolution:
        return resolve_sale_payment(total, method, amount_paid)

    # Named entry points used by the sales screen
    def create_sale(self, req: SaleRequest) -> SaleReceipt:
        return self.create_order(req)

    def update_sale(self, sale_id: int, req: SaleRequest) -> int:
        return self.update_order(sale_id, req)

    def delete_sale(self, sale_id: int) -> None:
        self.delete_order(sale_id)

    def list_sales(self, filters: SaleFilters | None = None, page: int = 1, limit: int = 20):
        return self.list_orders(filters, page, limit)

    def customer_outstanding(self, customer_id: int) -> float:
        """Unpaid balance across all of a customer's sales."""
        row = self.conn.execute(
            """
            SELECT COALESCE(SUM(CAST(balance AS REAL)), 0.0) AS due
              FROM sales
             WHERE customer_id = ? AND CAST(balance AS REAL) > 0
            """,
            (customer_id,),
        ).fetchone()
        return float(row["due"])
