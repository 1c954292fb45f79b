# database/repositories/orders_repo.py
"""
Order engine shared by sales and purchases.

An order is a header row, N item rows, the payments ledger rows and the
matching inventory movement. Every write below runs as one
BEGIN IMMEDIATE ... COMMIT unit (see `database.transaction`); on any error
the whole unit is rolled back before the error reaches the caller.

Header money fields are owned here and only here:
  - subtotal / discount / tax / total_amount come from `compute_totals`
  - paid_amount always equals SUM(payments.amount) for the order
  - balance = total_amount - paid_amount
  - payment_status is derived from balance and paid_amount

`SalesRepo` and `PurchasesRepo` only fill in the table names and the
direction of the stock movement.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import math
import sqlite3
from typing import Iterator, Optional

from ...constants import DEFAULT_TAX_RATE, PAYMENT_METHODS, PAYMENT_STATUSES
from ...modules.payments.payment_utilities.calculations import (
    PaymentResolution,
    Totals,
    apply_payment,
    compute_totals,
    derive_payment_status,
)
from ...utils.helpers import round_money
from ...utils.validators import is_iso_date
from .. import transaction
from .errors import (
    DomainError,
    DuplicateInvoiceNumberError,
    EmptyOrderError,
    InsufficientStockError,
    InvalidQuantityOrPriceError,
    LedgerMismatchError,
    NotFoundError,
    OverpaymentError,
    StoreUnavailableError,
)
from .filters import DateRange, Eq, PageResult, Search, Where, check_page
from .numbering import Clock, next_number, system_clock

_log = logging.getLogger(__name__)

# tolerance when comparing stored NUMERIC money values
_CENT = 0.005


@dataclass
class OrderLine:
    inventory_id: int
    quantity: int
    unit_price: float


@dataclass
class OrderRequest:
    items: list[OrderLine] = field(default_factory=list)
    counterparty_id: Optional[int] = None
    discount: float = 0.0
    discount_type: str = "amount"
    tax_rate: Optional[float] = None  # None: default rate (new) or the order's own rate (edit)
    payment_method: str = "cash"
    amount_paid: float = 0.0          # tendered (sales) / paid now (purchases)
    notes: Optional[str] = None
    order_date: Optional[str] = None  # YYYY-MM-DD; defaults to the clock's date
    created_by: Optional[int] = None


@dataclass(frozen=True)
class OrderReceipt:
    id: int
    number: str
    subtotal: float
    discount: float
    tax: float
    total: float
    paid_amount: float
    balance: float
    payment_status: str
    change_due: float = 0.0


@dataclass
class OrderFilters:
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    counterparty_id: Optional[int] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    search: Optional[str] = None


def _is_number_collision(err: sqlite3.IntegrityError) -> bool:
    msg = str(err)
    return "UNIQUE" in msg and "invoice_number" in msg


class OrdersRepo:
    """
    Base engine. Subclasses set:

      KIND            'sale' | 'purchase' (numbering sequence)
      TABLE           header table
      ITEMS_TABLE     item table
      ORDER_FK        FK column in items/payments pointing at the header
      PARTY_COLUMN    customer_id | supplier_id
      PARTY_TABLE     customers | suppliers
      PARTY_LABEL     human name of the counterparty, for messages
      PARTY_REQUIRED  whether the counterparty may be omitted
      DATE_COLUMN     sale_date | purchase_date
      STOCK_SIGN      -1 (sales take stock out) / +1 (purchases bring it in)
    """

    KIND: str = ""
    TABLE: str = ""
    ITEMS_TABLE: str = ""
    ORDER_FK: str = ""
    PARTY_COLUMN: str = ""
    PARTY_TABLE: str = ""
    PARTY_LABEL: str = ""
    PARTY_REQUIRED: bool = False
    DATE_COLUMN: str = ""
    STOCK_SIGN: int = 0

    def __init__(self, conn: sqlite3.Connection, *, clock: Clock = system_clock):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.clock = clock

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def _resolve_payment(self, total: float, method: str, amount_paid: float) -> PaymentResolution:
        raise NotImplementedError

    def _next_number(self) -> str:
        return next_number(self.conn, self.KIND, self.clock)

    # ------------------------------------------------------------------
    # Validation (runs before anything is written)
    # ------------------------------------------------------------------
    def _validate(self, req: OrderRequest) -> None:
        if not req.items:
            raise EmptyOrderError("Add at least one item to the order.")
        for line in req.items:
            q = line.quantity
            if (
                isinstance(q, bool) or not isinstance(q, (int, float))
                or not math.isfinite(q) or q != int(q) or q <= 0
            ):
                raise InvalidQuantityOrPriceError(f"Quantity must be a whole number greater than zero (got {q!r}).")
            p = line.unit_price
            if p is None or isinstance(p, bool) or not isinstance(p, (int, float)) or not math.isfinite(p) or p < 0:
                raise InvalidQuantityOrPriceError(f"Unit price must be zero or more (got {p!r}).")
        if req.tax_rate is not None and (
            isinstance(req.tax_rate, bool) or not isinstance(req.tax_rate, (int, float))
            or not math.isfinite(req.tax_rate) or req.tax_rate < 0
        ):
            raise DomainError(f"Tax rate must be zero or more (got {req.tax_rate!r}).")
        if req.payment_method not in PAYMENT_METHODS:
            raise DomainError(f"Unknown payment method: {req.payment_method!r}")
        if req.order_date is not None and not is_iso_date(req.order_date):
            raise DomainError(f"Invalid date: {req.order_date!r} (expected YYYY-MM-DD).")
        if req.counterparty_id is None:
            if self.PARTY_REQUIRED:
                raise DomainError(f"A {self.PARTY_LABEL} is required.")
        else:
            row = self.conn.execute(
                f"SELECT 1 FROM {self.PARTY_TABLE} WHERE id=?", (req.counterparty_id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"{self.PARTY_LABEL.title()} #{req.counterparty_id} not found.")
        self._check_items_exist(req.items)

    def _check_items_exist(self, items: list[OrderLine]) -> None:
        wanted = {int(line.inventory_id) for line in items}
        marks = ",".join("?" * len(wanted))
        found = {
            r["id"] for r in self.conn.execute(f"SELECT id FROM inventory WHERE id IN ({marks})", tuple(wanted))
        }
        missing = sorted(wanted - found)
        if missing:
            raise NotFoundError(
                "Inventory item(s) not found: " + ", ".join(f"#{i}" for i in missing)
            )

    def _order_date(self, req: OrderRequest) -> str:
        return req.order_date or self.clock().isoformat()

    def _totals(self, req: OrderRequest, tax_rate: float) -> Totals:
        return compute_totals(
            ((int(l.quantity), float(l.unit_price)) for l in req.items),
            req.discount,
            req.discount_type,
            tax_rate,
        )

    # ------------------------------------------------------------------
    # Atomic unit + error translation
    # ------------------------------------------------------------------
    @contextmanager
    def _atomic(self, action: str) -> Iterator[None]:
        try:
            with transaction(self.conn):
                yield
        except DomainError as e:
            _log.warning("%s rolled back: %s", action, e)
            raise
        except sqlite3.DatabaseError as e:
            _log.warning("%s rolled back: database error: %s", action, e)
            raise StoreUnavailableError(f"The database could not complete the operation: {e}") from e

    # ------------------------------------------------------------------
    # Internal writes (caller holds the transaction)
    # ------------------------------------------------------------------
    def _adjust_stock(self, inventory_id: int, delta: int) -> None:
        row = self.conn.execute(
            "SELECT part_code, quantity FROM inventory WHERE id=?", (inventory_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Inventory item #{inventory_id} not found.")
        if row["quantity"] + delta < 0:
            raise InsufficientStockError(row["part_code"], int(row["quantity"]), -delta)
        self.conn.execute(
            "UPDATE inventory SET quantity = quantity + ? WHERE id=?", (delta, inventory_id)
        )

    def _insert_items(self, order_id: int, items: list[OrderLine]) -> None:
        for line in items:
            qty = int(line.quantity)
            price = round_money(line.unit_price)
            self.conn.execute(
                f"""
                INSERT INTO {self.ITEMS_TABLE} ({self.ORDER_FK}, inventory_id, quantity, unit_price, total_price)
                VALUES (?, ?, ?, ?, ?)
                """,
                (order_id, line.inventory_id, qty, price, round_money(qty * price)),
            )
            self._adjust_stock(line.inventory_id, self.STOCK_SIGN * qty)

    def _reverse_items(self, order_id: int) -> None:
        for it in self.list_items(order_id):
            self._adjust_stock(int(it["inventory_id"]), -self.STOCK_SIGN * int(it["quantity"]))
        self.conn.execute(f"DELETE FROM {self.ITEMS_TABLE} WHERE {self.ORDER_FK}=?", (order_id,))

    def _insert_payment(
        self,
        order_id: int,
        amount: float,
        method: str,
        date: str,
        notes: Optional[str],
    ) -> int:
        cur = self.conn.execute(
            f"""
            INSERT INTO payments ({self.ORDER_FK}, amount, payment_method, payment_date, notes)
            VALUES (?, ?, ?, ?, ?)
            """,
            (order_id, round_money(amount), method, date, notes),
        )
        return int(cur.lastrowid)

    def _require_header(self, order_id: int) -> sqlite3.Row:
        row = self.conn.execute(
            f"""
            SELECT id, invoice_number,
                   CAST(total_amount AS REAL) AS total_amount,
                   CAST(paid_amount AS REAL)  AS paid_amount,
                   CAST(tax_rate AS REAL)     AS tax_rate,
                   payment_status, {self.DATE_COLUMN} AS order_date
              FROM {self.TABLE} WHERE id=?
            """,
            (order_id,),
        ).fetchone()
        if row is None:
            raise NotFoundError(f"{self.KIND.title()} #{order_id} not found.")
        return row

    def _check_ledger(self, order_id: int) -> None:
        h = self._require_header(order_id)
        ledger = self.ledger_total(order_id)
        if abs(ledger - float(h["paid_amount"])) > _CENT:
            raise LedgerMismatchError(
                f"{h['invoice_number']}: payments total {ledger:,.2f} "
                f"but paid amount is {float(h['paid_amount']):,.2f}."
            )

    # ------------------------------------------------------------------
    # WRITE
    # ------------------------------------------------------------------
    def create_order(self, req: OrderRequest) -> OrderReceipt:
        """
        Validate, compute, then write header + items + first payment + stock
        movement atomically. A number collision is retried once.
        """
        self._validate(req)
        rate = DEFAULT_TAX_RATE if req.tax_rate is None else float(req.tax_rate)
        totals = self._totals(req, rate)
        pay = self._resolve_payment(totals.total, req.payment_method, req.amount_paid)
        try:
            return self._create_once(req, rate, totals, pay)
        except DuplicateInvoiceNumberError as e:
            _log.warning("%s number %s already taken; retrying once", self.KIND, e.number)
            return self._create_once(req, rate, totals, pay)

    def _create_once(self, req: OrderRequest, rate: float, totals: Totals, pay: PaymentResolution) -> OrderReceipt:
        date = self._order_date(req)
        with self._atomic(f"create {self.KIND}"):
            number = self._next_number()
            try:
                cur = self.conn.execute(
                    f"""
                    INSERT INTO {self.TABLE} (
                        invoice_number, {self.PARTY_COLUMN}, {self.DATE_COLUMN},
                        subtotal, discount, tax_rate, tax, total_amount,
                        payment_method, payment_status, paid_amount, balance,
                        notes, created_by
                    ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)
                    """,
                    (
                        number, req.counterparty_id, date,
                        totals.subtotal, totals.discount, rate, totals.tax, totals.total,
                        req.payment_method, pay.status, pay.paid_amount, pay.balance,
                        req.notes, req.created_by,
                    ),
                )
            except sqlite3.IntegrityError as e:
                if _is_number_collision(e):
                    raise DuplicateInvoiceNumberError(number) from e
                raise
            order_id = int(cur.lastrowid)
            self._insert_items(order_id, req.items)
            if pay.paid_amount > 0:
                self._insert_payment(order_id, pay.paid_amount, req.payment_method, date, None)
            self._check_ledger(order_id)

        _log.info(
            "%s %s committed: %d item(s), total %.2f, paid %.2f, status %s",
            self.KIND, number, len(req.items), totals.total, pay.paid_amount, pay.status,
        )
        return OrderReceipt(
            id=order_id,
            number=number,
            subtotal=totals.subtotal,
            discount=totals.discount,
            tax=totals.tax,
            total=totals.total,
            paid_amount=pay.paid_amount,
            balance=pay.balance,
            payment_status=pay.status,
            change_due=pay.change_due,
        )

    def update_order(self, order_id: int, req: OrderRequest) -> int:
        """
        Replace the order's items wholesale and recompute the header.

        Payments already recorded are kept; `req.amount_paid` (if > 0) is
        appended as a new payment. Fails with OverpaymentError if the
        payments would exceed the new total. Without an explicit
        `req.tax_rate` the rate stored on the order is kept, so a later change
        of the default rate does not reprice old orders. Returns the header
        rows updated.
        """
        self._validate(req)
        extra = round_money(req.amount_paid or 0.0)
        if extra < 0:
            raise InvalidQuantityOrPriceError("Paid amount cannot be negative.")

        with self._atomic(f"update {self.KIND} #{order_id}"):
            header = self._require_header(order_id)
            rate = float(header["tax_rate"]) if req.tax_rate is None else float(req.tax_rate)
            totals = self._totals(req, rate)
            self._reverse_items(order_id)
            self._insert_items(order_id, req.items)

            already = self.ledger_total(order_id)
            paid = round_money(already + extra)
            if paid > totals.total:
                raise OverpaymentError(
                    paid,
                    totals.total,
                    f"Payments of {paid:,.2f} would exceed the new total of {totals.total:,.2f}.",
                )
            date = req.order_date or header["order_date"]
            if extra > 0:
                self._insert_payment(order_id, extra, req.payment_method, self.clock().isoformat(), req.notes)
            balance = round_money(totals.total - paid)
            status = derive_payment_status(totals.total, paid)
            cur = self.conn.execute(
                f"""
                UPDATE {self.TABLE}
                   SET {self.PARTY_COLUMN}=?, {self.DATE_COLUMN}=?,
                       subtotal=?, discount=?, tax_rate=?, tax=?, total_amount=?,
                       payment_method=?, payment_status=?, paid_amount=?, balance=?,
                       notes=?, updated_at=CURRENT_TIMESTAMP
                 WHERE id=?
                """,
                (
                    req.counterparty_id, date,
                    totals.subtotal, totals.discount, rate, totals.tax, totals.total,
                    req.payment_method, status, paid, balance,
                    req.notes, order_id,
                ),
            )
            affected = cur.rowcount
            self._check_ledger(order_id)

        _log.info(
            "%s %s updated: %d item(s), total %.2f, paid %.2f, status %s",
            self.KIND, header["invoice_number"], len(req.items), totals.total, paid, status,
        )
        return affected

    def record_payment(
        self,
        order_id: int,
        amount: float,
        method: str = "cash",
        date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> float:
        """Append a payment and return the new balance."""
        if method not in PAYMENT_METHODS:
            raise DomainError(f"Unknown payment method: {method!r}")
        if date is not None and not is_iso_date(date):
            raise DomainError(f"Invalid date: {date!r} (expected YYYY-MM-DD).")
        with self._atomic(f"payment on {self.KIND} #{order_id}"):
            h = self._require_header(order_id)
            res = apply_payment(float(h["total_amount"]), float(h["paid_amount"]), amount)
            self._insert_payment(order_id, amount, method, date or self.clock().isoformat(), notes)
            self.conn.execute(
                f"""
                UPDATE {self.TABLE}
                   SET paid_amount=?, balance=?, payment_status=?, updated_at=CURRENT_TIMESTAMP
                 WHERE id=?
                """,
                (res.paid_amount, res.balance, res.status, order_id),
            )
            self._check_ledger(order_id)

        _log.info(
            "payment %.2f recorded on %s %s; balance %.2f (%s)",
            round_money(amount), self.KIND, h["invoice_number"], res.balance, res.status,
        )
        return res.balance

    def delete_order(self, order_id: int) -> None:
        """Undo the stock movement, then drop payments, items and header."""
        with self._atomic(f"delete {self.KIND} #{order_id}"):
            h = self._require_header(order_id)
            self._reverse_items(order_id)
            self.conn.execute(f"DELETE FROM payments WHERE {self.ORDER_FK}=?", (order_id,))
            self.conn.execute(f"DELETE FROM {self.TABLE} WHERE id=?", (order_id,))
        _log.info("%s %s deleted", self.KIND, h["invoice_number"])

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def get_header(self, order_id: int) -> dict | None:
        row = self.conn.execute(
            f"""
            SELECT o.id, o.invoice_number, o.{self.PARTY_COLUMN} AS counterparty_id,
                   p.name AS counterparty_name, o.{self.DATE_COLUMN} AS order_date,
                   CAST(o.subtotal AS REAL)     AS subtotal,
                   CAST(o.discount AS REAL)     AS discount,
                   CAST(o.tax_rate AS REAL)     AS tax_rate,
                   CAST(o.tax AS REAL)          AS tax,
                   CAST(o.total_amount AS REAL) AS total_amount,
                   o.payment_method, o.payment_status,
                   CAST(o.paid_amount AS REAL)  AS paid_amount,
                   CAST(o.balance AS REAL)      AS balance,
                   o.notes, o.created_by, o.created_at, o.updated_at
              FROM {self.TABLE} o
              LEFT JOIN {self.PARTY_TABLE} p ON p.id = o.{self.PARTY_COLUMN}
             WHERE o.id=?
            """,
            (order_id,),
        ).fetchone()
        return dict(row) if row else None

    def list_items(self, order_id: int) -> list[dict]:
        sql = f"""
        SELECT it.id, it.inventory_id, i.part_code, i.name AS part_name,
               it.quantity,
               CAST(it.unit_price AS REAL)  AS unit_price,
               CAST(it.total_price AS REAL) AS total_price
          FROM {self.ITEMS_TABLE} it
          JOIN inventory i ON i.id = it.inventory_id
         WHERE it.{self.ORDER_FK} = ?
         ORDER BY it.id
        """
        return [dict(r) for r in self.conn.execute(sql, (order_id,)).fetchall()]

    def list_payments(self, order_id: int) -> list[dict]:
        sql = f"""
        SELECT id, CAST(amount AS REAL) AS amount, payment_method, payment_date, notes, created_at
          FROM payments
         WHERE {self.ORDER_FK} = ?
         ORDER BY id
        """
        return [dict(r) for r in self.conn.execute(sql, (order_id,)).fetchall()]

    def ledger_total(self, order_id: int) -> float:
        row = self.conn.execute(
            f"SELECT COALESCE(SUM(CAST(amount AS REAL)), 0.0) AS s FROM payments WHERE {self.ORDER_FK}=?",
            (order_id,),
        ).fetchone()
        return round_money(row["s"])

    def party_snapshot(self, party_id: int) -> dict:
        """{order_count, total, outstanding, last_order} for one customer/supplier."""
        row = self.conn.execute(
            f"""
            SELECT COUNT(*)                                                   AS order_count,
                   ROUND(COALESCE(SUM(CAST(total_amount AS REAL)), 0.0), 2)   AS total,
                   ROUND(COALESCE(SUM(CASE WHEN CAST(balance AS REAL) > 0
                                           THEN CAST(balance AS REAL) END), 0.0), 2) AS outstanding,
                   MAX({self.DATE_COLUMN})                                    AS last_order
              FROM {self.TABLE}
             WHERE {self.PARTY_COLUMN} = ?
            """,
            (party_id,),
        ).fetchone()
        return dict(row)

    def list_orders(
        self,
        filters: OrderFilters | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> PageResult:
        """Newest first. Search matches the invoice number or counterparty name."""
        page, limit, offset = check_page(page, limit)
        f = filters or OrderFilters()
        if f.payment_status and f.payment_status not in PAYMENT_STATUSES:
            raise ValueError(f"Unknown payment status: {f.payment_status!r}")
        where = Where(
            DateRange(f"o.{self.DATE_COLUMN}", f.date_from, f.date_to),
            Eq(f"o.{self.PARTY_COLUMN}", f.counterparty_id),
            Eq("o.payment_status", f.payment_status),
            Eq("o.payment_method", f.payment_method),
            Search(("o.invoice_number", "p.name"), f.search),
        )
        base = f"""
          FROM {self.TABLE} o
          LEFT JOIN {self.PARTY_TABLE} p ON p.id = o.{self.PARTY_COLUMN}
          {where.sql()}
        """
        total = self.conn.execute(f"SELECT COUNT(*) AS n {base}", where.params()).fetchone()["n"]
        rows = self.conn.execute(
            f"""
            SELECT o.id, o.invoice_number, o.{self.DATE_COLUMN} AS order_date,
                   o.{self.PARTY_COLUMN} AS counterparty_id, p.name AS counterparty_name,
                   CAST(o.total_amount AS REAL) AS total_amount,
                   CAST(o.paid_amount AS REAL)  AS paid_amount,
                   CAST(o.balance AS REAL)      AS balance,
                   o.payment_method, o.payment_status,
                   (SELECT COUNT(*) FROM {self.ITEMS_TABLE} it WHERE it.{self.ORDER_FK} = o.id) AS item_count
            {base}
             ORDER BY DATE(o.{self.DATE_COLUMN}) DESC, o.id DESC
             LIMIT ? OFFSET ?
            """,
            [*where.params(), limit, offset],
        ).fetchall()
        return PageResult(total=int(total), page=page, limit=limit, data=[dict(r) for r in rows])
