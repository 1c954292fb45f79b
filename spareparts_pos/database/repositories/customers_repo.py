from __future__ import annotations
from dataclasses import dataclass
import sqlite3

from .. import transaction
from .errors import DomainError, NotFoundError
from .filters import like_pattern


@dataclass
class Customer:
    id: int | None
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    vehicle_info: str | None = None


_COLUMNS = "id, name, phone, email, address, vehicle_info"


class CustomersRepo:
    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        s = s.strip()
        return s or None

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise DomainError(f"{field_label} cannot be empty.")

    def _values(self, c: Customer) -> tuple:
        self._ensure_non_empty(c.name, "Name")
        return (
            c.name.strip(),
            self._normalize_text(c.phone),
            self._normalize_text(c.email),
            self._normalize_text(c.address),
            self._normalize_text(c.vehicle_info),
        )

    # ---- Queries ----------------------------------------------------------

    def list_customers(self) -> list[Customer]:
        rows = self.conn.execute(f"SELECT {_COLUMNS} FROM customers ORDER BY name, id").fetchall()
        return [Customer(**r) for r in rows]

    def search(self, term: str) -> list[Customer]:
        """LIKE match over name / phone / email / vehicle info."""
        pattern = like_pattern(term or "")
        rows = self.conn.execute(
            f"""
            SELECT {_COLUMNS} FROM customers
             WHERE name LIKE ? ESCAPE '\\' OR phone LIKE ? ESCAPE '\\'
                OR email LIKE ? ESCAPE '\\' OR vehicle_info LIKE ? ESCAPE '\\'
             ORDER BY name, id
            """,
            (pattern, pattern, pattern, pattern),
        ).fetchall()
        return [Customer(**r) for r in rows]

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(f"SELECT {_COLUMNS} FROM customers WHERE id=?", (customer_id,)).fetchone()
        return Customer(**r) if r else None

    # ---- Mutations --------------------------------------------------------

    def create(self, customer: Customer) -> int:
        with transaction(self.conn):
            cur = self.conn.execute(
                "INSERT INTO customers(name, phone, email, address, vehicle_info) VALUES (?,?,?,?,?)",
                self._values(customer),
            )
        return int(cur.lastrowid)

    def update(self, customer: Customer) -> None:
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE customers SET name=?, phone=?, email=?, address=?, vehicle_info=? WHERE id=?",
                (*self._values(customer), customer.id),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Customer #{customer.id} not found.")

    def delete(self, customer_id: int) -> None:
        """Past sales keep their rows; their customer becomes walk-in (SET NULL)."""
        with transaction(self.conn):
            self.conn.execute("DELETE FROM customers WHERE id=?", (customer_id,))
