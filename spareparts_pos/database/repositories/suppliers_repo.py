from __future__ import annotations
from dataclasses import dataclass
import sqlite3

from .. import transaction
from .errors import DomainError, NotFoundError
from .filters import like_pattern


@dataclass
class Supplier:
    id: int | None
    name: str
    contact_person: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None


_COLUMNS = "id, name, contact_person, phone, email, address"


class SuppliersRepo:
    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _clean(s: str | None) -> str | None:
        if s is None:
            return None
        s = s.strip()
        return s or None

    def _values(self, s: Supplier) -> tuple:
        if not (s.name or "").strip():
            raise DomainError("Name cannot be empty.")
        return (
            s.name.strip(),
            self._clean(s.contact_person),
            self._clean(s.phone),
            self._clean(s.email),
            self._clean(s.address),
        )

    # ---- Queries ----------------------------------------------------------

    def list_suppliers(self) -> list[Supplier]:
        rows = self.conn.execute(f"SELECT {_COLUMNS} FROM suppliers ORDER BY name, id").fetchall()
        return [Supplier(**r) for r in rows]

    def search(self, term: str) -> list[Supplier]:
        pattern = like_pattern(term or "")
        rows = self.conn.execute(
            f"""
            SELECT {_COLUMNS} FROM suppliers
             WHERE name LIKE ? ESCAPE '\\' OR contact_person LIKE ? ESCAPE '\\'
                OR phone LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\'
             ORDER BY name, id
            """,
            (pattern, pattern, pattern, pattern),
        ).fetchall()
        return [Supplier(**r) for r in rows]

    def get(self, supplier_id: int) -> Supplier | None:
        r = self.conn.execute(f"SELECT {_COLUMNS} FROM suppliers WHERE id=?", (supplier_id,)).fetchone()
        return Supplier(**r) if r else None

    # ---- Mutations --------------------------------------------------------

    def create(self, supplier: Supplier) -> int:
        with transaction(self.conn):
            cur = self.conn.execute(
                "INSERT INTO suppliers(name, contact_person, phone, email, address) VALUES (?,?,?,?,?)",
                self._values(supplier),
            )
        return int(cur.lastrowid)

    def update(self, supplier: Supplier) -> None:
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE suppliers SET name=?, contact_person=?, phone=?, email=?, address=? WHERE id=?",
                (*self._values(supplier), supplier.id),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Supplier #{supplier.id} not found.")

    def delete(self, supplier_id: int) -> None:
        """Suppliers with purchases on record cannot be deleted."""
        used = self.conn.execute(
            "SELECT 1 FROM purchases WHERE supplier_id=? LIMIT 1", (supplier_id,)
        ).fetchone()
        if used:
            raise DomainError("Cannot delete supplier: purchases reference it.")
        with transaction(self.conn):
            self.conn.execute("DELETE FROM suppliers WHERE id=?", (supplier_id,))
