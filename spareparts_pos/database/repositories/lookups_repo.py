# database/repositories/lookups_repo.py
"""Categories and brands: small name-unique lookup tables used by inventory."""
from __future__ import annotations

import sqlite3

from .. import transaction
from .errors import DomainError, NotFoundError


class _LookupRepo:
    TABLE = ""
    LABEL = ""

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def list_all(self) -> list[dict]:
        rows = self.conn.execute(f"SELECT id, name, description FROM {self.TABLE} ORDER BY name").fetchall()
        return [dict(r) for r in rows]

    def get(self, row_id: int) -> dict | None:
        r = self.conn.execute(f"SELECT id, name, description FROM {self.TABLE} WHERE id=?", (row_id,)).fetchone()
        return dict(r) if r else None

    def create(self, name: str, description: str | None = None) -> int:
        name = (name or "").strip()
        if not name:
            raise DomainError(f"{self.LABEL} name cannot be empty.")
        try:
            with transaction(self.conn):
                cur = self.conn.execute(
                    f"INSERT INTO {self.TABLE}(name, description) VALUES (?, ?)", (name, description)
                )
        except sqlite3.IntegrityError as e:
            raise DomainError(f"{self.LABEL} '{name}' already exists.") from e
        return int(cur.lastrowid)

    def rename(self, row_id: int, name: str, description: str | None = None) -> None:
        name = (name or "").strip()
        if not name:
            raise DomainError(f"{self.LABEL} name cannot be empty.")
        try:
            with transaction(self.conn):
                cur = self.conn.execute(
                    f"UPDATE {self.TABLE} SET name=?, description=? WHERE id=?", (name, description, row_id)
                )
        except sqlite3.IntegrityError as e:
            raise DomainError(f"{self.LABEL} '{name}' already exists.") from e
        if cur.rowcount == 0:
            raise NotFoundError(f"{self.LABEL} #{row_id} not found.")

    def delete(self, row_id: int) -> None:
        """Items keep existing; their reference is cleared (ON DELETE SET NULL)."""
        with transaction(self.conn):
            self.conn.execute(f"DELETE FROM {self.TABLE} WHERE id=?", (row_id,))


class CategoriesRepo(_LookupRepo):
    TABLE = "categories"
    LABEL = "Category"


class BrandsRepo(_LookupRepo):
    TABLE = "brands"
    LABEL = "Brand"
