from __future__ import annotations

"""
Inventory (spare parts) repository.

Stock quantities change in two ways only: the order engine moves them when
sales/purchases are written, and `adjust_quantity` records a manual
correction. `update()` never touches `quantity`.

Conventions:
- List-returning methods yield `list[dict]` (sqlite3.Row -> dict).
- Prices are cast to float for consistent UI display.
"""

from dataclasses import dataclass, fields
import sqlite3
from typing import Optional

from .. import transaction
from .errors import DomainError, InsufficientStockError, NotFoundError
from .filters import Eq, PageResult, Raw, Search, Where, check_page


@dataclass
class InventoryItem:
    id: int | None
    part_code: str
    name: str
    category_id: int | None = None
    brand_id: int | None = None
    supplier_id: int | None = None
    cost_price: float = 0.0
    selling_price: float = 0.0
    quantity: int = 0
    reorder_level: int = 0
    location: str | None = None
    description: str | None = None
    barcode: str | None = None
    image_path: str | None = None


@dataclass
class InventoryFilters:
    search: Optional[str] = None          # part code / name / barcode / description
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    supplier_id: Optional[int] = None
    stock_status: Optional[str] = None    # 'low' | 'out' | None


STOCK_STATUSES = ("low", "out")

_COLUMNS = """
    i.id, i.part_code, i.name, i.category_id, i.brand_id, i.supplier_id,
    CAST(i.cost_price AS REAL)    AS cost_price,
    CAST(i.selling_price AS REAL) AS selling_price,
    i.quantity, i.reorder_level, i.location, i.description, i.barcode, i.image_path
"""

_LIST_COLUMNS = _COLUMNS + """,
    c.name AS category_name, b.name AS brand_name, s.name AS supplier_name,
    i.created_at, i.updated_at
"""

_JOINS = """
    FROM inventory i
    LEFT JOIN categories c ON c.id = i.category_id
    LEFT JOIN brands     b ON b.id = i.brand_id
    LEFT JOIN suppliers  s ON s.id = i.supplier_id
"""


class InventoryRepo:
    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _validate(item: InventoryItem) -> None:
        if not (item.part_code or "").strip():
            raise DomainError("Part code cannot be empty.")
        if not (item.name or "").strip():
            raise DomainError("Name cannot be empty.")
        if item.cost_price is None or item.cost_price < 0:
            raise DomainError("Cost price cannot be negative.")
        if item.selling_price is None or item.selling_price < 0:
            raise DomainError("Selling price cannot be negative.")
        if item.quantity is None or int(item.quantity) < 0:
            raise DomainError("Quantity cannot be negative.")
        if item.reorder_level is None or int(item.reorder_level) < 0:
            raise DomainError("Reorder level cannot be negative.")

    @staticmethod
    def _to_item(row: sqlite3.Row) -> InventoryItem:
        names = {f.name for f in fields(InventoryItem)}
        return InventoryItem(**{k: row[k] for k in row.keys() if k in names})

    @staticmethod
    def _unique_violation(e: sqlite3.IntegrityError, part_code: str) -> DomainError:
        if "part_code" in str(e):
            return DomainError(f"Part code '{part_code}' already exists.")
        return DomainError(f"Could not save item: {e}")

    # ---- Queries ----------------------------------------------------------

    def get(self, item_id: int) -> InventoryItem | None:
        r = self.conn.execute(f"SELECT {_COLUMNS} FROM inventory i WHERE i.id=?", (item_id,)).fetchone()
        return self._to_item(r) if r else None

    def get_by_code(self, part_code: str) -> InventoryItem | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM inventory i WHERE i.part_code=?", (part_code.strip(),)
        ).fetchone()
        return self._to_item(r) if r else None

    def find_by_barcode(self, barcode: str) -> InventoryItem | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM inventory i WHERE i.barcode=? ORDER BY i.id LIMIT 1",
            (barcode.strip(),),
        ).fetchone()
        return self._to_item(r) if r else None

    def list_for_select(self) -> list[dict]:
        """[{id, part_code, name, selling_price, cost_price, quantity}] for item pickers."""
        rows = self.conn.execute(
            """
            SELECT id, part_code, name,
                   CAST(selling_price AS REAL) AS selling_price,
                   CAST(cost_price AS REAL)    AS cost_price,
                   quantity
              FROM inventory
             ORDER BY name, part_code
            """
        ).fetchall()
        return [dict(r) for r in rows]

    def list_inventory(
        self,
        filters: InventoryFilters | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> PageResult:
        """
        Paginated listing. stock_status 'low' means 0 < quantity <= reorder_level,
        'out' means quantity = 0.
        """
        page, limit, offset = check_page(page, limit)
        f = filters or InventoryFilters()
        if f.stock_status and f.stock_status not in STOCK_STATUSES:
            raise ValueError(f"Unknown stock status: {f.stock_status!r}")
        where = Where(
            Search(("i.part_code", "i.name", "i.barcode", "i.description"), f.search),
            Eq("i.category_id", f.category_id),
            Eq("i.brand_id", f.brand_id),
            Eq("i.supplier_id", f.supplier_id),
            Raw("i.quantity > 0 AND i.quantity <= i.reorder_level", when=f.stock_status == "low"),
            Raw("i.quantity = 0", when=f.stock_status == "out"),
        )
        total = self.conn.execute(
            f"SELECT COUNT(*) AS n {_JOINS} {where.sql()}", where.params()
        ).fetchone()["n"]
        rows = self.conn.execute(
            f"SELECT {_LIST_COLUMNS} {_JOINS} {where.sql()} ORDER BY i.name, i.part_code LIMIT ? OFFSET ?",
            [*where.params(), limit, offset],
        ).fetchall()
        return PageResult(total=int(total), page=page, limit=limit, data=[dict(r) for r in rows])

    def low_stock(self, threshold: int | None = None) -> list[dict]:
        """
        Items at or below their reorder level. When `threshold` is given
        (the settings' low-stock threshold) items at or below it count too.
        """
        sql = f"""
            SELECT {_LIST_COLUMNS} {_JOINS}
             WHERE i.quantity <= i.reorder_level
                OR (? IS NOT NULL AND i.quantity <= ?)
             ORDER BY i.quantity, i.name
        """
        return [dict(r) for r in self.conn.execute(sql, (threshold, threshold)).fetchall()]

    def is_low_stock(self, item_id: int) -> bool:
        item = self.get(item_id)
        if item is None:
            raise NotFoundError(f"Inventory item #{item_id} not found.")
        return item.quantity <= item.reorder_level

    # ---- Mutations --------------------------------------------------------

    def create(self, item: InventoryItem) -> int:
        self._validate(item)
        try:
            with transaction(self.conn):
                cur = self.conn.execute(
                    """
                    INSERT INTO inventory (
                        part_code, name, category_id, brand_id, supplier_id,
                        cost_price, selling_price, quantity, reorder_level,
                        location, description, barcode, image_path
                    ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?)
                    """,
                    (
                        item.part_code.strip(), item.name.strip(),
                        item.category_id, item.brand_id, item.supplier_id,
                        float(item.cost_price), float(item.selling_price),
                        int(item.quantity), int(item.reorder_level),
                        item.location, item.description, item.barcode, item.image_path,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise self._unique_violation(e, item.part_code) from e
        return int(cur.lastrowid)

    def update(self, item: InventoryItem) -> None:
        """Update descriptive fields and prices; stock moves go through orders/adjustments."""
        if item.id is None:
            raise DomainError("Cannot update an item without an id.")
        self._validate(item)
        try:
            with transaction(self.conn):
                cur = self.conn.execute(
                    """
                    UPDATE inventory
                       SET part_code=?, name=?, category_id=?, brand_id=?, supplier_id=?,
                           cost_price=?, selling_price=?, reorder_level=?,
                           location=?, description=?, barcode=?, image_path=?,
                           updated_at=CURRENT_TIMESTAMP
                     WHERE id=?
                    """,
                    (
                        item.part_code.strip(), item.name.strip(),
                        item.category_id, item.brand_id, item.supplier_id,
                        float(item.cost_price), float(item.selling_price), int(item.reorder_level),
                        item.location, item.description, item.barcode, item.image_path,
                        item.id,
                    ),
                )
                if cur.rowcount == 0:
                    raise NotFoundError(f"Inventory item #{item.id} not found.")
        except sqlite3.IntegrityError as e:
            raise self._unique_violation(e, item.part_code) from e

    def adjust_quantity(self, item_id: int, delta: int) -> int:
        """Manual stock correction; returns the new on-hand quantity."""
        with transaction(self.conn):
            row = self.conn.execute(
                "SELECT part_code, quantity FROM inventory WHERE id=?", (item_id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Inventory item #{item_id} not found.")
            new_qty = int(row["quantity"]) + int(delta)
            if new_qty < 0:
                raise InsufficientStockError(row["part_code"], int(row["quantity"]), -int(delta))
            self.conn.execute(
                "UPDATE inventory SET quantity=?, updated_at=CURRENT_TIMESTAMP WHERE id=?",
                (new_qty, item_id),
            )
        return new_qty

    def _is_referenced(self, item_id: int) -> bool:
        for sql in (
            "SELECT 1 FROM sale_items     WHERE inventory_id=? LIMIT 1",
            "SELECT 1 FROM purchase_items WHERE inventory_id=? LIMIT 1",
        ):
            if self.conn.execute(sql, (item_id,)).fetchone():
                return True
        return False

    def delete(self, item_id: int) -> None:
        """Refuses to delete parts that appear on any sale or purchase."""
        if self._is_referenced(item_id):
            raise DomainError("Cannot delete item: it appears on sales or purchases.")
        with transaction(self.conn):
            cur = self.conn.execute("DELETE FROM inventory WHERE id=?", (item_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Inventory item #{item_id} not found.")
