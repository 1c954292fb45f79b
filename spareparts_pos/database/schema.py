from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== LOOKUPS ======================== */

CREATE TABLE IF NOT EXISTS categories (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT UNIQUE NOT NULL,
    description TEXT
);

CREATE TABLE IF NOT EXISTS brands (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT UNIQUE NOT NULL,
    description TEXT
);

/* ======================== PARTIES ======================== */

CREATE TABLE IF NOT EXISTS suppliers (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    name           TEXT NOT NULL,
    contact_person TEXT,
    phone          TEXT,
    email          TEXT,
    address        TEXT,
    created_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS customers (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    phone        TEXT,
    email        TEXT,
    address      TEXT,
    vehicle_info TEXT,
    created_at   TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_customers_name ON customers(name);

/* -------- users -------- */
CREATE TABLE IF NOT EXISTS users (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    username      TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    full_name     TEXT,
    email         TEXT,
    role          TEXT NOT NULL DEFAULT 'cashier' CHECK (role IN ('admin','manager','cashier')),
    is_active     INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    created_at    TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    last_login    TIMESTAMP
);

/* ======================== INVENTORY ======================== */

CREATE TABLE IF NOT EXISTS inventory (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    part_code     TEXT UNIQUE NOT NULL,
    name          TEXT NOT NULL,
    category_id   INTEGER,
    brand_id      INTEGER,
    supplier_id   INTEGER,
    cost_price    NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(cost_price AS REAL) >= 0),
    selling_price NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(selling_price AS REAL) >= 0),
    quantity      INTEGER NOT NULL DEFAULT 0 CHECK (quantity >= 0),
    reorder_level INTEGER NOT NULL DEFAULT 0 CHECK (reorder_level >= 0),
    location      TEXT,
    description   TEXT,
    barcode       TEXT,
    image_path    TEXT,
    created_at    TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at    TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL,
    FOREIGN KEY (brand_id)    REFERENCES brands(id)     ON DELETE SET NULL,
    FOREIGN KEY (supplier_id) REFERENCES suppliers(id)  ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS idx_inventory_name ON inventory(name);
CREATE INDEX IF NOT EXISTS idx_inventory_barcode ON inventory(barcode);

/* ======================== DOCUMENTS: HEADERS ======================== */

/* customer_id is NULL for walk-in sales */
CREATE TABLE IF NOT EXISTS sales (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    invoice_number TEXT UNIQUE NOT NULL,
    customer_id    INTEGER,
    sale_date      DATE NOT NULL DEFAULT CURRENT_DATE,

    subtotal       NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(subtotal AS REAL) >= 0),
    discount       NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(discount AS REAL) >= 0),
    tax_rate       NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(tax_rate AS REAL) >= 0),
    tax            NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(tax AS REAL) >= 0),
    total_amount   NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(total_amount AS REAL) >= 0),

    payment_method TEXT NOT NULL DEFAULT 'cash' CHECK (payment_method IN ('cash','card','credit')),
    payment_status TEXT NOT NULL DEFAULT 'pending' CHECK (payment_status IN ('pending','partial','paid')),
    paid_amount    NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(paid_amount AS REAL) >= 0),
    balance        NUMERIC NOT NULL DEFAULT 0,

    notes          TEXT,
    created_by     INTEGER,
    created_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (customer_id) REFERENCES customers(id) ON DELETE SET NULL,
    FOREIGN KEY (created_by)  REFERENCES users(id)     ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(sale_date);
CREATE INDEX IF NOT EXISTS idx_sales_customer ON sales(customer_id);

CREATE TABLE IF NOT EXISTS purchases (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    invoice_number TEXT UNIQUE NOT NULL,
    supplier_id    INTEGER NOT NULL,
    purchase_date  DATE NOT NULL DEFAULT CURRENT_DATE,

    subtotal       NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(subtotal AS REAL) >= 0),
    discount       NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(discount AS REAL) >= 0),
    tax_rate       NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(tax_rate AS REAL) >= 0),
    tax            NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(tax AS REAL) >= 0),
    total_amount   NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(total_amount AS REAL) >= 0),

    payment_method TEXT NOT NULL DEFAULT 'cash' CHECK (payment_method IN ('cash','card','credit')),
    payment_status TEXT NOT NULL DEFAULT 'pending' CHECK (payment_status IN ('pending','partial','paid')),
    paid_amount    NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(paid_amount AS REAL) >= 0),
    balance        NUMERIC NOT NULL DEFAULT 0,

    notes          TEXT,
    created_by     INTEGER,
    created_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (supplier_id) REFERENCES suppliers(id) ON DELETE RESTRICT,
    FOREIGN KEY (created_by)  REFERENCES users(id)     ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS idx_purchases_date ON purchases(purchase_date);
CREATE INDEX IF NOT EXISTS idx_purchases_supplier ON purchases(supplier_id);

/* ======================== DOCUMENTS: ITEMS ======================== */

/* unit_price/total_price are frozen at order time; they do not follow inventory prices */
CREATE TABLE IF NOT EXISTS sale_items (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id      INTEGER NOT NULL,
    inventory_id INTEGER NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity > 0),
    unit_price   NUMERIC NOT NULL CHECK (CAST(unit_price AS REAL) >= 0),
    total_price  NUMERIC NOT NULL CHECK (CAST(total_price AS REAL) >= 0),
    FOREIGN KEY (sale_id)      REFERENCES sales(id)     ON DELETE CASCADE,
    FOREIGN KEY (inventory_id) REFERENCES inventory(id) ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);

CREATE TABLE IF NOT EXISTS purchase_items (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    purchase_id  INTEGER NOT NULL,
    inventory_id INTEGER NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity > 0),
    unit_price   NUMERIC NOT NULL CHECK (CAST(unit_price AS REAL) >= 0),
    total_price  NUMERIC NOT NULL CHECK (CAST(total_price AS REAL) >= 0),
    FOREIGN KEY (purchase_id)  REFERENCES purchases(id) ON DELETE CASCADE,
    FOREIGN KEY (inventory_id) REFERENCES inventory(id) ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS idx_purchase_items_purchase ON purchase_items(purchase_id);

/* ======================== PAYMENTS LEDGER ======================== */

/* append-only; exactly one of sale_id / purchase_id */
CREATE TABLE IF NOT EXISTS payments (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id        INTEGER,
    purchase_id    INTEGER,
    amount         NUMERIC NOT NULL CHECK (CAST(amount AS REAL) > 0),
    payment_method TEXT NOT NULL CHECK (payment_method IN ('cash','card','credit')),
    payment_date   DATE NOT NULL DEFAULT CURRENT_DATE,
    notes          TEXT,
    created_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK ((sale_id IS NULL) <> (purchase_id IS NULL)),
    FOREIGN KEY (sale_id)     REFERENCES sales(id)     ON DELETE CASCADE,
    FOREIGN KEY (purchase_id) REFERENCES purchases(id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_payments_sale ON payments(sale_id);
CREATE INDEX IF NOT EXISTS idx_payments_purchase ON payments(purchase_id);

/* Payments are never edited in place */
DROP TRIGGER IF EXISTS trg_payments_no_update;
CREATE TRIGGER trg_payments_no_update
BEFORE UPDATE ON payments
BEGIN
  SELECT RAISE(ABORT, 'payments are append-only');
END;

DROP TRIGGER IF EXISTS trg_inventory_touch;
CREATE TRIGGER trg_inventory_touch
AFTER UPDATE ON inventory
FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
BEGIN
  UPDATE inventory SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
END;
"""


def _ensure_customer_vehicle_info(conn: sqlite3.Connection) -> None:
    """
    Safe migration for databases created before `vehicle_info` existed.
    Adds the column if missing. No-op if already present.
    """
    cur = conn.execute("PRAGMA table_info(customers);")
    cols = {row[1] for row in cur.fetchall()}  # row[1] = name
    if "vehicle_info" not in cols:
        conn.execute("ALTER TABLE customers ADD COLUMN vehicle_info TEXT;")


def _ensure_tax_rate_column(conn: sqlite3.Connection) -> None:
    """
    Older databases kept only the tax amount. Adds `tax_rate` to both order
    tables and backfills it from tax / (subtotal - discount).
    """
    for table in ("sales", "purchases"):
        cols = {row[1] for row in conn.execute(f"PRAGMA table_info({table});")}
        if "tax_rate" in cols:
            continue
        conn.execute(
            f"ALTER TABLE {table} ADD COLUMN tax_rate NUMERIC NOT NULL DEFAULT 0;"
        )
        conn.execute(
            f"""
            UPDATE {table}
               SET tax_rate = ROUND(CAST(tax AS REAL) / (CAST(subtotal AS REAL) - CAST(discount AS REAL)), 4)
             WHERE CAST(subtotal AS REAL) - CAST(discount AS REAL) > 0
            """
        )


def init_schema(db_path: Path | str) -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        # Apply (idempotent) schema
        conn.executescript(SQL)
        _ensure_customer_vehicle_info(conn)
        _ensure_tax_rate_column(conn)
        conn.commit()
    finally:
        conn.close()
    _log.debug("schema applied to %s", db_path)


if __name__ == "__main__":
    from ..config import DB_PATH

    target = sys.argv[1] if len(sys.argv) > 1 else DB_PATH
    init_schema(target)
    print(f"✓ DB applied to {target}")
