"""
Demo data for a fresh shop: a few brands, suppliers, customers and stocked
parts. Idempotent (keyed on names / part codes), so it can be re-run.

Usage:
    python -m spareparts_pos.database.seeders.demo_data [db_path]
"""
from __future__ import annotations

import sqlite3
import sys

BRANDS = ("Bosch", "Denso", "NGK", "Toyota Genuine")

SUPPLIERS = (
    # name, contact_person, phone, email, address
    ("Auto Parts Wholesale", "Imran", "0300-1111111", "sales@apw.example", "Main Market"),
    ("Genuine Spares Co", "Sara", "0300-2222222", "orders@gsc.example", "Industrial Area"),
)

CUSTOMERS = (
    # name, phone, email, address, vehicle_info
    ("Ali Khan", "0311-3333333", None, "Street 4", "Corolla 2015"),
    ("Fleet Services Ltd", "0311-4444444", "fleet@example.com", "Depot Road", "Hilux x12"),
)

PARTS = (
    # part_code, name, category, brand, supplier, cost, sell, qty, reorder
    ("BRK-PAD-01", "Front Brake Pads", "Brakes", "Bosch", "Auto Parts Wholesale", 60.0, 100.0, 40, 5),
    ("OIL-FLT-01", "Oil Filter", "Filters", "Denso", "Auto Parts Wholesale", 30.0, 50.0, 100, 10),
    ("SPK-PLG-01", "Spark Plug", "Electrical", "NGK", "Genuine Spares Co", 8.0, 15.0, 4, 8),
    ("SHK-ABS-01", "Rear Shock Absorber", "Suspension", "Toyota Genuine", "Genuine Spares Co", 120.0, 180.0, 0, 2),
)


def _id(conn: sqlite3.Connection, sql: str, *params) -> int | None:
    r = conn.execute(sql, params).fetchone()
    return None if r is None else int(r[0])


def seed_demo(conn: sqlite3.Connection) -> dict:
    """Insert demo rows (skipping ones that exist); return a name -> id map."""
    ids: dict = {}
    for b in BRANDS:
        conn.execute("INSERT OR IGNORE INTO brands(name) VALUES (?)", (b,))
        ids[b] = _id(conn, "SELECT id FROM brands WHERE name=?", b)

    for name, person, phone, email, address in SUPPLIERS:
        sid = _id(conn, "SELECT id FROM suppliers WHERE name=?", name)
        if sid is None:
            sid = int(conn.execute(
                "INSERT INTO suppliers(name, contact_person, phone, email, address) VALUES (?,?,?,?,?)",
                (name, person, phone, email, address),
            ).lastrowid)
        ids[name] = sid

    for name, phone, email, address, vehicle in CUSTOMERS:
        cid = _id(conn, "SELECT id FROM customers WHERE name=?", name)
        if cid is None:
            cid = int(conn.execute(
                "INSERT INTO customers(name, phone, email, address, vehicle_info) VALUES (?,?,?,?,?)",
                (name, phone, email, address, vehicle),
            ).lastrowid)
        ids[name] = cid

    for code, name, cat, brand, supplier, cost, sell, qty, reorder in PARTS:
        conn.execute("INSERT OR IGNORE INTO categories(name) VALUES (?)", (cat,))
        conn.execute(
            """
            INSERT OR IGNORE INTO inventory(
                part_code, name, category_id, brand_id, supplier_id,
                cost_price, selling_price, quantity, reorder_level
            ) VALUES (?, ?, (SELECT id FROM categories WHERE name=?), ?, ?, ?, ?, ?, ?)
            """,
            (code, name, cat, ids[brand], ids[supplier], cost, sell, qty, reorder),
        )
        ids[code] = _id(conn, "SELECT id FROM inventory WHERE part_code=?", code)

    conn.commit()
    return ids


if __name__ == "__main__":
    from .. import get_connection

    con = get_connection(sys.argv[1] if len(sys.argv) > 1 else None)
    try:
        print(seed_demo(con))
    finally:
        con.close()
