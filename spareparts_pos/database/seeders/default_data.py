import logging

from ...utils.auth import hash_password

_log = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ("Engine", "Engine parts and gaskets"),
    ("Brakes", "Pads, discs, shoes and fluid"),
    ("Electrical", "Batteries, bulbs, sensors"),
    ("Suspension", "Shocks, struts, bushes"),
    ("Filters", "Oil, air and fuel filters"),
)


def seed(conn):
    # first run: admin/admin123
    row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
    if row and row["n"] == 0:
        conn.execute("""
            INSERT INTO users(username, password_hash, full_name, email, role, is_active)
            VALUES (?, ?, ?, ?, 'admin', 1)
        """, ("admin", hash_password("admin123"), "Administrator", "admin@example.com"))
        _log.info("seeded default admin user")

    row = conn.execute("SELECT COUNT(*) AS n FROM categories").fetchone()
    if row and row["n"] == 0:
        conn.executemany(
            "INSERT OR IGNORE INTO categories(name, description) VALUES (?, ?)",
            DEFAULT_CATEGORIES,
        )
    conn.commit()
