# database/repositories/numbering.py
"""
Invoice / PO numbers.

    sales:     YYYYMMDD-NNNN
    purchases: PO-YYYYMMDD-NNNN

The sequence is not stored: the next number is the greatest suffix already
used under today's prefix, plus one. Call inside the order-creation
transaction so the read and the insert see the same database.
"""
from __future__ import annotations

import datetime
import sqlite3
from typing import Callable

from ...constants import NUMBER_SUFFIX_WIDTH, PURCHASE_NUMBER_PREFIX, SALE_NUMBER_PREFIX

Clock = Callable[[], datetime.date]

# kind -> (table, number prefix)
_SEQUENCES = {
    "sale": ("sales", SALE_NUMBER_PREFIX),
    "purchase": ("purchases", PURCHASE_NUMBER_PREFIX),
}


def system_clock() -> datetime.date:
    return datetime.date.today()


def number_prefix(kind: str, day: datetime.date) -> str:
    _, fixed = _SEQUENCES[kind]
    return f"{fixed}{day:%Y%m%d}-"


def format_number(prefix: str, seq: int) -> str:
    return f"{prefix}{seq:0{NUMBER_SUFFIX_WIDTH}d}"


def next_number(conn: sqlite3.Connection, kind: str, clock: Clock = system_clock) -> str:
    """Next free number of `kind` ('sale' or 'purchase') for the clock's date."""
    if kind not in _SEQUENCES:
        raise ValueError(f"Unknown numbering kind: {kind!r}")
    table, _ = _SEQUENCES[kind]
    prefix = number_prefix(kind, clock())
    row = conn.execute(
        f"""
        SELECT MAX(CAST(substr(invoice_number, ?) AS INTEGER)) AS m
          FROM {table}
         WHERE invoice_number LIKE ?
        """,
        (len(prefix) + 1, prefix + "%"),
    ).fetchone()
    last = int(row["m"]) if row and row["m"] is not None else 0
    return format_number(prefix, last + 1)

