# database/__init__.py
from __future__ import annotations

from contextlib import contextmanager
from itertools import count
from pathlib import Path
from typing import Iterator
import logging
import sqlite3

from ..constants import SCHEMA_VERSION
from . import schema as schema_module
from .seeders.default_data import seed as seed_default_data
from .versioning import get_current_version, set_current_version

_log = logging.getLogger(__name__)

_savepoints = count(1)
# open transaction() blocks per connection
_depth: dict[int, int] = {}


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures schema & seed data are applied idempotently.
    """
    if db_path is None:
        from ..config import DB_PATH

        db_path = DB_PATH
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Always apply the schema (idempotent: uses CREATE IF NOT EXISTS / DROP TRIGGER IF EXISTS)
    schema_module.init_schema(db_path)

    conn = sqlite3.connect(db_path, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    if get_current_version(conn) is None:
        set_current_version(conn, SCHEMA_VERSION)

    # Seeders should be safe to run repeatedly (idempotent).
    seed_default_data(conn)

    conn.commit()
    return conn


def db_path_of(conn: sqlite3.Connection) -> str:
    """Absolute path of the main database file behind `conn` ('' for :memory:)."""
    row = conn.execute("PRAGMA database_list;").fetchone()
    return row[2] if row else ""


@contextmanager
def transaction(conn: sqlite3.Connection, *, immediate: bool = True) -> Iterator[sqlite3.Connection]:
    """
    Explicit all-or-nothing unit of work.

    Opens BEGIN IMMEDIATE (the write lock is taken up front, so reads made
    inside the block, e.g. invoice numbering, see a stable database) and
    COMMITs on normal exit or ROLLBACKs on any exception, which is re-raised.

    A block opened inside another `transaction()` block on the same
    connection becomes a SAVEPOINT, so composed units share one outer commit.
    A transaction left open by anything else is rolled back first; the
    outermost block always owns the COMMIT.
    """
    key = id(conn)
    depth = _depth.get(key, 0)
    if depth:
        name = f"sp_{next(_savepoints)}"
        conn.execute(f"SAVEPOINT {name}")
        _depth[key] = depth + 1
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
            conn.execute(f"RELEASE SAVEPOINT {name}")
            raise
        else:
            conn.execute(f"RELEASE SAVEPOINT {name}")
        finally:
            _depth[key] = depth
        return

    if conn.in_transaction:
        _log.warning("discarding a transaction left open outside transaction()")
        conn.rollback()

    conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    _depth[key] = 1
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        _depth.pop(key, None)


__all__ = [
    "get_connection",
    "db_path_of",
    "transaction",
]
