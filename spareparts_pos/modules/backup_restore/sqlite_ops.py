"""
modules/backup_restore/sqlite_ops.py

Purpose
-------
SQLite-aware operations for taking a **consistent** copy of the live database
and checking a database file's integrity.

Public Interface
----------------
- get_db_size_bytes(path) -> int
- snapshot_to(conn, dest_path, progress_step=None) -> None
- restore_from(src_path, conn, progress_step=None) -> None
- check_database(db_path, thorough=False, foreign_keys=False) -> list[str]

Notes
-----
- Both directions use the SQLite Online Backup API on the application's own
  connection, so the live connection stays valid after a restore and no
  -wal/-shm files are ever copied by hand.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Callable, List, Optional

__all__ = [
    "get_db_size_bytes",
    "snapshot_to",
    "restore_from",
    "check_database",
]

# pages copied per backup step; progress is reported between steps
_PAGES_PER_STEP = 1024


def get_db_size_bytes(path: str | Path) -> int:
    p = Path(path)
    return p.stat().st_size if p.exists() else 0


def _connect_ro(db_path: str | Path) -> sqlite3.Connection:
    """
    Open a read-only connection via URI. Safe for integrity checks; never
    creates the file.
    """
    uri = f"file:{Path(db_path).as_posix()}?mode=ro"
    con = sqlite3.connect(uri, uri=True, isolation_level=None)
    con.row_factory = sqlite3.Row
    return con


def _progress_adapter(progress_step: Optional[Callable[[int], None]]):
    if progress_step is None:
        return None

    def _progress(status: int, remaining: int, total: int) -> None:
        if total > 0:
            progress_step(int(((total - remaining) / total) * 100))

    return _progress


# ----------------------------
# Backup API in both directions
# ----------------------------

def snapshot_to(
    conn: sqlite3.Connection,
    dest_path: str | Path,
    progress_step: Optional[Callable[[int], None]] = None,
) -> None:
    """
    Copy the database behind `conn` into a standalone file at `dest_path`.
    The copy is switched to rollback-journal mode so it is a single file.
    """
    Path(dest_path).parent.mkdir(parents=True, exist_ok=True)
    dst = sqlite3.connect(str(dest_path))
    try:
        conn.backup(dst, pages=_PAGES_PER_STEP, progress=_progress_adapter(progress_step))
        dst.execute("PRAGMA journal_mode=DELETE;")
    finally:
        dst.close()


def restore_from(
    src_path: str | Path,
    conn: sqlite3.Connection,
    progress_step: Optional[Callable[[int], None]] = None,
) -> None:
    """Overwrite the database behind `conn` with the contents of `src_path`."""
    src = _connect_ro(src_path)
    try:
        src.backup(conn, pages=_PAGES_PER_STEP, progress=_progress_adapter(progress_step))
    finally:
        src.close()


# ----------------------------
# Health checks
# ----------------------------

def check_database(db_path: str | Path, *, thorough: bool = False, foreign_keys: bool = False,
                   max_lines: int = 5) -> List[str]:
    """
    Problems found in the database file; an empty list means it is healthy.

    quick_check by default, the full integrity_check when `thorough`. With
    `foreign_keys` dangling references are reported too.
    """
    p = Path(db_path)
    if not p.is_file():
        return [f"{p.name} does not exist."]

    pragma = "integrity_check" if thorough else "quick_check"
    problems: List[str] = []
    try:
        con = _connect_ro(p)
        try:
            results = [str(r[0]) for r in con.execute(f"PRAGMA {pragma}({max_lines});")]
            if results != ["ok"]:
                problems.append(f"{pragma} reported:")
                problems.extend(results)
            if foreign_keys and not problems:
                dangling = con.execute("PRAGMA foreign_key_check;").fetchall()
                if dangling:
                    problems.append(f"{len(dangling)} row(s) point at missing parents:")
                    problems.extend(
                        f"  {r['table']} row {r['rowid']} -> {r['parent']}" for r in dangling[:max_lines]
                    )
        finally:
            con.close()
    except sqlite3.DatabaseError as e:
        problems.append(f"{p.name} is not a readable SQLite database ({e}).")
    return problems
