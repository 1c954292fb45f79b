"""Backup & Restore page: database snapshots, history, restore with a safety copy."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .controller import BackupRestoreController

__all__ = ["create_module"]


def create_module(conn: sqlite3.Connection, backup_dir: str | Path) -> "BackupRestoreController":
    # The page pulls in the Qt views; nothing is imported until the window asks for it
    from .controller import BackupRestoreController

    return BackupRestoreController(conn, backup_dir)
