"""
modules/backup_restore/validators.py

Purpose
-------
Preflight checks with clear, user-friendly error messages.

Public API
---------
- validate_backup_destination(dest_dir, db_size, free_space) -> None
- validate_backup_source(backup_file) -> None
"""

from __future__ import annotations

import os
from pathlib import Path

from ...constants import BACKUP_FILE_PREFIX, BACKUP_FILE_SUFFIX
from .fsops import human_size


def validate_backup_destination(dest_dir: str | Path, db_size: int, free_space: int) -> None:
    """
    Rules:
      - Destination must be a writable folder.
      - Require at least 1.5x DB size in free space.
    Raises:
      RuntimeError with a user-facing message on failure.
    """
    if db_size < 0:
        raise RuntimeError("Database size is invalid (negative bytes reported).")
    p = Path(dest_dir)
    if not p.is_dir():
        raise RuntimeError(f"Backup folder does not exist: {p}")
    if not os.access(str(p), os.W_OK | os.X_OK):
        raise RuntimeError(f"Backup folder is not writable: {p}")
    required = int(max(0, db_size) * 1.5)
    if free_space < required:
        raise RuntimeError(
            "Not enough free space in the backup folder.\n"
            f"Required (approx): {human_size(required)}\n"
            f"Available: {human_size(free_space)}"
        )


def validate_backup_source(backup_file: str | Path) -> None:
    """
    Rules:
      - Must exist and be a regular, readable, non-empty file.
      - Must be named like the files this application writes (backup-*.db).
    Raises:
      RuntimeError with a user-facing message on failure.
    """
    p = Path(backup_file)
    if not p.exists():
        raise RuntimeError(f"Backup file not found: {p}")
    if not p.is_file():
        raise RuntimeError(f"Backup path is not a file: {p}")
    if not (p.name.startswith(BACKUP_FILE_PREFIX) and p.suffix.lower() == BACKUP_FILE_SUFFIX):
        raise RuntimeError(f"Not a backup file: {p.name} (expected {BACKUP_FILE_PREFIX}<timestamp>{BACKUP_FILE_SUFFIX}).")
    if not os.access(str(p), os.R_OK):
        raise RuntimeError(f"Backup file is not readable: {p}")
    if p.stat().st_size <= 0:
        raise RuntimeError("The backup file is empty (0 bytes).")
