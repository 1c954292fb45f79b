"""
modules/backup_restore/service.py

Purpose
-------
Backup/restore workflows for the live application database.

Public interface
----------------
- BackupService.create_backup(progress=None) -> BackupInfo
- BackupService.list_backups() -> list[BackupInfo]     (newest first)
- BackupService.restore_backup(path, progress=None) -> Path  (safety copy)
- BackupService.delete_backup(path) -> None

Each call runs to completion on the caller's thread. All of them refuse to
start while the application connection has an open transaction, so a
snapshot never captures (and a restore never clobbers) half an order.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ...constants import BACKUP_FILE_PREFIX, BACKUP_FILE_SUFFIX, SAFETY_COPY_PREFIX
from ...database import db_path_of
from ...database.repositories.errors import DomainError
from . import fsops, sqlite_ops
from .logging_utils import get_logger, log_event
from .validators import validate_backup_destination, validate_backup_source

ProgressFn = Callable[[int], None]

_STAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


class BackupError(DomainError):
    """Backup or restore could not be carried out; the live database is unchanged."""


@dataclass(frozen=True)
class BackupInfo:
    path: Path
    name: str
    size_bytes: int
    created_at: datetime

    @property
    def size_label(self) -> str:
        return fsops.human_size(self.size_bytes)


class BackupService:
    def __init__(
        self,
        conn: sqlite3.Connection,
        backup_dir: str | Path,
        *,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.conn = conn
        self.backup_dir = Path(backup_dir)
        self.clock = clock
        self._log = logger or get_logger()

    # ---- helpers ----
    def _ensure_idle(self, op: str) -> None:
        if self.conn.in_transaction:
            log_event(self._log, op, "preflight", "refused: transaction in progress", level=logging.WARNING)
            raise BackupError("A database transaction is in progress; try again when it has finished.")

    def _next_backup_path(self) -> Path:
        stamp = self.clock().strftime(_STAMP_FORMAT)
        path = self.backup_dir / f"{BACKUP_FILE_PREFIX}{stamp}{BACKUP_FILE_SUFFIX}"
        n = 1
        while path.exists():
            path = self.backup_dir / f"{BACKUP_FILE_PREFIX}{stamp}-{n}{BACKUP_FILE_SUFFIX}"
            n += 1
        return path

    def _info(self, path: Path) -> BackupInfo:
        st = path.stat()
        return BackupInfo(
            path=path,
            name=path.name,
            size_bytes=int(st.st_size),
            created_at=datetime.fromtimestamp(st.st_mtime),
        )

    def _in_backup_dir(self, path: str | Path) -> Path:
        p = Path(path)
        if not p.is_absolute():
            p = self.backup_dir / p
        if p.resolve().parent != self.backup_dir.resolve():
            raise BackupError(f"{p.name} is not in the backup folder.")
        return p

    # ---- workflows ----
    def create_backup(self, progress: Optional[ProgressFn] = None) -> BackupInfo:
        """Snapshot the live database to backup-<timestamp>.db and verify it."""
        self._ensure_idle("backup")
        db_path = db_path_of(self.conn)
        try:
            fsops.ensure_writable_dir(self.backup_dir)
            validate_backup_destination(
                self.backup_dir,
                sqlite_ops.get_db_size_bytes(db_path) if db_path else 0,
                fsops.get_free_space_bytes(self.backup_dir),
            )
        except RuntimeError as e:
            log_event(self._log, "backup", "preflight", str(e), level=logging.ERROR)
            raise BackupError(str(e)) from e

        dest = self._next_backup_path()
        tmp = Path(fsops.make_temp_file(suffix=".part", dir=self.backup_dir))
        log_event(self._log, "backup", "snapshot", "snapshot started", {"src": db_path, "dest": str(dest)})
        try:
            sqlite_ops.snapshot_to(self.conn, tmp, progress)
            problems = sqlite_ops.check_database(tmp)
            if problems:
                raise BackupError("Backup image failed its integrity check:\n" + "\n".join(problems))
            fsops.atomic_move(tmp, dest)
        except (sqlite3.DatabaseError, OSError) as e:
            tmp.unlink(missing_ok=True)
            log_event(self._log, "backup", "snapshot", f"failed: {e}", level=logging.ERROR)
            raise BackupError(f"Backup failed: {e}") from e
        except BackupError as e:
            tmp.unlink(missing_ok=True)
            log_event(self._log, "backup", "verify", str(e), level=logging.ERROR)
            raise

        info = self._info(dest)
        log_event(self._log, "backup", "done", "backup written", {"path": str(dest), "size": info.size_bytes})
        return info

    def list_backups(self) -> list[BackupInfo]:
        if not self.backup_dir.is_dir():
            return []
        files = [
            p for p in self.backup_dir.glob(f"{BACKUP_FILE_PREFIX}*{BACKUP_FILE_SUFFIX}") if p.is_file()
        ]
        infos = [self._info(p) for p in files]
        # the timestamp is in the name, so name order is creation order
        return sorted(infos, key=lambda i: (i.created_at, i.name), reverse=True)

    def restore_backup(self, path: str | Path, progress: Optional[ProgressFn] = None) -> Path:
        """
        Replace the live database with a backup.

        The backup is integrity-checked first and the current database is
        copied to pre-restore-<timestamp>.db. If the restored database fails
        its checks the safety copy is put back and BackupError is raised.
        Returns the safety copy path.
        """
        self._ensure_idle("restore")
        src = self._in_backup_dir(path)
        try:
            validate_backup_source(src)
        except RuntimeError as e:
            log_event(self._log, "restore", "preflight", str(e), level=logging.ERROR)
            raise BackupError(str(e)) from e
        details = sqlite_ops.check_database(src, thorough=True)
        if details:
            log_event(self._log, "restore", "verify", "backup failed integrity check",
                      {"path": str(src), "details": details}, level=logging.ERROR)
            raise BackupError("Selected backup failed integrity check:\n" + "\n".join(details))

        stamp = self.clock().strftime(_STAMP_FORMAT)
        safety = self.backup_dir / f"{SAFETY_COPY_PREFIX}{stamp}{BACKUP_FILE_SUFFIX}"
        sqlite_ops.snapshot_to(self.conn, safety)
        log_event(self._log, "restore", "safety_copy", "safety copy created", {"path": str(safety)})

        try:
            sqlite_ops.restore_from(src, self.conn, progress)
            db_path = db_path_of(self.conn)
            if db_path:
                details = sqlite_ops.check_database(db_path, foreign_keys=True)
                if details:
                    raise BackupError("Restored database failed post-restore checks:\n" + "\n".join(details))
        except (BackupError, sqlite3.DatabaseError) as e:
            log_event(self._log, "restore", "swap", f"failed, rolling back: {e}", level=logging.ERROR)
            sqlite_ops.restore_from(safety, self.conn)
            log_event(self._log, "restore", "rollback", "live database put back from safety copy")
            if isinstance(e, BackupError):
                raise
            raise BackupError(f"Restore failed: {e}") from e

        log_event(self._log, "restore", "done", "restore completed", {"from": str(src), "safety": str(safety)})
        return safety

    def delete_backup(self, path: str | Path) -> None:
        p = self._in_backup_dir(path)
        if not p.is_file():
            raise BackupError(f"Backup file not found: {p.name}")
        p.unlink()
        log_event(self._log, "delete", "done", "backup deleted", {"path": str(p)})
