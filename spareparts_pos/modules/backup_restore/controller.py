"""
modules/backup_restore/controller.py

Purpose
-------
Glue between the app shell and the backup/restore workflows; owns the
top-level widget.

This controller stays thin: it wires UI events (from views.py) to the
workflows in service.py, asks for confirmation before anything destructive
and surfaces results as message boxes.

Public Interface (called by app shell)
--------------------------------------
- get_widget() -> QWidget
- get_title() -> str
- refresh() -> None
- Signals: backup_completed(str), restore_completed(str)
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QCoreApplication, QObject, QUrl, Signal, Slot
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QWidget

from ...utils.ui_helpers import confirm, error, info
from ..base_module import BaseModule
from .service import BackupError, BackupService
from .views import BackupView

_log = logging.getLogger(__name__)


class BackupRestoreController(BaseModule):
    """
    Main controller for the Backup & Restore module.

    `service` can be injected for testing; otherwise one is built over the
    application connection and backup folder.
    """

    backup_completed = Signal(str)        # path of the created backup
    restore_completed = Signal(str)       # path of the backup restored from

    TITLE = "Backup & Restore"

    def __init__(
        self,
        conn: sqlite3.Connection,
        backup_dir: str | Path,
        *,
        service: Optional[BackupService] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.conn = conn
        self.service = service or BackupService(conn, backup_dir)
        self.view = BackupView(str(self.service.backup_dir))
        self._wire()
        self.refresh()

    # -------- Public API expected by the shell --------

    def get_widget(self) -> QWidget:
        return self.view

    def refresh(self) -> None:
        self.view.set_rows(self.service.list_backups())
        if self.view.model.rowCount() > 0:
            self.view.tbl.selectRow(0)

    # -------- wiring --------

    def _wire(self) -> None:
        self.view.btn_backup.clicked.connect(self._backup)
        self.view.btn_restore.clicked.connect(self._restore)
        self.view.btn_delete.clicked.connect(self._delete)
        self.view.btn_open_folder.clicked.connect(self._open_folder)

    def _progress(self, pct: int) -> None:
        self.view.on_progress(pct)
        # keep the bar painting while the backup API copies pages
        QCoreApplication.processEvents()

    # -------- actions --------

    @Slot()
    def _backup(self) -> None:
        self.view.set_busy(True)
        self.view.set_status("Creating backup…")
        try:
            backup = self.service.create_backup(progress=self._progress)
        except BackupError as e:
            self.view.set_status("Backup failed.")
            error(self.view, "Backup Failed", str(e))
            return
        finally:
            self.view.set_busy(False)

        self.view.set_status(f"Backup created: {backup.name} ({backup.size_label})")
        self.refresh()
        self.backup_completed.emit(str(backup.path))
        info(self.view, "Backup Completed", f"Backup created:\n{backup.path}")

    @Slot()
    def _restore(self) -> None:
        chosen = self.view.selected()
        if chosen is None:
            info(self.view, "Select", "Select a backup to restore first.")
            return
        if not confirm(
            self.view,
            "Restore Database",
            f"Replace the current database with {chosen.name}?\n\n"
            "A safety copy of the current database is created first.",
        ):
            return

        self.view.set_busy(True)
        self.view.set_status(f"Restoring {chosen.name}…")
        try:
            safety = self.service.restore_backup(chosen.path, progress=self._progress)
        except BackupError as e:
            self.view.set_status("Restore failed; the current database was left in place.")
            error(self.view, "Restore Failed", str(e))
            return
        finally:
            self.view.set_busy(False)

        self.view.set_status(f"Restored from {chosen.name}. Safety copy: {safety.name}")
        self.refresh()
        self.restore_completed.emit(str(chosen.path))
        info(
            self.view,
            "Restore Completed",
            f"Database restored from {chosen.name}.\nSafety copy of the previous database:\n{safety}",
        )

    @Slot()
    def _delete(self) -> None:
        chosen = self.view.selected()
        if chosen is None:
            info(self.view, "Select", "Select a backup to delete first.")
            return
        if not confirm(self.view, "Delete Backup", f"Delete {chosen.name}? This cannot be undone."):
            return
        try:
            self.service.delete_backup(chosen.path)
        except (BackupError, OSError) as e:
            error(self.view, "Delete Failed", str(e))
            return
        self.view.set_status(f"Deleted {chosen.name}.")
        self.refresh()

    @Slot()
    def _open_folder(self) -> None:
        folder = self.service.backup_dir
        folder.mkdir(parents=True, exist_ok=True)
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(str(folder))):
            _log.warning("could not open backup folder %s", folder)
