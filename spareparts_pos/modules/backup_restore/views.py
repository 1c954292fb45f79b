"""
modules/backup_restore/views.py

Purpose
-------
PySide6 widgets for the Backup & Restore screen. No business logic here.

Widgets
-------
1) BackupsTableModel
   - Rows: BackupInfo values (newest first, as the service returns them)
   - Columns: File, Size, Created

2) BackupView
   - Toolbar: Create Backup, Restore Selected, Delete Selected, Open Folder
   - Backup history table + inline progress bar + status line
   - Slots: on_progress(pct), set_busy(bool), set_status(text)
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt, Slot
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...widgets.table_view import TableView
from .service import BackupInfo


class BackupsTableModel(QAbstractTableModel):
    HEADERS = ["File", "Size", "Created"]

    def __init__(self, rows: list[BackupInfo] | None = None):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        b = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            cols = [b.name, b.size_label, b.created_at.strftime("%Y-%m-%d %H:%M:%S")]
            return cols[index.column()]
        if role == Qt.ToolTipRole:
            return str(b.path)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> BackupInfo:
        return self._rows[row]

    def replace(self, rows: list[BackupInfo]):
        self.beginResetModel()
        self._rows = rows or []
        self.endResetModel()


class BackupView(QWidget):
    def __init__(self, backup_dir: str = "", parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 24, 24, 24)
        root.setSpacing(12)

        title = QLabel("Backup & Restore")
        title.setProperty("class", "h2")
        root.addWidget(title)

        subtitle = QLabel(
            "Create a consistent snapshot of the database, or restore a previous one.\n"
            "A safety copy of the current database is taken before every restore."
        )
        subtitle.setWordWrap(True)
        subtitle.setStyleSheet("color: palette(mid);")
        root.addWidget(subtitle)

        bar = QHBoxLayout()
        self.btn_backup = QPushButton("Create Backup")
        self.btn_backup.setDefault(True)
        self.btn_restore = QPushButton("Restore Selected…")
        self.btn_delete = QPushButton("Delete Selected")
        self.btn_open_folder = QPushButton("Open Folder")
        for b in (self.btn_backup, self.btn_restore, self.btn_delete):
            bar.addWidget(b)
        bar.addStretch(1)
        bar.addWidget(self.btn_open_folder)
        root.addLayout(bar)

        self.lab_folder = QLabel(f"Backup folder: {backup_dir}")
        self.lab_folder.setTextInteractionFlags(Qt.TextSelectableByMouse)
        root.addWidget(self.lab_folder)

        self.tbl = TableView()
        self.model = BackupsTableModel([])
        self.tbl.setModel(self.model)
        root.addWidget(self.tbl, 1)

        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setValue(0)
        self.progress.setVisible(False)
        root.addWidget(self.progress)

        self.lab_status = QLabel("")
        self.lab_status.setWordWrap(True)
        root.addWidget(self.lab_status)

    # ---- public helpers ----
    def set_rows(self, rows: list[BackupInfo]) -> None:
        self.model.replace(rows)
        self.tbl.resizeColumnsToContents()

    def selected(self) -> BackupInfo | None:
        sel = self.tbl.selectionModel()
        idxs = sel.selectedRows() if sel else []
        if not idxs:
            return None
        return self.model.at(idxs[0].row())

    @Slot(int)
    def on_progress(self, pct: int) -> None:
        self.progress.setValue(max(0, min(100, int(pct))))

    def set_busy(self, busy: bool) -> None:
        for b in (self.btn_backup, self.btn_restore, self.btn_delete):
            b.setEnabled(not busy)
        self.progress.setVisible(busy)
        if busy:
            self.progress.setValue(0)

    def set_status(self, text: str) -> None:
        self.lab_status.setText(text)
