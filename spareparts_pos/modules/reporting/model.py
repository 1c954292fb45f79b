# spareparts_pos/modules/reporting/model.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_money

Column = Tuple[str, str, str]


class ReportTableModel(QAbstractTableModel):
    """Read-only rows of one report; columns are (key, header, kind) triples."""

    def __init__(self, columns: Sequence[Column] = (), rows: Optional[List[dict]] = None, parent=None) -> None:
        super().__init__(parent)
        self._columns: List[Column] = list(columns)
        self._rows: List[dict] = rows or []

    def set_report(self, columns: Sequence[Column], rows: List[dict]) -> None:
        self.beginResetModel()
        self._columns = list(columns)
        self._rows = rows or []
        self.endResetModel()

    def rows(self) -> List[dict]:
        return list(self._rows)

    def columns(self) -> List[Column]:
        return list(self._columns)

    def rowCount(self, parent=QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent=QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self._columns)

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return self._columns[section][1]
        return str(section + 1)

    def data(self, index: QModelIndex, role=Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        key, _header, kind = self._columns[index.column()]
        value = self._rows[index.row()].get(key)
        if role == Qt.DisplayRole:
            if value is None:
                return ""
            if kind == "money":
                return fmt_money(value)
            return str(value)
        if role == Qt.TextAlignmentRole:
            if kind in ("money", "int"):
                return int(Qt.AlignRight | Qt.AlignVCenter)
            return int(Qt.AlignLeft | Qt.AlignVCenter)
        return None
