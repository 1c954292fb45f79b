from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QColor

from ...utils.helpers import fmt_money

_LOW_BG = "#fff3cd"
_OUT_BG = "#f8d7da"


class InventoryTableModel(QAbstractTableModel):
    """
    Rows from `InventoryRepo.list_inventory()` (dicts). Low-stock rows are
    tinted amber, out-of-stock rows red.
    """

    HEADERS = ["Part Code", "Name", "Category", "Brand", "Supplier",
               "Cost", "Price", "Qty", "Reorder", "Location"]

    def __init__(self, rows: list[dict], low_stock_threshold: int | None = None):
        super().__init__()
        self._rows = rows
        self._threshold = low_stock_threshold

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def is_low(self, r: dict) -> bool:
        qty = int(r["quantity"])
        if qty <= int(r["reorder_level"] or 0):
            return True
        return self._threshold is not None and qty <= self._threshold

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                r["part_code"],
                r["name"],
                r.get("category_name") or "",
                r.get("brand_name") or "",
                r.get("supplier_name") or "",
                fmt_money(r["cost_price"]),
                fmt_money(r["selling_price"]),
                r["quantity"],
                r["reorder_level"],
                r.get("location") or "",
            ][c]
        if role == Qt.BackgroundRole:
            if int(r["quantity"]) == 0:
                return QColor(_OUT_BG)
            if self.is_low(r):
                return QColor(_LOW_BG)
        if role == Qt.TextAlignmentRole and c in (5, 6, 7, 8):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        if role == Qt.ToolTipRole and c == 1:
            return r.get("description") or None
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> dict:
        return self._rows[row]

    def replace(self, rows: list[dict], low_stock_threshold: int | None = None):
        self.beginResetModel()
        self._rows = rows
        self._threshold = low_stock_threshold
        self.endResetModel()
