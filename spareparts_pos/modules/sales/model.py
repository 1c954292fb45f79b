from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QColor
from ...utils.helpers import fmt_money
from ..payments.payment_utilities.status import label as status_label, style_tokens

_RIGHT = int(Qt.AlignRight | Qt.AlignVCenter)


class _RowsModel(QAbstractTableModel):
    """Read-only list of dict rows; subclasses provide HEADERS and cells()."""

    HEADERS: list[str] = []
    NUMERIC: tuple[int, ...] = ()

    def __init__(self, rows: list | None = None):
        super().__init__()
        self._rows = list(rows or [])

    def cells(self, r, row: int) -> list:
        raise NotImplementedError

    def rowCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        if role == Qt.DisplayRole:
            return self.cells(self._rows[index.row()], index.row())[index.column()]
        if role == Qt.TextAlignmentRole and index.column() in self.NUMERIC:
            return _RIGHT
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole and section < len(self.HEADERS):
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = list(rows or [])
        self.endResetModel()


class SalesTableModel(_RowsModel):
    """
    Order list rows as returned by `list_orders` (sales or purchases).
    `party_header` names the counterparty column.
    """

    NUMERIC = (3, 5, 6, 7)
    STATUS_COL = 8

    def __init__(self, rows: list, party_header: str = "Customer"):
        super().__init__(rows)
        self.HEADERS = ["Invoice #", "Date", party_header, "Items", "Method",
                        "Total", "Paid", "Balance", "Status"]

    def cells(self, r, row):
        return [
            r["invoice_number"],
            r["order_date"],
            r["counterparty_name"] or "Walk-in",
            r["item_count"],
            (r["payment_method"] or "").title(),
            fmt_money(r["total_amount"]),
            fmt_money(r["paid_amount"]),
            fmt_money(r["balance"]),
            status_label(r["payment_status"]),
        ]

    def data(self, index, role=Qt.DisplayRole):
        if index.isValid() and index.column() == self.STATUS_COL:
            tokens = style_tokens(self._rows[index.row()]["payment_status"])
            if role == Qt.BackgroundRole:
                return QColor(tokens["bg"])
            if role == Qt.ForegroundRole:
                return QColor(tokens["fg"])
        return super().data(index, role)


class SaleItemsModel(_RowsModel):
    HEADERS = ["#", "Part Code", "Part", "Qty", "Unit Price", "Line Total"]
    NUMERIC = (3, 4, 5)

    def cells(self, r, row):
        return [row + 1, r["part_code"], r["part_name"], r["quantity"],
                fmt_money(r["unit_price"]), fmt_money(r["total_price"])]


class PaymentsTableModel(_RowsModel):
    """Payments ledger of one order, oldest first."""

    HEADERS = ["Date", "Method", "Amount", "Notes"]
    NUMERIC = (2,)

    def cells(self, r, row):
        return [
            str(r.get("payment_date") or ""),
            str(r.get("payment_method") or "").title(),
            fmt_money(float(r.get("amount") or 0.0)),
            str(r.get("notes") or ""),
        ]
