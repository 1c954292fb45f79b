from PySide6.QtWidgets import QGroupBox, QVBoxLayout, QWidget
from ...widgets.table_view import TableView
from .model import PaymentsTableModel, SaleItemsModel


class SaleItemsView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        box = QGroupBox("Items")
        v = QVBoxLayout(box)
        self.table = TableView()
        self.model = SaleItemsModel([])
        self.table.setModel(self.model)
        v.addWidget(self.table, 1)
        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(box, 1)

    def set_rows(self, rows: list[dict]):
        self.model.replace(rows)
        self.table.resizeColumnsToContents()


class PaymentsView(QWidget):
    """Titled payments ledger under the items of the selected order."""

    def __init__(self, parent=None):
        super().__init__(parent)
        box = QGroupBox("Payments")
        v = QVBoxLayout(box)
        self.table = TableView()
        self.model = PaymentsTableModel([])
        self.table.setModel(self.model)
        v.addWidget(self.table, 1)
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(box, 1)

    def set_rows(self, rows: list[dict]):
        self.model.replace(rows)
        self.table.resizeColumnsToContents()
