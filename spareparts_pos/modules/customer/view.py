from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLineEdit,
    QLabel,
    QSplitter,
)
from PySide6.QtCore import Qt

from ...widgets.table_view import TableView
from .details import CustomerDetails


class CustomerView(QWidget):
    """
    Customers view:
      - Toolbar: Add, Edit, Delete + search
      - Split: table (left) + details (right)
    """

    DETAILS = CustomerDetails

    def __init__(self, parent=None, *, noun: str = "Customer"):
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        self.btn_add = QPushButton("Add")
        self.btn_edit = QPushButton("Edit")
        self.btn_del = QPushButton("Delete")
        bar.addWidget(self.btn_add)
        bar.addWidget(self.btn_edit)
        bar.addWidget(self.btn_del)
        bar.addStretch(1)

        bar.addWidget(QLabel("Search:"))
        self.search = QLineEdit()
        self.search.setPlaceholderText(f"Search {noun.lower()}s (name, phone, email)…")
        bar.addWidget(self.search, 2)
        root.addLayout(bar)

        split = QSplitter(Qt.Horizontal)
        self.table = TableView()
        split.addWidget(self.table)
        self.details = self.DETAILS(title=f"{noun} Details")
        split.addWidget(self.details)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)
