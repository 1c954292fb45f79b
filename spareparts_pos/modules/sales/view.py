from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLineEdit, QLabel,
    QSplitter, QComboBox, QCheckBox, QDateEdit,
)
from PySide6.QtCore import Qt, QDate, Signal
from ...constants import PAYMENT_METHODS
from ...widgets.table_view import TableView, Pager
from ..payments.payment_utilities.status import VALID_STATES, label as status_label
from .details import SaleDetails
from .items import SaleItemsView, PaymentsView


class SalesView(QWidget):
    """
    Order list screen: toolbar, filter row, paginated table and, for the
    selected order, its items, payments and header details.
    """

    # Emitted whenever any filter widget changes
    filtersChanged = Signal()

    def __init__(self, parent=None, *, doc_label: str = "Sale", party_label: str = "Customer"):
        super().__init__(parent)
        root = QVBoxLayout(self)

        # --- Top toolbar ---
        bar = QHBoxLayout()
        self.btn_add = QPushButton(f"New {doc_label}")
        self.btn_edit = QPushButton("Edit")
        self.btn_del = QPushButton("Delete")
        self.btn_record_payment = QPushButton("Record Payment…")
        for b in (self.btn_add, self.btn_edit, self.btn_del, self.btn_record_payment):
            bar.addWidget(b)
        bar.addStretch(1)
        self.search = QLineEdit()
        self.search.setPlaceholderText(f"Search invoice # or {party_label.lower()}…")
        bar.addWidget(QLabel("Search:"))
        bar.addWidget(self.search, 2)
        root.addLayout(bar)

        # --- Filters ---
        filt = QHBoxLayout()
        self.status_filter = QComboBox()
        self.status_filter.addItem("All statuses", None)
        for s in VALID_STATES:
            self.status_filter.addItem(status_label(s), s)
        self.method_filter = QComboBox()
        self.method_filter.addItem("All methods", None)
        for m in PAYMENT_METHODS:
            self.method_filter.addItem(m.title(), m)

        self.chk_dates = QCheckBox("Date range")
        today = QDate.currentDate()
        self.date_from = QDateEdit(QDate(today.year(), today.month(), 1))
        self.date_to = QDateEdit(today)
        for d in (self.date_from, self.date_to):
            d.setCalendarPopup(True)
            d.setDisplayFormat("yyyy-MM-dd")
            d.setEnabled(False)

        filt.addWidget(QLabel("Status:"))
        filt.addWidget(self.status_filter)
        filt.addWidget(QLabel("Method:"))
        filt.addWidget(self.method_filter)
        filt.addSpacing(12)
        filt.addWidget(self.chk_dates)
        filt.addWidget(self.date_from)
        filt.addWidget(QLabel("to"))
        filt.addWidget(self.date_to)
        filt.addStretch(1)
        root.addLayout(filt)

        # --- Main split: left (list + items + payments), right (details) ---
        split = QSplitter(Qt.Horizontal)

        left = QWidget()
        lv = QVBoxLayout(left)
        lv.setContentsMargins(0, 0, 0, 0)
        self.tbl = TableView()
        # server-side pages; sorting would only reorder the current page
        self.tbl.setSortingEnabled(False)
        lv.addWidget(self.tbl, 3)
        self.pager = Pager()
        lv.addWidget(self.pager)

        self.items = SaleItemsView()
        lv.addWidget(self.items, 2)
        self.payments = PaymentsView()
        lv.addWidget(self.payments, 1)
        split.addWidget(left)

        self.details = SaleDetails(title=f"{doc_label} Details", party_label=party_label)
        split.addWidget(self.details)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 1)
        root.addWidget(split, 1)

        # wiring
        self.chk_dates.toggled.connect(self._on_dates_toggled)
        self.status_filter.currentIndexChanged.connect(lambda _i: self.filtersChanged.emit())
        self.method_filter.currentIndexChanged.connect(lambda _i: self.filtersChanged.emit())
        self.date_from.dateChanged.connect(self._on_date_changed)
        self.date_to.dateChanged.connect(self._on_date_changed)

    # --- Public helpers ----------------------------------------------------

    def filter_values(self) -> dict:
        use_dates = self.chk_dates.isChecked()
        return {
            "search": self.search.text().strip() or None,
            "payment_status": self.status_filter.currentData(),
            "payment_method": self.method_filter.currentData(),
            "date_from": self.date_from.date().toString("yyyy-MM-dd") if use_dates else None,
            "date_to": self.date_to.date().toString("yyyy-MM-dd") if use_dates else None,
        }

    # --- Internals ---------------------------------------------------------

    def _on_dates_toggled(self, on: bool):
        self.date_from.setEnabled(on)
        self.date_to.setEnabled(on)
        self.filtersChanged.emit()

    def _on_date_changed(self, _d):
        if self.chk_dates.isChecked():
            self.filtersChanged.emit()
