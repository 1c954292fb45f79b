from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QComboBox,
    QLineEdit, QLabel
)

from ...widgets.table_view import TableView, Pager


class InventoryView(QWidget):
    filtersChanged = Signal()

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        # ---------- Actions + search ----------
        row = QHBoxLayout()
        self.btn_add = QPushButton("Add Part")
        self.btn_edit = QPushButton("Edit")
        self.btn_del = QPushButton("Delete")
        self.btn_adjust = QPushButton("Adjust Stock…")
        self.btn_lookups = QPushButton("Categories & Brands…")
        for b in (self.btn_add, self.btn_edit, self.btn_del, self.btn_adjust, self.btn_lookups):
            row.addWidget(b)
        row.addStretch(1)
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search part code, name, barcode…")
        row.addWidget(QLabel("Search:"))
        row.addWidget(self.search, 2)
        root.addLayout(row)

        # ---------- Filters ----------
        filt = QHBoxLayout()
        self.cmb_category = QComboBox(objectName="cmb_category")
        self.cmb_brand = QComboBox(objectName="cmb_brand")
        self.cmb_stock = QComboBox(objectName="cmb_stock")
        self.cmb_stock.addItem("All stock", None)
        self.cmb_stock.addItem("Low stock", "low")
        self.cmb_stock.addItem("Out of stock", "out")
        filt.addWidget(QLabel("Category:"))
        filt.addWidget(self.cmb_category, 1)
        filt.addWidget(QLabel("Brand:"))
        filt.addWidget(self.cmb_brand, 1)
        filt.addWidget(QLabel("Stock:"))
        filt.addWidget(self.cmb_stock)
        filt.addStretch(2)
        root.addLayout(filt)

        self.table = TableView()
        self.table.setSortingEnabled(False)
        root.addWidget(self.table, 1)
        self.pager = Pager()
        root.addWidget(self.pager)

        self.lab_summary = QLabel("")
        root.addWidget(self.lab_summary)

        for cmb in (self.cmb_category, self.cmb_brand, self.cmb_stock):
            cmb.currentIndexChanged.connect(lambda _i: self.filtersChanged.emit())

    def set_lookups(self, categories: list[dict], brands: list[dict]):
        """Refill the category/brand filters, keeping the current choice when it still exists."""
        for cmb, rows, all_label in (
            (self.cmb_category, categories, "All categories"),
            (self.cmb_brand, brands, "All brands"),
        ):
            keep = cmb.currentData()
            cmb.blockSignals(True)
            cmb.clear()
            cmb.addItem(all_label, None)
            for r in rows:
                cmb.addItem(r["name"], r["id"])
            i = cmb.findData(keep) if keep is not None else 0
            cmb.setCurrentIndex(i if i >= 0 else 0)
            cmb.blockSignals(False)

    def filter_values(self) -> dict:
        return {
            "search": self.search.text().strip() or None,
            "category_id": self.cmb_category.currentData(),
            "brand_id": self.cmb_brand.currentData(),
            "stock_status": self.cmb_stock.currentData(),
        }
