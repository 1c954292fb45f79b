from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLineEdit, QPushButton,
    QTableWidget, QTableWidgetItem, QMessageBox, QAbstractItemView, QTabWidget, QWidget
)

from ...database.repositories.errors import DomainError
from ...database.repositories.lookups_repo import BrandsRepo, CategoriesRepo


class LookupPanel(QWidget):
    """Add / rename / delete rows of one name-unique lookup table."""

    def __init__(self, repo, noun: str, parent=None):
        super().__init__(parent)
        self.repo = repo
        self.noun = noun
        self.changed = False

        layout = QVBoxLayout(self)
        self.tbl = QTableWidget(0, 2)
        self.tbl.setHorizontalHeaderLabels(["ID", "Name"])
        self.tbl.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.tbl.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.tbl.setSelectionMode(QAbstractItemView.SingleSelection)
        layout.addWidget(self.tbl)

        row = QHBoxLayout()
        self.edt_name = QLineEdit()
        self.edt_name.setPlaceholderText(f"New / renamed {noun.lower()}")
        self.btn_add = QPushButton("Add")
        self.btn_rename = QPushButton("Rename")
        self.btn_delete = QPushButton("Delete")
        row.addWidget(self.edt_name)
        row.addWidget(self.btn_add)
        row.addWidget(self.btn_rename)
        row.addWidget(self.btn_delete)
        layout.addLayout(row)

        self.btn_add.clicked.connect(self._add)
        self.btn_rename.clicked.connect(self._rename)
        self.btn_delete.clicked.connect(self._delete)
        self.tbl.itemSelectionChanged.connect(self._on_select)

        self._reload()

    def _reload(self):
        rows = self.repo.list_all()
        self.tbl.setRowCount(len(rows))
        for r, c in enumerate(rows):
            self.tbl.setItem(r, 0, QTableWidgetItem(str(c["id"])))
            self.tbl.setItem(r, 1, QTableWidgetItem(c["name"]))
        self.tbl.resizeColumnsToContents()

    def _selected_id(self):
        sel = self.tbl.selectionModel().selectedRows()
        if not sel:
            return None
        return int(self.tbl.item(sel[0].row(), 0).text())

    def _on_select(self):
        sel = self.tbl.selectionModel().selectedRows()
        if sel:
            self.edt_name.setText(self.tbl.item(sel[0].row(), 1).text())

    def _run(self, fn, *args) -> bool:
        try:
            fn(*args)
        except DomainError as e:
            QMessageBox.information(self, "Invalid", str(e))
            return False
        self.changed = True
        self.edt_name.clear()
        self._reload()
        return True

    def _add(self):
        name = self.edt_name.text().strip()
        if not name:
            QMessageBox.information(self, "Name", f"Enter a {self.noun.lower()} name.")
            return
        self._run(self.repo.create, name)

    def _rename(self):
        row_id = self._selected_id()
        if row_id is None:
            QMessageBox.information(self, "Select", f"Pick a {self.noun.lower()} row to rename.")
            return
        self._run(self.repo.rename, row_id, self.edt_name.text())

    def _delete(self):
        row_id = self._selected_id()
        if row_id is None:
            QMessageBox.information(self, "Select", f"Pick a {self.noun.lower()} row to delete.")
            return
        self._run(self.repo.delete, row_id)


class LookupsDialog(QDialog):
    def __init__(self, parent, conn):
        super().__init__(parent)
        self.setWindowTitle("Categories & Brands")
        self.resize(420, 360)
        layout = QVBoxLayout(self)
        tabs = QTabWidget()
        self.categories = LookupPanel(CategoriesRepo(conn), "Category")
        self.brands = LookupPanel(BrandsRepo(conn), "Brand")
        tabs.addTab(self.categories, "Categories")
        tabs.addTab(self.brands, "Brands")
        layout.addWidget(tabs)
        btn_close = QPushButton("Close")
        btn_close.clicked.connect(self.accept)
        layout.addWidget(btn_close)

    def changed(self) -> bool:
        return self.categories.changed or self.brands.changed
