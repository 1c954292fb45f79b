from __future__ import annotations

import logging
import sqlite3

from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from .form import AdjustStockDialog, InventoryForm
from .lookups_dialog import LookupsDialog
from .model import InventoryTableModel
from .view import InventoryView

from ...database.repositories.errors import DomainError
from ...database.repositories.inventory_repo import InventoryFilters, InventoryRepo
from ...database.repositories.lookups_repo import BrandsRepo, CategoriesRepo
from ...database.repositories.suppliers_repo import SuppliersRepo
from ...settings import AppSettings
from ...utils.ui_helpers import confirm, error, info

_log = logging.getLogger(__name__)


class InventoryController(BaseModule):
    """
    Spare-parts stock list: paginated, filterable, with add / edit / delete,
    manual stock adjustments and the category/brand lookups.
    """

    TITLE = "Inventory"
    PAGE_SIZE = 50

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None, settings: AppSettings):
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.settings = settings
        self.repo = InventoryRepo(conn)
        self.categories = CategoriesRepo(conn)
        self.brands = BrandsRepo(conn)
        self.suppliers = SuppliersRepo(conn)

        self.view = InventoryView()
        self.base = InventoryTableModel([], settings.low_stock_threshold)
        self.view.table.setModel(self.base)
        self._page = 1

        self._wire()
        self._load_lookups()
        self.reload()

    def get_widget(self) -> QWidget:
        return self.view

    def set_settings(self, settings: AppSettings):
        self.settings = settings
        self.reload()

    def _wire(self):
        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_edit.clicked.connect(self._edit)
        self.view.btn_del.clicked.connect(self._delete)
        self.view.btn_adjust.clicked.connect(self._adjust)
        self.view.btn_lookups.clicked.connect(self._manage_lookups)
        self.view.search.textChanged.connect(self._on_filters_changed)
        self.view.filtersChanged.connect(self._on_filters_changed)
        self.view.pager.pageRequested.connect(self._go_to_page)
        self.view.table.doubleClicked.connect(lambda _i: self._edit())

    def _load_lookups(self):
        self.view.set_lookups(self.categories.list_all(), self.brands.list_all())

    def _on_filters_changed(self, *_):
        self._page = 1
        self.reload()

    def _go_to_page(self, page: int):
        self._page = max(1, page)
        self.reload()

    def reload(self, select_id: int | None = None):
        """Re-query the current page; connected to order changes elsewhere in the app."""
        filters = InventoryFilters(**self.view.filter_values())
        result = self.repo.list_inventory(filters, self._page, self.PAGE_SIZE)
        if self._page > result.pages:
            self._page = result.pages
            result = self.repo.list_inventory(filters, self._page, self.PAGE_SIZE)
        self.base.replace(result.data, self.settings.low_stock_threshold)
        self.view.table.resizeColumnsToContents()
        self.view.pager.set_page(result.page, result.pages, result.total)

        if select_id is not None:
            for i, r in enumerate(result.data):
                if r["id"] == select_id:
                    self.view.table.selectRow(i)
                    break

        low = len(self.repo.low_stock(self.settings.low_stock_threshold))
        self.view.lab_summary.setText(f"{result.total} parts · {low} at or below reorder level")

    def _selected(self) -> dict | None:
        sel = self.view.table.selectionModel()
        idxs = sel.selectedRows() if sel else []
        if not idxs:
            return None
        return self.base.at(idxs[0].row())

    def _open_form(self, initial=None):
        return InventoryForm(
            self.view,
            categories=self.categories.list_all(),
            brands=self.brands.list_all(),
            suppliers=self.suppliers.list_suppliers(),
            initial=initial,
        )

    def _add(self):
        dlg = self._open_form()
        if not dlg.exec():
            return
        item = dlg.payload()
        if item is None:
            return
        try:
            new_id = self.repo.create(item)
        except DomainError as e:
            error(self.view, "Not saved", str(e))
            return
        _log.info("inventory item %s created (#%s)", item.part_code, new_id)
        self.reload(select_id=new_id)
        info(self.view, "Saved", f"Part {item.part_code} added.")

    def _edit(self):
        row = self._selected()
        if not row:
            info(self.view, "Select", "Please select a part to edit.")
            return
        current = self.repo.get(row["id"])
        if current is None:
            self.reload()
            return
        dlg = self._open_form(initial=current)
        if not dlg.exec():
            return
        item = dlg.payload()
        if item is None:
            return
        try:
            self.repo.update(item)
        except DomainError as e:
            error(self.view, "Not saved", str(e))
            return
        self.reload(select_id=row["id"])
        info(self.view, "Saved", f"Part {item.part_code} updated.")

    def _delete(self):
        row = self._selected()
        if not row:
            info(self.view, "Select", "Please select a part to delete.")
            return
        if not confirm(self.view, "Delete Part", f"Delete {row['part_code']} – {row['name']}?"):
            return
        try:
            self.repo.delete(row["id"])
        except DomainError as e:
            error(self.view, "Blocked", str(e))
            return
        self.reload()

    def _adjust(self):
        row = self._selected()
        if not row:
            info(self.view, "Select", "Please select a part to adjust.")
            return
        dlg = AdjustStockDialog(
            self.view, part_label=f"{row['part_code']} – {row['name']}", on_hand=row["quantity"]
        )
        if not dlg.exec():
            return
        try:
            new_qty = self.repo.adjust_quantity(row["id"], dlg.delta())
        except DomainError as e:
            error(self.view, "Not adjusted", str(e))
            return
        _log.info("stock of %s adjusted by %+d to %d", row["part_code"], dlg.delta(), new_qty)
        self.reload(select_id=row["id"])

    def _manage_lookups(self):
        dlg = LookupsDialog(self.view, self.conn)
        dlg.exec()
        if dlg.changed():
            self._load_lookups()
            self.reload()
