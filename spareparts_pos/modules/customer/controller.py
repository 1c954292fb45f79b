from __future__ import annotations

import logging
import sqlite3

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from .view import CustomerView
from .form import CustomerForm
from .model import CustomersTableModel
from ...database.repositories.customers_repo import CustomersRepo
from ...database.repositories.errors import DomainError
from ...database.repositories.sales_repo import SalesRepo
from ...utils.ui_helpers import confirm, error, info

_log = logging.getLogger(__name__)


class CustomerController(BaseModule):
    """
    Customers: list + search, add / edit / delete, and a details pane with
    the customer's sales count, total and outstanding balance.

    SupplierController reuses this class with its own repo, form and labels.
    """

    TITLE = "Customers"
    NOUN = "Customer"

    partiesChanged = Signal()

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None = None):
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.repo = self._make_repo(conn)
        self.orders = self._make_orders_repo(conn)
        self.view = self._make_view()
        self.base = self._make_model([])
        self.view.table.setModel(self.base)
        self.view.table.selectionModel().selectionChanged.connect(self._update_details)
        self._wire()
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    # ---- hooks ----

    def _make_repo(self, conn):
        return CustomersRepo(conn)

    def _make_orders_repo(self, conn):
        return SalesRepo(conn)

    def _make_view(self):
        return CustomerView(noun=self.NOUN)

    def _make_model(self, rows):
        return CustomersTableModel(rows)

    def _open_form(self, initial=None):
        return CustomerForm(self.view, initial=initial)

    def _list(self, term: str):
        return self.repo.search(term) if term else self.repo.list_customers()

    # ---- wiring / model ----

    def _wire(self):
        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_edit.clicked.connect(self._edit)
        self.view.btn_del.clicked.connect(self._delete)
        self.view.search.textChanged.connect(lambda _t: self._reload())
        self.view.table.doubleClicked.connect(lambda _i: self._edit())

    def _reload(self, select_id: int | None = None):
        rows = self._list(self.view.search.text().strip())
        self.base.replace(rows)
        self.view.table.resizeColumnsToContents()
        row_to_select = 0
        if select_id is not None:
            for i, r in enumerate(rows):
                if r.id == select_id:
                    row_to_select = i
                    break
        if rows:
            self.view.table.selectRow(row_to_select)
        self._update_details()

    def reload(self):
        party = self._selected()
        self._reload(select_id=party.id if party is not None else None)

    def _selected(self):
        sel = self.view.table.selectionModel()
        idxs = sel.selectedRows() if sel else []
        if not idxs:
            return None
        return self.base.at(idxs[0].row())

    def _update_details(self, *args):
        party = self._selected()
        snapshot = self.orders.party_snapshot(party.id) if party is not None else None
        self.view.details.set_data(party, snapshot)
        self.view.btn_edit.setEnabled(party is not None)
        self.view.btn_del.setEnabled(party is not None)

    # ---- CRUD ----

    def _add(self):
        dlg = self._open_form()
        if not dlg.exec():
            return
        p = dlg.payload()
        if not p:
            return
        try:
            new_id = self.repo.create(p)
        except DomainError as e:
            error(self.view, "Not saved", str(e))
            return
        self._reload(select_id=new_id)
        self.partiesChanged.emit()
        info(self.view, "Saved", f"{self.NOUN} “{p.name}” added.")

    def _edit(self):
        party = self._selected()
        if party is None:
            info(self.view, "Select", f"Please select a {self.NOUN.lower()} to edit.")
            return
        dlg = self._open_form(initial=party)
        if not dlg.exec():
            return
        p = dlg.payload()
        if not p:
            return
        try:
            self.repo.update(p)
        except DomainError as e:
            error(self.view, "Not saved", str(e))
            return
        self._reload(select_id=party.id)
        self.partiesChanged.emit()
        info(self.view, "Saved", f"{self.NOUN} “{p.name}” updated.")

    def _delete(self):
        party = self._selected()
        if party is None:
            info(self.view, "Select", f"Please select a {self.NOUN.lower()} to delete.")
            return
        if not confirm(self.view, f"Delete {self.NOUN}", f"Delete “{party.name}”?"):
            return
        try:
            self.repo.delete(party.id)
        except DomainError as e:
            error(self.view, "Blocked", str(e))
            return
        _log.info("%s #%s deleted", self.NOUN.lower(), party.id)
        self._reload()
        self.partiesChanged.emit()
