from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Signal
import sqlite3
import logging

from ..base_module import BaseModule
from .view import SalesView
from .model import SalesTableModel
from .form import SaleForm
from .payment_form import PaymentForm
from ...database.repositories.customers_repo import CustomersRepo
from ...database.repositories.errors import DomainError
from ...database.repositories.inventory_repo import InventoryRepo
from ...database.repositories.numbering import Clock, system_clock
from ...database.repositories.orders_repo import OrderFilters, OrderLine, OrderRequest, OrdersRepo
from ...database.repositories.sales_repo import SalesRepo
from ...settings import AppSettings
from ...utils.helpers import fmt_money
from ...utils.ui_helpers import confirm, error, info

_log = logging.getLogger(__name__)


def request_from_payload(p: dict, created_by: int | None = None) -> OrderRequest:
    """Form payload -> engine request."""
    return OrderRequest(
        items=[
            OrderLine(int(it["inventory_id"]), int(it["quantity"]), float(it["unit_price"]))
            for it in p["items"]
        ],
        counterparty_id=p.get("counterparty_id"),
        discount=float(p.get("discount") or 0.0),
        discount_type=p.get("discount_type") or "amount",
        tax_rate=float(p["tax_rate"]),
        payment_method=p.get("payment_method") or "cash",
        amount_paid=float(p.get("amount_paid") or 0.0),
        notes=p.get("notes"),
        order_date=p.get("order_date"),
        created_by=created_by,
    )


class SalesController(BaseModule):
    """
    Sales screen. Every write goes through the order engine in one call
    (`create_order`, `update_order`, `record_payment`, `delete_order`); domain
    errors come back here already rolled back and are shown as message boxes.

    PurchaseController reuses this class and swaps the repository, the form
    and the labels.
    """

    TITLE = "Sales"
    DOC_LABEL = "Sale"
    PARTY_LABEL = "Customer"
    PAGE_SIZE = 25

    # Emitted after any committed change so stock / dashboard screens can refresh
    ordersChanged = Signal()

    def __init__(
        self,
        conn: sqlite3.Connection,
        current_user: dict | None,
        settings: AppSettings,
        *,
        clock: Clock = system_clock,
    ):
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.settings = settings
        self.repo: OrdersRepo = self._make_repo(conn, clock)
        self.inventory = InventoryRepo(conn)
        self.view = SalesView(doc_label=self.DOC_LABEL, party_label=self.PARTY_LABEL)
        self._page = 1
        self.base = SalesTableModel([], party_header=self.PARTY_LABEL)
        self.view.tbl.setModel(self.base)
        self.view.tbl.selectionModel().selectionChanged.connect(self._on_selection_changed)

        self._wire()
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    def set_settings(self, settings: AppSettings):
        """New orders use the tax rate of the settings value passed in last."""
        self.settings = settings

    def reload(self):
        """Re-read the list (after a restore or a customer/supplier edit)."""
        row = self._selected_row()
        self._reload(select_id=row["id"] if row else None)

    def new_order(self):
        self._add()

    # ---- hooks overridden for purchases -----------------------------------

    def _make_repo(self, conn: sqlite3.Connection, clock: Clock) -> OrdersRepo:
        return SalesRepo(conn, clock=clock)

    def _parties(self) -> list:
        return CustomersRepo(self.conn).list_customers()

    def _outstanding(self, party_id: int) -> float:
        return self.repo.customer_outstanding(party_id)

    def _form_tax_rate(self, initial: dict | None) -> float:
        # an existing order keeps the rate it was saved with
        if initial and initial.get("tax_rate") is not None:
            return float(initial["tax_rate"])
        return self.settings.tax_rate

    def _open_form(self, initial: dict | None = None):
        return SaleForm(
            self.view,
            parts=self.inventory.list_for_select(),
            parties=self._parties(),
            tax_rate=self._form_tax_rate(initial),
            initial=initial,
        )

    # ---- wiring / model ---------------------------------------------------

    def _wire(self):
        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_edit.clicked.connect(self._edit)
        self.view.btn_del.clicked.connect(self._delete)
        self.view.btn_record_payment.clicked.connect(self._record_payment)
        self.view.search.textChanged.connect(self._on_filters_changed)
        self.view.filtersChanged.connect(self._on_filters_changed)
        self.view.pager.pageRequested.connect(self._go_to_page)

    def _on_filters_changed(self, *_):
        self._page = 1
        self._reload()

    def _go_to_page(self, page: int):
        self._page = max(1, page)
        self._reload()

    def _filters(self) -> OrderFilters:
        return OrderFilters(**self.view.filter_values())

    def _reload(self, select_id: int | None = None):
        result = self.repo.list_orders(self._filters(), self._page, self.PAGE_SIZE)
        if self._page > result.pages:
            self._page = result.pages
            result = self.repo.list_orders(self._filters(), self._page, self.PAGE_SIZE)
        self.base.replace(result.data)
        self.view.tbl.resizeColumnsToContents()
        self.view.pager.set_page(result.page, result.pages, result.total)

        row_to_select = 0
        if select_id is not None:
            for i, r in enumerate(result.data):
                if r["id"] == select_id:
                    row_to_select = i
                    break
        if self.base.rowCount() > 0:
            self.view.tbl.selectRow(row_to_select)
        self._update_action_states()
        self._sync_details()

    def _on_selection_changed(self, *_):
        self._update_action_states()
        self._sync_details()

    def _update_action_states(self):
        row = self._selected_row()
        selected = row is not None
        self.view.btn_edit.setEnabled(selected)
        self.view.btn_del.setEnabled(selected)
        self.view.btn_record_payment.setEnabled(selected and float(row["balance"]) > 0)

    def _selected_row(self) -> dict | None:
        sel = self.view.tbl.selectionModel()
        idxs = sel.selectedRows() if sel else []
        if not idxs:
            return None
        return self.base.at(idxs[0].row())

    def _sync_details(self):
        row = self._selected_row()
        if row is None:
            self.view.details.set_data(None)
            self.view.items.set_rows([])
            self.view.payments.set_rows([])
            return
        header = self.repo.get_header(row["id"])
        party = header.get("counterparty_id") if header else None
        self.view.details.set_data(header, self._outstanding(party) if party else None)
        self.view.items.set_rows(self.repo.list_items(row["id"]))
        self.view.payments.set_rows(self.repo.list_payments(row["id"]))

    def _user_id(self) -> int | None:
        return int(self.user["id"]) if self.user and self.user.get("id") is not None else None

    # ---- CRUD -------------------------------------------------------------

    def _add(self):
        dlg = self._open_form()
        if not dlg.exec():
            return
        p = dlg.payload()
        if not p:
            return
        try:
            receipt = self.repo.create_order(request_from_payload(p, self._user_id()))
        except DomainError as e:
            _log.warning("%s not saved: %s", self.DOC_LABEL.lower(), e)
            error(self.view, f"{self.DOC_LABEL} not saved", str(e))
            return

        self._page = 1
        self._reload(select_id=receipt.id)
        self.ordersChanged.emit()
        lines = [
            f"{self.DOC_LABEL} {receipt.number} saved.",
            f"Total: {fmt_money(receipt.total)}",
            f"Balance: {fmt_money(receipt.balance)}",
        ]
        if receipt.change_due > 0:
            lines.append(f"Change due: {fmt_money(receipt.change_due)}")
        info(self.view, "Saved", "\n".join(lines))

    def _edit(self):
        row = self._selected_row()
        if not row:
            info(self.view, "Select", f"Select a {self.DOC_LABEL.lower()} to edit.")
            return
        header = self.repo.get_header(row["id"])
        if header is None:
            self._reload()
            return
        initial = dict(header, items=self.repo.list_items(row["id"]))
        dlg = self._open_form(initial=initial)
        if not dlg.exec():
            return
        p = dlg.payload()
        if not p:
            return
        try:
            self.repo.update_order(row["id"], request_from_payload(p, self._user_id()))
        except DomainError as e:
            _log.warning("%s %s not updated: %s", self.DOC_LABEL.lower(), row["invoice_number"], e)
            error(self.view, f"{self.DOC_LABEL} not updated", str(e))
            return
        self._reload(select_id=row["id"])
        self.ordersChanged.emit()
        info(self.view, "Saved", f"{self.DOC_LABEL} {row['invoice_number']} updated.")

    def _delete(self):
        row = self._selected_row()
        if not row:
            info(self.view, "Select", f"Select a {self.DOC_LABEL.lower()} to delete.")
            return
        if not confirm(
            self.view,
            f"Delete {self.DOC_LABEL}",
            f"Delete {row['invoice_number']}? Its payments are removed and stock is put back.",
        ):
            return
        try:
            self.repo.delete_order(row["id"])
        except DomainError as e:
            error(self.view, "Not deleted", str(e))
            return
        self._reload()
        self.ordersChanged.emit()

    def _record_payment(self):
        row = self._selected_row()
        if not row:
            info(self.view, "Select", f"Select a {self.DOC_LABEL.lower()} first.")
            return
        header = self.repo.get_header(row["id"])
        if header is None or float(header["balance"]) <= 0:
            info(self.view, "Nothing to pay", f"This {self.DOC_LABEL.lower()} has no remaining balance.")
            return
        dlg = PaymentForm(
            self.view,
            number=header["invoice_number"],
            total=header["total_amount"],
            paid=header["paid_amount"],
            doc_label=self.DOC_LABEL,
        )
        if not dlg.exec():
            return
        p = dlg.payload()
        if not p:
            return
        try:
            balance = self.repo.record_payment(
                row["id"], float(p["amount"]), p["method"], p.get("date"), p.get("notes")
            )
        except DomainError as e:
            error(self.view, "Payment not recorded", str(e))
            return
        self._reload(select_id=row["id"])
        self.ordersChanged.emit()
        info(self.view, "Payment recorded", f"Remaining balance: {fmt_money(balance)}")
