import sqlite3

from ..sales.controller import SalesController
from .form import PurchaseForm
from ...database.repositories.numbering import Clock
from ...database.repositories.orders_repo import OrdersRepo
from ...database.repositories.purchases_repo import PurchasesRepo
from ...database.repositories.suppliers_repo import SuppliersRepo


class PurchaseController(SalesController):
    """
    Purchase orders: the sales screen over `PurchasesRepo`. Stock goes up on
    save, numbers are PO-YYYYMMDD-NNNN and the supplier's outstanding
    balance is what we still owe them.
    """

    TITLE = "Purchases"
    DOC_LABEL = "Purchase"
    PARTY_LABEL = "Supplier"

    def _make_repo(self, conn: sqlite3.Connection, clock: Clock) -> OrdersRepo:
        return PurchasesRepo(conn, clock=clock)

    def _parties(self) -> list:
        return SuppliersRepo(self.conn).list_suppliers()

    def _outstanding(self, party_id: int) -> float:
        return self.repo.supplier_outstanding(party_id)

    def _open_form(self, initial: dict | None = None):
        return PurchaseForm(
            self.view,
            parts=self.inventory.list_for_select(),
            parties=self._parties(),
            tax_rate=self._form_tax_rate(initial),
            initial=initial,
        )
