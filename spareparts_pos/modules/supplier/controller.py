from __future__ import annotations

from ..customer.controller import CustomerController
from ..customer.model import CustomersTableModel
from .form import SupplierForm
from .view import SupplierView
from ...database.repositories.purchases_repo import PurchasesRepo
from ...database.repositories.suppliers_repo import SuppliersRepo


class SuppliersTableModel(CustomersTableModel):
    COLUMNS = [
        ("ID", "id"),
        ("Name", "name"),
        ("Contact", "contact_person"),
        ("Phone", "phone"),
        ("Email", "email"),
    ]


class SupplierController(CustomerController):
    """Suppliers screen; deleting a supplier with purchases on record is refused."""

    TITLE = "Suppliers"
    NOUN = "Supplier"

    def _make_repo(self, conn):
        return SuppliersRepo(conn)

    def _make_orders_repo(self, conn):
        return PurchasesRepo(conn)

    def _make_view(self):
        return SupplierView(noun=self.NOUN)

    def _make_model(self, rows):
        return SuppliersTableModel(rows)

    def _open_form(self, initial=None):
        return SupplierForm(self.view, initial=initial)

    def _list(self, term: str):
        return self.repo.search(term) if term else self.repo.list_suppliers()
