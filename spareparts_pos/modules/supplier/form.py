from __future__ import annotations

from ..customer.form import CustomerForm
from ...database.repositories.suppliers_repo import Supplier


class SupplierForm(CustomerForm):
    TITLE = "Supplier"
    RECORD = Supplier
    FIELDS = [
        ("name", "Name*", False),
        ("contact_person", "Contact Person", False),
        ("phone", "Phone", False),
        ("email", "Email", False),
        ("address", "Address", True),
    ]
