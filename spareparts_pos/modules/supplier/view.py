from ..customer.details import CustomerDetails
from ..customer.view import CustomerView


class SupplierDetails(CustomerDetails):
    FIELDS = [
        ("Name", "name"),
        ("Contact", "contact_person"),
        ("Phone", "phone"),
        ("Email", "email"),
        ("Address", "address"),
    ]


class SupplierView(CustomerView):
    DETAILS = SupplierDetails
