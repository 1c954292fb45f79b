"""
Sales module package exports.

- SalesController (also the base of the purchase screen)
- SalesView, SaleDetails, SaleItemsView, PaymentsView
- SalesTableModel, SaleItemsModel, PaymentsTableModel
- SaleForm (cart dialog), PaymentForm (later payments)
"""

from .controller import SalesController, request_from_payload
from .view import SalesView
from .details import SaleDetails
from .items import SaleItemsView, PaymentsView
from .model import SalesTableModel, SaleItemsModel, PaymentsTableModel
from .form import SaleForm
from .payment_form import PaymentForm

__all__ = [
    "SalesController",
    "request_from_payload",
    "SalesView",
    "SaleDetails",
    "SaleItemsView",
    "PaymentsView",
    "SalesTableModel",
    "SaleItemsModel",
    "PaymentsTableModel",
    "SaleForm",
    "PaymentForm",
]
