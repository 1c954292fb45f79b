from ..payments.payment_utilities.calculations import resolve_purchase_payment
from ..sales.form import SaleForm


class PurchaseForm(SaleForm):
    """
    Cart dialog for a purchase order.

    Same layout and payload as the sale cart, with purchase rules: the
    supplier is required, lines default to the part's cost price, incoming
    stock is not capped, and the amount paid on receipt may be partial but
    never more than the total.
    """

    DOC_LABEL = "Purchase"
    PARTY_LABEL = "Supplier"
    PARTY_REQUIRED = True
    PRICE_KEY = "cost_price"
    CHECK_STOCK = False
    TENDER_LABEL = "Amount paid now"

    def __init__(self, parent=None, **kwargs):
        super().__init__(parent, **kwargs)
        # nothing is handed back on a purchase
        self.lab_change.setVisible(False)
        lay = self.lab_change.parentWidget().layout()
        label = lay.labelForField(self.lab_change)
        if label is not None:
            label.setVisible(False)

    def _resolve_new(self, total: float, method: str, amount: float):
        return resolve_purchase_payment(total, method, amount)

