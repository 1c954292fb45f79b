from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from ...utils.helpers import fmt_money
from ..payments.payment_utilities.status import description, label, style_tokens


class SaleDetails(QWidget):
    """
    Read-only panel showing the selected order's header facts.

    set_data() takes the dict returned by `get_header()` (or None to clear),
    plus an optional outstanding balance for the counterparty across all
    of their orders.
    """

    def __init__(self, parent=None, *, title: str = "Sale Details", party_label: str = "Customer"):
        super().__init__(parent)
        self.box = QGroupBox(title)
        f = QFormLayout(self.box)

        self.lab_number = QLabel("-")
        self.lab_date = QLabel("-")
        self.lab_party = QLabel("-")
        self.lab_subtotal = QLabel("-")
        self.lab_discount = QLabel("-")
        self.lab_tax = QLabel("-")
        self.lab_total = QLabel("-")
        self.lab_paid = QLabel("-")
        self.lab_balance = QLabel("-")
        self.lab_status = QLabel("-")
        self.lab_notes = QLabel("-")
        self.lab_notes.setWordWrap(True)
        self.lab_outstanding = QLabel("-")

        f.addRow("Invoice #:", self.lab_number)
        f.addRow("Date:", self.lab_date)
        f.addRow(f"{party_label}:", self.lab_party)
        f.addRow("Subtotal:", self.lab_subtotal)
        f.addRow("Discount:", self.lab_discount)
        f.addRow("Tax:", self.lab_tax)
        f.addRow("Total:", self.lab_total)
        f.addRow("Paid:", self.lab_paid)
        f.addRow("Balance:", self.lab_balance)
        f.addRow("Status:", self.lab_status)
        f.addRow("Notes:", self.lab_notes)
        f.addRow(f"{party_label} outstanding:", self.lab_outstanding)

        lay = QVBoxLayout(self)
        lay.addWidget(self.box)
        lay.addStretch(1)

    def clear(self):
        for lab in (
            self.lab_number, self.lab_date, self.lab_party, self.lab_subtotal,
            self.lab_discount, self.lab_tax, self.lab_total, self.lab_paid,
            self.lab_balance, self.lab_status, self.lab_notes, self.lab_outstanding,
        ):
            lab.setText("-")
        self.lab_status.setStyleSheet("")
        self.lab_status.setToolTip("")

    def set_data(self, header: dict | None, outstanding: float | None = None):
        if not header:
            self.clear()
            return
        self.lab_number.setText(str(header["invoice_number"]))
        self.lab_date.setText(str(header["order_date"]))
        self.lab_party.setText(header.get("counterparty_name") or "Walk-in")
        self.lab_subtotal.setText(fmt_money(header["subtotal"]))
        self.lab_discount.setText(fmt_money(header["discount"]))
        self.lab_tax.setText(fmt_money(header["tax"]))
        self.lab_total.setText(fmt_money(header["total_amount"]))
        self.lab_paid.setText(fmt_money(header["paid_amount"]))
        self.lab_balance.setText(fmt_money(header["balance"]))

        status = header["payment_status"]
        tokens = style_tokens(status)
        self.lab_status.setText(label(status))
        self.lab_status.setToolTip(description(status))
        self.lab_status.setStyleSheet(
            f"color: {tokens['fg']}; background: {tokens['bg']}; padding: 1px 6px; border-radius: 4px;"
        )
        self.lab_notes.setText(header.get("notes") or "-")
        self.lab_outstanding.setText("-" if outstanding is None else fmt_money(outstanding))
