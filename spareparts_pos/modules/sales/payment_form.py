from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QFrame,
    QVBoxLayout,
    QLabel,
    QComboBox,
    QDoubleSpinBox,
    QDateEdit,
    QLineEdit,
    QMessageBox,
)
from PySide6.QtCore import QDate

from ...utils.helpers import fmt_money, today_str
from ..payments.payment_utilities.calculations import apply_payment
from ..payments.payment_utilities.status import label as status_label
from ...database.repositories.errors import DomainError


class PaymentForm(QDialog):
    """
    Records one additional payment against a single sale or purchase.

    The preview line runs the same arithmetic as the order engine, so the
    balance and status shown are what will be stored.
    """

    # Settling an outstanding balance is always money changing hands
    METHODS = (("cash", "Cash"), ("card", "Card"))

    def __init__(self, parent=None, *, number: str, total: float, paid: float, doc_label: str = "Sale"):
        super().__init__(parent)
        self.setWindowTitle(f"Record Payment: {doc_label} {number}")
        self.setModal(True)
        self._total = float(total)
        self._paid = float(paid)
        self._remaining = round(self._total - self._paid, 2)
        self._payload = None

        root = QVBoxLayout(self)

        header = QFrame()
        header.setFrameShape(QFrame.StyledPanel)
        head = QFormLayout(header)
        head.addRow(f"{doc_label} #", QLabel(str(number)))
        head.addRow("Order total", QLabel(fmt_money(self._total)))
        head.addRow("Already paid", QLabel(fmt_money(self._paid)))
        self.lab_outstanding = QLabel(f"<b>{fmt_money(self._remaining)}</b>")
        head.addRow("Outstanding", self.lab_outstanding)
        root.addWidget(header)

        form = QFormLayout()
        self.spin_amount = QDoubleSpinBox()
        self.spin_amount.setDecimals(2)
        self.spin_amount.setRange(0.0, max(self._remaining, 0.0))
        self.spin_amount.setValue(max(self._remaining, 0.0))
        form.addRow("Amount", self.spin_amount)

        self.cmb_method = QComboBox()
        for key, text in self.METHODS:
            self.cmb_method.addItem(text, key)
        form.addRow("Method", self.cmb_method)

        self.dt_paid = QDateEdit(QDate.fromString(today_str(), "yyyy-MM-dd"))
        self.dt_paid.setCalendarPopup(True)
        self.dt_paid.setDisplayFormat("yyyy-MM-dd")
        form.addRow("Date", self.dt_paid)

        self.txt_notes = QLineEdit()
        form.addRow("Notes", self.txt_notes)
        root.addLayout(form)

        self.lab_preview = QLabel()
        self.lab_preview.setWordWrap(True)
        root.addWidget(self.lab_preview)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Record")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)
        self._ok = buttons.button(QDialogButtonBox.Ok)

        self.spin_amount.valueChanged.connect(self._refresh_preview)
        self._refresh_preview()

    def _refresh_preview(self):
        amount = self.spin_amount.value()
        self._ok.setEnabled(amount > 0)
        if amount <= 0:
            self.lab_preview.setText("Enter an amount to record.")
            return
        try:
            after = apply_payment(self._total, self._paid, amount)
        except DomainError as e:
            self.lab_preview.setText(str(e))
            return
        self.lab_preview.setText(
            f"Balance after this payment: {fmt_money(after.balance)} ({status_label(after.status)})"
        )

    def accept(self):
        amount = round(self.spin_amount.value(), 2)
        if amount <= 0:
            QMessageBox.warning(self, "Record Payment", "Enter an amount greater than zero.")
            return
        if amount - self._remaining > 1e-9:
            QMessageBox.warning(
                self, "Record Payment",
                f"Only {fmt_money(self._remaining)} is outstanding on this order.",
            )
            return
        self._payload = {
            "amount": amount,
            "method": self.cmb_method.currentData(),
            "date": self.dt_paid.date().toString("yyyy-MM-dd"),
            "notes": self.txt_notes.text().strip() or None,
        }
        super().accept()

    def payload(self):
        return self._payload
