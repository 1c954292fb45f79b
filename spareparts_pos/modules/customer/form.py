from __future__ import annotations

import re

from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QDialogButtonBox,
    QVBoxLayout,
    QLineEdit,
    QPlainTextEdit,
    QLabel,
)

from ...database.repositories.customers_repo import Customer
from ...utils.validators import non_empty

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CustomerForm(QDialog):
    """
    Customer create/edit form.

    FIELDS lists (attribute, label, multiline); SupplierForm swaps it and
    RECORD for its own dataclass. Only the name is required; whitespace is
    tidied and blank optional fields become None.
    """

    TITLE = "Customer"
    RECORD = Customer
    FIELDS = [
        ("name", "Name*", False),
        ("phone", "Phone", False),
        ("email", "Email", False),
        ("vehicle_info", "Vehicle", False),
        ("address", "Address", True),
    ]

    def __init__(self, parent=None, initial=None):
        super().__init__(parent)
        self.setWindowTitle(self.TITLE)
        self.setModal(True)
        self._initial = initial
        self._payload = None

        form = QFormLayout()
        self.inputs: dict[str, QLineEdit | QPlainTextEdit] = {}
        for attr, label, multiline in self.FIELDS:
            w = QPlainTextEdit() if multiline else QLineEdit()
            if multiline:
                w.setFixedHeight(60)
            self.inputs[attr] = w
            form.addRow(label, w)

        self.lab_error = QLabel()
        self.lab_error.setStyleSheet("color: red;")

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(self.lab_error)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        root.addWidget(self.buttons)

        if initial is not None:
            for attr, w in self.inputs.items():
                value = getattr(initial, attr, None) or ""
                if isinstance(w, QPlainTextEdit):
                    w.setPlainText(value)
                else:
                    w.setText(value)

    # ---------------- helpers ----------------

    @staticmethod
    def _collapse_spaces(line: str) -> str:
        return re.sub(r"\s+", " ", line).strip()

    def _norm_multiline(self, text: str) -> str:
        lines = [self._collapse_spaces(l) for l in (text or "").splitlines()]
        return "\n".join(l for l in lines if l).strip()

    def _text(self, attr: str) -> str:
        w = self.inputs[attr]
        if isinstance(w, QPlainTextEdit):
            return self._norm_multiline(w.toPlainText())
        return self._collapse_spaces(w.text())

    # ---------------- API ----------------

    def get_payload(self):
        self.lab_error.clear()
        if not non_empty(self._text("name")):
            self.lab_error.setText("Name is required.")
            self.inputs["name"].setFocus()
            return None
        email = self._text("email") if "email" in self.inputs else ""
        if email and not _EMAIL_RE.match(email):
            self.lab_error.setText("Email address looks invalid.")
            self.inputs["email"].setFocus()
            return None
        values = {attr: (self._text(attr) or None) for attr in self.inputs}
        return self.RECORD(id=self._initial.id if self._initial is not None else None, **values)

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        return self._payload
