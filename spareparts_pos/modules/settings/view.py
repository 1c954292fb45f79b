from __future__ import annotations

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QLineEdit, QPushButton, QLabel,
    QComboBox, QSpinBox, QDoubleSpinBox, QTabWidget, QPlainTextEdit, QDialog,
    QDialogButtonBox,
)

from ...constants import USER_ROLES
from ...widgets.table_view import TableView

DATE_FORMATS = ("YYYY-MM-DD", "DD/MM/YYYY", "MM/DD/YYYY")


class GeneralTab(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        f = QFormLayout(self)
        self.currency = QLineEdit()
        self.currency.setMaxLength(8)
        self.tax_rate = QDoubleSpinBox()
        self.tax_rate.setRange(0.0, 100.0)
        self.tax_rate.setDecimals(2)
        self.tax_rate.setSuffix(" %")
        self.low_stock = QSpinBox()
        self.low_stock.setRange(0, 100000)
        self.date_format = QComboBox()
        self.date_format.addItems(DATE_FORMATS)
        f.addRow("Currency", self.currency)
        f.addRow("Tax rate", self.tax_rate)
        f.addRow("Low-stock threshold", self.low_stock)
        f.addRow("Date format", self.date_format)


class CompanyTab(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        f = QFormLayout(self)
        self.name = QLineEdit()
        self.tax_id = QLineEdit()
        self.phone = QLineEdit()
        self.email = QLineEdit()
        self.address = QPlainTextEdit()
        self.address.setFixedHeight(60)
        f.addRow("Company name", self.name)
        f.addRow("Tax ID", self.tax_id)
        f.addRow("Phone", self.phone)
        f.addRow("Email", self.email)
        f.addRow("Address", self.address)


class UsersTab(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        bar = QHBoxLayout()
        self.btn_add = QPushButton("Add User")
        self.btn_password = QPushButton("Set Password…")
        self.btn_toggle = QPushButton("Activate / Deactivate")
        self.btn_del = QPushButton("Delete")
        for b in (self.btn_add, self.btn_password, self.btn_toggle, self.btn_del):
            bar.addWidget(b)
        bar.addStretch(1)
        root.addLayout(bar)
        self.table = TableView()
        root.addWidget(self.table, 1)
        self.lab_locked = QLabel("Only administrators can manage users.")
        self.lab_locked.setVisible(False)
        root.addWidget(self.lab_locked)


class SettingsView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        self.tabs = QTabWidget()
        self.general = GeneralTab()
        self.company = CompanyTab()
        self.users = UsersTab()
        self.tabs.addTab(self.general, "General")
        self.tabs.addTab(self.company, "Company")
        self.tabs.addTab(self.users, "Users")
        root.addWidget(self.tabs, 1)

        bar = QHBoxLayout()
        bar.addStretch(1)
        self.btn_revert = QPushButton("Revert")
        self.btn_save = QPushButton("Save Settings")
        bar.addWidget(self.btn_revert)
        bar.addWidget(self.btn_save)
        root.addLayout(bar)


class UserForm(QDialog):
    """New user: username, name, email, role and initial password (entered twice)."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Add User")
        self.setModal(True)
        self._payload = None
        self.username = QLineEdit()
        self.full_name = QLineEdit()
        self.email = QLineEdit()
        self.role = QComboBox()
        for r in USER_ROLES:
            self.role.addItem(r.title(), r)
        self.role.setCurrentIndex(self.role.findData("cashier"))
        self.password = QLineEdit()
        self.password.setEchoMode(QLineEdit.Password)
        self.password2 = QLineEdit()
        self.password2.setEchoMode(QLineEdit.Password)
        self.lab_error = QLabel()
        self.lab_error.setStyleSheet("color: red;")

        f = QFormLayout(self)
        f.addRow("Username*", self.username)
        f.addRow("Full name", self.full_name)
        f.addRow("Email", self.email)
        f.addRow("Role", self.role)
        f.addRow("Password*", self.password)
        f.addRow("Repeat*", self.password2)
        f.addRow(self.lab_error)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        f.addRow(self.buttons)

    def get_payload(self) -> dict | None:
        if not self.username.text().strip():
            self.lab_error.setText("Username is required.")
            return None
        if not self.password.text():
            self.lab_error.setText("Password is required.")
            return None
        if self.password.text() != self.password2.text():
            self.lab_error.setText("Passwords do not match.")
            return None
        return {
            "username": self.username.text().strip(),
            "password": self.password.text(),
            "full_name": self.full_name.text().strip() or None,
            "email": self.email.text().strip() or None,
            "role": self.role.currentData(),
        }

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        return self._payload
