# spareparts_pos/modules/login/view.py
from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QLabel, QLineEdit, QStyle, QVBoxLayout, QWidget,
)

from ...constants import APP_NAME


class LoginDialog(QDialog):
    """
    Username/password prompt. The controller owns the retry loop: after a
    failed attempt it calls set_error() and shows the same dialog again.
    """

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Sign in")
        self.setModal(True)
        self.setMinimumWidth(340)

        lay = QVBoxLayout(self)

        title = QLabel(f"<h3>{APP_NAME}</h3>")
        lay.addWidget(title)
        lay.addWidget(QLabel("Sign in with your staff account."))

        self.lab_error = QLabel()
        self.lab_error.setWordWrap(True)
        self.lab_error.setStyleSheet("color:#b10000; font-weight:600;")
        self.lab_error.hide()
        lay.addWidget(self.lab_error)

        form = QFormLayout()
        self.txt_user = QLineEdit()
        form.addRow("Username", self.txt_user)

        self.txt_pass = QLineEdit()
        self.txt_pass.setEchoMode(QLineEdit.Password)
        icon = self.style().standardIcon(QStyle.SP_FileDialogContentsView)
        reveal = self.txt_pass.addAction(icon, QLineEdit.TrailingPosition)
        reveal.setCheckable(True)
        reveal.setToolTip("Show password")
        reveal.toggled.connect(
            lambda on: self.txt_pass.setEchoMode(QLineEdit.Normal if on else QLineEdit.Password)
        )
        form.addRow("Password", self.txt_pass)
        lay.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Sign in")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        lay.addWidget(buttons)

        self.txt_user.setFocus()

    def get_values(self) -> tuple[str, str]:
        # passwords are compared exactly, so no strip()
        return self.txt_user.text(), self.txt_pass.text()

    def set_error(self, msg: str | None) -> None:
        self.lab_error.setText(msg or "")
        self.lab_error.setVisible(bool(msg))
        if msg:
            self.txt_pass.clear()
            self.txt_pass.setFocus()
