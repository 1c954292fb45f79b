from __future__ import annotations

import logging
import sqlite3

from PySide6.QtCore import Signal
from PySide6.QtGui import QStandardItem, QStandardItemModel
from PySide6.QtWidgets import QInputDialog, QLineEdit, QWidget

from ..base_module import BaseModule
from .view import SettingsView, UserForm
from ...database.repositories.errors import DomainError
from ...database.repositories.users_repo import UsersRepo
from ...settings import AppSettings, SettingsStore
from ...utils.ui_helpers import confirm, error, info

_log = logging.getLogger(__name__)

_USER_HEADERS = ["ID", "Username", "Full name", "Role", "Active", "Last login"]


class SettingsController(BaseModule):
    """
    Business settings and user accounts.

    Saving writes settings.json through SettingsStore and emits
    `settingsChanged` with the freshly loaded value; the main window hands
    it to every module that holds settings.
    """

    TITLE = "Settings"

    settingsChanged = Signal(object)

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None, store: SettingsStore):
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.store = store
        self.users = UsersRepo(conn)
        self.settings: AppSettings = store.load()

        self.view = SettingsView()
        self.users_model = QStandardItemModel(0, len(_USER_HEADERS))
        self.users_model.setHorizontalHeaderLabels(_USER_HEADERS)
        self.view.users.table.setModel(self.users_model)

        self.view.btn_save.clicked.connect(self.save)
        self.view.btn_revert.clicked.connect(self._fill_form)
        u = self.view.users
        u.btn_add.clicked.connect(self._add_user)
        u.btn_password.clicked.connect(self._set_password)
        u.btn_toggle.clicked.connect(self._toggle_active)
        u.btn_del.clicked.connect(self._delete_user)

        self._apply_permissions()
        self._fill_form()
        self._reload_users()

    def get_widget(self) -> QWidget:
        return self.view

    # ---- settings ----

    def _is_admin(self) -> bool:
        return bool(self.user) and self.user.get("role") == "admin"

    def _apply_permissions(self):
        admin = self._is_admin()
        u = self.view.users
        for b in (u.btn_add, u.btn_password, u.btn_toggle, u.btn_del):
            b.setEnabled(admin)
        u.lab_locked.setVisible(not admin)

    def _fill_form(self):
        g, c = self.settings.general, self.settings.company
        gen = self.view.general
        gen.currency.setText(g.currency)
        gen.tax_rate.setValue(g.tax_rate * 100.0)
        gen.low_stock.setValue(g.low_stock_threshold)
        i = gen.date_format.findText(g.date_format)
        gen.date_format.setCurrentIndex(i if i >= 0 else 0)
        comp = self.view.company
        comp.name.setText(c.name)
        comp.tax_id.setText(c.tax_id)
        comp.phone.setText(c.phone)
        comp.email.setText(c.email)
        comp.address.setPlainText(c.address)

    def form_values(self) -> tuple[dict, dict]:
        gen, comp = self.view.general, self.view.company
        general = {
            "currency": gen.currency.text().strip() or self.settings.general.currency,
            "tax_rate": round(gen.tax_rate.value() / 100.0, 6),
            "low_stock_threshold": gen.low_stock.value(),
            "date_format": gen.date_format.currentText(),
        }
        company = {
            "name": comp.name.text().strip(),
            "tax_id": comp.tax_id.text().strip(),
            "phone": comp.phone.text().strip(),
            "email": comp.email.text().strip(),
            "address": comp.address.toPlainText().strip(),
        }
        return general, company

    def save(self):
        general, company = self.form_values()
        try:
            self.store.update_section("general", general)
            self.store.update_section("company", company)
        except OSError as e:
            _log.error("settings could not be saved: %s", e)
            error(self.view, "Not saved", f"Settings could not be written:\n{e}")
            return
        self.settings = self.store.reload()
        _log.info("settings saved (tax rate %s, currency %s)", self.settings.tax_rate, self.settings.currency)
        self.settingsChanged.emit(self.settings)
        info(self.view, "Saved", "Settings saved.")

    # ---- users ----

    def _reload_users(self):
        self.users_model.removeRows(0, self.users_model.rowCount())
        for u in self.users.list_users():
            cells = [
                str(u["id"]), u["username"], u.get("full_name") or "", u["role"],
                "Yes" if u["is_active"] else "No", u.get("last_login") or "",
            ]
            self.users_model.appendRow([QStandardItem(c) for c in cells])
        self.view.users.table.resizeColumnsToContents()

    def _selected_user_id(self) -> int | None:
        idxs = self.view.users.table.selectionModel().selectedRows()
        if not idxs:
            return None
        return int(self.users_model.item(idxs[0].row(), 0).text())

    def _run(self, fn, *args, **kwargs) -> bool:
        try:
            fn(*args, **kwargs)
        except DomainError as e:
            error(self.view, "Users", str(e))
            return False
        self._reload_users()
        return True

    def _add_user(self):
        dlg = UserForm(self.view)
        if not dlg.exec():
            return
        p = dlg.payload()
        if not p:
            return
        username = p.pop("username")
        password = p.pop("password")
        if self._run(self.users.create, username, password, **p):
            info(self.view, "Users", f"User “{username}” created.")

    def _set_password(self):
        uid = self._selected_user_id()
        if uid is None:
            info(self.view, "Select", "Please select a user.")
            return
        pw, ok = QInputDialog.getText(self.view, "Set Password", "New password:", QLineEdit.Password)
        if not ok:
            return
        if self._run(self.users.set_password, uid, pw):
            info(self.view, "Users", "Password changed.")

    def _toggle_active(self):
        uid = self._selected_user_id()
        if uid is None:
            info(self.view, "Select", "Please select a user.")
            return
        if self.user and uid == self.user.get("id"):
            error(self.view, "Users", "You cannot deactivate your own account.")
            return
        u = self.users.get(uid)
        if u is None:
            self._reload_users()
            return
        self._run(self.users.update, uid, is_active=not bool(u["is_active"]))

    def _delete_user(self):
        uid = self._selected_user_id()
        if uid is None:
            info(self.view, "Select", "Please select a user.")
            return
        if self.user and uid == self.user.get("id"):
            error(self.view, "Users", "You cannot delete your own account.")
            return
        if not confirm(self.view, "Delete User", "Delete the selected user?"):
            return
        self._run(self.users.delete, uid)
