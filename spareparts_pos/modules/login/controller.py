# spareparts_pos/modules/login/controller.py
from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from ...database.repositories.users_repo import UsersRepo
from .model import UserSession

_log = logging.getLogger(__name__)


class LoginController:
    """
    Login flow using UsersRepo for all DB I/O.

    Public attrs (set after each attempt):
      - last_error_code: str | None   ('cancelled', 'empty_fields',
        'user_inactive', 'invalid_credentials', 'too_many_attempts')
      - last_error_message: str | None
      - last_username: str | None
    """

    MAX_ATTEMPTS = 5

    def __init__(self, conn: sqlite3.Connection, parent=None) -> None:
        self.conn = conn
        self.parent = parent
        self.repo = UsersRepo(conn)

        self.last_error_code: Optional[str] = None
        self.last_error_message: Optional[str] = None
        self.last_username: Optional[str] = None

    # ----------------------------- Public API -----------------------------

    def attempt(self, username: str, password: str) -> Optional[UserSession]:
        """One credential check without any UI."""
        self._reset_last_error()
        self.last_username = (username or "").strip()
        if not self.last_username or not password:
            return self._fail("empty_fields", "Please enter both username and password.")

        u = self.repo.get_user_by_username(self.last_username)
        if u is not None and not u["is_active"]:
            return self._fail(
                "user_inactive", f"Account “{self.last_username}” is inactive. Contact an administrator."
            )

        user = self.repo.authenticate(self.last_username, password)
        if user is None:
            # Same message for unknown user and wrong password
            return self._fail("invalid_credentials", "Incorrect username or password.")
        return UserSession.from_mapping(user)

    def prompt(self) -> Optional[UserSession]:
        """
        Show the dialog until the user signs in, cancels or runs out of
        attempts. Returns the session or None.
        """
        from .view import LoginDialog  # lazy import to keep UI deps local
        dlg = LoginDialog(self.parent)
        for _ in range(self.MAX_ATTEMPTS):
            if not dlg.exec():
                self._fail("cancelled", "Login cancelled by user.")
                return None
            session = self.attempt(*dlg.get_values())
            if session is not None:
                return session
            dlg.set_error(self.last_error_message)
        self._fail("too_many_attempts", f"Too many failed sign-in attempts ({self.MAX_ATTEMPTS}).")
        _log.warning("sign-in aborted after %d failed attempts", self.MAX_ATTEMPTS)
        return None

    # ----------------------------- Internals -----------------------------

    def _reset_last_error(self) -> None:
        self.last_error_code = None
        self.last_error_message = None
        self.last_username = None

    def _fail(self, code: str, message: str) -> None:
        self.last_error_code = code
        self.last_error_message = message
        return None
