# database/repositories/users_repo.py
from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from ...constants import USER_ROLES
from ...utils.auth import hash_password, verify_and_maybe_upgrade
from .. import transaction
from .errors import DomainError, NotFoundError

_log = logging.getLogger(__name__)

_PUBLIC = "id, username, full_name, email, role, is_active, created_at, last_login"


class UsersRepo:
    """
    Users and login.

    Passwords are stored as bcrypt hashes. Values carried over from the old
    plaintext users table still verify and are upgraded to bcrypt on the
    first successful login.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    @staticmethod
    def _norm_username(username: str) -> str:
        return (username or "").strip()

    @staticmethod
    def _check_role(role: str) -> str:
        if role not in USER_ROLES:
            raise DomainError(f"Role must be one of: {', '.join(USER_ROLES)}")
        return role

    # ------------------------------- reads -------------------------------

    def list_users(self) -> list[dict]:
        return [dict(r) for r in self.conn.execute(f"SELECT {_PUBLIC} FROM users ORDER BY username").fetchall()]

    def get(self, user_id: int) -> Optional[dict]:
        row = self.conn.execute(f"SELECT {_PUBLIC} FROM users WHERE id=?", (user_id,)).fetchone()
        return dict(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[dict]:
        """Full row including password_hash; for the login path only."""
        row = self.conn.execute(
            f"SELECT {_PUBLIC}, password_hash FROM users WHERE username = ?",
            (self._norm_username(username),),
        ).fetchone()
        return dict(row) if row else None

    # ------------------------------ writes -------------------------------

    def create(
        self,
        username: str,
        password: str,
        *,
        full_name: str | None = None,
        email: str | None = None,
        role: str = "cashier",
    ) -> int:
        uname = self._norm_username(username)
        if not uname:
            raise DomainError("Username cannot be empty.")
        if not password:
            raise DomainError("Password cannot be empty.")
        role = self._check_role(role)
        try:
            with transaction(self.conn):
                cur = self.conn.execute(
                    """
                    INSERT INTO users (username, password_hash, full_name, email, role)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (uname, hash_password(password), full_name, email, role),
                )
        except sqlite3.IntegrityError as e:
            raise DomainError(f"Username '{uname}' is already taken.") from e
        return int(cur.lastrowid)

    def update(
        self,
        user_id: int,
        *,
        full_name: str | None = None,
        email: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
    ) -> None:
        current = self.get(user_id)
        if current is None:
            raise NotFoundError(f"User #{user_id} not found.")
        values = (
            full_name if full_name is not None else current["full_name"],
            email if email is not None else current["email"],
            self._check_role(role) if role is not None else current["role"],
            int(is_active) if is_active is not None else current["is_active"],
            user_id,
        )
        with transaction(self.conn):
            self.conn.execute(
                "UPDATE users SET full_name=?, email=?, role=?, is_active=? WHERE id=?", values
            )

    def set_password(self, user_id: int, password: str) -> None:
        if not password:
            raise DomainError("Password cannot be empty.")
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE users SET password_hash=? WHERE id=?", (hash_password(password), user_id)
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"User #{user_id} not found.")

    def delete(self, user_id: int) -> None:
        """The last active admin cannot be removed."""
        row = self.get(user_id)
        if row is None:
            raise NotFoundError(f"User #{user_id} not found.")
        if row["role"] == "admin":
            n = self.conn.execute(
                "SELECT COUNT(*) AS n FROM users WHERE role='admin' AND is_active=1"
            ).fetchone()["n"]
            if n <= 1:
                raise DomainError("Cannot delete the last admin user.")
        with transaction(self.conn):
            self.conn.execute("DELETE FROM users WHERE id=?", (user_id,))

    # ------------------------------- login -------------------------------

    def authenticate(self, username: str, password: str) -> Optional[dict]:
        """
        Return the user (without password_hash) on success, else None.
        Inactive users never authenticate. A successful login stamps
        last_login and upgrades a legacy/weak hash.
        """
        user = self.get_user_by_username(username)
        if user is None or not user["is_active"]:
            _log.info("login failed for %r", self._norm_username(username))
            return None

        upgraded: list[str] = []
        ok, _ = verify_and_maybe_upgrade(password, user["password_hash"], on_rehash=upgraded.append)
        if not ok:
            _log.info("login failed for %r", user["username"])
            return None
        with transaction(self.conn):
            if upgraded:
                self.conn.execute("UPDATE users SET password_hash=? WHERE id=?", (upgraded[-1], user["id"]))
            self.conn.execute("UPDATE users SET last_login=CURRENT_TIMESTAMP WHERE id=?", (user["id"],))
        _log.info("user %s logged in", user["username"])
        user.pop("password_hash", None)
        return user
