# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own SQLite file under tmp_path (schema + default
#   admin via get_connection, demo parts/parties via seed_demo)
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (get_connection)
# - Message boxes are recorded instead of shown
# - bcrypt cost lowered so user tests stay fast
# ---------------------------------------------------------------------

from __future__ import annotations

import datetime
import os
import re
import sqlite3
import tempfile

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("SPAREPARTS_POS_HOME", tempfile.mkdtemp(prefix="spareparts-pos-tests-"))

import pytest
from PySide6 import QtCore
from PySide6.QtWidgets import QMessageBox

from spareparts_pos.database import get_connection
from spareparts_pos.database.seeders.demo_data import seed_demo
from spareparts_pos.settings import AppSettings, SettingsStore
from spareparts_pos.utils import auth

auth.BCRYPT_ROUNDS = 4

FIXED_DAY = datetime.date(2025, 3, 14)


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Silence benign Qt warnings ----------
_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
    r"^This plugin does not support propagateSizeHints",
]


@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]
    original = None

    def handler(msg_type, context, message):
        text = str(message)
        if any(r.search(text) for r in rx):
            return
        if original is not None:
            original(msg_type, context, message)

    original = QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Message boxes ----------
class MessageLog:
    """Collects (kind, title, text) for every message box a controller raises."""

    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []
        self.answer = QMessageBox.Yes

    def kinds(self) -> list[str]:
        return [k for k, _t, _x in self.calls]

    def last(self) -> tuple[str, str, str] | None:
        return self.calls[-1] if self.calls else None


@pytest.fixture(autouse=True)
def messages(monkeypatch) -> MessageLog:
    log = MessageLog()

    def _record(kind):
        def fn(parent, title, text, *a, **k):
            log.calls.append((kind, title, text))
            return QMessageBox.Ok
        return fn

    def _question(parent, title, text, *a, **k):
        log.calls.append(("question", title, text))
        return log.answer

    monkeypatch.setattr(QMessageBox, "information", _record("info"))
    monkeypatch.setattr(QMessageBox, "warning", _record("warning"))
    monkeypatch.setattr(QMessageBox, "critical", _record("error"))
    monkeypatch.setattr(QMessageBox, "question", _question)
    return log


# ---------- Per-test database ----------
@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "data" / "shop.db"


@pytest.fixture()
def conn(db_path):
    con = get_connection(db_path)
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def ids(conn: sqlite3.Connection) -> dict:
    """Demo rows keyed by name / part code, plus the seeded admin user."""
    out = seed_demo(conn)
    out["admin"] = conn.execute("SELECT id FROM users WHERE username='admin'").fetchone()["id"]
    out["walk_in"] = None
    return out


@pytest.fixture()
def clock():
    return lambda: FIXED_DAY


@pytest.fixture()
def settings() -> AppSettings:
    return AppSettings()


@pytest.fixture()
def store(tmp_path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture()
def current_user(ids: dict) -> dict:
    return {"id": int(ids["admin"]), "username": "admin", "full_name": "Administrator", "role": "admin"}


# ---------- Small DB helpers shared by the suites ----------
def count(conn: sqlite3.Connection, table: str) -> int:
    return int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])


def stock(conn: sqlite3.Connection, inventory_id: int) -> int:
    return int(conn.execute("SELECT quantity FROM inventory WHERE id=?", (inventory_id,)).fetchone()[0])
