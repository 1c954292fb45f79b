# tests/test_backup_restore.py
from __future__ import annotations

import datetime

import pytest
from PySide6.QtWidgets import QMessageBox

from conftest import count
from spareparts_pos.database import transaction
from spareparts_pos.database.repositories.customers_repo import Customer, CustomersRepo
from spareparts_pos.modules.backup_restore.controller import BackupRestoreController
from spareparts_pos.modules.backup_restore.service import BackupError, BackupService


class TickingClock:
    """Each call is one minute after the previous one."""

    def __init__(self):
        self.now = datetime.datetime(2025, 3, 14, 9, 0, 0)

    def __call__(self):
        self.now += datetime.timedelta(minutes=1)
        return self.now


@pytest.fixture()
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture()
def service(conn, ids, backup_dir):
    return BackupService(conn, backup_dir, clock=TickingClock())


def test_create_backup_writes_named_file(service, backup_dir):
    seen = []
    b = service.create_backup(progress=seen.append)
    assert b.path.parent == backup_dir
    assert b.name == "backup-2025-03-14T09-01-00.db"
    assert b.path.is_file()
    assert b.size_bytes > 0
    assert b.size_label
    assert not list(backup_dir.glob("*.part"))
    assert all(0 <= p <= 100 for p in seen)


def test_list_backups_newest_first(service, backup_dir):
    assert service.list_backups() == []
    first = service.create_backup()
    second = service.create_backup()
    names = [b.name for b in service.list_backups()]
    assert names == [second.name, first.name]


def test_restore_brings_back_snapshot_and_keeps_safety_copy(conn, service, backup_dir):
    b = service.create_backup()
    customers_before = count(conn, "customers")
    CustomersRepo(conn).create(Customer(None, "Added After Backup"))
    assert count(conn, "customers") == customers_before + 1

    safety = service.restore_backup(b.path)

    assert count(conn, "customers") == customers_before
    assert safety.name.startswith("pre-restore-")
    assert safety.is_file()
    # the safety copy is not offered as a backup
    assert [x.name for x in service.list_backups()] == [b.name]


def test_restore_accepts_name_relative_to_backup_folder(conn, service):
    b = service.create_backup()
    service.restore_backup(b.name)
    assert count(conn, "inventory") == 4


def test_restore_rejects_files_outside_backup_folder(service, tmp_path):
    service.create_backup()
    stray = tmp_path / "backup-2025-01-01T00-00-00.db"
    stray.write_bytes(b"not a database")
    with pytest.raises(BackupError, match="not in the backup folder"):
        service.restore_backup(stray)


def test_restore_rejects_wrongly_named_file(service, backup_dir):
    service.create_backup()
    odd = backup_dir / "shop-copy.db"
    odd.write_bytes(b"x")
    with pytest.raises(BackupError, match="Not a backup file"):
        service.restore_backup(odd)


def test_restore_rejects_corrupt_backup_and_leaves_live_db(conn, service, backup_dir):
    service.create_backup()
    bad = backup_dir / "backup-2030-01-01T00-00-00.db"
    bad.write_bytes(b"garbage that is not sqlite" * 100)
    before = count(conn, "inventory")
    with pytest.raises(BackupError):
        service.restore_backup(bad)
    assert count(conn, "inventory") == before
    assert not list(backup_dir.glob("pre-restore-*.db"))


def test_delete_backup(service):
    b = service.create_backup()
    service.delete_backup(b.path)
    assert not b.path.exists()
    with pytest.raises(BackupError, match="not found"):
        service.delete_backup(b.path)


def test_refuses_while_transaction_open(conn, service):
    with pytest.raises(BackupError, match="transaction"):
        with transaction(conn):
            service.create_backup()
    b = service.create_backup()
    with pytest.raises(BackupError, match="transaction"):
        with transaction(conn):
            service.restore_backup(b.path)


# --------------------------- screen ---------------------------

@pytest.fixture()
def screen(qtbot, conn, service, backup_dir):
    c = BackupRestoreController(conn, backup_dir, service=service)
    qtbot.addWidget(c.get_widget())
    return c


def test_backup_button_creates_and_lists(qtbot, screen, messages):
    with qtbot.waitSignal(screen.backup_completed, timeout=1000) as sig:
        screen.view.btn_backup.click()
    assert sig.args[0].endswith(".db")
    assert screen.view.model.rowCount() == 1
    assert messages.last()[1] == "Backup Completed"


def test_restore_asks_first(qtbot, conn, screen, messages):
    screen.view.btn_backup.click()
    CustomersRepo(conn).create(Customer(None, "Temporary"))
    before = count(conn, "customers")

    messages.answer = QMessageBox.No
    screen.view.btn_restore.click()
    assert count(conn, "customers") == before

    messages.answer = QMessageBox.Yes
    with qtbot.waitSignal(screen.restore_completed, timeout=1000):
        screen.view.btn_restore.click()
    assert count(conn, "customers") == before - 1
    assert messages.last()[1] == "Restore Completed"


def test_restore_without_selection(screen, messages):
    screen.view.btn_restore.click()
    assert messages.last()[:2] == ("info", "Select")


def test_delete_selected_backup(screen, messages):
    screen.view.btn_backup.click()
    assert screen.view.model.rowCount() == 1
    screen.view.btn_delete.click()
    assert ("question", "Delete Backup") in [c[:2] for c in messages.calls]
    assert screen.view.model.rowCount() == 0
