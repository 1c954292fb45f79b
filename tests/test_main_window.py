# tests/test_main_window.py
from __future__ import annotations

import pytest

from conftest import stock
from spareparts_pos.main import MainWindow
from spareparts_pos.modules.login import view as login_view
from spareparts_pos.modules.login.controller import LoginController
from spareparts_pos.modules.sales import controller as sales_ctl

EXPECTED_PAGES = [
    "dashboard", "sales", "purchases", "inventory", "customers",
    "suppliers", "reports", "settings", "backup",
]


@pytest.fixture()
def window(qtbot, conn, ids, current_user, store):
    w = MainWindow(conn, current_user, store)
    qtbot.addWidget(w)
    return w


def test_every_page_is_built(window):
    assert list(window.modules) == EXPECTED_PAGES
    assert window.nav.count() == len(EXPECTED_PAGES)
    assert window.stack.currentIndex() == 0


def test_dashboard_drilldown_switches_page(window):
    window.modules["dashboard"].navigate_to.emit("inventory")
    inventory = window.modules["inventory"].get_widget()
    assert window.stack.currentWidget() is inventory


def test_sale_refreshes_inventory_page(monkeypatch, conn, ids, window):
    monkeypatch.setattr(sales_ctl, "SaleForm", _form_returning({
        "counterparty_id": None,
        "order_date": None,
        "items": [{"inventory_id": ids["OIL-FLT-01"], "quantity": 5, "unit_price": 50.0}],
        "discount": 0.0,
        "discount_type": "amount",
        "tax_rate": 0.0,
        "payment_method": "cash",
        "amount_paid": 250.0,
        "notes": None,
    }))
    window.modules["dashboard"].open_create_sale.emit()

    assert window.stack.currentWidget() is window.modules["sales"].get_widget()
    assert stock(conn, ids["OIL-FLT-01"]) == 95
    inv = window.modules["inventory"].base
    quantities = {inv.at(r)["part_code"]: inv.at(r)["quantity"] for r in range(inv.rowCount())}
    assert quantities["OIL-FLT-01"] == 95


def test_saved_settings_reach_other_pages(window):
    settings_page = window.modules["settings"]
    settings_page.view.general.tax_rate.setValue(10.0)
    settings_page.view.general.currency.setText("PKR")
    settings_page.save()
    assert window.modules["sales"].settings.tax_rate == pytest.approx(0.10)
    assert window.modules["reports"].settings.currency == "PKR"
    assert window.modules["dashboard"].view.kpi_text("payables").startswith("PKR ")


def test_login_prompt_retries_then_signs_in(monkeypatch, conn):
    answers = iter([("admin", "wrong"), ("admin", "admin123")])
    errors = []

    class FakeDialog:
        def __init__(self, parent=None):
            pass

        def exec(self):
            return True

        def get_values(self):
            return next(answers)

        def set_error(self, message):
            errors.append(message)

    monkeypatch.setattr(login_view, "LoginDialog", FakeDialog)
    session = LoginController(conn).prompt()
    assert session is not None and session.username == "admin"
    assert errors == ["Incorrect username or password."]


def test_login_prompt_cancelled(monkeypatch, conn):
    class Cancelled:
        def __init__(self, parent=None):
            pass

        def exec(self):
            return False

    monkeypatch.setattr(login_view, "LoginDialog", Cancelled)
    login = LoginController(conn)
    assert login.prompt() is None
    assert login.last_error_code == "cancelled"


def _form_returning(payload):
    class _Form:
        def __init__(self, *args, **kwargs):
            pass

        def exec(self):
            return True

        def payload(self):
            return payload

    return _Form
