# tests/test_screens.py
# Controllers driven with their dialogs replaced by stubs; the real carts
# are exercised at the bottom.
from __future__ import annotations

import pytest
from PySide6.QtWidgets import QInputDialog, QMessageBox

from conftest import count, stock
from spareparts_pos.database.repositories.customers_repo import Customer, CustomersRepo
from spareparts_pos.database.repositories.inventory_repo import InventoryItem, InventoryRepo
from spareparts_pos.database.repositories.sales_repo import SalesRepo
from spareparts_pos.database.repositories.suppliers_repo import Supplier
from spareparts_pos.database.repositories.users_repo import UsersRepo
from spareparts_pos.modules.customer import controller as customer_ctl
from spareparts_pos.modules.customer.controller import CustomerController
from spareparts_pos.modules.customer.form import CustomerForm
from spareparts_pos.modules.inventory import controller as inventory_ctl
from spareparts_pos.modules.inventory.controller import InventoryController
from spareparts_pos.modules.purchase import controller as purchase_ctl
from spareparts_pos.modules.purchase.controller import PurchaseController
from spareparts_pos.modules.purchase.form import PurchaseForm
from spareparts_pos.modules.sales import controller as sales_ctl
from spareparts_pos.modules.sales.controller import SalesController
from spareparts_pos.modules.sales.form import SaleForm
from spareparts_pos.modules.settings import controller as settings_ctl
from spareparts_pos.modules.settings.controller import SettingsController
from spareparts_pos.modules.supplier import controller as supplier_ctl
from spareparts_pos.modules.supplier.controller import SupplierController
from spareparts_pos.settings import settings_from_dict


class _StubForm:
    """Stands in for a dialog: exec() answers `accepted`, payload() returns `value`."""

    accepted = True
    value = None
    delta_value = 0
    opened: list = []

    def __init__(self, *args, **kwargs):
        type(self).opened.append(kwargs)

    def exec(self):
        return self.accepted

    def payload(self):
        return self.value

    def delta(self):
        return self.delta_value


def stub(monkeypatch, module, name, value=None, *, accepted=True, delta=0):
    form = type("Stub" + name, (_StubForm,), {
        "value": value, "accepted": accepted, "delta_value": delta, "opened": [],
    })
    monkeypatch.setattr(module, name, form)
    return form


def sale_payload(ids, **over) -> dict:
    p = {
        "counterparty_id": None,
        "order_date": "2025-03-14",
        "items": [{"inventory_id": ids["OIL-FLT-01"], "quantity": 2, "unit_price": 50.0}],
        "discount": 0.0,
        "discount_type": "amount",
        "tax_rate": 0.0,
        "payment_method": "cash",
        "amount_paid": 100.0,
        "notes": None,
    }
    p.update(over)
    return p


def select_row(table, model, key, value):
    for r in range(model.rowCount()):
        row = model.at(r)
        got = row[key] if isinstance(row, dict) else getattr(row, key)
        if got == value:
            table.selectRow(r)
            return
    raise AssertionError(f"{key}={value!r} not listed")


# --------------------------- sales ---------------------------

@pytest.fixture()
def sales_screen(qtbot, conn, ids, current_user, settings, clock):
    c = SalesController(conn, current_user, settings, clock=clock)
    qtbot.addWidget(c.get_widget())
    return c


def test_new_sale_saves_and_announces(qtbot, monkeypatch, conn, ids, sales_screen, messages):
    stub(monkeypatch, sales_ctl, "SaleForm", sale_payload(ids, amount_paid=120.0))
    with qtbot.waitSignal(sales_screen.ordersChanged, timeout=1000):
        sales_screen.new_order()
    assert sales_screen.base.rowCount() == 1
    assert stock(conn, ids["OIL-FLT-01"]) == 98
    kind, title, text = messages.last()
    assert (kind, title) == ("info", "Saved")
    assert "Change due: 20.00" in text
    row = sales_screen._selected_row()
    assert row["invoice_number"].startswith("20250314-")


def test_cancelled_sale_form_writes_nothing(monkeypatch, conn, ids, sales_screen, messages):
    stub(monkeypatch, sales_ctl, "SaleForm", sale_payload(ids), accepted=False)
    sales_screen.view.btn_add.click()
    assert count(conn, "sales") == 0
    assert messages.calls == []


def test_engine_error_is_shown_and_rolled_back(monkeypatch, conn, ids, sales_screen, messages):
    too_many = sale_payload(ids, items=[{"inventory_id": ids["SPK-PLG-01"], "quantity": 9, "unit_price": 15.0}],
                            amount_paid=200.0)
    stub(monkeypatch, sales_ctl, "SaleForm", too_many)
    sales_screen.view.btn_add.click()
    assert messages.last()[:2] == ("error", "Sale not saved")
    assert count(conn, "sales") == 0
    assert stock(conn, ids["SPK-PLG-01"]) == 4


def test_edit_passes_current_order_to_form(monkeypatch, conn, ids, sales_screen, messages):
    stub(monkeypatch, sales_ctl, "SaleForm", sale_payload(ids, payment_method="credit", amount_paid=0.0))
    sales_screen.view.btn_add.click()

    edited = sale_payload(ids, items=[{"inventory_id": ids["OIL-FLT-01"], "quantity": 3, "unit_price": 50.0}],
                          payment_method="credit", amount_paid=0.0)
    form = stub(monkeypatch, sales_ctl, "SaleForm", edited)
    sales_screen.view.btn_edit.click()

    initial = form.opened[0]["initial"]
    assert initial["items"][0]["quantity"] == 2
    assert messages.last()[:2] == ("info", "Saved")
    assert stock(conn, ids["OIL-FLT-01"]) == 97
    assert sales_screen._selected_row()["total_amount"] == pytest.approx(150.0)


def test_record_payment_and_delete(monkeypatch, conn, ids, sales_screen, messages):
    stub(monkeypatch, sales_ctl, "SaleForm", sale_payload(ids, payment_method="credit", amount_paid=0.0))
    sales_screen.view.btn_add.click()
    assert sales_screen.view.btn_record_payment.isEnabled()

    stub(monkeypatch, sales_ctl, "PaymentForm",
         {"amount": 40.0, "method": "cash", "date": "2025-03-14", "notes": None})
    sales_screen.view.btn_record_payment.click()
    assert messages.last()[:2] == ("info", "Payment recorded")
    assert sales_screen._selected_row()["balance"] == pytest.approx(60.0)

    messages.answer = QMessageBox.No
    sales_screen.view.btn_del.click()
    assert count(conn, "sales") == 1

    messages.answer = QMessageBox.Yes
    sales_screen.view.btn_del.click()
    assert count(conn, "sales") == 0
    assert count(conn, "payments") == 0
    assert stock(conn, ids["OIL-FLT-01"]) == 100


def test_settings_change_reaches_new_sales(monkeypatch, ids, sales_screen):
    form = stub(monkeypatch, sales_ctl, "SaleForm", None)
    sales_screen.set_settings(settings_from_dict({"general": {"taxRate": 0.2}}))
    sales_screen.new_order()
    assert form.opened[0]["tax_rate"] == pytest.approx(0.2)


def test_edit_form_gets_the_saved_rate_not_the_current_setting(monkeypatch, ids, sales_screen):
    stub(monkeypatch, sales_ctl, "SaleForm", sale_payload(ids, tax_rate=0.1, payment_method="credit", amount_paid=0.0))
    sales_screen.view.btn_add.click()
    sales_screen.set_settings(settings_from_dict({"general": {"taxRate": 0.2}}))

    form = stub(monkeypatch, sales_ctl, "SaleForm", None)
    sales_screen.view.btn_edit.click()
    assert form.opened[0]["tax_rate"] == pytest.approx(0.1)
    assert form.opened[0]["initial"]["tax_rate"] == pytest.approx(0.1)


# --------------------------- purchases ---------------------------

def test_purchase_screen_raises_stock(monkeypatch, conn, ids, current_user, settings, clock, qtbot, messages):
    c = PurchaseController(conn, current_user, settings, clock=clock)
    qtbot.addWidget(c.get_widget())
    payload = sale_payload(
        ids,
        counterparty_id=ids["Genuine Spares Co"],
        items=[{"inventory_id": ids["SHK-ABS-01"], "quantity": 3, "unit_price": 120.0}],
        amount_paid=100.0,
    )
    form = stub(monkeypatch, purchase_ctl, "PurchaseForm", payload)
    c.view.btn_add.click()

    assert stock(conn, ids["SHK-ABS-01"]) == 3
    row = c._selected_row()
    assert row["invoice_number"].startswith("PO-20250314-")
    assert row["balance"] == pytest.approx(260.0)
    assert [p.name for p in form.opened[0]["parties"]] == ["Auto Parts Wholesale", "Genuine Spares Co"]


# --------------------------- inventory ---------------------------

@pytest.fixture()
def inventory_screen(qtbot, conn, ids, current_user, settings):
    c = InventoryController(conn, current_user, settings)
    qtbot.addWidget(c.get_widget())
    return c


def test_inventory_lists_and_adds(monkeypatch, conn, ids, inventory_screen, messages):
    assert inventory_screen.base.rowCount() == 4
    assert "4 parts" in inventory_screen.view.lab_summary.text()

    new = InventoryItem(None, "WPR-BLD-01", "Wiper Blade", cost_price=5.0, selling_price=9.0, quantity=12)
    stub(monkeypatch, inventory_ctl, "InventoryForm", new)
    inventory_screen.view.btn_add.click()
    assert messages.last()[:2] == ("info", "Saved")
    assert InventoryRepo(conn).get_by_code("WPR-BLD-01") is not None
    assert inventory_screen.base.rowCount() == 5


def test_inventory_duplicate_code_reported(monkeypatch, inventory_screen, messages):
    dup = InventoryItem(None, "BRK-PAD-01", "Copy", cost_price=1.0, selling_price=2.0)
    stub(monkeypatch, inventory_ctl, "InventoryForm", dup)
    inventory_screen.view.btn_add.click()
    assert messages.last()[:2] == ("error", "Not saved")


def test_inventory_adjust_and_delete(monkeypatch, conn, ids, inventory_screen, messages):
    v = inventory_screen.view
    select_row(v.table, inventory_screen.base, "part_code", "SPK-PLG-01")
    stub(monkeypatch, inventory_ctl, "AdjustStockDialog", delta=6)
    v.btn_adjust.click()
    assert stock(conn, ids["SPK-PLG-01"]) == 10

    SalesRepo(conn).create_order(sales_ctl.request_from_payload(sale_payload(ids)))
    select_row(v.table, inventory_screen.base, "part_code", "OIL-FLT-01")
    v.btn_del.click()
    assert messages.last()[:2] == ("error", "Blocked")

    select_row(v.table, inventory_screen.base, "part_code", "SHK-ABS-01")
    v.btn_del.click()
    assert InventoryRepo(conn).get(ids["SHK-ABS-01"]) is None


def test_inventory_edit_without_selection(inventory_screen, messages):
    inventory_screen.view.table.clearSelection()
    inventory_screen.view.btn_edit.click()
    assert messages.last()[:2] == ("info", "Select")


# --------------------------- customers / suppliers ---------------------------

def test_customer_screen_add_edit_delete(qtbot, monkeypatch, conn, ids, messages):
    c = CustomerController(conn)
    qtbot.addWidget(c.get_widget())
    assert c.base.rowCount() == 2

    stub(monkeypatch, customer_ctl, "CustomerForm", Customer(None, "Bilal Traders", phone="0300-1234567"))
    with qtbot.waitSignal(c.partiesChanged, timeout=1000):
        c.view.btn_add.click()
    assert c._selected().name == "Bilal Traders"

    selected = c._selected()
    stub(monkeypatch, customer_ctl, "CustomerForm", Customer(selected.id, "Bilal Traders", phone="0300-7654321"))
    c.view.btn_edit.click()
    assert CustomersRepo(conn).get(selected.id).phone == "0300-7654321"

    c.view.btn_del.click()
    assert CustomersRepo(conn).get(selected.id) is None
    assert c.base.rowCount() == 2


def test_customer_search_box_filters(qtbot, conn, ids):
    c = CustomerController(conn)
    qtbot.addWidget(c.get_widget())
    c.view.search.setText("corolla")
    assert c.base.rowCount() == 1
    assert c._selected().name == "Ali Khan"


def test_supplier_with_purchases_is_blocked(qtbot, monkeypatch, conn, ids, messages):
    from spareparts_pos.database.repositories.orders_repo import OrderLine, OrderRequest
    from spareparts_pos.database.repositories.purchases_repo import PurchasesRepo

    PurchasesRepo(conn).create_order(OrderRequest(
        items=[OrderLine(ids["OIL-FLT-01"], 1, 30.0)], counterparty_id=ids["Auto Parts Wholesale"],
        tax_rate=0.0, payment_method="credit",
    ))
    c = SupplierController(conn)
    qtbot.addWidget(c.get_widget())
    select_row(c.view.table, c.base, "name", "Auto Parts Wholesale")
    c.view.btn_del.click()
    assert messages.last()[:2] == ("error", "Blocked")

    stub(monkeypatch, supplier_ctl, "SupplierForm", Supplier(None, "Radiator House"))
    c.view.btn_add.click()
    assert c._selected().name == "Radiator House"


def test_customer_form_payload(qtbot):
    f = CustomerForm(None)
    qtbot.addWidget(f)
    assert f.get_payload() is None
    f.inputs["name"].setText("  New Customer ")
    f.inputs["email"].setText("bad-email")
    assert f.get_payload() is None
    f.inputs["email"].setText("new@example.com")
    p = f.get_payload()
    assert isinstance(p, Customer)
    assert p.id is None
    assert p.email == "new@example.com"


# --------------------------- settings ---------------------------

@pytest.fixture()
def settings_screen(qtbot, conn, ids, current_user, store):
    c = SettingsController(conn, current_user, store)
    qtbot.addWidget(c.get_widget())
    return c


def test_settings_save_converts_tax_percent(qtbot, settings_screen, store, messages):
    gen = settings_screen.view.general
    assert gen.tax_rate.value() == pytest.approx(15.0)
    gen.tax_rate.setValue(17.5)
    gen.low_stock.setValue(8)
    settings_screen.view.company.name.setText("Spares R Us")

    with qtbot.waitSignal(settings_screen.settingsChanged, timeout=1000) as sig:
        settings_screen.view.btn_save.click()
    saved = sig.args[0]
    assert saved.tax_rate == pytest.approx(0.175)
    assert saved.low_stock_threshold == 8
    assert store.reload().company.name == "Spares R Us"
    assert messages.last()[:2] == ("info", "Saved")


def test_settings_users_admin_actions(monkeypatch, conn, settings_screen, messages):
    users = UsersRepo(conn)
    stub(monkeypatch, settings_ctl, "UserForm",
         {"username": "till2", "password": "pw", "full_name": "Till Two", "email": None, "role": "cashier"})
    settings_screen.view.users.btn_add.click()
    uid = users.get_user_by_username("till2")["id"]
    assert settings_screen.users_model.rowCount() == 2

    def pick_till2():
        # the user list is rebuilt after every action
        m = settings_screen.users_model
        for r in range(m.rowCount()):
            if m.item(r, 1).text() == "till2":
                settings_screen.view.users.table.selectRow(r)

    pick_till2()
    settings_screen.view.users.btn_toggle.click()
    assert users.get(uid)["is_active"] == 0

    pick_till2()
    monkeypatch.setattr(QInputDialog, "getText", lambda *a, **k: ("new-pw", True))
    settings_screen.view.users.btn_password.click()
    users.update(uid, is_active=True)
    assert users.authenticate("till2", "new-pw") is not None

    pick_till2()
    settings_screen.view.users.btn_del.click()
    assert users.get(uid) is None


def test_settings_cannot_delete_own_account(conn, settings_screen, messages):
    settings_screen.view.users.table.selectRow(0)
    settings_screen.view.users.btn_del.click()
    assert messages.last() == ("error", "Users", "You cannot delete your own account.")
    assert UsersRepo(conn).get_user_by_username("admin") is not None


def test_user_buttons_locked_for_cashier(qtbot, conn, ids, store):
    c = SettingsController(conn, {"id": 99, "username": "till", "role": "cashier"}, store)
    qtbot.addWidget(c.get_widget())
    assert not c.view.users.btn_add.isEnabled()
    assert not c.view.users.lab_locked.isHidden()


# --------------------------- carts ---------------------------

def _pick(form, row, inventory_id, qty):
    cmb = form.tbl.cellWidget(row, form.COL_PART)
    cmb.setCurrentIndex(cmb.findData(inventory_id))
    form.tbl.item(row, form.COL_QTY).setText(str(qty))


def test_sale_cart_totals_and_payload(qtbot, conn, ids):
    f = SaleForm(None, parts=InventoryRepo(conn).list_for_select(),
                 parties=CustomersRepo(conn).list_customers(), tax_rate=0.15)
    qtbot.addWidget(f)
    _pick(f, 0, ids["BRK-PAD-01"], 2)
    f.btn_add_row.click()
    _pick(f, 1, ids["OIL-FLT-01"], 1)
    f.txt_discount.setText("20")
    f.txt_paid.setText("300")

    assert f.lab_sub.text() == "250.00"
    assert f.lab_tax.text() == "34.50"
    assert f.lab_total.text() == "264.50"
    assert f.lab_change.text() == "35.50"

    p = f.get_payload()
    assert p["items"] == [
        {"inventory_id": ids["BRK-PAD-01"], "quantity": 2, "unit_price": 100.0},
        {"inventory_id": ids["OIL-FLT-01"], "quantity": 1, "unit_price": 50.0},
    ]
    assert p["counterparty_id"] is None
    assert (p["discount"], p["tax_rate"], p["amount_paid"]) == (20.0, 0.15, 300.0)


def test_sale_cart_refuses_more_than_stock(qtbot, conn, ids, messages):
    f = SaleForm(None, parts=InventoryRepo(conn).list_for_select(), parties=[], tax_rate=0.0)
    qtbot.addWidget(f)
    _pick(f, 0, ids["SPK-PLG-01"], 5)
    f.txt_paid.setText("100")
    assert f.get_payload() is None
    assert messages.last()[1] == "Not enough stock"


def test_sale_cart_flags_short_tender(qtbot, conn, ids, messages):
    f = SaleForm(None, parts=InventoryRepo(conn).list_for_select(), parties=[], tax_rate=0.0)
    qtbot.addWidget(f)
    _pick(f, 0, ids["OIL-FLT-01"], 1)
    f.txt_paid.setText("10")
    assert f.lab_problem.text()
    assert f.get_payload() is None


def test_purchase_cart_needs_supplier_and_uses_cost(qtbot, conn, ids, messages):
    from spareparts_pos.database.repositories.suppliers_repo import SuppliersRepo

    f = PurchaseForm(None, parts=InventoryRepo(conn).list_for_select(),
                     parties=SuppliersRepo(conn).list_suppliers(), tax_rate=0.0)
    qtbot.addWidget(f)
    _pick(f, 0, ids["SHK-ABS-01"], 5)
    assert f.tbl.item(0, f.COL_PRICE).text() == "120.00"
    assert f.get_payload() is None
    assert messages.last()[1] == "Missing Supplier"

    f.cmb_party.setCurrentIndex(f.cmb_party.findData(ids["Genuine Spares Co"]))
    f.txt_paid.setText("200")
    p = f.get_payload()
    assert p["counterparty_id"] == ids["Genuine Spares Co"]
    assert p["items"][0]["quantity"] == 5
    assert f.lab_balance.text() == "400.00"
