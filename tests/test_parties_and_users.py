# tests/test_parties_and_users.py
from __future__ import annotations

import pytest

from spareparts_pos.database.repositories.customers_repo import Customer, CustomersRepo
from spareparts_pos.database.repositories.errors import DomainError, NotFoundError
from spareparts_pos.database.repositories.orders_repo import OrderLine, OrderRequest
from spareparts_pos.database.repositories.purchases_repo import PurchasesRepo
from spareparts_pos.database.repositories.sales_repo import SalesRepo
from spareparts_pos.database.repositories.suppliers_repo import Supplier, SuppliersRepo
from spareparts_pos.database.repositories.users_repo import UsersRepo
from spareparts_pos.modules.login.controller import LoginController
from spareparts_pos.modules.login.model import UserSession
from spareparts_pos.utils.auth import hash_password, needs_rehash, verify_and_maybe_upgrade, verify_password


# --------------------------- customers ---------------------------

def test_customer_crud_and_search(conn, ids):
    repo = CustomersRepo(conn)
    cid = repo.create(Customer(None, "  Zara Motors ", phone="0321-5555555", email="", vehicle_info="Civic 2019"))
    c = repo.get(cid)
    assert c.name == "Zara Motors"
    assert c.email is None

    assert [x.name for x in repo.search("civic")] == ["Zara Motors"]
    assert [x.name for x in repo.search("0311")] == ["Ali Khan", "Fleet Services Ltd"]

    c.address = "Canal Road"
    repo.update(c)
    assert repo.get(cid).address == "Canal Road"

    with pytest.raises(DomainError):
        repo.create(Customer(None, "   "))
    with pytest.raises(NotFoundError):
        repo.update(Customer(999, "Ghost"))


def test_deleting_customer_turns_sales_into_walk_in(conn, ids):
    sales = SalesRepo(conn)
    r = sales.create_order(OrderRequest(
        items=[OrderLine(ids["OIL-FLT-01"], 1, 50.0)], tax_rate=0.0, amount_paid=50.0,
        counterparty_id=ids["Ali Khan"],
    ))
    CustomersRepo(conn).delete(ids["Ali Khan"])
    h = sales.get_header(r.id)
    assert h is not None
    assert h["counterparty_id"] is None


def test_party_search_treats_wildcards_literally(conn, ids):
    customers = CustomersRepo(conn)
    customers.create(Customer(None, "Auto_Fix"))
    customers.create(Customer(None, "100% Motors"))
    customers.create(Customer(None, "1000 Motors"))
    assert [c.name for c in customers.search("_")] == ["Auto_Fix"]
    assert [c.name for c in customers.search("100%")] == ["100% Motors"]
    assert [s.name for s in SuppliersRepo(conn).search("_")] == []


# --------------------------- suppliers ---------------------------

def test_supplier_crud(conn, ids):
    repo = SuppliersRepo(conn)
    sid = repo.create(Supplier(None, "Brake World", contact_person="Nadia", phone="042-111"))
    assert repo.get(sid).contact_person == "Nadia"
    assert [s.name for s in repo.search("nadia")] == ["Brake World"]
    assert "Brake World" in [s.name for s in repo.list_suppliers()]
    repo.update(Supplier(sid, "Brake World Ltd", email="info@bw.example"))
    assert repo.get(sid).email == "info@bw.example"
    repo.delete(sid)
    assert repo.get(sid) is None


def test_supplier_with_purchases_cannot_be_deleted(conn, ids):
    PurchasesRepo(conn).create_order(OrderRequest(
        items=[OrderLine(ids["OIL-FLT-01"], 4, 30.0)], counterparty_id=ids["Auto Parts Wholesale"],
        tax_rate=0.0, payment_method="credit",
    ))
    with pytest.raises(DomainError, match="purchases reference it"):
        SuppliersRepo(conn).delete(ids["Auto Parts Wholesale"])


# --------------------------- passwords ---------------------------

def test_hash_and_verify():
    h = hash_password("s3cret")
    assert h.startswith("$2")
    assert verify_password("s3cret", h)
    assert not verify_password("wrong", h)
    assert not verify_password("s3cret", None)
    with pytest.raises(ValueError):
        hash_password("")


def test_plaintext_legacy_value_is_upgraded():
    stored = []
    ok, new_hash = verify_and_maybe_upgrade("letmein", "letmein", on_rehash=stored.append)
    assert ok and new_hash and stored == [new_hash]
    assert verify_password("letmein", new_hash)
    assert needs_rehash("letmein")
    assert not needs_rehash(new_hash)


# --------------------------- users ---------------------------

def test_default_admin_is_seeded(conn):
    admin = UsersRepo(conn).get_user_by_username("admin")
    assert admin["role"] == "admin"
    assert admin["is_active"] == 1
    assert admin["password_hash"] != "admin123"


def test_users_crud_and_authenticate(conn):
    users = UsersRepo(conn)
    uid = users.create("cashier1", "pw-1", full_name="Till One", role="cashier")
    with pytest.raises(DomainError, match="already taken"):
        users.create("cashier1", "other")
    with pytest.raises(DomainError):
        users.create("x", "pw", role="owner")

    u = users.authenticate("cashier1", "pw-1")
    assert u["id"] == uid
    assert "password_hash" not in u
    assert users.get(uid)["last_login"] is not None
    assert users.authenticate("cashier1", "nope") is None
    assert users.authenticate("nobody", "pw-1") is None

    users.update(uid, is_active=False)
    assert users.authenticate("cashier1", "pw-1") is None

    users.set_password(uid, "pw-2")
    users.update(uid, is_active=True, role="manager")
    assert users.authenticate("cashier1", "pw-2")["role"] == "manager"

    users.delete(uid)
    assert users.get(uid) is None


def test_last_admin_cannot_be_deleted(conn):
    users = UsersRepo(conn)
    admin_id = users.get_user_by_username("admin")["id"]
    with pytest.raises(DomainError, match="last admin"):
        users.delete(admin_id)
    second = users.create("boss", "pw", role="admin")
    users.delete(admin_id)
    assert users.get(second) is not None


def test_legacy_plaintext_password_upgraded_on_login(conn):
    conn.execute(
        "INSERT INTO users(username, password_hash, role) VALUES ('old', 'plainpw', 'cashier')"
    )
    conn.commit()
    users = UsersRepo(conn)
    assert users.authenticate("old", "plainpw") is not None
    assert users.get_user_by_username("old")["password_hash"].startswith("$2")
    assert users.authenticate("old", "plainpw") is not None


# --------------------------- login ---------------------------

def test_login_attempt_codes(conn):
    users = UsersRepo(conn)
    uid = users.create("sam", "pw", role="cashier")
    login = LoginController(conn)

    assert login.attempt("", "pw") is None
    assert login.last_error_code == "empty_fields"

    assert login.attempt("sam", "bad") is None
    assert login.last_error_code == "invalid_credentials"
    assert login.attempt("ghost", "pw") is None
    assert login.last_error_code == "invalid_credentials"

    users.update(uid, is_active=False)
    assert login.attempt("sam", "pw") is None
    assert login.last_error_code == "user_inactive"

    session = login.attempt(" admin ", "admin123")
    assert isinstance(session, UserSession)
    assert session.is_admin
    assert session.display_name == "Administrator"
    assert login.last_error_code is None
    assert session.as_dict()["username"] == "admin"
