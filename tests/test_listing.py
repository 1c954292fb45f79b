# tests/test_listing.py
from __future__ import annotations

import datetime

import pytest

from spareparts_pos.database.repositories.filters import (
    DateRange,
    Eq,
    In,
    PageResult,
    Raw,
    Search,
    Where,
    check_page,
    like_pattern,
)
from spareparts_pos.database.repositories.inventory_repo import InventoryFilters, InventoryRepo
from spareparts_pos.database.repositories.orders_repo import OrderFilters, OrderLine, OrderRequest
from spareparts_pos.database.repositories.sales_repo import SalesRepo


# --------------------------- predicate builder ---------------------------

def test_where_drops_empty_predicates():
    w = Where(Eq("a", None), Eq("b", ""), In("c", []), Search(("d",), "  "), DateRange("e"))
    assert w.sql() == ""
    assert w.params() == []


def test_where_renders_parameterized_conjunction():
    w = Where(
        DateRange("s.sale_date", "2025-01-01", "2025-01-31"),
        Eq("s.customer_id", 3),
        In("s.payment_status", ("pending", "partial")),
        Search(("s.invoice_number", "c.name"), " ali "),
        Raw("s.balance > ?", (0,)),
    )
    assert w.sql() == (
        " WHERE DATE(s.sale_date) BETWEEN DATE(?) AND DATE(?)"
        " AND s.customer_id = ?"
        " AND s.payment_status IN (?, ?)"
        " AND (s.invoice_number LIKE ? ESCAPE '\\' OR c.name LIKE ? ESCAPE '\\')"
        " AND s.balance > ?"
    )
    assert w.params() == ["2025-01-01", "2025-01-31", 3, "pending", "partial", "%ali%", "%ali%", 0]


def test_like_pattern_escapes_wildcards():
    assert like_pattern(" 50% ") == "%50\\%%"
    assert like_pattern("a_b") == "%a\\_b%"
    assert like_pattern("c:\\x") == "%c:\\\\x%"


def test_open_ended_date_ranges():
    assert Where(DateRange("d", "2025-01-01")).sql() == " WHERE DATE(d) >= DATE(?)"
    assert Where(DateRange("d", None, "2025-01-31")).sql() == " WHERE DATE(d) <= DATE(?)"


def test_raw_inactive_when_flag_false():
    assert Where(Raw("x = 0", when=False)).sql() == ""


@pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0), (1, -5)])
def test_check_page_rejects_bad_input(page, limit):
    with pytest.raises(ValueError):
        check_page(page, limit)


def test_page_result_pages():
    assert PageResult(total=0, page=1, limit=20, data=[]).pages == 1
    assert PageResult(total=41, page=1, limit=20, data=[]).pages == 3


# --------------------------- orders ---------------------------

@pytest.fixture()
def three_days_of_sales(conn, ids):
    days = [datetime.date(2025, 3, d) for d in (10, 11, 12)]
    made = []
    for i, day in enumerate(days):
        repo = SalesRepo(conn, clock=lambda day=day: day)
        made.append(repo.create_order(OrderRequest(
            items=[OrderLine(ids["OIL-FLT-01"], 1, 50.0)],
            tax_rate=0.0,
            payment_method="credit" if i != 1 else "cash",
            amount_paid=50.0,
            counterparty_id=ids["Ali Khan"] if i == 0 else None,
        )))
    return made


def test_list_orders_newest_first_with_totals(conn, three_days_of_sales):
    page = SalesRepo(conn).list_orders()
    assert page.total == 3
    assert [r["order_date"] for r in page.data] == ["2025-03-12", "2025-03-11", "2025-03-10"]
    assert page.data[0]["item_count"] == 1


def test_list_orders_filters(conn, ids, three_days_of_sales):
    repo = SalesRepo(conn)
    assert repo.list_orders(OrderFilters(date_from="2025-03-11")).total == 2
    assert repo.list_orders(OrderFilters(date_from="2025-03-11", date_to="2025-03-11")).total == 1
    assert repo.list_orders(OrderFilters(payment_status="paid")).total == 1
    assert repo.list_orders(OrderFilters(payment_method="credit")).total == 2
    assert repo.list_orders(OrderFilters(counterparty_id=ids["Ali Khan"])).total == 1
    assert repo.list_orders(OrderFilters(search="ali")).total == 1
    number = three_days_of_sales[2].number
    found = repo.list_orders(OrderFilters(search=number))
    assert [r["invoice_number"] for r in found.data] == [number]


def test_list_orders_pagination(conn, three_days_of_sales):
    repo = SalesRepo(conn)
    p1 = repo.list_orders(page=1, limit=2)
    p2 = repo.list_orders(page=2, limit=2)
    assert (p1.total, p1.pages, len(p1.data)) == (3, 2, 2)
    assert len(p2.data) == 1
    assert {r["id"] for r in p1.data}.isdisjoint({r["id"] for r in p2.data})


def test_list_orders_rejects_bad_paging_and_status(conn):
    repo = SalesRepo(conn)
    with pytest.raises(ValueError):
        repo.list_orders(page=0)
    with pytest.raises(ValueError):
        repo.list_orders(limit=0)
    with pytest.raises(ValueError):
        repo.list_orders(OrderFilters(payment_status="overdue"))


# --------------------------- inventory ---------------------------

def test_list_inventory_filters(conn, ids):
    repo = InventoryRepo(conn)
    assert repo.list_inventory().total == 4

    low = repo.list_inventory(InventoryFilters(stock_status="low"))
    assert [r["part_code"] for r in low.data] == ["SPK-PLG-01"]

    out = repo.list_inventory(InventoryFilters(stock_status="out"))
    assert [r["part_code"] for r in out.data] == ["SHK-ABS-01"]

    bosch = repo.list_inventory(InventoryFilters(brand_id=ids["Bosch"]))
    assert [r["part_code"] for r in bosch.data] == ["BRK-PAD-01"]
    assert bosch.data[0]["brand_name"] == "Bosch"
    assert bosch.data[0]["supplier_name"] == "Auto Parts Wholesale"

    by_supplier = repo.list_inventory(InventoryFilters(supplier_id=ids["Genuine Spares Co"]))
    assert by_supplier.total == 2

    assert repo.list_inventory(InventoryFilters(search="filter")).total == 1
    # wildcards in the search box are plain characters
    assert repo.list_inventory(InventoryFilters(search="_")).total == 0
    assert repo.list_inventory(InventoryFilters(search="%")).total == 0
    assert repo.list_inventory(InventoryFilters(search="FLT-")).total == 1


def test_list_inventory_category_and_paging(conn, ids):
    repo = InventoryRepo(conn)
    brakes = conn.execute("SELECT id FROM categories WHERE name='Brakes'").fetchone()["id"]
    assert repo.list_inventory(InventoryFilters(category_id=brakes)).total == 1
    page = repo.list_inventory(page=2, limit=3)
    assert (page.total, page.pages, len(page.data)) == (4, 2, 1)
    with pytest.raises(ValueError):
        repo.list_inventory(InventoryFilters(stock_status="plenty"))
