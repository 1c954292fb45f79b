# tests/test_reporting.py
from __future__ import annotations

import csv
import datetime

import pytest
from PySide6.QtCore import QDate
from PySide6.QtWidgets import QFileDialog

from spareparts_pos.database.repositories.orders_repo import OrderLine, OrderRequest
from spareparts_pos.database.repositories.purchases_repo import PurchasesRepo
from spareparts_pos.database.repositories.reporting_repo import ReportingRepo
from spareparts_pos.database.repositories.sales_repo import SalesRepo
from spareparts_pos.modules.dashboard.controller import DashboardController
from spareparts_pos.modules.reporting.catalog import REPORTS, ReportParams, column_totals, get_report
from spareparts_pos.modules.reporting.controller import ReportingController
from spareparts_pos.modules.reporting.export import export_csv, to_csv_text, to_html_table


@pytest.fixture()
def activity(conn, ids):
    """
    10 Mar: Ali Khan buys 2 brake pads, cash (profit 80)
    11 Mar: 10 oil filters bought from Auto Parts Wholesale, 100 of 300 paid
    12 Mar: walk-in buys 1 oil filter on credit, pays 20 (profit 20)
    """
    sales = SalesRepo(conn)
    cash = sales.create_order(OrderRequest(
        items=[OrderLine(ids["BRK-PAD-01"], 2, 100.0)], tax_rate=0.0, amount_paid=200.0,
        counterparty_id=ids["Ali Khan"], order_date="2025-03-10",
    ))
    PurchasesRepo(conn).create_order(OrderRequest(
        items=[OrderLine(ids["OIL-FLT-01"], 10, 30.0)], tax_rate=0.0, amount_paid=100.0,
        counterparty_id=ids["Auto Parts Wholesale"], order_date="2025-03-11",
    ))
    credit = sales.create_order(OrderRequest(
        items=[OrderLine(ids["OIL-FLT-01"], 1, 50.0)], tax_rate=0.0, payment_method="credit",
        order_date="2025-03-12",
    ))
    sales.record_payment(credit.id, 20.0, "cash")
    return {"cash": cash, "credit": credit}


@pytest.fixture()
def repo(conn):
    return ReportingRepo(conn)


# --------------------------- repository ---------------------------

def test_sales_summary_by_day(repo, activity):
    rows = repo.sales_summary("2025-03-01", "2025-03-31")
    assert [r["period"] for r in rows] == ["2025-03-10", "2025-03-12"]
    first, second = rows
    assert (first["revenue"], first["paid"], first["outstanding"], first["profit"]) == (200.0, 200.0, 0.0, 80.0)
    assert (second["revenue"], second["paid"], second["outstanding"], second["profit"]) == (50.0, 20.0, 30.0, 20.0)


def test_sales_summary_grouping_and_range(repo, activity):
    month = repo.sales_summary(group_by="month")
    assert len(month) == 1
    assert month[0]["period"] == "2025-03"
    assert month[0]["order_count"] == 2
    assert month[0]["revenue"] == 250.0

    assert [r["period"] for r in repo.sales_summary("2025-03-11")] == ["2025-03-12"]
    assert repo.sales_summary("2025-04-01", "2025-04-30") == []
    with pytest.raises(ValueError):
        repo.sales_summary(group_by="hour")


def test_purchases_summary(repo, activity):
    rows = repo.purchases_summary()
    assert len(rows) == 1
    assert (rows[0]["total"], rows[0]["paid"], rows[0]["outstanding"]) == (300.0, 100.0, 200.0)


def test_profit_by_item_orders_by_profit(repo, activity):
    rows = repo.profit_by_item()
    assert [r["part_code"] for r in rows] == ["BRK-PAD-01", "OIL-FLT-01"]
    pads, oil = rows
    assert (pads["quantity_sold"], pads["revenue"], pads["cost"], pads["profit"]) == (2, 200.0, 120.0, 80.0)
    assert (oil["quantity_sold"], oil["revenue"], oil["cost"], oil["profit"]) == (1, 50.0, 30.0, 20.0)
    assert [r["part_code"] for r in repo.profit_by_item("2025-03-11", "2025-03-31")] == ["OIL-FLT-01"]


def test_inventory_valuation_and_totals(repo, activity):
    by_code = {r["part_code"]: r for r in repo.inventory_valuation()}
    assert by_code["BRK-PAD-01"]["quantity"] == 38
    assert by_code["BRK-PAD-01"]["cost_value"] == 2280.0
    assert by_code["OIL-FLT-01"]["quantity"] == 109
    assert by_code["BRK-PAD-01"]["brand_name"] == "Bosch"

    totals = repo.inventory_totals()
    assert totals["item_count"] == 4
    assert totals["units"] == 151
    assert totals["cost_value"] == pytest.approx(5582.0)
    assert totals["retail_value"] == pytest.approx(9310.0)


def test_party_summaries(repo, ids, activity):
    customers = repo.customer_summary()
    assert [c["name"] for c in customers] == ["Ali Khan"]
    assert (customers[0]["total"], customers[0]["outstanding"]) == (200.0, 0.0)
    assert customers[0]["last_order"] == "2025-03-10"

    suppliers = repo.supplier_summary()
    assert [s["name"] for s in suppliers] == ["Auto Parts Wholesale"]
    assert suppliers[0]["outstanding"] == 200.0
    assert repo.supplier_summary("2025-03-12") == []


def test_dashboard_summary(repo, activity):
    s = repo.dashboard_summary("2025-03-12", 5)
    assert s == {
        "today_sales_count": 1,
        "today_sales_total": 50.0,
        "low_stock_count": 2,
        "receivables": 30.0,
        "payables": 200.0,
    }
    assert repo.dashboard_summary("2025-03-13")["today_sales_count"] == 0


# --------------------------- catalog / export ---------------------------

def test_catalog_lookup():
    assert get_report("profit_by_item").name == "Profit by Part"
    assert len({m.key for m in REPORTS}) == len(REPORTS)
    with pytest.raises(KeyError):
        get_report("nope")


def test_catalog_fetch_and_totals(repo, activity):
    meta = get_report("sales_summary")
    rows = meta.fetch(repo, ReportParams(group_by="day"))
    totals = column_totals(meta, rows)
    assert totals["revenue"] == pytest.approx(250.0)
    assert totals["outstanding"] == pytest.approx(30.0)
    assert totals["order_count"] == 2


def test_csv_text_uses_headers_and_formats_money():
    columns = [("part_code", "Part Code", "text"), ("quantity", "Qty", "int"), ("price", "Price", "money")]
    text = to_csv_text([{"part_code": "OIL-FLT-01", "quantity": 3, "price": 50}], columns)
    assert text.splitlines() == ["Part Code,Qty,Price", "OIL-FLT-01,3,50.00"]
    assert to_csv_text([{"a": 1, "b": None}]).splitlines() == ["a,b", "1,"]
    assert to_csv_text([]).splitlines() == [""]


def test_export_csv_writes_file(tmp_path, repo, activity):
    meta = get_report("profit_by_item")
    path = tmp_path / "profit.csv"
    n = export_csv(path, repo.profit_by_item(), meta.columns)
    assert n == 2
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Part Code", "Part", "Qty Sold", "Revenue", "Cost", "Profit"]
    assert rows[1] == ["BRK-PAD-01", "Front Brake Pads", "2", "200.00", "120.00", "80.00"]


def test_html_table_escapes_and_aligns_numbers():
    columns = [("part_name", "Part", "text"), ("quantity", "Qty", "int"), ("price", "Price", "money")]
    out = to_html_table([{"part_name": "Nuts & <Bolts>", "quantity": 4, "price": 2.5}], columns, title="Stock")
    assert out.startswith("<h2>Stock</h2>")
    assert "<td>Nuts &amp; &lt;Bolts&gt;</td>" in out
    assert '<td align="right">4</td><td align="right">2.50</td>' in out
    assert out.count("<th>") == 3


# --------------------------- screens ---------------------------

@pytest.fixture()
def reports(qtbot, conn, current_user, settings, activity):
    c = ReportingController(conn, current_user, settings)
    qtbot.addWidget(c.get_widget())
    c.view.dt_from.setDate(QDate(2025, 3, 1))
    c.view.dt_to.setDate(QDate(2025, 3, 31))
    return c


def test_reports_screen_switches_reports(reports):
    assert reports.current_report().key == "sales_summary"
    assert reports.model.rowCount() == 2
    assert "Revenue: 250.00" in reports.view.lab_totals.text()

    reports.open_report("inventory_valuation")
    assert reports.model.rowCount() == 4
    assert reports.view.dt_from.isHidden()
    with pytest.raises(KeyError):
        reports.open_report("nope")


def test_reports_screen_exports_csv(monkeypatch, tmp_path, reports, messages):
    target = tmp_path / "sales.csv"
    monkeypatch.setattr(QFileDialog, "getSaveFileName", lambda *a, **k: (str(target), "CSV Files (*.csv)"))
    reports.view.btn_csv.click()
    lines = target.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Period,Orders,Subtotal")
    assert len(lines) == 3
    assert messages.last()[:2] == ("info", "Exported")


def test_reports_screen_exports_pdf(monkeypatch, tmp_path, reports, messages):
    target = tmp_path / "sales.pdf"
    monkeypatch.setattr(QFileDialog, "getSaveFileName", lambda *a, **k: (str(target), "PDF Files (*.pdf)"))
    reports.view.btn_pdf.click()
    assert target.exists()
    assert target.read_bytes().startswith(b"%PDF")
    assert messages.last()[:2] == ("info", "Exported")
    assert "2 rows" in messages.last()[2]


def test_reports_export_cancelled(monkeypatch, reports, messages):
    monkeypatch.setattr(QFileDialog, "getSaveFileName", lambda *a, **k: ("", ""))
    reports.view.btn_csv.click()
    assert messages.calls == []


def test_dashboard_figures_and_navigation(qtbot, conn, current_user, settings, activity):
    d = DashboardController(conn, current_user, settings, today=lambda: datetime.date(2025, 3, 12))
    qtbot.addWidget(d.get_widget())
    assert d.view.kpi_text("today_sales") == "USD 50.00"
    assert d.view.kpi_text("low_stock") == "2"
    assert d.view.kpi_text("receivables") == "USD 30.00"
    assert d.view.kpi_text("payables") == "USD 200.00"
    assert d.low_model.rowCount() == 2

    with qtbot.waitSignal(d.navigate_to, timeout=1000) as sig:
        d.view.kpi_drilldown.emit("low_stock")
    assert sig.args == ["inventory"]

    with qtbot.waitSignal(d.open_create_sale, timeout=1000):
        d.view.btn_new_sale.click()
