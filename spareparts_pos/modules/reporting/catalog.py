# spareparts_pos/modules/reporting/catalog.py
"""
Registry of the reports the Reports screen offers.

Each ReportMeta names the columns to show/export and a `fetch` callable
taking (repo, ReportParams) and returning list[dict]. Columns are
(key, header, kind) with kind one of 'text', 'int', 'money'.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ...database.repositories.reporting_repo import PERIOD_FORMATS, ReportingRepo

Column = Tuple[str, str, str]

GROUP_BY_CHOICES = tuple(PERIOD_FORMATS)


@dataclass(frozen=True)
class ReportParams:
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    group_by: str = "day"
    low_stock_threshold: Optional[int] = None


@dataclass
class ReportMeta:
    key: str
    name: str
    fetch: Callable[[ReportingRepo, ReportParams], List[dict]]
    columns: List[Column]
    description: str = ""
    uses_dates: bool = True
    uses_grouping: bool = False
    totals: List[str] = field(default_factory=list)


_PERIOD = ("period", "Period", "text")
_COUNT = ("order_count", "Orders", "int")

REPORTS: List[ReportMeta] = [
    ReportMeta(
        "sales_summary", "Sales Summary",
        lambda repo, p: repo.sales_summary(p.date_from, p.date_to, p.group_by),
        [_PERIOD, _COUNT, ("subtotal", "Subtotal", "money"), ("discount", "Discount", "money"),
         ("tax", "Tax", "money"), ("revenue", "Revenue", "money"), ("paid", "Paid", "money"),
         ("outstanding", "Outstanding", "money"), ("profit", "Profit", "money")],
        "Sales per day / week / month / year with revenue and gross profit.",
        uses_grouping=True,
        totals=["order_count", "revenue", "paid", "outstanding", "profit"],
    ),
    ReportMeta(
        "purchases_summary", "Purchases Summary",
        lambda repo, p: repo.purchases_summary(p.date_from, p.date_to, p.group_by),
        [_PERIOD, _COUNT, ("total", "Total", "money"), ("paid", "Paid", "money"),
         ("outstanding", "Outstanding", "money")],
        "Purchases per period with amounts still owed to suppliers.",
        uses_grouping=True,
        totals=["order_count", "total", "paid", "outstanding"],
    ),
    ReportMeta(
        "profit_by_item", "Profit by Part",
        lambda repo, p: repo.profit_by_item(p.date_from, p.date_to),
        [("part_code", "Part Code", "text"), ("name", "Part", "text"),
         ("quantity_sold", "Qty Sold", "int"), ("revenue", "Revenue", "money"),
         ("cost", "Cost", "money"), ("profit", "Profit", "money")],
        "Units sold, revenue and profit per part (before order discounts and tax).",
        totals=["quantity_sold", "revenue", "cost", "profit"],
    ),
    ReportMeta(
        "inventory_valuation", "Inventory Valuation",
        lambda repo, p: repo.inventory_valuation(),
        [("part_code", "Part Code", "text"), ("name", "Part", "text"),
         ("category_name", "Category", "text"), ("brand_name", "Brand", "text"),
         ("quantity", "Qty", "int"), ("cost_price", "Cost", "money"),
         ("selling_price", "Price", "money"), ("cost_value", "Cost Value", "money"),
         ("retail_value", "Retail Value", "money")],
        "Stock on hand valued at cost and at selling price.",
        uses_dates=False,
        totals=["quantity", "cost_value", "retail_value"],
    ),
    ReportMeta(
        "low_stock", "Low Stock",
        lambda repo, p: repo.low_stock(p.low_stock_threshold),
        [("part_code", "Part Code", "text"), ("name", "Part", "text"),
         ("supplier_name", "Supplier", "text"), ("quantity", "Qty", "int"),
         ("reorder_level", "Reorder Level", "int"), ("location", "Location", "text")],
        "Parts at or below their reorder level or the low-stock threshold.",
        uses_dates=False,
    ),
    ReportMeta(
        "customer_summary", "Customer Summary",
        lambda repo, p: repo.customer_summary(p.date_from, p.date_to),
        [("name", "Customer", "text"), ("phone", "Phone", "text"),
         ("vehicle_info", "Vehicle", "text"), _COUNT, ("total", "Total", "money"),
         ("paid", "Paid", "money"), ("outstanding", "Outstanding", "money"),
         ("last_order", "Last Sale", "text")],
        "Sales and outstanding balance per customer (walk-in sales excluded).",
        totals=["order_count", "total", "paid", "outstanding"],
    ),
    ReportMeta(
        "supplier_summary", "Supplier Summary",
        lambda repo, p: repo.supplier_summary(p.date_from, p.date_to),
        [("name", "Supplier", "text"), ("contact_person", "Contact", "text"),
         ("phone", "Phone", "text"), _COUNT, ("total", "Total", "money"),
         ("paid", "Paid", "money"), ("outstanding", "Outstanding", "money"),
         ("last_order", "Last Purchase", "text")],
        "Purchases and amount owed per supplier.",
        totals=["order_count", "total", "paid", "outstanding"],
    ),
]


def get_report(key: str) -> ReportMeta:
    for meta in REPORTS:
        if meta.key == key:
            return meta
    raise KeyError(f"Unknown report: {key!r}")


def column_totals(meta: ReportMeta, rows: List[dict]) -> dict:
    """Sum of each total column over `rows`."""
    return {k: sum(float(r.get(k) or 0) for r in rows) for k in meta.totals}
