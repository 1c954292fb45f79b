# database/repositories/reporting_repo.py
from __future__ import annotations

import sqlite3
from typing import Optional

from .filters import DateRange, Where
from .inventory_repo import InventoryRepo

# group_by -> STRFTIME format
PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-W%W",
    "month": "%Y-%m",
    "year": "%Y",
}


def _period_format(group_by: str) -> str:
    try:
        return PERIOD_FORMATS[group_by]
    except KeyError:
        raise ValueError(f"group_by must be one of: {', '.join(PERIOD_FORMATS)}") from None


class ReportingRepo:
    """
    Read-only aggregations for the Reports screen and the dashboard.

    Notes:
      • Dates are ISO 'YYYY-MM-DD'; both ends of a range are inclusive and
        either may be omitted.
      • Profit is (sale unit_price - current cost_price) × quantity per sold
        line, i.e. gross of order-level discount and tax.
      • Every method returns plain dicts so results can go straight to the
        table models or the CSV exporter.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def _all(self, sql: str, params=()) -> list[dict]:
        return [dict(r) for r in self.conn.execute(sql, params).fetchall()]

    # ---- Sales / purchases by period ----

    def sales_summary(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        group_by: str = "day",
    ) -> list[dict]:
        fmt = _period_format(group_by)
        where = Where(DateRange("s.sale_date", date_from, date_to))
        sql = f"""
        SELECT
          STRFTIME('{fmt}', DATE(s.sale_date))                AS period,
          COUNT(*)                                            AS order_count,
          ROUND(COALESCE(SUM(CAST(s.subtotal AS REAL)), 0.0), 2)     AS subtotal,
          ROUND(COALESCE(SUM(CAST(s.discount AS REAL)), 0.0), 2)     AS discount,
          ROUND(COALESCE(SUM(CAST(s.tax AS REAL)), 0.0), 2)          AS tax,
          ROUND(COALESCE(SUM(CAST(s.total_amount AS REAL)), 0.0), 2) AS revenue,
          ROUND(COALESCE(SUM(CAST(s.paid_amount AS REAL)), 0.0), 2)  AS paid,
          ROUND(COALESCE(SUM(CAST(s.balance AS REAL)), 0.0), 2)      AS outstanding,
          ROUND(COALESCE(SUM((
              SELECT SUM((CAST(si.unit_price AS REAL) - CAST(i.cost_price AS REAL)) * si.quantity)
                FROM sale_items si JOIN inventory i ON i.id = si.inventory_id
               WHERE si.sale_id = s.id
          )), 0.0), 2)                                        AS profit
        FROM sales s
        {where.sql()}
        GROUP BY period
        ORDER BY period
        """
        return self._all(sql, where.params())

    def purchases_summary(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        group_by: str = "day",
    ) -> list[dict]:
        fmt = _period_format(group_by)
        where = Where(DateRange("p.purchase_date", date_from, date_to))
        sql = f"""
        SELECT
          STRFTIME('{fmt}', DATE(p.purchase_date))            AS period,
          COUNT(*)                                            AS order_count,
          ROUND(COALESCE(SUM(CAST(p.total_amount AS REAL)), 0.0), 2) AS total,
          ROUND(COALESCE(SUM(CAST(p.paid_amount AS REAL)), 0.0), 2)  AS paid,
          ROUND(COALESCE(SUM(CAST(p.balance AS REAL)), 0.0), 2)      AS outstanding
        FROM purchases p
        {where.sql()}
        GROUP BY period
        ORDER BY period
        """
        return self._all(sql, where.params())

    # ---- Profit by item ----

    def profit_by_item(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> list[dict]:
        where = Where(DateRange("s.sale_date", date_from, date_to))
        sql = f"""
        SELECT
          i.id AS inventory_id, i.part_code, i.name,
          SUM(si.quantity)                                             AS quantity_sold,
          ROUND(SUM(CAST(si.total_price AS REAL)), 2)                  AS revenue,
          ROUND(SUM(CAST(i.cost_price AS REAL) * si.quantity), 2)      AS cost,
          ROUND(SUM((CAST(si.unit_price AS REAL) - CAST(i.cost_price AS REAL)) * si.quantity), 2) AS profit
        FROM sale_items si
        JOIN sales s     ON s.id = si.sale_id
        JOIN inventory i ON i.id = si.inventory_id
        {where.sql()}
        GROUP BY i.id
        ORDER BY profit DESC, i.part_code
        """
        return self._all(sql, where.params())

    # ---- Inventory ----

    def inventory_valuation(self) -> list[dict]:
        sql = """
        SELECT
          i.id, i.part_code, i.name, c.name AS category_name, b.name AS brand_name,
          i.quantity, i.reorder_level,
          CAST(i.cost_price AS REAL)    AS cost_price,
          CAST(i.selling_price AS REAL) AS selling_price,
          ROUND(i.quantity * CAST(i.cost_price AS REAL), 2)    AS cost_value,
          ROUND(i.quantity * CAST(i.selling_price AS REAL), 2) AS retail_value
        FROM inventory i
        LEFT JOIN categories c ON c.id = i.category_id
        LEFT JOIN brands     b ON b.id = i.brand_id
        ORDER BY i.name, i.part_code
        """
        return self._all(sql)

    def inventory_totals(self) -> dict:
        row = self.conn.execute(
            """
            SELECT COUNT(*)                                                         AS item_count,
                   COALESCE(SUM(quantity), 0)                                       AS units,
                   ROUND(COALESCE(SUM(quantity * CAST(cost_price AS REAL)), 0.0), 2)    AS cost_value,
                   ROUND(COALESCE(SUM(quantity * CAST(selling_price AS REAL)), 0.0), 2) AS retail_value
              FROM inventory
            """
        ).fetchone()
        return dict(row)

    def low_stock(self, threshold: int | None = None) -> list[dict]:
        return InventoryRepo(self.conn).low_stock(threshold)

    # ---- Parties ----

    def customer_summary(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> list[dict]:
        """One row per customer with at least one sale in range. Walk-in sales are excluded."""
        where = Where(DateRange("s.sale_date", date_from, date_to))
        sql = f"""
        SELECT
          c.id, c.name, c.phone, c.vehicle_info,
          COUNT(s.id)                                          AS order_count,
          ROUND(SUM(CAST(s.total_amount AS REAL)), 2)          AS total,
          ROUND(SUM(CAST(s.paid_amount AS REAL)), 2)           AS paid,
          ROUND(SUM(CAST(s.balance AS REAL)), 2)               AS outstanding,
          MAX(s.sale_date)                                     AS last_order
        FROM customers c
        JOIN sales s ON s.customer_id = c.id
        {where.sql()}
        GROUP BY c.id
        ORDER BY total DESC, c.name
        """
        return self._all(sql, where.params())

    def supplier_summary(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> list[dict]:
        where = Where(DateRange("p.purchase_date", date_from, date_to))
        sql = f"""
        SELECT
          su.id, su.name, su.contact_person, su.phone,
          COUNT(p.id)                                          AS order_count,
          ROUND(SUM(CAST(p.total_amount AS REAL)), 2)          AS total,
          ROUND(SUM(CAST(p.paid_amount AS REAL)), 2)           AS paid,
          ROUND(SUM(CAST(p.balance AS REAL)), 2)               AS outstanding,
          MAX(p.purchase_date)                                 AS last_order
        FROM suppliers su
        JOIN purchases p ON p.supplier_id = su.id
        {where.sql()}
        GROUP BY su.id
        ORDER BY total DESC, su.name
        """
        return self._all(sql, where.params())

    # ---- Dashboard ----

    def dashboard_summary(self, today: str, low_stock_threshold: int | None = None) -> dict:
        sales = self.conn.execute(
            """
            SELECT COUNT(*) AS n, ROUND(COALESCE(SUM(CAST(total_amount AS REAL)), 0.0), 2) AS total
              FROM sales WHERE DATE(sale_date) = DATE(?)
            """,
            (today,),
        ).fetchone()
        receivables = self.conn.execute(
            "SELECT ROUND(COALESCE(SUM(CAST(balance AS REAL)), 0.0), 2) AS v FROM sales WHERE CAST(balance AS REAL) > 0"
        ).fetchone()["v"]
        payables = self.conn.execute(
            "SELECT ROUND(COALESCE(SUM(CAST(balance AS REAL)), 0.0), 2) AS v FROM purchases WHERE CAST(balance AS REAL) > 0"
        ).fetchone()["v"]
        return {
            "today_sales_count": int(sales["n"]),
            "today_sales_total": float(sales["total"]),
            "low_stock_count": len(self.low_stock(low_stock_threshold)),
            "receivables": float(receivables),
            "payables": float(payables),
        }
