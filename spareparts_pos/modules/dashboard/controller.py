# spareparts_pos/modules/dashboard/controller.py
from __future__ import annotations

import sqlite3
from datetime import date
from typing import Callable, Optional

from PySide6.QtCore import Signal, Slot
from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from ..reporting.catalog import get_report
from ..reporting.model import ReportTableModel
from .view import DashboardView
from ...database.repositories.reporting_repo import ReportingRepo
from ...settings import AppSettings
from ...utils.helpers import fmt_money


class DashboardController(BaseModule):
    """
    Today's figures at a glance: sales today, low-stock count, receivables
    and payables, plus the list of parts to reorder.

    Signals for the main window:
      - open_create_sale(): jump to the sales screen and open a new sale
      - navigate_to(target): 'inventory', 'sales', 'purchases' or 'reports'
    """

    TITLE = "Dashboard"

    open_create_sale = Signal()
    navigate_to = Signal(str)

    _KPI_TARGETS = {
        "today_sales": "sales",
        "low_stock": "inventory",
        "receivables": "sales",
        "payables": "purchases",
    }

    def __init__(
        self,
        conn: sqlite3.Connection,
        current_user: dict | None = None,
        settings: Optional[AppSettings] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.settings = settings or AppSettings()
        self._today = today
        self.repo = ReportingRepo(conn)

        self.view = DashboardView()
        self._low_meta = get_report("low_stock")
        self.low_model = ReportTableModel(self._low_meta.columns)
        self.view.tbl_low_stock.setModel(self.low_model)

        self.view.kpi_drilldown.connect(self._on_kpi_clicked)
        self.view.create_sale_requested.connect(self.open_create_sale.emit)
        self.view.refresh_requested.connect(self.refresh)
        self.refresh()

    def get_widget(self) -> QWidget:
        return self.view

    def set_settings(self, settings: AppSettings) -> None:
        self.settings = settings
        self.refresh()

    @Slot()
    def refresh(self) -> None:
        threshold = self.settings.low_stock_threshold
        s = self.repo.dashboard_summary(self._today().isoformat(), threshold)
        cur = self.settings.currency
        self.view.set_kpi_value(
            "today_sales",
            fmt_money(s["today_sales_total"], currency=cur),
            f"{s['today_sales_count']} sale(s) today",
        )
        self.view.set_kpi_value("low_stock", str(s["low_stock_count"]))
        self.view.set_kpi_value("receivables", fmt_money(s["receivables"], currency=cur))
        self.view.set_kpi_value("payables", fmt_money(s["payables"], currency=cur))

        self.low_model.set_report(self._low_meta.columns, self.repo.low_stock(threshold))
        self.view.tbl_low_stock.resizeColumnsToContents()

    @Slot(str)
    def _on_kpi_clicked(self, key: str) -> None:
        target = self._KPI_TARGETS.get(key)
        if target:
            self.navigate_to.emit(target)
