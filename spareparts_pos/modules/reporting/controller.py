# spareparts_pos/modules/reporting/controller.py
from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QFileDialog, QWidget

from ..base_module import BaseModule
from .catalog import GROUP_BY_CHOICES, REPORTS, ReportMeta, ReportParams, column_totals, get_report
from .export import export_csv, export_pdf
from .model import ReportTableModel
from .view import ReportingView
from ...database.repositories.reporting_repo import ReportingRepo
from ...settings import AppSettings
from ...utils.helpers import fmt_money
from ...utils.ui_helpers import error, info

_log = logging.getLogger(__name__)


class ReportingController(BaseModule):
    """
    Reports screen: pick a report from the catalog, set the period (and
    grouping for the summaries), view the rows and export them to CSV.
    """

    TITLE = "Reports"

    def __init__(
        self,
        conn: sqlite3.Connection,
        current_user: Optional[dict] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.settings = settings or AppSettings()
        self.repo = ReportingRepo(conn)

        self.view = ReportingView()
        self.model = ReportTableModel()
        self.view.table.setModel(self.model)

        for meta in REPORTS:
            self.view.cmb_report.addItem(meta.name, meta.key)
        for g in GROUP_BY_CHOICES:
            self.view.cmb_group.addItem(g.title(), g)

        self.view.cmb_report.currentIndexChanged.connect(self._on_report_changed)
        self.view.cmb_group.currentIndexChanged.connect(lambda _i: self.refresh())
        self.view.dt_from.dateChanged.connect(lambda *_: self.refresh())
        self.view.dt_to.dateChanged.connect(lambda *_: self.refresh())
        self.view.btn_refresh.clicked.connect(self.refresh)
        self.view.btn_csv.clicked.connect(self._on_export_csv)
        self.view.btn_pdf.clicked.connect(self._on_export_pdf)

        self._on_report_changed(self.view.cmb_report.currentIndex())

    def get_widget(self) -> QWidget:
        return self.view

    def set_settings(self, settings: AppSettings) -> None:
        self.settings = settings
        self.refresh()

    # ---- Public helpers ----

    def current_report(self) -> ReportMeta:
        return get_report(self.view.cmb_report.currentData())

    def open_report(self, key: str) -> None:
        i = self.view.cmb_report.findData(key)
        if i < 0:
            raise KeyError(f"Unknown report: {key!r}")
        self.view.cmb_report.setCurrentIndex(i)

    def params(self) -> ReportParams:
        df, dt = self.view.date_range()
        return ReportParams(
            date_from=df,
            date_to=dt,
            group_by=self.view.cmb_group.currentData() or "day",
            low_stock_threshold=self.settings.low_stock_threshold,
        )

    @Slot()
    def refresh(self) -> None:
        meta = self.current_report()
        rows = meta.fetch(self.repo, self.params())
        self.model.set_report(meta.columns, rows)
        self.view.table.resizeColumnsToContents()
        self.view.lab_totals.setText(self._totals_text(meta, rows))

    def export(self, path: str) -> int:
        return export_csv(path, self.model.rows(), self.model.columns())

    def export_report_pdf(self, path: str) -> int:
        meta = self.current_report()
        title = meta.name
        if meta.uses_dates:
            date_from, date_to = self.view.date_range()
            title = f"{meta.name} ({date_from} to {date_to})"
        return export_pdf(
            path, self.model.rows(), self.model.columns(),
            title=title, footer=self.view.lab_totals.text(),
        )

    # ---- Internals ----

    @Slot(int)
    def _on_report_changed(self, _index: int) -> None:
        meta = self.current_report()
        self.view.set_date_controls_visible(meta.uses_dates, meta.uses_grouping)
        self.view.lab_description.setText(meta.description)
        self.refresh()

    def _totals_text(self, meta: ReportMeta, rows: List[dict]) -> str:
        parts = [f"{len(rows)} rows"]
        kinds = {key: kind for key, _h, kind in meta.columns}
        headers = {key: h for key, h, _k in meta.columns}
        for key, value in column_totals(meta, rows).items():
            shown = fmt_money(value) if kinds.get(key) == "money" else f"{int(value)}"
            parts.append(f"{headers.get(key, key)}: {shown}")
        return "  ·  ".join(parts)

    def _on_export_csv(self) -> None:
        meta = self.current_report()
        fn, _ = QFileDialog.getSaveFileName(
            self.view, f"Export {meta.name} to CSV", f"{meta.key}.csv", "CSV Files (*.csv)"
        )
        if not fn:
            return
        try:
            n = self.export(fn)
        except OSError as e:
            _log.warning("CSV export to %s failed: %s", fn, e)
            error(self.view, "Export failed", str(e))
            return
        info(self.view, "Exported", f"{n} rows written to\n{fn}")

    def _on_export_pdf(self) -> None:
        meta = self.current_report()
        fn, _ = QFileDialog.getSaveFileName(
            self.view, f"Export {meta.name} to PDF", f"{meta.key}.pdf", "PDF Files (*.pdf)"
        )
        if not fn:
            return
        try:
            n = self.export_report_pdf(fn)
        except OSError as e:
            _log.warning("PDF export to %s failed: %s", fn, e)
            error(self.view, "Export failed", str(e))
            return
        info(self.view, "Exported", f"{n} rows written to\n{fn}")
