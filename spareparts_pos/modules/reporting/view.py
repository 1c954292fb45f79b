# spareparts_pos/modules/reporting/view.py
from __future__ import annotations

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QDateEdit, QComboBox, QPushButton,
)

from ...widgets.table_view import TableView


class ReportingView(QWidget):
    """Report picker + date range / grouping on top, results table below."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(6, 6, 6, 6)
        root.setSpacing(6)

        bar = QHBoxLayout()
        self.cmb_report = QComboBox()
        self.cmb_report.setMinimumWidth(200)
        bar.addWidget(QLabel("Report:"))
        bar.addWidget(self.cmb_report)

        today = QDate.currentDate()
        self.dt_from = QDateEdit(QDate(today.year(), today.month(), 1))
        self.dt_to = QDateEdit(today)
        for d in (self.dt_from, self.dt_to):
            d.setCalendarPopup(True)
            d.setDisplayFormat("yyyy-MM-dd")
        self.lab_from = QLabel("From:")
        self.lab_to = QLabel("To:")
        bar.addWidget(self.lab_from)
        bar.addWidget(self.dt_from)
        bar.addWidget(self.lab_to)
        bar.addWidget(self.dt_to)

        self.lab_group = QLabel("Group by:")
        self.cmb_group = QComboBox()
        bar.addWidget(self.lab_group)
        bar.addWidget(self.cmb_group)

        bar.addStretch(1)
        self.btn_refresh = QPushButton("Refresh")
        self.btn_csv = QPushButton("Export CSV…")
        self.btn_pdf = QPushButton("Export PDF…")
        bar.addWidget(self.btn_refresh)
        bar.addWidget(self.btn_csv)
        bar.addWidget(self.btn_pdf)
        root.addLayout(bar)

        self.lab_description = QLabel()
        self.lab_description.setWordWrap(True)
        self.lab_description.setStyleSheet("color: #555;")
        root.addWidget(self.lab_description)

        self.table = TableView()
        root.addWidget(self.table, 1)

        self.lab_totals = QLabel()
        root.addWidget(self.lab_totals)

    def set_date_controls_visible(self, dates: bool, grouping: bool) -> None:
        for w in (self.lab_from, self.dt_from, self.lab_to, self.dt_to):
            w.setVisible(dates)
        self.lab_group.setVisible(grouping)
        self.cmb_group.setVisible(grouping)

    def date_range(self) -> tuple[str, str]:
        return self.dt_from.date().toString("yyyy-MM-dd"), self.dt_to.date().toString("yyyy-MM-dd")
