from __future__ import annotations

from typing import Dict

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QGridLayout, QFrame, QGroupBox,
)

from ...widgets.table_view import TableView


class KPICard(QFrame):
    """A figure tile; clicking it asks the dashboard to open the matching screen."""

    clicked = Signal()

    def __init__(self, title: str, caption: str, accent: str = "#2563eb") -> None:
        super().__init__()
        self.setObjectName("kpi")
        self.setStyleSheet(
            f"QFrame#kpi {{ border: 1px solid #dcdfe4; border-left: 4px solid {accent};"
            " border-radius: 6px; background: palette(base); }"
            " QLabel#kpi_value { font-size: 20pt; font-weight: 700; }"
            " QLabel#kpi_caption { color: #6b7280; }"
        )
        self.setCursor(Qt.PointingHandCursor)
        self.setToolTip(f"Open {title.lower()}")

        col = QVBoxLayout(self)
        col.addWidget(QLabel(f"<b>{title}</b>"))
        self.value = QLabel("-")
        self.value.setObjectName("kpi_value")
        col.addWidget(self.value)
        self.caption = QLabel(caption)
        self.caption.setObjectName("kpi_caption")
        col.addWidget(self.caption)

    def mouseReleaseEvent(self, e) -> None:  # type: ignore[override]
        if e.button() == Qt.LeftButton and self.rect().contains(e.position().toPoint()):
            self.clicked.emit()
        super().mouseReleaseEvent(e)


class DashboardView(QWidget):
    """
    Figures on top, parts that need reordering underneath.

    Signals:
        kpi_drilldown(key)      one of the KPI keys below
        create_sale_requested()
        refresh_requested()
    """

    KPIS = (
        ("today_sales", "Today's Sales", "sales recorded today", "#16a34a"),
        ("low_stock", "Low Stock", "parts at or below reorder level", "#dc2626"),
        ("receivables", "Receivables", "owed by customers", "#d97706"),
        ("payables", "Payables", "owed to suppliers", "#7c3aed"),
    )

    kpi_drilldown = Signal(str)
    create_sale_requested = Signal()
    refresh_requested = Signal()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._cards: Dict[str, KPICard] = {}

        lay = QVBoxLayout(self)

        actions = QHBoxLayout()
        self.btn_new_sale = QPushButton("New Sale")
        self.btn_new_sale.setDefault(True)
        self.btn_refresh = QPushButton("Refresh")
        actions.addWidget(self.btn_new_sale)
        actions.addWidget(self.btn_refresh)
        actions.addStretch(1)
        lay.addLayout(actions)

        tiles = QGridLayout()
        for col, (key, title, caption, accent) in enumerate(self.KPIS):
            card = KPICard(title, caption, accent)
            card.clicked.connect(lambda k=key: self.kpi_drilldown.emit(k))
            tiles.addWidget(card, 0, col)
            self._cards[key] = card
        lay.addLayout(tiles)

        reorder = QGroupBox("Parts to reorder")
        self.tbl_low_stock = TableView()
        QVBoxLayout(reorder).addWidget(self.tbl_low_stock)
        lay.addWidget(reorder, 1)

        self.btn_new_sale.clicked.connect(self.create_sale_requested.emit)
        self.btn_refresh.clicked.connect(self.refresh_requested.emit)

    def set_kpi_value(self, key: str, value: str, caption: str | None = None) -> None:
        card = self._cards[key]
        card.value.setText(value)
        if caption is not None:
            card.caption.setText(caption)

    def kpi_text(self, key: str) -> str:
        return self._cards[key].value.text()
