from PySide6.QtCore import Signal
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QTableView, QWidget


class TableView(QTableView):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSortingEnabled(True)
        self.setAlternatingRowColors(True)
        self.setSelectionBehavior(QTableView.SelectRows)
        self.setSelectionMode(QTableView.SingleSelection)
        self.horizontalHeader().setStretchLastSection(True)


class Pager(QWidget):
    """Prev / next strip under a paginated table. Emits the requested page number."""

    pageRequested = Signal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._page = 1
        self._pages = 1
        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        self.btn_prev = QPushButton("‹ Prev")
        self.btn_next = QPushButton("Next ›")
        self.lab = QLabel("Page 1 of 1")
        lay.addStretch(1)
        lay.addWidget(self.btn_prev)
        lay.addWidget(self.lab)
        lay.addWidget(self.btn_next)
        self.btn_prev.clicked.connect(lambda: self.pageRequested.emit(self._page - 1))
        self.btn_next.clicked.connect(lambda: self.pageRequested.emit(self._page + 1))
        self._sync()

    def set_page(self, page: int, pages: int, total: int | None = None):
        self._page, self._pages = page, max(1, pages)
        self._sync(total)

    def page(self) -> int:
        return self._page

    def _sync(self, total: int | None = None):
        text = f"Page {self._page} of {self._pages}"
        if total is not None:
            text += f"  ({total} rows)"
        self.lab.setText(text)
        self.btn_prev.setEnabled(self._page > 1)
        self.btn_next.setEnabled(self._page < self._pages)
