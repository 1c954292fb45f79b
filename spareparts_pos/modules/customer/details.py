from PySide6.QtWidgets import QWidget, QVBoxLayout, QGroupBox, QFormLayout, QLabel

from ...utils.helpers import fmt_money


class CustomerDetails(QWidget):
    """
    Right-hand panel: contact fields of the selected party plus an order
    snapshot (count, total, outstanding, last order date).
    """

    FIELDS = [
        ("Name", "name"),
        ("Phone", "phone"),
        ("Email", "email"),
        ("Address", "address"),
        ("Vehicle", "vehicle_info"),
    ]

    def __init__(self, parent=None, *, title: str = "Customer Details"):
        super().__init__(parent)

        box_basic = QGroupBox(title)
        f_basic = QFormLayout(box_basic)
        self._labels: dict[str, QLabel] = {}
        for caption, attr in self.FIELDS:
            lab = QLabel("-")
            lab.setWordWrap(True)
            self._labels[attr] = lab
            f_basic.addRow(f"{caption}:", lab)

        box_fin = QGroupBox("Orders")
        f_fin = QFormLayout(box_fin)
        self.lab_count = QLabel("-")
        self.lab_total = QLabel("-")
        self.lab_outstanding = QLabel("-")
        self.lab_last = QLabel("-")
        f_fin.addRow("Orders:", self.lab_count)
        f_fin.addRow("Total:", self.lab_total)
        f_fin.addRow("Outstanding:", self.lab_outstanding)
        f_fin.addRow("Last order:", self.lab_last)

        root = QVBoxLayout(self)
        root.addWidget(box_basic)
        root.addWidget(box_fin)
        root.addStretch(1)

    def clear(self):
        for lab in (*self._labels.values(), self.lab_count, self.lab_total, self.lab_outstanding, self.lab_last):
            lab.setText("-")

    def set_data(self, party, snapshot: dict | None = None):
        if party is None:
            self.clear()
            return
        for attr, lab in self._labels.items():
            lab.setText(getattr(party, attr, None) or "-")
        s = snapshot or {}
        self.lab_count.setText(str(s.get("order_count", 0)))
        self.lab_total.setText(fmt_money(s.get("total") or 0.0))
        self.lab_outstanding.setText(fmt_money(s.get("outstanding") or 0.0))
        self.lab_last.setText(s.get("last_order") or "-")

    def outstanding_text(self) -> str:
        return self.lab_outstanding.text()
