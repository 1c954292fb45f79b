from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog, QFormLayout, QLineEdit, QDialogButtonBox, QVBoxLayout, QHBoxLayout,
    QComboBox, QLabel, QSpinBox, QPlainTextEdit,
)

from ...database.repositories.inventory_repo import InventoryItem
from ...utils.validators import non_empty, try_parse_float, try_parse_int


class InventoryForm(QDialog):
    """
    Add / edit one spare part. On edit the quantity field is read-only:
    stock only moves through orders and "Adjust Stock".
    """

    def __init__(self, parent=None, *, categories=(), brands=(), suppliers=(), initial: InventoryItem | None = None):
        super().__init__(parent)
        self.setWindowTitle("Edit Part" if initial else "Add Part")
        self.setModal(True)
        self.initial = initial
        self._payload: InventoryItem | None = None

        self.part_code = QLineEdit()
        self.name = QLineEdit()
        self.cmb_category = self._combo(categories, "— none —")
        self.cmb_brand = self._combo(brands, "— none —")
        self.cmb_supplier = self._combo(suppliers, "— none —")
        self.cost = QLineEdit()
        self.cost.setPlaceholderText("0.00")
        self.price = QLineEdit()
        self.price.setPlaceholderText("0.00")
        self.qty = QLineEdit()
        self.qty.setPlaceholderText("0")
        self.reorder = QLineEdit()
        self.reorder.setPlaceholderText("0")
        self.location = QLineEdit()
        self.barcode = QLineEdit()
        self.desc = QPlainTextEdit()
        self.desc.setFixedHeight(60)

        self.lab_error = QLabel()
        self.lab_error.setStyleSheet("color: red;")
        self.lab_error.setWordWrap(True)

        form = QFormLayout()
        form.addRow("Part Code*", self.part_code)
        form.addRow("Name*", self.name)
        form.addRow("Category", self.cmb_category)
        form.addRow("Brand", self.cmb_brand)
        form.addRow("Supplier", self.cmb_supplier)
        prices = QHBoxLayout()
        prices.addWidget(QLabel("Cost"))
        prices.addWidget(self.cost, 1)
        prices.addWidget(QLabel("Selling"))
        prices.addWidget(self.price, 1)
        form.addRow("Prices*", prices)
        form.addRow("Quantity", self.qty)
        form.addRow("Reorder Level", self.reorder)
        form.addRow("Location", self.location)
        form.addRow("Barcode", self.barcode)
        form.addRow("Description", self.desc)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(self.lab_error)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        root.addWidget(self.buttons)

        if initial:
            self._load(initial)

    @staticmethod
    def _combo(rows, none_label: str) -> QComboBox:
        cmb = QComboBox()
        cmb.addItem(none_label, None)
        for r in rows:
            if isinstance(r, dict):
                cmb.addItem(r["name"], r["id"])
            else:
                cmb.addItem(r.name, r.id)
        return cmb

    @staticmethod
    def _select(cmb: QComboBox, value):
        i = cmb.findData(value) if value is not None else 0
        cmb.setCurrentIndex(i if i >= 0 else 0)

    def _load(self, it: InventoryItem):
        self.part_code.setText(it.part_code)
        self.name.setText(it.name)
        self._select(self.cmb_category, it.category_id)
        self._select(self.cmb_brand, it.brand_id)
        self._select(self.cmb_supplier, it.supplier_id)
        self.cost.setText(f"{float(it.cost_price):.2f}")
        self.price.setText(f"{float(it.selling_price):.2f}")
        self.qty.setText(str(it.quantity))
        self.qty.setReadOnly(True)
        self.qty.setToolTip("Use Adjust Stock to change the quantity.")
        self.reorder.setText(str(it.reorder_level))
        self.location.setText(it.location or "")
        self.barcode.setText(it.barcode or "")
        self.desc.setPlainText(it.description or "")

    def _fail(self, msg: str, widget=None) -> None:
        self.lab_error.setText(msg)
        if widget is not None:
            widget.setFocus()
        return None

    def get_payload(self) -> InventoryItem | None:
        self.lab_error.clear()
        if not non_empty(self.part_code.text()):
            return self._fail("Part code is required.", self.part_code)
        if not non_empty(self.name.text()):
            return self._fail("Name is required.", self.name)

        ok_cost, cost = try_parse_float(self.cost.text() or "0")
        if not ok_cost or cost < 0:
            return self._fail("Cost price must be a number ≥ 0.", self.cost)
        ok_price, price = try_parse_float(self.price.text() or "0")
        if not ok_price or price < 0:
            return self._fail("Selling price must be a number ≥ 0.", self.price)
        ok_qty, qty = try_parse_int(self.qty.text() or "0")
        if not ok_qty or qty < 0:
            return self._fail("Quantity must be a whole number ≥ 0.", self.qty)
        ok_re, reorder = try_parse_int(self.reorder.text() or "0")
        if not ok_re or reorder < 0:
            return self._fail("Reorder level must be a whole number ≥ 0.", self.reorder)

        def opt(text: str) -> str | None:
            return text.strip() or None

        return InventoryItem(
            id=self.initial.id if self.initial else None,
            part_code=self.part_code.text().strip(),
            name=self.name.text().strip(),
            category_id=self.cmb_category.currentData(),
            brand_id=self.cmb_brand.currentData(),
            supplier_id=self.cmb_supplier.currentData(),
            cost_price=float(cost),
            selling_price=float(price),
            quantity=int(qty),
            reorder_level=int(reorder),
            location=opt(self.location.text()),
            description=opt(self.desc.toPlainText()),
            barcode=opt(self.barcode.text()),
            image_path=self.initial.image_path if self.initial else None,
        )

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self) -> InventoryItem | None:
        return self._payload


class AdjustStockDialog(QDialog):
    """Signed manual correction; the result may not go below zero."""

    def __init__(self, parent=None, *, part_label: str, on_hand: int):
        super().__init__(parent)
        self.setWindowTitle("Adjust Stock")
        self.on_hand = int(on_hand)
        self.spin = QSpinBox()
        self.spin.setRange(-self.on_hand, 1_000_000)
        self.spin.setValue(0)
        self.lab_after = QLabel(str(self.on_hand))

        form = QFormLayout(self)
        form.addRow("Part:", QLabel(part_label))
        form.addRow("On hand:", QLabel(str(self.on_hand)))
        form.addRow("Change (+/−):", self.spin)
        form.addRow("After:", self.lab_after)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        form.addRow(self.buttons)

        self.spin.valueChanged.connect(lambda v: self.lab_after.setText(str(self.on_hand + v)))

    def accept(self):
        if self.spin.value() == 0:
            return
        super().accept()

    def delta(self) -> int:
        return int(self.spin.value())
