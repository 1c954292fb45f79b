from PySide6.QtWidgets import (
    QDialog, QFormLayout, QDialogButtonBox, QVBoxLayout, QHBoxLayout, QComboBox,
    QDateEdit, QLineEdit, QLabel, QGroupBox, QTableWidget, QTableWidgetItem,
    QPushButton, QAbstractItemView, QHeaderView,
)
from PySide6.QtGui import QColor
from PySide6.QtCore import Qt, QDate

from ...constants import DISCOUNT_TYPES, PAYMENT_METHODS
from ...database.repositories.errors import DomainError, OverpaymentError
from ...utils.helpers import fmt_money, today_str
from ...utils.ui_helpers import info
from ...utils.validators import try_parse_float, try_parse_int
from ..payments.payment_utilities.calculations import (
    apply_payment,
    compute_totals,
    derive_payment_status,
    resolve_sale_payment,
)
from ..payments.payment_utilities.status import label as status_label


class SaleForm(QDialog):
    """
    Cart dialog for a new or edited sale.

    The totals panel runs the same arithmetic the order engine runs
    (`compute_totals` + payment resolution), so what the cashier sees is
    what gets stored. The form only validates input and builds a payload;
    the controller hands it to the repository.

    Payload keys:
      counterparty_id, order_date, items [{inventory_id, quantity, unit_price}],
      discount, discount_type, tax_rate, payment_method, amount_paid, notes
    """

    COLS = ["#", "Part", "In Stock", "Qty", "Unit Price", "Line Total", ""]
    COL_NUM, COL_PART, COL_STOCK, COL_QTY, COL_PRICE, COL_TOTAL, COL_DEL = range(7)

    DOC_LABEL = "Sale"
    PARTY_LABEL = "Customer"
    PARTY_REQUIRED = False
    PRICE_KEY = "selling_price"
    CHECK_STOCK = True
    TENDER_LABEL = "Amount tendered"

    def __init__(
        self,
        parent=None,
        *,
        parts: list[dict],
        parties: list,
        tax_rate: float,
        initial: dict | None = None,
    ):
        super().__init__(parent)
        self._editing = initial is not None
        self.setWindowTitle(f"Edit {self.DOC_LABEL}" if self._editing else f"New {self.DOC_LABEL}")
        self.setModal(True)

        self._parts = {int(p["id"]): p for p in parts}
        self._tax_rate = float(tax_rate)
        self._payload = None
        self._initial = initial or {}
        self._already_paid = float(self._initial.get("paid_amount") or 0.0)
        # quantities this order already holds, so an edit can reuse them
        self._held: dict[int, int] = {}
        for it in self._initial.get("items", []):
            self._held[int(it["inventory_id"])] = self._held.get(int(it["inventory_id"]), 0) + int(it["quantity"])

        # --- header widgets ---
        self.cmb_party = QComboBox()
        if not self.PARTY_REQUIRED:
            self.cmb_party.addItem("Walk-in", None)
        for p in parties:
            self.cmb_party.addItem(p.name, p.id)
        if self.PARTY_REQUIRED:
            self.cmb_party.setCurrentIndex(-1)

        self.date = QDateEdit()
        self.date.setCalendarPopup(True)
        self.date.setDisplayFormat("yyyy-MM-dd")
        self.date.setDate(QDate.fromString(today_str(), "yyyy-MM-dd"))

        self.notes = QLineEdit()
        self.notes.setPlaceholderText("Notes (optional)")

        head = QGroupBox(self.DOC_LABEL)
        hf = QFormLayout(head)
        hf.addRow(f"{self.PARTY_LABEL}:", self.cmb_party)
        hf.addRow("Date:", self.date)
        hf.addRow("Notes:", self.notes)

        # --- cart ---
        self.tbl = QTableWidget(0, len(self.COLS))
        self.tbl.setHorizontalHeaderLabels(self.COLS)
        self.tbl.verticalHeader().setVisible(False)
        self.tbl.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.tbl.horizontalHeader().setSectionResizeMode(self.COL_PART, QHeaderView.Stretch)
        self.btn_add_row = QPushButton("Add Row")

        cart = QGroupBox("Items")
        cv = QVBoxLayout(cart)
        cv.addWidget(self.tbl, 1)
        row_bar = QHBoxLayout()
        row_bar.addWidget(self.btn_add_row)
        row_bar.addStretch(1)
        cv.addLayout(row_bar)

        # --- discount / payment ---
        self.txt_discount = QLineEdit("0")
        self.cmb_discount_type = QComboBox()
        for t in DISCOUNT_TYPES:
            self.cmb_discount_type.addItem(t.title(), t)
        disc_row = QHBoxLayout()
        disc_row.addWidget(self.txt_discount, 1)
        disc_row.addWidget(self.cmb_discount_type)

        self.cmb_method = QComboBox()
        for m in PAYMENT_METHODS:
            self.cmb_method.addItem(m.title(), m)
        self.txt_paid = QLineEdit("0")
        self.lab_paid_caption = QLabel(f"{self.TENDER_LABEL}:")
        if self._editing:
            self.lab_paid_caption.setText("Add payment now:")

        pay = QGroupBox("Payment")
        pf = QFormLayout(pay)
        pf.addRow("Discount:", disc_row)
        pf.addRow("Payment method:", self.cmb_method)
        pf.addRow(self.lab_paid_caption, self.txt_paid)

        # --- totals ---
        self.lab_sub = QLabel("0.00")
        self.lab_disc = QLabel("0.00")
        self.lab_tax = QLabel("0.00")
        self.lab_total = QLabel("0.00")
        self.lab_total.setStyleSheet("font-weight: bold;")
        self.lab_change = QLabel("0.00")
        self.lab_balance = QLabel("0.00")
        self.lab_status = QLabel("-")
        self.lab_problem = QLabel("")
        self.lab_problem.setStyleSheet("color: #B91C1C;")
        self.lab_problem.setWordWrap(True)

        tot = QGroupBox("Totals")
        tf = QFormLayout(tot)
        tf.addRow("Subtotal:", self.lab_sub)
        tf.addRow("Discount:", self.lab_disc)
        tf.addRow(f"Tax ({self._tax_rate * 100:g}%):", self.lab_tax)
        tf.addRow("Total:", self.lab_total)
        tf.addRow("Change due:", self.lab_change)
        tf.addRow("Balance:", self.lab_balance)
        tf.addRow("Status:", self.lab_status)
        tf.addRow(self.lab_problem)

        bottom = QHBoxLayout()
        bottom.addWidget(pay, 1)
        bottom.addWidget(tot, 1)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.button(QDialogButtonBox.Ok).setText("Save")
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addWidget(head)
        root.addWidget(cart, 1)
        root.addLayout(bottom)
        root.addWidget(self.buttons)

        # wiring
        self.btn_add_row.clicked.connect(lambda: self._add_row())
        self.tbl.cellChanged.connect(self._cell_changed)
        self.txt_discount.textChanged.connect(self._refresh_totals)
        self.cmb_discount_type.currentIndexChanged.connect(self._refresh_totals)
        self.cmb_method.currentIndexChanged.connect(self._on_method_changed)
        self.txt_paid.textChanged.connect(self._refresh_totals)

        self._load_initial()
        self.resize(900, 640)

    # ---- setup -------------------------------------------------------------

    def _load_initial(self):
        h = self._initial
        if not h:
            self._add_row()
            self._refresh_totals()
            return
        i = self.cmb_party.findData(h.get("counterparty_id"))
        if i >= 0:
            self.cmb_party.setCurrentIndex(i)
        if h.get("order_date"):
            self.date.setDate(QDate.fromString(str(h["order_date"])[:10], "yyyy-MM-dd"))
        self.notes.setText(h.get("notes") or "")
        # stored discount is the applied amount
        self.txt_discount.setText(f"{float(h.get('discount') or 0.0):g}")
        j = self.cmb_discount_type.findData("amount")
        if j >= 0:
            self.cmb_discount_type.setCurrentIndex(j)
        k = self.cmb_method.findData(h.get("payment_method") or "cash")
        if k >= 0:
            self.cmb_method.setCurrentIndex(k)
        for it in h.get("items", []):
            self._add_row(it)
        if self.tbl.rowCount() == 0:
            self._add_row()
        self._refresh_totals()

    def _available(self, inventory_id: int) -> int:
        part = self._parts.get(inventory_id)
        on_hand = int(part["quantity"]) if part else 0
        return on_hand + self._held.get(inventory_id, 0)

    def _add_row(self, pre: dict | None = None):
        self.tbl.blockSignals(True)
        r = self.tbl.rowCount()
        self.tbl.insertRow(r)

        num = QTableWidgetItem(str(r + 1))
        num.setFlags(Qt.ItemIsSelectable | Qt.ItemIsEnabled)
        self.tbl.setItem(r, self.COL_NUM, num)

        cmb = QComboBox()
        cmb.addItem("— select part —", None)
        for pid, p in self._parts.items():
            cmb.addItem(f"{p['part_code']}  {p['name']}", pid)
        self.tbl.setCellWidget(r, self.COL_PART, cmb)

        stock = QTableWidgetItem("-")
        stock.setFlags(Qt.ItemIsSelectable | Qt.ItemIsEnabled)
        stock.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.tbl.setItem(r, self.COL_STOCK, stock)

        qty = QTableWidgetItem("1")
        qty.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.tbl.setItem(r, self.COL_QTY, qty)

        price = QTableWidgetItem("0.00")
        price.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.tbl.setItem(r, self.COL_PRICE, price)

        ltot = QTableWidgetItem("0.00")
        ltot.setFlags(Qt.ItemIsSelectable | Qt.ItemIsEnabled)
        ltot.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.tbl.setItem(r, self.COL_TOTAL, ltot)

        btn = QPushButton("✕")
        btn.clicked.connect(lambda: self._remove_row_of(cmb))
        self.tbl.setCellWidget(r, self.COL_DEL, btn)

        cmb.currentIndexChanged.connect(lambda _i: self._on_part_changed(cmb))

        if pre:
            i = cmb.findData(int(pre["inventory_id"]))
            if i >= 0:
                cmb.setCurrentIndex(i)
            qty.setText(str(int(pre["quantity"])))
            price.setText(f"{float(pre['unit_price']):.2f}")
        self.tbl.blockSignals(False)
        self._recalc_row(r)

    def _row_of(self, cmb: QComboBox) -> int:
        for r in range(self.tbl.rowCount()):
            if self.tbl.cellWidget(r, self.COL_PART) is cmb:
                return r
        return -1

    def _remove_row_of(self, cmb: QComboBox):
        r = self._row_of(cmb)
        if r >= 0:
            self.tbl.removeRow(r)
            self._reindex()
            self._refresh_totals()

    def _reindex(self):
        for r in range(self.tbl.rowCount()):
            it = self.tbl.item(r, self.COL_NUM)
            if it:
                it.setText(str(r + 1))

    # ---- row / totals math ---------------------------------------------------

    def _on_part_changed(self, cmb: QComboBox):
        r = self._row_of(cmb)
        if r < 0:
            return
        pid = cmb.currentData()
        self.tbl.blockSignals(True)
        if pid is None:
            self.tbl.item(r, self.COL_STOCK).setText("-")
        else:
            part = self._parts[int(pid)]
            self.tbl.item(r, self.COL_STOCK).setText(str(self._available(int(pid))))
            self.tbl.item(r, self.COL_PRICE).setText(f"{float(part[self.PRICE_KEY]):.2f}")
        self.tbl.blockSignals(False)
        self._recalc_row(r)
        self._refresh_totals()

    def _cell_changed(self, row: int, col: int):
        if col not in (self.COL_QTY, self.COL_PRICE):
            return
        self._recalc_row(row)
        self._refresh_totals()

    def _row_values(self, r: int) -> tuple[int | None, int | None, float | None]:
        cmb = self.tbl.cellWidget(r, self.COL_PART)
        pid = cmb.currentData() if cmb else None
        q_item = self.tbl.item(r, self.COL_QTY)
        p_item = self.tbl.item(r, self.COL_PRICE)
        ok_q, qty = try_parse_int(q_item.text().strip() if q_item else "")
        ok_p, price = try_parse_float(p_item.text().replace(",", "").strip() if p_item else "")
        return (
            int(pid) if pid is not None else None,
            qty if ok_q else None,
            price if ok_p else None,
        )

    def _recalc_row(self, r: int):
        pid, qty, price = self._row_values(r)
        self.tbl.blockSignals(True)
        lt = qty * price if (qty and price is not None) else 0.0
        self.tbl.item(r, self.COL_TOTAL).setText(fmt_money(lt))
        over = self.CHECK_STOCK and pid is not None and qty is not None and qty > self._available(pid)
        bad_qty = qty is None or qty <= 0
        q_item = self.tbl.item(r, self.COL_QTY)
        q_item.setBackground(QColor("#FECACA") if (over or bad_qty) else QColor(Qt.white))
        q_item.setToolTip("Exceeds stock on hand" if over else "")
        self.tbl.blockSignals(False)

    def _cart_lines(self) -> list[tuple[int, int, float]]:
        """(inventory_id, quantity, unit_price) for complete rows."""
        lines = []
        for r in range(self.tbl.rowCount()):
            pid, qty, price = self._row_values(r)
            if pid is not None and qty is not None and price is not None:
                lines.append((pid, qty, price))
        return lines

    def _discount(self) -> float:
        ok, v = try_parse_float(self.txt_discount.text().strip() or "0")
        return v if ok else 0.0

    def _paid_now(self) -> float:
        ok, v = try_parse_float(self.txt_paid.text().strip() or "0")
        return v if ok else 0.0

    def _on_method_changed(self, _i: int):
        credit = self.cmb_method.currentData() == "credit"
        self.txt_paid.setEnabled(not credit)
        if credit:
            self.txt_paid.setText("0")
        self._refresh_totals()

    def _resolve(self, total: float):
        """Projected (paid_amount, balance, status, change_due) for the current inputs."""
        method = self.cmb_method.currentData()
        if self._editing:
            if self._already_paid - total > 0.005:
                raise OverpaymentError(
                    self._already_paid, total,
                    f"Already paid {self._already_paid:,.2f}, which is more than the new total {total:,.2f}.",
                )
            paid_now = self._paid_now()
            if paid_now > 0:
                res = apply_payment(total, self._already_paid, paid_now)
                return res.paid_amount, res.balance, res.status, 0.0
            return (self._already_paid, round(total - self._already_paid, 2),
                    derive_payment_status(total, self._already_paid), 0.0)
        res = self._resolve_new(total, method, self._paid_now())
        return res.paid_amount, res.balance, res.status, res.change_due

    def _resolve_new(self, total: float, method: str, amount: float):
        return resolve_sale_payment(total, method, amount)

    def _refresh_totals(self, *_):
        self.lab_problem.setText("")
        try:
            t = compute_totals(
                [(q, p) for _pid, q, p in self._cart_lines()],
                self._discount(),
                self.cmb_discount_type.currentData(),
                self._tax_rate,
            )
        except DomainError as e:
            self.lab_problem.setText(str(e))
            return None
        self.lab_sub.setText(fmt_money(t.subtotal))
        self.lab_disc.setText(fmt_money(t.discount))
        self.lab_tax.setText(fmt_money(t.tax))
        self.lab_total.setText(fmt_money(t.total))
        try:
            paid, balance, status, change = self._resolve(t.total)
        except DomainError as e:
            self.lab_problem.setText(str(e))
            self.lab_change.setText("-")
            self.lab_balance.setText("-")
            self.lab_status.setText("-")
            return t
        self.lab_change.setText(fmt_money(change))
        self.lab_balance.setText(fmt_money(balance))
        self.lab_status.setText(status_label(status))
        return t

    # ---- payload -------------------------------------------------------------

    def _warn(self, title: str, message: str, focus_widget=None, row_to_select: int | None = None):
        """Show a friendly message, focus a widget, optionally select a row."""
        info(self, title, message)
        if focus_widget:
            focus_widget.setFocus()
        if row_to_select is not None and 0 <= row_to_select < self.tbl.rowCount():
            self.tbl.clearSelection()
            self.tbl.selectRow(row_to_select)

    def get_payload(self) -> dict | None:
        party = self.cmb_party.currentData()
        if self.PARTY_REQUIRED and party is None:
            self._warn(f"Missing {self.PARTY_LABEL}", f"Please select a {self.PARTY_LABEL.lower()}.", self.cmb_party)
            return None

        items = []
        wanted: dict[int, int] = {}
        for r in range(self.tbl.rowCount()):
            pid, qty, price = self._row_values(r)
            if pid is None:
                continue
            if qty is None or qty <= 0:
                self._warn("Invalid quantity", f"Row {r + 1}: quantity must be a whole number above zero.",
                           row_to_select=r)
                return None
            if price is None or price < 0:
                self._warn("Invalid price", f"Row {r + 1}: unit price cannot be negative.", row_to_select=r)
                return None
            wanted[pid] = wanted.get(pid, 0) + qty
            items.append({"inventory_id": pid, "quantity": qty, "unit_price": price})

        if not items:
            self._warn("No items", "Add at least one part to the order.", self.tbl)
            return None

        if self.CHECK_STOCK:
            for pid, qty in wanted.items():
                if qty > self._available(pid):
                    part = self._parts[pid]
                    self._warn(
                        "Not enough stock",
                        f"{part['part_code']} has {self._available(pid)} in stock; {qty} requested.",
                        self.tbl,
                    )
                    return None

        ok, discount = try_parse_float(self.txt_discount.text().strip() or "0")
        if not ok or discount < 0:
            self._warn("Invalid discount", "Discount must be a number of zero or more.", self.txt_discount)
            return None
        ok, paid = try_parse_float(self.txt_paid.text().strip() or "0")
        if not ok or paid < 0:
            self._warn("Invalid amount", "Amount must be a number of zero or more.", self.txt_paid)
            return None

        if self._refresh_totals() is None or self.lab_problem.text():
            self._warn("Cannot save", self.lab_problem.text(), self.txt_paid)
            return None

        return {
            "counterparty_id": party,
            "order_date": self.date.date().toString("yyyy-MM-dd"),
            "items": items,
            "discount": discount,
            "discount_type": self.cmb_discount_type.currentData(),
            "tax_rate": self._tax_rate,
            "payment_method": self.cmb_method.currentData(),
            "amount_paid": paid,
            "notes": self.notes.text().strip() or None,
        }

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        return self._payload
