from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QStackedWidget,
    QSizePolicy,
)
from PySide6.QtCore import Qt
from pathlib import Path
import logging
import sys

from .config import BACKUP_DIR, SETTINGS_PATH, ensure_dirs
from .constants import APP_NAME, ORG_NAME, STYLE_FILE
from .database import get_connection
from .modules.base_module import BaseModule
from .settings import AppSettings, SettingsStore
from .utils.loggers import get_logger
from .utils.ui_helpers import wrap_center

_log = logging.getLogger(__name__)


def load_qss() -> str:
    qss = ""
    f = Path(__file__).resolve().parent / STYLE_FILE
    if f.exists():
        qss = f.read_text(encoding="utf-8")
    return qss


class MainWindow(QMainWindow):
    """
    Left navigation list + stacked module pages.

    Modules are built once at start-up; cross-module refreshes are plain
    signal connections (an order changes stock and the dashboard figures,
    a customer edit changes the sales party list, saved settings reach
    every module that formats money or applies tax).
    """

    def __init__(self, conn, current_user: dict, store: SettingsStore):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} - {current_user.get('full_name') or current_user['username']}")
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(960, 600)

        self.conn = conn
        self.user = current_user
        self.store = store
        self.settings: AppSettings = store.load()

        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(130)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        self.modules: dict[str, BaseModule] = {}
        self.nav.currentRowChanged.connect(self.stack.setCurrentIndex)

        self._build_modules()
        self._wire_modules()

        if self.nav.count():
            self.nav.setCurrentRow(0)

    # ---------- module registry ----------

    def _build_modules(self):
        from .modules.backup_restore import create_module as create_backup_module
        from .modules.customer.controller import CustomerController
        from .modules.dashboard.controller import DashboardController
        from .modules.inventory.controller import InventoryController
        from .modules.purchase.controller import PurchaseController
        from .modules.reporting.controller import ReportingController
        from .modules.sales.controller import SalesController
        from .modules.settings.controller import SettingsController
        from .modules.supplier.controller import SupplierController

        c, u, s = self.conn, self.user, self.settings
        self._add("dashboard", "Dashboard", lambda: DashboardController(c, u, s))
        self._add("sales", "Sales", lambda: SalesController(c, u, s))
        self._add("purchases", "Purchases", lambda: PurchaseController(c, u, s))
        self._add("inventory", "Inventory", lambda: InventoryController(c, u, s))
        self._add("customers", "Customers", lambda: CustomerController(c, u))
        self._add("suppliers", "Suppliers", lambda: SupplierController(c, u))
        self._add("reports", "Reports", lambda: ReportingController(c, u, s))
        self._add("settings", "Settings", lambda: SettingsController(c, u, self.store))
        self._add("backup", "Backup & Restore", lambda: create_backup_module(c, BACKUP_DIR))

    def _add(self, key: str, title: str, factory):
        """Build one module; a failing module becomes a placeholder page."""
        try:
            module = factory()
        except Exception:
            _log.exception("module %s failed to load", title)
            self.add_placeholder(title, "could not be loaded (see log)")
            return
        self.add_module(title, module)
        self.modules[key] = module

    def add_module(self, title: str, module: BaseModule):
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(module.get_widget())

    def add_placeholder(self, title: str, message: str = "Coming soon..."):
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(wrap_center(QLabel(f"{title}\n\n{message}")))

    def open_page(self, key: str):
        module = self.modules.get(key)
        if module is None:
            return
        self.nav.setCurrentRow(self.stack.indexOf(module.get_widget()))

    # ---------- cross-module wiring ----------

    def _wire_modules(self):
        m = self.modules
        for key in ("sales", "purchases"):
            if key in m:
                m[key].ordersChanged.connect(self._on_orders_changed)
        if "customers" in m and "sales" in m:
            m["customers"].partiesChanged.connect(m["sales"].reload)
        if "suppliers" in m and "purchases" in m:
            m["suppliers"].partiesChanged.connect(m["purchases"].reload)
        if "settings" in m:
            m["settings"].settingsChanged.connect(self._on_settings_changed)
        if "dashboard" in m:
            m["dashboard"].navigate_to.connect(self.open_page)
            m["dashboard"].open_create_sale.connect(self._open_new_sale)
        if "backup" in m:
            m["backup"].restore_completed.connect(self._on_restored)

    def _on_orders_changed(self):
        for key in ("inventory", "customers", "suppliers"):
            if key in self.modules:
                self.modules[key].reload()
        if "dashboard" in self.modules:
            self.modules["dashboard"].refresh()

    def _on_settings_changed(self, settings: AppSettings):
        self.settings = settings
        for module in self.modules.values():
            if hasattr(module, "set_settings"):
                module.set_settings(settings)

    def _on_restored(self, _path: str):
        for key in ("sales", "purchases", "inventory", "customers", "suppliers"):
            if key in self.modules:
                self.modules[key].reload()
        for key in ("dashboard", "reports"):
            if key in self.modules:
                self.modules[key].refresh()

    def _open_new_sale(self):
        if "sales" not in self.modules:
            return
        self.open_page("sales")
        self.modules["sales"].new_order()


def main():
    ensure_dirs()
    get_logger()

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(ORG_NAME)

    conn = get_connection()
    store = SettingsStore(SETTINGS_PATH)

    from .modules.login.controller import LoginController
    login = LoginController(conn)
    session = login.prompt()
    if session is None:
        _log.info("sign-in ended: %s", login.last_error_code)
        conn.close()
        return 0
    _log.info("signed in as %s (%s)", session.username, session.role)

    qss = load_qss()
    if qss:
        app.setStyleSheet(qss)

    win = MainWindow(conn, current_user=session.as_dict(), store=store)
    win.resize(1200, 760)
    win.show()
    code = app.exec()
    conn.close()
    return code


if __name__ == "__main__":
    sys.exit(main())
