from .controller import InventoryController
from .view import InventoryView
from .model import InventoryTableModel
from .form import AdjustStockDialog, InventoryForm
from .lookups_dialog import LookupsDialog

__all__ = [
    "InventoryController",
    "InventoryView",
    "InventoryTableModel",
    "InventoryForm",
    "AdjustStockDialog",
    "LookupsDialog",
]
