from .controller import PurchaseController
from .form import PurchaseForm

__all__ = ["PurchaseController", "PurchaseForm"]
