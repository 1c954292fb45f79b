from .controller import SupplierController
from .form import SupplierForm

__all__ = ["SupplierController", "SupplierForm"]
