from .controller import SettingsController
from .view import SettingsView, UserForm

__all__ = ["SettingsController", "SettingsView", "UserForm"]
