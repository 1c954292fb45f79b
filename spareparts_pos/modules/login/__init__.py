"""
Login module package exports.

- LoginController: runs the sign-in dialog and checks credentials through UsersRepo.
- UserSession: the signed-in user as the rest of the app sees it (no secrets).
"""

from .controller import LoginController
from .model import UserSession

__all__ = [
    "LoginController",
    "UserSession",
]
