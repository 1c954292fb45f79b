# spareparts_pos/modules/login/model.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class UserSession:
    """
    App-facing user object (no secrets).

    Built from the dict `UsersRepo.authenticate()` returns.
    """
    id: int
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: str = "cashier"
    last_login: Optional[str] = None

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any]) -> "UserSession":
        return cls(
            id=int(m["id"]),
            username=str(m["username"]),
            full_name=m.get("full_name"),
            email=m.get("email"),
            role=m.get("role") or "cashier",
            last_login=m.get("last_login"),
        )

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def as_dict(self) -> dict:
        """The plain dict controllers receive as `current_user`."""
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role,
        }
