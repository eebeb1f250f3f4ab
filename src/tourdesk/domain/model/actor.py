"""The acting user and the roles the portal distinguishes.

Authentication lives outside this package; callers hand in an already
identified ``Actor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    USER = "user"
    PROVIDER = "provider"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @property
    def is_staff(self) -> bool:
        return self in (Role.MANAGER, Role.ADMIN, Role.SUPERADMIN)

    @property
    def can_bypass_capacity(self) -> bool:
        """Staff may book past a tour's seat limit (audited on the order)."""
        return self.is_staff


@dataclass(frozen=True)
class Actor:
    id: str
    username: str = ""
    role: Role = Role.USER

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff

    @property
    def display_name(self) -> str:
        return self.username or self.id
