from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ViewerRole = Literal["public", "student", "teacher", "admin"]

# Highest first: a user holding several roles is viewed with the strongest.
_ROLE_PRECEDENCE: tuple[ViewerRole, ...] = ("admin", "teacher", "student")


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    Carried through the request via FastAPI's dependency system.
    Endpoints receive this instead of a raw user id string.

        user_id: subject from JWT
        roles:   marketplace roles (admin, teacher, student)
        name:    display name, used for instructor attribution and
                 moderation decision records
    """

    user_id: str
    roles: frozenset[str]
    name: str | None = None

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: set[str]) -> bool:
        return bool(self.roles & roles)

    def is_admin(self) -> bool:
        return "admin" in self.roles

    @property
    def display_name(self) -> str:
        return self.name or self.user_id

    @property
    def viewer_role(self) -> ViewerRole:
        for role in _ROLE_PRECEDENCE:
            if role in self.roles:
                return role
        return "public"
