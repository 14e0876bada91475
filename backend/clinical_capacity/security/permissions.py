"""Role hierarchy helpers for explicit authorization checks."""

from __future__ import annotations

from dataclasses import dataclass

from clinical_capacity.models.user import UserRole

ROLE_LEVELS: dict[UserRole, int] = {
    UserRole.SUPERADMIN: 5,
    UserRole.ADMIN: 4,
    UserRole.LEAD_INSTRUCTOR: 3,
    UserRole.INSTRUCTOR: 2,
    UserRole.GUEST: 1,
}


def role_level(role: UserRole | str) -> int:
    try:
        return ROLE_LEVELS[UserRole(role)]
    except ValueError:
        return 0


def has_min_role(role: UserRole | str, required: UserRole) -> bool:
    """Return True when ``role`` ranks at or above ``required``."""
    return role_level(role) >= ROLE_LEVELS[required]


@dataclass(frozen=True, slots=True)
class Capabilities:
    """What the current user may do on the capacity board."""

    can_view: bool = False
    can_edit: bool = False
    can_check: bool = False
    can_override: bool = False

    @classmethod
    def for_role(cls, role: UserRole | str) -> "Capabilities":
        return cls(
            can_view=has_min_role(role, UserRole.LEAD_INSTRUCTOR),
            can_edit=has_min_role(role, UserRole.ADMIN),
            can_check=has_min_role(role, UserRole.INSTRUCTOR),
            can_override=has_min_role(role, UserRole.ADMIN),
        )


__all__ = [
    "ROLE_LEVELS",
    "Capabilities",
    "has_min_role",
    "role_level",
]
