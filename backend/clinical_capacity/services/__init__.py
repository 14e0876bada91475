"""Service layer exports."""
from clinical_capacity.services import (
    auth_service,
    capacity_export,
    capacity_rules,
    capacity_service,
    user_service,
)

__all__ = [
    "auth_service",
    "capacity_export",
    "capacity_rules",
    "capacity_service",
    "user_service",
]
