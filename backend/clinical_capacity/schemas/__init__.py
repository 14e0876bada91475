"""Pydantic schemas for API payloads."""

from clinical_capacity.schemas.auth import Token
from clinical_capacity.schemas.capacity import (
    CapacityCheckRead,
    CapacityCountsRead,
    CapacityListResponse,
    CapacityOverviewResponse,
    CapacitySite,
    CapacitySource,
    CapacityUpdate,
    CapacityUpdateResponse,
    CategoryCountsRead,
)
from clinical_capacity.schemas.user import CapabilitiesRead, UserCreate, UserRead

__all__ = [
    "CapabilitiesRead",
    "CapacityCheckRead",
    "CapacityCountsRead",
    "CapacityListResponse",
    "CapacityOverviewResponse",
    "CapacitySite",
    "CapacitySource",
    "CapacityUpdate",
    "CapacityUpdateResponse",
    "CategoryCountsRead",
    "Token",
    "UserCreate",
    "UserRead",
]
