"""Schemas for clinical site capacity tracking."""
from __future__ import annotations

import enum
import uuid
from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clinical_capacity.models.agency import AgencyType


class CapacitySource(str, enum.Enum):
    """Backing collection a capacity row comes from."""

    AGENCY = "agency"
    CLINICAL_SITE = "clinical_site"


class CapacitySite(BaseModel):
    """Agency or clinical site merged into a single capacity shape.

    ``id`` is only unique within ``source``; use :attr:`key` whenever a site
    must be identified across both collections.
    """

    id: uuid.UUID
    source: CapacitySource
    name: str
    abbreviation: str | None = None
    type: AgencyType
    system: str | None = None
    max_students_per_day: int
    max_students_per_rotation: int | None = None
    capacity_notes: str | None = None
    current_student_count: int = Field(ge=0)
    utilization_percentage: int
    is_over_capacity: bool

    @property
    def key(self) -> str:
        return f"{self.source.value}-{self.id}"


class CapacityListResponse(BaseModel):
    """Capacity snapshot for every active agency and clinical site."""

    success: bool = True
    date: date_type | None = None
    agencies: list[CapacitySite]
    clinical_sites: list[CapacitySite]


class CapacityUpdate(BaseModel):
    """Partial update of a site's capacity settings.

    Only fields present in the request body are written; an explicit ``null``
    clears the rotation limit or the notes.
    """

    site_id: uuid.UUID
    source: CapacitySource
    max_students_per_day: int | None = Field(default=None, ge=1, strict=True)
    max_students_per_rotation: int | None = Field(default=None, ge=1, strict=True)
    capacity_notes: str | None = None

    @field_validator("capacity_notes")
    @classmethod
    def _blank_notes_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _max_per_day_not_null(self) -> "CapacityUpdate":
        if "max_students_per_day" in self.model_fields_set and self.max_students_per_day is None:
            raise ValueError("max_students_per_day must be a positive integer")
        return self

    def changes(self) -> dict[str, int | str | None]:
        """Return only the capacity fields the caller sent."""
        return self.model_dump(
            include={"max_students_per_day", "max_students_per_rotation", "capacity_notes"},
            exclude_unset=True,
        )


class CapacityUpdateResponse(BaseModel):
    """Full site record after a successful update."""

    success: bool = True
    site: CapacitySite


class CapacityCountsRead(BaseModel):
    """Roll-up counts over the unfiltered site list."""

    available: int
    near: int
    over: int
    total: int

    model_config = ConfigDict(from_attributes=True)


class CategoryCountsRead(BaseModel):
    """Number of sites shown under each category tab."""

    all: int
    ems: int
    hospital: int
    clinical_site: int

    model_config = ConfigDict(from_attributes=True)


class CapacityOverviewResponse(BaseModel):
    """Filtered site list with stable summary tiles."""

    success: bool = True
    date: date_type | None = None
    category: str
    sites: list[CapacitySite]
    counts: CapacityCountsRead
    category_counts: CategoryCountsRead
    can_edit: bool = False


class CapacityCheckRead(BaseModel):
    """Outcome of checking whether more students fit at a site."""

    success: bool = True
    site_id: uuid.UUID
    source: CapacitySource
    site_name: str
    allowed: bool
    would_exceed: bool
    current: int
    additional_requested: int
    projected: int
    max: int
    utilization_percentage: int
    message: str
    can_override: bool = False

    model_config = ConfigDict(from_attributes=True)
