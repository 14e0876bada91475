"""Student placement records that drive current site occupancy."""

from __future__ import annotations

import enum
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_capacity.db.base import Base
from clinical_capacity.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from clinical_capacity.models.agency import Agency
    from clinical_capacity.models.clinical_site import ClinicalSite


class InternshipStatus(str, enum.Enum):
    """Progress states of a field internship."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    EXTENDED = "extended"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


# Internships in these states no longer occupy a seat at the agency.
INACTIVE_INTERNSHIP_STATUSES = frozenset(
    {InternshipStatus.COMPLETED, InternshipStatus.WITHDRAWN}
)


class StudentInternship(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's field internship placement at an agency."""

    __tablename__ = "student_internships"
    agency_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("agencies.id", ondelete="SET NULL"), index=True
    )
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[InternshipStatus] = mapped_column(
        Enum(InternshipStatus), default=InternshipStatus.NOT_STARTED, nullable=False
    )
    placement_date: Mapped[date | None] = mapped_column(Date())

    agency: Mapped["Agency | None"] = relationship("Agency", back_populates="internships")


class ClinicalSiteVisit(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Logged visit of students to a clinical site on a given day."""

    __tablename__ = "clinical_site_visits"
    site_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clinical_sites.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    visitor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    visit_date: Mapped[date] = mapped_column(Date(), nullable=False, index=True)

    site: Mapped["ClinicalSite"] = relationship("ClinicalSite", back_populates="visits")
