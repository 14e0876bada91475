"""EMS and hospital partner agencies hosting internship placements."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_capacity.db.base import Base
from clinical_capacity.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from clinical_capacity.models.placement import StudentInternship


class AgencyType(str, enum.Enum):
    """Kind of partner organization."""

    EMS = "ems"
    HOSPITAL = "hospital"


class Agency(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Partner organization with per-day and per-rotation student limits."""

    __tablename__ = "agencies"
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    abbreviation: Mapped[str | None] = mapped_column(String(32))
    type: Mapped[AgencyType] = mapped_column(Enum(AgencyType), nullable=False)
    max_students_per_day: Mapped[int | None] = mapped_column(Integer())
    max_students_per_rotation: Mapped[int | None] = mapped_column(Integer())
    capacity_notes: Mapped[str | None] = mapped_column(Text())
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    internships: Mapped[list["StudentInternship"]] = relationship(
        "StudentInternship", back_populates="agency"
    )
