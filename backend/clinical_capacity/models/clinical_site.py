"""Hospital facilities tracked separately from agencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_capacity.db.base import Base
from clinical_capacity.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from clinical_capacity.models.placement import ClinicalSiteVisit


class ClinicalSite(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Clinical placement location, optionally part of a health system."""

    __tablename__ = "clinical_sites"
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(32), nullable=False)
    system: Mapped[str | None] = mapped_column(String(255))
    max_students_per_day: Mapped[int | None] = mapped_column(Integer())
    max_students_per_rotation: Mapped[int | None] = mapped_column(Integer())
    capacity_notes: Mapped[str | None] = mapped_column(Text())
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    visits: Mapped[list["ClinicalSiteVisit"]] = relationship(
        "ClinicalSiteVisit", back_populates="site"
    )
