"""Clinical site capacity queries and updates."""
from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_capacity.core.config import get_settings
from clinical_capacity.models import (
    INACTIVE_INTERNSHIP_STATUSES,
    Agency,
    AgencyType,
    ClinicalSite,
    ClinicalSiteVisit,
    StudentInternship,
)
from clinical_capacity.schemas.capacity import CapacitySite, CapacitySource
from clinical_capacity.services import capacity_rules

logger = logging.getLogger(__name__)

_MODELS: dict[CapacitySource, type[Agency] | type[ClinicalSite]] = {
    CapacitySource.AGENCY: Agency,
    CapacitySource.CLINICAL_SITE: ClinicalSite,
}


@dataclass(slots=True)
class CapacitySnapshot:
    on_date: date | None
    agencies: list[CapacitySite]
    clinical_sites: list[CapacitySite]


@dataclass(slots=True)
class CapacityCheck:
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


def _daily_limit(value: int | None) -> int:
    if value is None:
        return get_settings().default_max_students_per_day
    return value


def _to_capacity_site(
    row: Agency | ClinicalSite, *, source: CapacitySource, current: int
) -> CapacitySite:
    max_per_day = _daily_limit(row.max_students_per_day)
    utilization = capacity_rules.classify(current, max_per_day)
    if isinstance(row, Agency):
        site_type, system = row.type, None
    else:
        site_type, system = AgencyType.HOSPITAL, row.system
    return CapacitySite(
        id=row.id,
        source=source,
        name=row.name,
        abbreviation=row.abbreviation,
        type=site_type,
        system=system,
        max_students_per_day=max_per_day,
        max_students_per_rotation=row.max_students_per_rotation,
        capacity_notes=row.capacity_notes,
        current_student_count=current,
        utilization_percentage=utilization.percentage,
        is_over_capacity=utilization.is_over,
    )


async def _agency_counts(
    session: AsyncSession,
    *,
    on_date: date | None,
    agency_id: uuid.UUID | None = None,
) -> Counter[uuid.UUID]:
    stmt = (
        select(StudentInternship.agency_id, func.count(StudentInternship.id))
        .where(
            StudentInternship.agency_id.is_not(None),
            StudentInternship.status.not_in(list(INACTIVE_INTERNSHIP_STATUSES)),
        )
        .group_by(StudentInternship.agency_id)
    )
    if on_date is not None:
        stmt = stmt.where(StudentInternship.placement_date == on_date)
    if agency_id is not None:
        stmt = stmt.where(StudentInternship.agency_id == agency_id)
    result = await session.execute(stmt)
    return Counter({row[0]: int(row[1]) for row in result.all()})


async def _site_visit_counts(
    session: AsyncSession,
    *,
    on_date: date | None,
    site_id: uuid.UUID | None = None,
) -> Counter[uuid.UUID]:
    """Count visits per clinical site; failures degrade to zero counts."""
    stmt = (
        select(ClinicalSiteVisit.site_id, func.count(ClinicalSiteVisit.id))
        .group_by(ClinicalSiteVisit.site_id)
    )
    if on_date is not None:
        stmt = stmt.where(ClinicalSiteVisit.visit_date == on_date)
    if site_id is not None:
        stmt = stmt.where(ClinicalSiteVisit.site_id == site_id)
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError:
        logger.warning("Could not count clinical site visits for capacity", exc_info=True)
        await session.rollback()
        return Counter()
    return Counter({row[0]: int(row[1]) for row in result.all()})


async def _current_count(
    session: AsyncSession,
    *,
    source: CapacitySource,
    site_id: uuid.UUID,
    on_date: date | None,
) -> int:
    if source is CapacitySource.AGENCY:
        counts = await _agency_counts(session, on_date=on_date, agency_id=site_id)
    else:
        counts = await _site_visit_counts(session, on_date=on_date, site_id=site_id)
    return counts[site_id]


async def list_capacity(
    session: AsyncSession, *, on_date: date | None = None
) -> CapacitySnapshot:
    """Return utilization for all active agencies and clinical sites."""
    # Counts run first: a failed visit query rolls back and would expire loaded rows.
    visit_counts = await _site_visit_counts(session, on_date=on_date)
    agency_counts = await _agency_counts(session, on_date=on_date)

    agencies_result = await session.execute(
        select(Agency).where(Agency.is_active.is_(True)).order_by(Agency.name)
    )
    agencies = list(agencies_result.scalars().all())

    sites_result = await session.execute(
        select(ClinicalSite).where(ClinicalSite.is_active.is_(True)).order_by(ClinicalSite.name)
    )
    sites = list(sites_result.scalars().all())

    return CapacitySnapshot(
        on_date=on_date,
        agencies=[
            _to_capacity_site(
                agency, source=CapacitySource.AGENCY, current=agency_counts[agency.id]
            )
            for agency in agencies
        ],
        clinical_sites=[
            _to_capacity_site(
                site, source=CapacitySource.CLINICAL_SITE, current=visit_counts[site.id]
            )
            for site in sites
        ],
    )


async def _get_row(
    session: AsyncSession, *, source: CapacitySource, site_id: uuid.UUID
) -> Agency | ClinicalSite:
    row = await session.get(_MODELS[source], site_id)
    if row is None:
        raise LookupError(f"No {source.value} with id {site_id}")
    return row


async def get_site(
    session: AsyncSession,
    *,
    source: CapacitySource,
    site_id: uuid.UUID,
    on_date: date | None = None,
) -> CapacitySite:
    """Return the capacity view of a single ``(source, site_id)``."""
    current = await _current_count(session, source=source, site_id=site_id, on_date=on_date)
    row = await _get_row(session, source=source, site_id=site_id)
    return _to_capacity_site(row, source=source, current=current)


async def update_site_capacity(
    session: AsyncSession,
    *,
    source: CapacitySource,
    site_id: uuid.UUID,
    changes: dict[str, int | str | None],
) -> CapacitySite:
    """Write the supplied capacity fields to the table selected by ``source``."""
    unknown = set(changes) - {
        "max_students_per_day",
        "max_students_per_rotation",
        "capacity_notes",
    }
    if unknown:
        raise ValueError(f"Unsupported capacity fields: {', '.join(sorted(unknown))}")
    max_per_day = changes.get("max_students_per_day")
    if "max_students_per_day" in changes and (
        not isinstance(max_per_day, int) or max_per_day < 1
    ):
        raise ValueError("max_students_per_day must be a positive integer")

    current = await _current_count(session, source=source, site_id=site_id, on_date=None)
    row = await _get_row(session, source=source, site_id=site_id)
    for field, value in changes.items():
        setattr(row, field, value)
    await session.commit()
    await session.refresh(row)
    logger.info(
        "Updated capacity for %s %s: %s",
        source.value,
        site_id,
        ", ".join(sorted(changes)) or "no fields",
    )
    return _to_capacity_site(row, source=source, current=current)


def _check_message(
    *, site_name: str, projected: int, maximum: int, additional: int, percentage: int
) -> str:
    noun = "student" if additional == 1 else "students"
    if projected > maximum:
        return (
            f"Adding {additional} {noun} would put {site_name} at {projected} of "
            f"{maximum} ({percentage}%), over its daily limit"
        )
    if projected == maximum:
        return f"{site_name} will be at its daily limit ({projected} of {maximum})"
    return f"{site_name} has room: {projected} of {maximum} students ({percentage}%)"


async def check_capacity(
    session: AsyncSession,
    *,
    source: CapacitySource,
    site_id: uuid.UUID,
    student_count: int = 1,
    on_date: date | None = None,
) -> CapacityCheck:
    """Report whether ``student_count`` more students fit under the daily limit."""
    if student_count < 1:
        raise ValueError("student_count must be at least 1")
    site = await get_site(session, source=source, site_id=site_id, on_date=on_date)
    projected = site.current_student_count + student_count
    utilization = capacity_rules.classify(projected, site.max_students_per_day)
    return CapacityCheck(
        site_id=site.id,
        source=source,
        site_name=site.name,
        allowed=not utilization.is_over,
        would_exceed=utilization.is_over,
        current=site.current_student_count,
        additional_requested=student_count,
        projected=projected,
        max=site.max_students_per_day,
        utilization_percentage=utilization.percentage,
        message=_check_message(
            site_name=site.name,
            projected=projected,
            maximum=site.max_students_per_day,
            additional=student_count,
            percentage=utilization.percentage,
        ),
    )
