"""Utilization, status and roll-up rules for site capacity.

Everything here is pure: the API, the CSV export and the client-side editor
all derive their numbers from these functions so an optimistic local
projection always agrees with what the server computes on the next fetch.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from clinical_capacity.models.agency import AgencyType
from clinical_capacity.schemas.capacity import CapacitySite, CapacitySource

NEAR_CAPACITY_PCT = 90
HIGH_UTILIZATION_PCT = 70


@dataclass(frozen=True, slots=True)
class Utilization:
    """Occupancy of a site relative to its daily limit."""

    percentage: int
    is_over: bool


class StatusTier(str, enum.Enum):
    """Per-site status, most severe first."""

    OVER = "over"
    NEAR = "near"
    HIGH = "high"
    AVAILABLE = "available"


@dataclass(frozen=True, slots=True)
class CapacityStatus:
    label: str
    tier: StatusTier
    color: str
    badge: str


_STATUSES = {
    StatusTier.OVER: CapacityStatus("Over Capacity", StatusTier.OVER, "red-strong", "red"),
    StatusTier.NEAR: CapacityStatus("Near Capacity", StatusTier.NEAR, "red", "orange"),
    StatusTier.HIGH: CapacityStatus("High Utilization", StatusTier.HIGH, "yellow", "yellow"),
    StatusTier.AVAILABLE: CapacityStatus("Available", StatusTier.AVAILABLE, "green", "green"),
}


class CapacityCategory(str, enum.Enum):
    """Tabs offered by the capacity board."""

    ALL = "all"
    EMS = "ems"
    HOSPITAL = "hospital"
    CLINICAL_SITE = "clinical_site"


@dataclass(frozen=True, slots=True)
class CapacityCounts:
    available: int
    near: int
    over: int

    @property
    def total(self) -> int:
        return self.available + self.near + self.over


@dataclass(frozen=True, slots=True)
class CategoryCounts:
    all: int
    ems: int
    hospital: int
    clinical_site: int


@dataclass(frozen=True, slots=True)
class CapacityOverview:
    """Merged site list (agencies first) and its roll-up counts."""

    sites: list[CapacitySite]
    counts: CapacityCounts


def classify(current: int, maximum: int | None) -> Utilization:
    """Derive the utilization percentage and over-capacity flag.

    The percentage is rounded half-up and is not capped at 100. A missing or
    non-positive ``maximum`` means the limit is unconfigured: the site reports
    0 % and is never flagged as over capacity.
    """
    if maximum is None or maximum <= 0:
        return Utilization(percentage=0, is_over=False)
    current = max(current, 0)
    percentage = (current * 200 + maximum) // (2 * maximum)
    return Utilization(percentage=percentage, is_over=current > maximum)


def bar_width(percentage: int) -> int:
    """Clamp a utilization percentage to the drawable bar range."""
    return max(0, min(percentage, 100))


def present_status(percentage: int, is_over: bool) -> CapacityStatus:
    # is_over comes from raw counts and percentage is rounded, so check both.
    if is_over or percentage > 100:
        return _STATUSES[StatusTier.OVER]
    if percentage >= NEAR_CAPACITY_PCT:
        return _STATUSES[StatusTier.NEAR]
    if percentage >= HIGH_UTILIZATION_PCT:
        return _STATUSES[StatusTier.HIGH]
    return _STATUSES[StatusTier.AVAILABLE]


def site_status(site: CapacitySite) -> CapacityStatus:
    return present_status(site.utilization_percentage, site.is_over_capacity)


def site_key(source: CapacitySource | str, site_id: object) -> str:
    """Composite identity of a site across both backing collections."""
    source_value = source.value if isinstance(source, CapacitySource) else source
    return f"{source_value}-{site_id}"


def project_site(
    site: CapacitySite,
    *,
    max_students_per_day: int,
    max_students_per_rotation: int | None,
    capacity_notes: str | None,
) -> CapacitySite:
    """Apply edited limits to a site and re-derive its utilization locally."""
    utilization = classify(site.current_student_count, max_students_per_day)
    return site.model_copy(
        update={
            "max_students_per_day": max_students_per_day,
            "max_students_per_rotation": max_students_per_rotation,
            "capacity_notes": capacity_notes,
            "utilization_percentage": utilization.percentage,
            "is_over_capacity": utilization.is_over,
        }
    )


def matches_category(site: CapacitySite, category: CapacityCategory) -> bool:
    if category is CapacityCategory.ALL:
        return True
    if category is CapacityCategory.EMS:
        return site.source is CapacitySource.AGENCY and site.type is AgencyType.EMS
    if category is CapacityCategory.HOSPITAL:
        return site.source is CapacitySource.AGENCY and site.type is AgencyType.HOSPITAL
    return site.source is CapacitySource.CLINICAL_SITE


def filter_sites(
    sites: Iterable[CapacitySite], category: CapacityCategory
) -> list[CapacitySite]:
    return [site for site in sites if matches_category(site, category)]


def rollup_counts(sites: Iterable[CapacitySite]) -> CapacityCounts:
    """Count sites per summary tile.

    "near" merges the High Utilization and Near Capacity tiers.
    """
    available = near = over = 0
    for site in sites:
        if site.is_over_capacity:
            over += 1
        elif site.utilization_percentage >= HIGH_UTILIZATION_PCT:
            near += 1
        else:
            available += 1
    return CapacityCounts(available=available, near=near, over=over)


def category_counts(sites: Sequence[CapacitySite]) -> CategoryCounts:
    return CategoryCounts(
        all=len(sites),
        ems=len(filter_sites(sites, CapacityCategory.EMS)),
        hospital=len(filter_sites(sites, CapacityCategory.HOSPITAL)),
        clinical_site=len(filter_sites(sites, CapacityCategory.CLINICAL_SITE)),
    )


def aggregate(
    agencies: Sequence[CapacitySite], clinical_sites: Sequence[CapacitySite]
) -> CapacityOverview:
    """Merge both collections without reordering and count the full set."""
    sites = [*agencies, *clinical_sites]
    return CapacityOverview(sites=sites, counts=rollup_counts(sites))


def replace_site(sites: Sequence[CapacitySite], updated: CapacitySite) -> list[CapacitySite]:
    """Swap in ``updated`` where its composite key matches, keeping order."""
    return [updated if site.key == updated.key else site for site in sites]
