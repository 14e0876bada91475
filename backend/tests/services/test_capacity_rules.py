"""Pure capacity rule tests."""
from __future__ import annotations

import uuid

import pytest

from clinical_capacity.models import AgencyType
from clinical_capacity.schemas.capacity import CapacitySite, CapacitySource
from clinical_capacity.services import capacity_rules
from clinical_capacity.services.capacity_rules import CapacityCategory, StatusTier


def _site(
    name: str,
    *,
    current: int,
    maximum: int,
    source: CapacitySource = CapacitySource.AGENCY,
    site_type: AgencyType = AgencyType.EMS,
    site_id: uuid.UUID | None = None,
) -> CapacitySite:
    utilization = capacity_rules.classify(current, maximum)
    return CapacitySite(
        id=site_id or uuid.uuid4(),
        source=source,
        name=name,
        type=site_type,
        max_students_per_day=maximum,
        current_student_count=current,
        utilization_percentage=utilization.percentage,
        is_over_capacity=utilization.is_over,
    )


@pytest.mark.parametrize(
    ("current", "maximum", "percentage", "is_over"),
    [
        (3, 4, 75, False),
        (5, 4, 125, True),
        (4, 4, 100, False),
        (0, 3, 0, False),
        (1, 8, 13, False),
        (1, 3, 33, False),
        (2, 3, 67, False),
        (1, 200, 1, False),
        (1, 400, 0, False),
    ],
)
def test_classify(current: int, maximum: int, percentage: int, is_over: bool) -> None:
    result = capacity_rules.classify(current, maximum)
    assert result.percentage == percentage
    assert result.is_over is is_over


@pytest.mark.parametrize("maximum", [None, 0, -2])
def test_classify_without_limit_is_never_over(maximum: int | None) -> None:
    result = capacity_rules.classify(3, maximum)
    assert result.percentage == 0
    assert result.is_over is False


@pytest.mark.parametrize(
    ("percentage", "width"), [(-5, 0), (0, 0), (42, 42), (100, 100), (150, 100)]
)
def test_bar_width_is_clamped(percentage: int, width: int) -> None:
    assert capacity_rules.bar_width(percentage) == width


@pytest.mark.parametrize(
    ("percentage", "is_over", "tier", "label"),
    [
        (150, True, StatusTier.OVER, "Over Capacity"),
        (100, True, StatusTier.OVER, "Over Capacity"),
        (101, False, StatusTier.OVER, "Over Capacity"),
        (100, False, StatusTier.NEAR, "Near Capacity"),
        (90, False, StatusTier.NEAR, "Near Capacity"),
        (89, False, StatusTier.HIGH, "High Utilization"),
        (70, False, StatusTier.HIGH, "High Utilization"),
        (69, False, StatusTier.AVAILABLE, "Available"),
        (0, False, StatusTier.AVAILABLE, "Available"),
    ],
)
def test_present_status_tiers(
    percentage: int, is_over: bool, tier: StatusTier, label: str
) -> None:
    status = capacity_rules.present_status(percentage, is_over)
    assert status.tier is tier
    assert status.label == label


def test_status_colors() -> None:
    over = capacity_rules.present_status(120, True)
    assert (over.color, over.badge) == ("red-strong", "red")
    near = capacity_rules.present_status(95, False)
    assert (near.color, near.badge) == ("red", "orange")
    available = capacity_rules.present_status(10, False)
    assert (available.color, available.badge) == ("green", "green")


def test_rollup_counts_partition_every_site() -> None:
    sites = [
        _site("A", current=0, maximum=4),
        _site("B", current=3, maximum=4),
        _site("C", current=4, maximum=4),
        _site("D", current=5, maximum=4),
        _site("E", current=1, maximum=2),
    ]
    counts = capacity_rules.rollup_counts(sites)
    assert (counts.available, counts.near, counts.over) == (2, 2, 1)
    assert counts.total == len(sites)


def test_aggregate_keeps_agencies_first_and_counts_all() -> None:
    agencies = [
        _site("Zulu EMS", current=3, maximum=2),
        _site("Alpha Hospital", current=0, maximum=2, site_type=AgencyType.HOSPITAL),
    ]
    clinical = [
        _site(
            "Mercy",
            current=1,
            maximum=1,
            source=CapacitySource.CLINICAL_SITE,
            site_type=AgencyType.HOSPITAL,
        )
    ]
    overview = capacity_rules.aggregate(agencies, clinical)
    assert [site.name for site in overview.sites] == ["Zulu EMS", "Alpha Hospital", "Mercy"]
    assert (overview.counts.available, overview.counts.near, overview.counts.over) == (1, 1, 1)


def test_filter_sites_by_category() -> None:
    ems = _site("EMS", current=0, maximum=2)
    hospital = _site("Hospital", current=0, maximum=2, site_type=AgencyType.HOSPITAL)
    clinical = _site(
        "Clinical",
        current=0,
        maximum=2,
        source=CapacitySource.CLINICAL_SITE,
        site_type=AgencyType.HOSPITAL,
    )
    sites = [ems, hospital, clinical]

    assert capacity_rules.filter_sites(sites, CapacityCategory.ALL) == sites
    assert capacity_rules.filter_sites(sites, CapacityCategory.EMS) == [ems]
    assert capacity_rules.filter_sites(sites, CapacityCategory.HOSPITAL) == [hospital]
    assert capacity_rules.filter_sites(sites, CapacityCategory.CLINICAL_SITE) == [clinical]

    counts = capacity_rules.category_counts(sites)
    assert (counts.all, counts.ems, counts.hospital, counts.clinical_site) == (3, 1, 1, 1)


def test_project_site_rederives_utilization() -> None:
    site = _site("Delta", current=3, maximum=4)
    projected = capacity_rules.project_site(
        site,
        max_students_per_day=2,
        max_students_per_rotation=None,
        capacity_notes="Nights",
    )
    assert projected.utilization_percentage == 150
    assert projected.is_over_capacity is True
    assert projected.capacity_notes == "Nights"
    assert site.max_students_per_day == 4


def test_replace_site_matches_source_and_id() -> None:
    shared = uuid.uuid4()
    agency = _site("Agency", current=1, maximum=2, site_id=shared)
    clinical = _site(
        "Clinical",
        current=1,
        maximum=2,
        source=CapacitySource.CLINICAL_SITE,
        site_type=AgencyType.HOSPITAL,
        site_id=shared,
    )
    updated = clinical.model_copy(update={"max_students_per_day": 5})

    replaced = capacity_rules.replace_site([agency, clinical], updated)
    assert replaced[0] is agency
    assert replaced[1].max_students_per_day == 5
    assert agency.key == f"agency-{shared}"
    assert capacity_rules.site_key("clinical_site", shared) == clinical.key


def test_near_and_over_thresholds() -> None:
    near = capacity_rules.classify(18, 20)
    assert (near.percentage, near.is_over) == (90, False)
    assert capacity_rules.present_status(near.percentage, near.is_over).label == "Near Capacity"

    over = capacity_rules.classify(22, 20)
    assert (over.percentage, over.is_over) == (110, True)
    assert capacity_rules.present_status(over.percentage, over.is_over).label == "Over Capacity"
    assert capacity_rules.bar_width(over.percentage) == 100
