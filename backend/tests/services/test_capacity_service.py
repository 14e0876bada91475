"""Capacity service tests against the seeded database."""
from __future__ import annotations

import logging
import uuid

import pytest
from sqlalchemy import text

from clinical_capacity.core.config import get_settings
from clinical_capacity.db.session import get_sessionmaker
from clinical_capacity.schemas.capacity import CapacitySource
from clinical_capacity.services import capacity_service

pytestmark = pytest.mark.asyncio


async def test_list_capacity_orders_and_counts(
    app_context: dict[str, object], db_url: str
) -> None:
    async with get_sessionmaker(db_url)() as session:
        snapshot = await capacity_service.list_capacity(session)

    assert snapshot.on_date is None
    assert [site.name for site in snapshot.agencies] == [
        "Alpha EMS",
        "Bravo Hospital",
        "Delta Medics",
    ]
    assert [site.current_student_count for site in snapshot.agencies] == [3, 1, 3]
    assert [site.current_student_count for site in snapshot.clinical_sites] == [1, 0]
    assert all(site.source is CapacitySource.AGENCY for site in snapshot.agencies)
    assert all(site.type.value == "hospital" for site in snapshot.clinical_sites)


async def test_unset_daily_limit_uses_configured_default(
    app_context: dict[str, object], db_url: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DEFAULT_MAX_STUDENTS_PER_DAY", "4")
    get_settings.cache_clear()
    try:
        async with get_sessionmaker(db_url)() as session:
            site = await capacity_service.get_site(
                session, source=CapacitySource.AGENCY, site_id=app_context["bravo_id"]  # type: ignore[arg-type]
            )
    finally:
        get_settings.cache_clear()

    assert site.max_students_per_day == 4
    assert site.utilization_percentage == 25


async def test_visit_count_failure_degrades_to_zero(
    app_context: dict[str, object], db_url: str, caplog: pytest.LogCaptureFixture
) -> None:
    async with get_sessionmaker(db_url)() as session:
        await session.execute(text("DROP TABLE clinical_site_visits"))
        await session.commit()

    caplog.set_level(logging.WARNING, logger="clinical_capacity.services.capacity_service")
    async with get_sessionmaker(db_url)() as session:
        snapshot = await capacity_service.list_capacity(session)

    assert [site.current_student_count for site in snapshot.clinical_sites] == [0, 0]
    assert [site.current_student_count for site in snapshot.agencies] == [3, 1, 3]
    assert "Could not count clinical site visits" in caplog.text


async def test_update_site_capacity_rejects_bad_changes(
    app_context: dict[str, object], db_url: str
) -> None:
    async with get_sessionmaker(db_url)() as session:
        with pytest.raises(ValueError, match="Unsupported capacity fields: name"):
            await capacity_service.update_site_capacity(
                session,
                source=CapacitySource.AGENCY,
                site_id=app_context["alpha_id"],  # type: ignore[arg-type]
                changes={"name": "Renamed"},
            )
        with pytest.raises(ValueError):
            await capacity_service.update_site_capacity(
                session,
                source=CapacitySource.AGENCY,
                site_id=app_context["alpha_id"],  # type: ignore[arg-type]
                changes={"max_students_per_day": 0},
            )
        with pytest.raises(LookupError):
            await capacity_service.update_site_capacity(
                session,
                source=CapacitySource.CLINICAL_SITE,
                site_id=uuid.uuid4(),
                changes={"max_students_per_day": 2},
            )


async def test_update_site_capacity_logs_change(
    app_context: dict[str, object], db_url: str, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="clinical_capacity.services.capacity_service")
    async with get_sessionmaker(db_url)() as session:
        site = await capacity_service.update_site_capacity(
            session,
            source=CapacitySource.AGENCY,
            site_id=app_context["delta_id"],  # type: ignore[arg-type]
            changes={"max_students_per_day": 3, "capacity_notes": None},
        )

    assert site.utilization_percentage == 100
    assert f"Updated capacity for agency {app_context['delta_id']}" in caplog.text
    assert "capacity_notes, max_students_per_day" in caplog.text


async def test_check_capacity_requires_positive_count(
    app_context: dict[str, object], db_url: str
) -> None:
    async with get_sessionmaker(db_url)() as session:
        with pytest.raises(ValueError):
            await capacity_service.check_capacity(
                session,
                source=CapacitySource.AGENCY,
                site_id=app_context["alpha_id"],  # type: ignore[arg-type]
                student_count=0,
            )
        result = await capacity_service.check_capacity(
            session,
            source=CapacitySource.AGENCY,
            site_id=app_context["bravo_id"],  # type: ignore[arg-type]
            on_date=app_context["placement_date"],  # type: ignore[arg-type]
        )

    assert result.current == 1
    assert result.projected == 2
    assert result.allowed is True
    assert result.message == "Bravo Hospital will be at its daily limit (2 of 2)"
