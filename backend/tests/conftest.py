"""Test fixtures for the clinical capacity backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from clinical_capacity.core.config import get_settings
from clinical_capacity.core.security import get_password_hash
from clinical_capacity.db.base import Base
from clinical_capacity.db.session import dispose_engine, get_sessionmaker
from clinical_capacity.main import app
from clinical_capacity.models import (
    Agency,
    AgencyType,
    ClinicalSite,
    ClinicalSiteVisit,
    InternshipStatus,
    StudentInternship,
    User,
    UserRole,
    UserStatus,
)

PASSWORD = "Passw0rd!"
PLACEMENT_DATE = date(2026, 3, 2)
OTHER_DATE = date(2026, 3, 3)

_password_hash: str | None = None


def _hashed_password() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(PASSWORD)
    return _password_hash


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


def _internship(agency: Agency, name: str, status: InternshipStatus, on: date) -> StudentInternship:
    return StudentInternship(
        agency_id=agency.id, student_name=name, status=status, placement_date=on
    )


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus seeded users, agencies and clinical sites.

    Without a date filter the board holds five active sites:

    ========================  ==========  =======  =====  =====================
    site                      source      current  max    status
    ========================  ==========  =======  =====  =====================
    Alpha EMS                 agency      3        2      over (150 %)
    Bravo Hospital            agency      1        2*     available (50 %)
    Delta Medics              agency      3        4      high (75 %)
    Mercy General             clinical    1        1      near (100 %)
    Summit Regional           clinical    0        3      available (0 %)
    ========================  ==========  =======  =====  =====================

    ``*`` no limit configured, so the default applies. Mercy General shares
    its id with Alpha EMS. An inactive agency is seeded but never listed.
    """
    sessionmaker = get_sessionmaker(db_url)

    async with sessionmaker() as session:
        users: dict[str, User] = {}
        for role in UserRole:
            user = User(
                email=f"{role.value}@example.edu",
                hashed_password=_hashed_password(),
                first_name=role.value.replace("_", " ").title(),
                last_name="Tester",
                role=role,
                status=UserStatus.ACTIVE,
            )
            session.add(user)
            users[role.value] = user
        suspended = User(
            email="suspended@example.edu",
            hashed_password=_hashed_password(),
            first_name="Sid",
            last_name="Suspended",
            role=UserRole.ADMIN,
            status=UserStatus.SUSPENDED,
        )
        session.add(suspended)

        alpha = Agency(
            name="Alpha EMS",
            abbreviation="AEMS",
            type=AgencyType.EMS,
            max_students_per_day=2,
            max_students_per_rotation=6,
            capacity_notes="Weekday shifts only",
        )
        bravo = Agency(name="Bravo Hospital", abbreviation="BH", type=AgencyType.HOSPITAL)
        delta = Agency(
            name="Delta Medics", abbreviation="DM", type=AgencyType.EMS, max_students_per_day=4
        )
        inactive = Agency(
            name="Inactive Rescue",
            abbreviation="IR",
            type=AgencyType.EMS,
            max_students_per_day=1,
            is_active=False,
        )
        session.add_all([alpha, bravo, delta, inactive])
        await session.flush()

        mercy = ClinicalSite(
            id=alpha.id,
            name="Mercy General",
            abbreviation="MG",
            system="Mercy Health",
            max_students_per_day=1,
        )
        summit = ClinicalSite(name="Summit Regional", abbreviation="SR", max_students_per_day=3)
        session.add_all([mercy, summit])
        await session.flush()

        session.add_all(
            [
                _internship(alpha, "Avery", InternshipStatus.IN_PROGRESS, PLACEMENT_DATE),
                _internship(alpha, "Blake", InternshipStatus.ON_TRACK, PLACEMENT_DATE),
                _internship(alpha, "Casey", InternshipStatus.AT_RISK, OTHER_DATE),
                _internship(alpha, "Drew", InternshipStatus.COMPLETED, PLACEMENT_DATE),
                _internship(alpha, "Emery", InternshipStatus.WITHDRAWN, PLACEMENT_DATE),
                _internship(bravo, "Finley", InternshipStatus.ON_TRACK, PLACEMENT_DATE),
                _internship(delta, "Gray", InternshipStatus.IN_PROGRESS, PLACEMENT_DATE),
                _internship(delta, "Harper", InternshipStatus.EXTENDED, PLACEMENT_DATE),
                _internship(delta, "Indy", InternshipStatus.NOT_STARTED, PLACEMENT_DATE),
                _internship(inactive, "Jules", InternshipStatus.IN_PROGRESS, PLACEMENT_DATE),
                ClinicalSiteVisit(
                    site_id=mercy.id, visitor_name="Kai", visit_date=PLACEMENT_DATE
                ),
            ]
        )
        await session.commit()

        context: dict[str, object] = {
            "password": PASSWORD,
            "placement_date": PLACEMENT_DATE,
            "other_date": OTHER_DATE,
            "suspended_email": suspended.email,
            "alpha_id": alpha.id,
            "bravo_id": bravo.id,
            "delta_id": delta.id,
            "inactive_id": inactive.id,
            "mercy_id": mercy.id,
            "summit_id": summit.id,
        }
        for role_value, user in users.items():
            context[f"{role_value}_email"] = user.email

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context

