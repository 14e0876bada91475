"""Seed demo agencies, clinical sites and placements for local development."""
from __future__ import annotations

import asyncio
from datetime import date

from sqlalchemy import select

from clinical_capacity.db.session import session_scope
from clinical_capacity.models import (
    Agency,
    AgencyType,
    ClinicalSite,
    ClinicalSiteVisit,
    InternshipStatus,
    StudentInternship,
)

AGENCIES = [
    ("Clark County Fire", "CCFD", AgencyType.EMS, 4),
    ("Mercy Air Medical", "MAM", AgencyType.EMS, 2),
    ("Sunrise Hospital", "SRH", AgencyType.HOSPITAL, 3),
]

CLINICAL_SITES = [
    ("University Medical Center", "UMC", "Valley Health System", 6),
    ("St. Rose Dominican", "SRD", "Dignity Health", 2),
]


async def seed_sites() -> None:
    async with session_scope() as session:
        existing = await session.execute(select(Agency.id).limit(1))
        if existing.first() is not None:
            print("Capacity demo data already present.")
            return

        agencies = [
            Agency(name=name, abbreviation=abbr, type=kind, max_students_per_day=limit)
            for name, abbr, kind, limit in AGENCIES
        ]
        sites = [
            ClinicalSite(name=name, abbreviation=abbr, system=system, max_students_per_day=limit)
            for name, abbr, system, limit in CLINICAL_SITES
        ]
        session.add_all([*agencies, *sites])
        await session.flush()

        today = date.today()
        for index in range(3):
            session.add(
                StudentInternship(
                    agency_id=agencies[1].id,
                    student_name=f"Student {index + 1}",
                    status=InternshipStatus.IN_PROGRESS,
                    placement_date=today,
                )
            )
        session.add(
            ClinicalSiteVisit(site_id=sites[0].id, visitor_name="Lead Instructor", visit_date=today)
        )
        await session.commit()
        print(f"Seeded {len(agencies)} agencies and {len(sites)} clinical sites.")


def main() -> None:
    asyncio.run(seed_sites())


if __name__ == "__main__":
    main()
