"""CSV rendering of the capacity board."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator, Sequence
from datetime import date

from clinical_capacity.schemas.capacity import CapacitySite, CapacitySource
from clinical_capacity.services.capacity_rules import site_status

CSV_HEADERS = [
    "Name",
    "Abbreviation",
    "Type",
    "Source",
    "Max/Day",
    "Max/Rotation",
    "Current Students",
    "Utilization %",
    "Status",
    "Notes",
]

_SOURCE_LABELS = {
    CapacitySource.AGENCY: "Agency",
    CapacitySource.CLINICAL_SITE: "Clinical Site",
}


def _cell(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def capacity_rows(sites: Iterable[CapacitySite]) -> list[list[str]]:
    """Header plus one row per site, in the order given."""
    rows = [list(CSV_HEADERS)]
    for site in sites:
        rows.append(
            [
                site.name,
                _cell(site.abbreviation),
                site.type.value,
                _SOURCE_LABELS[site.source],
                _cell(site.max_students_per_day),
                _cell(site.max_students_per_rotation),
                _cell(site.current_student_count),
                f"{site.utilization_percentage}%",
                site_status(site).label,
                _cell(site.capacity_notes),
            ]
        )
    return rows


def iter_csv(rows: Sequence[Sequence[str]]) -> Iterator[str]:
    """Yield each row as an encoded CSV line with every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        buffer.seek(0)
        buffer.truncate(0)
        writer.writerow(row)
        yield buffer.getvalue()


def render_csv(sites: Iterable[CapacitySite]) -> str:
    return "".join(iter_csv(capacity_rows(sites)))


def export_filename(on_date: date | None, today: date) -> str:
    return f"clinical-capacity-{(on_date or today).isoformat()}.csv"
