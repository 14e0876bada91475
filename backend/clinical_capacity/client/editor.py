"""Capacity board state and the per-site capacity editor."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from clinical_capacity.client.api import CapacityApiClient
from clinical_capacity.client.exceptions import (
    CapacityClientError,
    CapacityPermissionError,
    CapacityValidationError,
)
from clinical_capacity.schemas.capacity import CapacityListResponse, CapacitySite
from clinical_capacity.security.permissions import Capabilities
from clinical_capacity.services import capacity_export, capacity_rules
from clinical_capacity.services.capacity_rules import (
    CapacityCategory,
    CapacityCounts,
    CategoryCounts,
)

logger = logging.getLogger(__name__)


@dataclass
class EditFormState:
    """Raw text the user typed into the edit form."""

    max_students_per_day: str
    max_students_per_rotation: str = ""
    capacity_notes: str = ""

    @classmethod
    def from_site(cls, site: CapacitySite) -> "EditFormState":
        return cls(
            max_students_per_day=str(site.max_students_per_day),
            max_students_per_rotation=(
                str(site.max_students_per_rotation)
                if site.max_students_per_rotation is not None
                else ""
            ),
            capacity_notes=site.capacity_notes or "",
        )


@dataclass(frozen=True, slots=True)
class CapacityValues:
    max_students_per_day: int
    max_students_per_rotation: int | None
    capacity_notes: str | None


def _parse_positive(text: str, *, field: str, message: str) -> int:
    try:
        value = int(text.strip())
    except ValueError as exc:
        raise CapacityValidationError(field, message) from exc
    if value < 1:
        raise CapacityValidationError(field, message)
    return value


def parse_form(form: EditFormState) -> CapacityValues:
    """Validate the form text, raising :class:`CapacityValidationError`."""
    max_per_day = _parse_positive(
        form.max_students_per_day,
        field="max_students_per_day",
        message="Max per day must be at least 1",
    )
    max_per_rotation = None
    if form.max_students_per_rotation.strip():
        max_per_rotation = _parse_positive(
            form.max_students_per_rotation,
            field="max_students_per_rotation",
            message="Max per rotation must be at least 1",
        )
    return CapacityValues(
        max_students_per_day=max_per_day,
        max_students_per_rotation=max_per_rotation,
        capacity_notes=form.capacity_notes.strip() or None,
    )


class CapacityEditor:
    """Edit form for one site's capacity limits.

    Errors never escape :meth:`submit`; they are kept in :attr:`error` so the
    form stays open with the typed values. Only one save runs at a time, and
    once the form is closed a late response is dropped.
    """

    def __init__(
        self,
        site: CapacitySite,
        api: CapacityApiClient,
        *,
        on_saved: Callable[[CapacitySite], None] | None = None,
    ):
        self.site = site
        self.form = EditFormState.from_site(site)
        self.saving = False
        self.closed = False
        self.error: str | None = None
        self.last_exception: CapacityClientError | None = None
        self._api = api
        self._on_saved = on_saved

    @property
    def can_save(self) -> bool:
        return not self.saving and not self.closed and bool(self.form.max_students_per_day.strip())

    def preview(self) -> CapacitySite | None:
        """Site as it would look with the typed limits, or None if invalid."""
        try:
            values = parse_form(self.form)
        except CapacityValidationError:
            return None
        return capacity_rules.project_site(
            self.site,
            max_students_per_day=values.max_students_per_day,
            max_students_per_rotation=values.max_students_per_rotation,
            capacity_notes=values.capacity_notes,
        )

    def _fail(self, exc: CapacityClientError) -> None:
        self.error = exc.message
        self.last_exception = exc

    async def submit(self) -> CapacitySite | None:
        """Save the form; returns the updated site or None on failure."""
        if not self.can_save:
            return None
        try:
            values = parse_form(self.form)
        except CapacityValidationError as exc:
            self._fail(exc)
            return None

        self.saving = True
        self.error = None
        self.last_exception = None
        try:
            updated = await self._api.update_capacity(
                site_id=self.site.id,
                source=self.site.source,
                max_students_per_day=values.max_students_per_day,
                max_students_per_rotation=values.max_students_per_rotation,
                capacity_notes=values.capacity_notes,
            )
        except CapacityClientError as exc:
            if not self.closed:
                self._fail(exc)
            return None
        finally:
            self.saving = False

        if self.closed:
            logger.debug("Dropping capacity save for closed editor %s", self.site.key)
            return None
        self.site = updated
        self.closed = True
        if self._on_saved is not None:
            self._on_saved(updated)
        return updated

    def dismiss_error(self) -> None:
        self.error = None
        self.last_exception = None

    def close(self) -> None:
        self.closed = True
        self.error = None


class CapacityBoard:
    """Capacity page state: fetched data, category tab and open editors."""

    def __init__(self, api: CapacityApiClient, capabilities: Capabilities):
        self.api = api
        self.capabilities = capabilities
        self.data: CapacityListResponse | None = None
        self.category = CapacityCategory.ALL
        self.on_date: date | None = None
        self.error: str | None = None

    async def refresh(self, on_date: date | None = None) -> bool:
        """Refetch the snapshot; prior data is kept when the request fails."""
        try:
            data = await self.api.fetch_capacity(on_date)
        except CapacityClientError as exc:
            self.error = exc.message
            return False
        self.data = data
        self.on_date = on_date
        self.error = None
        return True

    @property
    def sites(self) -> list[CapacitySite]:
        if self.data is None:
            return []
        return capacity_rules.aggregate(self.data.agencies, self.data.clinical_sites).sites

    @property
    def visible_sites(self) -> list[CapacitySite]:
        return capacity_rules.filter_sites(self.sites, self.category)

    @property
    def counts(self) -> CapacityCounts:
        return capacity_rules.rollup_counts(self.sites)

    @property
    def category_counts(self) -> CategoryCounts:
        return capacity_rules.category_counts(self.sites)

    def select_category(self, category: CapacityCategory | str) -> None:
        self.category = CapacityCategory(category)

    def replace(self, updated: CapacitySite) -> None:
        """Swap one site in place, matching on ``(source, id)``.

        Only the saved limits are taken from ``updated``. The board keeps its
        own student count, which may be scoped to :attr:`on_date`, and
        re-derives utilization from it.
        """
        if self.data is None:
            return
        shown = next((site for site in self.sites if site.key == updated.key), None)
        if shown is not None:
            updated = capacity_rules.project_site(
                shown,
                max_students_per_day=updated.max_students_per_day,
                max_students_per_rotation=updated.max_students_per_rotation,
                capacity_notes=updated.capacity_notes,
            )
        self.data = self.data.model_copy(
            update={
                "agencies": capacity_rules.replace_site(self.data.agencies, updated),
                "clinical_sites": capacity_rules.replace_site(
                    self.data.clinical_sites, updated
                ),
            }
        )

    def open_editor(self, site: CapacitySite) -> CapacityEditor:
        if not self.capabilities.can_edit:
            raise CapacityPermissionError("Editing capacity requires admin access")
        return CapacityEditor(site, self.api, on_saved=self.replace)

    def to_csv(self) -> str:
        return capacity_export.render_csv(self.sites)

    def export_filename(self, today: date) -> str:
        return capacity_export.export_filename(self.on_date, today)
