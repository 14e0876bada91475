"""Clinical site capacity API."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Coroutine
from dataclasses import asdict
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_capacity.api import deps
from clinical_capacity.schemas.capacity import (
    CapacityCheckRead,
    CapacityCountsRead,
    CapacityListResponse,
    CapacityOverviewResponse,
    CapacitySource,
    CapacityUpdate,
    CapacityUpdateResponse,
    CategoryCountsRead,
)
from clinical_capacity.security.permissions import Capabilities
from clinical_capacity.services import capacity_export, capacity_rules, capacity_service
from clinical_capacity.services.capacity_rules import CapacityCategory

logger = logging.getLogger(__name__)

_FIELD_MESSAGES = {
    "source": 'source must be "agency" or "clinical_site"',
    "max_students_per_day": "max_students_per_day must be a positive integer",
    "max_students_per_rotation": "max_students_per_rotation must be a positive integer",
    "student_count": "student_count must be a positive integer",
    "date": "date must be formatted YYYY-MM-DD",
    "category": "category must be one of all, ems, hospital, clinical_site",
}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [part for part in first.get("loc", ()) if part not in ("body", "query")]
    field = str(loc[-1]) if loc else ""
    if first.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    if field in _FIELD_MESSAGES:
        return _FIELD_MESSAGES[field]
    message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


class EnvelopeRoute(APIRoute):
    """Render errors as ``{"success": false, "error": ...}`` for this router."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def envelope_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except HTTPException as exc:
                return JSONResponse(
                    {"success": False, "error": exc.detail},
                    status_code=exc.status_code,
                    headers=exc.headers,
                )
            except RequestValidationError as exc:
                return JSONResponse(
                    {"success": False, "error": _validation_message(exc)},
                    status_code=status.HTTP_400_BAD_REQUEST,
                )

        return envelope_handler


router = APIRouter(prefix="/clinical/capacity", route_class=EnvelopeRoute)


def _assert_can_view(capabilities: Capabilities) -> None:
    if not capabilities.can_view:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


async def _load_snapshot(
    session: AsyncSession, on_date: date | None
) -> capacity_service.CapacitySnapshot:
    try:
        return await capacity_service.list_capacity(session, on_date=on_date)
    except SQLAlchemyError as exc:
        logger.exception("Error fetching capacity")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch capacity data",
        ) from exc


@router.get(
    "",
    response_model=CapacityListResponse,
    summary="Capacity and utilization for all active sites",
)
async def list_capacity(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    capabilities: Annotated[Capabilities, Depends(deps.get_capabilities)],
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> CapacityListResponse:
    _assert_can_view(capabilities)
    snapshot = await _load_snapshot(session, on_date)
    return CapacityListResponse(
        date=snapshot.on_date,
        agencies=snapshot.agencies,
        clinical_sites=snapshot.clinical_sites,
    )


@router.get(
    "/overview",
    response_model=CapacityOverviewResponse,
    summary="Filtered capacity board with roll-up counts",
)
async def capacity_overview(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    capabilities: Annotated[Capabilities, Depends(deps.get_capabilities)],
    on_date: Annotated[date | None, Query(alias="date")] = None,
    category: CapacityCategory = CapacityCategory.ALL,
) -> CapacityOverviewResponse:
    _assert_can_view(capabilities)
    snapshot = await _load_snapshot(session, on_date)
    overview = capacity_rules.aggregate(snapshot.agencies, snapshot.clinical_sites)
    return CapacityOverviewResponse(
        date=snapshot.on_date,
        category=category.value,
        sites=capacity_rules.filter_sites(overview.sites, category),
        counts=CapacityCountsRead(
            available=overview.counts.available,
            near=overview.counts.near,
            over=overview.counts.over,
            total=overview.counts.total,
        ),
        category_counts=CategoryCountsRead(
            **asdict(capacity_rules.category_counts(overview.sites))
        ),
        can_edit=capabilities.can_edit,
    )


@router.patch(
    "",
    response_model=CapacityUpdateResponse,
    summary="Update a site's capacity settings",
)
async def update_capacity(
    payload: CapacityUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    capabilities: Annotated[Capabilities, Depends(deps.get_capabilities)],
) -> CapacityUpdateResponse:
    if not capabilities.can_edit:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden - admin+ required"
        )
    try:
        site = await capacity_service.update_site_capacity(
            session,
            source=payload.source,
            site_id=payload.site_id,
            changes=payload.changes(),
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("Error updating capacity")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update capacity",
        ) from exc
    return CapacityUpdateResponse(site=site)


@router.get(
    "/check",
    response_model=CapacityCheckRead,
    summary="Check whether more students fit at a site",
)
async def check_capacity(
    site_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    capabilities: Annotated[Capabilities, Depends(deps.get_capabilities)],
    source: CapacitySource = CapacitySource.AGENCY,
    student_count: Annotated[int, Query(ge=1)] = 1,
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> CapacityCheckRead:
    if not capabilities.can_check:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    try:
        result = await capacity_service.check_capacity(
            session,
            source=source,
            site_id=site_id,
            student_count=student_count,
            on_date=on_date,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("Error checking capacity")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check capacity",
        ) from exc
    return CapacityCheckRead(**asdict(result), can_override=capabilities.can_override)


@router.get("/export.csv", summary="Export the capacity board as CSV")
async def export_capacity_csv(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    capabilities: Annotated[Capabilities, Depends(deps.get_capabilities)],
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> StreamingResponse:
    _assert_can_view(capabilities)
    snapshot = await _load_snapshot(session, on_date)
    overview = capacity_rules.aggregate(snapshot.agencies, snapshot.clinical_sites)
    rows = capacity_export.capacity_rows(overview.sites)
    filename = capacity_export.export_filename(on_date, date.today())
    return StreamingResponse(
        capacity_export.iter_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
