"""Async HTTP client for the clinical capacity API."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from clinical_capacity.client.exceptions import (
    CapacityNetworkError,
    CapacityServerError,
)
from clinical_capacity.schemas.capacity import (
    CapacityCheckRead,
    CapacityListResponse,
    CapacitySite,
    CapacitySource,
    CapacityUpdateResponse,
)
from clinical_capacity.schemas.user import UserRead

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

LOAD_FAILED = "Failed to load capacity data"
SAVE_FAILED = "Failed to save capacity"
CHECK_FAILED = "Failed to check capacity"


def _server_message(response: httpx.Response, fallback: str) -> str:
    """Prefer the ``error`` (or ``detail``) string the server sent."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def _parse(response: httpx.Response, model: type[_ModelT], fallback: str) -> _ModelT:
    """Validate a success body, treating malformed payloads as server errors."""
    try:
        return model.model_validate(response.json())
    except ValueError as exc:
        logger.warning("Unreadable %s response from %s", response.status_code, response.url)
        raise CapacityServerError(fallback, response.status_code) from exc


class CapacityApiClient:
    """Client for the ``/clinical/capacity`` endpoints.

    Use as an async context manager::

        async with CapacityApiClient("https://pmi.example.edu", token=token) as api:
            data = await api.fetch_capacity()
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        api_prefix: str = "/api/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.api_prefix = api_prefix.rstrip("/")
        self.token = token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "CapacityApiClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=self._timeout, transport=self._transport
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _request(
        self, method: str, path: str, *, fallback: str, **kwargs: Any
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("CapacityApiClient must be used as an async context manager")
        try:
            response = await self._client.request(
                method, f"{self.api_prefix}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise CapacityNetworkError(fallback) from exc
        if response.is_error:
            raise CapacityServerError(_server_message(response, fallback), response.status_code)
        return response

    async def login(self, email: str, password: str) -> str:
        """Exchange credentials for a bearer token and keep it for later calls."""
        response = await self._request(
            "POST",
            "/auth/token",
            fallback="Login failed",
            data={"username": email, "password": password},
        )
        try:
            token = response.json()["access_token"]
        except (ValueError, KeyError, TypeError) as exc:
            raise CapacityServerError("Login failed", response.status_code) from exc
        self.token = token
        return token

    async def me(self) -> UserRead:
        response = await self._request("GET", "/users/me", fallback="Failed to load user")
        return _parse(response, UserRead, "Failed to load user")

    async def fetch_capacity(self, on_date: date | None = None) -> CapacityListResponse:
        params = {"date": on_date.isoformat()} if on_date else None
        response = await self._request(
            "GET", "/clinical/capacity", fallback=LOAD_FAILED, params=params
        )
        return _parse(response, CapacityListResponse, LOAD_FAILED)

    async def update_capacity(
        self,
        *,
        site_id: uuid.UUID,
        source: CapacitySource,
        max_students_per_day: int,
        max_students_per_rotation: int | None,
        capacity_notes: str | None,
    ) -> CapacitySite:
        """PATCH a site's limits; ``source`` routes the write to the right table."""
        response = await self._request(
            "PATCH",
            "/clinical/capacity",
            fallback=SAVE_FAILED,
            json={
                "site_id": str(site_id),
                "source": source.value,
                "max_students_per_day": max_students_per_day,
                "max_students_per_rotation": max_students_per_rotation,
                "capacity_notes": capacity_notes,
            },
        )
        return _parse(response, CapacityUpdateResponse, SAVE_FAILED).site

    async def check_capacity(
        self,
        *,
        site_id: uuid.UUID,
        source: CapacitySource = CapacitySource.AGENCY,
        student_count: int = 1,
        on_date: date | None = None,
    ) -> CapacityCheckRead:
        params: dict[str, str] = {
            "site_id": str(site_id),
            "source": source.value,
            "student_count": str(student_count),
        }
        if on_date:
            params["date"] = on_date.isoformat()
        response = await self._request(
            "GET", "/clinical/capacity/check", fallback=CHECK_FAILED, params=params
        )
        return _parse(response, CapacityCheckRead, CHECK_FAILED)

    async def export_csv(self, on_date: date | None = None) -> str:
        params = {"date": on_date.isoformat()} if on_date else None
        response = await self._request(
            "GET", "/clinical/capacity/export.csv", fallback=LOAD_FAILED, params=params
        )
        return response.text
