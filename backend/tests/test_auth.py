"""Authentication and current-user tests."""
from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _token(client: AsyncClient, email: str, password: str):
    return await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )


async def test_login_issues_bearer_token(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await _token(client, app_context["admin_email"], app_context["password"])  # type: ignore[arg-type]
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]


async def test_login_is_case_insensitive_on_email(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await _token(client, "ADMIN@Example.edu", app_context["password"])  # type: ignore[arg-type]
    assert response.status_code == 200


async def test_login_rejects_bad_password(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await _token(client, app_context["admin_email"], "wrong-password")  # type: ignore[arg-type]
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


async def test_login_rejects_suspended_user(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await _token(client, app_context["suspended_email"], app_context["password"])  # type: ignore[arg-type]
    assert response.status_code == 401


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        ("superadmin", (True, True, True, True)),
        ("admin", (True, True, True, True)),
        ("lead_instructor", (True, False, True, False)),
        ("instructor", (False, False, True, False)),
        ("guest", (False, False, False, False)),
    ],
)
async def test_me_reports_capabilities(
    app_context: dict[str, object], role: str, expected: tuple[bool, bool, bool, bool]
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    token_resp = await _token(client, app_context[f"{role}_email"], app_context["password"])  # type: ignore[arg-type]
    token = token_resp.json()["access_token"]

    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == role
    capabilities = body["capabilities"]
    assert (
        capabilities["can_view"],
        capabilities["can_edit"],
        capabilities["can_check"],
        capabilities["can_override"],
    ) == expected


async def test_me_requires_valid_token(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    missing = await client.get("/api/v1/users/me")
    assert missing.status_code == 401

    garbage = await client.get(
        "/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert garbage.status_code == 401
    assert garbage.json()["detail"] == "Unauthorized"

