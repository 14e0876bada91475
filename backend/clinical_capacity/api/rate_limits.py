"""Redis-backed request throttling for the API routers."""

from __future__ import annotations

from fastapi import Depends, Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

from clinical_capacity.core.config import get_settings

_SECONDS_PER_UNIT = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Turn ``"10/minute"`` into ``(10, 60)``; malformed values use ``fallback``."""
    count_str, _, window = value.partition("/")
    try:
        count = int(count_str.strip())
    except ValueError:
        return fallback
    seconds = _SECONDS_PER_UNIT.get(window.strip().lower())
    if count < 1 or seconds is None:
        return fallback
    return count, seconds


def rate_limit(limit: tuple[int, int]):
    """Dependency enforcing ``limit``; a no-op until the limiter is initialized."""

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


_settings = get_settings()

LOGIN_RATE_LIMIT = rate_limit(parse_rate(_settings.rate_limit_login, fallback=(10, 60)))
DEFAULT_RATE_LIMIT = rate_limit(parse_rate(_settings.rate_limit_default, fallback=(100, 60)))
