"""Bootstrap helpers for default data."""

from __future__ import annotations

import logging

from clinical_capacity.core.config import get_settings
from clinical_capacity.db.session import session_scope
from clinical_capacity.models import UserRole, UserStatus
from clinical_capacity.schemas.user import UserCreate
from clinical_capacity.services.user_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)


async def ensure_default_admin() -> bool:
    """Create the configured bootstrap admin if it does not exist yet.

    Returns True when a user was created.
    """
    settings = get_settings()
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return False

    async with session_scope(settings.database_url) as session:
        if await get_user_by_email(session, settings.bootstrap_admin_email) is not None:
            return False
        payload = UserCreate(
            email=settings.bootstrap_admin_email,
            password=settings.bootstrap_admin_password,
            first_name="Program",
            last_name="Admin",
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        await create_user(session, payload)
    logger.info("Created bootstrap admin account")
    return True
