"""Create a local superadmin for development logins."""
from __future__ import annotations

import asyncio

from clinical_capacity.db.session import session_scope
from clinical_capacity.models import UserRole, UserStatus
from clinical_capacity.schemas.user import UserCreate
from clinical_capacity.services.user_service import create_user, get_user_by_email

EMAIL = "admin@pmi.local"
PASSWORD = "admin1234"


async def main() -> None:
    async with session_scope() as session:
        if await get_user_by_email(session, EMAIL) is not None:
            print(f"User {EMAIL} already exists")
            return
        await create_user(
            session,
            UserCreate(
                email=EMAIL,
                password=PASSWORD,
                first_name="Dev",
                last_name="Admin",
                role=UserRole.SUPERADMIN,
                status=UserStatus.ACTIVE,
            ),
        )
        print(f"Created superadmin {EMAIL} / {PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
