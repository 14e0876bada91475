"""Current-user endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends

from clinical_capacity.api import deps
from clinical_capacity.models.user import User
from clinical_capacity.schemas.user import CapabilitiesRead, UserRead
from clinical_capacity.security.permissions import Capabilities

router = APIRouter()


@router.get("/me", response_model=UserRead, summary="Current user and capabilities")
async def read_current_user(
    current_user: Annotated[User, Depends(deps.get_current_user)],
    capabilities: Annotated[Capabilities, Depends(deps.get_capabilities)],
) -> UserRead:
    return UserRead(
        id=current_user.id,
        email=current_user.email,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        role=current_user.role,
        status=current_user.status,
        capabilities=CapabilitiesRead(**asdict(capabilities)),
    )
