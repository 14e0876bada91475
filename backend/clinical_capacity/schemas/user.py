"""User-related schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinical_capacity.models.user import UserRole, UserStatus


class UserCreate(BaseModel):
    """Payload for creating a user."""

    email: str
    first_name: str
    last_name: str
    password: str = Field(min_length=8)
    role: UserRole = UserRole.INSTRUCTOR
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        email = value.strip().lower()
        local_part, _, domain = email.partition("@")
        if not local_part or not domain:
            raise ValueError("email must contain a local part and a domain")
        return email


class CapabilitiesRead(BaseModel):
    """Capacity board permissions derived from the user's role."""

    can_view: bool
    can_edit: bool
    can_check: bool
    can_override: bool

    model_config = ConfigDict(from_attributes=True)


class UserRead(BaseModel):
    """Serialized user with derived capabilities."""

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    capabilities: CapabilitiesRead

    model_config = ConfigDict(from_attributes=True)
