# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User schemas."""
import datetime
import re
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from src.models.enums import AdminSubRole, UserRole

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


class UserBase(BaseModel):
    """Base user schema."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username must contain only alphanumeric characters and underscores")
        return v


class UserCreate(UserBase):
    """Schema for creating a user (super-admin use)."""

    password: str = Field(..., min_length=8)
    full_name: str | None = Field(None, max_length=200)
    role: UserRole = UserRole.USER
    admin_sub_role: AdminSubRole | None = None
    permissions: list[str] | None = None
    organization_id: uuid.UUID | None = None


class RoleUpdate(BaseModel):
    """Schema for changing a user's role.

    ``admin_sub_role`` only applies to admins and ``permissions`` only to
    plain users; values that do not fit the role are dropped.
    """

    role: UserRole
    admin_sub_role: AdminSubRole | None = None
    permissions: list[str] | None = None
    version: int | None = None


class PermissionsUpdate(BaseModel):
    """Schema for replacing a plain user's permission tokens."""

    permissions: list[str]
    version: int | None = None


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None
    is_active: bool
    role: UserRole
    admin_sub_role: AdminSubRole | None = None
    permissions: list[str] = []
    organization_id: uuid.UUID | None = None
    version: int
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ShareableUser(BaseModel):
    """A user a credential can be shared with."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None
