# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Credential and share grant schemas."""

import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import CredentialStatus, SecretField, SharePermission
from src.schemas.audit import AuditEntryResponse


class CredentialBase(BaseModel):
    """Base credential schema."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(None, max_length=100)
    organization_id: uuid.UUID | None = None
    notes: str | None = None
    status: CredentialStatus = CredentialStatus.ACTIVE


class CredentialCreate(CredentialBase):
    """Schema for creating a credential."""

    username: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=255)
    api_key: str | None = Field(None, max_length=500)


class CredentialUpdate(BaseModel):
    """Schema for updating a credential.

    Secret fields echoing the mask are ignored.
    """

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(None, max_length=100)
    organization_id: uuid.UUID | None = None
    notes: str | None = None
    status: CredentialStatus | None = None
    username: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=255)
    api_key: str | None = Field(None, max_length=500)
    version: int | None = None


class CredentialResponse(CredentialBase):
    """Masked credential as shown in listings and detail views."""

    id: uuid.UUID
    created_by_id: uuid.UUID
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    has_username: bool = False
    has_password: bool = False
    has_api_key: bool = False
    is_shared: bool = False
    permission: SharePermission | None = None
    shared_by: str | None = None
    version: int
    created_at: datetime.datetime
    updated_at: datetime.datetime


class SecretResponse(BaseModel):
    """A single disclosed secret value."""

    field: SecretField
    value: str | None


class AccessHistoryResponse(BaseModel):
    """Audit trail of a credential."""

    last_access: AuditEntryResponse | None = None
    entries: list[AuditEntryResponse]


class ShareCreate(BaseModel):
    """Schema for sharing a credential."""

    user_id: uuid.UUID
    permission: SharePermission = SharePermission.VIEW


class ShareGrantResponse(BaseModel):
    """Schema for an active share grant."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    credential_id: uuid.UUID
    grantee_id: uuid.UUID
    permission: SharePermission
    granted_by_id: uuid.UUID
    granted_at: datetime.datetime
