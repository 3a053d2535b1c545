# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Pydantic schemas package."""
from src.schemas.audit import AuditEntryResponse
from src.schemas.auth import AuthResponse, LoginRequest
from src.schemas.common import CountResponse, HealthResponse
from src.schemas.credential import (
    AccessHistoryResponse,
    CredentialCreate,
    CredentialResponse,
    CredentialUpdate,
    SecretResponse,
    ShareCreate,
    ShareGrantResponse,
)
from src.schemas.invoice import (
    InvoiceApprove,
    InvoiceCreate,
    InvoiceReject,
    InvoiceResponse,
    InvoiceSummary,
    InvoiceUpdate,
)
from src.schemas.rbac import PermissionCatalogueSchema
from src.schemas.user import (
    PermissionsUpdate,
    RoleUpdate,
    ShareableUser,
    UserCreate,
    UserResponse,
)

__all__ = [
    "AccessHistoryResponse",
    "AuditEntryResponse",
    "AuthResponse",
    "CountResponse",
    "CredentialCreate",
    "CredentialResponse",
    "CredentialUpdate",
    "HealthResponse",
    "InvoiceApprove",
    "InvoiceCreate",
    "InvoiceReject",
    "InvoiceResponse",
    "InvoiceSummary",
    "InvoiceUpdate",
    "LoginRequest",
    "PermissionCatalogueSchema",
    "PermissionsUpdate",
    "RoleUpdate",
    "SecretResponse",
    "ShareCreate",
    "ShareGrantResponse",
    "ShareableUser",
    "UserCreate",
    "UserResponse",
]
