# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.audit_entry import AuditEntry
from src.models.base import Base, TimestampMixin
from src.models.credential import Credential
from src.models.enums import (
    Action,
    AdminSubRole,
    AuditAction,
    AuditSubject,
    CredentialStatus,
    InvoiceCategory,
    InvoiceStatus,
    ResourceCategory,
    SecretField,
    SharePermission,
    UserRole,
)
from src.models.invoice import Invoice
from src.models.organization import Organization
from src.models.session import Session
from src.models.share_grant import ShareGrant
from src.models.user import User

__all__ = [
    "Action",
    "AdminSubRole",
    "AuditAction",
    "AuditEntry",
    "AuditSubject",
    "Base",
    "Credential",
    "CredentialStatus",
    "Invoice",
    "InvoiceCategory",
    "InvoiceStatus",
    "Organization",
    "ResourceCategory",
    "SecretField",
    "Session",
    "ShareGrant",
    "SharePermission",
    "TimestampMixin",
    "User",
    "UserRole",
]
