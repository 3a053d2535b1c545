# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models and access decisions."""

from enum import Enum


class UserRole(str, Enum):
    """Principal role enumeration."""

    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    USER = "user"


class AdminSubRole(str, Enum):
    """Admin tier. Only meaningful when the role is ADMIN."""

    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


class CredentialStatus(str, Enum):
    """Credential status enumeration."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class SharePermission(str, Enum):
    """Level of a share grant. EDIT implies VIEW."""

    VIEW = "view"
    EDIT = "edit"


class SecretField(str, Enum):
    """Credential fields that are masked outside a disclosure request."""

    USERNAME = "username"
    PASSWORD = "password"
    API_KEY = "api_key"


class InvoiceStatus(str, Enum):
    """Invoice status enumeration.

    Status flow:
        PENDING → APPROVED
           ↓
        REJECTED → (corrected) → APPROVED

    Nothing moves back to PENDING; a resubmission is a new invoice.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InvoiceCategory(str, Enum):
    """Invoice category. Employee payments are excluded from bulk clear."""

    REGULAR = "regular"
    EMPLOYEE_PAYMENT = "employee_payment"


class ResourceCategory(str, Enum):
    """Resource categories understood by the permission resolver."""

    CREDENTIAL = "credential"
    INVOICE = "invoice"
    USER_ACCOUNT = "user-account"
    ORGANIZATION = "organization"


class Action(str, Enum):
    """Actions a principal may request on a resource."""

    READ = "read"
    WRITE = "write"
    DISCLOSE = "disclose"
    DELETE = "delete"
    BULK_DELETE = "bulk-delete"
    APPROVE = "approve"


class AuditSubject(str, Enum):
    """Subject types recorded in the audit trail."""

    CREDENTIAL = "credential"
    INVOICE = "invoice"


class AuditAction(str, Enum):
    """Audit trail action enumeration."""

    DISCLOSE = "disclose"
    CREDENTIAL_CREATED = "credential_created"
    CREDENTIAL_UPDATED = "credential_updated"
    CREDENTIAL_DELETED = "credential_deleted"
    SHARE_GRANTED = "share_granted"
    SHARE_REVOKED = "share_revoked"
    INVOICE_CREATED = "invoice_created"
    INVOICE_UPDATED = "invoice_updated"
    INVOICE_APPROVED = "invoice_approved"
    INVOICE_REJECTED = "invoice_rejected"
    INVOICE_DELETED = "invoice_deleted"
