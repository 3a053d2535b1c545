# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Services package."""
from src.services import (
    audit_service,
    auth_service,
    credential_service,
    disclosure_service,
    invoice_service,
    rbac_service,
    share_service,
    store,
)

__all__ = [
    "audit_service",
    "auth_service",
    "credential_service",
    "disclosure_service",
    "invoice_service",
    "rbac_service",
    "share_service",
    "store",
]
