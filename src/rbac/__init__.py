# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Identity model, permission resolver and invoice lifecycle."""

from src.rbac.policy import can_manage_grants, can_perform
from src.rbac.principal import (
    Principal,
    has_token,
    is_accountant,
    is_admin,
    is_super_admin,
    is_user,
)

__all__ = [
    "Principal",
    "can_manage_grants",
    "can_perform",
    "has_token",
    "is_accountant",
    "is_admin",
    "is_super_admin",
    "is_user",
]
