# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role defaults."""

from src.models.enums import UserRole

# Tokens seeded when an account becomes a plain user without an explicit set
DEFAULT_USER_PERMISSIONS = [
    "general.dashboard",
    "general.settings",
]

# Descriptions shown next to the role picker
ROLE_DESCRIPTIONS = {
    UserRole.ADMIN: "Role-implied access to every module. Super-admins may "
    "additionally manage accounts and edit approved invoices.",
    UserRole.ACCOUNTANT: "Read-only access to invoices and credentials, "
    "including secret disclosure.",
    UserRole.USER: "Access governed by explicit permission tokens, ownership "
    "and share grants.",
}
