# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Closed catalogue of permission tokens.

Tokens only mean something inside their module, so they are stored on the
user as ``"<module>.<token>"`` codes. The catalogue ships with the UI and is
bumped together with it; users cannot extend it.
"""

from collections.abc import Iterable

CATALOGUE_VERSION = "2025.1"

PERMISSION_MODULES: dict[str, dict] = {
    "general": {
        "label": "General",
        "tokens": {"dashboard": "Dashboard", "settings": "Settings"},
    },
    "management": {
        "label": "Management",
        "tokens": {
            "employees": "Employees",
            "admins": "Admins",
            "users": "Users",
            "organizations": "Organizations",
            "customers": "Customers",
        },
    },
    "requests": {
        "label": "Requests",
        "tokens": {"submission": "Payroll Submission"},
    },
    "tools": {
        "label": "Tools & Resources",
        "tokens": {"tools": "Tools", "credentials": "Credentials", "assets": "Assets"},
    },
    "financial": {
        "label": "Financial",
        "tokens": {"payroll": "Payroll", "invoices": "Invoices"},
    },
    "intelligence": {
        "label": "Intelligence",
        "tokens": {
            "analytics": "Analytics",
            "ai": "AI Features",
            "automation": "Automation",
        },
    },
    "communication": {
        "label": "Communication",
        "tokens": {"messages": "Messages", "emails": "Emails", "domains": "Domains"},
    },
    "system": {
        "label": "System",
        "tokens": {"security": "Security", "logs": "Logs", "help": "Help"},
    },
}

# Flat view in the same shape as the registered permission rows elsewhere
CORE_PERMISSIONS = [
    {"code": f"{module}.{token}", "module": module, "description": label}
    for module, spec in PERMISSION_MODULES.items()
    for token, label in spec["tokens"].items()
]

ALL_PERMISSION_CODES = frozenset(p["code"] for p in CORE_PERMISSIONS)


def permission_code(module: str, token: str) -> str:
    """Build the stored code for a token within its module."""
    return f"{module}.{token}"


def is_known_token(module: str, token: str) -> bool:
    """Check that a token exists within the given module."""
    spec = PERMISSION_MODULES.get(module)
    return spec is not None and token in spec["tokens"]


def unknown_codes(codes: Iterable[str]) -> list[str]:
    """Return the codes that are not part of the catalogue, in input order."""
    return [code for code in codes if code not in ALL_PERMISSION_CODES]
