# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Principal: the authorization view of an account.

A principal is a tagged variant on ``role``. Admins carry an
``admin_sub_role`` and no tokens, accountants carry neither, plain users
carry tokens and no sub-role. Construction normalizes any input into one
of those three shapes, so predicates never see a mixed record.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.models.enums import AdminSubRole, UserRole
from src.rbac.permissions import is_known_token, permission_code

if TYPE_CHECKING:
    from src.models.user import User

SUPER_ADMIN_TIER = "super-admin"
ADMIN_TIER = "admin"
ACCOUNTANT_TIER = "accountant"
USER_TIER = "user"


def _coerce_role(value: UserRole | str | None) -> UserRole | None:
    try:
        return UserRole(value)
    except ValueError:
        return None


def _coerce_sub_role(value: AdminSubRole | str | None) -> AdminSubRole:
    # Only an explicit super-admin marker yields super-admin
    try:
        return AdminSubRole(value)
    except ValueError:
        return AdminSubRole.ADMIN


@dataclass(frozen=True)
class Principal:
    """Authenticated actor whose rights are being evaluated."""

    id: uuid.UUID
    role: UserRole
    admin_sub_role: AdminSubRole | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    organization_id: uuid.UUID | None = None

    def __post_init__(self) -> None:
        role = _coerce_role(self.role)
        # Missing or unknown roles get the least-privileged shape: no tokens
        recognized = role is not None
        role = role or UserRole.USER
        object.__setattr__(self, "role", role)

        if role is UserRole.ADMIN:
            object.__setattr__(
                self, "admin_sub_role", _coerce_sub_role(self.admin_sub_role)
            )
            object.__setattr__(self, "permissions", frozenset())
        elif role is UserRole.ACCOUNTANT:
            object.__setattr__(self, "admin_sub_role", None)
            object.__setattr__(self, "permissions", frozenset())
        else:
            object.__setattr__(self, "admin_sub_role", None)
            tokens = frozenset(self.permissions or ()) if recognized else frozenset()
            object.__setattr__(self, "permissions", tokens)

    @classmethod
    def from_user(cls, user: User) -> Principal:
        """Build a principal from a persisted account."""
        return cls(
            id=user.id,
            role=user.role,
            admin_sub_role=user.admin_sub_role,
            permissions=frozenset(user.permissions or ()),
            organization_id=user.organization_id,
        )

    @property
    def tier(self) -> str:
        """Role with the admin sub-role folded in, used as a policy table key."""
        if self.role is UserRole.ADMIN:
            if self.admin_sub_role is AdminSubRole.SUPER_ADMIN:
                return SUPER_ADMIN_TIER
            return ADMIN_TIER
        if self.role is UserRole.ACCOUNTANT:
            return ACCOUNTANT_TIER
        return USER_TIER


def is_admin(principal: Principal) -> bool:
    """True for both admin tiers."""
    return principal.role is UserRole.ADMIN


def is_super_admin(principal: Principal) -> bool:
    return (
        principal.role is UserRole.ADMIN
        and principal.admin_sub_role is AdminSubRole.SUPER_ADMIN
    )


def is_accountant(principal: Principal) -> bool:
    return principal.role is UserRole.ACCOUNTANT


def is_user(principal: Principal) -> bool:
    return principal.role is UserRole.USER


def has_token(principal: Principal, module: str, token: str) -> bool:
    """Check an explicit permission token.

    Always false for admins and accountants: their access is implied by
    role and resolved by the policy, not by tokens.
    """
    if not is_user(principal) or not is_known_token(module, token):
        return False
    return permission_code(module, token) in principal.permissions


def normalize_assignment(
    role: UserRole | str | None,
    admin_sub_role: AdminSubRole | str | None,
    permissions: Iterable[str] | None,
) -> tuple[UserRole, AdminSubRole | None, list[str]]:
    """Resolve a role change into the exclusive (role, sub-role, tokens) triple."""
    shaped = Principal(
        id=uuid.UUID(int=0),
        role=role,
        admin_sub_role=admin_sub_role,
        permissions=frozenset(permissions or ()),
    )
    return shaped.role, shaped.admin_sub_role, sorted(shaped.permissions)
