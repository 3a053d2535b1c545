# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Principal loading, permission checks against stored state, role updates."""

import logging
import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.exceptions import InvalidRequestError, NotFoundError, PermissionDenied
from src.models import Credential, ShareGrant, User
from src.models.enums import (
    Action,
    AdminSubRole,
    ResourceCategory,
    SharePermission,
    UserRole,
)
from src.rbac import policy
from src.rbac.permissions import unknown_codes
from src.rbac.principal import Principal, is_super_admin, normalize_assignment
from src.rbac.roles import DEFAULT_USER_PERMISSIONS
from src.services import store

logger = logging.getLogger(__name__)


def load_principal(db: Session, user_id: uuid.UUID) -> Principal:
    """Load the principal for an active account."""
    user = store.load_principal_record(db, user_id)
    if not user.is_active:
        raise NotFoundError("User not found")
    return Principal.from_user(user)


def active_share(
    db: Session, principal: Principal, credential: Credential
) -> SharePermission | None:
    """The principal's active share level on ``credential``, if any."""
    grant = (
        db.query(ShareGrant)
        .filter(
            ShareGrant.credential_id == credential.id,
            ShareGrant.grantee_id == principal.id,
            ShareGrant.revoked_at.is_(None),
        )
        .first()
    )
    return grant.permission if grant else None


def can_perform(
    db: Session,
    principal: Principal,
    category: ResourceCategory,
    action: Action,
    resource: Any = None,
) -> bool:
    """Evaluate the policy, looking up share grants for credential resources."""
    share = None
    if category is ResourceCategory.CREDENTIAL and resource is not None:
        share = active_share(db, principal, resource)
    return policy.can_perform(principal, category, action, resource, share)


def require(
    db: Session,
    principal: Principal,
    category: ResourceCategory,
    action: Action,
    resource: Any = None,
    message: str | None = None,
) -> None:
    """Raise PermissionDenied unless the action is allowed."""
    if not can_perform(db, principal, category, action, resource):
        logger.debug(
            f"Denied {action.value} on {category.value} for principal {principal.id}"
        )
        raise PermissionDenied(message)


def validate_permissions(codes: Iterable[str]) -> list[str]:
    """Reject codes outside the catalogue; return the de-duplicated list."""
    codes = list(codes)
    unknown = unknown_codes(codes)
    if unknown:
        raise InvalidRequestError(f"Unknown permission tokens: {unknown}")
    return sorted(set(codes))


def count_super_admins(db: Session) -> int:
    return (
        db.query(User)
        .filter(
            User.role == UserRole.ADMIN,
            User.admin_sub_role == AdminSubRole.SUPER_ADMIN,
            User.is_active.is_(True),
        )
        .count()
    )


def update_role(
    db: Session,
    actor: Principal,
    user: User,
    role: UserRole,
    admin_sub_role: AdminSubRole | None = None,
    permissions: list[str] | None = None,
    expected_version: int | None = None,
) -> User:
    """Change an account's role, keeping sub-role and tokens exclusive.

    Moving to ``admin`` clears tokens and sets the sub-role (``admin``
    unless super-admin is requested). Moving to ``user`` clears the
    sub-role and seeds tokens, from ``permissions`` or the defaults.
    Moving to ``accountant`` clears both.

    Raises:
        PermissionDenied: The actor is not a super-admin
        InvalidRequestError: Unknown tokens, or the last super-admin would
            be demoted
        ConflictError: The account changed since it was read
    """
    if not policy.can_perform(actor, ResourceCategory.USER_ACCOUNT, Action.WRITE, user):
        raise PermissionDenied("Only a super-admin can change roles")

    if role is UserRole.USER and permissions is None:
        permissions = DEFAULT_USER_PERMISSIONS
    if permissions is not None:
        permissions = validate_permissions(permissions)

    new_role, new_sub_role, new_permissions = normalize_assignment(
        role, admin_sub_role, permissions
    )

    current = Principal.from_user(user)
    if is_super_admin(current) and new_sub_role is not AdminSubRole.SUPER_ADMIN:
        if count_super_admins(db) <= 1:
            raise InvalidRequestError("Cannot demote the last super-admin")

    store.cas_update(
        db,
        user,
        expected_version,
        {
            "role": new_role,
            "admin_sub_role": new_sub_role,
            "permissions": new_permissions,
        },
    )
    logger.info(
        f"User {user.id} role set to {new_role.value}"
        f"{'/' + new_sub_role.value if new_sub_role else ''} by {actor.id}"
    )
    event_bus.publish_sync(
        AppEvent.USER_ROLE_CHANGED,
        {
            "user_id": str(user.id),
            "role": new_role.value,
            "admin_sub_role": new_sub_role.value if new_sub_role else None,
            "changed_by": str(actor.id),
        },
    )
    return user


def update_permissions(
    db: Session,
    actor: Principal,
    user: User,
    permissions: list[str],
    expected_version: int | None = None,
) -> User:
    """Replace the token set of a plain user."""
    if not policy.can_perform(actor, ResourceCategory.USER_ACCOUNT, Action.WRITE, user):
        raise PermissionDenied("Only a super-admin can assign permissions")
    if user.role is not UserRole.USER:
        raise InvalidRequestError("Permission tokens only apply to the user role")
    return store.cas_update(
        db,
        user,
        expected_version,
        {"permissions": validate_permissions(permissions)},
    )
