# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for rbac_service."""

import uuid

import pytest

from src.events import AppEvent, event_bus
from src.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PermissionDenied,
)
from src.models import AdminSubRole, UserRole
from src.models.enums import Action, ResourceCategory
from src.rbac.roles import DEFAULT_USER_PERMISSIONS
from src.services import rbac_service


def test_load_principal(db_session, test_user):
    principal = rbac_service.load_principal(db_session, test_user.id)
    assert principal.id == test_user.id
    assert "tools.credentials" in principal.permissions


def test_load_principal_inactive_or_missing(db_session, make_user):
    inactive = make_user("inactive", is_active=False)
    with pytest.raises(NotFoundError):
        rbac_service.load_principal(db_session, inactive.id)
    with pytest.raises(NotFoundError):
        rbac_service.load_principal(db_session, uuid.uuid4())


def test_require_raises_denied(db_session, accountant_principal):
    with pytest.raises(PermissionDenied):
        rbac_service.require(
            db_session,
            accountant_principal,
            ResourceCategory.CREDENTIAL,
            Action.WRITE,
        )


def test_validate_permissions():
    assert rbac_service.validate_permissions(
        ["tools.credentials", "general.dashboard", "tools.credentials"]
    ) == ["general.dashboard", "tools.credentials"]
    with pytest.raises(InvalidRequestError):
        rbac_service.validate_permissions(["tools.credentials", "bogus.token"])


def test_promote_user_to_admin_clears_tokens(
    db_session, super_admin_principal, test_user
):
    user = rbac_service.update_role(
        db_session, super_admin_principal, test_user, UserRole.ADMIN
    )

    assert user.role is UserRole.ADMIN
    assert user.admin_sub_role is AdminSubRole.ADMIN
    assert user.permissions == []


def test_demote_admin_to_user_seeds_defaults(
    db_session, super_admin_principal, admin_user
):
    user = rbac_service.update_role(
        db_session, super_admin_principal, admin_user, UserRole.USER
    )

    assert user.admin_sub_role is None
    assert user.permissions == sorted(DEFAULT_USER_PERMISSIONS)


def test_role_change_to_user_with_explicit_tokens(
    db_session, super_admin_principal, accountant_user
):
    user = rbac_service.update_role(
        db_session,
        super_admin_principal,
        accountant_user,
        UserRole.USER,
        permissions=["financial.invoices"],
    )
    assert user.permissions == ["financial.invoices"]


def test_only_super_admin_changes_roles(db_session, admin_principal, other_user):
    with pytest.raises(PermissionDenied):
        rbac_service.update_role(db_session, admin_principal, other_user, UserRole.ADMIN)


def test_last_super_admin_cannot_be_demoted(
    db_session, super_admin_principal, super_admin_user
):
    with pytest.raises(InvalidRequestError):
        rbac_service.update_role(
            db_session,
            super_admin_principal,
            super_admin_user,
            UserRole.ADMIN,
            AdminSubRole.ADMIN,
        )


def test_super_admin_demotable_when_another_exists(
    db_session, super_admin_principal, make_user
):
    second = make_user("second", UserRole.ADMIN, AdminSubRole.SUPER_ADMIN)

    user = rbac_service.update_role(
        db_session, super_admin_principal, second, UserRole.ACCOUNTANT
    )
    assert user.role is UserRole.ACCOUNTANT
    assert rbac_service.count_super_admins(db_session) == 1


def test_update_role_with_stale_version_conflicts(
    db_session, super_admin_principal, other_user
):
    stale = other_user.version
    rbac_service.update_permissions(
        db_session, super_admin_principal, other_user, ["tools.credentials"]
    )

    with pytest.raises(ConflictError):
        rbac_service.update_role(
            db_session,
            super_admin_principal,
            other_user,
            UserRole.ADMIN,
            expected_version=stale,
        )


def test_update_role_publishes_event(db_session, super_admin_principal, other_user):
    received = []
    event_bus.subscribe(AppEvent.USER_ROLE_CHANGED, received.append)

    rbac_service.update_role(
        db_session,
        super_admin_principal,
        other_user,
        UserRole.ADMIN,
        AdminSubRole.SUPER_ADMIN,
    )

    assert received[0].data["role"] == "admin"
    assert received[0].data["admin_sub_role"] == "super-admin"


def test_update_permissions_only_for_users(
    db_session, super_admin_principal, accountant_user
):
    with pytest.raises(InvalidRequestError):
        rbac_service.update_permissions(
            db_session, super_admin_principal, accountant_user, ["tools.credentials"]
        )


def test_update_permissions_rejects_unknown(
    db_session, super_admin_principal, other_user
):
    with pytest.raises(InvalidRequestError):
        rbac_service.update_permissions(
            db_session, super_admin_principal, other_user, ["tools.nope"]
        )
    db_session.refresh(other_user)
    assert other_user.permissions == list(DEFAULT_USER_PERMISSIONS)
