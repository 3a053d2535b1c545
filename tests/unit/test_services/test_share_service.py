# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for share_service."""

import uuid

import pytest

from src.events import AppEvent, event_bus
from src.exceptions import InvalidRequestError, NotFoundError, PermissionDenied
from src.models import ShareGrant
from src.models.enums import Action, ResourceCategory, SharePermission, UserRole
from src.services import credential_service, rbac_service, share_service


def test_grant_creates_single_row(db_session, credential, user_principal, other_user):
    grant = share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )

    assert grant.permission is SharePermission.VIEW
    assert grant.granted_by_id == user_principal.id
    assert grant.is_active


def test_regrant_replaces_level_without_duplicates(
    db_session, credential, user_principal, other_user
):
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.EDIT
    )

    rows = db_session.query(ShareGrant).filter_by(credential_id=credential.id).all()
    assert len(rows) == 1
    assert rows[0].permission is SharePermission.EDIT


def test_edit_grant_allows_everything_view_allows(
    db_session, credential, user_principal, other_user, other_principal
):
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )
    view_rights = {
        action: rbac_service.can_perform(
            db_session, other_principal, ResourceCategory.CREDENTIAL, action, credential
        )
        for action in Action
    }

    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.EDIT
    )
    edit_rights = {
        action: rbac_service.can_perform(
            db_session, other_principal, ResourceCategory.CREDENTIAL, action, credential
        )
        for action in Action
    }

    for action, allowed in view_rights.items():
        if allowed:
            assert edit_rights[action], action
    assert edit_rights[Action.WRITE] and not view_rights[Action.WRITE]


def test_revoke_removes_view_and_edit(
    db_session, credential, user_principal, other_user, other_principal
):
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.EDIT
    )
    share_service.revoke(db_session, user_principal, credential.id, other_user.id)

    for action in (Action.READ, Action.DISCLOSE, Action.WRITE):
        assert not rbac_service.can_perform(
            db_session, other_principal, ResourceCategory.CREDENTIAL, action, credential
        )


def test_regrant_after_revoke_reactivates_row(
    db_session, credential, user_principal, other_user
):
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )
    share_service.revoke(db_session, user_principal, credential.id, other_user.id)
    grant = share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )

    assert grant.is_active
    assert db_session.query(ShareGrant).count() == 1


def test_revoke_without_grant_is_not_found(
    db_session, credential, user_principal, other_user
):
    with pytest.raises(NotFoundError):
        share_service.revoke(db_session, user_principal, credential.id, other_user.id)


def test_grantee_cannot_reshare(
    db_session, credential, user_principal, other_user, other_principal, make_user
):
    third = make_user("thirduser")
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.EDIT
    )

    with pytest.raises(PermissionDenied):
        share_service.grant(
            db_session, other_principal, credential.id, third.id, SharePermission.VIEW
        )


def test_accountant_cannot_share(
    db_session, credential, accountant_principal, other_user
):
    with pytest.raises(PermissionDenied):
        share_service.grant(
            db_session,
            accountant_principal,
            credential.id,
            other_user.id,
            SharePermission.VIEW,
        )


def test_admin_can_share_any_credential(
    db_session, credential, admin_principal, other_user
):
    grant = share_service.grant(
        db_session, admin_principal, credential.id, other_user.id, SharePermission.VIEW
    )
    assert grant.granted_by_id == admin_principal.id


def test_self_share_rejected(db_session, credential, user_principal):
    with pytest.raises(InvalidRequestError):
        share_service.grant(
            db_session,
            user_principal,
            credential.id,
            user_principal.id,
            SharePermission.VIEW,
        )


def test_inactive_grantee_rejected(db_session, credential, user_principal, make_user):
    inactive = make_user("gone", is_active=False)
    with pytest.raises(InvalidRequestError):
        share_service.grant(
            db_session, user_principal, credential.id, inactive.id, SharePermission.VIEW
        )


def test_unknown_grantee_not_found(db_session, credential, user_principal):
    with pytest.raises(NotFoundError):
        share_service.grant(
            db_session, user_principal, credential.id, uuid.uuid4(), SharePermission.VIEW
        )


def test_grants_for_ordered_by_grant_time(
    db_session, credential, user_principal, make_user
):
    first = make_user("first")
    second = make_user("second")
    share_service.grant(
        db_session, user_principal, credential.id, first.id, SharePermission.VIEW
    )
    share_service.grant(
        db_session, user_principal, credential.id, second.id, SharePermission.EDIT
    )

    grants = share_service.grants_for(db_session, user_principal, credential.id)
    assert [g.grantee_id for g in grants] == [first.id, second.id]


def test_grants_for_hidden_from_strangers(db_session, credential, other_principal):
    with pytest.raises(PermissionDenied):
        share_service.grants_for(db_session, other_principal, credential.id)


def test_share_event_published(db_session, credential, user_principal, other_user):
    received = []
    event_bus.subscribe(AppEvent.CREDENTIAL_SHARED, received.append, "email")

    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.EDIT
    )

    assert len(received) == 1
    data = received[0].data
    assert data["credential_name"] == "GitHub"
    assert data["grantee_email"] == "otheruser@example.com"
    assert data["shared_by_name"] == "Testuser"
    assert data["permission"] == "edit"


def test_deleting_credential_removes_grants(
    db_session, credential, user_principal, admin_principal, other_user
):
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )

    credential_service.delete_credential(db_session, admin_principal, credential.id)

    assert db_session.query(ShareGrant).count() == 0


def test_shareable_users_lists_active_plain_users(
    db_session, admin_principal, test_user, other_user, accountant_user, make_user
):
    make_user("inactive", is_active=False)

    users = share_service.shareable_users(db_session, admin_principal)

    assert {u.username for u in users} == {"testuser", "otheruser"}
    assert all(u.role is UserRole.USER for u in users)


def test_shareable_users_admin_only(db_session, user_principal):
    with pytest.raises(PermissionDenied):
        share_service.shareable_users(db_session, user_principal)


def test_shared_with(db_session, credential, user_principal, other_user):
    share_service.grant(
        db_session, user_principal, credential.id, other_user.id, SharePermission.VIEW
    )
    grants = share_service.shared_with(db_session, other_user.id)
    assert [g.credential_id for g in grants] == [credential.id]
    assert share_service.shared_with(db_session, uuid.uuid4()) == []


def test_principal_unaffected_by_grant_on_other_credential(
    db_session, make_credential, test_user, user_principal, other_user, other_principal
):
    shared = make_credential(test_user, name="Shared")
    private = make_credential(test_user, name="Private")
    share_service.grant(
        db_session, user_principal, shared.id, other_user.id, SharePermission.VIEW
    )

    assert not rbac_service.can_perform(
        db_session, other_principal, ResourceCategory.CREDENTIAL, Action.READ, private
    )
