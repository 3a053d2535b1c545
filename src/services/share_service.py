# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Share grants: per-user view/edit access to a single credential."""

import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.exceptions import InvalidRequestError, NotFoundError, PermissionDenied
from src.models import Credential, ShareGrant, User
from src.models.enums import (
    Action,
    AuditAction,
    AuditSubject,
    ResourceCategory,
    SharePermission,
    UserRole,
)
from src.rbac import policy
from src.rbac.principal import Principal, is_admin
from src.services import audit_service, rbac_service, store

logger = logging.getLogger(__name__)


def _require_manage(principal: Principal, credential: Credential) -> None:
    if not policy.can_manage_grants(principal, credential):
        logger.debug(
            f"Denied share management on {credential.id} for principal {principal.id}"
        )
        raise PermissionDenied("Only the owner or an admin can manage sharing")


def get_grant(
    db: Session, credential_id: uuid.UUID, grantee_id: uuid.UUID
) -> ShareGrant | None:
    """The grant row for a pair, active or revoked."""
    return (
        db.query(ShareGrant)
        .filter(
            ShareGrant.credential_id == credential_id,
            ShareGrant.grantee_id == grantee_id,
        )
        .first()
    )


def active_grant(
    db: Session, credential_id: uuid.UUID, grantee_id: uuid.UUID
) -> ShareGrant | None:
    grant = get_grant(db, credential_id, grantee_id)
    if grant is None or not grant.is_active:
        return None
    return grant


def grant(
    db: Session,
    actor: Principal,
    credential_id: uuid.UUID,
    grantee_id: uuid.UUID,
    permission: SharePermission,
) -> ShareGrant:
    """Share a credential with a user, replacing any existing level.

    A pair has one row. Re-granting updates its level and grant time and
    clears a previous revocation; it never adds a second row.

    Raises:
        NotFoundError: The credential or the grantee does not exist
        PermissionDenied: ``actor`` is neither the owner nor an admin
        InvalidRequestError: Sharing with oneself or with an inactive account
        ConflictError: A concurrent grant on the same pair won
    """
    credential = store.load_credential(db, credential_id)
    _require_manage(actor, credential)

    if grantee_id == actor.id:
        raise InvalidRequestError("You cannot share a credential with yourself")
    grantee = db.get(User, grantee_id)
    if grantee is None:
        raise NotFoundError("User not found")
    if not grantee.is_active:
        raise InvalidRequestError("Cannot share with an inactive account")

    permission = SharePermission(permission)
    now = datetime.utcnow()
    existing = get_grant(db, credential.id, grantee.id)
    if existing is None:
        share = ShareGrant(
            credential_id=credential.id,
            grantee_id=grantee.id,
            permission=permission,
            granted_by_id=actor.id,
            granted_at=now,
        )
        with store.guarded_write(db):
            db.add(share)
        db.refresh(share)
    else:
        share = store.cas_update(
            db,
            existing,
            existing.version,
            {
                "permission": permission,
                "granted_by_id": actor.id,
                "granted_at": now,
                "revoked_at": None,
            },
        )

    audit_service.record(
        db,
        AuditSubject.CREDENTIAL,
        credential.id,
        actor.id,
        AuditAction.SHARE_GRANTED,
        details={"grantee_id": str(grantee.id), "permission": permission.value},
    )
    logger.info(
        f"Credential {credential.id} shared with {grantee.id} "
        f"({permission.value}) by {actor.id}"
    )

    sharer = db.get(User, actor.id)
    event_bus.publish_sync(
        AppEvent.CREDENTIAL_SHARED,
        {
            "credential_id": str(credential.id),
            "credential_name": credential.name,
            "grantee_id": str(grantee.id),
            "grantee_email": grantee.email,
            "grantee_name": grantee.full_name or grantee.username,
            "shared_by_name": (sharer.full_name or sharer.username) if sharer else None,
            "permission": permission.value,
        },
    )
    return share


def revoke(
    db: Session, actor: Principal, credential_id: uuid.UUID, grantee_id: uuid.UUID
) -> None:
    """Withdraw a user's access; view and edit go together.

    Raises:
        NotFoundError: The credential does not exist or has no active grant
            for the user
        PermissionDenied: ``actor`` is neither the owner nor an admin
    """
    credential = store.load_credential(db, credential_id)
    _require_manage(actor, credential)

    share = active_grant(db, credential.id, grantee_id)
    if share is None:
        raise NotFoundError("Share not found")

    store.cas_update(db, share, share.version, {"revoked_at": datetime.utcnow()})

    audit_service.record(
        db,
        AuditSubject.CREDENTIAL,
        credential.id,
        actor.id,
        AuditAction.SHARE_REVOKED,
        details={"grantee_id": str(grantee_id)},
    )
    logger.info(f"Share of {credential.id} with {grantee_id} revoked by {actor.id}")
    event_bus.publish_sync(
        AppEvent.CREDENTIAL_SHARE_REVOKED,
        {
            "credential_id": str(credential.id),
            "credential_name": credential.name,
            "grantee_id": str(grantee_id),
        },
    )


def grants_for(
    db: Session, actor: Principal, credential_id: uuid.UUID
) -> list[ShareGrant]:
    """Active grants on a credential, oldest first."""
    credential = store.load_credential(db, credential_id)
    rbac_service.require(db, actor, ResourceCategory.CREDENTIAL, Action.READ, credential)
    return (
        db.query(ShareGrant)
        .filter(
            ShareGrant.credential_id == credential.id,
            ShareGrant.revoked_at.is_(None),
        )
        .order_by(ShareGrant.granted_at.asc(), ShareGrant.id.asc())
        .all()
    )


def shared_with(db: Session, user_id: uuid.UUID) -> list[ShareGrant]:
    """Active grants held by a user, newest first."""
    return (
        db.query(ShareGrant)
        .filter(
            ShareGrant.grantee_id == user_id,
            ShareGrant.revoked_at.is_(None),
        )
        .order_by(ShareGrant.granted_at.desc())
        .all()
    )


def shareable_users(db: Session, actor: Principal) -> list[User]:
    """Active plain users a credential can be shared with."""
    if not is_admin(actor):
        raise PermissionDenied("Admin access required")
    return (
        db.query(User)
        .filter(
            User.role == UserRole.USER,
            User.is_active.is_(True),
            User.id != actor.id,
        )
        .order_by(User.full_name, User.username)
        .all()
    )
