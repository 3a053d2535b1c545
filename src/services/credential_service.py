# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Credential records: masked listing, creation, update and deletion.

Secrets leave this module masked. Cleartext is only available through
``disclosure_service.disclose_secret``.
"""

import logging
import uuid
from typing import Any

from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.exceptions import ConflictError, PermissionDenied
from src.models import Credential, ShareGrant, User
from src.models.enums import (
    Action,
    AuditAction,
    AuditSubject,
    CredentialStatus,
    ResourceCategory,
    SecretField,
)
from src.rbac import policy
from src.rbac.principal import Principal, is_accountant, is_admin
from src.services import audit_service, rbac_service, share_service, store
from src.services.disclosure_service import SECRET_FIELDS, is_mask, mask_secret

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"name", "description", "category", "organization_id", "notes", "status"}
    | {field.value for field in SecretField}
)
REQUIRED_FIELDS = frozenset({"name", "status"})


def masked_view(
    credential: Credential,
    share: ShareGrant | None = None,
    shared_by: User | None = None,
) -> dict[str, Any]:
    """Project a credential for display with every secret masked."""
    view: dict[str, Any] = {
        "id": credential.id,
        "name": credential.name,
        "description": credential.description,
        "category": credential.category,
        "organization_id": credential.organization_id,
        "notes": credential.notes,
        "status": credential.status,
        "created_by_id": credential.created_by_id,
        "created_at": credential.created_at,
        "updated_at": credential.updated_at,
        "version": credential.version,
        "is_shared": share is not None,
        "permission": share.permission if share else None,
        "shared_by": (shared_by.full_name or shared_by.username) if shared_by else None,
    }
    for field in SecretField:
        value = getattr(credential, field.value)
        view[field.value] = mask_secret(value)
        view[f"has_{field.value}"] = bool(value)
    return view


def list_credentials(
    db: Session,
    principal: Principal,
    status: CredentialStatus | None = None,
) -> list[dict[str, Any]]:
    """Credentials visible to ``principal``, masked.

    Admins and accountants see everything. Plain users see the
    credentials they created merged with those shared with them; a
    credential that is both owned and shared appears once, as owned.
    """
    if is_admin(principal) or is_accountant(principal):
        query = db.query(Credential)
        if status:
            query = query.filter(Credential.status == status)
        return [masked_view(c) for c in query.order_by(Credential.name).all()]

    owned_query = db.query(Credential).filter(Credential.created_by_id == principal.id)
    if status:
        owned_query = owned_query.filter(Credential.status == status)
    owned = owned_query.order_by(Credential.name).all()
    owned_ids = {c.id for c in owned}

    result = [masked_view(c) for c in owned]
    shared_rows = (
        db.query(ShareGrant, Credential, User)
        .join(Credential, ShareGrant.credential_id == Credential.id)
        .join(User, ShareGrant.granted_by_id == User.id)
        .filter(
            ShareGrant.grantee_id == principal.id,
            ShareGrant.revoked_at.is_(None),
        )
        .order_by(Credential.name)
        .all()
    )
    for share, credential, sharer in shared_rows:
        if credential.id in owned_ids:
            continue
        if status and credential.status != status:
            continue
        result.append(masked_view(credential, share, sharer))
    return result


def get_credential(
    db: Session, principal: Principal, credential_id: uuid.UUID
) -> dict[str, Any]:
    """One credential, masked."""
    credential = store.load_credential(db, credential_id)
    grant = share_service.active_grant(db, credential.id, principal.id)
    share = grant.permission if grant else None
    if not policy.can_perform(
        principal, ResourceCategory.CREDENTIAL, Action.READ, credential, share
    ):
        raise PermissionDenied("Not authorized to view this credential")
    if grant is None or credential.created_by_id == principal.id:
        return masked_view(credential)
    sharer = db.get(User, grant.granted_by_id)
    return masked_view(credential, grant, sharer)


def create_credential(
    db: Session, principal: Principal, data: dict[str, Any]
) -> Credential:
    """Create a credential owned by ``principal``."""
    rbac_service.require(
        db,
        principal,
        ResourceCategory.CREDENTIAL,
        Action.WRITE,
        message="Not authorized to create credentials",
    )
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    if "organization_id" not in fields or fields["organization_id"] is None:
        fields["organization_id"] = principal.organization_id

    credential = Credential(created_by_id=principal.id, **fields)
    with store.guarded_write(db):
        db.add(credential)
    db.refresh(credential)

    audit_service.record(
        db,
        AuditSubject.CREDENTIAL,
        credential.id,
        principal.id,
        AuditAction.CREDENTIAL_CREATED,
        details={"name": credential.name},
    )
    logger.info(f"Credential {credential.id} created by {principal.id}")
    event_bus.publish_sync(
        AppEvent.CREDENTIAL_CREATED,
        {"credential_id": str(credential.id), "name": credential.name},
    )
    return credential


def update_credential(
    db: Session,
    principal: Principal,
    credential_id: uuid.UUID,
    changes: dict[str, Any],
    expected_version: int | None = None,
) -> Credential:
    """Apply ``changes`` to a credential.

    Secret fields that come back as the mask sentinel are left untouched,
    so a client can round-trip a masked record without wiping secrets.
    """
    credential = store.load_credential(db, credential_id)
    rbac_service.require(
        db,
        principal,
        ResourceCategory.CREDENTIAL,
        Action.WRITE,
        credential,
        message="Not authorized to edit this credential",
    )
    store.reject_cleared(changes, REQUIRED_FIELDS)

    patch: dict[str, Any] = {}
    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            continue
        if key in SECRET_FIELDS and is_mask(value):
            continue
        patch[key] = value

    store.cas_update(db, credential, expected_version, patch)

    audit_service.record(
        db,
        AuditSubject.CREDENTIAL,
        credential.id,
        principal.id,
        AuditAction.CREDENTIAL_UPDATED,
        details={"fields": sorted(patch)},
    )
    logger.info(f"Credential {credential.id} updated by {principal.id}")
    event_bus.publish_sync(
        AppEvent.CREDENTIAL_UPDATED,
        {"credential_id": str(credential.id), "fields": sorted(patch)},
    )
    return credential


def delete_credential(
    db: Session,
    principal: Principal,
    credential_id: uuid.UUID,
    expected_version: int | None = None,
) -> None:
    """Delete a credential and, with it, every share grant on it."""
    credential = store.load_credential(db, credential_id)
    rbac_service.require(
        db,
        principal,
        ResourceCategory.CREDENTIAL,
        Action.DELETE,
        credential,
        message="Not authorized to delete credentials",
    )
    if expected_version is not None and credential.version != expected_version:
        raise ConflictError()

    name = credential.name
    store.delete_record(db, credential)

    audit_service.record(
        db,
        AuditSubject.CREDENTIAL,
        credential_id,
        principal.id,
        AuditAction.CREDENTIAL_DELETED,
        details={"name": name},
    )
    logger.info(f"Credential {credential_id} deleted by {principal.id}")
    event_bus.publish_sync(
        AppEvent.CREDENTIAL_DELETED,
        {"credential_id": str(credential_id), "name": name},
    )


def bulk_delete_credentials(db: Session, principal: Principal) -> int:
    """Delete every credential. Returns the number removed."""
    rbac_service.require(
        db,
        principal,
        ResourceCategory.CREDENTIAL,
        Action.BULK_DELETE,
        message="Admin access required",
    )
    credentials = db.query(Credential).all()
    removed = [(c.id, c.name) for c in credentials]

    with store.guarded_write(db):
        for credential in credentials:
            db.delete(credential)

    for credential_id, name in removed:
        audit_service.record(
            db,
            AuditSubject.CREDENTIAL,
            credential_id,
            principal.id,
            AuditAction.CREDENTIAL_DELETED,
            details={"name": name, "bulk": True},
        )
    logger.warning(f"All credentials ({len(removed)}) deleted by {principal.id}")
    event_bus.publish_sync(
        AppEvent.CREDENTIALS_BULK_DELETED,
        {"count": len(removed), "actor_id": str(principal.id)},
    )
    return len(removed)


def access_history(
    db: Session, principal: Principal, credential_id: uuid.UUID
) -> dict[str, Any]:
    """The credential's audit trail plus its last disclosure."""
    credential = store.load_credential(db, credential_id)
    rbac_service.require(
        db, principal, ResourceCategory.CREDENTIAL, Action.READ, credential
    )
    return {
        "last_access": audit_service.last_access(
            db, AuditSubject.CREDENTIAL, credential.id
        ),
        "entries": audit_service.history(db, AuditSubject.CREDENTIAL, credential.id),
    }

