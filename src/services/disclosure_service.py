# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Credential disclosure boundary.

This is the only module that reads secret columns for return to a caller.
Everything else works on masked projections produced by ``mask_secret``.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, load_only

from src.config import settings
from src.events import AppEvent, event_bus
from src.exceptions import InvalidRequestError, NotFoundError, StorageFailure
from src.models import Credential
from src.models.enums import Action, AuditAction, AuditSubject, ResourceCategory, SecretField
from src.rbac.principal import Principal
from src.services import audit_service, rbac_service

logger = logging.getLogger(__name__)

SECRET_FIELDS = tuple(field.value for field in SecretField)


def mask_secret(value: str | None) -> str | None:
    """Replace a stored secret with the fixed mask; absent stays absent."""
    return settings.secret_mask if value else None


def is_mask(value: str | None) -> bool:
    """Whether ``value`` is the mask sentinel echoed back by a client."""
    return value == settings.secret_mask


def _parse_field(field: SecretField | str) -> SecretField:
    try:
        return SecretField(field)
    except ValueError:
        raise InvalidRequestError(f"Unknown secret field: {field}") from None


def _load_metadata(db: Session, credential_id: uuid.UUID) -> Credential:
    # Ownership and scope only; secret columns stay unloaded
    try:
        credential = (
            db.query(Credential)
            .options(
                load_only(
                    Credential.id,
                    Credential.name,
                    Credential.organization_id,
                    Credential.created_by_id,
                    Credential.version,
                )
            )
            .filter(Credential.id == credential_id)
            .first()
        )
    except SQLAlchemyError as e:
        logger.error(f"Storage failure loading credential {credential_id}: {e}")
        raise StorageFailure() from None
    if credential is None:
        raise NotFoundError("Credential not found")
    return credential


def _fetch_field(db: Session, credential_id: uuid.UUID, field: SecretField) -> str | None:
    column = getattr(Credential, field.value)
    try:
        row = db.execute(
            select(column).where(Credential.id == credential_id)
        ).one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Storage failure reading {field.value} of {credential_id}: {e}")
        raise StorageFailure() from None
    if row is None:
        # Deleted between the permission check and the read
        raise NotFoundError("Credential not found")
    return row[0]


def disclose_secret(
    db: Session,
    principal: Principal,
    credential_id: uuid.UUID,
    field: SecretField | str,
) -> str | None:
    """Reveal one secret field of one credential.

    The permission check (role, ownership, or an active share grant) runs
    before any secret is read. A denied request leaves no trace in the
    audit trail and never touches the secret column. A successful one is
    recorded as a ``disclose`` entry naming the field.

    Raises:
        InvalidRequestError: ``field`` is not a secret field
        NotFoundError: The credential does not exist
        PermissionDenied: The principal may not see the secret
        StorageFailure: The backend failed; safe to retry
    """
    secret_field = _parse_field(field)
    credential = _load_metadata(db, credential_id)

    rbac_service.require(
        db,
        principal,
        ResourceCategory.CREDENTIAL,
        Action.DISCLOSE,
        credential,
        message="Not authorized to view this secret",
    )

    value = _fetch_field(db, credential.id, secret_field)

    audit_service.record(
        db,
        AuditSubject.CREDENTIAL,
        credential.id,
        principal.id,
        AuditAction.DISCLOSE,
        field=secret_field.value,
    )
    logger.info(
        f"Credential {credential.id} field {secret_field.value} disclosed to "
        f"{principal.id}"
    )
    event_bus.publish_sync(
        AppEvent.CREDENTIAL_DISCLOSED,
        {
            "credential_id": str(credential.id),
            "credential_name": credential.name,
            "field": secret_field.value,
            "actor_id": str(principal.id),
        },
    )
    return value
