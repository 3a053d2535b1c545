# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Credential API endpoints.

Everything returned here is masked except the single-field reveal
endpoint, which goes through the disclosure service and is audited.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_principal, get_db
from src.models.enums import CredentialStatus, SecretField
from src.rbac import Principal
from src.schemas.common import CountResponse
from src.schemas.credential import (
    AccessHistoryResponse,
    CredentialCreate,
    CredentialResponse,
    CredentialUpdate,
    SecretResponse,
    ShareCreate,
    ShareGrantResponse,
)
from src.schemas.user import ShareableUser
from src.services import credential_service, disclosure_service, share_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[CredentialResponse])
def list_credentials(
    credential_status: CredentialStatus | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[CredentialResponse]:
    """List credentials visible to the current user, secrets masked."""
    views = credential_service.list_credentials(db, principal, credential_status)
    return [CredentialResponse(**v) for v in views]


@router.delete("", response_model=CountResponse)
def delete_all_credentials(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CountResponse:
    """Delete every credential. Admin only."""
    count = credential_service.bulk_delete_credentials(db, principal)
    return CountResponse(deleted=count)


@router.post("", response_model=CredentialResponse, status_code=status.HTTP_201_CREATED)
def create_credential(
    data: CredentialCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CredentialResponse:
    credential = credential_service.create_credential(db, principal, data.model_dump())
    return CredentialResponse(**credential_service.masked_view(credential))


@router.get("/shareable-users", response_model=list[ShareableUser])
def list_shareable_users(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[ShareableUser]:
    """Active users a credential can be shared with. Admin only."""
    users = share_service.shareable_users(db, principal)
    return [ShareableUser.model_validate(u) for u in users]


@router.get("/{credential_id}", response_model=CredentialResponse)
def get_credential(
    credential_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CredentialResponse:
    view = credential_service.get_credential(db, principal, credential_id)
    return CredentialResponse(**view)


@router.put("/{credential_id}", response_model=CredentialResponse)
def update_credential(
    credential_id: uuid.UUID,
    data: CredentialUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CredentialResponse:
    changes = data.model_dump(exclude_unset=True, exclude={"version"})
    credential = credential_service.update_credential(
        db, principal, credential_id, changes, expected_version=data.version
    )
    return CredentialResponse(**credential_service.masked_view(credential))


@router.delete("/{credential_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_credential(
    credential_id: uuid.UUID,
    version: int | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> None:
    credential_service.delete_credential(
        db, principal, credential_id, expected_version=version
    )


@router.post("/{credential_id}/reveal/{field}", response_model=SecretResponse)
def reveal_secret(
    credential_id: uuid.UUID,
    field: SecretField,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> SecretResponse:
    """Disclose one secret field. The access is recorded."""
    value = disclosure_service.disclose_secret(db, principal, credential_id, field)
    return SecretResponse(field=field, value=value)


@router.get("/{credential_id}/history", response_model=AccessHistoryResponse)
def get_access_history(
    credential_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AccessHistoryResponse:
    history = credential_service.access_history(db, principal, credential_id)
    return AccessHistoryResponse.model_validate(history, from_attributes=True)


@router.get("/{credential_id}/shares", response_model=list[ShareGrantResponse])
def list_shares(
    credential_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[ShareGrantResponse]:
    grants = share_service.grants_for(db, principal, credential_id)
    return [ShareGrantResponse.model_validate(g) for g in grants]


@router.post(
    "/{credential_id}/shares",
    response_model=ShareGrantResponse,
    status_code=status.HTTP_201_CREATED,
)
def share_credential(
    credential_id: uuid.UUID,
    data: ShareCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> ShareGrantResponse:
    """Share a credential with a user, or change the level of an existing share."""
    grant = share_service.grant(
        db, principal, credential_id, data.user_id, data.permission
    )
    return ShareGrantResponse.model_validate(grant)


@router.delete(
    "/{credential_id}/shares/{user_id}", status_code=status.HTTP_204_NO_CONTENT
)
def revoke_share(
    credential_id: uuid.UUID,
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> None:
    share_service.revoke(db, principal, credential_id, user_id)
