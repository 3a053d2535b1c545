# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User management API endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_principal, get_db
from src.rbac import Principal
from src.schemas.user import PermissionsUpdate, RoleUpdate, UserCreate, UserResponse
from src.services import auth_service, rbac_service, store

router = APIRouter()


@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="List users",
)
def list_users(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[UserResponse]:
    """Retrieve users.

    Admins and accountants see every account; plain users only themselves.
    """
    users = auth_service.list_users(db, principal)
    return [UserResponse.model_validate(u) for u in users]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user",
)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    """Create a new user. Super-admin only."""
    user = auth_service.register_user(
        db,
        principal,
        user_in.username,
        user_in.email,
        user_in.password,
        full_name=user_in.full_name,
        role=user_in.role,
        admin_sub_role=user_in.admin_sub_role,
        permissions=user_in.permissions,
        organization_id=user_in.organization_id,
    )
    return UserResponse.model_validate(user)


@router.put(
    "/users/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role",
)
def update_user_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    """Change role, admin sub-role and permission tokens. Super-admin only."""
    user = store.load_principal_record(db, user_id)
    user = rbac_service.update_role(
        db,
        principal,
        user,
        data.role,
        admin_sub_role=data.admin_sub_role,
        permissions=data.permissions,
        expected_version=data.version,
    )
    return UserResponse.model_validate(user)


@router.put(
    "/users/{user_id}/permissions",
    response_model=UserResponse,
    summary="Replace a user's permission tokens",
)
def update_user_permissions(
    user_id: uuid.UUID,
    data: PermissionsUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    user = store.load_principal_record(db, user_id)
    user = rbac_service.update_permissions(
        db, principal, user, data.permissions, expected_version=data.version
    )
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Deactivate a user",
)
def deactivate_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    """Deactivate an account and end its sessions. Super-admin only."""
    user = store.load_principal_record(db, user_id)
    user = auth_service.deactivate_user(db, principal, user)
    return UserResponse.model_validate(user)
