# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication service."""

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from src.config import settings
from src.events import AppEvent, event_bus
from src.exceptions import ConflictError, InvalidRequestError, PermissionDenied
from src.models import AdminSubRole, User, UserRole
from src.models.session import Session as SessionModel
from src.models.enums import Action, ResourceCategory
from src.rbac import policy
from src.rbac.principal import Principal, normalize_assignment
from src.rbac.roles import DEFAULT_USER_PERMISSIONS
from src.security import get_password_hash, verify_password
from src.services import store
from src.services.rbac_service import validate_permissions

logger = logging.getLogger(__name__)


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    full_name: str | None = None,
    role: UserRole = UserRole.USER,
    admin_sub_role: AdminSubRole | None = None,
    permissions: list[str] | None = None,
    organization_id: uuid.UUID | None = None,
) -> User:
    """Create an account with a consistent role shape.

    Plain users without explicit tokens get the default set.
    """
    if get_user_by_username(db, username):
        raise ConflictError("Username already taken")
    if get_user_by_email(db, email):
        raise ConflictError("Email already registered")

    if role is UserRole.USER and permissions is None:
        permissions = DEFAULT_USER_PERMISSIONS
    if permissions is not None:
        permissions = validate_permissions(permissions)
    role, admin_sub_role, permissions = normalize_assignment(
        role, admin_sub_role, permissions
    )

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        is_active=True,
        role=role,
        admin_sub_role=admin_sub_role,
        permissions=permissions,
        organization_id=organization_id,
    )
    with store.guarded_write(db):
        db.add(user)
    db.refresh(user)

    logger.info(f"Created user {user.username} with role {role.value}")
    event_bus.publish_sync(
        AppEvent.USER_CREATED,
        {"user_id": str(user.id), "username": user.username, "role": role.value},
    )
    return user


def register_user(
    db: Session,
    actor: Principal,
    username: str,
    email: str,
    password: str,
    **fields,
) -> User:
    """Create an account on behalf of ``actor``, who must be a super-admin."""
    if not policy.can_perform(actor, ResourceCategory.USER_ACCOUNT, Action.WRITE):
        raise PermissionDenied("Only a super-admin can create accounts")
    return create_user(db, username, email, password, **fields)


def deactivate_user(db: Session, actor: Principal, user: User) -> User:
    """Disable an account and drop its sessions."""
    if not policy.can_perform(actor, ResourceCategory.USER_ACCOUNT, Action.DELETE, user):
        raise PermissionDenied("Only a super-admin can deactivate accounts")
    if user.id == actor.id:
        raise InvalidRequestError("You cannot deactivate your own account")

    with store.guarded_write(db):
        user.is_active = False
        db.query(SessionModel).filter(SessionModel.user_id == user.id).delete()
    db.refresh(user)

    logger.info(f"User {user.username} deactivated by {actor.id}")
    event_bus.publish_sync(
        AppEvent.USER_DELETED,
        {"user_id": str(user.id), "username": user.username},
    )
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Authenticate a user by username and password."""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    return user


def create_session(db: Session, user_id: uuid.UUID) -> str:
    """Create a new session for a user."""
    token = str(uuid.uuid4())
    expires_at = datetime.utcnow() + timedelta(days=settings.session_expiry_days)

    session = SessionModel(
        user_id=user_id,
        token=token,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()

    event_bus.publish_sync(AppEvent.USER_LOGIN, {"user_id": str(user_id)})

    return token


def get_session(db: Session, token: str) -> SessionModel | None:
    """Get a valid session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None
    return session


def delete_session(db: Session, token: str) -> bool:
    """Delete a session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if session:
        user_id = session.user_id
        db.delete(session)
        db.commit()
        event_bus.publish_sync(AppEvent.USER_LOGOUT, {"user_id": str(user_id)})
        return True
    return False


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    """Get a user by username."""
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def list_users(db: Session, actor: Principal) -> list[User]:
    """All accounts, for admin tiers and accountants; otherwise just the actor."""
    if policy.can_perform(actor, ResourceCategory.USER_ACCOUNT, Action.READ):
        return db.query(User).order_by(User.username).all()
    return db.query(User).filter(User.id == actor.id).all()


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions. Returns count of deleted sessions."""
    count = (
        db.query(SessionModel)
        .filter(SessionModel.expires_at < datetime.utcnow())
        .delete()
    )
    db.commit()
    return count
