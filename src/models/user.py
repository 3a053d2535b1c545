# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User model for authentication and authorization."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import AdminSubRole, UserRole

if TYPE_CHECKING:
    from src.models.organization import Organization
    from src.models.session import Session
    from src.models.share_grant import ShareGrant


class User(Base, TimestampMixin):
    """Account record. The authorization view of it is ``src.rbac.Principal``.

    ``admin_sub_role`` is only set for admins and ``permissions`` only for
    plain users; ``rbac_service.update_role`` keeps the two exclusive.
    """

    __tablename__ = "users"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        default=UserRole.USER,
        nullable=False,
    )
    admin_sub_role: Mapped[AdminSubRole | None] = mapped_column(
        Enum(AdminSubRole),
        nullable=True,
    )
    # Permission tokens as "module.token" codes
    permissions: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    organization_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    organization: Mapped[Organization | None] = relationship("Organization")
    sessions: Mapped[list[Session]] = relationship(
        "Session",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    received_grants: Mapped[list[ShareGrant]] = relationship(
        "ShareGrant",
        foreign_keys="[ShareGrant.grantee_id]",
        back_populates="grantee",
        cascade="all, delete-orphan",
    )
