# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Share grant model."""

from __future__ import annotations

import uuid as uuid_lib
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import SharePermission

if TYPE_CHECKING:
    from src.models.credential import Credential
    from src.models.user import User


class ShareGrant(Base, TimestampMixin):
    """Delegation of view/edit rights on one credential to one user.

    There is exactly one row per (credential, grantee). Re-granting updates
    the row in place; revoking stamps ``revoked_at``.
    """

    __tablename__ = "share_grants"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    credential_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("credentials.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    grantee_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission: Mapped[SharePermission] = mapped_column(
        Enum(SharePermission),
        default=SharePermission.VIEW,
        nullable=False,
    )
    granted_by_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    granted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("credential_id", "grantee_id", name="_credential_grantee_uc"),
    )
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    credential: Mapped[Credential] = relationship(
        "Credential", back_populates="grants"
    )
    grantee: Mapped[User] = relationship(
        "User", foreign_keys=[grantee_id], back_populates="received_grants"
    )
    granted_by: Mapped[User] = relationship("User", foreign_keys=[granted_by_id])

    @property
    def is_active(self) -> bool:
        """True while the grant has not been revoked."""
        return self.revoked_at is None
