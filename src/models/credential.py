# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Credential ("tool") model."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import CredentialStatus

if TYPE_CHECKING:
    from src.models.share_grant import ShareGrant
    from src.models.user import User


class Credential(Base, TimestampMixin):
    """Shared login or API key for a subscription.

    The secret columns are plain text at this layer; encryption at rest is
    the storage backend's concern. Nothing outside
    ``disclosure_service`` may return them unmasked.
    """

    __tablename__ = "credentials"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    organization_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Secret fields
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    api_key: Mapped[str | None] = mapped_column(String(500), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[CredentialStatus] = mapped_column(
        Enum(CredentialStatus),
        default=CredentialStatus.ACTIVE,
        nullable=False,
    )
    created_by_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    created_by: Mapped[User] = relationship("User", foreign_keys=[created_by_id])
    grants: Mapped[list[ShareGrant]] = relationship(
        "ShareGrant",
        back_populates="credential",
        cascade="all, delete-orphan",
    )
