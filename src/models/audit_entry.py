# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Audit trail model."""

import uuid as uuid_lib
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.enums import AuditAction, AuditSubject


class AuditEntry(Base):
    """Append-only record of a disclosure, share or invoice transition.

    Rows are never updated or deleted; the mapper events below refuse both.
    The integer key preserves append order.
    """

    __tablename__ = "audit_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_type: Mapped[AuditSubject] = mapped_column(
        Enum(AuditSubject), nullable=False
    )
    subject_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, index=True
    )
    # No foreign key: entries outlive the accounts that produced them
    actor_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True, index=True
    )
    action: Mapped[AuditAction] = mapped_column(Enum(AuditAction), nullable=False)
    field: Mapped[str | None] = mapped_column(String(50), nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )


@event.listens_for(AuditEntry, "before_update")
def _refuse_update(mapper, connection, target) -> None:
    raise RuntimeError("Audit entries are immutable and cannot be updated")


@event.listens_for(AuditEntry, "before_delete")
def _refuse_delete(mapper, connection, target) -> None:
    raise RuntimeError("Audit entries are immutable and cannot be deleted")
