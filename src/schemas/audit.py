# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Audit trail schemas."""

import datetime
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict

from src.models.enums import AuditAction, AuditSubject


class AuditEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_type: AuditSubject
    subject_id: uuid.UUID
    actor_id: uuid.UUID | None
    action: AuditAction
    field: str | None = None
    details: dict[str, Any] = {}
    created_at: datetime.datetime
