# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Append-only audit trail.

Appends happen after the primary operation has committed and never fail
it. An append that cannot be written is parked in memory and written by
the next successful append or by ``retry_pending`` (run at startup).
"""

import logging
import threading
import uuid
from collections import deque
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.models import AuditEntry
from src.models.enums import AuditAction, AuditSubject

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = frozenset(
    {"password", "api_key", "apikey", "secret", "token", "otp", "value"}
)
REDACTED = "[REDACTED]"

_pending: deque[dict[str, Any]] = deque()
_lock = threading.Lock()


def sanitize_details(details: dict[str, Any] | None) -> dict[str, Any]:
    """Redact secret-bearing keys, recursing into nested dicts."""
    if not details:
        return {}
    sanitized: dict[str, Any] = {}
    for key, value in details.items():
        if key.lower() in SENSITIVE_KEYS:
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_details(value)
        else:
            sanitized[key] = value
    return sanitized


def _write(db: Session, rows: list[dict[str, Any]]) -> list[AuditEntry]:
    entries = [AuditEntry(**row) for row in rows]
    db.add_all(entries)
    db.commit()
    return entries


def _take_pending() -> list[dict[str, Any]]:
    with _lock:
        backlog = list(_pending)
        _pending.clear()
    return backlog


def _park(rows: list[dict[str, Any]]) -> None:
    # rows were taken before anything parked meanwhile, so they go in front
    with _lock:
        queued = rows + list(_pending)
        overflow = max(len(queued) - settings.audit_retry_limit, 0)
        for dropped in queued[:overflow]:
            logger.error(
                f"Audit retry queue full, dropping oldest entry: "
                f"{dropped['action'].value} on {dropped['subject_type'].value} "
                f"{dropped['subject_id']}"
            )
        _pending.clear()
        _pending.extend(queued[overflow:])


def record(
    db: Session,
    subject_type: AuditSubject,
    subject_id: uuid.UUID,
    actor_id: uuid.UUID | None,
    action: AuditAction,
    field: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditEntry | None:
    """Append an audit entry.

    Returns the stored entry, or None if the write failed and the entry was
    parked for retry.
    """
    row = {
        "subject_type": subject_type,
        "subject_id": subject_id,
        "actor_id": actor_id,
        "action": action,
        "field": field,
        "details": sanitize_details(details),
        "created_at": datetime.utcnow(),
    }
    # Parked entries go first so the trail keeps its order
    backlog = _take_pending()
    try:
        entries = _write(db, backlog + [row])
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Failed to append audit entry {action.value} on "
            f"{subject_type.value} {subject_id}, queued for retry: {e}"
        )
        _park(backlog + [row])
        return None
    if backlog:
        logger.info(f"Wrote {len(backlog)} previously queued audit entries")
    return entries[-1]


def retry_pending(db: Session) -> int:
    """Write parked entries. Returns how many were written."""
    backlog = _take_pending()
    if not backlog:
        return 0
    try:
        _write(db, backlog)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Audit retry failed for {len(backlog)} entries: {e}")
        _park(backlog)
        return 0
    return len(backlog)


def pending_count() -> int:
    """Number of entries waiting to be written."""
    return len(_pending)


def history(
    db: Session,
    subject_type: AuditSubject,
    subject_id: uuid.UUID,
    action: AuditAction | None = None,
    limit: int | None = None,
) -> list[AuditEntry]:
    """Get the trail for a subject, most recent first."""
    query = db.query(AuditEntry).filter(
        AuditEntry.subject_type == subject_type,
        AuditEntry.subject_id == subject_id,
    )
    if action:
        query = query.filter(AuditEntry.action == action)
    query = query.order_by(AuditEntry.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def last_access(
    db: Session, subject_type: AuditSubject, subject_id: uuid.UUID
) -> AuditEntry | None:
    """Most recent disclosure of the subject, for "last accessed by" displays."""
    entries = history(
        db, subject_type, subject_id, action=AuditAction.DISCLOSE, limit=1
    )
    return entries[0] if entries else None
