# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Storage helpers: record loading and optimistic-concurrency writes.

Versioned models map their ``version`` column as SQLAlchemy's
``version_id_col``, so every flushed UPDATE or DELETE carries
``WHERE version = <read version>``. A lost race shows up as
``StaleDataError`` and is reported as ``ConflictError``.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from src.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    StorageFailure,
)
from src.models import Credential, Invoice, User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

UNIQUE_VIOLATION = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    code = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION
    return "unique" in str(error.orig).lower()


@contextmanager
def guarded_write(db: Session) -> Iterator[None]:
    """Commit the enclosed changes, translating storage errors.

    Version mismatches and unique-key races become ``ConflictError``. Other
    constraint violations (NOT NULL, foreign keys, checks) are caller
    errors and become ``InvalidRequestError``, which is not retryable. Any
    other SQLAlchemy error becomes a retryable ``StorageFailure``. The
    session is rolled back in every case.
    """
    try:
        yield
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.info(f"Write conflict: {e}")
        raise ConflictError() from None
    except IntegrityError as e:
        db.rollback()
        if _is_unique_violation(e):
            logger.info(f"Write conflict: {e.orig}")
            raise ConflictError() from None
        logger.warning(f"Rejected write violating a constraint: {e.orig}")
        raise InvalidRequestError("Record violates a data constraint") from None
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during write: {e}")
        raise StorageFailure() from None


def load(db: Session, model: type[ModelT], record_id: uuid.UUID, label: str) -> ModelT:
    """Load a record by primary key or raise NotFoundError."""
    try:
        record = db.get(model, record_id)
    except SQLAlchemyError as e:
        logger.error(f"Storage failure loading {label} {record_id}: {e}")
        raise StorageFailure() from None
    if record is None:
        raise NotFoundError(f"{label} not found")
    return record


def load_principal_record(db: Session, user_id: uuid.UUID) -> User:
    return load(db, User, user_id, "User")


def load_credential(db: Session, credential_id: uuid.UUID) -> Credential:
    return load(db, Credential, credential_id, "Credential")


def load_invoice(db: Session, invoice_id: uuid.UUID) -> Invoice:
    return load(db, Invoice, invoice_id, "Invoice")


def cas_update(
    db: Session,
    resource: ModelT,
    expected_version: int | None,
    patch: dict[str, Any],
) -> ModelT:
    """Apply ``patch`` to ``resource`` if it is still at ``expected_version``.

    The in-memory check catches callers holding an outdated snapshot; the
    versioned UPDATE catches writers that got in between read and commit.

    Raises:
        ConflictError: The record changed since it was read
        InvalidRequestError: The patch violates a column constraint
        StorageFailure: The backend failed
    """
    if expected_version is not None and resource.version != expected_version:
        raise ConflictError()
    with guarded_write(db):
        for key, value in patch.items():
            setattr(resource, key, value)
    db.refresh(resource)
    return resource


def delete_record(db: Session, resource: Any) -> None:
    """Delete a versioned record, failing with ConflictError on a lost race."""
    with guarded_write(db):
        db.delete(resource)


def reject_cleared(changes: dict[str, Any], required: frozenset[str]) -> None:
    """Raise InvalidRequestError if ``changes`` clears a required field."""
    cleared = sorted(key for key in required if key in changes and changes[key] is None)
    if cleared:
        raise InvalidRequestError(f"Fields cannot be cleared: {', '.join(cleared)}")
