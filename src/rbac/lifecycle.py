# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Invoice lifecycle state machine.

Each operation takes a principal and the just-read invoice, checks the
guards, and returns the patch to persist. Persisting (with the version
check) is the caller's job, see ``invoice_service``.

Usage:
    patch = lifecycle.approve(principal, invoice, now)
    store.cas_update(db, invoice, invoice.version, patch)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from src.exceptions import InvalidRequestError, InvalidTransitionError, PermissionDenied
from src.models.enums import Action, InvoiceStatus, ResourceCategory
from src.rbac.policy import can_perform
from src.rbac.principal import Principal

Guard = Callable[[Any], bool]

# Fields the workflow owns; an edit patch may never set them directly
WORKFLOW_FIELDS = frozenset(
    {
        "status",
        "approved_by_id",
        "approved_at",
        "rejected_at",
        "rejection_reason",
        "corrected_at",
        "uploaded_by_id",
        "version",
    }
)


def _always(invoice: Any) -> bool:
    return True


def _after_correction(invoice: Any) -> bool:
    return bool(invoice.is_corrected)


# (from, to) -> guard on the record. Missing pairs are invalid transitions.
TRANSITIONS: dict[tuple[InvoiceStatus, InvoiceStatus], Guard] = {
    (InvoiceStatus.PENDING, InvoiceStatus.APPROVED): _always,
    (InvoiceStatus.PENDING, InvoiceStatus.REJECTED): _always,
    (InvoiceStatus.REJECTED, InvoiceStatus.APPROVED): _after_correction,
    (InvoiceStatus.REJECTED, InvoiceStatus.REJECTED): _after_correction,
}


def allowed_targets(invoice: Any) -> set[InvoiceStatus]:
    """Statuses the invoice may move to from its current state."""
    return {
        target
        for (source, target), guard in TRANSITIONS.items()
        if source == invoice.status and guard(invoice)
    }


def assert_can_transition(invoice: Any, target: InvoiceStatus) -> None:
    """Raise InvalidTransitionError unless ``invoice`` may move to ``target``."""
    guard = TRANSITIONS.get((invoice.status, target))
    if guard is None:
        raise InvalidTransitionError(
            f"Invalid status transition {invoice.status.value} -> {target.value}"
        )
    if not guard(invoice):
        raise InvalidTransitionError(
            f"Invoice must be corrected before it can move to {target.value}"
        )


def is_mutable(principal: Principal, invoice: Any) -> bool:
    """Whether ``principal`` may still edit ``invoice`` in its current state."""
    return can_perform(principal, ResourceCategory.INVOICE, Action.WRITE, invoice)


def approve(principal: Principal, invoice: Any, now: datetime) -> dict[str, Any]:
    """Guard an approval and return the resulting patch."""
    if not can_perform(principal, ResourceCategory.INVOICE, Action.APPROVE, invoice):
        raise PermissionDenied("Admin access required")
    assert_can_transition(invoice, InvoiceStatus.APPROVED)
    return {
        "status": InvoiceStatus.APPROVED,
        "approved_by_id": principal.id,
        "approved_at": now,
        "rejected_at": None,
        "rejection_reason": None,
    }


def reject(
    principal: Principal, invoice: Any, reason: str | None, now: datetime
) -> dict[str, Any]:
    """Guard a rejection and return the resulting patch.

    An empty or whitespace-only reason is refused before anything else.
    """
    reason = (reason or "").strip()
    if not reason:
        raise InvalidRequestError("A rejection reason is required")
    if not can_perform(principal, ResourceCategory.INVOICE, Action.APPROVE, invoice):
        raise PermissionDenied("Admin access required")
    assert_can_transition(invoice, InvoiceStatus.REJECTED)
    return {
        "status": InvoiceStatus.REJECTED,
        "rejection_reason": reason,
        "rejected_at": now,
        "approved_by_id": None,
        "approved_at": None,
    }


def edit(
    principal: Principal, invoice: Any, changes: dict[str, Any], now: datetime
) -> dict[str, Any]:
    """Guard an edit against the current status and return the patch.

    Editing a rejected invoice stamps ``corrected_at``, which unlocks
    approval or a fresh rejection.
    """
    forbidden = WORKFLOW_FIELDS.intersection(changes)
    if forbidden:
        raise InvalidRequestError(
            f"Fields managed by the workflow cannot be edited: {sorted(forbidden)}"
        )
    if not is_mutable(principal, invoice):
        raise PermissionDenied("Invoice can no longer be edited")
    patch = dict(changes)
    if invoice.status is InvoiceStatus.REJECTED:
        patch["corrected_at"] = now
    return patch


def check_delete(principal: Principal, invoice: Any) -> None:
    """Raise PermissionDenied unless ``principal`` may delete ``invoice``."""
    if not can_perform(principal, ResourceCategory.INVOICE, Action.DELETE, invoice):
        raise PermissionDenied("Not authorized to delete this invoice")
