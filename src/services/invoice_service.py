# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Invoice service: scoped reads and the approval workflow.

Every workflow operation follows the same steps: load the invoice, let
``src.rbac.lifecycle`` check the guards against that snapshot and build
the patch, write it with a version check, then append to the audit trail.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.exceptions import ConflictError, InvalidRequestError, PermissionDenied
from src.models import Invoice
from src.models.enums import (
    Action,
    AuditAction,
    AuditSubject,
    InvoiceCategory,
    InvoiceStatus,
    ResourceCategory,
)
from src.rbac import lifecycle
from src.rbac.principal import Principal, has_token, is_accountant, is_admin
from src.services import audit_service, rbac_service, store

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "invoice_number",
        "provider",
        "amount",
        "currency",
        "billing_date",
        "due_date",
        "notes",
        "organization_id",
    }
)
CREATE_FIELDS = EDITABLE_FIELDS | {"category"}
REQUIRED_FIELDS = frozenset(
    {"invoice_number", "provider", "amount", "currency", "billing_date"}
)


def _scoped_query(db: Session, principal: Principal):
    query = db.query(Invoice)
    if is_admin(principal) or is_accountant(principal):
        return query
    scopes = [Invoice.uploaded_by_id == principal.id]
    if has_token(principal, "financial", "invoices") and principal.organization_id:
        scopes.append(Invoice.organization_id == principal.organization_id)
    return query.filter(or_(*scopes))


def _audit(
    db: Session,
    invoice_id: uuid.UUID,
    principal: Principal,
    action: AuditAction,
    details: dict[str, Any] | None = None,
) -> None:
    audit_service.record(
        db, AuditSubject.INVOICE, invoice_id, principal.id, action, details=details
    )


def _event_data(invoice: Invoice, principal: Principal) -> dict[str, Any]:
    return {
        "invoice_id": str(invoice.id),
        "invoice_number": invoice.invoice_number,
        "uploaded_by_id": str(invoice.uploaded_by_id),
        "actor_id": str(principal.id),
    }


def list_invoices(
    db: Session,
    principal: Principal,
    status: InvoiceStatus | None = None,
    category: InvoiceCategory | None = None,
    organization_id: uuid.UUID | None = None,
) -> list[Invoice]:
    """Invoices the principal can read, newest billing date first."""
    query = _scoped_query(db, principal)
    if status:
        query = query.filter(Invoice.status == status)
    if category:
        query = query.filter(Invoice.category == category)
    if organization_id:
        query = query.filter(Invoice.organization_id == organization_id)
    return query.order_by(Invoice.billing_date.desc(), Invoice.created_at.desc()).all()


def get_invoice(db: Session, principal: Principal, invoice_id: uuid.UUID) -> Invoice:
    invoice = store.load_invoice(db, invoice_id)
    rbac_service.require(
        db,
        principal,
        ResourceCategory.INVOICE,
        Action.READ,
        invoice,
        message="Not authorized to view this invoice",
    )
    return invoice


def create_invoice(
    db: Session, principal: Principal, data: dict[str, Any]
) -> Invoice:
    """Record a new invoice in the pending state, owned by ``principal``."""
    rbac_service.require(
        db,
        principal,
        ResourceCategory.INVOICE,
        Action.WRITE,
        message="Not authorized to upload invoices",
    )
    fields = {k: v for k, v in data.items() if k in CREATE_FIELDS}
    if fields.get("category") == InvoiceCategory.EMPLOYEE_PAYMENT and not is_admin(
        principal
    ):
        raise PermissionDenied("Only administrators may record employee payments")
    if fields.get("organization_id") is None:
        fields["organization_id"] = principal.organization_id

    invoice = Invoice(
        status=InvoiceStatus.PENDING,
        uploaded_by_id=principal.id,
        **fields,
    )
    with store.guarded_write(db):
        db.add(invoice)
    db.refresh(invoice)

    _audit(
        db,
        invoice.id,
        principal,
        AuditAction.INVOICE_CREATED,
        {"invoice_number": invoice.invoice_number, "amount": str(invoice.amount)},
    )
    logger.info(f"Invoice {invoice.id} uploaded by {principal.id}")
    event_bus.publish_sync(AppEvent.INVOICE_CREATED, _event_data(invoice, principal))
    return invoice


def edit_invoice(
    db: Session,
    principal: Principal,
    invoice_id: uuid.UUID,
    changes: dict[str, Any],
    expected_version: int | None = None,
) -> Invoice:
    """Edit an invoice's data fields.

    Status and approval fields are not editable here. The category is fixed
    at upload. Editing a rejected invoice marks it corrected so it can be
    reviewed again.
    """
    invoice = store.load_invoice(db, invoice_id)
    rbac_service.require(
        db,
        principal,
        ResourceCategory.INVOICE,
        Action.READ,
        invoice,
        message="Not authorized to view this invoice",
    )
    if "category" in changes:
        raise InvalidRequestError("Invoice category cannot be changed")
    store.reject_cleared(changes, REQUIRED_FIELDS)
    patch = lifecycle.edit(principal, invoice, changes, datetime.utcnow())
    store.cas_update(db, invoice, expected_version, patch)

    _audit(
        db,
        invoice.id,
        principal,
        AuditAction.INVOICE_UPDATED,
        {"fields": sorted(changes)},
    )
    logger.info(f"Invoice {invoice.id} edited by {principal.id}")
    event_bus.publish_sync(AppEvent.INVOICE_UPDATED, _event_data(invoice, principal))
    return invoice


def approve_invoice(
    db: Session,
    principal: Principal,
    invoice_id: uuid.UUID,
    expected_version: int | None = None,
) -> Invoice:
    """Approve an invoice.

    Of two concurrent approvals of the same invoice one wins; the other
    gets ``ConflictError`` (or ``InvalidTransitionError`` if it read the
    invoice after the winner committed).
    """
    invoice = store.load_invoice(db, invoice_id)
    patch = lifecycle.approve(principal, invoice, datetime.utcnow())
    store.cas_update(db, invoice, expected_version, patch)

    _audit(db, invoice.id, principal, AuditAction.INVOICE_APPROVED)
    logger.info(f"Invoice {invoice.id} approved by {principal.id}")
    event_bus.publish_sync(AppEvent.INVOICE_APPROVED, _event_data(invoice, principal))
    return invoice


def reject_invoice(
    db: Session,
    principal: Principal,
    invoice_id: uuid.UUID,
    reason: str | None,
    expected_version: int | None = None,
) -> Invoice:
    """Reject an invoice with a mandatory reason."""
    invoice = store.load_invoice(db, invoice_id)
    patch = lifecycle.reject(principal, invoice, reason, datetime.utcnow())
    store.cas_update(db, invoice, expected_version, patch)

    _audit(
        db,
        invoice.id,
        principal,
        AuditAction.INVOICE_REJECTED,
        {"reason": invoice.rejection_reason},
    )
    logger.info(f"Invoice {invoice.id} rejected by {principal.id}")
    data = _event_data(invoice, principal)
    data["reason"] = invoice.rejection_reason
    event_bus.publish_sync(AppEvent.INVOICE_REJECTED, data)
    return invoice


def delete_invoice(
    db: Session,
    principal: Principal,
    invoice_id: uuid.UUID,
    expected_version: int | None = None,
) -> None:
    invoice = store.load_invoice(db, invoice_id)
    lifecycle.check_delete(principal, invoice)
    if expected_version is not None and invoice.version != expected_version:
        raise ConflictError()

    number = invoice.invoice_number
    store.delete_record(db, invoice)

    _audit(
        db, invoice_id, principal, AuditAction.INVOICE_DELETED, {"invoice_number": number}
    )
    logger.info(f"Invoice {invoice_id} deleted by {principal.id}")
    event_bus.publish_sync(
        AppEvent.INVOICE_DELETED,
        {"invoice_id": str(invoice_id), "actor_id": str(principal.id)},
    )


def bulk_clear_invoices(db: Session, principal: Principal) -> int:
    """Delete all regular invoices. Employee payments are never removed.

    Returns:
        Number of invoices deleted
    """
    rbac_service.require(
        db,
        principal,
        ResourceCategory.INVOICE,
        Action.BULK_DELETE,
        message="Admin access required",
    )
    invoices = (
        db.query(Invoice)
        .filter(Invoice.category != InvoiceCategory.EMPLOYEE_PAYMENT)
        .all()
    )
    removed = [(i.id, i.invoice_number) for i in invoices]

    with store.guarded_write(db):
        for invoice in invoices:
            db.delete(invoice)

    for invoice_id, number in removed:
        _audit(
            db,
            invoice_id,
            principal,
            AuditAction.INVOICE_DELETED,
            {"invoice_number": number, "bulk": True},
        )
    logger.warning(f"Cleared {len(removed)} invoices, by {principal.id}")
    event_bus.publish_sync(
        AppEvent.INVOICES_CLEARED,
        {"count": len(removed), "actor_id": str(principal.id)},
    )
    return len(removed)


def get_invoice_summary(db: Session, principal: Principal) -> dict[str, Any]:
    """Counts and totals per status over the invoices the principal can read."""
    scoped = _scoped_query(db, principal).subquery()
    rows = (
        db.query(
            scoped.c.status,
            func.count(),
            func.coalesce(func.sum(scoped.c.amount), 0),
        )
        .group_by(scoped.c.status)
        .all()
    )

    summary: dict[str, Any] = {
        "total": 0,
        "total_amount": Decimal("0"),
        "by_status": {
            status.value: {"count": 0, "amount": Decimal("0")}
            for status in InvoiceStatus
        },
    }
    for status, count, amount in rows:
        amount = Decimal(str(amount))
        summary["by_status"][status.value] = {"count": count, "amount": amount}
        summary["total"] += count
        summary["total_amount"] += amount
    return summary
