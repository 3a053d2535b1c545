# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Invoice API endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_principal, get_db
from src.models.enums import InvoiceCategory, InvoiceStatus
from src.rbac import Principal
from src.schemas.common import CountResponse
from src.schemas.invoice import (
    InvoiceApprove,
    InvoiceCreate,
    InvoiceReject,
    InvoiceResponse,
    InvoiceSummary,
    InvoiceUpdate,
)
from src.services import invoice_service

router = APIRouter()


@router.get("", response_model=list[InvoiceResponse])
def list_invoices(
    invoice_status: InvoiceStatus | None = None,
    category: InvoiceCategory | None = None,
    organization_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> list[InvoiceResponse]:
    """List invoices the current user can read."""
    invoices = invoice_service.list_invoices(
        db, principal, invoice_status, category, organization_id
    )
    return [InvoiceResponse.model_validate(i) for i in invoices]


@router.delete("", response_model=CountResponse)
def clear_invoices(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CountResponse:
    """Delete all invoices except employee payments. Admin only."""
    count = invoice_service.bulk_clear_invoices(db, principal)
    return CountResponse(deleted=count)


@router.get("/summary", response_model=InvoiceSummary)
def get_summary(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceSummary:
    return InvoiceSummary.model_validate(
        invoice_service.get_invoice_summary(db, principal)
    )


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceResponse:
    invoice = invoice_service.create_invoice(db, principal, data.model_dump())
    return InvoiceResponse.model_validate(invoice)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceResponse:
    invoice = invoice_service.get_invoice(db, principal, invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def edit_invoice(
    invoice_id: uuid.UUID,
    data: InvoiceUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceResponse:
    """Edit invoice data. Approval fields are managed by the workflow."""
    changes = data.model_dump(exclude_unset=True, exclude={"version"})
    invoice = invoice_service.edit_invoice(
        db, principal, invoice_id, changes, expected_version=data.version
    )
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/approve", response_model=InvoiceResponse)
def approve_invoice(
    invoice_id: uuid.UUID,
    data: InvoiceApprove | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceResponse:
    invoice = invoice_service.approve_invoice(
        db, principal, invoice_id, expected_version=data.version if data else None
    )
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/reject", response_model=InvoiceResponse)
def reject_invoice(
    invoice_id: uuid.UUID,
    data: InvoiceReject,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceResponse:
    invoice = invoice_service.reject_invoice(
        db, principal, invoice_id, data.reason, expected_version=data.version
    )
    return InvoiceResponse.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: uuid.UUID,
    version: int | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> None:
    invoice_service.delete_invoice(db, principal, invoice_id, expected_version=version)
