# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Invoice schemas."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.enums import InvoiceCategory, InvoiceStatus


class InvoiceBase(BaseModel):
    """Base invoice schema."""

    invoice_number: str = Field(..., min_length=1, max_length=100)
    provider: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    billing_date: datetime.date
    due_date: datetime.date | None = None
    category: InvoiceCategory = InvoiceCategory.REGULAR
    notes: str | None = None
    organization_id: uuid.UUID | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        """Round to 2 decimal places."""
        return round(v, 2)


class InvoiceCreate(InvoiceBase):
    """Schema for uploading an invoice."""


class InvoiceUpdate(BaseModel):
    """Schema for editing an invoice's data fields."""

    invoice_number: str | None = Field(None, min_length=1, max_length=100)
    provider: str | None = Field(None, min_length=1, max_length=200)
    amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    currency: str | None = Field(None, min_length=3, max_length=3)
    billing_date: datetime.date | None = None
    due_date: datetime.date | None = None
    notes: str | None = None
    organization_id: uuid.UUID | None = None
    version: int | None = None


class InvoiceReject(BaseModel):
    """Schema for rejecting an invoice."""

    reason: str = Field(..., min_length=1)
    version: int | None = None


class InvoiceApprove(BaseModel):
    version: int | None = None


class InvoiceResponse(InvoiceBase):
    """Schema for invoice response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: InvoiceStatus
    uploaded_by_id: uuid.UUID
    approved_by_id: uuid.UUID | None = None
    approved_at: datetime.datetime | None = None
    rejected_at: datetime.datetime | None = None
    rejection_reason: str | None = None
    corrected_at: datetime.datetime | None = None
    version: int
    created_at: datetime.datetime
    updated_at: datetime.datetime


class StatusTotals(BaseModel):
    count: int
    amount: Decimal


class InvoiceSummary(BaseModel):
    """Counts and totals per status."""

    total: int
    total_amount: Decimal
    by_status: dict[InvoiceStatus, StatusTotals]
