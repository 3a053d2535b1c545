# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the invoice state machine."""

import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from src.exceptions import InvalidRequestError, InvalidTransitionError, PermissionDenied
from src.models.enums import AdminSubRole, InvoiceStatus, UserRole
from src.rbac import lifecycle
from src.rbac.principal import Principal

NOW = datetime(2025, 12, 1, 12, 0, 0)

ADMIN = Principal(id=uuid.uuid4(), role=UserRole.ADMIN, admin_sub_role=AdminSubRole.ADMIN)
SUPER = Principal(
    id=uuid.uuid4(), role=UserRole.ADMIN, admin_sub_role=AdminSubRole.SUPER_ADMIN
)
ACCOUNTANT = Principal(id=uuid.uuid4(), role=UserRole.ACCOUNTANT)
UPLOADER = Principal(id=uuid.uuid4(), role=UserRole.USER)


class FakeInvoice(SimpleNamespace):
    @property
    def is_corrected(self):
        return (
            self.rejected_at is not None
            and self.corrected_at is not None
            and self.corrected_at > self.rejected_at
        )


def make_invoice(status=InvoiceStatus.PENDING, **fields):
    values = {
        "id": uuid.uuid4(),
        "status": status,
        "uploaded_by_id": UPLOADER.id,
        "organization_id": None,
        "rejected_at": None,
        "corrected_at": None,
    }
    values.update(fields)
    return FakeInvoice(**values)


class TestApprove:
    def test_pending_to_approved(self):
        patch = lifecycle.approve(ADMIN, make_invoice(), NOW)
        assert patch["status"] is InvoiceStatus.APPROVED
        assert patch["approved_by_id"] == ADMIN.id
        assert patch["approved_at"] == NOW
        assert patch["rejection_reason"] is None

    def test_already_approved_is_invalid(self):
        with pytest.raises(InvalidTransitionError):
            lifecycle.approve(ADMIN, make_invoice(InvoiceStatus.APPROVED), NOW)

    @pytest.mark.parametrize("who", [ACCOUNTANT, UPLOADER])
    def test_non_admin_denied(self, who):
        with pytest.raises(PermissionDenied):
            lifecycle.approve(who, make_invoice(), NOW)

    def test_permission_checked_before_transition(self):
        with pytest.raises(PermissionDenied):
            lifecycle.approve(UPLOADER, make_invoice(InvoiceStatus.APPROVED), NOW)

    def test_rejected_needs_correction_first(self):
        rejected = make_invoice(InvoiceStatus.REJECTED, rejected_at=NOW)
        with pytest.raises(InvalidTransitionError):
            lifecycle.approve(ADMIN, rejected, NOW)

    def test_corrected_rejection_can_be_approved(self):
        corrected = make_invoice(
            InvoiceStatus.REJECTED,
            rejected_at=NOW,
            corrected_at=NOW + timedelta(minutes=5),
        )
        patch = lifecycle.approve(ADMIN, corrected, NOW + timedelta(minutes=10))
        assert patch["status"] is InvoiceStatus.APPROVED
        assert patch["rejected_at"] is None


class TestReject:
    def test_pending_to_rejected(self):
        patch = lifecycle.reject(SUPER, make_invoice(), "  Wrong amount ", NOW)
        assert patch["status"] is InvoiceStatus.REJECTED
        assert patch["rejection_reason"] == "Wrong amount"
        assert patch["rejected_at"] == NOW
        assert patch["approved_by_id"] is None

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reason_required(self, reason):
        with pytest.raises(InvalidRequestError):
            lifecycle.reject(ADMIN, make_invoice(), reason, NOW)

    def test_reason_checked_before_permission(self):
        with pytest.raises(InvalidRequestError):
            lifecycle.reject(UPLOADER, make_invoice(), "", NOW)

    def test_approved_cannot_be_rejected(self):
        with pytest.raises(InvalidTransitionError):
            lifecycle.reject(SUPER, make_invoice(InvoiceStatus.APPROVED), "late", NOW)


class TestEdit:
    def test_uploader_edits_pending(self):
        patch = lifecycle.edit(UPLOADER, make_invoice(), {"notes": "fixed"}, NOW)
        assert patch == {"notes": "fixed"}

    def test_uploader_cannot_edit_approved(self):
        with pytest.raises(PermissionDenied):
            lifecycle.edit(
                UPLOADER, make_invoice(InvoiceStatus.APPROVED), {"notes": "x"}, NOW
            )

    def test_plain_admin_cannot_edit_approved(self):
        with pytest.raises(PermissionDenied):
            lifecycle.edit(ADMIN, make_invoice(InvoiceStatus.APPROVED), {"notes": "x"}, NOW)

    def test_super_admin_edits_approved(self):
        patch = lifecycle.edit(
            SUPER, make_invoice(InvoiceStatus.APPROVED), {"notes": "x"}, NOW
        )
        assert patch == {"notes": "x"}

    def test_editing_rejected_marks_correction(self):
        rejected = make_invoice(InvoiceStatus.REJECTED, rejected_at=NOW)
        later = NOW + timedelta(hours=1)
        patch = lifecycle.edit(UPLOADER, rejected, {"amount": 10}, later)
        assert patch["corrected_at"] == later

    @pytest.mark.parametrize("field", ["status", "approved_by_id", "version"])
    def test_workflow_fields_refused(self, field):
        with pytest.raises(InvalidRequestError):
            lifecycle.edit(SUPER, make_invoice(), {field: None}, NOW)


class TestTable:
    def test_nothing_returns_to_pending(self):
        assert all(target is not InvoiceStatus.PENDING for _, target in lifecycle.TRANSITIONS)

    def test_allowed_targets(self):
        assert lifecycle.allowed_targets(make_invoice()) == {
            InvoiceStatus.APPROVED,
            InvoiceStatus.REJECTED,
        }
        assert lifecycle.allowed_targets(make_invoice(InvoiceStatus.APPROVED)) == set()
        assert (
            lifecycle.allowed_targets(
                make_invoice(InvoiceStatus.REJECTED, rejected_at=NOW)
            )
            == set()
        )

    def test_delete_guard(self):
        lifecycle.check_delete(UPLOADER, make_invoice())
        with pytest.raises(PermissionDenied):
            lifecycle.check_delete(UPLOADER, make_invoice(InvoiceStatus.APPROVED))
