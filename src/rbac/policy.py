# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission resolver.

Every screen asks the same question, "may this principal perform this
action on this resource", and gets its answer here. The function is pure:
callers pass the resource snapshot and, for credentials, the principal's
active share level. Any combination without a rule is denied.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from src.models.enums import Action, InvoiceStatus, ResourceCategory, SharePermission
from src.rbac.principal import (
    ACCOUNTANT_TIER,
    ADMIN_TIER,
    SUPER_ADMIN_TIER,
    USER_TIER,
    Principal,
    has_token,
    is_accountant,
    is_admin,
    is_super_admin,
)

Rule = Callable[[Principal, Any, "SharePermission | None"], bool]

# Invoice write/delete rights keyed by (status, tier, is_owner).
# Anything not listed is denied.
INVOICE_MUTATION_ALLOWED: frozenset[tuple[InvoiceStatus, str, bool]] = frozenset(
    {
        (InvoiceStatus.PENDING, SUPER_ADMIN_TIER, True),
        (InvoiceStatus.PENDING, SUPER_ADMIN_TIER, False),
        (InvoiceStatus.PENDING, ADMIN_TIER, True),
        (InvoiceStatus.PENDING, ADMIN_TIER, False),
        (InvoiceStatus.PENDING, ACCOUNTANT_TIER, True),
        (InvoiceStatus.PENDING, USER_TIER, True),
        # Rejected invoices stay open for correction
        (InvoiceStatus.REJECTED, SUPER_ADMIN_TIER, True),
        (InvoiceStatus.REJECTED, SUPER_ADMIN_TIER, False),
        (InvoiceStatus.REJECTED, ADMIN_TIER, True),
        (InvoiceStatus.REJECTED, ADMIN_TIER, False),
        (InvoiceStatus.REJECTED, ACCOUNTANT_TIER, True),
        (InvoiceStatus.REJECTED, USER_TIER, True),
        # Approved invoices are frozen for everyone below super-admin
        (InvoiceStatus.APPROVED, SUPER_ADMIN_TIER, True),
        (InvoiceStatus.APPROVED, SUPER_ADMIN_TIER, False),
    }
)


def _owns_credential(principal: Principal, credential: Any) -> bool:
    return credential is not None and credential.created_by_id == principal.id


def _owns_invoice(principal: Principal, invoice: Any) -> bool:
    return invoice is not None and invoice.uploaded_by_id == principal.id


def _same_organization(principal: Principal, resource: Any) -> bool:
    return (
        principal.organization_id is not None
        and resource.organization_id == principal.organization_id
    )


# Credential rules


def _credential_read(principal, credential, share) -> bool:
    if is_admin(principal) or is_accountant(principal):
        return True
    if credential is None:
        return False
    return _owns_credential(principal, credential) or share is not None


def _credential_write(principal, credential, share) -> bool:
    if is_admin(principal):
        return True
    if is_accountant(principal):
        return False
    if credential is None:
        # Creating a new credential
        return has_token(principal, "tools", "credentials")
    return _owns_credential(principal, credential) or share is SharePermission.EDIT


def _admin_only(principal, resource, share) -> bool:
    return is_admin(principal)


def _super_admin_only(principal, resource, share) -> bool:
    return is_super_admin(principal)


# Invoice rules


def _invoice_read(principal, invoice, share) -> bool:
    if is_admin(principal) or is_accountant(principal):
        return True
    if invoice is None:
        return False
    if _owns_invoice(principal, invoice):
        return True
    return has_token(principal, "financial", "invoices") and _same_organization(
        principal, invoice
    )


def _invoice_mutate(principal, invoice, share) -> bool:
    if invoice is None:
        return False
    key = (invoice.status, principal.tier, _owns_invoice(principal, invoice))
    return key in INVOICE_MUTATION_ALLOWED


def _invoice_write(principal, invoice, share) -> bool:
    if invoice is None:
        # Uploading a new invoice
        return not is_accountant(principal)
    return _invoice_mutate(principal, invoice, share)


# User account rules


def _user_account_read(principal, account, share) -> bool:
    if is_admin(principal) or is_accountant(principal):
        return True
    return account is not None and account.id == principal.id


# Organization rules


def _organization_read(principal, organization, share) -> bool:
    if is_admin(principal) or is_accountant(principal):
        return True
    return has_token(principal, "management", "organizations")


def _organization_write(principal, organization, share) -> bool:
    if is_admin(principal):
        return True
    return has_token(principal, "management", "organizations")


POLICY: dict[tuple[ResourceCategory, Action], Rule] = {
    (ResourceCategory.CREDENTIAL, Action.READ): _credential_read,
    (ResourceCategory.CREDENTIAL, Action.DISCLOSE): _credential_read,
    (ResourceCategory.CREDENTIAL, Action.WRITE): _credential_write,
    (ResourceCategory.CREDENTIAL, Action.DELETE): _admin_only,
    (ResourceCategory.CREDENTIAL, Action.BULK_DELETE): _admin_only,
    (ResourceCategory.INVOICE, Action.READ): _invoice_read,
    (ResourceCategory.INVOICE, Action.WRITE): _invoice_write,
    (ResourceCategory.INVOICE, Action.DELETE): _invoice_mutate,
    (ResourceCategory.INVOICE, Action.APPROVE): _admin_only,
    (ResourceCategory.INVOICE, Action.BULK_DELETE): _admin_only,
    (ResourceCategory.USER_ACCOUNT, Action.READ): _user_account_read,
    (ResourceCategory.USER_ACCOUNT, Action.WRITE): _super_admin_only,
    (ResourceCategory.USER_ACCOUNT, Action.DELETE): _super_admin_only,
    (ResourceCategory.ORGANIZATION, Action.READ): _organization_read,
    (ResourceCategory.ORGANIZATION, Action.WRITE): _organization_write,
    (ResourceCategory.ORGANIZATION, Action.DELETE): _admin_only,
}


def can_perform(
    principal: Principal | None,
    category: ResourceCategory | str,
    action: Action | str,
    resource: Any = None,
    share: SharePermission | None = None,
) -> bool:
    """Decide whether ``principal`` may perform ``action`` on ``category``.

    Args:
        principal: The acting principal; ``None`` is always denied
        category: Resource category
        action: Requested action
        resource: Snapshot of the target record, or ``None`` for a
            category-level check (listing, creation, bulk operations)
        share: The principal's active share level on a credential, if any

    Returns:
        True when a rule explicitly allows the action
    """
    if principal is None:
        return False
    try:
        rule = POLICY.get((ResourceCategory(category), Action(action)))
    except ValueError:
        return False
    if rule is None:
        return False
    return bool(rule(principal, resource, share))


def can_manage_grants(principal: Principal, credential: Any) -> bool:
    """Whether ``principal`` may share or revoke access to ``credential``.

    Requires write and disclose rights that do not themselves come from a
    share grant, so a grantee cannot pass access on.
    """
    return can_perform(
        principal, ResourceCategory.CREDENTIAL, Action.DISCLOSE, credential
    ) and can_perform(principal, ResourceCategory.CREDENTIAL, Action.WRITE, credential)
