# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the principal model and its predicates."""

import uuid

import pytest

from src.models.enums import AdminSubRole, UserRole
from src.rbac.permissions import unknown_codes
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
    is_user,
    normalize_assignment,
)


def make(role, sub_role=None, permissions=()):
    return Principal(
        id=uuid.uuid4(),
        role=role,
        admin_sub_role=sub_role,
        permissions=frozenset(permissions),
    )


class TestShapes:
    """Construction always yields one of the three exclusive shapes."""

    def test_admin_drops_tokens(self):
        p = make(UserRole.ADMIN, AdminSubRole.ADMIN, ["tools.credentials"])
        assert p.permissions == frozenset()
        assert p.admin_sub_role is AdminSubRole.ADMIN

    def test_admin_without_sub_role_defaults_to_plain_admin(self):
        p = make(UserRole.ADMIN)
        assert p.admin_sub_role is AdminSubRole.ADMIN
        assert is_admin(p)
        assert not is_super_admin(p)

    def test_admin_with_garbage_sub_role_is_not_super(self):
        p = make(UserRole.ADMIN, "root")
        assert p.admin_sub_role is AdminSubRole.ADMIN
        assert p.tier == ADMIN_TIER

    def test_accountant_drops_sub_role_and_tokens(self):
        p = make(UserRole.ACCOUNTANT, AdminSubRole.SUPER_ADMIN, ["tools.credentials"])
        assert p.admin_sub_role is None
        assert p.permissions == frozenset()

    def test_user_drops_sub_role(self):
        p = make(UserRole.USER, AdminSubRole.SUPER_ADMIN, ["general.dashboard"])
        assert p.admin_sub_role is None
        assert p.permissions == {"general.dashboard"}

    @pytest.mark.parametrize("role", [None, "", "owner"])
    def test_unknown_role_becomes_tokenless_user(self, role):
        p = make(role, permissions=["financial.invoices", "tools.credentials"])
        assert p.role is UserRole.USER
        assert p.permissions == frozenset()
        assert is_user(p)

    def test_role_accepts_plain_strings(self):
        p = make("admin", "super-admin")
        assert is_super_admin(p)
        assert p.tier == SUPER_ADMIN_TIER


class TestTiers:
    @pytest.mark.parametrize(
        "role,sub_role,tier",
        [
            (UserRole.ADMIN, AdminSubRole.SUPER_ADMIN, SUPER_ADMIN_TIER),
            (UserRole.ADMIN, AdminSubRole.ADMIN, ADMIN_TIER),
            (UserRole.ACCOUNTANT, None, ACCOUNTANT_TIER),
            (UserRole.USER, None, USER_TIER),
        ],
    )
    def test_tier(self, role, sub_role, tier):
        assert make(role, sub_role).tier == tier

    def test_accountant_predicate(self):
        assert is_accountant(make(UserRole.ACCOUNTANT))
        assert not is_accountant(make(UserRole.USER))


class TestHasToken:
    def test_user_with_token(self):
        p = make(UserRole.USER, permissions=["financial.invoices"])
        assert has_token(p, "financial", "invoices")

    def test_token_is_scoped_to_module(self):
        p = make(UserRole.USER, permissions=["financial.invoices"])
        assert not has_token(p, "tools", "invoices")

    def test_unknown_token_is_false(self):
        p = make(UserRole.USER, permissions=["financial.bogus"])
        assert not has_token(p, "financial", "bogus")

    def test_admin_and_accountant_never_hold_tokens(self):
        assert not has_token(make(UserRole.ADMIN), "financial", "invoices")
        assert not has_token(make(UserRole.ACCOUNTANT), "financial", "invoices")


class TestNormalizeAssignment:
    def test_to_admin_clears_tokens(self):
        role, sub_role, tokens = normalize_assignment(
            UserRole.ADMIN, None, ["general.dashboard"]
        )
        assert role is UserRole.ADMIN
        assert sub_role is AdminSubRole.ADMIN
        assert tokens == []

    def test_to_user_clears_sub_role(self):
        role, sub_role, tokens = normalize_assignment(
            UserRole.USER, AdminSubRole.SUPER_ADMIN, ["tools.credentials", "general.dashboard"]
        )
        assert role is UserRole.USER
        assert sub_role is None
        assert tokens == ["general.dashboard", "tools.credentials"]

    def test_to_accountant_clears_both(self):
        assert normalize_assignment(
            UserRole.ACCOUNTANT, AdminSubRole.ADMIN, ["general.dashboard"]
        ) == (UserRole.ACCOUNTANT, None, [])


def test_unknown_codes_reports_codes_outside_catalogue():
    assert unknown_codes(["general.dashboard", "general.nope", "x"]) == [
        "general.nope",
        "x",
    ]
