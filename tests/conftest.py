# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from src.database import get_db
from src.events import event_bus
from src.main import app
from src.models import (
    AdminSubRole,
    Credential,
    Invoice,
    InvoiceCategory,
    InvoiceStatus,
    Organization,
    User,
    UserRole,
)
from src.models.base import Base
from src.rbac import Principal
from src.rbac.roles import DEFAULT_USER_PERMISSIONS
from src.security import get_password_hash
from src.services import audit_service

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpassword123"  # noqa: S105


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def other_session(db_session):
    """A second, independent session on the same database.

    Used to simulate a concurrent writer.
    """
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_process_state():
    """Drop event subscriptions and queued audit entries between tests."""
    event_bus.clear()
    audit_service._pending.clear()
    yield
    event_bus.clear()
    audit_service._pending.clear()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def organization(db_session) -> Organization:
    org = Organization(name="Acme")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def make_user(db_session, organization):
    """Factory for persisted accounts of any role."""

    def _make_user(
        username: str,
        role: UserRole = UserRole.USER,
        admin_sub_role: AdminSubRole | None = None,
        permissions: list[str] | None = None,
        organization_id=None,
        is_active: bool = True,
    ) -> User:
        if role is UserRole.USER and permissions is None:
            permissions = list(DEFAULT_USER_PERMISSIONS)
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash(TEST_PASSWORD),
            full_name=username.title(),
            is_active=is_active,
            role=role,
            admin_sub_role=admin_sub_role,
            permissions=permissions or [],
            organization_id=organization_id or organization.id,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def test_user(make_user) -> User:
    """Plain user allowed to create credentials."""
    return make_user(
        "testuser",
        permissions=DEFAULT_USER_PERMISSIONS + ["tools.credentials"],
    )


@pytest.fixture
def other_user(make_user) -> User:
    return make_user("otheruser")


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin", UserRole.ADMIN, AdminSubRole.ADMIN)


@pytest.fixture
def super_admin_user(make_user) -> User:
    return make_user("superadmin", UserRole.ADMIN, AdminSubRole.SUPER_ADMIN)


@pytest.fixture
def accountant_user(make_user) -> User:
    return make_user("accountant", UserRole.ACCOUNTANT)


@pytest.fixture
def user_principal(test_user) -> Principal:
    return Principal.from_user(test_user)


@pytest.fixture
def other_principal(other_user) -> Principal:
    return Principal.from_user(other_user)


@pytest.fixture
def admin_principal(admin_user) -> Principal:
    return Principal.from_user(admin_user)


@pytest.fixture
def super_admin_principal(super_admin_user) -> Principal:
    return Principal.from_user(super_admin_user)


@pytest.fixture
def accountant_principal(accountant_user) -> Principal:
    return Principal.from_user(accountant_user)


@pytest.fixture
def make_credential(db_session):
    def _make_credential(owner: User, name: str = "GitHub", **fields) -> Credential:
        values = {
            "username": "svc-account",
            "password": "hunter2",
            "api_key": "ghp_secret",
        }
        values.update(fields)
        credential = Credential(
            name=name,
            created_by_id=owner.id,
            organization_id=owner.organization_id,
            **values,
        )
        db_session.add(credential)
        db_session.commit()
        db_session.refresh(credential)
        return credential

    return _make_credential


@pytest.fixture
def credential(make_credential, test_user) -> Credential:
    """Credential owned by ``test_user``."""
    return make_credential(test_user)


@pytest.fixture
def make_invoice(db_session):
    def _make_invoice(
        uploader: User,
        number: str = "INV-001",
        amount: str = "120.00",
        status: InvoiceStatus = InvoiceStatus.PENDING,
        category: InvoiceCategory = InvoiceCategory.REGULAR,
    ) -> Invoice:
        invoice = Invoice(
            invoice_number=number,
            provider="Hosting Co",
            amount=Decimal(amount),
            billing_date=date(2025, 11, 1),
            status=status,
            category=category,
            organization_id=uploader.organization_id,
            uploaded_by_id=uploader.id,
        )
        db_session.add(invoice)
        db_session.commit()
        db_session.refresh(invoice)
        return invoice

    return _make_invoice


@pytest.fixture
def invoice(make_invoice, test_user) -> Invoice:
    """Pending invoice uploaded by ``test_user``."""
    return make_invoice(test_user)


@pytest.fixture
def login_as(client):
    """Log the shared client in as another user, replacing its session cookie."""

    def _login_as(username: str, password: str = TEST_PASSWORD) -> TestClient:
        response = client.post(
            "/api/v1/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200
        return client

    return _login_as


@pytest.fixture
def authenticated_client(login_as, test_user):
    """Create an authenticated test client."""
    return login_as(test_user.username)


@pytest.fixture
def admin_client(login_as, admin_user):
    """Create an authenticated admin test client."""
    return login_as(admin_user.username)


@pytest.fixture
def super_admin_client(login_as, super_admin_user):
    return login_as(super_admin_user.username)
