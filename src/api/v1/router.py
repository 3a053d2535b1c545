# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import auth, credentials, invoices, permissions, users

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Credential routes
api_router.include_router(
    credentials.router, prefix="/credentials", tags=["credentials"]
)

# Invoice routes
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])

# Permission catalogue
api_router.include_router(
    permissions.router, prefix="/permissions", tags=["permissions"]
)

# User management routes
api_router.include_router(users.router, tags=["users"])
