# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication schemas."""
from pydantic import BaseModel

from src.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Schema for login request."""

    username: str
    password: str


class AuthResponse(BaseModel):
    """Schema for authentication response."""

    user: UserResponse
