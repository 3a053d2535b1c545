# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Common schema types."""
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


class CountResponse(BaseModel):
    """Result of a bulk operation."""

    deleted: int
