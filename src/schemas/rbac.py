# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission catalogue schemas."""

from pydantic import BaseModel


class PermissionSchema(BaseModel):
    """Schema representing a permission token."""

    code: str
    module: str
    description: str | None


class PermissionModuleSchema(BaseModel):
    """A module of the catalogue with its tokens."""

    name: str
    label: str
    tokens: dict[str, str]


class PermissionCatalogueSchema(BaseModel):
    version: str
    roles: dict[str, str]
    modules: list[PermissionModuleSchema]
    permissions: list[PermissionSchema]
