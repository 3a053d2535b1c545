# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission catalogue API endpoints."""

from fastapi import APIRouter, Depends

from src.api.deps import get_current_principal
from src.rbac import Principal
from src.rbac.permissions import CATALOGUE_VERSION, CORE_PERMISSIONS, PERMISSION_MODULES
from src.rbac.roles import ROLE_DESCRIPTIONS
from src.schemas.rbac import (
    PermissionCatalogueSchema,
    PermissionModuleSchema,
    PermissionSchema,
)

router = APIRouter()


@router.get("", response_model=PermissionCatalogueSchema)
def get_catalogue(
    principal: Principal = Depends(get_current_principal),
) -> PermissionCatalogueSchema:
    """The closed set of permission tokens that can be assigned to users."""
    return PermissionCatalogueSchema(
        version=CATALOGUE_VERSION,
        roles={role.value: text for role, text in ROLE_DESCRIPTIONS.items()},
        modules=[
            PermissionModuleSchema(name=name, label=spec["label"], tokens=spec["tokens"])
            for name, spec in PERMISSION_MODULES.items()
        ],
        permissions=[PermissionSchema(**p) for p in CORE_PERMISSIONS],
    )
