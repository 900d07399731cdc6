"""Permission endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from gatekeeper.api.deps import AdminClaims, CurrentClaims, Page, get_associations, get_directory
from gatekeeper.schemas.rbac import (
    NameRequest,
    PermissionOut,
    PermissionsListResponse,
    RoleOut,
    RolesListResponse,
    StatusResponse,
)
from gatekeeper.services import AssociationManager, DirectoryService

router = APIRouter()

Directory = Annotated[DirectoryService, Depends(get_directory)]
Associations = Annotated[AssociationManager, Depends(get_associations)]


@router.get("", response_model=PermissionsListResponse)
def list_permissions(
    _claims: CurrentClaims,
    directory: Directory,
    page: Page,
) -> PermissionsListResponse:
    permissions = directory.list_permissions(page.page, page.page_size)
    return PermissionsListResponse(
        permissions=[PermissionOut.model_validate(p) for p in permissions]
    )


@router.post("", response_model=PermissionOut, status_code=status.HTTP_201_CREATED)
def create_permission(body: NameRequest, _admin: AdminClaims, directory: Directory) -> PermissionOut:
    """Create a permission; the name is stored trimmed and lower-cased."""
    return PermissionOut.model_validate(directory.create_permission(body.name))


@router.get("/{permission_id}", response_model=PermissionOut)
def get_permission(permission_id: int, _claims: CurrentClaims, directory: Directory) -> PermissionOut:
    return PermissionOut.model_validate(directory.get_permission(permission_id))


@router.put("/{permission_id}", response_model=PermissionOut)
def update_permission(
    permission_id: int,
    body: NameRequest,
    _admin: AdminClaims,
    directory: Directory,
) -> PermissionOut:
    return PermissionOut.model_validate(directory.update_permission(permission_id, body.name))


@router.delete("/{permission_id}", response_model=StatusResponse)
def delete_permission(permission_id: int, _admin: AdminClaims, directory: Directory) -> StatusResponse:
    directory.delete_permission(permission_id)
    return StatusResponse(status="Permission deleted")


@router.get("/{permission_id}/roles", response_model=RolesListResponse)
def get_permission_roles(
    permission_id: int,
    _claims: CurrentClaims,
    associations: Associations,
) -> RolesListResponse:
    roles = associations.get_roles_by_permission_id(permission_id)
    return RolesListResponse(roles=[RoleOut.model_validate(r) for r in roles])
