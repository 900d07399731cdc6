"""Role endpoints, including the permissions granted to a role."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from gatekeeper.api.deps import AdminClaims, CurrentClaims, Page, get_associations, get_directory
from gatekeeper.schemas.rbac import (
    NameRequest,
    PermissionIdsRequest,
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


@router.get("", response_model=RolesListResponse)
def list_roles(_claims: CurrentClaims, directory: Directory, page: Page) -> RolesListResponse:
    roles = directory.list_roles(page.page, page.page_size)
    return RolesListResponse(roles=[RoleOut.model_validate(r) for r in roles])


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(body: NameRequest, _admin: AdminClaims, directory: Directory) -> RoleOut:
    return RoleOut.model_validate(directory.create_role(body.name))


@router.get("/{role_id}", response_model=RoleOut)
def get_role(role_id: int, _claims: CurrentClaims, directory: Directory) -> RoleOut:
    return RoleOut.model_validate(directory.get_role(role_id))


@router.put("/{role_id}", response_model=RoleOut)
def update_role(
    role_id: int,
    body: NameRequest,
    _admin: AdminClaims,
    directory: Directory,
) -> RoleOut:
    return RoleOut.model_validate(directory.update_role(role_id, body.name))


@router.delete("/{role_id}", response_model=StatusResponse)
def delete_role(role_id: int, _admin: AdminClaims, directory: Directory) -> StatusResponse:
    """Delete a role together with its user memberships and permission grants."""
    directory.delete_role(role_id)
    return StatusResponse(status="Role deleted")


@router.get("/{role_id}/permissions", response_model=PermissionsListResponse)
def get_role_permissions(
    role_id: int,
    _claims: CurrentClaims,
    associations: Associations,
) -> PermissionsListResponse:
    permissions = associations.get_permissions_by_role_id(role_id)
    return PermissionsListResponse(
        permissions=[PermissionOut.model_validate(p) for p in permissions]
    )


@router.post("/{role_id}/permissions", response_model=StatusResponse)
def add_role_permissions(
    role_id: int,
    body: PermissionIdsRequest,
    _admin: AdminClaims,
    associations: Associations,
) -> StatusResponse:
    """Grant several permissions in one transaction; any failure grants none."""
    associations.add_multiple_permissions_to_role(role_id, body.permission_ids)
    return StatusResponse(status="Permissions assigned")


@router.post("/{role_id}/permissions/remove", response_model=StatusResponse)
def remove_role_permissions(
    role_id: int,
    body: PermissionIdsRequest,
    _admin: AdminClaims,
    associations: Associations,
) -> StatusResponse:
    """Revoke several permissions in one transaction; any failure revokes none."""
    associations.remove_multiple_permissions_from_role(role_id, body.permission_ids)
    return StatusResponse(status="Permissions removed")


@router.post("/{role_id}/permissions/{permission_id}", response_model=StatusResponse)
def assign_permission(
    role_id: int,
    permission_id: int,
    _admin: AdminClaims,
    associations: Associations,
) -> StatusResponse:
    created = associations.assign_permission_to_role(role_id, permission_id)
    return StatusResponse(status="Permission assigned" if created else "Permission already assigned")


@router.delete("/{role_id}/permissions/{permission_id}", response_model=StatusResponse)
def remove_permission(
    role_id: int,
    permission_id: int,
    _admin: AdminClaims,
    associations: Associations,
) -> StatusResponse:
    associations.remove_permission_from_role(role_id, permission_id)
    return StatusResponse(status="Permission removed")
