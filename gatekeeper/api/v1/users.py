"""User endpoints: lookups, search, updates and role membership."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gatekeeper.api.deps import (
    AdminClaims,
    CurrentClaims,
    Page,
    get_associations,
    get_authorization,
    get_directory,
    require_self_or_admin,
)
from gatekeeper.schemas.rbac import (
    PermissionOut,
    PermissionsListResponse,
    RoleOut,
    RolesListResponse,
    StatusResponse,
)
from gatekeeper.schemas.users import (
    CountResponse,
    HasRoleResponse,
    UserOut,
    UsersListResponse,
    UserUpdateRequest,
)
from gatekeeper.services import AssociationManager, AuthorizationService, DirectoryService

router = APIRouter()

Directory = Annotated[DirectoryService, Depends(get_directory)]
Associations = Annotated[AssociationManager, Depends(get_associations)]
Authorization = Annotated[AuthorizationService, Depends(get_authorization)]


def _users(users: list) -> UsersListResponse:
    return UsersListResponse(users=[UserOut.model_validate(u) for u in users])


@router.get("", response_model=UsersListResponse)
def list_users(_claims: CurrentClaims, directory: Directory, page: Page) -> UsersListResponse:
    """List users ordered by id; page is zero-based."""
    return _users(directory.list_users(page.page, page.page_size))


@router.get("/search", response_model=UsersListResponse)
def search_users(
    _claims: CurrentClaims,
    directory: Directory,
    page: Page,
    query: Annotated[str, Query()] = "",
) -> UsersListResponse:
    """Case-insensitive substring search over username and email."""
    return _users(directory.search_users(query, page.page, page.page_size))


@router.get("/count", response_model=CountResponse)
def count_users(_claims: CurrentClaims, directory: Directory) -> CountResponse:
    return CountResponse(count=directory.count_users())


@router.get("/by-name/{username}", response_model=UserOut)
def get_user_by_username(username: str, _claims: CurrentClaims, directory: Directory) -> UserOut:
    return UserOut.model_validate(directory.get_user_by_username(username))


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, _claims: CurrentClaims, directory: Directory) -> UserOut:
    return UserOut.model_validate(directory.get_user(user_id))


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    claims: CurrentClaims,
    directory: Directory,
    authorization: Authorization,
) -> UserOut:
    """Replace username and email (and optionally the password). Owner or admin only."""
    require_self_or_admin(user_id, claims, authorization)
    user = directory.update_user(user_id, body.username, body.email, body.password)
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=StatusResponse)
def delete_user(
    user_id: int,
    claims: CurrentClaims,
    directory: Directory,
    authorization: Authorization,
) -> StatusResponse:
    require_self_or_admin(user_id, claims, authorization)
    directory.delete_user(user_id)
    return StatusResponse(status="User deleted")


@router.get("/{user_id}/roles", response_model=RolesListResponse)
def get_user_roles(user_id: int, _claims: CurrentClaims, associations: Associations) -> RolesListResponse:
    roles = associations.get_roles_by_user_id(user_id)
    return RolesListResponse(roles=[RoleOut.model_validate(r) for r in roles])


@router.get("/{user_id}/permissions", response_model=PermissionsListResponse)
def get_user_permissions(
    user_id: int,
    _claims: CurrentClaims,
    authorization: Authorization,
) -> PermissionsListResponse:
    """Permissions the user holds through any of their roles."""
    permissions = authorization.permissions_for_user(user_id)
    return PermissionsListResponse(
        permissions=[PermissionOut.model_validate(p) for p in permissions]
    )


@router.get("/{user_id}/has-role/{role_name}", response_model=HasRoleResponse)
def user_has_role(
    user_id: int,
    role_name: str,
    _claims: CurrentClaims,
    associations: Associations,
) -> HasRoleResponse:
    has_role = associations.user_has_role(user_id, role_name)
    return HasRoleResponse(user_id=user_id, role_name=role_name, has_role=has_role)


@router.post("/{user_id}/roles/{role_id}", response_model=StatusResponse)
def add_user_role(
    user_id: int,
    role_id: int,
    _admin: AdminClaims,
    associations: Associations,
) -> StatusResponse:
    created = associations.add_user_role(user_id, role_id)
    return StatusResponse(status="Role added" if created else "Role already assigned")


@router.delete("/{user_id}/roles/{role_id}", response_model=StatusResponse)
def remove_user_role(
    user_id: int,
    role_id: int,
    _admin: AdminClaims,
    associations: Associations,
) -> StatusResponse:
    associations.remove_user_role(user_id, role_id)
    return StatusResponse(status="Role removed")
