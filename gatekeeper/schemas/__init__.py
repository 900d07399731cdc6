"""Pydantic request/response schemas."""

from gatekeeper.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from gatekeeper.schemas.health import HealthResponse
from gatekeeper.schemas.rbac import (
    NameRequest,
    PermissionIdsRequest,
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

__all__ = [
    "CountResponse",
    "HasRoleResponse",
    "HealthResponse",
    "LoginRequest",
    "NameRequest",
    "PermissionIdsRequest",
    "PermissionOut",
    "PermissionsListResponse",
    "RegisterRequest",
    "RoleOut",
    "RolesListResponse",
    "StatusResponse",
    "TokenResponse",
    "UserOut",
    "UsersListResponse",
    "UserUpdateRequest",
]
