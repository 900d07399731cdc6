"""Request/response schemas for role, permission and association endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class NameRequest(BaseModel):
    """Create or rename a role or permission."""

    name: str = Field(..., description="Role (3-255 chars) or permission (1-255 chars) name")


class PermissionIdsRequest(BaseModel):
    """Permission ids for a bulk grant or revoke; applied all-or-nothing."""

    permission_ids: list[int] = Field(..., min_length=1)


class RolesListResponse(BaseModel):
    roles: list[RoleOut]


class PermissionsListResponse(BaseModel):
    permissions: list[PermissionOut]


class StatusResponse(BaseModel):
    status: str
