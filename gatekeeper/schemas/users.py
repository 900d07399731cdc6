"""Request/response schemas for user endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class UserOut(BaseModel):
    """User record without the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str


class UserUpdateRequest(BaseModel):
    """Full replace of username and email; password is optional."""

    username: str
    email: str
    password: str | None = Field(default=None, description="New password, if changing it")


class UsersListResponse(BaseModel):
    users: list[UserOut]


class CountResponse(BaseModel):
    count: int = Field(..., ge=0)


class HasRoleResponse(BaseModel):
    user_id: int
    role_name: str
    has_role: bool
