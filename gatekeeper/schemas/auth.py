"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterRequest(BaseModel):
    """New account. Length and format rules are enforced by the user store."""

    username: str = Field(..., description="Username (1-255 chars, trimmed)")
    email: str = Field(..., description="Email address (lower-cased)")
    password: str = Field(..., description="Password (6-128 chars)")


class TokenResponse(BaseModel):
    """Encrypted session token returned after successful login."""

    token: str = Field(..., description="Opaque session token")
    token_type: str = Field(default="bearer", description="Token type")
