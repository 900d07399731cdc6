"""Registration and login; the only routes that do not require a token."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from gatekeeper.api.deps import get_auth_service, get_directory
from gatekeeper.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from gatekeeper.schemas.users import UserOut
from gatekeeper.services import AuthService, DirectoryService

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    directory: Annotated[DirectoryService, Depends(get_directory)],
) -> UserOut:
    """Create an account. Username and email must not be taken (409 otherwise)."""
    user = directory.create_user(body.username, body.email, body.password)
    return UserOut.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns an encrypted session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    token = auth.login(body.username, body.password)
    return TokenResponse(token=token, token_type="bearer")
