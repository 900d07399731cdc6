"""FastAPI dependencies: service wiring, token authentication and role checks."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from gatekeeper.core.config import get_settings
from gatekeeper.core.database import get_session_factory
from gatekeeper.core.errors import AuthenticationError, ForbiddenError
from gatekeeper.core.tokens import Claims, KeyStore, TokenCodec
from gatekeeper.services import (
    AssociationManager,
    AuthorizationService,
    AuthService,
    DirectoryService,
)
from gatekeeper.stores import PageRequest, page_request

security = HTTPBearer(auto_error=False)

SessionFactory = Annotated[sessionmaker[Session], Depends(get_session_factory)]


@lru_cache
def get_token_codec() -> TokenCodec:
    """One codec (and one key store) per process."""
    settings = get_settings()
    return TokenCodec(
        KeyStore(settings.TOKEN_KEY_FILE),
        ttl=timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES),
    )


def get_directory(factory: SessionFactory) -> DirectoryService:
    settings = get_settings()
    return DirectoryService(
        factory,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
    )


def get_associations(factory: SessionFactory) -> AssociationManager:
    return AssociationManager(factory)


def get_authorization(factory: SessionFactory) -> AuthorizationService:
    return AuthorizationService(factory)


def get_auth_service(
    factory: SessionFactory,
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> AuthService:
    return AuthService(factory, codec)


def get_page(
    page: Annotated[str | None, Query()] = None,
    page_size: Annotated[str | None, Query(alias="pageSize")] = None,
) -> PageRequest:
    """Lenient page parameters: malformed values fall back to the defaults."""
    return page_request(page, page_size, get_settings().DEFAULT_PAGE_SIZE)


def get_current_claims(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> Claims:
    """Dependency: require a valid Bearer token; the claims are also kept on request.state."""
    if credentials is None:
        raise AuthenticationError("Authorization header is missing")
    claims = auth.authenticate(credentials.credentials)
    request.state.claims = claims
    return claims


def require_admin(
    claims: Annotated[Claims, Depends(get_current_claims)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization)],
) -> Claims:
    """Dependency: caller must hold the configured admin role."""
    if not authorization.user_has_role(int(claims.user_id), get_settings().ADMIN_ROLE_NAME):
        raise ForbiddenError("Admin access required")
    return claims


def require_self_or_admin(
    user_id: int,
    claims: Claims,
    authorization: AuthorizationService,
) -> None:
    if str(user_id) == claims.user_id:
        return
    if not authorization.user_has_role(int(claims.user_id), get_settings().ADMIN_ROLE_NAME):
        raise ForbiddenError("Only the account owner or an admin can do this")


CurrentClaims = Annotated[Claims, Depends(get_current_claims)]
AdminClaims = Annotated[Claims, Depends(require_admin)]
Page = Annotated[PageRequest, Depends(get_page)]
