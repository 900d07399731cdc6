"""Login and token verification."""

import logging

from sqlalchemy.orm import Session, sessionmaker

from gatekeeper.core.errors import AuthenticationError, BadRequestError, NotFoundError
from gatekeeper.core.security import verify_password
from gatekeeper.core.tokens import Claims, TokenCodec
from gatekeeper.stores import UserStore

INVALID_CREDENTIALS = "Invalid username or password"


class AuthService:
    """Authenticate a caller by password (issuing a token) or by token (returning claims)."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        codec: TokenCodec,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._codec = codec
        self.logger = logger or logging.getLogger(__name__)

    def login(self, username: str, password: str) -> str:
        """
        Check the password and return a fresh token.

        Unknown users and wrong passwords produce the same error so that
        usernames cannot be probed.
        """
        if not isinstance(password, str) or not password:
            raise AuthenticationError(INVALID_CREDENTIALS)
        try:
            with self._session_factory() as session:
                user = UserStore(session).get_by_username(username)
        except (NotFoundError, BadRequestError):
            self.logger.info("Login failed: unknown username")
            raise AuthenticationError(INVALID_CREDENTIALS) from None
        if not verify_password(password, user.password_hash):
            self.logger.info("Login failed for user id=%s", user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = self._codec.issue(
            Claims(user_id=str(user.id), username=user.username, email=user.email)
        )
        self.logger.info("User id=%s logged in", user.id)
        return token

    def authenticate(self, token: str) -> Claims:
        """Verify a token; raises a TokenError kind on any failure."""
        return self._codec.verify(token)
