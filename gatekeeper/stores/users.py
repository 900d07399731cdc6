"""Identity store: CRUD, search and pagination over user records."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from gatekeeper.core.errors import BadRequestError, DuplicateKeyError, NotFoundError
from gatekeeper.core.security import USERNAME_MAX_LEN, USERNAME_MIN_LEN
from gatekeeper.models import User
from gatekeeper.stores.base import clean_name, require_id, storage_errors, utcnow
from gatekeeper.stores.pagination import DEFAULT_PAGE_SIZE, page_request

logger = logging.getLogger(__name__)

EMAIL_MAX_LEN = 255
PASSWORD_HASH_MAX_LEN = 255


def clean_username(username: object) -> str:
    return clean_name(username, "username", USERNAME_MIN_LEN, USERNAME_MAX_LEN)


def clean_email(email: object) -> str:
    """Trim and lower-case an email; it must contain '@' and fit in 255 characters."""
    cleaned = clean_name(email, "email", 3, EMAIL_MAX_LEN, lower=True)
    local, sep, domain = cleaned.partition("@")
    if not sep or not local or not domain:
        raise BadRequestError("email must be a valid address")
    return cleaned


def _check_password_hash(password_hash: object) -> str:
    if not isinstance(password_hash, str) or not password_hash:
        raise BadRequestError("password hash cannot be empty")
    if len(password_hash) > PASSWORD_HASH_MAX_LEN:
        raise BadRequestError("password hash is too long")
    return password_hash


class UserStore:
    """User rows reachable through one session. Soft-deleted users are invisible."""

    def __init__(self, session: Session, default_page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.session = session
        self.default_page_size = default_page_size

    def _active(self) -> Query:
        return self.session.query(User).filter(User.deleted_at.is_(None))

    def _ensure_unique(self, username: str, email: str, exclude_id: int | None = None) -> None:
        by_username = self._active().filter(User.username == username)
        by_email = self._active().filter(User.email == email)
        if exclude_id is not None:
            by_username = by_username.filter(User.id != exclude_id)
            by_email = by_email.filter(User.id != exclude_id)
        if by_username.first() is not None:
            logger.warning("Username already exists: %s", username)
            raise DuplicateKeyError("username already exists")
        if by_email.first() is not None:
            logger.warning("Email already exists for username: %s", username)
            raise DuplicateKeyError("email already exists")

    def create(self, username: str, email: str, password_hash: str) -> User:
        username = clean_username(username)
        email = clean_email(email)
        password_hash = _check_password_hash(password_hash)
        with storage_errors("create user"):
            self._ensure_unique(username, email)
            user = User(username=username, email=email, password_hash=password_hash)
            self.session.add(user)
            self.session.flush()
        logger.info("Created user id=%s username=%s", user.id, user.username)
        return user

    def get_by_id(self, user_id: int) -> User:
        require_id(user_id, "user id")
        with storage_errors("get user by id"):
            user = self._active().filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("user not found")
        return user

    def get_by_username(self, username: str) -> User:
        username = clean_username(username)
        with storage_errors("get user by username"):
            user = self._active().filter(User.username == username).first()
        if user is None:
            raise NotFoundError("user not found")
        return user

    def get_by_email(self, email: str) -> User:
        email = clean_email(email)
        with storage_errors("get user by email"):
            user = self._active().filter(User.email == email).first()
        if user is None:
            raise NotFoundError("user not found")
        return user

    def update(self, user_id: int, username: str, email: str, password_hash: str) -> User:
        """Replace every mutable field of the user."""
        require_id(user_id, "user id")
        username = clean_username(username)
        email = clean_email(email)
        password_hash = _check_password_hash(password_hash)
        user = self.get_by_id(user_id)
        with storage_errors("update user"):
            self._ensure_unique(username, email, exclude_id=user_id)
            user.username = username
            user.email = email
            user.password_hash = password_hash
            self.session.flush()
        logger.info("Updated user id=%s", user_id)
        return user

    def delete(self, user_id: int) -> None:
        user = self.get_by_id(user_id)
        with storage_errors("delete user"):
            user.deleted_at = utcnow()
            self.session.flush()
        logger.info("Deleted user id=%s", user_id)

    def list(self, page: object = 0, page_size: object = None) -> list[User]:
        req = page_request(page, page_size, self.default_page_size)
        with storage_errors("list users"):
            return (
                self._active()
                .order_by(User.id)
                .offset(req.offset)
                .limit(req.limit)
                .all()
            )

    def search(self, query: str, page: object = 0, page_size: object = None) -> list[User]:
        """Case-insensitive substring match on username or email."""
        if not isinstance(query, str):
            raise BadRequestError("search query must be a string")
        needle = query.strip().lower()
        req = page_request(page, page_size, self.default_page_size)
        with storage_errors("search users"):
            q = self._active()
            if needle:
                q = q.filter(
                    func.lower(User.username).contains(needle, autoescape=True)
                    | func.lower(User.email).contains(needle, autoescape=True)
                )
            return q.order_by(User.id).offset(req.offset).limit(req.limit).all()

    def count(self) -> int:
        with storage_errors("count users"):
            return self._active().count()
