"""Lifecycle of users, roles and permissions; each mutation is one transaction."""

import logging

from sqlalchemy.orm import Session, sessionmaker

from gatekeeper.core.errors import BadRequestError
from gatekeeper.core.security import (
    BCRYPT_ROUNDS,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from gatekeeper.models import Permission, Role, User
from gatekeeper.services.transaction import atomic
from gatekeeper.stores import AssociationStore, PermissionStore, RoleStore, UserStore
from gatekeeper.stores.pagination import DEFAULT_PAGE_SIZE


def _validate_password(password: object) -> str:
    if not isinstance(password, str):
        raise BadRequestError("password must be a string")
    if not PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN:
        raise BadRequestError(
            f"password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
        )
    return password


class DirectoryService:
    """
    Create, update and delete flows for the three entity types, plus reads.

    Deleting an entity first removes its association rows in the same
    transaction, so no link ever points at a deleted record.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        bcrypt_rounds: int = BCRYPT_ROUNDS,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._bcrypt_rounds = bcrypt_rounds
        self._page_size = default_page_size
        self.logger = logger or logging.getLogger(__name__)

    def _atomic(self):
        return atomic(self._session_factory, self.logger)

    # users

    def create_user(self, username: str, email: str, password: str) -> User:
        """Register a user; the password is hashed before it reaches storage."""
        password_hash = hash_password(_validate_password(password), self._bcrypt_rounds)
        with self._atomic() as session:
            return UserStore(session).create(username, email, password_hash)

    def update_user(
        self,
        user_id: int,
        username: str,
        email: str,
        password: str | None = None,
    ) -> User:
        """Full replace of username and email; the password hash is kept unless a new password is given."""
        new_hash = None
        if password is not None:
            new_hash = hash_password(_validate_password(password), self._bcrypt_rounds)
        with self._atomic() as session:
            users = UserStore(session)
            current = users.get_by_id(user_id)
            return users.update(user_id, username, email, new_hash or current.password_hash)

    def delete_user(self, user_id: int) -> None:
        with self._atomic() as session:
            users = UserStore(session)
            users.get_by_id(user_id)
            removed = AssociationStore(session).clear_user(user_id)
            users.delete(user_id)
        self.logger.info("Deleted user id=%s with %s role links", user_id, removed)

    def get_user(self, user_id: int) -> User:
        with self._session_factory() as session:
            return UserStore(session).get_by_id(user_id)

    def get_user_by_username(self, username: str) -> User:
        with self._session_factory() as session:
            return UserStore(session).get_by_username(username)

    def list_users(self, page: object = 0, page_size: object = None) -> list[User]:
        with self._session_factory() as session:
            return UserStore(session, self._page_size).list(page, page_size)

    def search_users(self, query: str, page: object = 0, page_size: object = None) -> list[User]:
        with self._session_factory() as session:
            return UserStore(session, self._page_size).search(query, page, page_size)

    def count_users(self) -> int:
        with self._session_factory() as session:
            return UserStore(session).count()

    # roles

    def create_role(self, name: str) -> Role:
        with self._atomic() as session:
            return RoleStore(session).create(name)

    def update_role(self, role_id: int, name: str) -> Role:
        with self._atomic() as session:
            return RoleStore(session).update(role_id, name)

    def delete_role(self, role_id: int) -> None:
        with self._atomic() as session:
            roles = RoleStore(session)
            roles.get_by_id(role_id)
            removed = AssociationStore(session).clear_role(role_id)
            roles.delete(role_id)
        self.logger.info("Deleted role id=%s with %s links", role_id, removed)

    def get_role(self, role_id: int) -> Role:
        with self._session_factory() as session:
            return RoleStore(session).get_by_id(role_id)

    def get_role_by_name(self, name: str) -> Role:
        with self._session_factory() as session:
            return RoleStore(session).get_by_name(name)

    def list_roles(self, page: object = 0, page_size: object = None) -> list[Role]:
        with self._session_factory() as session:
            return RoleStore(session, self._page_size).list(page, page_size)

    # permissions

    def create_permission(self, name: str) -> Permission:
        with self._atomic() as session:
            return PermissionStore(session).create(name)

    def update_permission(self, permission_id: int, name: str) -> Permission:
        with self._atomic() as session:
            return PermissionStore(session).update(permission_id, name)

    def delete_permission(self, permission_id: int) -> None:
        with self._atomic() as session:
            permissions = PermissionStore(session)
            permissions.get_by_id(permission_id)
            removed = AssociationStore(session).clear_permission(permission_id)
            permissions.delete(permission_id)
        self.logger.info("Deleted permission id=%s with %s grants", permission_id, removed)

    def get_permission(self, permission_id: int) -> Permission:
        with self._session_factory() as session:
            return PermissionStore(session).get_by_id(permission_id)

    def list_permissions(self, page: object = 0, page_size: object = None) -> list[Permission]:
        with self._session_factory() as session:
            return PermissionStore(session, self._page_size).list(page, page_size)
