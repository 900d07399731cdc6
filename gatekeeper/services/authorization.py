"""Authorization queries: role and permission membership for a user."""

import logging

from sqlalchemy.orm import Session, sessionmaker

from gatekeeper.core.errors import BadRequestError
from gatekeeper.models import Permission, Role
from gatekeeper.stores import AssociationStore, UserStore
from gatekeeper.stores.base import require_id

ROLE_NAME_QUERY_MIN_LEN = 2


class AuthorizationService:
    """
    Read-only composition over the stores.

    Every call opens its own session, so answers reflect the latest committed
    association state; nothing is cached.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.logger = logger or logging.getLogger(__name__)

    def user_has_role(self, user_id: int, role_name: str) -> bool:
        require_id(user_id, "user id")
        if not isinstance(role_name, str) or len(role_name.strip()) < ROLE_NAME_QUERY_MIN_LEN:
            self.logger.warning("Role name too short for user id=%s", user_id)
            raise BadRequestError("role name must be at least 2 characters long")
        with self._session_factory() as session:
            return AssociationStore(session).user_has_role_named(user_id, role_name.strip())

    def user_has_permission(self, user_id: int, permission_name: str) -> bool:
        require_id(user_id, "user id")
        if not isinstance(permission_name, str) or not permission_name.strip():
            raise BadRequestError("permission name cannot be empty")
        name = permission_name.strip().lower()
        with self._session_factory() as session:
            return AssociationStore(session).user_has_permission_named(user_id, name)

    def roles_for_user(self, user_id: int) -> list[Role]:
        """Roles held by an existing user (NotFoundError otherwise)."""
        with self._session_factory() as session:
            UserStore(session).get_by_id(user_id)
            return AssociationStore(session).roles_for_user(user_id)

    def permissions_for_user(self, user_id: int) -> list[Permission]:
        """Distinct permissions a user holds through any role."""
        with self._session_factory() as session:
            UserStore(session).get_by_id(user_id)
            return AssociationStore(session).permissions_for_user(user_id)
