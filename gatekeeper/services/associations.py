"""
Association manager: user-role and role-permission links.

Every mutation validates its ids before a transaction is opened and then runs
inside its own TransactionCoordinator. Batch operations apply the single-pair
operation per id in one transaction, so the first failure rolls back the whole
batch. Assigning a pair that already exists is a no-op.
"""

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session, sessionmaker

from gatekeeper.core.errors import BadRequestError
from gatekeeper.models import Permission, Role
from gatekeeper.services.authorization import AuthorizationService
from gatekeeper.services.transaction import atomic
from gatekeeper.stores import AssociationStore, PermissionStore, RoleStore, UserStore
from gatekeeper.stores.base import require_id


def _require_ids(values: Sequence[int], label: str) -> list[int]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise BadRequestError(f"{label}s must be a list")
    if len(values) == 0:
        raise BadRequestError(f"{label}s cannot be empty")
    return [require_id(v, label) for v in values]


class AssociationManager:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.logger = logger or logging.getLogger(__name__)
        self._authorization = AuthorizationService(session_factory, logger=self.logger)

    # role <-> permission, single pair

    def _grant(self, session: Session, role_id: int, permission_id: int) -> bool:
        PermissionStore(session).get_by_id(permission_id)
        return AssociationStore(session).add_role_permission(role_id, permission_id)

    def assign_permission_to_role(self, role_id: int, permission_id: int) -> bool:
        """Grant a permission to a role. Returns False if it was already granted."""
        require_id(role_id, "role id")
        require_id(permission_id, "permission id")
        with atomic(self._session_factory, self.logger) as session:
            RoleStore(session).get_by_id(role_id)
            created = self._grant(session, role_id, permission_id)
        self.logger.info("Assigned permission id=%s to role id=%s", permission_id, role_id)
        return created

    def remove_permission_from_role(self, role_id: int, permission_id: int) -> None:
        require_id(role_id, "role id")
        require_id(permission_id, "permission id")
        with atomic(self._session_factory, self.logger) as session:
            AssociationStore(session).remove_role_permission(role_id, permission_id)
        self.logger.info("Removed permission id=%s from role id=%s", permission_id, role_id)

    # role <-> permission, batches

    def add_multiple_permissions_to_role(self, role_id: int, permission_ids: Sequence[int]) -> int:
        """Grant several permissions at once; all or nothing. Returns the number of new grants."""
        require_id(role_id, "role id")
        ids = _require_ids(permission_ids, "permission id")
        created = 0
        with atomic(self._session_factory, self.logger) as session:
            RoleStore(session).get_by_id(role_id)
            for permission_id in ids:
                if self._grant(session, role_id, permission_id):
                    created += 1
        self.logger.info(
            "Assigned %s permissions to role id=%s (%s new)", len(ids), role_id, created
        )
        return created

    def remove_multiple_permissions_from_role(
        self, role_id: int, permission_ids: Sequence[int]
    ) -> None:
        """Revoke several permissions at once; all or nothing."""
        require_id(role_id, "role id")
        ids = _require_ids(permission_ids, "permission id")
        with atomic(self._session_factory, self.logger) as session:
            links = AssociationStore(session)
            for permission_id in ids:
                links.remove_role_permission(role_id, permission_id)
        self.logger.info("Removed %s permissions from role id=%s", len(ids), role_id)

    # user <-> role

    def add_user_role(self, user_id: int, role_id: int) -> bool:
        """Give a user a role. Returns False if the user already had it."""
        require_id(user_id, "user id")
        require_id(role_id, "role id")
        with atomic(self._session_factory, self.logger) as session:
            UserStore(session).get_by_id(user_id)
            RoleStore(session).get_by_id(role_id)
            created = AssociationStore(session).add_user_role(user_id, role_id)
        self.logger.info("Added role id=%s to user id=%s", role_id, user_id)
        return created

    def remove_user_role(self, user_id: int, role_id: int) -> None:
        require_id(user_id, "user id")
        require_id(role_id, "role id")
        with atomic(self._session_factory, self.logger) as session:
            AssociationStore(session).remove_user_role(user_id, role_id)
        self.logger.info("Removed role id=%s from user id=%s", role_id, user_id)

    # reads

    def get_permissions_by_role_id(self, role_id: int) -> list[Permission]:
        require_id(role_id, "role id")
        with self._session_factory() as session:
            RoleStore(session).get_by_id(role_id)
            return AssociationStore(session).permissions_for_role(role_id)

    def get_roles_by_permission_id(self, permission_id: int) -> list[Role]:
        require_id(permission_id, "permission id")
        with self._session_factory() as session:
            PermissionStore(session).get_by_id(permission_id)
            return AssociationStore(session).roles_for_permission(permission_id)

    def get_roles_by_user_id(self, user_id: int) -> list[Role]:
        require_id(user_id, "user id")
        return self._authorization.roles_for_user(user_id)

    def user_has_role(self, user_id: int, role_name: str) -> bool:
        return self._authorization.user_has_role(user_id, role_name)
