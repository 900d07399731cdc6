"""Join-row operations for user-role membership and role-permission grants."""

from __future__ import annotations

import logging

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from gatekeeper.core.errors import InternalServerError, NotFoundError
from gatekeeper.models import Permission, Role, RolePermission, UserRole
from gatekeeper.stores.base import require_id, storage_errors

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class AssociationStore:
    """
    Plain join rows; callers check that both ends exist before linking.

    Adding an existing pair is a no-op (returns False), including when a
    concurrent transaction commits the same pair first. Removing a pair that
    does not exist raises NotFoundError.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _insert_pair(self, model: type, **pair: int) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING on the pair constraint; True if a row was written."""
        insert = _INSERT_BY_DIALECT.get(self.session.get_bind().dialect.name)
        if insert is None:
            raise InternalServerError("association insert is not supported on this database")
        stmt = insert(model).values(**pair).on_conflict_do_nothing(index_elements=list(pair))
        return self.session.execute(stmt).rowcount == 1

    # user <-> role

    def _user_role(self, user_id: int, role_id: int) -> UserRole | None:
        return (
            self.session.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
            .first()
        )

    def add_user_role(self, user_id: int, role_id: int) -> bool:
        require_id(user_id, "user id")
        require_id(role_id, "role id")
        with storage_errors("add role to user"):
            created = self._user_role(user_id, role_id) is None and self._insert_pair(
                UserRole, user_id=user_id, role_id=role_id
            )
        if not created:
            logger.info("User id=%s already has role id=%s", user_id, role_id)
        return created

    def remove_user_role(self, user_id: int, role_id: int) -> None:
        require_id(user_id, "user id")
        require_id(role_id, "role id")
        with storage_errors("remove role from user"):
            link = self._user_role(user_id, role_id)
            if link is None:
                raise NotFoundError("user does not have this role")
            self.session.delete(link)
            self.session.flush()

    def has_user_role(self, user_id: int, role_id: int) -> bool:
        with storage_errors("check user role"):
            return self._user_role(user_id, role_id) is not None

    def roles_for_user(self, user_id: int) -> list[Role]:
        with storage_errors("get roles by user id"):
            return (
                self.session.query(Role)
                .join(UserRole, UserRole.role_id == Role.id)
                .filter(UserRole.user_id == user_id, Role.deleted_at.is_(None))
                .order_by(Role.id)
                .all()
            )

    def user_has_role_named(self, user_id: int, role_name: str) -> bool:
        with storage_errors("check user role"):
            count = (
                self.session.query(UserRole)
                .join(Role, Role.id == UserRole.role_id)
                .filter(
                    UserRole.user_id == user_id,
                    Role.name == role_name,
                    Role.deleted_at.is_(None),
                )
                .count()
            )
        return count > 0

    # role <-> permission

    def _role_permission(self, role_id: int, permission_id: int) -> RolePermission | None:
        return (
            self.session.query(RolePermission)
            .filter(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
            .first()
        )

    def add_role_permission(self, role_id: int, permission_id: int) -> bool:
        require_id(role_id, "role id")
        require_id(permission_id, "permission id")
        with storage_errors("assign permission to role"):
            created = self._role_permission(role_id, permission_id) is None and self._insert_pair(
                RolePermission, role_id=role_id, permission_id=permission_id
            )
        if not created:
            logger.info("Role id=%s already has permission id=%s", role_id, permission_id)
        return created

    def remove_role_permission(self, role_id: int, permission_id: int) -> None:
        require_id(role_id, "role id")
        require_id(permission_id, "permission id")
        with storage_errors("remove permission from role"):
            link = self._role_permission(role_id, permission_id)
            if link is None:
                raise NotFoundError("role does not have this permission")
            self.session.delete(link)
            self.session.flush()

    def permissions_for_role(self, role_id: int) -> list[Permission]:
        with storage_errors("get permissions by role id"):
            return (
                self.session.query(Permission)
                .join(RolePermission, RolePermission.permission_id == Permission.id)
                .filter(RolePermission.role_id == role_id, Permission.deleted_at.is_(None))
                .order_by(Permission.id)
                .all()
            )

    def roles_for_permission(self, permission_id: int) -> list[Role]:
        with storage_errors("get roles by permission id"):
            return (
                self.session.query(Role)
                .join(RolePermission, RolePermission.role_id == Role.id)
                .filter(RolePermission.permission_id == permission_id, Role.deleted_at.is_(None))
                .order_by(Role.id)
                .all()
            )

    # transitive

    def permissions_for_user(self, user_id: int) -> list[Permission]:
        """Distinct permissions granted through any of the user's live roles."""
        with storage_errors("get permissions by user id"):
            return (
                self.session.query(Permission)
                .join(RolePermission, RolePermission.permission_id == Permission.id)
                .join(Role, Role.id == RolePermission.role_id)
                .join(UserRole, UserRole.role_id == Role.id)
                .filter(
                    UserRole.user_id == user_id,
                    Role.deleted_at.is_(None),
                    Permission.deleted_at.is_(None),
                )
                .distinct()
                .order_by(Permission.id)
                .all()
            )

    def user_has_permission_named(self, user_id: int, permission_name: str) -> bool:
        with storage_errors("check user permission"):
            count = (
                self.session.query(RolePermission)
                .join(Permission, Permission.id == RolePermission.permission_id)
                .join(Role, Role.id == RolePermission.role_id)
                .join(UserRole, UserRole.role_id == Role.id)
                .filter(
                    UserRole.user_id == user_id,
                    Permission.name == permission_name,
                    Role.deleted_at.is_(None),
                    Permission.deleted_at.is_(None),
                )
                .count()
            )
        return count > 0

    # cleanup before an entity is deleted

    def clear_user(self, user_id: int) -> int:
        with storage_errors("remove roles of user"):
            removed = (
                self.session.query(UserRole)
                .filter(UserRole.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.session.flush()
        return removed

    def clear_role(self, role_id: int) -> int:
        with storage_errors("remove links of role"):
            removed = (
                self.session.query(UserRole)
                .filter(UserRole.role_id == role_id)
                .delete(synchronize_session=False)
            )
            removed += (
                self.session.query(RolePermission)
                .filter(RolePermission.role_id == role_id)
                .delete(synchronize_session=False)
            )
            self.session.flush()
        return removed

    def clear_permission(self, permission_id: int) -> int:
        with storage_errors("remove grants of permission"):
            removed = (
                self.session.query(RolePermission)
                .filter(RolePermission.permission_id == permission_id)
                .delete(synchronize_session=False)
            )
            self.session.flush()
        return removed
