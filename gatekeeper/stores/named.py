"""Role and permission stores: CRUD over uniquely named records."""

from __future__ import annotations

import logging
from typing import ClassVar

from sqlalchemy.orm import Query, Session

from gatekeeper.core.errors import DuplicateKeyError, NotFoundError
from gatekeeper.models import Permission, Role
from gatekeeper.stores.base import clean_name, require_id, storage_errors, utcnow
from gatekeeper.stores.pagination import DEFAULT_PAGE_SIZE, page_request

logger = logging.getLogger(__name__)

NAME_MAX_LEN = 255
ROLE_NAME_MIN_LEN = 3
PERMISSION_NAME_MIN_LEN = 1


class NamedStore:
    """Shared implementation; subclasses pick the model and the name rules."""

    model: ClassVar[type]
    label: ClassVar[str]
    name_min_len: ClassVar[int]
    name_max_len: ClassVar[int] = NAME_MAX_LEN
    lower_case: ClassVar[bool] = False

    def __init__(self, session: Session, default_page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.session = session
        self.default_page_size = default_page_size

    def clean(self, name: object) -> str:
        return clean_name(
            name,
            f"{self.label} name",
            self.name_min_len,
            self.name_max_len,
            lower=self.lower_case,
        )

    def _active(self) -> Query:
        return self.session.query(self.model).filter(self.model.deleted_at.is_(None))

    def _ensure_unique(self, name: str, exclude_id: int | None = None) -> None:
        q = self._active().filter(self.model.name == name)
        if exclude_id is not None:
            q = q.filter(self.model.id != exclude_id)
        if q.first() is not None:
            logger.warning("%s name already exists: %s", self.label, name)
            raise DuplicateKeyError(f"{self.label} name already exists")

    def create(self, name: str):
        name = self.clean(name)
        with storage_errors(f"create {self.label}"):
            self._ensure_unique(name)
            row = self.model(name=name)
            self.session.add(row)
            self.session.flush()
        logger.info("Created %s id=%s name=%s", self.label, row.id, row.name)
        return row

    def get_by_id(self, row_id: int):
        require_id(row_id, f"{self.label} id")
        with storage_errors(f"get {self.label} by id"):
            row = self._active().filter(self.model.id == row_id).first()
        if row is None:
            raise NotFoundError(f"{self.label} not found")
        return row

    def get_by_name(self, name: str):
        name = self.clean(name)
        with storage_errors(f"get {self.label} by name"):
            row = self._active().filter(self.model.name == name).first()
        if row is None:
            raise NotFoundError(f"{self.label} not found")
        return row

    def update(self, row_id: int, name: str):
        """Replace the name of an existing record."""
        require_id(row_id, f"{self.label} id")
        name = self.clean(name)
        row = self.get_by_id(row_id)
        with storage_errors(f"update {self.label}"):
            self._ensure_unique(name, exclude_id=row_id)
            row.name = name
            self.session.flush()
        logger.info("Updated %s id=%s", self.label, row_id)
        return row

    def delete(self, row_id: int) -> None:
        row = self.get_by_id(row_id)
        with storage_errors(f"delete {self.label}"):
            row.deleted_at = utcnow()
            self.session.flush()
        logger.info("Deleted %s id=%s", self.label, row_id)

    def list(self, page: object = 0, page_size: object = None) -> list:
        req = page_request(page, page_size, self.default_page_size)
        with storage_errors(f"list {self.label}s"):
            return (
                self._active()
                .order_by(self.model.id)
                .offset(req.offset)
                .limit(req.limit)
                .all()
            )

    def count(self) -> int:
        with storage_errors(f"count {self.label}s"):
            return self._active().count()


class RoleStore(NamedStore):
    """Role names are trimmed and 3-255 characters long."""

    model = Role
    label = "role"
    name_min_len = ROLE_NAME_MIN_LEN


class PermissionStore(NamedStore):
    """Permission names are trimmed, lower-cased and 1-255 characters long."""

    model = Permission
    label = "permission"
    name_min_len = PERMISSION_NAME_MIN_LEN
    lower_case = True
