"""Stores: validated row operations over one SQLAlchemy session."""

from gatekeeper.stores.associations import AssociationStore
from gatekeeper.stores.named import PermissionStore, RoleStore
from gatekeeper.stores.pagination import PageRequest, page_request
from gatekeeper.stores.users import UserStore

__all__ = [
    "AssociationStore",
    "PageRequest",
    "PermissionStore",
    "RoleStore",
    "UserStore",
    "page_request",
]
