"""Services: transactional flows and authorization queries over the stores."""

from gatekeeper.services.associations import AssociationManager
from gatekeeper.services.auth import AuthService
from gatekeeper.services.authorization import AuthorizationService
from gatekeeper.services.directory import DirectoryService
from gatekeeper.services.transaction import TransactionCoordinator, TransactionState, atomic

__all__ = [
    "AssociationManager",
    "AuthService",
    "AuthorizationService",
    "DirectoryService",
    "TransactionCoordinator",
    "TransactionState",
    "atomic",
]
