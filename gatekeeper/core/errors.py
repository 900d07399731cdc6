"""Domain error kinds raised by the stores, services and token codec.

Every error that crosses a store or service boundary is an ``AppError``; raw
SQLAlchemy exceptions are re-classified by ``classify_storage_error`` first.
"""

import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying a stable kind and the matching HTTP status code."""

    kind = "InternalServerError"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind}


class BadRequestError(AppError):
    """Malformed or out-of-range input, raised before storage is touched."""

    kind = "BadRequest"
    status_code = 400


class AuthenticationError(AppError):
    """Wrong credentials or a missing token."""

    kind = "Unauthorized"
    status_code = 401


class ForbiddenError(AppError):
    kind = "Forbidden"
    status_code = 403


class NotFoundError(AppError):
    """Referenced entity or association does not exist (or is soft-deleted)."""

    kind = "NotFound"
    status_code = 404


class DuplicateKeyError(AppError):
    """Uniqueness violation on username, email, role name or permission name."""

    kind = "DuplicateKey"
    status_code = 409


class TransactionStartFailed(AppError):
    kind = "TransactionStartFailed"
    status_code = 503


class NoActiveTransaction(AppError):
    kind = "NoActiveTransaction"
    status_code = 500


class InternalServerError(AppError):
    kind = "InternalServerError"
    status_code = 500


class TokenError(AppError):
    """Base for token failures; all are terminal for the request."""

    kind = "TokenError"
    status_code = 401


class KeySizeInvalid(TokenError):
    kind = "KeySizeInvalid"
    status_code = 500


class DecryptionFailed(TokenError):
    kind = "DecryptionFailed"


class TokenExpired(TokenError):
    kind = "TokenExpired"


class TokenNotYetValid(TokenError):
    kind = "TokenNotYetValid"


_UNIQUE_MARKERS = ("unique", "duplicate key")
_FOREIGN_KEY_MARKERS = ("foreign key",)


def classify_storage_error(exc: Exception, context: str) -> AppError:
    """
    Map a storage exception to a domain error kind, keeping the operation as context.

    AppError instances are returned unchanged. The original exception is logged
    here and should be chained by the caller (``raise ... from exc``).
    """
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig if exc.orig is not None else exc).lower()
        if any(marker in detail for marker in _UNIQUE_MARKERS):
            logger.warning("%s: uniqueness violation", context)
            return DuplicateKeyError(f"{context}: record already exists")
        if any(marker in detail for marker in _FOREIGN_KEY_MARKERS):
            logger.warning("%s: foreign key violation", context)
            return NotFoundError(f"{context}: referenced record not found")
    if isinstance(exc, SQLAlchemyError):
        logger.error("%s failed: %s", context, exc)
        return InternalServerError(f"{context}: internal server error occurred")
    logger.error("%s failed with unexpected error: %r", context, exc)
    return InternalServerError(f"{context}: internal server error occurred")


def classify_begin_error(exc: Exception) -> AppError:
    """Errors while opening a transaction mean storage is unavailable."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, (OperationalError, SQLAlchemyError)):
        logger.error("Could not start transaction: %s", exc)
        return TransactionStartFailed("start transaction failed")
    return classify_storage_error(exc, "start transaction")
