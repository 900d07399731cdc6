"""Shared validation and error translation for the stores."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from gatekeeper.core.errors import BadRequestError, classify_storage_error

# Ids are stored as signed 64-bit integers.
MAX_ID = 2**63 - 1


def require_id(value: object, label: str) -> int:
    """Return value if it is a usable id, otherwise raise BadRequestError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequestError(f"invalid {label}")
    if value <= 0 or value > MAX_ID:
        raise BadRequestError(f"invalid {label}")
    return value


def clean_name(
    value: object,
    label: str,
    min_len: int,
    max_len: int,
    lower: bool = False,
) -> str:
    """Trim (and optionally lower-case) a name, then check its length bounds."""
    if not isinstance(value, str):
        raise BadRequestError(f"{label} must be a string")
    cleaned = value.strip()
    if lower:
        cleaned = cleaned.lower()
    if not cleaned:
        raise BadRequestError(f"{label} cannot be empty")
    if not min_len <= len(cleaned) <= max_len:
        raise BadRequestError(
            f"{label} length must be between {min_len} and {max_len} characters"
        )
    return cleaned


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def storage_errors(context: str) -> Iterator[None]:
    """Re-raise SQLAlchemy errors as domain errors tagged with the operation."""
    try:
        yield
    except SQLAlchemyError as e:
        raise classify_storage_error(e, context) from e
