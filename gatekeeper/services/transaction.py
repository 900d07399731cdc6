"""
Transaction coordinator: one atomic unit of store mutations.

A coordinator owns exactly one session and one transaction and moves through
IDLE -> ACTIVE -> COMMITTED or ROLLED_BACK. It is single use: every logical
operation creates its own coordinator, so concurrent operations never share a
transaction. Used as a context manager it commits on success and rolls back on
any exception, with the session closed on every exit path.
"""

import logging
from enum import Enum
from types import TracebackType

from sqlalchemy.orm import Session, sessionmaker

from gatekeeper.core.errors import (
    AppError,
    NoActiveTransaction,
    TransactionStartFailed,
    classify_begin_error,
    classify_storage_error,
)


class TransactionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionCoordinator:
    """Begin/commit/rollback state for a single multi-step mutation."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None
        self.logger = logger or logging.getLogger(__name__)
        self.state = TransactionState.IDLE

    @property
    def session(self) -> Session:
        if self.state is not TransactionState.ACTIVE or self._session is None:
            raise NoActiveTransaction("no transaction found")
        return self._session

    def begin(self) -> Session:
        if self.state is not TransactionState.IDLE:
            # Re-entry would silently drop the open transaction handle.
            raise TransactionStartFailed(
                f"transaction cannot be started from state {self.state.value}"
            )
        session = self._session_factory()
        try:
            session.begin()
            # Check out the connection now so an outage surfaces here.
            session.connection()
        except Exception as e:
            session.close()
            raise classify_begin_error(e) from e
        self._session = session
        self.state = TransactionState.ACTIVE
        return session

    def commit(self) -> None:
        session = self.session
        try:
            session.commit()
        except Exception as e:
            error = classify_storage_error(e, "commit transaction")
            self._rollback_quietly(error)
            raise error from e
        self.state = TransactionState.COMMITTED

    def rollback(self) -> None:
        session = self.session
        try:
            session.rollback()
        except Exception as e:
            self.state = TransactionState.ROLLED_BACK
            raise classify_storage_error(e, "rollback transaction") from e
        self.state = TransactionState.ROLLED_BACK

    def _rollback_quietly(self, original: BaseException) -> None:
        """Roll back after a failure; a rollback error is logged, never raised."""
        if self.state is not TransactionState.ACTIVE:
            return
        try:
            self.rollback()
        except AppError as rollback_error:
            self.logger.error(
                "Rollback failed after %s: %s",
                type(original).__name__,
                rollback_error.message,
            )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> Session:
        return self.begin()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        try:
            if exc is None:
                self.commit()
                return False
            self._rollback_quietly(exc)
            if isinstance(exc, Exception) and not isinstance(exc, AppError):
                raise classify_storage_error(exc, "transaction") from exc
            return False
        finally:
            self.close()


def atomic(
    session_factory: sessionmaker[Session],
    logger: logging.Logger | None = None,
) -> TransactionCoordinator:
    """Fresh coordinator for one logical operation: ``with atomic(factory) as session:``."""
    return TransactionCoordinator(session_factory, logger=logger)
