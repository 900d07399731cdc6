"""Unit tests for gatekeeper.services.transaction: the coordinator state machine."""

import logging
import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from gatekeeper.core.errors import (
    DuplicateKeyError,
    InternalServerError,
    NoActiveTransaction,
    NotFoundError,
    TransactionStartFailed,
)
from gatekeeper.services import TransactionCoordinator, TransactionState, atomic
from gatekeeper.stores import RoleStore
from support import make_test_db


def _mock_factory() -> tuple[MagicMock, MagicMock]:
    session = MagicMock()
    factory = MagicMock(return_value=session)
    return factory, session


class TestCoordinatorStates(unittest.TestCase):
    """Explicit begin/commit/rollback calls follow IDLE -> ACTIVE -> terminal."""

    def test_commit_without_begin(self) -> None:
        factory, _ = _mock_factory()
        with self.assertRaises(NoActiveTransaction):
            TransactionCoordinator(factory).commit()

    def test_rollback_without_begin(self) -> None:
        factory, _ = _mock_factory()
        with self.assertRaises(NoActiveTransaction):
            TransactionCoordinator(factory).rollback()

    def test_begin_commit(self) -> None:
        factory, session = _mock_factory()
        tx = TransactionCoordinator(factory)
        self.assertIs(tx.begin(), session)
        self.assertEqual(tx.state, TransactionState.ACTIVE)
        session.begin.assert_called_once()
        tx.commit()
        self.assertEqual(tx.state, TransactionState.COMMITTED)
        session.commit.assert_called_once()

    def test_begin_rollback(self) -> None:
        factory, session = _mock_factory()
        tx = TransactionCoordinator(factory)
        tx.begin()
        tx.rollback()
        self.assertEqual(tx.state, TransactionState.ROLLED_BACK)
        session.rollback.assert_called_once()

    def test_second_begin_is_rejected(self) -> None:
        factory, _ = _mock_factory()
        tx = TransactionCoordinator(factory)
        tx.begin()
        with self.assertRaises(TransactionStartFailed):
            tx.begin()
        self.assertEqual(tx.state, TransactionState.ACTIVE)

    def test_commit_after_commit(self) -> None:
        factory, _ = _mock_factory()
        tx = TransactionCoordinator(factory)
        tx.begin()
        tx.commit()
        with self.assertRaises(NoActiveTransaction):
            tx.commit()
        with self.assertRaises(TransactionStartFailed):
            tx.begin()

    def test_session_outside_transaction(self) -> None:
        factory, _ = _mock_factory()
        with self.assertRaises(NoActiveTransaction):
            TransactionCoordinator(factory).session

    def test_begin_failure_is_classified(self) -> None:
        factory, session = _mock_factory()
        session.begin.side_effect = OperationalError("BEGIN", {}, Exception("db down"))
        tx = TransactionCoordinator(factory)
        with self.assertRaises(TransactionStartFailed):
            tx.begin()
        self.assertEqual(tx.state, TransactionState.IDLE)
        session.close.assert_called_once()

    def test_commit_failure_rolls_back(self) -> None:
        factory, session = _mock_factory()
        session.commit.side_effect = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: roles.name")
        )
        tx = TransactionCoordinator(factory)
        tx.begin()
        with self.assertRaises(DuplicateKeyError):
            tx.commit()
        session.rollback.assert_called_once()
        self.assertEqual(tx.state, TransactionState.ROLLED_BACK)


class TestCoordinatorContextManager(unittest.TestCase):
    """``with atomic(factory)`` commits on success and rolls back on error."""

    def test_error_propagates_and_session_closes(self) -> None:
        factory, session = _mock_factory()
        tx = atomic(factory)
        with self.assertRaises(NotFoundError):
            with tx:
                raise NotFoundError("role not found")
        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()
        self.assertEqual(tx.state, TransactionState.ROLLED_BACK)

    def test_rollback_failure_does_not_mask_original(self) -> None:
        factory, session = _mock_factory()
        session.rollback.side_effect = SQLAlchemyError("connection lost")
        logger = MagicMock(spec=logging.Logger)
        with self.assertRaises(NotFoundError):
            with atomic(factory, logger):
                raise NotFoundError("permission not found")
        logger.error.assert_called()
        session.close.assert_called_once()

    def test_unexpected_error_is_classified(self) -> None:
        factory, _ = _mock_factory()
        with self.assertRaises(InternalServerError) as ctx:
            with atomic(factory):
                raise ValueError("boom")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)


class TestCoordinatorWithDatabase(unittest.TestCase):
    """Real sessions: committed rows are visible, rolled back rows are not."""

    def setUp(self) -> None:
        self.engine, self.factory = make_test_db()

    def tearDown(self) -> None:
        self.engine.dispose()

    def _role_count(self) -> int:
        with self.factory() as session:
            return RoleStore(session).count()

    def test_commit_persists(self) -> None:
        with atomic(self.factory) as session:
            RoleStore(session).create("admin")
        self.assertEqual(self._role_count(), 1)

    def test_failure_discards_every_step(self) -> None:
        with self.assertRaises(DuplicateKeyError):
            with atomic(self.factory) as session:
                roles = RoleStore(session)
                roles.create("admin")
                roles.create("editor")
                roles.create("admin")
        self.assertEqual(self._role_count(), 0)


if __name__ == "__main__":
    unittest.main()
