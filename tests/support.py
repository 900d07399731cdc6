"""Shared helpers: a fresh in-memory database per test case."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gatekeeper.core.database import enable_sqlite_foreign_keys, make_session_factory
from gatekeeper.models import Base

# Cheapest bcrypt cost; tests do not need slow hashes.
TEST_BCRYPT_ROUNDS = 4


def make_test_db() -> tuple[Engine, sessionmaker[Session]]:
    """Empty schema in a private in-memory SQLite database with foreign keys on."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine, make_session_factory(engine)


class FakeClock:
    """Settable wall clock for token tests."""

    def __init__(self, now: float = 1_800_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
