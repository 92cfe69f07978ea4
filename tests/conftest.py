"""Pytest configuration and fixtures."""

from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from billing_engine import models  # noqa: F401
from billing_engine.core import container
from billing_engine.database import Base, create_database_engine, create_session_factory
from billing_engine.infrastructure.common.time_provider import FixedTimeProvider
from billing_engine.main import create_app

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

# A Monday morning, so billing weeks start at 2024-01-15 00:00 UTC
TEST_NOW = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create a fresh in-memory database for each test."""
    test_engine = create_database_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def time_provider() -> FixedTimeProvider:
    return FixedTimeProvider(TEST_NOW)


@pytest.fixture
def client(
    session_factory: sessionmaker[Session], time_provider: FixedTimeProvider
) -> Generator[TestClient, Any, None]:
    """Create a test client wired to the test database and a fixed clock."""
    app = create_app(session_factory=session_factory)

    with container.time_provider.override(time_provider), TestClient(app) as test_client:
        yield test_client
