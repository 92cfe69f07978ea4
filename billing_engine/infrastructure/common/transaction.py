"""
Serializable transaction scope shared by repositories.

Every read-modify-write workflow runs inside `serializable_transaction`. The
scope opens a fresh session, pins the strictest isolation level, enforces the
caller's deadline between statements and finishes through `finish_transaction`.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from sqlalchemy import Executable, Result, select
from sqlalchemy import func as sa_func
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

logger = structlog.get_logger(__name__)

SERIALIZATION_FAILURE_SQLSTATE = "40001"


class TransactionDeadlineExceededError(Exception):
    """Raised once a transaction has outlived the timeout it was opened with."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"transaction exceeded its {timeout:.3f}s deadline")
        self.timeout = timeout


def is_serialization_failure(error: BaseException) -> bool:
    """Tell whether the store aborted a transaction to keep a serial order (retryable)."""
    if not isinstance(error, DBAPIError):
        return False
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code == SERIALIZATION_FAILURE_SQLSTATE


class TransactionScope:
    """Statement runner bound to one open transaction and its deadline."""

    def __init__(self, session: Session, timeout: float | None) -> None:
        self.session = session
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise TransactionDeadlineExceededError(self.timeout or 0.0)

    def execute(self, statement: Executable, params: dict[str, Any] | None = None) -> Result[Any]:
        self.check_deadline()
        return self.session.execute(statement, params)

    def add(self, instance: object) -> None:
        """Stage an ORM instance and flush it so constraint errors surface here."""
        self.check_deadline()
        self.session.add(instance)
        self.session.flush()

    def flush(self) -> None:
        self.check_deadline()
        self.session.flush()


def finish_transaction(session: Session, error: BaseException | None = None) -> None:
    """
    Complete the transaction of `session`.

    Commits when `error` is None. Otherwise, or when the commit itself fails,
    rolls back and re-raises the failure. A failed rollback is raised together
    with the original failure as an exception group.
    """
    if error is None:
        try:
            session.commit()
            return
        except Exception as commit_error:
            error = commit_error

    try:
        session.rollback()
    except Exception as rollback_error:
        logger.error(
            "transaction_rollback_failed",
            error_type=type(error).__name__,
            rollback_error=str(rollback_error),
        )
        raise BaseExceptionGroup("transaction rollback failed", [error, rollback_error]) from None

    if is_serialization_failure(error):
        logger.warning("serialization_failure", retryable=True)
    logger.debug("transaction_rolled_back", error_type=type(error).__name__)
    raise error


@contextmanager
def serializable_transaction(
    session_factory: sessionmaker[Session], *, timeout: float | None = None
) -> Iterator[TransactionScope]:
    """
    Run the enclosed block in a fresh SERIALIZABLE transaction.

    Args:
        session_factory: Factory for the session owning the transaction
        timeout: Seconds before the transaction is aborted; None disables it

    Yields:
        TransactionScope to execute statements through
    """
    session = session_factory()
    try:
        _begin(session, timeout)
        scope = TransactionScope(session, timeout)
        try:
            yield scope
            scope.check_deadline()
        except BaseException as e:
            finish_transaction(session, e)
        else:
            finish_transaction(session)
    finally:
        session.close()


def _begin(session: Session, timeout: float | None) -> None:
    if session.get_bind().dialect.name == "sqlite":
        # SQLite engines open every transaction with BEGIN IMMEDIATE (see database.py)
        session.connection()
        return

    session.connection(execution_options={"isolation_level": "SERIALIZABLE"})
    if timeout is not None:
        session.execute(
            select(sa_func.set_config("statement_timeout", str(int(timeout * 1000)), True))
        )
