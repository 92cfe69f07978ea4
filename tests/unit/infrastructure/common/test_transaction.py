"""Tests for the serializable transaction scope and its completion chokepoint."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from billing_engine.infrastructure.common.transaction import (
    TransactionDeadlineExceededError,
    _begin,
    finish_transaction,
    is_serialization_failure,
    serializable_transaction,
)
from billing_engine.models import Loan as LoanORM


class _DriverError(Exception):
    def __init__(self, pgcode: str) -> None:
        super().__init__(pgcode)
        self.pgcode = pgcode


class TestFinishTransaction:
    def test_commits_without_error(self) -> None:
        session = MagicMock(spec=Session)

        finish_transaction(session)

        session.commit.assert_called_once()
        session.rollback.assert_not_called()

    def test_rolls_back_and_reraises(self) -> None:
        session = MagicMock(spec=Session)
        error = ValueError("guard failed")

        with pytest.raises(ValueError, match="guard failed") as exc_info:
            finish_transaction(session, error)

        assert exc_info.value is error
        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_failed_commit_is_rolled_back(self) -> None:
        session = MagicMock(spec=Session)
        session.commit.side_effect = RuntimeError("commit failed")

        with pytest.raises(RuntimeError, match="commit failed"):
            finish_transaction(session)

        session.rollback.assert_called_once()

    def test_rollback_failure_is_combined_with_original_error(self) -> None:
        session = MagicMock(spec=Session)
        rollback_error = RuntimeError("connection lost")
        session.rollback.side_effect = rollback_error
        error = ValueError("insert failed")

        with pytest.raises(ExceptionGroup) as exc_info:
            finish_transaction(session, error)

        assert exc_info.value.exceptions == (error, rollback_error)


class TestIsSerializationFailure:
    def test_detects_sqlstate_40001(self) -> None:
        error = OperationalError("COMMIT", None, _DriverError("40001"))

        assert is_serialization_failure(error)

    def test_other_driver_errors(self) -> None:
        assert not is_serialization_failure(DBAPIError("SELECT 1", None, _DriverError("23505")))
        assert not is_serialization_failure(ValueError("40001"))


class TestSerializableTransaction:
    def test_commits_block(self, session_factory: sessionmaker[Session]) -> None:
        with serializable_transaction(session_factory) as scope:
            result = scope.execute(select(func.count(LoanORM.id))).scalar_one()

        assert result == 0

    def test_expired_deadline_aborts(self, session_factory: sessionmaker[Session]) -> None:
        with (
            pytest.raises(TransactionDeadlineExceededError),
            serializable_transaction(session_factory, timeout=0) as scope,
        ):
            scope.execute(select(func.count(LoanORM.id)))

    def test_error_in_block_propagates(self, session_factory: sessionmaker[Session]) -> None:
        with pytest.raises(ValueError, match="abort"), serializable_transaction(session_factory):
            raise ValueError("abort")


class TestBeginOnPostgres:
    def _session(self) -> MagicMock:
        session = MagicMock(spec=Session)
        session.get_bind.return_value.dialect.name = "postgresql"
        return session

    def test_pins_serializable_isolation(self) -> None:
        session = self._session()

        _begin(session, None)

        session.connection.assert_called_once_with(
            execution_options={"isolation_level": "SERIALIZABLE"}
        )
        session.execute.assert_not_called()

    def test_sets_local_statement_timeout(self) -> None:
        session = self._session()

        _begin(session, 1.5)

        statement = session.execute.call_args.args[0]
        sql = str(
            statement.compile(
                dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
            )
        )
        assert "set_config('statement_timeout', '1500', true)" in sql
