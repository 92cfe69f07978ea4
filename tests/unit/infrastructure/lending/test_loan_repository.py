"""Tests for the SQLAlchemy loan repository."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from billing_engine.application.lending.protocols.loan_repository import PaymentDecision
from billing_engine.domain.common.exceptions import AlreadyExistsError
from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.entities.loan_payment import LoanPayment
from billing_engine.domain.lending.exceptions import (
    CurrentWeekAlreadyPaidError,
    LoanNotFoundError,
    StillHasOngoingLoanError,
)
from billing_engine.domain.lending.services.loan_billing_service import LoanBillingService
from billing_engine.domain.lending.value_objects import LoanId, LoanStatus, UserId
from billing_engine.infrastructure.common.transaction import TransactionDeadlineExceededError
from billing_engine.infrastructure.lending.repositories.loan_repository import LoanRepository
from billing_engine.models import Loan as LoanORM
from billing_engine.models import LoanPayment as LoanPaymentORM

# Monday
NOW = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)
INTEREST_RATE = Decimal("0.10")


def _allow_any(latest: Loan | None) -> None:
    return None


def _count(session_factory: sessionmaker[Session], model: type) -> int:
    with session_factory() as db:
        return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def repository(session_factory: sessionmaker[Session]) -> LoanRepository:
    return LoanRepository(session_factory)


def _new_loan(
    user_id: UserId | None = None,
    amount: Decimal = Decimal(1000),
    weeks: int = 10,
    now: datetime = NOW,
) -> Loan:
    return Loan.create(user_id or UserId.generate(), amount, weeks, INTEREST_RATE, now=now)


class TestCreateLoan:
    def test_stored_loan_round_trips(self, repository: LoanRepository) -> None:
        loan = _new_loan(amount=Decimal(5_000_000), weeks=50)

        repository.create_loan(loan, loan.validate_against_latest)
        stored = repository.find_latest_by_user(loan.user_id)

        assert stored is not None
        assert stored == loan
        assert stored.amount == Decimal(5_000_000)
        assert stored.payment_amount == Decimal(5_500_000)
        assert stored.payment_duration_weeks == 50
        assert stored.status == LoanStatus.ONGOING
        assert stored.created_at == NOW
        assert stored.created_at.tzinfo is not None

    def test_guard_receives_latest_loan(self, repository: LoanRepository) -> None:
        first = _new_loan()
        repository.create_loan(first, _allow_any)
        seen: list[Loan | None] = []

        second = _new_loan(user_id=first.user_id, now=NOW + timedelta(hours=1))
        repository.create_loan(second, seen.append)

        assert seen == [first]

    def test_guard_sees_none_for_new_user(self, repository: LoanRepository) -> None:
        seen: list[Loan | None] = []

        repository.create_loan(_new_loan(), seen.append)

        assert seen == [None]

    def test_ongoing_loan_blocks_second_loan(
        self, repository: LoanRepository, session_factory: sessionmaker[Session]
    ) -> None:
        first = _new_loan()
        repository.create_loan(first, first.validate_against_latest)
        second = _new_loan(user_id=first.user_id)

        with pytest.raises(StillHasOngoingLoanError):
            repository.create_loan(second, second.validate_against_latest)

        assert _count(session_factory, LoanORM) == 1

    def test_other_users_are_independent(self, repository: LoanRepository) -> None:
        first = _new_loan()
        other = _new_loan()

        repository.create_loan(first, first.validate_against_latest)
        repository.create_loan(other, other.validate_against_latest)

        assert repository.find_latest_by_user(other.user_id) == other

    def test_duplicate_id_already_exists(self, repository: LoanRepository) -> None:
        loan = _new_loan()
        repository.create_loan(loan, _allow_any)

        with pytest.raises(AlreadyExistsError):
            repository.create_loan(loan, _allow_any)

    def test_expired_deadline_writes_nothing(
        self, repository: LoanRepository, session_factory: sessionmaker[Session]
    ) -> None:
        with pytest.raises(TransactionDeadlineExceededError):
            repository.create_loan(_new_loan(), _allow_any, timeout=0)

        assert _count(session_factory, LoanORM) == 0


class TestFindLatestByUser:
    def test_unknown_user(self, repository: LoanRepository) -> None:
        assert repository.find_latest_by_user(UserId.generate()) is None

    def test_newest_loan_wins(self, repository: LoanRepository) -> None:
        user_id = UserId.generate()
        older = _new_loan(user_id=user_id, now=NOW - timedelta(weeks=20))
        newer = _new_loan(user_id=user_id)
        repository.create_loan(newer, _allow_any)
        repository.create_loan(older, _allow_any)

        assert repository.find_latest_by_user(user_id) == newer


class TestApplyPayment:
    def _decide(self, now: datetime, amount: Decimal) -> PaymentDecision:
        service = LoanBillingService()

        def decide(loan: Loan | None, paid: Decimal) -> tuple[LoanPayment, bool]:
            return service.apply_payment(loan, now, paid, amount)

        return decide

    def test_paid_amount_is_zero_without_payments(self, repository: LoanRepository) -> None:
        loan = _new_loan()
        repository.create_loan(loan, _allow_any)

        assert repository.get_paid_amount(loan.id) == Decimal(0)

    def test_payment_is_recorded(
        self, repository: LoanRepository, session_factory: sessionmaker[Session]
    ) -> None:
        loan = _new_loan()
        repository.create_loan(loan, _allow_any)
        now = NOW + timedelta(weeks=1)

        updated, paid = repository.apply_payment(loan.id, self._decide(now, Decimal(110)))

        assert paid == Decimal(110)
        assert updated.status == LoanStatus.ONGOING
        assert repository.get_paid_amount(loan.id) == Decimal(110)
        assert _count(session_factory, LoanPaymentORM) == 1

    def test_decision_sees_paid_amount(self, repository: LoanRepository) -> None:
        loan = _new_loan()
        repository.create_loan(loan, _allow_any)
        repository.apply_payment(loan.id, self._decide(NOW + timedelta(weeks=1), Decimal(110)))
        seen: list[Decimal] = []

        def decide(current: Loan | None, paid: Decimal) -> tuple[LoanPayment, bool]:
            seen.append(paid)
            assert current is not None
            return current.apply_payment(NOW + timedelta(weeks=2), paid, Decimal(110))

        _, paid = repository.apply_payment(loan.id, decide)

        assert seen == [Decimal(110)]
        assert paid == Decimal(220)

    def test_final_payment_persists_paid_status(self, repository: LoanRepository) -> None:
        loan = _new_loan(amount=Decimal(1000), weeks=1)
        repository.create_loan(loan, _allow_any)
        now = NOW + timedelta(weeks=1)

        updated, paid = repository.apply_payment(loan.id, self._decide(now, Decimal(1100)))

        assert paid == Decimal(1100)
        assert updated.status == LoanStatus.PAID
        stored = repository.find_latest_by_user(loan.user_id)
        assert stored is not None
        assert stored.status == LoanStatus.PAID
        assert stored.updated_at == now

    def test_rejected_payment_writes_nothing(
        self, repository: LoanRepository, session_factory: sessionmaker[Session]
    ) -> None:
        loan = _new_loan()
        repository.create_loan(loan, _allow_any)

        with pytest.raises(CurrentWeekAlreadyPaidError):
            repository.apply_payment(loan.id, self._decide(NOW, Decimal(110)))

        assert _count(session_factory, LoanPaymentORM) == 0

    def test_missing_loan(self, repository: LoanRepository) -> None:
        with pytest.raises(LoanNotFoundError):
            repository.apply_payment(LoanId.generate(), self._decide(NOW, Decimal(1)))

    def test_missing_loan_with_permissive_decision(self, repository: LoanRepository) -> None:
        missing = LoanId.generate()

        def decide(loan: Loan | None, paid: Decimal) -> tuple[LoanPayment, bool]:
            return LoanPayment.create(loan_id=missing, amount=Decimal(1), now=NOW), False

        with pytest.raises(LoanNotFoundError):
            repository.apply_payment(missing, decide)
