"""Tests for LoanBillingService domain service."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from billing_engine.domain.common.exceptions import ErrorKind
from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.exceptions import LoanNotFoundError
from billing_engine.domain.lending.services.loan_billing_service import (
    LoanBillingService,
    LoanStatement,
)
from billing_engine.domain.lending.value_objects import LoanStatus, UserId

# Monday
CREATED_AT = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)


def _loan() -> Loan:
    return Loan.create(UserId.generate(), Decimal(5_000_000), 50, Decimal("0.10"), now=CREATED_AT)


class TestLoanBillingService:
    def test_statement_right_after_creation(self) -> None:
        statement = LoanBillingService().statement(_loan(), CREATED_AT, Decimal(0))

        assert statement == LoanStatement(
            outstanding_amount=Decimal(5_500_000),
            current_bill_amount=Decimal(0),
            is_delinquent=False,
        )

    def test_statement_after_three_unpaid_weeks(self) -> None:
        statement = LoanBillingService().statement(
            _loan(), CREATED_AT + timedelta(weeks=3), Decimal(0)
        )

        assert statement.current_bill_amount == Decimal(330_000)
        assert statement.outstanding_amount == Decimal(5_500_000)
        assert statement.is_delinquent is True

    def test_statement_for_absent_loan_is_empty(self) -> None:
        statement = LoanBillingService().statement(None, CREATED_AT, Decimal(0))

        assert statement == LoanStatement.empty()
        assert statement.current_bill_amount == Decimal(0)
        assert statement.is_delinquent is False

    def test_apply_payment_to_absent_loan(self) -> None:
        with pytest.raises(LoanNotFoundError, match="loan not found") as exc_info:
            LoanBillingService().apply_payment(None, CREATED_AT, Decimal(0), Decimal(1))

        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_apply_payment_delegates_to_loan(self) -> None:
        loan = _loan()
        now = CREATED_AT + timedelta(weeks=50)

        payment, should_update = LoanBillingService().apply_payment(
            loan, now, Decimal(0), Decimal(5_500_000)
        )

        assert payment.amount == Decimal(5_500_000)
        assert should_update is True
        assert loan.status == LoanStatus.PAID
