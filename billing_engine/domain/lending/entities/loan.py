"""
Loan entity: amortization, weekly billing, delinquency and payment rules.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import ROUND_CEILING, ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Final

from billing_engine.domain.common.entity import Entity
from billing_engine.domain.common.exceptions import ValidationError
from billing_engine.domain.lending.entities.loan_payment import LoanPayment
from billing_engine.domain.lending.exceptions import (
    CurrentWeekAlreadyPaidError,
    NotExactPaymentAmountError,
    StillHasOngoingLoanError,
)
from billing_engine.domain.lending.value_objects import LoanId, LoanStatus, UserId

DELINQUENCY_THRESHOLD_WEEKS: Final[int] = 2
# Durations are stored in a 32-bit integer column
MAX_PAYMENT_DURATION_WEEKS: Final[int] = 2**31 - 1
BILLING_CYCLE: Final[timedelta] = timedelta(weeks=1)

_WHOLE = Decimal(1)
_ZERO = Decimal(0)


@dataclass(eq=False)
class Loan(Entity[LoanId]):
    """
    Installment loan repaid in weekly bills.

    Business Rules:
    - Total payment amount is principal plus interest rounded up to a whole unit,
      fixed at creation
    - Billing weeks are anchored to Monday 00:00 UTC of the creation week
    - Each elapsed week adds one floor-rounded weekly amount to the obligation;
      once the term has elapsed the whole total is due
    - A payment must match the current bill exactly
    - The loan becomes PAID on the payment that covers the total
    - A user cannot open a new loan while the latest one is ONGOING
    """

    id: LoanId
    user_id: UserId
    amount: Decimal
    payment_duration_weeks: int
    payment_amount: Decimal
    status: LoanStatus
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """Validate invariants, stopping at the first violation."""
        if self.id.is_empty:
            raise ValidationError("loan id cannot be empty", field="id")
        if self.user_id.is_empty:
            raise ValidationError("loan user id cannot be empty", field="user_id")
        if self.amount <= 0:
            raise ValidationError(
                "loan amount must be greater than zero", field="amount", value=self.amount
            )
        if self.payment_duration_weeks < 1:
            raise ValidationError(
                "loan payment duration must be at least 1 week",
                field="payment_duration_weeks",
                value=self.payment_duration_weeks,
            )
        if self.payment_duration_weeks > MAX_PAYMENT_DURATION_WEEKS:
            raise ValidationError(
                f"loan payment duration must be at most {MAX_PAYMENT_DURATION_WEEKS} weeks",
                field="payment_duration_weeks",
                value=self.payment_duration_weeks,
            )
        if self.payment_amount <= 0:
            raise ValidationError(
                "loan payment amount must be greater than zero",
                field="payment_amount",
                value=self.payment_amount,
            )
        if self.status not in tuple(LoanStatus):
            raise ValidationError("invalid loan status", field="status", value=self.status)
        self.status = LoanStatus(self.status)
        if self.created_at is None:
            raise ValidationError("created at cannot be empty", field="created_at")
        if self.updated_at is None:
            raise ValidationError("updated at cannot be empty", field="updated_at")

    @property
    def billing_anchor(self) -> datetime:
        """Monday 00:00 UTC of the calendar week the loan was created in."""
        created = self.created_at.astimezone(UTC)
        midnight = created.replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight - timedelta(days=created.weekday())

    @property
    def weekly_payment_amount(self) -> Decimal:
        """Total split evenly over the term, floored; the last bill absorbs the remainder."""
        return (self.payment_amount / self.payment_duration_weeks).quantize(
            _WHOLE, rounding=ROUND_DOWN
        )

    def is_paid(self) -> bool:
        return self.status == LoanStatus.PAID

    def current_week(self, now: datetime) -> int:
        """Whole billing weeks elapsed since the anchor, never negative."""
        elapsed = now - self.billing_anchor
        if elapsed <= timedelta(0):
            return 0
        return elapsed // BILLING_CYCLE

    def current_bill_amount(self, now: datetime, paid_amount: Decimal) -> Decimal:
        """
        Amount owed for the weeks elapsed at `now`, net of what was paid.

        Args:
            now: Moment the bill is computed for
            paid_amount: Sum of all payments made so far

        Returns:
            The bill, never below zero
        """
        week = self.current_week(now)
        if week >= self.payment_duration_weeks:
            obligation = self.payment_amount
        else:
            obligation = self.weekly_payment_amount * week
        return max(obligation - paid_amount, _ZERO)

    def outstanding_amount(self, paid_amount: Decimal) -> Decimal:
        return max(self.payment_amount - paid_amount, _ZERO)

    def is_delinquent(self, now: datetime, paid_amount: Decimal) -> bool:
        """
        Check whether more than DELINQUENCY_THRESHOLD_WEEKS weekly bills are unpaid.

        The unpaid bill is converted to weeks and rounded half away from zero.
        When the weekly amount floors to zero, nothing is billed before the term
        ends, so any unpaid bill means the whole loan is overdue.
        """
        if self.is_paid() or paid_amount == self.payment_amount:
            return False

        bill = self.current_bill_amount(now, paid_amount)
        weekly = self.weekly_payment_amount
        if weekly == 0:
            return bill > 0

        unpaid_weeks = (bill / weekly).quantize(_WHOLE, rounding=ROUND_HALF_UP)
        return unpaid_weeks > DELINQUENCY_THRESHOLD_WEEKS

    def apply_payment(
        self, now: datetime, paid_amount: Decimal, payment_amount: Decimal
    ) -> tuple[LoanPayment, bool]:
        """
        Accept a payment for the current bill.

        Args:
            now: Moment the payment is made
            paid_amount: Sum of all payments made before this one
            payment_amount: Amount being paid

        Returns:
            The new payment record and whether the loan itself changed and must
            be persisted

        Raises:
            CurrentWeekAlreadyPaidError: If nothing is billed at `now`
            NotExactPaymentAmountError: If the amount differs from the bill
        """
        bill = self.current_bill_amount(now, paid_amount)
        if bill == 0:
            raise CurrentWeekAlreadyPaidError()
        if payment_amount != bill:
            raise NotExactPaymentAmountError()

        payment = LoanPayment.create(loan_id=self.id, amount=payment_amount, now=now)

        if paid_amount + payment_amount == self.payment_amount:
            self.status = LoanStatus.PAID
            self.updated_at = now
            return payment, True
        return payment, False

    def validate_against_latest(self, latest: "Loan | None") -> None:
        """
        Ensure the user has no other loan still being repaid.

        Raises:
            StillHasOngoingLoanError: If the latest loan of the same user is ONGOING
        """
        if latest is None:
            return
        if latest.user_id == self.user_id and latest.status == LoanStatus.ONGOING:
            raise StillHasOngoingLoanError()

    @staticmethod
    def calculate_payment_amount(amount: Decimal, interest_rate: Decimal) -> Decimal:
        """Principal plus interest, the interest rounded up to a whole unit."""
        interest = (amount * interest_rate).quantize(_WHOLE, rounding=ROUND_CEILING)
        return amount + interest

    @classmethod
    def create(
        cls,
        user_id: UserId,
        amount: Decimal,
        payment_duration_weeks: int,
        interest_rate: Decimal,
        now: datetime | None = None,
    ) -> "Loan":
        """Create a new ONGOING loan with a fresh id, stamped at `now` (UTC)."""
        timestamp = now or datetime.now(UTC)
        return cls(
            id=LoanId.generate(),
            user_id=user_id,
            amount=amount,
            payment_duration_weeks=payment_duration_weeks,
            payment_amount=cls.calculate_payment_amount(amount, interest_rate),
            status=LoanStatus.ONGOING,
            created_at=timestamp,
            updated_at=timestamp,
        )

    @classmethod
    def create_with_id(
        cls,
        id: LoanId,
        user_id: UserId,
        amount: Decimal,
        payment_duration_weeks: int,
        payment_amount: Decimal,
        status: LoanStatus | int,
        created_at: datetime,
        updated_at: datetime,
    ) -> "Loan":
        """Reconstitute a loan from persistence."""
        return cls(
            id=id,
            user_id=user_id,
            amount=amount,
            payment_duration_weeks=payment_duration_weeks,
            payment_amount=payment_amount,
            status=status,  # type: ignore[arg-type]
            created_at=created_at,
            updated_at=updated_at,
        )
