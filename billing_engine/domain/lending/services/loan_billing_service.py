"""Domain service computing billing state for a loan that may be absent."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.entities.loan_payment import LoanPayment
from billing_engine.domain.lending.exceptions import LoanNotFoundError


@dataclass(frozen=True)
class LoanStatement:
    """Billing figures of a loan at a point in time."""

    outstanding_amount: Decimal
    current_bill_amount: Decimal
    is_delinquent: bool

    @classmethod
    def empty(cls) -> "LoanStatement":
        return cls(
            outstanding_amount=Decimal(0),
            current_bill_amount=Decimal(0),
            is_delinquent=False,
        )


class LoanBillingService:
    """
    Billing rules over an optional loan.

    Repositories return None for a missing loan. Reads on a missing loan
    produce an empty statement; writes fail with LoanNotFoundError.
    """

    def statement(self, loan: Loan | None, now: datetime, paid_amount: Decimal) -> LoanStatement:
        if loan is None:
            return LoanStatement.empty()
        return LoanStatement(
            outstanding_amount=loan.outstanding_amount(paid_amount),
            current_bill_amount=loan.current_bill_amount(now, paid_amount),
            is_delinquent=loan.is_delinquent(now, paid_amount),
        )

    def apply_payment(
        self,
        loan: Loan | None,
        now: datetime,
        paid_amount: Decimal,
        payment_amount: Decimal,
    ) -> tuple[LoanPayment, bool]:
        """
        Apply a payment to a loan that must exist.

        Raises:
            LoanNotFoundError: If the loan is absent
        """
        if loan is None:
            raise LoanNotFoundError()
        return loan.apply_payment(now, paid_amount, payment_amount)
