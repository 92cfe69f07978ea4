"""Protocol for Loan repository."""

from collections.abc import Callable
from decimal import Decimal
from typing import Protocol

from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.entities.loan_payment import LoanPayment
from billing_engine.domain.lending.value_objects import LoanId, UserId

# Called with the user's latest loan (None if the user has none); raises to abort.
LatestLoanGuard = Callable[[Loan | None], None]

# Called with the loan (None if missing) and the amount paid so far. Returns the
# payment to insert and whether the loan itself must be written back.
PaymentDecision = Callable[[Loan | None, Decimal], tuple[LoanPayment, bool]]


class LoanRepositoryProtocol(Protocol):
    """
    Persistence of loans and their payments.

    The write workflows run inside a single serializable transaction. Domain
    decisions are passed in as callbacks and executed between the reads and the
    writes, so the decision and the data it is based on cannot drift apart.
    """

    def find_latest_by_user(self, user_id: UserId) -> Loan | None:
        """
        Find the most recently created loan of a user.

        Args:
            user_id: The borrowing user

        Returns:
            The newest loan by creation time, None if the user has none
        """
        ...

    def get_paid_amount(self, loan_id: LoanId) -> Decimal:
        """
        Sum all payments made against a loan.

        Args:
            loan_id: The loan ID

        Returns:
            Sum of payment amounts, zero when there are none
        """
        ...

    def create_loan(
        self, loan: Loan, guard: LatestLoanGuard, *, timeout: float | None = None
    ) -> Loan:
        """
        Insert a loan after checking it against the user's latest loan.

        Args:
            loan: The new loan
            guard: Check run against the latest loan inside the transaction
            timeout: Seconds the transaction may take before it is aborted

        Returns:
            The stored loan

        Raises:
            DomainError: Whatever the guard raises; nothing is written
        """
        ...

    def apply_payment(
        self, loan_id: LoanId, decide: PaymentDecision, *, timeout: float | None = None
    ) -> tuple[Loan, Decimal]:
        """
        Record a payment decided by `decide` against the current loan state.

        Args:
            loan_id: The loan being paid
            decide: Payment rule run against the loan and its paid amount
            timeout: Seconds the transaction may take before it is aborted

        Returns:
            Tuple of (loan after the payment, cumulative paid amount)

        Raises:
            DomainError: Whatever `decide` raises; nothing is written
        """
        ...
