"""Use case for opening a new loan."""

from decimal import Decimal

import structlog

from billing_engine.application.common.errors import ensure_business_error
from billing_engine.application.common.time_provider import TimeProvider
from billing_engine.application.lending.protocols.loan_repository import LoanRepositoryProtocol
from billing_engine.domain.common.exceptions import DomainError
from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.value_objects import UserId

logger = structlog.get_logger(__name__)


class CreateLoanUseCase:
    """Use case for opening a loan for a user without an ongoing one."""

    def __init__(
        self,
        loan_repository: LoanRepositoryProtocol,
        time_provider: TimeProvider,
        interest_rate: Decimal,
        transaction_timeout: float | None = None,
    ) -> None:
        """Initialize use case with repository protocols and the configured interest rate."""
        self.loan_repository = loan_repository
        self.time_provider = time_provider
        self.interest_rate = interest_rate
        self.transaction_timeout = transaction_timeout

    def create_loan(self, user_id: str, amount: Decimal, payment_duration_weeks: int) -> Loan:
        """
        Create a loan.

        Args:
            user_id: UUID of the borrowing user
            amount: Principal amount
            payment_duration_weeks: Number of weekly installments

        Returns:
            Created loan domain entity

        Raises:
            ValidationError: If the input is invalid
            StillHasOngoingLoanError: If the user's latest loan is still ongoing
            UnexpectedError: If anything unclassified fails underneath
        """
        try:
            loan = Loan.create(
                user_id=UserId.parse(user_id),
                amount=amount,
                payment_duration_weeks=payment_duration_weeks,
                interest_rate=self.interest_rate,
                now=self.time_provider.now(),
            )
            created = self.loan_repository.create_loan(
                loan, loan.validate_against_latest, timeout=self.transaction_timeout
            )
        except DomainError:
            raise
        except Exception as e:
            raise ensure_business_error(e) from None

        logger.info(
            "loan_created",
            loan_id=str(created.id),
            user_id=str(created.user_id),
            payment_amount=str(created.payment_amount),
            payment_duration_weeks=created.payment_duration_weeks,
        )
        return created
