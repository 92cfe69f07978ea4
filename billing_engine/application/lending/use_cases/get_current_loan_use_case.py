"""Use case for reading a user's ongoing loan."""

import structlog

from billing_engine.application.common.errors import ensure_business_error
from billing_engine.application.common.time_provider import TimeProvider
from billing_engine.application.lending.dtos import LoanDetail
from billing_engine.application.lending.protocols.loan_repository import LoanRepositoryProtocol
from billing_engine.domain.common.exceptions import DomainError
from billing_engine.domain.lending.exceptions import LoanNotFoundError
from billing_engine.domain.lending.services.loan_billing_service import LoanBillingService
from billing_engine.domain.lending.value_objects import LoanStatus, UserId

logger = structlog.get_logger(__name__)


class GetCurrentLoanUseCase:
    """Use case for the ongoing loan of a user and its billing figures."""

    def __init__(
        self,
        loan_repository: LoanRepositoryProtocol,
        billing_service: LoanBillingService,
        time_provider: TimeProvider,
    ) -> None:
        self.loan_repository = loan_repository
        self.billing_service = billing_service
        self.time_provider = time_provider

    def get_current_loan(self, user_id: str) -> LoanDetail:
        """
        Get the user's ongoing loan, billed at the current time.

        Args:
            user_id: UUID of the borrowing user

        Returns:
            LoanDetail with outstanding amount, current bill and delinquency

        Raises:
            ValidationError: If the user id is malformed
            LoanNotFoundError: If the user has no ongoing loan
            UnexpectedError: If anything unclassified fails underneath
        """
        try:
            user_id_vo = UserId.parse(user_id)
            loan = self.loan_repository.find_latest_by_user(user_id_vo)
            if loan is None or loan.status != LoanStatus.ONGOING:
                raise LoanNotFoundError()

            paid_amount = self.loan_repository.get_paid_amount(loan.id)
            statement = self.billing_service.statement(loan, self.time_provider.now(), paid_amount)
        except DomainError:
            raise
        except Exception as e:
            raise ensure_business_error(e) from None

        logger.debug("fetched_current_loan", loan_id=str(loan.id), user_id=user_id)
        return LoanDetail.from_statement(loan, statement)
