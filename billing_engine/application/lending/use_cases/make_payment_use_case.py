"""Use case for paying the current bill of a loan."""

from decimal import Decimal

import structlog

from billing_engine.application.common.errors import ensure_business_error
from billing_engine.application.common.time_provider import TimeProvider
from billing_engine.application.lending.dtos import LoanDetail
from billing_engine.application.lending.protocols.loan_repository import LoanRepositoryProtocol
from billing_engine.domain.common.exceptions import DomainError
from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.entities.loan_payment import LoanPayment
from billing_engine.domain.lending.services.loan_billing_service import LoanBillingService
from billing_engine.domain.lending.value_objects import LoanId

logger = structlog.get_logger(__name__)


class MakePaymentUseCase:
    """Use case for paying exactly the current bill of a loan."""

    def __init__(
        self,
        loan_repository: LoanRepositoryProtocol,
        billing_service: LoanBillingService,
        time_provider: TimeProvider,
        transaction_timeout: float | None = None,
    ) -> None:
        self.loan_repository = loan_repository
        self.billing_service = billing_service
        self.time_provider = time_provider
        self.transaction_timeout = transaction_timeout

    def make_payment(self, loan_id: str, amount: Decimal) -> LoanDetail:
        """
        Pay the current bill of a loan.

        The payment rule runs inside the repository transaction against the
        loan and paid amount read in that same transaction.

        Args:
            loan_id: UUID of the loan
            amount: Amount paid; must equal the current bill

        Returns:
            LoanDetail reflecting the payment

        Raises:
            ValidationError: If the loan id is malformed
            LoanNotFoundError: If the loan does not exist
            CurrentWeekAlreadyPaidError: If nothing is billed right now
            NotExactPaymentAmountError: If the amount differs from the bill
            UnexpectedError: If anything unclassified fails underneath
        """
        now = self.time_provider.now()

        def decide(loan: Loan | None, paid_amount: Decimal) -> tuple[LoanPayment, bool]:
            return self.billing_service.apply_payment(loan, now, paid_amount, amount)

        try:
            loan_id_vo = LoanId.parse(loan_id)
            loan, paid_amount = self.loan_repository.apply_payment(
                loan_id_vo, decide, timeout=self.transaction_timeout
            )
            statement = self.billing_service.statement(loan, now, paid_amount)
        except DomainError:
            raise
        except Exception as e:
            raise ensure_business_error(e) from None

        logger.info(
            "payment_applied",
            loan_id=loan_id,
            amount=str(amount),
            paid_amount=str(paid_amount),
        )
        if loan.is_paid():
            logger.info("loan_paid_off", loan_id=loan_id, user_id=str(loan.user_id))

        return LoanDetail.from_statement(loan, statement)
