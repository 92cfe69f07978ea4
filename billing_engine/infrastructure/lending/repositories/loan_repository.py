"""Repository for Loan domain entities."""

from decimal import Decimal

import structlog
from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from billing_engine.application.lending.protocols.loan_repository import (
    LatestLoanGuard,
    PaymentDecision,
)
from billing_engine.domain.common.exceptions import AlreadyExistsError
from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.exceptions import LoanNotFoundError
from billing_engine.domain.lending.value_objects import LoanId, UserId
from billing_engine.infrastructure.common.transaction import (
    TransactionScope,
    serializable_transaction,
)
from billing_engine.infrastructure.lending.mappers.loan_mapper import LoanMapper, as_decimal
from billing_engine.infrastructure.lending.mappers.loan_payment_mapper import LoanPaymentMapper
from billing_engine.models import Loan as LoanORM
from billing_engine.models import LoanPayment as LoanPaymentORM

logger = structlog.get_logger(__name__)


class LoanRepository:
    """
    Repository for Loan domain entities.

    Each call opens its own session from `session_factory`, so workflows never
    share a transaction with whatever the caller did before.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        default_timeout: float | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.default_timeout = default_timeout
        self.mapper = LoanMapper()
        self.payment_mapper = LoanPaymentMapper()

    def find_latest_by_user(self, user_id: UserId) -> Loan | None:
        """
        Find the most recently created loan of a user.

        Args:
            user_id: The borrowing user

        Returns:
            Loan entity if the user has any, None otherwise
        """
        with self.session_factory() as db:
            orm_model = db.execute(self._latest_loan_stmt(user_id)).scalar_one_or_none()
            return self.mapper.to_domain(orm_model) if orm_model else None

    def get_paid_amount(self, loan_id: LoanId) -> Decimal:
        """
        Sum all payments made against a loan.

        Args:
            loan_id: The loan ID

        Returns:
            Sum of payments, zero if there are none
        """
        with self.session_factory() as db:
            return as_decimal(db.execute(self._paid_amount_stmt(loan_id)).scalar_one())

    def create_loan(
        self, loan: Loan, guard: LatestLoanGuard, *, timeout: float | None = None
    ) -> Loan:
        """
        Insert `loan` if `guard` accepts the user's latest loan.

        Args:
            loan: The new loan entity
            guard: Check against the latest loan, raising to abort
            timeout: Transaction timeout in seconds, defaults to the repository's

        Returns:
            The stored loan entity

        Raises:
            AlreadyExistsError: If a loan with the same id is already stored
        """
        with serializable_transaction(
            self.session_factory, timeout=self._timeout(timeout)
        ) as scope:
            latest_orm = scope.execute(self._latest_loan_stmt(loan.user_id)).scalar_one_or_none()
            guard(self.mapper.to_domain(latest_orm) if latest_orm else None)

            try:
                scope.add(self.mapper.to_orm(loan))
            except IntegrityError as e:
                # The primary key is the only constraint a validated loan can violate
                raise AlreadyExistsError("Loan", loan.id) from e

        logger.debug("loan_inserted", loan_id=str(loan.id), user_id=str(loan.user_id))
        return loan

    def apply_payment(
        self, loan_id: LoanId, decide: PaymentDecision, *, timeout: float | None = None
    ) -> tuple[Loan, Decimal]:
        """
        Record the payment `decide` produces for the current state of a loan.

        Args:
            loan_id: The loan being paid
            decide: Payment rule receiving the loan (None if missing) and its paid amount
            timeout: Transaction timeout in seconds, defaults to the repository's

        Returns:
            Tuple of (loan after the payment, new cumulative paid amount)
        """
        with serializable_transaction(
            self.session_factory, timeout=self._timeout(timeout)
        ) as scope:
            loan_orm = scope.execute(
                select(LoanORM).where(LoanORM.id == loan_id.value)
            ).scalar_one_or_none()
            loan = self.mapper.to_domain(loan_orm) if loan_orm else None
            paid_amount = self._paid_amount(scope, loan_id)

            payment, should_update_loan = decide(loan, paid_amount)
            if loan is None or loan_orm is None:
                raise LoanNotFoundError(loan_id)

            scope.add(self.payment_mapper.to_orm(payment))
            if should_update_loan:
                self.mapper.to_orm(loan, loan_orm)
                scope.flush()

        logger.debug(
            "payment_inserted",
            loan_id=str(loan_id),
            payment_id=str(payment.id),
            loan_updated=should_update_loan,
        )
        return loan, paid_amount + payment.amount

    def _timeout(self, timeout: float | None) -> float | None:
        return timeout if timeout is not None else self.default_timeout

    def _paid_amount(self, scope: TransactionScope, loan_id: LoanId) -> Decimal:
        return as_decimal(scope.execute(self._paid_amount_stmt(loan_id)).scalar_one())

    @staticmethod
    def _latest_loan_stmt(user_id: UserId) -> Select[tuple[LoanORM]]:
        return (
            select(LoanORM)
            .where(LoanORM.user_id == user_id.value)
            .order_by(LoanORM.created_at.desc())
            .limit(1)
        )

    @staticmethod
    def _paid_amount_stmt(loan_id: LoanId) -> Select[tuple[Decimal]]:
        return select(func.coalesce(func.sum(LoanPaymentORM.amount), 0)).where(
            LoanPaymentORM.loan_id == loan_id.value
        )
