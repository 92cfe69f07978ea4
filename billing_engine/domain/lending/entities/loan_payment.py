"""
LoanPayment entity: one accepted payment against a loan.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from billing_engine.domain.common.entity import Entity
from billing_engine.domain.common.exceptions import ValidationError
from billing_engine.domain.lending.value_objects import LoanId, LoanPaymentId


@dataclass(frozen=True, eq=False)
class LoanPayment(Entity[LoanPaymentId]):
    """
    Payment record tied to a loan.

    Business Rules:
    - Payment and loan identifiers cannot be empty
    - Amount must be positive
    - Payments are append-only and never modified after creation
    """

    id: LoanPaymentId
    loan_id: LoanId
    amount: Decimal
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """Validate invariants, stopping at the first violation."""
        if self.id.is_empty:
            raise ValidationError("loan payment id cannot be empty", field="id")
        if self.loan_id.is_empty:
            raise ValidationError("loan payment loan id cannot be empty", field="loan_id")
        if self.amount <= 0:
            raise ValidationError(
                "loan payment amount must be greater than zero", field="amount", value=self.amount
            )
        if self.created_at is None:
            raise ValidationError("created at cannot be empty", field="created_at")
        if self.updated_at is None:
            raise ValidationError("updated at cannot be empty", field="updated_at")

    @classmethod
    def create(
        cls, loan_id: LoanId, amount: Decimal, now: datetime | None = None
    ) -> "LoanPayment":
        """Create a new payment with a fresh id, stamped at `now` (UTC)."""
        timestamp = now or datetime.now(UTC)
        return cls(
            id=LoanPaymentId.generate(),
            loan_id=loan_id,
            amount=amount,
            created_at=timestamp,
            updated_at=timestamp,
        )

    @classmethod
    def create_with_id(
        cls,
        id: LoanPaymentId,
        loan_id: LoanId,
        amount: Decimal,
        created_at: datetime,
        updated_at: datetime,
    ) -> "LoanPayment":
        """Reconstitute a payment from persistence."""
        return cls(
            id=id,
            loan_id=loan_id,
            amount=amount,
            created_at=created_at,
            updated_at=updated_at,
        )
