"""DTOs for lending use cases."""

from dataclasses import dataclass
from decimal import Decimal

from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.services.loan_billing_service import LoanStatement


@dataclass
class LoanDetail:
    """Loan together with its billing figures at the moment of the request."""

    loan: Loan
    outstanding_amount: Decimal
    current_bill_amount: Decimal
    is_delinquent: bool

    @classmethod
    def from_statement(cls, loan: Loan, statement: LoanStatement) -> "LoanDetail":
        return cls(
            loan=loan,
            outstanding_amount=statement.outstanding_amount,
            current_bill_amount=statement.current_bill_amount,
            is_delinquent=statement.is_delinquent,
        )
