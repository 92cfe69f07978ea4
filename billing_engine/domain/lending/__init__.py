"""
Lending domain module.

Loans, their payments and the billing rules tying them together.
"""

from .entities.loan import DELINQUENCY_THRESHOLD_WEEKS, Loan
from .entities.loan_payment import LoanPayment
from .exceptions import (
    CurrentWeekAlreadyPaidError,
    LoanNotFoundError,
    NotExactPaymentAmountError,
    StillHasOngoingLoanError,
)
from .services.loan_billing_service import LoanBillingService, LoanStatement
from .value_objects import LoanId, LoanPaymentId, LoanStatus, UserId

__all__ = [
    "DELINQUENCY_THRESHOLD_WEEKS",
    "CurrentWeekAlreadyPaidError",
    "Loan",
    "LoanBillingService",
    "LoanId",
    "LoanNotFoundError",
    "LoanPayment",
    "LoanPaymentId",
    "LoanStatement",
    "LoanStatus",
    "NotExactPaymentAmountError",
    "StillHasOngoingLoanError",
    "UserId",
]
