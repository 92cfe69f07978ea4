"""Business errors raised by the lending domain."""

from billing_engine.domain.common.exceptions import BusinessRuleViolationError, EntityNotFoundError


class LoanNotFoundError(EntityNotFoundError):
    """No loan exists for the requested id, or the user has no ongoing loan."""

    def __init__(self, loan_id: object = None) -> None:
        super().__init__("Loan", loan_id, message="loan not found")


class StillHasOngoingLoanError(BusinessRuleViolationError):
    def __init__(self) -> None:
        super().__init__("single_ongoing_loan", "user still has ongoing loan")


class CurrentWeekAlreadyPaidError(BusinessRuleViolationError):
    def __init__(self) -> None:
        super().__init__("no_payment_without_bill", "current week is already paid")


class NotExactPaymentAmountError(BusinessRuleViolationError):
    """The payment amount differs from the bill, whether smaller or larger."""

    def __init__(self) -> None:
        super().__init__(
            "exact_payment_amount", "loan payment amount does not match billing amount"
        )
