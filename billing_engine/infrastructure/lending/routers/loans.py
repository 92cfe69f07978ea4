"""API routes for loans and their payments."""

from fastapi import APIRouter, Depends, status

from billing_engine.application.lending.use_cases.create_loan_use_case import CreateLoanUseCase
from billing_engine.application.lending.use_cases.get_current_loan_use_case import (
    GetCurrentLoanUseCase,
)
from billing_engine.application.lending.use_cases.make_payment_use_case import MakePaymentUseCase
from billing_engine.core import container
from billing_engine.infrastructure.common.di import inject_use_case
from billing_engine.infrastructure.lending.schemas import (
    LoanCreateRequest,
    LoanDetailResponse,
    LoanResponse,
    PaymentCreateRequest,
)

router = APIRouter(tags=["loans"])


@router.post(
    "/loans",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_loan(
    request: LoanCreateRequest,
    use_case: CreateLoanUseCase = Depends(inject_use_case(container.create_loan_use_case)),
) -> LoanResponse:
    """
    Open a loan for a user.

    Args:
        request: User id, principal and duration in weeks
        use_case: CreateLoanUseCase injected via dependency container

    Returns:
        The created loan
    """
    loan = use_case.create_loan(
        user_id=request.user_id,
        amount=request.amount,
        payment_duration_weeks=request.payment_duration_weeks,
    )
    return LoanResponse.from_entity(loan)


@router.get(
    "/users/{user_id}/loans/current",
    response_model=LoanDetailResponse,
    status_code=status.HTTP_200_OK,
)
def get_current_loan(
    user_id: str,
    use_case: GetCurrentLoanUseCase = Depends(
        inject_use_case(container.get_current_loan_use_case)
    ),
) -> LoanDetailResponse:
    """Get the user's ongoing loan with its outstanding amount, bill and delinquency."""
    return LoanDetailResponse.from_detail(use_case.get_current_loan(user_id))


@router.post(
    "/loans/{loan_id}/payments",
    response_model=LoanDetailResponse,
    status_code=status.HTTP_200_OK,
)
def make_payment(
    loan_id: str,
    request: PaymentCreateRequest,
    use_case: MakePaymentUseCase = Depends(inject_use_case(container.make_payment_use_case)),
) -> LoanDetailResponse:
    """
    Pay the current bill of a loan.

    Args:
        loan_id: UUID of the loan
        request: Amount paid, which must equal the current bill
        use_case: MakePaymentUseCase injected via dependency container

    Returns:
        The loan and its billing figures after the payment
    """
    detail = use_case.make_payment(loan_id=loan_id, amount=request.amount)
    return LoanDetailResponse.from_detail(detail)
