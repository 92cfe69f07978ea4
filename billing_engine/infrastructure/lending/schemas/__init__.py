from billing_engine.infrastructure.lending.schemas.loan_schemas import (
    LoanCreateRequest,
    LoanDetailResponse,
    LoanResponse,
    PaymentCreateRequest,
)

__all__ = [
    "LoanCreateRequest",
    "LoanDetailResponse",
    "LoanResponse",
    "PaymentCreateRequest",
]
