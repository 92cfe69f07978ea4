"""Pydantic schemas for loan API request/response validation."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from billing_engine.application.lending.dtos import LoanDetail
from billing_engine.domain.lending.entities.loan import Loan


class LoanCreateRequest(BaseModel):
    """Schema for opening a loan."""

    user_id: str = Field(..., description="UUID of the borrowing user")
    amount: Decimal = Field(..., description="Principal amount, as a decimal string")
    payment_duration_weeks: int = Field(..., description="Number of weekly installments")


class PaymentCreateRequest(BaseModel):
    """Schema for paying the current bill of a loan."""

    amount: Decimal = Field(..., description="Amount paid; must equal the current bill")


class LoanResponse(BaseModel):
    """Schema for a loan."""

    id: str
    user_id: str
    amount: Decimal
    payment_duration_weeks: int
    payment_amount: Decimal = Field(..., description="Principal plus interest")
    weekly_payment_amount: Decimal
    status: Literal["ongoing", "paid"]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, loan: Loan) -> "LoanResponse":
        return cls(
            id=str(loan.id),
            user_id=str(loan.user_id),
            amount=loan.amount,
            payment_duration_weeks=loan.payment_duration_weeks,
            payment_amount=loan.payment_amount,
            weekly_payment_amount=loan.weekly_payment_amount,
            status="paid" if loan.is_paid() else "ongoing",
            created_at=loan.created_at,
            updated_at=loan.updated_at,
        )


class LoanDetailResponse(BaseModel):
    """Schema for a loan with its billing figures at request time."""

    loan: LoanResponse
    outstanding_amount: Decimal = Field(..., description="Total minus payments, never negative")
    current_bill_amount: Decimal = Field(..., description="Amount due right now")
    is_delinquent: bool = Field(..., description="More than two weekly bills are unpaid")

    @classmethod
    def from_detail(cls, detail: LoanDetail) -> "LoanDetailResponse":
        return cls(
            loan=LoanResponse.from_entity(detail.loan),
            outstanding_amount=detail.outstanding_amount,
            current_bill_amount=detail.current_bill_amount,
            is_delinquent=detail.is_delinquent,
        )
