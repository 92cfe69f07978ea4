"""Database models."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, SmallInteger, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_engine.database import Base


class Loan(Base):
    """Loan model; one row per loan, updated only when it is paid off."""

    __tablename__ = "loans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    payment_duration_weeks: Mapped[int] = mapped_column(nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    payments: Mapped[list["LoanPayment"]] = relationship(
        back_populates="loan", passive_deletes=True
    )

    def __repr__(self) -> str:
        """String representation of Loan."""
        return f"<Loan(id={self.id}, user_id={self.user_id}, status={self.status})>"


class LoanPayment(Base):
    """Append-only payment made against a loan."""

    __tablename__ = "loan_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    loan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("loans.id"), index=True, nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    loan: Mapped[Loan] = relationship(back_populates="payments")

    def __repr__(self) -> str:
        """String representation of LoanPayment."""
        return f"<LoanPayment(id={self.id}, loan_id={self.loan_id}, amount={self.amount})>"
