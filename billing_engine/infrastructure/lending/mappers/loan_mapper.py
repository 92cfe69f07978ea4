"""Mapper for Loan ORM ↔ Domain conversion."""

from datetime import UTC, datetime
from decimal import Decimal

from billing_engine.domain.lending.entities.loan import Loan
from billing_engine.domain.lending.value_objects import LoanId, UserId
from billing_engine.models import Loan as LoanORM

_WHOLE = Decimal(1)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from stores without time zones (SQLite)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def as_decimal(value: object) -> Decimal:
    """
    Normalize numeric column values.

    Drivers may return floats, ints or Decimals padded to a fixed scale (SQLite
    pads to ten places); trailing fractional zeros are dropped so whole amounts
    read back as integers.
    """
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    if number == number.to_integral_value():
        return number.quantize(_WHOLE)
    return number.normalize()


class LoanMapper:
    """Mapper for Loan ORM ↔ Domain conversion."""

    def to_domain(self, orm_model: LoanORM) -> Loan:
        """Convert ORM model to domain entity."""
        return Loan.create_with_id(
            id=LoanId(orm_model.id),
            user_id=UserId(orm_model.user_id),
            amount=as_decimal(orm_model.amount),
            payment_duration_weeks=orm_model.payment_duration_weeks,
            payment_amount=as_decimal(orm_model.payment_amount),
            status=orm_model.status,
            created_at=as_utc(orm_model.created_at),
            updated_at=as_utc(orm_model.updated_at),
        )

    def to_orm(self, domain_entity: Loan, orm_model: LoanORM | None = None) -> LoanORM:
        """Convert domain entity to ORM model."""
        if orm_model:
            # Only status and updated_at change after creation
            orm_model.status = int(domain_entity.status)
            orm_model.updated_at = domain_entity.updated_at
            return orm_model

        return LoanORM(
            id=domain_entity.id.value,
            user_id=domain_entity.user_id.value,
            amount=domain_entity.amount,
            payment_duration_weeks=domain_entity.payment_duration_weeks,
            payment_amount=domain_entity.payment_amount,
            status=int(domain_entity.status),
            created_at=domain_entity.created_at,
            updated_at=domain_entity.updated_at,
        )
