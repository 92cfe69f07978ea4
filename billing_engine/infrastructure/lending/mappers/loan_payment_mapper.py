"""Mapper for LoanPayment Domain → ORM conversion."""

from billing_engine.domain.lending.entities.loan_payment import LoanPayment
from billing_engine.models import LoanPayment as LoanPaymentORM


class LoanPaymentMapper:
    """Mapper for LoanPayment Domain → ORM conversion. Payments are insert-only."""

    def to_orm(self, domain_entity: LoanPayment) -> LoanPaymentORM:
        return LoanPaymentORM(
            id=domain_entity.id.value,
            loan_id=domain_entity.loan_id.value,
            amount=domain_entity.amount,
            created_at=domain_entity.created_at,
            updated_at=domain_entity.updated_at,
        )
