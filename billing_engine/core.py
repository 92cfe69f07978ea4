from dependency_injector import containers, providers
from sqlalchemy.orm import sessionmaker

from billing_engine.application.lending.use_cases.create_loan_use_case import CreateLoanUseCase
from billing_engine.application.lending.use_cases.get_current_loan_use_case import (
    GetCurrentLoanUseCase,
)
from billing_engine.application.lending.use_cases.make_payment_use_case import MakePaymentUseCase
from billing_engine.config import get_settings
from billing_engine.domain.lending.services.loan_billing_service import LoanBillingService
from billing_engine.infrastructure.common.time_provider import SystemTimeProvider
from billing_engine.infrastructure.lending.repositories.loan_repository import LoanRepository


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(get_settings)

    # Overridden at startup with the application's session factory
    session_factory = providers.Dependency(instance_of=sessionmaker)

    time_provider = providers.Singleton(SystemTimeProvider)

    # Domain services
    billing_service = providers.Singleton(LoanBillingService)

    # Repositories
    loan_repository = providers.Factory(
        LoanRepository,
        session_factory=session_factory,
        default_timeout=settings.provided.DB_STATEMENT_TIMEOUT_SECONDS,
    )

    # Use cases
    create_loan_use_case = providers.Factory(
        CreateLoanUseCase,
        loan_repository=loan_repository,
        time_provider=time_provider,
        interest_rate=settings.provided.LOAN_INTEREST_RATE,
    )
    get_current_loan_use_case = providers.Factory(
        GetCurrentLoanUseCase,
        loan_repository=loan_repository,
        billing_service=billing_service,
        time_provider=time_provider,
    )
    make_payment_use_case = providers.Factory(
        MakePaymentUseCase,
        loan_repository=loan_repository,
        billing_service=billing_service,
        time_provider=time_provider,
    )


container = Container()
