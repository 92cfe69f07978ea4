"""Boundary guaranteeing that only classified errors leave a use case."""

import structlog

from billing_engine.domain.common.exceptions import DomainError, UnexpectedError

logger = structlog.get_logger(__name__)


def ensure_business_error(error: BaseException) -> DomainError:
    """
    Return the classified error to report for `error`.

    A DomainError is returned unchanged. An exception group (a failed rollback
    stacked on the original failure) yields the first DomainError it holds.
    Anything else is logged and replaced with an opaque UnexpectedError so that
    storage or driver details never reach callers.
    """
    if isinstance(error, DomainError):
        return error

    if isinstance(error, BaseExceptionGroup):
        matched = error.subgroup(DomainError)
        if matched is not None:
            for inner in _leaves(matched):
                if isinstance(inner, DomainError):
                    logger.warning("domain_error_with_secondary_failure", error=str(error))
                    return inner

    logger.error("unexpected_error", error_type=type(error).__name__, exc_info=error)
    return UnexpectedError()


def _leaves(group: BaseExceptionGroup) -> list[BaseException]:
    leaves: list[BaseException] = []
    for inner in group.exceptions:
        if isinstance(inner, BaseExceptionGroup):
            leaves.extend(_leaves(inner))
        else:
            leaves.append(inner)
    return leaves
