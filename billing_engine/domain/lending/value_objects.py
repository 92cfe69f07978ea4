from dataclasses import dataclass
from enum import IntEnum

from billing_engine.domain.common.entity import EntityId


@dataclass(frozen=True)
class LoanId(EntityId):
    """Strongly-typed loan identifier."""


@dataclass(frozen=True)
class LoanPaymentId(EntityId):
    """Strongly-typed loan payment identifier."""


@dataclass(frozen=True)
class UserId(EntityId):
    """Strongly-typed identifier of the borrowing user."""


class LoanStatus(IntEnum):
    """Loan lifecycle status, stored as a small integer."""

    ONGOING = 0
    PAID = 1
