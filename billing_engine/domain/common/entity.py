"""
Base class for Entities.

Entities are objects that have a distinct identity that runs through time
and different states. Two entities are equal if they have the same identity,
regardless of their attributes.

Example:
    @dataclass
    class Loan(Entity[LoanId]):
        id: LoanId
        status: LoanStatus

        def is_paid(self) -> bool:
            return self.status == LoanStatus.PAID
"""

from abc import ABC
from dataclasses import dataclass
from typing import Generic, Self, TypeVar
from uuid import UUID, uuid4

from .exceptions import ValidationError

_NIL_UUID = UUID(int=0)


@dataclass(frozen=True)
class EntityId:
    """
    Base class for strongly-typed entity identifiers.

    Entity IDs wrap a UUID so that identifiers of different entities cannot be
    mixed up. The nil UUID is the "empty" identifier; entities reject it during
    validation rather than at construction, so persistence and transport layers
    can still carry it around.

    Example:
        @dataclass(frozen=True)
        class LoanId(EntityId):
            pass

        loan_id = LoanId.generate()
        LoanId.parse(str(loan_id)) == loan_id
    """

    value: UUID

    def __str__(self) -> str:
        return str(self.value)

    @property
    def is_empty(self) -> bool:
        return self.value == _NIL_UUID

    @classmethod
    def generate(cls) -> Self:
        """Generate a fresh random identifier."""
        return cls(uuid4())

    @classmethod
    def empty(cls) -> Self:
        return cls(_NIL_UUID)

    @classmethod
    def parse(cls, raw: str) -> Self:
        """
        Parse an identifier from its string form.

        Raises:
            ValidationError: If the string is not a valid UUID
        """
        try:
            return cls(UUID(raw))
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"{cls.__name__} must be a valid UUID", value=raw
            ) from e

    def to_primitive(self) -> str:
        """Convert to primitive for serialization."""
        return str(self.value)


IdType = TypeVar("IdType", bound=EntityId)


class Entity(ABC, Generic[IdType]):
    """
    Base class for Entities in the domain model.

    Entities are:
    - Defined by identity (not attributes)
    - Mutable (state can change over time)
    - Have lifecycle (created, modified)

    Subclasses must have an 'id' attribute of type IdType.
    """

    id: IdType

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"
