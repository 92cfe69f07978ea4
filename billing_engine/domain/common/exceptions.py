"""
Domain layer exceptions.

Every error raised by the domain carries an ErrorKind. Callers classify
failures by kind (never by exception identity) to decide the status reported
to clients and whether a retry makes sense. The infrastructure layer maps
kinds to transport statuses.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed classification attached to every domain failure."""

    INTERNAL = "internal"
    BAD_REQUEST = "bad_request"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"


class DomainError(Exception):
    """
    Base exception for all domain errors.

    Subclasses pin a default kind; an explicit kind passed to the constructor
    wins over it.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        details: dict[str, object] | None = None,
        *,
        kind: ErrorKind | None = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ValidationError(DomainError):
    """
    Raised when domain validation fails.

    Example: Empty identifier, non-positive amount, unknown status.
    """

    kind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str, field: str | None = None, value: object = None) -> None:
        details: dict[str, object] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, details)
        self.field = field
        self.value = value


class EntityNotFoundError(DomainError):
    """
    Raised when an entity cannot be found.

    Example: Paying into a loan id that does not exist.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: object, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id {entity_id} not found"
        super().__init__(msg, {"entity_type": entity_type, "entity_id": entity_id})
        self.entity_type = entity_type
        self.entity_id = entity_id


class BusinessRuleViolationError(DomainError):
    """
    Raised when a business rule is violated.

    Example: Creating a second loan while one is still ongoing.
    """

    kind = ErrorKind.UNPROCESSABLE_ENTITY

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, {"rule": rule})
        self.rule = rule


class AlreadyExistsError(DomainError):
    """Raised when an entity with the same identity is already stored."""

    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            f"{entity_type} with id {entity_id} already exists",
            {"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class UnexpectedError(DomainError):
    """Opaque replacement for failures that carry no kind of their own."""

    kind = ErrorKind.INTERNAL

    def __init__(self) -> None:
        super().__init__("unexpected error, please try again")
