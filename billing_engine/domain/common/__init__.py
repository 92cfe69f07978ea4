"""
Domain common module.

Contains base classes for domain modeling:
- Entity: Objects with identity and lifecycle
- EntityId: Strongly-typed UUID identifiers
- DomainError and its kind-tagged subclasses
"""

from .entity import Entity, EntityId
from .exceptions import (
    AlreadyExistsError,
    BusinessRuleViolationError,
    DomainError,
    EntityNotFoundError,
    ErrorKind,
    UnexpectedError,
    ValidationError,
)

__all__ = [
    "AlreadyExistsError",
    "BusinessRuleViolationError",
    "DomainError",
    "Entity",
    "EntityId",
    "EntityNotFoundError",
    "ErrorKind",
    "UnexpectedError",
    "ValidationError",
]
