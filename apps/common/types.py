"""
Shared type system for the Mesa POS promotions engine
Rust-inspired Result pattern, domain aliases and the business exception root.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

# Type variables for generic Result
T = TypeVar('T')  # Success type
E = TypeVar('E')  # Error type

# ===============================================================================
# RESULT TYPES
# ===============================================================================

@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success result containing a value"""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, func: Callable[[T], Any]) -> Result[Any, Any]:
        return Ok(func(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    """Error result containing an error value"""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises an exception - use unwrap_or() for safe access"""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, func: Callable[[Any], Any]) -> Result[Any, E]:
        return self


Result = Ok[T] | Err[E]

# ===============================================================================
# BUSINESS TYPES
# ===============================================================================

TenantId = uuid.UUID  # Restaurant (tenant) primary key
OrderId = uuid.UUID
PromotionId = uuid.UUID
CouponCode = str  # Stored upper-cased: "SUMMER10"


def parse_uuid(value: Any, field: str = 'id') -> Result[uuid.UUID, str]:
    """Parse a UUID from request input without raising"""
    if isinstance(value, uuid.UUID):
        return Ok(value)
    if not value:
        return Err(f"{field} is required")
    try:
        return Ok(uuid.UUID(str(value)))
    except ValueError:
        return Err(f"{field} is not a valid UUID")


# ===============================================================================
# COMMON EXCEPTIONS
# ===============================================================================

class BusinessError(Exception):
    """Base exception for business logic errors"""


class NotFoundError(BusinessError):
    """Requested entity does not exist within the caller's tenant"""
    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")
