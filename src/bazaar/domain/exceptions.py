"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the outer layers (CLI, webhook adapter) can catch them uniformly.  Each
class carries the status code a request boundary should answer with.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    http_status = 400


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist, or is not owned by the caller."""

    http_status = 404


class ForbiddenError(DomainException):
    """The caller's role or ownership does not allow this action."""

    http_status = 403


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the available stock of a product/variation."""

    def __init__(self, message: str, available: int, requested: int) -> None:
        super().__init__(message)
        self.available = available
        self.requested = requested

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.available)


class OutOfStockError(InsufficientStockError):
    """Nothing at all is available."""


class InsufficientReservedStockError(DomainException):
    """Consuming more than was reserved.

    Signals a logic bug upstream; never clamped.
    """

    http_status = 500

    def __init__(self, message: str, reserved: int, requested: int) -> None:
        super().__init__(message)
        self.reserved = reserved
        self.requested = requested


class OverReleaseError(ValidationError):
    """A direct release asked for more than is currently reserved."""


class DuplicateVariationError(ValidationError):
    """The option set already exists on the product."""


class DuplicateRelationshipError(ValidationError):
    """An entity is already linked the way the request asks for."""


class VariationNotFoundError(EntityNotFoundError):
    """No variation matches the requested options or id."""


class VariationInactiveError(ValidationError):
    """The variation exists but has been deactivated."""


class InvalidCouponError(ValidationError):
    """Unknown or expired coupon code."""


class InvalidTransitionError(ValidationError):
    """The order (or delivery) state machine does not allow this move."""


class UpstreamPaymentError(DomainException):
    """The external payment gateway call failed."""

    http_status = 502
