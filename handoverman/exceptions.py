"""
Exceptions for Handoverman.

All errors carry a structured code for programmatic handling. The class
tells the caller what kind of failure happened (bad input, illegal
transition, missing stock, ...), the code tells it exactly which one.

Usage:
    try:
        handovers.approve(actor, handover_id)
    except InsufficientStock as e:
        print(f"Only {e.available} left")
    except InventoryError as e:
        return JsonResponse(e.as_dict(), status=e.http_status)
"""

from typing import Any


class BaseError(Exception):
    """
    Exception with a code, a human-readable message and context data.

    Subclasses declare ``_default_messages`` so callers only need to pass
    the code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {k: _plain(v) for k, v in self.data.items()},
        }


def _plain(value):
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return str(value)


class InventoryError(BaseError):
    """Root of every error raised by Handoverman services."""

    kind = 'InventoryError'
    http_status = 400


class ValidationFailed(InventoryError):
    """Caller-supplied input violates a precondition."""

    kind = 'ValidationError'
    _default_messages = {
        'INVALID_QUANTITY': 'Quantity must be a positive integer',
        'REASON_REQUIRED': 'A reason is required',
        'RETURN_EXCEEDS_QUANTITY': 'Return quantity cannot exceed borrowed quantity',
        'PARTIAL_RETURN_UNSUPPORTED': 'Handovers must be returned in full',
        'INVALID_FIELD': 'Field cannot be set through this operation',
    }


class InvalidState(InventoryError):
    """Transition is not legal from the current state."""

    kind = 'InvalidState'
    http_status = 409
    _default_messages = {
        'INVALID_STATUS': 'Invalid status for this operation',
        'PRODUCT_IN_USE': 'Product has units handed over to employees',
        'IDENTIFIER_IN_USE': 'Another product already has this ID',
    }


class InsufficientStock(InventoryError):
    """Stock-dependent transition cannot proceed."""

    kind = 'InsufficientStock'
    http_status = 409
    _default_messages = {
        'INSUFFICIENT_STOCK': 'Not enough stock for this operation',
    }

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)


class NotFound(InventoryError):
    """Referenced product, employee or handover does not exist."""

    kind = 'NotFound'
    http_status = 404
    _default_messages = {
        'PRODUCT_NOT_FOUND': 'Product not found',
        'HANDOVER_NOT_FOUND': 'Handover not found',
        'EMPLOYEE_NOT_FOUND': 'Employee not found',
    }


class ConcurrencyConflict(InventoryError):
    """A conditional update lost the race against another transition."""

    kind = 'ConcurrencyConflict'
    http_status = 409
    _default_messages = {
        'CONCURRENT_MODIFICATION': 'Concurrent modification detected',
    }


class PermissionDenied(InventoryError):
    """Caller lacks the capability the operation requires."""

    kind = 'PermissionDenied'
    http_status = 403
    _default_messages = {
        'NOT_ALLOWED': 'You do not have permission to perform this action',
    }


class AllocatorError(InventoryError):
    """Identifier allocation or release failed."""

    kind = 'AllocatorError'
    http_status = 500
    _default_messages = {
        'ALLOCATOR_UNAVAILABLE': 'Could not allocate a product identifier',
        'ALREADY_RELEASED': 'Identifier is already in the recycled pool',
        'UNKNOWN_IDENTIFIER': 'Identifier was never issued',
    }
