"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
inherits an ``ErrorKind`` from ``shared.domain.errors``; the API exception
handler turns the kind into an HTTP status.
"""

from __future__ import annotations

from typing import Iterable

from shared.domain.errors import (
    AuthorizationError,
    FormatError,
    IllegalStateError,
    IllegalTransitionError,
    NotFoundError,
)


class OrderNotFound(NotFoundError):
    """The order does not exist or is not visible to the requester."""


class OrderAccessDenied(AuthorizationError):
    """The requester's role may not perform this operation on the order."""


class InvalidTransition(IllegalTransitionError):
    """The requested status is not reachable from the current one."""

    def __init__(self, current: str, requested: str, allowed: Iterable[str]) -> None:
        allowed_list = sorted(allowed)
        allowed_text = ", ".join(allowed_list) if allowed_list else "none"
        super().__init__(
            f"Invalid status transition from {current} to {requested}. "
            f"Valid transitions: {allowed_text}.",
            current=current,
            requested=requested,
            allowed=allowed_list,
        )
        self.current = current
        self.requested = requested


class InvalidFiscalData(FormatError):
    """NF-e access key or URL failed format/checksum validation."""


class OrderStateConflict(IllegalStateError):
    """The order's state does not allow the requested change."""


class LedgerImmutableError(Exception):
    """Attempt to update or delete an order history entry.

    Not a ``DomainError``: this signals a programming error, never a
    user-correctable request.
    """
