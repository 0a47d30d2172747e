"""Domain error primitives shared by every bounded context.

Each error carries an ``ErrorKind`` tag.  Transport layers map the tag to a
status code (see ``modules.core.exceptions``); nothing ever inspects the
message text to decide how an error is reported.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    FORMAT = "format_error"
    NOT_FOUND = "not_found"
    AUTHORIZATION = "authorization_error"
    ILLEGAL_STATE = "illegal_state"
    ILLEGAL_TRANSITION = "illegal_transition"
    EXPIRED = "expired"


class DomainError(Exception):
    """Base class for business rule violations surfaced to the caller.

    ``fields`` maps offending input attributes to messages and is only
    populated for shape errors.
    """

    kind: ErrorKind = ErrorKind.ILLEGAL_STATE

    def __init__(
        self,
        message: str,
        *,
        fields: Optional[Dict[str, str]] = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.fields: Dict[str, str] = dict(fields or {})
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        return self.message


class FormatError(DomainError):
    """A field has the wrong shape (length, charset, URL syntax...)."""

    kind = ErrorKind.FORMAT


class NotFoundError(DomainError):
    """The referenced entity does not exist or is not visible to the requester."""

    kind = ErrorKind.NOT_FOUND


class AuthorizationError(DomainError):
    """The requester's role does not allow the operation."""

    kind = ErrorKind.AUTHORIZATION


class IllegalStateError(DomainError):
    """The entity is not in a state where the operation applies."""

    kind = ErrorKind.ILLEGAL_STATE


class IllegalTransitionError(DomainError):
    kind = ErrorKind.ILLEGAL_TRANSITION


class ExpiredError(DomainError):
    kind = ErrorKind.EXPIRED
