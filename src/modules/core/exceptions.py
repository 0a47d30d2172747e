"""DRF exception handler producing a uniform error body.

Every error response has the shape::

    {"type": "client_error", "errors": [{"code": ..., "detail": ..., "attr": ...}]}

``DomainError`` subclasses are translated by their ``ErrorKind`` tag using
``STATUS_BY_KIND``; this module is the only place where a domain error kind
meets an HTTP status code.  Everything else is delegated to DRF's default
handler and then reshaped.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from shared.domain.errors import DomainError, ErrorKind

logger = structlog.get_logger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.ILLEGAL_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ILLEGAL_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.EXPIRED: status.HTTP_400_BAD_REQUEST,
}


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """Entry point registered as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``."""
    if isinstance(exc, DomainError):
        return _domain_error_response(exc, context)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        errors = _flatten_validation_detail(exc.detail)
        response.data = {"type": "validation_error", "errors": errors}
        return response

    detail = getattr(exc, "detail", str(exc))
    code = getattr(detail, "code", None) or getattr(exc, "default_code", "error")
    response.data = {
        "type": "client_error" if response.status_code < 500 else "server_error",
        "errors": [{"code": code, "detail": str(detail), "attr": None}],
    }
    return response


def _domain_error_response(exc: DomainError, context: Dict[str, Any]) -> Response:
    status_code = STATUS_BY_KIND[exc.kind]
    view = context.get("view")
    logger.info(
        "api.domain_error",
        kind=exc.kind.value,
        status_code=status_code,
        view=view.__class__.__name__ if view is not None else None,
        detail=exc.message,
    )

    if exc.fields:
        errors = [
            {"code": exc.kind.value, "detail": message, "attr": attr}
            for attr, message in exc.fields.items()
        ]
    else:
        errors = [{"code": exc.kind.value, "detail": exc.message, "attr": None}]
    return Response({"type": "client_error", "errors": errors}, status=status_code)


def _flatten_validation_detail(detail: Any, prefix: Optional[str] = None) -> List[Dict[str, Any]]:
    """Turn DRF's nested ``ValidationError.detail`` into a flat error list."""
    errors: List[Dict[str, Any]] = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            attr = key if key != "non_field_errors" else None
            if prefix and attr:
                attr = f"{prefix}.{attr}"
            errors.extend(_flatten_validation_detail(value, attr or prefix))
    elif isinstance(detail, list):
        for item in detail:
            errors.extend(_flatten_validation_detail(item, prefix))
    else:
        errors.append(
            {"code": ErrorKind.FORMAT.value, "detail": str(detail), "attr": prefix}
        )
    return errors
