"""
core.domain.exception_handler — DRF-compatible global exception handler.

Maps domain exceptions from ``core.domain.exceptions`` to proper
DRF ``Response`` objects so that views don't need per-endpoint
try/except boilerplate.

Register in ``settings.py``::

    REST_FRAMEWORK = {
        ...
        'EXCEPTION_HANDLER': 'core.domain.exception_handler.domain_exception_handler',
    }
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    AuthorizationError,
    Conflict,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Ordered most specific first; DomainError catches the rest.
_ERROR_RESPONSES: tuple[tuple[type[DomainError], int, str], ...] = (
    (AuthorizationError, 403, "forbidden"),
    (NotFoundError, 404, "not_found"),
    (Conflict, 409, "conflict"),
    (ValidationError, 400, "invalid"),
    (DomainError, 400, "rule_violation"),
)


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    Resolve DRF's own exceptions first, then the office's domain errors.

    Domain errors come back as ``{"detail": <message>, "code": <slug>}``
    so clients can branch on ``code`` without parsing the message.
    Anything else is left to Django (a 500).
    """
    response = drf_default_handler(exc, context)
    if response is not None or not isinstance(exc, DomainError):
        return response

    view = context.get("view")
    for exc_class, status_code, code in _ERROR_RESPONSES:
        if isinstance(exc, exc_class):
            logger.warning(
                "%s (%s) raised in %s: %s",
                type(exc).__name__,
                code,
                type(view).__name__ if view is not None else "unknown view",
                exc,
            )
            return Response({"detail": str(exc), "code": code}, status=status_code)
    return None
