"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to the
appropriate HTTP response.

Mapping cheatsheet
------------------
┌─────────────────────┬──────────────────────────────┬──────┐
│ Domain Exception    │ Raised for                   │ Code │
├─────────────────────┼──────────────────────────────┼──────┤
│ DomainError         │ generic business-rule breach │ 400  │
│ ValidationError     │ blank / unknown input        │ 400  │
│ AuthorizationError  │ outside the actor's role     │ 403  │
│ NotFoundError       │ unknown complaint / actor    │ 404  │
│ Conflict            │ duplicate phone number       │ 409  │
│ CollaboratorError   │ text generation failed       │  —   │
└─────────────────────┴──────────────────────────────┴──────┘

``CollaboratorError`` never reaches the handler: the complaints service
converts it into a fallback value at the call site.

Recommended usage inside a service::

    from core.domain.exceptions import AuthorizationError

    if actor.is_citizen:
        raise AuthorizationError("Citizens cannot change complaint status.")
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """
    Malformed or missing required input (blank title, description or
    message text; a category, area or status outside the closed set;
    an unparseable channel address).

    Maps to HTTP 400.
    """

    def __init__(self, message: str = "The submitted data is invalid.") -> None:
        super().__init__(message)


class AuthorizationError(DomainError):
    """
    The actor attempted an operation outside their role's contract, e.g.
    a citizen changing a complaint's status or staff reading a complaint
    outside their category scope.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    """
    The operation references a complaint or actor that does not exist.

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the data.

    Typical usage: registering or provisioning a phone number that is
    already taken.  Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class CollaboratorError(DomainError):
    """
    The external text-generation collaborator failed, timed out, or
    returned no usable text.

    Always absorbed inside the service that called the collaborator and
    replaced by a deterministic fallback string.
    """

    def __init__(self, message: str = "The text-generation service is unavailable.") -> None:
        super().__init__(message)
