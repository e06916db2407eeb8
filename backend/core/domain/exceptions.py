"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global handler in
``core.domain.exception_handler`` maps them to HTTP responses.

Mapping cheatsheet
------------------
┌──────────────────────┬──────────────────────────────┬──────┐
│ Domain Exception     │ Response body                │ Code │
├──────────────────────┼──────────────────────────────┼──────┤
│ DomainError          │ {"detail": message}          │ 400  │
│ PermissionDenied     │ {"detail": notice}           │ 403  │
│ NotFound             │ {"detail": message}          │ 404  │
│ UnprocessableEntity  │ ["Field message", ...]       │ 422  │
└──────────────────────┴──────────────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import PermissionDenied

    if not policy.can(CaseActions.DEACTIVATE):
        raise PermissionDenied()
"""

from __future__ import annotations

from core.constants import NOT_AUTHORIZED_NOTICE


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """
    The authenticated user's role does not allow this operation, or the
    target belongs to another organization on an endpoint that reports
    cross-tenant access as "not authorized".

    Maps to HTTP 403.  The default message is the user-facing notice
    shown after an unauthorized action.
    """

    def __init__(self, message: str = NOT_AUTHORIZED_NOTICE) -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist (or is not visible to the
    requesting user's organization).

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class UnprocessableEntity(DomainError):
    """
    Input was understood but failed validation.

    Carries a flat, ordered list of human-readable messages such as
    ``["Case number can't be blank"]``.  An empty list is valid: a
    lifecycle transition that fails without a field error reports ``[]``.

    Maps to HTTP 422 with the list itself as the response body.
    """

    def __init__(self, messages: list[str] | None = None) -> None:
        self.messages = list(messages or [])
        super().__init__("; ".join(self.messages) or "Unprocessable entity.")
