"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler translating those exceptions into responses.
transactions       Helpers for ``transaction.atomic`` + ``select_for_update``.
access             Organization- and role-scoped queryset selectors.
validation         Flattening of serializer errors into full messages.

Usage from any app::

    from core.domain.exceptions import DomainError, PermissionDenied
    from core.domain.transactions import atomic_capability
    from core.domain.access import scope_to_organization
    from core.domain.validation import full_messages
"""
