"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions        Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler DRF handler translating those exceptions into responses.
notifications     Advisory, self-expiring notification emitter.
transactions      ``select_for_update`` helper for per-row writers.
access            Role-scoped queryset selectors.

Usage from any app::

    from core.domain.exceptions import ValidationError, AuthorizationError
    from core.domain.notifications import NotificationEmitter
    from core.domain.transactions import lock_for_update
    from core.domain.access import apply_role_scope
"""
