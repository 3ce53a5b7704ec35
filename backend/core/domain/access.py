"""
core.domain.access — Role-scoped queryset selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to obtain querysets filtered by the requesting user's role.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.         ║
║  Each app's ``services.py`` owns its own scope-rules table.    ║
║  This module provides:                                         ║
║    1) ``apply_role_scope`` — role-keyed dispatch.              ║
║    2) ``require_role`` — guard that checks the actor's role.   ║
║    3) ``ensure_exhaustive`` — import-time table check.         ║
╚══════════════════════════════════════════════════════════════════╝

Architecture overview
---------------------
Role-based data access follows a **scope-rule** pattern:

    ┌─────────┐      ┌────────────────┐      ┌──────────────────┐
    │  View   │─────▶│  App service   │─────▶│ core.domain      │
    │ (thin)  │      │ (owns logic)   │      │   .access        │
    └─────────┘      └────────────────┘      │ (shared helpers) │
                                             └──────────────────┘

Roles form a closed enum (``accounts.models.Role``), so every table
keyed by role must name every member.  ``ensure_exhaustive`` is called
right after the table is declared; a forgotten role fails at import
time instead of silently falling through at request time.

Usage in an app's service layer::

    from accounts.models import Role
    from core.domain.access import apply_role_scope, ensure_exhaustive

    VISIBILITY_RULES = {
        Role.CITIZEN:    lambda qs, u: qs.filter(submitter=u),
        Role.STAFF:      lambda qs, u: qs.filter(category__in=u.category_scope),
        Role.SUPERVISOR: lambda qs, u: qs,
    }
    ensure_exhaustive(VISIBILITY_RULES, Role, name="VISIBILITY_RULES")

    qs = apply_role_scope(Complaint.objects.all(), user, scope_rules=VISIBILITY_RULES)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

from django.core.exceptions import ImproperlyConfigured
from django.db.models import QuerySet

from core.domain.exceptions import AuthorizationError

if TYPE_CHECKING:
    from accounts.models import User

# Type alias for a scope filter function.
# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

# Role value → scope filter.
ScopeRules = Mapping[str, ScopeFilter]


def ensure_exhaustive(table: Mapping[str, Any], choices_class: type, *, name: str) -> None:
    """
    Raise ``ImproperlyConfigured`` unless ``table`` has exactly one entry
    per member of ``choices_class``.

    Args:
        table:         Dispatch table keyed by enum value.
        choices_class: A Django ``TextChoices`` subclass.
        name:          Table name used in the error message.
    """
    expected = set(choices_class.values)
    present = set(table)
    missing = sorted(expected - present)
    unknown = sorted(present - expected)
    if missing or unknown:
        raise ImproperlyConfigured(
            f"{name} must cover every {choices_class.__name__}: "
            f"missing={missing} unknown={unknown}"
        )


def apply_role_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: ScopeRules,
) -> QuerySet:
    """
    Filter ``queryset`` with the rule registered for the user's role.

    Inactive (soft-deleted) users always get an empty queryset.

    Args:
        queryset:     Base (unfiltered) queryset.
        user:         The authenticated user.
        scope_rules:  Exhaustive ``{role: filter_fn}`` table.

    Returns:
        The filtered queryset.

    Raises:
        AuthorizationError: The user's role has no rule (a role value
            that is not part of the enum).
    """
    if not user.is_active:
        return queryset.none()

    filter_fn = scope_rules.get(user.role)
    if filter_fn is None:
        raise AuthorizationError(f"Unknown role '{user.role}'.")
    return filter_fn(queryset, user)


def require_role(user: User, *roles: str, message: str = "") -> None:
    """
    Guard that raises ``AuthorizationError`` unless the user holds one
    of ``roles`` and is active.

    Args:
        user:    Authenticated user.
        *roles:  Accepted ``Role`` values (OR-logic).
        message: Optional custom error message.
    """
    if user.is_active and user.role in roles:
        return
    raise AuthorizationError(
        message or "You do not have permission to perform this action."
    )
