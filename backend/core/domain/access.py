"""
core.domain.access — Organization- and role-scoped queryset selectors.

This module provides shared utilities that each app's service layer
calls to obtain querysets filtered by the requesting user's tenant
(``CasaOrg``) and role.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.         ║
║  Each app owns its own scope-rules mapping.                    ║
║  This module provides:                                         ║
║    1) ``scope_to_organization`` — tenant boundary filter.      ║
║    2) ``apply_role_scope`` — role → filter dispatch.           ║
║    3) ``belongs_to_organization`` — single-object tenant check.║
║    4) ``get_user_role_name`` — informational role-name helper. ║
╚══════════════════════════════════════════════════════════════════╝

Architecture overview
---------------------
Every case-related query passes the tenant filter first, then the
role filter:

    ┌─────────┐      ┌────────────────┐      ┌──────────────────┐
    │  View   │─────▶│  App service   │─────▶│ core.domain      │
    │ (thin)  │      │ (owns rules)   │      │   .access        │
    └─────────┘      └────────────────┘      │ (shared helpers) │
                                             └──────────────────┘

Usage in an app's service layer::

    from core.domain.access import apply_role_scope, scope_to_organization

    CASE_SCOPE_RULES = {
        "casa_admin": lambda qs, u: qs,
        "supervisor": lambda qs, u: qs,
        "volunteer":  lambda qs, u: qs.filter(case_assignments__volunteer=u),
    }

    qs = scope_to_organization(CasaCase.objects.all(), user)
    qs = apply_role_scope(qs, user, scope_rules=CASE_SCOPE_RULES)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from django.db.models import Model, QuerySet

if TYPE_CHECKING:
    from accounts.models import User

# Type alias for a scope filter function.
# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

# Role name → filter function.
ScopeRules = dict[str, ScopeFilter]


def get_user_role_name(user: User) -> str | None:
    """
    Return the role value for a user, or ``None`` for anonymous users.

    Informational only (logging, token claims).  Access decisions go
    through the capability table in ``cases.policies``.
    """
    if not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "role", None) or None


def scope_to_organization(
    queryset: QuerySet,
    user: User,
    *,
    org_lookup: str = "casa_org",
) -> QuerySet:
    """
    Restrict ``queryset`` to rows owned by the user's organization.

    Args:
        queryset:   Base queryset.
        user:       The authenticated user.
        org_lookup: ORM path from the queryset's model to ``CasaOrg``
                    (e.g. ``"casa_case__casa_org"`` for case contacts).

    Returns:
        The filtered queryset; an empty one when the user has no
        organization.
    """
    org_id = getattr(user, "casa_org_id", None)
    if org_id is None:
        return queryset.none()
    return queryset.filter(**{f"{org_lookup}_id": org_id})


def apply_role_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: ScopeRules,
    default: str = "none",
) -> QuerySet:
    """
    Apply the scope filter registered for the user's role.

    Args:
        queryset:     Tenant-scoped queryset.
        user:         The authenticated user.
        scope_rules:  Mapping of role value → filter function.
        default:      What to do when the role has no rule.
                      ``"none"`` (default) → empty queryset.
                      ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    role_name = get_user_role_name(user)
    if role_name is not None and role_name in scope_rules:
        return scope_rules[role_name](queryset, user)

    if default == "none":
        return queryset.none()
    return queryset


def belongs_to_organization(
    instance: Model,
    user: User,
    *,
    org_attr: str = "casa_org_id",
) -> bool:
    """
    Return ``True`` when ``instance`` is owned by the user's organization.

    Args:
        instance: Any model instance carrying an organization FK.
        user:     The authenticated user.
        org_attr: Attribute holding the organization id on ``instance``.
    """
    org_id: Any = getattr(user, "casa_org_id", None)
    return org_id is not None and getattr(instance, org_attr, None) == org_id
