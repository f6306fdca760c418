"""
core.domain.access — System-role predicates, guards and visibility scoping.

Every officer holds a ``Rank``; the rank's ``system_role`` decides what the
officer may do.  Service layers inline these checks at the top of each
mutating procedure::

    from core.domain.access import require_admin, require_any

    require_admin(actor)                                  # admin-only
    require_any(actor, is_admin(actor), report.author_id == actor.pk)

╔══════════════════════════════════════════════════════════════════╗
║  Per-app visibility rules do NOT live here.                     ║
║  Each app's ``services.py`` owns its own scope-rules list.      ║
║  This module provides:                                          ║
║    1) role predicates  — ``is_root`` / ``is_admin`` / ...       ║
║    2) guards           — ``require_admin`` / ``require_any``    ║
║    3) ``apply_visibility_scope`` — ordered rule dispatch.       ║
╚══════════════════════════════════════════════════════════════════╝

Scope rules are ``(predicate, filter_fn)`` pairs checked in order; the first
predicate that holds for the user decides the queryset::

    REPORT_SCOPE_RULES = [
        (is_admin, lambda qs, u: qs),
        (is_authenticated, lambda qs, u: qs.exclude(status="draft") | ...),
    ]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User

ScopeFilter = Callable[[QuerySet, "User"], QuerySet]
ScopeRule = tuple[Callable[["User"], bool], ScopeFilter]


def get_system_role(user: User) -> str | None:
    """
    Return the system role of the user's rank, or ``None`` if unranked.

    Django superusers are treated as ``root`` regardless of their rank so
    that ``createsuperuser`` accounts can administer a fresh install.
    """
    if getattr(user, "is_superuser", False):
        return "root"
    rank = getattr(user, "rank", None)
    if rank is None:
        return None
    return rank.system_role


def is_authenticated(user: User) -> bool:
    return bool(user is not None and user.is_authenticated)


def is_root(user: User) -> bool:
    return is_authenticated(user) and get_system_role(user) == "root"


def is_admin(user: User) -> bool:
    """ADMIN or ROOT."""
    return is_authenticated(user) and get_system_role(user) in ("root", "admin")


def is_moderator(user: User) -> bool:
    return is_authenticated(user) and get_system_role(user) in ("root", "admin", "moderator")


def require_admin(user: User, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` unless the user is an admin.

    Raises:
        core.domain.exceptions.PermissionDenied
    """
    if not is_admin(user):
        raise PermissionDenied(message or "Only administrators may perform this action.")


def require_any(user: User, *checks: bool, message: str = "") -> None:
    """
    Guard with OR-logic: passes when any of ``checks`` is truthy.

    Used for "admin or owner" rules where the ownership predicate is
    computed by the caller::

        require_any(
            actor,
            is_admin(actor),
            confiscation.officer_id == actor.pk,
        )
    """
    if not is_authenticated(user) or not any(checks):
        raise PermissionDenied(message or "You do not have permission to perform this action.")


def apply_visibility_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: list[ScopeRule],
) -> QuerySet:
    """
    Apply the first matching visibility rule.

    Order rules from broadest to narrowest.  When no rule matches the
    queryset is emptied.
    """
    for predicate, filter_fn in scope_rules:
        if predicate(user):
            return filter_fn(queryset, user)
    return queryset.none()
