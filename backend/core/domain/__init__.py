"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions     Domain-specific exceptions that map cleanly to HTTP responses.
access         System-role predicates, guards and visibility scoping.
activity       Activity-feed entry creation helper.
cache          Cached read-model keys and invalidation.
transactions   Row-locking helpers for status transitions and numbering.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.access import require_admin, apply_visibility_scope
    from core.domain.activity import ActivityService
    from core.domain.cache import CacheScope, invalidate
    from core.domain.transactions import lock_for_update
"""
