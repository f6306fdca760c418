"""
core.domain.cache — Cached read models and their invalidation.

Aggregates that are expensive to compute and read on every dashboard load
are stored in Django's cache framework under a per-scope key.  Mutating
services call ``invalidate`` with every scope their write affects.

Usage::

    from core.domain.cache import CacheScope, cached, invalidate

    stats = cached(CacheScope.SEIZURE_STATS, _compute_totals)
    ...
    invalidate(CacheScope.SEIZURE_STATS, CacheScope.DASHBOARD)
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

_KEY_PREFIX = "narcotics"


class CacheScope:
    DASHBOARD = "dashboard"
    SEIZURE_STATS = "seizure_stats"
    KOMPENDIUM_CATEGORIES = "kompendium_categories"
    ROSTER = "roster"

    ALL = (DASHBOARD, SEIZURE_STATS, KOMPENDIUM_CATEGORIES, ROSTER)


def cache_key(scope: str, suffix: Any = "") -> str:
    return f"{_KEY_PREFIX}:{scope}:{suffix}" if suffix != "" else f"{_KEY_PREFIX}:{scope}"


def cached(scope: str, compute: Callable[[], Any], *, suffix: Any = "") -> Any:
    """Return the cached value for ``scope`` or compute and store it."""
    key = cache_key(scope, suffix)
    value = cache.get(key)
    if value is None:
        value = compute()
        cache.set(key, value, getattr(settings, "READ_MODEL_CACHE_TIMEOUT", 300))
    return value


def invalidate(*scopes: str) -> None:
    """
    Drop every cached read model under the given scopes.

    Per-user entries (suffix set) are versioned through a scope generation
    counter, so bumping the counter orphans them all at once.
    """
    for scope in scopes:
        cache.delete(cache_key(scope))
        try:
            cache.incr(cache_key(scope, "generation"))
        except ValueError:
            cache.set(cache_key(scope, "generation"), 1, None)
    logger.debug("Invalidated cache scopes: %s", ", ".join(scopes))


def scoped_suffix(scope: str, suffix: Any) -> str:
    """Suffix for a per-user entry that respects ``invalidate(scope)``."""
    generation = cache.get(cache_key(scope, "generation")) or 0
    return f"{generation}:{suffix}"
