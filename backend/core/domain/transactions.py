"""
core.domain.transactions — Helpers for safe state transitions.

Wraps ``select_for_update`` and the shared sequence-numbering logic so that
report and case services follow the same concurrency-safe approach.

Usage::

    from core.domain.transactions import lock_for_update, next_sequence_number

    with transaction.atomic():
        report = lock_for_update(Report, report_id)
        if not report.report_number:
            report.report_number = next_sequence_number(
                Report, "report_number", prefix="ND-26-10-",
            )
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models

from core.domain.exceptions import NotFound

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Must be called inside an ``atomic()`` block.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except (model_class.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")


def next_sequence_number(
    model_class: type[models.Model],
    field: str,
    *,
    prefix: str,
    count_prefix: str = "",
    width: int = 3,
) -> str:
    """
    Build the next human-readable number ``<prefix><NNN>``.

    ``NNN`` is the count of rows whose ``field`` is already set and starts
    with ``count_prefix`` plus one, zero-padded to ``width`` digits.  An
    empty ``count_prefix`` counts every numbered row.  If the candidate is
    already taken (rows were deleted) the counter is advanced until free.
    """
    numbered = model_class.objects.exclude(**{f"{field}__isnull": True}).exclude(**{field: ""})
    if count_prefix:
        numbered = numbered.filter(**{f"{field}__startswith": count_prefix})
    seq = numbered.count() + 1
    candidate = f"{prefix}{seq:0{width}d}"
    while model_class.objects.filter(**{field: candidate}).exists():
        seq += 1
        candidate = f"{prefix}{seq:0{width}d}"
    return candidate
