"""
core.domain.activity — Activity-feed entry creation helper.

Centralises feed writes so every app uses one entry-point rather than
constructing ``ActivityEntry`` objects directly.

* **Synchronous** — entries are written in the calling transaction, so a
  rolled-back transition leaves no feed entry behind.
* **Generic relation** — ``target`` is any model instance; its
  ``ContentType`` and PK are stored via ``ActivityEntry.target``.
* **Bounded** — only the newest ``MAX_ENTRIES`` rows are retained.

Usage::

    from core.domain.activity import ActivityService

    ActivityService.log(
        actor=actor,
        event_type=ActivityType.CASE_ASSIGNED,
        target=case,
        title=case.title,
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.contrib.contenttypes.models import ContentType
from django.db import models

if TYPE_CHECKING:
    from accounts.models import User
    from core.models import ActivityEntry

logger = logging.getLogger(__name__)

MAX_ENTRIES = 50

# event_type: message template
_EVENT_TEMPLATES: dict[str, str] = {
    "report_submitted":       "{actor} submitted report \"{title}\"",
    "report_approved":        "{actor} approved report \"{title}\"",
    "report_returned":        "{actor} returned report \"{title}\" for revisions",
    "case_initialized":       "{actor} opened case \"{title}\"",
    "case_submitted":         "{actor} submitted case \"{title}\"",
    "case_assigned":          "{actor} assigned case \"{title}\"",
    "case_returned":          "{actor} returned case \"{title}\"",
    "case_completed":         "{actor} marked case \"{title}\" pending closure",
    "case_closed":            "{actor} closed case \"{title}\"",
    "announcement_published": "{actor} published \"{title}\"",
}


class ActivityService:
    """Stateless helper for writing ``ActivityEntry`` records."""

    @classmethod
    def log(
        cls,
        *,
        actor: User | None,
        event_type: str,
        target: models.Model | None = None,
        title: str = "",
    ) -> ActivityEntry:
        from core.models import ActivityEntry  # circular import

        content_type = None
        object_id = None
        if target is not None:
            content_type = ContentType.objects.get_for_model(target)
            object_id = target.pk

        actor_name = getattr(actor, "rp_name", "") or (actor.get_username() if actor else "System")
        template = _EVENT_TEMPLATES.get(event_type, "{actor}: " + event_type.replace("_", " "))

        entry = ActivityEntry.objects.create(
            actor=actor,
            event_type=event_type,
            message=template.format(actor=actor_name, title=title),
            target_title=title,
            content_type=content_type,
            object_id=object_id,
        )
        cls._prune()

        logger.info("Activity [%s] by actor=%s on %r", event_type, actor, title)
        return entry

    @staticmethod
    def _prune() -> None:
        from core.models import ActivityEntry

        stale_ids = list(
            ActivityEntry.objects.order_by("-created_at", "-id")
            .values_list("id", flat=True)[MAX_ENTRIES:]
        )
        if stale_ids:
            ActivityEntry.objects.filter(id__in=stale_ids).delete()

    @staticmethod
    def latest(limit: int = MAX_ENTRIES):
        from core.models import ActivityEntry

        return (
            ActivityEntry.objects
            .select_related("actor", "actor__rank")
            .order_by("-created_at", "-id")[: min(limit, MAX_ENTRIES)]
        )
