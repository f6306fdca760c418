"""
Announcements app Service Layer.

Publishing and deleting are admin only; every officer may read and mark
announcements as read.  Publishing writes an activity-feed entry.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.db.models import Count, Exists, OuterRef, QuerySet

from core.domain.access import require_admin
from core.domain.activity import ActivityService
from core.domain.cache import CacheScope, invalidate
from core.domain.exceptions import NotFound
from core.domain.transactions import lock_for_update
from core.models import ActivityType

from .models import Announcement, AnnouncementRead

logger = logging.getLogger(__name__)


class AnnouncementService:

    @staticmethod
    def list_for_user(user: Any) -> QuerySet:
        """Pinned first, then newest; annotated with ``is_read`` and ``read_count``."""
        return (
            Announcement.objects
            .select_related("author")
            .annotate(
                is_read=Exists(AnnouncementRead.objects.filter(announcement=OuterRef("pk"), user=user)),
                read_count=Count("reads", distinct=True),
            )
            .order_by("-is_pinned", "-created_at", "-id")
        )

    @staticmethod
    def get_for_user(user: Any, announcement_id: int) -> Announcement:
        try:
            return AnnouncementService.list_for_user(user).get(pk=announcement_id)
        except (Announcement.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Announcement with id {announcement_id} not found.")

    @staticmethod
    @transaction.atomic
    def create_announcement(validated_data: dict[str, Any], requesting_user: Any) -> Announcement:
        require_admin(requesting_user, "Only administrators may publish announcements.")
        announcement = Announcement.objects.create(author=requesting_user, **validated_data)
        ActivityService.log(
            actor=requesting_user,
            event_type=ActivityType.ANNOUNCEMENT_PUBLISHED,
            target=announcement,
            title=announcement.title,
        )
        invalidate(CacheScope.DASHBOARD)
        logger.info(
            "Announcement %s (%s) published by %s",
            announcement.pk, announcement.priority, requesting_user,
        )
        return announcement

    @staticmethod
    @transaction.atomic
    def delete_announcement(announcement_id: int, requesting_user: Any) -> None:
        announcement = lock_for_update(Announcement, announcement_id)
        require_admin(requesting_user, "Only administrators may delete announcements.")
        announcement.delete()
        invalidate(CacheScope.DASHBOARD)
        logger.info("Announcement %s deleted by %s", announcement_id, requesting_user)

    @staticmethod
    def mark_as_read(announcement_id: int, user: Any) -> AnnouncementRead:
        """Idempotent: a second call returns the existing receipt."""
        try:
            announcement = Announcement.objects.get(pk=announcement_id)
        except (Announcement.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Announcement with id {announcement_id} not found.")
        receipt, created = AnnouncementRead.objects.get_or_create(announcement=announcement, user=user)
        if created:
            logger.info("Announcement %s read by %s", announcement.pk, user)
        return receipt

    @staticmethod
    def read_receipts(announcement_id: int, requesting_user: Any) -> QuerySet:
        require_admin(requesting_user, "Only administrators may view read receipts.")
        if not Announcement.objects.filter(pk=announcement_id).exists():
            raise NotFound(f"Announcement with id {announcement_id} not found.")
        return (
            AnnouncementRead.objects
            .filter(announcement_id=announcement_id)
            .select_related("user", "user__rank")
            .order_by("-read_at")
        )

    @staticmethod
    def unread_count(user: Any) -> int:
        total = Announcement.objects.count()
        read = AnnouncementRead.objects.filter(user=user).count()
        return max(total - read, 0)
