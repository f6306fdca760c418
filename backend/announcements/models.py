"""
Announcements app models.

Command posts notices to the whole division.  Each officer's read state
is tracked with one ``AnnouncementRead`` row per (announcement, officer).
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class AnnouncementPriority(models.TextChoices):
    NORMAL = "normal", "Normal"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"


class Announcement(TimeStampedModel):
    title = models.CharField(max_length=255, verbose_name="Title")
    body = models.TextField(verbose_name="Body")
    priority = models.CharField(
        max_length=10,
        choices=AnnouncementPriority.choices,
        default=AnnouncementPriority.NORMAL,
        verbose_name="Priority",
    )
    is_pinned = models.BooleanField(default=False, verbose_name="Pinned")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="announcements",
        verbose_name="Author",
    )

    class Meta:
        verbose_name = "Announcement"
        verbose_name_plural = "Announcements"
        ordering = ["-is_pinned", "-created_at", "-id"]

    def __str__(self):
        return self.title


class AnnouncementRead(models.Model):
    announcement = models.ForeignKey(
        Announcement,
        on_delete=models.CASCADE,
        related_name="reads",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="announcement_reads",
    )
    read_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [("announcement", "user")]
        ordering = ["-read_at"]

    def __str__(self):
        return f"{self.user} read #{self.announcement_id}"
