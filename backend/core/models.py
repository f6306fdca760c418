"""
Core app models.

Provides the abstract timestamp base used across the project and the
department-wide activity feed.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class ActivityType(models.TextChoices):
    REPORT_SUBMITTED = "report_submitted", "Report Submitted"
    REPORT_APPROVED = "report_approved", "Report Approved"
    REPORT_RETURNED = "report_returned", "Report Returned"
    CASE_INITIALIZED = "case_initialized", "Case Initialized"
    CASE_SUBMITTED = "case_submitted", "Case Submitted"
    CASE_ASSIGNED = "case_assigned", "Case Assigned"
    CASE_RETURNED = "case_returned", "Case Returned"
    CASE_COMPLETED = "case_completed", "Case Completed"
    CASE_CLOSED = "case_closed", "Case Closed"
    ANNOUNCEMENT_PUBLISHED = "announcement_published", "Announcement Published"


class ActivityEntry(TimeStampedModel):
    """
    One line of the department activity feed.

    Uses a GenericForeignKey so any record (report, case, announcement) can
    be the target of an entry.  The target title is denormalised so the feed
    still reads correctly after the target is deleted.
    """

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_entries",
        verbose_name="Actor",
    )
    event_type = models.CharField(
        max_length=32,
        choices=ActivityType.choices,
        verbose_name="Event Type",
    )
    message = models.CharField(max_length=500, verbose_name="Message")
    target_title = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Target Title",
    )

    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        verbose_name="Target Content Type",
    )
    object_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Target Object ID",
    )
    target = GenericForeignKey("content_type", "object_id")

    class Meta:
        verbose_name = "Activity Entry"
        verbose_name_plural = "Activity Entries"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["-created_at"]),
        ]

    def __str__(self):
        return self.message
