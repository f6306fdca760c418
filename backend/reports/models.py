"""
Reports app models.

A report is an incident dossier: HTML narrative, a tactical map (markers
and shapes), a colour legend, and photo / video evidence.  The map,
legend and evidence are stored as JSON documents on the report and
validated by the serializers against the rules in ``reports.tactical``.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class ReportStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    UNDER_REVIEW = "under_review", "Under Review"
    APPROVED = "approved", "Approved"
    REVISIONS_REQUIRED = "revisions_required", "Revisions Required"


# Statuses in which authors may still change the report.
EDITABLE_STATUSES = (ReportStatus.DRAFT, ReportStatus.REVISIONS_REQUIRED)


def empty_map() -> dict:
    return {"markers": [], "shapes": []}


def empty_evidence() -> dict:
    return {"photo": [], "video": []}


class Report(TimeStampedModel):
    """
    Incident report authored by an officer (plus optional co-authors).

    ``report_number`` (``ND-YY-MM-NNN``) is assigned on first submission
    and kept across resubmissions.
    """

    report_number = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        verbose_name="Report Number",
    )
    title = models.CharField(max_length=255, verbose_name="Title")
    status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        default=ReportStatus.DRAFT,
        verbose_name="Status",
        db_index=True,
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="authored_reports",
        verbose_name="Author",
    )
    co_authors = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="coauthored_reports",
        verbose_name="Co-Authors",
    )
    content = models.TextField(blank=True, default="", verbose_name="Narrative (HTML)")
    map_data = models.JSONField(default=empty_map, verbose_name="Tactical Map")
    legend = models.JSONField(default=dict, blank=True, verbose_name="Map Legend")
    evidence = models.JSONField(default=empty_evidence, verbose_name="Evidence")

    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_reports",
        verbose_name="Reviewer",
    )
    submitted_at = models.DateTimeField(null=True, blank=True, verbose_name="Submitted At")
    reviewed_at = models.DateTimeField(null=True, blank=True, verbose_name="Reviewed At")
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name="Approved At")
    rejection_reason = models.TextField(blank=True, default="", verbose_name="Revision Reason")

    class Meta:
        verbose_name = "Report"
        verbose_name_plural = "Reports"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
        ]

    def __str__(self):
        return f"{self.report_number or 'Pending Number'} — {self.title}"

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def is_owner(self, user) -> bool:
        """Author or co-author."""
        if self.author_id == user.pk:
            return True
        return self.co_authors.filter(pk=user.pk).exists()


class ReportStatusLog(TimeStampedModel):
    """Immutable audit trail of report status transitions."""

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Report",
    )
    from_status = models.CharField(max_length=20, choices=ReportStatus.choices, verbose_name="Previous Status")
    to_status = models.CharField(max_length=20, choices=ReportStatus.choices, verbose_name="New Status")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="report_status_changes",
        verbose_name="Changed By",
    )
    message = models.TextField(blank=True, default="", verbose_name="Message")

    class Meta:
        verbose_name = "Report Status Log"
        verbose_name_plural = "Report Status Logs"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Report #{self.report_id}: {self.from_status} → {self.to_status}"


class AttachmentType(models.TextChoices):
    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    DOCUMENT = "document", "Document"
    OTHER = "other", "Other"


def attachment_upload_to(instance, filename: str) -> str:
    return f"reports/{instance.report_id}/{filename}"


class ReportAttachment(TimeStampedModel):
    """A file uploaded against a report (scene photos, scanned documents)."""

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name="attachments",
        verbose_name="Report",
    )
    file = models.FileField(upload_to=attachment_upload_to, verbose_name="File")
    file_type = models.CharField(
        max_length=10,
        choices=AttachmentType.choices,
        default=AttachmentType.OTHER,
        verbose_name="File Type",
    )
    caption = models.CharField(max_length=255, blank=True, default="", verbose_name="Caption")
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="report_attachments",
        verbose_name="Uploaded By",
    )

    class Meta:
        verbose_name = "Report Attachment"
        verbose_name_plural = "Report Attachments"
        ordering = ["created_at"]

    def __str__(self):
        return f"Attachment #{self.pk} on Report #{self.report_id}"
