"""
Cases app models.

Covers the investigation lifecycle — a case is opened as a draft by its
reporting officer, submitted for command review, assigned to a lead
investigator, worked, and finally closed by an administrator.  Reports
are attached to a case through ``CaseReportLink`` with a context note.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class CaseStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    UNDER_REVIEW = "under_review", "Under Review"
    ASSIGNED = "assigned", "Assigned"
    IN_PROGRESS = "in_progress", "In Progress"
    RETURNED = "returned", "Returned"
    PENDING_CLOSURE = "pending_closure", "Pending Closure"
    CLOSED = "closed", "Closed"


# Statuses counted as "open" on the dashboard.
OPEN_STATUSES = (CaseStatus.ASSIGNED, CaseStatus.IN_PROGRESS, CaseStatus.RETURNED)


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Case(TimeStampedModel):
    """
    An investigation dossier.

    * ``case_number`` (``CASE-YYYY-NNN``) is assigned on first submission
      and never changes afterwards.
    * ``reporting_officer`` opened the case; ``lead_investigator`` runs it;
      ``participants`` are the supporting officers.
    """

    case_number = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        verbose_name="Case Number",
    )
    title = models.CharField(
        max_length=255,
        verbose_name="Case Title",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        default=CaseStatus.DRAFT,
        verbose_name="Current Status",
        db_index=True,
    )

    # ── Key personnel ───────────────────────────────────────────────
    reporting_officer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reported_cases",
        verbose_name="Reporting Officer",
    )
    lead_investigator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="led_cases",
        verbose_name="Lead Investigator",
    )
    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="participating_cases",
        verbose_name="Participants",
    )
    linked_reports = models.ManyToManyField(
        "reports.Report",
        through="CaseReportLink",
        blank=True,
        related_name="cases",
        verbose_name="Linked Reports",
    )

    # ── Lifecycle timestamps ────────────────────────────────────────
    submitted_at = models.DateTimeField(null=True, blank=True, verbose_name="Submitted At")
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name="Approved At")
    closed_at = models.DateTimeField(null=True, blank=True, verbose_name="Closed At")
    rejection_reason = models.TextField(
        blank=True,
        default="",
        verbose_name="Return Reason",
    )

    class Meta:
        verbose_name = "Case"
        verbose_name_plural = "Cases"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
        ]

    def __str__(self):
        return f"{self.case_number or f'Case #{self.pk}'} — {self.title}"

    @property
    def is_open(self) -> bool:
        return self.status != CaseStatus.CLOSED


class CaseReportLink(TimeStampedModel):
    """Attaches a report to a case with a short note on why it matters."""

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="report_links",
        verbose_name="Case",
    )
    report = models.ForeignKey(
        "reports.Report",
        on_delete=models.CASCADE,
        related_name="case_links",
        verbose_name="Report",
    )
    context_note = models.TextField(
        blank=True,
        default="",
        verbose_name="Context Note",
    )

    class Meta:
        verbose_name = "Case Report Link"
        verbose_name_plural = "Case Report Links"
        unique_together = [("case", "report")]

    def __str__(self):
        return f"Report #{self.report_id} on Case #{self.case_id}"


class CaseStatusLog(TimeStampedModel):
    """
    Immutable audit trail of every status transition for a case.

    Stores the previous/new status, who made the change, and an optional
    message (e.g. the reason a case was returned to its reporting officer).
    """

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Case",
    )
    from_status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        verbose_name="Previous Status",
    )
    to_status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        verbose_name="New Status",
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="case_status_changes",
        verbose_name="Changed By",
    )
    message = models.TextField(
        blank=True,
        default="",
        verbose_name="Message / Return Reason",
    )

    class Meta:
        verbose_name = "Case Status Log"
        verbose_name_plural = "Case Status Logs"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return (
            f"Case #{self.case_id}: "
            f"{self.from_status} → {self.to_status}"
        )
