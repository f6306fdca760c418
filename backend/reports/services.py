"""
Reports app Service Layer.

This module is the **single source of truth** for all business logic
in the ``reports`` app.  Views validate input via serializers, call a
service method, and return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``ReportQueryService``    — Visibility-scoped querysets, detail lookup
                              and the draft picker search.
- ``ReportService``         — Creation, edits, deletion and attachments.
- ``ReportWorkflowService`` — Submission and command review.

Workflow State-Machine Overview
--------------------------------

  DRAFT ──submit──▶ SUBMITTED ──start_review──▶ UNDER_REVIEW
                       │                             │
                       ├──────────approve────────────┼──▶ APPROVED
                       └──────────reject─────────────┴──▶ REVISIONS_REQUIRED
                                                              │
                                   SUBMITTED ◀──resubmit──────┘

Owners (author, co-authors) may edit while ``DRAFT`` or
``REVISIONS_REQUIRED``; administrators may edit at any time.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from confiscations.services import ConfiscationService
from core.domain.access import apply_visibility_scope, is_admin, is_authenticated, require_admin, require_any
from core.domain.activity import ActivityService
from core.domain.cache import CacheScope, invalidate
from core.domain.exceptions import DomainError, InvalidTransition, NotFound
from core.domain.transactions import lock_for_update, next_sequence_number
from core.models import ActivityType

from .models import (
    EDITABLE_STATUSES,
    Report,
    ReportAttachment,
    ReportStatus,
    ReportStatusLog,
    empty_evidence,
    empty_map,
)

logger = logging.getLogger(__name__)

User = get_user_model()

DRAFT_SEARCH_MIN_LENGTH = 2
DRAFT_SEARCH_LIMIT = 5

#: Statuses a review decision may be taken from.
REVIEWABLE_STATUSES = (ReportStatus.SUBMITTED, ReportStatus.UNDER_REVIEW)


def _ownership_filter(user: Any) -> Q:
    return Q(author=user) | Q(co_authors=user)


REPORT_SCOPE_RULES = [
    (is_admin, lambda qs, u: qs),
    (
        is_authenticated,
        lambda qs, u: qs.filter(~Q(status=ReportStatus.DRAFT) | _ownership_filter(u)).distinct(),
    ),
]


def dangling_marker_links(evidence: dict[str, Any], map_data: dict[str, Any]) -> list[str]:
    """Marker ids referenced by evidence that are not on the map."""
    marker_ids = {m.get("id") for m in (map_data or {}).get("markers", [])}
    missing: list[str] = []
    for kind in ("photo", "video"):
        for item in (evidence or {}).get(kind, []):
            for marker_id in item.get("linked_marker_ids", []):
                if marker_id not in marker_ids and marker_id not in missing:
                    missing.append(marker_id)
    return missing


def _check_marker_links(evidence: dict[str, Any], map_data: dict[str, Any]) -> None:
    missing = dangling_marker_links(evidence, map_data)
    if missing:
        raise DomainError(f"Evidence references unknown map marker(s): {', '.join(missing)}.")


def _log_transition(report: Report, from_status: str, user: Any, message: str = "") -> None:
    ReportStatusLog.objects.create(
        report=report,
        from_status=from_status,
        to_status=report.status,
        changed_by=user,
        message=message,
    )


# ═══════════════════════════════════════════════════════════════════
#  Report Query Service
# ═══════════════════════════════════════════════════════════════════


class ReportQueryService:
    """Visibility-scoped report lookups."""

    @staticmethod
    def _base_queryset() -> QuerySet:
        return (
            Report.objects
            .select_related("author", "author__rank", "reviewer", "reviewer__rank")
            .prefetch_related("co_authors", "co_authors__rank")
        )

    @staticmethod
    def get_filtered_queryset(requesting_user: Any, filters: dict[str, Any] | None = None) -> QuerySet:
        """
        Reports visible to ``requesting_user``, newest first.

        Everybody sees non-draft reports; drafts are visible only to their
        author, co-authors and administrators.

        Supported filters: ``status``, ``author``, ``search`` (title / number).
        """
        filters = filters or {}
        qs = apply_visibility_scope(
            ReportQueryService._base_queryset(),
            requesting_user,
            scope_rules=REPORT_SCOPE_RULES,
        )
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("author"):
            qs = qs.filter(author_id=filters["author"])
        search = filters.get("search")
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(report_number__icontains=search))
        return qs.order_by("-created_at", "-id")

    @staticmethod
    def can_view(user: Any, report: Report) -> bool:
        if report.status != ReportStatus.DRAFT or is_admin(user):
            return True
        return report.is_owner(user)

    @staticmethod
    def get_report_detail(requesting_user: Any, report_id: int) -> Report:
        """
        Fetch one report with linked cases, confiscations, attachments and
        audit trail.  Hidden drafts raise ``NotFound`` like missing rows.
        """
        try:
            report = (
                ReportQueryService._base_queryset()
                .prefetch_related(
                    "cases",
                    "confiscations__officer",
                    "attachments__uploaded_by",
                    "status_logs__changed_by",
                )
                .get(pk=report_id)
            )
        except (Report.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Report with id {report_id} not found.")

        if not ReportQueryService.can_view(requesting_user, report):
            raise NotFound(f"Report with id {report_id} not found.")
        return report

    @staticmethod
    def search_draft_reports(requesting_user: Any, query: str) -> QuerySet | list:
        """
        Picker search used when linking reports to a case: reports still
        being written (``DRAFT`` / ``REVISIONS_REQUIRED``) whose title or
        number contains ``query``.
        """
        query = (query or "").strip()
        if len(query) < DRAFT_SEARCH_MIN_LENGTH:
            return []
        qs = apply_visibility_scope(
            Report.objects.select_related("author"),
            requesting_user,
            scope_rules=REPORT_SCOPE_RULES,
        )
        return (
            qs.filter(status__in=EDITABLE_STATUSES)
            .filter(Q(title__icontains=query) | Q(report_number__icontains=query))
            .order_by("-created_at", "-id")[:DRAFT_SEARCH_LIMIT]
        )


# ═══════════════════════════════════════════════════════════════════
#  Report Service
# ═══════════════════════════════════════════════════════════════════


def _require_editor(report: Report, user: Any) -> None:
    require_any(
        user,
        is_admin(user),
        report.is_owner(user) and report.is_editable,
        message="You may not modify this report in its current status.",
    )


class ReportService:
    """Creation, edits, deletion and attachments."""

    @staticmethod
    @transaction.atomic
    def create_report(validated_data: dict[str, Any], requesting_user: Any) -> Report:
        """
        Open a ``DRAFT`` authored by ``requesting_user``.

        ``co_authors`` and ``confiscation_ids`` are optional; the map,
        legend and evidence default to empty documents.
        """
        data = dict(validated_data)
        co_authors = data.pop("co_authors", [])
        confiscation_ids = data.pop("confiscation_ids", [])
        map_data = data.pop("map_data", None) or empty_map()
        evidence = data.pop("evidence", None) or empty_evidence()
        _check_marker_links(evidence, map_data)

        report = Report.objects.create(
            author=requesting_user,
            status=ReportStatus.DRAFT,
            map_data=map_data,
            evidence=evidence,
            legend=data.pop("legend", None) or {},
            **data,
        )
        co_authors = [u for u in co_authors if u.pk != requesting_user.pk]
        if co_authors:
            report.co_authors.set(co_authors)
        if confiscation_ids:
            ConfiscationService.link_to_report(confiscation_ids, report)

        invalidate(CacheScope.DASHBOARD)
        logger.info("Report %s created by %s", report.pk, requesting_user)
        return report

    @staticmethod
    @transaction.atomic
    def update_report(report_id: int, validated_data: dict[str, Any], requesting_user: Any) -> Report:
        """
        Edit a report.  Supplied co-authors replace the current set;
        supplied confiscation ids are linked in addition to existing ones.
        """
        report = lock_for_update(Report, report_id)
        _require_editor(report, requesting_user)

        data = dict(validated_data)
        co_authors = data.pop("co_authors", None)
        confiscation_ids = data.pop("confiscation_ids", None)

        for field, value in data.items():
            setattr(report, field, value)
        _check_marker_links(report.evidence, report.map_data)
        report.save()

        if co_authors is not None:
            report.co_authors.set([u for u in co_authors if u.pk != report.author_id])
        if confiscation_ids:
            ConfiscationService.link_to_report(confiscation_ids, report)

        invalidate(CacheScope.DASHBOARD)
        logger.info("Report %s updated by %s", report.pk, requesting_user)
        return report

    @staticmethod
    @transaction.atomic
    def delete_report(report_id: int, requesting_user: Any) -> None:
        report = lock_for_update(Report, report_id)
        require_admin(requesting_user, "Only administrators may delete reports.")
        report.delete()
        invalidate(CacheScope.DASHBOARD, CacheScope.SEIZURE_STATS)
        logger.info("Report %s deleted by %s", report_id, requesting_user)

    @staticmethod
    @transaction.atomic
    def upload_attachment(
        report_id: int,
        validated_data: dict[str, Any],
        requesting_user: Any,
    ) -> ReportAttachment:
        report = lock_for_update(Report, report_id)
        require_any(
            requesting_user,
            is_admin(requesting_user),
            report.is_owner(requesting_user),
            message="Only the report's authors or an administrator may attach files.",
        )
        attachment = ReportAttachment.objects.create(
            report=report,
            uploaded_by=requesting_user,
            **validated_data,
        )
        logger.info(
            "Attachment %s (%s) added to report %s by %s",
            attachment.pk, attachment.file_type, report.pk, requesting_user,
        )
        return attachment


# ═══════════════════════════════════════════════════════════════════
#  Report Workflow Service
# ═══════════════════════════════════════════════════════════════════


class ReportWorkflowService:
    """Submission and command review of reports."""

    @staticmethod
    @transaction.atomic
    def submit_report(report_id: int, requesting_user: Any) -> Report:
        """
        ``DRAFT`` / ``REVISIONS_REQUIRED`` → ``SUBMITTED``.

        The first submission assigns ``ND-YY-MM-NNN``; resubmissions keep
        the existing number.
        """
        report = lock_for_update(Report, report_id)
        require_any(
            requesting_user,
            is_admin(requesting_user),
            report.is_owner(requesting_user),
            message="Only the report's authors or an administrator may submit it.",
        )
        current = report.status
        if current not in EDITABLE_STATUSES:
            raise InvalidTransition(
                current=current,
                target=ReportStatus.SUBMITTED,
                reason="Only drafts or reports needing revisions can be submitted.",
            )

        now = timezone.now()
        if not report.report_number:
            report.report_number = next_sequence_number(
                Report, "report_number", prefix=now.strftime("ND-%y-%m-"),
            )
        report.status = ReportStatus.SUBMITTED
        report.submitted_at = now
        report.save()

        _log_transition(report, current, requesting_user)
        ActivityService.log(
            actor=requesting_user,
            event_type=ActivityType.REPORT_SUBMITTED,
            target=report,
            title=report.title,
        )
        invalidate(CacheScope.DASHBOARD)
        logger.info("Report %s (%s) submitted by %s", report.pk, report.report_number, requesting_user)
        return report

    @staticmethod
    @transaction.atomic
    def start_review(report_id: int, requesting_user: Any) -> Report:
        """``SUBMITTED`` → ``UNDER_REVIEW`` (admin)."""
        report = lock_for_update(Report, report_id)
        require_admin(requesting_user, "Only administrators may review reports.")
        if report.status != ReportStatus.SUBMITTED:
            raise InvalidTransition(current=report.status, target=ReportStatus.UNDER_REVIEW)

        current = report.status
        report.status = ReportStatus.UNDER_REVIEW
        report.reviewer = requesting_user
        report.save()
        _log_transition(report, current, requesting_user)
        invalidate(CacheScope.DASHBOARD)
        logger.info("Report %s under review by %s", report.pk, requesting_user)
        return report

    @staticmethod
    @transaction.atomic
    def review_report(report_id: int, action: str, requesting_user: Any, reason: str = "") -> Report:
        """
        Decide on a submitted report (admin).

        ``approve`` → ``APPROVED`` and clears any earlier revision reason.
        ``reject``  → ``REVISIONS_REQUIRED``; ``reason`` is mandatory.
        """
        report = lock_for_update(Report, report_id)
        require_admin(requesting_user, "Only administrators may review reports.")

        if action not in ("approve", "reject"):
            raise DomainError(f"Unknown review action '{action}'.")
        target = ReportStatus.APPROVED if action == "approve" else ReportStatus.REVISIONS_REQUIRED
        current = report.status
        if current not in REVIEWABLE_STATUSES:
            raise InvalidTransition(current=current, target=target)

        reason = (reason or "").strip()
        now = timezone.now()
        if action == "reject":
            if not reason:
                raise DomainError("A reason is required when requesting revisions.")
            report.rejection_reason = reason
            event = ActivityType.REPORT_RETURNED
        else:
            report.rejection_reason = ""
            report.approved_at = now
            event = ActivityType.REPORT_APPROVED

        report.status = target
        report.reviewer = requesting_user
        report.reviewed_at = now
        report.save()

        _log_transition(report, current, requesting_user, reason)
        ActivityService.log(
            actor=requesting_user,
            event_type=event,
            target=report,
            title=report.title,
        )
        invalidate(CacheScope.DASHBOARD)
        logger.info("Report %s: %s → %s by %s", report.pk, current, target, requesting_user)
        return report


# ═══════════════════════════════════════════════════════════════════
#  Report Export Service
# ═══════════════════════════════════════════════════════════════════


class ReportExportService:

    @staticmethod
    def export_pdf(requesting_user: Any, report_id: int) -> tuple[str, bytes]:
        """``(filename, pdf_bytes)`` for a report the user may view."""
        from .pdf import ReportPdfRenderer

        report = ReportQueryService.get_report_detail(requesting_user, report_id)
        officer_ids = {
            item["captured_by"].get("officer_id")
            for kind in ("photo", "video")
            for item in (report.evidence or {}).get(kind, [])
            if item.get("captured_by", {}).get("type") == "INTERNAL"
        }
        officers = {u.pk: u.display_name for u in User.objects.filter(pk__in=officer_ids)}
        pdf = ReportPdfRenderer().render(report, officers)
        filename = f"{report.report_number or f'report-{report.pk}'}.pdf"
        logger.info("Report %s exported to PDF by %s", report.pk, requesting_user)
        return filename, pdf
