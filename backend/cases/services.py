"""
Cases app Service Layer.

This module is the **single source of truth** for all business logic
in the ``cases`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``CaseQueryService``     — Visibility-scoped querysets and detail lookup.
- ``CaseCreationService``  — Draft creation and draft/returned edits.
- ``CaseWorkflowService``  — State-machine transitions.

Workflow State-Machine Overview
--------------------------------

  DRAFT ──submit──▶ SUBMITTED ──start_review──▶ UNDER_REVIEW
                      │   ▲                         │
                      │   └──────resubmit───────┐   │
                      ├──return────▶ RETURNED ◀─┼───┤
                      └──assign────▶ ASSIGNED ◀─────┘
                                       │
                                 start_work
                                       ▼
                                   IN_PROGRESS
                                       │
                                    complete   (also from ASSIGNED)
                                       ▼
                                 PENDING_CLOSURE ──reopen──▶ IN_PROGRESS
                                       │
                                     close
                                       ▼
                                     CLOSED

Actor kinds
-----------
- ``admin``     — rank system role ADMIN or ROOT.
- ``lead``      — the case's lead investigator.
- ``reporting`` — the officer who opened the case.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from core.domain.access import (
    apply_visibility_scope,
    is_admin,
    is_authenticated,
    require_any,
)
from core.domain.activity import ActivityService
from core.domain.cache import CacheScope, invalidate
from core.domain.exceptions import DomainError, InvalidTransition, NotFound, PermissionDenied
from core.domain.transactions import lock_for_update, next_sequence_number
from core.models import ActivityType

from .models import Case, CaseReportLink, CaseStatus, CaseStatusLog

logger = logging.getLogger(__name__)

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Valid transition map
# ═══════════════════════════════════════════════════════════════════

ADMIN = "admin"
LEAD = "lead"
REPORTING = "reporting"

#: Maps (from_status, to_status) → set of actor kinds allowed to perform
#: the transition.  Transitions not present here are illegal.
ALLOWED_TRANSITIONS: dict[tuple[str, str], set[str]] = {
    (CaseStatus.DRAFT, CaseStatus.SUBMITTED): {REPORTING, ADMIN},
    (CaseStatus.RETURNED, CaseStatus.SUBMITTED): {REPORTING, ADMIN},
    (CaseStatus.SUBMITTED, CaseStatus.UNDER_REVIEW): {ADMIN},
    (CaseStatus.SUBMITTED, CaseStatus.ASSIGNED): {ADMIN},
    (CaseStatus.UNDER_REVIEW, CaseStatus.ASSIGNED): {ADMIN},
    (CaseStatus.SUBMITTED, CaseStatus.RETURNED): {ADMIN},
    (CaseStatus.UNDER_REVIEW, CaseStatus.RETURNED): {ADMIN},
    (CaseStatus.ASSIGNED, CaseStatus.IN_PROGRESS): {LEAD, ADMIN},
    (CaseStatus.ASSIGNED, CaseStatus.PENDING_CLOSURE): {LEAD, ADMIN},
    (CaseStatus.IN_PROGRESS, CaseStatus.PENDING_CLOSURE): {LEAD, ADMIN},
    (CaseStatus.PENDING_CLOSURE, CaseStatus.IN_PROGRESS): {ADMIN},
    (CaseStatus.PENDING_CLOSURE, CaseStatus.CLOSED): {ADMIN},
}

#: Statuses in which the reporting officer may still edit the dossier.
EDITABLE_BY_REPORTER = (CaseStatus.DRAFT, CaseStatus.RETURNED)

_ACTIVITY_FOR_TARGET = {
    CaseStatus.SUBMITTED: ActivityType.CASE_SUBMITTED,
    CaseStatus.ASSIGNED: ActivityType.CASE_ASSIGNED,
    CaseStatus.RETURNED: ActivityType.CASE_RETURNED,
    CaseStatus.PENDING_CLOSURE: ActivityType.CASE_COMPLETED,
    CaseStatus.CLOSED: ActivityType.CASE_CLOSED,
}


def actor_kinds(case: Case, user: Any) -> set[str]:
    """Every actor kind ``user`` holds with respect to ``case``."""
    kinds = set()
    if is_admin(user):
        kinds.add(ADMIN)
    if case.lead_investigator_id == user.pk:
        kinds.add(LEAD)
    if case.reporting_officer_id == user.pk:
        kinds.add(REPORTING)
    return kinds


def _involvement_filter(user: Any) -> Q:
    return (
        Q(reporting_officer=user)
        | Q(lead_investigator=user)
        | Q(participants=user)
    )


CASE_SCOPE_RULES = [
    (is_admin, lambda qs, u: qs),
    (is_authenticated, lambda qs, u: qs.filter(_involvement_filter(u)).distinct()),
]


# ═══════════════════════════════════════════════════════════════════
#  Case Query Service
# ═══════════════════════════════════════════════════════════════════


class CaseQueryService:
    """Visibility-scoped case lookups."""

    @staticmethod
    def _base_queryset() -> QuerySet:
        return (
            Case.objects
            .select_related(
                "reporting_officer", "reporting_officer__rank",
                "lead_investigator", "lead_investigator__rank",
            )
            .prefetch_related("participants", "report_links__report")
        )

    @staticmethod
    def get_filtered_queryset(requesting_user: Any, filters: dict[str, Any]) -> QuerySet:
        """
        Cases visible to ``requesting_user``, newest first.

        Admins see every case; everybody else sees only the cases where
        they are the reporting officer, the lead, or a participant.

        Supported filters: ``status``, ``search`` (title / case number).
        """
        qs = apply_visibility_scope(
            CaseQueryService._base_queryset(),
            requesting_user,
            scope_rules=CASE_SCOPE_RULES,
        )

        status = filters.get("status")
        if status:
            qs = qs.filter(status=status)

        search = filters.get("search")
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(case_number__icontains=search))

        return qs.order_by("-created_at", "-id")

    @staticmethod
    def get_case_detail(requesting_user: Any, case_id: int) -> Case:
        """
        Fetch one case for display.

        Raises ``NotFound`` both when the case does not exist and when the
        user is not involved in it, so hidden cases are indistinguishable
        from missing ones.
        """
        try:
            case = (
                CaseQueryService._base_queryset()
                .prefetch_related("status_logs__changed_by")
                .get(pk=case_id)
            )
        except (Case.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Case with id {case_id} not found.")

        if not CaseQueryService.can_view(requesting_user, case):
            raise NotFound(f"Case with id {case_id} not found.")
        return case

    @staticmethod
    def can_view(user: Any, case: Case) -> bool:
        if is_admin(user):
            return True
        if case.reporting_officer_id == user.pk or case.lead_investigator_id == user.pk:
            return True
        return case.participants.filter(pk=user.pk).exists()


# ═══════════════════════════════════════════════════════════════════
#  Case Creation Service
# ═══════════════════════════════════════════════════════════════════


def _replace_report_links(case: Case, links: list[dict[str, Any]]) -> None:
    CaseReportLink.objects.filter(case=case).delete()
    CaseReportLink.objects.bulk_create([
        CaseReportLink(
            case=case,
            report=link["report"],
            context_note=link.get("context_note", ""),
        )
        for link in links
    ])


class CaseCreationService:
    """Draft creation and edits of case dossiers."""

    @staticmethod
    @transaction.atomic
    def create_case(validated_data: dict[str, Any], requesting_user: Any) -> Case:
        """
        Open a new case in ``DRAFT`` with the requester as reporting officer.

        ``participants`` and ``linked_reports`` (``[{report, context_note}]``)
        are optional.
        """
        data = dict(validated_data)
        participants = data.pop("participants", [])
        links = data.pop("linked_reports", [])

        case = Case.objects.create(
            reporting_officer=requesting_user,
            status=CaseStatus.DRAFT,
            **data,
        )
        if participants:
            case.participants.set(participants)
        if links:
            _replace_report_links(case, links)

        ActivityService.log(
            actor=requesting_user,
            event_type=ActivityType.CASE_INITIALIZED,
            target=case,
            title=case.title,
        )
        invalidate(CacheScope.DASHBOARD)
        logger.info("Case %s created by %s", case.pk, requesting_user)
        return case

    @staticmethod
    @transaction.atomic
    def update_case(case_id: int, validated_data: dict[str, Any], requesting_user: Any) -> Case:
        """
        Edit a case's metadata, people and linked reports.

        Admins and the lead may edit at any time; the reporting officer
        only while the case is ``DRAFT`` or ``RETURNED``.  Participants and
        linked reports are replaced wholesale when supplied.
        """
        case = lock_for_update(Case, case_id)
        kinds = actor_kinds(case, requesting_user)
        require_any(
            requesting_user,
            ADMIN in kinds,
            LEAD in kinds,
            REPORTING in kinds and case.status in EDITABLE_BY_REPORTER,
            message="You may not modify this case.",
        )

        data = dict(validated_data)
        participants = data.pop("participants", None)
        links = data.pop("linked_reports", None)

        for field, value in data.items():
            setattr(case, field, value)
        case.save()

        if participants is not None:
            case.participants.set(participants)
        if links is not None:
            _replace_report_links(case, links)

        invalidate(CacheScope.DASHBOARD)
        logger.info("Case %s updated by %s", case.pk, requesting_user)
        return case

    @staticmethod
    @transaction.atomic
    def delete_case(case_id: int, requesting_user: Any) -> None:
        case = lock_for_update(Case, case_id)
        require_any(
            requesting_user,
            is_admin(requesting_user),
            message="Only administrators may delete cases.",
        )
        case.delete()
        invalidate(CacheScope.DASHBOARD)
        logger.info("Case %s deleted by %s", case_id, requesting_user)


# ═══════════════════════════════════════════════════════════════════
#  Case Workflow Service
# ═══════════════════════════════════════════════════════════════════


class CaseWorkflowService:
    """
    Manages **all** status transitions in the case lifecycle.

    ``transition_state`` is the validated gateway through the state
    machine defined by ``ALLOWED_TRANSITIONS``; the named methods below
    are the commands the API exposes, each delegating to it after its own
    pre-condition checks.
    """

    @staticmethod
    @transaction.atomic
    def transition_state(
        case_id: int,
        target_status: str,
        requesting_user: Any,
        message: str = "",
    ) -> Case:
        """
        Move a case from its current status to ``target_status``.

        Raises
        ------
        NotFound
            The case does not exist or is hidden from the requester.
        InvalidTransition
            ``(current, target)`` is not in ``ALLOWED_TRANSITIONS``.
        PermissionDenied
            The requester holds none of the allowed actor kinds.
        DomainError
            A required reason or lead investigator is missing.
        """
        case = lock_for_update(Case, case_id)
        if not CaseQueryService.can_view(requesting_user, case):
            raise NotFound(f"Case with id {case_id} not found.")

        current = case.status
        key = (current, target_status)
        if key not in ALLOWED_TRANSITIONS:
            raise InvalidTransition(current=current, target=target_status)

        if not actor_kinds(case, requesting_user) & ALLOWED_TRANSITIONS[key]:
            raise PermissionDenied(
                f"You may not move this case from '{current}' to '{target_status}'."
            )

        now = timezone.now()
        message = (message or "").strip()

        if target_status == CaseStatus.RETURNED:
            if not message:
                raise DomainError("A reason is required when returning a case.")
            case.rejection_reason = message

        if target_status == CaseStatus.SUBMITTED:
            if not case.case_number:
                case.case_number = next_sequence_number(
                    Case, "case_number", prefix=f"CASE-{now.year}-",
                )
            case.submitted_at = now

        if target_status == CaseStatus.ASSIGNED:
            if case.lead_investigator_id is None:
                raise DomainError("A lead investigator must be set before assignment.")
            case.approved_at = now

        if target_status == CaseStatus.CLOSED:
            case.closed_at = now

        case.status = target_status
        case.save()

        CaseStatusLog.objects.create(
            case=case,
            from_status=current,
            to_status=target_status,
            changed_by=requesting_user,
            message=message,
        )

        event = _ACTIVITY_FOR_TARGET.get(target_status)
        if event:
            ActivityService.log(
                actor=requesting_user,
                event_type=event,
                target=case,
                title=case.title,
            )

        invalidate(CacheScope.DASHBOARD)
        logger.info(
            "Case %s: %s → %s by %s", case.pk, current, target_status, requesting_user,
        )
        return case

    @staticmethod
    def submit_case(case_id: int, requesting_user: Any) -> Case:
        """DRAFT or RETURNED → SUBMITTED; assigns the case number once."""
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.SUBMITTED, requesting_user,
        )

    @staticmethod
    def start_review(case_id: int, requesting_user: Any) -> Case:
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.UNDER_REVIEW, requesting_user,
        )

    @staticmethod
    @transaction.atomic
    def assign_lead(
        case_id: int,
        requesting_user: Any,
        lead_investigator: Any | None = None,
        message: str = "",
    ) -> Case:
        """
        Approve a submitted case and hand it to its lead investigator.

        ``lead_investigator`` replaces the current lead when given.
        """
        if lead_investigator is not None:
            case = lock_for_update(Case, case_id)
            if not is_admin(requesting_user):
                raise PermissionDenied("Only administrators may assign cases.")
            case.lead_investigator = lead_investigator
            case.save(update_fields=["lead_investigator", "updated_at"])
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.ASSIGNED, requesting_user, message,
        )

    @staticmethod
    def return_case(case_id: int, requesting_user: Any, reason: str) -> Case:
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.RETURNED, requesting_user, reason,
        )

    @staticmethod
    def start_work(case_id: int, requesting_user: Any) -> Case:
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.IN_PROGRESS, requesting_user,
        )

    @staticmethod
    def complete_case(case_id: int, requesting_user: Any, message: str = "") -> Case:
        """ASSIGNED / IN_PROGRESS → PENDING_CLOSURE."""
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.PENDING_CLOSURE, requesting_user, message,
        )

    @staticmethod
    def reopen_case(case_id: int, requesting_user: Any, message: str = "") -> Case:
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.IN_PROGRESS, requesting_user, message,
        )

    @staticmethod
    def close_case(case_id: int, requesting_user: Any, message: str = "") -> Case:
        return CaseWorkflowService.transition_state(
            case_id, CaseStatus.CLOSED, requesting_user, message,
        )
