"""
Cases app serializers.

Contains all Request and Response serializers for the Cases API.
Serializers handle field definitions, read/write constraints, and
field-level validation only.  **No workflow transitions or permission
rules live here** — those belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Case read serializers (list, detail)
3. Case write serializers (create, update)
4. Workflow action serializers
"""

from __future__ import annotations

from django.apps import apps
from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.serializers import OfficerSummarySerializer

from .models import Case, CaseReportLink, CaseStatus, CaseStatusLog

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseFilterSerializer(serializers.Serializer):
    """Query parameters for ``GET /api/cases/``; all optional."""

    status = serializers.ChoiceField(choices=CaseStatus.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)


# ═══════════════════════════════════════════════════════════════════
#  2. Case Read Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseReportLinkSerializer(serializers.ModelSerializer):
    report_id = serializers.IntegerField(source="report.id", read_only=True)
    report_number = serializers.CharField(source="report.report_number", read_only=True, default=None)
    report_title = serializers.CharField(source="report.title", read_only=True)

    class Meta:
        model = CaseReportLink
        fields = ["report_id", "report_number", "report_title", "context_note"]
        read_only_fields = fields


class CaseListSerializer(serializers.ModelSerializer):
    """
    Compact representation for the list endpoint: people and linked
    reports are summarised, the audit trail is omitted.
    """

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    reporting_officer = OfficerSummarySerializer(read_only=True)
    lead_investigator = OfficerSummarySerializer(read_only=True)
    participants = OfficerSummarySerializer(many=True, read_only=True)
    linked_reports = CaseReportLinkSerializer(source="report_links", many=True, read_only=True)

    class Meta:
        model = Case
        fields = [
            "id",
            "case_number",
            "title",
            "status",
            "status_display",
            "reporting_officer",
            "lead_investigator",
            "participants",
            "linked_reports",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CaseStatusLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for the case audit trail."""

    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = CaseStatusLog
        fields = [
            "id",
            "from_status",
            "to_status",
            "changed_by",
            "changed_by_name",
            "message",
            "created_at",
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj: CaseStatusLog) -> str | None:
        if obj.changed_by is None:
            return None
        return obj.changed_by.display_name


class CaseDetailSerializer(CaseListSerializer):
    status_logs = CaseStatusLogSerializer(many=True, read_only=True)

    class Meta(CaseListSerializer.Meta):
        fields = CaseListSerializer.Meta.fields + [
            "description",
            "submitted_at",
            "approved_at",
            "closed_at",
            "rejection_reason",
            "status_logs",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  3. Case Write Serializers
# ═══════════════════════════════════════════════════════════════════


class _ReportField(serializers.PrimaryKeyRelatedField):
    def get_queryset(self):
        return apps.get_model("reports", "Report").objects.all()


class LinkedReportInputSerializer(serializers.Serializer):
    report_id = _ReportField(source="report")
    context_note = serializers.CharField(required=False, allow_blank=True, default="")


class CaseCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    lead_investigator_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), source="lead_investigator",
    )
    participant_ids = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), source="participants", many=True, required=False,
    )
    linked_reports = LinkedReportInputSerializer(many=True, required=False)

    def validate_linked_reports(self, value):
        report_ids = [item["report"].pk for item in value]
        if len(report_ids) != len(set(report_ids)):
            raise serializers.ValidationError("A report may only be linked once.")
        return value


class CaseUpdateSerializer(CaseCreateSerializer):
    """
    Partial update payload.  ``status`` and the case number are never
    writable here; they change only through workflow endpoints.
    """

    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    lead_investigator_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), source="lead_investigator", required=False,
    )


# ═══════════════════════════════════════════════════════════════════
#  4. Workflow Action Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseTransitionSerializer(serializers.Serializer):
    """
    Generic request body for ``POST /api/cases/{id}/transition/``.

    ``message`` is required when returning a case; that check is
    enforced in ``CaseWorkflowService.transition_state``.
    """

    target_status = serializers.ChoiceField(choices=CaseStatus.choices)
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class CaseMessageSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class CaseReturnSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000)


class CaseAssignSerializer(serializers.Serializer):
    lead_investigator_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), source="lead_investigator", required=False,
    )
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
