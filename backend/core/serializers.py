"""
Core app serializers.

**Response-only** serializers for the aggregated endpoints served by the
core app: dashboard, global search, system constants and the activity
feed.  Search results and constants are plain dicts produced by the
service layer; dashboard panels reuse each app's own list serializers so
the shapes match the app endpoints.
"""

from __future__ import annotations

from rest_framework import serializers

from announcements.serializers import AnnouncementSerializer
from cases.serializers import CaseListSerializer
from reports.serializers import ReportListSerializer

from .models import ActivityEntry


# ════════════════════════════════════════════════════════════════════
#  Activity Feed
# ════════════════════════════════════════════════════════════════════

class ActivityEntrySerializer(serializers.ModelSerializer):
    """
    One activity-feed line.

    Example::

        {
            "id": 31,
            "event_type": "case_assigned",
            "message": "Jane Doe assigned case \\"Harbour Lab\\"",
            "actor_name": "Jane Doe",
            "target_type": "case",
            "target_id": 7,
            "target_title": "Harbour Lab",
            "created_at": "2026-10-19T08:00:00Z"
        }
    """

    actor_name = serializers.CharField(source="actor.display_name", read_only=True, default=None)
    target_type = serializers.CharField(source="content_type.model", read_only=True, default=None)
    target_id = serializers.IntegerField(source="object_id", read_only=True)

    class Meta:
        model = ActivityEntry
        fields = [
            "id",
            "event_type",
            "message",
            "actor",
            "actor_name",
            "target_type",
            "target_id",
            "target_title",
            "created_at",
        ]
        read_only_fields = fields


# ════════════════════════════════════════════════════════════════════
#  Dashboard
# ════════════════════════════════════════════════════════════════════

class DepartmentStatsSerializer(serializers.Serializer):
    active_duty = serializers.IntegerField(help_text="Active officers whose status is 'active'.")
    open_cases = serializers.IntegerField(help_text="Cases assigned, in progress or returned.")
    closed_cases = serializers.IntegerField()
    pending_closure = serializers.IntegerField()


class SeizureTotalsSerializer(serializers.Serializer):
    total_kg = serializers.FloatField(help_text="All confiscations, in kilograms.")
    user_kg = serializers.FloatField(help_text="Confiscations logged by the requesting officer.")


class DashboardSerializer(serializers.Serializer):
    """
    Response serializer for ``GET /api/core/dashboard/``.

    Response shape::

        {
            "stats": {"active_duty": 12, "open_cases": 4, ...},
            "seizures": {"total_kg": 18.25, "user_kg": 1.5},
            "my_cases": [...],
            "my_reports": [...],
            "announcements": [...],
            "unread_announcements": 2,
            "recent_activity": [...]
        }
    """

    stats = DepartmentStatsSerializer()
    seizures = SeizureTotalsSerializer()
    my_cases = CaseListSerializer(many=True)
    my_reports = ReportListSerializer(many=True)
    announcements = AnnouncementSerializer(many=True)
    unread_announcements = serializers.IntegerField()
    recent_activity = ActivityEntrySerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  Global Search
# ════════════════════════════════════════════════════════════════════

class SearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(min_length=2, max_length=255, trim_whitespace=True)
    category = serializers.ChoiceField(
        choices=("reports", "cases", "confiscations", "kompendium"),
        required=False,
    )
    limit = serializers.IntegerField(required=False, default=10, min_value=1)


class SearchReportResultSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    report_number = serializers.CharField(allow_null=True)
    title = serializers.CharField()
    status = serializers.CharField()
    status_display = serializers.CharField()
    author_name = serializers.CharField()
    created_at = serializers.DateTimeField()


class SearchCaseResultSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    case_number = serializers.CharField(allow_null=True)
    title = serializers.CharField()
    status = serializers.CharField()
    status_display = serializers.CharField()
    lead_investigator_name = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()


class SearchConfiscationResultSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    citizen_name = serializers.CharField(allow_blank=True)
    drug_type = serializers.CharField()
    quantity = serializers.FloatField(help_text="Grams.")
    officer_name = serializers.CharField()
    report_id = serializers.IntegerField(allow_null=True)
    created_at = serializers.DateTimeField()


class SearchKompendiumResultSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField()
    category = serializers.CharField(allow_blank=True)
    tag_list = serializers.ListField(child=serializers.CharField())


class GlobalSearchResponseSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/search/?q=...``.

    Response shape::

        {
            "query": "harbour",
            "total_results": 4,
            "reports": [...],
            "cases": [...],
            "confiscations": [...],
            "kompendium": [...]
        }
    """

    query = serializers.CharField(help_text="The search term that was used.")
    total_results = serializers.IntegerField(help_text="Sum of results across all categories.")
    reports = SearchReportResultSerializer(many=True)
    cases = SearchCaseResultSerializer(many=True)
    confiscations = SearchConfiscationResultSerializer(many=True)
    kompendium = SearchKompendiumResultSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "in_progress", "label": "In Progress"}
    """

    value = serializers.CharField(help_text="Machine-readable value to send in API requests.")
    label = serializers.CharField(help_text="Human-readable display label for the UI.")


class MarkerColorSerializer(serializers.Serializer):
    value = serializers.CharField()
    hex = serializers.CharField()


class RankItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    order = serializers.IntegerField(help_text="Higher = more authority.")
    system_role = serializers.CharField()


class SystemConstantsSerializer(serializers.Serializer):
    """Response serializer for ``GET /api/core/constants/``."""

    system_roles = ChoiceItemSerializer(many=True)
    officer_statuses = ChoiceItemSerializer(many=True)
    report_statuses = ChoiceItemSerializer(many=True)
    case_statuses = ChoiceItemSerializer(many=True)
    attachment_types = ChoiceItemSerializer(many=True)
    announcement_priorities = ChoiceItemSerializer(many=True)
    quantity_units = ChoiceItemSerializer(many=True)
    template_types = ChoiceItemSerializer(many=True)
    marker_colors = MarkerColorSerializer(many=True)
    shape_types = serializers.ListField(child=serializers.CharField())
    map_size = serializers.IntegerField()
    ranks = RankItemSerializer(many=True)
