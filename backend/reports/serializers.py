"""
Reports app serializers.

Contains all Request and Response serializers for the Reports API.
Serializers handle field definitions and validation of the JSON
documents stored on a report (tactical map, legend, evidence).
**No business logic** — status transitions and ownership rules live in
``services.py``.

Structure
---------
1. Tactical map serializers (points, markers, shapes, map, legend)
2. Evidence serializers (captured-by, photo, video)
3. Report read serializers (list, detail)
4. Report write serializers (create, update)
5. Action serializers (review, draft search, attachment upload)
"""

from __future__ import annotations

import re
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from accounts.serializers import OfficerSummarySerializer

from . import tactical
from .models import AttachmentType, Report, ReportAttachment, ReportStatus, ReportStatusLog

User = get_user_model()

_DURATION_RE = re.compile(r"^\d{2}:[0-5]\d:[0-5]\d$")


# ═══════════════════════════════════════════════════════════════════
#  1. Tactical Map Serializers
# ═══════════════════════════════════════════════════════════════════


class PointSerializer(serializers.Serializer):
    x = serializers.FloatField(min_value=0, max_value=tactical.MAP_SIZE)
    y = serializers.FloatField(min_value=0, max_value=tactical.MAP_SIZE)


class MarkerSerializer(serializers.Serializer):
    id = serializers.RegexField(r"^M\d+$", required=False)
    x = serializers.FloatField(min_value=0, max_value=tactical.MAP_SIZE)
    y = serializers.FloatField(min_value=0, max_value=tactical.MAP_SIZE)
    color = serializers.ChoiceField(choices=tactical.MARKER_COLORS, default="red")
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    desc = serializers.CharField(required=False, allow_blank=True)


class ShapeSerializer(serializers.Serializer):
    """
    Map overlay.  Circles carry exactly one centre point plus a radius;
    other shapes carry their vertices (rect: two opposite corners).
    """

    MIN_POINTS = {"polyline": 2, "polygon": 3, "rect": 2, "circle": 1}

    id = serializers.RegexField(r"^S\d+$", required=False)
    type = serializers.ChoiceField(choices=tactical.SHAPE_TYPES)
    coords = PointSerializer(many=True)
    radius = serializers.FloatField(required=False, min_value=0)
    color = serializers.CharField(default=tactical.PALETTE["red"])
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    desc = serializers.CharField(required=False, allow_blank=True)

    def validate_color(self, value: str) -> str:
        if not tactical.is_valid_shape_color(value):
            raise serializers.ValidationError("Use a palette colour name or a #rrggbb hex value.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        shape_type = attrs["type"]
        coords = attrs["coords"]
        if len(coords) < self.MIN_POINTS[shape_type]:
            raise serializers.ValidationError(
                {"coords": f"A {shape_type} needs at least {self.MIN_POINTS[shape_type]} point(s)."}
            )
        if shape_type == "circle":
            if len(coords) != 1:
                raise serializers.ValidationError({"coords": "A circle has exactly one centre point."})
            if not attrs.get("radius"):
                raise serializers.ValidationError({"radius": "A circle requires a positive radius."})
        elif "radius" in attrs:
            raise serializers.ValidationError({"radius": "Only circles have a radius."})
        return attrs


def _assign_ids(items: list[dict[str, Any]], next_id) -> list[dict[str, Any]]:
    """
    Give id-less items the next free id and reject duplicates.

    The generated id follows the last numbered item and skips any id
    already taken anywhere in the list.
    """
    explicit = {item["id"] for item in items if item.get("id")}
    seen: set[str] = set()
    done: list[dict[str, Any]] = []
    for item in items:
        if not item.get("id"):
            candidate = next_id(done)
            while candidate in seen or candidate in explicit:
                candidate = next_id([*done, {"id": candidate}])
            item["id"] = candidate
        if item["id"] in seen:
            raise serializers.ValidationError(f"Duplicate id '{item['id']}'.")
        seen.add(item["id"])
        done.append(item)
    return done


class MapDataSerializer(serializers.Serializer):
    markers = MarkerSerializer(many=True, required=False, default=list)
    shapes = ShapeSerializer(many=True, required=False, default=list)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        return {
            "markers": _assign_ids([dict(m) for m in attrs.get("markers", [])], tactical.next_marker_id),
            "shapes": _assign_ids(
                [{**s, "coords": [dict(c) for c in s["coords"]]} for s in attrs.get("shapes", [])],
                tactical.next_shape_id,
            ),
        }


class LegendField(serializers.DictField):
    """``{colour: meaning}``; keys must be palette colours."""

    child = serializers.CharField(allow_blank=True, max_length=255)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        unknown = sorted(set(value) - set(tactical.MARKER_COLORS))
        if unknown:
            raise serializers.ValidationError(f"Unknown legend colour(s): {', '.join(unknown)}.")
        return value


# ═══════════════════════════════════════════════════════════════════
#  2. Evidence Serializers
# ═══════════════════════════════════════════════════════════════════


class ExternalSourceSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    affiliation = serializers.CharField(required=False, allow_blank=True, max_length=255)
    badge_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    contact = serializers.CharField(required=False, allow_blank=True, max_length=255)


class CapturedBySerializer(serializers.Serializer):
    """
    Who captured a piece of evidence: an officer of the unit (INTERNAL)
    or an outside party (EXTERNAL).
    """

    type = serializers.ChoiceField(choices=("INTERNAL", "EXTERNAL"))
    officer_id = serializers.IntegerField(required=False)
    external_details = ExternalSourceSerializer(required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["type"] == "INTERNAL":
            officer_id = attrs.get("officer_id")
            if officer_id is None:
                raise serializers.ValidationError({"officer_id": "Required for internal capture."})
            if not User.objects.filter(pk=officer_id).exists():
                raise serializers.ValidationError({"officer_id": f"Officer {officer_id} does not exist."})
            return {"type": "INTERNAL", "officer_id": officer_id}

        details = attrs.get("external_details")
        if not details:
            raise serializers.ValidationError({"external_details": "Required for external capture."})
        return {"type": "EXTERNAL", "external_details": dict(details)}


class _EvidenceBaseSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    timestamp = serializers.CharField(max_length=40)
    captured_by = CapturedBySerializer()
    linked_marker_ids = serializers.ListField(
        child=serializers.RegexField(r"^M\d+$"), required=False, default=list,
    )

    def validate_timestamp(self, value: str) -> str:
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise serializers.ValidationError("Enter a date and time, e.g. 2024-05-01T13:45.")
        return value


class PhotoEvidenceSerializer(_EvidenceBaseSerializer):
    id = serializers.RegexField(r"^E\d+$", required=False)
    file_url = serializers.CharField(max_length=1000)
    file_name = serializers.CharField(max_length=255)


class VideoEvidenceSerializer(_EvidenceBaseSerializer):
    SOURCE_TYPES = ("BODYCAM", "DASHCAM", "SURVEILLANCE", "CIVILIAN", "UNDERCOVER", "DRONE", "OTHER")

    id = serializers.RegexField(r"^V\d+$", required=False)
    source_type = serializers.ChoiceField(choices=SOURCE_TYPES)
    other_source_text = serializers.CharField(required=False, allow_blank=True, max_length=255)
    duration = serializers.CharField(required=False, allow_blank=True)
    url = serializers.URLField(max_length=1000)

    def validate_duration(self, value: str) -> str:
        if value and not _DURATION_RE.match(value):
            raise serializers.ValidationError("Duration must be HH:MM:SS.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["source_type"] == "OTHER" and not (attrs.get("other_source_text") or "").strip():
            raise serializers.ValidationError({"other_source_text": "Describe the source when choosing OTHER."})
        return attrs


def _plain(value):
    """Nested ``OrderedDict`` / list structure → plain JSON-ready dicts."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class EvidenceSerializer(serializers.Serializer):
    photo = PhotoEvidenceSerializer(many=True, required=False, default=list)
    video = VideoEvidenceSerializer(many=True, required=False, default=list)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        photos = [_plain(p) for p in attrs.get("photo", [])]
        videos = [_plain(v) for v in attrs.get("video", [])]
        return {
            "photo": _assign_ids(photos, lambda done: tactical.next_evidence_id("E", done)),
            "video": _assign_ids(videos, lambda done: tactical.next_evidence_id("V", done)),
        }


# ═══════════════════════════════════════════════════════════════════
#  3. Report Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportFilterSerializer(serializers.Serializer):
    """Query parameters accepted by the report list."""

    status = serializers.ChoiceField(choices=ReportStatus.choices, required=False)
    author = serializers.IntegerField(required=False, min_value=1)
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ReportListSerializer(serializers.ModelSerializer):
    author = OfficerSummarySerializer(read_only=True)
    author_name = serializers.CharField(source="author.display_name", read_only=True)
    co_author_names = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Report
        fields = [
            "id",
            "report_number",
            "title",
            "status",
            "status_display",
            "author",
            "author_name",
            "co_author_names",
            "submitted_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_co_author_names(self, obj: Report) -> list[str]:
        return [u.display_name for u in obj.co_authors.all()]


class ReportStatusLogSerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source="changed_by.display_name", read_only=True, default=None)

    class Meta:
        model = ReportStatusLog
        fields = ["id", "from_status", "to_status", "changed_by", "changed_by_name", "message", "created_at"]
        read_only_fields = fields


class ReportAttachmentSerializer(serializers.ModelSerializer):
    uploaded_by_name = serializers.CharField(source="uploaded_by.display_name", read_only=True, default=None)

    class Meta:
        model = ReportAttachment
        fields = ["id", "file", "file_type", "caption", "uploaded_by", "uploaded_by_name", "created_at"]
        read_only_fields = fields


class LinkedConfiscationSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    citizen_name = serializers.CharField()
    drug_type = serializers.CharField()
    quantity = serializers.FloatField()
    officer_name = serializers.CharField(source="officer.display_name")
    created_at = serializers.DateTimeField()


class LinkedCaseSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    case_number = serializers.CharField(allow_null=True)
    title = serializers.CharField()
    status = serializers.CharField()


class ReportDetailSerializer(ReportListSerializer):
    co_authors = OfficerSummarySerializer(many=True, read_only=True)
    reviewer = OfficerSummarySerializer(read_only=True)
    used_colors = serializers.SerializerMethodField()
    cases = LinkedCaseSerializer(many=True, read_only=True)
    confiscations = LinkedConfiscationSerializer(many=True, read_only=True)
    attachments = ReportAttachmentSerializer(many=True, read_only=True)
    status_logs = ReportStatusLogSerializer(many=True, read_only=True)

    class Meta(ReportListSerializer.Meta):
        fields = ReportListSerializer.Meta.fields + [
            "co_authors",
            "content",
            "map_data",
            "legend",
            "used_colors",
            "evidence",
            "reviewer",
            "reviewed_at",
            "approved_at",
            "rejection_reason",
            "cases",
            "confiscations",
            "attachments",
            "status_logs",
        ]
        read_only_fields = fields

    def get_used_colors(self, obj: Report) -> list[str]:
        return tactical.used_colors((obj.map_data or {}).get("markers", []))


# ═══════════════════════════════════════════════════════════════════
#  4. Report Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    content = serializers.CharField(required=False, allow_blank=True, default="")
    map_data = MapDataSerializer(required=False)
    legend = LegendField(required=False)
    evidence = EvidenceSerializer(required=False)
    co_author_ids = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), source="co_authors", many=True, required=False,
    )
    confiscation_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False,
    )


class ReportUpdateSerializer(ReportCreateSerializer):
    """
    Every field optional.  Validated without ``partial`` so the nested map
    and evidence documents still get their required fields and defaults.
    """

    title = serializers.CharField(max_length=255, required=False)
    content = serializers.CharField(required=False, allow_blank=True)


# ═══════════════════════════════════════════════════════════════════
#  5. Action Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportReviewSerializer(serializers.Serializer):
    """``reason`` is required when rejecting."""

    action = serializers.ChoiceField(choices=("approve", "reject"))
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["action"] == "reject" and not attrs["reason"].strip():
            raise serializers.ValidationError({"reason": "A reason is required when requesting revisions."})
        return attrs


class DraftSearchSerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class DraftSearchResultSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True)

    class Meta:
        model = Report
        fields = ["id", "title", "report_number", "created_at", "author_name"]
        read_only_fields = fields


class AttachmentUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    file_type = serializers.ChoiceField(choices=AttachmentType.choices, default=AttachmentType.OTHER)
    caption = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def validate_file(self, value):
        limit = getattr(settings, "ATTACHMENT_MAX_BYTES", 25 * 1024 * 1024)
        if value.size > limit:
            raise serializers.ValidationError(f"File exceeds the {limit // (1024 * 1024)} MB limit.")
        return value
