"""
Confiscations app serializers.

Quantities arrive with a unit and are converted to grams by the service;
responses always report grams.
"""

from __future__ import annotations

from django.apps import apps
from rest_framework import serializers

from .models import Confiscation, QuantityUnit


class ConfiscationFilterSerializer(serializers.Serializer):
    officer = serializers.IntegerField(required=False)
    drug_type = serializers.CharField(required=False, allow_blank=True, max_length=100)


class UnlinkedSearchSerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class ConfiscationSerializer(serializers.ModelSerializer):
    officer_name = serializers.CharField(source="officer.display_name", read_only=True)
    officer_badge = serializers.CharField(source="officer.badge_number", read_only=True)
    report_number = serializers.CharField(source="report.report_number", read_only=True, default=None)
    report_title = serializers.CharField(source="report.title", read_only=True, default=None)

    class Meta:
        model = Confiscation
        fields = [
            "id",
            "citizen_name",
            "drug_type",
            "quantity",
            "notes",
            "officer",
            "officer_name",
            "officer_badge",
            "report",
            "report_number",
            "report_title",
            "created_at",
        ]
        read_only_fields = fields


class _ReportField(serializers.PrimaryKeyRelatedField):
    def get_queryset(self):
        return apps.get_model("reports", "Report").objects.all()


class ConfiscationCreateSerializer(serializers.Serializer):
    citizen_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    drug_type = serializers.CharField(max_length=100)
    quantity = serializers.FloatField()
    unit = serializers.ChoiceField(choices=QuantityUnit.choices, default=QuantityUnit.GRAMS)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    report_id = _ReportField(source="report", required=False, allow_null=True)

    def validate_quantity(self, value: float) -> float:
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero.")
        return value

    def validate_drug_type(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Drug type is required.")
        return value.strip()


class SeizureStatsSerializer(serializers.Serializer):
    total_kg = serializers.FloatField()
    user_kg = serializers.FloatField()
