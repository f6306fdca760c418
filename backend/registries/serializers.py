from rest_framework import serializers

from .models import DocumentTemplate, DrugType, TemplateType


class DrugTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = DrugType
        fields = ["id", "name", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate_name(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Name is required.")
        return value.strip()


class TemplateFilterSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TemplateType.choices, required=False)


class DocumentTemplateSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source="get_type_display", read_only=True)

    class Meta:
        model = DocumentTemplate
        fields = ["id", "name", "description", "content", "type", "type_display", "created_at", "updated_at"]
        read_only_fields = ["id", "type_display", "created_at", "updated_at"]
