from rest_framework import serializers

from .models import CompendiumDoc


class KompendiumFilterSerializer(serializers.Serializer):
    category = serializers.CharField(required=False, allow_blank=True, max_length=255)
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)


class CompendiumDocSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True, default=None)
    category_path = serializers.ListField(child=serializers.CharField(), read_only=True)
    tag_list = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = CompendiumDoc
        fields = [
            "id",
            "title",
            "body",
            "category",
            "category_path",
            "tags",
            "tag_list",
            "author",
            "author_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "author", "author_name", "category_path", "tag_list", "created_at", "updated_at"]
