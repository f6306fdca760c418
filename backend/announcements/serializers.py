from rest_framework import serializers

from accounts.serializers import OfficerSummarySerializer

from .models import Announcement, AnnouncementPriority, AnnouncementRead


class AnnouncementSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True, default=None)
    is_read = serializers.BooleanField(read_only=True, default=False)
    read_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Announcement
        fields = [
            "id",
            "title",
            "body",
            "priority",
            "is_pinned",
            "author",
            "author_name",
            "is_read",
            "read_count",
            "created_at",
        ]
        read_only_fields = ["id", "author", "author_name", "is_read", "read_count", "created_at"]


class AnnouncementCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    body = serializers.CharField()
    priority = serializers.ChoiceField(choices=AnnouncementPriority.choices, default=AnnouncementPriority.NORMAL)
    is_pinned = serializers.BooleanField(required=False, default=False)


class ReadReceiptSerializer(serializers.ModelSerializer):
    user = OfficerSummarySerializer(read_only=True)

    class Meta:
        model = AnnouncementRead
        fields = ["id", "user", "read_at"]
        read_only_fields = fields
