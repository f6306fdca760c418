from django.contrib import admin

from .models import ActivityEntry


@admin.register(ActivityEntry)
class ActivityEntryAdmin(admin.ModelAdmin):
    list_display = ("created_at", "event_type", "actor", "target_title")
    list_filter = ("event_type",)
    readonly_fields = ("actor", "event_type", "message", "target_title",
                       "content_type", "object_id", "created_at")
