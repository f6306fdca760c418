from django.contrib import admin

from .models import Report, ReportAttachment, ReportStatusLog


class ReportAttachmentInline(admin.TabularInline):
    model = ReportAttachment
    extra = 0
    readonly_fields = ("uploaded_by", "created_at")


class ReportStatusLogInline(admin.TabularInline):
    model = ReportStatusLog
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by",
                       "message", "created_at")


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ("id", "report_number", "title", "status",
                    "author", "submitted_at", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "report_number", "content")
    filter_horizontal = ("co_authors",)
    inlines = [ReportAttachmentInline, ReportStatusLogInline]
