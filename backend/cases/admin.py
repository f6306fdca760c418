from django.contrib import admin

from .models import Case, CaseReportLink, CaseStatusLog


class CaseReportLinkInline(admin.TabularInline):
    model = CaseReportLink
    extra = 0
    raw_id_fields = ("report",)


class CaseStatusLogInline(admin.TabularInline):
    model = CaseStatusLog
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by",
                       "message", "created_at")


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ("id", "case_number", "title", "status",
                    "lead_investigator", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "case_number", "description")
    filter_horizontal = ("participants",)
    inlines = [CaseReportLinkInline, CaseStatusLogInline]


@admin.register(CaseStatusLog)
class CaseStatusLogAdmin(admin.ModelAdmin):
    list_display = ("case", "from_status", "to_status",
                    "changed_by", "created_at")
    list_filter = ("to_status",)
