from django.contrib import admin

from .models import Confiscation


@admin.register(Confiscation)
class ConfiscationAdmin(admin.ModelAdmin):
    list_display = ("id", "drug_type", "quantity", "citizen_name",
                    "officer", "report", "created_at")
    list_filter = ("drug_type",)
    search_fields = ("citizen_name", "drug_type", "notes")
    raw_id_fields = ("report",)
