from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Rank, User


@admin.register(Rank)
class RankAdmin(admin.ModelAdmin):
    list_display = ("name", "order", "system_role")
    list_filter = ("system_role",)
    search_fields = ("name",)
    ordering = ("-order",)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "rp_name", "badge_number", "email",
                    "rank", "status", "is_active")
    search_fields = ("username", "rp_name", "email", "badge_number")
    list_filter = ("is_active", "status", "rank")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Officer", {"fields": ("rp_name", "badge_number", "phone_number",
                                "avatar_url", "rank", "status",
                                "unit_assignment", "notes")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Officer", {"fields": ("email", "badge_number", "first_name",
                                "last_name", "rank")}),
    )
