from django.contrib import admin

from .models import CompendiumDoc


@admin.register(CompendiumDoc)
class CompendiumDocAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "author", "updated_at")
    search_fields = ("title", "category", "tags")
