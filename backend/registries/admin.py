from django.contrib import admin

from .models import DocumentTemplate, DrugType


@admin.register(DrugType)
class DrugTypeAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)


@admin.register(DocumentTemplate)
class DocumentTemplateAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "type", "updated_at")
    list_filter = ("type",)
    search_fields = ("name", "description")
