"""
Registries app models.

Admin-maintained lookup data: the drug types officers may log and the
document templates offered when writing reports, cases and kompendium
articles.
"""

from django.db import models

from core.models import TimeStampedModel


class DrugType(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True, verbose_name="Name")

    class Meta:
        verbose_name = "Drug Type"
        verbose_name_plural = "Drug Types"
        ordering = ["name"]

    def __str__(self):
        return self.name


class TemplateType(models.TextChoices):
    REPORT = "report", "Report"
    CASE = "case", "Case"
    KOMPENDIUM = "kompendium", "Kompendium"


class DocumentTemplate(TimeStampedModel):
    name = models.CharField(max_length=255, verbose_name="Name")
    description = models.CharField(max_length=500, blank=True, default="", verbose_name="Description")
    content = models.TextField(blank=True, default="", verbose_name="Content (HTML)")
    type = models.CharField(
        max_length=20,
        choices=TemplateType.choices,
        default=TemplateType.REPORT,
        db_index=True,
        verbose_name="Template Type",
    )

    class Meta:
        verbose_name = "Document Template"
        verbose_name_plural = "Document Templates"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_type_display()})"
