"""
Kompendium app models.

The kompendium is the division's internal knowledge base.  Articles are
filed under a ``/``-separated category path (``Procedures/Raids/Entry``)
and tagged with a comma-separated list.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


def split_category(category: str) -> list[str]:
    return [part.strip() for part in (category or "").split("/") if part.strip()]


def normalize_category(category: str) -> str:
    """``" a / b/ "`` → ``"a/b"``."""
    return "/".join(split_category(category))


def split_tags(tags: str) -> list[str]:
    return [tag.strip() for tag in (tags or "").split(",") if tag.strip()]


class CompendiumDoc(TimeStampedModel):
    title = models.CharField(max_length=255, verbose_name="Title")
    body = models.TextField(blank=True, default="", verbose_name="Body (HTML)")
    category = models.CharField(max_length=255, blank=True, default="", db_index=True, verbose_name="Category")
    tags = models.CharField(max_length=500, blank=True, default="", verbose_name="Tags")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="kompendium_docs",
        verbose_name="Author",
    )

    class Meta:
        verbose_name = "Kompendium Article"
        verbose_name_plural = "Kompendium Articles"
        ordering = ["category", "title"]

    def __str__(self):
        return self.title

    @property
    def category_path(self) -> list[str]:
        return split_category(self.category)

    @property
    def tag_list(self) -> list[str]:
        return split_tags(self.tags)
