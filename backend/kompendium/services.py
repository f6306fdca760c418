"""
Kompendium app Service Layer.

Every officer may read; only administrators write.  The distinct category
list is a cached read model invalidated on every write.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.db.models import Q, QuerySet

from core.domain.access import require_admin
from core.domain.cache import CacheScope, cached, invalidate
from core.domain.exceptions import NotFound
from core.domain.transactions import lock_for_update

from .models import CompendiumDoc, normalize_category

logger = logging.getLogger(__name__)


def _clean(data: dict[str, Any]) -> dict[str, Any]:
    data = dict(data)
    if "category" in data:
        data["category"] = normalize_category(data["category"])
    if "tags" in data:
        data["tags"] = ", ".join(t.strip() for t in data["tags"].split(",") if t.strip())
    return data


class KompendiumService:

    @staticmethod
    def list_docs(filters: dict[str, Any] | None = None) -> QuerySet:
        """
        Articles ordered by category then title.

        ``category`` keeps the article and everything filed below it;
        ``search`` matches title, body and tags.
        """
        filters = filters or {}
        qs = CompendiumDoc.objects.select_related("author")
        category = normalize_category(filters.get("category") or "")
        if category:
            qs = qs.filter(Q(category=category) | Q(category__startswith=f"{category}/"))
        search = (filters.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(title__icontains=search) | Q(body__icontains=search) | Q(tags__icontains=search)
            )
        return qs.order_by("category", "title")

    @staticmethod
    def get_doc(doc_id: int) -> CompendiumDoc:
        try:
            return CompendiumDoc.objects.select_related("author").get(pk=doc_id)
        except (CompendiumDoc.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Kompendium article with id {doc_id} not found.")

    @staticmethod
    def list_categories() -> list[str]:
        return cached(
            CacheScope.KOMPENDIUM_CATEGORIES,
            lambda: sorted(
                set(
                    CompendiumDoc.objects.exclude(category="")
                    .values_list("category", flat=True)
                )
            ),
        )

    @staticmethod
    @transaction.atomic
    def create_doc(validated_data: dict[str, Any], requesting_user: Any) -> CompendiumDoc:
        require_admin(requesting_user, "Only administrators may write kompendium articles.")
        doc = CompendiumDoc.objects.create(author=requesting_user, **_clean(validated_data))
        invalidate(CacheScope.KOMPENDIUM_CATEGORIES)
        logger.info("Kompendium article %s created by %s", doc.pk, requesting_user)
        return doc

    @staticmethod
    @transaction.atomic
    def update_doc(doc_id: int, validated_data: dict[str, Any], requesting_user: Any) -> CompendiumDoc:
        doc = lock_for_update(CompendiumDoc, doc_id)
        require_admin(requesting_user, "Only administrators may write kompendium articles.")
        for field, value in _clean(validated_data).items():
            setattr(doc, field, value)
        doc.save()
        invalidate(CacheScope.KOMPENDIUM_CATEGORIES)
        logger.info("Kompendium article %s updated by %s", doc.pk, requesting_user)
        return doc

    @staticmethod
    @transaction.atomic
    def delete_doc(doc_id: int, requesting_user: Any) -> None:
        doc = lock_for_update(CompendiumDoc, doc_id)
        require_admin(requesting_user, "Only administrators may delete kompendium articles.")
        doc.delete()
        invalidate(CacheScope.KOMPENDIUM_CATEGORIES)
        logger.info("Kompendium article %s deleted by %s", doc_id, requesting_user)
