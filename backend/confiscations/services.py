"""
Confiscations app Service Layer.

Architecture
------------
- ``ConfiscationService`` — logging, deletion, search and report links.
- ``SeizureStatsService`` — cached totals for the dashboard.

Reports call ``link_to_report`` / ``unlink`` when a report is created or
edited with ``confiscation_ids``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction
from django.db.models import Q, QuerySet, Sum

from core.domain.access import is_admin, require_any
from core.domain.cache import CacheScope, cached, invalidate, scoped_suffix
from core.domain.exceptions import DomainError, NotFound
from core.domain.transactions import lock_for_update
from registries.models import DrugType

from .models import Confiscation, to_grams

logger = logging.getLogger(__name__)

UNLINKED_SEARCH_LIMIT = 10


class ConfiscationService:

    @staticmethod
    def _base_queryset() -> QuerySet:
        return Confiscation.objects.select_related("officer", "officer__rank", "report")

    @staticmethod
    def list_confiscations(filters: dict[str, Any] | None = None) -> QuerySet:
        """Every confiscation, newest first.  ``officer`` / ``drug_type`` narrow it."""
        filters = filters or {}
        qs = ConfiscationService._base_queryset()
        if filters.get("officer"):
            qs = qs.filter(officer_id=filters["officer"])
        if filters.get("drug_type"):
            qs = qs.filter(drug_type__iexact=filters["drug_type"])
        return qs.order_by("-created_at", "-id")

    @staticmethod
    def get_confiscation(confiscation_id: int) -> Confiscation:
        try:
            return ConfiscationService._base_queryset().get(pk=confiscation_id)
        except (Confiscation.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Confiscation with id {confiscation_id} not found.")

    @staticmethod
    def search_unlinked(query: str) -> QuerySet:
        """
        Confiscations not yet attached to a report whose citizen name or
        drug type contains ``query``; at most ``UNLINKED_SEARCH_LIMIT``.
        """
        qs = ConfiscationService._base_queryset().filter(report__isnull=True)
        query = (query or "").strip()
        if query:
            qs = qs.filter(Q(citizen_name__icontains=query) | Q(drug_type__icontains=query))
        return qs.order_by("-created_at", "-id")[:UNLINKED_SEARCH_LIMIT]

    @staticmethod
    @transaction.atomic
    def create_confiscation(validated_data: dict[str, Any], requesting_user: Any) -> Confiscation:
        """
        Log a seizure.  ``quantity`` is given in ``unit`` and stored in
        grams.  When the drug-type registry has entries, ``drug_type`` must
        be one of them.
        """
        data = dict(validated_data)
        unit = data.pop("unit", "g")
        drug_type = data["drug_type"].strip()

        registry = DrugType.objects.all()
        if registry.exists():
            match = registry.filter(name__iexact=drug_type).first()
            if match is None:
                raise DomainError(f"Unknown drug type '{drug_type}'.")
            drug_type = match.name

        confiscation = Confiscation.objects.create(
            citizen_name=data.get("citizen_name", ""),
            drug_type=drug_type,
            quantity=to_grams(data["quantity"], unit),
            notes=data.get("notes", ""),
            officer=requesting_user,
            report=data.get("report"),
        )
        invalidate(CacheScope.SEIZURE_STATS, CacheScope.DASHBOARD)
        logger.info(
            "Confiscation %s logged by %s: %s %.2f g",
            confiscation.pk, requesting_user, drug_type, confiscation.quantity,
        )
        return confiscation

    @staticmethod
    @transaction.atomic
    def delete_confiscation(confiscation_id: int, requesting_user: Any) -> None:
        confiscation = lock_for_update(Confiscation, confiscation_id)
        require_any(
            requesting_user,
            is_admin(requesting_user),
            confiscation.officer_id == requesting_user.pk,
            message="Only the logging officer or an administrator may delete this entry.",
        )
        confiscation.delete()
        invalidate(CacheScope.SEIZURE_STATS, CacheScope.DASHBOARD)
        logger.info("Confiscation %s deleted by %s", confiscation_id, requesting_user)

    @staticmethod
    def link_to_report(confiscation_ids: Iterable[int], report: Any) -> int:
        """Attach confiscations to ``report``; returns the number linked."""
        ids = list(dict.fromkeys(confiscation_ids))
        if not ids:
            return 0
        found = set(Confiscation.objects.filter(pk__in=ids).values_list("pk", flat=True))
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFound(f"Confiscation(s) not found: {', '.join(map(str, missing))}.")
        linked = Confiscation.objects.filter(pk__in=ids).update(report=report)
        logger.info("Linked %d confiscation(s) to report %s", linked, report.pk)
        return linked

    @staticmethod
    @transaction.atomic
    def unlink(confiscation_id: int, requesting_user: Any) -> Confiscation:
        confiscation = lock_for_update(Confiscation, confiscation_id)
        require_any(
            requesting_user,
            is_admin(requesting_user),
            confiscation.officer_id == requesting_user.pk,
            message="Only the logging officer or an administrator may unlink this entry.",
        )
        report_id = confiscation.report_id
        confiscation.report = None
        confiscation.save(update_fields=["report", "updated_at"])
        logger.info("Confiscation %s unlinked from report %s by %s", confiscation.pk, report_id, requesting_user)
        return confiscation


class SeizureStatsService:
    """Seizure totals in kilograms."""

    @staticmethod
    def _total_grams(qs: QuerySet) -> float:
        return qs.aggregate(total=Sum("quantity"))["total"] or 0.0

    @staticmethod
    def seizure_stats(user: Any) -> dict[str, float]:
        total = cached(
            CacheScope.SEIZURE_STATS,
            lambda: round(SeizureStatsService._total_grams(Confiscation.objects.all()) / 1000, 3),
        )
        mine = cached(
            CacheScope.SEIZURE_STATS,
            lambda: round(
                SeizureStatsService._total_grams(Confiscation.objects.filter(officer=user)) / 1000, 3,
            ),
            suffix=scoped_suffix(CacheScope.SEIZURE_STATS, f"user:{user.pk}"),
        )
        return {"total_kg": total, "user_kg": mine}
