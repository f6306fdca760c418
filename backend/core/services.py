"""
Core app services — **Service Layer**.

Contains cross-app aggregation and search logic.  Views delegate all
business logic to the service classes defined here.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  The core app is the ONLY app allowed to aggregate models from     ║
║  every other app.  To prevent circular imports at module load:     ║
║                                                                    ║
║  1. NEVER import models from other apps at the **module level**.   ║
║     Import inside the method that needs them, or use               ║
║       Case = apps.get_model("cases", "Case")                      ║
║                                                                    ║
║  2. Visibility rules are reused from the owning app's services     ║
║     (``REPORT_SCOPE_RULES``, ``CASE_SCOPE_RULES``) so search and    ║
║     the dashboard never show more than the app's own endpoints.    ║
║                                                                    ║
║  3. Heavy aggregates go through ``.aggregate()`` and are cached    ║
║     via ``core.domain.cache``.                                     ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.apps import apps
from django.db.models import Count, Q

from core.domain.access import apply_visibility_scope
from core.domain.activity import ActivityService
from core.domain.cache import CacheScope, cached

if TYPE_CHECKING:
    from accounts.models import User


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces the dashboard payload consumed by ``DashboardSerializer``.

    Department-wide counters are shared by every officer and cached under
    ``CacheScope.DASHBOARD``; the "my cases / my reports" panels and the
    unread counter are computed per request.
    """

    USER_CASES_LIMIT: int = 5
    USER_REPORTS_LIMIT: int = 5
    ANNOUNCEMENTS_LIMIT: int = 3
    RECENT_ACTIVITY_LIMIT: int = 10

    def __init__(self, user: User) -> None:
        self.user = user

    # ── Public API ──────────────────────────────────────────────────

    def get_dashboard(self) -> dict[str, Any]:
        from announcements.services import AnnouncementService
        from confiscations.services import SeizureStatsService

        return {
            "stats": cached(CacheScope.DASHBOARD, self._department_stats),
            "seizures": SeizureStatsService.seizure_stats(self.user),
            "my_cases": self._user_cases(),
            "my_reports": self._user_reports(),
            "announcements": list(
                AnnouncementService.list_for_user(self.user)[: self.ANNOUNCEMENTS_LIMIT]
            ),
            "unread_announcements": AnnouncementService.unread_count(self.user),
            "recent_activity": list(ActivityService.latest(self.RECENT_ACTIVITY_LIMIT)),
        }

    # ── Private helpers ─────────────────────────────────────────────

    @staticmethod
    def _department_stats() -> dict[str, int]:
        from accounts.models import OfficerStatus
        from cases.models import OPEN_STATUSES, CaseStatus

        Case = apps.get_model("cases", "Case")
        User = apps.get_model("accounts", "User")

        aggregates = Case.objects.aggregate(
            open_cases=Count("id", filter=Q(status__in=OPEN_STATUSES)),
            closed_cases=Count("id", filter=Q(status=CaseStatus.CLOSED)),
            pending_closure=Count("id", filter=Q(status=CaseStatus.PENDING_CLOSURE)),
        )
        return {
            "active_duty": User.objects.filter(is_active=True, status=OfficerStatus.ACTIVE).count(),
            **aggregates,
        }

    def _user_cases(self) -> list:
        from cases.services import CaseQueryService

        involved = Q(reporting_officer=self.user) | Q(lead_investigator=self.user) | Q(participants=self.user)
        return list(
            CaseQueryService._base_queryset()
            .filter(involved)
            .distinct()
            .order_by("-updated_at", "-id")[: self.USER_CASES_LIMIT]
        )

    def _user_reports(self) -> list:
        from reports.services import ReportQueryService

        owned = Q(author=self.user) | Q(co_authors=self.user)
        return list(
            ReportQueryService._base_queryset()
            .filter(owned)
            .distinct()
            .order_by("-updated_at", "-id")[: self.USER_REPORTS_LIMIT]
        )


# ════════════════════════════════════════════════════════════════════
#  Global Search Service
# ════════════════════════════════════════════════════════════════════

class GlobalSearchService:
    """
    Unified search across reports, cases, confiscations and kompendium
    articles, returning categorised results.

    * **Security**: reports and cases are filtered through the same scope
      rules their own list endpoints use.
    """

    CATEGORIES = ("reports", "cases", "confiscations", "kompendium")

    #: Default maximum results per category.
    DEFAULT_LIMIT: int = 10

    #: Absolute maximum results per category (guard against abuse).
    MAX_LIMIT: int = 50

    #: Minimum query length.
    MIN_QUERY_LENGTH: int = 2

    def __init__(
        self,
        query: str,
        user: User,
        category: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        self.query = query.strip()
        self.user = user
        self.category = category
        self.limit = max(1, min(limit, self.MAX_LIMIT))

    # ── Public API ──────────────────────────────────────────────────

    def search(self) -> dict[str, Any]:
        """Execute the search and return the unified result dict."""
        results: dict[str, list[dict[str, Any]]] = {name: [] for name in self.CATEGORIES}

        if len(self.query) >= self.MIN_QUERY_LENGTH:
            for name in self.CATEGORIES:
                if self.category is None or self.category == name:
                    results[name] = getattr(self, f"_search_{name}")()

        return {
            "query": self.query,
            "total_results": sum(len(rows) for rows in results.values()),
            **results,
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _search_reports(self) -> list[dict[str, Any]]:
        from reports.services import REPORT_SCOPE_RULES

        Report = apps.get_model("reports", "Report")
        qs = apply_visibility_scope(
            Report.objects.select_related("author"),
            self.user,
            scope_rules=REPORT_SCOPE_RULES,
        )
        qs = qs.filter(
            Q(title__icontains=self.query)
            | Q(report_number__icontains=self.query)
            | Q(content__icontains=self.query)
        ).order_by("-created_at", "-id")[: self.limit]
        return [
            {
                "id": r.pk,
                "report_number": r.report_number,
                "title": r.title,
                "status": r.status,
                "status_display": r.get_status_display(),
                "author_name": r.author.display_name,
                "created_at": r.created_at,
            }
            for r in qs
        ]

    def _search_cases(self) -> list[dict[str, Any]]:
        from cases.services import CASE_SCOPE_RULES

        Case = apps.get_model("cases", "Case")
        qs = apply_visibility_scope(
            Case.objects.select_related("lead_investigator"),
            self.user,
            scope_rules=CASE_SCOPE_RULES,
        )
        qs = qs.filter(
            Q(title__icontains=self.query)
            | Q(case_number__icontains=self.query)
            | Q(description__icontains=self.query)
        ).order_by("-created_at", "-id")[: self.limit]
        return [
            {
                "id": c.pk,
                "case_number": c.case_number,
                "title": c.title,
                "status": c.status,
                "status_display": c.get_status_display(),
                "lead_investigator_name": (
                    c.lead_investigator.display_name if c.lead_investigator else None
                ),
                "created_at": c.created_at,
            }
            for c in qs
        ]

    def _search_confiscations(self) -> list[dict[str, Any]]:
        Confiscation = apps.get_model("confiscations", "Confiscation")
        qs = (
            Confiscation.objects
            .select_related("officer")
            .filter(Q(citizen_name__icontains=self.query) | Q(drug_type__icontains=self.query))
            .order_by("-created_at", "-id")[: self.limit]
        )
        return [
            {
                "id": c.pk,
                "citizen_name": c.citizen_name,
                "drug_type": c.drug_type,
                "quantity": c.quantity,
                "officer_name": c.officer.display_name,
                "report_id": c.report_id,
                "created_at": c.created_at,
            }
            for c in qs
        ]

    def _search_kompendium(self) -> list[dict[str, Any]]:
        CompendiumDoc = apps.get_model("kompendium", "CompendiumDoc")
        qs = (
            CompendiumDoc.objects
            .filter(
                Q(title__icontains=self.query)
                | Q(tags__icontains=self.query)
                | Q(category__icontains=self.query)
            )
            .order_by("category", "title")[: self.limit]
        )
        return [
            {
                "id": d.pk,
                "title": d.title,
                "category": d.category,
                "tag_list": d.tag_list,
            }
            for d in qs
        ]


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations and the rank ladder into a
    single dict for the frontend.

    Stateless: all constants are public information needed to render
    dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        from accounts.models import OfficerStatus, SystemRole
        from announcements.models import AnnouncementPriority
        from cases.models import CaseStatus
        from confiscations.models import QuantityUnit
        from registries.models import TemplateType
        from reports import tactical
        from reports.models import AttachmentType, ReportStatus

        Rank = apps.get_model("accounts", "Rank")

        to_list = SystemConstantsService._choices_to_list

        return {
            "system_roles": to_list(SystemRole),
            "officer_statuses": to_list(OfficerStatus),
            "report_statuses": to_list(ReportStatus),
            "case_statuses": to_list(CaseStatus),
            "attachment_types": to_list(AttachmentType),
            "announcement_priorities": to_list(AnnouncementPriority),
            "quantity_units": to_list(QuantityUnit),
            "template_types": to_list(TemplateType),
            "marker_colors": [
                {"value": name, "hex": hex_value} for name, hex_value in tactical.PALETTE.items()
            ],
            "shape_types": list(tactical.SHAPE_TYPES),
            "map_size": tactical.MAP_SIZE,
            "ranks": list(
                Rank.objects.order_by("-order", "name").values("id", "name", "order", "system_role")
            ),
        }

    @staticmethod
    def _choices_to_list(choices_class: type) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
