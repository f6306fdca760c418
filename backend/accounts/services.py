"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the result
wrapped in a DRF ``Response``.

Architecture
------------
- ``RankService``           — rank listing.
- ``OfficerService``        — roster, officer creation, profile + stats,
                              profile updates.
"""

from __future__ import annotations

import logging
from typing import Any

from django.apps import apps
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from core.domain.access import is_admin, is_root, require_admin, require_any
from core.domain.cache import CacheScope, invalidate
from core.domain.exceptions import Conflict, NotFound, PermissionDenied

from .models import OfficerStatus, Rank, SystemRole, default_avatar_url

logger = logging.getLogger(__name__)

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Rank Service
# ═══════════════════════════════════════════════════════════════════


class RankService:

    @staticmethod
    def list_ranks() -> QuerySet[Rank]:
        return Rank.objects.order_by("-order", "name")


# ═══════════════════════════════════════════════════════════════════
#  Officer Service
# ═══════════════════════════════════════════════════════════════════

# Fields a non-admin may change on their own profile.
SELF_EDITABLE_FIELDS = frozenset({
    "phone_number", "avatar_url", "email", "notes", "status",
})

_ROSTER_SORT = {
    "rank": ("rank__order", "rp_name"),
    "name": ("rp_name",),
    "badge": ("badge_number",),
}


def _guard_rank_assignment(actor: User, rank: Rank | None) -> None:
    if rank is not None and rank.system_role == SystemRole.ROOT and not is_root(actor):
        raise PermissionDenied("Only root may assign a root rank.")


class OfficerService:
    """Roster queries and officer record management."""

    @staticmethod
    def list_roster(
        *,
        search: str | None = None,
        status: str | None = None,
        sort: str = "rank",
        order: str | None = None,
    ) -> QuerySet[User]:
        """
        Roster of all officers, visible to any authenticated user.

        ``sort=rank`` defaults to descending (most senior first); ``name``
        and ``badge`` default to ascending.
        """
        qs = User.objects.select_related("rank").filter(is_active=True)

        if search:
            qs = qs.filter(
                Q(rp_name__icontains=search) | Q(badge_number__icontains=search)
            )
        if status:
            qs = qs.filter(status=status)

        fields = _ROSTER_SORT.get(sort, _ROSTER_SORT["rank"])
        if order is None:
            order = "desc" if sort == "rank" else "asc"
        if order == "desc":
            primary = f"-{fields[0]}"
        else:
            primary = fields[0]
        return qs.order_by(primary, *fields[1:], "id")

    @staticmethod
    def get_officer(user_id: int) -> User:
        try:
            return User.objects.select_related("rank").get(pk=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Officer with id {user_id} not found.")

    @staticmethod
    @transaction.atomic
    def create_officer(actor: User, data: dict[str, Any]) -> User:
        """
        Create an officer account (admin only).

        The display name is derived from first + last name and the avatar
        defaults to a generated initials image.

        Raises
        ------
        PermissionDenied
            Caller is not an admin, or a non-root admin assigns a root rank.
        Conflict
            Email, badge number or username already in use.
        """
        require_admin(actor)
        data = dict(data)
        rank = data.get("rank")
        _guard_rank_assignment(actor, rank)

        email = data["email"].strip().lower()
        badge = data["badge_number"]
        username = data.pop("username", None) or email

        conflicts = []
        if User.objects.filter(email__iexact=email).exists():
            conflicts.append("email")
        if User.objects.filter(badge_number=badge).exists():
            conflicts.append("badge_number")
        if User.objects.filter(username=username).exists():
            conflicts.append("username")
        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        password = data.pop("password")
        rp_name = f"{data['first_name']} {data['last_name']}".strip()
        data["email"] = email
        data["rp_name"] = rp_name
        if not data.get("avatar_url"):
            data["avatar_url"] = default_avatar_url(rp_name)

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=username,
                    password=password,
                    **data,
                )
        except IntegrityError:
            raise Conflict("An officer with one of the provided unique fields already exists.")

        invalidate(CacheScope.ROSTER, CacheScope.DASHBOARD)
        logger.info(
            "Officer %s (badge %s) created by %s", user.rp_name, user.badge_number, actor,
        )
        return user

    @staticmethod
    def get_profile(user_id: int) -> dict[str, Any]:
        """
        Officer detail with service-record stats.

        Stats: reports authored, reports co-authored, active cases led
        (anything but closed), closed cases led.
        """
        officer = OfficerService.get_officer(user_id)

        Report = apps.get_model("reports", "Report")
        Case = apps.get_model("cases", "Case")

        led = Case.objects.filter(lead_investigator=officer)
        stats = {
            "reports_authored": Report.objects.filter(author=officer).count(),
            "reports_coauthored": Report.objects.filter(co_authors=officer).count(),
            "active_cases_led": led.exclude(status="closed").count(),
            "closed_cases_led": led.filter(status="closed").count(),
        }
        return {"officer": officer, "stats": stats}

    @staticmethod
    @transaction.atomic
    def update_profile(actor: User, user_id: int, data: dict[str, Any]) -> User:
        """
        Update an officer record.

        Admins may edit every field; when they change first or last name
        the display name is rebuilt as "first last".  Officers editing
        their own profile are restricted to ``SELF_EDITABLE_FIELDS`` and
        may not suspend themselves.  Only root may hand out a root rank.
        """
        officer = OfficerService.get_officer(user_id)
        admin = is_admin(actor)
        require_any(actor, admin, officer.pk == actor.pk)

        if not admin:
            forbidden = set(data) - SELF_EDITABLE_FIELDS
            if forbidden:
                raise PermissionDenied(
                    f"You may not change: {', '.join(sorted(forbidden))}."
                )
            if data.get("status") == OfficerStatus.SUSPENDED:
                raise PermissionDenied("Only administrators may suspend an officer.")

        if "rank" in data:
            _guard_rank_assignment(actor, data["rank"])

        if "email" in data:
            data["email"] = data["email"].strip().lower()
            if User.objects.exclude(pk=officer.pk).filter(email__iexact=data["email"]).exists():
                raise Conflict("This email is already in use by another account.")
        if "badge_number" in data:
            if User.objects.exclude(pk=officer.pk).filter(badge_number=data["badge_number"]).exists():
                raise Conflict("This badge number is already in use by another officer.")

        for field, value in data.items():
            setattr(officer, field, value)

        if admin and ("first_name" in data or "last_name" in data):
            officer.rp_name = f"{officer.first_name} {officer.last_name}".strip()

        officer.save()
        invalidate(CacheScope.ROSTER, CacheScope.DASHBOARD)
        logger.info(
            "Officer %s updated by %s (fields: %s)",
            officer.pk, actor, ", ".join(sorted(data)),
        )
        return officer
