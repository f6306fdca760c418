"""
Accounts app models.

Defines the rank hierarchy and a custom User model that extends Django's
``AbstractUser``.  Every officer holds exactly one ``Rank``; the rank's
``system_role`` (not its display name) drives authorization throughout the
service layers.  Login is supported via email, badge number or username.
"""

from urllib.parse import quote_plus

from django.contrib.auth.models import AbstractUser
from django.db import models


class SystemRole(models.TextChoices):
    ROOT = "root", "Root"
    ADMIN = "admin", "Admin"
    MODERATOR = "moderator", "Moderator"
    MEMBER = "member", "Member"
    GUEST = "guest", "Guest"


class OfficerStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    LEAVE = "leave", "Leave"
    REST = "rest", "Rest"
    SUSPENDED = "suspended", "Suspended"


class Rank(models.Model):
    """
    Admin-manageable police rank.

    ``order`` encodes the relative seniority within the unit (higher value
    = more senior) and is used for roster sorting.  ``system_role`` is the
    authorization tier the rank grants.

    Default ranks seeded via ``manage.py seed_ranks``:
        Root, Chief, Lieutenant, Officer, Recruit.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Rank Name",
    )
    order = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Order",
        help_text="Higher value = more seniority (e.g. Chief=90, Recruit=10).",
    )
    system_role = models.CharField(
        max_length=16,
        choices=SystemRole.choices,
        default=SystemRole.MEMBER,
        verbose_name="System Role",
    )

    class Meta:
        verbose_name = "Rank"
        verbose_name_plural = "Ranks"
        ordering = ["-order"]

    def __str__(self):
        return self.name


def default_avatar_url(rp_name: str) -> str:
    return (
        "https://ui-avatars.com/api/"
        f"?name={quote_plus(rp_name)}&background=0D8ABC&color=fff"
    )


class User(AbstractUser):
    """
    Custom user model representing a narcotics-unit officer.

    ``rp_name`` is the officer's display name ("first last") and is what
    every list, feed and PDF shows.  ``badge_number`` is unique and can be
    used as a login identifier alongside email and username.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    rp_name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        verbose_name="Display Name",
    )
    badge_number = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="Badge Number",
        db_index=True,
    )
    phone_number = models.CharField(
        max_length=32,
        blank=True,
        default="",
        verbose_name="Phone Number",
    )
    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        verbose_name="Avatar URL",
    )
    rank = models.ForeignKey(
        Rank,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="officers",
        verbose_name="Rank",
    )
    status = models.CharField(
        max_length=16,
        choices=OfficerStatus.choices,
        default=OfficerStatus.ACTIVE,
        verbose_name="Duty Status",
        db_index=True,
    )
    unit_assignment = models.CharField(
        max_length=100,
        blank=True,
        default="",
        verbose_name="Unit Assignment",
    )
    notes = models.TextField(
        blank=True,
        default="",
        verbose_name="Notes",
    )

    # Fields required when creating a superuser via CLI
    REQUIRED_FIELDS = ["email", "badge_number", "first_name", "last_name"]

    class Meta:
        verbose_name = "Officer"
        verbose_name_plural = "Officers"

    def __str__(self):
        rank_name = self.rank.name if self.rank else "Unranked"
        return f"{self.display_name} #{self.badge_number} ({rank_name})"

    def save(self, *args, **kwargs):
        if not self.rp_name:
            self.rp_name = f"{self.first_name} {self.last_name}".strip() or self.username
        if not self.avatar_url:
            self.avatar_url = default_avatar_url(self.rp_name)
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.rp_name or self.get_full_name() or self.username

    @property
    def system_role(self) -> str | None:
        if self.is_superuser:
            return SystemRole.ROOT
        return self.rank.system_role if self.rank else None
