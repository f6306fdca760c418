"""
Management command: seed_ranks
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the database with the unit's base **Ranks** and, optionally, the
root account used to bootstrap a fresh install.

The command is **idempotent** — safe to run multiple times.  Existing
ranks are updated to match the table below; an existing root account is
left untouched.

Usage::

    python manage.py seed_ranks
    python manage.py seed_ranks --with-root --root-password 's3cret!'
"""

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.models import Rank, SystemRole

# (name, order, system_role)
DEFAULT_RANKS: list[tuple[str, int, str]] = [
    ("Root", 100, SystemRole.ROOT),
    ("Chief", 90, SystemRole.ADMIN),
    ("Lieutenant", 70, SystemRole.MODERATOR),
    ("Officer", 50, SystemRole.MEMBER),
    ("Recruit", 10, SystemRole.GUEST),
]

ROOT_EMAIL = "root@narcotic.div"
ROOT_BADGE = "000"


class Command(BaseCommand):
    help = "Seed default ranks (and optionally the root account)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--with-root",
            action="store_true",
            help=f"Also create the root account ({ROOT_EMAIL}, badge {ROOT_BADGE}).",
        )
        parser.add_argument(
            "--root-password",
            default=os.environ.get("ROOT_PASSWORD"),
            help="Password for the root account (defaults to $ROOT_PASSWORD).",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  Rank Setup — Seeding Ranks"
            "\n══════════════════════════════════════════\n"
        ))

        created_count = 0
        updated_count = 0

        for name, order, system_role in DEFAULT_RANKS:
            rank, created = Rank.objects.get_or_create(
                name=name,
                defaults={"order": order, "system_role": system_role},
            )
            if created:
                created_count += 1
            elif rank.order != order or rank.system_role != system_role:
                rank.order = order
                rank.system_role = system_role
                rank.save(update_fields=["order", "system_role"])
                updated_count += 1

            action = "Created" if created else "Checked"
            self.stdout.write(self.style.SUCCESS(
                f"  ✔  {action} rank: {name:<12s} (order={order}, role={system_role})"
            ))

        if options["with_root"]:
            self._seed_root(options["root_password"])

        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n──────────────────────────────────────────"
        ))
        self.stdout.write(self.style.SUCCESS(
            f"  Done!  {created_count} rank(s) created, {updated_count} rank(s) updated.\n"
        ))

    def _seed_root(self, password: str | None) -> None:
        User = get_user_model()
        if User.objects.filter(email=ROOT_EMAIL).exists():
            self.stdout.write(f"  ·  Root account {ROOT_EMAIL} already exists.")
            return
        if not password:
            raise CommandError("--root-password (or $ROOT_PASSWORD) is required with --with-root.")

        User.objects.create_user(
            username="root",
            email=ROOT_EMAIL,
            password=password,
            rp_name="System Administrator",
            badge_number=ROOT_BADGE,
            phone_number="555-0000",
            rank=Rank.objects.get(name="Root"),
        )
        self.stdout.write(self.style.SUCCESS(f"  ✔  Created root account {ROOT_EMAIL}"))
