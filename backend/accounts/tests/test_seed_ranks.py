"""``manage.py seed_ranks``: idempotent rank ladder and optional root account."""

from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.management.commands.seed_ranks import DEFAULT_RANKS, ROOT_BADGE, ROOT_EMAIL
from accounts.models import Rank, SystemRole, User


def _run(**options) -> str:
    out = StringIO()
    call_command("seed_ranks", stdout=out, **options)
    return out.getvalue()


@pytest.mark.django_db
def test_seeds_default_ladder():
    output = _run()

    assert Rank.objects.count() == len(DEFAULT_RANKS)
    assert "5 rank(s) created" in output
    assert Rank.objects.get(name="Chief").system_role == SystemRole.ADMIN


@pytest.mark.django_db
def test_rerun_repairs_drifted_ranks_without_duplicates():
    _run()
    Rank.objects.filter(name="Officer").update(order=1, system_role=SystemRole.GUEST)

    output = _run()

    officer = Rank.objects.get(name="Officer")
    assert Rank.objects.count() == len(DEFAULT_RANKS)
    assert (officer.order, officer.system_role) == (50, SystemRole.MEMBER)
    assert "0 rank(s) created, 1 rank(s) updated" in output


@pytest.mark.django_db
def test_with_root_creates_root_once():
    _run(with_root=True, root_password="Bootstrap!1")
    output = _run(with_root=True, root_password="Bootstrap!1")

    root = User.objects.get(email=ROOT_EMAIL)
    assert root.badge_number == ROOT_BADGE
    assert root.system_role == SystemRole.ROOT
    assert root.check_password("Bootstrap!1")
    assert "already exists" in output


@pytest.mark.django_db
def test_with_root_requires_password():
    with pytest.raises(CommandError):
        _run(with_root=True, root_password=None)
