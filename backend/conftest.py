"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``ranks`` fixture seeding the default rank ladder.
  - ``create_user`` factory fixture for creating officers.
  - ``auth_header`` fixture for authenticated requests (JWT).
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _clear_cache():
    """Cached read models must not leak between tests."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def ranks(db) -> dict:
    """
    The default rank ladder keyed by system role::

        {"root": <Rank Root>, "admin": <Rank Chief>, "moderator": ...,
         "member": <Rank Officer>, "guest": <Rank Recruit>}
    """
    from accounts.management.commands.seed_ranks import DEFAULT_RANKS
    from accounts.models import Rank

    ladder = {}
    for name, order, system_role in DEFAULT_RANKS:
        rank, _ = Rank.objects.get_or_create(
            name=name, defaults={"order": order, "system_role": system_role},
        )
        ladder[system_role] = rank
    return ladder


@pytest.fixture()
def create_user(db, ranks):
    """
    Factory fixture that creates an officer with sensible defaults.

    Usage::

        def test_something(create_user):
            officer = create_user()                    # Officer rank (member)
            chief = create_user(role="admin")          # Chief rank
            recruit = create_user(username="kim", role="guest")
    """
    from accounts.models import User

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        badge_number: str | None = None,
        role: str | None = "member",
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"officer{_counter}"
        if email is None:
            email = f"{username}@narcotic.test"
        if badge_number is None:
            badge_number = f"B{_counter:04d}"
        kwargs.setdefault("first_name", "Test")
        kwargs.setdefault("last_name", f"Officer{_counter}")

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            badge_number=badge_number,
            rank=ranks[role] if role else None,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper that creates an officer and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(role="admin")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/dashboard/")
            assert resp.status_code == 200
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(*, role: str | None = "member", **user_kwargs) -> dict[str, str]:
        user = create_user(role=role, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
