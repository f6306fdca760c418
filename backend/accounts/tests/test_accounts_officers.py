"""
Officer roster, creation, profiles and rank guards.

Endpoints under test
--------------------
GET   /api/accounts/officers/           roster (search / status / sort / order)
POST  /api/accounts/officers/           admin creates an officer
GET   /api/accounts/officers/{id}/      profile + service-record stats
PATCH /api/accounts/officers/{id}/      admin edit / restricted self edit
GET   /api/accounts/ranks/
"""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from cases.models import Case, CaseStatus
from reports.models import Report


def _auth(api_client, user):
    from rest_framework_simplejwt.tokens import AccessToken

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")


def _create_payload(ranks, **overrides):
    payload = {
        "email": "new.officer@narcotic.test",
        "password": "Sup3rSecret!",
        "first_name": "New",
        "last_name": "Officer",
        "badge_number": "1234",
        "rank_id": ranks["member"].pk,
    }
    payload.update(overrides)
    return payload


# ── Creation ─────────────────────────────────────────────────────────


@pytest.mark.django_db
def test_admin_creates_officer_with_derived_display_name(api_client, create_user, ranks):
    _auth(api_client, create_user(role="admin"))

    response = api_client.post(reverse("accounts:officer-list"), _create_payload(ranks), format="json")

    assert response.status_code == status.HTTP_201_CREATED, response.data
    assert response.data["rp_name"] == "New Officer"
    assert response.data["username"] == "new.officer@narcotic.test"
    assert response.data["avatar_url"].startswith("https://ui-avatars.com/api/?name=New+Officer")
    assert response.data["rank"]["system_role"] == "member"


@pytest.mark.django_db
def test_member_cannot_create_officer(api_client, create_user, ranks):
    _auth(api_client, create_user(role="member"))

    response = api_client.post(reverse("accounts:officer-list"), _create_payload(ranks), format="json")

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_duplicate_badge_is_a_conflict(api_client, create_user, ranks):
    create_user(badge_number="1234")
    _auth(api_client, create_user(role="admin"))

    response = api_client.post(reverse("accounts:officer-list"), _create_payload(ranks), format="json")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert "badge_number" in response.data["detail"]


@pytest.mark.django_db
def test_admin_cannot_hand_out_root_rank(api_client, create_user, ranks):
    _auth(api_client, create_user(role="admin"))

    response = api_client.post(
        reverse("accounts:officer-list"),
        _create_payload(ranks, rank_id=ranks["root"].pk),
        format="json",
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_root_can_hand_out_root_rank(api_client, create_user, ranks):
    _auth(api_client, create_user(role="root"))

    response = api_client.post(
        reverse("accounts:officer-list"),
        _create_payload(ranks, rank_id=ranks["root"].pk),
        format="json",
    )

    assert response.status_code == status.HTTP_201_CREATED, response.data


# ── Roster ───────────────────────────────────────────────────────────


@pytest.mark.django_db
def test_roster_defaults_to_most_senior_first(api_client, create_user):
    recruit = create_user(role="guest", first_name="Rita", last_name="Recruit")
    chief = create_user(role="admin", first_name="Carl", last_name="Chief")
    officer = create_user(role="member", first_name="Olga", last_name="Officer")
    _auth(api_client, officer)

    response = api_client.get(reverse("accounts:officer-list"))

    assert response.status_code == status.HTTP_200_OK
    ids = [row["id"] for row in response.data]
    assert ids == [chief.pk, officer.pk, recruit.pk]


@pytest.mark.django_db
def test_roster_search_and_name_sort(api_client, create_user):
    create_user(first_name="Zed", last_name="Walker", badge_number="900")
    create_user(first_name="Amy", last_name="Walker", badge_number="901")
    create_user(first_name="Bob", last_name="Other", badge_number="777")
    viewer = create_user(first_name="View", last_name="Er")
    _auth(api_client, viewer)

    response = api_client.get(reverse("accounts:officer-list"), {"search": "walker", "sort": "name"})

    assert [row["rp_name"] for row in response.data] == ["Amy Walker", "Zed Walker"]

    response = api_client.get(reverse("accounts:officer-list"), {"search": "90", "sort": "badge", "order": "desc"})
    assert [row["badge_number"] for row in response.data] == ["901", "900"]


@pytest.mark.django_db
def test_rank_list_is_ordered_by_seniority(api_client, create_user):
    _auth(api_client, create_user())

    response = api_client.get(reverse("accounts:rank-list"))

    assert [row["name"] for row in response.data] == ["Root", "Chief", "Lieutenant", "Officer", "Recruit"]


# ── Profile ──────────────────────────────────────────────────────────


@pytest.mark.django_db
def test_profile_counts_service_record(api_client, create_user):
    officer = create_user()
    other = create_user()
    Report.objects.create(title="Own", author=officer)
    shared = Report.objects.create(title="Shared", author=other)
    shared.co_authors.add(officer)
    Case.objects.create(title="Open", reporting_officer=other, lead_investigator=officer, status=CaseStatus.IN_PROGRESS)
    Case.objects.create(title="Done", reporting_officer=other, lead_investigator=officer, status=CaseStatus.CLOSED)
    _auth(api_client, other)

    response = api_client.get(reverse("accounts:officer-detail", args=[officer.pk]))

    assert response.status_code == status.HTTP_200_OK
    assert response.data["stats"] == {
        "reports_authored": 1,
        "reports_coauthored": 1,
        "active_cases_led": 1,
        "closed_cases_led": 1,
    }


@pytest.mark.django_db
def test_unknown_officer_is_404(api_client, create_user):
    _auth(api_client, create_user())

    response = api_client.get(reverse("accounts:officer-detail", args=[999999]))

    assert response.status_code == status.HTTP_404_NOT_FOUND


# ── Updates ──────────────────────────────────────────────────────────


@pytest.mark.django_db
def test_officer_edits_own_contact_fields(api_client, create_user):
    officer = create_user()
    _auth(api_client, officer)

    response = api_client.patch(
        reverse("accounts:officer-detail", args=[officer.pk]),
        {"phone_number": "555-0101", "status": "leave"},
        format="json",
    )

    assert response.status_code == status.HTTP_200_OK, response.data
    assert response.data["phone_number"] == "555-0101"
    assert response.data["status"] == "leave"


@pytest.mark.django_db
def test_officer_cannot_change_own_rank_or_suspend_self(api_client, create_user, ranks):
    officer = create_user()
    _auth(api_client, officer)
    url = reverse("accounts:officer-detail", args=[officer.pk])

    assert api_client.patch(url, {"rank_id": ranks["admin"].pk}, format="json").status_code == 403
    assert api_client.patch(url, {"status": "suspended"}, format="json").status_code == 403


@pytest.mark.django_db
def test_officer_cannot_edit_someone_else(api_client, create_user):
    officer = create_user()
    other = create_user()
    _auth(api_client, officer)

    response = api_client.patch(
        reverse("accounts:officer-detail", args=[other.pk]),
        {"notes": "hello"},
        format="json",
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_admin_name_change_rebuilds_display_name(api_client, create_user):
    officer = create_user(first_name="Old", last_name="Name")
    _auth(api_client, create_user(role="admin"))

    response = api_client.patch(
        reverse("accounts:officer-detail", args=[officer.pk]),
        {"first_name": "New", "status": "suspended"},
        format="json",
    )

    assert response.status_code == status.HTTP_200_OK, response.data
    assert response.data["rp_name"] == "New Name"
    assert response.data["status"] == "suspended"


@pytest.mark.django_db
def test_email_taken_by_another_officer_is_a_conflict(api_client, create_user):
    create_user(email="taken@narcotic.test")
    officer = create_user()
    _auth(api_client, officer)

    response = api_client.patch(
        reverse("accounts:officer-detail", args=[officer.pk]),
        {"email": "TAKEN@narcotic.test"},
        format="json",
    )

    assert response.status_code == status.HTTP_409_CONFLICT
