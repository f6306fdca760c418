"""Announcements: publishing, read receipts and unread counters."""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from announcements.models import Announcement, AnnouncementRead
from core.models import ActivityEntry


def _auth(api_client, user):
    from rest_framework_simplejwt.tokens import AccessToken

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")


@pytest.fixture()
def chief(create_user):
    return create_user(role="admin", first_name="Cora", last_name="Chief")


@pytest.mark.django_db
def test_admin_publishes_and_feed_records_it(api_client, chief):
    _auth(api_client, chief)

    response = api_client.post(
        reverse("announcement-list"),
        {"title": "Briefing moved", "body": "Now at 0800.", "priority": "high"},
        format="json",
    )

    assert response.status_code == status.HTTP_201_CREATED, response.data
    assert response.data["author_name"] == "Cora Chief"
    assert response.data["is_read"] is False
    entry = ActivityEntry.objects.get(event_type="announcement_published")
    assert entry.target_title == "Briefing moved"


@pytest.mark.django_db
def test_member_cannot_publish(api_client, create_user):
    _auth(api_client, create_user())

    response = api_client.post(reverse("announcement-list"), {"title": "x", "body": "y"}, format="json")

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert not Announcement.objects.exists()


@pytest.mark.django_db
def test_pinned_first_then_newest(api_client, create_user, chief):
    older = Announcement.objects.create(title="Older", body=".", author=chief)
    pinned = Announcement.objects.create(title="Pinned", body=".", author=chief, is_pinned=True)
    newer = Announcement.objects.create(title="Newer", body=".", author=chief)
    _auth(api_client, create_user())

    response = api_client.get(reverse("announcement-list"))

    assert [row["id"] for row in response.data] == [pinned.pk, newer.pk, older.pk]


@pytest.mark.django_db
def test_mark_read_is_idempotent_and_updates_counters(api_client, create_user, chief):
    first = Announcement.objects.create(title="One", body=".", author=chief)
    Announcement.objects.create(title="Two", body=".", author=chief)
    officer = create_user()
    _auth(api_client, officer)

    assert api_client.get(reverse("announcement-unread-count")).data == {"unread": 2}

    for _ in range(2):
        response = api_client.post(reverse("announcement-read", args=[first.pk]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_read"] is True
        assert response.data["read_count"] == 1

    assert AnnouncementRead.objects.filter(announcement=first, user=officer).count() == 1
    assert api_client.get(reverse("announcement-unread-count")).data == {"unread": 1}


@pytest.mark.django_db
def test_read_state_is_per_officer(api_client, create_user, chief):
    item = Announcement.objects.create(title="One", body=".", author=chief)
    reader = create_user()
    AnnouncementRead.objects.create(announcement=item, user=reader)
    _auth(api_client, create_user())

    response = api_client.get(reverse("announcement-detail", args=[item.pk]))

    assert response.data["is_read"] is False
    assert response.data["read_count"] == 1


@pytest.mark.django_db
def test_receipts_are_admin_only(api_client, create_user, chief):
    item = Announcement.objects.create(title="One", body=".", author=chief)
    reader = create_user(first_name="Rea", last_name="Der")
    AnnouncementRead.objects.create(announcement=item, user=reader)

    _auth(api_client, reader)
    assert api_client.get(reverse("announcement-receipts", args=[item.pk])).status_code == 403

    _auth(api_client, chief)
    response = api_client.get(reverse("announcement-receipts", args=[item.pk]))
    assert response.status_code == status.HTTP_200_OK
    assert [row["user"]["rp_name"] for row in response.data] == ["Rea Der"]


@pytest.mark.django_db
def test_reading_missing_announcement_is_404(api_client, create_user):
    _auth(api_client, create_user())

    assert api_client.post(reverse("announcement-read", args=[31337])).status_code == 404


@pytest.mark.django_db
def test_admin_deletes(api_client, chief):
    item = Announcement.objects.create(title="One", body=".", author=chief)
    _auth(api_client, chief)

    assert api_client.delete(reverse("announcement-detail", args=[item.pk])).status_code == 204
    assert not Announcement.objects.exists()
