"""Kompendium knowledge base: category tree, search and admin-only writes."""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from kompendium.models import CompendiumDoc, normalize_category, split_tags


def _auth(api_client, user):
    from rest_framework_simplejwt.tokens import AccessToken

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")


@pytest.fixture()
def library(create_user):
    author = create_user(role="admin")
    docs = [
        ("Door entry", "Procedures/Raids", "breach, entry"),
        ("Warrant basics", "Procedures", "legal"),
        ("Raiders handbook", "Procedures/Raiders", ""),
        ("Cocaine field test", "Substances", "testing, cocaine"),
    ]
    for title, category, tags in docs:
        CompendiumDoc.objects.create(title=title, category=category, tags=tags, author=author)
    return author


def test_category_and_tag_helpers():
    assert normalize_category(" Procedures / Raids/ ") == "Procedures/Raids"
    assert normalize_category("") == ""
    assert split_tags(" a, ,b ,") == ["a", "b"]


@pytest.mark.django_db
def test_category_filter_includes_subtree_only(api_client, create_user, library):
    _auth(api_client, create_user())

    response = api_client.get(reverse("kompendium-list"), {"category": "Procedures/Raids"})

    assert response.status_code == status.HTTP_200_OK
    assert [row["title"] for row in response.data] == ["Door entry"]

    response = api_client.get(reverse("kompendium-list"), {"category": "Procedures"})
    assert [row["title"] for row in response.data] == ["Warrant basics", "Raiders handbook", "Door entry"]


@pytest.mark.django_db
def test_search_matches_tags_and_body(api_client, create_user, library):
    _auth(api_client, create_user())

    response = api_client.get(reverse("kompendium-list"), {"search": "breach"})

    assert [row["title"] for row in response.data] == ["Door entry"]
    assert response.data[0]["category_path"] == ["Procedures", "Raids"]
    assert response.data[0]["tag_list"] == ["breach", "entry"]


@pytest.mark.django_db
def test_categories_are_distinct_and_refresh_after_write(api_client, library):
    _auth(api_client, library)

    response = api_client.get(reverse("kompendium-categories"))
    assert response.data == ["Procedures", "Procedures/Raiders", "Procedures/Raids", "Substances"]

    created = api_client.post(
        reverse("kompendium-list"),
        {"title": "Evidence bags", "category": " Evidence / Handling ", "tags": "bags ,  chain"},
        format="json",
    )
    assert created.status_code == status.HTTP_201_CREATED, created.data
    assert created.data["category"] == "Evidence/Handling"
    assert created.data["tags"] == "bags, chain"

    response = api_client.get(reverse("kompendium-categories"))
    assert "Evidence/Handling" in response.data


@pytest.mark.django_db
def test_members_read_but_cannot_write(api_client, create_user, library):
    doc = CompendiumDoc.objects.get(title="Door entry")
    _auth(api_client, create_user())

    assert api_client.get(reverse("kompendium-detail", args=[doc.pk])).status_code == 200
    assert api_client.post(reverse("kompendium-list"), {"title": "x"}, format="json").status_code == 403
    assert api_client.patch(reverse("kompendium-detail", args=[doc.pk]), {"title": "y"}, format="json").status_code == 403
    assert api_client.delete(reverse("kompendium-detail", args=[doc.pk])).status_code == 403


@pytest.mark.django_db
def test_admin_updates_and_deletes(api_client, library):
    doc = CompendiumDoc.objects.get(title="Door entry")
    _auth(api_client, library)

    response = api_client.patch(reverse("kompendium-detail", args=[doc.pk]), {"category": "Tactics"}, format="json")
    assert response.status_code == status.HTTP_200_OK, response.data
    assert response.data["title"] == "Door entry"
    assert response.data["category"] == "Tactics"

    assert api_client.delete(reverse("kompendium-detail", args=[doc.pk])).status_code == 204
    assert api_client.get(reverse("kompendium-detail", args=[doc.pk])).status_code == 404
