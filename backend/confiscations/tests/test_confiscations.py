"""
Confiscation logging, unit conversion, registry checks, report links and
seizure totals.
"""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from confiscations.models import Confiscation, to_grams
from confiscations.services import SeizureStatsService
from registries.models import DrugType
from reports.models import Report


def _auth(api_client, user):
    from rest_framework_simplejwt.tokens import AccessToken

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")


@pytest.fixture()
def officer(api_client, create_user):
    user = create_user(first_name="Sid", last_name="Seizer")
    _auth(api_client, user)
    return user


def _log(api_client, **payload):
    payload.setdefault("drug_type", "Cocaine")
    payload.setdefault("quantity", 100)
    return api_client.post(reverse("confiscation-list"), payload, format="json")


@pytest.mark.parametrize(
    "quantity, unit, grams",
    [(5, "g", 5), (1.5, "kg", 1500), (2, "oz", 56.699), (1, "lbs", 453.592)],
)
def test_to_grams(quantity, unit, grams):
    assert to_grams(quantity, unit) == pytest.approx(grams)


@pytest.mark.django_db
def test_log_converts_to_grams(api_client, officer):
    response = _log(api_client, citizen_name="Carl Citizen", quantity=2, unit="kg")

    assert response.status_code == status.HTTP_201_CREATED, response.data
    assert response.data["quantity"] == pytest.approx(2000)
    assert response.data["officer_name"] == "Sid Seizer"
    assert response.data["report"] is None


@pytest.mark.django_db
@pytest.mark.parametrize("payload", [{"quantity": 0}, {"quantity": -3}, {"drug_type": "   "}, {"unit": "ton"}])
def test_invalid_entries_are_rejected(api_client, officer, payload):
    assert _log(api_client, **payload).status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
def test_registry_is_enforced_once_populated(api_client, officer):
    assert _log(api_client, drug_type="Anything goes").status_code == status.HTTP_201_CREATED

    DrugType.objects.create(name="Heroin")

    unknown = _log(api_client, drug_type="Anything goes")
    known = _log(api_client, drug_type="heroin")
    assert unknown.status_code == status.HTTP_400_BAD_REQUEST
    assert known.status_code == status.HTTP_201_CREATED
    assert known.data["drug_type"] == "Heroin"


@pytest.mark.django_db
def test_list_filters(api_client, officer, create_user):
    other = create_user()
    Confiscation.objects.create(drug_type="Cocaine", quantity=10, officer=officer)
    Confiscation.objects.create(drug_type="Heroin", quantity=10, officer=other)

    by_officer = api_client.get(reverse("confiscation-list"), {"officer": other.pk})
    by_drug = api_client.get(reverse("confiscation-list"), {"drug_type": "cocaine"})

    assert [row["drug_type"] for row in by_officer.data] == ["Heroin"]
    assert [row["officer"] for row in by_drug.data] == [officer.pk]


@pytest.mark.django_db
def test_unlinked_search(api_client, officer):
    report = Report.objects.create(title="Linked", author=officer)
    Confiscation.objects.create(citizen_name="Dana Dealer", drug_type="Meth", quantity=5, officer=officer)
    Confiscation.objects.create(citizen_name="Dana Linked", drug_type="Meth", quantity=5, officer=officer, report=report)
    Confiscation.objects.create(citizen_name="Other", drug_type="Cocaine", quantity=5, officer=officer)

    response = api_client.get(reverse("confiscation-unlinked"), {"q": "dana"})

    assert [row["citizen_name"] for row in response.data] == ["Dana Dealer"]


@pytest.mark.django_db
def test_unlinked_search_is_capped(api_client, officer):
    for i in range(12):
        Confiscation.objects.create(citizen_name=f"Citizen {i}", drug_type="Meth", quantity=1, officer=officer)

    response = api_client.get(reverse("confiscation-unlinked"))

    assert len(response.data) == 10


@pytest.mark.django_db
def test_unlink_by_logging_officer(api_client, officer, create_user):
    report = Report.objects.create(title="Linked", author=officer)
    entry = Confiscation.objects.create(drug_type="Meth", quantity=5, officer=officer, report=report)

    response = api_client.post(reverse("confiscation-unlink", args=[entry.pk]))

    assert response.status_code == status.HTTP_200_OK
    entry.refresh_from_db()
    assert entry.report is None


@pytest.mark.django_db
def test_delete_permissions(api_client, officer, create_user):
    entry = Confiscation.objects.create(drug_type="Meth", quantity=5, officer=create_user())

    assert api_client.delete(reverse("confiscation-detail", args=[entry.pk])).status_code == 403

    _auth(api_client, create_user(role="admin"))
    assert api_client.delete(reverse("confiscation-detail", args=[entry.pk])).status_code == 204
    assert not Confiscation.objects.filter(pk=entry.pk).exists()


@pytest.mark.django_db
def test_unknown_confiscation_is_404(api_client, officer):
    assert api_client.get(reverse("confiscation-detail", args=[424242])).status_code == 404


@pytest.mark.django_db
def test_stats_in_kilograms_and_invalidated_on_write(api_client, officer, create_user):
    Confiscation.objects.create(drug_type="Meth", quantity=1500, officer=officer)
    Confiscation.objects.create(drug_type="Meth", quantity=500, officer=create_user())

    response = api_client.get(reverse("confiscation-stats"))
    assert response.data == {"total_kg": 2.0, "user_kg": 1.5}

    _log(api_client, quantity=1, unit="kg")

    assert SeizureStatsService.seizure_stats(officer) == {"total_kg": 3.0, "user_kg": 2.5}
