"""Drug-type registry and document templates."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import Rank, SystemRole
from registries.models import DocumentTemplate, DrugType, TemplateType

User = get_user_model()


class RegistryTestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        admin_rank = Rank.objects.create(name="Chief", order=90, system_role=SystemRole.ADMIN)
        member_rank = Rank.objects.create(name="Officer", order=50, system_role=SystemRole.MEMBER)
        cls.admin = User.objects.create_user(
            username="admin", password="x", email="admin@narcotic.test",
            badge_number="1", first_name="Ada", last_name="Admin", rank=admin_rank,
        )
        cls.member = User.objects.create_user(
            username="member", password="x", email="member@narcotic.test",
            badge_number="2", first_name="Max", last_name="Member", rank=member_rank,
        )

    def setUp(self):
        self.client = APIClient()

    def authenticate(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")


class TestDrugTypes(RegistryTestBase):

    def test_list_is_alphabetical_for_everyone(self):
        DrugType.objects.create(name="Meth")
        DrugType.objects.create(name="Cocaine")
        self.authenticate(self.member)

        response = self.client.get(reverse("drug-type-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["name"] for row in response.data], ["Cocaine", "Meth"])

    def test_admin_creates_and_deletes(self):
        self.authenticate(self.admin)

        response = self.client.post(reverse("drug-type-list"), {"name": "  LSD "}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)
        self.assertEqual(response.data["name"], "LSD")

        response = self.client.delete(reverse("drug-type-detail", args=[response.data["id"]]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DrugType.objects.exists())

    def test_case_insensitive_duplicate_is_a_conflict(self):
        DrugType.objects.create(name="Heroin")
        self.authenticate(self.admin)

        response = self.client.post(reverse("drug-type-list"), {"name": "heroin"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_member_cannot_create(self):
        self.authenticate(self.member)

        response = self.client.post(reverse("drug-type-list"), {"name": "LSD"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(DrugType.objects.exists())


class TestTemplates(RegistryTestBase):

    def test_filter_by_type(self):
        DocumentTemplate.objects.create(name="Raid report", type=TemplateType.REPORT)
        DocumentTemplate.objects.create(name="Case opener", type=TemplateType.CASE)
        self.authenticate(self.member)

        response = self.client.get(reverse("template-list"), {"type": "case"})

        self.assertEqual([row["name"] for row in response.data], ["Case opener"])

    def test_admin_crud(self):
        self.authenticate(self.admin)

        created = self.client.post(
            reverse("template-list"),
            {"name": "Article", "type": "kompendium", "content": "<h1>Title</h1>"},
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, msg=created.data)
        self.assertEqual(created.data["type_display"], "Kompendium")
        url = reverse("template-detail", args=[created.data["id"]])

        updated = self.client.patch(url, {"description": "Standard layout"}, format="json")
        self.assertEqual(updated.status_code, status.HTTP_200_OK, msg=updated.data)
        self.assertEqual(updated.data["description"], "Standard layout")
        self.assertEqual(updated.data["content"], "<h1>Title</h1>")

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

    def test_member_cannot_edit(self):
        template = DocumentTemplate.objects.create(name="Raid report")
        self.authenticate(self.member)

        response = self.client.patch(
            reverse("template-detail", args=[template.pk]), {"name": "Hijacked"}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_template_is_404(self):
        self.authenticate(self.member)

        self.assertEqual(self.client.get(reverse("template-detail", args=[9999])).status_code, 404)
