"""
Integration tests — login with email, badge number or username.

Endpoint under test:  POST /api/accounts/auth/login/
                      (named URL: accounts:login)
Request payload:      {"identifier": "<email|badge|username>", "password": "..."}
Success response:     HTTP 200 with {"access", "refresh", "user"}
Failure response:     HTTP 400 for unknown identifiers, wrong passwords and
                      disabled accounts.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Rank, SystemRole

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestLoginIdentifiers(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.rank = Rank.objects.create(name="Officer", order=50, system_role=SystemRole.MEMBER)
        cls.user = User.objects.create_user(
            username="jdoe",
            password=_PASSWORD,
            email="jane.doe@narcotic.test",
            badge_number="4711",
            first_name="Jane",
            last_name="Doe",
            rank=cls.rank,
        )

    def setUp(self):
        self.client = APIClient()
        self.login_url = reverse("accounts:login")
        self.me_url = reverse("accounts:me")

    def _post_login(self, identifier: str, password: str = _PASSWORD):
        return self.client.post(
            self.login_url,
            {"identifier": identifier, "password": password},
            format="json",
        )

    def _assert_token_payload(self, response):
        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["user"]["id"], self.user.pk)
        self.assertEqual(response.data["user"]["rp_name"], "Jane Doe")
        self.assertEqual(response.data["user"]["system_role"], SystemRole.MEMBER)
        self.assertFalse(response.data["user"]["is_admin"])

    def test_login_with_email(self):
        self._assert_token_payload(self._post_login("jane.doe@narcotic.test"))

    def test_login_with_email_is_case_insensitive(self):
        self._assert_token_payload(self._post_login("Jane.Doe@Narcotic.Test"))

    def test_login_with_badge_number(self):
        self._assert_token_payload(self._post_login("4711"))

    def test_login_with_username(self):
        self._assert_token_payload(self._post_login("jdoe"))

    def test_wrong_password_is_rejected(self):
        response = self._post_login("jdoe", "not-the-password")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn("access", response.data)

    def test_unknown_identifier_is_rejected(self):
        response = self._post_login("nobody@narcotic.test")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_disabled_account_cannot_log_in(self):
        User.objects.filter(pk=self.user.pk).update(is_active=False)
        response = self._post_login("jdoe")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_returns_current_officer(self):
        token = self._post_login("jdoe").data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["badge_number"], "4711")
        self.assertEqual(response.data["rank"]["name"], "Officer")

    def test_me_requires_authentication(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_default_avatar_is_derived_from_display_name(self):
        self.assertTrue(self.user.avatar_url.startswith("https://ui-avatars.com/api/?name=Jane+Doe"))
