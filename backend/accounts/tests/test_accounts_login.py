"""
Integration tests — login by username or email, and the current-user
profile.

Endpoints under test:
    POST /api/accounts/auth/login/   (accounts:login)
    GET  /api/accounts/me/           (accounts:me)

Success response: HTTP 200 with {"access", "refresh", "user": {...}}.
Failure response: HTTP 400 from CustomTokenObtainPairSerializer.validate.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import CasaOrg, CasaRole

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestLogin(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.org = CasaOrg.objects.create(name="Howard County CASA")
        cls.user = User.objects.create_user(
            username="sup_login",
            email="sup.login@example.com",
            password=_PASSWORD,
            role=CasaRole.SUPERVISOR,
            casa_org=cls.org,
            display_name="Sue Pervisor",
        )

    def setUp(self):
        self.client = APIClient()
        self.login_url = reverse("accounts:login")

    def _post_login(self, identifier: str, password: str):
        return self.client.post(
            self.login_url,
            {"identifier": identifier, "password": password},
            format="json",
        )

    def test_login_with_username(self):
        resp = self._post_login("sup_login", _PASSWORD)

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)
        self.assertEqual(resp.data["user"]["role"], CasaRole.SUPERVISOR)
        self.assertEqual(resp.data["user"]["casa_org"], self.org.pk)

    def test_login_with_email_is_case_insensitive(self):
        resp = self._post_login("Sup.Login@Example.com", _PASSWORD)

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertEqual(resp.data["user"]["id"], self.user.pk)

    def test_access_token_carries_org_and_role(self):
        resp = self._post_login("sup_login", _PASSWORD)

        token = AccessToken(resp.data["access"])
        self.assertEqual(token["casa_org"], self.org.pk)
        self.assertEqual(token["role"], CasaRole.SUPERVISOR)

    def test_wrong_password_is_rejected(self):
        resp = self._post_login("sup_login", "wrong")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn("access", resp.data)

    def test_unknown_identifier_is_rejected(self):
        resp = self._post_login("nobody", _PASSWORD)

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_user_is_rejected(self):
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])

        resp = self._post_login("sup_login", _PASSWORD)

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class TestMe(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.org = CasaOrg.objects.create(name="Frederick CASA")
        cls.user = User.objects.create_user(
            username="vol_me",
            email="vol.me@example.com",
            password=_PASSWORD,
            casa_org=cls.org,
        )

    def setUp(self):
        self.client = APIClient()

    def test_me_returns_profile_for_bearer_token(self):
        login = self.client.post(
            reverse("accounts:login"),
            {"identifier": "vol_me", "password": _PASSWORD},
            format="json",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        resp = self.client.get(reverse("accounts:me"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["username"], "vol_me")
        self.assertEqual(resp.data["role"], CasaRole.VOLUNTEER)
        self.assertEqual(resp.data["casa_org_detail"]["name"], "Frederick CASA")
        self.assertEqual(resp.data["display_name"], "vol_me")

    def test_me_requires_authentication(self):
        resp = self.client.get(reverse("accounts:me"))

        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
