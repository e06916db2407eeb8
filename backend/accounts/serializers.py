"""
Accounts app serializers.

Contains the Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import CasaOrg

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects tenant and role claims (``casa_org``, ``role``) into the
       JWT access token payload.
    """

    # Override the default username field with our multi-field identifier
    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username or email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["casa_org"] = user.casa_org_id
        token["role"] = user.role
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is left on ``self.user`` for the view.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        if not user.is_active:
            raise serializers.ValidationError(
                {"detail": "User account is disabled."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class CasaOrgSerializer(serializers.ModelSerializer):
    """Compact organization representation."""

    class Meta:
        model = CasaOrg
        fields = ["id", "name", "display_name"]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user reference embedded in case and report payloads."""

    display_name = serializers.CharField(source="get_display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "display_name", "email", "role"]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full representation of the current user (login response and
    ``/me/``).  Includes the organization and the supervisor reference
    so the client can render role-dependent navigation.
    """

    casa_org_detail = CasaOrgSerializer(source="casa_org", read_only=True)
    display_name = serializers.CharField(source="get_display_name", read_only=True)
    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "display_name",
            "first_name",
            "last_name",
            "role",
            "role_display",
            "casa_org",
            "casa_org_detail",
            "supervisor",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields
