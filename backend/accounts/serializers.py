"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — rank and
ownership rules are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import OfficerStatus, Rank

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via ``BadgeOrEmailAuthBackend``.
    3. Injects rank claims (``rank``, ``system_role``) into the token.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Email, badge number or username.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["rank"] = user.rank.name if user.rank else None
        token["system_role"] = user.system_role
        token["badge_number"] = user.badge_number
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
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
#  Rank Serializers
# ═══════════════════════════════════════════════════════════════════


class RankSerializer(serializers.ModelSerializer):
    class Meta:
        model = Rank
        fields = ["id", "name", "order", "system_role"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Officer Serializers
# ═══════════════════════════════════════════════════════════════════


class OfficerSummarySerializer(serializers.ModelSerializer):
    """Compact officer reference nested inside reports, cases and feeds."""

    rank_name = serializers.CharField(source="rank.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = ["id", "rp_name", "badge_number", "avatar_url", "rank_name"]
        read_only_fields = fields


class OfficerListSerializer(serializers.ModelSerializer):
    """Roster row."""

    rank = RankSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "rp_name",
            "badge_number",
            "email",
            "avatar_url",
            "rank",
            "status",
            "unit_assignment",
        ]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full officer representation (used in login, me, and profile
    responses).  ``system_role`` and ``is_admin`` let the frontend decide
    which controls to render without decoding the token.
    """

    rank = RankSerializer(read_only=True)
    system_role = serializers.CharField(read_only=True)
    is_admin = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "rp_name",
            "first_name",
            "last_name",
            "badge_number",
            "phone_number",
            "avatar_url",
            "rank",
            "system_role",
            "is_admin",
            "status",
            "unit_assignment",
            "notes",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields

    def get_is_admin(self, obj) -> bool:
        from core.domain.access import is_admin

        return is_admin(obj)


class OfficerProfileSerializer(serializers.Serializer):
    """Officer detail plus service-record stats."""

    officer = UserDetailSerializer(read_only=True)
    stats = serializers.DictField(child=serializers.IntegerField(), read_only=True)


class RosterFilterSerializer(serializers.Serializer):
    SORT_CHOICES = ("rank", "name", "badge")

    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=OfficerStatus.choices, required=False)
    sort = serializers.ChoiceField(choices=SORT_CHOICES, required=False, default="rank")
    order = serializers.ChoiceField(choices=("asc", "desc"), required=False)


class OfficerCreateSerializer(serializers.Serializer):
    """
    Admin-only officer creation payload.

    ``username`` defaults to the email address when omitted.
    """

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
    )
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    badge_number = serializers.CharField(max_length=20)
    username = serializers.CharField(max_length=150, required=False)
    rank_id = serializers.PrimaryKeyRelatedField(
        queryset=Rank.objects.all(), source="rank",
    )
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    avatar_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=OfficerStatus.choices, required=False)
    unit_assignment = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_badge_number(self, value: str) -> str:
        return value.strip()


class OfficerUpdateSerializer(serializers.Serializer):
    """
    Partial profile update.  Which fields a caller may actually change is
    decided by ``OfficerService.update_profile``.
    """

    first_name = serializers.CharField(max_length=150, required=False)
    last_name = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    badge_number = serializers.CharField(max_length=20, required=False)
    rank_id = serializers.PrimaryKeyRelatedField(
        queryset=Rank.objects.all(), source="rank", required=False,
    )
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    avatar_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=OfficerStatus.choices, required=False)
    unit_assignment = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
