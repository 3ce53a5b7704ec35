"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

import re
from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from core.constants import ALL_CATEGORIES, Area, Category

User = get_user_model()

_PHONE_RE = re.compile(r"^\+?\d{7,15}$")

CATEGORY_SCOPE_CHOICES = [(ALL_CATEGORIES, "All Categories")] + list(Category.choices)


def _validate_phone(value: str) -> str:
    value = value.strip()
    if not _PHONE_RE.match(value):
        raise serializers.ValidationError(
            "Phone number must contain 7 to 15 digits (e.g. 01012345678)."
        )
    return value


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.ModelSerializer):
    """
    Validates citizen self-registration data.

    Required fields: full_name, phone_number, password, password_confirm.
    Location fields are optional and become the default location of
    the citizen's complaints.

    The ``password`` field is write-only and will be hashed by the
    service layer before persisting.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=4,
        style={"input_type": "password"},
        help_text="Minimum 4 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )
    area = serializers.ChoiceField(
        choices=Area.choices,
        required=False,
        allow_blank=True,
    )

    class Meta:
        model = User
        fields = [
            "full_name",
            "phone_number",
            "password",
            "password_confirm",
            "national_id",
            "province",
            "city",
            "area",
            "address",
        ]
        extra_kwargs = {
            "full_name": {"required": True},
            "phone_number": {"required": True, "validators": []},
        }

    def validate_phone_number(self, value: str) -> str:
        return _validate_phone(value)

    def validate_national_id(self, value: str) -> str:
        if value and (not value.isdigit() or len(value) != 14):
            raise serializers.ValidationError("National ID must be exactly 14 digits.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """Ensure password and password_confirm match."""
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )
        attrs.pop("password_confirm")
        return attrs


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects ``role`` and ``category_scope`` claims into the token.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Phone number or username.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role"] = user.role
        token["category_scope"] = list(user.category_scope or [])
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is exposed as ``self.user``.
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

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


class ChangePasswordSerializer(serializers.Serializer):
    """Current password plus the new one."""

    current_password = serializers.CharField(write_only=True, style={"input_type": "password"})
    new_password = serializers.CharField(
        write_only=True,
        min_length=4,
        style={"input_type": "password"},
    )


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full profile of a user as returned by the login, registration
    and "Me" endpoints.
    """

    role_display = serializers.CharField(source="get_role_display", read_only=True)
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "full_name",
            "display_name",
            "phone_number",
            "national_id",
            "role",
            "role_display",
            "category_scope",
            "province",
            "city",
            "area",
            "address",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields


class StaffSerializer(serializers.ModelSerializer):
    """Staff account as listed in the supervisor's management screen."""

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "full_name",
            "phone_number",
            "category_scope",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields


class StaffCreateSerializer(serializers.Serializer):
    """Input for provisioning a staff account."""

    full_name = serializers.CharField(max_length=150)
    phone_number = serializers.CharField(max_length=20)
    password = serializers.CharField(
        write_only=True,
        min_length=4,
        style={"input_type": "password"},
    )
    category_scope = serializers.ListField(
        child=serializers.ChoiceField(choices=CATEGORY_SCOPE_CHOICES),
        allow_empty=False,
    )

    def validate_phone_number(self, value: str) -> str:
        return _validate_phone(value)


class StaffUpdateSerializer(serializers.Serializer):
    """
    Partial edit of a staff account.  A blank ``password`` keeps the
    current one.
    """

    full_name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.CharField(max_length=20, required=False)
    password = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        style={"input_type": "password"},
    )
    category_scope = serializers.ListField(
        child=serializers.ChoiceField(choices=CATEGORY_SCOPE_CHOICES),
        allow_empty=False,
        required=False,
    )

    def validate_phone_number(self, value: str) -> str:
        return _validate_phone(value)


class CategoryScopeSerializer(serializers.Serializer):
    """Replacement category scope for a staff member."""

    category_scope = serializers.ListField(
        child=serializers.ChoiceField(choices=CATEGORY_SCOPE_CHOICES),
        allow_empty=False,
    )
