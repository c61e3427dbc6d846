from __future__ import annotations

import logging
import re
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = [
    User.Role.STUDENT,
    User.Role.AGENT,
    User.Role.OWNER,
    User.Role.SERVICE_PROVIDER,
]


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone",
            "first_name",
            "last_name",
            "role",
            "university",
            "bio",
            "is_banned",
            "date_joined",
        ]
        read_only_fields = ("id", "username", "role", "is_banned", "date_joined")


class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "role",
            "is_banned",
            "ban_reason",
            "version",
            "date_joined",
        ]
        read_only_fields = fields


class SignupSerializer(serializers.ModelSerializer):
    """Public signup; the admin role can only be granted by another admin."""

    password = serializers.CharField(write_only=True)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=SELF_SERVICE_ROLES, default=User.Role.STUDENT)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone",
            "password",
            "first_name",
            "last_name",
            "role",
            "university",
        ]
        extra_kwargs = {"password": {"write_only": True}, "username": {"required": False}}

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value

    def validate_email(self, value: str) -> str:
        email = value.strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return email

    def create(self, validated_data: dict) -> User:
        password = validated_data.pop("password")
        if not validated_data.get("username"):
            validated_data["username"] = self._generate_username(validated_data)
        return User.objects.create_user(password=password, **validated_data)

    def _generate_username(self, data: dict) -> str:
        """Generate a unique username derived from the email."""
        base = re.sub(r"[^a-z0-9]+", "", data["email"].split("@")[0].lower()) or "user"
        candidate = base
        suffix = 1
        while User.objects.filter(username=candidate).exists():
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate


class FlexibleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Accepts email or username for authentication and returns a JWT pair.
    Banned accounts cannot log in.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["identifier"] = serializers.CharField(required=False, allow_blank=True)
        if self.username_field in self.fields:
            self.fields[self.username_field].required = False

    def validate(self, attrs: dict) -> dict:
        identifier = attrs.get("identifier") or attrs.get(self.username_field) or ""
        password = attrs.get("password")
        if not identifier or not password:
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide credentials to log in."]}
            )

        user = self._resolve_user(identifier)
        if not user:
            raise AuthenticationFailed(self.error_messages["no_active_account"])

        attrs[self.username_field] = user.get_username()
        data = super().validate(attrs)
        if self.user.is_banned:
            logger.info("users: banned account %s attempted to log in", self.user.pk)
            raise AuthenticationFailed("Your account has been suspended.")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token

    def _resolve_user(self, identifier: str) -> Optional[User]:
        value = identifier.strip()
        if not value:
            return None
        if "@" in value:
            user = User.objects.filter(email__iexact=value).first()
            if user:
                return user
        return User.objects.filter(username__iexact=value).first()


class BanRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    version = serializers.IntegerField(required=False, min_value=0)


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices)
    version = serializers.IntegerField(required=False, min_value=0)


class VersionSerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=0)
