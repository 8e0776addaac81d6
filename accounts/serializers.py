"""Serializers for the accounts app.

Includes:
- Registration with validation
- Login (JWT pair + profile payload)
- Own-profile and admin user management
"""

import re

import phonenumbers
from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken


User = get_user_model()


def tokens_for_user(user):
    """Return a fresh ``{'refresh', 'access'}`` pair for ``user``."""
    refresh = RefreshToken.for_user(user)
    return {'refresh': str(refresh), 'access': str(refresh.access_token)}


def normalize_phone_number(phone):
    """Parse an international phone number and return it in E.164 form.

    Raises :class:`serializers.ValidationError` when it cannot be parsed.
    """
    phone_input = str(phone).strip()
    # keep a leading + and digits only
    clean_phone = re.sub(r'(?<!^)\+|[^\d+]', '', phone_input)
    if clean_phone.startswith('00'):
        clean_phone = '+' + clean_phone[2:]
    if not clean_phone.startswith('+'):
        clean_phone = '+' + clean_phone

    try:
        parsed_phone = phonenumbers.parse(clean_phone, None)
        if not phonenumbers.is_valid_number(parsed_phone):
            raise ValueError
    except (phonenumbers.NumberParseException, ValueError):
        raise serializers.ValidationError(
            f"Phone number {phone_input} is not valid. Include the country code (e.g. +44)."
        )
    return phonenumbers.format_number(parsed_phone, phonenumbers.PhoneNumberFormat.E164)


class UserSerializer(serializers.ModelSerializer):
    """Public representation of a user."""

    is_admin = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = ('id', 'name', 'email', 'phone_number', 'is_admin')


class RegisterSerializer(serializers.ModelSerializer):
    """Create a new (non-privileged) user."""

    password = serializers.CharField(write_only=True, min_length=6)
    phone_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = User
        fields = ('name', 'email', 'password', 'phone_number')

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User already exists.")
        return value

    def validate_phone_number(self, value):
        if not value:
            return None
        return normalize_phone_number(value)

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(
            username=validated_data['email'],
            password=password,
            **validated_data,
        )


class AuthSerializer(TokenObtainPairSerializer):
    """Email + password login returning the JWT pair and the user's profile."""

    def validate(self, attrs):
        data = super().validate(attrs)
        data.update(UserSerializer(self.user).data)
        return data


class ProfileSerializer(serializers.ModelSerializer):
    """Own profile; the password is only changed when provided."""

    is_admin = serializers.BooleanField(read_only=True)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)

    class Meta:
        model = User
        fields = ('id', 'name', 'email', 'phone_number', 'is_admin', 'password')

    def validate_email(self, value):
        value = value.lower().strip()
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Email is already in use.")
        return value

    def validate_phone_number(self, value):
        if not value:
            return None
        return normalize_phone_number(value)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class AdminUserSerializer(ProfileSerializer):
    """Admin-side user edit: may grant or revoke the privileged flag."""

    is_admin = serializers.BooleanField(source='is_staff', required=False)
    password = None

    class Meta(ProfileSerializer.Meta):
        fields = ('id', 'name', 'email', 'phone_number', 'is_admin')
