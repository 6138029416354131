import re

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()

WALLET_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_wallet_address(value: str) -> str:
    """Accept blank or an EVM style 0x address."""
    value = (value or "").strip()
    if value and not WALLET_ADDRESS_RE.match(value):
        raise serializers.ValidationError("Enter a valid 0x wallet address.")
    return value


def _unused_email(value: str, *, current_user=None) -> str:
    email = value.lower()
    taken = User.objects.filter(email__iexact=email)
    if current_user is not None:
        taken = taken.exclude(pk=current_user.pk)
    if taken.exists():
        raise serializers.ValidationError("A user with this email already exists.")
    return email


def _fill_display_name(user) -> None:
    if not user.display_name:
        user.display_name = f"{user.first_name} {user.last_name}".strip() or user.email
        user.save(update_fields=["display_name"])


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "display_name",
            "wallet_address",
            "avatar_url",
        ]
        read_only_fields = ["id", "username"]


class RegisterSerializer(serializers.ModelSerializer):
    """Sign-up payload. Travellers may attach a payout or paying wallet up front."""

    password = serializers.CharField(write_only=True, min_length=8)
    wallet_address = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "first_name",
            "last_name",
            "display_name",
            "wallet_address",
        ]

    def validate_email(self, value: str) -> str:
        return _unused_email(value)

    def validate_wallet_address(self, value: str) -> str:
        return validate_wallet_address(value)

    def create(self, validated_data):
        email = validated_data.pop("email")
        user = User.objects.create_user(
            username=email,
            email=email,
            password=validated_data.pop("password"),
            **validated_data,
        )
        _fill_display_name(user)
        return user


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Log in with ``email``; usernames mirror the lowercased email."""

    username_field = User.USERNAME_FIELD

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["email"] = serializers.EmailField(required=False)
        self.fields[self.username_field].required = False

    def validate(self, attrs):
        email = attrs.pop("email", None)
        if email and not attrs.get("username"):
            attrs["username"] = email.lower()
        if not attrs.get("username"):
            raise serializers.ValidationError({"email": "This field is required."})
        data = super().validate(attrs)
        data["user"] = UserSerializer(self.user).data
        return data


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["email", "first_name", "last_name", "display_name", "wallet_address", "avatar_url"]

    def validate_email(self, value: str) -> str:
        return _unused_email(value, current_user=self.instance)

    def validate_wallet_address(self, value: str) -> str:
        return validate_wallet_address(value)

    def update(self, instance, validated_data):
        user = super().update(instance, validated_data)
        # Login looks users up by username, so it follows the email.
        if "email" in validated_data and user.username != user.email:
            user.username = user.email
            user.save(update_fields=["username"])
        _fill_display_name(user)
        return user
