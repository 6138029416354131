from rest_framework import serializers

from bookings.models import Booking
from .models import Experience, Review
from .pricing import CRYPTO_CURRENCIES, DEFAULT_CURRENCY


class HostSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.SerializerMethodField()
    wallet_address = serializers.CharField(read_only=True)

    def get_name(self, obj) -> str:
        return obj.display_name or f"{obj.first_name} {obj.last_name}".strip() or obj.email


class ExperienceSerializer(serializers.ModelSerializer):
    host = HostSummarySerializer(read_only=True)
    currency = serializers.CharField(required=False, default=DEFAULT_CURRENCY)

    class Meta:
        model = Experience
        fields = [
            "id",
            "host",
            "title",
            "description",
            "category",
            "location",
            "duration",
            "price",
            "currency",
            "amenities",
            "images",
            "featured",
            "rating",
            "review_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["featured", "rating", "review_count", "created_at", "updated_at"]

    def validate_currency(self, value: str) -> str:
        value = (value or DEFAULT_CURRENCY).upper()
        if value not in CRYPTO_CURRENCIES:
            supported = ", ".join(sorted(CRYPTO_CURRENCIES))
            raise serializers.ValidationError(f"Currency must be one of: {supported}.")
        return value

    def _validate_string_list(self, value, label: str):
        if not isinstance(value, list) or not value:
            raise serializers.ValidationError(f"At least one {label} is required.")
        cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        if len(cleaned) != len(value):
            raise serializers.ValidationError(f"Each {label} must be a non-empty string.")
        return cleaned

    def validate_amenities(self, value):
        return self._validate_string_list(value, "amenity")

    def validate_images(self, value):
        return self._validate_string_list(value, "image")


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    booking_id = serializers.PrimaryKeyRelatedField(
        queryset=Booking.objects.all(),
        source="booking",
        write_only=True,
    )

    class Meta:
        model = Review
        fields = ["id", "booking_id", "user_name", "rating", "comment", "created_at"]
        read_only_fields = ["id", "user_name", "created_at"]

    def get_user_name(self, obj: Review) -> str:
        user = obj.user
        return user.display_name or user.first_name or user.username

    def validate(self, attrs):
        request = self.context["request"]
        experience = self.context["experience"]
        booking = attrs["booking"]
        if booking.user_id != request.user.id or booking.experience_id != experience.id:
            raise serializers.ValidationError({"booking_id": "You can only review your own bookings of this experience."})
        if booking.status not in {Booking.CONFIRMED, Booking.COMPLETED}:
            raise serializers.ValidationError({"booking_id": "Only confirmed or completed bookings can be reviewed."})
        if Review.objects.filter(booking=booking).exists():
            raise serializers.ValidationError({"booking_id": "This booking has already been reviewed."})
        return attrs
