import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .pricing import DEFAULT_CURRENCY


class Experience(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="experiences",
    )
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=80)
    location = models.CharField(max_length=200)
    duration = models.CharField(max_length=80)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=10, default=DEFAULT_CURRENCY)
    amenities = models.JSONField(default=list)
    images = models.JSONField(default=list)
    featured = models.BooleanField(default=False)
    rating = models.DecimalField(max_digits=3, decimal_places=2, null=True, blank=True)
    review_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.title} @ {self.location}"

    @property
    def host_wallet_address(self) -> str:
        if self.host_id is None:
            return ""
        return self.host.wallet_address or ""

    def clean(self):
        super().clean()
        if not isinstance(self.amenities, list) or not self.amenities:
            raise ValidationError({"amenities": "At least one amenity is required."})
        if not isinstance(self.images, list) or not self.images:
            raise ValidationError({"images": "At least one image is required."})


class Review(models.Model):
    experience = models.ForeignKey(Experience, on_delete=models.CASCADE, related_name="reviews")
    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="review",
    )
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.experience.title} ({self.rating}/5)"
