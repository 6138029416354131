import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Booking(models.Model):
    """A traveller's reservation of an experience for a date and guest count."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
        (COMPLETED, "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    experience = models.ForeignKey(
        "experiences.Experience",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    start_date = models.DateTimeField()
    guests = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date", "created_at"]
        indexes = [models.Index(fields=["user", "start_date"], name="bookings_user_start_idx")]

    def __str__(self):
        return f"{self.experience.title} booking ({self.guests})"

    @property
    def has_started(self) -> bool:
        return self.start_date <= timezone.now()

    @property
    def live_payment(self):
        """The booking's payment that has not failed, if any."""
        return self.payments.exclude(status="failed").order_by("-created_at").first()

    @property
    def latest_payment(self):
        return self.payments.order_by("-created_at").first()
