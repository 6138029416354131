import uuid

from django.db import models
from django.db.models import Q


class Payment(models.Model):
    """Funds owed for a booking. Terminal states are completed and failed."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    STATUSES = [
        (PENDING, "Pending"),
        (COMPLETED, "Completed"),
        (FAILED, "Failed"),
    ]
    TERMINAL_STATUSES = frozenset({COMPLETED, FAILED})

    METHOD_WALLET = "wallet"
    METHOD_ONRAMP = "onramp"
    METHOD_COMMERCE = "commerce"
    METHOD_MANUAL = "manual"
    METHODS = [
        (METHOD_WALLET, "Wallet transfer"),
        (METHOD_ONRAMP, "Onramp purchase"),
        (METHOD_COMMERCE, "Coinbase Commerce charge"),
        (METHOD_MANUAL, "Manual transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey("bookings.Booking", on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=10, default="USDC")
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    method = models.CharField(max_length=12, choices=METHODS, blank=True)
    transaction_hash = models.CharField(max_length=200, null=True, blank=True, db_index=True)
    payer_wallet_address = models.CharField(max_length=128, null=True, blank=True)
    payee_wallet_address = models.CharField(max_length=128, null=True, blank=True)
    checkout_url = models.URLField(max_length=500, blank=True)
    failure_reason = models.CharField(max_length=500, blank=True)
    transfer_started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=~Q(status="failed"),
                name="payments_one_live_payment_per_booking",
            ),
        ]

    def __str__(self):
        return f"{self.amount} {self.currency} for booking {self.booking_id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES
