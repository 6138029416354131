import uuid

from django.db import migrations, models
from django.db.models import Q


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="USDC", max_length=10)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")], default="pending", max_length=12)),
                ("method", models.CharField(blank=True, choices=[("wallet", "Wallet transfer"), ("onramp", "Onramp purchase"), ("commerce", "Coinbase Commerce charge"), ("manual", "Manual transfer")], max_length=12)),
                ("transaction_hash", models.CharField(blank=True, db_index=True, max_length=200, null=True)),
                ("payer_wallet_address", models.CharField(blank=True, max_length=128, null=True)),
                ("payee_wallet_address", models.CharField(blank=True, max_length=128, null=True)),
                ("failure_reason", models.CharField(blank=True, max_length=500)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("booking", models.ForeignKey(on_delete=models.CASCADE, related_name="payments", to="bookings.booking")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="payment",
            constraint=models.UniqueConstraint(condition=Q(("status", "failed"), _negated=True), fields=("booking",), name="payments_one_live_payment_per_booking"),
        ),
    ]
