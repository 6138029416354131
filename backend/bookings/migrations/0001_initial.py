import uuid

import django.core.validators
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("experiences", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateTimeField()),
                ("guests", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled"), ("completed", "Completed")], default="pending", max_length=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("experience", models.ForeignKey(on_delete=models.PROTECT, related_name="bookings", to="experiences.experience")),
                ("user", models.ForeignKey(on_delete=models.CASCADE, related_name="bookings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["start_date", "created_at"],
                "indexes": [models.Index(fields=["user", "start_date"], name="bookings_user_start_idx")],
            },
        ),
    ]
