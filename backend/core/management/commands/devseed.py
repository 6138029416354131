from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from bookings.services.checkout import confirm_payment, create_booking
from experiences.models import Experience
from payments.services.wallet import generate_transaction_hash


SEED_PASSWORD = "Voyager123!"
SUPERUSER_EMAIL = "admin@voyager.test"
SUPERUSER_PASSWORD = "AdminVoyager123!"
TRAVELLER_WALLET = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

HOSTS = [
    {
        "email": "alexandra@voyager.test",
        "first_name": "Alexandra",
        "wallet_address": "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
        "avatar_url": "https://images.unsplash.com/photo-1580489944761-15a19d654956?q=80&w=250&h=250&auto=format&fit=crop",
    },
    {
        "email": "takashi@voyager.test",
        "first_name": "Takashi",
        "wallet_address": "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
        "avatar_url": "https://images.unsplash.com/photo-1506794778202-cad84cf45f1d?q=80&w=250&h=250&auto=format&fit=crop",
    },
    {
        "email": "youssef@voyager.test",
        "first_name": "Youssef",
        "wallet_address": "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb",
        "avatar_url": "https://images.unsplash.com/photo-1500648767791-00dcc994a43e?q=80&w=250&h=250&auto=format&fit=crop",
    },
]

EXPERIENCES = [
    {
        "host": "alexandra@voyager.test",
        "title": "Exclusive Yacht Tour in Santorini",
        "location": "Santorini, Greece",
        "price": Decimal("299.00"),
        "description": (
            "Experience the Santorini sunset on a private yacht along the caldera, with stops for "
            "swimming and snorkeling and a chef-prepared Mediterranean dinner on board."
        ),
        "images": [
            "https://images.unsplash.com/photo-1565874311820-41baccca7bb9?auto=format&fit=crop&w=1200&h=800",
            "https://images.unsplash.com/photo-1601041598397-c10aeee41518?auto=format&fit=crop&w=1200&h=800",
        ],
        "amenities": ["Private boat", "Chef", "Open bar", "Snorkeling gear", "Sunset views"],
        "duration": "5 hours",
        "category": "Water Activities",
        "featured": True,
    },
    {
        "host": "takashi@voyager.test",
        "title": "Kyoto Tea Ceremony & Garden Tour",
        "location": "Kyoto, Japan",
        "price": Decimal("120.00"),
        "description": (
            "A traditional tea ceremony led by a tea master, followed by a private tour of temple "
            "gardens that are rarely open to visitors."
        ),
        "images": [
            "https://images.unsplash.com/photo-1528360983277-13d401cdc186?auto=format&fit=crop&w=1200&h=800",
            "https://images.unsplash.com/photo-1503453363464-743ee9f8716a?auto=format&fit=crop&w=1200&h=800",
        ],
        "amenities": ["Tea ceremony", "Private garden tour", "Traditional sweets", "Photo opportunities"],
        "duration": "3 hours",
        "category": "Cultural",
        "featured": True,
    },
    {
        "host": "youssef@voyager.test",
        "title": "Desert Stargazing & Astronomy Night",
        "location": "Marrakech, Morocco",
        "price": Decimal("85.00"),
        "description": (
            "Observe the Sahara night sky through professional telescopes with an astronomer, "
            "followed by a Moroccan dinner under the stars."
        ),
        "images": [
            "https://images.unsplash.com/photo-1464852045489-bccb7d17fe39?auto=format&fit=crop&w=1200&h=800",
        ],
        "amenities": ["Telescopes", "Dinner", "Transport", "Astronomy guide"],
        "duration": "7 hours",
        "category": "Night Activities",
        "featured": False,
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Ensuring admin superuser"))
            self._ensure_superuser()

            self.stdout.write(self.style.MIGRATE_HEADING("Creating hosts"))
            hosts = {
                data["email"]: self._ensure_user(
                    email=data["email"],
                    first_name=data["first_name"],
                    display_name=data["first_name"],
                    wallet_address=data["wallet_address"],
                    avatar_url=data["avatar_url"],
                )
                for data in HOSTS
            }
            traveller = self._ensure_user(
                email="traveller@voyager.test",
                first_name="Tess",
                display_name="Tess Traveller",
                wallet_address=TRAVELLER_WALLET,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating experiences"))
            experiences = []
            for data in EXPERIENCES:
                fields = dict(data)
                host = hosts[fields.pop("host")]
                experience, created = Experience.objects.update_or_create(
                    host=host,
                    title=fields.pop("title"),
                    defaults=fields,
                )
                experiences.append(experience)
                if created:
                    self.stdout.write(self.style.NOTICE(f"Added {experience}"))

        self.stdout.write(self.style.MIGRATE_HEADING("Creating sample bookings"))
        if not Booking.objects.filter(user=traveller).exists():
            start = timezone.now() + timedelta(days=14)
            confirmed = create_booking(
                experience_id=experiences[0].pk,
                user=traveller,
                start_date=start,
                guests=2,
            )
            confirm_payment(
                booking_id=confirmed.pk,
                transaction_hash=generate_transaction_hash(),
                payer_address=TRAVELLER_WALLET,
            )
            create_booking(
                experience_id=experiences[1].pk,
                user=traveller,
                start_date=start + timedelta(days=3),
                guests=1,
            )

        self.stdout.write(self.style.SUCCESS("Development seed data created."))
        self.stdout.write(self.style.NOTICE(f"Sample login accounts use password: {SEED_PASSWORD}"))
        self.stdout.write(self.style.NOTICE(f"Admin superuser {SUPERUSER_EMAIL} password: {SUPERUSER_PASSWORD}"))

    def _ensure_user(
        self,
        email: str,
        first_name: str,
        display_name: str,
        wallet_address: str = "",
        avatar_url: str = "",
    ) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "first_name": first_name,
                "display_name": display_name,
                "wallet_address": wallet_address,
                "avatar_url": avatar_url,
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            user.save()
        elif user.wallet_address != wallet_address:
            user.wallet_address = wallet_address
            user.save(update_fields=["wallet_address"])
        return user

    def _ensure_superuser(self) -> User:
        user, created = User.objects.get_or_create(
            email=SUPERUSER_EMAIL,
            defaults={
                "username": SUPERUSER_EMAIL,
                "first_name": "Admin",
                "display_name": "Admin User",
                "is_staff": True,
                "is_superuser": True,
            },
        )
        if created or not user.has_usable_password():
            user.set_password(SUPERUSER_PASSWORD)
            user.save()
        return user
