from django.core.management.base import BaseCommand

from bookings.services.checkout import complete_past_bookings


class Command(BaseCommand):
    help = "Mark confirmed bookings whose experience date has passed as completed."

    def handle(self, *args, **options):
        updated = complete_past_bookings()
        self.stdout.write(self.style.SUCCESS(f"Completed {updated} booking(s)."))
