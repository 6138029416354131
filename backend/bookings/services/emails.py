from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail

from bookings.models import Booking
from experiences.pricing import format_amount

logger = logging.getLogger(__name__)


def _format_from_email(host_name: str) -> str:
    default_from = settings.DEFAULT_FROM_EMAIL
    email_addr = default_from
    if '<' in default_from and default_from.endswith('>'):
        email_addr = default_from.split('<', 1)[1].rstrip('>')
    return f"{host_name} via Voyager <{email_addr}>"


def _host_name(booking: Booking) -> str:
    host = booking.experience.host
    if host is None:
        return "Voyager"
    return host.display_name or host.get_full_name() or host.username


def build_booking_confirmation(booking: Booking) -> tuple[str, str]:
    experience = booking.experience
    traveller = booking.user
    payment = booking.latest_payment
    body_lines = [
        f"Hi {traveller.display_name or traveller.first_name or traveller.email},",
        "",
        f"You're booked on {experience.title} in {experience.location}.",
        f"Date: {booking.start_date:%B %d, %Y}.",
        f"Guests: {booking.guests}.",
        f"Total paid: {format_amount(booking.total_price, experience.currency)}.",
    ]
    if payment is not None and payment.transaction_hash:
        body_lines.append(f"Transaction: {payment.transaction_hash}")
    body_lines += [
        "",
        f"View your bookings: {settings.FRONTEND_URL.rstrip('/')}/bookings",
        "",
        "The Voyager Team",
    ]
    return f"{experience.title} booking confirmed", "\n".join(body_lines)


def send_booking_confirmation_email(*, booking_id) -> None:
    """Email the traveller once their payment has been recorded. Runs after commit."""

    booking = (
        Booking.objects.select_related("experience__host", "user")
        .filter(pk=booking_id)
        .first()
    )
    if booking is None or not booking.user.email:
        return
    subject, body = build_booking_confirmation(booking)
    try:
        send_mail(
            subject,
            body,
            _format_from_email(_host_name(booking)),
            [booking.user.email],
            fail_silently=False,
        )
    except Exception:
        # The payment is already committed at this point.
        logger.exception("Failed to send confirmation email for booking %s", booking.pk)
