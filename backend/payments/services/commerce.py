from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

COMMERCE_API_VERSION = "2018-03-22"


class CommerceError(Exception):
    pass


@dataclass
class Charge:
    """The subset of a Coinbase Commerce charge used by checkout."""

    id: str
    code: str
    hosted_url: str


def build_charge_preview_url(*, booking, code: str) -> str:
    return (
        f"{settings.FRONTEND_URL.rstrip('/')}/payments/preview?"
        f"booking={booking.pk}&charge={code}"
    )


def _stub_charge(*, booking) -> Charge:
    code = secrets.token_hex(4).upper()
    return Charge(
        id=str(uuid4()),
        code=code,
        hosted_url=build_charge_preview_url(booking=booking, code=code),
    )


def _get_api_key() -> Optional[str]:
    key = getattr(settings, "COINBASE_COMMERCE_API_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "COINBASE_USE_STUB", False):
        return True
    return _get_api_key() is None


def create_charge(*, booking, payment, redirect_url: str, cancel_url: str) -> Charge:
    """
    Create a Coinbase Commerce charge (or stub equivalent) for a booking payment.
    """

    if _should_use_stub():
        return _stub_charge(booking=booking)

    experience = booking.experience
    body = {
        "name": "Experience Booking",
        "description": f"{experience.title} for {booking.guests} guest(s)",
        "pricing_type": "fixed_price",
        "local_price": {
            "amount": str(payment.amount),
            "currency": payment.currency,
        },
        "metadata": {
            "experienceId": str(experience.pk),
            "bookingId": str(booking.pk),
            "paymentId": str(payment.pk),
        },
        "redirect_url": redirect_url,
        "cancel_url": cancel_url,
    }
    try:
        response = requests.post(
            f"{settings.COINBASE_COMMERCE_API_URL.rstrip('/')}/charges",
            json=body,
            headers={
                "Content-Type": "application/json",
                "X-CC-Api-Key": _get_api_key(),
                "X-CC-Version": COMMERCE_API_VERSION,
            },
            timeout=settings.COINBASE_COMMERCE_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise CommerceError(f"Coinbase Commerce request failed: {exc}") from exc

    if not response.ok:
        logger.warning("Coinbase Commerce charge for booking %s rejected (%s)", booking.pk, response.status_code)
        raise CommerceError(
            f"Coinbase Commerce API error {response.status_code}: {response.text[:300]}"
        )

    try:
        data = response.json()["data"]
        return Charge(id=data["id"], code=data["code"], hosted_url=data["hosted_url"])
    except (ValueError, KeyError, TypeError) as exc:
        raise CommerceError("Coinbase Commerce returned an unexpected charge payload.") from exc


def compute_signature(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Check the ``X-CC-Webhook-Signature`` header against the raw request body."""
    if not signature or not secret:
        return False
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected, signature.strip())
