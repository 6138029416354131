import json
import logging
import uuid

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.exceptions import CheckoutError, ConflictError, ValidationError
from bookings.services import checkout
from payments.events import parse_commerce_event
from payments.models import Payment
from payments.services.commerce import verify_webhook_signature

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "HTTP_X_CC_WEBHOOK_SIGNATURE"


def _find_payment(event):
    payment = (
        Payment.objects.filter(transaction_hash=event.charge_code)
        .order_by("-created_at")
        .first()
    )
    if payment is not None or not event.payment_id:
        return payment
    # Charges carry the payment id in their metadata.
    try:
        payment_pk = uuid.UUID(event.payment_id)
    except ValueError:
        return None
    payment = Payment.objects.filter(pk=payment_pk, method=Payment.METHOD_COMMERCE).first()
    if payment is not None:
        logger.info(
            "Matched Coinbase Commerce charge %s to payment %s by metadata (stored charge %s)",
            event.charge_code,
            payment.pk,
            payment.transaction_hash,
        )
    return payment


class CoinbaseCommerceWebhookView(APIView):
    """Receive Coinbase Commerce charge events."""

    permission_classes: list = []
    authentication_classes: list = []

    def post(self, request, *args, **kwargs):
        payload = request.body
        secret = settings.COINBASE_COMMERCE_WEBHOOK_SECRET
        if not secret:
            logger.error("Coinbase Commerce webhook secret not configured.")
            return Response(status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if not verify_webhook_signature(payload, request.META.get(SIGNATURE_HEADER), secret):
            logger.warning("Invalid Coinbase Commerce signature.")
            return Response(status=status.HTTP_400_BAD_REQUEST)

        try:
            event = parse_commerce_event(json.loads(payload))
        except (ValueError, ValidationError):
            logger.warning("Invalid payload received on Coinbase Commerce webhook.")
            return Response(status=status.HTTP_400_BAD_REQUEST)

        if not (event.confirms_payment or event.fails_payment):
            logger.info("Ignoring Coinbase Commerce event %s (%s)", event.id, event.type)
            return Response({"received": True})

        payment = _find_payment(event)
        if payment is None:
            logger.warning("Coinbase Commerce event %s for unknown charge %s", event.type, event.charge_code)
            return Response({"received": True})

        if payment.status == Payment.FAILED:
            logger.warning(
                "Coinbase Commerce event %s for charge %s arrived after its payment failed.",
                event.type,
                event.charge_code,
            )
            return Response({"received": True})

        try:
            if event.confirms_payment:
                checkout.confirm_payment(
                    booking_id=payment.booking_id,
                    transaction_hash=event.charge_code,
                )
            elif payment.status == Payment.PENDING and payment.transaction_hash == event.charge_code:
                checkout.fail_payment(
                    booking_id=payment.booking_id,
                    reason=f"Coinbase Commerce charge {event.charge_code} failed.",
                )
        except ConflictError as exc:
            logger.warning(
                "Coinbase Commerce event %s for booking %s not applied: %s",
                event.type,
                payment.booking_id,
                exc,
            )
        except CheckoutError as exc:
            # Non-2xx makes Commerce redeliver the event later.
            logger.error("Coinbase Commerce event %s could not be processed: %s", event.id, exc)
            return Response(exc.as_payload(), status=exc.status_code)

        return Response({"received": True})
