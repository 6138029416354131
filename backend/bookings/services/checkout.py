"""
Booking and payment lifecycle.

A booking and its live payment move together::

    pending -> confirmed   (payment completed)
    pending -> cancelled   (pending payment failed alongside)
    pending -> pending     (payment failed; user may retry with a fresh payment row)
    confirmed -> completed (experience date passed)
    confirmed -> cancelled (before the experience starts; payment untouched)

Every transition locks the booking row and uses a conditional update on the
current status, so duplicate webhooks and racing confirmations change state at
most once.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from bookings.exceptions import (
    CheckoutError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from bookings.models import Booking
from bookings.services.emails import send_booking_confirmation_email
from experiences.models import Experience
from experiences.pricing import calculate_total_price
from payments.models import Payment
from payments.services import commerce, manual, onramp, wallet

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """The caller's context for a checkout request."""

    user: object
    wallet_address: str = ""
    redirect_url: str | None = None
    cancel_url: str | None = None

    @property
    def payer_address(self) -> str:
        return self.wallet_address or getattr(self.user, "wallet_address", "") or ""


@dataclass
class PaymentInitiation:
    payment: Payment
    method: str
    redirect_url: str | None = None
    transaction_hash: str | None = None
    qr_code_url: str | None = None
    pay_to_address: str | None = None


def _parse_uuid(value, *, field: str, label: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"'{value}' is not a valid {label} id.", field=field) from None


def _get_booking(booking_id, *, lock: bool = False) -> Booking:
    pk = _parse_uuid(booking_id, field="booking_id", label="booking")
    queryset = Booking.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=pk)
    except Booking.DoesNotExist:
        raise NotFoundError("Booking not found.", field="booking_id") from None


def _normalize_start(start_date) -> datetime:
    if isinstance(start_date, datetime):
        value = start_date
    elif isinstance(start_date, date):
        value = datetime.combine(start_date, time.min)
    else:
        raise ValidationError("start_date must be a date or datetime.", field="start_date")
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    if timezone.localtime(value).date() < timezone.localdate():
        raise ValidationError("Bookings cannot start in the past.", field="start_date")
    return value


def _validate_guests(guests) -> int:
    max_guests = settings.MAX_GUESTS_PER_BOOKING
    if isinstance(guests, bool) or not isinstance(guests, int):
        raise ValidationError("guests must be a whole number.", field="guests")
    if guests < 1 or guests > max_guests:
        raise ValidationError(f"guests must be between 1 and {max_guests}.", field="guests")
    return guests


def create_booking(*, experience_id, user, start_date, guests: int) -> Booking:
    """Insert a pending booking and its pending payment in one transaction."""

    experience_pk = _parse_uuid(experience_id, field="experience_id", label="experience")
    try:
        experience = Experience.objects.select_related("host").get(pk=experience_pk)
    except Experience.DoesNotExist:
        raise ValidationError("Experience not found.", field="experience_id") from None

    guests = _validate_guests(guests)
    start = _normalize_start(start_date)
    total_price = calculate_total_price(experience.price, guests)

    try:
        with transaction.atomic():
            booking = Booking.objects.create(
                experience=experience,
                user=user,
                start_date=start,
                guests=guests,
                total_price=total_price,
                status=Booking.PENDING,
            )
            Payment.objects.create(
                booking=booking,
                amount=total_price,
                currency=experience.currency,
                status=Payment.PENDING,
                payee_wallet_address=experience.host_wallet_address or None,
            )
    except DatabaseError as exc:
        logger.exception("Failed to persist booking for experience %s", experience.pk)
        raise PersistenceError("Could not save the booking. Please try again.") from exc

    logger.info(
        "Booking %s created for experience %s (%s guests, %s %s)",
        booking.pk,
        experience.pk,
        guests,
        total_price,
        experience.currency,
    )
    return booking


def _prepare_payment(booking_id, method: str, session: CheckoutSession) -> Payment:
    try:
        with transaction.atomic():
            booking = _get_booking(booking_id, lock=True)
            if booking.status != Booking.PENDING:
                raise ConflictError(
                    f"Booking is {booking.status}; payment can only be started for pending bookings."
                )
            payment = booking.live_payment
            if payment is None:
                payment = Payment.objects.create(
                    booking=booking,
                    amount=booking.total_price,
                    currency=booking.experience.currency,
                    status=Payment.PENDING,
                    payee_wallet_address=booking.experience.host_wallet_address or None,
                )
                logger.info("Payment %s created to retry booking %s", payment.pk, booking.pk)
            elif payment.status != Payment.PENDING:
                raise ConflictError(f"Payment is already {payment.status}.")
            elif payment.transfer_started_at is not None:
                raise ConflictError("A wallet transfer is already in progress for this booking.")
            elif payment.checkout_url and method != Payment.METHOD_COMMERCE:
                # An open charge can still be paid until Commerce reports it failed.
                raise ConflictError("A Coinbase Commerce charge is already open for this booking.")

            payment.method = method
            if session.payer_address:
                payment.payer_wallet_address = session.payer_address
            payment.save(update_fields=["method", "payer_wallet_address", "updated_at"])
    except DatabaseError as exc:
        logger.exception("Failed to prepare payment for booking %s", booking_id)
        raise PersistenceError("Could not start the payment. Please try again.") from exc
    return payment


def _require_payee(payment: Payment) -> str:
    if not payment.payee_wallet_address:
        raise ValidationError("The host has not set up a wallet to receive payments.")
    return payment.payee_wallet_address


def _fail_and_raise(payment: Payment, reason: str, exc: Exception) -> None:
    logger.warning("Payment %s for booking %s failed: %s", payment.pk, payment.booking_id, reason)
    fail_payment(booking_id=payment.booking_id, reason=reason)
    raise ExternalServiceError(reason) from exc


def _claim_wallet_transfer(payment: Payment) -> None:
    """Mark the payment as transferring so a second initiation cannot move funds again."""
    try:
        with transaction.atomic():
            _get_booking(payment.booking_id, lock=True)
            claimed = Payment.objects.filter(
                pk=payment.pk,
                status=Payment.PENDING,
                transfer_started_at__isnull=True,
            ).update(transfer_started_at=timezone.now(), updated_at=timezone.now())
    except DatabaseError as exc:
        logger.exception("Failed to claim payment %s for a wallet transfer", payment.pk)
        raise PersistenceError("Could not start the payment. Please try again.") from exc
    if not claimed:
        raise ConflictError("A wallet transfer is already in progress for this booking.")


def _record_unconfirmed_transfer(payment: Payment, transaction_hash: str, payer: str, exc: CheckoutError) -> None:
    logger.error(
        "Transfer %s for payment %s (booking %s) settled but was not recorded: %s",
        transaction_hash,
        payment.pk,
        payment.booking_id,
        exc.message,
    )
    reason = f"Transfer {transaction_hash} settled but was not recorded: {exc.message}"
    try:
        Payment.objects.filter(pk=payment.pk).update(
            transaction_hash=transaction_hash,
            payer_wallet_address=payer,
            failure_reason=reason[:500],
            updated_at=timezone.now(),
        )
    except DatabaseError:
        logger.exception("Could not store transfer %s on payment %s", transaction_hash, payment.pk)


def _pay_with_wallet(payment: Payment, session: CheckoutSession) -> PaymentInitiation:
    payer = session.payer_address
    if not payer:
        raise ValidationError("Connect a wallet before paying.", field="wallet_address")
    payee = _require_payee(payment)

    try:
        balance = wallet.get_balance(payer, payment.currency)
    except wallet.WalletServiceError as exc:
        _fail_and_raise(payment, f"Balance check failed: {exc}", exc)

    if balance < payment.amount:
        fail_payment(booking_id=payment.booking_id, reason="Insufficient funds.")
        raise ExternalServiceError(
            f"Insufficient funds: {balance} {payment.currency} available, {payment.amount} required."
        )

    _claim_wallet_transfer(payment)
    try:
        result = wallet.transfer(
            from_address=payer,
            to_address=payee,
            amount=payment.amount,
            currency=payment.currency,
        )
    except wallet.WalletServiceError as exc:
        _fail_and_raise(payment, f"Wallet transfer failed: {exc}", exc)

    try:
        payment = confirm_payment(
            booking_id=payment.booking_id,
            transaction_hash=result.transaction_hash,
            payer_address=payer,
        )
    except CheckoutError as exc:
        _record_unconfirmed_transfer(payment, result.transaction_hash, payer, exc)
        raise
    return PaymentInitiation(
        payment=payment,
        method=Payment.METHOD_WALLET,
        transaction_hash=result.transaction_hash,
        pay_to_address=payee,
    )


def _default_redirect_url(booking: Booking) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/bookings?newBooking={booking.pk}"


def _default_cancel_url(booking: Booking) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/experience/{booking.experience_id}"


def _pay_with_commerce(payment: Payment, session: CheckoutSession) -> PaymentInitiation:
    booking = payment.booking
    if payment.checkout_url and payment.transaction_hash:
        logger.info("Reusing Commerce charge %s for booking %s", payment.transaction_hash, booking.pk)
        return PaymentInitiation(
            payment=payment,
            method=Payment.METHOD_COMMERCE,
            redirect_url=payment.checkout_url,
            transaction_hash=payment.transaction_hash,
        )

    try:
        charge = commerce.create_charge(
            booking=booking,
            payment=payment,
            redirect_url=session.redirect_url or _default_redirect_url(booking),
            cancel_url=session.cancel_url or _default_cancel_url(booking),
        )
    except commerce.CommerceError as exc:
        _fail_and_raise(payment, f"Could not create Coinbase Commerce charge: {exc}", exc)

    # The charge code is the key the Commerce webhook reports back.
    updated = Payment.objects.filter(
        pk=payment.pk,
        status=Payment.PENDING,
        transaction_hash__isnull=True,
    ).update(
        transaction_hash=charge.code,
        checkout_url=charge.hosted_url,
        updated_at=timezone.now(),
    )
    if not updated:
        payment.refresh_from_db()
        logger.warning(
            "Commerce charge %s for booking %s was not stored; payment %s is %s with charge %s",
            charge.code,
            booking.pk,
            payment.pk,
            payment.status,
            payment.transaction_hash,
        )
        if payment.status != Payment.PENDING:
            raise ConflictError(f"Payment is already {payment.status}.")
        raise ConflictError("A Coinbase Commerce charge is already open for this booking.")
    payment.refresh_from_db()
    logger.info("Commerce charge %s created for booking %s", charge.code, booking.pk)
    return PaymentInitiation(
        payment=payment,
        method=Payment.METHOD_COMMERCE,
        redirect_url=charge.hosted_url,
        transaction_hash=charge.code,
    )


def _pay_with_onramp(payment: Payment, session: CheckoutSession) -> PaymentInitiation:
    payee = _require_payee(payment)
    try:
        url = onramp.build_onramp_url(
            destination_address=payee,
            amount=payment.amount,
            currency=payment.currency,
            redirect_url=session.redirect_url or _default_redirect_url(payment.booking),
            partner_user_id=str(getattr(session.user, "pk", "") or "") or None,
        )
    except onramp.OnrampError as exc:
        _fail_and_raise(payment, f"Onramp is unavailable: {exc}", exc)
    return PaymentInitiation(
        payment=payment,
        method=Payment.METHOD_ONRAMP,
        redirect_url=url,
        pay_to_address=payee,
    )


def _pay_manually(payment: Payment, session: CheckoutSession) -> PaymentInitiation:
    payee = _require_payee(payment)
    return PaymentInitiation(
        payment=payment,
        method=Payment.METHOD_MANUAL,
        qr_code_url=manual.build_payment_qr_url(payee, payment.amount),
        pay_to_address=payee,
    )


PAYMENT_INITIATORS = {
    Payment.METHOD_WALLET: _pay_with_wallet,
    Payment.METHOD_COMMERCE: _pay_with_commerce,
    Payment.METHOD_ONRAMP: _pay_with_onramp,
    Payment.METHOD_MANUAL: _pay_manually,
}


def initiate_payment(*, booking_id, method: str, session: CheckoutSession) -> PaymentInitiation:
    """
    Hand the booking's payment to the chosen payment initiator.

    A booking whose last payment failed gets a fresh pending payment row first.
    """

    initiator = PAYMENT_INITIATORS.get(method)
    if initiator is None:
        raise ValidationError(f"Unsupported payment method: {method!r}.", field="method")
    payment = _prepare_payment(booking_id, method, session)
    return initiator(payment, session)


def confirm_payment(*, booking_id, transaction_hash: str, payer_address: str | None = None) -> Payment:
    """
    Complete the live payment and confirm the booking.

    Repeating the call with the same transaction hash is a no-op.
    """

    transaction_hash = (transaction_hash or "").strip()
    if not transaction_hash:
        raise ValidationError(
            "A transaction hash is required to confirm a payment.", field="transaction_hash"
        )

    try:
        with transaction.atomic():
            booking = _get_booking(booking_id, lock=True)
            if booking.status == Booking.CANCELLED:
                raise ConflictError("Booking has been cancelled; payment cannot be confirmed.")
            payment = booking.live_payment
            if payment is None:
                raise ConflictError("Booking has no pending payment to confirm.")

            now = timezone.now()
            updated = Payment.objects.filter(pk=payment.pk, status=Payment.PENDING).update(
                status=Payment.COMPLETED,
                transaction_hash=transaction_hash,
                payer_wallet_address=payer_address or payment.payer_wallet_address,
                completed_at=now,
                updated_at=now,
            )
            if not updated:
                payment.refresh_from_db()
                if payment.status == Payment.COMPLETED and payment.transaction_hash == transaction_hash:
                    logger.info(
                        "Duplicate confirmation for booking %s (%s) ignored", booking.pk, transaction_hash
                    )
                    return payment
                raise ConflictError(f"Payment is already {payment.status}.")

            Booking.objects.filter(pk=booking.pk, status=Booking.PENDING).update(
                status=Booking.CONFIRMED,
                updated_at=now,
            )
            booking_pk = booking.pk
            transaction.on_commit(lambda: send_booking_confirmation_email(booking_id=booking_pk))
    except DatabaseError as exc:
        logger.exception("Failed to confirm payment for booking %s", booking_id)
        raise PersistenceError("Could not record the payment. Please try again.") from exc

    payment.refresh_from_db()
    logger.info("Booking %s confirmed with transaction %s", booking.pk, transaction_hash)
    return payment


def fail_payment(*, booking_id, reason: str) -> Payment:
    """Mark the pending payment failed; the booking stays pending."""

    reason = (reason or "Payment failed.")[:500]
    try:
        with transaction.atomic():
            booking = _get_booking(booking_id, lock=True)
            payment = booking.latest_payment
            if payment is None:
                raise ConflictError("Booking has no payment to fail.")

            now = timezone.now()
            updated = Payment.objects.filter(pk=payment.pk, status=Payment.PENDING).update(
                status=Payment.FAILED,
                failure_reason=reason,
                failed_at=now,
                updated_at=now,
            )
            if not updated:
                payment.refresh_from_db()
                if payment.status == Payment.FAILED:
                    return payment
                raise ConflictError("Payment has already completed and cannot be failed.")
    except DatabaseError as exc:
        logger.exception("Failed to record payment failure for booking %s", booking_id)
        raise PersistenceError("Could not record the payment failure.") from exc

    payment.refresh_from_db()
    logger.info("Payment %s for booking %s failed: %s", payment.pk, booking.pk, reason)
    return payment


def cancel_booking(*, booking_id) -> Booking:
    """Cancel a pending booking, or a confirmed one that has not started yet."""

    try:
        with transaction.atomic():
            booking = _get_booking(booking_id, lock=True)
            if booking.status == Booking.CANCELLED:
                return booking
            if booking.status == Booking.COMPLETED:
                raise ConflictError("Completed bookings cannot be cancelled.")
            if booking.status == Booking.CONFIRMED and booking.has_started:
                raise ConflictError("This experience has already started and can no longer be cancelled.")

            now = timezone.now()
            Booking.objects.filter(
                pk=booking.pk,
                status__in=[Booking.PENDING, Booking.CONFIRMED],
            ).update(status=Booking.CANCELLED, updated_at=now)
            Payment.objects.filter(booking=booking, status=Payment.PENDING).update(
                status=Payment.FAILED,
                failure_reason="Booking cancelled.",
                failed_at=now,
                updated_at=now,
            )
    except DatabaseError as exc:
        logger.exception("Failed to cancel booking %s", booking_id)
        raise PersistenceError("Could not cancel the booking.") from exc

    booking.refresh_from_db()
    logger.info("Booking %s cancelled", booking.pk)
    return booking


def complete_booking(*, booking_id) -> Booking:
    with transaction.atomic():
        booking = _get_booking(booking_id, lock=True)
        if booking.status != Booking.CONFIRMED or not booking.has_started:
            raise ConflictError("Only confirmed bookings that have started can be completed.")
        Booking.objects.filter(pk=booking.pk, status=Booking.CONFIRMED).update(
            status=Booking.COMPLETED,
            updated_at=timezone.now(),
        )
    booking.refresh_from_db()
    return booking


def complete_past_bookings(*, now: datetime | None = None) -> int:
    now = now or timezone.now()
    updated = Booking.objects.filter(status=Booking.CONFIRMED, start_date__lte=now).update(
        status=Booking.COMPLETED,
        updated_at=now,
    )
    if updated:
        logger.info("Marked %s past bookings as completed", updated)
    return updated
