import logging

from django.db.models import Q
from rest_framework import generics, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from bookings.exceptions import CheckoutError
from bookings.models import Booking
from bookings.serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    PaymentConfirmationSerializer,
    PaymentInitiationRequestSerializer,
    PaymentInitiationSerializer,
)
from bookings.services import checkout
from payments.events import WalletError, WalletSuccess, parse_wallet_event

logger = logging.getLogger(__name__)


def _error_response(exc: CheckoutError) -> Response:
    return Response(exc.as_payload(), status=exc.status_code)


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status"]
    ordering_fields = ["start_date", "created_at"]

    def get_queryset(self):
        user = self.request.user
        queryset = Booking.objects.select_related("experience", "experience__host").prefetch_related("payments")
        if self.action == "list":
            return queryset.filter(user=user)
        # Hosts can see and confirm bookings on their experiences.
        return queryset.filter(Q(user=user) | Q(experience__host=user)).distinct()

    def _ensure_owner(self, booking: Booking):
        if booking.user_id != self.request.user.id:
            raise PermissionDenied("Only the traveller who made this booking can do that.")

    def _booking_response(self, booking_id, *, status_code=status.HTTP_200_OK) -> Response:
        booking = self.get_queryset().get(pk=booking_id)
        return Response(BookingSerializer(booking).data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = checkout.create_booking(user=request.user, **serializer.validated_data)
        except CheckoutError as exc:
            return _error_response(exc)
        return self._booking_response(booking.pk, status_code=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="pay")
    def pay(self, request, pk=None):
        booking = self.get_object()
        self._ensure_owner(booking)

        serializer = PaymentInitiationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        session = checkout.CheckoutSession(
            user=request.user,
            wallet_address=data["wallet_address"],
            redirect_url=data["redirect_url"],
            cancel_url=data["cancel_url"],
        )
        try:
            initiation = checkout.initiate_payment(
                booking_id=booking.pk,
                method=data["method"],
                session=session,
            )
        except CheckoutError as exc:
            return _error_response(exc)
        return Response(PaymentInitiationSerializer(initiation).data)

    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        booking = self.get_object()

        serializer = PaymentConfirmationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            checkout.confirm_payment(
                booking_id=booking.pk,
                transaction_hash=serializer.validated_data["transaction_hash"],
                payer_address=serializer.validated_data["payer_address"],
            )
        except CheckoutError as exc:
            return _error_response(exc)
        return self._booking_response(booking.pk)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        booking = self.get_object()
        self._ensure_owner(booking)
        try:
            checkout.cancel_booking(booking_id=booking.pk)
        except CheckoutError as exc:
            return _error_response(exc)
        return self._booking_response(booking.pk)

    @action(detail=True, methods=["post"], url_path="payment-events")
    def payment_events(self, request, pk=None):
        """Record what the wallet widget reported: success, error or exit."""
        booking = self.get_object()
        self._ensure_owner(booking)
        try:
            event = parse_wallet_event(request.data)
            if isinstance(event, WalletSuccess):
                checkout.confirm_payment(
                    booking_id=booking.pk,
                    transaction_hash=event.transaction_hash,
                    payer_address=event.payer_address,
                )
            elif isinstance(event, WalletError):
                checkout.fail_payment(booking_id=booking.pk, reason=event.message)
            else:
                logger.info("Wallet widget closed for booking %s", booking.pk)
        except CheckoutError as exc:
            return _error_response(exc)
        return self._booking_response(booking.pk)


class HostBookingListView(generics.ListAPIView):
    """Bookings made on experiences the caller hosts."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "experience"]
    ordering_fields = ["start_date", "created_at"]

    def get_queryset(self):
        return (
            Booking.objects.filter(experience__host=self.request.user)
            .select_related("experience", "user")
            .prefetch_related("payments")
        )
