from rest_framework import serializers

from bookings.models import Booking
from payments.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "amount",
            "currency",
            "status",
            "method",
            "transaction_hash",
            "payer_wallet_address",
            "payee_wallet_address",
            "failure_reason",
            "completed_at",
            "failed_at",
            "created_at",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    experience_title = serializers.CharField(source="experience.title", read_only=True)
    experience_location = serializers.CharField(source="experience.location", read_only=True)
    currency = serializers.CharField(source="experience.currency", read_only=True)
    payment = serializers.SerializerMethodField()
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "experience",
            "experience_title",
            "experience_location",
            "user",
            "start_date",
            "guests",
            "total_price",
            "currency",
            "status",
            "payment",
            "payments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_payment(self, obj: Booking):
        payment = obj.latest_payment
        return PaymentSerializer(payment).data if payment else None


class BookingCreateSerializer(serializers.Serializer):
    # Ids and guest counts are validated by the checkout service so that bad
    # input surfaces with the same error payload as other checkout failures.
    experience_id = serializers.CharField()
    start_date = serializers.DateTimeField()
    guests = serializers.IntegerField()


class PaymentInitiationRequestSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=[choice for choice, _ in Payment.METHODS])
    wallet_address = serializers.CharField(required=False, allow_blank=True, default="")
    redirect_url = serializers.URLField(required=False, allow_null=True, default=None)
    cancel_url = serializers.URLField(required=False, allow_null=True, default=None)


class PaymentInitiationSerializer(serializers.Serializer):
    method = serializers.CharField()
    redirect_url = serializers.CharField(allow_null=True)
    transaction_hash = serializers.CharField(allow_null=True)
    qr_code_url = serializers.CharField(allow_null=True)
    pay_to_address = serializers.CharField(allow_null=True)
    payment = PaymentSerializer()


class PaymentConfirmationSerializer(serializers.Serializer):
    transaction_hash = serializers.CharField(max_length=200)
    payer_address = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
