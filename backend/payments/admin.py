from django.contrib import admin

from payments.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "amount", "currency", "status", "method", "transaction_hash", "created_at")
    list_filter = ("status", "method", "currency")
    search_fields = ("transaction_hash", "booking__id", "payer_wallet_address", "payee_wallet_address")
    readonly_fields = ("transfer_started_at", "completed_at", "failed_at", "created_at", "updated_at")
