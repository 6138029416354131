from django.contrib import admin

from bookings.models import Booking
from payments.models import Payment


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("amount", "currency", "status", "method", "transaction_hash", "failure_reason", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "experience", "user", "start_date", "guests", "total_price", "status")
    list_filter = ("status",)
    search_fields = ("id", "experience__title", "user__email")
    date_hierarchy = "start_date"
    readonly_fields = ("total_price", "created_at", "updated_at")
    inlines = [PaymentInline]
