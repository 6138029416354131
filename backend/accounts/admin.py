from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class VoyagerUserAdmin(UserAdmin):
    list_display = ("email", "display_name", "wallet_address", "is_staff")
    search_fields = ("email", "display_name", "wallet_address")
    fieldsets = UserAdmin.fieldsets + (
        ("Profile", {"fields": ("display_name", "wallet_address", "avatar_url")}),
    )
