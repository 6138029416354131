from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import LoginView, MeView, RegisterView
from bookings.api import BookingViewSet, HostBookingListView
from experiences.api import ExperienceViewSet
from payments.api import CoinbaseCommerceWebhookView

router = DefaultRouter()
router.register(r"experiences", ExperienceViewSet, basename="experience")
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path("api/host/bookings/", HostBookingListView.as_view(), name="host-bookings"),
    path("api/", include(router.urls)),
    path(
        "api/webhooks/coinbase/",
        CoinbaseCommerceWebhookView.as_view(),
        name="coinbase-webhook",
    ),
]
