"""
URL configuration for core_backend project.

Public endpoints (no authentication, restaurant passed in the payload):
    /api/orders/                  order intake
    /api/orders/status/           order tracker
    /api/orders/validate-promo/   promotion pre-check
    /api/gift-cards/              gift card check / redeem

Staff endpoints (JWT cookie or Bearer token, scoped to the user's tenant):
    /api/auth/                    login / logout
    /api/tenant/...               orders, poll feed, tables, promotions,
                                  inventory, gift cards, loyalty
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include

from discounts.views import ValidatePromotionView
from giftcards.urls import public_urlpatterns as gift_card_public_urls
from orders.urls import public_urlpatterns as order_public_urls


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


tenant_urlpatterns = [
    path("", include("orders.urls")),
    path("", include("seating.urls")),
    path("", include("discounts.urls")),
    path("", include("inventory.urls")),
    path("", include("giftcards.urls")),
    path("", include("loyalty.urls")),
]

urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/auth/", include("users.urls")),
    path("api/orders/validate-promo/", ValidatePromotionView.as_view(), name="validate-promo"),
    path("api/orders/", include(order_public_urls)),
    path("api/gift-cards/", include(gift_card_public_urls)),
    path("api/tenant/", include(tenant_urlpatterns)),
]
