from django.urls import path

from .views import LoyaltyView

urlpatterns = [
    path("loyalty/", LoyaltyView.as_view(), name="tenant-loyalty"),
]
