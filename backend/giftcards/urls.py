from django.urls import path

from .views import GiftCardView, PublicGiftCardView

public_urlpatterns = [
    path("", PublicGiftCardView.as_view(), name="public-gift-cards"),
]

urlpatterns = [
    path("gift-cards/", GiftCardView.as_view(), name="tenant-gift-cards"),
]
