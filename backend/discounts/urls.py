from django.urls import path

from .views import PromotionView

urlpatterns = [
    path("promotions/", PromotionView.as_view(), name="tenant-promotions"),
]
