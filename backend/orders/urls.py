from django.urls import path

from .views import (
    OrderPollView,
    PublicOrderCreateView,
    PublicOrderStatusView,
    TenantOrderView,
)

public_urlpatterns = [
    path("", PublicOrderCreateView.as_view(), name="public-order-create"),
    path("status/", PublicOrderStatusView.as_view(), name="public-order-status"),
]

urlpatterns = [
    path("orders/", TenantOrderView.as_view(), name="tenant-orders"),
    path("orders/poll/", OrderPollView.as_view(), name="tenant-orders-poll"),
]
