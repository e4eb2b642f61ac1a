from django.urls import path

from .views import StaffLoginView, StaffLogoutView

urlpatterns = [
    path("login/", StaffLoginView.as_view(), name="staff-login"),
    path("logout/", StaffLogoutView.as_view(), name="staff-logout"),
]
