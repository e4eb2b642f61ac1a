from django.urls import path

from .views import TableView

urlpatterns = [
    path("tables/", TableView.as_view(), name="tenant-tables"),
]
